import dataclasses
import unittest
from datetime import datetime
from decimal import Decimal

from parking_tariffs.errors import InvalidInput
from parking_tariffs.fee_engine import (
    compute_cost,
    compute_flat_rate,
    elapsed_minutes,
    quote_stay,
    simulate_stay,
)
from parking_tariffs.models import EvaluationConfig, TariffCatalog, TariffRule, VehicleCategory
from parking_tariffs.policy import BASE_HOURLY_RATES, DEFAULT_CONFIG, TEMPLATE_RECORDS, default_catalog

FRIDAY_10AM = datetime(2025, 10, 17, 10, 0)


class TestInvalidInput(unittest.TestCase):
    """Covers contract violations, which fail fast."""

    def setUp(self):
        self.rule = default_catalog().rules[0]

    def test_w1_negative_minutes(self):
        with self.assertRaises(InvalidInput) as ctx:
            compute_cost(self.rule, -1, DEFAULT_CONFIG)
        self.assertEqual(ctx.exception.argument, "total_minutes")

    def test_w2_fractional_minutes(self):
        with self.assertRaises(InvalidInput):
            compute_cost(self.rule, 10.5, DEFAULT_CONFIG)

    def test_w3_zero_granularity(self):
        with self.assertRaises(InvalidInput) as ctx:
            EvaluationConfig(rounding_granularity_minutes=0, grace_minutes=10)
        self.assertEqual(ctx.exception.argument, "rounding_granularity_minutes")

    def test_w4_negative_grace(self):
        with self.assertRaises(InvalidInput) as ctx:
            EvaluationConfig(rounding_granularity_minutes=15, grace_minutes=-1)
        self.assertEqual(ctx.exception.argument, "grace_minutes")

    def test_w5_invalid_input_is_a_value_error(self):
        with self.assertRaises(ValueError):
            compute_cost(self.rule, -5, DEFAULT_CONFIG)


class TestBreakdown(unittest.TestCase):
    def test_w6_breakdown_fields(self):
        rule = default_catalog().rules[0]
        b = compute_cost(rule, 130, DEFAULT_CONFIG).breakdown
        self.assertEqual(b.total_minutes, 130)
        self.assertEqual(b.billable_minutes, 135)
        self.assertEqual(b.first_hour_minutes, 60)
        self.assertEqual(b.additional_minutes, 75)
        self.assertEqual(b.minimum_charge, Decimal("2.50"))
        self.assertTrue(b.rounding_applied)

    def test_w7_breakdown_is_immutable(self):
        rule = default_catalog().rules[0]
        result = compute_cost(rule, 130, DEFAULT_CONFIG)
        with self.assertRaises(dataclasses.FrozenInstanceError):
            result.breakdown.billable_minutes = 0
        with self.assertRaises(dataclasses.FrozenInstanceError):
            result.amount = Decimal("0.00")


class TestFlatRate(unittest.TestCase):
    def test_w8_started_hours_are_charged(self):
        result = compute_flat_rate("car", 90, DEFAULT_CONFIG, BASE_HOURLY_RATES)
        self.assertEqual(result.amount, Decimal("12.00"))
        self.assertEqual(result.breakdown.billable_minutes, 120)

    def test_w9_at_least_one_hour(self):
        result = compute_flat_rate("motorcycle", 11, DEFAULT_CONFIG, BASE_HOURLY_RATES)
        self.assertEqual(result.amount, Decimal("3.00"))

    def test_w10_grace_applies(self):
        result = compute_flat_rate("car", 5, DEFAULT_CONFIG, BASE_HOURLY_RATES)
        self.assertEqual(result.amount, Decimal("0.00"))

    def test_w11_no_rate_for_category(self):
        self.assertIsNone(compute_flat_rate("motorcycle", 90, DEFAULT_CONFIG, {"car": "6.00"}))
        self.assertIsNone(compute_flat_rate("car", 90, DEFAULT_CONFIG, None))

    def test_w12_string_keyed_rates(self):
        result = compute_flat_rate(VehicleCategory.CAR, 60, DEFAULT_CONFIG, {"auto": "6.50"})
        self.assertEqual(result.amount, Decimal("6.50"))

    def test_w27_grace_does_not_shorten_billed_hours(self):
        # 65 min with 10 min grace still starts a second hour
        result = compute_flat_rate("car", 65, DEFAULT_CONFIG, BASE_HOURLY_RATES)
        self.assertEqual(result.amount, Decimal("12.00"))
        self.assertEqual(result.breakdown.billable_minutes, 120)


class TestElapsedMinutes(unittest.TestCase):
    def test_w13_seconds_are_dropped(self):
        self.assertEqual(elapsed_minutes("2025-10-17T10:00", "2025-10-17T12:10:59"), 130)

    def test_w14_exit_before_entry(self):
        with self.assertRaises(InvalidInput) as ctx:
            elapsed_minutes("2025-10-17T10:00", "2025-10-17T09:00")
        self.assertEqual(ctx.exception.argument, "exit_at")

    def test_w15_unparseable_timestamp(self):
        with self.assertRaises(InvalidInput) as ctx:
            elapsed_minutes("not-a-date", "2025-10-17T09:00")
        self.assertEqual(ctx.exception.argument, "entry_at")


class TestQuoteStay(unittest.TestCase):
    def setUp(self):
        self.catalog = default_catalog()

    def test_w16_weekday_daytime(self):
        quote = quote_stay(self.catalog, "car", "2025-10-17T10:00", "2025-10-17T12:10", DEFAULT_CONFIG)
        self.assertEqual(quote.amount, Decimal("8.75"))
        self.assertEqual(quote.rule.name, "Daytime - Cars")
        self.assertFalse(quote.is_flat_rate)
        self.assertEqual(
            quote.notes,
            ("Rounded up to 15 min blocks", "Tariff applied: Daytime - Cars"),
        )

    def test_w17_overnight_resolved_at_entry(self):
        quote = quote_stay(self.catalog, "car", "2025-10-17T23:30", "2025-10-18T01:30", DEFAULT_CONFIG)
        self.assertEqual(quote.rule.name, "Night - Cars")
        # 4.00 + 2.50
        self.assertEqual(quote.amount, Decimal("6.50"))
        self.assertEqual(quote.notes, ("Tariff applied: Night - Cars",))

    def test_w18_weekend(self):
        quote = quote_stay(self.catalog, "car", "2025-10-18T12:00", "2025-10-18T15:00", DEFAULT_CONFIG)
        self.assertEqual(quote.rule.name, "Weekend - Cars")
        # 6.00 + 2 * 4.00
        self.assertEqual(quote.amount, Decimal("14.00"))

    def test_w19_grace_note(self):
        quote = quote_stay(self.catalog, "car", "2025-10-17T10:00", "2025-10-17T10:05", DEFAULT_CONFIG)
        self.assertEqual(quote.amount, Decimal("0.00"))
        self.assertEqual(quote.notes, ("Grace period applied: 10 min",))

    def test_w20_minimum_note(self):
        quote = quote_stay(self.catalog, "car", "2025-10-17T10:00", "2025-10-17T10:11", DEFAULT_CONFIG)
        self.assertEqual(quote.amount, Decimal("2.50"))
        self.assertEqual(
            quote.notes,
            (
                "Rounded up to 15 min blocks",
                "Minimum charge applied: 2.50",
                "Tariff applied: Daytime - Cars",
            ),
        )

    def test_w21_maximum_note(self):
        quote = quote_stay(self.catalog, "car", "2025-10-17T07:00", "2025-10-17T23:40", DEFAULT_CONFIG)
        self.assertEqual(quote.amount, Decimal("30.00"))
        self.assertIn("Maximum charge applied: 30.00", quote.notes)

    def test_w28_minimum_note_below_half_cent(self):
        rule = TariffRule(
            vehicle_category="car",
            start_time="00:00",
            end_time="23:59",
            active_weekdays=range(7),
            first_hour_rate=Decimal("2.994"),
            additional_hour_rate=Decimal("2.00"),
            minimum_charge=Decimal("2.50"),
        )
        config = EvaluationConfig(rounding_granularity_minutes=1, grace_minutes=0)
        quote = quote_stay(TariffCatalog((rule,)), "car", FRIDAY_10AM, "2025-10-17T10:50", config)
        self.assertEqual(quote.amount, Decimal("2.50"))
        self.assertEqual(
            quote.notes,
            ("Minimum charge applied: 2.50", "Tariff applied: car 00:00-23:59"),
        )

    def test_w22_flat_rate_when_no_tariff(self):
        motorcycles_only = TariffCatalog(
            tuple(r for r in self.catalog if r.vehicle_category is VehicleCategory.MOTORCYCLE)
        )
        quote = quote_stay(
            motorcycles_only, "car", FRIDAY_10AM, "2025-10-17T11:30",
            DEFAULT_CONFIG, base_rates=BASE_HOURLY_RATES,
        )
        self.assertTrue(quote.is_flat_rate)
        self.assertIsNone(quote.rule)
        self.assertEqual(quote.amount, Decimal("12.00"))
        self.assertEqual(quote.notes, ("Flat hourly rate applied (no dynamic tariff configured)",))

    def test_w23_no_pricing_available(self):
        self.assertIsNone(
            quote_stay(TariffCatalog(), "car", FRIDAY_10AM, "2025-10-17T11:30", DEFAULT_CONFIG)
        )

    def test_w24_simulate_matches_quote(self):
        quote = simulate_stay(self.catalog, "car", 130, FRIDAY_10AM, DEFAULT_CONFIG)
        self.assertEqual(quote.amount, Decimal("8.75"))
        self.assertEqual(quote.breakdown.total_minutes, 130)

    def test_w25_simulate_rejects_negative_minutes(self):
        with self.assertRaises(InvalidInput):
            simulate_stay(self.catalog, "car", -10, FRIDAY_10AM, DEFAULT_CONFIG)


class TestTemplates(unittest.TestCase):
    def test_w26_every_template_builds_a_rule(self):
        catalog = default_catalog()
        self.assertEqual(len(catalog), len(TEMPLATE_RECORDS))
        for rule in catalog:
            self.assertIsInstance(rule, TariffRule)
            self.assertTrue(rule.is_active)


if __name__ == "__main__":
    unittest.main()
