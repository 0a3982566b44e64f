import logging
import math
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP

from parking_tariffs.errors import InvalidInput
from parking_tariffs.models import CostBreakdown, CostResult, Quote, VehicleCategory
from parking_tariffs.resolver import resolve

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
MINUTES_PER_HOUR = 60


def to_cents(amount):
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def _check_minutes(total_minutes):
    if isinstance(total_minutes, bool) or not isinstance(total_minutes, int):
        raise InvalidInput("total_minutes", f"expected whole minutes, got {total_minutes!r}")
    if total_minutes < 0:
        raise InvalidInput("total_minutes", f"must be >= 0, got {total_minutes}")


def compute_cost(rule, total_minutes, config):
    """
    Compute the amount owed for ``total_minutes`` under ``rule``.

    Grace period first, then rounding up to the configured granularity, then
    the first hour at ``first_hour_rate`` and the rest at
    ``additional_hour_rate`` (both by fraction of an hour), then the minimum
    and maximum clamps. The amount is rounded to cents once, at the end.
    """
    _check_minutes(total_minutes)

    # Step 1: Grace period
    if total_minutes <= config.grace_minutes:
        logger.debug("%s min within %s min grace", total_minutes, config.grace_minutes)
        return CostResult(amount=Decimal("0.00"), breakdown=CostBreakdown.zeroed(total_minutes))

    # Step 2: Round up to granularity
    step = config.rounding_granularity_minutes
    billable = math.ceil(total_minutes / step) * step
    rounding_applied = billable != total_minutes

    # Step 3: Tiered pricing
    first_hour_minutes = min(billable, MINUTES_PER_HOUR)
    additional_minutes = max(0, billable - MINUTES_PER_HOUR)
    # single division: half-cent sums stay exact
    amount = (
        Decimal(first_hour_minutes) * rule.first_hour_rate
        + Decimal(additional_minutes) * rule.additional_hour_rate
    ) / MINUTES_PER_HOUR

    # Step 4: Floor
    minimum_applied = amount < rule.minimum_charge
    amount = max(amount, rule.minimum_charge)

    # Step 5: Ceiling
    maximum_applied = rule.maximum_charge is not None and amount > rule.maximum_charge
    if maximum_applied:
        amount = rule.maximum_charge

    # Step 6: Cents
    amount = to_cents(amount)
    logger.debug("%s min billed as %s min under %r: %s", total_minutes, billable, rule.label, amount)

    return CostResult(
        amount=amount,
        breakdown=CostBreakdown(
            total_minutes=total_minutes,
            billable_minutes=billable,
            first_hour_minutes=first_hour_minutes,
            additional_minutes=additional_minutes,
            minimum_charge=rule.minimum_charge,
            rounding_applied=rounding_applied,
            minimum_applied=minimum_applied,
            maximum_applied=maximum_applied,
        ),
    )


def compute_flat_rate(vehicle_category, total_minutes, config, base_rates):
    """Flat per-hour price for categories without a dynamic tariff.

    Every started hour is charged at the base rate, with at least one hour.
    Returns None when ``base_rates`` has no rate for the category.
    """
    _check_minutes(total_minutes)
    category = VehicleCategory.parse(vehicle_category)
    rates = {VehicleCategory.parse(k): v for k, v in (base_rates or {}).items()}
    rate = rates.get(category)
    if rate is None:
        return None
    rate = Decimal(str(rate))

    if total_minutes <= config.grace_minutes:
        return CostResult(amount=Decimal("0.00"), breakdown=CostBreakdown.zeroed(total_minutes))

    hours = max(1, math.ceil(total_minutes / MINUTES_PER_HOUR))
    billable = hours * MINUTES_PER_HOUR
    return CostResult(
        amount=to_cents(rate * hours),
        breakdown=CostBreakdown(
            total_minutes=total_minutes,
            billable_minutes=billable,
            first_hour_minutes=MINUTES_PER_HOUR,
            additional_minutes=billable - MINUTES_PER_HOUR,
            minimum_charge=rate,
            rounding_applied=billable != total_minutes,
        ),
    )


def _to_datetime(value, argument):
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            raise InvalidInput(argument, f"expected an ISO date-time, got {value!r}") from None
    raise InvalidInput(argument, f"expected a date-time, got {value!r}")


def elapsed_minutes(entry_at, exit_at):
    """Whole minutes between entry and exit (seconds are dropped)."""
    entry_dt = _to_datetime(entry_at, "entry_at")
    exit_dt = _to_datetime(exit_at, "exit_at")
    if exit_dt < entry_dt:
        raise InvalidInput("exit_at", f"{exit_dt.isoformat()} is before entry {entry_dt.isoformat()}")
    return int((exit_dt - entry_dt).total_seconds() // 60)


def quote_stay(catalog, vehicle_category, entry_at, exit_at, config, base_rates=None):
    """
    Price a stay from entry to exit.

    The tariff is resolved at the entry instant. Without any rule for the
    category the flat base rate is used; without that either there is no
    pricing available and None is returned.
    """
    category = VehicleCategory.parse(vehicle_category)
    entry_dt = _to_datetime(entry_at, "entry_at")
    minutes = elapsed_minutes(entry_dt, exit_at)
    notes = []

    rule = resolve(catalog, category, entry_dt)
    if rule is None:
        result = compute_flat_rate(category, minutes, config, base_rates)
        if result is None:
            logger.warning("No pricing available for %s", category.value)
            return None
        is_flat_rate = True
    else:
        result = compute_cost(rule, minutes, config)
        is_flat_rate = False

    breakdown = result.breakdown
    if breakdown.billable_minutes == 0:
        notes.append(f"Grace period applied: {config.grace_minutes} min")
    elif is_flat_rate:
        notes.append("Flat hourly rate applied (no dynamic tariff configured)")
    else:
        if breakdown.rounding_applied:
            notes.append(f"Rounded up to {config.rounding_granularity_minutes} min blocks")
        if breakdown.minimum_applied:
            notes.append(f"Minimum charge applied: {to_cents(rule.minimum_charge)}")
        elif breakdown.maximum_applied:
            notes.append(f"Maximum charge applied: {to_cents(rule.maximum_charge)}")
        notes.append(f"Tariff applied: {rule.label}")

    return Quote(
        vehicle_category=category,
        amount=result.amount,
        breakdown=breakdown,
        rule=rule,
        is_flat_rate=is_flat_rate,
        notes=tuple(notes),
    )


def simulate_stay(catalog, vehicle_category, minutes, reference, config, base_rates=None):
    """Quote a stay of ``minutes`` that starts at ``reference``."""
    _check_minutes(minutes)
    start = _to_datetime(reference, "reference")
    return quote_stay(
        catalog,
        vehicle_category,
        start,
        start + timedelta(minutes=minutes),
        config,
        base_rates,
    )
