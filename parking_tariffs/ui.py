# parking_tariffs/ui.py
import logging
import sys
from datetime import datetime, timedelta

from parking_tariffs.data_manager import load_catalog
from parking_tariffs.errors import InvalidInput
from parking_tariffs.fee_engine import quote_stay, simulate_stay
from parking_tariffs.formatting import format_currency, format_schedule, format_weekdays, render_quote
from parking_tariffs.models import VehicleCategory
from parking_tariffs.policy import BASE_HOURLY_RATES, DEFAULT_CONFIG, default_catalog
from parking_tariffs.resolver import find_conflicts

VEHICLES = {c.value.upper(): c for c in VehicleCategory}


def main(catalog_file=None):
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    catalog = load_catalog(catalog_file) if catalog_file else default_catalog()

    print("\n============================================")
    print("        Parking Tariff Simulator            ")
    print("============================================")
    while True:
        print("\nSelect an action:")
        print("1. Simulate a stay")
        print("2. Price a stay from entry and exit times")
        print("3. List tariffs")
        print("4. Check tariff conflicts")
        print("5. Exit\n")
        choice = input(">> ").strip()

        if choice == "1":
            simulate_manual(catalog)
        elif choice == "2":
            price_stay(catalog)
        elif choice == "3":
            list_tariffs(catalog)
        elif choice == "4":
            check_conflicts(catalog)
        elif choice == "5":
            print("Goodbye!")
            break
        else:
            print("Invalid choice.")


def prompt_choice(prompt, options):
    opts_str = "/".join(sorted(options))
    while True:
        s = input(f"{prompt} ({opts_str}): ").strip().upper()
        if s in options:
            return s
        print(f"Invalid input. Please enter one of: {opts_str}")


def prompt_int(prompt, min_val=None):
    while True:
        s = input(f"{prompt}: ").strip()
        try:
            v = int(s)
        except ValueError:
            print("Invalid number. Please enter an integer.")
            continue
        if min_val is not None and v < min_val:
            print(f"Please enter an integer greater or equal to {min_val}.")
            continue
        return v


def prompt_datetime(prompt, not_before=None):
    while True:
        s = input(f"{prompt} (YYYY-MM-DDTHH:MM): ").strip()
        try:
            value = datetime.fromisoformat(s)
        except ValueError:
            print("Invalid datetime format. Please try again.")
            continue
        # handle wrong sequence (exit before entry)
        if not_before is not None and value < not_before:
            print("Exit time cannot be earlier than entry time.")
            continue
        return value


def _show(quote, entry_at, exit_at):
    if quote is None:
        print("Pricing unavailable: no tariff or base rate is configured for this vehicle.")
        return
    render_quote(
        quote,
        entry_at=entry_at.isoformat(timespec="minutes"),
        exit_at=exit_at.isoformat(timespec="minutes"),
    )


def simulate_manual(catalog=None, config=DEFAULT_CONFIG, base_rates=BASE_HOURLY_RATES):
    catalog = catalog if catalog is not None else default_catalog()
    vehicle = VEHICLES[prompt_choice("Vehicle", VEHICLES)]
    start = prompt_datetime("Start time")
    minutes = prompt_int("Duration in minutes", min_val=0)

    quote = simulate_stay(
        catalog,
        vehicle,
        minutes,
        start,
        config,
        base_rates=base_rates,
    )
    _show(quote, start, start + timedelta(minutes=minutes))
    return quote


def price_stay(catalog=None, config=DEFAULT_CONFIG, base_rates=BASE_HOURLY_RATES):
    catalog = catalog if catalog is not None else default_catalog()
    vehicle = VEHICLES[prompt_choice("Vehicle", VEHICLES)]
    entry_at = prompt_datetime("Entry time")
    exit_at = prompt_datetime("Exit time", not_before=entry_at)

    try:
        quote = quote_stay(catalog, vehicle, entry_at, exit_at, config, base_rates=base_rates)
    except InvalidInput as exc:
        print(f"Cannot price this stay: {exc}")
        return None
    _show(quote, entry_at, exit_at)
    return quote


def list_tariffs(catalog=None):
    catalog = catalog if catalog is not None else default_catalog()
    if not len(catalog):
        print("No tariffs configured.")
        return

    print("\nConfigured tariffs:")
    for rule in catalog:
        status = "ACTIVE" if rule.is_active else "INACTIVE"
        cap = format_currency(rule.maximum_charge) if rule.maximum_charge is not None else "no cap"
        print(
            f"[{rule.priority}] {rule.label} | {rule.vehicle_category.value} | "
            f"{format_schedule(rule)} | {format_weekdays(rule.active_weekdays)} | "
            f"{format_currency(rule.first_hour_rate)} + {format_currency(rule.additional_hour_rate)}/h | "
            f"min {format_currency(rule.minimum_charge)}, max {cap} | {status}"
        )


def check_conflicts(catalog=None):
    catalog = catalog if catalog is not None else default_catalog()
    issues = find_conflicts(catalog)
    if not issues:
        print("No conflicts found.")
    for issue in issues:
        print(f"- {issue}")
    return issues


if __name__ == "__main__":
    main(sys.argv[1] if len(sys.argv) > 1 else None)
