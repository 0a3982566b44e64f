from decimal import Decimal

from parking_tariffs.models import EvaluationConfig, TariffCatalog, VehicleCategory

# Evaluation defaults
DEFAULT_CONFIG = EvaluationConfig(
    rounding_granularity_minutes=15,  # bill in 15-minute blocks
    grace_minutes=10,                 # first 10 minutes are free
)

# Flat per-hour prices used when a category has no dynamic tariff
BASE_HOURLY_RATES = {
    VehicleCategory.CAR: Decimal("6.00"),
    VehicleCategory.MOTORCYCLE: Decimal("3.00"),
}

WEEKDAYS_MON_FRI = [1, 2, 3, 4, 5]
WEEKEND = [6, 0]

# Templates
TEMPLATE_RECORDS = [
    # Daytime, Monday to Friday
    {
        "name": "Daytime - Cars",
        "description": "Standard car rate during the day",
        "vehicle_category": "car",
        "start_time": "06:00",
        "end_time": "22:00",
        "active_weekdays": WEEKDAYS_MON_FRI,
        "first_hour_rate": Decimal("5.00"),
        "additional_hour_rate": Decimal("3.00"),
        "minimum_charge": Decimal("2.50"),
        "maximum_charge": Decimal("30.00"),
        "priority": 1,
    },
    {
        "name": "Daytime - Motorcycles",
        "description": "Standard motorcycle rate during the day",
        "vehicle_category": "motorcycle",
        "start_time": "06:00",
        "end_time": "22:00",
        "active_weekdays": WEEKDAYS_MON_FRI,
        "first_hour_rate": Decimal("3.00"),
        "additional_hour_rate": Decimal("2.00"),
        "minimum_charge": Decimal("1.50"),
        "maximum_charge": Decimal("20.00"),
        "priority": 1,
    },
    # Night, crosses midnight; outranks daytime at the 06:00 and 22:00 edges
    {
        "name": "Night - Cars",
        "description": "Reduced car rate overnight",
        "vehicle_category": "car",
        "start_time": "22:00",
        "end_time": "06:00",
        "active_weekdays": WEEKDAYS_MON_FRI,
        "first_hour_rate": Decimal("4.00"),
        "additional_hour_rate": Decimal("2.50"),
        "minimum_charge": Decimal("2.00"),
        "maximum_charge": Decimal("25.00"),
        "priority": 2,
    },
    {
        "name": "Night - Motorcycles",
        "description": "Reduced motorcycle rate overnight",
        "vehicle_category": "motorcycle",
        "start_time": "22:00",
        "end_time": "06:00",
        "active_weekdays": WEEKDAYS_MON_FRI,
        "first_hour_rate": Decimal("2.50"),
        "additional_hour_rate": Decimal("1.50"),
        "minimum_charge": Decimal("1.00"),
        "maximum_charge": Decimal("15.00"),
        "priority": 2,
    },
    # Weekend, all day
    {
        "name": "Weekend - Cars",
        "description": "Car rate on Saturdays and Sundays",
        "vehicle_category": "car",
        "start_time": "00:00",
        "end_time": "23:59",
        "active_weekdays": WEEKEND,
        "first_hour_rate": Decimal("6.00"),
        "additional_hour_rate": Decimal("4.00"),
        "minimum_charge": Decimal("3.00"),
        "maximum_charge": Decimal("40.00"),
        "priority": 3,
    },
    {
        "name": "Weekend - Motorcycles",
        "description": "Motorcycle rate on Saturdays and Sundays",
        "vehicle_category": "motorcycle",
        "start_time": "00:00",
        "end_time": "23:59",
        "active_weekdays": WEEKEND,
        "first_hour_rate": Decimal("4.00"),
        "additional_hour_rate": Decimal("2.50"),
        "minimum_charge": Decimal("2.00"),
        "maximum_charge": Decimal("25.00"),
        "priority": 3,
    },
]


def default_catalog():
    return TariffCatalog.from_records(TEMPLATE_RECORDS)
