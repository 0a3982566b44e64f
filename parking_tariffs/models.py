from dataclasses import dataclass, field
from datetime import time
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from parking_tariffs.errors import InvalidInput


class VehicleCategory(str, Enum):
    CAR = "car"
    MOTORCYCLE = "motorcycle"

    @classmethod
    def parse(cls, value):
        """Accept an enum member, its value or one of the backend aliases."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            key = _CATEGORY_ALIASES.get(key, key)
            for member in cls:
                if member.value == key:
                    return member
        raise InvalidInput("vehicle_category", f"unknown vehicle category {value!r}")


# Category names used by the hosted backend rows
_CATEGORY_ALIASES = {"auto": "car", "moto": "motorcycle"}

WEEKDAYS = range(7)  # 0=Sunday .. 6=Saturday


def parse_clock(value, argument="time"):
    """Parse a time of day ("HH:MM", "HH:MM:SS" or time) to minute precision."""
    if isinstance(value, time):
        parsed = value
    elif isinstance(value, str):
        try:
            parsed = time.fromisoformat(value.strip())
        except ValueError:
            raise InvalidInput(argument, f"expected HH:MM, got {value!r}") from None
    else:
        raise InvalidInput(argument, f"expected HH:MM, got {value!r}")
    return parsed.replace(second=0, microsecond=0, tzinfo=None)


def to_money(value, argument):
    if isinstance(value, bool) or value is None:
        raise InvalidInput(argument, f"expected an amount, got {value!r}")
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidInput(argument, f"expected an amount, got {value!r}") from None
    if not amount.is_finite():
        raise InvalidInput(argument, f"expected a finite amount, got {value!r}")
    return amount


@dataclass(frozen=True)
class TariffRule:
    """One pricing policy for a vehicle category, time window and weekday set.

    ``start_time`` later than ``end_time`` is a window that crosses midnight.
    Money fields are normalised to ``Decimal`` and every invariant is checked
    on construction, so a rule that exists is a valid rule.
    """

    vehicle_category: VehicleCategory
    start_time: time
    end_time: time
    active_weekdays: frozenset
    first_hour_rate: Decimal
    additional_hour_rate: Decimal
    minimum_charge: Decimal
    maximum_charge: Optional[Decimal] = None
    priority: int = 0
    is_active: bool = True
    name: str = ""
    description: str = field(default="", compare=False)

    def __post_init__(self):
        set_ = object.__setattr__
        set_(self, "vehicle_category", VehicleCategory.parse(self.vehicle_category))
        set_(self, "start_time", parse_clock(self.start_time, "start_time"))
        set_(self, "end_time", parse_clock(self.end_time, "end_time"))

        try:
            weekdays = frozenset(self.active_weekdays)
        except TypeError:
            raise InvalidInput("active_weekdays", "expected a collection of weekdays") from None
        if not weekdays:
            raise InvalidInput("active_weekdays", "must not be empty")
        for day in weekdays:
            if isinstance(day, bool) or not isinstance(day, int) or day not in WEEKDAYS:
                raise InvalidInput("active_weekdays", f"{day!r} is not a weekday in 0..6")
        set_(self, "active_weekdays", weekdays)

        for name in ("first_hour_rate", "additional_hour_rate", "minimum_charge"):
            amount = to_money(getattr(self, name), name)
            if amount < 0:
                raise InvalidInput(name, f"must be >= 0, got {amount}")
            set_(self, name, amount)

        if self.maximum_charge is not None:
            maximum = to_money(self.maximum_charge, "maximum_charge")
            if maximum < self.minimum_charge:
                raise InvalidInput(
                    "maximum_charge",
                    f"{maximum} is below minimum_charge {self.minimum_charge}",
                )
            set_(self, "maximum_charge", maximum)

        if isinstance(self.priority, bool) or not isinstance(self.priority, int):
            raise InvalidInput("priority", f"expected an integer, got {self.priority!r}")
        if not isinstance(self.is_active, bool):
            raise InvalidInput("is_active", f"expected a boolean, got {self.is_active!r}")

    @property
    def wraps_midnight(self):
        return self.start_time > self.end_time

    @property
    def is_degenerate(self):
        # Matches a single minute only
        return self.start_time == self.end_time

    @property
    def label(self):
        return self.name or f"{self.vehicle_category.value} {self.start_time:%H:%M}-{self.end_time:%H:%M}"

    @classmethod
    def from_record(cls, record):
        """Build a rule from a backend row (English or backend column names)."""
        values = {}
        for name, keys in _RECORD_KEYS.items():
            for key in keys:
                if key in record:
                    values[name] = record[key]
                    break

        missing = [name for name in _REQUIRED_FIELDS if values.get(name) is None]
        if missing:
            raise InvalidInput(missing[0], "missing from tariff record")

        if values.get("maximum_charge") in (None, ""):
            values.pop("maximum_charge", None)
        if "priority" in values:
            try:
                values["priority"] = int(values["priority"])
            except (TypeError, ValueError):
                raise InvalidInput("priority", f"expected an integer, got {values['priority']!r}") from None
        for text in ("name", "description"):
            if values.get(text) is None:
                values.pop(text, None)
        return cls(**values)


_RECORD_KEYS = {
    "vehicle_category": ("vehicle_category", "tipo_vehiculo"),
    "start_time": ("start_time", "hora_inicio"),
    "end_time": ("end_time", "hora_fin"),
    "active_weekdays": ("active_weekdays", "dias_semana"),
    "first_hour_rate": ("first_hour_rate", "tarifa_primera_hora"),
    "additional_hour_rate": ("additional_hour_rate", "tarifa_hora_adicional"),
    "minimum_charge": ("minimum_charge", "tarifa_minima"),
    "maximum_charge": ("maximum_charge", "tarifa_maxima"),
    "priority": ("priority", "prioridad"),
    "is_active": ("is_active",),
    "name": ("name", "nombre"),
    "description": ("description", "descripcion"),
}

_REQUIRED_FIELDS = (
    "vehicle_category",
    "start_time",
    "end_time",
    "active_weekdays",
    "first_hour_rate",
    "additional_hour_rate",
    "minimum_charge",
)


@dataclass(frozen=True)
class TariffCatalog:
    """Read-only snapshot of tariff rules, kept in catalog order."""

    rules: tuple = ()

    def __post_init__(self):
        rules = tuple(self.rules)
        for rule in rules:
            if not isinstance(rule, TariffRule):
                raise InvalidInput("catalog", f"expected TariffRule, got {type(rule).__name__}")
        object.__setattr__(self, "rules", rules)

    def __iter__(self):
        return iter(self.rules)

    def __len__(self):
        return len(self.rules)

    @classmethod
    def from_records(cls, records):
        return cls(tuple(TariffRule.from_record(r) for r in records))

    def for_vehicle(self, vehicle_category):
        category = VehicleCategory.parse(vehicle_category)
        return tuple(r for r in self.rules if r.is_active and r.vehicle_category is category)


@dataclass(frozen=True)
class EvaluationConfig:
    rounding_granularity_minutes: int = 1
    grace_minutes: int = 0

    def __post_init__(self):
        g = self.rounding_granularity_minutes
        if isinstance(g, bool) or not isinstance(g, int) or g <= 0:
            raise InvalidInput("rounding_granularity_minutes", f"must be a positive integer, got {g!r}")
        grace = self.grace_minutes
        if isinstance(grace, bool) or not isinstance(grace, int) or grace < 0:
            raise InvalidInput("grace_minutes", f"must be a non-negative integer, got {grace!r}")


@dataclass(frozen=True)
class CostBreakdown:
    """How an amount was derived. Minutes are whole minutes."""

    total_minutes: int
    billable_minutes: int
    first_hour_minutes: int
    additional_minutes: int
    minimum_charge: Decimal
    rounding_applied: bool
    minimum_applied: bool = False
    maximum_applied: bool = False

    @classmethod
    def zeroed(cls, total_minutes):
        return cls(
            total_minutes=total_minutes,
            billable_minutes=0,
            first_hour_minutes=0,
            additional_minutes=0,
            minimum_charge=Decimal("0.00"),
            rounding_applied=False,
        )


@dataclass(frozen=True)
class CostResult:
    amount: Decimal
    breakdown: CostBreakdown


@dataclass(frozen=True)
class Quote:
    """A priced stay: the amount, where it came from and what was applied."""

    vehicle_category: VehicleCategory
    amount: Decimal
    breakdown: CostBreakdown
    rule: Optional[TariffRule] = None
    is_flat_rate: bool = False
    notes: tuple = ()
