import logging
from datetime import datetime
from itertools import combinations

from parking_tariffs.errors import InvalidInput
from parking_tariffs.models import VehicleCategory

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60


def weekday_of(instant):
    """Weekday with 0=Sunday .. 6=Saturday."""
    return (instant.weekday() + 1) % 7


def _minute_of_day(t):
    return t.hour * 60 + t.minute


def window_contains(rule, clock):
    """Whether the rule's time window contains a time of day (minute precision).

    Normal windows are inclusive on both ends. A window whose start is later
    than its end crosses midnight and covers [start, 24:00) and [00:00, end].
    """
    minute = _minute_of_day(clock)
    start = _minute_of_day(rule.start_time)
    end = _minute_of_day(rule.end_time)
    if start <= end:
        return start <= minute <= end
    return minute >= start or minute <= end


def applies_at(rule, instant):
    clock = instant.time().replace(second=0, microsecond=0)
    return weekday_of(instant) in rule.active_weekdays and window_contains(rule, clock)


def _highest_priority(rules):
    # max() keeps the first of equal keys, so ties go to catalog order
    return max(rules, key=lambda r: r.priority)


def resolve(catalog, vehicle_category, instant):
    """Select the tariff rule that prices ``vehicle_category`` at ``instant``.

    Resolution runs in two phases over the active rules of the category:
    first the rules whose weekday set and time window contain the instant,
    then, when none does, all of them regardless of time (default rate).
    The highest priority wins in either phase; equal priorities resolve to
    the rule that comes first in the catalog.

    Returns None when the category has no active rule at all.
    """
    if not isinstance(instant, datetime):
        raise InvalidInput("instant", f"expected a datetime, got {instant!r}")
    category = VehicleCategory.parse(vehicle_category)

    # Step 1: active rules for the vehicle
    candidates = [r for r in catalog if r.is_active and r.vehicle_category is category]
    if not candidates:
        logger.warning("No active tariff for %s", category.value)
        return None

    # Step 2: weekday and time window
    matching = [r for r in candidates if applies_at(r, instant)]
    if matching:
        chosen = _highest_priority(matching)
        logger.debug("Tariff %r matched %s at %s", chosen.label, category.value, instant.isoformat())
        return chosen

    # Step 3: fallback by vehicle category
    chosen = _highest_priority(candidates)
    logger.debug(
        "No window matched %s at %s, falling back to %r",
        category.value, instant.isoformat(), chosen.label,
    )
    return chosen


def _segments(rule):
    """Window as half-open minute ranges within one day."""
    start = _minute_of_day(rule.start_time)
    end = _minute_of_day(rule.end_time) + 1
    if start < end:
        return [(start, end)]
    return [(start, MINUTES_PER_DAY), (0, end)]


def windows_overlap(first, second):
    """Whether two rules' time windows share at least one minute."""
    return any(
        a_start < b_end and b_start < a_end
        for a_start, a_end in _segments(first)
        for b_start, b_end in _segments(second)
    )


def find_conflicts(catalog):
    """List configuration issues that make resolution depend on catalog order.

    Reports active rules of the same vehicle category that share a weekday,
    overlap in time and carry the same priority, plus degenerate windows
    (start equal to end) that only ever match a single minute.
    """
    issues = []
    rules = [r for r in catalog if r.is_active]

    for rule in rules:
        if rule.is_degenerate:
            issues.append(
                f"Tariff {rule.label!r} starts and ends at {rule.start_time:%H:%M}; "
                "it only matches that minute"
            )

    for first, second in combinations(rules, 2):
        if first.vehicle_category is not second.vehicle_category:
            continue
        if first.priority != second.priority:
            continue
        if not first.active_weekdays & second.active_weekdays:
            continue
        if windows_overlap(first, second):
            issues.append(
                f"Tariff {first.label!r} overlaps {second.label!r} "
                f"with the same priority ({first.priority})"
            )

    for issue in issues:
        logger.warning(issue)
    return issues
