from datetime import datetime
from decimal import Decimal

CURRENCY_SYMBOL = "S/"
DAY_NAMES = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")


def format_currency(amount):
    amount = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    return f"{CURRENCY_SYMBOL} {amount:,.2f}"


def format_clock(t):
    """12-hour clock, e.g. 10:00 PM."""
    suffix = "PM" if t.hour >= 12 else "AM"
    hour = t.hour % 12 or 12
    return f"{hour}:{t.minute:02d} {suffix}"


def format_schedule(rule):
    text = f"{format_clock(rule.start_time)} - {format_clock(rule.end_time)}"
    if rule.wraps_midnight:
        text += " (+1 day)"
    return text


def format_weekdays(days):
    days = sorted(set(days))
    if len(days) == 7:
        return "Every day"
    if days == [1, 2, 3, 4, 5]:
        return "Monday to Friday"
    if days == [0, 6]:
        return "Weekends"
    return ", ".join(DAY_NAMES[d] for d in days)


def format_duration(minutes):
    if minutes < 60:
        return f"{minutes} min"
    hours, mins = divmod(minutes, 60)
    if hours < 24:
        return f"{hours}h {mins}m"
    days, hours = divmod(hours, 24)
    return f"{days}d {hours}h {mins}m"


def render_quote(quote, quote_id=None, entry_at=None, exit_at=None, return_str=False):
    """Pretty-print a parking charge quote. If return_str=True, returns the text."""
    breakdown = quote.breakdown
    rule = quote.rule

    if rule is not None:
        tariff_lines = [
            f"Tariff             : {rule.label}",
            f"Schedule           : {format_schedule(rule)}",
            f"Days               : {format_weekdays(rule.active_weekdays)}",
            f"First Hour Rate    : {format_currency(rule.first_hour_rate)}",
            f"Additional Hour    : {format_currency(rule.additional_hour_rate)}",
            f"Minimum Charge     : {format_currency(rule.minimum_charge)}",
            "Maximum Charge     : "
            + (format_currency(rule.maximum_charge) if rule.maximum_charge is not None else "NONE"),
        ]
    else:
        tariff_lines = ["Tariff             : FLAT HOURLY RATE"]

    if breakdown.billable_minutes:
        billable_display = format_duration(breakdown.billable_minutes)
    else:
        billable_display = "NONE (grace period)"

    qid = f"Q-{quote_id or datetime.now().strftime('%H%M%S')}"
    lines = [
        "==============================================",
        "             PARKING CHARGE QUOTE",
        "==============================================",
        f"Quote ID           : {qid}",
        f"Vehicle            : {quote.vehicle_category.value.upper()}",
        "",
        "----------------------------------------------",
        "Stay",
        "----------------------------------------------",
        f"Entry Date/Time    : {entry_at or 'N/A'}",
        f"Exit  Date/Time    : {exit_at or 'N/A'}",
        f"Duration           : {format_duration(breakdown.total_minutes)}",
        "",
        "----------------------------------------------",
        "Tariff",
        "----------------------------------------------",
        *tariff_lines,
        "",
        "----------------------------------------------",
        "Charges Breakdown",
        "----------------------------------------------",
        f"Billable Time      : {billable_display}",
        f"First Hour         : {breakdown.first_hour_minutes} min",
        f"Additional Time    : {breakdown.additional_minutes} min",
        f"Rounded Up         : {'YES' if breakdown.rounding_applied else 'NO'}",
        "----------------------------------------------",
        f"TOTAL DUE          : {format_currency(quote.amount)}",
        "----------------------------------------------",
    ]
    lines += [f"* {note}" for note in quote.notes]
    lines.append("==============================================")

    output = "\n".join(lines) + "\n"
    if return_str:
        return output
    print(output, end="")
