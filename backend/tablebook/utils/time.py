from datetime import date, datetime, time
from zoneinfo import ZoneInfo

from ..config import get_settings


def restaurant_zone() -> ZoneInfo:
    return ZoneInfo(get_settings().restaurant_timezone)


def parse_time_of_day(value: str) -> time:
    """Parse a clock label such as "11:00 AM" or a 24h "19:30" into a time."""
    text = value.strip().upper()
    for fmt in ("%I:%M %p", "%H:%M"):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"unrecognised time of day: {value!r}")


def format_time_label(dt: datetime | time) -> str:
    """Format as "7:00 PM" (no leading zero on the hour)."""
    hour12 = dt.hour % 12 or 12
    period = "AM" if dt.hour < 12 else "PM"
    return f"{hour12}:{dt.minute:02d} {period}"


def format_day_label(day: date) -> str:
    """Format as "Monday, Jan 5"."""
    return f"{day:%A}, {day:%b} {day.day}"


def format_long_date(day: date) -> str:
    """Format as "January 5, 2026"."""
    return f"{day:%B} {day.day}, {day.year}"


def combine_local(day: date, at: time, zone: ZoneInfo) -> datetime:
    return datetime.combine(day, at, tzinfo=zone)
