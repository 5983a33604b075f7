from datetime import date, timedelta
from typing import List, Optional
from zoneinfo import ZoneInfo

from ..domain.oracles import Clock
from ..models import CalendarDay
from ..utils.time import format_day_label, restaurant_zone


def generate_days(
    n: int,
    from_date: Optional[date] = None,
    *,
    clock: Clock,
    zone: Optional[ZoneInfo] = None,
) -> List[CalendarDay]:
    """Return `n` consecutive calendar days starting at `from_date` (default: today in the restaurant's zone)."""
    today = clock.now().astimezone(zone or restaurant_zone()).date()
    start = from_date if from_date is not None else today
    days: List[CalendarDay] = []
    for offset in range(max(n, 0)):
        day = start + timedelta(days=offset)
        days.append(
            CalendarDay(
                date=day,
                display_label=format_day_label(day),
                is_today=day == today,
                iso_date=day.isoformat(),
            )
        )
    return days
