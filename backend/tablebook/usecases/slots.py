from datetime import date, datetime, timedelta
from typing import Dict, List, Optional
from zoneinfo import ZoneInfo

from ..domain.errors import AvailabilityCheckError, ReservationError
from ..domain.oracles import AvailabilityOracle, Clock
from ..models import BusinessHours, DayCategory, TimeSlot
from ..utils.time import combine_local, format_time_label, restaurant_zone

# Slots starting at or after this hour belong to dinner service.
DINNER_STARTS_AT_HOUR = 16


def day_category(day: date) -> DayCategory:
    weekday = day.weekday()
    if weekday in (4, 5):
        return DayCategory.FRIDAY_TO_SATURDAY
    if weekday == 6:
        return DayCategory.SUNDAY
    return DayCategory.MONDAY_TO_THURSDAY


def generate_time_slots(
    day: date,
    *,
    hours: BusinessHours,
    oracle: AvailabilityOracle,
    clock: Clock,
    zone: Optional[ZoneInfo] = None,
) -> List[TimeSlot]:
    zone = zone or restaurant_zone()
    opening = hours.for_category(day_category(day))
    # Re-check here: hours built with model_construct skip validation.
    opening.check()

    open_at = combine_local(day, opening.open, zone)
    close_at = combine_local(day, opening.close, zone)
    step = timedelta(minutes=opening.interval_minutes)
    now = clock.now().astimezone(zone)
    if day < now.date():
        return []
    is_today = now.date() == day

    slots: List[TimeSlot] = []
    current = open_at
    while current < close_at:
        if not is_today or current > now:
            slots.append(
                TimeSlot(
                    time=format_time_label(current),
                    instant=current,
                    available=_check_slot(oracle, day, current),
                )
            )
        current += step
    return slots


def group_time_slots(slots: List[TimeSlot]) -> Dict[str, List[TimeSlot]]:
    """Split slots into lunch and dinner service, preserving order."""
    groups: Dict[str, List[TimeSlot]] = {"Lunch": [], "Dinner": []}
    for slot in slots:
        key = "Dinner" if slot.instant.hour >= DINNER_STARTS_AT_HOUR else "Lunch"
        groups[key].append(slot)
    return groups


def _check_slot(oracle: AvailabilityOracle, day: date, instant: datetime) -> bool:
    try:
        return bool(oracle.is_slot_available(day, instant))
    except ReservationError:
        raise
    except Exception as exc:
        raise AvailabilityCheckError(f"could not check availability for {instant.isoformat()}") from exc
