from datetime import date
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..catalog import BUSINESS_HOURS, SPECIAL_OCCASIONS, TABLES
from ..config import get_settings
from ..deps import get_availability, get_clock
from ..domain.errors import AvailabilityCheckError, ConfigurationError
from ..domain.oracles import AvailabilityOracle, Clock
from ..models import CalendarDay
from ..schemas import OccasionRead, SlotGroupRead, TableRead, slot_groups
from ..usecases import calendar as calendar_usecase
from ..usecases import slots as slot_usecase

router = APIRouter(prefix="", tags=["restaurant"])


@router.get("/restaurant/tables", response_model=List[TableRead])
async def list_tables() -> list[TableRead]:
    return [TableRead.from_domain(table=table) for table in TABLES]


@router.get("/restaurant/occasions", response_model=List[OccasionRead])
async def list_occasions() -> list[OccasionRead]:
    return [OccasionRead.from_domain(occasion=occasion) for occasion in SPECIAL_OCCASIONS]


@router.get("/calendar/days", response_model=List[CalendarDay])
async def list_calendar_days(
    days: int | None = Query(default=None, ge=1, le=90),
    clock: Clock = Depends(get_clock),
) -> list[CalendarDay]:
    n = days if days is not None else get_settings().calendar_days
    return calendar_usecase.generate_days(n, clock=clock)


@router.get("/slots", response_model=List[SlotGroupRead])
async def list_time_slots(
    day: date = Query(..., alias="date", description="Calendar date (YYYY-MM-DD)"),
    clock: Clock = Depends(get_clock),
    oracle: AvailabilityOracle = Depends(get_availability),
) -> list[SlotGroupRead]:
    try:
        slots = slot_usecase.generate_time_slots(day, hours=BUSINESS_HOURS, oracle=oracle, clock=clock)
    except ConfigurationError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="business hours misconfigured")
    except AvailabilityCheckError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="could not check availability")
    return slot_groups(slots)
