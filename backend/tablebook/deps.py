from functools import lru_cache

from fastapi import Depends, HTTPException, Path, status

from .config import get_settings
from .domain.oracles import Clock
from .infrastructure.oracles import RandomAvailability, SystemClock
from .infrastructure.sessions import InMemoryWizardStore
from .usecases.wizard import ReservationWizard
from .utils.time import restaurant_zone


def get_clock() -> Clock:
    return SystemClock(restaurant_zone())


@lru_cache
def get_availability() -> RandomAvailability:
    settings = get_settings()
    return RandomAvailability(
        slot_rate=settings.slot_availability_rate,
        table_rate=settings.table_availability_rate,
    )


@lru_cache
def get_wizard_store() -> InMemoryWizardStore:
    def factory(session_id: str) -> ReservationWizard:
        availability = get_availability()
        return ReservationWizard(
            slot_oracle=availability,
            table_oracle=availability,
            clock=get_clock(),
            session_id=session_id,
        )

    return InMemoryWizardStore(factory, max_sessions=get_settings().max_sessions)


async def get_wizard(
    session_id: str = Path(..., min_length=1),
    store: InMemoryWizardStore = Depends(get_wizard_store),
) -> ReservationWizard:
    wizard = store.get(session_id)
    if wizard is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation session not found")
    return wizard
