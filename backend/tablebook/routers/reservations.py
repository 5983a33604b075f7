import asyncio
from contextlib import contextmanager
from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException, Path, Response, status

from ..deps import get_wizard, get_wizard_store
from ..domain.errors import AvailabilityCheckError, ConfigurationError, WizardStateError
from ..infrastructure.sessions import InMemoryWizardStore
from ..schemas import (
    DateSelection,
    GuestInfoUpdate,
    OccasionUpdate,
    PartySizeUpdate,
    TableSelection,
    TimeSelection,
    WizardRead,
)
from ..usecases.wizard import ReservationWizard

router = APIRouter(prefix="/wizard", tags=["reservations"])


@contextmanager
def _domain_errors() -> Iterator[None]:
    try:
        yield
    except WizardStateError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except AvailabilityCheckError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="could not check availability")
    except ConfigurationError:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="business hours misconfigured")


def _read(wizard: ReservationWizard) -> WizardRead:
    return WizardRead.from_wizard(session_id=wizard.session_id or "", wizard=wizard)


@router.post("", response_model=WizardRead, status_code=status.HTTP_201_CREATED)
async def start_wizard(store: InMemoryWizardStore = Depends(get_wizard_store)) -> WizardRead:
    _, wizard = store.create()
    return _read(wizard)


@router.get("/{session_id}", response_model=WizardRead)
async def get_wizard_state(wizard: ReservationWizard = Depends(get_wizard)) -> WizardRead:
    return _read(wizard)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_wizard(
    session_id: str = Path(..., min_length=1),
    store: InMemoryWizardStore = Depends(get_wizard_store),
) -> Response:
    if not store.discard(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="reservation session not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{session_id}/date", response_model=WizardRead)
async def select_date(payload: DateSelection, wizard: ReservationWizard = Depends(get_wizard)) -> WizardRead:
    with _domain_errors():
        wizard.select_date(payload.date)
    return _read(wizard)


@router.post("/{session_id}/time", response_model=WizardRead)
async def select_time(payload: TimeSelection, wizard: ReservationWizard = Depends(get_wizard)) -> WizardRead:
    with _domain_errors():
        wizard.select_time(payload.time)
    return _read(wizard)


@router.post("/{session_id}/table", response_model=WizardRead)
async def select_table(payload: TableSelection, wizard: ReservationWizard = Depends(get_wizard)) -> WizardRead:
    with _domain_errors():
        wizard.select_table(payload.table_id)
    return _read(wizard)


@router.post("/{session_id}/party-size", response_model=WizardRead)
async def set_party_size(payload: PartySizeUpdate, wizard: ReservationWizard = Depends(get_wizard)) -> WizardRead:
    with _domain_errors():
        wizard.set_party_size(payload.party_size)
    return _read(wizard)


@router.post("/{session_id}/occasion", response_model=WizardRead)
async def set_occasion(payload: OccasionUpdate, wizard: ReservationWizard = Depends(get_wizard)) -> WizardRead:
    with _domain_errors():
        wizard.set_special_occasion(payload.occasion)
    return _read(wizard)


@router.post("/{session_id}/guest", response_model=WizardRead)
async def update_guest(payload: GuestInfoUpdate, wizard: ReservationWizard = Depends(get_wizard)) -> WizardRead:
    with _domain_errors():
        wizard.update_customer_info(**payload.model_dump(exclude_none=True))
    return _read(wizard)


@router.post("/{session_id}/advance", response_model=WizardRead)
async def advance(wizard: ReservationWizard = Depends(get_wizard)) -> WizardRead:
    with _domain_errors():
        wizard.advance()
    return _read(wizard)


@router.post("/{session_id}/retreat", response_model=WizardRead)
async def retreat(wizard: ReservationWizard = Depends(get_wizard)) -> WizardRead:
    with _domain_errors():
        wizard.retreat()
    return _read(wizard)


@router.post("/{session_id}/complete", response_model=WizardRead)
async def complete(wizard: ReservationWizard = Depends(get_wizard)) -> WizardRead:
    submission = asyncio.create_task(wizard.submit())
    with _domain_errors():
        try:
            await submission
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="submission was cancelled")
    return _read(wizard)


@router.post("/{session_id}/reset", response_model=WizardRead)
async def reset(wizard: ReservationWizard = Depends(get_wizard)) -> WizardRead:
    wizard.reset()
    return _read(wizard)
