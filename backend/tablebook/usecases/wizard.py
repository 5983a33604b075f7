from __future__ import annotations

import asyncio
import secrets
from datetime import date
from typing import Any, Callable, Optional, Sequence
from zoneinfo import ZoneInfo

from ..catalog import BUSINESS_HOURS, TABLES
from ..config import Settings, get_settings
from ..domain.errors import WizardStateError
from ..domain.oracles import AvailabilityOracle, Clock, TableAvailabilityOracle
from ..domain.services import validate_through
from ..models import (
    BusinessHours,
    ConfirmedReservation,
    CustomerInfo,
    ReservationDraft,
    SpecialOccasion,
    Table,
    TableAvailability,
    TimeSlot,
    WizardStep,
)
from ..utils.audit_log import emit_audit_log
from ..utils.time import restaurant_zone
from .slots import generate_time_slots
from .tables import refresh_suitability, resolve_availability

CUSTOMER_FIELDS = frozenset(CustomerInfo.model_fields)


def make_confirmation_id_factory(prefix: str) -> Callable[[], str]:
    def _next() -> str:
        return f"{prefix}-{secrets.randbelow(1_000_000):06d}"

    return _next


class ReservationWizard:
    """
    Owns one reservation draft and drives it through the four wizard steps:
    date & time, table, guest info, confirmation.

    Validation failures are reported through `draft.errors` and never raise.
    Actions issued in a state that cannot accept them raise WizardStateError.
    """

    def __init__(
        self,
        *,
        slot_oracle: AvailabilityOracle,
        table_oracle: TableAvailabilityOracle,
        clock: Clock,
        tables: Sequence[Table] = TABLES,
        hours: BusinessHours = BUSINESS_HOURS,
        settings: Optional[Settings] = None,
        zone: Optional[ZoneInfo] = None,
        confirmation_ids: Optional[Callable[[], str]] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.slot_oracle = slot_oracle
        self.table_oracle = table_oracle
        self.clock = clock
        self.tables = tuple(tables)
        self.hours = hours
        self.zone = zone
        self.session_id = session_id
        self._confirmation_ids = confirmation_ids or make_confirmation_id_factory(self.settings.confirmation_prefix)
        self._submission: Optional[asyncio.Task[Any]] = None
        self.draft = self.initial_draft()

    def initial_draft(self) -> ReservationDraft:
        return ReservationDraft(party_size=self.settings.default_party_size)

    # -- selections -------------------------------------------------------

    def select_date(self, day: date) -> list[TimeSlot]:
        self._ensure_open()
        today = self.clock.now().astimezone(self.zone or restaurant_zone()).date()
        if day < today:
            raise WizardStateError(f"{day.isoformat()} is in the past")
        slots = generate_time_slots(
            day,
            hours=self.hours,
            oracle=self.slot_oracle,
            clock=self.clock,
            zone=self.zone,
        )
        draft = self.draft
        draft.selected_date = day
        draft.selected_time = None
        draft.selected_table = None
        draft.tables = []
        draft.time_slots = slots
        self._clear_errors("date")
        return slots

    def select_time(self, time: str) -> list[TableAvailability]:
        self._ensure_open()
        draft = self.draft
        if draft.selected_date is None:
            raise WizardStateError("select a date before choosing a time")
        slot = next((s for s in draft.time_slots if s.time == time), None)
        if slot is None:
            raise WizardStateError(f"{time} is not a bookable time on {draft.selected_date.isoformat()}")
        if not slot.available:
            raise WizardStateError(f"{time} is fully booked")

        entries = resolve_availability(self.tables, time, draft.party_size, oracle=self.table_oracle)
        draft.selected_time = time
        draft.selected_table = None
        draft.tables = entries
        self._clear_errors("time")
        return entries

    def select_table(self, table: Table | int) -> Table:
        self._ensure_open()
        draft = self.draft
        if not draft.tables:
            raise WizardStateError("select a time before choosing a table")
        table_id = table.id if isinstance(table, Table) else table
        entry = next((e for e in draft.tables if e.table.id == table_id), None)
        if entry is None:
            raise WizardStateError(f"unknown table {table_id}")
        if not entry.suitable:
            raise WizardStateError(f"{entry.table.name} is not available for a party of {draft.party_size}")
        draft.selected_table = entry.table
        self._clear_errors("table")
        return entry.table

    def set_party_size(self, size: int) -> bool:
        """Returns False (and changes nothing) when the size is out of range."""
        self._ensure_open()
        if size < 1 or size > self.settings.max_party_size:
            return False
        draft = self.draft
        draft.party_size = size
        if draft.tables:
            draft.tables = refresh_suitability(draft.tables, size)
        if draft.selected_table is not None and draft.selected_table.seats < size:
            draft.selected_table = None
        self._clear_errors("partySize")
        return True

    def set_special_occasion(self, occasion: Optional[SpecialOccasion]) -> None:
        self._ensure_open()
        self.draft.special_occasion = occasion

    def update_customer_info(self, **fields: str) -> CustomerInfo:
        self._ensure_open()
        unknown = set(fields) - CUSTOMER_FIELDS
        if unknown:
            raise ValueError(f"unknown customer fields: {', '.join(sorted(unknown))}")
        self.draft.customer_info = self.draft.customer_info.model_copy(update=fields)
        self._clear_errors(*fields)
        return self.draft.customer_info

    # -- navigation -------------------------------------------------------

    def advance(self) -> dict[str, str]:
        self._ensure_open()
        draft = self.draft
        errors = validate_through(draft)
        draft.errors = errors
        if errors or draft.current_step == WizardStep.CONFIRM:
            return errors

        step_from = draft.current_step
        draft.current_step = WizardStep(step_from + 1)
        emit_audit_log(
            action="reservation.step_advanced",
            session_id=self.session_id,
            step_from=step_from,
            step_to=draft.current_step,
            party_size=draft.party_size,
        )
        return errors

    def retreat(self) -> WizardStep:
        self._ensure_open()
        draft = self.draft
        if draft.current_step > WizardStep.DATE_TIME:
            draft.current_step = WizardStep(draft.current_step - 1)
        draft.errors = {}
        return draft.current_step

    def complete(self) -> Optional[ConfirmedReservation]:
        """Finalize from the confirmation step; returns None if the guard fails."""
        self._ensure_open()
        errors = self._final_errors()
        if errors:
            self.draft.errors = errors
            return None

        draft = self.draft
        draft.errors = {}
        draft.confirmation_id = self._confirmation_ids()
        draft.complete = True
        confirmation = self.confirmation()
        emit_audit_log(
            action="reservation.completed",
            session_id=self.session_id,
            reservation_date=draft.selected_date,
            reservation_time=draft.selected_time,
            table_id=confirmation.table.id,
            party_size=draft.party_size,
            confirmation_id=draft.confirmation_id,
        )
        return confirmation

    async def submit(self) -> Optional[ConfirmedReservation]:
        """
        Simulated network submission: waits for the configured delay, then
        completes. Cancelling the awaiting task (or calling reset) abandons it
        and completion never fires.
        """
        self._ensure_open()
        if self._submission is not None and not self._submission.done():
            raise WizardStateError("a submission is already in progress")
        errors = self._final_errors()
        if errors:
            self.draft.errors = errors
            return None

        self._submission = asyncio.current_task()
        try:
            await asyncio.sleep(self.settings.submit_delay_seconds)
        except asyncio.CancelledError:
            emit_audit_log(
                action="reservation.submit_cancelled",
                session_id=self.session_id,
                step_from=self.draft.current_step,
            )
            raise
        finally:
            self._submission = None
        return self.complete()

    def reset(self) -> ReservationDraft:
        if self._submission is not None and not self._submission.done():
            self._submission.cancel()
        step_from = self.draft.current_step
        self.draft = self.initial_draft()
        emit_audit_log(
            action="reservation.reset",
            session_id=self.session_id,
            step_from=step_from,
            step_to=self.draft.current_step,
        )
        return self.draft

    # -- read model -------------------------------------------------------

    def confirmation(self) -> ConfirmedReservation:
        draft = self.draft
        if not draft.complete or draft.confirmation_id is None:
            raise WizardStateError("reservation is not complete")
        if draft.selected_date is None or draft.selected_time is None or draft.selected_table is None:
            raise WizardStateError("completed reservation is missing its date, time or table")
        return ConfirmedReservation(
            confirmation_id=draft.confirmation_id,
            date=draft.selected_date,
            time=draft.selected_time,
            table=draft.selected_table,
            party_size=draft.party_size,
            special_occasion=draft.special_occasion,
            customer_info=draft.customer_info,
        )

    # -- internals --------------------------------------------------------

    def _final_errors(self) -> dict[str, str]:
        draft = self.draft
        if draft.current_step != WizardStep.CONFIRM:
            raise WizardStateError("a reservation can only be completed from the confirmation step")
        return validate_through(draft)

    def _clear_errors(self, *fields: str) -> None:
        for field in fields:
            self.draft.errors.pop(field, None)

    def _ensure_open(self) -> None:
        if self.draft.complete:
            raise WizardStateError("reservation is already complete; reset to start a new one")
