import asyncio
import re
from datetime import date, datetime
from typing import Any
from zoneinfo import ZoneInfo

import pytest
from tablebook.config import Settings
from tablebook.domain.errors import AvailabilityCheckError, WizardStateError
from tablebook.infrastructure.oracles import AlwaysAvailable, BlockedTables, FixedClock
from tablebook.models import ReservationDraft, SpecialOccasion, WizardStep
from tablebook.usecases import wizard as wizard_module
from tablebook.usecases.wizard import ReservationWizard

UTC = ZoneInfo("UTC")
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
NOW = datetime(2030, 1, 1, 9, 0, tzinfo=UTC)


class ClosedAtSeven:
    def is_slot_available(self, day: date, instant: datetime) -> bool:
        return not (instant.hour == 19 and instant.minute == 0)


class CountingTableOracle:
    def __init__(self) -> None:
        self.calls = 0

    def is_table_available(self, table_id: int, time: str) -> bool:
        self.calls += 1
        return True


class BrokenTableOracle:
    def is_table_available(self, table_id: int, time: str) -> bool:
        raise ConnectionError("down")


def _wizard(**overrides: Any) -> ReservationWizard:
    options: dict[str, Any] = dict(
        slot_oracle=AlwaysAvailable(),
        table_oracle=AlwaysAvailable(),
        clock=FixedClock(NOW),
        settings=Settings(submit_delay_seconds=0),
        zone=UTC,
        confirmation_ids=lambda: "RS-000042",
    )
    options.update(overrides)
    return ReservationWizard(**options)


def _fill_guest(wizard: ReservationWizard) -> None:
    wizard.update_customer_info(name="Jane Doe", email="jane@x.com", phone="555-0100")


def _to_confirm_step(wizard: ReservationWizard) -> None:
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    wizard.select_table(3)
    assert wizard.advance() == {}
    assert wizard.advance() == {}
    _fill_guest(wizard)
    assert wizard.advance() == {}
    assert wizard.draft.current_step == WizardStep.CONFIRM


@pytest.fixture(autouse=True)
def _silence_audit(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    calls: list[dict[str, Any]] = []
    monkeypatch.setattr(wizard_module, "emit_audit_log", lambda **kwargs: calls.append(kwargs))
    return calls


def test_initial_draft() -> None:
    draft = _wizard().draft
    assert draft.current_step == WizardStep.DATE_TIME
    assert draft.party_size == 2
    assert draft.selected_date is None
    assert draft.selected_time is None
    assert draft.selected_table is None
    assert draft.complete is False
    assert draft.confirmation_id is None


def test_advance_without_date_reports_error_and_stays() -> None:
    wizard = _wizard()
    errors = wizard.advance()
    assert "date" in errors
    assert "time" in errors
    assert wizard.draft.current_step == WizardStep.DATE_TIME
    assert wizard.draft.errors == errors


def test_select_time_before_date_is_rejected() -> None:
    wizard = _wizard()
    with pytest.raises(WizardStateError):
        wizard.select_time("7:00 PM")
    assert wizard.draft.selected_time is None


def test_select_date_generates_slots() -> None:
    wizard = _wizard()
    slots = wizard.select_date(MONDAY)
    assert len(slots) == 22
    assert wizard.draft.time_slots == slots


def test_past_date_is_rejected() -> None:
    wizard = _wizard(clock=FixedClock(datetime(2030, 1, 8, 9, 0, tzinfo=UTC)))
    with pytest.raises(WizardStateError):
        wizard.select_date(date(2029, 12, 1))
    assert wizard.draft.selected_date is None
    assert wizard.draft.time_slots == []


def test_today_is_judged_in_restaurant_zone() -> None:
    # 23:30 UTC on the 7th is already the 8th in Tokyo
    wizard = _wizard(clock=FixedClock(datetime(2030, 1, 7, 23, 30, tzinfo=UTC)), zone=ZoneInfo("Asia/Tokyo"))
    with pytest.raises(WizardStateError):
        wizard.select_date(MONDAY)
    assert wizard.select_date(TUESDAY)


def test_date_change_clears_time_and_table() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    wizard.select_table(3)

    wizard.select_date(TUESDAY)

    draft = wizard.draft
    assert draft.selected_date == TUESDAY
    assert draft.selected_time is None
    assert draft.selected_table is None
    assert draft.tables == []


def test_time_change_clears_table_and_resolves_tables() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    wizard.select_table(3)

    entries = wizard.select_time("8:00 PM")

    assert wizard.draft.selected_table is None
    assert wizard.draft.selected_time == "8:00 PM"
    assert len(entries) == 19


def test_unknown_or_fully_booked_time_is_rejected() -> None:
    wizard = _wizard(slot_oracle=ClosedAtSeven())
    wizard.select_date(MONDAY)
    with pytest.raises(WizardStateError):
        wizard.select_time("3:15 AM")
    with pytest.raises(WizardStateError):
        wizard.select_time("7:00 PM")
    wizard.select_time("7:30 PM")
    assert wizard.draft.selected_time == "7:30 PM"


def test_select_table_requires_time() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    with pytest.raises(WizardStateError):
        wizard.select_table(3)


def test_unsuitable_table_is_visible_but_not_selectable() -> None:
    wizard = _wizard(table_oracle=BlockedTables({(3, "7:00 PM")}))
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")

    assert any(e.table.id == 3 and not e.suitable for e in wizard.draft.tables)
    with pytest.raises(WizardStateError):
        wizard.select_table(3)
    wizard.set_party_size(8)
    with pytest.raises(WizardStateError):
        wizard.select_table(1)
    assert wizard.draft.selected_table is None


def test_unknown_table_is_rejected() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    with pytest.raises(WizardStateError):
        wizard.select_table(999)


@pytest.mark.parametrize("size", [0, -3, 21])
def test_out_of_range_party_size_is_noop(size: int) -> None:
    wizard = _wizard()
    assert wizard.set_party_size(size) is False
    assert wizard.draft.party_size == 2


def test_party_size_bound_is_configurable() -> None:
    wizard = _wizard(settings=Settings(submit_delay_seconds=0, max_party_size=30))
    assert wizard.set_party_size(25) is True
    assert wizard.draft.party_size == 25


def test_party_size_growth_clears_unsuitable_selection() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    wizard.select_table(1)  # two seats

    assert wizard.set_party_size(3) is True

    assert wizard.draft.selected_table is None
    entry = next(e for e in wizard.draft.tables if e.table.id == 1)
    assert entry.available is True
    assert entry.suitable is False


def test_party_size_change_keeps_still_suitable_selection() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    wizard.select_table(3)  # four seats
    wizard.set_party_size(4)
    assert wizard.draft.selected_table is not None
    assert wizard.draft.selected_table.id == 3


def test_party_size_change_does_not_requery_oracle() -> None:
    oracle = CountingTableOracle()
    wizard = _wizard(table_oracle=oracle)
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    calls = oracle.calls

    wizard.set_party_size(6)

    assert oracle.calls == calls
    assert all(e.suitable == (e.table.seats >= 6) for e in wizard.draft.tables)


def test_oracle_failure_leaves_draft_untouched() -> None:
    wizard = _wizard(table_oracle=BrokenTableOracle())
    wizard.select_date(MONDAY)
    with pytest.raises(AvailabilityCheckError):
        wizard.select_time("7:00 PM")
    assert wizard.draft.selected_time is None
    assert wizard.draft.tables == []


def test_step_two_requires_table() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    wizard.advance()
    assert wizard.advance() == {"table": "Please select a table"}
    assert wizard.draft.current_step == WizardStep.TABLE_SELECT


def test_step_three_rejects_bad_email() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    wizard.select_table(3)
    wizard.advance()
    wizard.advance()
    wizard.update_customer_info(name="Jane Doe", email="not-an-email", phone="555-0100")

    errors = wizard.advance()

    assert errors == {"email": "Please enter a valid email address"}
    assert wizard.draft.current_step == WizardStep.GUEST_INFO


def test_date_change_on_guest_step_blocks_advance() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    wizard.select_table(3)
    wizard.advance()
    wizard.advance()

    wizard.select_date(TUESDAY)
    _fill_guest(wizard)
    errors = wizard.advance()

    assert errors == {"time": "Please select a time", "table": "Please select a table"}
    assert wizard.draft.current_step == WizardStep.GUEST_INFO


def test_party_size_change_on_guest_step_blocks_advance() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    wizard.select_table(1)  # two seats
    wizard.advance()
    wizard.advance()

    wizard.set_party_size(4)
    _fill_guest(wizard)

    assert wizard.advance() == {"table": "Please select a table"}
    assert wizard.draft.current_step == WizardStep.GUEST_INFO


def test_updating_a_field_clears_its_error() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    wizard.select_table(3)
    wizard.advance()
    wizard.advance()
    wizard.advance()
    assert set(wizard.draft.errors) == {"name", "email", "phone"}

    wizard.update_customer_info(name="Jane Doe")

    assert set(wizard.draft.errors) == {"email", "phone"}


def test_unknown_customer_field_is_rejected() -> None:
    with pytest.raises(ValueError):
        _wizard().update_customer_info(nickname="JD")


def test_special_occasion_is_set_directly() -> None:
    wizard = _wizard()
    wizard.set_special_occasion(SpecialOccasion.ANNIVERSARY)
    assert wizard.draft.special_occasion == SpecialOccasion.ANNIVERSARY
    wizard.set_special_occasion(None)
    assert wizard.draft.special_occasion is None


def test_retreat_floors_at_first_step() -> None:
    wizard = _wizard()
    wizard.select_date(MONDAY)
    wizard.select_time("7:00 PM")
    wizard.advance()
    assert wizard.retreat() == WizardStep.DATE_TIME
    assert wizard.retreat() == WizardStep.DATE_TIME


def test_advance_is_capped_at_confirmation() -> None:
    wizard = _wizard()
    _to_confirm_step(wizard)
    assert wizard.advance() == {}
    assert wizard.draft.current_step == WizardStep.CONFIRM


def test_end_to_end_reservation(_silence_audit: list[dict[str, Any]]) -> None:
    wizard = _wizard()
    wizard.set_special_occasion(SpecialOccasion.BIRTHDAY)
    _to_confirm_step(wizard)

    confirmation = wizard.complete()

    draft = wizard.draft
    assert draft.current_step == WizardStep.CONFIRM
    assert draft.complete is True
    assert draft.confirmation_id == "RS-000042"
    assert confirmation is not None
    assert confirmation.table.id == 3
    assert confirmation.time == "7:00 PM"
    assert confirmation.display_date == "January 7, 2030"
    assert confirmation.special_occasion == SpecialOccasion.BIRTHDAY
    actions = [call["action"] for call in _silence_audit]
    assert actions.count("reservation.step_advanced") == 3
    assert actions[-1] == "reservation.completed"


def test_complete_only_from_confirmation_step() -> None:
    wizard = _wizard()
    with pytest.raises(WizardStateError):
        wizard.complete()


def test_complete_rechecks_guest_info() -> None:
    wizard = _wizard()
    _to_confirm_step(wizard)
    wizard.update_customer_info(phone="  ")

    assert wizard.complete() is None

    assert wizard.draft.complete is False
    assert wizard.draft.errors == {"phone": "Please enter your phone number"}


def test_complete_rechecks_selections() -> None:
    wizard = _wizard()
    _to_confirm_step(wizard)
    wizard.select_date(TUESDAY)

    assert wizard.complete() is None
    assert {"time", "table"} <= set(wizard.draft.errors)


def test_confirmation_requires_a_complete_draft() -> None:
    wizard = _wizard()
    with pytest.raises(WizardStateError):
        wizard.confirmation()

    wizard.draft.complete = True
    wizard.draft.confirmation_id = "RS-000001"
    with pytest.raises(WizardStateError):
        wizard.confirmation()


def test_completed_draft_rejects_further_changes() -> None:
    wizard = _wizard()
    _to_confirm_step(wizard)
    wizard.complete()
    with pytest.raises(WizardStateError):
        wizard.select_date(TUESDAY)
    with pytest.raises(WizardStateError):
        wizard.retreat()
    with pytest.raises(WizardStateError):
        wizard.complete()


def test_reset_after_completion_restores_initial_state() -> None:
    wizard = _wizard()
    _to_confirm_step(wizard)
    wizard.complete()

    draft = wizard.reset()

    assert draft.model_dump() == ReservationDraft().model_dump()
    assert wizard.draft.current_step == WizardStep.DATE_TIME
    assert wizard.draft.party_size == 2


def test_default_confirmation_ids_use_prefix() -> None:
    wizard = ReservationWizard(
        slot_oracle=AlwaysAvailable(),
        table_oracle=AlwaysAvailable(),
        clock=FixedClock(NOW),
        settings=Settings(submit_delay_seconds=0, confirmation_prefix="TB"),
        zone=UTC,
    )
    _to_confirm_step(wizard)
    confirmation = wizard.complete()
    assert confirmation is not None
    assert re.fullmatch(r"TB-\d{6}", confirmation.confirmation_id)


@pytest.mark.asyncio
async def test_submit_completes_after_delay() -> None:
    wizard = _wizard()
    _to_confirm_step(wizard)
    confirmation = await wizard.submit()
    assert confirmation is not None
    assert wizard.draft.complete is True


@pytest.mark.asyncio
async def test_submit_with_invalid_guest_info_does_not_wait() -> None:
    wizard = _wizard(settings=Settings(submit_delay_seconds=30))
    _to_confirm_step(wizard)
    wizard.update_customer_info(email="nope")
    assert await asyncio.wait_for(wizard.submit(), timeout=1) is None
    assert "email" in wizard.draft.errors


@pytest.mark.asyncio
async def test_cancelled_submit_never_completes(_silence_audit: list[dict[str, Any]]) -> None:
    wizard = _wizard(settings=Settings(submit_delay_seconds=30))
    _to_confirm_step(wizard)
    task = asyncio.create_task(wizard.submit())
    await asyncio.sleep(0)

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert wizard.draft.complete is False
    assert _silence_audit[-1]["action"] == "reservation.submit_cancelled"


@pytest.mark.asyncio
async def test_reset_cancels_pending_submit() -> None:
    wizard = _wizard(settings=Settings(submit_delay_seconds=30))
    _to_confirm_step(wizard)
    task = asyncio.create_task(wizard.submit())
    await asyncio.sleep(0)

    wizard.reset()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert wizard.draft.model_dump() == ReservationDraft().model_dump()


@pytest.mark.asyncio
async def test_concurrent_submit_is_rejected() -> None:
    wizard = _wizard(settings=Settings(submit_delay_seconds=30))
    _to_confirm_step(wizard)
    task = asyncio.create_task(wizard.submit())
    await asyncio.sleep(0)

    with pytest.raises(WizardStateError):
        await wizard.submit()

    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task
