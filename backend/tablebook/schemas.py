from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field, field_serializer

from .catalog import section_for
from .models import (
    ConfirmedReservation,
    CustomerInfo,
    Position,
    SpecialOccasion,
    Table,
    TableArea,
    TableAvailability,
    TableShape,
    TimeSlot,
    WizardStep,
)
from .usecases.slots import group_time_slots
from .usecases.wizard import ReservationWizard


class TableRead(BaseModel):
    table_id: int
    name: str
    shape: TableShape
    seats: int
    area: TableArea
    section_name: Optional[str]
    position: Position

    @classmethod
    def from_domain(cls, *, table: Table) -> "TableRead":
        section = section_for(table.area)
        return cls(
            table_id=table.id,
            name=table.name,
            shape=table.shape,
            seats=table.seats,
            area=table.area,
            section_name=section.name if section is not None else None,
            position=table.position,
        )


class TableAvailabilityRead(BaseModel):
    table: TableRead
    available: bool
    suitable: bool

    @classmethod
    def from_domain(cls, *, entry: TableAvailability) -> "TableAvailabilityRead":
        return cls(table=TableRead.from_domain(table=entry.table), available=entry.available, suitable=entry.suitable)


class TimeSlotRead(BaseModel):
    time: str
    instant: datetime
    available: bool

    @field_serializer("instant")
    def _ser_datetime(self, dt: datetime) -> str:
        return dt.isoformat()

    @classmethod
    def from_domain(cls, *, slot: TimeSlot) -> "TimeSlotRead":
        return cls(time=slot.time, instant=slot.instant, available=slot.available)


class SlotGroupRead(BaseModel):
    name: str
    slots: list[TimeSlotRead]


def slot_groups(slots: list[TimeSlot]) -> list[SlotGroupRead]:
    return [
        SlotGroupRead(name=name, slots=[TimeSlotRead.from_domain(slot=slot) for slot in group])
        for name, group in group_time_slots(slots).items()
    ]


class OccasionRead(BaseModel):
    occasion_id: SpecialOccasion
    name: str

    @classmethod
    def from_domain(cls, *, occasion: SpecialOccasion) -> "OccasionRead":
        return cls(occasion_id=occasion, name=occasion.display_name)


class DateSelection(BaseModel):
    date: date


class TimeSelection(BaseModel):
    time: str = Field(min_length=1)


class TableSelection(BaseModel):
    table_id: int


class PartySizeUpdate(BaseModel):
    party_size: int


class OccasionUpdate(BaseModel):
    occasion: Optional[SpecialOccasion] = None


class GuestInfoUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    special_requests: Optional[str] = None


class WizardRead(BaseModel):
    session_id: str
    current_step: WizardStep
    complete: bool
    selected_date: Optional[date]
    selected_time: Optional[str]
    selected_table: Optional[TableRead]
    party_size: int
    special_occasion: Optional[SpecialOccasion]
    customer_info: CustomerInfo
    time_slots: list[SlotGroupRead]
    tables: list[TableAvailabilityRead]
    errors: dict[str, str]
    confirmation: Optional[ConfirmedReservation] = None

    @classmethod
    def from_wizard(cls, *, session_id: str, wizard: ReservationWizard) -> "WizardRead":
        draft = wizard.draft
        return cls(
            session_id=session_id,
            current_step=draft.current_step,
            complete=draft.complete,
            selected_date=draft.selected_date,
            selected_time=draft.selected_time,
            selected_table=TableRead.from_domain(table=draft.selected_table) if draft.selected_table else None,
            party_size=draft.party_size,
            special_occasion=draft.special_occasion,
            customer_info=draft.customer_info,
            time_slots=slot_groups(draft.time_slots),
            tables=[TableAvailabilityRead.from_domain(entry=entry) for entry in draft.tables],
            errors=dict(draft.errors),
            confirmation=wizard.confirmation() if draft.complete else None,
        )
