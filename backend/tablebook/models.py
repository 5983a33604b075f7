from datetime import date, datetime, time
from enum import IntEnum, StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator

from .domain.errors import ConfigurationError
from .utils.time import format_long_date, parse_time_of_day


class TableShape(StrEnum):
    ROUND = "round"
    RECTANGLE = "rectangle"
    SQUARE = "square"
    BOOTH = "booth"


class TableArea(StrEnum):
    WINDOW = "window"
    MAIN = "main"
    BAR = "bar"
    PATIO = "patio"
    PRIVATE = "private"


class DayCategory(StrEnum):
    MONDAY_TO_THURSDAY = "mondayToThursday"
    FRIDAY_TO_SATURDAY = "fridayToSaturday"
    SUNDAY = "sunday"


class SpecialOccasion(StrEnum):
    BIRTHDAY = "birthday"
    ANNIVERSARY = "anniversary"
    DATE = "date"
    BUSINESS = "business"
    GRADUATION = "graduation"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        return _OCCASION_NAMES[self]


_OCCASION_NAMES = {
    SpecialOccasion.BIRTHDAY: "Birthday",
    SpecialOccasion.ANNIVERSARY: "Anniversary",
    SpecialOccasion.DATE: "Date Night",
    SpecialOccasion.BUSINESS: "Business Meal",
    SpecialOccasion.GRADUATION: "Graduation",
    SpecialOccasion.OTHER: "Other Special Occasion",
}


class WizardStep(IntEnum):
    DATE_TIME = 1
    TABLE_SELECT = 2
    GUEST_INFO = 3
    CONFIRM = 4


class OpeningHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    open: time
    close: time
    interval_minutes: int

    @field_validator("open", "close", mode="before")
    @classmethod
    def _parse_label(cls, value: object) -> object:
        if isinstance(value, str):
            return parse_time_of_day(value)
        return value

    @model_validator(mode="after")
    def _check_bounds(self) -> "OpeningHours":
        self.check()
        return self

    def check(self) -> None:
        if self.interval_minutes <= 0:
            raise ConfigurationError(f"slot interval must be positive, got {self.interval_minutes}")
        if self.open >= self.close:
            raise ConfigurationError(f"opening time {self.open} must be before closing time {self.close}")


class BusinessHours(BaseModel):
    model_config = ConfigDict(frozen=True)

    categories: dict[DayCategory, OpeningHours]

    def for_category(self, category: DayCategory) -> OpeningHours:
        try:
            return self.categories[category]
        except KeyError as exc:
            raise ConfigurationError(f"no business hours configured for {category.value}") from exc


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: int
    y: int


class Table(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    shape: TableShape
    seats: int = Field(ge=1)
    area: TableArea
    position: Position


class RestaurantSection(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: TableArea
    name: str
    description: str


class TimeSlot(BaseModel):
    time: str
    instant: datetime
    available: bool


class TableAvailability(BaseModel):
    table: Table
    available: bool
    suitable: bool


class CalendarDay(BaseModel):
    date: date
    display_label: str
    is_today: bool
    iso_date: str


class CustomerInfo(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    special_requests: str = ""


class ReservationDraft(BaseModel):
    selected_date: Optional[date] = None
    selected_time: Optional[str] = None
    selected_table: Optional[Table] = None
    party_size: int = Field(default=2, ge=1)
    special_occasion: Optional[SpecialOccasion] = None
    customer_info: CustomerInfo = Field(default_factory=CustomerInfo)
    current_step: WizardStep = WizardStep.DATE_TIME
    complete: bool = False
    confirmation_id: Optional[str] = None
    time_slots: list[TimeSlot] = Field(default_factory=list)
    tables: list[TableAvailability] = Field(default_factory=list)
    errors: dict[str, str] = Field(default_factory=dict)


class ConfirmedReservation(BaseModel):
    confirmation_id: str
    date: date
    time: str
    table: Table
    party_size: int
    special_occasion: Optional[SpecialOccasion] = None
    customer_info: CustomerInfo

    @computed_field  # type: ignore[prop-decorator]
    @property
    def display_date(self) -> str:
        return format_long_date(self.date)
