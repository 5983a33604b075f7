from __future__ import annotations

from datetime import date, datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class AvailabilityOracle(Protocol):
    def is_slot_available(self, day: date, instant: datetime) -> bool: ...


class TableAvailabilityOracle(Protocol):
    def is_table_available(self, table_id: int, time: str) -> bool: ...
