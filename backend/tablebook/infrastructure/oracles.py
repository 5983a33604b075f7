from __future__ import annotations

import random
from datetime import date, datetime, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from ..domain.oracles import AvailabilityOracle, Clock, TableAvailabilityOracle


class SystemClock(Clock):
    def __init__(self, zone: Optional[ZoneInfo] = None) -> None:
        self.zone = zone

    def now(self) -> datetime:
        current = datetime.now(timezone.utc)
        return current.astimezone(self.zone) if self.zone is not None else current


class FixedClock(Clock):
    """Clock pinned to a single instant."""

    def __init__(self, instant: datetime) -> None:
        if instant.tzinfo is None:
            raise ValueError("instant must be timezone-aware")
        self.instant = instant

    def now(self) -> datetime:
        return self.instant


class AlwaysAvailable(AvailabilityOracle, TableAvailabilityOracle):
    def is_slot_available(self, day: date, instant: datetime) -> bool:
        return True

    def is_table_available(self, table_id: int, time: str) -> bool:
        return True


class BlockedTables(TableAvailabilityOracle):
    """Tables are available unless their (table_id, time) pair is blocked."""

    def __init__(self, blocked: Iterable[tuple[int, str]] = ()) -> None:
        self.blocked = set(blocked)

    def block(self, table_id: int, time: str) -> None:
        self.blocked.add((table_id, time))

    def is_table_available(self, table_id: int, time: str) -> bool:
        return (table_id, time) not in self.blocked


class RandomAvailability(AvailabilityOracle, TableAvailabilityOracle):
    """Demo oracle: each check is available with the given probability."""

    def __init__(
        self,
        *,
        slot_rate: float = 1.0,
        table_rate: float = 1.0,
        seed: int | None = None,
    ) -> None:
        self.slot_rate = slot_rate
        self.table_rate = table_rate
        self._rng = random.Random(seed)

    def is_slot_available(self, day: date, instant: datetime) -> bool:
        return self._rng.random() < self.slot_rate

    def is_table_available(self, table_id: int, time: str) -> bool:
        return self._rng.random() < self.table_rate
