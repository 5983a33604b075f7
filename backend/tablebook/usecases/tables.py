from typing import List, Sequence

from ..domain.errors import AvailabilityCheckError, ReservationError
from ..domain.oracles import TableAvailabilityOracle
from ..models import Table, TableAvailability


def is_suitable(table: Table, *, available: bool, party_size: int) -> bool:
    return available and table.seats >= party_size


def resolve_availability(
    tables: Sequence[Table],
    selected_time: str,
    party_size: int,
    *,
    oracle: TableAvailabilityOracle,
) -> List[TableAvailability]:
    entries: List[TableAvailability] = []
    for table in tables:
        try:
            available = bool(oracle.is_table_available(table.id, selected_time))
        except ReservationError:
            raise
        except Exception as exc:
            raise AvailabilityCheckError(
                f"could not check availability of table {table.id} at {selected_time}"
            ) from exc
        entries.append(
            TableAvailability(
                table=table,
                available=available,
                suitable=is_suitable(table, available=available, party_size=party_size),
            )
        )
    return entries


def refresh_suitability(entries: Sequence[TableAvailability], party_size: int) -> List[TableAvailability]:
    """Recompute `suitable` for a new party size without asking the oracle again."""
    return [
        entry.model_copy(
            update={"suitable": is_suitable(entry.table, available=entry.available, party_size=party_size)}
        )
        for entry in entries
    ]
