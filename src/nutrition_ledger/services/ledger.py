"""Ledger store interface and read helpers."""

import asyncio
import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

from nutrition_ledger.domain.errors import TableMissing

Cell = str | int | float | None
Row = list[Cell]
RowPredicate = Callable[[Row], bool]

_logger = logging.getLogger(__name__)


class LedgerTable(str, Enum):
    """Logical tables held by the ledger store."""

    FOOD_LOG = "food_log"
    WEIGHT_LOG = "weight_log"
    ACTIVITY_LOG = "activity_log"
    FAVORITES = "favorites"
    BUDGETS = "budgets"


@dataclass(frozen=True)
class RowRange:
    """Rows and columns to read, 1-based and inclusive like spreadsheet ranges."""

    first_row: int = 1
    last_row: int | None = None
    width: int | None = None

    def clip(self, row: Row) -> Row:
        """Trim a row to the configured width."""
        if self.width is None:
            return list(row)
        return list(row[: self.width])


ALL_ROWS = RowRange()


class LedgerStore(Protocol):
    """Row-oriented persistence for all logs."""

    async def read_range(self, table: LedgerTable, row_range: RowRange) -> list[Row]:
        """Return rows in store order."""

    async def append_row(self, table: LedgerTable, row: Row) -> None:
        """Append a row to a table."""

    async def delete_row(self, table: LedgerTable, predicate: RowPredicate) -> None:
        """Delete the first row matching the predicate or raise NotFound."""

    async def close(self) -> None:
        """Release underlying resources."""


async def read_rows_or_empty(
    store: LedgerStore, table: LedgerTable, row_range: RowRange = ALL_ROWS
) -> list[Row]:
    """Read rows, treating a missing table as an empty one."""
    try:
        return await store.read_range(table, row_range)
    except TableMissing:
        _logger.info("Ledger table %s missing, treating as empty", table.value)
        return []


async def read_tables(
    store: LedgerStore, *tables: LedgerTable
) -> tuple[list[Row], ...]:
    """Read several tables concurrently."""
    results = await asyncio.gather(
        *(read_rows_or_empty(store, table) for table in tables)
    )
    return tuple(results)


def first_cell_matches(value: str) -> RowPredicate:
    """Predicate matching rows whose first cell equals value, ignoring case."""
    needle = value.strip().lower()

    def predicate(row: Sequence[Cell]) -> bool:
        return bool(row) and str(row[0] or "").strip().lower() == needle

    return predicate
