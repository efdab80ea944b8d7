"""Supabase-backed ledger store."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

import httpx
from supabase import Client, PostgrestAPIError

from nutrition_ledger.domain.errors import NotFound, StoreUnavailable, TableMissing
from nutrition_ledger.services.ledger import (
    LedgerStore,
    LedgerTable,
    Row,
    RowPredicate,
    RowRange,
)

_MISSING_TABLE_CODES = {"42P01", "PGRST205"}
_T = TypeVar("_T")

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseLedgerStore(LedgerStore):
    """Ledger store keeping each logical table in its own Supabase table.

    Every table has an ``id`` column giving store order and a ``cells``
    JSON array holding the row.
    """

    client: Client
    table_prefix: str = ""

    async def read_range(self, table: LedgerTable, row_range: RowRange) -> list[Row]:
        """Return rows in id order, sliced to the requested range."""
        records = await self._call(table, lambda: self._select_all(table))
        start = max(row_range.first_row - 1, 0)
        stop = row_range.last_row
        return [row_range.clip(_cells(record)) for record in records[start:stop]]

    async def append_row(self, table: LedgerTable, row: Row) -> None:
        """Insert a row at the end of the table."""
        await self._call(
            table,
            lambda: self.client.table(self._name(table))
            .insert({"cells": list(row)})
            .execute(),
        )

    async def delete_row(self, table: LedgerTable, predicate: RowPredicate) -> None:
        """Delete the first row in id order matching the predicate."""
        try:
            records = await self._call(table, lambda: self._select_all(table))
        except TableMissing as exc:
            raise NotFound(f"No matching row in {table.value}") from exc
        for record in records:
            if predicate(_cells(record)):
                await self._call(
                    table,
                    lambda: self.client.table(self._name(table))
                    .delete()
                    .eq("id", record["id"])
                    .execute(),
                )
                return
        raise NotFound(f"No matching row in {table.value}")

    async def close(self) -> None:
        """Supabase clients hold no resources that need closing."""

    def _select_all(self, table: LedgerTable) -> list[dict[str, object]]:
        response = (
            self.client.table(self._name(table))
            .select("id, cells")
            .order("id", desc=False)
            .execute()
        )
        return list(response.data or [])

    def _name(self, table: LedgerTable) -> str:
        return f"{self.table_prefix}{table.value}"

    async def _call(self, table: LedgerTable, operation: Callable[[], _T]) -> _T:
        try:
            return await asyncio.to_thread(operation)
        except PostgrestAPIError as exc:
            if exc.code in _MISSING_TABLE_CODES:
                raise TableMissing(table.value) from exc
            _logger.exception("Supabase request failed for %s", table.value)
            raise StoreUnavailable(str(exc)) from exc
        except httpx.HTTPError as exc:
            _logger.exception("Supabase transport failed for %s", table.value)
            raise StoreUnavailable(str(exc)) from exc


def _cells(record: dict[str, object]) -> Row:
    cells = record.get("cells")
    if isinstance(cells, list):
        return list(cells)
    return []
