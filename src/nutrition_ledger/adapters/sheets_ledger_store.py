"""Google Sheets-backed ledger store using the values API."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from urllib.parse import quote

import httpx

from nutrition_ledger.domain.errors import NotFound, StoreUnavailable, TableMissing
from nutrition_ledger.services.ledger import (
    LedgerStore,
    LedgerTable,
    Row,
    RowPredicate,
    RowRange,
)

DEFAULT_SHEET_TITLES: dict[LedgerTable, str] = {
    LedgerTable.FOOD_LOG: "Tabelle1",
    LedgerTable.WEIGHT_LOG: "Gewicht",
    LedgerTable.ACTIVITY_LOG: "Aktivitäten",
    LedgerTable.FAVORITES: "Favoriten",
    LedgerTable.BUDGETS: "Ziele",
}
_LAST_COLUMN = "ZZ"
_UNPARSABLE_RANGE = "Unable to parse range"

_logger = logging.getLogger(__name__)


@dataclass
class SheetsLedgerStore(LedgerStore):
    """Ledger store mapping each logical table to one sheet of a spreadsheet.

    The access token is used as given; refreshing it is left to whoever
    provides the configuration.
    """

    spreadsheet_id: str
    access_token: str
    base_url: str
    http_client: httpx.AsyncClient
    sheet_titles: Mapping[LedgerTable, str] = field(
        default_factory=lambda: dict(DEFAULT_SHEET_TITLES)
    )

    @classmethod
    def create(
        cls,
        spreadsheet_id: str,
        access_token: str,
        base_url: str,
        sheet_titles: Mapping[LedgerTable, str] | None = None,
    ) -> "SheetsLedgerStore":
        """Create a Sheets store with a managed httpx session."""
        return cls(
            spreadsheet_id=spreadsheet_id,
            access_token=access_token,
            base_url=base_url.rstrip("/"),
            http_client=httpx.AsyncClient(),
            sheet_titles=dict(sheet_titles or DEFAULT_SHEET_TITLES),
        )

    async def read_range(self, table: LedgerTable, row_range: RowRange) -> list[Row]:
        """Fetch formatted cell values for the requested rows."""
        a1 = a1_range(self._title(table), row_range)
        data = await self._request(table, "GET", f"/values/{quote(a1, safe='')}")
        values = data.get("values") or []
        return [row_range.clip(list(row)) for row in values]

    async def append_row(self, table: LedgerTable, row: Row) -> None:
        """Append a row after the last filled row of the sheet."""
        a1 = a1_range(self._title(table), RowRange())
        await self._request(
            table,
            "POST",
            f"/values/{quote(a1, safe='')}:append",
            params={
                "valueInputOption": "USER_ENTERED",
                "insertDataOption": "INSERT_ROWS",
            },
            json={"values": [list(row)]},
        )

    async def delete_row(self, table: LedgerTable, predicate: RowPredicate) -> None:
        """Delete the first matching row with a deleteDimension request."""
        try:
            rows = await self.read_range(table, RowRange())
            sheet_id = await self._sheet_id(table)
        except TableMissing as exc:
            raise NotFound(f"No matching row in {table.value}") from exc
        index = next(
            (position for position, row in enumerate(rows) if predicate(row)), None
        )
        if index is None:
            raise NotFound(f"No matching row in {table.value}")
        await self._request(
            table,
            "POST",
            ":batchUpdate",
            json={
                "requests": [
                    {
                        "deleteDimension": {
                            "range": {
                                "sheetId": sheet_id,
                                "dimension": "ROWS",
                                "startIndex": index,
                                "endIndex": index + 1,
                            }
                        }
                    }
                ]
            },
        )

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()

    async def _sheet_id(self, table: LedgerTable) -> int:
        data = await self._request(
            table, "GET", "", params={"fields": "sheets.properties"}
        )
        title = self._title(table)
        for sheet in data.get("sheets") or []:
            properties = sheet.get("properties") or {}
            if properties.get("title") == title:
                return int(properties["sheetId"])
        raise TableMissing(table.value)

    def _title(self, table: LedgerTable) -> str:
        return self.sheet_titles.get(table, DEFAULT_SHEET_TITLES[table])

    async def _request(
        self,
        table: LedgerTable,
        method: str,
        path: str,
        **kwargs: object,
    ) -> dict[str, object]:
        url = f"{self.base_url}/spreadsheets/{self.spreadsheet_id}{path}"
        try:
            response = await self.http_client.request(
                method,
                url,
                headers={"Authorization": f"Bearer {self.access_token}"},
                timeout=15,
                **kwargs,
            )
        except httpx.HTTPError as exc:
            _logger.exception("Sheets transport failed for %s", table.value)
            raise StoreUnavailable(str(exc)) from exc
        if (
            response.status_code == HTTPStatus.BAD_REQUEST
            and _UNPARSABLE_RANGE in response.text
        ):
            raise TableMissing(table.value)
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            _logger.error(
                "Sheets request failed for %s: %s", table.value, response.status_code
            )
            raise StoreUnavailable(str(exc)) from exc
        return response.json()


def a1_range(title: str, row_range: RowRange) -> str:
    """Build an A1 range such as ``'Gewicht'!A2:E10``."""
    quoted = "'" + title.replace("'", "''") + "'"
    last_column = (
        column_letter(row_range.width) if row_range.width else _LAST_COLUMN
    )
    last_row = "" if row_range.last_row is None else str(row_range.last_row)
    return f"{quoted}!A{row_range.first_row}:{last_column}{last_row}"


def column_letter(index: int) -> str:
    """Convert a 1-based column index to its spreadsheet letters."""
    letters = ""
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = chr(ord("A") + remainder) + letters
    return letters
