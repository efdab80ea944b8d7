"""Tests for container wiring."""

import asyncio

import pytest

from nutrition_ledger.adapters.sheets_ledger_store import SheetsLedgerStore
from nutrition_ledger.adapters.supabase_ledger_store import SupabaseLedgerStore
from nutrition_ledger.config import Settings
from nutrition_ledger.containers import build_container, build_ledger_store


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert isinstance(container.ledger_store, SupabaseLedgerStore)
    assert container.tracker_service.store is container.ledger_store
    assert container.tracker_service.macro_service is container.macro_service
    assert container.tracker_service.history_window_days == 30
    asyncio.run(container.close_resources())


def test_build_ledger_store_selects_sheets_backend() -> None:
    settings = Settings(
        ledger_backend="sheets",
        sheets_spreadsheet_id="sheet-1",
        sheets_access_token="token",
        openai_api_key="openai-key",
    )

    store = build_ledger_store(settings)

    assert isinstance(store, SheetsLedgerStore)
    assert store.spreadsheet_id == "sheet-1"
    asyncio.run(store.close())


def test_build_ledger_store_requires_credentials() -> None:
    settings = Settings(
        ledger_backend="sheets",
        sheets_spreadsheet_id=None,
        sheets_access_token=None,
        openai_api_key="openai-key",
    )

    with pytest.raises(ValueError, match="SHEETS_SPREADSHEET_ID"):
        build_ledger_store(settings)
