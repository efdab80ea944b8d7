"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from nutrition_ledger.adapters.openai_estimation_client import OpenAIEstimationClient
from nutrition_ledger.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from nutrition_ledger.adapters.sheets_ledger_store import SheetsLedgerStore
from nutrition_ledger.adapters.supabase_ledger_store import SupabaseLedgerStore
from nutrition_ledger.config import Settings
from nutrition_ledger.services.ledger import LedgerStore
from nutrition_ledger.services.macros import MacroResolutionService
from nutrition_ledger.services.tracker import TrackerService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ledger_store: LedgerStore
    macro_service: MacroResolutionService
    tracker_service: TrackerService
    close_resources: Callable[[], Awaitable[None]]


def build_ledger_store(settings: Settings) -> LedgerStore:
    """Create the ledger store selected by configuration."""
    if settings.ledger_backend == "sheets":
        if not settings.sheets_spreadsheet_id or not settings.sheets_access_token:
            raise ValueError(
                "SHEETS_SPREADSHEET_ID and SHEETS_ACCESS_TOKEN are required "
                "for the sheets backend"
            )
        return SheetsLedgerStore.create(
            spreadsheet_id=settings.sheets_spreadsheet_id,
            access_token=settings.sheets_access_token,
            base_url=settings.sheets_base_url,
        )
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
            "for the supabase backend"
        )
    return SupabaseLedgerStore(
        client=create_client(settings.supabase_url, settings.supabase_service_key),
        table_prefix=settings.supabase_table_prefix,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    ledger_store = build_ledger_store(resolved_settings)
    catalog_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.openfoodfacts_base_url
    )
    estimation_client = OpenAIEstimationClient.create(
        api_key=resolved_settings.openai_api_key,
        model=resolved_settings.openai_model,
        reasoning_effort=resolved_settings.openai_reasoning_effort,
        store=resolved_settings.openai_store,
    )
    macro_service = MacroResolutionService(
        catalog_client=catalog_client,
        estimation_client=estimation_client,
        debug=resolved_settings.debug,
    )
    tracker_service = TrackerService(
        store=ledger_store,
        macro_service=macro_service,
        history_window_days=resolved_settings.history_window_days,
        weight_window_days=resolved_settings.weight_window_days,
        balance_window_days=resolved_settings.balance_window_days,
        debug=resolved_settings.debug,
    )

    async def close_resources() -> None:
        await ledger_store.close()
        await catalog_client.close()
        await estimation_client.close()

    return AppContainer(
        settings=resolved_settings,
        ledger_store=ledger_store,
        macro_service=macro_service,
        tracker_service=tracker_service,
        close_resources=close_resources,
    )
