"""Shared test fixtures."""

from dataclasses import dataclass, field

import pytest

from nutrition_ledger.adapters.openfoodfacts_client import CatalogClient
from nutrition_ledger.config import Settings
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.domain.errors import NotFound, StoreUnavailable, TableMissing
from nutrition_ledger.domain.nutrition import ResponseShape
from nutrition_ledger.services.ledger import (
    LedgerStore,
    LedgerTable,
    Row,
    RowPredicate,
    RowRange,
)
from nutrition_ledger.services.macros import EstimationClient, MacroResolutionService
from nutrition_ledger.services.tracker import TrackerService

FOOD_HEADER = ["Datum", "Uhrzeit", "Eingabe", "Kcal", "Eiweiß", "Fett", "KH", "Quelle"]
WEIGHT_HEADER = ["Datum", "Gewicht", "Fett", "Muskel", "Wasser"]
ACTIVITY_HEADER = ["Datum", "Beschreibung", "Kcal", "Uhrzeit"]
FAVORITES_HEADER = [
    "Name",
    "Kcal",
    "Eiweiß",
    "Fett",
    "KH",
    "Einheit",
    "Einheitsgewicht",
    "Quelle",
]
BUDGETS_HEADER = ["Kcal", "KH", "Eiweiß", "Fett", "Startgewicht", "Zielgewicht", "TDEE"]


@dataclass
class InMemoryLedgerStore(LedgerStore):
    """In-memory ledger store for tests."""

    tables: dict[LedgerTable, list[Row]] = field(default_factory=dict)
    unavailable: bool = False
    closed: bool = False

    def seed(self, table: LedgerTable, rows: list[Row]) -> None:
        self.tables[table] = [list(row) for row in rows]

    async def read_range(self, table: LedgerTable, row_range: RowRange) -> list[Row]:
        rows = self._rows(table)
        selected = rows[row_range.first_row - 1 : row_range.last_row]
        return [row_range.clip(row) for row in selected]

    async def append_row(self, table: LedgerTable, row: Row) -> None:
        self._rows(table).append(list(row))

    async def delete_row(self, table: LedgerTable, predicate: RowPredicate) -> None:
        try:
            rows = self._rows(table)
        except TableMissing as exc:
            raise NotFound(table.value) from exc
        for index, row in enumerate(rows):
            if predicate(row):
                del rows[index]
                return
        raise NotFound(table.value)

    async def close(self) -> None:
        self.closed = True

    def _rows(self, table: LedgerTable) -> list[Row]:
        if self.unavailable:
            raise StoreUnavailable("store offline")
        if table not in self.tables:
            raise TableMissing(table.value)
        return self.tables[table]


@dataclass
class FakeCatalogClient(CatalogClient):
    """Fake catalog returning canned payloads by code."""

    products: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def get_product(self, code: str) -> dict[str, object]:
        self.calls.append(code)
        return self.products.get(code, {})


@dataclass
class FakeEstimationClient(EstimationClient):
    """Fake estimation service replying with a fixed answer."""

    answer: str = '{"kcal": 250, "protein_g": 10, "fat_g": 8, "carbs_g": 30}'
    prompts: list[tuple[str, ResponseShape]] = field(default_factory=list)

    async def complete(self, prompt: str, response_shape: ResponseShape) -> str:
        self.prompts.append((prompt, response_shape))
        return self.answer


def off_product(
    name: str = "Haferflocken",
    kcal: object = 372,
    protein: object = 13.5,
    fat: object = 7,
    carbs: object = 58.7,
) -> dict[str, object]:
    """Build an OpenFoodFacts-style product payload."""
    return {
        "status": 1,
        "product": {
            "product_name": name,
            "nutriments": {
                "energy-kcal_100g": kcal,
                "proteins_100g": protein,
                "fat_100g": fat,
                "carbohydrates_100g": carbs,
            },
        },
    }


@pytest.fixture
def settings() -> Settings:
    return Settings(
        ledger_backend="supabase",
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        openai_api_key="openai-key",
    )


@pytest.fixture
def ledger_store() -> InMemoryLedgerStore:
    store = InMemoryLedgerStore()
    store.seed(LedgerTable.FOOD_LOG, [FOOD_HEADER])
    store.seed(LedgerTable.WEIGHT_LOG, [WEIGHT_HEADER])
    store.seed(LedgerTable.ACTIVITY_LOG, [ACTIVITY_HEADER])
    store.seed(LedgerTable.FAVORITES, [FAVORITES_HEADER])
    store.seed(LedgerTable.BUDGETS, [BUDGETS_HEADER])
    return store


@pytest.fixture
def catalog_client() -> FakeCatalogClient:
    return FakeCatalogClient()


@pytest.fixture
def estimation_client() -> FakeEstimationClient:
    return FakeEstimationClient()


@pytest.fixture
def macro_service(
    catalog_client: FakeCatalogClient, estimation_client: FakeEstimationClient
) -> MacroResolutionService:
    return MacroResolutionService(
        catalog_client=catalog_client, estimation_client=estimation_client
    )


@pytest.fixture
def tracker_service(
    ledger_store: InMemoryLedgerStore, macro_service: MacroResolutionService
) -> TrackerService:
    return TrackerService(store=ledger_store, macro_service=macro_service)


@pytest.fixture
def container(
    settings: Settings,
    ledger_store: InMemoryLedgerStore,
    macro_service: MacroResolutionService,
    tracker_service: TrackerService,
) -> AppContainer:
    async def close_resources() -> None:
        await ledger_store.close()

    return AppContainer(
        settings=settings,
        ledger_store=ledger_store,
        macro_service=macro_service,
        tracker_service=tracker_service,
        close_resources=close_resources,
    )
