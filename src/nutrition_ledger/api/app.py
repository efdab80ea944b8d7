"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime
from http import HTTPStatus
from zoneinfo import ZoneInfo

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from nutrition_ledger.api.models import (
    ActivityEstimateRequest,
    ActivityLogRequest,
    FoodLogRequest,
    WeightLogRequest,
)
from nutrition_ledger.app_logging import configure_logging
from nutrition_ledger.containers import AppContainer
from nutrition_ledger.domain.dates import DateKey
from nutrition_ledger.domain.errors import (
    MalformedDate,
    NotFound,
    StoreUnavailable,
    TableMissing,
)
from nutrition_ledger.domain.ledger import (
    ActivityEntry,
    Budgets,
    DailyTotal,
    FoodEntry,
    WeightEntry,
)
from nutrition_ledger.domain.nutrition import Unresolved
from nutrition_ledger.services.macros import NOT_FOUND, UNPARSABLE_ESTIMATE
from nutrition_ledger.services.tracker import ScanResult
from nutrition_ledger.services.weight_trends import CompositionPoint, WeightPoint

_UNRESOLVED_STATUS = {
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    UNPARSABLE_ESTIMATE: status.HTTP_502_BAD_GATEWAY,
}


def create_app(container: AppContainer) -> FastAPI:  # noqa: C901, PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.debug)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(StoreUnavailable)
    @app.exception_handler(TableMissing)
    async def store_error(_request: Request, exc: Exception) -> JSONResponse:
        logger.error("Ledger store failure: %s", exc)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"error": "Ledger store unavailable"},
        )

    @app.exception_handler(NotFound)
    async def not_found(_request: Request, exc: NotFound) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND, content={"error": str(exc)}
        )

    @app.exception_handler(MalformedDate)
    async def malformed_date(_request: Request, exc: MalformedDate) -> JSONResponse:
        return JSONResponse(
            status_code=HTTPStatus.UNPROCESSABLE_ENTITY,
            content={"error": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/overview")
    async def overview(request: Request, today: str | None = None) -> dict[str, object]:
        """Return today's intake against activity-adjusted goals."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.tracker_service.overview(
            _resolve_today(state_container, today)
        )
        return {
            "date": result.today.total.date.to_text(),
            "totals": _daily_total_payload(result.today.total),
            "entries": [
                {
                    "time": entry.time,
                    "kcal": entry.kcal,
                    "source": entry.source.value if entry.source else None,
                }
                for entry in result.today.entries
            ],
            "activity_kcal": result.activity_kcal,
            "goals": {
                "kcal": result.goals.kcal,
                "protein_g": result.goals.protein_g,
                "fat_g": result.goals.fat_g,
                "carbs_g": result.goals.carbs_g,
            },
        }

    @app.get("/history")
    async def history(
        request: Request, today: str | None = None, days: int | None = None
    ) -> list[dict[str, object]]:
        """Return per-day calories with the day's goal."""
        state_container: AppContainer = request.app.state.container
        points = await state_container.tracker_service.history(
            _resolve_today(state_container, today), days
        )
        return [
            {"date": point.date.to_text(), "kcal": point.kcal, "goal": point.goal_kcal}
            for point in points
        ]

    @app.get("/kcal-history")
    async def kcal_history(
        request: Request, today: str | None = None, days: int | None = None
    ) -> list[dict[str, object]]:
        """Return running consumed and budgeted calories."""
        state_container: AppContainer = request.app.state.container
        points = await state_container.tracker_service.kcal_balance(
            _resolve_today(state_container, today), days
        )
        return [
            {
                "date": point.date.to_text(),
                "consumed": point.consumed_cumulative,
                "budget": point.budget_cumulative,
            }
            for point in points
        ]

    @app.get("/weight/components")
    async def weight_components(
        request: Request, today: str | None = None, days: int | None = None
    ) -> list[dict[str, object]]:
        """Return weight and body composition samples."""
        state_container: AppContainer = request.app.state.container
        entries = await state_container.tracker_service.weight_components(
            _resolve_today(state_container, today), days
        )
        return [_weight_payload(entry) for entry in entries]

    @app.get("/weight/history")
    async def weight_history(
        request: Request, today: str | None = None
    ) -> dict[str, object]:
        """Return observed, theoretical, smoothed and trend weight curves."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.tracker_service.weight_history(
            _resolve_today(state_container, today)
        )
        return {
            "start_weight_kg": result.start_weight_kg,
            "target_weight_kg": result.target_weight_kg,
            "tdee_kcal": result.tdee_kcal,
            "observed": _points_payload(result.observed),
            "theoretical": _points_payload(result.theoretical),
            "smoothed": _points_payload(result.smoothed),
            "trend": _points_payload(result.trend),
            "body_fat": _composition_payload(result.body_fat),
            "muscle": _composition_payload(result.muscle),
        }

    @app.get("/weight/latest")
    async def latest_weight(request: Request) -> dict[str, object]:
        """Return the most recent weigh-in."""
        state_container: AppContainer = request.app.state.container
        entry = await state_container.tracker_service.latest_weight()
        if entry is None:
            raise NotFound("No weight entry found")
        return _weight_payload(entry)

    @app.get("/day-count")
    async def day_count(request: Request) -> dict[str, int]:
        """Return distinct logged days."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.tracker_service.day_count()
        return {
            "total_days": result.total_days,
            "food_days": result.food_days,
            "weight_days": result.weight_days,
        }

    @app.get("/budgets")
    async def budgets(request: Request) -> dict[str, object]:
        """Return the configured goals."""
        state_container: AppContainer = request.app.state.container
        return _budgets_payload(await state_container.tracker_service.budgets())

    @app.get("/favorites")
    async def favorites(request: Request) -> list[dict[str, object]]:
        """Return saved favorites sorted by name."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.tracker_service.list_favorites()
        return [
            {
                "name": favorite.name,
                "kcal": favorite.kcal,
                "protein_g": favorite.protein_g,
                "fat_g": favorite.fat_g,
                "carbs_g": favorite.carbs_g,
                "unit": favorite.unit,
                "unit_weight_g": favorite.unit_weight_g,
                "source": favorite.source.value if favorite.source else None,
            }
            for favorite in result
        ]

    @app.delete("/favorites/{name}")
    async def delete_favorite(name: str, request: Request) -> dict[str, bool]:
        """Delete a favorite by name."""
        state_container: AppContainer = request.app.state.container
        await state_container.tracker_service.delete_favorite(name)
        return {"success": True}

    @app.post("/food")
    async def log_food(payload: FoodLogRequest, request: Request) -> dict[str, bool]:
        """Append a food entry."""
        state_container: AppContainer = request.app.state.container
        now = _now(state_container)
        favorite_added = await state_container.tracker_service.log_food(
            FoodEntry(
                date=DateKey.from_date(now.date()),
                time=payload.time or now.strftime("%H:%M"),
                description=payload.name.strip(),
                kcal=payload.kcal,
                protein_g=payload.protein_g,
                fat_g=payload.fat_g,
                carbs_g=payload.carbs_g,
            )
        )
        return {"success": True, "favorite_added": favorite_added}

    @app.post("/weight")
    async def log_weight(
        payload: WeightLogRequest, request: Request
    ) -> dict[str, object]:
        """Append a weigh-in."""
        state_container: AppContainer = request.app.state.container
        stored = await state_container.tracker_service.log_weight(
            WeightEntry(
                date=DateKey.from_date(_now(state_container).date()),
                weight_kg=payload.weight_kg,
                body_fat_pct=payload.body_fat_pct,
                muscle_pct=payload.muscle_pct,
                water_pct=payload.water_pct,
            )
        )
        return _weight_payload(stored)

    @app.post("/activity")
    async def log_activity(
        payload: ActivityLogRequest, request: Request
    ) -> dict[str, bool]:
        """Append an activity with known calories."""
        state_container: AppContainer = request.app.state.container
        now = _now(state_container)
        await state_container.tracker_service.log_activity(
            ActivityEntry(
                date=DateKey.from_date(now.date()),
                description=payload.description.strip(),
                kcal=payload.kcal,
                time=payload.time or now.strftime("%H:%M"),
            )
        )
        return {"success": True}

    @app.post("/activity/estimate", response_model=None)
    async def estimate_activity(
        payload: ActivityEstimateRequest, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Estimate calories burned by a described activity."""
        state_container: AppContainer = request.app.state.container
        result = await state_container.tracker_service.estimate_activity(
            payload.description, payload.weight_kg
        )
        if isinstance(result, Unresolved):
            return _unresolved_response(result)
        return {"kcal": result.kcal, "source": result.source.value}

    @app.get("/barcode/{code}", response_model=None)
    async def lookup_barcode(
        code: str, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Resolve a barcode without logging it."""
        state_container: AppContainer = request.app.state.container
        now = _now(state_container)
        result = await state_container.tracker_service.scan_barcode(
            code, DateKey.from_date(now.date()), now.strftime("%H:%M"), log=False
        )
        if isinstance(result, Unresolved):
            return _unresolved_response(result)
        return _scan_payload(result)

    @app.post("/barcode/{code}", response_model=None)
    async def scan_barcode(
        code: str, request: Request
    ) -> dict[str, object] | JSONResponse:
        """Resolve a barcode and log it to the food log."""
        state_container: AppContainer = request.app.state.container
        now = _now(state_container)
        result = await state_container.tracker_service.scan_barcode(
            code, DateKey.from_date(now.date()), now.strftime("%H:%M")
        )
        if isinstance(result, Unresolved):
            return _unresolved_response(result)
        return _scan_payload(result)

    return app


def _now(container: AppContainer) -> datetime:
    return datetime.now(tz=ZoneInfo(container.settings.reference_timezone))


def _resolve_today(container: AppContainer, today: str | None) -> DateKey:
    if today:
        return DateKey.parse(today)
    return DateKey.today(container.settings.reference_timezone)


def _unresolved_response(result: Unresolved) -> JSONResponse:
    content: dict[str, object] = {"error": result.reason}
    if result.raw_response is not None:
        content["raw_response"] = result.raw_response
    return JSONResponse(
        status_code=_UNRESOLVED_STATUS.get(
            result.reason, HTTPStatus.UNPROCESSABLE_ENTITY
        ),
        content=content,
    )


def _daily_total_payload(total: DailyTotal) -> dict[str, float]:
    return {
        "kcal": total.kcal,
        "protein_g": total.protein_g,
        "fat_g": total.fat_g,
        "carbs_g": total.carbs_g,
    }


def _weight_payload(entry: WeightEntry) -> dict[str, object]:
    return {
        "date": entry.date.to_text(),
        "weight_kg": entry.weight_kg,
        "body_fat_pct": entry.body_fat_pct,
        "muscle_pct": entry.muscle_pct,
        "water_pct": entry.water_pct,
    }


def _budgets_payload(budgets: Budgets) -> dict[str, object]:
    return {
        "kcal": budgets.kcal,
        "carbs_g": budgets.carbs_g,
        "protein_g": budgets.protein_g,
        "fat_g": budgets.fat_g,
        "start_weight_kg": budgets.start_weight_kg,
        "target_weight_kg": budgets.target_weight_kg,
        "tdee_kcal": budgets.tdee_kcal,
    }


def _points_payload(points: list[WeightPoint]) -> list[dict[str, object]]:
    return [
        {"date": point.date.to_text(), "weight_kg": point.weight_kg}
        for point in points
    ]


def _composition_payload(points: list[CompositionPoint]) -> list[dict[str, object]]:
    return [{"date": point.date.to_text(), "value": point.value} for point in points]


def _scan_payload(result: ScanResult) -> dict[str, object]:
    estimate = result.resolved.estimate
    return {
        "name": result.resolved.name,
        "kcal": estimate.kcal,
        "protein_g": estimate.protein_g,
        "fat_g": estimate.fat_g,
        "carbs_g": estimate.carbs_g,
        "source": estimate.source.value,
        "logged": result.logged,
        "favorite_added": result.favorite_added,
    }
