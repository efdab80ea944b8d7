"""Tracker service orchestrating ledger reads, summaries and logging."""

import logging
from dataclasses import dataclass

from nutrition_ledger.adapters.ledger_rows import (
    activity_row,
    date_column,
    favorite_name_matches,
    favorite_row,
    food_row,
    parse_activity_rows,
    parse_budgets,
    parse_favorite_rows,
    parse_food_rows,
    parse_weight_rows,
    weight_row,
)
from nutrition_ledger.domain.dates import DateKey
from nutrition_ledger.domain.ledger import (
    ActivityEntry,
    BalancePoint,
    Budgets,
    DailyGoalPoint,
    DayCount,
    Favorite,
    FoodEntry,
    TodaySummary,
    WeightEntry,
)
from nutrition_ledger.domain.nutrition import ActivityEstimate, Resolved, Unresolved
from nutrition_ledger.services.aggregation import (
    aggregate_daily,
    aggregate_today,
    aggregate_weight,
    fill_missing_days,
    in_window,
    sum_activity_by_day,
)
from nutrition_ledger.services.balance import cumulative_balance, daily_goal_series
from nutrition_ledger.services.day_count import count_unique_days
from nutrition_ledger.services.ledger import (
    LedgerStore,
    LedgerTable,
    read_rows_or_empty,
    read_tables,
)
from nutrition_ledger.services.macros import MacroResolutionService
from nutrition_ledger.services.weight_trends import WeightHistory, build_weight_history

BARCODE_SUFFIX = " (barcode)"

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MacroGoals:
    """Daily goals after adding today's activity."""

    kcal: float
    protein_g: float
    fat_g: float
    carbs_g: float


@dataclass(frozen=True)
class Overview:
    """Today's intake against activity-adjusted goals."""

    today: TodaySummary
    activity_kcal: float
    budgets: Budgets
    goals: MacroGoals


@dataclass(frozen=True)
class ScanResult:
    """A resolved product and whether it was written to the food log."""

    resolved: Resolved
    logged: bool
    favorite_added: bool


@dataclass
class TrackerService:
    """Service behind every tracker endpoint.

    All reads happen per call; nothing is kept between requests.
    """

    store: LedgerStore
    macro_service: MacroResolutionService
    history_window_days: int = 30
    weight_window_days: int = 30
    balance_window_days: int = 365
    debug: bool = False

    async def overview(self, today: DateKey) -> Overview:
        """Return today's totals with macro goals scaled by today's activity."""
        food_rows, activity_rows, budget_rows = await read_tables(
            self.store,
            LedgerTable.FOOD_LOG,
            LedgerTable.ACTIVITY_LOG,
            LedgerTable.BUDGETS,
        )
        budgets = parse_budgets(budget_rows)
        summary = aggregate_today(parse_food_rows(food_rows), today)
        burned = sum_activity_by_day(parse_activity_rows(activity_rows)).get(today, 0.0)
        return Overview(
            today=summary,
            activity_kcal=burned,
            budgets=budgets,
            goals=scale_goals(budgets, burned),
        )

    async def history(
        self, today: DateKey, window_days: int | None = None
    ) -> list[DailyGoalPoint]:
        """Return per-day calories against the activity-adjusted goal."""
        window = window_days if window_days is not None else self.history_window_days
        food_rows, activity_rows, budget_rows = await read_tables(
            self.store,
            LedgerTable.FOOD_LOG,
            LedgerTable.ACTIVITY_LOG,
            LedgerTable.BUDGETS,
        )
        totals = aggregate_daily(parse_food_rows(food_rows), window, today)
        burned = sum_activity_by_day(parse_activity_rows(activity_rows))
        return daily_goal_series(totals, parse_budgets(budget_rows).kcal, burned)

    async def kcal_balance(
        self, today: DateKey, window_days: int | None = None
    ) -> list[BalancePoint]:
        """Return the running consumed and burned calories since the first log."""
        window = window_days if window_days is not None else self.balance_window_days
        food_rows, activity_rows, budget_rows = await read_tables(
            self.store,
            LedgerTable.FOOD_LOG,
            LedgerTable.ACTIVITY_LOG,
            LedgerTable.BUDGETS,
        )
        totals = aggregate_daily(parse_food_rows(food_rows), window, today)
        if not totals:
            return []
        filled = fill_missing_days(totals, totals[0].date, today)
        burned = sum_activity_by_day(parse_activity_rows(activity_rows))
        return cumulative_balance(filled, parse_budgets(budget_rows).tdee_kcal, burned)

    async def weight_components(
        self, today: DateKey, window_days: int | None = None
    ) -> list[WeightEntry]:
        """Return weight and body composition samples inside the window."""
        window = window_days if window_days is not None else self.weight_window_days
        rows = await read_rows_or_empty(self.store, LedgerTable.WEIGHT_LOG)
        return aggregate_weight(parse_weight_rows(rows), window, today)

    async def weight_history(self, today: DateKey) -> WeightHistory:
        """Return observed, theoretical and trend weight series."""
        food_rows, activity_rows, weight_rows, budget_rows = await read_tables(
            self.store,
            LedgerTable.FOOD_LOG,
            LedgerTable.ACTIVITY_LOG,
            LedgerTable.WEIGHT_LOG,
            LedgerTable.BUDGETS,
        )
        window = self.balance_window_days
        budgets = parse_budgets(budget_rows)
        weights = [
            entry
            for entry in parse_weight_rows(weight_rows)
            if in_window(entry.date, today, window)
        ]
        consumed = {
            total.date: total.kcal
            for total in aggregate_daily(parse_food_rows(food_rows), window, today)
        }
        burned = {
            day: kcal
            for day, kcal in sum_activity_by_day(
                parse_activity_rows(activity_rows)
            ).items()
            if in_window(day, today, window)
        }
        start_weight = budgets.start_weight_kg or _first_weight(weights)
        return build_weight_history(
            weights=weights,
            consumed_kcal=consumed,
            activity_kcal=burned,
            start_weight_kg=start_weight,
            target_weight_kg=budgets.target_weight_kg,
            tdee_kcal=budgets.tdee_kcal,
        )

    async def latest_weight(self) -> WeightEntry | None:
        """Return the last weighed row in store order."""
        rows = await read_rows_or_empty(self.store, LedgerTable.WEIGHT_LOG)
        weighed = [entry for entry in parse_weight_rows(rows) if entry.weight_kg]
        return weighed[-1] if weighed else None

    async def day_count(self) -> DayCount:
        """Count distinct days with food or weight entries."""
        food_rows, weight_rows = await read_tables(
            self.store, LedgerTable.FOOD_LOG, LedgerTable.WEIGHT_LOG
        )
        return count_unique_days(date_column(food_rows), date_column(weight_rows))

    async def budgets(self) -> Budgets:
        rows = await read_rows_or_empty(self.store, LedgerTable.BUDGETS)
        return parse_budgets(rows)

    async def list_favorites(self) -> list[Favorite]:
        rows = await read_rows_or_empty(self.store, LedgerTable.FAVORITES)
        return parse_favorite_rows(rows)

    async def delete_favorite(self, name: str) -> None:
        """Delete a favorite by name, ignoring case and skipping header rows."""
        await self.store.delete_row(LedgerTable.FAVORITES, favorite_name_matches(name))
        if self.debug:
            _logger.info("Favorite deleted: %s", name)

    async def log_food(
        self, entry: FoodEntry, favorite_name: str | None = None
    ) -> bool:
        """Append a food row and remember it as a favorite when the name is new.

        Returns True when a favorite was added.
        """
        await self.store.append_row(LedgerTable.FOOD_LOG, food_row(entry))
        name = (favorite_name or entry.description).strip()
        if not name:
            return False
        favorites = await self.list_favorites()
        if any(favorite.name.lower() == name.lower() for favorite in favorites):
            return False
        await self.store.append_row(
            LedgerTable.FAVORITES,
            favorite_row(
                Favorite(
                    name=name,
                    kcal=entry.kcal,
                    protein_g=entry.protein_g,
                    fat_g=entry.fat_g,
                    carbs_g=entry.carbs_g,
                    source=entry.source,
                )
            ),
        )
        if self.debug:
            _logger.info("Favorite added: %s", name.lower())
        return True

    async def log_weight(self, entry: WeightEntry) -> WeightEntry:
        """Append a weight row, carrying body fat and muscle from the last row."""
        stored = entry
        if entry.body_fat_pct is None or entry.muscle_pct is None:
            rows = await read_rows_or_empty(self.store, LedgerTable.WEIGHT_LOG)
            previous = parse_weight_rows(rows)
            last = previous[-1] if previous else None
            if last is not None:
                stored = WeightEntry(
                    date=entry.date,
                    weight_kg=entry.weight_kg,
                    body_fat_pct=_first_known(entry.body_fat_pct, last.body_fat_pct),
                    muscle_pct=_first_known(entry.muscle_pct, last.muscle_pct),
                    water_pct=entry.water_pct,
                )
        await self.store.append_row(LedgerTable.WEIGHT_LOG, weight_row(stored))
        return stored

    async def log_activity(self, entry: ActivityEntry) -> None:
        await self.store.append_row(LedgerTable.ACTIVITY_LOG, activity_row(entry))

    async def scan_barcode(
        self, code: str, today: DateKey, time: str, log: bool = True
    ) -> ScanResult | Unresolved:
        """Resolve a barcode and, when asked, log it with its provenance."""
        result = await self.macro_service.resolve_barcode(code)
        if isinstance(result, Unresolved):
            _logger.info("Barcode %s unresolved: %s", code, result.reason)
            return result
        if not log:
            return ScanResult(resolved=result, logged=False, favorite_added=False)
        estimate = result.estimate
        favorite_added = await self.log_food(
            FoodEntry(
                date=today,
                time=time,
                description=f"{result.name}{BARCODE_SUFFIX}",
                kcal=estimate.kcal,
                protein_g=estimate.protein_g,
                fat_g=estimate.fat_g,
                carbs_g=estimate.carbs_g,
                source=estimate.source,
            ),
            favorite_name=result.name,
        )
        return ScanResult(resolved=result, logged=True, favorite_added=favorite_added)

    async def estimate_activity(
        self, description: str, weight_kg: float | None = None
    ) -> ActivityEstimate | Unresolved:
        """Estimate burned calories, using the latest weight when none is given."""
        if weight_kg is None:
            latest = await self.latest_weight()
            if latest is None or latest.weight_kg is None:
                budgets = await self.budgets()
                weight_kg = budgets.start_weight_kg
            else:
                weight_kg = latest.weight_kg
        if not weight_kg:
            return Unresolved(reason="weight_unknown")
        return await self.macro_service.estimate_activity(description, weight_kg)


def scale_goals(budgets: Budgets, activity_kcal: float) -> MacroGoals:
    """Raise macro goals in proportion to the calories burned by activity."""
    factor = (budgets.kcal + activity_kcal) / budgets.kcal if budgets.kcal else 1.0
    return MacroGoals(
        kcal=budgets.kcal + activity_kcal,
        protein_g=round(budgets.protein_g * factor, 1),
        fat_g=round(budgets.fat_g * factor, 1),
        carbs_g=round(budgets.carbs_g * factor, 1),
    )


def _first_known(value: float | None, fallback: float | None) -> float | None:
    return value if value is not None else fallback


def _first_weight(weights: list[WeightEntry]) -> float:
    for entry in sorted(weights, key=lambda item: item.date):
        if entry.weight_kg:
            return entry.weight_kg
    return 0.0
