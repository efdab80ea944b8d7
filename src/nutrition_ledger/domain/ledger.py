"""Domain models for logged ledger entries and derived summaries."""

from dataclasses import dataclass, field

from nutrition_ledger.domain.dates import DateKey
from nutrition_ledger.domain.nutrition import MacroSource

UNKNOWN_TIME = "??:??"


@dataclass(frozen=True)
class FoodEntry:
    """A single logged food item."""

    date: DateKey
    description: str
    kcal: float
    protein_g: float
    fat_g: float
    carbs_g: float
    time: str = UNKNOWN_TIME
    source: MacroSource | None = None


@dataclass(frozen=True)
class WeightEntry:
    """A body-composition sample."""

    date: DateKey
    weight_kg: float | None
    body_fat_pct: float | None = None
    muscle_pct: float | None = None
    water_pct: float | None = None


@dataclass(frozen=True)
class ActivityEntry:
    """Calories burned by a logged activity."""

    date: DateKey
    description: str
    kcal: float
    time: str | None = None


@dataclass(frozen=True)
class Favorite:
    """A saved food with per-unit macros."""

    name: str
    kcal: float
    protein_g: float
    fat_g: float
    carbs_g: float
    unit: str = "g"
    unit_weight_g: float | None = None
    source: MacroSource | None = None


@dataclass(frozen=True)
class Budgets:
    """User goals, with defaults for cells that were never filled in."""

    kcal: float = 2200
    carbs_g: float = 250
    protein_g: float = 130
    fat_g: float = 70
    start_weight_kg: float = 0
    target_weight_kg: float | None = None
    tdee_kcal: float = 2600


@dataclass(frozen=True)
class DailyTotal:
    """Sum of all food entries for one day."""

    date: DateKey
    kcal: float = 0.0
    protein_g: float = 0.0
    fat_g: float = 0.0
    carbs_g: float = 0.0

    def add(self, entry: FoodEntry) -> "DailyTotal":
        return DailyTotal(
            date=self.date,
            kcal=self.kcal + entry.kcal,
            protein_g=self.protein_g + entry.protein_g,
            fat_g=self.fat_g + entry.fat_g,
            carbs_g=self.carbs_g + entry.carbs_g,
        )


@dataclass(frozen=True)
class IntradayEntry:
    """Time-of-day and calories for one of today's entries."""

    time: str
    kcal: float
    source: MacroSource | None = None


@dataclass(frozen=True)
class TodaySummary:
    """Today's totals with per-entry detail."""

    total: DailyTotal
    entries: list[IntradayEntry] = field(default_factory=list)


@dataclass(frozen=True)
class BalancePoint:
    """Running consumed and budgeted calories up to a day."""

    date: DateKey
    consumed_cumulative: float
    budget_cumulative: float


@dataclass(frozen=True)
class DailyGoalPoint:
    """Calories consumed on a day against that day's goal."""

    date: DateKey
    kcal: float
    goal_kcal: float


@dataclass(frozen=True)
class DayCount:
    """Distinct logged days across the food and weight logs."""

    total_days: int
    food_days: int
    weight_days: int
