"""Weight curves derived from logged calories and weigh-ins."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from nutrition_ledger.domain.dates import DateKey
from nutrition_ledger.domain.ledger import WeightEntry

KCAL_PER_KG = 7700
SMOOTHING_RADIUS = 3


@dataclass(frozen=True)
class WeightPoint:
    """A weight value for one day."""

    date: DateKey
    weight_kg: float


@dataclass(frozen=True)
class CompositionPoint:
    """A body-composition value for one day, if known."""

    date: DateKey
    value: float | None


@dataclass(frozen=True)
class WeightHistory:
    """Observed, theoretical, smoothed and trend weight series."""

    start_weight_kg: float
    target_weight_kg: float | None
    tdee_kcal: float
    observed: list[WeightPoint]
    theoretical: list[WeightPoint]
    smoothed: list[WeightPoint]
    trend: list[WeightPoint]
    body_fat: list[CompositionPoint]
    muscle: list[CompositionPoint]


def build_weight_history(  # noqa: PLR0913
    *,
    weights: Iterable[WeightEntry],
    consumed_kcal: Mapping[DateKey, float],
    activity_kcal: Mapping[DateKey, float],
    start_weight_kg: float,
    target_weight_kg: float | None,
    tdee_kcal: float,
) -> WeightHistory:
    """Build the weight chart series over every day with any logged data."""
    by_day: dict[DateKey, WeightEntry] = {}
    for entry in weights:
        if entry.weight_kg is not None:
            by_day[entry.date] = entry
    days = sorted(set(consumed_kcal) | set(activity_kcal) | set(by_day))

    deficit = 0.0
    last_weight = start_weight_kg
    last_fat: float | None = None
    last_muscle: float | None = None
    observed: list[WeightPoint] = []
    theoretical: list[WeightPoint] = []
    body_fat: list[CompositionPoint] = []
    muscle: list[CompositionPoint] = []
    for day in days:
        burned = tdee_kcal + activity_kcal.get(day, 0.0)
        deficit += burned - consumed_kcal.get(day, 0.0)
        theoretical.append(
            WeightPoint(day, round(start_weight_kg - deficit / KCAL_PER_KG, 2))
        )
        weighed = by_day.get(day)
        if weighed is not None:
            last_weight = weighed.weight_kg or last_weight
            last_fat = weighed.body_fat_pct
            last_muscle = weighed.muscle_pct
        observed.append(WeightPoint(day, round(last_weight, 2)))
        body_fat.append(CompositionPoint(day, last_fat))
        muscle.append(CompositionPoint(day, last_muscle))

    return WeightHistory(
        start_weight_kg=start_weight_kg,
        target_weight_kg=target_weight_kg,
        tdee_kcal=tdee_kcal,
        observed=observed,
        theoretical=theoretical,
        smoothed=smooth(observed),
        trend=linear_trend(observed),
        body_fat=body_fat,
        muscle=muscle,
    )


def smooth(points: list[WeightPoint], radius: int = SMOOTHING_RADIUS) -> list[WeightPoint]:
    """Centered moving average, truncated at the series edges."""
    smoothed: list[WeightPoint] = []
    for index, point in enumerate(points):
        window = points[max(index - radius, 0) : index + radius + 1]
        average = sum(item.weight_kg for item in window) / len(window)
        smoothed.append(WeightPoint(point.date, round(average, 2)))
    return smoothed


def linear_trend(points: list[WeightPoint]) -> list[WeightPoint]:
    """Least-squares line through the series, indexed by position."""
    count = len(points)
    if count == 0:
        return []
    if count == 1:
        return [WeightPoint(points[0].date, round(points[0].weight_kg, 2))]
    mean_x = (count - 1) / 2
    mean_y = sum(point.weight_kg for point in points) / count
    numerator = sum(
        (index - mean_x) * (point.weight_kg - mean_y)
        for index, point in enumerate(points)
    )
    denominator = sum((index - mean_x) ** 2 for index in range(count))
    slope = numerator / denominator
    intercept = mean_y - slope * mean_x
    return [
        WeightPoint(point.date, round(slope * index + intercept, 2))
        for index, point in enumerate(points)
    ]
