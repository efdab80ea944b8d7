"""Running calorie balance for trend charts."""

from collections.abc import Iterable, Mapping

from nutrition_ledger.domain.dates import DateKey
from nutrition_ledger.domain.ledger import BalancePoint, DailyGoalPoint, DailyTotal


def cumulative_balance(
    daily_totals: Iterable[DailyTotal],
    daily_budget_kcal: float,
    activity_kcal: Mapping[DateKey, float] | None = None,
) -> list[BalancePoint]:
    """Accumulate consumed and budgeted calories day by day.

    Every input day advances the budget sum, whether or not anything was
    logged. Negative increments are clamped to zero so that both sums never
    decrease.
    """
    burned = activity_kcal or {}
    consumed = 0.0
    budget = 0.0
    points: list[BalancePoint] = []
    for total in sorted(daily_totals, key=lambda item: item.date):
        consumed += max(total.kcal, 0.0)
        budget += max(daily_budget_kcal + burned.get(total.date, 0.0), 0.0)
        points.append(
            BalancePoint(
                date=total.date,
                consumed_cumulative=consumed,
                budget_cumulative=budget,
            )
        )
    return points


def daily_goal_series(
    daily_totals: Iterable[DailyTotal],
    goal_kcal: float,
    activity_kcal: Mapping[DateKey, float] | None = None,
) -> list[DailyGoalPoint]:
    """Pair each day's calories with its goal, raised by that day's activity."""
    burned = activity_kcal or {}
    return [
        DailyGoalPoint(
            date=total.date,
            kcal=total.kcal,
            goal_kcal=goal_kcal + burned.get(total.date, 0.0),
        )
        for total in sorted(daily_totals, key=lambda item: item.date)
    ]
