"""Aggregation of logged entries into per-day summaries."""

from collections.abc import Iterable

from nutrition_ledger.domain.dates import DateKey, days_between
from nutrition_ledger.domain.ledger import (
    UNKNOWN_TIME,
    ActivityEntry,
    DailyTotal,
    FoodEntry,
    IntradayEntry,
    TodaySummary,
    WeightEntry,
)


def in_window(day: DateKey, today: DateKey, window_days: int) -> bool:
    """Return True when day lies in [today - window_days, today]."""
    offset = days_between(day, today)
    return 0 <= offset <= window_days


def aggregate_daily(
    entries: Iterable[FoodEntry], window_days: int, today: DateKey
) -> list[DailyTotal]:
    """Sum food entries per day inside the rolling window, ascending by day."""
    totals: dict[DateKey, DailyTotal] = {}
    for entry in entries:
        if not in_window(entry.date, today, window_days):
            continue
        current = totals.get(entry.date) or DailyTotal(date=entry.date)
        totals[entry.date] = current.add(entry)
    return [totals[day] for day in sorted(totals)]


def aggregate_today(entries: Iterable[FoodEntry], today: DateKey) -> TodaySummary:
    """Return today's totals plus the time and calories of each entry."""
    total = DailyTotal(date=today)
    intraday: list[IntradayEntry] = []
    for entry in entries:
        if entry.date != today:
            continue
        total = total.add(entry)
        intraday.append(IntradayEntry(
                time=entry.time or UNKNOWN_TIME, kcal=entry.kcal, source=entry.source
            ))
    return TodaySummary(total=total, entries=intraday)


def aggregate_weight(
    entries: Iterable[WeightEntry], window_days: int, today: DateKey
) -> list[WeightEntry]:
    """Return weighed entries inside the window, one per day, ascending.

    A later row for the same day replaces an earlier one.
    """
    by_day: dict[DateKey, WeightEntry] = {}
    for entry in entries:
        if entry.weight_kg is None:
            continue
        if not in_window(entry.date, today, window_days):
            continue
        by_day[entry.date] = entry
    return [by_day[day] for day in sorted(by_day)]


def sum_activity_by_day(entries: Iterable[ActivityEntry]) -> dict[DateKey, float]:
    """Total calories burned per day."""
    burned: dict[DateKey, float] = {}
    for entry in entries:
        burned[entry.date] = burned.get(entry.date, 0.0) + entry.kcal
    return burned


def fill_missing_days(
    totals: Iterable[DailyTotal], start: DateKey, end: DateKey
) -> list[DailyTotal]:
    """Return one total per day from start to end, zero for unlogged days."""
    by_day = {total.date: total for total in totals}
    filled: list[DailyTotal] = []
    for offset in range(days_between(start, end) + 1):
        day = start.shift(offset)
        filled.append(by_day.get(day) or DailyTotal(date=day))
    return filled
