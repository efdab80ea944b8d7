"""Tests for per-day aggregation."""

import random

from nutrition_ledger.domain.dates import DateKey
from nutrition_ledger.domain.ledger import ActivityEntry, DailyTotal, FoodEntry, WeightEntry
from nutrition_ledger.services.aggregation import (
    aggregate_daily,
    aggregate_today,
    aggregate_weight,
    fill_missing_days,
    in_window,
    sum_activity_by_day,
)

TODAY = DateKey.parse("06.05.2024")


def _food(day: str, kcal: float, time: str = "12:00") -> FoodEntry:
    return FoodEntry(
        date=DateKey.parse(day),
        description="meal",
        kcal=kcal,
        protein_g=kcal / 20,
        fat_g=kcal / 40,
        carbs_g=kcal / 8,
        time=time,
    )


def test_aggregate_daily_sums_entries_per_day() -> None:
    entries = [_food("05.05.2024", 300), _food("5.5.2024", 250), _food("06.05.2024", 500)]

    totals = aggregate_daily(entries, window_days=30, today=TODAY)

    assert [(total.date.to_text(), total.kcal) for total in totals] == [
        ("05.05.2024", 550),
        ("06.05.2024", 500),
    ]
    assert totals[0].protein_g == 27.5


def test_aggregate_daily_is_independent_of_row_order() -> None:
    entries = [
        _food(f"{day:02d}.04.2024", kcal)
        for day in range(1, 29)
        for kcal in (120, 340, 60)
    ]
    expected = aggregate_daily(entries, window_days=60, today=TODAY)

    shuffled = list(entries)
    random.Random(7).shuffle(shuffled)

    assert aggregate_daily(shuffled, window_days=60, today=TODAY) == expected


def test_aggregate_daily_window_is_inclusive_on_both_ends() -> None:
    entries = [
        _food("05.04.2024", 100),
        _food("06.04.2024", 200),
        _food("06.05.2024", 300),
        _food("07.05.2024", 400),
    ]

    totals = aggregate_daily(entries, window_days=30, today=TODAY)

    assert [total.date.to_text() for total in totals] == ["06.04.2024", "06.05.2024"]


def test_in_window() -> None:
    assert in_window(TODAY, TODAY, 0)
    assert not in_window(TODAY.shift(1), TODAY, 30)
    assert not in_window(TODAY.shift(-31), TODAY, 30)


def test_aggregate_today_keeps_intraday_entries() -> None:
    entries = [
        _food("06.05.2024", 300, "08:00"),
        FoodEntry(TODAY, "snack", 150, 1, 2, 3, time=""),
        _food("05.05.2024", 999),
    ]

    summary = aggregate_today(entries, TODAY)

    assert summary.total.kcal == 450
    assert [(entry.time, entry.kcal) for entry in summary.entries] == [
        ("08:00", 300),
        ("??:??", 150),
    ]


def test_aggregate_today_without_entries() -> None:
    summary = aggregate_today([], TODAY)

    assert summary.total == DailyTotal(date=TODAY)
    assert summary.entries == []


def test_aggregate_weight_excludes_entries_without_weight() -> None:
    entries = [
        WeightEntry(DateKey.parse("04.05.2024"), None, body_fat_pct=20.0, muscle_pct=40.0),
        WeightEntry(DateKey.parse("06.05.2024"), 80.1),
        WeightEntry(DateKey.parse("05.05.2024"), 80.5),
    ]

    result = aggregate_weight(entries, window_days=30, today=TODAY)

    assert [entry.weight_kg for entry in result] == [80.5, 80.1]


def test_aggregate_weight_last_row_wins_for_a_day() -> None:
    entries = [
        WeightEntry(TODAY, 81.0),
        WeightEntry(TODAY, 80.4),
        WeightEntry(DateKey.parse("01.01.2024"), 90.0),
    ]

    result = aggregate_weight(entries, window_days=30, today=TODAY)

    assert result == [WeightEntry(TODAY, 80.4)]


def test_sum_activity_by_day() -> None:
    burned = sum_activity_by_day(
        [
            ActivityEntry(TODAY, "run", 300),
            ActivityEntry(TODAY, "walk", 120),
            ActivityEntry(TODAY.shift(-1), "bike", 200),
        ]
    )

    assert burned == {TODAY: 420, TODAY.shift(-1): 200}


def test_fill_missing_days_zero_fills_gaps() -> None:
    filled = fill_missing_days(
        [DailyTotal(TODAY.shift(-3), kcal=100), DailyTotal(TODAY, kcal=50)],
        TODAY.shift(-3),
        TODAY,
    )

    assert [total.kcal for total in filled] == [100, 0, 0, 50]
