"""Tests for weight curve construction."""

import pytest

from nutrition_ledger.domain.dates import DateKey
from nutrition_ledger.domain.ledger import WeightEntry
from nutrition_ledger.services.weight_trends import (
    KCAL_PER_KG,
    WeightPoint,
    build_weight_history,
    linear_trend,
    smooth,
)

DAY = DateKey.parse("01.05.2024")


def test_theoretical_weight_follows_cumulative_deficit() -> None:
    history = build_weight_history(
        weights=[],
        consumed_kcal={DAY: 1830, DAY.shift(1): 2600},
        activity_kcal={DAY.shift(1): 770},
        start_weight_kg=90.0,
        target_weight_kg=80.0,
        tdee_kcal=2600,
    )

    assert [point.weight_kg for point in history.theoretical] == [89.9, 89.8]
    assert history.target_weight_kg == 80.0
    assert KCAL_PER_KG == 7700


def test_observed_weight_and_composition_carry_forward() -> None:
    history = build_weight_history(
        weights=[
            WeightEntry(DAY.shift(1), 89.0, body_fat_pct=25.0, muscle_pct=35.0),
            WeightEntry(DAY.shift(3), 88.4),
        ],
        consumed_kcal={DAY: 2000, DAY.shift(2): 2000},
        activity_kcal={},
        start_weight_kg=90.0,
        target_weight_kg=None,
        tdee_kcal=2500,
    )

    assert [point.weight_kg for point in history.observed] == [90.0, 89.0, 89.0, 88.4]
    assert [point.value for point in history.body_fat] == [None, 25.0, 25.0, None]
    assert [point.date for point in history.observed] == [DAY.shift(i) for i in range(4)]


def test_smooth_uses_truncated_centered_window() -> None:
    points = [WeightPoint(DAY.shift(i), value) for i, value in enumerate([1, 2, 3, 4, 5])]

    smoothed = smooth(points, radius=1)

    assert [point.weight_kg for point in smoothed] == [1.5, 2.0, 3.0, 4.0, 4.5]


def test_linear_trend_fits_a_line() -> None:
    points = [WeightPoint(DAY.shift(i), 90 - 0.5 * i) for i in range(5)]

    trend = linear_trend(points)

    assert [point.weight_kg for point in trend] == pytest.approx(
        [90.0, 89.5, 89.0, 88.5, 88.0]
    )
    assert linear_trend([]) == []
    assert linear_trend(points[:1]) == points[:1]
