"""Counting distinct logged days across the food and weight logs."""

import logging
from collections.abc import Iterable

from nutrition_ledger.domain.dates import is_date_label, normalize_day_text
from nutrition_ledger.domain.errors import MalformedDate
from nutrition_ledger.domain.ledger import DayCount

_logger = logging.getLogger(__name__)


def count_unique_days(
    food_dates: Iterable[str], weight_dates: Iterable[str]
) -> DayCount:
    """Count days with any food or weight entry, deduplicated by calendar day.

    The per-log counts are distinct days as well, not row counts. Several food
    rows on one day count as one food day, unlike a plain count of the date
    column.
    """
    food_days = _distinct_days(food_dates)
    weight_days = _distinct_days(weight_dates)
    return DayCount(
        total_days=len(food_days | weight_days),
        food_days=len(food_days),
        weight_days=len(weight_days),
    )


def _distinct_days(values: Iterable[str]) -> set[str]:
    days: set[str] = set()
    for value in values:
        if not value or not value.strip() or is_date_label(value):
            continue
        try:
            days.add(normalize_day_text(value))
        except MalformedDate:
            _logger.debug("Ignoring non-date value in date column: %r", value)
    return days
