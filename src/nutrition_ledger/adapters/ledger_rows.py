"""Translation between ledger store rows and domain entries.

Column positions are known only here. Layouts follow the spreadsheet the
tracker was first built on:

- food log: Datum | Uhrzeit | Eingabe | Kcal | Eiweiß | Fett | KH | Quelle
- weight log: Datum | Gewicht | Fett | Muskel | Wasser
- activity log: Datum | Beschreibung | Kcal | Uhrzeit
- favorites: Name | Kcal | Eiweiß | Fett | KH | Einheit | Einheitsgewicht | Quelle

Quelle holds the macro provenance (catalog or estimated) and is blank for
manually entered values.
- budgets: Kcal | KH | Eiweiß | Fett | Startgewicht | Zielgewicht | TDEE
"""

import logging
import math
from collections.abc import Sequence

from nutrition_ledger.domain.dates import DateKey, is_date_label
from nutrition_ledger.domain.errors import MalformedDate
from nutrition_ledger.domain.ledger import (
    UNKNOWN_TIME,
    ActivityEntry,
    Budgets,
    Favorite,
    FoodEntry,
    WeightEntry,
)
from nutrition_ledger.domain.nutrition import MacroSource
from nutrition_ledger.services.ledger import Cell, Row, RowPredicate, first_cell_matches

FAVORITE_UNITS = frozenset({"g", "ml", "Stück", "Portion"})

_logger = logging.getLogger(__name__)


def parse_food_rows(rows: Sequence[Sequence[Cell]]) -> list[FoodEntry]:
    """Parse food log rows, skipping rows without a valid date."""
    entries: list[FoodEntry] = []
    for row in rows:
        day = _parse_day(_cell(row, 0), "food")
        if day is None:
            continue
        entries.append(
            FoodEntry(
                date=day,
                time=_text(_cell(row, 1)) or UNKNOWN_TIME,
                description=_text(_cell(row, 2)),
                kcal=_to_float(_cell(row, 3)),
                protein_g=_to_float(_cell(row, 4)),
                fat_g=_to_float(_cell(row, 5)),
                carbs_g=_to_float(_cell(row, 6)),
                source=_parse_source(_cell(row, 7)),
            )
        )
    return entries


def parse_weight_rows(rows: Sequence[Sequence[Cell]]) -> list[WeightEntry]:
    """Parse weight log rows; optional cells stay None."""
    entries: list[WeightEntry] = []
    for row in rows:
        day = _parse_day(_cell(row, 0), "weight")
        if day is None:
            continue
        entries.append(
            WeightEntry(
                date=day,
                weight_kg=parse_number(_cell(row, 1)),
                body_fat_pct=parse_number(_cell(row, 2)),
                muscle_pct=parse_number(_cell(row, 3)),
                water_pct=parse_number(_cell(row, 4)),
            )
        )
    return entries


def parse_activity_rows(rows: Sequence[Sequence[Cell]]) -> list[ActivityEntry]:
    """Parse activity log rows."""
    entries: list[ActivityEntry] = []
    for row in rows:
        day = _parse_day(_cell(row, 0), "activity")
        if day is None:
            continue
        entries.append(
            ActivityEntry(
                date=day,
                description=_text(_cell(row, 1)),
                kcal=_to_float(_cell(row, 2)),
                time=_text(_cell(row, 3)) or None,
            )
        )
    return entries


def parse_favorite_rows(rows: Sequence[Sequence[Cell]]) -> list[Favorite]:
    """Parse favorites; rows need a name and numeric calories."""
    favorites: list[Favorite] = []
    for row in rows:
        name = _text(_cell(row, 0))
        kcal = parse_number(_cell(row, 1))
        if not name or kcal is None:
            continue
        unit = _text(_cell(row, 5))
        favorites.append(
            Favorite(
                name=name,
                kcal=kcal,
                protein_g=_to_float(_cell(row, 2)),
                fat_g=_to_float(_cell(row, 3)),
                carbs_g=_to_float(_cell(row, 4)),
                unit=unit if unit in FAVORITE_UNITS else "g",
                unit_weight_g=parse_number(_cell(row, 6)),
                source=_parse_source(_cell(row, 7)),
            )
        )
    return sorted(favorites, key=lambda favorite: favorite.name.lower())


def parse_budgets(rows: Sequence[Sequence[Cell]]) -> Budgets:
    """Parse the first numeric budgets row, falling back to defaults."""
    defaults = Budgets()
    for row in rows:
        if parse_number(_cell(row, 0)) is None:
            continue
        return Budgets(
            kcal=parse_number(_cell(row, 0)) or defaults.kcal,
            carbs_g=parse_number(_cell(row, 1)) or defaults.carbs_g,
            protein_g=parse_number(_cell(row, 2)) or defaults.protein_g,
            fat_g=parse_number(_cell(row, 3)) or defaults.fat_g,
            start_weight_kg=parse_number(_cell(row, 4)) or defaults.start_weight_kg,
            target_weight_kg=parse_number(_cell(row, 5)),
            tdee_kcal=parse_number(_cell(row, 6)) or defaults.tdee_kcal,
        )
    return defaults


def date_column(rows: Sequence[Sequence[Cell]]) -> list[str]:
    """Return the raw first-column text of each row."""
    return [_text(_cell(row, 0)) for row in rows]


def food_row(entry: FoodEntry) -> Row:
    return [
        entry.date.to_text(),
        entry.time,
        entry.description,
        entry.kcal,
        entry.protein_g,
        entry.fat_g,
        entry.carbs_g,
        _source_text(entry.source),
    ]


def weight_row(entry: WeightEntry) -> Row:
    return [
        entry.date.to_text(),
        entry.weight_kg,
        _blank_if_none(entry.body_fat_pct),
        _blank_if_none(entry.muscle_pct),
        _blank_if_none(entry.water_pct),
    ]


def activity_row(entry: ActivityEntry) -> Row:
    return [entry.date.to_text(), entry.description, entry.kcal, entry.time or ""]


def favorite_row(favorite: Favorite) -> Row:
    return [
        favorite.name.lower(),
        favorite.kcal,
        favorite.protein_g,
        favorite.fat_g,
        favorite.carbs_g,
        favorite.unit,
        _blank_if_none(favorite.unit_weight_g),
        _source_text(favorite.source),
    ]


def parse_number(value: Cell) -> float | None:
    """Parse a numeric cell, accepting decimal commas."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        parsed = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", ".")
        if not cleaned:
            return None
        try:
            parsed = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    return parsed if math.isfinite(parsed) else None


def favorite_name_matches(name: str) -> RowPredicate:
    """Match a favorite row by name, never a header row."""
    same_name = first_cell_matches(name)

    def predicate(row: Row) -> bool:
        return same_name(row) and parse_number(_cell(row, 1)) is not None

    return predicate


def _parse_day(value: Cell, table: str) -> DateKey | None:
    text = _text(value)
    if not text or is_date_label(text):
        return None
    try:
        return DateKey.parse(text)
    except MalformedDate:
        _logger.warning("Skipping %s row with malformed date: %r", table, text)
        return None


def _cell(row: Sequence[Cell], index: int) -> Cell:
    return row[index] if index < len(row) else None


def _text(value: Cell) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _to_float(value: Cell) -> float:
    parsed = parse_number(value)
    return parsed if parsed is not None else 0.0


def _blank_if_none(value: float | None) -> Cell:
    return "" if value is None else value


def _parse_source(value: Cell) -> MacroSource | None:
    try:
        return MacroSource(_text(value).lower())
    except ValueError:
        return None


def _source_text(source: MacroSource | None) -> str:
    return source.value if source is not None else ""
