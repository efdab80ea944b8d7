"""Tests for ledger row translation."""

from nutrition_ledger.adapters.ledger_rows import (
    date_column,
    favorite_name_matches,
    favorite_row,
    food_row,
    parse_activity_rows,
    parse_budgets,
    parse_favorite_rows,
    parse_food_rows,
    parse_number,
    parse_weight_rows,
    weight_row,
)
from nutrition_ledger.domain.dates import DateKey
from nutrition_ledger.domain.ledger import Budgets, Favorite, FoodEntry, WeightEntry
from nutrition_ledger.domain.nutrition import MacroSource
from tests.conftest import (
    BUDGETS_HEADER,
    FAVORITES_HEADER,
    FOOD_HEADER,
    WEIGHT_HEADER,
)


def test_parse_number_accepts_decimal_commas() -> None:
    assert parse_number("72,4") == 72.4
    assert parse_number(" 3.5 ") == 3.5
    assert parse_number(12) == 12.0
    assert parse_number("") is None
    assert parse_number("abc") is None
    assert parse_number("nan") is None
    assert parse_number(True) is None
    assert parse_number(float("inf")) is None
    assert parse_number(float("nan")) is None


def test_parse_food_rows_skips_header_and_bad_dates() -> None:
    rows = [
        FOOD_HEADER,
        ["05.05.2024", "08:15", "Müsli", "300", "10", "5", "50"],
        ["5.5.24", "", "Apfel", "80,5"],
        ["32.13.2024", "09:00", "Kaputt", "100", "1", "1", "1"],
        [],
    ]

    entries = parse_food_rows(rows)

    assert [entry.description for entry in entries] == ["Müsli", "Apfel"]
    assert entries[1].date == DateKey(2024, 5, 5)
    assert entries[1].time == "??:??"
    assert entries[1].kcal == 80.5
    assert entries[1].protein_g == 0.0


def test_parse_weight_rows_keeps_missing_cells_absent() -> None:
    entries = parse_weight_rows(
        [WEIGHT_HEADER, ["06.05.2024", "81,2", "", "38.5"], ["07.05.2024", ""]]
    )

    assert entries[0].weight_kg == 81.2
    assert entries[0].body_fat_pct is None
    assert entries[0].muscle_pct == 38.5
    assert entries[0].water_pct is None
    assert entries[1].weight_kg is None


def test_parse_activity_rows() -> None:
    entries = parse_activity_rows(
        [["Datum", "Beschreibung", "Kcal"], ["06.05.2024", "Laufen", "420", "18:00"]]
    )

    assert len(entries) == 1
    assert entries[0].kcal == 420.0
    assert entries[0].time == "18:00"


def test_parse_favorite_rows_requires_name_and_kcal_and_sorts() -> None:
    favorites = parse_favorite_rows(
        [
            ["Name", "Kcal"],
            ["skyr", "63", "11", "0,2", "4", "g", ""],
            ["Banane", "105", "1.3", "0.4", "27", "Stück", "120"],
            ["", "100"],
            ["joghurt", ""],
            ["milch", "64", "3.4", "3.6", "4.8", "Liter"],
        ]
    )

    assert [favorite.name for favorite in favorites] == ["Banane", "milch", "skyr"]
    assert favorites[0].unit == "Stück"
    assert favorites[0].unit_weight_g == 120.0
    assert favorites[1].unit == "g"


def test_parse_budgets_uses_first_numeric_row_with_defaults() -> None:
    budgets = parse_budgets([BUDGETS_HEADER, ["1900", "", "140", "60", "85", "", "2500"]])

    assert budgets.kcal == 1900
    assert budgets.carbs_g == Budgets().carbs_g
    assert budgets.protein_g == 140
    assert budgets.start_weight_kg == 85
    assert budgets.target_weight_kg is None
    assert budgets.tdee_kcal == 2500


def test_parse_budgets_without_rows_returns_defaults() -> None:
    assert parse_budgets([BUDGETS_HEADER]) == Budgets()


def test_encoders_write_canonical_dates_and_lowercase_favorites() -> None:
    entry = FoodEntry(
        date=DateKey.parse("5.5.2024"),
        description="Skyr",
        kcal=63,
        protein_g=11,
        fat_g=0.2,
        carbs_g=4,
        time="07:30",
    )

    assert food_row(entry) == ["05.05.2024", "07:30", "Skyr", 63, 11, 0.2, 4, ""]
    assert weight_row(WeightEntry(date=entry.date, weight_kg=80.0)) == [
        "05.05.2024",
        80.0,
        "",
        "",
        "",
    ]
    assert favorite_row(Favorite("Skyr", 63, 11, 0.2, 4))[0] == "skyr"


def test_date_column_returns_first_cells() -> None:
    assert date_column([["Datum"], ["05.05.2024", "x"], []]) == ["Datum", "05.05.2024", ""]


def test_source_column_round_trips_provenance() -> None:
    entry = FoodEntry(
        date=DateKey.parse("05.05.2024"),
        description="Brühe (barcode)",
        kcal=8,
        protein_g=0.5,
        fat_g=0.3,
        carbs_g=1,
        time="13:00",
        source=MacroSource.ESTIMATED,
    )

    manual = ["05.05.2024", "", "Apfel", "80", "", "", "", "???"]
    parsed = parse_food_rows([FOOD_HEADER, food_row(entry), manual])
    favorite = Favorite("Brühe", 8, 0.5, 0.3, 1, source=MacroSource.CATALOG)

    assert food_row(entry)[7] == "estimated"
    assert [item.source for item in parsed] == [MacroSource.ESTIMATED, None]
    assert favorite_row(favorite)[7] == "catalog"


def test_favorite_name_matches_requires_numeric_kcal() -> None:
    matches = favorite_name_matches("Name")

    assert matches(FAVORITES_HEADER) is False
    assert matches(["name", 100, 1, 1, 1, "g", ""]) is True
    assert matches(["NAME", "63"]) is True
    assert matches(["skyr", "63"]) is False
