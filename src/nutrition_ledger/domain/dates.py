"""Calendar day keys in DD.MM.YYYY form."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from zoneinfo import ZoneInfo

from nutrition_ledger.domain.errors import MalformedDate

DATE_PARTS = 3
TWO_DIGIT_YEAR_LIMIT = 100
TWO_DIGIT_YEAR_BASE = 2000
DATE_COLUMN_LABELS = frozenset({"datum", "date"})


class Ordering(Enum):
    """Result of comparing two day keys."""

    BEFORE = "before"
    SAME = "same"
    AFTER = "after"


@dataclass(frozen=True, order=True)
class DateKey:
    """A calendar day without time, ordered by year, month, then day."""

    year: int
    month: int
    day: int

    def __post_init__(self) -> None:
        try:
            date(self.year, self.month, self.day)
        except ValueError as exc:
            raise MalformedDate(f"{self.day}.{self.month}.{self.year}") from exc

    @classmethod
    def parse(cls, text: object) -> "DateKey":
        """Parse a DD.MM.YYYY (or DD.MM.YY) string."""
        if not isinstance(text, str):
            raise MalformedDate(text)
        parts = text.strip().split(".")
        if len(parts) != DATE_PARTS or not all(_is_number(part) for part in parts):
            raise MalformedDate(text)
        day, month, year = (int(part) for part in parts)
        if year < TWO_DIGIT_YEAR_LIMIT:
            year += TWO_DIGIT_YEAR_BASE
        try:
            return cls(year=year, month=month, day=day)
        except MalformedDate as exc:
            raise MalformedDate(text) from exc

    @classmethod
    def from_date(cls, value: date) -> "DateKey":
        return cls(year=value.year, month=value.month, day=value.day)

    @classmethod
    def today(cls, timezone_name: str) -> "DateKey":
        """Return the current day in the given timezone."""
        return cls.from_date(datetime.now(tz=ZoneInfo(timezone_name)).date())

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    def to_text(self) -> str:
        """Render as zero-padded DD.MM.YYYY."""
        return f"{self.day:02d}.{self.month:02d}.{self.year:04d}"

    def shift(self, days: int) -> "DateKey":
        return DateKey.from_date(self.to_date() + timedelta(days=days))

    def __str__(self) -> str:
        return self.to_text()


def compare(a: DateKey, b: DateKey) -> Ordering:
    """Compare two day keys chronologically."""
    if a < b:
        return Ordering.BEFORE
    if a > b:
        return Ordering.AFTER
    return Ordering.SAME


def days_between(a: DateKey, b: DateKey) -> int:
    """Return the number of whole calendar days from a to b."""
    return (b.to_date() - a.to_date()).days


def is_date_label(text: object) -> bool:
    """Return True for header cells such as 'Datum'."""
    return isinstance(text, str) and text.strip().lower() in DATE_COLUMN_LABELS


def normalize_day_text(text: str) -> str:
    """Return the canonical text form of a day string."""
    return DateKey.parse(text).to_text()


def _is_number(part: str) -> bool:
    return part.isascii() and part.isdigit()
