"""Domain error taxonomy."""


class LedgerError(Exception):
    """Base class for nutrition ledger errors."""


class MalformedDate(LedgerError, ValueError):
    """Raised when a day string is not a valid DD.MM.YYYY date."""

    def __init__(self, text: object) -> None:
        super().__init__(f"Malformed date: {text!r}")
        self.text = text


class TableMissing(LedgerError):
    """Raised when a logical table does not exist in the ledger store."""

    def __init__(self, table: str) -> None:
        super().__init__(f"Table missing: {table}")
        self.table = table


class StoreUnavailable(LedgerError):
    """Raised on transient ledger store failures."""


class NotFound(LedgerError):
    """Raised when no row matches a delete predicate."""


class UnparsableEstimate(LedgerError):
    """Raised when an estimation response cannot be parsed."""

    def __init__(self, message: str, raw_response: str) -> None:
        super().__init__(message)
        self.raw_response = raw_response
