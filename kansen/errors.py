"""Exception types shared by the scraping pipeline and the game store."""
from __future__ import annotations


class KansenError(Exception):
    """Base class for errors raised by this package."""


class InputValidationError(KansenError, ValueError):
    """Raised when a year, month, date or visit argument is malformed."""


class FetchFailure(KansenError):
    """Raised when the schedule page could not be retrieved."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"Failed to fetch {url}: {message}")
        self.url = url
        self.message = message


class PersistenceFailure(KansenError):
    """Raised when the storage layer rejects a write."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail
