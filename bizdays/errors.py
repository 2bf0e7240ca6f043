"""Exception types shared by the calculator, extractors, and router."""

from __future__ import annotations


class BizdaysError(Exception):
    """Base class for all bizdays failures."""


class InvalidDateError(BizdaysError, ValueError):
    """Raised when a reference date is not a real YYYY-MM-DD calendar date."""

    def __init__(self, value: object, reason: str = "expected YYYY-MM-DD") -> None:
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid date {value!r}: {reason}.")


class FeedLayoutError(BizdaysError, ValueError):
    """Raised when an upstream page no longer has the expected layout."""


class HolidayTableError(FeedLayoutError):
    """Raised when a holiday listing no longer has the expected table layout."""


class UnknownJurisdictionError(BizdaysError, KeyError):
    def __init__(self, slug: str) -> None:
        self.slug = slug
        super().__init__(slug)

    def __str__(self) -> str:
        return f"Unknown jurisdiction: {self.slug}"


class UpstreamFetchError(BizdaysError):
    """Raised when an upstream document cannot be retrieved."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"Could not fetch {url}: {message}")
