"""Exception types raised by the ingestion pipeline."""

from __future__ import annotations


class GolfmxError(Exception):
    """Base class for pipeline errors."""


class FeedFetchError(GolfmxError):
    """An upstream feed returned a non-success status or an unparsable body."""

    def __init__(self, url: str, status_code: int | None = None, reason: str = "") -> None:
        self.url = url
        self.status_code = status_code
        self.reason = reason
        detail = f"status {status_code}" if status_code is not None else reason or "bad body"
        super().__init__(f"Failed to fetch DataGolf feed ({detail}): {url}")


class PersistenceError(GolfmxError):
    """A write or read against the store failed."""

    def __init__(self, step: str, message: str) -> None:
        self.step = step
        super().__init__(f"{step}: {message}")
