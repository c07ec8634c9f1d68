"""Custom exceptions for the snapshot pipeline."""

from __future__ import annotations


class WvWScraperError(RuntimeError):
    """Base class for errors raised by the snapshot pipeline."""


class FeedError(WvWScraperError):
    """Raised when the matches feed cannot be fetched or is malformed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SnapshotStoreError(WvWScraperError):
    """Raised when a stored record cannot be read back."""

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key
