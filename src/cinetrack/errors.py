from __future__ import annotations

import typing as t


class CinetrackError(Exception):
    """Base class for errors raised by cinetrack."""


class StoreError(CinetrackError):
    """A command against the key-value store failed."""


class StoreUnavailableError(StoreError):
    """The key-value store cannot be reached (not connected, circuit open, timeout)."""


class UpstreamError(CinetrackError):
    """The external metadata API returned an error or could not be reached."""

    def __init__(self, message: str, status_code: t.Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidRequestError(CinetrackError):
    """Caller supplied arguments the metadata service cannot serve."""
