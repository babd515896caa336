"""Errors raised by the note export pipeline and the video sources."""

from __future__ import annotations


class VidnoteError(Exception):
    """Base class for vidnote errors."""


class ValidationError(VidnoteError):
    """Export preconditions not met (missing video identity, no notes)."""


class TransportError(VidnoteError):
    """The outbound export call failed or returned a non-success response."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SourceUnavailableError(VidnoteError):
    """No video descriptors could be produced from a source."""


class QuotaExceededError(SourceUnavailableError):
    """The YouTube Data API quota is exhausted.

    ``partial`` holds whatever descriptors were fetched before the quota ran out.
    """

    def __init__(self, message: str, partial: list | None = None) -> None:
        super().__init__(message)
        self.partial = list(partial or [])
