from __future__ import annotations

from typing import Optional


class RSSFetchError(Exception):
    """Raised when an RSS/Atom feed cannot be fetched."""


class AITransformError(Exception):
    """Raised when an AI provider returns output that cannot be used."""


class PulseNewsError(Exception):
    """
    Base class for request-level failures.

    Carries an HTTP-like ``status`` and optional ``details`` so callers can map it
    straight onto an ``{"error": ..., "details": ...}`` response.
    """

    status = 500

    def __init__(self, message: str, *, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> dict:
        out = {"error": self.message}
        if self.details:
            out["details"] = self.details
        return out


class ConfigurationError(PulseNewsError):
    """A required capability credential is missing."""

    status = 500


class InvalidRequestError(PulseNewsError):
    status = 400


class NoFeedsError(PulseNewsError):
    status = 404


class NoContentError(PulseNewsError):
    """Zero candidates survived across every feed of the request."""

    status = 503


class ProcessingError(PulseNewsError):
    """Not a single article (not even a metadata fallback) could be produced."""

    status = 500


class ExtractionError(PulseNewsError):
    """Nothing usable could be extracted from the supplied URL or text."""

    status = 422
