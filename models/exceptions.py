"""
Error taxonomy for Spyglass.

None of these are fatal: every failure path hands control back to an
interactive-ready state.
"""

from typing import List, Optional


class SpyglassError(Exception):
    """Base class for all Spyglass errors."""


class ValidationError(SpyglassError):
    """Competitor input rejected before any external call is made."""

    def __init__(self, message: str, field_errors: Optional[List[str]] = None):
        super().__init__(message)
        self.field_errors = field_errors or []


class ExternalServiceError(SpyglassError):
    """The generation service failed (network, quota, malformed response)."""


class MediaDecodeError(SpyglassError):
    """Speech / audio payload could not be decoded."""


class PersistenceError(SpyglassError):
    """History could not be loaded or saved."""
