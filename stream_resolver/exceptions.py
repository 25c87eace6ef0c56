"""Resolver exception classes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models import ValidationOutcome


class ResolverError(Exception):
    """Base exception for resolution errors."""

    pass


class NoMatchingStreamError(ResolverError):
    """No stream candidate matches the quality/codec preference."""

    pass


class EndpointOutOfRangeError(ResolverError):
    """Requested endpoint does not exist for the service class."""

    pass


class EndpointExhaustedError(ResolverError):
    """Every endpoint for a request was tried and failed."""

    def __init__(self, message: str, last_error: str = ""):
        super().__init__(message)
        self.last_error = last_error


class ValidationFailedError(ResolverError):
    """A candidate media link was rejected by the validation probe."""

    def __init__(self, outcome: "ValidationOutcome"):
        super().__init__(outcome.describe())
        self.outcome = outcome


class TransportError(ResolverError):
    """Network failure or timeout while talking to an endpoint."""

    pass


class HttpError(TransportError):
    """Endpoint answered with a non-2xx status."""

    def __init__(self, status: int, message: Optional[str] = None):
        super().__init__(message or f"HTTP {status}")
        self.status = status


class PaginationBoundary(ResolverError):
    """Paged fetch ran past its last page. Not a failure."""

    pass


class ExtractionError(ResolverError):
    """Conversion service reported an error or sent an unusable body."""

    pass
