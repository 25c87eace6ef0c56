"""Multi-mirror resolution of audio streams, download links and listings.

This module picks among interchangeable service mirrors in priority order,
validates what they return, and fails over to the next mirror on error.

Example:
    >>> from stream_resolver import (
    ...     DownloadResolver, EndpointRegistry, FailoverController, ServiceClass,
    ...     StreamDescriptor, StreamResolver,
    ... )
    >>>
    >>> registry = EndpointRegistry.initialize(
    ...     {ServiceClass.STREAM_PROXY: ["https://pipedapi.example.org"]}
    ... )
    >>> stream = await StreamResolver().resolve_stream(
    ...     [StreamDescriptor.from_url(url) for url in stream_urls], "high", "opus"
    ... )
    >>> link = await DownloadResolver(notify=print).resolve_download("dQw4w9WgXcQ")
"""

from .capabilities import OpusCapability
from .download import DownloadResolver, classify_probe, parse_extraction_response
from .exceptions import (
    EndpointExhaustedError,
    EndpointOutOfRangeError,
    ExtractionError,
    HttpError,
    NoMatchingStreamError,
    PaginationBoundary,
    ResolverError,
    TransportError,
    ValidationFailedError,
)
from .failover import NEXTPAGE_ERROR, NO_DATA_FOUND, FailoverController
from .models import (
    DownloadRequest,
    Endpoint,
    ExtractionFailure,
    ExtractionSuccess,
    FailoverContext,
    ServiceClass,
    StreamDescriptor,
    ValidationOutcome,
    ValidationReason,
)
from .registry import EndpointRegistry
from .rewriter import URLRewriter
from .selector import QUALITY_PREFERENCES, StreamResolver, StreamSelector
from .variants import TrackVariantFilter

__all__ = [
    # Components
    "EndpointRegistry",
    "StreamSelector",
    "StreamResolver",
    "TrackVariantFilter",
    "URLRewriter",
    "DownloadResolver",
    "FailoverController",
    "OpusCapability",
    # Helpers
    "classify_probe",
    "parse_extraction_response",
    "QUALITY_PREFERENCES",
    "NEXTPAGE_ERROR",
    "NO_DATA_FOUND",
    # Models
    "Endpoint",
    "ServiceClass",
    "StreamDescriptor",
    "DownloadRequest",
    "ValidationOutcome",
    "ValidationReason",
    "FailoverContext",
    "ExtractionSuccess",
    "ExtractionFailure",
    # Exceptions
    "ResolverError",
    "NoMatchingStreamError",
    "EndpointOutOfRangeError",
    "EndpointExhaustedError",
    "ValidationFailedError",
    "ExtractionError",
    "TransportError",
    "HttpError",
    "PaginationBoundary",
]
