"""Data models shared by the resolution components."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

_itag_regex = re.compile(r"[?&]itag=(\d+)")

# Markers are matched in their percent-encoded form, as they appear inside
# the `xtags` query parameter of stream URLs.
DRC_MARKER = "drc%3D1"
DUBBED_MARKER = "acont%3Ddubbed"


class ServiceClass(str, Enum):
    """Kind of mirror an endpoint belongs to."""

    STREAM_PROXY = "stream_proxy"
    PLAYLIST_PROXY = "playlist_proxy"
    CONVERSION_SERVICE = "conversion_service"


@dataclass(frozen=True)
class Endpoint:
    """One mirror of a service.

    Attributes:
        url: Base URL of the mirror (no trailing slash)
        service_class: Which service this mirror provides
    """

    url: str
    service_class: ServiceClass

    def __post_init__(self) -> None:
        object.__setattr__(self, "url", self.url.rstrip("/"))


@dataclass(frozen=True)
class StreamDescriptor:
    """One available audio rendition of a media item.

    Attributes:
        url: Direct stream URL
        encoding_tag: Rendition identifier (itag) embedded in the URL
        is_dubbed_variant: Audio track is a dubbed (non-original) language
        is_dynamic_range_compressed: Audio track is the DRC "stable volume" variant
    """

    url: str
    encoding_tag: int
    is_dubbed_variant: bool = False
    is_dynamic_range_compressed: bool = False

    @classmethod
    def from_url(cls, url: str) -> StreamDescriptor:
        """Build a descriptor from a raw stream URL.

        The encoding tag is read from the `itag` query parameter (0 when
        absent); the variant flags are read from the xtags markers.
        """
        match = _itag_regex.search(url)
        return cls(
            url=url,
            encoding_tag=int(match.group(1)) if match else 0,
            is_dubbed_variant=DUBBED_MARKER in url,
            is_dynamic_range_compressed=DRC_MARKER in url,
        )

    def embeds_tag(self, tag: int) -> bool:
        """Check whether the URL carries the given itag."""
        return any(int(found) == tag for found in _itag_regex.findall(self.url))


@dataclass(frozen=True)
class DownloadRequest:
    """A single user download action."""

    media_id: str
    output_format: str


class ValidationReason(str, Enum):
    NONE = "none"
    HTTP_ERROR = "http_error"
    EMPTY_BODY = "empty_body"
    AMBIGUOUS_CONTENT = "ambiguous_content"


@dataclass(frozen=True)
class ValidationOutcome:
    """Verdict of a header-only probe against a candidate media link.

    Attributes:
        ok: Whether the link can be handed to the user
        reason: Why the link was rejected (NONE when ok)
        status: HTTP status for HTTP_ERROR rejections
    """

    ok: bool
    reason: ValidationReason = ValidationReason.NONE
    status: Optional[int] = None

    @classmethod
    def valid(cls) -> ValidationOutcome:
        return cls(ok=True)

    @classmethod
    def http_error(cls, status: int) -> ValidationOutcome:
        return cls(ok=False, reason=ValidationReason.HTTP_ERROR, status=status)

    @classmethod
    def empty_body(cls) -> ValidationOutcome:
        return cls(ok=False, reason=ValidationReason.EMPTY_BODY)

    @classmethod
    def ambiguous_content(cls) -> ValidationOutcome:
        return cls(ok=False, reason=ValidationReason.AMBIGUOUS_CONTENT)

    def describe(self) -> str:
        if self.reason is ValidationReason.HTTP_ERROR:
            return f"Download URL returned {self.status}"
        if self.reason is ValidationReason.EMPTY_BODY:
            return "Download URL has 0 bytes"
        if self.reason is ValidationReason.AMBIGUOUS_CONTENT:
            return "Download URL has unclear content"
        return "ok"


@dataclass
class FailoverContext:
    """State of one logical fetch and its retries."""

    service_class: ServiceClass
    last_error_message: str = ""
    attempts: int = 0


@dataclass(frozen=True)
class ExtractionSuccess:
    url: str


@dataclass(frozen=True)
class ExtractionFailure:
    reason: str


ExtractionResult = Union[ExtractionSuccess, ExtractionFailure]
