"""Audio stream selection by quality tier and codec preference."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .capabilities import OpusCapability
from .exceptions import NoMatchingStreamError
from .models import StreamDescriptor
from .variants import TrackVariantFilter

logger = logging.getLogger(__name__)

QUALITY_TIERS = ("low", "medium", "high")
CODECS = ("opus", "aac")
DEFAULT_QUALITY = "medium"

# itags per (quality, codec), most preferred first
QUALITY_PREFERENCES: dict[str, dict[str, list[int]]] = {
    "low": {
        "opus": [600, 249, 251],
        "aac": [599, 139, 140],
    },
    "medium": {
        "opus": [250, 249, 251],
        "aac": [139, 140],
    },
    "high": {
        "opus": [251],
        "aac": [140],
    },
}


class StreamSelector:
    """Pick one stream from a candidate set using a preference table.

    Tags are tried in preference order and the first tag with any matching
    candidate wins; later tags are never consulted once a match is found.

    Args:
        opus_capability: Answers whether opus can be played, used when the
            codec preference is "any"
        preferences: Override for QUALITY_PREFERENCES
    """

    def __init__(
        self,
        opus_capability: Optional[OpusCapability] = None,
        preferences: Optional[dict[str, dict[str, list[int]]]] = None,
    ):
        self.opus_capability = opus_capability or OpusCapability.fixed(False)
        self.preferences = preferences or QUALITY_PREFERENCES

    async def resolve_codec(self, codec: str) -> str:
        """Turn a codec preference ("opus", "aac" or "any") into a concrete codec."""
        if codec == "any":
            return "opus" if await self.opus_capability.supported() else "aac"
        if codec not in CODECS:
            raise ValueError(f"Unknown codec preference: {codec}")
        return codec

    def preferred_tags(self, quality: Optional[str], codec: str) -> list[int]:
        quality = quality or DEFAULT_QUALITY
        if quality not in self.preferences:
            raise ValueError(f"Unknown quality tier: {quality}")
        return self.preferences[quality][codec]

    @staticmethod
    def pick(
        descriptors: Sequence[StreamDescriptor], tags: Sequence[int]
    ) -> StreamDescriptor:
        """Return the first descriptor matching the first tag that has a match.

        Raises:
            NoMatchingStreamError: If no tag matches any descriptor
        """
        for tag in tags:
            for descriptor in descriptors:
                if descriptor.embeds_tag(tag):
                    return descriptor
        raise NoMatchingStreamError(
            f"No stream matches preferred itags {list(tags)}"
        )

    async def select(
        self,
        descriptors: Sequence[StreamDescriptor],
        quality: Optional[str] = None,
        codec: str = "any",
    ) -> StreamDescriptor:
        concrete_codec = await self.resolve_codec(codec)
        tags = self.preferred_tags(quality, concrete_codec)
        stream = self.pick(descriptors, tags)
        logger.debug(
            f"Selected itag {stream.encoding_tag} for "
            f"{quality or DEFAULT_QUALITY}/{concrete_codec}"
        )
        return stream


class StreamResolver:
    """Variant filtering followed by preference-based selection.

    Args:
        selector: Selector used after filtering
        stable_volume_preferred: Default for keeping DRC renditions
        quality: Default quality tier for calls that don't name one
        codec: Default codec preference for calls that don't name one
    """

    def __init__(
        self,
        selector: Optional[StreamSelector] = None,
        stable_volume_preferred: bool = False,
        quality: Optional[str] = None,
        codec: str = "any",
    ):
        self.selector = selector or StreamSelector()
        self.variant_filter = TrackVariantFilter(stable_volume_preferred)
        self.quality = quality
        self.codec = codec

    async def resolve_stream(
        self,
        descriptors: Sequence[StreamDescriptor],
        quality: Optional[str] = None,
        codec: Optional[str] = None,
        stable_volume: Optional[bool] = None,
    ) -> StreamDescriptor:
        """Choose the stream to play.

        Arguments left as None fall back to the resolver's defaults.

        Raises:
            NoMatchingStreamError: If filtering leaves nothing or no
                candidate matches the preference table
        """
        variant_filter = self.variant_filter
        if stable_volume is not None:
            variant_filter = TrackVariantFilter(stable_volume)
        candidates = variant_filter.apply(descriptors)
        if not candidates:
            raise NoMatchingStreamError("All streams were filtered out")
        return await self.selector.select(
            candidates, quality or self.quality, codec or self.codec
        )
