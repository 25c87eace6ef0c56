"""Removal of unwanted audio-track variants before stream selection."""

from __future__ import annotations

import logging
from typing import Sequence

from .models import StreamDescriptor

logger = logging.getLogger(__name__)


class TrackVariantFilter:
    """Keep a single loudness variant and only original-language tracks.

    When the user prefers stable volume and at least one DRC rendition is
    available, only DRC renditions are kept; otherwise only non-DRC ones.
    Dubbed renditions are always dropped. The input sequence is not modified.
    """

    def __init__(self, stable_volume_preferred: bool = False):
        self.stable_volume_preferred = stable_volume_preferred

    def apply(self, descriptors: Sequence[StreamDescriptor]) -> list[StreamDescriptor]:
        use_drc = self.stable_volume_preferred and any(
            d.is_dynamic_range_compressed for d in descriptors
        )
        filtered = [
            d
            for d in descriptors
            if d.is_dynamic_range_compressed == use_drc and not d.is_dubbed_variant
        ]
        logger.debug(
            f"Variant filter kept {len(filtered)}/{len(descriptors)} streams "
            f"(drc={use_drc})"
        )
        return filtered
