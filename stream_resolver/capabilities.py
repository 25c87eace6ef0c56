"""Playback capability probes, queried once per process."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)

CapabilityProbe = Callable[[], Awaitable[bool]]


class OpusCapability:
    """Cached answer to "can the player decode opus?".

    The probe runs at most once; concurrent callers wait for the same
    answer. A probe that raises is treated as "not supported".

    Args:
        probe: Async callable returning True when opus playback works
    """

    def __init__(self, probe: CapabilityProbe):
        self._probe = probe
        self._result: Optional[bool] = None
        self._lock = asyncio.Lock()

    @classmethod
    def fixed(cls, supported: bool) -> OpusCapability:
        """Build a capability with a known answer (no probing)."""

        async def probe() -> bool:
            return supported

        return cls(probe)

    @property
    def cached(self) -> Optional[bool]:
        """Cached answer, or None if the probe has not completed yet."""
        return self._result

    async def supported(self) -> bool:
        if self._result is not None:
            return self._result
        async with self._lock:
            if self._result is None:
                try:
                    self._result = bool(await self._probe())
                except Exception as e:
                    logger.warning(f"Opus capability probe failed: {e}")
                    self._result = False
                logger.debug(f"Opus playback supported: {self._result}")
        return self._result
