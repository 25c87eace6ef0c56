"""Ordered mirror lists with a shared failover cursor per service class."""

from __future__ import annotations

import logging
import os
import threading
from typing import Iterable, Optional

from .exceptions import EndpointOutOfRangeError
from .models import Endpoint, ServiceClass

logger = logging.getLogger(__name__)


class EndpointRegistry:
    """Thread-safe registry of mirrors in priority order.

    Each service class has its own ordered list (index 0 = most preferred)
    and a cursor marking the mirror currently in use. The cursor only moves
    forward through `advance()` and goes back to 0 through `reset()`.

    For STREAM_PROXY the effective list is the primary list with the HLS
    mirror appended after it.

    Mirror file format: `<service_class> <url>` per line, e.g.
    `stream_proxy https://pipedapi.example.org`.
    Lines starting with # are ignored (comments)
    Empty lines are ignored

    Example:
        >>> registry = EndpointRegistry(
        ...     {ServiceClass.STREAM_PROXY: ["https://a", "https://b"]},
        ...     hls_mirror="https://hls",
        ... )
        >>> registry.current(ServiceClass.STREAM_PROXY).url
        'https://a'
        >>> registry.advance(ServiceClass.STREAM_PROXY)
        True
    """

    _instance: Optional["EndpointRegistry"] = None
    _lock = threading.Lock()

    def __init__(
        self,
        mirrors: Optional[dict[ServiceClass, Iterable[str]]] = None,
        hls_mirror: Optional[str] = None,
    ):
        """Initialize the registry.

        Args:
            mirrors: Mirror URLs per service class, in priority order
            hls_mirror: Optional HLS-capable mirror appended to STREAM_PROXY
        """
        self._sequences: dict[ServiceClass, list[Endpoint]] = {
            service_class: [] for service_class in ServiceClass
        }
        self._cursors: dict[ServiceClass, int] = {
            service_class: 0 for service_class in ServiceClass
        }
        self._hls_endpoint: Optional[Endpoint] = None
        self._cursor_lock = threading.Lock()

        for service_class, urls in (mirrors or {}).items():
            self.extend(service_class, urls)
        if hls_mirror:
            self._hls_endpoint = Endpoint(hls_mirror, ServiceClass.STREAM_PROXY)

    def extend(self, service_class: ServiceClass, urls: Iterable[str]) -> None:
        """Append mirrors to the end of a service class list."""
        sequence = self._sequences[ServiceClass(service_class)]
        for url in urls:
            url = url.strip()
            if url:
                sequence.append(Endpoint(url, ServiceClass(service_class)))

    def load_file(self, file_path: str) -> int:
        """Append mirrors listed in a file.

        Args:
            file_path: Path to mirror file

        Returns:
            Number of mirrors loaded
        """
        if not file_path:
            logger.warning("No mirror file specified")
            return 0

        if not os.path.isabs(file_path):
            file_path = os.path.abspath(file_path)

        if not os.path.isfile(file_path):
            logger.error(f"Mirror file not found: {file_path}")
            return 0

        loaded = 0
        with open(file_path, "r", encoding="utf-8") as f:
            for line_number, line in enumerate(f, start=1):
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                parts = line.split()
                if len(parts) != 2:
                    logger.warning(
                        f"Skipping malformed mirror line {line_number} in {file_path}"
                    )
                    continue
                try:
                    service_class = ServiceClass(parts[0])
                except ValueError:
                    logger.warning(
                        f"Unknown service class '{parts[0]}' on line {line_number} "
                        f"in {file_path}"
                    )
                    continue
                self.extend(service_class, [parts[1]])
                loaded += 1

        logger.info(f"Loaded {loaded} mirrors from {file_path}")
        return loaded

    def endpoints(self, service_class: ServiceClass) -> list[Endpoint]:
        """Get the effective, ordered mirror list for a service class."""
        sequence = list(self._sequences[ServiceClass(service_class)])
        if service_class == ServiceClass.STREAM_PROXY and self._hls_endpoint:
            sequence.append(self._hls_endpoint)
        return sequence

    def cursor(self, service_class: ServiceClass) -> int:
        """Get the current cursor position for a service class."""
        with self._cursor_lock:
            return self._cursors[ServiceClass(service_class)]

    def endpoint_at(
        self, service_class: ServiceClass, index: Optional[int] = None
    ) -> Endpoint:
        """Get the mirror at `index` (the cursor when omitted).

        Raises:
            EndpointOutOfRangeError: If no mirror exists at that position
        """
        sequence = self.endpoints(service_class)
        if index is None:
            index = self.cursor(service_class)
        if not 0 <= index < len(sequence):
            raise EndpointOutOfRangeError(
                f"No {ServiceClass(service_class).value} mirror at index {index} "
                f"({len(sequence)} configured)"
            )
        return sequence[index]

    def current(self, service_class: ServiceClass) -> Endpoint:
        """Get the mirror the cursor points at.

        Raises:
            EndpointOutOfRangeError: If the list is empty
        """
        return self.endpoint_at(service_class)

    def advance(self, service_class: ServiceClass) -> bool:
        """Move the cursor to the next mirror.

        Returns:
            True if the cursor moved, False if it was already on the last mirror.
        """
        service_class = ServiceClass(service_class)
        length = len(self.endpoints(service_class))
        with self._cursor_lock:
            cursor = self._cursors[service_class]
            if cursor + 1 >= length:
                return False
            self._cursors[service_class] = cursor + 1
        logger.debug(
            f"{service_class.value} cursor advanced: {cursor} -> {cursor + 1}"
        )
        return True

    def reset(self, service_class: ServiceClass) -> None:
        """Point the cursor back at the most preferred mirror."""
        with self._cursor_lock:
            self._cursors[ServiceClass(service_class)] = 0

    @classmethod
    def initialize(
        cls,
        mirrors: Optional[dict[ServiceClass, Iterable[str]]] = None,
        hls_mirror: Optional[str] = None,
        mirror_file: Optional[str] = None,
    ) -> "EndpointRegistry":
        """Initialize the singleton instance.

        Should be called once at application startup.
        """
        with cls._lock:
            if cls._instance is None:
                cls._instance = cls(mirrors, hls_mirror)
                if mirror_file:
                    cls._instance.load_file(mirror_file)
            return cls._instance

    @classmethod
    def get_instance(cls) -> Optional["EndpointRegistry"]:
        """Get the singleton instance, or None if not initialized."""
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Reset the singleton instance (mainly for testing)."""
        with cls._lock:
            cls._instance = None
