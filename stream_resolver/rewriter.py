"""URL rewriting for proxied streams and shareable listing links."""

from __future__ import annotations

import logging
from urllib.parse import parse_qs, urlsplit

from .models import ServiceClass
from .registry import EndpointRegistry

logger = logging.getLogger(__name__)


class URLRewriter:
    """Rewrite stream and listing URLs according to the active proxy policy.

    Args:
        registry: Registry whose STREAM_PROXY cursor is reset on each proxied
            resolution
        enforce_proxy: Always route streams through the mirror's proxy
        custom_instance: User configured their own mirror; never bypass it
        link_host: Base URL used for shareable links
        page_origin: Origin the application is served from
    """

    def __init__(
        self,
        registry: EndpointRegistry,
        enforce_proxy: bool = False,
        custom_instance: bool = False,
        link_host: str = "",
        page_origin: str = "",
    ):
        self.registry = registry
        self.enforce_proxy = enforce_proxy
        self.custom_instance = custom_instance
        self.link_host = link_host
        self.page_origin = page_origin

    def proxy(self, url: str) -> str:
        """Apply the proxy policy to a stream URL.

        Starts a fresh failover episode for STREAM_PROXY.
        """
        self.registry.reset(ServiceClass.STREAM_PROXY)

        link = urlsplit(url)
        origin = link.netloc
        host = parse_qs(link.query).get("host", [None])[0]

        if self.enforce_proxy:
            if host:
                return url
            separator = "&" if link.query else "?"
            return f"{url}{separator}host={origin}"

        if host and not self.custom_instance:
            logger.debug(f"Bypassing proxy: {origin} -> {host}")
            return url.replace(origin, host, 1)

        return url

    @staticmethod
    def _list_query(link: str) -> str:
        if "=" in link:
            return "playlists=" + link.split("=")[1]
        segments = link[1:].split("/")
        if segments[0] == "playlist":
            segments[0] = "playlists"
        return "=".join(segments)

    def listing_link(self, link: str) -> str:
        """Build an absolute shareable URL for a relative media or list link.

        Links are translated into the application's own routes only when the
        link host is served from the current page origin; any other link host
        gets the raw link appended.
        """
        if not (self.page_origin and self.page_origin in self.link_host):
            return self.link_host + link
        if link.startswith("/watch"):
            # "/watch?v=ID" -> "?s=ID"
            return self.link_host + "?s" + link[len("/watch?v"):]
        return self.link_host + "/list?" + self._list_query(link)

    @staticmethod
    def list_fetch_path(link: str) -> str:
        """Normalise a listing item link into the path used to fetch it."""
        if link.startswith("/channel"):
            return link
        return link.replace("?list=", "s/")
