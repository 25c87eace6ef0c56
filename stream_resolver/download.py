"""Download link resolution through third-party conversion services."""

import asyncio
import json
import logging
import threading
from typing import Any, Callable, Mapping, Optional, Sequence

import aiohttp
from aiohttp import ClientTimeout, TCPConnector

from data.config import config

from .exceptions import (
    EndpointExhaustedError,
    ExtractionError,
    HttpError,
    ValidationFailedError,
)
from .models import (
    DownloadRequest,
    Endpoint,
    ExtractionFailure,
    ExtractionResult,
    ExtractionSuccess,
    ServiceClass,
    ValidationOutcome,
)

logger = logging.getLogger(__name__)

Notifier = Callable[[str], None]

STREAMABLE_CONTENT_TYPES = ("audio/", "video/", "application/octet-stream")


def classify_probe(status: int, headers: Mapping[str, str]) -> ValidationOutcome:
    """Decide whether a HEAD response describes a usable media file.

    Streaming responses legitimately omit content-length, so a missing length
    is accepted when the content type names streamable media.

    Args:
        status: HTTP status of the probe
        headers: Response headers (case-insensitive mapping expected)

    Returns:
        ValidationOutcome with the verdict
    """
    if not 200 <= status < 300:
        return ValidationOutcome.http_error(status)

    content_length = headers.get("content-length")
    if content_length:
        try:
            if int(content_length) == 0:
                return ValidationOutcome.empty_body()
        except ValueError:
            return ValidationOutcome.ambiguous_content()
        return ValidationOutcome.valid()

    content_type = headers.get("content-type") or ""
    if any(marker in content_type for marker in STREAMABLE_CONTENT_TYPES):
        return ValidationOutcome.valid()
    return ValidationOutcome.ambiguous_content()


def parse_extraction_response(data: Any) -> ExtractionResult:
    """Decode a conversion-service JSON body into success or failure.

    Success carries a non-empty string `url`. Failure carries the service's
    `error` (a string, or an object with a `code`).
    """
    if not isinstance(data, dict):
        return ExtractionFailure("Unexpected response format")

    url = data.get("url")
    if isinstance(url, str) and url:
        return ExtractionSuccess(url)

    error = data.get("error")
    if error:
        if isinstance(error, str):
            return ExtractionFailure(error)
        if isinstance(error, dict) and error.get("code"):
            return ExtractionFailure(str(error["code"]))
        return ExtractionFailure(json.dumps(error))

    return ExtractionFailure("Unexpected response format")


class DownloadResolver:
    """Resolve a downloadable media URL by walking conversion services in order.

    The service list is fixed per resolver and walked top to bottom once per
    call; it does not share a cursor with EndpointRegistry. The first service
    whose link passes validation wins. Per-service failures are logged and
    recorded; if every service fails the caller is notified with the last
    recorded error and None is returned.

    Args:
        endpoints: Conversion-service URLs in priority order (default from config)
        notify: Callable receiving the user-facing failure message
        request_timeout: Timeout for the extraction request in seconds
        probe_timeout: Timeout for the validation probe in seconds
        session: Optional aiohttp.ClientSession to use instead of the shared
            connector

    Example:
        >>> resolver = DownloadResolver(notify=print)
        >>> url = await resolver.resolve_download("dQw4w9WgXcQ", "opus")
    """

    _aiohttp_connector: Optional[TCPConnector] = None
    _connector_lock = threading.Lock()

    def __init__(
        self,
        endpoints: Optional[Sequence[str]] = None,
        notify: Optional[Notifier] = None,
        request_timeout: Optional[float] = None,
        probe_timeout: Optional[float] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        download_config = config["download"]
        if endpoints is None:
            endpoints = download_config["instances"]
        self.endpoints: tuple[Endpoint, ...] = tuple(
            Endpoint(url, ServiceClass.CONVERSION_SERVICE) for url in endpoints
        )
        self.notify = notify
        self.request_timeout = request_timeout or download_config["request_timeout"]
        self.probe_timeout = probe_timeout or download_config["probe_timeout"]
        self.default_format = download_config["format"]
        self.headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": download_config["user_agent"],
        }
        self._session = session
        self.last_failure: Optional[EndpointExhaustedError] = None

    @classmethod
    def _get_connector(cls) -> TCPConnector:
        """Get or create the shared aiohttp connector."""
        with cls._connector_lock:
            if cls._aiohttp_connector is None or cls._aiohttp_connector.closed:
                cls._aiohttp_connector = TCPConnector(
                    ttl_dns_cache=300,
                    enable_cleanup_closed=True,
                )
            return cls._aiohttp_connector

    @classmethod
    async def close_connector(cls) -> None:
        """Close shared aiohttp connector. Call on application shutdown."""
        with cls._connector_lock:
            connector = cls._aiohttp_connector
            cls._aiohttp_connector = None
        if connector and not connector.closed:
            await connector.close()

    @staticmethod
    def source_url(media_id: str) -> str:
        return "https://youtu.be/" + media_id

    async def _request_extraction(
        self,
        session: aiohttp.ClientSession,
        endpoint: Endpoint,
        request: DownloadRequest,
    ) -> ExtractionResult:
        body = {
            "url": self.source_url(request.media_id),
            "downloadMode": "audio",
            "audioFormat": request.output_format,
            "filenameStyle": "basic",
        }
        async with session.post(
            endpoint.url,
            json=body,
            headers=self.headers,
            timeout=ClientTimeout(total=self.request_timeout),
        ) as response:
            if not 200 <= response.status < 300:
                raise HttpError(response.status)
            data = await response.json(content_type=None)
        return parse_extraction_response(data)

    async def validate(
        self, session: aiohttp.ClientSession, url: str
    ) -> ValidationOutcome:
        """Probe a candidate link with a HEAD request and classify it."""
        async with session.head(
            url,
            allow_redirects=True,
            timeout=ClientTimeout(total=self.probe_timeout),
        ) as response:
            return classify_probe(response.status, response.headers)

    async def _try_endpoint(
        self,
        session: aiohttp.ClientSession,
        endpoint: Endpoint,
        request: DownloadRequest,
    ) -> str:
        """Run the extraction and validation steps against one service.

        Returns:
            Validated download URL

        Raises:
            HttpError: Service answered with a non-2xx status
            ExtractionError: Service reported an error or sent an unusable body
            ValidationFailedError: Returned link failed validation
        """
        result = await self._request_extraction(session, endpoint, request)
        if isinstance(result, ExtractionFailure):
            raise ExtractionError(result.reason)

        logger.debug(f"Got potential download URL from {endpoint.url}: {result.url}")
        outcome = await self.validate(session, result.url)
        if not outcome.ok:
            raise ValidationFailedError(outcome)
        return result.url

    async def resolve(self, request: DownloadRequest) -> Optional[str]:
        """Resolve a download URL for the request.

        Returns:
            Validated download URL, or None when every service failed
        """
        if self._session is not None:
            return await self._resolve_with(self._session, request)

        async with aiohttp.ClientSession(
            connector=self._get_connector(),
            connector_owner=False,
        ) as session:
            return await self._resolve_with(session, request)

    async def _resolve_with(
        self, session: aiohttp.ClientSession, request: DownloadRequest
    ) -> Optional[str]:
        last_error = ""
        total = len(self.endpoints)

        for attempt, endpoint in enumerate(self.endpoints, start=1):
            logger.debug(
                f"Download attempt {attempt}/{total} for {request.media_id} "
                f"via {endpoint.url}"
            )
            try:
                url = await self._try_endpoint(session, endpoint, request)
            except (HttpError, ExtractionError, ValidationFailedError) as e:
                last_error = str(e)
            except asyncio.TimeoutError:
                last_error = f"Request timed out: {endpoint.url}"
            except Exception as e:
                last_error = str(e) or type(e).__name__
            else:
                logger.info(
                    f"Resolved download for {request.media_id} via {endpoint.url}"
                )
                self.last_failure = None
                return url

            logger.warning(
                f"Download service {attempt}/{total} {endpoint.url} failed: {last_error}"
            )

        self.last_failure = EndpointExhaustedError(
            f"Download failed: {last_error or 'All download services are unavailable'}. "
            "Please try again later.",
            last_error,
        )
        logger.error(
            f"All {total} download services failed for {request.media_id}. "
            f"Last error: {last_error}"
        )
        if self.notify:
            self.notify(str(self.last_failure))
        return None

    async def resolve_download(
        self, media_id: str, output_format: Optional[str] = None
    ) -> Optional[str]:
        """Resolve a download URL for a media id (format defaults to config)."""
        return await self.resolve(
            DownloadRequest(media_id, output_format or self.default_format)
        )
