"""Retry-with-next-mirror policy for paged and listed fetches."""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar

from .exceptions import EndpointOutOfRangeError, PaginationBoundary
from .models import Endpoint, FailoverContext, ServiceClass
from .registry import EndpointRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Raised by paged fetches when there is no further page; not a failure
NEXTPAGE_ERROR = "nextpage error"
# The mirror answered but has nothing for this request; other mirrors won't either
NO_DATA_FOUND = "No Data Found"


class FailoverController:
    """Advance a registry cursor and retry until a mirror works or none are left.

    The cursor is process-wide state shared by every operation on the same
    service class; two unrelated operations failing concurrently will both
    move it.

    Args:
        registry: Registry holding the mirror lists and cursors
        notify: Callable receiving the user-facing message on terminal failure
        service_class: Cursor used when a call does not name one
    """

    def __init__(
        self,
        registry: EndpointRegistry,
        notify: Optional[Callable[[str], None]] = None,
        service_class: ServiceClass = ServiceClass.STREAM_PROXY,
    ):
        self.registry = registry
        self.notify = notify
        self.service_class = service_class

    def _give_up(self, service_class: ServiceClass, message: str) -> None:
        logger.error(f"{service_class.value} request failed: {message}")
        if self.notify:
            self.notify(message)
        self.registry.reset(service_class)

    def _advance_for(self, service_class: ServiceClass, message: str) -> bool:
        if message == NO_DATA_FOUND:
            return False
        if not self.registry.advance(service_class):
            return False
        logger.warning(
            f"{service_class.value} mirror failed ({message}), retrying with "
            f"{self.registry.current(service_class).url}"
        )
        return True

    async def with_failover(
        self,
        message: str,
        retry_action: Callable[[], Any],
        service_class: Optional[ServiceClass] = None,
    ) -> Any:
        """Handle a failed fetch.

        Retries by calling `retry_action` after moving to the next mirror.
        The action is expected to re-issue the original request against the
        now-current mirror and to call back into this method if it fails
        again.

        Returns:
            Whatever `retry_action` returns, or None if it was not called
        """
        service_class = service_class or self.service_class

        if message == NEXTPAGE_ERROR:
            logger.debug("Pagination boundary reached")
            return None

        if self._advance_for(service_class, message):
            result = retry_action()
            if inspect.isawaitable(result):
                result = await result
            return result

        self._give_up(service_class, message)
        return None

    async def run(
        self,
        fetch: Callable[[Endpoint], Awaitable[T]],
        service_class: Optional[ServiceClass] = None,
    ) -> Optional[T]:
        """Call `fetch` against the current mirror, moving on after each failure.

        Any exception from `fetch` is a failed attempt whose message feeds the
        same policy as `with_failover`. `PaginationBoundary` ends the fetch
        quietly. The cursor is reset once the fetch succeeds.

        Returns:
            Result of the first successful fetch, or None
        """
        context = FailoverContext(service_class or self.service_class)

        while True:
            try:
                endpoint = self.registry.current(context.service_class)
            except EndpointOutOfRangeError as e:
                self._give_up(context.service_class, str(e))
                return None

            context.attempts += 1
            logger.debug(
                f"{context.service_class.value} attempt {context.attempts} "
                f"via {endpoint.url}"
            )
            try:
                result = await fetch(endpoint)
            except PaginationBoundary:
                logger.debug("Pagination boundary reached")
                return None
            except Exception as e:
                context.last_error_message = str(e) or type(e).__name__
            else:
                self.registry.reset(context.service_class)
                return result

            if context.last_error_message == NEXTPAGE_ERROR:
                logger.debug("Pagination boundary reached")
                return None
            if not self._advance_for(context.service_class, context.last_error_message):
                self._give_up(context.service_class, context.last_error_message)
                return None
