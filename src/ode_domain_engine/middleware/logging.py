"""LoggingMiddleware — logs command execution details."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any

from ..ports.middleware import IMiddleware

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

logger = logging.getLogger("ode_domain.middleware")


class LoggingMiddleware(IMiddleware):
    """Logs each command handled — name, correlation_id, event count, duration."""

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._log = log or logger

    async def __call__(
        self,
        message: Any,
        next_handler: Callable[[Any], Awaitable[Any]],
    ) -> Any:
        msg_name = type(message).__name__
        self._log.info(
            "Handling %s (correlation_id=%s)",
            msg_name,
            getattr(message, "correlation_id", None),
        )
        start = time.perf_counter()
        try:
            events = await next_handler(message)
        except Exception:
            elapsed = (time.perf_counter() - start) * 1000
            self._log.exception("%s failed after %.2fms", msg_name, elapsed)
            raise
        elapsed = (time.perf_counter() - start) * 1000
        self._log.info(
            "%s produced %d event(s) in %.2fms",
            msg_name,
            len(events or ()),
            elapsed,
        )
        return events
