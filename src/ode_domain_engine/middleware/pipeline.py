"""build_pipeline — wrap a command handler in the engine's middlewares."""

from __future__ import annotations

from functools import partial
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Sequence

    from ..ports.middleware import IMiddleware

    Step = Callable[[Any], Awaitable[Any]]


def build_pipeline(middlewares: Sequence[IMiddleware], handler_fn: Step) -> Step:
    """Fold *middlewares* around *handler_fn*, first one outermost.

    ``build_pipeline([a, b], h)(cmd)`` runs ``a(cmd, b')`` where ``b'`` runs
    ``b(cmd, h)``.
    """
    step = handler_fn
    for middleware in reversed(middlewares):
        step = partial(_call_middleware, middleware, step)
    return step


async def _call_middleware(middleware: IMiddleware, inner: Step, command: Any) -> Any:
    return await middleware(command, inner)
