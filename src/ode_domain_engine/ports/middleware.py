"""IMiddleware — LIFO middleware protocol."""

from __future__ import annotations

from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
    runtime_checkable,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


@runtime_checkable
class IMiddleware(Protocol):
    """Protocol for middleware around command-handler invocation.

    The chain is applied in **LIFO** order (first registered = outermost) and
    wraps every command the engine executes, including cascaded ones.
    """

    async def __call__(
        self,
        message: Any,
        next_handler: Callable[[Any], Awaitable[Any]],
    ) -> Any:
        """Run middleware logic and call *next_handler* to proceed.

        Returns the events produced by the rest of the chain.
        """
        ...
