"""UnitOfWork — transaction scope with post-commit hooks."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    CommitHook = Callable[[], Awaitable[Any]]

logger = logging.getLogger("ode_domain.uow")


class UnitOfWork(ABC):
    """
    Base class for transaction scopes used by the engine.

    The engine's own :class:`~ode_domain_engine.context.ExecutionContext` is
    one. Hosts whose resources (a database session, repositories) must commit
    or roll back together with a cascade pass the engine a factory of these
    (``uow_factory``); the engine enters it, commits it after the event batch
    is appended and rolls it back on any failure.

    Hooks registered with :meth:`on_commit` run only after :meth:`commit`
    returned, and are dropped on rollback.

    Example:
        ```python
        class SessionUnitOfWork(UnitOfWork):
            def __init__(self, session):
                super().__init__()
                self._session = session

            async def commit(self):
                await self._session.commit()

            async def rollback(self):
                await self._session.rollback()
        ```
    """

    def __init__(self) -> None:
        self._commit_hooks: list[CommitHook] = []

    def on_commit(self, callback: CommitHook) -> None:
        """Register an async callback to run after a successful commit."""
        self._commit_hooks.append(callback)

    async def trigger_commit_hooks(self) -> None:
        """Run and clear the registered hooks in registration order.

        The transaction is already committed: a failing hook is logged and
        the remaining hooks still run.
        """
        hooks, self._commit_hooks = self._commit_hooks, []
        for hook in hooks:
            try:
                await hook()
            except Exception as exc:
                logger.error("Error in on_commit hook: %s", exc, exc_info=True)

    def discard_commit_hooks(self) -> None:
        self._commit_hooks = []

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...

    async def __aenter__(self) -> UnitOfWork:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        if exc_type is not None:
            await self.rollback()
            self.discard_commit_hooks()
            return
        await self.commit()
        await self.trigger_commit_hooks()
