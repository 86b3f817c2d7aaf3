"""InMemoryUnitOfWork — host unit of work that records what happened to it."""

from __future__ import annotations

from ...ports.unit_of_work import UnitOfWork


class InMemoryUnitOfWork(UnitOfWork):
    """Stands in for a host transaction (e.g. a database session) in tests.

    Counts commits and rollbacks. Passing ``fail_on_commit=True`` makes
    :meth:`commit` raise; ``fail_on_rollback=True`` does the same for
    :meth:`rollback` (after counting it).
    """

    def __init__(
        self, *, fail_on_commit: bool = False, fail_on_rollback: bool = False
    ) -> None:
        super().__init__()
        self.fail_on_commit = fail_on_commit
        self.fail_on_rollback = fail_on_rollback
        self.entered = False
        self.commit_count = 0
        self.rollback_count = 0

    @property
    def committed(self) -> bool:
        return self.commit_count > 0

    @property
    def rolled_back(self) -> bool:
        return self.rollback_count > 0

    async def commit(self) -> None:
        if self.fail_on_commit:
            raise RuntimeError("host commit failed")
        self.commit_count += 1

    async def rollback(self) -> None:
        self.rollback_count += 1
        if self.fail_on_rollback:
            raise RuntimeError("host rollback failed")

    async def __aenter__(self) -> InMemoryUnitOfWork:
        self.entered = True
        return self


class InMemoryUnitOfWorkFactory:
    """Factory that remembers every unit of work it created."""

    def __init__(self, *, fail_on_commit: bool = False) -> None:
        self._fail_on_commit = fail_on_commit
        self.created: list[InMemoryUnitOfWork] = []

    def __call__(self) -> InMemoryUnitOfWork:
        uow = InMemoryUnitOfWork(fail_on_commit=self._fail_on_commit)
        self.created.append(uow)
        return uow

    @property
    def last(self) -> InMemoryUnitOfWork:
        return self.created[-1]
