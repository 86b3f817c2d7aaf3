"""DomainOptions — engine configuration."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

#: Default limit on cascade depth. The externally submitted command runs at
#: depth 0; every command raised from its events runs one level deeper.
DEFAULT_MAX_CASCADE_DEPTH = 50


class DeliveryMode(str, Enum):
    """Where the engine sends the events a command produced."""

    #: Persist and return only.
    NONE = "none"
    #: One-way dispatch after the commit point; raised commands are ignored.
    DISPATCHER = "dispatcher"
    #: Two-way, in-transaction; raised commands are executed in the cascade.
    BROKER = "broker"
    #: One-way, in-transaction, through a directly supplied event handler.
    EVENT_HANDLER = "event_handler"


class HandlerFailurePolicy(str, Enum):
    """What happens when one event handler fails."""

    #: Stop at the first failure and surface ``EventHandlerFailureError``.
    FAIL_FAST = "fail_fast"
    #: Log and record the failure, keep running the remaining handlers.
    BEST_EFFORT = "best_effort"


class DomainOptions(BaseModel):
    """Configuration of a :class:`~ode_domain_engine.engine.DomainEngine`.

    ``cache_runtime_model`` keeps the handler instances resolved from the
    bounded context model between calls. Only enable it for single-instance
    deployments where handlers hold no per-call state.
    """

    model_config = ConfigDict(frozen=True)

    cache_runtime_model: bool = False
    max_cascade_depth: int = Field(default=DEFAULT_MAX_CASCADE_DEPTH, ge=1)
    delivery: DeliveryMode = DeliveryMode.NONE
    failure_policy: HandlerFailurePolicy = HandlerFailurePolicy.FAIL_FAST

    @classmethod
    def defaults(cls) -> DomainOptions:
        return cls()
