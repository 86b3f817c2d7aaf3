"""Command base class — immutable intent to change state."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field

from ..correlation import get_correlation_id


class Command(BaseModel):
    """
    Base for all commands.

    Commands represent write operations that change domain state. They:
    - Are named with imperative verbs (e.g., CreateOrder, ReserveStock)
    - Are routed by their class to exactly one command handler
    - Are never persisted themselves; only the events they produce are

    The ``correlation_id`` is inherited from the current context (see
    :func:`~ode_domain_engine.correlation.get_correlation_id`), so a command
    raised by an event handler during a cascade joins the cascade's
    correlation. ``causation_id`` is the ``event_id`` of the event whose
    handler raised this command; the engine fills it in when missing.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    command_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    correlation_id: str | None = Field(default_factory=get_correlation_id)
    causation_id: str | None = None

    @property
    def command_type(self) -> str:
        return type(self).__name__


def enrich_command(
    command: Command,
    *,
    correlation_id: str | None = None,
    causation_id: str | None = None,
) -> Command:
    """Return a copy of *command* with missing tracing IDs filled in."""
    updates: dict[str, str] = {}
    if correlation_id and not command.correlation_id:
        updates["correlation_id"] = correlation_id
    if causation_id and not command.causation_id:
        updates["causation_id"] = causation_id

    if not updates:
        return command

    return command.model_copy(update=updates)
