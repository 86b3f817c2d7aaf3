"""Domain messages: commands and events."""

from __future__ import annotations

from .commands import Command, enrich_command
from .events import CASCADE_DEPTH_KEY, DomainEvent, enrich_event_metadata

__all__: list[str] = [
    "CASCADE_DEPTH_KEY",
    "Command",
    "DomainEvent",
    "enrich_command",
    "enrich_event_metadata",
]
