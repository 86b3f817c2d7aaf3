"""Common utility functions and helpers."""

from __future__ import annotations


def default_dict_factory() -> dict[str, object]:
    """Factory for mutable default dict in dataclass fields."""
    return {}


def handler_name(handler: object) -> str:
    """Return a readable identity for a handler class, instance or function."""
    if isinstance(handler, type):
        return handler.__name__
    if not hasattr(handler, "handle"):
        name = getattr(handler, "__qualname__", None)
        if isinstance(name, str):
            return name
    return type(handler).__name__
