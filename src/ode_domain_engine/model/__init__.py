"""Bounded context model: static registry and its runtime resolution."""

from __future__ import annotations

from .bounded_context import BoundedContextModel
from .runtime import RuntimeModel, RuntimeModelProvider

__all__ = ["BoundedContextModel", "RuntimeModel", "RuntimeModelProvider"]
