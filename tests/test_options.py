from __future__ import annotations

import pytest
from pydantic import ValidationError

from ode_domain_engine.correlation import (
    generate_correlation_id,
    get_correlation_id,
    reset_correlation_id,
    set_correlation_id,
)
from ode_domain_engine.domain import Command
from ode_domain_engine.options import (
    DEFAULT_MAX_CASCADE_DEPTH,
    DeliveryMode,
    DomainOptions,
    HandlerFailurePolicy,
)


class DoThing(Command):
    pass


def test_defaults() -> None:
    options = DomainOptions.defaults()

    assert options.cache_runtime_model is False
    assert options.max_cascade_depth == DEFAULT_MAX_CASCADE_DEPTH == 50
    assert options.delivery is DeliveryMode.NONE
    assert options.failure_policy is HandlerFailurePolicy.FAIL_FAST


def test_max_cascade_depth_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        DomainOptions(max_cascade_depth=0)


def test_options_are_frozen() -> None:
    options = DomainOptions()

    with pytest.raises(ValidationError):
        options.max_cascade_depth = 3  # type: ignore[misc]


def test_delivery_mode_accepts_string_values() -> None:
    options = DomainOptions(delivery="broker")  # type: ignore[arg-type]

    assert options.delivery is DeliveryMode.BROKER


def test_commands_inherit_context_correlation() -> None:
    correlation_id = generate_correlation_id()
    token = set_correlation_id(correlation_id)
    try:
        command = DoThing()
    finally:
        reset_correlation_id(token)

    assert command.correlation_id == correlation_id
    assert get_correlation_id() is None
    assert DoThing().correlation_id is None
    assert command.command_type == "DoThing"
