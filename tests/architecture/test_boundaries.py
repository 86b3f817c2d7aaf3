from pytest_archon import archrule


def test_domain_isolation() -> None:
    """
    Domain messages should be self-contained.
    They must not import the engine, delivery, adapters, ports or the context.
    """
    (
        archrule("domain_isolation")
        .match("ode_domain_engine.domain*")
        .should_not_import("ode_domain_engine.engine*")
        .should_not_import("ode_domain_engine.cqrs*")
        .should_not_import("ode_domain_engine.adapters*")
        .should_not_import("ode_domain_engine.ports*")
        .should_not_import("ode_domain_engine.context")
        .check("ode_domain_engine")
    )


def test_primitives_isolation() -> None:
    """
    Primitives layer is the lowest level.
    Outside of type annotations it must not import any other layer.
    """
    (
        archrule("primitives_isolation")
        .match("ode_domain_engine.primitives*")
        .should_not_import("ode_domain_engine.domain*")
        .should_not_import("ode_domain_engine.adapters*")
        .should_not_import("ode_domain_engine.ports*")
        .should_not_import("ode_domain_engine.model*")
        .should_not_import("ode_domain_engine.engine*")
        .check("ode_domain_engine", skip_type_checking=True)
    )


def test_ports_layering() -> None:
    """
    Ports (interfaces) should not depend on Adapters or on the engine.
    """
    (
        archrule("ports_layering")
        .match("ode_domain_engine.ports*")
        .should_not_import("ode_domain_engine.adapters*")
        .should_not_import("ode_domain_engine.engine*")
        .should_not_import("ode_domain_engine.cqrs*")
        .check("ode_domain_engine")
    )


def test_model_isolation() -> None:
    """
    The bounded context model is static configuration.
    It must not know about the engine or how events are delivered.
    """
    (
        archrule("model_isolation")
        .match("ode_domain_engine.model*")
        .should_not_import("ode_domain_engine.engine*")
        .should_not_import("ode_domain_engine.cqrs*")
        .should_not_import("ode_domain_engine.adapters*")
        .check("ode_domain_engine")
    )


def test_core_logic_does_not_use_adapters() -> None:
    """
    Engine, delivery and context work against ports only.
    In-memory adapters are plugins for tests and single-process hosts.
    """
    (
        archrule("core_adapters_isolation")
        .match("ode_domain_engine.engine*")
        .match("ode_domain_engine.cqrs*")
        .match("ode_domain_engine.context")
        .should_not_import("ode_domain_engine.adapters*")
        .check("ode_domain_engine")
    )


def test_delivery_does_not_depend_on_engine() -> None:
    """
    Dispatcher, broker and transactional handler sit below the engine.
    """
    (
        archrule("cqrs_below_engine")
        .match("ode_domain_engine.cqrs*")
        .should_not_import("ode_domain_engine.engine*")
        .check("ode_domain_engine")
    )
