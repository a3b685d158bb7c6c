"""Tests for roost.registry — three-phase bootstrap and injection."""

import logging

import pytest

from roost import controller, get, inject, service
from roost.discovery.descriptor import ComponentDescriptor, describe
from roost.discovery.scanner import PackageScanner, StaticScanner
from roost.errors import InjectionMiss, InstantiationError
from roost.markers import type_identity
from roost.registry import ComponentRegistry
from roost.routing.table import RouteTable

# Records constructor calls so ordering can be asserted.
EVENTS: list[str] = []


@service
class Database:
    def __init__(self) -> None:
        EVENTS.append("Database")


@service
class Repository:
    db = inject(Database)

    def __init__(self) -> None:
        EVENTS.append(f"Repository(db={self.db})")


@controller("/users")
class UserController:
    repo = inject(Repository)

    def __init__(self) -> None:
        # Services are fully wired before any controller is constructed.
        EVENTS.append("UserController")

    @get("/")
    def index(self) -> str:
        return "users"

    @get("/{id}")
    def show(self, id: str) -> str:
        return id


@controller("/orders")
class OrderController:
    repo = inject(Repository)
    missing = inject("nowhere.Missing")

    @get("/")
    def index(self) -> str:
        return "orders"


@service
class Exploding:
    def __init__(self) -> None:
        raise ValueError("boom")


@pytest.fixture(autouse=True)
def _reset_events() -> None:
    EVENTS.clear()


def _bootstrap(*components: type, **kwargs) -> ComponentRegistry:
    registry = ComponentRegistry(RouteTable(), **kwargs)
    registry.bootstrap(StaticScanner(*components).scan())
    return registry


class TestPhases:
    def test_services_before_controllers(self) -> None:
        _bootstrap(UserController, Repository, Database)
        assert EVENTS[-1] == "UserController"
        assert set(EVENTS[:2]) == {"Database", "Repository(db=None)"}

    def test_injection_between_services(self) -> None:
        registry = _bootstrap(Repository, Database)
        repo = registry.get(Repository)
        assert repo.db is registry.get(Database)

    def test_services_are_singletons(self) -> None:
        registry = _bootstrap(Database, Repository, UserController, OrderController)
        user = registry.controllers[0]
        order = registry.controllers[1]
        assert user.repo is order.repo
        assert EVENTS.count("Database") == 1

    def test_controller_injection(self) -> None:
        registry = _bootstrap(Database, Repository, UserController)
        (user,) = registry.controllers
        assert user.repo is registry.get(Repository)

    def test_routes_registered_in_order(self) -> None:
        registry = _bootstrap(Database, Repository, UserController, OrderController)
        assert [r.path for r in registry.route_table] == ["/users/", "/users/{id}", "/orders/"]

    def test_route_count_matches_operations(self) -> None:
        descriptors = StaticScanner(Database, Repository, UserController, OrderController).scan()
        registry = ComponentRegistry()
        registry.bootstrap(descriptors)
        declared = sum(len(d.operations) for d in descriptors if d.is_controller)
        assert len(registry.route_table) == declared

    def test_table_frozen_after_bootstrap(self) -> None:
        registry = _bootstrap(Database)
        assert registry.bootstrapped
        assert registry.route_table.frozen

    def test_bootstrap_twice_raises(self) -> None:
        registry = _bootstrap(Database)
        with pytest.raises(RuntimeError):
            registry.bootstrap([])

    def test_empty_descriptor_list(self) -> None:
        registry = _bootstrap()
        assert registry.services == {}
        assert len(registry.route_table) == 0


class TestFailureIsolation:
    def test_missing_dependency_is_recorded(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.WARNING, logger="roost.registry"):
            registry = _bootstrap(Database, Repository, OrderController)
        (order,) = registry.controllers
        assert order.missing is None
        assert order.repo is registry.get(Repository)
        (miss,) = registry.injection_misses
        assert isinstance(miss, InjectionMiss)
        assert (miss.owner, miss.slot, miss.capability) == (
            type_identity(OrderController),
            "missing",
            "nowhere.Missing",
        )
        assert "nowhere.Missing" in caplog.text

    def test_miss_does_not_block_routes(self) -> None:
        registry = _bootstrap(OrderController)
        assert [r.path for r in registry.route_table] == ["/orders/"]
        assert len(registry.injection_misses) == 2

    def test_failed_service_is_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.ERROR, logger="roost.registry"):
            registry = _bootstrap(Exploding, Database)
        assert Exploding not in registry
        assert Database in registry
        assert "boom" in caplog.text

    def test_unloadable_descriptor_is_skipped(self) -> None:
        registry = ComponentRegistry()
        registry.bootstrap(
            [
                ComponentDescriptor(name="no_such_module_xyz.Service", is_service=True),
                describe(Database),
            ]
        )
        assert list(registry.services) == [type_identity(Database)]

    def test_failed_controller_contributes_no_routes(self) -> None:
        @controller("/bad")
        class BadController:
            def __init__(self) -> None:
                raise RuntimeError("nope")

            @get("/")
            def index(self) -> str:
                return ""

        registry = _bootstrap(BadController, UserController)
        assert [r.path for r in registry.route_table] == ["/users/", "/users/{id}"]


class TestConstruct:
    def test_wraps_failure(self) -> None:
        with pytest.raises(InstantiationError, match="boom"):
            ComponentRegistry.construct(describe(Exploding))

    def test_loads_unresolved_type(self) -> None:
        instance = ComponentRegistry.construct(
            ComponentDescriptor(name="sample_app.services.LayoutService")
        )
        assert type(instance).__name__ == "LayoutService"


class TestProvided:
    def test_provided_instance_is_injectable(self) -> None:
        class Settings:
            pass

        @service
        class UsesSettings:
            settings = inject(Settings)

        settings = Settings()
        registry = _bootstrap(UsesSettings, provided=[settings])
        assert registry.get(UsesSettings).settings is settings
        assert registry.get(Settings) is settings


class TestLookup:
    def test_get_by_name_or_type(self) -> None:
        registry = _bootstrap(Database)
        assert registry.get(Database) is registry.get(type_identity(Database))

    def test_get_missing(self) -> None:
        assert _bootstrap().get(Database) is None

    def test_contains_rejects_other_types(self) -> None:
        assert 42 not in _bootstrap(Database)

    def test_services_is_a_copy(self) -> None:
        registry = _bootstrap(Database)
        registry.services.clear()
        assert Database in registry


class TestPackageBootstrap:
    def test_sample_app(self) -> None:
        registry = ComponentRegistry()
        registry.bootstrap(PackageScanner("sample_app").scan())
        assert [f"{r.method} {r.path}" for r in registry.route_table] == [
            "GET /",
            "GET /old-home",
            "GET /greet/{name}",
            "POST /greet/echo",
            "GET /greet/{first}/{second}",
        ]
        assert registry.injection_misses == []
