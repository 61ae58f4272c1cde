import pytest

from warden.domain import RawInstance
from warden.errors import CyclicDependencyError, MissingDependencyError
from warden.injector import Injector
from warden.manifest import injects
from warden.settings import InjectorSettings


class Database:
    def __init__(self, services):
        self.services = services


class ReadOnlyDatabase(Database):
    pass


@injects("db", optional=["cache"])
class Repository:
    def __init__(self, services):
        self.db = services["db"]
        self.cache = services["cache"]


def counting_factory(value=None):
    calls = []

    def factory(services):
        calls.append(services)
        return value if value is not None else object()

    return factory, calls


def test_returns_registered_raw_instances(injector):
    injector.add_services({"a": {"raw": True}}, groups="test")

    assert injector.get_service("a") == {"raw": True}


def test_returns_registered_primitives(injector):
    injector.add_service("a", "A")

    assert injector.get_service("a") == "A"


def test_callables_can_be_registered_as_raw_instances(injector):
    def greeter(name):
        return f"Hello {name}"

    injector.add_service("greeter", RawInstance(greeter))

    assert injector.get_service("greeter") is greeter


def test_creates_service_with_registered_factory(injector):
    injector.add_service("a", lambda services: {"created": True})

    assert injector.get_service("a") == {"created": True}


def test_creates_instances_of_registered_classes(injector):
    injector.add_service("db", ReadOnlyDatabase)

    db = injector.get_service("db")
    assert isinstance(db, ReadOnlyDatabase)
    assert isinstance(db, Database)


def test_factory_return_value_is_the_service(injector):
    expected = object()
    injector.add_service("y", lambda services: expected)

    assert injector.get_service("y") is expected


def test_factory_may_return_primitives(injector):
    injector.add_service("answer", lambda services: 42)

    assert injector.get_service("answer") == 42


def test_factory_is_invoked_once(injector):
    factory, calls = counting_factory()
    injector.add_service("a", factory)

    first = injector.get_service("a")
    second = injector.get_service("a")

    assert first is second
    assert len(calls) == 1


def test_absent_service_is_none(injector):
    assert injector.get_service("missing") is None


def test_injects_declared_dependencies(injector):
    injector.add_service("db", Database)
    injector.add_service("cache", {"hits": 0})
    injector.add_service("repository", Repository)

    repository = injector.get_service("repository")

    assert repository.db is injector.get_service("db")
    assert repository.cache == {"hits": 0}


def test_missing_optional_dependency_is_none_with_warning(injector, diagnostics):
    injector.add_service("db", Database)
    injector.add_service("repository", Repository)

    repository = injector.get_service("repository")

    assert repository.cache is None
    assert diagnostics.at("warning") == ["Dependency not provided: repository(cache)"]


def test_missing_required_dependency_raises(injector):
    injector.add_service("cache", {})
    injector.add_service("repository", Repository)

    with pytest.raises(MissingDependencyError, match=r"repository\(db\)") as excinfo:
        injector.get_service("repository")

    assert excinfo.value.requester == "repository"
    assert excinfo.value.dependency == "db"


def test_failed_construction_is_not_cached(injector):
    injector.add_service("repository", Repository)

    with pytest.raises(MissingDependencyError):
        injector.get_service("repository")

    injector.add_service("db", Database)
    assert isinstance(injector.get_service("repository"), Repository)


def test_overwriting_a_service_replaces_it(injector, diagnostics):
    injector.add_service("x", "v1")
    injector.add_service("x", "v2")

    assert injector.get_service("x") == "v2"
    [warning] = diagnostics.at("warning")
    assert "Service 'x' is being overwritten." in warning

    trace = injector.source_trace("x")
    assert trace.original != trace.latest
    assert trace.original in warning
    assert trace.latest in warning


def test_overwriting_does_not_invalidate_handed_out_instances(injector):
    injector.add_service("db", Database)
    old = injector.get_service("db")

    injector.add_service("db", ReadOnlyDatabase)

    assert isinstance(injector.get_service("db"), ReadOnlyDatabase)
    assert type(old) is Database


def test_add_new_service_keeps_existing_value(injector, diagnostics):
    first = object()
    injector.add_service("a", first)
    injector.add_new_service("a", object(), groups="extra")

    assert injector.get_service("a") is first
    assert injector.groups_of("a") == ["extra"]
    assert diagnostics.at("warning") == []


def test_add_new_services_registers_missing_keys(injector):
    injector.add_service("a", "A")
    injector.add_new_services({"a": "other", "b": "B"}, groups=["g1", "g2"])

    assert injector.get_service("a") == "A"
    assert injector.get_service("b") == "B"
    assert list(injector.get_services("g1")) == ["a", "b"]


def test_injector_registers_itself(injector):
    assert injector.get_service("injector") is injector
    assert list(injector.get_services("injectors")) == ["injector"]


def test_create_passes_extra_arguments_before_services(injector):
    injector.add_service("a", "A")

    @injects("a")
    def build(first, second, services):
        return first, second, services

    assert injector.create(build, 1, 2) == (1, 2, {"a": "A"})


def test_create_does_not_cache(injector):
    first = injector.create(Database)
    second = injector.create(Database)

    assert first is not second
    assert injector.get_service("Database") is None


def test_create_names_requester_after_constructible(injector):
    with pytest.raises(MissingDependencyError, match=r"Repository\(db\)"):
        injector.create(Repository)


def test_constructible_without_manifest_gets_no_services(injector, diagnostics):
    def build(services):
        return services

    assert injector.create(build) == {}
    assert any('"test_constructible_without_manifest_gets_no_services.<locals>.build"' in m
               for m in diagnostics.at("debug"))


def test_cyclic_dependencies_are_detected(injector):
    injector.add_service("a", injects("b")(lambda services: "a"))
    injector.add_service("b", injects("c")(lambda services: "b"))
    injector.add_service("c", injects("a")(lambda services: "c"))

    with pytest.raises(CyclicDependencyError) as excinfo:
        injector.get_service("a")

    assert excinfo.value.cycle == ["a", "b", "c", "a"]
    assert "a -> b -> c -> a" in str(excinfo.value)


def test_cycle_detection_leaves_no_state_behind(injector):
    injector.add_service("a", injects("b")(lambda services: "a"))
    injector.add_service("b", injects("a")(lambda services: "b"))

    with pytest.raises(CyclicDependencyError):
        injector.get_service("a")

    injector.add_service("b", "B")
    assert injector.get_service("a") == "a"


def test_cycles_recurse_when_detection_is_disabled():
    injector = Injector(InjectorSettings(detect_cycles=False))
    injector.add_service("a", injects("a")(lambda services: "a"))

    with pytest.raises(RecursionError):
        injector.get_service("a")


def test_middleware_supplies_absent_services(injector):
    expected = object()
    requested = []

    def middleware(key):
        requested.append(key)
        return expected

    injector.add_factory_middleware(middleware)

    assert injector.get_service("abc") is expected
    assert injector.get_service("abc") is expected
    assert requested == ["abc"]


def test_middleware_is_not_consulted_for_registered_services(injector):
    requested = []
    injector.add_service("abc", "registered")
    injector.add_factory_middleware(requested.append)

    assert injector.get_service("abc") == "registered"
    assert requested == []


def test_middleware_is_consulted_in_order(injector):
    injector.add_factory_middleware(lambda key: None)
    injector.add_factory_middleware(lambda key: key.upper())
    injector.add_factory_middleware(lambda key: "unreachable")

    assert injector.get_service("abc") == "ABC"
