"""The injector: registration, lazy retrieval and construction of services.

An :class:`Injector` owns a registry of services, the groups they belong to
and the dependency policies declared between those groups. Services are
built on first request and cached as singletons.

Injectors may be layered: a child created with :meth:`Injector.create_child`
falls back to its parent for anything it does not define itself, while its
own registrations stay invisible to the parent.
"""

from functools import partial
from typing import Any, Callable, Mapping, Optional

from warden.diagnostics import DiagnosticsSink, LoggingDiagnostics
from warden.domain import Factory, RawInstance, SourceTrace
from warden.errors import UnknownGroupError
from warden.groups import GroupIndex, GroupNames
from warden.manifest import describe
from warden.registry import ServiceRegistry
from warden.resolver import Resolver
from warden.service_map import LazyService, ServiceMap
from warden.settings import InjectorSettings

__all__ = ["Injector", "Middleware"]

Middleware = Callable[[str], Any]
"""Fallback consulted with a service key when nothing is registered under it."""


class Injector:
    """Service registry with lazy singleton construction and group policies.

    Args:
        settings: Behavioural configuration; defaults to :class:`InjectorSettings`.
        diagnostics: Sink for warnings and debug notes; defaults to logging.
        parent: Injector to fall back to on lookup misses.

    Example:
        >>> injector = Injector()
        >>> injector.add_service("db", Database, groups="storage")
        >>>
        >>> @injects("db")
        ... def make_users(services):
        ...     return UserRepository(services["db"])
        >>>
        >>> injector.add_service("users", make_users, groups="repositories")
        >>> injector.get_service("users")
    """

    def __init__(
        self,
        settings: Optional[InjectorSettings] = None,
        diagnostics: Optional[DiagnosticsSink] = None,
        parent: Optional["Injector"] = None,
    ):
        self.settings = settings or InjectorSettings()
        self._diagnostics = diagnostics or LoggingDiagnostics()
        self._parent = parent
        self._registry = ServiceRegistry(self._diagnostics)
        self._groups = GroupIndex(parent._groups if parent else None)
        self._resolver = Resolver(
            self._groups, self.get_service, self._diagnostics, self.settings.detect_cycles
        )
        self._middleware: list[Middleware] = []

        self.add_service(self.settings.self_key, RawInstance(self), self.settings.self_group)

    # Registration

    def add_service(self, key: str, service: Any, groups: GroupNames = None) -> None:
        """Register ``service`` under ``key``, replacing any existing definition.

        Callables are treated as factories and built on first request; any
        other value is handed out as-is. Overwriting an existing key is not an
        error but is reported with both registration sites.

        Args:
            key: The service key.
            service: A factory, a class, a plain value, or an explicit
                :class:`~warden.domain.RawInstance`/:class:`~warden.domain.Factory`.
            groups: Group name(s) to add the key to; created as needed.
        """
        self._registry.register(key, service)
        self._groups.add_to_groups(groups, key)

    def add_new_service(self, key: str, service: Any, groups: GroupNames = None) -> None:
        """Register ``service`` unless ``key`` is already defined.

        The key is added to ``groups`` either way.
        """
        if key in self._registry:
            self._groups.add_to_groups(groups, key)
            return

        self.add_service(key, service, groups)

    def add_services(self, services: Mapping[str, Any], groups: GroupNames = None) -> None:
        for key, service in services.items():
            self.add_service(key, service, groups)

    def add_new_services(self, services: Mapping[str, Any], groups: GroupNames = None) -> None:
        for key, service in services.items():
            self.add_new_service(key, service, groups)

    def add_factory_middleware(self, middleware: Middleware) -> None:
        """Consult ``middleware`` for keys that are otherwise absent.

        Middleware is asked in registration order; the first non-None result
        is cached under the key.
        """
        self._middleware.append(middleware)

    # Policies

    def allow_group_dependency(self, group: str, dependency_group: str) -> None:
        """Allow members of ``group`` to depend on members of ``dependency_group``.

        An explicit allowance wins over any denial of the same key.
        """
        self._groups.allow_group_dependency(group, dependency_group)

    def deny_group_dependency(self, group: str, dependency_group: str) -> None:
        """Deny members of ``group`` access to members of ``dependency_group``."""
        self._groups.deny_group_dependency(group, dependency_group)

    # Retrieval

    def has_service(self, key: str) -> bool:
        return key in self._registry or bool(self._parent and self._parent.has_service(key))

    def get_service(self, key: str) -> Any:
        """Return the service registered under ``key``, building it if needed.

        Returns:
            The service, or None if neither this injector, its ancestors nor
            any middleware provide one.

        Raises:
            DependencyError: If building the service fails.
        """
        entry = self._registry.entry(key)
        if isinstance(entry, RawInstance):
            return entry.value
        if isinstance(entry, Factory):
            return self._build(key, entry)

        if self._parent is not None:
            service = self._parent.get_service(key)
            if service is not None:
                return service

        return self._from_middleware(key)

    def get_services(self, *groups: str) -> ServiceMap:
        """Return the services of the given groups, each key once.

        With no groups this is :meth:`get_all_services`. Keys keep the order of
        the first group listing them. Nothing is built until a key is accessed.

        Raises:
            UnknownGroupError: If ``strict_groups`` is set and a group is unknown.
        """
        if not groups:
            return self.get_all_services()

        cells: dict[str, LazyService] = {}
        for group in groups:
            if group not in self._groups:
                if self.settings.strict_groups:
                    raise UnknownGroupError(group)
                self._diagnostics.debug(f"Unknown service group '{group}'; no services returned for it.")
                continue

            for key in self._groups.members(group):
                if key not in cells and self.has_service(key):
                    cells[key] = self._cell(key)

        return ServiceMap(cells)

    def get_all_services(self) -> ServiceMap:
        """Return every service visible to this injector, without building any."""
        cells: dict[str, LazyService] = {}
        if self._parent is not None:
            inherited = self._parent.get_all_services()
            cells.update((key, inherited.cell(key)) for key in inherited)

        cells.update((key, self._cell(key)) for key in self._registry.keys())
        return ServiceMap(cells)

    def get_all_services_as(self, group: str) -> ServiceMap:
        """Return every service accessible to members of ``group``.

        A key is accessible when the group's policy explicitly allows it or
        does not deny it. An unlimited group sees everything.
        """
        services = self.get_all_services()
        policy = self._groups.resolve_policy(group)
        if not policy.limited:
            return services

        return ServiceMap({key: services.cell(key) for key in services if policy.permits(key)})

    def groups_of(self, key: str) -> list[str]:
        return self._groups.groups_of(key)

    def source_trace(self, key: str) -> Optional[SourceTrace]:
        """Return where ``key`` was first and most recently registered here."""
        return self._registry.source_trace(key)

    # Construction

    def create(self, constructible: Callable, *args: Any) -> Any:
        """Build ``constructible`` with its declared services injected.

        ``args`` are passed first, followed by the mapping of resolved
        services. The result is not cached.
        """
        return self.create_in_group(constructible, None, *args)

    def create_in_group(self, constructible: Callable, groups: GroupNames, *args: Any) -> Any:
        """Like :meth:`create`, enforcing the policies of ``groups``.

        Raises:
            PolicyDeniedError: If ``groups`` may not depend on a declared service.
            MissingDependencyError: If a required service is absent.
        """
        return self._resolver.create(constructible, groups, describe(constructible), args)

    def create_child(self) -> "Injector":
        """Create an injector that falls back to this one on lookup misses."""
        return Injector(self.settings, self._diagnostics, self)

    def _build(self, key: str, factory: Factory) -> Any:
        with self._resolver.resolving(key):
            instance = self._resolver.build(
                factory.func, factory.manifest, key, self._groups.groups_of(key)
            )

        self._registry.cache(key, instance)
        return instance

    def _cell(self, key: str) -> LazyService:
        entry = self._registry.entry(key)
        if isinstance(entry, RawInstance):
            return LazyService.of(entry.value)
        return LazyService(partial(self.get_service, key))

    def _from_middleware(self, key: str) -> Any:
        for middleware in self._middleware:
            service = middleware(key)
            if service is not None:
                self._registry.cache(key, service)
                return service

        return None
