"""Construction of services from their dependency manifests.

The resolver reads what a constructible declares it needs, checks the
requester's group policy, fetches each dependency (recursively building
factory-backed ones) and finally invokes the constructible with any extra
arguments followed by the dependency mapping::

    constructible(*args, {"db": db, "cache": cache})

Classes are instantiated natively, so the result is an instance of the class
unless ``__new__`` decides otherwise. A plain function's return value is the
service, whatever it is.
"""

from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from warden.diagnostics import DiagnosticsSink
from warden.errors import CyclicDependencyError, MissingDependencyError, PolicyDeniedError
from warden.groups import GroupIndex, GroupNames
from warden.manifest import describe, read_manifest

__all__ = ["Resolver"]


class Resolver:
    """Build constructibles, enforcing policies and detecting cycles.

    Args:
        groups: The group index consulted for requester policies.
        fetch: Looks a service up by key, returning None when absent.
        diagnostics: Sink for missing-manifest and optional-dependency notes.
        detect_cycles: Whether to track services currently being resolved.
    """

    def __init__(
        self,
        groups: GroupIndex,
        fetch: Callable[[str], Any],
        diagnostics: DiagnosticsSink,
        detect_cycles: bool = True,
    ):
        self._groups = groups
        self._fetch = fetch
        self._diagnostics = diagnostics
        self._detect_cycles = detect_cycles
        self._in_progress: list[str] = []

    def create(
        self,
        constructible: Callable,
        groups: GroupNames = None,
        requester: Optional[str] = None,
        args: tuple = (),
    ) -> Any:
        """Build ``constructible`` on behalf of a requester that is not registered."""
        return self.build(
            constructible,
            read_manifest(constructible),
            requester or describe(constructible),
            groups,
            args,
        )

    def build(
        self,
        constructible: Callable,
        manifest: Optional[dict[str, bool]],
        requester: str,
        groups: GroupNames,
        args: tuple = (),
    ) -> Any:
        """Resolve ``manifest`` and invoke ``constructible`` with the result.

        Args:
            constructible: Class or function producing the service.
            manifest: Its dependency manifest, or None if it declares none.
            requester: Name used in errors and diagnostics.
            groups: Groups the requester belongs to, for policy checks.
            args: Extra positional arguments passed before the dependency map.

        Returns:
            Whatever the constructible produces.

        Raises:
            PolicyDeniedError: If a declared dependency is denied to the
                requester's groups. Nothing is fetched in that case.
            MissingDependencyError: If a required dependency is absent.
        """
        if manifest is None:
            self._diagnostics.debug(
                f'The constructible "{describe(constructible)}" does not provide a '
                "service manifest. No services will be injected."
            )
            manifest = {}

        self._validate(manifest, requester, groups)
        dependencies = self._resolve(manifest, requester)
        return constructible(*args, dependencies)

    @contextmanager
    def resolving(self, key: str) -> Iterator[None]:
        """Mark ``key`` as being resolved for the duration of the block.

        Raises:
            CyclicDependencyError: If ``key`` is already being resolved.
        """
        if not self._detect_cycles:
            yield
            return

        if key in self._in_progress:
            cycle = self._in_progress[self._in_progress.index(key):] + [key]
            raise CyclicDependencyError(cycle)

        self._in_progress.append(key)
        try:
            yield
        finally:
            self._in_progress.pop()

    def _validate(self, manifest: dict[str, bool], requester: str, groups: GroupNames) -> None:
        policy = self._groups.aggregate_policy(groups)
        if not policy.limited:
            return

        for dependency in manifest:
            if not policy.permits(dependency):
                raise PolicyDeniedError(requester, dependency)

    def _resolve(self, manifest: dict[str, bool], requester: str) -> dict[str, Any]:
        dependencies = {}
        for dependency, required in manifest.items():
            service = self._fetch(dependency)
            if service is None:
                if required:
                    raise MissingDependencyError(requester, dependency)
                self._diagnostics.warning(f"Dependency not provided: {requester}({dependency})")

            dependencies[dependency] = service

        return dependencies
