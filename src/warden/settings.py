"""Configuration for :class:`~warden.injector.Injector`."""

from dataclasses import dataclass

__all__ = ["InjectorSettings"]


@dataclass(frozen=True)
class InjectorSettings:
    """Behavioural switches of an injector.

    Attributes:
        detect_cycles: Fail fast with CyclicDependencyError when a service
            depends on itself, directly or transitively. When disabled a cycle
            recurses until the interpreter's recursion limit is hit.
        strict_groups: Raise UnknownGroupError when retrieving an undeclared
            group instead of returning no services for it.
        self_key: Key under which every injector registers itself.
        self_group: Group holding the injector's own registration.
    """

    detect_cycles: bool = True
    strict_groups: bool = False
    self_key: str = "injector"
    self_group: str = "injectors"
