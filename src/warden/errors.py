from typing import Sequence

__all__ = [
    "DependencyError",
    "MissingDependencyError",
    "PolicyDeniedError",
    "CyclicDependencyError",
    "UnknownGroupError",
]


class DependencyError(Exception):
    """Raised when a service's dependency cannot be resolved or is misdeclared."""

    pass


class MissingDependencyError(DependencyError):
    """Raised when a required dependency is absent from the registry."""

    def __init__(self, requester: str, dependency: str):
        super().__init__(f"Dependency not provided: {requester}({dependency})")
        self.requester = requester
        self.dependency = dependency


class PolicyDeniedError(DependencyError):
    """Raised when a requester's group policy denies access to a dependency."""

    def __init__(self, requester: str, dependency: str):
        super().__init__(f"Denied access to dependency: {requester}({dependency})")
        self.requester = requester
        self.dependency = dependency


class CyclicDependencyError(DependencyError):
    """Raised when resolving a service requires the service itself."""

    def __init__(self, cycle: Sequence[str]):
        super().__init__(f"Cyclic dependency: {' -> '.join(cycle)}")
        self.cycle = list(cycle)


class UnknownGroupError(DependencyError):
    """Raised in strict mode when a group name has never been declared."""

    def __init__(self, group: str):
        super().__init__(f"Unknown service group '{group}'")
        self.group = group
