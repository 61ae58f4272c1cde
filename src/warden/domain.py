"""Domain models used throughout the framework."""

from dataclasses import dataclass
from typing import Any, Callable, FrozenSet, Optional, Union


@dataclass(frozen=True)
class RawInstance:
    """A registered value that is handed out as-is.

    Attributes:
        value: The service object. Cached factory results are stored this way too.
    """

    value: Any


@dataclass(frozen=True)
class Factory:
    """A registered callable that produces the service on first request.

    Attributes:
        func: The class or function invoked to build the service.
        manifest: The dependency manifest read from ``func``, or None if it declares none.
    """

    func: Callable
    manifest: Optional[dict[str, bool]]


RegisteredEntry = Union[RawInstance, Factory]
"""Type alias for anything the registry can hold under a service key."""


@dataclass(frozen=True)
class ResolvedPolicy:
    """The allow/deny key sets governing which dependencies a requester may access.

    Attributes:
        limited: Whether any allow or deny rule applies at all.
        allowed_keys: Keys explicitly allowed; these win over denials.
        denied_keys: Keys denied unless also allowed.
    """

    limited: bool
    allowed_keys: FrozenSet[str]
    denied_keys: FrozenSet[str]

    def permits(self, key: str) -> bool:
        if not self.limited:
            return True
        return key in self.allowed_keys or key not in self.denied_keys


UNLIMITED = ResolvedPolicy(False, frozenset(), frozenset())


@dataclass(frozen=True)
class SourceTrace:
    """Call-site traces recorded for a service key.

    Attributes:
        original: Where the key was first registered.
        latest: Where the key was most recently registered.
    """

    original: str
    latest: str
