"""Declaration and reading of dependency manifests.

A dependency manifest is an ordered mapping of service key to a ``required``
flag, attached to a class or factory function. The injector never inspects
parameter names; a constructible without a manifest receives no services.

Example:
    >>> @injects("db", "cache", optional=["metrics"])
    ... class UserRepository:
    ...     def __init__(self, services):
    ...         self.db = services["db"]
    >>>
    >>> read_manifest(UserRepository)
    {'db': True, 'cache': True, 'metrics': False}
"""

from typing import Any, Callable, Iterable, Mapping, Optional, Union

from warden.errors import DependencyError

__all__ = ["MANIFEST_ATTRIBUTE", "injects", "read_manifest", "describe"]

MANIFEST_ATTRIBUTE = "__service_types__"
_PLAIN_ATTRIBUTE = "service_types"

ManifestDeclaration = Union[Mapping[str, Any], Iterable[str]]


def injects(*required: str, optional: Iterable[str] = ()) -> Callable:
    """Decorator attaching a dependency manifest to a class or function.

    Args:
        *required: Keys that must be present for construction to succeed.
        optional: Keys bound to None with a warning when absent.

    Returns:
        A decorator that returns its target unchanged apart from the manifest slot.
    """
    def decorator(target: Any) -> Any:
        manifest = dict(getattr(target, MANIFEST_ATTRIBUTE, None) or {})
        manifest.update((key, True) for key in required)
        manifest.update((key, False) for key in optional)
        setattr(target, MANIFEST_ATTRIBUTE, manifest)
        return target

    return decorator


def read_manifest(target: Any) -> Optional[dict[str, bool]]:
    """Read the manifest declared on ``target``.

    The ``__service_types__`` slot set by :func:`injects` is preferred; a plain
    ``service_types`` attribute is accepted as well. A sequence of keys declares
    every key as required. Any flag other than an explicit ``False`` counts as
    required.

    Returns:
        The normalised manifest, or None if ``target`` declares none.

    Raises:
        DependencyError: If the declared manifest is neither a mapping nor a
            sequence of keys.
    """
    declared = getattr(target, MANIFEST_ATTRIBUTE, None)
    if declared is None:
        declared = getattr(target, _PLAIN_ATTRIBUTE, None)
    if declared is None:
        return None
    return _normalise(target, declared)


def _normalise(target: Any, declared: ManifestDeclaration) -> dict[str, bool]:
    if isinstance(declared, Mapping):
        return {key: flag is not False for key, flag in declared.items()}
    if isinstance(declared, (list, tuple)):
        return {key: True for key in declared}
    raise DependencyError(
        f"{describe(target)} declares a service manifest of type "
        f"{type(declared).__name__}; expected a mapping or a list of keys"
    )


def describe(target: Any) -> str:
    """Derive a requester name for diagnostics from a class or function."""
    return getattr(target, "__qualname__", None) or getattr(target, "__name__", None) or repr(target)
