"""Read-only views over several services with deferred construction.

Bulk retrieval must not build anything up front: each factory-backed key is
wrapped in a :class:`LazyService` cell which asks the injector for the service
on first access and remembers the answer.

Example:
    >>> services = injector.get_services("repositories")
    >>> "users" in services        # nothing built yet
    True
    >>> services["users"]          # builds (or fetches the cached) users service
"""

from typing import Any, Callable, Iterator, Mapping

__all__ = ["LazyService", "ServiceMap"]

_UNSET = object()


class LazyService:
    """Memoizing accessor for a single service."""

    def __init__(self, load: Callable[[], Any]):
        self._load = load
        self._value = _UNSET

    @classmethod
    def of(cls, value: Any) -> "LazyService":
        cell = cls(lambda: value)
        cell._value = value
        return cell

    @property
    def evaluated(self) -> bool:
        return self._value is not _UNSET

    def __call__(self) -> Any:
        if self._value is _UNSET:
            self._value = self._load()
        return self._value


class ServiceMap(Mapping[str, Any]):
    """Mapping of service key to service, evaluated per key on access.

    Iteration, ``len`` and membership tests never trigger construction.
    :meth:`cell` exposes the underlying accessor for callers that want to pass
    a deferred service around.
    """

    def __init__(self, cells: Mapping[str, LazyService]):
        self._cells = dict(cells)

    def cell(self, key: str) -> LazyService:
        return self._cells[key]

    def __getitem__(self, key: str) -> Any:
        return self._cells[key]()

    def __iter__(self) -> Iterator[str]:
        return iter(self._cells)

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, key: object) -> bool:
        return key in self._cells

    def __repr__(self) -> str:
        shown = ", ".join(
            f"{key!r}: {cell()!r}" if cell.evaluated else f"{key!r}: <lazy>"
            for key, cell in self._cells.items()
        )
        return f"ServiceMap({{{shown}}})"
