"""Storage of service entries keyed by service key."""

from typing import Any, Iterator, Optional

from warden.diagnostics import DiagnosticsSink, SourceStacks, capture_source_stack, overwrite_message
from warden.domain import Factory, RawInstance, RegisteredEntry, SourceTrace
from warden.manifest import read_manifest

__all__ = ["ServiceRegistry", "as_entry"]


def as_entry(value: Any) -> RegisteredEntry:
    """Classify a registered value.

    Entries passed explicitly are kept as they are, which allows a callable to
    be registered as a plain value via ``RawInstance(func)``. Otherwise callables
    (classes, functions, partials) become factories and anything else a raw
    instance.
    """
    if isinstance(value, (RawInstance, Factory)):
        return value
    if callable(value):
        return Factory(value, read_manifest(value))
    return RawInstance(value)


class ServiceRegistry:
    """Key to entry store of a single injector.

    Registering an existing key replaces its entry and reports both the new and
    the original registration site. Consumers already holding the old instance
    keep it.
    """

    def __init__(self, diagnostics: DiagnosticsSink):
        self._diagnostics = diagnostics
        self._entries: dict[str, RegisteredEntry] = {}
        self._source_stacks = SourceStacks()

    def register(self, key: str, value: Any) -> None:
        stack = capture_source_stack()
        if key in self._entries:
            previous = self._source_stacks[key] if key in self._source_stacks else None
            self._diagnostics.warning(overwrite_message(key, stack, previous))

        self._entries[key] = as_entry(value)
        self._source_stacks.record(key, stack)

    def cache(self, key: str, instance: Any) -> None:
        """Store a built instance, replacing the factory that produced it."""
        self._entries[key] = RawInstance(instance)

    def entry(self, key: str) -> Optional[RegisteredEntry]:
        return self._entries.get(key)

    def source_trace(self, key: str) -> Optional[SourceTrace]:
        return self._source_stacks[key] if key in self._source_stacks else None

    def keys(self) -> Iterator[str]:
        return iter(list(self._entries))

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
