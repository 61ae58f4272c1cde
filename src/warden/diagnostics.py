"""Observational diagnostics: the sink protocol, its logging implementation and
registration call-site tracking.

Diagnostics never influence resolution; they only report overwritten keys,
missing optional dependencies and constructibles without a manifest.
"""

import logging
import os
import traceback
from typing import Optional, Protocol

from warden.domain import SourceTrace

__all__ = ["DiagnosticsSink", "LoggingDiagnostics", "SourceStacks", "capture_source_stack"]

logger = logging.getLogger(__name__.split(".")[0])

_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


class DiagnosticsSink(Protocol):  # pragma: no cover - structural type
    """Receiver for the injector's non-fatal messages."""

    def debug(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingDiagnostics:
    """Default sink forwarding to a stdlib logger (``warden`` unless given)."""

    def __init__(self, target: Optional[logging.Logger] = None):
        self._logger = target or logger

    def debug(self, message: str) -> None:
        self._logger.debug(message)

    def warning(self, message: str) -> None:
        self._logger.warning(message)

    def error(self, message: str) -> None:
        self._logger.error(message)


def capture_source_stack() -> str:
    """Format the current call stack, excluding frames inside this package.

    The result starts at the caller's registration site rather than at the
    injector's own registration path.
    """
    frames = [
        frame
        for frame in traceback.extract_stack()
        if not os.path.abspath(frame.filename).startswith(_PACKAGE_DIR + os.sep)
    ]
    return "".join(traceback.format_list(frames))


class SourceStacks:
    """Registration call sites keyed by service key.

    The first recorded stack for a key is kept for the registry's lifetime;
    later registrations only replace the latest one.
    """

    def __init__(self):
        self._original: dict[str, str] = {}
        self._latest: dict[str, str] = {}

    def record(self, key: str, stack: str) -> None:
        self._original.setdefault(key, stack)
        self._latest[key] = stack

    def __getitem__(self, key: str) -> SourceTrace:
        return SourceTrace(self._original[key], self._latest[key])

    def __contains__(self, key: str) -> bool:
        return key in self._latest


def overwrite_message(key: str, new_stack: str, trace: Optional[SourceTrace]) -> str:
    original = trace.original if trace else "<unknown>"
    return (
        f"Service '{key}' is being overwritten.\n"
        f"Newly defined at:\n{new_stack}"
        f"Originally defined at:\n{original}"
    )
