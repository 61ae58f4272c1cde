import pytest

from warden.injector import Injector


class RecordingDiagnostics:
    def __init__(self):
        self.messages = []

    def debug(self, message):
        self.messages.append(("debug", message))

    def warning(self, message):
        self.messages.append(("warning", message))

    def error(self, message):
        self.messages.append(("error", message))

    def at(self, level):
        return [message for recorded_level, message in self.messages if recorded_level == level]


@pytest.fixture
def diagnostics() -> RecordingDiagnostics:
    return RecordingDiagnostics()


@pytest.fixture
def injector(diagnostics) -> Injector:
    return Injector(diagnostics=diagnostics)
