"""Shared fixtures: a notifier that records messages instead of showing toasts."""

import pytest


class RecordingNotifier:
    def __init__(self) -> None:
        self.successes: list[str] = []
        self.errors: list[str] = []

    def success(self, message: str) -> None:
        self.successes.append(message)

    def error(self, message: str) -> None:
        self.errors.append(message)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
