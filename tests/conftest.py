"""Shared fixtures: a scheduler wired to in-memory storage and a fixed clock."""

import sys
from datetime import UTC, datetime
from pathlib import Path

import pytest

_SRC_ROOT = Path(__file__).resolve().parents[1] / "src"
if str(_SRC_ROOT) not in sys.path:
    sys.path.insert(0, str(_SRC_ROOT))

from spaced_repetition import FixedClock, MemoryBackend, ReviewScheduler, ScriptedPrompter  # noqa: E402

START = datetime(2026, 1, 10, 9, 0, tzinfo=UTC)


class RecordingBackend(MemoryBackend):
    """MemoryBackend that counts writes so tests can assert on persistence."""

    def __init__(self) -> None:
        super().__init__()
        self.writes = 0

    def set_item(self, key: str, value: str) -> None:
        self.writes += 1
        super().set_item(key, value)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(START)


@pytest.fixture
def backend() -> RecordingBackend:
    return RecordingBackend()


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


@pytest.fixture
def scheduler(backend: RecordingBackend, clock: FixedClock, prompter: ScriptedPrompter) -> ReviewScheduler:
    return ReviewScheduler(backend, clock=clock, prompter=prompter)
