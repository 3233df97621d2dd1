"""Shared test fixtures."""

import pytest


class FakeTerminal:
    """TerminalSurface that records everything written to it."""

    def __init__(self):
        self.writes: list[str] = []
        self.clear_count = 0
        self.focused = False
        self.fail_writes = False

    def write(self, text: str) -> None:
        if self.fail_writes:
            raise OSError("terminal closed")
        self.writes.append(text)

    def clear(self) -> None:
        self.clear_count += 1

    def focus(self) -> None:
        self.focused = True

    @property
    def output(self) -> str:
        return "".join(self.writes)

    def reset(self) -> None:
        self.writes.clear()


class FakeClock:
    """Monotonic clock advanced by hand, in seconds."""

    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000


@pytest.fixture
def terminal():
    return FakeTerminal()


@pytest.fixture
def clock():
    return FakeClock()
