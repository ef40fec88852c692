"""Unit test fixtures (scripted sequences and virtual clocks).

Provides deterministic upstream sequences so retry behaviour can be tested
without real time passing.
"""

import asyncio
from collections.abc import Callable

import pytest

from sequence_retry.sequence.timers import VirtualTimer


class ScriptedFactory:
    """
    Sequence factory that replays a script, one entry per call.

    Each entry is ``(values, error)``: the produced sequence yields
    ``values`` and then raises ``error`` (or completes when it is None).
    Calls beyond the script repeat its last entry.
    """

    def __init__(self, script: list[tuple[list, BaseException | None]]):
        self.script = list(script)
        self.calls = 0
        self.active = 0
        self.max_active = 0
        self.closed = 0
        self.__name__ = "scripted"

    def __call__(self):
        values, error = self.script[min(self.calls, len(self.script) - 1)]
        self.calls += 1
        return self._sequence(values, error)

    async def _sequence(self, values, error):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            for value in values:
                await asyncio.sleep(0)
                yield value
            if error is not None:
                raise error
        finally:
            self.active -= 1
            self.closed += 1


class HangingFactory:
    """Factory whose sequences yield ``values`` and then never terminate."""

    def __init__(self, values: list | None = None):
        self.values = values or []
        self.calls = 0
        self.started = 0
        self.closed = 0

    def __call__(self):
        self.calls += 1
        return self._sequence()

    async def _sequence(self):
        self.started += 1
        try:
            for value in self.values:
                yield value
            await asyncio.Event().wait()
            yield None  # unreachable, keeps this an async generator
        finally:
            self.closed += 1


class RecordingObserver:
    """Observer that records every signal it receives."""

    def __init__(self):
        self.values: list = []
        self.errors: list[BaseException] = []
        self.completed = 0

    def on_next(self, value) -> None:
        self.values.append(value)

    def on_error(self, error: BaseException) -> None:
        self.errors.append(error)

    def on_completed(self) -> None:
        self.completed += 1

    @property
    def terminated(self) -> bool:
        return bool(self.errors) or self.completed > 0


async def _wait_until(predicate: Callable[[], bool], steps: int = 200) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    for _ in range(steps):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


@pytest.fixture
def wait_until():
    """Coroutine function that yields to the loop until a predicate holds."""
    return _wait_until


@pytest.fixture
def virtual_timer() -> VirtualTimer:
    """Auto-advancing virtual timer: delays are recorded, none are waited."""
    return VirtualTimer()


@pytest.fixture
def manual_timer() -> VirtualTimer:
    """Virtual timer whose callbacks only fire on advance()."""
    return VirtualTimer(autoadvance=False)


@pytest.fixture
def make_factory():
    """Factory fixture to create ScriptedFactory instances.

    Usage:
        def test_something(make_factory):
            factory = make_factory([([], RuntimeError("boom")), ([42], None)])
    """
    def _create(script) -> ScriptedFactory:
        return ScriptedFactory(script)

    return _create


@pytest.fixture
def hanging_factory() -> HangingFactory:
    return HangingFactory()


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()
