"""
Shared fixtures: a fake clock and a fake harness whose children "run" for a
fixed number of simulated milliseconds, so scheduling decisions can be
checked without real sleeps.
"""

import io

import pytest

from core.clock import Clock
from core.errors import SpawnError


class FakeClock(Clock):
    def __init__(self, start: int = 0):
        self.now = start

    def now_ms(self) -> int:
        return self.now

    def sleep_ms(self, ms: int):
        self.advance(ms)

    def advance(self, ms: int):
        self.now += max(ms, 0)


class FakeChild:
    """Consumes simulated time only while running (between resume and pause)"""

    def __init__(self, command, duration, clock, error=False, pid=None):
        self.command = command
        self.duration = duration
        self.clock = clock
        self.error = error
        self.pid = pid
        self.output = "" if error else f"{command}\n"
        self.consumed = 0
        self.running = True
        self.resumed_at = clock.now_ms()
        self.signals = []

    def _used(self):
        if self.running:
            return self.consumed + self.clock.now_ms() - self.resumed_at
        return self.consumed

    def poll_exited(self):
        return self._used() >= self.duration

    def wait(self, timeout_ms=None):
        remaining = max(self.duration - self._used(), 0)
        if timeout_ms is None or remaining <= timeout_ms:
            self.clock.advance(remaining)
            return True
        self.clock.advance(timeout_ms)
        return False

    def pause(self):
        self.signals.append("STOP")
        if self.running:
            self.consumed += self.clock.now_ms() - self.resumed_at
            self.running = False

    def resume(self):
        self.signals.append("CONT")
        self.resumed_at = self.clock.now_ms()
        self.running = True

    def kill(self):
        self.signals.append("KILL")
        self.running = False

    def exited_abnormally(self):
        return False

    def read_output(self):
        return self.output

    def close(self):
        return self.output


class FakeHarness:
    """
    Args:
        durations: simulated run time per command text
        default: run time of commands not listed
        missing: program names that "cannot be executed"
        broken: commands whose spawn raises SpawnError
    """

    def __init__(self, clock, durations=None, default=10, missing=(), broken=()):
        self.clock = clock
        self.durations = dict(durations or {})
        self.default = default
        self.missing = set(missing)
        self.broken = set(broken)
        self.spawned = []
        self.children = []

    def spawn(self, command, non_blocking=True):
        self.spawned.append(command)
        if command in self.broken:
            raise SpawnError(f"could not spawn {command!r}: too many open files")
        program = command.split(" ")[0] if command else ""
        if not program or program in self.missing:
            child = FakeChild(command, 0, self.clock, error=True)
        else:
            child = FakeChild(command, self.durations.get(command, self.default),
                              self.clock, pid=1000 + len(self.spawned))
        self.children.append(child)
        return child

    def run_to_completion(self, command):
        child = self.spawn(command, non_blocking=False)
        child.wait()
        return child


class ScriptedSource:
    """Returns one prepared batch of lines per poll()"""

    def __init__(self, batches, close_at_end=True):
        self.batches = list(batches)
        self.close_at_end = close_at_end
        self.closed = False
        self.close_called = False

    def poll(self):
        if self.batches:
            batch = self.batches.pop(0)
        else:
            batch = []
        if not self.batches and self.close_at_end:
            self.closed = True
        return list(batch)

    def close(self):
        self.close_called = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def harness_factory(clock):
    def make(durations=None, default=10, missing=(), broken=()):
        return FakeHarness(clock, durations, default, missing, broken)
    return make


@pytest.fixture
def trace():
    return io.StringIO()
