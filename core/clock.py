"""
Millisecond time source used by the scheduling driver
"""

import time


class Clock:
    """
    Time source interface.

    Schedulers only read time and sleep through a Clock, so a test can hand
    them a fake one and run without real delays.
    """

    def now_ms(self) -> int:
        raise NotImplementedError("Subclasses must implement now_ms()")

    def sleep_ms(self, ms: int):
        raise NotImplementedError("Subclasses must implement sleep_ms()")


class SystemClock(Clock):
    """Monotonic wall clock"""

    def now_ms(self) -> int:
        return int(time.monotonic() * 1000)

    def sleep_ms(self, ms: int):
        if ms > 0:
            time.sleep(ms / 1000)
