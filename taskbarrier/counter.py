"""Countdown latch shared between dispatched entries and the waiting caller."""

from __future__ import annotations

import threading
import time

# Longest single Condition.wait; longer deadlines are waited out in slices.
_MAX_WAIT_SLICE = min(threading.TIMEOUT_MAX, 86400.0)


class CompletionCounter:
    """
    Thread-safe countdown with a timed wait.

    Each dispatched entry calls ``count_down`` once. The waiter blocks in
    ``wait`` until the count reaches zero, the deadline passes, or another
    thread calls ``cancel``. Count-downs arriving after the waiter has given
    up are absorbed; the count never goes below zero.
    """

    def __init__(self, count: int) -> None:
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")
        self._count = count
        self._cancelled = False
        self._cond = threading.Condition(threading.Lock())

    @property
    def count(self) -> int:
        with self._cond:
            return self._count

    @property
    def cancelled(self) -> bool:
        with self._cond:
            return self._cancelled

    def count_down(self) -> None:
        with self._cond:
            if self._count == 0:
                return
            self._count -= 1
            if self._count == 0:
                self._cond.notify_all()

    def cancel(self) -> None:
        """Wake any waiter; it returns False."""
        with self._cond:
            self._cancelled = True
            self._cond.notify_all()

    def wait(self, timeout: float | None) -> bool:
        """
        Block until the count reaches zero.

        Args:
            timeout: Seconds to wait. ``None`` waits without a deadline,
                as does ``inf``. ``<= 0`` only checks the current state.

        Returns:
            True if the count reached zero, False on deadline or cancel.
        """
        with self._cond:
            if timeout is not None and timeout <= 0:
                return self._count == 0 and not self._cancelled

            deadline = None if timeout is None else time.monotonic() + timeout
            while self._count > 0 and not self._cancelled:
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._cond.wait(min(remaining, _MAX_WAIT_SLICE))

            return self._count == 0 and not self._cancelled
