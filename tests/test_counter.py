"""
Unit tests for CompletionCounter.

Covers countdown, timed waits, non-blocking checks, cancellation and
late count-downs after the waiter has returned.
"""

from __future__ import annotations

import threading
import time

import pytest

from taskbarrier.counter import CompletionCounter


class TestCountDown:
    """Tests for count_down bookkeeping."""

    def test_negative_count_rejected(self) -> None:
        with pytest.raises(ValueError):
            CompletionCounter(-1)

    def test_count_down_reaches_zero(self) -> None:
        counter = CompletionCounter(2)
        counter.count_down()
        assert counter.count == 1
        counter.count_down()
        assert counter.count == 0

    def test_extra_count_down_is_ignored(self) -> None:
        """Late count-downs never push the count below zero."""
        counter = CompletionCounter(1)
        counter.count_down()
        counter.count_down()
        counter.count_down()
        assert counter.count == 0

    def test_concurrent_count_down_has_no_lost_updates(self) -> None:
        counter = CompletionCounter(200)
        threads = [
            threading.Thread(target=lambda: [counter.count_down() for _ in range(20)])
            for _ in range(10)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert counter.count == 0


class TestWait:
    """Tests for wait semantics."""

    def test_zero_count_returns_immediately(self) -> None:
        counter = CompletionCounter(0)
        assert counter.wait(0)
        assert counter.wait(-5)
        assert counter.wait(1.0)

    def test_non_blocking_check(self) -> None:
        counter = CompletionCounter(1)
        start = time.monotonic()
        assert counter.wait(0) is False
        assert counter.wait(-1) is False
        assert time.monotonic() - start < 0.1

    def test_wait_times_out(self) -> None:
        counter = CompletionCounter(1)
        start = time.monotonic()
        assert counter.wait(0.1) is False
        elapsed = time.monotonic() - start
        assert elapsed >= 0.09
        assert elapsed < 1.0

    def test_wait_released_by_other_thread(self) -> None:
        counter = CompletionCounter(1)
        timer = threading.Timer(0.05, counter.count_down)
        timer.start()
        try:
            assert counter.wait(2.0) is True
        finally:
            timer.cancel()

    def test_wait_without_deadline(self) -> None:
        counter = CompletionCounter(1)
        timer = threading.Timer(0.05, counter.count_down)
        timer.start()
        assert counter.wait(None) is True

    @pytest.mark.parametrize(
        "timeout",
        [float("inf"), threading.TIMEOUT_MAX * 2, 10**6 * 86400.0],
    )
    def test_huge_timeout_waits_without_overflow(self, timeout: float) -> None:
        """Timeouts past the platform limit behave like no deadline."""
        counter = CompletionCounter(1)
        timer = threading.Timer(0.05, counter.count_down)
        timer.start()
        try:
            assert counter.wait(timeout) is True
        finally:
            timer.cancel()

    def test_huge_timeout_still_honours_cancel(self) -> None:
        counter = CompletionCounter(1)
        timer = threading.Timer(0.05, counter.cancel)
        timer.start()
        assert counter.wait(float("inf")) is False

    def test_count_down_after_timeout_is_harmless(self) -> None:
        counter = CompletionCounter(1)
        assert counter.wait(0.01) is False
        counter.count_down()
        assert counter.count == 0


class TestCancel:
    """Tests for cancellation."""

    def test_cancel_wakes_waiter(self) -> None:
        counter = CompletionCounter(1)
        timer = threading.Timer(0.05, counter.cancel)
        timer.start()
        start = time.monotonic()
        assert counter.wait(5.0) is False
        assert time.monotonic() - start < 2.0
        assert counter.cancelled

    def test_cancelled_counter_does_not_block(self) -> None:
        counter = CompletionCounter(1)
        counter.cancel()
        assert counter.wait(5.0) is False
