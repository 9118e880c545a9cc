"""
Submit many, wait once.

Callers register ``(executor, action)`` pairs against their own session and
later make a single ``wait_for`` call. That call detaches everything the
session registered, submits each action to its executor in registration
order, and blocks until every action has finished or the timeout elapses.

Architecture:
    - Registry holds pending entries per session key
    - CompletionCounter is created per wait and counted down once per entry
    - Action and submission failures are contained and logged, never raised

Example:
    >>> barrier = Barrier()
    >>> session = barrier.session()
    >>> with ThreadPoolExecutor(max_workers=4) as pool:
    ...     for page in range(4):
    ...         session.register(pool, lambda page=page: fetch(page))
    ...     ok = session.wait_for(10, TimeUnit.SECONDS)

    >>> # Or the per-thread ambient form
    >>> submit_task(pool, lambda: fetch(0))
    >>> submit_task(pool, lambda: fetch(1))
    >>> ok = wait_for(10, "seconds")
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
import weakref
from dataclasses import dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, Hashable, List

from .config import BarrierConfig
from .counter import CompletionCounter
from .errors import ActionFailure, EntryFailure, SubmissionFailure
from .executors import Action
from .registry import Registry, WorkEntry
from .units import TimeUnit, to_seconds

logger = logging.getLogger(__name__)


class WaitOutcome(Enum):
    """How a wait ended."""

    COMPLETED = "completed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"


@dataclass
class BarrierResult:
    """Result of one detach-dispatch-wait cycle.

    Counts are taken when the waiter returns. Entries still running after a
    timeout or cancel are neither completed nor failed in this snapshot.

    Attributes:
        outcome: How the wait ended
        entry_count: Number of entries detached and dispatched
        completed_count: Entries whose action returned normally
        failed_count: Entries whose action raised or could not be submitted
        elapsed_ms: Wall-clock time spent dispatching and waiting
    """

    outcome: WaitOutcome
    entry_count: int
    completed_count: int
    failed_count: int
    elapsed_ms: float

    @property
    def success(self) -> bool:
        return self.outcome is WaitOutcome.COMPLETED

    @property
    def outstanding_count(self) -> int:
        return self.entry_count - self.completed_count - self.failed_count


class _Dispatch:
    """Shared state of one wait: the counter plus per-entry bookkeeping."""

    def __init__(self, size: int) -> None:
        self.counter = CompletionCounter(size)
        self._finished: set[int] = set()
        self._failed = 0
        self._lock = threading.Lock()

    def finish(self, index: int, ok: bool) -> None:
        # An executor may run the wrapper inline and then raise; count once.
        with self._lock:
            if index in self._finished:
                return
            self._finished.add(index)
            if not ok:
                self._failed += 1
        self.counter.count_down()

    def snapshot(self) -> tuple[int, int]:
        with self._lock:
            return len(self._finished) - self._failed, self._failed


class Barrier:
    """
    Dispatcher that fans registered entries out and waits for all of them.

    Sessions created from the same Barrier share its Registry but never see
    each other's entries.
    """

    def __init__(
        self,
        config: BarrierConfig | None = None,
        registry: Registry | None = None,
    ) -> None:
        self._config = config or BarrierConfig()
        self._registry = registry or Registry()
        self._active: Dict[Hashable, List[_Dispatch]] = {}
        self._active_lock = threading.Lock()

    @property
    def config(self) -> BarrierConfig:
        return self._config

    @property
    def registry(self) -> Registry:
        return self._registry

    def session(self) -> "BarrierSession":
        """Open a new, empty session with its own registry slot."""
        return BarrierSession(self, uuid.uuid4().hex)

    def register(self, key: Hashable, executor: Any, action: Action) -> None:
        self._registry.register(key, executor, action)

    def pending(self, key: Hashable) -> int:
        return self._registry.pending(key)

    def wait_for(
        self,
        key: Hashable,
        timeout: float | timedelta | None = None,
        unit: TimeUnit | str | None = None,
    ) -> bool:
        """Dispatch ``key``'s entries and report whether all finished in time."""
        return self.run(key, timeout, unit).success

    def run(
        self,
        key: Hashable,
        timeout: float | timedelta | None = None,
        unit: TimeUnit | str | None = None,
    ) -> BarrierResult:
        """
        Detach, dispatch and wait for every entry registered under ``key``.

        Args:
            key: Session key whose entries are consumed
            timeout: Time to wait; ``None`` uses the configured default,
                ``<= 0`` checks once without blocking
            unit: Unit of ``timeout``; ``None`` uses the configured default

        Returns:
            BarrierResult describing the outcome. Never raises for failures
            of individual entries.
        """
        timeout_seconds = self._resolve_timeout(timeout, unit)
        entries = self._registry.detach(key)
        if not entries:
            return BarrierResult(WaitOutcome.COMPLETED, 0, 0, 0, 0.0)

        dispatch = _Dispatch(len(entries))
        start_time = time.monotonic()

        with self._active_lock:
            self._active.setdefault(key, []).append(dispatch)
        try:
            logger.debug("Dispatching %d entries for session %s", len(entries), key)
            for index, entry in enumerate(entries):
                self._dispatch_entry(index, entry, dispatch)
            finished = dispatch.counter.wait(timeout_seconds)
        finally:
            with self._active_lock:
                waits = self._active.get(key, [])
                if dispatch in waits:
                    waits.remove(dispatch)
                if not waits:
                    self._active.pop(key, None)

        elapsed_ms = (time.monotonic() - start_time) * 1000
        completed, failed = dispatch.snapshot()

        if finished:
            outcome = WaitOutcome.COMPLETED
        elif dispatch.counter.cancelled:
            outcome = WaitOutcome.CANCELLED
            logger.info(
                "Wait for session %s cancelled with %d/%d entries outstanding",
                key,
                len(entries) - completed - failed,
                len(entries),
            )
        else:
            outcome = WaitOutcome.TIMED_OUT
            logger.warning(
                "Wait for session %s timed out after %.1fms with %d/%d entries outstanding",
                key,
                elapsed_ms,
                len(entries) - completed - failed,
                len(entries),
            )

        return BarrierResult(
            outcome=outcome,
            entry_count=len(entries),
            completed_count=completed,
            failed_count=failed,
            elapsed_ms=elapsed_ms,
        )

    def cancel(self, key: Hashable) -> bool:
        """
        Cancel every wait currently blocked on ``key``.

        A key shared between threads may have several waits in flight; all
        of them return False.

        Returns:
            True if at least one wait was in progress.
        """
        with self._active_lock:
            waits = list(self._active.get(key, ()))
        for dispatch in waits:
            dispatch.counter.cancel()
        return bool(waits)

    def _dispatch_entry(self, index: int, entry: WorkEntry, dispatch: _Dispatch) -> None:
        def run_entry() -> None:
            ok = False
            try:
                entry.action()
                ok = True
            except Exception as e:
                self._report(ActionFailure(index, e))
            finally:
                dispatch.finish(index, ok)

        try:
            entry.context.execute(run_entry)
        except Exception as e:
            self._report(SubmissionFailure(index, e))
            dispatch.finish(index, False)

    def _report(self, failure: EntryFailure) -> None:
        if self._config.log_failures:
            if isinstance(failure, SubmissionFailure):
                logger.error(
                    "Entry %d could not be submitted: %s",
                    failure.entry_index,
                    str(failure.cause)[:200],
                )
            else:
                logger.warning(
                    "Entry %d failed: %s",
                    failure.entry_index,
                    str(failure.cause)[:200],
                )

        hook = self._config.on_failure
        if hook is None:
            return
        try:
            hook(failure)
        except Exception:
            logger.exception("on_failure hook raised for entry %d", failure.entry_index)

    def _resolve_timeout(
        self,
        timeout: float | timedelta | None,
        unit: TimeUnit | str | None,
    ) -> float:
        if timeout is None:
            return self._config.default_unit.to_seconds(self._config.default_timeout)
        return to_seconds(timeout, unit if unit is not None else self._config.default_unit)


class BarrierSession:
    """
    Handle for one calling context's pending work.

    A session is the explicit form of "the caller": pass it to whoever
    registers work, then call ``wait_for`` once. Entries registered after a
    wait belong to the next wait.

    Example:
        >>> with barrier.session() as session:
        ...     session.register(pool, task_a)
        ...     session.register(pool, task_b)
        ...     if not session.wait_for(5):
        ...         logger.warning("some tasks did not finish in time")
    """

    def __init__(self, barrier: Barrier, key: Hashable) -> None:
        self._barrier = barrier
        self._key = key

    @property
    def barrier(self) -> Barrier:
        return self._barrier

    @property
    def key(self) -> Hashable:
        return self._key

    @property
    def pending(self) -> int:
        return self._barrier.pending(self._key)

    def register(self, executor: Any, action: Action) -> None:
        self._barrier.register(self._key, executor, action)

    submit_task = register

    def wait_for(
        self,
        timeout: float | timedelta | None = None,
        unit: TimeUnit | str | None = None,
    ) -> bool:
        return self._barrier.wait_for(self._key, timeout, unit)

    def run(
        self,
        timeout: float | timedelta | None = None,
        unit: TimeUnit | str | None = None,
    ) -> BarrierResult:
        return self._barrier.run(self._key, timeout, unit)

    def cancel(self) -> bool:
        return self._barrier.cancel(self._key)

    def discard(self) -> int:
        """Drop pending entries without running them."""
        dropped = len(self._barrier.registry.detach(self._key))
        if dropped:
            logger.warning("Discarded %d pending entries for session %s", dropped, self._key)
        return dropped

    def __enter__(self) -> "BarrierSession":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.discard()

    def __repr__(self) -> str:
        return f"BarrierSession(key={self._key!r}, pending={self.pending})"


# Process-wide barrier backing the per-thread ambient API
_default_barrier: Barrier | None = None
_default_lock = threading.Lock()
_local = threading.local()


def default_barrier() -> Barrier:
    """Get or create the process-wide barrier (configured from environment)."""
    global _default_barrier
    if _default_barrier is None:
        with _default_lock:
            if _default_barrier is None:
                _default_barrier = Barrier(BarrierConfig.from_env())
    return _default_barrier


def current_session() -> BarrierSession:
    """Session owned by the calling thread on the default barrier."""
    barrier = default_barrier()
    session = getattr(_local, "session", None)
    if session is None or session.barrier is not barrier:
        session = barrier.session()
        # Drop the slot if the thread exits with entries still pending.
        weakref.finalize(session, barrier.registry.detach, session.key)
        _local.session = session
    return session


def submit_task(executor: Any, action: Action) -> None:
    """Register ``action`` to run on ``executor`` at the calling thread's next wait."""
    current_session().register(executor, action)


def wait_for(
    timeout: float | timedelta | None = None,
    unit: TimeUnit | str | None = None,
) -> bool:
    """Run everything the calling thread registered and wait for it."""
    return current_session().wait_for(timeout, unit)
