"""
taskbarrier: submit many, wait once.

Register independent actions, each bound to the executor that should run
it, then make one blocking call that dispatches them all concurrently and
waits, up to a timeout, for every one of them to finish.

Key Components:
    - Barrier / BarrierSession: register entries and wait for them
    - submit_task / wait_for: per-thread ambient form of the same API
    - CompletionCounter: countdown latch with timed wait and cancel
    - ThreadPerTaskExecutor / InlineExecutor: bundled execution contexts

Example:
    >>> from concurrent.futures import ThreadPoolExecutor
    >>> from taskbarrier import Barrier, TimeUnit
    >>> barrier = Barrier()
    >>> session = barrier.session()
    >>> with ThreadPoolExecutor(max_workers=3) as pool:
    ...     for page in range(3):
    ...         session.register(pool, lambda page=page: fetch_page(page))
    ...     all_done = session.wait_for(5, TimeUnit.SECONDS)
"""

from .barrier import (
    Barrier,
    BarrierResult,
    BarrierSession,
    WaitOutcome,
    current_session,
    default_barrier,
    submit_task,
    wait_for,
)
from .config import BarrierConfig, load_barrier_config
from .counter import CompletionCounter
from .errors import ActionFailure, BarrierError, EntryFailure, SubmissionFailure
from .executors import (
    ExecutionContext,
    InlineExecutor,
    ThreadPerTaskExecutor,
    as_execution_context,
)
from .registry import Registry, WorkEntry
from .units import TimeUnit, to_seconds

__all__ = [
    "Barrier",
    "BarrierResult",
    "BarrierSession",
    "WaitOutcome",
    "current_session",
    "default_barrier",
    "submit_task",
    "wait_for",
    "BarrierConfig",
    "load_barrier_config",
    "CompletionCounter",
    "ActionFailure",
    "BarrierError",
    "EntryFailure",
    "SubmissionFailure",
    "ExecutionContext",
    "InlineExecutor",
    "ThreadPerTaskExecutor",
    "as_execution_context",
    "Registry",
    "WorkEntry",
    "TimeUnit",
    "to_seconds",
]
