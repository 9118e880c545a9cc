"""
Execution contexts for barrier entries.

An execution context is whatever the caller wants an action to run on. The
barrier only needs ``execute(fn)``; ``as_execution_context`` adapts the
shapes callers usually have at hand:

    - ``concurrent.futures.Executor`` (e.g. ``ThreadPoolExecutor``)
    - objects exposing ``execute(fn)``
    - plain callables that take the function to run

Pool sizing and lifetime stay with the caller.
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Executor
from typing import Any, Callable, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

Action = Callable[[], Any]


@runtime_checkable
class ExecutionContext(Protocol):
    """Anything that can run a zero-argument callable."""

    def execute(self, fn: Action) -> None:
        ...


class FuturesExecutorContext:
    """Adapts a ``concurrent.futures.Executor``."""

    def __init__(self, executor: Executor) -> None:
        self._executor = executor

    @property
    def executor(self) -> Executor:
        return self._executor

    def execute(self, fn: Action) -> None:
        self._executor.submit(fn)

    def __repr__(self) -> str:
        return f"FuturesExecutorContext({self._executor!r})"


class CallableContext:
    """Adapts a plain ``runner(fn)`` callable."""

    def __init__(self, runner: Callable[[Action], Any]) -> None:
        self._runner = runner

    def execute(self, fn: Action) -> None:
        self._runner(fn)

    def __repr__(self) -> str:
        return f"CallableContext({self._runner!r})"


class InlineExecutor:
    """Runs each action synchronously on the submitting thread."""

    def execute(self, fn: Action) -> None:
        fn()

    def __repr__(self) -> str:
        return "InlineExecutor()"


class ThreadPerTaskExecutor:
    """
    Starts a new daemon thread for every action.

    Useful for short-lived fan-out where keeping a pool around is not worth
    it. After ``shutdown`` further submissions raise ``RuntimeError``.
    """

    _ids = itertools.count(1)

    def __init__(self, name_prefix: str = "taskbarrier_worker") -> None:
        self._name_prefix = name_prefix
        self._shutdown = False
        self._lock = threading.Lock()

    @property
    def is_shutdown(self) -> bool:
        return self._shutdown

    def execute(self, fn: Action) -> None:
        with self._lock:
            if self._shutdown:
                raise RuntimeError("cannot schedule new tasks after shutdown")
            name = f"{self._name_prefix}_{next(self._ids)}"
        thread = threading.Thread(target=fn, name=name, daemon=True)
        thread.start()

    def shutdown(self) -> None:
        with self._lock:
            self._shutdown = True
        logger.debug("ThreadPerTaskExecutor %s shut down", self._name_prefix)

    def __repr__(self) -> str:
        return f"ThreadPerTaskExecutor(name_prefix={self._name_prefix!r})"


def as_execution_context(obj: Any) -> ExecutionContext:
    """
    Normalise ``obj`` into an object with ``execute(fn)``.

    Raises:
        TypeError: If ``obj`` cannot run a callable.
    """
    if isinstance(obj, Executor):
        return FuturesExecutorContext(obj)
    if isinstance(obj, ExecutionContext):
        return obj
    if callable(obj):
        return CallableContext(obj)
    raise TypeError(
        f"Unsupported execution context: {type(obj).__name__}. "
        "Expected a concurrent.futures.Executor, an object with execute(fn), or a callable."
    )
