"""
Per-context registry of pending work.

Each calling context owns a slot keyed by a hashable identifier (a session
token, usually). Slots are created on first registration and removed whole
on ``detach``, so a slot is never left partially consumed.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Dict, Hashable, List

from .executors import Action, ExecutionContext, as_execution_context


@dataclass(frozen=True)
class WorkEntry:
    """One registered unit of work.

    Attributes:
        context: Execution context the action will be submitted to
        action: Zero-argument callable; its return value is ignored
    """

    context: ExecutionContext
    action: Action


class Registry:
    """
    Mapping from calling-context key to its ordered list of entries.

    Keys never see each other's entries. The internal lock makes ``register``
    and ``detach`` atomic even if one key is shared between threads.
    """

    def __init__(self) -> None:
        self._slots: Dict[Hashable, List[WorkEntry]] = {}
        self._lock = threading.Lock()

    def register(self, key: Hashable, executor: Any, action: Action) -> None:
        if not callable(action):
            raise TypeError(f"action must be callable, got {type(action).__name__}")
        entry = WorkEntry(context=as_execution_context(executor), action=action)
        with self._lock:
            self._slots.setdefault(key, []).append(entry)

    def detach(self, key: Hashable) -> List[WorkEntry]:
        """Remove and return every entry registered under ``key``."""
        with self._lock:
            entries = self._slots.pop(key, None)
        return entries or []

    def pending(self, key: Hashable) -> int:
        with self._lock:
            return len(self._slots.get(key, ()))

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._slots

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)
