"""
Unit tests for the per-context Registry.
"""

from __future__ import annotations

import threading

import pytest

from taskbarrier.executors import InlineExecutor
from taskbarrier.registry import Registry, WorkEntry


def _noop() -> None:
    pass


class TestRegister:
    """Tests for register."""

    def test_register_creates_slot_lazily(self) -> None:
        registry = Registry()
        assert "a" not in registry
        registry.register("a", InlineExecutor(), _noop)
        assert "a" in registry
        assert registry.pending("a") == 1

    def test_register_preserves_order(self) -> None:
        registry = Registry()
        actions = [lambda i=i: i for i in range(5)]
        for action in actions:
            registry.register("a", InlineExecutor(), action)

        entries = registry.detach("a")
        assert [e.action for e in entries] == actions

    def test_register_rejects_non_callable_action(self) -> None:
        registry = Registry()
        with pytest.raises(TypeError):
            registry.register("a", InlineExecutor(), "not callable")
        assert "a" not in registry

    def test_register_rejects_unusable_executor(self) -> None:
        registry = Registry()
        with pytest.raises(TypeError):
            registry.register("a", 42, _noop)

    def test_entries_are_immutable(self) -> None:
        registry = Registry()
        registry.register("a", InlineExecutor(), _noop)
        entry = registry.detach("a")[0]
        assert isinstance(entry, WorkEntry)
        with pytest.raises(AttributeError):
            entry.action = _noop  # type: ignore[misc]


class TestDetach:
    """Tests for detach."""

    def test_detach_missing_key_returns_empty(self) -> None:
        assert Registry().detach("missing") == []

    def test_detach_removes_whole_slot(self) -> None:
        registry = Registry()
        registry.register("a", InlineExecutor(), _noop)
        registry.register("a", InlineExecutor(), _noop)

        assert len(registry.detach("a")) == 2
        assert "a" not in registry
        assert registry.detach("a") == []

    def test_register_after_detach_starts_fresh_slot(self) -> None:
        registry = Registry()
        registry.register("a", InlineExecutor(), _noop)
        registry.detach("a")
        registry.register("a", InlineExecutor(), _noop)
        assert registry.pending("a") == 1

    def test_keys_are_isolated(self) -> None:
        registry = Registry()
        registry.register("a", InlineExecutor(), _noop)
        registry.register("b", InlineExecutor(), _noop)
        registry.register("b", InlineExecutor(), _noop)

        assert len(registry.detach("a")) == 1
        assert registry.pending("b") == 2
        assert len(registry) == 1

    def test_shared_key_across_threads_loses_nothing(self) -> None:
        """Concurrent register/detach on one key accounts for every entry."""
        registry = Registry()
        detached: list[WorkEntry] = []
        stop = threading.Event()

        def drain() -> None:
            while not stop.is_set():
                detached.extend(registry.detach("shared"))

        def produce() -> None:
            for _ in range(500):
                registry.register("shared", InlineExecutor(), _noop)

        drainer = threading.Thread(target=drain)
        producers = [threading.Thread(target=produce) for _ in range(4)]
        drainer.start()
        for p in producers:
            p.start()
        for p in producers:
            p.join()
        stop.set()
        drainer.join()
        detached.extend(registry.detach("shared"))

        assert len(detached) == 2000
