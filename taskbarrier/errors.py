"""
Error taxonomy for the barrier.

None of these are raised out of ``wait_for``: dispatch wraps the underlying
exception into one of them for logging and for the ``on_failure`` hook, then
counts the entry as finished. Timeouts and cancellations are reported through
``WaitOutcome`` instead of exceptions.
"""

from __future__ import annotations


class BarrierError(Exception):
    """Base class for barrier errors."""


class EntryFailure(BarrierError):
    """A single registered entry did not finish successfully."""

    kind = "entry"

    def __init__(self, entry_index: int, cause: BaseException) -> None:
        super().__init__(f"{self.kind} failure in entry {entry_index}: {cause!r}")
        self.entry_index = entry_index
        self.cause = cause


class SubmissionFailure(EntryFailure):
    """The execution context refused to accept the entry."""

    kind = "submission"


class ActionFailure(EntryFailure):
    """The entry's action raised while running."""

    kind = "action"
