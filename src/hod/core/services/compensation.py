"""
Two-phase write with best-effort compensation.

Every mutating command touches two stores: the task content store and the
dependency index. They cannot be updated atomically together, so commands
run a TwoPhaseWrite:

    phase 1: write_content()      PENDING -> CONTENT_WRITTEN
    phase 2: write_index()        CONTENT_WRITTEN -> INDEX_WRITTEN

If phase 2 fails, compensate() undoes phase 1 and the phase-2 error is
re-raised. If compensation also fails, the failure is logged, attached to
the phase-2 error, and the stores are left for ``hod sync`` to repair.
A phase-1 failure propagates untouched since nothing was written.

Usage:
    >>> saga = TwoPhaseWrite(
    ...     task_id="5",
    ...     action="create",
    ...     write_content=lambda: store.create("5", content),
    ...     write_index=lambda: index.update("5", entry),
    ...     compensate=lambda: store.delete("5"),
    ... )
    >>> saga.run()
    >>> saga.state
    <SagaState.INDEX_WRITTEN: 'index_written'>
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from hod.core.errors import HodError

logger = logging.getLogger(__name__)


class SagaState(str, Enum):
    """States of a two-phase write."""

    PENDING = "pending"
    CONTENT_WRITTEN = "content_written"
    INDEX_WRITTEN = "index_written"
    COMPENSATION_ATTEMPTED = "compensation_attempted"
    COMPENSATED = "compensated"
    COMPENSATION_FAILED = "compensation_failed"


@dataclass
class TwoPhaseWrite:
    """
    One content-store write followed by one index write.

    Attributes:
        task_id: Task the write is about (used in logs and notes)
        action: Short verb describing the write ("create", "update", ...)
        write_content: Phase 1 callable
        write_index: Phase 2 callable
        compensate: Undo for phase 1, run only if phase 2 fails
        state: Current state
        history: Every state entered, in order, starting with PENDING
        compensation_error: Error raised by compensate(), if any
    """

    task_id: str
    action: str
    write_content: Callable[[], Any]
    write_index: Callable[[], Any]
    compensate: Callable[[], Any]
    state: SagaState = SagaState.PENDING
    history: list[SagaState] = field(default_factory=lambda: [SagaState.PENDING])
    compensation_error: BaseException | None = None

    def _transition(self, state: SagaState) -> None:
        self.state = state
        self.history.append(state)

    @property
    def succeeded(self) -> bool:
        return self.state == SagaState.INDEX_WRITTEN

    def run(self) -> None:
        """
        Execute both phases, compensating if the index write fails.

        Raises:
            RuntimeError: If the write was already run
            Exception: The phase-1 error, or the phase-2 error after
                compensation was attempted
        """
        if self.state != SagaState.PENDING:
            raise RuntimeError(f"Two-phase write for task {self.task_id} already ran")

        self.write_content()
        self._transition(SagaState.CONTENT_WRITTEN)

        try:
            self.write_index()
        except Exception as error:
            self._compensate(error)
            raise

        self._transition(SagaState.INDEX_WRITTEN)

    def _compensate(self, error: Exception) -> None:
        self._transition(SagaState.COMPENSATION_ATTEMPTED)
        logger.debug(
            "Index write for %s of task %s failed, compensating: %s",
            self.action,
            self.task_id,
            error,
        )

        try:
            self.compensate()
        except Exception as compensation_error:
            self.compensation_error = compensation_error
            self._transition(SagaState.COMPENSATION_FAILED)
            logger.warning(
                "Could not roll back %s of task %s: %s. Run 'hod sync' to repair.",
                self.action,
                self.task_id,
                compensation_error,
            )
            if isinstance(error, HodError):
                error.compensation_error = compensation_error
            error.add_note(
                f"Rollback of {self.action} for task {self.task_id} failed: "
                f"{compensation_error}"
            )
            return

        self._transition(SagaState.COMPENSATED)
        error.add_note(f"{self.action.capitalize()} of task {self.task_id} was rolled back")
