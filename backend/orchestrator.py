"""
Apply-sequence orchestrator.

Commits generated items (schedule items, breakdown steps) one at a time through
a caller-supplied commit coroutine, pausing between items and reporting
(committed, total) after each acknowledged commit.

A run moves idle -> running -> completed | aborted and never goes back. The
first failing commit aborts the run: earlier commits stay persisted, later items
are never attempted.
"""
import asyncio
import logging
import uuid
from enum import Enum
from typing import Awaitable, Callable, Generic, Optional, Sequence, TypeVar

from models import ApplyRunStatus

logger = logging.getLogger(__name__)

T = TypeVar("T")

ProgressCallback = Callable[[int, int], None]


class RunState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


class RunClosedError(Exception):
    """The run was closed by its initiator before all items were committed."""


class ApplySequence(Generic[T]):
    def __init__(
        self,
        items: Sequence[T],
        commit: Callable[[T], Awaitable[object]],
        pacing_s: float,
        completion_pause_s: float,
        on_progress: Optional[ProgressCallback] = None,
        owner_id: Optional[str] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.run_id = str(uuid.uuid4())
        self.items = list(items)
        self.commit = commit
        self.pacing_s = pacing_s
        self.completion_pause_s = completion_pause_s
        self.on_progress = on_progress
        self.owner_id = owner_id
        self._sleep = sleep

        self.state = RunState.IDLE
        self.committed = 0
        self.error: Optional[BaseException] = None
        self.failed_index: Optional[int] = None
        self.closed = False

    @property
    def total(self) -> int:
        return len(self.items)

    def close(self) -> None:
        """Stop before the next item. A commit already in flight is not interrupted."""
        self.closed = True

    async def run(self) -> RunState:
        if self.state is not RunState.IDLE:
            raise RuntimeError(f"Apply run {self.run_id} already {self.state.value}")

        self.state = RunState.RUNNING
        logger.info("Apply run %s started with %d item(s)", self.run_id, self.total)

        try:
            for index, item in enumerate(self.items):
                if self.closed:
                    return self._abort(index, RunClosedError("run closed before all items were added"))
                try:
                    await self.commit(item)
                except Exception as e:
                    return self._abort(index, e)

                self.committed = index + 1
                if self.on_progress is not None:
                    self.on_progress(self.committed, self.total)

                if index < self.total - 1:
                    await self._sleep(self.pacing_s)

            # Let progress visibly reach 100% before anything reacts to completion
            await self._sleep(self.completion_pause_s)
        except asyncio.CancelledError:
            # Cancellation still leaves the run in a terminal state
            if self.committed < self.total:
                self._abort(self.committed, RunClosedError("run cancelled before all items were added"))
            else:
                self.state = RunState.COMPLETED
            raise

        self.state = RunState.COMPLETED
        logger.info("Apply run %s completed (%d/%d)", self.run_id, self.committed, self.total)
        return self.state

    def _abort(self, index: int, error: BaseException) -> RunState:
        self.state = RunState.ABORTED
        self.failed_index = index
        self.error = error
        logger.warning(
            "Apply run %s aborted at item %d after %d/%d committed: %s",
            self.run_id, index, self.committed, self.total, error
        )
        return self.state

    def status(self) -> ApplyRunStatus:
        message = None
        if self.error is not None:
            message = (
                f"Some tasks could not be added ({self.committed} of {self.total} added): {self.error}"
            )
        return ApplyRunStatus(
            run_id=self.run_id,
            state=self.state.value,
            committed=self.committed,
            total=self.total,
            failed_index=self.failed_index,
            error=message,
        )
