"""
Batch Scheduler - bounded-parallel execution of work units under a deadline.

Units are admitted in batches of ``concurrency_limit``. All units of a batch
run concurrently and are joined (settle-all) before the next batch is
admitted. Before each batch the scheduler checks the deadline; once it has
passed, no further batch is admitted and the run drains whatever is already
in flight.

Phases: IDLE -> ADMITTING -> DRAINING -> DONE
"""

import asyncio
import time
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Sequence

from config.logging_config import get_logger
from core.chunker import WorkUnit
from core.streaming import ProgressEmitter, ProgressEvent
from core.translator import TaskResult

from .run_state import RunState

logger = get_logger(__name__)


class SchedulerPhase(str, Enum):
    IDLE = "idle"
    ADMITTING = "admitting"
    DRAINING = "draining"
    DONE = "done"


ExecuteUnit = Callable[[WorkUnit], Awaitable[TaskResult]]


class BatchScheduler:
    """
    Runs work units with bounded parallelism.

    Attributes:
        execute_unit: Coroutine function translating one unit.
        emitter: Optional Progress Emitter for ``progress``/``metrics`` events.
        admission_margin: Seconds of headroom required before the deadline
            for a batch to be admitted.
        state: RunState of the most recent run.
        phase: Current phase.
    """

    def __init__(
        self,
        execute_unit: ExecuteUnit,
        emitter: Optional[ProgressEmitter] = None,
        clock: Callable[[], float] = time.monotonic,
        admission_margin: float = 0.0,
    ):
        self.execute_unit = execute_unit
        self.emitter = emitter
        self.admission_margin = admission_margin
        self._clock = clock
        self.state: Optional[RunState] = None
        self.phase = SchedulerPhase.IDLE

    async def run(
        self,
        units: Sequence[WorkUnit],
        concurrency_limit: int,
        deadline: float,
    ) -> Dict[int, TaskResult]:
        """
        Execute units batch by batch until done or the deadline passes.

        Args:
            units: Work units in admission order.
            concurrency_limit: Maximum units in flight (>= 1).
            deadline: Clock value after which no new batch is admitted.

        Returns:
            Settled results keyed by unit index. Units never admitted are
            absent.
        """
        if concurrency_limit < 1:
            raise ValueError(f"concurrency_limit must be >= 1, got {concurrency_limit}")

        state = RunState(total_units=len(units), started_at=self._clock(), deadline=deadline)
        self.state = state
        self.phase = SchedulerPhase.ADMITTING

        batches = [
            list(units[i:i + concurrency_limit])
            for i in range(0, len(units), concurrency_limit)
        ]

        for batch_num, batch in enumerate(batches, 1):
            if not self._can_admit(deadline):
                state.deadline_hit = True
                self.phase = SchedulerPhase.DRAINING
                logger.warning(
                    f"Deadline reached, stopping admission: "
                    f"{state.admitted}/{state.total_units} units admitted"
                )
                break

            logger.info(
                f"Admitting batch {batch_num}/{len(batches)} "
                f"(units {batch[0].index}-{batch[-1].index})"
            )
            state.admitted += len(batch)
            for unit in batch:
                await self._emit(ProgressEvent.progress(
                    message=f"Translating chunk {unit.index + 1} of {state.total_units}",
                    current_chunk=unit.index + 1,
                    total_chunks=state.total_units,
                ))

            outcomes = await asyncio.gather(
                *(self.execute_unit(unit) for unit in batch),
                return_exceptions=True,
            )
            self._join(state, batch, outcomes)

            await self._emit(ProgressEvent.metrics(
                average_latency_ms=state.average_latency_ms(),
                completed_chunks=state.completed,
                failed_chunks=state.failed,
            ))

        # admitted batches are always joined before the loop moves on
        self.phase = SchedulerPhase.DONE

        logger.info(
            f"Scheduler done: {state.completed} ok, {state.failed} failed, "
            f"{state.total_units - state.admitted} not admitted"
        )
        return dict(state.results)

    def _can_admit(self, deadline: float) -> bool:
        return self._clock() < deadline - self.admission_margin

    def _join(self, state: RunState, batch: List[WorkUnit], outcomes: List) -> None:
        """Record a batch's outcomes. The only writer of RunState."""
        for unit, outcome in zip(batch, outcomes):
            if isinstance(outcome, BaseException):
                logger.error(f"Unit #{unit.index} raised: {type(outcome).__name__}: {outcome}")
                outcome = TaskResult.failure(
                    index=unit.index,
                    error_message=str(outcome) or type(outcome).__name__,
                )
            state.record(outcome)

    async def _emit(self, event: ProgressEvent) -> None:
        if self.emitter is not None:
            await self.emitter.emit(event)
