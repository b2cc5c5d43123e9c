"""
Per-run state owned by the Batch Scheduler.

One RunState exists per pipeline run and is discarded when the run ends.
Only the scheduler's batch join step writes to it.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from core.translator import TaskResult


@dataclass
class RunState:
    """
    Accumulated results and timing of one run.

    Attributes:
        total_units: Number of WorkUnits produced by the chunker.
        started_at: Clock value when the run started.
        deadline: Clock value after which no new batch is admitted.
        results: TaskResults keyed by unit index.
        admitted: Number of units admitted for execution.
        deadline_hit: True when admission stopped because of the deadline.
    """
    total_units: int
    started_at: float
    deadline: float
    results: Dict[int, TaskResult] = field(default_factory=dict)
    admitted: int = 0
    deadline_hit: bool = False

    def record(self, result: TaskResult) -> None:
        """Store a settled unit's result."""
        if not 0 <= result.index < self.total_units:
            raise ValueError(
                f"Result index {result.index} outside [0, {self.total_units})"
            )
        if result.index in self.results:
            raise ValueError(f"Duplicate result for unit {result.index}")
        self.results[result.index] = result

    @property
    def completed(self) -> int:
        return sum(1 for r in self.results.values() if r.ok)

    @property
    def failed(self) -> int:
        return sum(1 for r in self.results.values() if not r.ok)

    @property
    def failed_indices(self) -> List[int]:
        return sorted(i for i, r in self.results.items() if not r.ok)

    @property
    def settled(self) -> int:
        return len(self.results)

    @property
    def partial(self) -> bool:
        return self.deadline_hit or self.completed < self.total_units

    def average_latency_ms(self) -> float:
        if not self.results:
            return 0.0
        return sum(r.duration_ms for r in self.results.values()) / len(self.results)
