"""
Batch execution of a translation run.

- BatchScheduler: bounded-parallel, deadline-aware execution of work units
- RunState: per-run results and counters
- ResultAssembler: ordered reassembly of translated units
- TranslationPipeline: end-to-end orchestration of one run
"""

from .run_state import RunState
from .scheduler import BatchScheduler, SchedulerPhase
from .assembler import AssemblyResult, ResultAssembler
from .orchestrator import PipelineConfig, PipelineResult, TranslationPipeline

__all__ = [
    # Scheduling
    'BatchScheduler',
    'SchedulerPhase',
    'RunState',
    # Assembly
    'AssemblyResult',
    'ResultAssembler',
    # Orchestrator
    'PipelineConfig',
    'PipelineResult',
    'TranslationPipeline',
]
