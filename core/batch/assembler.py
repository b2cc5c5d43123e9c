"""
Result Assembler - ordered reassembly of translated units.

Failed or missing units are omitted from the body (no placeholder text)
and reported through ``failed_indices`` and the ``partial`` flag.
"""

from dataclasses import dataclass, field
from typing import Dict, List

from config.constants import PAGE_SEPARATOR
from config.logging_config import get_logger
from core.errors import AssemblyEmpty
from core.translator import TaskResult

logger = get_logger(__name__)


@dataclass
class AssemblyResult:
    """Final body plus completeness information."""
    body: str
    partial: bool
    successful_units: int
    failed_indices: List[int] = field(default_factory=list)


class ResultAssembler:
    """
    Concatenates successful unit texts in index order.

    Usage:
        assembler = ResultAssembler()
        assembled = assembler.assemble(results, total_units=len(units))
    """

    def __init__(self, separator: str = PAGE_SEPARATOR):
        self.separator = separator

    def assemble(self, results: Dict[int, TaskResult], total_units: int) -> AssemblyResult:
        """
        Build the final body.

        Args:
            results: Settled results keyed by unit index (may be incomplete).
            total_units: Number of units the chunker produced.

        Raises:
            AssemblyEmpty: If no unit succeeded.
        """
        parts: List[str] = []
        failed: List[int] = []

        for index in range(total_units):
            result = results.get(index)
            if result is not None and result.ok:
                parts.append(result.text)
            else:
                failed.append(index)

        if not parts:
            raise AssemblyEmpty(f"All {total_units} chunks failed; nothing to assemble")

        assembled = AssemblyResult(
            body=self.separator.join(parts),
            partial=len(parts) < total_units,
            successful_units=len(parts),
            failed_indices=failed,
        )
        logger.info(
            f"Assembled {assembled.successful_units}/{total_units} units "
            f"({len(assembled.body)} chars)"
            + (f", missing {failed}" if failed else "")
        )
        return assembled
