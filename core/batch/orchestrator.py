"""
Translation pipeline orchestrator.

Wires the chunker, the Translation Task Executor, the Batch Scheduler, the
Result Assembler and the document store into one run, reporting every stage
through a Progress Emitter.

A run always ends with exactly one terminal event: ``completed`` (possibly
``partial``) or ``error`` for fatal failures (no usable input, zero
successful units, storage failure).
"""

import asyncio
import random
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from config.constants import (
    CHARS_PER_TOKEN,
    CHUNK_MAX_CHARS,
    DEFAULT_MODEL,
    DEFAULT_SOURCE_LANG,
    DEFAULT_TARGET_LANG,
    PIPELINE_ADMISSION_MARGIN_MS,
    PIPELINE_CONCURRENCY_LIMIT,
    PIPELINE_MAX_ATTEMPTS,
    PIPELINE_RUN_DEADLINE_MS,
    PIPELINE_TASK_TIMEOUT_MS,
    PIPELINE_UNIT_SIZE_PAGES,
    RETRY_BASE_DELAY_MS,
    RETRY_JITTER_MS,
)
from config.logging_config import get_logger
from core.chunker import SmartChunker, SourceDocument, WorkUnit
from core.errors import InputError, PipelineError, StorageError
from core.streaming import ProgressEmitter, ProgressEvent
from core.translator import TaskResult, TranslationTaskExecutor

from .assembler import AssemblyResult, ResultAssembler
from .scheduler import BatchScheduler

logger = get_logger(__name__)


@dataclass
class PipelineConfig:
    """Configuration for TranslationPipeline."""
    unit_size_pages: int = PIPELINE_UNIT_SIZE_PAGES
    concurrency_limit: int = PIPELINE_CONCURRENCY_LIMIT
    per_task_timeout_ms: int = PIPELINE_TASK_TIMEOUT_MS
    max_attempts_per_unit: int = PIPELINE_MAX_ATTEMPTS
    run_deadline_ms: int = PIPELINE_RUN_DEADLINE_MS
    admission_margin_ms: int = PIPELINE_ADMISSION_MARGIN_MS
    retry_base_delay_ms: int = RETRY_BASE_DELAY_MS
    retry_jitter_ms: int = RETRY_JITTER_MS
    chunk_max_chars: int = CHUNK_MAX_CHARS
    model: str = DEFAULT_MODEL
    source_lang: str = DEFAULT_SOURCE_LANG
    target_lang: str = DEFAULT_TARGET_LANG

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ValueError for settings the pipeline cannot run with."""
        for name in ("unit_size_pages", "concurrency_limit", "max_attempts_per_unit", "chunk_max_chars"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be >= 1, got {getattr(self, name)}")
        for name in ("per_task_timeout_ms", "run_deadline_ms"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        for name in ("admission_margin_ms", "retry_base_delay_ms", "retry_jitter_ms"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative, got {getattr(self, name)}")

    @classmethod
    def from_settings(cls, settings) -> "PipelineConfig":
        return cls(
            unit_size_pages=settings.unit_size_pages,
            concurrency_limit=settings.concurrency_limit,
            per_task_timeout_ms=settings.per_task_timeout_ms,
            max_attempts_per_unit=settings.max_attempts_per_unit,
            run_deadline_ms=settings.run_deadline_ms,
            admission_margin_ms=settings.admission_margin_ms,
            retry_base_delay_ms=settings.retry_base_delay_ms,
            retry_jitter_ms=settings.retry_jitter_ms,
            chunk_max_chars=settings.chunk_max_chars,
            model=settings.model,
            source_lang=settings.source_lang,
            target_lang=settings.target_lang,
        )


@dataclass
class PipelineResult:
    """Outcome of a run that reached ``completed``."""
    download_ref: str
    pages_processed: int
    pages_estimated: bool
    partial: bool
    total_units: int
    successful_units: int
    failed_indices: List[int] = field(default_factory=list)
    input_tokens: int = 0
    output_tokens: int = 0
    model: str = DEFAULT_MODEL
    duration_seconds: float = 0.0


class TranslationPipeline:
    """
    One orchestrator per configuration; ``run`` is called once per document.

    Usage:
        pipeline = TranslationPipeline(provider, store, config, source_loader=loader)
        emitter = ProgressEmitter()
        result = await pipeline.run(emitter, upload_id="...")
    """

    def __init__(
        self,
        provider: Any,
        store: Any,
        config: Optional[PipelineConfig] = None,
        source_loader: Optional[Any] = None,
        glossary: Optional[Any] = None,
        chunker: Optional[SmartChunker] = None,
        assembler: Optional[ResultAssembler] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable = asyncio.sleep,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the pipeline.

        Args:
            provider: Remote translation capability (BaseAIProvider).
            store: Document store; ``save(paragraphs) -> key``, may raise StorageError.
            config: Pipeline configuration.
            source_loader: Ingestion collaborator; ``await load(ref) -> SourceDocument``.
            glossary: Optional GlossaryManager rendered into the system prompt.
            chunker: Custom chunker (defaults to SmartChunker with the configured budget).
            assembler: Custom assembler.
            clock: Monotonic clock in seconds (injected for tests).
            sleep: Async sleep used for retry backoff (injected for tests).
            rng: Random source for backoff jitter.
        """
        self.config = config or PipelineConfig()
        self.provider = provider
        self.store = store
        self.source_loader = source_loader
        self.glossary = glossary
        self.chunker = chunker or SmartChunker(max_chars=self.config.chunk_max_chars)
        self.assembler = assembler or ResultAssembler()
        self._clock = clock
        self._sleep = sleep
        self._rng = rng

        logger.info(
            f"TranslationPipeline initialized: "
            f"unit_size={self.config.unit_size_pages} pages, "
            f"concurrency={self.config.concurrency_limit}, "
            f"timeout={self.config.per_task_timeout_ms}ms, "
            f"attempts={self.config.max_attempts_per_unit}, "
            f"deadline={self.config.run_deadline_ms}ms"
        )

    async def run(
        self,
        emitter: ProgressEmitter,
        source: Optional[SourceDocument] = None,
        upload_id: Optional[str] = None,
        source_lang: Optional[str] = None,
        target_lang: Optional[str] = None,
        model: Optional[str] = None,
    ) -> Optional[PipelineResult]:
        """
        Translate one document end-to-end.

        Either ``source`` or ``upload_id`` (resolved through the source
        loader) must be given. The emitter is closed when the run ends.

        Returns:
            PipelineResult when a ``completed`` event was emitted, None when
            the run ended with an ``error`` event.
        """
        started = self._clock()
        deadline = started + self.config.run_deadline_ms / 1000
        source_lang = source_lang or self.config.source_lang
        target_lang = target_lang or self.config.target_lang
        model = model or self.config.model

        emitter.start_heartbeat()
        try:
            if source is None:
                source = await self._load_source(upload_id)
            if source.is_blank:
                raise InputError("No text found in PDF")

            units = self.chunker.chunk_document(source, self.config.unit_size_pages)
            if not units:
                raise InputError("No text found in PDF")
            logger.info(
                f"Run started: {len(units)} units from "
                f"{source.page_count or len(source.page_texts)} pages, "
                f"{source_lang} -> {target_lang}, model={model}"
            )
            await emitter.emit(ProgressEvent.init(total_chunks=len(units)))

            executor = TranslationTaskExecutor(
                self.provider,
                emitter=emitter,
                base_delay_ms=self.config.retry_base_delay_ms,
                jitter_ms=self.config.retry_jitter_ms,
                sleep=self._sleep,
                clock=self._clock,
                rng=self._rng,
            )
            glossary_context = self.glossary.build_prompt_section() if self.glossary else None

            async def execute_unit(unit: WorkUnit) -> TaskResult:
                return await executor.execute(
                    unit,
                    glossary_context=glossary_context,
                    source_lang=source_lang,
                    target_lang=target_lang,
                    model=model,
                    timeout_ms=self.config.per_task_timeout_ms,
                    max_attempts=self.config.max_attempts_per_unit,
                )

            scheduler = BatchScheduler(
                execute_unit,
                emitter=emitter,
                clock=self._clock,
                admission_margin=self.config.admission_margin_ms / 1000,
            )
            results = await scheduler.run(units, self.config.concurrency_limit, deadline)

            assembled = self.assembler.assemble(results, len(units))
            partial = assembled.partial or scheduler.state.deadline_hit

            await emitter.emit(ProgressEvent.building())
            download_ref = await self._save(assembled)

            pages_processed, pages_estimated = self._pages_processed(source, units, results)
            input_tokens, output_tokens = self._token_usage(units, results)

            result = PipelineResult(
                download_ref=download_ref,
                pages_processed=pages_processed,
                pages_estimated=pages_estimated,
                partial=partial,
                total_units=len(units),
                successful_units=assembled.successful_units,
                failed_indices=assembled.failed_indices,
                input_tokens=input_tokens,
                output_tokens=output_tokens,
                model=model,
                duration_seconds=self._clock() - started,
            )
            await emitter.emit(ProgressEvent.completed(
                download_ref=download_ref,
                pages_processed=pages_processed,
                partial=partial,
                failed_chunks=assembled.failed_indices,
                successfulUnits=assembled.successful_units,
                totalChunks=len(units),
                pagesEstimated=pages_estimated,
                model=model,
                tokenUsage={"inputTokens": input_tokens, "outputTokens": output_tokens},
            ))
            logger.info(
                f"Run completed in {result.duration_seconds:.1f}s: "
                f"{result.successful_units}/{result.total_units} units, "
                f"partial={partial}, ref={download_ref}"
            )
            return result

        except PipelineError as e:
            logger.error(f"Run failed: {type(e).__name__}: {e}")
            await emitter.emit(ProgressEvent.error(str(e)))
            return None
        except Exception as e:
            logger.exception(f"Run failed unexpectedly: {e}")
            await emitter.emit(ProgressEvent.error(f"Translation failed: {e}"))
            return None
        finally:
            await emitter.close()

    async def _load_source(self, upload_id: Optional[str]) -> SourceDocument:
        if not upload_id:
            raise InputError("No PDF provided")
        if self.source_loader is None:
            raise InputError("No source loader configured")
        return await self.source_loader.load(upload_id)

    async def _save(self, assembled: AssemblyResult) -> str:
        paragraphs = assembled.body.split("\n")
        try:
            return await asyncio.to_thread(self.store.save, paragraphs)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to store document: {e}") from e

    def _pages_processed(
        self,
        source: SourceDocument,
        units: List[WorkUnit],
        results: Dict[int, TaskResult],
    ) -> Tuple[int, bool]:
        """
        Pages covered by successful units.

        Page-mode units carry their page range, so the count is exact. In
        character-budget mode it is estimated as successful units times the
        unit size, capped at the declared page count when there is one, and
        flagged as estimated.
        """
        ok_units = [u for u in units if u.index in results and results[u.index].ok]

        if ok_units and all(u.source_page_range for u in ok_units):
            pages = sum(end - start + 1 for start, end in (u.source_page_range for u in ok_units))
            return pages, False

        estimate = len(ok_units) * self.config.unit_size_pages
        if source.page_count > 0:
            estimate = min(estimate, source.page_count)
        return estimate, True

    @staticmethod
    def _token_usage(units: List[WorkUnit], results: Dict[int, TaskResult]) -> Tuple[int, int]:
        """Reported usage where available, chars / CHARS_PER_TOKEN otherwise."""
        input_tokens = 0
        output_tokens = 0
        for unit in units:
            result = results.get(unit.index)
            if result is None or not result.ok:
                continue
            if result.usage is not None:
                input_tokens += result.usage.prompt_tokens
                output_tokens += result.usage.completion_tokens
            else:
                input_tokens += len(unit.text) // CHARS_PER_TOKEN
                output_tokens += len(result.text) // CHARS_PER_TOKEN
        return input_tokens, output_tokens
