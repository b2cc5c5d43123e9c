#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Translation Task Executor.

Translates one WorkUnit through the remote translation capability with:
- a per-attempt timeout (the call is abandoned when the timer wins)
- bounded retries with exponential backoff and jitter for transient failures
- immediate failure for permanent ones (bad request, auth)
- DOCX-safe sanitation of the returned text

The executor never raises for a failed unit. It returns a TaskResult with
``ok=False`` so the pipeline can proceed with partial data, and it reports
every settled unit to the Progress Emitter as a ``chunk`` event.

Usage:
    from core.translator import TranslationTaskExecutor

    executor = TranslationTaskExecutor(provider, emitter=emitter)
    result = await executor.execute(
        unit,
        glossary_context=glossary.build_prompt_section(),
        source_lang="English",
        target_lang="Russian",
        model="gpt-4o-mini",
        timeout_ms=60000,
        max_attempts=2,
    )
"""

import asyncio
import random
import time
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Optional

from ai_providers.base import BaseAIProvider, TokenUsage, TranslationRequest
from config.constants import RETRY_BASE_DELAY_MS, RETRY_JITTER_MS
from config.logging_config import get_logger

from .chunker import WorkUnit
from .errors import RemoteTimeout, ServerError, is_retriable
from .language import get_language_name
from .streaming import ProgressEmitter, ProgressEvent
from .text_sanitizer import sanitize_for_docx

logger = get_logger(__name__)

# finish reasons meaning the reply hit the output token cap (openai, anthropic)
TRUNCATED_FINISH_REASONS = frozenset({"length", "max_tokens"})


@dataclass
class TaskResult:
    """
    Outcome of translating one WorkUnit. Produced exactly once per unit.

    Attributes:
        index: Index of the WorkUnit this result belongs to.
        text: Sanitized translation; empty when the unit failed.
        ok: Whether the unit was translated.
        attempts: Attempts made (>= 1).
        duration_ms: Wall time across all attempts and backoff delays.
        error_message: Last error when ``ok`` is False.
        usage: Token usage reported by the provider, if any.
    """
    index: int
    text: str
    ok: bool
    attempts: int
    duration_ms: int
    error_message: Optional[str] = None
    usage: Optional[TokenUsage] = None

    @classmethod
    def failure(
        cls,
        index: int,
        error_message: str,
        attempts: int = 1,
        duration_ms: int = 0,
    ) -> "TaskResult":
        return cls(
            index=index,
            text="",
            ok=False,
            attempts=attempts,
            duration_ms=duration_ms,
            error_message=error_message,
        )

    def usage_dict(self) -> Optional[Dict[str, int]]:
        if self.usage is None:
            return None
        return {
            "promptTokens": self.usage.prompt_tokens,
            "completionTokens": self.usage.completion_tokens,
        }


def build_system_prompt(
    source_lang: str,
    target_lang: str,
    glossary_context: Optional[str] = None,
) -> str:
    """
    Build the system prompt for one translation call.

    Args:
        source_lang: Source language code or name.
        target_lang: Target language code or name.
        glossary_context: Rendered glossary (``term → translation`` pairs).
    """
    source_name = get_language_name(source_lang)
    target_name = get_language_name(target_lang)

    prompt_parts = [
        "You are a professional translator specializing in books and articles "
        "on relational psychoanalysis.",
        "",
        "Key requirements:",
        f"- Translate from {source_name} to {target_name}",
        "- Preserve the academic tone and psychological terminology",
        "- Use established psychoanalytic terminology where applicable",
        "- Maintain paragraph structure and formatting",
        "- Ensure clarity and readability for professional audiences",
        "",
    ]

    if glossary_context:
        prompt_parts.append(f"Psychoanalytic terminology glossary: {glossary_context}")
        prompt_parts.append("")

    prompt_parts.extend([
        "Instructions:",
        "- Output ONLY the translation, no additional comments",
        "- Preserve the original meaning and nuanced tone",
        f"- Use gender-neutral language where appropriate in {target_name}",
        "- Maintain professional academic style throughout",
        "",
        "Translate the following text:",
    ])
    return "\n".join(prompt_parts)


SleepFunc = Callable[[float], Awaitable[None]]
ClockFunc = Callable[[], float]


class TranslationTaskExecutor:
    """
    Runs one work unit against the remote translation capability.

    Attributes:
        provider: Remote translation capability.
        emitter: Optional Progress Emitter receiving ``chunk`` events.
        base_delay_ms: Backoff base; attempt ``n`` (n >= 2) waits
            ``base_delay_ms * 2 ** (n - 1)`` plus jitter.
        jitter_ms: Upper bound of the uniform random jitter.
    """

    def __init__(
        self,
        provider: BaseAIProvider,
        emitter: Optional[ProgressEmitter] = None,
        base_delay_ms: int = RETRY_BASE_DELAY_MS,
        jitter_ms: int = RETRY_JITTER_MS,
        sleep: SleepFunc = asyncio.sleep,
        clock: ClockFunc = time.monotonic,
        rng: Optional[random.Random] = None,
    ):
        self.provider = provider
        self.emitter = emitter
        self.base_delay_ms = base_delay_ms
        self.jitter_ms = jitter_ms
        self._sleep = sleep
        self._clock = clock
        self._rng = rng or random.Random()

    def backoff_delay_ms(self, attempt: int) -> float:
        """Delay before ``attempt`` (1-based). The first attempt has none."""
        if attempt <= 1:
            return 0.0
        jitter = self._rng.uniform(0, self.jitter_ms) if self.jitter_ms > 0 else 0.0
        return self.base_delay_ms * 2 ** (attempt - 1) + jitter

    async def execute(
        self,
        unit: WorkUnit,
        glossary_context: Optional[str],
        source_lang: str,
        target_lang: str,
        model: str,
        timeout_ms: int,
        max_attempts: int,
    ) -> TaskResult:
        """
        Translate one unit, retrying transient failures.

        Args:
            unit: Work unit to translate.
            glossary_context: Rendered glossary for the system prompt.
            source_lang: Source language code or name.
            target_lang: Target language code or name.
            model: Model identifier passed to the provider.
            timeout_ms: Per-attempt timeout.
            max_attempts: Maximum attempts including the first (>= 1).

        Returns:
            TaskResult; ``ok=False`` with the last error when the unit failed.
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {max_attempts}")

        request = TranslationRequest(
            model=model,
            system_prompt=build_system_prompt(source_lang, target_lang, glossary_context),
            user_text=unit.text,
        )

        started = self._clock()
        last_error: Optional[BaseException] = None
        attempt = 0

        for attempt in range(1, max_attempts + 1):
            if attempt > 1:
                delay_ms = self.backoff_delay_ms(attempt)
                logger.debug(f"Unit #{unit.index}: backing off {delay_ms:.0f}ms before attempt {attempt}")
                await self._sleep(delay_ms / 1000)

            try:
                response = await asyncio.wait_for(
                    self.provider.translate(request),
                    timeout=timeout_ms / 1000,
                )
                if response.finish_reason in TRUNCATED_FINISH_REASONS:
                    raise ServerError(f"Translation truncated ({response.finish_reason})")
                text = sanitize_for_docx(response.text)
                if not text.strip():
                    raise ServerError("Empty translation")

            except asyncio.TimeoutError:
                last_error = RemoteTimeout(f"Timeout after {timeout_ms}ms")
            except Exception as e:
                last_error = e
            else:
                result = TaskResult(
                    index=unit.index,
                    text=text,
                    ok=True,
                    attempts=attempt,
                    duration_ms=self._elapsed_ms(started),
                    usage=response.usage,
                )
                await self._report(result)
                return result

            retriable = is_retriable(last_error)
            logger.warning(
                f"Unit #{unit.index}: attempt {attempt}/{max_attempts} failed: "
                f"{type(last_error).__name__}: {last_error}"
                + ("" if retriable else " (not retriable)")
            )
            if not retriable:
                break

        result = TaskResult.failure(
            index=unit.index,
            error_message=str(last_error) or type(last_error).__name__,
            attempts=attempt,
            duration_ms=self._elapsed_ms(started),
        )
        logger.error(f"Unit #{unit.index} failed after {attempt} attempt(s): {result.error_message}")
        await self._report(result)
        return result

    def _elapsed_ms(self, started: float) -> int:
        return max(0, int((self._clock() - started) * 1000))

    async def _report(self, result: TaskResult) -> None:
        if self.emitter is None:
            return
        await self.emitter.emit(ProgressEvent.chunk(
            index=result.index,
            duration_ms=result.duration_ms,
            ok=result.ok,
            text_length=len(result.text),
            attempts=result.attempts,
            usage=result.usage_dict(),
        ))
