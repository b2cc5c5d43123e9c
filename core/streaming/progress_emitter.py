#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Progress Emitter - ordered lifecycle events for one pipeline run.

Producers (scheduler, executor callbacks, heartbeat) call ``emit``; the single
subscriber consumes ``events()``. Events pass through a bounded asyncio queue,
so business logic never writes to the transport directly.

Events emitted:
- init: total number of chunks
- progress: chunk admitted for translation
- chunk: one unit settled (duration, ok, text length)
- metrics: running latency and completed/failed counts
- building: output document is being rendered
- completed: terminal, download reference and partial flag
- error: terminal, fatal failure message
- heartbeat: keep-alive on a fixed interval

Usage:
    emitter = ProgressEmitter()
    emitter.start_heartbeat()
    await emitter.emit(ProgressEvent.init(total_chunks=7))
    ...
    await emitter.close()

    async for event in emitter.events():
        yield event.to_sse()
"""

import asyncio
import contextlib
import json
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

from config.constants import HEARTBEAT_INTERVAL_SECONDS, PROGRESS_BUFFER_SIZE
from config.logging_config import get_logger

logger = get_logger(__name__)


class EventType(str, Enum):
    """Progress event tags"""
    INIT = "init"
    PROGRESS = "progress"
    CHUNK = "chunk"
    METRICS = "metrics"
    BUILDING = "building"
    COMPLETED = "completed"
    ERROR = "error"
    HEARTBEAT = "heartbeat"


TERMINAL_EVENTS = frozenset({EventType.COMPLETED, EventType.ERROR})


@dataclass(frozen=True)
class ProgressEvent:
    """
    One event in a run's progress stream.

    Attributes:
        type: Event tag.
        payload: Tag-specific fields (camelCase keys, sent as-is to clients).
        seq: Emission sequence number, assigned by the emitter (1-based).
    """
    type: EventType
    payload: Dict[str, Any] = field(default_factory=dict)
    seq: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENTS

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.value, **self.payload}

    def to_sse(self) -> str:
        """Server-Sent Events frame."""
        return f"data: {json.dumps(self.to_dict(), ensure_ascii=False)}\n\n"

    # ----- constructors -----

    @classmethod
    def init(cls, total_chunks: int) -> "ProgressEvent":
        return cls(EventType.INIT, {"totalChunks": total_chunks})

    @classmethod
    def progress(
        cls,
        message: str,
        current_chunk: Optional[int] = None,
        total_chunks: Optional[int] = None,
    ) -> "ProgressEvent":
        payload: Dict[str, Any] = {"message": message}
        if current_chunk is not None:
            payload["currentChunk"] = current_chunk
        if total_chunks is not None:
            payload["totalChunks"] = total_chunks
        return cls(EventType.PROGRESS, payload)

    @classmethod
    def chunk(
        cls,
        index: int,
        duration_ms: int,
        ok: bool,
        text_length: int,
        attempts: int = 1,
        usage: Optional[Dict[str, int]] = None,
    ) -> "ProgressEvent":
        payload: Dict[str, Any] = {
            "index": index,
            "durationMs": duration_ms,
            "ok": ok,
            "textLength": text_length,
            "attempts": attempts,
        }
        if usage is not None:
            payload["usage"] = usage
        return cls(EventType.CHUNK, payload)

    @classmethod
    def metrics(
        cls,
        average_latency_ms: float,
        completed_chunks: int,
        failed_chunks: int,
    ) -> "ProgressEvent":
        return cls(EventType.METRICS, {
            "averageLatencyMs": round(average_latency_ms, 1),
            "completedChunks": completed_chunks,
            "failedChunks": failed_chunks,
        })

    @classmethod
    def building(cls, message: str = "Building DOCX file...") -> "ProgressEvent":
        return cls(EventType.BUILDING, {"message": message})

    @classmethod
    def completed(
        cls,
        download_ref: str,
        pages_processed: int,
        partial: bool,
        failed_chunks: List[int],
        **extra: Any,
    ) -> "ProgressEvent":
        return cls(EventType.COMPLETED, {
            "downloadRef": download_ref,
            "pagesProcessed": pages_processed,
            "partial": partial,
            "failedChunks": list(failed_chunks),
            **extra,
        })

    @classmethod
    def error(cls, message: str) -> "ProgressEvent":
        return cls(EventType.ERROR, {"message": message})

    @classmethod
    def heartbeat(cls, timestamp: Optional[int] = None) -> "ProgressEvent":
        if timestamp is None:
            timestamp = int(time.time() * 1000)
        return cls(EventType.HEARTBEAT, {"timestamp": timestamp})


_END = object()

Subscriber = Callable[[ProgressEvent], Awaitable[None]]


class ProgressEmitter:
    """
    Single-producer-queue, single-subscriber event sink for one run.

    ``emit`` is serialized by a FIFO lock, so concurrent producers are
    delivered in the order they called ``emit``. It only suspends when the
    bounded buffer is full. After ``detach`` (subscriber went away) events
    are discarded so the run can still finish.
    """

    def __init__(
        self,
        buffer_size: int = PROGRESS_BUFFER_SIZE,
        heartbeat_interval: float = HEARTBEAT_INTERVAL_SECONDS,
    ):
        if buffer_size < 1:
            raise ValueError(f"buffer_size must be >= 1, got {buffer_size}")
        self.heartbeat_interval = heartbeat_interval
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=buffer_size)
        self._lock = asyncio.Lock()
        self._seq = 0
        self._closed = False
        self._detached = False
        self._subscribed = False
        self._heartbeat_task: Optional[asyncio.Task] = None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def emitted_count(self) -> int:
        return self._seq

    async def emit(self, event: ProgressEvent) -> ProgressEvent:
        """
        Queue an event for the subscriber.

        Returns:
            The event with its sequence number assigned.

        Raises:
            RuntimeError: If the emitter has been closed.
        """
        async with self._lock:
            if self._closed:
                raise RuntimeError(f"Emitter closed; cannot emit {event.type.value}")
            self._seq += 1
            event = replace(event, seq=self._seq)
            if self._detached:
                logger.debug(f"Subscriber detached, dropping {event.type.value} #{event.seq}")
                return event
            await self._queue.put(event)
        return event

    def start_heartbeat(self) -> None:
        """Emit ``heartbeat`` every ``heartbeat_interval`` seconds until closed."""
        if self._heartbeat_task is None and self.heartbeat_interval > 0:
            self._heartbeat_task = asyncio.create_task(self._heartbeat_loop())

    async def _heartbeat_loop(self) -> None:
        while not self._closed:
            await asyncio.sleep(self.heartbeat_interval)
            if self._closed:
                return
            await self.emit(ProgressEvent.heartbeat())

    async def _stop_heartbeat(self) -> None:
        task, self._heartbeat_task = self._heartbeat_task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def close(self) -> None:
        """Stop the heartbeat and end the event stream. Idempotent."""
        await self._stop_heartbeat()
        async with self._lock:
            if self._closed:
                return
            self._closed = True
            if not self._detached:
                await self._queue.put(_END)

    def detach(self) -> None:
        """
        Mark the subscriber as gone.

        Buffered events are discarded and later emits are dropped, so
        producers never block on a consumer that will not read again.
        """
        self._detached = True
        while not self._queue.empty():
            self._queue.get_nowait()

    async def events(self) -> AsyncIterator[ProgressEvent]:
        """
        Yield events in emission order until the emitter is closed.

        Only one subscriber per emitter is allowed.
        """
        if self._subscribed:
            raise RuntimeError("ProgressEmitter supports a single subscriber")
        self._subscribed = True

        while True:
            item = await self._queue.get()
            if item is _END:
                return
            yield item

    async def forward_to(self, subscriber: Subscriber) -> int:
        """
        Deliver every event to an async callback until the stream ends.

        Returns:
            Number of events delivered.
        """
        delivered = 0
        async for event in self.events():
            await subscriber(event)
            delivered += 1
        return delivered

    async def __aenter__(self) -> "ProgressEmitter":
        self.start_heartbeat()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def create_logging_subscriber(log_every: int = 1) -> Subscriber:
    """
    Build a subscriber that logs events.

    Args:
        log_every: Log every Nth non-terminal event; terminal events are
            always logged.
    """
    counter = {"count": 0}

    async def subscriber(event: ProgressEvent) -> None:
        counter["count"] += 1
        if event.is_terminal or counter["count"] % log_every == 0:
            logger.info(f"[{event.seq}] {event.type.value}: {event.payload}")

    return subscriber
