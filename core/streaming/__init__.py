"""
Streaming Module - live progress for translation runs

Exports:
- ProgressEmitter (ordered, bounded event sink for one run)
- ProgressEvent / EventType (event model, SSE framing)
- create_logging_subscriber (subscriber that logs events)
"""

from .progress_emitter import (
    EventType,
    ProgressEmitter,
    ProgressEvent,
    TERMINAL_EVENTS,
    create_logging_subscriber,
)

__all__ = [
    'EventType',
    'ProgressEmitter',
    'ProgressEvent',
    'TERMINAL_EVENTS',
    'create_logging_subscriber',
]
