#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Error taxonomy for the translation pipeline.

Fatal errors (InputError, AssemblyEmpty, StorageError) end a run with an
``error`` event. Remote errors are split into transient ones, which the
executor retries, and permanent ones, which fail a unit immediately.
Running out of time is not an exception at all: the scheduler simply
stops admitting new batches.
"""

import asyncio
from typing import Optional


class PipelineError(Exception):
    """Base class for every error raised by the pipeline."""


# ============================================================================
# Input
# ============================================================================

class InputError(PipelineError):
    """No usable source document (missing upload, no text)."""


class SourceNotFound(InputError):
    """The referenced source document does not exist."""


class SourceUnreadable(InputError):
    """The source document exists but text could not be extracted."""


# ============================================================================
# Remote translation capability
# ============================================================================

class RemoteError(PipelineError):
    """Failure reported by the remote translation capability."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class RemoteTransient(RemoteError):
    """Retriable remote failure."""


class RateLimited(RemoteTransient):
    """HTTP 429."""


class ServerError(RemoteTransient):
    """HTTP 5xx."""


class RemoteTimeout(RemoteTransient):
    """The call did not finish within the per-attempt timeout."""


class RemotePermanent(RemoteError):
    """Non-retriable remote failure."""


class ClientError(RemotePermanent):
    """HTTP 4xx other than 429 (bad request, auth, ...)."""


def error_for_status(status: int, message: str) -> RemoteError:
    """Map an HTTP status code onto the remote error hierarchy."""
    if status == 429:
        return RateLimited(message, status=status)
    if 500 <= status < 600:
        return ServerError(message, status=status)
    return ClientError(message, status=status)


def is_retriable(exc: BaseException) -> bool:
    """
    Decide whether a failed attempt may be retried.

    Transient remote errors and timeouts are retriable. Anything else,
    including unexpected exceptions, fails the unit immediately.
    """
    if isinstance(exc, RemoteTransient):
        return True
    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return True
    return False


# ============================================================================
# Assembly / output
# ============================================================================

class AssemblyEmpty(PipelineError):
    """Every unit failed; there is nothing to render."""


class StorageError(PipelineError):
    """The rendered document could not be persisted."""
