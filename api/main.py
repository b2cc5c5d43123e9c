#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
PDF Translation API - FastAPI server

Endpoints:
    POST /api/upload          - Upload a PDF (multipart field "pdf")
    POST /api/translate       - Translate an upload, progress as Server-Sent Events
    GET  /api/download/{key}  - Download a translated DOCX
    POST /api/cleanup         - Delete stored files past the retention window
    GET  /health              - Liveness probe

Environment Variables:
    - PROVIDER: openai | anthropic (default: openai)
    - OPENAI_API_KEY / ANTHROPIC_API_KEY: key for the selected provider
    - MODEL: default model (default: gpt-4o-mini)
    - CLEANUP_SECRET: bearer token for /api/cleanup
    - TRANSLATE_RATE_LIMIT: per-IP limit for /api/translate (default: 10/minute)
    - MAX_UPLOAD_SIZE_MB: max upload size (default: 25)
"""

import asyncio
import sys
from pathlib import Path
from typing import AsyncIterator, Optional, Set

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, StreamingResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

# Load environment variables from .env file
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ai_providers import BaseAIProvider
from config.constants import DOCX_CONTENT_TYPE
from config.logging_config import get_logger
from config.settings import Settings, settings as app_settings
from core.batch import PipelineConfig, TranslationPipeline
from core.errors import InputError, StorageError
from core.glossary import GlossaryManager
from core.ingestion import PdfSourceLoader
from core.storage import DocxDocumentStore, UploadStore, purge_older_than
from core.streaming import ProgressEmitter, ProgressEvent

from api.dependencies import (
    get_document_store,
    get_glossary,
    get_provider,
    get_settings,
    get_upload_store,
)
from api.models import CleanupResponse, HealthResponse, TranslateRequest, UploadResponse
from api.security import verify_cleanup_token

logger = get_logger(__name__)

APP_VERSION = "1.0.0"

SSE_HEADERS = {
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


# =============================================================================
# FastAPI App
# =============================================================================

app = FastAPI(
    title="PDF Translation API",
    description="Translate PDF documents into DOCX with live progress",
    version=APP_VERSION,
)

limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:8000",
    "http://127.0.0.1:8000",
]
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Strong references to runs still in progress after their client left
_running_tasks: Set[asyncio.Task] = set()


# =============================================================================
# Upload / Download
# =============================================================================

@app.post("/api/upload", response_model=UploadResponse, response_model_by_alias=True)
async def upload_pdf(
    pdf: Optional[UploadFile] = File(default=None),
    upload_store: UploadStore = Depends(get_upload_store),
):
    """
    Upload a PDF for translation

    Accepts: application/pdf (multipart field "pdf")
    Returns: uploadId for /api/translate
    """
    if pdf is None:
        raise HTTPException(status_code=400, detail='No PDF file provided (field "pdf")')

    contents = await pdf.read()
    try:
        upload_id = await asyncio.to_thread(upload_store.save, contents, pdf.content_type)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError as e:
        logger.error(f"Upload failed: {e}")
        raise HTTPException(status_code=500, detail="Upload failed")

    return UploadResponse(upload_id=upload_id, size=len(contents))


@app.get("/api/download/{key}")
async def download_document(
    key: str,
    document_store: DocxDocumentStore = Depends(get_document_store),
):
    """Serve a translated DOCX by the key from the ``completed`` event."""
    try:
        path = document_store.path_for(key)
    except InputError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not path.exists():
        raise HTTPException(status_code=404, detail="Document not found")

    return FileResponse(path, media_type=DOCX_CONTENT_TYPE, filename="translation.docx")


# =============================================================================
# Translation (Server-Sent Events)
# =============================================================================

async def _run_pipeline(
    pipeline: TranslationPipeline,
    provider: BaseAIProvider,
    emitter: ProgressEmitter,
    payload: TranslateRequest,
) -> None:
    try:
        await pipeline.run(
            emitter,
            upload_id=payload.upload_id,
            source_lang=payload.source_lang,
            target_lang=payload.target_lang,
            model=payload.model,
        )
    finally:
        await provider.close()


def _on_run_done(task: asyncio.Task) -> None:
    _running_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.error(f"Translation run task failed: {type(exc).__name__}: {exc}", exc_info=exc)


async def _report_unavailable(emitter: ProgressEmitter, message: str) -> None:
    await emitter.emit(ProgressEvent.error(message))
    await emitter.close()


async def _sse_stream(emitter: ProgressEmitter) -> AsyncIterator[str]:
    try:
        async for event in emitter.events():
            yield event.to_sse()
    finally:
        if not emitter.closed:
            # client disconnected; let the run finish and store its output
            logger.info("Progress subscriber disconnected, detaching")
            emitter.detach()


@app.post("/api/translate")
@limiter.limit(app_settings.translate_rate_limit)
async def translate(
    request: Request,
    payload: TranslateRequest,
    settings: Settings = Depends(get_settings),
    upload_store: UploadStore = Depends(get_upload_store),
    document_store: DocxDocumentStore = Depends(get_document_store),
    glossary: GlossaryManager = Depends(get_glossary),
    provider: Optional[BaseAIProvider] = Depends(get_provider),
):
    """
    Translate an uploaded PDF.

    The response is a ``text/event-stream`` of ``data: <json>`` frames:
    init, progress, chunk, metrics, building, heartbeat and finally exactly
    one of completed / error.
    """
    emitter = ProgressEmitter(
        buffer_size=settings.progress_buffer_size,
        heartbeat_interval=settings.heartbeat_interval_seconds,
    )

    if provider is None:
        coro = _report_unavailable(emitter, "Translation service is not configured")
    else:
        pipeline = TranslationPipeline(
            provider,
            document_store,
            config=PipelineConfig.from_settings(settings),
            source_loader=PdfSourceLoader(upload_store),
            glossary=glossary,
        )
        coro = _run_pipeline(pipeline, provider, emitter, payload)

    task = asyncio.create_task(coro)
    _running_tasks.add(task)
    task.add_done_callback(_on_run_done)

    return StreamingResponse(
        _sse_stream(emitter),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


# =============================================================================
# Maintenance
# =============================================================================

@app.post(
    "/api/cleanup",
    response_model=CleanupResponse,
    response_model_by_alias=True,
    dependencies=[Depends(verify_cleanup_token)],
)
async def cleanup(
    upload_store: UploadStore = Depends(get_upload_store),
    document_store: DocxDocumentStore = Depends(get_document_store),
    settings: Settings = Depends(get_settings),
):
    """Delete uploads and results older than the retention window."""
    deleted = []
    for directory in (upload_store.directory, document_store.directory):
        deleted.extend(await asyncio.to_thread(
            purge_older_than, directory, settings.retention_hours
        ))

    return CleanupResponse(
        message=f"Cleanup completed. Deleted {len(deleted)} files.",
        deleted_files=len(deleted),
        deleted=deleted,
    )


@app.get("/health", response_model=HealthResponse)
async def health(settings: Settings = Depends(get_settings)):
    return HealthResponse(version=APP_VERSION, provider=settings.provider, model=settings.model)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=False)
