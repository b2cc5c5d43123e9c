"""
FastAPI dependencies shared by the routes.

Tests replace these through ``app.dependency_overrides``.
"""

from typing import Optional

from fastapi import Depends

from ai_providers import BaseAIProvider, create_provider_from_settings
from config.logging_config import get_logger
from config.settings import Settings, settings as default_settings
from core.glossary import GlossaryManager
from core.storage import DocxDocumentStore, UploadStore

logger = get_logger(__name__)


def get_settings() -> Settings:
    return default_settings


def get_upload_store(settings: Settings = Depends(get_settings)) -> UploadStore:
    return UploadStore(settings.storage_dir, max_size_mb=settings.max_upload_size_mb)


def get_document_store(settings: Settings = Depends(get_settings)) -> DocxDocumentStore:
    return DocxDocumentStore(settings.storage_dir)


def get_glossary(settings: Settings = Depends(get_settings)) -> GlossaryManager:
    return GlossaryManager(glossary_dir=settings.glossary_dir, glossary_name=settings.glossary_name)


def get_provider(settings: Settings = Depends(get_settings)) -> Optional[BaseAIProvider]:
    """
    A fresh provider per request; the caller closes it after the run.

    Returns None when the API key is missing so the route can report it
    as an ``error`` event instead of failing the request.
    """
    try:
        return create_provider_from_settings(settings)
    except ValueError as e:
        logger.error(f"Translation provider unavailable: {e}")
        return None
