#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Settings - Centralized configuration management
"""

from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings

from .constants import (
    PIPELINE_UNIT_SIZE_PAGES,
    PIPELINE_CONCURRENCY_LIMIT,
    PIPELINE_TASK_TIMEOUT_MS,
    PIPELINE_MAX_ATTEMPTS,
    PIPELINE_RUN_DEADLINE_MS,
    PIPELINE_ADMISSION_MARGIN_MS,
    RETRY_BASE_DELAY_MS,
    RETRY_JITTER_MS,
    CHUNK_MAX_CHARS,
    HEARTBEAT_INTERVAL_SECONDS,
    PROGRESS_BUFFER_SIZE,
    MAX_UPLOAD_SIZE_MB,
    RETENTION_HOURS,
    TRANSLATE_RATE_LIMIT,
    DEFAULT_MODEL,
    DEFAULT_SOURCE_LANG,
    DEFAULT_TARGET_LANG,
)


# Base directory
BASE_DIR = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    """Application settings"""

    # ========== API Keys ==========
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    openai_base_url: Optional[str] = None

    # ========== Provider & Model ==========
    provider: str = "openai"  # openai | anthropic
    model: str = DEFAULT_MODEL

    # ========== Languages ==========
    source_lang: str = DEFAULT_SOURCE_LANG
    target_lang: str = DEFAULT_TARGET_LANG

    # ========== Pipeline ==========
    unit_size_pages: int = PIPELINE_UNIT_SIZE_PAGES
    concurrency_limit: int = PIPELINE_CONCURRENCY_LIMIT
    per_task_timeout_ms: int = PIPELINE_TASK_TIMEOUT_MS
    max_attempts_per_unit: int = PIPELINE_MAX_ATTEMPTS
    run_deadline_ms: int = PIPELINE_RUN_DEADLINE_MS
    admission_margin_ms: int = PIPELINE_ADMISSION_MARGIN_MS
    retry_base_delay_ms: int = RETRY_BASE_DELAY_MS
    retry_jitter_ms: int = RETRY_JITTER_MS
    chunk_max_chars: int = CHUNK_MAX_CHARS

    # ========== Progress ==========
    heartbeat_interval_seconds: float = HEARTBEAT_INTERVAL_SECONDS
    progress_buffer_size: int = PROGRESS_BUFFER_SIZE

    # ========== Glossary ==========
    glossary_name: Optional[str] = None

    # ========== File Upload & Rate Limiting ==========
    max_upload_size_mb: int = MAX_UPLOAD_SIZE_MB
    retention_hours: int = RETENTION_HOURS
    translate_rate_limit: str = TRANSLATE_RATE_LIMIT

    # ========== Security ==========
    cleanup_secret: str = "cleanup-secret"

    # ========== Directories ==========
    storage_dir: Path = BASE_DIR / "data" / "storage"
    glossary_dir: Path = BASE_DIR / "glossary"

    class Config:
        env_file = str(BASE_DIR / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"  # Allow extra fields from .env that aren't defined in model

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self.storage_dir.mkdir(exist_ok=True, parents=True)

    def get_api_key(self) -> str:
        """Get API key based on provider"""
        if self.provider == "openai":
            if not self.openai_api_key:
                raise ValueError("OPENAI_API_KEY not set in .env")
            return self.openai_api_key
        elif self.provider == "anthropic":
            if not self.anthropic_api_key:
                raise ValueError("ANTHROPIC_API_KEY not set in .env")
            return self.anthropic_api_key
        else:
            raise ValueError(f"Unsupported provider: {self.provider}")


# Global settings instance
settings = Settings()
