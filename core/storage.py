#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Local file storage for uploads and rendered documents.

- UploadStore: validated PDF uploads under ``<root>/uploads/<id>.pdf``
- DocxDocumentStore: rendered translations under ``<root>/results/<id>.docx``
- purge_older_than: retention cleanup for both directories
"""

import re
import time
import uuid
from pathlib import Path
from typing import List, Optional, Sequence, Union

from docx import Document

from config.constants import (
    ALLOWED_UPLOAD_TYPES,
    MAX_UPLOAD_SIZE_MB,
    RESULTS_PREFIX,
    UPLOADS_PREFIX,
)
from config.logging_config import get_logger

from .errors import InputError, StorageError
from .text_sanitizer import sanitize_for_docx

logger = get_logger(__name__)

# uuid4().hex
_KEY_RE = re.compile(r'^[0-9a-f]{32}$')


def _valid_id(value: str) -> bool:
    return bool(_KEY_RE.match(value or ""))


class UploadStore:
    """
    Stores uploaded PDFs.

    Usage:
        store = UploadStore(settings.storage_dir)
        upload_id = store.save(contents, content_type="application/pdf")
        path = store.path_for(upload_id)
    """

    def __init__(
        self,
        root: Union[str, Path],
        max_size_mb: int = MAX_UPLOAD_SIZE_MB,
        allowed_types: Optional[List[str]] = None,
    ):
        self.directory = Path(root) / UPLOADS_PREFIX
        self.max_size_mb = max_size_mb
        self.allowed_types = allowed_types or list(ALLOWED_UPLOAD_TYPES)

    @property
    def max_size_bytes(self) -> int:
        return self.max_size_mb * 1024 * 1024

    def validate(self, contents: bytes, content_type: Optional[str]) -> None:
        """Raise InputError for an empty, oversized or non-PDF upload."""
        if not contents:
            raise InputError("No PDF provided")
        if content_type not in self.allowed_types:
            raise InputError("Only PDF files are allowed")
        if len(contents) > self.max_size_bytes:
            raise InputError(f"File size must be less than {self.max_size_mb}MB")

    def save(self, contents: bytes, content_type: Optional[str] = "application/pdf") -> str:
        """
        Validate and store an upload.

        Returns:
            Upload id (32 hex chars).
        """
        self.validate(contents, content_type)
        upload_id = uuid.uuid4().hex
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            self.path_for(upload_id).write_bytes(contents)
        except OSError as e:
            raise StorageError(f"Failed to store upload: {e}") from e
        logger.info(f"Stored upload {upload_id} ({len(contents)} bytes)")
        return upload_id

    def path_for(self, upload_id: str) -> Path:
        if not _valid_id(upload_id):
            raise InputError(f"Invalid upload id: {upload_id!r}")
        return self.directory / f"{upload_id}.pdf"


class DocxDocumentStore:
    """
    Renders paragraphs into a DOCX file and stores it.

    ``save`` returns the document key (``<id>.docx``), which is the
    retrieval reference reported in the ``completed`` event.
    """

    def __init__(self, root: Union[str, Path]):
        self.directory = Path(root) / RESULTS_PREFIX

    def save(self, paragraphs: Sequence[str]) -> str:
        """
        Write one DOCX paragraph per entry.

        Raises:
            StorageError: If the document cannot be written.
        """
        key = f"{uuid.uuid4().hex}.docx"
        try:
            doc = Document()
            for line in paragraphs:
                doc.add_paragraph(sanitize_for_docx(line))
            self.directory.mkdir(parents=True, exist_ok=True)
            doc.save(str(self.directory / key))
        except (OSError, ValueError) as e:
            raise StorageError(f"Failed to store document: {e}") from e

        logger.info(f"Stored document {key} ({len(paragraphs)} paragraphs)")
        return key

    def path_for(self, key: str) -> Path:
        """Resolve a document key; raises InputError for malformed keys."""
        stem, _, ext = (key or "").partition(".")
        if ext != "docx" or not _valid_id(stem):
            raise InputError(f"Invalid document key: {key!r}")
        return self.directory / key


def purge_older_than(
    directory: Union[str, Path],
    hours: float,
    now: Optional[float] = None,
) -> List[str]:
    """
    Delete files in ``directory`` last modified more than ``hours`` ago.

    Returns:
        Names of deleted files.
    """
    directory = Path(directory)
    if not directory.exists():
        return []

    cutoff = (now if now is not None else time.time()) - hours * 3600
    deleted: List[str] = []
    for path in directory.iterdir():
        if not path.is_file():
            continue
        try:
            if path.stat().st_mtime < cutoff:
                path.unlink()
                deleted.append(path.name)
        except OSError as e:
            logger.warning(f"Could not delete {path}: {e}")

    if deleted:
        logger.info(f"Purged {len(deleted)} file(s) from {directory}")
    return deleted
