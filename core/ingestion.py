#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Source ingestion: page texts from a stored PDF upload.
"""

import asyncio
from pathlib import Path
from typing import List

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from config.logging_config import get_logger

from .chunker import SourceDocument
from .errors import SourceNotFound, SourceUnreadable

logger = get_logger(__name__)


def extract_pages(path: Path) -> List[str]:
    """Extract the text of every page; pages without text yield ''."""
    reader = PdfReader(str(path))
    return [page.extract_text() or "" for page in reader.pages]


class PdfSourceLoader:
    """
    Loads an uploaded PDF into a SourceDocument.

    Usage:
        loader = PdfSourceLoader(upload_store)
        source = await loader.load(upload_id)
    """

    def __init__(self, upload_store):
        self.upload_store = upload_store

    async def load(self, upload_id: str) -> SourceDocument:
        """
        Raises:
            SourceNotFound: No upload with this id.
            SourceUnreadable: The file is not a readable PDF.
        """
        path = self.upload_store.path_for(upload_id)
        if not path.exists():
            raise SourceNotFound(f"Upload not found: {upload_id}")

        try:
            pages = await asyncio.to_thread(extract_pages, path)
        except (PdfReadError, OSError, ValueError) as e:
            raise SourceUnreadable(f"Could not read PDF: {e}") from e

        logger.info(f"Extracted {len(pages)} pages from upload {upload_id}")
        return SourceDocument.from_pages(pages, page_count=len(pages))
