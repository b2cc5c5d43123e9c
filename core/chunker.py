#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Chunker - Deterministic partitioning of extracted text into work units.

Two modes are supported:
- Page mode: consecutive pages are grouped into runs of ``unit_size_pages``.
  Used when the extraction collaborator reports page-delimited text.
- Character-budget mode: flat text is split on paragraph boundaries and
  packed into buffers of at most ``max_chars`` characters. Paragraphs longer
  than the budget are hard-split so no unit ever exceeds it.

Usage:
    from core.chunker import SmartChunker

    chunker = SmartChunker(max_chars=3000)
    units = chunker.chunk_pages(page_texts, unit_size_pages=20)
    units = chunker.create_chunks(flat_text)

Classes:
    SourceDocument: Page texts plus declared page count (immutable).
    WorkUnit: One bounded slice of source text (immutable).
    SmartChunker: Chunking engine for both modes.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from config.constants import CHUNK_MAX_CHARS, PAGE_SEPARATOR
from config.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class SourceDocument:
    """
    Extracted source text as handed over by the ingestion collaborator.

    Attributes:
        page_texts: Text of each page in document order.
        page_count: Declared page count; 0 when unknown.
        flat: True when the collaborator supplied a single flat text with
            no page structure (selects character-budget chunking).
    """
    page_texts: Tuple[str, ...]
    page_count: int = 0
    flat: bool = False

    @classmethod
    def from_pages(cls, pages: Sequence[str], page_count: int = 0) -> "SourceDocument":
        return cls(page_texts=tuple(pages), page_count=max(0, page_count))

    @classmethod
    def from_text(cls, text: str) -> "SourceDocument":
        return cls(page_texts=(text,), page_count=0, flat=True)

    @property
    def text(self) -> str:
        return PAGE_SEPARATOR.join(self.page_texts)

    @property
    def is_blank(self) -> bool:
        return not any(p.strip() for p in self.page_texts)


@dataclass(frozen=True)
class WorkUnit:
    """
    A bounded slice of source text scheduled as a single translation call.

    Attributes:
        index: Position in original order (0-based, contiguous).
        text: Text payload to translate.
        source_page_range: First and last page (1-based, inclusive) covered
            by this unit, or None in character-budget mode.
    """
    index: int
    text: str
    source_page_range: Optional[Tuple[int, int]] = None

    @property
    def char_count(self) -> int:
        return len(self.text)

    @property
    def estimated_tokens(self) -> int:
        return len(self.text) // 4


class SmartChunker:
    """
    Text chunker for translation work units.

    Attributes:
        max_chars: Character budget per unit in character-budget mode.

    Example:
        >>> chunker = SmartChunker(max_chars=3000)
        >>> units = chunker.chunk_pages(["p1", "p2", "p3"], unit_size_pages=2)
        >>> [u.source_page_range for u in units]
        [(1, 2), (3, 3)]
    """

    def __init__(self, max_chars: int = CHUNK_MAX_CHARS):
        if max_chars < 1:
            raise ValueError(f"max_chars must be >= 1, got {max_chars}")
        self.max_chars = max_chars

    def chunk_pages(
        self,
        pages: Sequence[str],
        unit_size_pages: int,
        page_count: Optional[int] = None,
    ) -> List[WorkUnit]:
        """
        Group pages into consecutive runs of ``unit_size_pages``.

        Args:
            pages: Page texts in document order.
            unit_size_pages: Pages per unit (>= 1). The last unit may be smaller.
            page_count: Known page count. Defaults to ``len(pages)``. When it
                is 1 or less the whole text becomes a single unit.

        Returns:
            Work units indexed from 0. Blank units are dropped before indexing.
        """
        if unit_size_pages < 1:
            raise ValueError(f"unit_size_pages must be >= 1, got {unit_size_pages}")

        if page_count is None:
            page_count = len(pages)

        if page_count <= 1:
            text = PAGE_SEPARATOR.join(pages).strip()
            if not text:
                return []
            return [WorkUnit(index=0, text=text, source_page_range=(1, max(1, len(pages))))]

        groups = []
        for start in range(0, len(pages), unit_size_pages):
            group = pages[start:start + unit_size_pages]
            text = PAGE_SEPARATOR.join(group).strip()
            if text:
                groups.append((text, (start + 1, start + len(group))))

        units = [
            WorkUnit(index=i, text=text, source_page_range=page_range)
            for i, (text, page_range) in enumerate(groups)
        ]
        logger.debug(f"Page chunking: {len(pages)} pages -> {len(units)} units")
        return units

    def split_into_paragraphs(self, text: str) -> List[str]:
        """
        Split text into non-empty paragraphs on blank lines.

        Args:
            text: Input text to split.

        Returns:
            List of stripped paragraph strings.
        """
        paragraphs = re.split(r'\n\s*\n', text)
        return [p.strip() for p in paragraphs if p.strip()]

    def create_chunks(self, text: str) -> List[WorkUnit]:
        """
        Character-budget chunking for flat text.

        Paragraphs are accumulated into a buffer joined by a blank line. A
        buffer is flushed before it would exceed ``max_chars``. A paragraph
        longer than the budget is hard-split into budget-sized pieces, and
        each piece goes through the same buffering.

        Args:
            text: Full document text.

        Returns:
            Work units indexed from 0, none longer than ``max_chars``.
        """
        pieces: List[str] = []
        for para in self.split_into_paragraphs(text):
            if len(para) > self.max_chars:
                pieces.extend(
                    para[i:i + self.max_chars]
                    for i in range(0, len(para), self.max_chars)
                )
            else:
                pieces.append(para)

        buffers: List[str] = []
        current: List[str] = []
        current_length = 0
        for piece in pieces:
            # separator counts towards the budget
            added = len(piece) + (len(PAGE_SEPARATOR) if current else 0)
            if current and current_length + added > self.max_chars:
                buffers.append(PAGE_SEPARATOR.join(current))
                current = [piece]
                current_length = len(piece)
            else:
                current.append(piece)
                current_length += added

        if current:
            buffers.append(PAGE_SEPARATOR.join(current))

        units = [
            WorkUnit(index=i, text=buf)
            for i, buf in enumerate(b for b in buffers if b.strip())
        ]
        logger.debug(f"Character chunking: {len(text)} chars -> {len(units)} units")
        return units

    def chunk_document(self, source: SourceDocument, unit_size_pages: int) -> List[WorkUnit]:
        """
        Chunk a source document with the mode its shape calls for.

        Flat documents use character-budget chunking. Paged documents use
        page grouping, with the declared page count when there is one and
        the number of page texts otherwise.
        """
        if source.flat:
            return self.create_chunks(source.text)
        page_count = source.page_count or len(source.page_texts)
        return self.chunk_pages(source.page_texts, unit_size_pages, page_count=page_count)


def chunk(source_pages: Sequence[str], unit_size_pages: int) -> List[WorkUnit]:
    """Group page texts into work units of ``unit_size_pages`` pages."""
    return SmartChunker().chunk_pages(source_pages, unit_size_pages)
