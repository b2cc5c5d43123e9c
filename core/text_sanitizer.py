#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
DOCX text sanitization.

Translated text is rendered into WordprocessingML, which rejects NULL bytes,
most C0 control characters and unpaired surrogates. ``sanitize_for_docx``
removes those and normalizes line endings to ``\\n``. It is idempotent:
sanitizing already-sanitized text returns it unchanged.
"""

import re

# C0 controls except tab, newline and carriage return, plus DEL
_INVALID_XML_RE = re.compile(r'[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]')
_SURROGATE_RE = re.compile(r'[\ud800-\udfff]')
_NONCHARACTER_RE = re.compile(r'[\ufffe\uffff]')


def normalize_line_endings(text: str) -> str:
    """Convert CRLF and lone CR to LF."""
    return text.replace('\r\n', '\n').replace('\r', '\n')


def sanitize_for_docx(text: str) -> str:
    """
    Make text safe for the DOCX text model.

    Args:
        text: Raw text returned by the translation model.

    Returns:
        Text without invalid XML characters, with ``\\n`` line endings.
    """
    if not text:
        return ''

    text = normalize_line_endings(text)
    text = _INVALID_XML_RE.sub('', text)
    text = _SURROGATE_RE.sub('', text)
    text = _NONCHARACTER_RE.sub('', text)
    return text
