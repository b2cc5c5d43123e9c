"""
Unit tests for core/text_sanitizer.py
"""
import pytest
from core.text_sanitizer import normalize_line_endings, sanitize_for_docx


class TestNormalizeLineEndings:

    def test_crlf_and_cr(self):
        assert normalize_line_endings("a\r\nb\rc\nd") == "a\nb\nc\nd"

    def test_no_change(self):
        assert normalize_line_endings("plain\ntext") == "plain\ntext"


class TestSanitizeForDocx:

    def test_empty(self):
        assert sanitize_for_docx("") == ""
        assert sanitize_for_docx(None) == ""

    def test_removes_control_characters(self):
        assert sanitize_for_docx("a\x00b\x07c\x1fd\x7fe") == "abcde"

    def test_keeps_tab_and_newline(self):
        assert sanitize_for_docx("col1\tcol2\nnext") == "col1\tcol2\nnext"

    def test_removes_surrogates_and_noncharacters(self):
        assert sanitize_for_docx("x\ud800y\uffffz\ufffe") == "xyz"

    def test_keeps_unicode_text(self):
        text = "Перенос и контрперенос — это ключевые понятия."
        assert sanitize_for_docx(text) == text

    def test_normalizes_line_endings(self):
        assert sanitize_for_docx("one\r\ntwo\rthree") == "one\ntwo\nthree"

    @pytest.mark.parametrize("raw", [
        "clean text",
        "a\r\n\x00b\r\x0bc",
        "\x01\x02\r\r\n\ud83d",
        "Терапевтический альянс\r\n\x0c",
    ])
    def test_idempotent(self, raw):
        once = sanitize_for_docx(raw)
        assert sanitize_for_docx(once) == once
