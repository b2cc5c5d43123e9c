"""
Unit tests for core/glossary.py and core/language.py
"""
import json
from unittest.mock import patch

import pytest
from core.glossary import GlossaryManager, PSYCHO_GLOSSARY
from core.language import get_language_name, get_supported_languages


class TestGlossaryManager:

    def test_default_glossary(self, real_glossary):
        assert real_glossary.domain == "psychoanalysis"
        assert real_glossary.get_term_count() == len(PSYCHO_GLOSSARY)
        assert real_glossary.get_terms()["transference"] == PSYCHO_GLOSSARY["transference"]

    def test_custom_terms(self):
        glossary = GlossaryManager(terms={"AI": "ИИ"})
        assert glossary.domain == "default"
        assert glossary.get_terms() == {"AI": "ИИ"}

    def test_add_and_remove_term(self):
        glossary = GlossaryManager(terms={})
        glossary.add_term("ego", "эго")
        assert glossary.get_terms() == {"ego": "эго"}
        glossary.remove_term("ego")
        glossary.remove_term("missing")
        assert glossary.get_term_count() == 0

    def test_prompt_section(self):
        glossary = GlossaryManager(terms={"ego": "эго", "id": "ид"})
        assert glossary.build_prompt_section() == "ego → эго, id → ид"

    def test_prompt_section_empty(self):
        assert GlossaryManager(terms={}).build_prompt_section() == ""

    def test_prompt_section_is_capped(self):
        terms = {f"term{i}": f"термин{i}" for i in range(80)}
        section = GlossaryManager(terms=terms).build_prompt_section()
        assert section.count("→") == GlossaryManager.MAX_PROMPT_TERMS

    def test_get_terms_returns_copy(self, real_glossary):
        terms = real_glossary.get_terms()
        terms["new"] = "новый"
        assert "new" not in real_glossary.get_terms()

    def test_load_named_glossary(self, temp_dir):
        (temp_dir / "clinical.json").write_text(json.dumps({
            "domain": "clinical",
            "description": "Clinical terms",
            "terms": {"enactment": "отыгрывание"},
        }), encoding="utf-8")

        glossary = GlossaryManager(glossary_dir=temp_dir, glossary_name="clinical")

        assert glossary.domain == "clinical"
        assert glossary.description == "Clinical terms"
        assert glossary.get_terms()["enactment"] == "отыгрывание"
        # built-in terms are kept
        assert "transference" in glossary.get_terms()

    def test_missing_named_glossary(self, temp_dir):
        glossary = GlossaryManager(glossary_dir=temp_dir, glossary_name="nope")
        assert glossary.domain == "psychoanalysis"

    def test_invalid_json_is_ignored(self, temp_dir):
        path = temp_dir / "broken.json"
        path.write_text("{not json", encoding="utf-8")
        glossary = GlossaryManager(terms={"a": "б"})
        glossary.load_glossary(path)
        assert glossary.get_terms() == {"a": "б"}

    @pytest.mark.parametrize("content", [
        ["transference", "перенос"],
        {"terms": ["transference"]},
        "just a string",
    ])
    def test_wrong_shape_is_ignored(self, temp_dir, content):
        (temp_dir / "odd.json").write_text(json.dumps(content), encoding="utf-8")

        with patch("core.glossary.logger") as mock_logger:
            glossary = GlossaryManager(glossary_dir=temp_dir, glossary_name="odd")

        assert glossary.get_terms() == PSYCHO_GLOSSARY
        mock_logger.warning.assert_called_once()


class TestLanguage:

    @pytest.mark.parametrize("value,expected", [
        ("en", "English"),
        ("RU", "Russian"),
        ("vi", "Vietnamese"),
        ("Russian", "Russian"),
        ("Klingon", "Klingon"),
    ])
    def test_get_language_name(self, value, expected):
        assert get_language_name(value) == expected

    def test_supported_languages(self):
        assert {"en", "ru"} <= set(get_supported_languages())
