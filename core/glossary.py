#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
GlossaryManager - Domain terminology injected into the translation prompt
"""

import json
from pathlib import Path
from typing import Dict, Optional

from config.logging_config import get_logger
logger = get_logger(__name__)


# Relational psychoanalysis, English -> Russian
PSYCHO_GLOSSARY: Dict[str, str] = {
    "intersubjectivity": "интерсубъективность",
    "attachment": "привязанность",
    "self-disclosure": "самораскрытие терапевта",
    "enactment": "разыгрывание",
    "countertransference": "контрперенос",
    "transference": "перенос",
    "therapeutic alliance": "терапевтический альянс",
    "object relations": "объектные отношения",
    "holding environment": "поддерживающая среда",
    "containment": "контейнирование",
    "mentalization": "ментализация",
    "projective identification": "проективная идентификация",
    "therapeutic frame": "терапевтическая рамка",
    "working through": "проработка",
    "resistance": "сопротивление",
}


class GlossaryManager:
    """
    Terminology for consistent translation.

    Starts from the built-in psychoanalysis glossary (or an explicit term map)
    and can be extended with JSON glossaries of the form
    ``{"domain": ..., "description": ..., "terms": {source: target}}``.
    """

    MAX_PROMPT_TERMS = 50

    def __init__(
        self,
        terms: Optional[Dict[str, str]] = None,
        glossary_dir: Optional[Path] = None,
        glossary_name: Optional[str] = None,
    ):
        self.terms: Dict[str, str] = dict(PSYCHO_GLOSSARY if terms is None else terms)
        self.domain = 'psychoanalysis' if terms is None else 'default'
        self.description = ""

        if glossary_dir and glossary_name:
            glossary_path = Path(glossary_dir) / f"{glossary_name}.json"
            if glossary_path.exists():
                self.load_glossary(glossary_path)
                self.domain = glossary_name
            else:
                logger.warning(f"Glossary not found: {glossary_path}")

    def load_glossary(self, path: Path):
        """Merge terms from a JSON glossary file."""
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Cannot load glossary {path}: {e}")
            return

        if not isinstance(data, dict) or not isinstance(data.get("terms", {}), dict):
            logger.warning(f"Cannot load glossary {path}: expected an object with a 'terms' mapping")
            return

        self.terms.update(data.get("terms", {}))
        if 'domain' in data:
            self.domain = data['domain']
        if 'description' in data:
            self.description = data['description']
        logger.info(f"Loaded {len(data.get('terms', {}))} terms from {Path(path).name}")

    def add_term(self, source_term: str, target_term: str):
        """Add or update a term"""
        self.terms[source_term] = target_term

    def remove_term(self, source_term: str):
        """Remove a term"""
        self.terms.pop(source_term, None)

    def build_prompt_section(self) -> str:
        """Render terms as ``a → b`` pairs for the system prompt."""
        if not self.terms:
            return ""
        pairs = list(self.terms.items())[:self.MAX_PROMPT_TERMS]
        return ", ".join(f"{src} → {dst}" for src, dst in pairs)

    def get_terms(self) -> Dict[str, str]:
        """Get all terms"""
        return self.terms.copy()

    def get_term_count(self) -> int:
        """Get number of terms"""
        return len(self.terms)
