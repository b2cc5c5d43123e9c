#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Language Support - Language names used in translation prompts
"""

from typing import Dict, List
from dataclasses import dataclass


@dataclass
class LanguageInfo:
    """Language information"""
    code: str
    name: str
    native_name: str


# Language database
LANGUAGES: Dict[str, LanguageInfo] = {
    "en": LanguageInfo(code="en", name="English", native_name="English"),
    "ru": LanguageInfo(code="ru", name="Russian", native_name="Русский"),
    "vi": LanguageInfo(code="vi", name="Vietnamese", native_name="Tiếng Việt"),
    "zh": LanguageInfo(code="zh", name="Chinese", native_name="中文"),
    "ja": LanguageInfo(code="ja", name="Japanese", native_name="日本語"),
    "ko": LanguageInfo(code="ko", name="Korean", native_name="한국어"),
    "fr": LanguageInfo(code="fr", name="French", native_name="Français"),
    "es": LanguageInfo(code="es", name="Spanish", native_name="Español"),
    "de": LanguageInfo(code="de", name="German", native_name="Deutsch"),
    "it": LanguageInfo(code="it", name="Italian", native_name="Italiano"),
    "uk": LanguageInfo(code="uk", name="Ukrainian", native_name="Українська"),
}


def get_language_name(code_or_name: str) -> str:
    """
    Get the English language name for a code.

    Callers may pass either an ISO 639-1 code ("ru") or a name that is
    already human readable ("Russian"); unknown values are returned as-is.
    """
    if not code_or_name:
        return code_or_name
    lang_info = LANGUAGES.get(code_or_name.lower())
    return lang_info.name if lang_info else code_or_name


def get_supported_languages() -> List[str]:
    """Get list of supported language codes"""
    return list(LANGUAGES.keys())
