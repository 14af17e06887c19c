"""
Supported languages, script detection and translation direction
"""

import re
from dataclasses import dataclass
from enum import Enum


class DirectionFlag(str, Enum):
    """Which side of a translated word the reader is shown first"""

    SHOW_TARGET_FROM_ENGLISH = "ShowTargetFromEnglish"
    SHOW_ENGLISH_FROM_TARGET = "ShowEnglishFromTarget"


@dataclass(frozen=True)
class Language:
    """A language the pipeline can translate to or from"""

    code: str
    name: str
    native_name: str
    script_pattern: re.Pattern
    has_script: bool = False
    reading_label: str = ""

    def count_script_characters(self, text: str) -> int:
        """Number of characters of text written in this language's script"""
        return len(self.script_pattern.findall(text or ""))


LANGUAGES: dict[str, Language] = {
    "en": Language(
        code="en",
        name="English",
        native_name="English",
        script_pattern=re.compile(r"[A-Za-z]"),
    ),
    "ja": Language(
        code="ja",
        name="Japanese",
        native_name="日本語",
        script_pattern=re.compile(r"[\u3040-\u309F\u30A0-\u30FF\u4E00-\u9FAF]"),
        has_script=True,
        reading_label="hiragana",
    ),
    "ko": Language(
        code="ko",
        name="Korean",
        native_name="한국어",
        script_pattern=re.compile(r"[\uAC00-\uD7AF\u1100-\u11FF\u3130-\u318F]"),
        has_script=True,
        reading_label="romanization",
    ),
}


def get_language(code: str) -> Language:
    """Get language by ISO code, raising ValueError for unsupported codes"""
    language = LANGUAGES.get((code or "").lower())
    if language is None:
        raise ValueError(f"Unsupported language: {code!r}")
    return language


def is_supported_pair(source_lang: str, target_lang: str) -> bool:
    """Check if a translation pair is supported"""
    source = (source_lang or "").lower()
    target = (target_lang or "").lower()
    return source != target and source in LANGUAGES and target in LANGUAGES


def contains_language_characters(text: str, code: str) -> bool:
    """Check if text contains any character of the language's script"""
    return get_language(code).count_script_characters(text) > 0


def script_ratio(text: str, code: str) -> float:
    """Share of non-whitespace characters written in the language's script"""
    if not text:
        return 0.0
    visible = [char for char in text if not char.isspace()]
    if not visible:
        return 0.0
    return get_language(code).count_script_characters(text) / len(visible)


def is_english_only(text: str) -> bool:
    """Check if text consists of Latin letters and common punctuation only"""
    return bool(re.fullmatch(r"[a-zA-Z\s.,!?;:\"'()\[\]{}—–-]+", text or ""))
