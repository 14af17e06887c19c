"""
Reading difficulty of English text and markdown-to-plaintext reduction
"""

import re
from typing import Any

_SYLLABLE_PATTERN = re.compile(r"[aeiouy]+", re.IGNORECASE)


def strip_markdown(text: str) -> str:
    """Reduce markdown-formatted text to plaintext"""
    if not text or not text.strip():
        return ""

    plaintext = text
    plaintext = re.sub(r"```[\s\S]*?```", "", plaintext)
    plaintext = re.sub(r"`([^`]+)`", r"\1", plaintext)
    plaintext = re.sub(r"!\[([^\]]*)\]\([^)]+\)", "", plaintext)
    plaintext = re.sub(r"\[([^\]]+)\]\([^)]+\)", r"\1", plaintext)
    plaintext = re.sub(r"^#{1,6}\s+", "", plaintext, flags=re.MULTILINE)
    plaintext = re.sub(r"\*\*(.*?)\*\*", r"\1", plaintext)
    plaintext = re.sub(r"\*(.*?)\*", r"\1", plaintext)
    # Underscore emphasis only at word boundaries, never inside snake_case
    plaintext = re.sub(r"(?<!\w)__(.+?)__(?!\w)", r"\1", plaintext)
    plaintext = re.sub(r"(?<!\w)_(.+?)_(?!\w)", r"\1", plaintext)
    plaintext = re.sub(r"~~(.+?)~~", r"\1", plaintext)
    # Quote markers, including Reddit's escaped form
    plaintext = re.sub(r"^\s*(&gt;|>)\s*", "", plaintext, flags=re.MULTILINE)
    plaintext = re.sub(r"^[-*_]{3,}$", "", plaintext, flags=re.MULTILINE)
    plaintext = re.sub(r"^\s*[-*+]\s+", "", plaintext, flags=re.MULTILINE)
    plaintext = re.sub(r"^\s*\d+\.\s+", "", plaintext, flags=re.MULTILINE)
    plaintext = re.sub(r"<[^>]+>", "", plaintext)
    plaintext = re.sub(r"\n{3,}", "\n\n", plaintext)

    return plaintext.strip()


def count_syllables(word: str) -> int:
    """Estimate syllables as groups of vowels"""
    return len(_SYLLABLE_PATTERN.findall(word or "")) or 1


def get_text_statistics(text: str) -> dict[str, Any]:
    """
    Compute readability statistics for plaintext

    Returns:
        Dictionary with word/sentence/syllable counts, Flesch reading ease
        and the derived difficulty level (1-5)
    """
    clean_text = re.sub(r"[^\w\s.!?]", " ", text or "").strip()
    words = clean_text.split()
    word_count = len(words)

    if word_count == 0:
        return {
            "word_count": 0,
            "sentence_count": 0,
            "avg_sentence_length": 0.0,
            "avg_syllables_per_word": 0.0,
            "syllable_count": 0,
            "flesch_score": 0.0,
            "difficulty": 1,
        }

    sentences = [s for s in re.split(r"[.!?]+", clean_text) if s.strip()]
    sentence_count = len(sentences) or 1
    syllable_count = sum(count_syllables(word) for word in words)

    avg_sentence_length = word_count / sentence_count
    avg_syllables = syllable_count / word_count
    flesch_score = 206.835 - 1.015 * avg_sentence_length - 84.6 * avg_syllables

    return {
        "word_count": word_count,
        "sentence_count": sentence_count,
        "avg_sentence_length": round(avg_sentence_length, 2),
        "avg_syllables_per_word": round(avg_syllables, 2),
        "syllable_count": syllable_count,
        "flesch_score": round(flesch_score, 2),
        "difficulty": _difficulty_from_flesch(flesch_score, word_count),
    }


def calculate_text_difficulty(text: str) -> int:
    """Reading difficulty from 1 (beginner) to 5 (expert)"""
    return get_text_statistics(text)["difficulty"]


def _difficulty_from_flesch(flesch_score: float, word_count: int) -> int:
    if flesch_score >= 80:
        difficulty = 1
    elif flesch_score >= 60:
        difficulty = 2
    elif flesch_score >= 50:
        difficulty = 3
    elif flesch_score >= 30:
        difficulty = 4
    else:
        difficulty = 5

    # Very short texts read easier, very long ones harder
    if word_count < 30:
        difficulty = max(1, difficulty - 1)
    if word_count > 300:
        difficulty = min(5, difficulty + 1)

    return difficulty
