"""
Vocabulary classification: which words of a text are worth teaching
"""

import logging
import math
import re
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any

from .exceptions import TaggingError
from .pos_tagger import CONTENT_POS, PartOfSpeech, PartOfSpeechTagger, TaggedToken

logger = logging.getLogger(__name__)

# Articles, basic prepositions/conjunctions, copulas and auxiliaries,
# pronouns and determiners. Never taught regardless of tagging.
STOPLIST = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "nor", "yet", "so",
        "in", "on", "at", "to", "for", "of", "with", "by", "from", "as",
        "into", "onto", "upon", "about", "than", "if", "off", "out", "up",
        "is", "are", "was", "were", "be", "been", "being", "am",
        "have", "has", "had", "do", "does", "did",
        "will", "would", "shall", "should", "could", "may", "might", "must", "can",
        "this", "that", "these", "those", "there", "here",
        "i", "you", "he", "she", "it", "we", "they",
        "me", "him", "her", "us", "them",
        "my", "your", "his", "its", "our", "their",
        "who", "whom", "whose", "which", "what", "when", "where", "why", "how",
        "not", "no", "yes",
    }
)

EASY_SUFFIXES = ("ing", "ed", "er", "est", "ly")
HARD_SUFFIXES = ("tion", "sion", "ment", "ness", "ity", "ous", "ful")

POS_LEVEL_ADJUSTMENT = {
    PartOfSpeech.NOUN: 0.0,
    PartOfSpeech.VERB: 1.0,
    PartOfSpeech.ADVERB: 1.5,
    PartOfSpeech.ADJECTIVE: 0.5,
    PartOfSpeech.PROPER_NOUN: -1.0,
}

MIN_LEVEL = 1
MAX_LEVEL = 10


@dataclass(frozen=True)
class VocabularyCandidate:
    """A teachable word found in a text"""

    surface_form: str
    part_of_speech: PartOfSpeech
    source_context: str
    level: int


def estimate_level(word: str, pos: PartOfSpeech | str) -> int:
    """
    Estimate how hard a word is to learn

    Args:
        word: Surface form of the word
        pos: Part of speech (enum member or name such as "noun")

    Returns:
        Difficulty level from 1 (easiest) to 10
    """
    clean_word = (word or "").strip().lower()
    part_of_speech = PartOfSpeech.parse(pos)
    length = len(clean_word)

    level = 5.0

    if length <= 4:
        level -= 1
    if length >= 8:
        level += 1
    if length >= 12:
        level += 1

    level += POS_LEVEL_ADJUSTMENT.get(part_of_speech, 0.0)

    if clean_word.endswith(EASY_SUFFIXES):
        level -= 0.5
    if clean_word.endswith(HARD_SUFFIXES):
        level += 0.5

    level = max(MIN_LEVEL, min(MAX_LEVEL, level))
    # Half-up so x.5 scores do not depend on banker's rounding
    return int(math.floor(level + 0.5))


class VocabularyClassifier:
    """Finds teachable vocabulary in arbitrary English text"""

    def __init__(
        self,
        tagger: PartOfSpeechTagger,
        min_length: int = 3,
        max_length: int = 15,
        cache: MutableMapping | None = None,
        max_cache_entries: int | None = None,
    ):
        self.tagger = tagger
        self.min_length = min_length
        self.max_length = max_length
        self.cache = cache
        self.max_cache_entries = max_cache_entries
        self.word_pattern = re.compile(r"[A-Za-z']+")
        self.sentence_pattern = re.compile(r"[^.!?\n]+[.!?]*")
        self.repeated_pattern = re.compile(r"(.)\1{3,}")

    def classify(self, text: str) -> list[VocabularyCandidate]:
        """
        Extract teachable words from text

        Args:
            text: Source text

        Returns:
            Candidates ordered by level (desc), length (desc), then alphabetically.
            Empty when nothing qualifies or tagging fails.
        """
        if not text or not text.strip():
            return []

        if self.cache is not None and text in self.cache:
            # Reinsert so eviction drops the least recently used text
            cached = self.cache.pop(text)
            self.cache[text] = cached
            return list(cached)

        try:
            tokens = self.tagger.tag(text)
        except TaggingError as e:
            logger.warning(f"Tagging failed, no vocabulary extracted: {e}")
            return []
        except Exception as e:
            logger.error(f"Unexpected tagger error: {e}", exc_info=True)
            return []

        sentences = self._sentence_spans(text)
        seen: set[str] = set()
        candidates = []

        for token in tokens:
            if not self.is_candidate(token):
                continue

            key = token.text.lower()
            if key in seen:
                continue
            seen.add(key)

            candidates.append(
                VocabularyCandidate(
                    surface_form=token.text,
                    part_of_speech=token.pos,
                    source_context=self._context_for(token, text, sentences),
                    level=estimate_level(token.text, token.pos),
                )
            )

        candidates.sort(key=lambda c: (-c.level, -len(c.surface_form), c.surface_form.lower()))

        logger.info(
            f"Classified {len(candidates)} vocabulary candidates from text of {len(text)} characters"
        )

        if self.cache is not None:
            self.cache[text] = tuple(candidates)
            if self.max_cache_entries is not None:
                while len(self.cache) > self.max_cache_entries:
                    self.cache.pop(next(iter(self.cache)))
        return candidates

    def is_candidate(self, token: TaggedToken) -> bool:
        """Check if a tagged token is teachable vocabulary"""
        if token.pos not in CONTENT_POS:
            return False
        return self.is_valid_word(token.text)

    def is_valid_word(self, word: str) -> bool:
        """Check the surface-form rules independent of tagging"""
        if not word or not self.word_pattern.fullmatch(word):
            return False

        clean_word = word.lower()
        letters = clean_word.replace("'", "")
        if len(letters) < self.min_length or len(letters) > self.max_length:
            return False

        if clean_word in STOPLIST:
            return False

        if self.repeated_pattern.search(clean_word):
            return False

        return True

    def vocabulary_stats(self, text: str) -> dict[str, Any]:
        """Summarize the vocabulary of a text by part of speech and level"""
        vocabulary = self.classify(text)

        by_type: dict[str, int] = {}
        by_level: dict[int, int] = {}
        for candidate in vocabulary:
            pos_name = candidate.part_of_speech.value
            by_type[pos_name] = by_type.get(pos_name, 0) + 1
            by_level[candidate.level] = by_level.get(candidate.level, 0) + 1

        total = len(vocabulary)
        average = round(sum(c.level for c in vocabulary) / total, 2) if total else 0.0

        return {
            "total_words": total,
            "by_type": by_type,
            "by_level": by_level,
            "average_level": average,
            "vocabulary": vocabulary[:20],
        }

    def _sentence_spans(self, text: str) -> list[tuple[int, int]]:
        return [(m.start(), m.end()) for m in self.sentence_pattern.finditer(text)]

    def _context_for(
        self, token: TaggedToken, text: str, sentences: list[tuple[int, int]]
    ) -> str:
        for start, end in sentences:
            if start <= token.start < end:
                return text[start:end].strip()
        return text.strip()
