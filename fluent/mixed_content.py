"""
Mixed-language content: partially translating a text to match a learner level

The composer keeps the source text untouched and records translated words as
(start, length, index) spans. The `{{WORD:<index>}}` marker form consumed by
the rendering layer is produced from those spans on demand.
"""

import asyncio
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from .languages import DirectionFlag, get_language, script_ratio
from .text_difficulty import strip_markdown
from .translation_orchestrator import TranslationOrchestrator
from .vocabulary_classifier import VocabularyCandidate, VocabularyClassifier

logger = logging.getLogger(__name__)

MIN_LEARNER_LEVEL = 1
MAX_LEARNER_LEVEL = 5

MARKER_PATTERN = re.compile(r"\{\{WORD:(\d+)\}\}")
# Markers plus their escaped form `{{WORD\:n}}`, `{{WORD\\:n}}`, ...
LITERAL_MARKER_PATTERN = re.compile(r"\{\{WORD(\\*):(\d+)\}\}")


def make_marker(index: int) -> str:
    """Marker token for a word index"""
    return f"{{{{WORD:{index}}}}}"


@dataclass(frozen=True)
class WordMetadata:
    """What the renderer needs to make one marker interactive"""

    index: int
    original: str
    translation: str
    direction_flag: DirectionFlag = DirectionFlag.SHOW_TARGET_FROM_ENGLISH

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "original": self.original,
            "translation": self.translation,
            "directionFlag": self.direction_flag.value,
        }


@dataclass(frozen=True)
class MarkedSpan:
    """A replaced region of the source text"""

    start: int
    length: int
    index: int

    @property
    def end(self) -> int:
        return self.start + self.length


@dataclass(frozen=True)
class TranslatedWord:
    """
    A word paired with its translation.

    direction_flag tells which side is the learner's target language:
    SHOW_TARGET_FROM_ENGLISH means `original` is English and `translation`
    is in the target language, SHOW_ENGLISH_FROM_TARGET the reverse.
    """

    base_language: str
    target_language: str
    direction_flag: DirectionFlag
    original: str
    translation: str
    reading: str = ""

    @property
    def target_word(self) -> str:
        if self.direction_flag is DirectionFlag.SHOW_ENGLISH_FROM_TARGET:
            return self.original
        return self.translation

    @property
    def base_word(self) -> str:
        if self.direction_flag is DirectionFlag.SHOW_ENGLISH_FROM_TARGET:
            return self.translation
        return self.original


@dataclass
class MixedContentResult:
    """Source text plus the spans that were translated"""

    source_text: str
    spans: list[MarkedSpan] = field(default_factory=list)
    word_metadata: list[WordMetadata] = field(default_factory=list)

    @property
    def text(self) -> str:
        """Source text with every span replaced by its marker"""
        return render_markers(self.source_text, self.spans)

    def metadata_for(self, index: int) -> WordMetadata | None:
        for metadata in self.word_metadata:
            if metadata.index == index:
                return metadata
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the rendering contract"""
        return {
            "text": self.text,
            "wordMetadata": [metadata.to_dict() for metadata in self.word_metadata],
        }


def escape_literal_markers(text: str) -> str:
    """Add one backslash to marker-shaped text so it is never read as a marker"""
    return LITERAL_MARKER_PATTERN.sub(
        lambda match: f"{{{{WORD\\{match.group(1)}:{match.group(2)}}}}}", text
    )


def render_markers(source_text: str, spans: Sequence[MarkedSpan]) -> str:
    """
    Replace each span of source_text with its marker

    Marker-shaped text already present in the source is escaped, so every
    marker in the output comes from exactly one span.
    """
    parts = []
    cursor = 0
    for span in sorted(spans, key=lambda s: s.start):
        if span.start < cursor:
            raise ValueError(f"Overlapping span at offset {span.start}")
        parts.append(escape_literal_markers(source_text[cursor:span.start]))
        parts.append(make_marker(span.index))
        cursor = span.end
    parts.append(escape_literal_markers(source_text[cursor:]))
    return "".join(parts)


def strip_markers(text: str, word_metadata: Sequence[WordMetadata]) -> str:
    """Replace every marker with the original word it stands for and unescape the rest"""
    originals = {metadata.index: metadata.original for metadata in word_metadata}

    def _replace(match: re.Match) -> str:
        backslashes, index = match.group(1), match.group(2)
        if backslashes:
            return f"{{{{WORD{backslashes[1:]}:{index}}}}}"
        return originals.get(int(index), match.group(0))

    return LITERAL_MARKER_PATTERN.sub(_replace, text)


def restore_original(result: MixedContentResult) -> str:
    """Base-language text of a composed result, rebuilt from its markers"""
    return strip_markers(result.text, result.word_metadata)


def select_candidates(
    candidates: Sequence[VocabularyCandidate], learner_level: int
) -> list[VocabularyCandidate]:
    """
    Pick the candidates a learner level fills in

    Candidate k (1-based) of N is selected iff learner_level >= ceil(5k / N),
    so level 5 fills every candidate and lower levels fill a prefix of the
    priority ordering.
    """
    total = len(candidates)
    return [
        candidate
        for k, candidate in enumerate(candidates, start=1)
        if learner_level >= -(-MAX_LEARNER_LEVEL * k // total)
    ]


class MixedContentComposer:
    """Builds mixed-language versions of texts"""

    def __init__(
        self,
        classifier: VocabularyClassifier,
        orchestrator: TranslationOrchestrator,
        source_lang: str = "en",
        immersive_script_ratio: float = 0.2,
        max_concurrent_translations: int = 8,
    ):
        self.classifier = classifier
        self.orchestrator = orchestrator
        self.source_lang = source_lang
        self.immersive_script_ratio = immersive_script_ratio
        self.max_concurrent_translations = max_concurrent_translations

    async def compose(
        self,
        text: str,
        learner_level: int,
        target_lang: str,
        strip_formatting: bool = False,
    ) -> MixedContentResult:
        """
        Partially translate text for a learner

        Args:
            text: Source (English) text
            learner_level: 1 (beginner) to 5; higher levels translate more words
            target_lang: Language code of the language being learned
            strip_formatting: Reduce markdown to plaintext first

        Returns:
            MixedContentResult; words whose translation failed stay as they are
        """
        if (
            isinstance(learner_level, bool)
            or not isinstance(learner_level, int)
            or not MIN_LEARNER_LEVEL <= learner_level <= MAX_LEARNER_LEVEL
        ):
            raise ValueError(
                f"Learner level must be between {MIN_LEARNER_LEVEL} and "
                f"{MAX_LEARNER_LEVEL}, got {learner_level!r}"
            )
        get_language(target_lang)

        if strip_formatting:
            text = strip_markdown(text)

        if not text or not text.strip():
            return MixedContentResult(source_text=text or "")

        if script_ratio(text, target_lang) >= self.immersive_script_ratio:
            logger.info(f"Text already written in '{target_lang}' script, returning unchanged")
            return MixedContentResult(source_text=text)

        candidates = await asyncio.to_thread(self.classifier.classify, text)
        selected = select_candidates(candidates, learner_level)
        if not selected:
            logger.info(f"No words selected at level {learner_level} from {len(candidates)} candidates")
            return MixedContentResult(source_text=text)

        translations = await self._translate_words(
            [candidate.surface_form.lower() for candidate in selected], target_lang
        )
        result = self._build_result(text, translations)

        logger.info(
            f"Composed mixed content at level {learner_level}: {len(selected)}/{len(candidates)} "
            f"words selected, {len(translations)} translated, {len(result.spans)} markers"
        )
        return result

    async def _translate_words(self, words: list[str], target_lang: str) -> dict[str, str]:
        semaphore = asyncio.Semaphore(self.max_concurrent_translations)

        async def _translate(word: str):
            async with semaphore:
                return await self.orchestrator.translate(word, self.source_lang, target_lang)

        results = await asyncio.gather(*(_translate(word) for word in words))

        translations = {}
        for word, result in zip(words, results):
            if result.ok:
                translations[word] = result.translation
            else:
                logger.warning(f"Leaving '{word}' untranslated: no provider succeeded")
        return translations

    def _build_result(self, text: str, translations: dict[str, str]) -> MixedContentResult:
        if not translations:
            return MixedContentResult(source_text=text)

        # Longest first so the alternation never stops at a shorter word.
        # ASCII-only case folding keeps surface.lower() equal to a key.
        alternatives = "|".join(
            re.escape(word) for word in sorted(translations, key=len, reverse=True)
        )
        pattern = re.compile(rf"(?<![\w'])(?ai:{alternatives})(?![\w'])")
        literal_markers = [
            (match.start(), match.end()) for match in LITERAL_MARKER_PATTERN.finditer(text)
        ]

        spans = []
        word_metadata = []
        for match in pattern.finditer(text):
            surface = match.group(0)
            translation = translations.get(surface.lower())
            if translation is None:
                continue
            if any(start < match.end() and match.start() < end for start, end in literal_markers):
                continue

            index = len(spans)
            spans.append(MarkedSpan(start=match.start(), length=len(surface), index=index))
            word_metadata.append(
                WordMetadata(
                    index=index,
                    original=surface,
                    translation=translation,
                    direction_flag=DirectionFlag.SHOW_TARGET_FROM_ENGLISH,
                )
            )

        return MixedContentResult(source_text=text, spans=spans, word_metadata=word_metadata)
