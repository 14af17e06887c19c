"""
LearningPipeline: one entry point wiring the content and review components
"""

import logging
from typing import Any

import httpx

from .config import Settings, get_database_path, get_settings
from .core.database.database_manager import DatabaseManager
from .core.database.models import DictionaryEntry
from .core.database.profile_store import ProfileStore
from .dictionary_service import DictionaryService
from .languages import DirectionFlag, contains_language_characters, get_language
from .mixed_content import MixedContentComposer, MixedContentResult, TranslatedWord
from .pos_tagger import PartOfSpeechTagger, SpacyTagger
from .review_service import ReviewService
from .text_difficulty import get_text_statistics
from .translation_orchestrator import TranslationOrchestrator, TranslationResult
from .vocabulary_classifier import VocabularyClassifier

logger = logging.getLogger(__name__)

# Punctuation a clicked word may carry with it
WORD_PUNCTUATION = "。、！？!?.,;:\"'()「」"


class LearningPipeline:
    """Facade over classification, translation, composition and review"""

    def __init__(
        self,
        classifier: VocabularyClassifier,
        orchestrator: TranslationOrchestrator,
        composer: MixedContentComposer,
        dictionary: DictionaryService,
        reviews: ReviewService,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.classifier = classifier
        self.orchestrator = orchestrator
        self.composer = composer
        self.dictionary = dictionary
        self.reviews = reviews

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        client: httpx.AsyncClient | None = None,
        tagger: PartOfSpeechTagger | None = None,
        store: ProfileStore | None = None,
    ) -> "LearningPipeline":
        """
        Build every component from settings

        Args:
            settings: Settings to use (defaults to the cached instance)
            client: Shared httpx client for the HTTP providers
            tagger: Part-of-speech tagger (defaults to spaCy)
            store: Profile store (defaults to the SQLite database)
        """
        settings = settings or get_settings()

        if tagger is None:
            tagger = SpacyTagger(settings.spacy_model)
        if store is None:
            manager = DatabaseManager(get_database_path(settings))
            manager.init_database()
            store = manager

        classifier = VocabularyClassifier(
            tagger,
            min_length=settings.min_word_length,
            max_length=settings.max_word_length,
            cache={},
            max_cache_entries=settings.classifier_cache_max_entries,
        )
        orchestrator = TranslationOrchestrator.from_settings(settings, client=client)
        composer = MixedContentComposer(
            classifier,
            orchestrator,
            source_lang=settings.default_source_language,
            immersive_script_ratio=settings.immersive_script_ratio,
            max_concurrent_translations=settings.max_concurrent_translations,
        )

        logger.info(
            f"Learning pipeline ready with providers: "
            f"{[provider.name for provider in orchestrator.providers]}"
        )
        return cls(
            classifier=classifier,
            orchestrator=orchestrator,
            composer=composer,
            dictionary=DictionaryService(store),
            reviews=ReviewService(store, settings=settings),
            settings=settings,
        )

    async def compose(
        self,
        text: str,
        learner_level: int,
        target_lang: str | None = None,
        strip_formatting: bool = False,
    ) -> MixedContentResult:
        """Mixed-language version of text for a learner level"""
        return await self.composer.compose(
            text,
            learner_level,
            target_lang or self.settings.default_target_language,
            strip_formatting=strip_formatting,
        )

    async def translate(
        self, text: str, source_lang: str | None = None, target_lang: str | None = None
    ) -> TranslationResult:
        """Translate a word or phrase through the provider chain"""
        return await self.orchestrator.translate(
            text,
            source_lang or self.settings.default_source_language,
            target_lang or self.settings.default_target_language,
        )

    async def lookup_word(self, word: str, target_lang: str | None = None) -> TranslatedWord:
        """
        Translate a word the learner clicked on

        A word written in the target script is translated to English,
        anything else from English into the target language.

        Raises:
            ValueError: for an empty word or unsupported language
            TranslationExhausted: if no provider could translate the word
        """
        target_lang = target_lang or self.settings.default_target_language
        language = get_language(target_lang)
        base_lang = self.settings.default_source_language

        clean_word = (word or "").strip().strip(WORD_PUNCTUATION).strip()
        if not clean_word:
            raise ValueError("Nothing to look up")

        if language.has_script and contains_language_characters(clean_word, target_lang):
            result = await self.orchestrator.translate(clean_word, target_lang, base_lang)
            translation = result.unwrap()
            return TranslatedWord(
                base_language=base_lang,
                target_language=target_lang,
                direction_flag=DirectionFlag.SHOW_ENGLISH_FROM_TARGET,
                original=clean_word,
                translation=translation,
            )

        result = await self.orchestrator.translate(clean_word, base_lang, target_lang)
        translation = result.unwrap()
        return TranslatedWord(
            base_language=base_lang,
            target_language=target_lang,
            direction_flag=DirectionFlag.SHOW_TARGET_FROM_ENGLISH,
            original=clean_word,
            translation=translation,
        )

    async def save_word(
        self,
        learner_id: str,
        word: TranslatedWord,
        context: str | None = None,
    ) -> tuple[DictionaryEntry, bool]:
        """
        Save a looked-up word, translating its context sentence when given

        A failed context translation leaves the example translation empty.
        """
        example_translation = ""
        if context:
            if word.direction_flag is DirectionFlag.SHOW_ENGLISH_FROM_TARGET:
                source, target = word.target_language, word.base_language
            else:
                source, target = word.base_language, word.target_language
            translation, ok = await self.orchestrator.translate(context, source, target)
            if ok:
                example_translation = translation

        return self.dictionary.save_translated_word(
            learner_id,
            word,
            example_sentence=context or "",
            example_translation=example_translation,
        )

    def analyze_text(self, text: str) -> dict[str, Any]:
        """Readability statistics and vocabulary summary of a text"""
        statistics = get_text_statistics(text)
        return {
            **statistics,
            "vocabulary": self.classifier.vocabulary_stats(text),
        }
