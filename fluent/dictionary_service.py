"""
Learner dictionary: saving looked-up words and managing entries
"""

import logging
import math
from dataclasses import fields, replace

from .core.database.models import DictionaryEntry
from .core.database.profile_store import ProfileStore
from .exceptions import EntryNotFoundError
from .mixed_content import TranslatedWord
from .pos_tagger import PartOfSpeech
from .vocabulary_classifier import estimate_level

logger = logging.getLogger(__name__)

DEFAULT_SOURCE = "Fluent"

_IMMUTABLE_FIELDS = frozenset({"id", "date_added"})
_EDITABLE_FIELDS = frozenset(f.name for f in fields(DictionaryEntry)) - _IMMUTABLE_FIELDS


def difficulty_for_word(word: str, pos: PartOfSpeech | str = PartOfSpeech.OTHER) -> int:
    """Map the 1-10 word level onto the 1-5 dictionary difficulty scale"""
    return max(1, min(5, math.ceil(estimate_level(word, pos) / 2)))


class DictionaryService:
    """CRUD over a learner's saved vocabulary"""

    def __init__(self, store: ProfileStore):
        self.store = store

    def add_entry(self, learner_id: str, entry: DictionaryEntry) -> DictionaryEntry:
        """Store a new entry for a learner"""
        saved = self.store.save_entry(learner_id, entry)
        logger.info(f"Added '{saved.target_word}' to dictionary of learner {learner_id}")
        return saved

    def get_entry(self, learner_id: str, item_id: str) -> DictionaryEntry:
        """
        Get one entry

        Raises:
            EntryNotFoundError: if the learner has no such entry
        """
        entry = self.store.get_entry(learner_id, item_id)
        if entry is None:
            raise EntryNotFoundError(f"No dictionary entry {item_id} for learner {learner_id}")
        return entry

    def list_entries(
        self, learner_id: str, target_language: str | None = None
    ) -> list[DictionaryEntry]:
        """All entries of a learner, optionally for one target language"""
        entries = self.store.list_entries(learner_id)
        if target_language is not None:
            entries = [e for e in entries if e.target_language == target_language]
        return entries

    def find_by_target_word(
        self, learner_id: str, target_word: str, target_language: str | None = None
    ) -> DictionaryEntry | None:
        """Entry whose target word matches exactly, if any"""
        for entry in self.list_entries(learner_id, target_language):
            if entry.target_word == target_word:
                return entry
        return None

    def update_entry(self, learner_id: str, item_id: str, **changes) -> DictionaryEntry:
        """
        Edit fields of an entry; review state is kept

        Raises:
            EntryNotFoundError: if the learner has no such entry
            ValueError: for unknown or read-only fields, or invalid values
        """
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {', '.join(sorted(unknown))}")

        entry = self.get_entry(learner_id, item_id)
        updated = replace(entry, **changes)
        self.store.save_entry(learner_id, updated)
        logger.info(f"Updated entry {item_id} of learner {learner_id}: {sorted(changes)}")
        return updated

    def remove_entry(self, learner_id: str, item_id: str) -> None:
        """
        Delete an entry together with its review state

        Raises:
            EntryNotFoundError: if the learner has no such entry
        """
        if not self.store.delete_entry(learner_id, item_id):
            raise EntryNotFoundError(f"No dictionary entry {item_id} for learner {learner_id}")
        logger.info(f"Removed entry {item_id} from dictionary of learner {learner_id}")

    def save_translated_word(
        self,
        learner_id: str,
        word: TranslatedWord,
        example_sentence: str = "",
        example_translation: str = "",
        source: str = DEFAULT_SOURCE,
    ) -> tuple[DictionaryEntry, bool]:
        """
        Save a looked-up word, whichever direction it was translated in

        Returns:
            (entry, added); added is False when the target word was already
            saved, in which case the existing entry is returned unchanged
        """
        existing = self.find_by_target_word(
            learner_id, word.target_word, word.target_language
        )
        if existing is not None:
            logger.info(f"'{word.target_word}' already in dictionary of learner {learner_id}")
            return existing, False

        entry = DictionaryEntry(
            target_word=word.target_word,
            english_meaning=word.base_word,
            reading=word.reading,
            difficulty_level=difficulty_for_word(word.base_word),
            example_sentence=example_sentence,
            example_translation=example_translation,
            source=source,
            target_language=word.target_language,
        )
        return self.add_entry(learner_id, entry), True
