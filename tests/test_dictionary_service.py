"""
Unit tests for the learner dictionary service
"""

import pytest

from fluent.core.database.models import DictionaryEntry
from fluent.dictionary_service import DictionaryService, difficulty_for_word
from fluent.exceptions import EntryNotFoundError
from fluent.languages import DirectionFlag
from fluent.mixed_content import TranslatedWord
from fluent.spaced_repetition import ReviewCardState


class TestDictionaryService:
    """Test DictionaryService class"""

    @pytest.fixture
    def service(self, store):
        return DictionaryService(store)

    @pytest.fixture
    def english_click(self):
        """Learner clicked an English word and got Japanese"""
        return TranslatedWord(
            base_language="en",
            target_language="ja",
            direction_flag=DirectionFlag.SHOW_TARGET_FROM_ENGLISH,
            original="garden",
            translation="庭園",
            reading="ていえん",
        )

    @pytest.fixture
    def japanese_click(self):
        """Learner clicked a Japanese word and got English"""
        return TranslatedWord(
            base_language="en",
            target_language="ja",
            direction_flag=DirectionFlag.SHOW_ENGLISH_FROM_TARGET,
            original="庭園",
            translation="garden",
            reading="ていえん",
        )

    def test_save_english_click(self, service, english_click):
        """The target-language side becomes the dictionary word"""
        entry, added = service.save_translated_word(
            "alice", english_click, example_sentence="A quiet garden."
        )

        assert added is True
        assert entry.target_word == "庭園"
        assert entry.english_meaning == "garden"
        assert entry.example_sentence == "A quiet garden."
        assert entry.source == "Fluent"
        assert entry.difficulty_level == difficulty_for_word("garden")

    def test_save_target_click(self, service, japanese_click):
        entry, added = service.save_translated_word("alice", japanese_click)

        assert added is True
        assert entry.target_word == "庭園"
        assert entry.english_meaning == "garden"

    def test_already_saved(self, service, english_click, japanese_click):
        """The same target word is stored once whichever side was clicked"""
        first, _ = service.save_translated_word("alice", english_click)
        second, added = service.save_translated_word("alice", japanese_click)

        assert added is False
        assert second.id == first.id
        assert len(service.list_entries("alice")) == 1

    def test_get_missing_entry(self, service):
        with pytest.raises(EntryNotFoundError):
            service.get_entry("alice", "nope")

    def test_missing_entry_is_key_error(self, service):
        with pytest.raises(KeyError):
            service.get_entry("alice", "nope")

    def test_update_entry(self, service):
        entry = service.add_entry("alice", DictionaryEntry(target_word="犬", english_meaning="dog"))

        updated = service.update_entry("alice", entry.id, english_meaning="dog, hound", difficulty_level=1)

        assert updated.english_meaning == "dog, hound"
        assert service.get_entry("alice", entry.id).difficulty_level == 1

    def test_update_rejects_read_only_fields(self, service):
        entry = service.add_entry("alice", DictionaryEntry(target_word="犬", english_meaning="dog"))

        with pytest.raises(ValueError):
            service.update_entry("alice", entry.id, id="other")

    def test_update_validates_values(self, service):
        entry = service.add_entry("alice", DictionaryEntry(target_word="犬", english_meaning="dog"))

        with pytest.raises(ValueError):
            service.update_entry("alice", entry.id, difficulty_level=9)
        assert service.get_entry("alice", entry.id).difficulty_level == 3

    def test_update_keeps_review_state(self, service, store):
        entry = service.add_entry("alice", DictionaryEntry(target_word="犬", english_meaning="dog"))
        store.save_review_state("alice", ReviewCardState(entry.id, repetitions=2))

        service.update_entry("alice", entry.id, reading="いぬ")

        assert store.get_review_state("alice", entry.id).repetitions == 2

    def test_remove_entry(self, service, store):
        entry = service.add_entry("alice", DictionaryEntry(target_word="犬", english_meaning="dog"))
        store.save_review_state("alice", ReviewCardState(entry.id, repetitions=2))

        service.remove_entry("alice", entry.id)

        assert service.list_entries("alice") == []
        assert store.get_review_state("alice", entry.id) is None
        with pytest.raises(EntryNotFoundError):
            service.remove_entry("alice", entry.id)

    def test_list_by_language(self, service):
        service.add_entry("alice", DictionaryEntry(target_word="犬", english_meaning="dog"))
        service.add_entry(
            "alice", DictionaryEntry(target_word="개", english_meaning="dog", target_language="ko")
        )

        assert [e.target_word for e in service.list_entries("alice", "ko")] == ["개"]
        assert len(service.list_entries("alice")) == 2


class TestDifficultyForWord:
    """Test mapping word levels onto dictionary difficulty"""

    def test_short_word_is_easy(self):
        # level 4 -> 2
        assert difficulty_for_word("cat", "noun") == 2

    def test_long_word_is_harder(self):
        # level 7 -> 4
        assert difficulty_for_word("information", "noun") == 4

    def test_always_in_range(self):
        for word in ["a", "cat", "extraordinarily", "counterrevolutionary"]:
            assert 1 <= difficulty_for_word(word, "adverb") <= 5
