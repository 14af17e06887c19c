"""
Unit tests for vocabulary classification and word level estimation
"""

import pytest
import spacy

from fluent.exceptions import TaggingError
from fluent.pos_tagger import PartOfSpeech, PartOfSpeechTagger, SpacyTagger
from fluent.vocabulary_classifier import (
    STOPLIST,
    VocabularyCandidate,
    VocabularyClassifier,
    estimate_level,
)


class TestEstimateLevel:
    """Test word level estimation"""

    def test_short_noun(self):
        """Short nouns lose a level and have no suffix adjustment"""
        assert estimate_level("cat", "noun") == 4

    def test_enum_and_string_pos_agree(self):
        """Part of speech can be given by name"""
        assert estimate_level("cat", PartOfSpeech.NOUN) == estimate_level("cat", "noun")
        assert estimate_level("tokyo", "properNoun") == estimate_level(
            "tokyo", PartOfSpeech.PROPER_NOUN
        )

    def test_long_word_with_hard_suffix(self):
        """Length bonus and hard suffix push the level up"""
        # 5 + 1 (length >= 8) + 0.5 (tion) = 6.5 -> 7
        assert estimate_level("information", "noun") == 7

    def test_adverb_with_easy_suffix(self):
        """Adverb bonus is reduced by the -ly suffix"""
        # 5 + 1.5 - 0.5 = 6
        assert estimate_level("quickly", "adverb") == 6

    def test_half_levels_round_up(self):
        """x.5 scores round up"""
        # 5 + 1 (verb) - 0.5 (ing) = 5.5 -> 6
        assert estimate_level("running", "verb") == 6
        # 5 - 1 (short) + 0.5 (adjective) = 4.5 -> 5
        assert estimate_level("lazy", "adjective") == 5

    def test_very_long_word(self):
        """Words of 12+ characters get both length bonuses"""
        # 5 + 1 + 1 + 1.5 (adverb) - 0.5 (ly) = 8
        assert estimate_level("extraordinarily", "adverb") == 8

    def test_proper_noun_is_easier(self):
        """Proper nouns lose a level"""
        assert estimate_level("tokyo", "properNoun") == 4
        assert estimate_level("tokyo", "noun") == 5

    def test_case_insensitive(self):
        """Surface case does not matter"""
        assert estimate_level("Information", "noun") == estimate_level("information", "noun")

    def test_deterministic(self):
        """Same input always gives the same level"""
        levels = {estimate_level("beautiful", "adjective") for _ in range(20)}
        assert levels == {7}

    def test_level_bounds(self):
        """Levels stay within 1..10"""
        for word in ["a", "ox", "cat", "information", "extraordinarily", "counterrevolutionary"]:
            for pos in PartOfSpeech:
                assert 1 <= estimate_level(word, pos) <= 10


class TestVocabularyClassifier:
    """Test VocabularyClassifier class"""

    @pytest.fixture
    def classifier(self, tagger):
        """Classifier with the lexicon-based tagger"""
        return VocabularyClassifier(tagger)

    def test_classify_sentence(self, classifier):
        """Content words are found and ordered by level, length, then alphabet"""
        candidates = classifier.classify("The quick brown fox jumps over the lazy dog.")

        assert [c.surface_form for c in candidates] == [
            "brown",
            "jumps",
            "quick",
            "lazy",
            "dog",
            "fox",
        ]
        assert all(isinstance(c, VocabularyCandidate) for c in candidates)
        assert candidates[0].level == 6
        assert candidates[-1].level == 4

    def test_candidate_fields(self, classifier):
        """Candidates carry part of speech and their sentence as context"""
        candidates = classifier.classify("I saw a fox. The dog runs quickly!")
        by_word = {c.surface_form: c for c in candidates}

        assert by_word["fox"].part_of_speech == PartOfSpeech.NOUN
        assert by_word["fox"].source_context == "I saw a fox."
        assert by_word["dog"].source_context == "The dog runs quickly!"
        assert by_word["quickly"].part_of_speech == PartOfSpeech.ADVERB

    def test_stoplist_words_never_returned(self, tagger):
        """Function words are excluded even if tagged as nouns"""
        tagger.lexicon = {"the": PartOfSpeech.NOUN, "with": PartOfSpeech.NOUN, "house": PartOfSpeech.NOUN}
        classifier = VocabularyClassifier(tagger)

        candidates = classifier.classify("The house with the garden")

        assert [c.surface_form for c in candidates] == ["house"]
        assert "the" in STOPLIST and "with" in STOPLIST

    def test_non_content_words_excluded(self, classifier):
        """Tokens outside the content parts of speech are skipped"""
        candidates = classifier.classify("over under between")
        assert candidates == []

    def test_repeated_characters_excluded(self, classifier):
        """Words with a character repeated four times are noise"""
        candidates = classifier.classify("aaaargh the dog")
        assert [c.surface_form for c in candidates] == ["dog"]

    def test_length_bounds(self, tagger):
        """Words shorter or longer than the limits are skipped"""
        tagger.lexicon = {"ox": PartOfSpeech.NOUN, "dog": PartOfSpeech.NOUN, "information": PartOfSpeech.NOUN}
        classifier = VocabularyClassifier(tagger, min_length=3, max_length=10)

        candidates = classifier.classify("ox dog information")

        assert [c.surface_form for c in candidates] == ["dog"]

    def test_duplicates_collapsed(self, classifier):
        """Each word is reported once, with its first surface form"""
        candidates = classifier.classify("Dog dog DOG.")
        assert [c.surface_form for c in candidates] == ["Dog"]

    def test_empty_text(self, classifier):
        """Empty or blank text yields no candidates"""
        assert classifier.classify("") == []
        assert classifier.classify("   \n ") == []

    def test_tagging_failure_returns_empty(self):
        """A failing tagger degrades to no candidates"""

        class BrokenTagger(PartOfSpeechTagger):
            def tag(self, text):
                raise TaggingError("model missing")

        classifier = VocabularyClassifier(BrokenTagger())
        assert classifier.classify("The quick brown fox") == []

    def test_unexpected_tagger_error_returns_empty(self):
        """Unexpected tagger exceptions are logged, not raised"""

        class CrashingTagger(PartOfSpeechTagger):
            def tag(self, text):
                raise RuntimeError("boom")

        classifier = VocabularyClassifier(CrashingTagger())
        assert classifier.classify("The quick brown fox") == []

    def test_injected_cache(self, tagger):
        """Classification results are cached per text"""
        classifier = VocabularyClassifier(tagger, cache={})

        first = classifier.classify("The lazy dog")
        second = classifier.classify("The lazy dog")

        assert first == second
        assert tagger.calls == 1

    def test_cache_bound_evicts_least_recently_used(self, tagger):
        """A bounded cache keeps only the most recently classified texts"""
        classifier = VocabularyClassifier(tagger, cache={}, max_cache_entries=2)

        classifier.classify("The lazy dog")
        classifier.classify("The brown fox")
        classifier.classify("The lazy dog")
        classifier.classify("A beautiful garden")

        assert list(classifier.cache) == ["The lazy dog", "A beautiful garden"]
        assert tagger.calls == 3

        classifier.classify("The brown fox")
        assert tagger.calls == 4

    def test_is_valid_word(self, classifier):
        """Surface-form rules"""
        assert classifier.is_valid_word("garden") is True
        assert classifier.is_valid_word("the") is False
        assert classifier.is_valid_word("ab") is False
        assert classifier.is_valid_word("123") is False
        assert classifier.is_valid_word("zzzzz") is False

    def test_vocabulary_stats(self, classifier):
        """Stats summarize candidates by part of speech and level"""
        stats = classifier.vocabulary_stats("The quick brown fox jumps over the lazy dog.")

        assert stats["total_words"] == 6
        assert stats["by_type"] == {"adjective": 3, "noun": 2, "verb": 1}
        assert stats["by_level"] == {6: 3, 5: 1, 4: 2}
        assert stats["average_level"] == round(31 / 6, 2)


@pytest.mark.skipif(
    not spacy.util.is_package("en_core_web_sm"),
    reason="spaCy English model not installed",
)
class TestSpacyTagger:
    """Test the spaCy-backed tagger"""

    def test_tags_content_words(self):
        """Nouns and verbs are recognized"""
        tokens = SpacyTagger().tag("The dog runs in the garden.")
        tags = {token.text: token.pos for token in tokens}

        assert tags["dog"] == PartOfSpeech.NOUN
        assert tags["garden"] == PartOfSpeech.NOUN
        assert tokens[1].start == 4


class TestSpacyTaggerErrors:
    """Test spaCy tagger failure handling"""

    def test_missing_model_raises_tagging_error(self):
        """An unknown model name is reported as TaggingError"""
        tagger = SpacyTagger("xx_no_such_model_xx")
        with pytest.raises(TaggingError):
            tagger.tag("some text")

    def test_blank_text_skips_model(self):
        """Blank text never loads the model"""
        tagger = SpacyTagger("xx_no_such_model_xx")
        assert tagger.tag("  ") == []
        assert tagger.nlp is None
