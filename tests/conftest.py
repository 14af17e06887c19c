"""
Shared fixtures: a deterministic tagger and scriptable translation providers
"""

import asyncio
import re

import pytest

from fluent.config import Settings
from fluent.core.database.profile_store import InMemoryProfileStore
from fluent.exceptions import ProviderUnavailable
from fluent.pos_tagger import PartOfSpeech, PartOfSpeechTagger, TaggedToken
from fluent.translation_providers import TranslationProvider

LEXICON = {
    "quick": PartOfSpeech.ADJECTIVE,
    "brown": PartOfSpeech.ADJECTIVE,
    "lazy": PartOfSpeech.ADJECTIVE,
    "beautiful": PartOfSpeech.ADJECTIVE,
    "fox": PartOfSpeech.NOUN,
    "dog": PartOfSpeech.NOUN,
    "cat": PartOfSpeech.NOUN,
    "house": PartOfSpeech.NOUN,
    "garden": PartOfSpeech.NOUN,
    "information": PartOfSpeech.NOUN,
    "jumps": PartOfSpeech.VERB,
    "runs": PartOfSpeech.VERB,
    "quickly": PartOfSpeech.ADVERB,
    "ephemeral": PartOfSpeech.ADJECTIVE,
    "tokyo": PartOfSpeech.PROPER_NOUN,
    "aaaargh": PartOfSpeech.NOUN,
}


class FakeTagger(PartOfSpeechTagger):
    """Looks words up in a fixed lexicon; everything else is OTHER"""

    def __init__(self, lexicon=None):
        self.lexicon = lexicon if lexicon is not None else LEXICON
        self.calls = 0

    def tag(self, text):
        self.calls += 1
        return [
            TaggedToken(
                text=match.group(0),
                pos=self.lexicon.get(match.group(0).lower(), PartOfSpeech.OTHER),
                start=match.start(),
            )
            for match in re.finditer(r"[A-Za-z']+|[^\sA-Za-z']", text)
        ]


class FakeProvider(TranslationProvider):
    """
    Provider answering from a dictionary.

    Missing words raise ProviderUnavailable; `fail=True` fails everything;
    `delay` makes every call sleep first.
    """

    def __init__(self, name, translations=None, fail=False, delay=0.0, error=None):
        self.name = name
        self.translations = translations or {}
        self.fail = fail
        self.delay = delay
        self.error = error
        self.calls = []

    async def translate(self, text, source_lang, target_lang):
        self.calls.append((text, source_lang, target_lang))
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.fail or text not in self.translations:
            raise ProviderUnavailable(self.name, "no translation")
        return self.translations[text]


@pytest.fixture
def tagger():
    """Deterministic part-of-speech tagger"""
    return FakeTagger()


@pytest.fixture
def make_provider():
    """Factory for scriptable providers"""
    return FakeProvider


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment and .env files"""
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'fluent_test.db'}",
        translation_providers="lingva,mymemory,libretranslate",
        provider_timeout=1.0,
    )


@pytest.fixture
def store():
    """Empty in-memory profile store"""
    return InMemoryProfileStore()
