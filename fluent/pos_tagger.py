"""
Part-of-speech tagging behind a replaceable interface
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum

import spacy

from .exceptions import TaggingError

logger = logging.getLogger(__name__)


class PartOfSpeech(str, Enum):
    """Coarse word classes the classifier cares about"""

    NOUN = "noun"
    VERB = "verb"
    ADJECTIVE = "adjective"
    ADVERB = "adverb"
    PROPER_NOUN = "properNoun"
    OTHER = "other"

    @classmethod
    def parse(cls, value: "PartOfSpeech | str") -> "PartOfSpeech":
        """Accept enum members, values or names in any case ("proper_noun", "properNoun")"""
        if isinstance(value, cls):
            return value
        normalized = str(value or "").replace("_", "").replace(" ", "").lower()
        for member in cls:
            if normalized in (member.value.lower(), member.name.replace("_", "").lower()):
                return member
        return cls.OTHER


CONTENT_POS = frozenset(
    {
        PartOfSpeech.NOUN,
        PartOfSpeech.VERB,
        PartOfSpeech.ADJECTIVE,
        PartOfSpeech.ADVERB,
        PartOfSpeech.PROPER_NOUN,
    }
)

# Universal Dependencies tags produced by spaCy
SPACY_POS_MAP = {
    "NOUN": PartOfSpeech.NOUN,
    "VERB": PartOfSpeech.VERB,
    "ADJ": PartOfSpeech.ADJECTIVE,
    "ADV": PartOfSpeech.ADVERB,
    "PROPN": PartOfSpeech.PROPER_NOUN,
}


@dataclass(frozen=True)
class TaggedToken:
    """A token with its word class and character offset in the source text"""

    text: str
    pos: PartOfSpeech
    start: int = 0

    @property
    def end(self) -> int:
        return self.start + len(self.text)


class PartOfSpeechTagger(ABC):
    """Tags every token of a text with a part of speech"""

    @abstractmethod
    def tag(self, text: str) -> list[TaggedToken]:
        """
        Tag text

        Raises:
            TaggingError: if the text cannot be tagged
        """


class SpacyTagger(PartOfSpeechTagger):
    """Tagger backed by a spaCy pipeline, loaded on first use"""

    def __init__(self, model_name: str = "en_core_web_sm", nlp=None):
        self.model_name = model_name
        self.nlp = nlp

    def _load(self):
        if self.nlp is None:
            try:
                # Only the tagger and attribute ruler are needed for POS
                self.nlp = spacy.load(self.model_name, disable=["parser", "ner", "lemmatizer"])
                logger.info(f"SpaCy model '{self.model_name}' loaded successfully")
            except OSError as e:
                raise TaggingError(f"SpaCy model '{self.model_name}' not available: {e}") from e
        return self.nlp

    def tag(self, text: str) -> list[TaggedToken]:
        if not text or not text.strip():
            return []

        nlp = self._load()
        try:
            doc = nlp(text)
        except Exception as e:
            raise TaggingError(f"SpaCy tagging failed: {e}") from e

        return [
            TaggedToken(
                text=token.text,
                pos=SPACY_POS_MAP.get(token.pos_, PartOfSpeech.OTHER),
                start=token.idx,
            )
            for token in doc
        ]
