"""
Learner profile models for the Fluent learning pipeline
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import TypedDict


@dataclass
class DictionaryEntry:
    """A vocabulary item a learner saved to their dictionary"""

    target_word: str
    english_meaning: str
    reading: str = ""
    difficulty_level: int = 3
    example_sentence: str = ""
    example_translation: str = ""
    source: str = ""
    target_language: str = "ja"
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    date_added: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not self.target_word or not self.target_word.strip():
            raise ValueError("Dictionary entry needs a target word")
        if not 1 <= int(self.difficulty_level) <= 5:
            raise ValueError(
                f"Difficulty level must be between 1 and 5, got {self.difficulty_level}"
            )
        self.difficulty_level = int(self.difficulty_level)


class ReviewHistory(TypedDict):
    """One recorded review"""

    item_id: str
    rating: str
    reviewed_at: datetime


class ReviewStats(TypedDict):
    """Review queue statistics for a learner"""

    total_words: int
    new_words: int
    due_words: int
    mature_words: int
    reviews_today: int
