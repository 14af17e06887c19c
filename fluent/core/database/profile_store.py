"""
Learner profile store abstraction and in-memory implementation
"""

import copy
import logging
from abc import ABC, abstractmethod
from datetime import datetime

from ...spaced_repetition import ReviewCardState
from .models import DictionaryEntry, ReviewHistory

logger = logging.getLogger(__name__)


class ProfileStore(ABC):
    """
    Opaque key-value store for dictionary entries and review state,
    addressed by learner id + item id.

    Deleting an entry also deletes its review state and history.
    """

    @abstractmethod
    def save_entry(self, learner_id: str, entry: DictionaryEntry) -> DictionaryEntry:
        """Insert or replace an entry"""

    @abstractmethod
    def get_entry(self, learner_id: str, item_id: str) -> DictionaryEntry | None:
        """Get an entry, None if missing"""

    @abstractmethod
    def list_entries(self, learner_id: str) -> list[DictionaryEntry]:
        """All entries of a learner, oldest first"""

    @abstractmethod
    def delete_entry(self, learner_id: str, item_id: str) -> bool:
        """Delete an entry with its review state; False if it did not exist"""

    @abstractmethod
    def get_review_state(self, learner_id: str, item_id: str) -> ReviewCardState | None:
        """Get review state, None if the item was never reviewed"""

    @abstractmethod
    def save_review_state(self, learner_id: str, state: ReviewCardState) -> None:
        """Insert or replace review state"""

    @abstractmethod
    def list_review_states(self, learner_id: str) -> dict[str, ReviewCardState]:
        """Review states of a learner keyed by item id"""

    @abstractmethod
    def add_review_history(
        self, learner_id: str, item_id: str, rating: str, reviewed_at: datetime
    ) -> None:
        """Append a review to the item's history"""

    @abstractmethod
    def get_review_history(self, learner_id: str, item_id: str | None = None) -> list[ReviewHistory]:
        """Reviews of a learner, optionally for one item, oldest first"""


class InMemoryProfileStore(ProfileStore):
    """
    Dictionary-backed store for tests and single-process use.

    Entries are copied on the way in and out so callers cannot mutate
    stored state behind the store's back.
    """

    def __init__(self):
        self._entries: dict[str, dict[str, DictionaryEntry]] = {}
        self._states: dict[str, dict[str, ReviewCardState]] = {}
        self._history: dict[str, list[ReviewHistory]] = {}

    def save_entry(self, learner_id, entry):
        self._entries.setdefault(learner_id, {})[entry.id] = copy.copy(entry)
        return copy.copy(entry)

    def get_entry(self, learner_id, item_id):
        entry = self._entries.get(learner_id, {}).get(item_id)
        return copy.copy(entry) if entry else None

    def list_entries(self, learner_id):
        entries = self._entries.get(learner_id, {}).values()
        return [copy.copy(entry) for entry in sorted(entries, key=lambda e: e.date_added)]

    def delete_entry(self, learner_id, item_id):
        entry = self._entries.get(learner_id, {}).pop(item_id, None)
        if entry is None:
            return False
        self._states.get(learner_id, {}).pop(item_id, None)
        self._history[learner_id] = [
            record for record in self._history.get(learner_id, []) if record["item_id"] != item_id
        ]
        return True

    def get_review_state(self, learner_id, item_id):
        return self._states.get(learner_id, {}).get(item_id)

    def save_review_state(self, learner_id, state):
        self._states.setdefault(learner_id, {})[state.item_id] = state

    def list_review_states(self, learner_id):
        return dict(self._states.get(learner_id, {}))

    def add_review_history(self, learner_id, item_id, rating, reviewed_at):
        self._history.setdefault(learner_id, []).append(
            ReviewHistory(item_id=item_id, rating=rating, reviewed_at=reviewed_at)
        )

    def get_review_history(self, learner_id, item_id=None):
        return [
            dict(record)
            for record in self._history.get(learner_id, [])
            if item_id is None or record["item_id"] == item_id
        ]
