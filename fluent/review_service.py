"""
Review service: serialized review recording, due queue and statistics
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from .config import Settings, get_settings
from .core.database.models import DictionaryEntry, ReviewStats
from .core.database.profile_store import ProfileStore
from .core.locks.item_lock_manager import ItemLockManager
from .exceptions import EntryNotFoundError
from .spaced_repetition import Rating, ReviewCardState, ReviewScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DueItem:
    """A dictionary entry waiting for review"""

    entry: DictionaryEntry
    state: ReviewCardState | None

    @property
    def is_new(self) -> bool:
        return self.state is None or self.state.repetitions == 0


class ReviewService:
    """Applies learner ratings to review state, one review per item at a time"""

    def __init__(
        self,
        store: ProfileStore,
        scheduler: ReviewScheduler | None = None,
        lock_manager: ItemLockManager | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.store = store
        self.scheduler = scheduler or ReviewScheduler(self.settings)
        self.lock_manager = lock_manager or ItemLockManager()

    async def record_review(
        self,
        learner_id: str,
        item_id: str,
        rating: Rating | str | int,
        now: datetime | None = None,
    ) -> ReviewCardState:
        """
        Apply a rating to an item and persist the new state

        Concurrent reviews of the same item are applied one after another,
        each reading the state the previous one wrote.

        Raises:
            InvalidRatingError: if rating is not again/hard/good/easy
            EntryNotFoundError: if the learner has no such entry
        """
        rating = Rating.parse(rating)
        now = now or datetime.now()

        async with self.lock_manager.hold(learner_id, item_id, operation="review"):
            if self.store.get_entry(learner_id, item_id) is None:
                raise EntryNotFoundError(
                    f"No dictionary entry {item_id} for learner {learner_id}"
                )

            state = self.store.get_review_state(learner_id, item_id)
            if state is None:
                state = self.scheduler.new_card(item_id, now)

            new_state = self.scheduler.review(state, rating, now)
            self.store.save_review_state(learner_id, new_state)
            self.store.add_review_history(learner_id, item_id, rating.value, now)

        logger.info(
            f"Learner {learner_id} rated {item_id} '{rating.value}', "
            f"next review {new_state.next_review}"
        )
        return new_state

    def get_state(self, learner_id: str, item_id: str) -> ReviewCardState | None:
        """Current review state, None if never reviewed"""
        return self.store.get_review_state(learner_id, item_id)

    def due_items(
        self, learner_id: str, now: datetime | None = None, limit: int | None = None
    ) -> list[DueItem]:
        """
        Entries due for review, earliest first

        Never-reviewed entries and entries last rated "again" are always due.
        """
        now = now or datetime.now()
        states = self.store.list_review_states(learner_id)

        due = []
        for entry in self.store.list_entries(learner_id):
            state = states.get(entry.id)
            if self.scheduler.is_due(state, now):
                due.append(DueItem(entry=entry, state=state))

        due.sort(key=lambda item: self._due_at(item))
        if limit is not None:
            due = due[:limit]
        return due

    def get_review_session(
        self, learner_id: str, now: datetime | None = None, limit: int | None = None
    ) -> list[DueItem]:
        """Due items capped at the configured cards per session"""
        return self.due_items(
            learner_id, now, limit if limit is not None else self.settings.default_cards_per_session
        )

    def stats(self, learner_id: str, now: datetime | None = None) -> ReviewStats:
        """Counts of total, new, due and mature entries plus today's reviews"""
        now = now or datetime.now()
        states = self.store.list_review_states(learner_id)
        entries = self.store.list_entries(learner_id)

        new_words = due_words = mature_words = 0
        for entry in entries:
            state = states.get(entry.id)
            if self.scheduler.is_new(state):
                new_words += 1
            if self.scheduler.is_due(state, now):
                due_words += 1
            if self.scheduler.is_mature(state):
                mature_words += 1

        reviews_today = sum(
            1
            for record in self.store.get_review_history(learner_id)
            if record["reviewed_at"].date() == now.date()
        )

        return ReviewStats(
            total_words=len(entries),
            new_words=new_words,
            due_words=due_words,
            mature_words=mature_words,
            reviews_today=reviews_today,
        )

    @staticmethod
    def _due_at(item: DueItem) -> datetime:
        if item.state is not None and item.state.next_review is not None:
            return item.state.next_review
        return item.entry.date_added
