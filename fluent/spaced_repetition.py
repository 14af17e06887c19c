"""
Spaced repetition scheduling using a SuperMemo 2 variant
"""

import logging
import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum

from .config import Settings, get_settings
from .exceptions import InvalidRatingError

logger = logging.getLogger(__name__)


class Rating(str, Enum):
    """Recall quality reported by the learner"""

    AGAIN = "again"
    HARD = "hard"
    GOOD = "good"
    EASY = "easy"

    @classmethod
    def parse(cls, value: "Rating | str | int") -> "Rating":
        """
        Convert a rating from its name or keyboard number (1=Again ... 4=Easy)

        Raises:
            InvalidRatingError: for anything else
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise InvalidRatingError(f"Invalid rating: {value!r}")
        if isinstance(value, int):
            if 1 <= value <= 4:
                return list(cls)[value - 1]
            raise InvalidRatingError(f"Rating must be between 1 and 4, got {value}")
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                pass
        raise InvalidRatingError(f"Invalid rating: {value!r}")


@dataclass(frozen=True)
class ReviewCardState:
    """Memory state of one dictionary entry"""

    item_id: str
    interval: float = 0.0
    ease_factor: float = 2.5
    repetitions: int = 0
    last_reviewed: datetime | None = None
    next_review: datetime | None = None

    @classmethod
    def initial(
        cls, item_id: str, now: datetime | None = None, ease_factor: float = 2.5
    ) -> "ReviewCardState":
        """State of a never-reviewed item; due immediately"""
        return cls(
            item_id=item_id,
            interval=0.0,
            ease_factor=ease_factor,
            repetitions=0,
            last_reviewed=None,
            next_review=now or datetime.now(),
        )


def round_half_up(value: float) -> int:
    """Round x.5 away from zero for non-negative values"""
    return int(math.floor(value + 0.5))


class ReviewScheduler:
    """Computes the next interval and due date after each review"""

    def __init__(self, settings: Settings | None = None):
        settings = settings or get_settings()
        self.default_ease = settings.default_ease_factor
        self.min_ease = settings.min_ease_factor
        self.mature_interval = settings.mature_interval_days

    def new_card(self, item_id: str, now: datetime | None = None) -> ReviewCardState:
        """Initial state for a never-reviewed item"""
        return ReviewCardState.initial(item_id, now=now, ease_factor=self.default_ease)

    def review(
        self,
        state: ReviewCardState,
        rating: Rating | str | int,
        now: datetime | None = None,
    ) -> ReviewCardState:
        """
        Apply a rating to a card

        Args:
            state: Current memory state
            rating: again / hard / good / easy (or 1-4)
            now: Review time (defaults to now)

        Returns:
            New ReviewCardState; the input state is not modified

        Raises:
            InvalidRatingError: if rating is not recognized
        """
        rating = Rating.parse(rating)
        if now is None:
            now = datetime.now()

        logger.info(
            f"Calculating review for {state.item_id}: rating={rating.value}, "
            f"reps={state.repetitions}, interval={state.interval}, ef={state.ease_factor}"
        )

        if rating is Rating.AGAIN:
            repetitions, interval, ease = self._handle_again_rating(state)
        elif rating is Rating.HARD:
            repetitions, interval, ease = self._handle_hard_rating(state)
        elif rating is Rating.GOOD:
            repetitions, interval, ease = self._handle_good_rating(state)
        else:
            repetitions, interval, ease = self._handle_easy_rating(state)

        result = replace(
            state,
            interval=float(interval),
            ease_factor=ease,
            repetitions=repetitions,
            last_reviewed=now,
            next_review=now + timedelta(days=round_half_up(interval)),
        )

        logger.info(
            f"Review result for {state.item_id}: interval={result.interval}, "
            f"ef={result.ease_factor:.2f}, next={result.next_review}"
        )
        return result

    def _handle_again_rating(self, state: ReviewCardState) -> tuple[int, float, float]:
        """Forget: reset progress, review again in this session"""
        return 0, 0.0, max(self.min_ease, state.ease_factor - 0.2)

    def _handle_hard_rating(self, state: ReviewCardState) -> tuple[int, float, float]:
        if state.interval == 0:
            interval = 1.0
        else:
            interval = max(state.interval * 1.2, state.interval + 1)
        return state.repetitions + 1, interval, max(self.min_ease, state.ease_factor - 0.15)

    def _handle_good_rating(self, state: ReviewCardState) -> tuple[int, float, float]:
        if state.repetitions == 0:
            interval = 1
        elif state.repetitions == 1:
            interval = 6
        else:
            interval = round_half_up(state.interval * state.ease_factor)
        return state.repetitions + 1, float(interval), state.ease_factor

    def _handle_easy_rating(self, state: ReviewCardState) -> tuple[int, float, float]:
        if state.repetitions == 0:
            interval = 4
        else:
            interval = round_half_up(state.interval * state.ease_factor * 1.3)
        return state.repetitions + 1, float(interval), state.ease_factor + 0.15

    def is_new(self, state: ReviewCardState | None) -> bool:
        """A card that has no successful repetitions yet"""
        return state is None or state.repetitions == 0

    def is_mature(self, state: ReviewCardState | None) -> bool:
        """A card whose interval indicates durable recall"""
        return state is not None and state.interval >= self.mature_interval

    def is_due(self, state: ReviewCardState | None, now: datetime | None = None) -> bool:
        """New cards are always due; others once next_review has passed"""
        if self.is_new(state) or state.next_review is None:
            return True
        return state.next_review <= (now or datetime.now())
