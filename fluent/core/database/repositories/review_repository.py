"""
Review repository for review state and review history operations
"""

import logging
import sqlite3
from datetime import datetime

from ....spaced_repetition import ReviewCardState
from ..connection import DatabaseConnection
from ..models import ReviewHistory

logger = logging.getLogger(__name__)


def _row_to_state(row: sqlite3.Row) -> ReviewCardState:
    return ReviewCardState(
        item_id=row["item_id"],
        interval=float(row["interval_days"]),
        ease_factor=float(row["ease_factor"]),
        repetitions=int(row["repetitions"]),
        last_reviewed=row["last_reviewed"],
        next_review=row["next_review"],
    )


class ReviewRepository:
    """Repository for review state and history operations"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def save_review_state(self, learner_id: str, state: ReviewCardState) -> None:
        """Insert or replace the review state of an item"""
        with self.db_connection.get_connection() as conn:
            conn.execute(
                """
                INSERT INTO review_states (
                    learner_id, item_id, interval_days, ease_factor,
                    repetitions, last_reviewed, next_review, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(learner_id, item_id) DO UPDATE SET
                    interval_days = excluded.interval_days,
                    ease_factor = excluded.ease_factor,
                    repetitions = excluded.repetitions,
                    last_reviewed = excluded.last_reviewed,
                    next_review = excluded.next_review,
                    updated_at = excluded.updated_at
                """,
                (
                    learner_id,
                    state.item_id,
                    state.interval,
                    state.ease_factor,
                    state.repetitions,
                    state.last_reviewed,
                    state.next_review,
                    datetime.now(),
                ),
            )
            conn.commit()

    def get_review_state(self, learner_id: str, item_id: str) -> ReviewCardState | None:
        """Get review state for a specific item"""
        with self.db_connection.get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM review_states WHERE learner_id = ? AND item_id = ?",
                (learner_id, item_id),
            )
            row = cursor.fetchone()
            return _row_to_state(row) if row else None

    def list_review_states(self, learner_id: str) -> dict[str, ReviewCardState]:
        """Get all review states of a learner keyed by item ID"""
        with self.db_connection.get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM review_states WHERE learner_id = ?", (learner_id,)
            )
            return {row["item_id"]: _row_to_state(row) for row in cursor.fetchall()}

    def add_review_history(
        self, learner_id: str, item_id: str, rating: str, reviewed_at: datetime
    ) -> None:
        """Record a review in history"""
        with self.db_connection.get_connection() as conn:
            conn.execute(
                """
                INSERT INTO review_history (learner_id, item_id, rating, reviewed_at)
                VALUES (?, ?, ?, ?)
                """,
                (learner_id, item_id, rating, reviewed_at),
            )
            conn.commit()

    def get_review_history(
        self, learner_id: str, item_id: str | None = None, limit: int | None = None
    ) -> list[ReviewHistory]:
        """Get review history for a learner or a specific item, oldest first"""
        query = "SELECT item_id, rating, reviewed_at FROM review_history WHERE learner_id = ?"
        params: list = [learner_id]
        if item_id is not None:
            query += " AND item_id = ?"
            params.append(item_id)
        query += " ORDER BY reviewed_at, id"
        if limit is not None:
            query += " LIMIT ?"
            params.append(limit)

        with self.db_connection.get_connection() as conn:
            cursor = conn.execute(query, params)
            return [dict(row) for row in cursor.fetchall()]
