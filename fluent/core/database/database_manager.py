"""
SQLite-backed learner profile store coordinating the repositories
"""

import logging

from .connection import DatabaseConnection
from .profile_store import ProfileStore
from .repositories.dictionary_repository import DictionaryRepository
from .repositories.review_repository import ReviewRepository

logger = logging.getLogger(__name__)


class DatabaseManager(ProfileStore):
    """Profile store persisting entries and review state in SQLite"""

    def __init__(self, db_path: str | None = None):
        self.db_connection = DatabaseConnection(db_path)
        self.dictionary_repo = DictionaryRepository(self.db_connection)
        self.review_repo = ReviewRepository(self.db_connection)

    def init_database(self) -> None:
        """Initialize database tables and indexes"""
        self.db_connection.init_database()
        logger.info(f"Profile database ready at {self.db_connection.db_path}")

    def get_connection(self):
        """Get database connection context manager"""
        return self.db_connection.get_connection()

    # Dictionary methods
    def save_entry(self, learner_id, entry):
        return self.dictionary_repo.save_entry(learner_id, entry)

    def get_entry(self, learner_id, item_id):
        return self.dictionary_repo.get_entry(learner_id, item_id)

    def list_entries(self, learner_id):
        return self.dictionary_repo.list_entries(learner_id)

    def delete_entry(self, learner_id, item_id):
        return self.dictionary_repo.delete_entry(learner_id, item_id)

    # Review methods
    def get_review_state(self, learner_id, item_id):
        return self.review_repo.get_review_state(learner_id, item_id)

    def save_review_state(self, learner_id, state):
        self.review_repo.save_review_state(learner_id, state)

    def list_review_states(self, learner_id):
        return self.review_repo.list_review_states(learner_id)

    def add_review_history(self, learner_id, item_id, rating, reviewed_at):
        self.review_repo.add_review_history(learner_id, item_id, rating, reviewed_at)

    def get_review_history(self, learner_id, item_id=None):
        return self.review_repo.get_review_history(learner_id, item_id)


# Global profile store instance
_db_manager: DatabaseManager | None = None


def get_db_manager(db_path: str | None = None) -> DatabaseManager:
    """Get global database manager instance"""
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager(db_path)
        _db_manager.init_database()
    return _db_manager
