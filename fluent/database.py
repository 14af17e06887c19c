"""
Profile store entry points for the Fluent learning pipeline
"""

from .config import get_database_path
from .core.database.database_manager import DatabaseManager, get_db_manager
from .core.database.models import DictionaryEntry
from .core.database.profile_store import InMemoryProfileStore, ProfileStore


def init_db(db_path=None):
    """Initialize database"""
    return get_db_manager(db_path)


__all__ = [
    "DatabaseManager",
    "DictionaryEntry",
    "InMemoryProfileStore",
    "ProfileStore",
    "get_database_path",
    "get_db_manager",
    "init_db",
]
