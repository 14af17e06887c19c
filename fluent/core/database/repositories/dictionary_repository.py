"""
Dictionary repository for learner dictionary entries
"""

import logging
import sqlite3
from datetime import datetime

from ..connection import DatabaseConnection
from ..models import DictionaryEntry

logger = logging.getLogger(__name__)

_ENTRY_COLUMNS = (
    "id",
    "target_word",
    "reading",
    "english_meaning",
    "difficulty_level",
    "example_sentence",
    "example_translation",
    "source",
    "target_language",
    "date_added",
)


def _row_to_entry(row: sqlite3.Row) -> DictionaryEntry:
    return DictionaryEntry(**{column: row[column] for column in _ENTRY_COLUMNS})


class DictionaryRepository:
    """Repository for dictionary entry operations"""

    def __init__(self, db_connection: DatabaseConnection):
        self.db_connection = db_connection

    def save_entry(self, learner_id: str, entry: DictionaryEntry) -> DictionaryEntry:
        """Insert an entry or update it in place, keeping its review state"""
        with self.db_connection.get_connection() as conn:
            conn.execute(
                """
                INSERT INTO dictionary_entries (
                    id, learner_id, target_word, reading, english_meaning,
                    difficulty_level, example_sentence, example_translation,
                    source, target_language, date_added, updated_at
                )
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(learner_id, id) DO UPDATE SET
                    target_word = excluded.target_word,
                    reading = excluded.reading,
                    english_meaning = excluded.english_meaning,
                    difficulty_level = excluded.difficulty_level,
                    example_sentence = excluded.example_sentence,
                    example_translation = excluded.example_translation,
                    source = excluded.source,
                    target_language = excluded.target_language,
                    updated_at = excluded.updated_at
                """,
                (
                    entry.id,
                    learner_id,
                    entry.target_word,
                    entry.reading,
                    entry.english_meaning,
                    entry.difficulty_level,
                    entry.example_sentence,
                    entry.example_translation,
                    entry.source,
                    entry.target_language,
                    entry.date_added,
                    datetime.now(),
                ),
            )
            conn.commit()

        logger.debug(f"Saved entry {entry.id} ('{entry.target_word}') for learner {learner_id}")
        return entry

    def get_entry(self, learner_id: str, item_id: str) -> DictionaryEntry | None:
        """Get entry by ID"""
        with self.db_connection.get_connection() as conn:
            cursor = conn.execute(
                "SELECT * FROM dictionary_entries WHERE learner_id = ? AND id = ?",
                (learner_id, item_id),
            )
            row = cursor.fetchone()
            return _row_to_entry(row) if row else None

    def list_entries(self, learner_id: str) -> list[DictionaryEntry]:
        """Get all entries of a learner, oldest first"""
        with self.db_connection.get_connection() as conn:
            cursor = conn.execute(
                """
                SELECT * FROM dictionary_entries
                WHERE learner_id = ?
                ORDER BY date_added, rowid
                """,
                (learner_id,),
            )
            return [_row_to_entry(row) for row in cursor.fetchall()]

    def delete_entry(self, learner_id: str, item_id: str) -> bool:
        """Delete an entry; review state and history go with it"""
        with self.db_connection.get_connection() as conn:
            cursor = conn.execute(
                "DELETE FROM dictionary_entries WHERE learner_id = ? AND id = ?",
                (learner_id, item_id),
            )
            conn.commit()
            return cursor.rowcount > 0
