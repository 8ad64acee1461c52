"""
Question Store - Persistence for Unanswered Questions

When the bot cannot answer a question it offers to save it. Saved
questions land here so the document maintainers can extend the tree
later.

Usage:
    store = SQLiteQuestionStore("./data/questions.db")
    store.add("Do you ship abroad?", user_id=42)
    for q in store.list():
        print(q.user_id, q.question)
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, Union

import structlog

from qnatree.exceptions import StorageError
from qnatree.models import UnansweredQuestion

logger = structlog.get_logger(__name__)


class SQLiteQuestionStore:
    """
    SQLite-backed store of unanswered questions.

    A connection is opened per operation, so the store object itself
    holds no open handles.

    Attributes:
        db_path: Path to the SQLite database file.
    """

    def __init__(self, db_path: Path | str):
        """
        Initialize the store.

        Args:
            db_path: Path to the SQLite database file.
                     Will be created if it doesn't exist.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_db()

        logger.info("question_store_initialized", db_path=str(self.db_path))

    def _init_db(self) -> None:
        """Create the database schema if it doesn't exist."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS questions (
                    id INTEGER PRIMARY KEY,
                    user_id INTEGER NOT NULL,
                    question TEXT NOT NULL,
                    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                )
            """)
            conn.commit()

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        """Context manager for database connections."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            raise StorageError(f"Cannot open {self.db_path}: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            yield conn
        except sqlite3.Error as e:
            raise StorageError(str(e)) from e
        finally:
            conn.close()

    def add(self, question: str, user_id: int) -> int:
        """
        Save a question.

        Args:
            question: The question text as the user typed it.
            user_id: Id of the user who asked.

        Returns:
            Row id of the stored question.
        """
        with self._connect() as conn:
            cursor = conn.execute(
                "INSERT INTO questions (user_id, question) VALUES (?, ?)",
                (user_id, question),
            )
            conn.commit()
            row_id = cursor.lastrowid

        logger.debug("question_saved", id=row_id, user_id=user_id)
        return row_id

    def list(self, limit: int | None = None) -> list[UnansweredQuestion]:
        """
        Stored questions, oldest first.

        Args:
            limit: Return only the most recent ``limit`` questions. Zero
                returns an empty list.

        Raises:
            ValueError: If ``limit`` is negative.
        """
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")

        query = "SELECT id, user_id, question, created_at FROM questions ORDER BY id"
        params: tuple = ()
        if limit is not None:
            query = (
                "SELECT * FROM (SELECT id, user_id, question, created_at "
                "FROM questions ORDER BY id DESC LIMIT ?) ORDER BY id"
            )
            params = (limit,)

        with self._connect() as conn:
            rows = conn.execute(query, params).fetchall()

        return [
            UnansweredQuestion(
                id=row["id"],
                user_id=row["user_id"],
                question=row["question"],
                created_at=row["created_at"],
            )
            for row in rows
        ]

    def count(self) -> int:
        """Get the total number of stored questions."""
        with self._connect() as conn:
            cursor = conn.execute("SELECT COUNT(*) FROM questions")
            return cursor.fetchone()[0]

    def clear(self) -> int:
        """
        Delete all stored questions.

        Returns:
            Number of questions deleted.
        """
        with self._connect() as conn:
            cursor = conn.execute("DELETE FROM questions")
            count = cursor.rowcount
            conn.commit()

        logger.warning("question_store_cleared", count=count)
        return count


class InMemoryQuestionStore:
    """
    In-memory question store for testing and ephemeral usage.

    API-compatible with SQLiteQuestionStore.
    """

    def __init__(self):
        self._questions: list[UnansweredQuestion] = []

    def add(self, question: str, user_id: int) -> int:
        row_id = len(self._questions) + 1
        self._questions.append(
            UnansweredQuestion(
                id=row_id,
                user_id=user_id,
                question=question,
                created_at=datetime.now(),
            )
        )
        return row_id

    def list(self, limit: int | None = None) -> list[UnansweredQuestion]:
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")
        if limit is None:
            return list(self._questions)
        return self._questions[-limit:] if limit > 0 else []

    def count(self) -> int:
        return len(self._questions)

    def clear(self) -> int:
        count = len(self._questions)
        self._questions.clear()
        return count


# Type alias for either store
QuestionStore = Union[SQLiteQuestionStore, InMemoryQuestionStore]
