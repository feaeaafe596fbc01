"""
Persistence of memories and discussion answers.

Providers work on whole collections: ``save_memories`` replaces every
stored memory with the given list.  Keeping that list consistent (no
duplicate ids, read-modify-write ordering) is the job of the memory
service.
"""

import logging
import sqlite3
from abc import ABC, abstractmethod
from typing import List, Optional

from pydantic import ValidationError

from ..core.db import fetch_all, get_cursor
from ..core.errors import StorageError
from ..schemas.memory import DiscussionAnswer, MemoryData


logger = logging.getLogger(__name__)


class MemoryDataProvider(ABC):
    """Load/save interface for memory collections."""

    @abstractmethod
    def load_memories(self) -> List[MemoryData]:
        ...

    @abstractmethod
    def save_memories(self, memories: List[MemoryData]) -> None:
        ...

    @abstractmethod
    def load_discussion_answers(self) -> List[DiscussionAnswer]:
        ...

    @abstractmethod
    def save_discussion_answers(self, answers: List[DiscussionAnswer]) -> None:
        ...


class SQLiteMemoryDataProvider(MemoryDataProvider):
    """Stores each record as a JSON document in the ``memories`` and
    ``discussion_answers`` tables.

    Loads raise ``StorageError`` when the database cannot be read;
    individual rows that no longer validate are skipped with a warning.
    Saves run in a single transaction and raise ``StorageError`` on any
    database error, leaving the previous contents in place.
    """

    def __init__(self, db_path: Optional[str] = None) -> None:
        self.db_path = db_path

    def load_memories(self) -> List[MemoryData]:
        rows = fetch_all("SELECT id, payload FROM memories ORDER BY position", db_path=self.db_path)
        memories: List[MemoryData] = []
        for row in rows:
            try:
                memories.append(MemoryData.model_validate_json(row["payload"]))
            except ValidationError as e:
                logger.warning("Skipping unreadable memory %s: %s", row["id"], e)
        logger.debug("Loaded %d memories", len(memories))
        return memories

    def save_memories(self, memories: List[MemoryData]) -> None:
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute("DELETE FROM memories")
                cursor.executemany(
                    "INSERT INTO memories (id, movie_id, position, payload) VALUES (?, ?, ?, ?)",
                    [
                        (str(m.id), str(m.movie_id), position, m.model_dump_json())
                        for position, m in enumerate(memories)
                    ],
                )
        except sqlite3.Error as e:
            logger.error("Failed to save %d memories: %s", len(memories), e)
            raise StorageError(f"Could not save memories: {e}") from e
        logger.info("Saved %d memories", len(memories))

    def load_discussion_answers(self) -> List[DiscussionAnswer]:
        rows = fetch_all("SELECT id, payload FROM discussion_answers ORDER BY position", db_path=self.db_path)
        answers: List[DiscussionAnswer] = []
        for row in rows:
            try:
                answers.append(DiscussionAnswer.model_validate_json(row["payload"]))
            except ValidationError as e:
                logger.warning("Skipping unreadable discussion answer %s: %s", row["id"], e)
        return answers

    def save_discussion_answers(self, answers: List[DiscussionAnswer]) -> None:
        try:
            with get_cursor(self.db_path) as cursor:
                cursor.execute("DELETE FROM discussion_answers")
                cursor.executemany(
                    """
                    INSERT INTO discussion_answers (id, memory_id, question_id, position, payload)
                    VALUES (?, ?, ?, ?, ?)
                    """,
                    [
                        (
                            str(a.id),
                            str(a.memory_id) if a.memory_id else None,
                            str(a.question_id),
                            position,
                            a.model_dump_json(),
                        )
                        for position, a in enumerate(answers)
                    ],
                )
        except sqlite3.Error as e:
            logger.error("Failed to save %d discussion answers: %s", len(answers), e)
            raise StorageError(f"Could not save discussion answers: {e}") from e
        logger.info("Saved %d discussion answers", len(answers))
