"""
Business logic for movie-night memories.

``MemoryService`` keeps the memories and separately saved discussion
answers in memory after loading them from its provider.  Reads are
served from that cache; every mutation writes the whole collection back
through the provider and only then becomes visible.  Storage failures
are logged and reported as ``False`` so callers never see a provider
exception.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional
from uuid import UUID, uuid4

from ..core.config import settings
from ..core.errors import StorageError
from ..providers.memory_provider import MemoryDataProvider
from ..schemas.memory import DiscussionAnswer, MemoryData, MemoryPhoto, MemorySortCriteria
from ..schemas.movie import MovieData


logger = logging.getLogger(__name__)

MovieLookup = Callable[[UUID], Optional[MovieData]]

MAX_PHOTO_BYTES = 5 * 1024 * 1024


class MemoryServiceProtocol(ABC):
    """Operations the presentation layer may call on memories."""

    @abstractmethod
    def get_all_memories(self) -> List[MemoryData]:
        ...

    @abstractmethod
    def get_memories(self, movie_id: UUID) -> List[MemoryData]:
        ...

    @abstractmethod
    def get_memory(self, memory_id: UUID) -> Optional[MemoryData]:
        ...

    @abstractmethod
    def create_memory(self, memory: MemoryData) -> bool:
        ...

    @abstractmethod
    def update_memory(self, memory: MemoryData) -> bool:
        ...

    @abstractmethod
    def delete_memory(self, memory_id: UUID) -> bool:
        ...

    @abstractmethod
    def load_memories(self) -> List[MemoryData]:
        ...

    @abstractmethod
    def save_discussion_answer(self, answer: DiscussionAnswer, memory_id: UUID) -> bool:
        ...

    @abstractmethod
    def get_discussion_answers(self, memory_id: UUID) -> List[DiscussionAnswer]:
        ...

    @abstractmethod
    def add_photo(self, memory_id: UUID, photo: MemoryPhoto) -> bool:
        ...

    @abstractmethod
    def get_photos(self, memory_id: UUID) -> List[MemoryPhoto]:
        ...

    @abstractmethod
    def delete_photo(self, memory_id: UUID, photo_id: UUID) -> bool:
        ...

    @abstractmethod
    def get_memory_count(self) -> int:
        ...

    @abstractmethod
    def get_average_rating(self) -> float:
        ...

    @abstractmethod
    def get_memories_sorted(self, criteria: MemorySortCriteria) -> List[MemoryData]:
        ...

    @abstractmethod
    def search_memories(self, query: str) -> List[MemoryData]:
        ...


class MemoryService(MemoryServiceProtocol):
    """Cache-then-serve memory store.

    ``movie_lookup`` resolves a movie id to its catalogue record and is
    used for title sorting and search.  Without it, memories behave as
    if their movie were unknown.  ``allow_orphan_answers`` controls
    whether an answer may be saved for a memory id that is not in the
    collection.
    """

    def __init__(
        self,
        provider: MemoryDataProvider,
        movie_lookup: Optional[MovieLookup] = None,
        allow_orphan_answers: Optional[bool] = None,
    ) -> None:
        self.provider = provider
        self.movie_lookup = movie_lookup
        if allow_orphan_answers is None:
            allow_orphan_answers = settings.allow_orphan_answers
        self.allow_orphan_answers = allow_orphan_answers
        self._memories: List[MemoryData] = []
        self._answers: List[DiscussionAnswer] = []
        self.load_memories()

    # ------------------------------------------------------------------
    # Reads

    def get_all_memories(self) -> List[MemoryData]:
        return list(self._memories)

    def get_memories(self, movie_id: UUID) -> List[MemoryData]:
        return [m for m in self._memories if m.movie_id == movie_id]

    def get_memory(self, memory_id: UUID) -> Optional[MemoryData]:
        for memory in self._memories:
            if memory.id == memory_id:
                return memory
        return None

    def load_memories(self) -> List[MemoryData]:
        """Re-read memories and answers from storage, replacing the cache.

        If storage cannot be read the current cache is kept.
        """
        try:
            memories = self.provider.load_memories()
            answers = self.provider.load_discussion_answers()
        except StorageError as e:
            logger.error("Failed to load memories, keeping %d cached: %s", len(self._memories), e)
            return list(self._memories)
        self._memories = memories
        self._answers = answers
        logger.info("Loaded %d memories and %d discussion answers", len(memories), len(answers))
        return list(self._memories)

    # ------------------------------------------------------------------
    # Mutations

    def create_memory(self, memory: MemoryData) -> bool:
        if self.get_memory(memory.id) is not None:
            logger.warning("Memory %s already exists", memory.id)
            return False
        if not self._save_memories(self._memories + [memory]):
            return False
        logger.info("Created memory %s for movie %s", memory.id, memory.movie_id)
        return True

    def update_memory(self, memory: MemoryData) -> bool:
        """Replace the stored memory that has the same id."""
        for index, existing in enumerate(self._memories):
            if existing.id == memory.id:
                break
        else:
            logger.warning("Cannot update unknown memory %s", memory.id)
            return False
        updated = list(self._memories)
        updated[index] = memory
        if not self._save_memories(updated):
            return False
        logger.info("Updated memory %s", memory.id)
        return True

    def delete_memory(self, memory_id: UUID) -> bool:
        remaining = [m for m in self._memories if m.id != memory_id]
        if len(remaining) == len(self._memories):
            logger.warning("Cannot delete unknown memory %s", memory_id)
            return False
        if not self._save_memories(remaining):
            return False
        kept_answers = [a for a in self._answers if a.memory_id != memory_id]
        if len(kept_answers) != len(self._answers) and not self._save_answers(kept_answers):
            logger.warning("Memory %s deleted but its discussion answers were kept", memory_id)
        logger.info("Deleted memory %s", memory_id)
        return True

    def save_discussion_answer(self, answer: DiscussionAnswer, memory_id: UUID) -> bool:
        """Store ``answer`` for ``memory_id``.

        An earlier answer to the same question for the same memory is
        replaced.  An answer id already stored under another memory is
        saved as a copy with a fresh id.  Unknown memory ids are rejected
        unless orphan answers are allowed.
        """
        if self.get_memory(memory_id) is None and not self.allow_orphan_answers:
            logger.warning(
                "Rejected discussion answer %s: memory %s does not exist", answer.id, memory_id
            )
            return False
        stamped = answer.model_copy(update={"memory_id": memory_id})
        if any(a.id == stamped.id and a.memory_id != memory_id for a in self._answers):
            # Answer ids are unique across memories; the copy gets its own.
            stamped = stamped.model_copy(update={"id": uuid4()})
        answers = [
            a
            for a in self._answers
            if a.id != stamped.id
            and not (a.memory_id == memory_id and a.question_id == stamped.question_id)
        ]
        answers.append(stamped)
        if not self._save_answers(answers):
            return False
        logger.info("Saved discussion answer %s for memory %s", stamped.id, memory_id)
        return True

    def get_discussion_answers(self, memory_id: UUID) -> List[DiscussionAnswer]:
        saved = [a for a in self._answers if a.memory_id == memory_id]
        memory = self.get_memory(memory_id)
        if memory is None:
            return saved if self.allow_orphan_answers else []
        answered = {a.question_id for a in saved}
        embedded = [a for a in memory.discussion_answers if a.question_id not in answered]
        return embedded + saved

    # ------------------------------------------------------------------
    # Photos

    def add_photo(self, memory_id: UUID, photo: MemoryPhoto) -> bool:
        """Attach ``photo`` to a memory, replacing a photo with the same id.

        Photos larger than ``MAX_PHOTO_BYTES`` are rejected.
        """
        memory = self.get_memory(memory_id)
        if memory is None:
            logger.warning("Cannot add photo to unknown memory %s", memory_id)
            return False
        if photo.estimated_file_size > MAX_PHOTO_BYTES:
            logger.warning(
                "Rejected photo %s for memory %s: %d bytes exceeds %d",
                photo.id,
                memory_id,
                photo.estimated_file_size,
                MAX_PHOTO_BYTES,
            )
            return False
        photos = [p for p in memory.photos if p.id != photo.id] + [photo]
        if not self.update_memory(memory.model_copy(update={"photos": photos})):
            return False
        logger.info("Added photo %s to memory %s", photo.id, memory_id)
        return True

    def get_photos(self, memory_id: UUID) -> List[MemoryPhoto]:
        """Photos of a memory, oldest capture first."""
        memory = self.get_memory(memory_id)
        if memory is None:
            return []
        return sorted(memory.photos, key=lambda p: p.capture_date)

    def delete_photo(self, memory_id: UUID, photo_id: UUID) -> bool:
        memory = self.get_memory(memory_id)
        if memory is None:
            return False
        photos = [p for p in memory.photos if p.id != photo_id]
        if len(photos) == len(memory.photos):
            logger.warning("Photo %s not found on memory %s", photo_id, memory_id)
            return False
        if not self.update_memory(memory.model_copy(update={"photos": photos})):
            return False
        logger.info("Deleted photo %s from memory %s", photo_id, memory_id)
        return True

    # ------------------------------------------------------------------
    # Statistics, sorting and search

    def get_memory_count(self) -> int:
        return len(self._memories)

    def get_average_rating(self) -> float:
        if not self._memories:
            return 0.0
        return sum(m.rating for m in self._memories) / len(self._memories)

    def get_rating_distribution(self) -> Dict[int, int]:
        distribution = {stars: 0 for stars in range(1, 6)}
        for memory in self._memories:
            distribution[memory.rating] += 1
        return distribution

    def get_memories_sorted(self, criteria: MemorySortCriteria) -> List[MemoryData]:
        if criteria == MemorySortCriteria.DATE:
            return sorted(self._memories, key=lambda m: m.watch_date, reverse=True)
        if criteria == MemorySortCriteria.RATING:
            return sorted(self._memories, key=lambda m: m.rating, reverse=True)
        if criteria == MemorySortCriteria.MOVIE_TITLE:
            # Unknown movies sort after every titled memory.
            def title_key(memory: MemoryData):
                title = self._movie_title(memory.movie_id)
                return (title is None, (title or "").casefold())

            return sorted(self._memories, key=title_key)
        raise ValueError(f"Unsupported sort criteria: {criteria}")

    def search_memories(self, query: str) -> List[MemoryData]:
        needle = query.strip().casefold()
        if not needle:
            return list(self._memories)
        results = []
        for memory in self._memories:
            haystacks = [memory.notes or "", self._movie_title(memory.movie_id) or ""]
            if any(needle in text.casefold() for text in haystacks):
                results.append(memory)
        return results

    # ------------------------------------------------------------------

    def _movie_title(self, movie_id: UUID) -> Optional[str]:
        if self.movie_lookup is None:
            return None
        movie = self.movie_lookup(movie_id)
        return movie.title if movie else None

    def _save_memories(self, memories: List[MemoryData]) -> bool:
        try:
            self.provider.save_memories(memories)
        except StorageError as e:
            logger.error("Failed to save memories: %s", e)
            return False
        self._memories = memories
        return True

    def _save_answers(self, answers: List[DiscussionAnswer]) -> bool:
        try:
            self.provider.save_discussion_answers(answers)
        except StorageError as e:
            logger.error("Failed to save discussion answers: %s", e)
            return False
        self._answers = answers
        return True
