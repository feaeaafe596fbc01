"""
Memory endpoints for API v1.

Create, list, replace and delete the memories recorded after a movie
night, plus the discussion answers saved for each memory.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ....dependencies import get_memory_service
from ....schemas.memory import (
    DiscussionAnswer,
    DiscussionAnswerCreate,
    MemoryData,
    MemoryPhoto,
    MemoryPhotoCreate,
    MemorySortCriteria,
    MemoryStatistics,
)
from ....services.memory_service import MemoryService


router = APIRouter()


@router.get("/", response_model=List[MemoryData])
async def list_memories(
    movie_id: Optional[UUID] = Query(None),
    q: Optional[str] = Query(None, description="Search notes and movie titles"),
    sort: Optional[MemorySortCriteria] = Query(None),
    service: MemoryService = Depends(get_memory_service),
) -> List[MemoryData]:
    """List memories.

    - **movie_id**: only memories of this movie.
    - **q**: case-insensitive search in notes and movie title.
    - **sort**: `date` (newest first), `rating` (highest first) or
      `movie_title`.  Without it, insertion order is kept.
    """
    memories = service.get_memories_sorted(sort) if sort else service.get_all_memories()
    if movie_id is not None:
        memories = [m for m in memories if m.movie_id == movie_id]
    if q is not None:
        ids = {m.id for m in service.search_memories(q)}
        memories = [m for m in memories if m.id in ids]
    return memories


@router.post("/", response_model=MemoryData, status_code=status.HTTP_201_CREATED)
async def create_memory(memory: MemoryData, service: MemoryService = Depends(get_memory_service)) -> MemoryData:
    if not service.create_memory(memory):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT, detail=f"Memory {memory.id} could not be created"
        )
    return memory


@router.post("/reload", response_model=List[MemoryData])
async def reload_memories(service: MemoryService = Depends(get_memory_service)) -> List[MemoryData]:
    """Re-read memories from storage, replacing the cached collection."""
    return service.load_memories()


@router.get("/statistics", response_model=MemoryStatistics)
async def memory_statistics(service: MemoryService = Depends(get_memory_service)) -> MemoryStatistics:
    return MemoryStatistics(
        memory_count=service.get_memory_count(),
        average_rating=service.get_average_rating(),
        rating_distribution=service.get_rating_distribution(),
    )


@router.get("/{memory_id}", response_model=MemoryData)
async def get_memory(memory_id: UUID, service: MemoryService = Depends(get_memory_service)) -> MemoryData:
    memory = service.get_memory(memory_id)
    if memory is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Memory {memory_id} not found")
    return memory


@router.put("/{memory_id}", response_model=MemoryData)
async def update_memory(
    memory_id: UUID,
    memory: MemoryData,
    service: MemoryService = Depends(get_memory_service),
) -> MemoryData:
    """Replace a memory.  The id in the path wins over the body."""
    replacement = memory.model_copy(update={"id": memory_id})
    if not service.update_memory(replacement):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Memory {memory_id} not found")
    return replacement


@router.delete("/{memory_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_memory(memory_id: UUID, service: MemoryService = Depends(get_memory_service)) -> None:
    if not service.delete_memory(memory_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Memory {memory_id} not found")


@router.get("/{memory_id}/answers", response_model=List[DiscussionAnswer])
async def list_answers(
    memory_id: UUID, service: MemoryService = Depends(get_memory_service)
) -> List[DiscussionAnswer]:
    return service.get_discussion_answers(memory_id)


@router.post("/{memory_id}/answers", response_model=DiscussionAnswer, status_code=status.HTTP_201_CREATED)
async def save_answer(
    memory_id: UUID,
    data: DiscussionAnswerCreate,
    service: MemoryService = Depends(get_memory_service),
) -> DiscussionAnswer:
    answer = DiscussionAnswer(
        question_id=data.question_id,
        response=data.response,
        child_age=data.child_age,
        memory_id=memory_id,
    )
    if not service.save_discussion_answer(answer, memory_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Answer could not be saved for memory {memory_id}",
        )
    return answer


@router.get("/{memory_id}/photos", response_model=List[MemoryPhoto])
async def list_photos(memory_id: UUID, service: MemoryService = Depends(get_memory_service)) -> List[MemoryPhoto]:
    if service.get_memory(memory_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Memory {memory_id} not found")
    return service.get_photos(memory_id)


@router.post("/{memory_id}/photos", response_model=MemoryPhoto, status_code=status.HTTP_201_CREATED)
async def add_photo(
    memory_id: UUID,
    data: MemoryPhotoCreate,
    service: MemoryService = Depends(get_memory_service),
) -> MemoryPhoto:
    if service.get_memory(memory_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Memory {memory_id} not found")
    photo = MemoryPhoto(**data.model_dump(exclude_none=True))
    if not service.add_photo(memory_id, photo):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Photo could not be added to memory {memory_id}",
        )
    return photo


@router.delete("/{memory_id}/photos/{photo_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_photo(
    memory_id: UUID, photo_id: UUID, service: MemoryService = Depends(get_memory_service)
) -> None:
    if not service.delete_photo(memory_id, photo_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Photo {photo_id} not found")
