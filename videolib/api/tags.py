"""
Tags API Router

Endpoints for tag CRUD, the tag hierarchy and tag usage.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from videolib.config import Settings, get_settings
from videolib.database import get_db
from videolib.schemas.common import MessageResponse
from videolib.schemas.tag import (
    TagCreate,
    TagHierarchyResponse,
    TagResponse,
    TagUpdate,
)
from videolib.services.tag_service import TagService

router = APIRouter(prefix="/api/tags", tags=["tags"])


class TagCleanupResponse(BaseModel):
    success: bool = True
    removed: int


@router.get("", response_model=List[TagResponse])
def list_tags(db: Session = Depends(get_db)) -> List[TagResponse]:
    """
    Get all tags with their video counts.

    Ordered by level, category, then name.
    """
    service = TagService(db)
    return [TagResponse(**item) for item in service.get_all_tags()]


@router.post("", response_model=TagResponse, status_code=201)
def create_tag(
    tag: TagCreate,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> TagResponse:
    """
    Create a tag.

    Tags with a parent default to level 2, others to level 1. Names are
    unique regardless of case.
    """
    service = TagService(db, default_color=settings.default_tag_color)
    created = service.create_tag(
        name=tag.name,
        color=tag.color,
        parent_id=tag.parent_id,
        category=tag.category,
        level=tag.level,
    )
    return TagResponse(**service.get_tag_with_count(created.id))


@router.get("/hierarchy", response_model=TagHierarchyResponse)
def get_hierarchy(db: Session = Depends(get_db)) -> TagHierarchyResponse:
    """
    Get the flat tag list and the tree built from parent links.
    """
    service = TagService(db)
    return TagHierarchyResponse(**service.get_hierarchical_tags())


@router.get("/category/{category}", response_model=List[TagResponse])
def get_by_category(
    category: str,
    db: Session = Depends(get_db),
) -> List[TagResponse]:
    """
    Get tags of one category (region, genre, meta, custom, ...).
    """
    service = TagService(db)
    return [TagResponse(**item) for item in service.get_tags_by_category(category)]


@router.get("/search", response_model=List[TagResponse])
def search_tags(
    q: str = Query(..., min_length=1, description="Part of a tag name"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
) -> List[TagResponse]:
    service = TagService(db)
    return [TagResponse(**item) for item in service.search_tags(q, limit=limit)]


@router.get("/popular", response_model=List[TagResponse])
def popular_tags(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
) -> List[TagResponse]:
    """
    Most-used tags first.
    """
    service = TagService(db)
    return [TagResponse(**item) for item in service.get_popular_tags(limit=limit)]


@router.get("/unused", response_model=List[TagResponse])
def unused_tags(db: Session = Depends(get_db)) -> List[TagResponse]:
    service = TagService(db)
    return [TagResponse(**item) for item in service.get_unused_tags()]


@router.delete("/unused", response_model=TagCleanupResponse)
def cleanup_unused_tags(db: Session = Depends(get_db)) -> TagCleanupResponse:
    """
    Delete every tag that no video carries.
    """
    service = TagService(db)
    return TagCleanupResponse(removed=service.cleanup_unused_tags())


@router.put("/{tag_id}", response_model=TagResponse)
def update_tag(
    tag_id: int,
    changes: TagUpdate,
    db: Session = Depends(get_db),
) -> TagResponse:
    """
    Rename, recolor, recategorize or re-parent a tag.
    """
    service = TagService(db)
    tag = service.update_tag(tag_id, changes)

    if not tag:
        raise HTTPException(status_code=404, detail="Tag not found")

    return TagResponse(**service.get_tag_with_count(tag.id))


@router.delete("/{tag_id}", response_model=MessageResponse)
def delete_tag(
    tag_id: int,
    db: Session = Depends(get_db),
) -> MessageResponse:
    """
    Delete a tag. Child tags are kept and become roots.
    """
    service = TagService(db)
    if not service.delete_tag(tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")

    return MessageResponse(message="Tag deleted successfully")
