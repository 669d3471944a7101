"""
Tag Schemas

Pydantic models for tag CRUD and the tag hierarchy.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field


class TagBase(BaseModel):
    """Base tag fields"""
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, max_length=20)
    category: str = Field("custom", max_length=50)


class TagCreate(TagBase):
    """New tag; level defaults to 2 under a parent, 1 otherwise"""
    parent_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("parent_id", "parentId")
    )
    level: Optional[int] = Field(None, ge=1)


class TagUpdate(BaseModel):
    """Partial tag update"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, max_length=20)
    category: Optional[str] = Field(None, max_length=50)
    parent_id: Optional[int] = Field(
        None, validation_alias=AliasChoices("parent_id", "parentId")
    )
    level: Optional[int] = Field(None, ge=1)


class TagResponse(BaseModel):
    """Tag with live video count"""
    id: int
    name: str
    color: Optional[str] = None
    parent_id: Optional[int] = None
    category: Optional[str] = None
    level: int = 1
    created_at: datetime
    video_count: int = Field(0, description="Videos carrying this tag right now")

    model_config = {"from_attributes": True}


class TagNode(TagResponse):
    """Tag in the hierarchy; owns its children"""
    children: List["TagNode"] = Field(default_factory=list)


TagNode.model_rebuild()


class TagHierarchyResponse(BaseModel):
    """Flat list plus the tree built from parent_id"""
    tags: List[TagResponse]
    hierarchy: List[TagNode]


class VideoTagRequest(BaseModel):
    """Attach a tag (found or created by name) to a video"""
    tag_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        validation_alias=AliasChoices("tag_name", "tagName"),
    )
    tag_color: Optional[str] = Field(
        None,
        max_length=20,
        validation_alias=AliasChoices("tag_color", "tagColor"),
    )


class VideoTagResponse(BaseModel):
    success: bool = True
    tag_id: int
    created: bool = Field(..., description="False when the link already existed")
