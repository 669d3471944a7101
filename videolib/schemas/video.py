"""
Video Schemas

Pydantic models for video records, partial updates and the composite filter.
"""
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from videolib.schemas.common import (
    PaginatedResponse,
    ResolutionClass,
    DateFilterPreset,
    SortField,
    SortOrder,
)


class TagRef(BaseModel):
    """Tag as attached to a video"""
    id: int
    name: str
    color: Optional[str] = None

    model_config = {"from_attributes": True}


class VideoResponse(BaseModel):
    """
    Single video with its tags.

    Tags are one ordered list of {id, name, color} records, in the order
    they were attached.
    """
    id: int
    filename: str = Field(..., description="Stored filename")
    title: Optional[str] = Field(None, description="Human-readable title")
    file_path: str = Field(..., description="Absolute file path")
    file_size: Optional[int] = None

    # Media info
    duration: int = Field(0, description="Seconds, 0 = unknown")
    width: Optional[int] = None
    height: Optional[int] = None
    resolution_class: Optional[ResolutionClass] = None

    # Artifacts
    thumbnail_path: Optional[str] = None
    preview_path: Optional[str] = None
    thumbnail_url: Optional[str] = None
    preview_url: Optional[str] = None

    tags: List[TagRef] = Field(default_factory=list)

    # Timestamps
    created_at: datetime
    updated_at: datetime


class VideoListResponse(PaginatedResponse[VideoResponse]):
    """Paginated video list (composite filter)"""
    pass


class VideoCreate(BaseModel):
    """Fields of a new video row"""
    filename: str
    title: Optional[str] = None
    file_path: str
    file_size: Optional[int] = None
    duration: int = 0
    width: Optional[int] = None
    height: Optional[int] = None
    thumbnail_path: Optional[str] = None
    preview_path: Optional[str] = None


class VideoUpdate(BaseModel):
    """
    Partial video update.

    Only fields that were explicitly set are written; updated_at is
    always refreshed.
    """
    title: Optional[str] = None
    filename: Optional[str] = None
    file_size: Optional[int] = None
    duration: Optional[int] = Field(None, ge=0)
    width: Optional[int] = Field(None, ge=0)
    height: Optional[int] = Field(None, ge=0)
    thumbnail_path: Optional[str] = None
    preview_path: Optional[str] = None

    model_config = {"extra": "forbid"}

    @field_validator("filename")
    @classmethod
    def filename_not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("filename cannot be null")
        return value


class VideoFilter(BaseModel):
    """Composite filter; absent predicates do not narrow the result"""
    tags: List[str] = Field(default_factory=list, description="AND-combined tag names")
    resolutions: List[ResolutionClass] = Field(default_factory=list)
    duration_min: Optional[int] = Field(None, ge=0, description="Seconds, inclusive")
    duration_max: Optional[int] = Field(None, ge=0, description="Seconds, inclusive")
    date_filter: Optional[DateFilterPreset] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    sort_by: SortField = SortField.CREATED_AT
    order: SortOrder = SortOrder.DESC
    page: int = Field(1, ge=1)
    limit: int = Field(100, ge=1, le=1000)

    @model_validator(mode="after")
    def check_ranges(self):
        if (
            self.duration_min is not None
            and self.duration_max is not None
            and self.duration_min > self.duration_max
        ):
            raise ValueError("duration_min must not exceed duration_max")
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        return self
