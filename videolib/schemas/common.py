"""
Common Schemas

Shared schemas for pagination, filtering, and enums.
"""
from pydantic import BaseModel, Field
from typing import Generic, TypeVar, List
from enum import Enum

T = TypeVar("T")


class PaginatedResponse(BaseModel, Generic[T]):
    """Generic paginated response wrapper"""
    items: List[T]
    total: int = Field(..., description="Total number of items")
    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Items per page")
    total_pages: int = Field(..., description="Total number of pages")


class ResolutionClass(str, Enum):
    """Resolution buckets derived from pixel height"""
    SD = "sd"
    HD = "hd"
    FULLHD = "fullhd"
    QHD = "2k"
    UHD = "4k"
    OTHER = "other"


class DateFilterPreset(str, Enum):
    """Named created_at windows (custom uses date_from / date_to)"""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    CUSTOM = "custom"


class SortField(str, Enum):
    """Sortable video columns"""
    CREATED_AT = "created_at"
    TITLE = "title"
    DURATION = "duration"
    FILE_SIZE = "file_size"
    HEIGHT = "height"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SearchType(str, Enum):
    """Search modes of /api/videos/search"""
    TITLE = "title"
    TAG = "tag"
    TAGS = "tags"


class MessageResponse(BaseModel):
    """Plain success/message acknowledgement"""
    success: bool = True
    message: str
