"""
Pydantic Schemas

Export all schemas for easy importing.
"""
from videolib.schemas.common import (
    PaginatedResponse,
    ResolutionClass,
    DateFilterPreset,
    SortField,
    SortOrder,
    SearchType,
    MessageResponse,
)
from videolib.schemas.video import (
    TagRef,
    VideoResponse,
    VideoListResponse,
    VideoCreate,
    VideoUpdate,
    VideoFilter,
)
from videolib.schemas.tag import (
    TagBase,
    TagCreate,
    TagUpdate,
    TagResponse,
    TagNode,
    TagHierarchyResponse,
    VideoTagRequest,
    VideoTagResponse,
)
from videolib.schemas.media import (
    ThumbnailCandidate,
    ThumbnailOptionsResponse,
    SetThumbnailRequest,
    SetThumbnailResponse,
    UploadTag,
    UploadPreviewResponse,
    UploadResponse,
    ScanRequest,
    ScanResponse,
)

__all__ = [
    # Common
    "PaginatedResponse",
    "ResolutionClass",
    "DateFilterPreset",
    "SortField",
    "SortOrder",
    "SearchType",
    "MessageResponse",
    # Video
    "TagRef",
    "VideoResponse",
    "VideoListResponse",
    "VideoCreate",
    "VideoUpdate",
    "VideoFilter",
    # Tag
    "TagBase",
    "TagCreate",
    "TagUpdate",
    "TagResponse",
    "TagNode",
    "TagHierarchyResponse",
    "VideoTagRequest",
    "VideoTagResponse",
    # Media
    "ThumbnailCandidate",
    "ThumbnailOptionsResponse",
    "SetThumbnailRequest",
    "SetThumbnailResponse",
    "UploadTag",
    "UploadPreviewResponse",
    "UploadResponse",
    "ScanRequest",
    "ScanResponse",
]
