"""
Media Schemas

Thumbnail selection, upload and directory scan payloads.
"""
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, Field


class ThumbnailCandidate(BaseModel):
    """One selection thumbnail offered to the user"""
    index: int
    timestamp: int = Field(..., description="Seconds into the video")
    timemark: str = Field(..., description="HH:MM:SS")
    path: str
    filename: str
    url: str


class ThumbnailOptionsResponse(BaseModel):
    success: bool = True
    thumbnails: List[ThumbnailCandidate]
    current_thumbnail: Optional[str] = None


class SetThumbnailRequest(BaseModel):
    thumbnail_filename: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("thumbnail_filename", "thumbnailFilename"),
    )


class SetThumbnailResponse(BaseModel):
    success: bool = True
    thumbnail_filename: str
    thumbnail_url: str
    removed_candidates: int


class UploadTag(BaseModel):
    """Tag entry of the upload form's JSON tag list"""
    name: str = Field(..., min_length=1, max_length=100)
    color: Optional[str] = Field(None, max_length=20)


class UploadPreviewResponse(BaseModel):
    success: bool = True
    thumbnails: List[ThumbnailCandidate]
    filename: str
    message: str


class UploadResponse(BaseModel):
    success: bool = True
    video_id: int
    tags_added: int
    is_existing: bool
    message: str


class ScanRequest(BaseModel):
    directory: str = Field(..., description="Directory to scan recursively")


class ScanResponse(BaseModel):
    success: bool = True
    total_found: int
    processed: int
    skipped: int
    errors: List[str]
    message: str
