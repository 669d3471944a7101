"""
Videos API Router

Endpoints for listing, searching, filtering, streaming and tagging videos
and for choosing a video's thumbnail.
"""
import os
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import FileResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from videolib.api.dependencies import get_thumbnail_generator, parse_string_list
from videolib.config import Settings, get_settings
from videolib.database import get_db
from videolib.exceptions import BadInputError
from videolib.schemas.common import (
    DateFilterPreset,
    MessageResponse,
    ResolutionClass,
    SearchType,
    SortField,
    SortOrder,
)
from videolib.schemas.media import (
    SetThumbnailRequest,
    SetThumbnailResponse,
    ThumbnailCandidate,
    ThumbnailOptionsResponse,
)
from videolib.schemas.tag import VideoTagRequest, VideoTagResponse
from videolib.schemas.video import (
    TagRef,
    VideoFilter,
    VideoListResponse,
    VideoResponse,
    VideoUpdate,
)
from videolib.services.search_service import SearchService
from videolib.services.tag_service import TagService
from videolib.services.thumbnail_service import ThumbnailGenerator
from videolib.services.video_service import VideoService, artifact_url

router = APIRouter(prefix="/api/videos", tags=["videos"])


def _get_video_or_404(service: VideoService, video_id: int):
    video = service.get_video(video_id)
    if not video:
        raise HTTPException(status_code=404, detail="Video not found")
    return video


@router.get("", response_model=List[VideoResponse])
def list_videos(db: Session = Depends(get_db)) -> List[VideoResponse]:
    """
    Get all videos, newest first.
    """
    service = VideoService(db)
    return [VideoResponse(**item) for item in service.get_all_videos()]


@router.get("/search", response_model=List[VideoResponse])
def search_videos(
    q: Optional[str] = Query(None, description="Title query, or tag name for type=tag"),
    type: SearchType = Query(SearchType.TITLE, description="title, tag or tags"),
    tags: Optional[str] = Query(None, description="JSON array of tag names for type=tags"),
    db: Session = Depends(get_db),
) -> List[VideoResponse]:
    """
    Search videos.

    - **title**: ranked match on title and filename (exact, prefix,
      word-start, substring)
    - **tag**: videos carrying the tag named `q`
    - **tags**: videos carrying every tag in `tags`; an empty list matches nothing
    """
    service = SearchService(db)

    if type == SearchType.TAGS:
        results = service.search_by_tags(parse_string_list(tags, "tags"))
    elif not q or not q.strip():
        raise BadInputError("Search query or tags are required")
    elif type == SearchType.TAG:
        results = service.search_by_tag(q)
    else:
        results = service.search_by_title(q)

    return [VideoResponse(**item) for item in results]


@router.get("/filter", response_model=VideoListResponse)
def filter_videos(
    tags: Optional[str] = Query(None, description="JSON array of tag names (all required)"),
    resolution: Optional[str] = Query(None, description='JSON array, e.g. ["hd","4k"]'),
    duration_min: Optional[int] = Query(None, ge=0, description="Minimum duration (seconds)"),
    duration_max: Optional[int] = Query(None, ge=0, description="Maximum duration (seconds)"),
    date_filter: Optional[DateFilterPreset] = Query(None, description="today, week, month, year or custom"),
    date_from: Optional[date] = Query(None, description="First day (custom range)"),
    date_to: Optional[date] = Query(None, description="Last day (custom range)"),
    sort_by: SortField = Query(SortField.CREATED_AT, description="Sort column"),
    order: SortOrder = Query(SortOrder.DESC, description="asc or desc"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(100, ge=1, le=1000, description="Items per page"),
    db: Session = Depends(get_db),
) -> VideoListResponse:
    """
    Filter videos by tags, resolution, duration and creation date.

    All given predicates must match. Omitted predicates do not narrow
    the result.
    """
    labels = parse_string_list(resolution, "resolution")
    try:
        resolutions = [ResolutionClass(label.lower()) for label in labels]
    except ValueError as e:
        raise BadInputError(f"Unknown resolution: {e}") from e

    try:
        filters = VideoFilter(
            tags=parse_string_list(tags, "tags"),
            resolutions=resolutions,
            duration_min=duration_min,
            duration_max=duration_max,
            date_filter=date_filter,
            date_from=date_from,
            date_to=date_to,
            sort_by=sort_by,
            order=order,
            page=page,
            limit=limit,
        )
    except ValidationError as e:
        raise BadInputError(f"Invalid filter: {e.errors()[0]['msg']}") from e

    service = SearchService(db)
    result = service.filter_videos(filters)

    return VideoListResponse(
        items=[VideoResponse(**item) for item in result["items"]],
        total=result["total"],
        page=result["page"],
        limit=result["limit"],
        total_pages=result["total_pages"],
    )


@router.get("/{video_id}", response_model=VideoResponse)
def get_video(
    video_id: int,
    db: Session = Depends(get_db),
) -> VideoResponse:
    """
    Get a single video with its tags.
    """
    service = VideoService(db)
    video = service.get_video_by_id(video_id)

    if not video:
        raise HTTPException(status_code=404, detail="Video not found")

    return VideoResponse(**video)


@router.patch("/{video_id}", response_model=VideoResponse)
def update_video(
    video_id: int,
    changes: VideoUpdate,
    db: Session = Depends(get_db),
) -> VideoResponse:
    """
    Update video fields. Only the fields sent are changed.
    """
    service = VideoService(db)
    if not service.update_video(video_id, changes):
        raise HTTPException(status_code=404, detail="Video not found")

    return VideoResponse(**service.get_video_by_id(video_id))


@router.delete("/{video_id}", response_model=MessageResponse)
def delete_video(
    video_id: int,
    db: Session = Depends(get_db),
    generator: ThumbnailGenerator = Depends(get_thumbnail_generator),
) -> MessageResponse:
    """
    Remove a video from the catalog along with its generated artifacts.

    The video file itself is left on disk, and so are artifacts that
    another video still uses.
    """
    service = VideoService(db)
    video = _get_video_or_404(service, video_id)
    filename = video.filename

    service.delete_video(video_id)
    shared = service.artifact_paths_in_use(generator.artifact_paths(filename))
    generator.delete_artifacts(filename, keep=shared)

    return MessageResponse(message=f"Video {video_id} deleted")


@router.get("/{video_id}/stream")
def stream_video(
    video_id: int,
    db: Session = Depends(get_db),
) -> FileResponse:
    """
    Stream the original video file (supports HTTP range requests).
    """
    video = _get_video_or_404(VideoService(db), video_id)
    if not os.path.isfile(video.file_path):
        raise HTTPException(status_code=404, detail="Video file not found")

    return FileResponse(video.file_path, filename=video.filename)


@router.get("/{video_id}/preview")
def stream_preview(
    video_id: int,
    db: Session = Depends(get_db),
) -> FileResponse:
    """
    Stream the hover preview clip.
    """
    video = _get_video_or_404(VideoService(db), video_id)
    if not video.preview_path or not os.path.isfile(video.preview_path):
        raise HTTPException(status_code=404, detail="Preview not found")

    return FileResponse(video.preview_path, media_type="video/mp4")


@router.get("/{video_id}/tags", response_model=List[TagRef])
def list_video_tags(
    video_id: int,
    db: Session = Depends(get_db),
) -> List[TagRef]:
    """
    Tags attached to a video, by name.
    """
    _get_video_or_404(VideoService(db), video_id)
    return [TagRef(**item) for item in TagService(db).get_tags_by_video_id(video_id)]


@router.post("/{video_id}/tags", response_model=VideoTagResponse)
def add_tag(
    video_id: int,
    request: VideoTagRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> VideoTagResponse:
    """
    Attach a tag to a video, creating the tag when it does not exist.

    Attaching a tag the video already has is a no-op (`created` is false).
    """
    videos = VideoService(db)
    _get_video_or_404(videos, video_id)

    tags = TagService(db, default_color=settings.default_tag_color)
    tag = tags.find_or_create_tag(request.tag_name, request.tag_color)
    created = videos.add_tag_to_video(video_id, tag.id)

    return VideoTagResponse(tag_id=tag.id, created=created)


@router.delete("/{video_id}/tags/{tag_id}", response_model=MessageResponse)
def remove_tag(
    video_id: int,
    tag_id: int,
    db: Session = Depends(get_db),
) -> MessageResponse:
    """
    Detach a tag from a video.
    """
    service = VideoService(db)
    if not service.remove_tag_from_video(video_id, tag_id):
        raise HTTPException(status_code=404, detail="Tag relationship not found")

    return MessageResponse(message="Tag removed")


@router.get("/{video_id}/thumbnail-options", response_model=ThumbnailOptionsResponse)
def get_thumbnail_options(
    video_id: int,
    db: Session = Depends(get_db),
    generator: ThumbnailGenerator = Depends(get_thumbnail_generator),
    settings: Settings = Depends(get_settings),
) -> ThumbnailOptionsResponse:
    """
    Generate thumbnail candidates spread over the video.

    Returns an empty list when ffmpeg is unavailable.
    """
    video = _get_video_or_404(VideoService(db), video_id)

    candidates = generator.generate_selection_thumbnails(
        video.file_path,
        video.filename,
        settings.selection_thumbnail_count,
    )

    return ThumbnailOptionsResponse(
        thumbnails=[ThumbnailCandidate(**c) for c in candidates],
        current_thumbnail=os.path.basename(video.thumbnail_path) if video.thumbnail_path else None,
    )


@router.post("/{video_id}/set-thumbnail", response_model=SetThumbnailResponse)
def set_thumbnail(
    video_id: int,
    request: SetThumbnailRequest,
    db: Session = Depends(get_db),
    generator: ThumbnailGenerator = Depends(get_thumbnail_generator),
) -> SetThumbnailResponse:
    """
    Make one of the thumbnail candidates the video's thumbnail.

    All remaining candidates of the video are deleted.
    """
    service = VideoService(db)
    video = _get_video_or_404(service, video_id)

    thumbnail_path, removed = generator.commit_selected_thumbnail(
        video.filename, request.thumbnail_filename
    )
    service.update_video(video_id, VideoUpdate(thumbnail_path=thumbnail_path))

    return SetThumbnailResponse(
        thumbnail_filename=os.path.basename(thumbnail_path),
        thumbnail_url=artifact_url(thumbnail_path),
        removed_candidates=removed,
    )
