"""
Dev API Router

Destructive reset endpoints for local development. Disabled unless
ENABLE_DEV_ENDPOINTS is set.
"""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from videolib.api.dependencies import get_thumbnail_generator, require_dev_endpoints
from videolib.database import get_db
from videolib.schemas.common import MessageResponse
from videolib.services.tag_service import TagService
from videolib.services.thumbnail_service import ThumbnailGenerator
from videolib.services.video_service import VideoService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/dev",
    tags=["dev"],
    dependencies=[Depends(require_dev_endpoints)],
)


@router.delete("/clear-database", response_model=MessageResponse)
def clear_database(db: Session = Depends(get_db)) -> MessageResponse:
    """
    Delete every video and every tag left unused.
    """
    videos_removed = VideoService(db).clear_all()
    tags_removed = TagService(db).cleanup_unused_tags()

    logger.warning(f"Database cleared: {videos_removed} videos, {tags_removed} tags")
    return MessageResponse(
        message=f"Database cleared ({videos_removed} videos, {tags_removed} tags removed)"
    )


@router.delete("/clear-thumbnails", response_model=MessageResponse)
def clear_thumbnails(
    generator: ThumbnailGenerator = Depends(get_thumbnail_generator),
) -> MessageResponse:
    """
    Delete every generated thumbnail, preview and candidate.
    """
    removed = generator.clear_all()
    return MessageResponse(message=f"Thumbnails cleared ({removed} files removed)")
