"""
Video Service

Persistence for videos and their tag links.
"""
import logging
import os
from typing import Optional, List, Dict, Any, Set

from sqlalchemy import select, update, delete, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from videolib.exceptions import ConstraintViolationError, NotFoundError
from videolib.models import Video, Tag, VideoTag, utc_now
from videolib.schemas.video import VideoCreate, VideoUpdate
from videolib.services.resolution import resolution_class

logger = logging.getLogger(__name__)

THUMBNAIL_URL_PREFIX = "/thumbnails"


def video_query():
    """Base SELECT for videos with their tag links loaded."""
    return select(Video).options(selectinload(Video.tag_links))


def artifact_url(path: Optional[str]) -> Optional[str]:
    """Servable URL of a file in the thumbnail directory."""
    if not path:
        return None
    return f"{THUMBNAIL_URL_PREFIX}/{os.path.basename(path)}"


def video_to_dict(video: Video) -> Dict[str, Any]:
    """Flatten a Video row (and its tags) for VideoResponse."""
    return {
        "id": video.id,
        "filename": video.filename,
        "title": video.title,
        "file_path": video.file_path,
        "file_size": video.file_size,
        "duration": video.duration or 0,
        "width": video.width,
        "height": video.height,
        "resolution_class": resolution_class(video.height) if video.height else None,
        "thumbnail_path": video.thumbnail_path,
        "preview_path": video.preview_path,
        "thumbnail_url": artifact_url(video.thumbnail_path),
        "preview_url": f"/api/videos/{video.id}/preview" if video.preview_path else None,
        "tags": [
            {"id": tag.id, "name": tag.name, "color": tag.color}
            for tag in video.tags
        ],
        "created_at": video.created_at,
        "updated_at": video.updated_at,
    }


class VideoService:
    """
    Video CRUD and video/tag linking.

    Lookups return None when the video does not exist; link mutations
    raise NotFoundError for a missing video or tag.
    """

    def __init__(self, db: Session):
        self.db = db

    # ----- lookups -----

    def get_video(self, video_id: int) -> Optional[Video]:
        """Get the ORM row by ID"""
        return self.db.execute(
            video_query().where(Video.id == video_id)
        ).scalar_one_or_none()

    def get_video_by_id(self, video_id: int) -> Optional[Dict[str, Any]]:
        """Get a single video with its tags."""
        video = self.get_video(video_id)
        if not video:
            return None
        return video_to_dict(video)

    def get_video_by_path(self, file_path: str) -> Optional[Video]:
        """Get a video by its absolute file path"""
        return self.db.execute(
            select(Video).where(Video.file_path == file_path)
        ).scalar_one_or_none()

    def get_all_videos(self) -> List[Dict[str, Any]]:
        """All videos, newest first."""
        videos = self.db.execute(
            video_query().order_by(Video.created_at.desc(), Video.id.desc())
        ).scalars().all()
        return [video_to_dict(v) for v in videos]

    def count_videos(self) -> int:
        return self.db.execute(select(func.count(Video.id))).scalar() or 0

    def artifact_paths_in_use(self, paths: List[str]) -> Set[str]:
        """Those of `paths` that some video still uses as thumbnail or preview"""
        if not paths:
            return set()
        rows = self.db.execute(
            select(Video.thumbnail_path, Video.preview_path).where(
                or_(Video.thumbnail_path.in_(paths), Video.preview_path.in_(paths))
            )
        ).all()
        return {path for row in rows for path in row if path in paths}

    # ----- mutations -----

    def add_video(self, record: VideoCreate) -> int:
        """
        Insert a video and return its ID.

        Raises:
            ConstraintViolationError: file_path is already cataloged
        """
        video = Video(**record.model_dump(exclude_none=True))
        self.db.add(video)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConstraintViolationError(
                f"Video already cataloged: {record.file_path}",
                file_path=record.file_path,
            ) from e

        logger.info(f"Added video {video.id}: {video.filename}")
        return video.id

    def update_video(self, video_id: int, changes: VideoUpdate) -> bool:
        """
        Apply the explicitly set fields of `changes`.

        updated_at is refreshed even when no field is set.

        Returns:
            True if the video exists
        """
        values = changes.model_dump(exclude_unset=True)
        values["updated_at"] = utc_now()

        result = self.db.execute(
            update(Video).where(Video.id == video_id).values(**values)
        )
        self.db.commit()
        return result.rowcount > 0

    def delete_video(self, video_id: int) -> bool:
        """Delete a video; its tag links cascade."""
        result = self.db.execute(delete(Video).where(Video.id == video_id))
        self.db.commit()
        if result.rowcount:
            logger.info(f"Deleted video {video_id}")
        return result.rowcount > 0

    def clear_all(self) -> int:
        """Delete every video (dev reset). Returns the number removed."""
        result = self.db.execute(delete(Video))
        self.db.commit()
        return result.rowcount

    # ----- tag links -----

    def add_tag_to_video(self, video_id: int, tag_id: int) -> bool:
        """
        Link a tag to a video.

        Returns:
            True if a new link was created, False if it already existed
        """
        if self.db.get(Video, video_id) is None:
            raise NotFoundError("video", video_id)
        if self.db.get(Tag, tag_id) is None:
            raise NotFoundError("tag", tag_id)

        existing = self.db.execute(
            select(VideoTag.id)
            .where(VideoTag.video_id == video_id)
            .where(VideoTag.tag_id == tag_id)
        ).first()
        if existing:
            return False

        self.db.add(VideoTag(video_id=video_id, tag_id=tag_id))
        try:
            self.db.commit()
        except IntegrityError:
            # Same pair inserted since the check above
            self.db.rollback()
            return False
        return True

    def remove_tag_from_video(self, video_id: int, tag_id: int) -> bool:
        """
        Unlink a tag from a video.

        Returns:
            True if a link existed and was removed
        """
        result = self.db.execute(
            delete(VideoTag)
            .where(VideoTag.video_id == video_id)
            .where(VideoTag.tag_id == tag_id)
        )
        self.db.commit()
        return result.rowcount > 0
