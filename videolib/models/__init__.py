"""
SQLAlchemy ORM Models

Export all models for easy importing.
"""
from videolib.models.types import TimestampMixin, utc_now
from videolib.models.video import Video
from videolib.models.tag import Tag
from videolib.models.video_tag import VideoTag
from videolib.models.activity_log import ActivityLog

__all__ = [
    "TimestampMixin",
    "utc_now",
    "Video",
    "Tag",
    "VideoTag",
    "ActivityLog",
]
