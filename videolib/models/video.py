"""
Video Model

Represents one cataloged video file
"""
from sqlalchemy import Column, String, Integer, BigInteger
from sqlalchemy.orm import relationship

from videolib.database import Base
from videolib.models.types import TimestampMixin

# Used when the prober cannot determine the real values
DEFAULT_DURATION = 0
DEFAULT_WIDTH = 1920
DEFAULT_HEIGHT = 1080


class Video(Base, TimestampMixin):
    """
    Video File Record

    One row per distinct file path. Thumbnail and preview paths point at
    artifacts in the thumbnail directory and are rewritten whenever those
    artifacts are regenerated.
    """
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, autoincrement=True)
    filename = Column(String(500), nullable=False, index=True)
    title = Column(String(500), index=True)
    file_path = Column(String(1000), unique=True, nullable=False)
    file_size = Column(BigInteger)
    duration = Column(Integer, default=DEFAULT_DURATION)   # seconds, 0 = unknown
    width = Column(Integer, default=DEFAULT_WIDTH)
    height = Column(Integer, default=DEFAULT_HEIGHT)
    thumbnail_path = Column(String(1000))
    preview_path = Column(String(1000))

    # Relationships
    tag_links = relationship(
        "VideoTag",
        back_populates="video",
        order_by="VideoTag.id",
        passive_deletes=True,
    )

    @property
    def tags(self):
        """Tags in the order they were attached."""
        return [link.tag for link in self.tag_links]

    def __repr__(self):
        return f"<Video(id={self.id}, filename={self.filename})>"
