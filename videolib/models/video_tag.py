"""
VideoTag Model

Many-to-many association between videos and tags
"""
from sqlalchemy import Column, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from videolib.database import Base
from videolib.models.types import utc_now


class VideoTag(Base):
    """One row per (video, tag) pair."""
    __tablename__ = "video_tags"
    __table_args__ = (
        UniqueConstraint("video_id", "tag_id", name="uq_video_tags_video_tag"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    video_id = Column(
        Integer,
        ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    tag_id = Column(
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # Relationships
    video = relationship("Video", back_populates="tag_links")
    tag = relationship("Tag", back_populates="video_links", lazy="joined")

    def __repr__(self):
        return f"<VideoTag(video_id={self.video_id}, tag_id={self.tag_id})>"
