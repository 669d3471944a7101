"""
Tag Model

Hierarchical labels attached to videos
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from videolib.database import Base
from videolib.models.types import utc_now

DEFAULT_TAG_COLOR = "#007bff"
DEFAULT_CATEGORY = "custom"


class Tag(Base):
    """
    Tag

    Level 1 tags are roots; level 2 tags hang under a parent. Deleting a
    parent clears parent_id on its children instead of deleting them.
    """
    __tablename__ = "tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    color = Column(String(20), default=DEFAULT_TAG_COLOR)
    parent_id = Column(
        Integer,
        ForeignKey("tags.id", ondelete="SET NULL"),
        nullable=True
    )
    category = Column(String(50), default=DEFAULT_CATEGORY)  # region, genre, meta, custom
    level = Column(Integer, default=1)
    created_at = Column(DateTime(timezone=True), default=utc_now, nullable=False)

    # Relationships
    video_links = relationship(
        "VideoTag",
        back_populates="tag",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Tag(name={self.name}, category={self.category}, level={self.level})>"
