"""
ActivityLog Model

Viewing history table. Created with the schema, not written by the catalog.
"""
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Text

from videolib.database import Base
from videolib.models.types import utc_now


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    video_id = Column(
        Integer,
        ForeignKey("videos.id", ondelete="CASCADE"),
        nullable=False
    )
    action = Column(String(50), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utc_now)
    # "metadata" is reserved on declarative classes
    extra = Column("metadata", Text)

    def __repr__(self):
        return f"<ActivityLog(video_id={self.video_id}, action={self.action})>"
