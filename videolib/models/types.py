"""
Common Column Helpers and Mixins

Provides UTC timestamp defaults shared by all tables.
"""
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime


def utc_now() -> datetime:
    """Current time in UTC (used for every stored timestamp)."""
    return datetime.now(timezone.utc)


class TimestampMixin:
    """
    Mixin for common timestamp columns.

    Provides:
    - created_at: Auto-set on insert
    - updated_at: Auto-updated on update
    """
    created_at = Column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True
    )
    updated_at = Column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False
    )
