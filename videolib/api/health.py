"""
Health & Monitoring API Router

Endpoints for database health checks and statistics.
"""
import os
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy import text, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from videolib.api.dependencies import get_media_probe
from videolib.config import settings
from videolib.database import get_db
from videolib.models import Video, Tag, VideoTag, ActivityLog
from videolib.services.media_probe import MediaProbe
from videolib.services.scan_service import VideoFileScanner

router = APIRouter(prefix="/api/health", tags=["health"])


class DatabaseStats(BaseModel):
    """Database statistics response"""
    status: str
    connected: bool
    response_time_ms: float
    database_name: str
    database_size: Optional[str] = None
    tables: dict


class MediaToolStatus(BaseModel):
    """ffmpeg availability"""
    available: bool
    name: str


class FullHealthResponse(BaseModel):
    """Complete health check response"""
    status: str
    timestamp: datetime
    database: DatabaseStats
    media_tools: MediaToolStatus
    api_version: str


def _database_size(db: Session) -> Optional[str]:
    """Size of a file-backed SQLite database"""
    url = db.get_bind().url
    if url.get_backend_name() != "sqlite" or not url.database or url.database == ":memory:":
        return None
    if not os.path.exists(url.database):
        return None
    return VideoFileScanner.format_file_size(os.path.getsize(url.database))


@router.get("/db", response_model=FullHealthResponse)
def check_database_health(
    db: Session = Depends(get_db),
    probe: MediaProbe = Depends(get_media_probe),
) -> FullHealthResponse:
    """
    Database health check with detailed statistics.

    Returns:
    - Connection status
    - Response time
    - Table row counts
    - Database file size (SQLite)
    - Media tool availability
    """
    start_time = time.time()
    connected = False
    db_size = None
    tables_stats = {}

    try:
        # Test connection with simple query
        db.execute(text("SELECT 1"))
        connected = True

        tables_stats = {
            "videos": db.execute(select(func.count(Video.id))).scalar() or 0,
            "tags": db.execute(select(func.count(Tag.id))).scalar() or 0,
            "video_tags": db.execute(select(func.count(VideoTag.id))).scalar() or 0,
            "activity_logs": db.execute(select(func.count(ActivityLog.id))).scalar() or 0,
        }
        db_size = _database_size(db)

    except SQLAlchemyError as e:
        connected = False
        tables_stats = {"error": str(e)}

    response_time = (time.time() - start_time) * 1000  # Convert to ms

    return FullHealthResponse(
        status="healthy" if connected else "unhealthy",
        timestamp=datetime.now(timezone.utc),
        database=DatabaseStats(
            status="connected" if connected else "disconnected",
            connected=connected,
            response_time_ms=round(response_time, 2),
            database_name=db.get_bind().url.database or "",
            database_size=db_size,
            tables=tables_stats,
        ),
        media_tools=MediaToolStatus(available=probe.available, name=probe.name),
        api_version=settings.app_version,
    )


@router.get("/db/tables")
def get_table_details(db: Session = Depends(get_db)) -> dict:
    """
    Get detailed table statistics.

    Returns row counts and library totals.
    """
    stats = {
        "videos": {
            "total": db.execute(select(func.count(Video.id))).scalar() or 0,
            "with_preview": db.execute(
                select(func.count(Video.id)).where(Video.preview_path.is_not(None))
            ).scalar() or 0,
            "total_size_gb": 0.0,
            "total_duration_hours": 0.0,
        },
        "tags": {
            "total": db.execute(select(func.count(Tag.id))).scalar() or 0,
            "by_category": {},
        },
        "video_tags": {
            "total": db.execute(select(func.count(VideoTag.id))).scalar() or 0,
        },
    }

    # Tag category breakdown
    categories = db.execute(
        select(Tag.category, func.count(Tag.id)).group_by(Tag.category)
    ).all()
    stats["tags"]["by_category"] = {category: count for category, count in categories}

    # Video aggregates
    video_agg = db.execute(
        select(
            func.coalesce(func.sum(Video.file_size), 0),
            func.coalesce(func.sum(Video.duration), 0),
        )
    ).one()

    total_bytes, total_seconds = video_agg
    stats["videos"]["total_size_gb"] = round((total_bytes or 0) / (1024**3), 2)
    stats["videos"]["total_duration_hours"] = round((total_seconds or 0) / 3600, 2)

    return stats
