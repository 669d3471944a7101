"""
Ingest API Router

Upload and directory scan endpoints.
"""
import json
import os
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from videolib.api.dependencies import get_thumbnail_generator
from videolib.config import Settings, get_settings
from videolib.database import get_db
from videolib.exceptions import BadInputError
from videolib.schemas.media import (
    ScanRequest,
    ScanResponse,
    ThumbnailCandidate,
    UploadPreviewResponse,
    UploadResponse,
    UploadTag,
)
from videolib.services.ingest_service import IngestService
from videolib.services.thumbnail_service import ThumbnailGenerator

router = APIRouter(prefix="/api", tags=["ingest"])


def _parse_upload_tags(raw: Optional[str]) -> List[UploadTag]:
    """JSON list of {"name", "color"} objects from the upload form"""
    if not raw:
        return []
    try:
        items = json.loads(raw)
        if not isinstance(items, list):
            raise BadInputError("Invalid tags: expected a JSON array")
        return [UploadTag(**item) for item in items]
    except json.JSONDecodeError as e:
        raise BadInputError(f"Invalid tags: {e.msg}") from e
    except (TypeError, ValidationError) as e:
        raise BadInputError(f"Invalid tags: {e}") from e


def _ingest_service(db: Session, generator: ThumbnailGenerator, settings: Settings) -> IngestService:
    return IngestService(
        db, generator, upload_dir=settings.upload_dir, default_tag_color=settings.default_tag_color
    )


@router.post("/upload-preview", response_model=UploadPreviewResponse)
def upload_preview(
    video: UploadFile = File(..., description="Video file to preview"),
    db: Session = Depends(get_db),
    generator: ThumbnailGenerator = Depends(get_thumbnail_generator),
    settings: Settings = Depends(get_settings),
) -> UploadPreviewResponse:
    """
    Generate thumbnail candidates for a file before it is uploaded for real.

    The file is not kept. Candidates stay in the thumbnail directory until
    the upload commits one of them.
    """
    service = _ingest_service(db, generator, settings)
    filename, candidates = service.preview_upload(
        video.file, video.filename, count=settings.selection_thumbnail_count
    )

    if candidates:
        message = f"Generated {len(candidates)} thumbnails successfully"
    else:
        message = "No thumbnail options available"

    return UploadPreviewResponse(
        thumbnails=[ThumbnailCandidate(**c) for c in candidates],
        filename=filename,
        message=message,
    )


@router.post("/upload", response_model=UploadResponse)
def upload_video(
    video: UploadFile = File(..., description="Video file"),
    tags: Optional[str] = Form(None, description='JSON array of {"name", "color"}'),
    selected_thumbnail: Optional[str] = Form(
        None, alias="selectedThumbnail", description="Chosen selection thumbnail filename"
    ),
    db: Session = Depends(get_db),
    generator: ThumbnailGenerator = Depends(get_thumbnail_generator),
    settings: Settings = Depends(get_settings),
) -> UploadResponse:
    """
    Upload a video and add it to the catalog.

    Tags are created as needed. A file whose stored path is already
    cataloged only gets its thumbnail, preview and tags refreshed.
    """
    upload_tags = _parse_upload_tags(tags)

    service = _ingest_service(db, generator, settings)
    file_path = service.save_upload(video.file, video.filename)
    result = service.ingest_file(
        file_path,
        tags=upload_tags,
        selected_thumbnail=selected_thumbnail,
        file_size=os.path.getsize(file_path),
    )

    if result.is_existing:
        message = f"File already exists, updated with {result.tags_added} tags"
    elif result.tags_added:
        message = f"File uploaded successfully with {result.tags_added} tags"
    else:
        message = "File uploaded successfully"

    return UploadResponse(
        video_id=result.video_id,
        tags_added=result.tags_added,
        is_existing=result.is_existing,
        message=message,
    )


@router.post("/scan", response_model=ScanResponse)
def scan_directory(
    request: ScanRequest,
    db: Session = Depends(get_db),
    generator: ThumbnailGenerator = Depends(get_thumbnail_generator),
    settings: Settings = Depends(get_settings),
) -> ScanResponse:
    """
    Catalog every new video file under a directory (recursive).

    Already cataloged files are skipped. A file that fails is reported in
    `errors` without stopping the scan.
    """
    service = _ingest_service(db, generator, settings)
    summary = service.scan_and_ingest(request.directory)

    return ScanResponse(
        total_found=summary.total_found,
        processed=summary.processed,
        skipped=summary.skipped,
        errors=summary.errors,
        message=f"Scanned {summary.total_found} files, processed {summary.processed} new videos",
    )
