"""
Ingest Service

Brings video files into the catalog: stores uploads, probes metadata,
produces thumbnails/previews and attaches tags. Also drives directory
scans.
"""
import logging
import os
import shutil
from dataclasses import dataclass, field
from typing import BinaryIO, List, Optional, Sequence, Tuple

from sqlalchemy.orm import Session

from videolib.exceptions import BadInputError, NotFoundError
from videolib.models.tag import DEFAULT_TAG_COLOR
from videolib.schemas.media import UploadTag
from videolib.schemas.video import VideoCreate, VideoUpdate
from videolib.services.scan_service import VideoFileScanner
from videolib.services.tag_service import TagService
from videolib.services.thumbnail_service import ThumbnailGenerator
from videolib.services.video_service import VideoService

logger = logging.getLogger(__name__)

PENDING_DIR = ".pending"


@dataclass
class IngestResult:
    """Outcome of ingesting one file"""
    video_id: int
    is_existing: bool = False
    tags_added: int = 0


@dataclass
class ScanSummary:
    """Directory scan result"""
    total_found: int = 0
    processed: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)


class IngestService:
    """
    Upload and scan workflows on top of the catalog and thumbnail pipeline.

    Args:
        db: Database session
        generator: Thumbnail pipeline (carries the media probe)
        upload_dir: Where uploaded files are stored
        scanner: Directory scanner (default: all supported extensions)
        default_tag_color: Color for tags created without one
    """

    def __init__(
        self,
        db: Session,
        generator: ThumbnailGenerator,
        upload_dir: str,
        scanner: Optional[VideoFileScanner] = None,
        default_tag_color: str = DEFAULT_TAG_COLOR,
    ):
        self.db = db
        self.generator = generator
        self.upload_dir = upload_dir
        self.scanner = scanner or VideoFileScanner()
        self.videos = VideoService(db)
        self.tags = TagService(db, default_color=default_tag_color)

    # ----- uploads -----

    def save_upload(
        self, stream: BinaryIO, original_name: str, directory: Optional[str] = None
    ) -> str:
        """
        Store an uploaded file and return its absolute path.

        A name already taken gets a numeric suffix: clip.mp4, clip_1.mp4, ...

        Raises:
            BadInputError: missing name or unsupported extension
        """
        name = os.path.basename(original_name or "")
        if not name:
            raise BadInputError("No file uploaded")
        if not self.scanner.is_video_file(name):
            raise BadInputError(f"Unsupported video format: {os.path.splitext(name)[1] or name}")

        directory = directory or self.upload_dir
        os.makedirs(directory, exist_ok=True)

        stem, ext = os.path.splitext(name)
        candidate = name
        counter = 1
        while os.path.exists(os.path.join(directory, candidate)):
            candidate = f"{stem}_{counter}{ext}"
            counter += 1

        file_path = os.path.abspath(os.path.join(directory, candidate))
        with open(file_path, "wb") as f:
            shutil.copyfileobj(stream, f)

        logger.info(f"Stored upload {name} as {file_path}")
        return file_path

    def preview_upload(
        self, stream: BinaryIO, original_name: str, count: int = 6
    ) -> Tuple[str, List[dict]]:
        """
        Thumbnail candidates for a file that is not cataloged yet.

        The file is kept in a pending area only while candidates are
        extracted.

        Returns:
            (stored filename, candidates); candidates may be empty
        """
        pending_dir = os.path.join(self.upload_dir, PENDING_DIR)
        pending_path = self.save_upload(stream, original_name, directory=pending_dir)
        filename = os.path.basename(pending_path)
        try:
            candidates = self.generator.generate_selection_thumbnails(pending_path, filename, count)
        finally:
            try:
                os.remove(pending_path)
            except FileNotFoundError:
                pass

        return filename, candidates

    # ----- catalog -----

    def ingest_file(
        self,
        file_path: str,
        tags: Sequence[UploadTag] = (),
        selected_thumbnail: Optional[str] = None,
        file_size: Optional[int] = None,
    ) -> IngestResult:
        """
        Catalog a file that is already on disk.

        An already cataloged path only gets its artifacts refreshed and
        the tags attached.
        """
        file_path = os.path.abspath(file_path)
        filename = os.path.basename(file_path)
        metadata = self.generator.probe.probe(file_path)

        thumbnail_path = None
        if selected_thumbnail:
            try:
                thumbnail_path, _ = self.generator.commit_selected_thumbnail(filename, selected_thumbnail)
            except (BadInputError, NotFoundError) as e:
                logger.warning(f"Selected thumbnail unusable for {filename} ({e}), generating default")
        if thumbnail_path is None:
            thumbnail_path = self.generator.generate_thumbnail(
                file_path, filename, duration=metadata.duration
            )

        preview_path = self.generator.generate_preview(
            file_path, filename, duration=metadata.duration
        )

        existing = self.videos.get_video_by_path(file_path)
        if existing:
            video_id = existing.id
            changes = {"thumbnail_path": thumbnail_path}
            if preview_path:
                changes["preview_path"] = preview_path
            self.videos.update_video(video_id, VideoUpdate(**changes))
            logger.info(f"File already cataloged, refreshed artifacts: {filename}")
        else:
            if file_size is None:
                file_size = os.path.getsize(file_path)
            video_id = self.videos.add_video(VideoCreate(
                filename=filename,
                title=self.scanner.extract_title(filename),
                file_path=file_path,
                file_size=file_size,
                duration=metadata.duration,
                width=metadata.width,
                height=metadata.height,
                thumbnail_path=thumbnail_path,
                preview_path=preview_path,
            ))

        tags_added = 0
        for tag_data in tags:
            if not tag_data.name.strip():
                continue
            tag = self.tags.find_or_create_tag(tag_data.name, tag_data.color)
            if self.videos.add_tag_to_video(video_id, tag.id):
                tags_added += 1

        self.generator.cleanup_selection_thumbnails(filename)

        return IngestResult(
            video_id=video_id,
            is_existing=existing is not None,
            tags_added=tags_added,
        )

    def scan_and_ingest(self, directory: str) -> ScanSummary:
        """
        Catalog every new video file under `directory`.

        A failing file is logged and recorded; the scan moves on.

        Raises:
            BadInputError: directory is blank or does not exist
        """
        if not directory or not directory.strip():
            raise BadInputError("Directory path is required")
        if not os.path.isdir(directory):
            raise BadInputError(f"Directory not found: {directory}")

        files = self.scanner.scan_directory(directory)
        summary = ScanSummary(total_found=len(files))

        for scanned in files:
            if self.videos.get_video_by_path(scanned.file_path):
                logger.debug(f"Skipping cataloged file: {scanned.file_path}")
                summary.skipped += 1
                continue
            try:
                result = self.ingest_file(scanned.file_path, file_size=scanned.file_size)
                summary.processed += 1
                logger.info(f"Processed {scanned.filename} (ID: {result.video_id})")
            except Exception as e:
                self.db.rollback()
                logger.error(f"Error processing {scanned.file_path}: {e}")
                summary.errors.append(f"{scanned.file_path}: {str(e)}")

        logger.info(
            f"Scan of {directory}: {summary.total_found} found, "
            f"{summary.processed} processed, {summary.skipped} skipped, "
            f"{len(summary.errors)} errors"
        )
        return summary
