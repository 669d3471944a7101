"""
Services Package

Business logic layer for the API.
"""
from videolib.services.video_service import VideoService, video_to_dict
from videolib.services.tag_service import TagService
from videolib.services.search_service import SearchService
from videolib.services.resolution import resolution_class
from videolib.services.media_probe import (
    MediaProbe,
    FfmpegProbe,
    UnavailableProbe,
    VideoMetadata,
    detect_media_probe,
    format_timemark,
)
from videolib.services.thumbnail_service import ThumbnailGenerator, preview_window
from videolib.services.scan_service import VideoFileScanner, ScannedFile
from videolib.services.ingest_service import IngestService, IngestResult, ScanSummary

__all__ = [
    "VideoService",
    "video_to_dict",
    "TagService",
    "SearchService",
    "resolution_class",
    "MediaProbe",
    "FfmpegProbe",
    "UnavailableProbe",
    "VideoMetadata",
    "detect_media_probe",
    "format_timemark",
    "ThumbnailGenerator",
    "preview_window",
    "VideoFileScanner",
    "ScannedFile",
    "IngestService",
    "IngestResult",
    "ScanSummary",
]
