"""
Video File Scanner

Walks directories for supported video files and derives display titles
from filenames.
"""
import logging
import os
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)


@dataclass
class ScannedFile:
    """Video file found on disk"""
    filename: str
    file_path: str
    file_size: int
    modified_at: datetime


class VideoFileScanner:
    """
    Recursive directory scanner.

    Skips macOS resource forks and OS metadata files as well as anything
    without a supported video extension.
    """

    SUPPORTED_EXTENSIONS = {'.mp4', '.mkv', '.avi', '.mov', '.wmv', '.flv', '.webm'}

    # Patterns to exclude (OS metadata files)
    EXCLUDE_PATTERNS = [
        re.compile(r'^\._'),           # macOS resource fork
        re.compile(r'^\.DS_Store$'),   # macOS folder metadata
        re.compile(r'^Thumbs\.db$'),   # Windows thumbnail cache
    ]

    SIZE_UNITS = ['Bytes', 'KB', 'MB', 'GB', 'TB']

    def __init__(self, supported_extensions: Optional[set] = None):
        if supported_extensions:
            self.SUPPORTED_EXTENSIONS = supported_extensions

    def is_video_file(self, file_path: str) -> bool:
        """Supported extension and not an OS metadata file"""
        filename = Path(file_path).name
        for pattern in self.EXCLUDE_PATTERNS:
            if pattern.match(filename):
                return False
        return Path(file_path).suffix.lower() in self.SUPPORTED_EXTENSIONS

    def scan_directory(self, directory: str) -> List[ScannedFile]:
        """Recursively collect video files, sorted by path"""
        files = []

        for root, dirs, filenames in os.walk(directory):
            dirs.sort()
            for filename in sorted(filenames):
                if not self.is_video_file(filename):
                    continue
                file_path = os.path.abspath(os.path.join(root, filename))
                try:
                    stat = os.stat(file_path)
                except OSError as e:
                    logger.warning(f"Could not stat {file_path}: {e}")
                    continue
                files.append(ScannedFile(
                    filename=filename,
                    file_path=file_path,
                    file_size=stat.st_size,
                    modified_at=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
                ))

        logger.info(f"Found {len(files)} video files in {directory}")
        return files

    @staticmethod
    def extract_title(filename: str) -> str:
        """
        Human-readable title from a filename.

        Example: "my_holiday-2023.final.mp4" -> "my holiday 2023 final"
        """
        stem = Path(filename).stem
        title = re.sub(r'[._-]', ' ', stem)
        return re.sub(r'\s+', ' ', title).strip()

    @classmethod
    def format_file_size(cls, size: int) -> str:
        """Size in the largest whole unit, two decimals at most"""
        if not size:
            return '0 Bytes'
        value = float(size)
        unit = 0
        while value >= 1024 and unit < len(cls.SIZE_UNITS) - 1:
            value /= 1024
            unit += 1
        return f"{round(value, 2):g} {cls.SIZE_UNITS[unit]}"
