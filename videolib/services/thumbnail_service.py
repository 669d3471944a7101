"""
Thumbnail Service

Derives thumbnails, selection candidates and preview clips from video
files. Every artifact name is derived from the video's filename, so an
existing file doubles as a cache entry.

Media tool failures never escape this module: thumbnails degrade to an
SVG placeholder, candidates to an empty list and previews to None.
"""
import logging
import os
import re
import shutil
from html import escape
from typing import Iterable, List, Optional, Tuple

from videolib.exceptions import BadInputError, MediaToolError, NotFoundError
from videolib.services.media_probe import MediaProbe, format_timemark

logger = logging.getLogger(__name__)

MIN_ARTIFACT_BYTES = 1024

THUMBNAIL_SIZE = (320, 240)
SELECTION_SIZE = (240, 180)
PREVIEW_SIZE = (480, 360)

THUMBNAIL_SEEK_SECONDS = 10
FALLBACK_TIMESTAMPS = [1, 3, 5]

SELECTION_PATTERN = re.compile(r"^selection_(\d+)_thumb_(.+)\.jpg$")
DEDUP_SUFFIX = re.compile(r"_\d+$")

PLACEHOLDER_SVG = """<svg width="{width}" height="{height}" xmlns="http://www.w3.org/2000/svg">
  <rect width="{width}" height="{height}" fill="#2a2a2a"/>
  <text x="{cx}" y="130" text-anchor="middle" fill="#aaa" font-family="Arial" font-size="12">Video File</text>
  <text x="{cx}" y="150" text-anchor="middle" fill="#666" font-family="Arial" font-size="10">{name}</text>
  <text x="{cx}" y="180" text-anchor="middle" fill="#444" font-family="Arial" font-size="8">FFmpeg not available</text>
</svg>
"""


def file_stem(filename: str) -> str:
    """Filename without directory and extension"""
    return os.path.splitext(os.path.basename(filename))[0]


def normalize_stem(stem: str) -> str:
    """Strip an upload de-duplication suffix (clip_2 -> clip)"""
    return DEDUP_SUFFIX.sub("", stem)


def preview_window(duration: int) -> Tuple[float, float]:
    """
    Start offset and length of the preview clip.

    Short videos start near the beginning; long ones skip the intro and
    stop well before the credits.
    """
    if duration <= 30:
        start = min(2, duration * 0.1)
        length = min(10, duration - start - 1)
    elif duration <= 60:
        start = 15
        length = min(15, duration - start - 5)
    else:
        start = max(30, duration * 0.2)
        length = min(20, max(10, duration * 0.3))
        start = min(start, duration - length - 5)

    start = max(0, start)
    if length <= 0 or start + length > duration:
        length = max(1, duration - start - 1)
    return float(start), float(length)


class ThumbnailGenerator:
    """
    Thumbnail/preview pipeline over one artifact directory.

    Args:
        thumbnail_dir: Directory that holds every generated artifact
        probe: Media probe chosen at startup
        url_prefix: URL the directory is served under
    """

    def __init__(self, thumbnail_dir: str, probe: MediaProbe, url_prefix: str = "/thumbnails"):
        self.thumbnail_dir = thumbnail_dir
        self.probe = probe
        self.url_prefix = url_prefix.rstrip("/")
        os.makedirs(self.thumbnail_dir, exist_ok=True)

    @property
    def is_available(self) -> bool:
        return self.probe.available

    # ----- naming -----

    def thumbnail_filename(self, filename: str) -> str:
        return f"thumb_{file_stem(filename)}.jpg"

    def placeholder_filename(self, filename: str) -> str:
        return f"thumb_{file_stem(filename)}.svg"

    def preview_filename(self, filename: str) -> str:
        return f"preview_{file_stem(filename)}.mp4"

    def selection_filename(self, index: int, filename: str) -> str:
        return f"selection_{index}_{self.thumbnail_filename(filename)}"

    def path_for(self, artifact_filename: str) -> str:
        return os.path.join(self.thumbnail_dir, artifact_filename)

    def url_for(self, artifact_filename: str) -> str:
        return f"{self.url_prefix}/{artifact_filename}"

    # ----- single thumbnail -----

    def generate_thumbnail(
        self, video_path: str, filename: str, duration: Optional[int] = None
    ) -> str:
        """
        Produce the video's thumbnail and return its path.

        An existing thumbnail is reused. Media failures fall back to an SVG
        placeholder; only a failure to write that placeholder raises.
        """
        thumbnail_path = self.path_for(self.thumbnail_filename(filename))
        if os.path.exists(thumbnail_path):
            logger.debug(f"Using existing thumbnail: {thumbnail_path}")
            return thumbnail_path

        if not self.probe.available:
            return self.create_placeholder(filename)

        if duration is None:
            duration = self.probe.get_duration(video_path)
        seek = THUMBNAIL_SEEK_SECONDS
        if 0 < duration <= THUMBNAIL_SEEK_SECONDS:
            seek = duration // 2

        width, height = THUMBNAIL_SIZE
        try:
            self.probe.extract_frame(video_path, thumbnail_path, seek, width, height)
        except MediaToolError as e:
            logger.warning(f"Thumbnail extraction failed for {filename}: {e}")
            self._remove(thumbnail_path)
            return self.create_placeholder(filename)

        logger.info(f"Thumbnail generated: {thumbnail_path}")
        return thumbnail_path

    def create_placeholder(self, filename: str) -> str:
        """Write the SVG placeholder for `filename` and return its path"""
        width, height = THUMBNAIL_SIZE
        svg_path = self.path_for(self.placeholder_filename(filename))
        with open(svg_path, "w", encoding="utf-8") as f:
            f.write(PLACEHOLDER_SVG.format(
                width=width,
                height=height,
                cx=width // 2,
                name=escape(file_stem(filename)),
            ))
        logger.info(f"Placeholder thumbnail created: {svg_path}")
        return svg_path

    # ----- selection candidates -----

    def _candidate(self, index: int, timestamp: int, filename: str) -> dict:
        candidate_filename = self.selection_filename(index, filename)
        return {
            "index": index,
            "timestamp": timestamp,
            "timemark": format_timemark(timestamp),
            "path": self.path_for(candidate_filename),
            "filename": candidate_filename,
            "url": self.url_for(candidate_filename),
        }

    def _extract_candidate(self, video_path: str, candidate: dict) -> None:
        """Extract one candidate frame unless it already exists"""
        if os.path.exists(candidate["path"]):
            logger.debug(f"Reusing selection candidate {candidate['filename']}")
            return
        width, height = SELECTION_SIZE
        self.probe.extract_frame(
            video_path, candidate["path"], candidate["timestamp"], width, height
        )
        logger.debug(f"Selection candidate {candidate['filename']} at {candidate['timemark']}")

    def generate_selection_thumbnails(
        self, video_path: str, filename: str, count: int = 6
    ) -> List[dict]:
        """
        Generate up to `count` evenly spaced thumbnail candidates.

        Returns an empty list when ffmpeg is unavailable or the video file
        is missing. A candidate that fails is logged and skipped.
        """
        if not self.probe.available:
            logger.warning(f"ffmpeg not available; no thumbnail options for {filename}")
            return []
        if not os.path.isfile(video_path):
            logger.warning(f"Video file not found: {video_path}")
            return []

        duration = self.probe.get_duration(video_path)
        if duration <= 0:
            return self._fallback_candidates(video_path, filename, min(count, len(FALLBACK_TIMESTAMPS)))

        interval = duration // (count + 1)
        if interval <= 0:
            interval = 1
            count = min(count, duration)

        candidates = []
        for index in range(1, count + 1):
            candidate = self._candidate(index, interval * index, filename)
            try:
                self._extract_candidate(video_path, candidate)
            except MediaToolError as e:
                logger.warning(f"Selection candidate {index} failed for {filename}: {e}")
                continue
            candidates.append(candidate)

        logger.info(f"Generated {len(candidates)}/{count} thumbnail options for {filename}")
        return candidates

    def _fallback_candidates(self, video_path: str, filename: str, count: int) -> List[dict]:
        """Fixed timestamps for videos of unknown duration; gives up if the first one fails"""
        candidates = []
        for index, timestamp in enumerate(FALLBACK_TIMESTAMPS[:count], start=1):
            candidate = self._candidate(index, timestamp, filename)
            try:
                self._extract_candidate(video_path, candidate)
            except MediaToolError as e:
                logger.warning(f"Fallback candidate at {candidate['timemark']} failed for {filename}: {e}")
                if index == 1:
                    break
                continue
            candidates.append(candidate)

        logger.info(f"Generated {len(candidates)} fallback thumbnail options for {filename}")
        return candidates

    def commit_selected_thumbnail(self, filename: str, selected_filename: str) -> Tuple[str, int]:
        """
        Make a selection candidate the video's thumbnail.

        The candidate is copied to the thumb_ path, then every selection
        candidate of the video is removed, including the chosen one.

        Returns:
            (committed thumbnail path, number of candidates removed)
        """
        if os.path.basename(selected_filename) != selected_filename or not SELECTION_PATTERN.match(selected_filename):
            raise BadInputError(f"Not a selection thumbnail: {selected_filename}")

        selected_path = self.path_for(selected_filename)
        if not os.path.isfile(selected_path):
            raise NotFoundError("thumbnail", selected_filename)

        thumbnail_path = self.path_for(self.thumbnail_filename(filename))
        shutil.copyfile(selected_path, thumbnail_path)
        self._remove(self.path_for(self.placeholder_filename(filename)))

        removed = self.cleanup_selection_thumbnails(filename)
        # Candidate generated under a different upload name
        if os.path.exists(selected_path):
            self._remove(selected_path)
            removed += 1

        logger.info(f"Committed thumbnail {thumbnail_path} ({removed} candidates removed)")
        return thumbnail_path, removed

    def cleanup_selection_thumbnails(self, filename: str) -> int:
        """Remove the selection candidates of `filename`. Returns the count."""
        if not os.path.isdir(self.thumbnail_dir):
            return 0

        target = normalize_stem(file_stem(filename))
        removed = 0
        for entry in os.listdir(self.thumbnail_dir):
            match = SELECTION_PATTERN.match(entry)
            if not match or normalize_stem(match.group(2)) != target:
                continue
            if self._remove(self.path_for(entry)):
                removed += 1

        if removed:
            logger.debug(f"Removed {removed} selection candidates for {filename}")
        return removed

    # ----- preview clip -----

    def generate_preview(
        self, video_path: str, filename: str, duration: Optional[int] = None
    ) -> Optional[str]:
        """
        Produce a short preview clip and return its path.

        Returns None when ffmpeg is unavailable, the duration is unknown,
        extraction fails or the result is implausibly small.
        """
        if not self.probe.available:
            return None

        if duration is None:
            duration = self.probe.get_duration(video_path)
        if duration <= 0:
            logger.warning(f"Cannot generate preview for {filename}: unknown duration")
            return None

        preview_path = self.path_for(self.preview_filename(filename))
        if os.path.exists(preview_path):
            if os.path.getsize(preview_path) >= MIN_ARTIFACT_BYTES:
                logger.debug(f"Using existing preview: {preview_path}")
                return preview_path
            logger.warning(f"Removing corrupt preview: {preview_path}")
            self._remove(preview_path)

        start, length = preview_window(duration)
        width, height = PREVIEW_SIZE
        try:
            self.probe.extract_clip(video_path, preview_path, start, length, width, height)
        except MediaToolError as e:
            logger.warning(f"Preview generation failed for {filename}: {e}")
            self._remove(preview_path)
            return None

        if not os.path.exists(preview_path):
            return None
        if os.path.getsize(preview_path) < MIN_ARTIFACT_BYTES:
            logger.warning(f"Generated preview too small, discarding: {preview_path}")
            self._remove(preview_path)
            return None

        logger.info(f"Preview generated: {preview_path} (start={start}s, length={length}s)")
        return preview_path

    # ----- housekeeping -----

    def _remove(self, path: str) -> bool:
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        return True

    def artifact_paths(self, filename: str) -> List[str]:
        """Thumbnail, placeholder and preview paths derived from `filename`"""
        return [
            self.path_for(self.thumbnail_filename(filename)),
            self.path_for(self.placeholder_filename(filename)),
            self.path_for(self.preview_filename(filename)),
        ]

    def delete_artifacts(self, filename: str, keep: Iterable[str] = ()) -> int:
        """
        Remove thumbnail, placeholder, preview and candidates of a video.

        Paths in `keep` are left alone; videos with the same filename in
        different directories share artifact names.
        """
        keep = set(keep)
        removed = 0
        for path in self.artifact_paths(filename):
            if path in keep:
                continue
            if self._remove(path):
                removed += 1
        removed += self.cleanup_selection_thumbnails(filename)
        logger.info(f"Deleted {removed} artifacts for {filename}")
        return removed

    def clear_all(self) -> int:
        """Remove every file in the thumbnail directory"""
        if not os.path.isdir(self.thumbnail_dir):
            return 0
        removed = 0
        for entry in os.listdir(self.thumbnail_dir):
            path = self.path_for(entry)
            if os.path.isfile(path) and self._remove(path):
                removed += 1
        logger.info(f"Cleared {removed} files from {self.thumbnail_dir}")
        return removed
