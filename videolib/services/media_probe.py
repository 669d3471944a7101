"""
Media Probe

Thin wrapper over ffprobe/ffmpeg. Availability is decided once at
startup by detect_media_probe() and the chosen probe is handed to the
thumbnail pipeline and ingest service explicitly.
"""
import json
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import List, Optional

from videolib.exceptions import MediaToolError, MediaToolUnavailableError
from videolib.models.video import DEFAULT_DURATION, DEFAULT_WIDTH, DEFAULT_HEIGHT

logger = logging.getLogger(__name__)


@dataclass
class VideoMetadata:
    """Probed media info; defaults stand in for anything unknown"""
    duration: int = DEFAULT_DURATION
    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT


def format_timemark(seconds) -> str:
    """Seconds as HH:MM:SS"""
    seconds = max(0, int(seconds))
    hours = seconds // 3600
    minutes = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class MediaProbe:
    """
    Interface for metadata probing and frame/clip extraction.

    probe() and get_duration() never raise. extract_frame() and
    extract_clip() raise MediaToolError on failure.
    """

    available = False
    name = "none"

    def probe(self, video_path: str) -> VideoMetadata:
        raise NotImplementedError

    def get_duration(self, video_path: str) -> int:
        return self.probe(video_path).duration

    def extract_frame(
        self, video_path: str, output_path: str, seconds: float, width: int, height: int
    ) -> None:
        raise NotImplementedError

    def extract_clip(
        self,
        video_path: str,
        output_path: str,
        start: float,
        length: float,
        width: int,
        height: int,
    ) -> None:
        raise NotImplementedError


class UnavailableProbe(MediaProbe):
    """Degraded mode: no ffmpeg on this host"""

    def probe(self, video_path: str) -> VideoMetadata:
        return VideoMetadata()

    def extract_frame(self, video_path, output_path, seconds, width, height) -> None:
        raise MediaToolUnavailableError("ffmpeg")

    def extract_clip(self, video_path, output_path, start, length, width, height) -> None:
        raise MediaToolUnavailableError("ffmpeg")


class FfmpegProbe(MediaProbe):
    """
    ffprobe/ffmpeg invoked as subprocesses.

    Args:
        ffmpeg: Path to the ffmpeg binary
        ffprobe: Path to the ffprobe binary
        timeout: Seconds before a single invocation is abandoned
    """

    available = True
    name = "ffmpeg"

    def __init__(self, ffmpeg: str, ffprobe: str, timeout: int = 120):
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe
        self.timeout = timeout

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        try:
            proc = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            raise MediaToolError(f"{os.path.basename(args[0])} timed out after {self.timeout}s") from e
        except OSError as e:
            raise MediaToolError(f"Could not run {args[0]}: {e}") from e

        if proc.returncode != 0:
            raise MediaToolError(
                f"{os.path.basename(args[0])} exited with {proc.returncode}",
                stderr=(proc.stderr or "").strip(),
            )
        return proc

    def probe(self, video_path: str) -> VideoMetadata:
        """Duration and size of the first video stream; defaults on any failure"""
        try:
            proc = self._run([
                self.ffprobe,
                "-v", "quiet",
                "-print_format", "json",
                "-show_format",
                "-show_streams",
                video_path,
            ])
            data = json.loads(proc.stdout or "{}")
        except MediaToolError as e:
            logger.warning(f"ffprobe failed for {video_path}: {e}")
            return VideoMetadata()
        except json.JSONDecodeError as e:
            logger.warning(f"ffprobe output not valid JSON for {video_path}: {e}")
            return VideoMetadata()

        return self._parse(data)

    @staticmethod
    def _parse(data: dict) -> VideoMetadata:
        metadata = VideoMetadata()
        video_stream = next(
            (s for s in data.get("streams", []) if s.get("codec_type") == "video"),
            None,
        )

        # Container duration first, then the video stream's
        for source in (data.get("format", {}), video_stream or {}):
            raw = source.get("duration")
            if raw in (None, "", "N/A"):
                continue
            try:
                metadata.duration = max(0, int(float(raw)))
                break
            except (TypeError, ValueError):
                continue

        if video_stream:
            if video_stream.get("width"):
                metadata.width = int(video_stream["width"])
            if video_stream.get("height"):
                metadata.height = int(video_stream["height"])
        return metadata

    def extract_frame(self, video_path, output_path, seconds, width, height) -> None:
        self._run([
            self.ffmpeg,
            "-y",
            "-ss", format_timemark(seconds),
            "-i", video_path,
            "-frames:v", "1",
            "-q:v", "2",
            "-s", f"{width}x{height}",
            output_path,
        ])
        if not os.path.exists(output_path):
            raise MediaToolError(f"ffmpeg produced no frame at {format_timemark(seconds)}")

    def extract_clip(self, video_path, output_path, start, length, width, height) -> None:
        self._run([
            self.ffmpeg,
            "-y",
            "-ss", f"{start:.2f}",
            "-i", video_path,
            "-t", f"{length:.2f}",
            "-s", f"{width}x{height}",
            "-c:v", "libx264",
            "-c:a", "aac",
            "-preset", "ultrafast",
            "-crf", "23",
            "-movflags", "+faststart",
            output_path,
        ])
        if not os.path.exists(output_path):
            raise MediaToolError("ffmpeg produced no preview clip")


def detect_media_probe(settings) -> MediaProbe:
    """
    Pick the probe for this process.

    Explicit paths in settings win over a PATH lookup. Both ffmpeg and
    ffprobe must be present, otherwise the probe runs in degraded mode.
    """
    ffmpeg: Optional[str] = settings.ffmpeg_path or shutil.which("ffmpeg")
    ffprobe: Optional[str] = settings.ffprobe_path or shutil.which("ffprobe")

    if ffmpeg and ffprobe:
        logger.info(f"Media tools found: ffmpeg={ffmpeg}, ffprobe={ffprobe}")
        return FfmpegProbe(ffmpeg, ffprobe, timeout=settings.media_timeout_seconds)

    logger.warning("ffmpeg/ffprobe not available; thumbnails fall back to placeholders")
    return UnavailableProbe()
