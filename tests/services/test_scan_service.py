"""
Video File Scanner Tests
"""
import os

import pytest

from videolib.services.scan_service import VideoFileScanner


@pytest.fixture
def media_tree(tmp_path):
    root = tmp_path / "library"
    (root / "b_season").mkdir(parents=True)
    (root / "a_season").mkdir()
    (root / "movie.MKV").write_bytes(b"\0" * 10)
    (root / "notes.txt").write_text("not a video")
    (root / "._movie.mp4").write_bytes(b"\0")
    (root / ".DS_Store").write_bytes(b"\0")
    (root / "a_season" / "ep1.mp4").write_bytes(b"\0" * 20)
    (root / "b_season" / "ep2.webm").write_bytes(b"\0" * 30)
    (root / "b_season" / "Thumbs.db").write_bytes(b"\0")
    return root


class TestScanDirectory:
    def test_finds_videos_recursively(self, media_tree):
        files = VideoFileScanner().scan_directory(str(media_tree))

        assert [f.filename for f in files] == ["movie.MKV", "ep1.mp4", "ep2.webm"]
        assert all(os.path.isabs(f.file_path) for f in files)
        assert [f.file_size for f in files] == [10, 20, 30]

    def test_custom_extensions(self, media_tree):
        files = VideoFileScanner({".webm"}).scan_directory(str(media_tree))
        assert [f.filename for f in files] == ["ep2.webm"]

    def test_missing_directory(self, tmp_path):
        assert VideoFileScanner().scan_directory(str(tmp_path / "missing")) == []


class TestIsVideoFile:
    @pytest.mark.parametrize("name,expected", [
        ("clip.mp4", True),
        ("CLIP.MOV", True),
        ("clip.wmv", True),
        ("clip.flv", True),
        ("clip.avi", True),
        ("._clip.mp4", False),
        ("clip.mp3", False),
        ("clip", False),
    ])
    def test_is_video_file(self, name, expected):
        assert VideoFileScanner().is_video_file(name) is expected


class TestHelpers:
    def test_extract_title(self):
        assert VideoFileScanner.extract_title("my_holiday-2023.final.mp4") == "my holiday 2023 final"
        assert VideoFileScanner.extract_title("a__b.mp4") == "a b"

    @pytest.mark.parametrize("size,expected", [
        (0, "0 Bytes"),
        (512, "512 Bytes"),
        (1536, "1.5 KB"),
        (1048576, "1 MB"),
        (5 * 1024 ** 3, "5 GB"),
    ])
    def test_format_file_size(self, size, expected):
        assert VideoFileScanner.format_file_size(size) == expected
