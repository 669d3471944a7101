"""
Pytest Configuration and Fixtures

Provides test database setup, a scriptable media probe and common fixtures.
"""
import os
import pytest
from contextlib import asynccontextmanager
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from videolib.config import Settings
from videolib.database import Base, init_db
from videolib.services.media_probe import MediaProbe, VideoMetadata
from videolib.exceptions import MediaToolError
from videolib.services.thumbnail_service import ThumbnailGenerator

# Use SQLite in-memory for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"


class FakeProbe(MediaProbe):
    """
    Media probe that writes dummy files instead of running ffmpeg.

    Frames and clips are plain byte blobs. Timestamps listed in
    `fail_at` raise MediaToolError.
    """

    available = True
    name = "fake"

    def __init__(self, duration=120, width=1920, height=1080, clip_bytes=4096, fail_at=()):
        self.duration = duration
        self.width = width
        self.height = height
        self.clip_bytes = clip_bytes
        self.fail_at = set(fail_at)
        self.frames = []
        self.clips = []

    def probe(self, video_path):
        return VideoMetadata(duration=self.duration, width=self.width, height=self.height)

    def extract_frame(self, video_path, output_path, seconds, width, height):
        if seconds in self.fail_at:
            raise MediaToolError(f"no frame at {seconds}")
        self.frames.append(seconds)
        with open(output_path, "wb") as f:
            f.write(f"frame@{seconds}".encode())

    def extract_clip(self, video_path, output_path, start, length, width, height):
        self.clips.append((start, length))
        with open(output_path, "wb") as f:
            f.write(b"\0" * self.clip_bytes)


@pytest.fixture(scope="function")
def db_engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        SQLALCHEMY_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Database session bound to the per-test engine."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()

    yield session

    session.close()


@pytest.fixture
def fake_probe():
    return FakeProbe()


@pytest.fixture
def thumbnail_dir(tmp_path):
    path = tmp_path / "thumbnails"
    path.mkdir()
    return str(path)


@pytest.fixture
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return str(path)


@pytest.fixture
def generator(thumbnail_dir, fake_probe):
    """Thumbnail pipeline backed by the fake probe."""
    return ThumbnailGenerator(thumbnail_dir, fake_probe)


@pytest.fixture
def make_generator(thumbnail_dir):
    """Factory for pipelines over a differently scripted fake probe."""
    def _make(**probe_options):
        return ThumbnailGenerator(thumbnail_dir, FakeProbe(**probe_options))

    return _make


@pytest.fixture
def test_settings(thumbnail_dir, upload_dir):
    return Settings(
        database_url=SQLALCHEMY_DATABASE_URL,
        thumbnail_dir=thumbnail_dir,
        upload_dir=upload_dir,
        enable_dev_endpoints=True,
        seed_default_tags=False,
    )


@pytest.fixture
def video_file(tmp_path):
    """A dummy file with a video extension."""
    path = tmp_path / "media" / "clip.mp4"
    path.parent.mkdir()
    path.write_bytes(b"\0" * 2048)
    return str(path)


@pytest.fixture(scope="function")
def client(db_session, generator, test_settings):
    """Create a test client with database, settings and media overrides."""
    from videolib.api.dependencies import get_media_probe, get_thumbnail_generator
    from videolib.config import get_settings
    from videolib.database import get_db
    from videolib.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # Override the lifespan to skip DB initialization and ffmpeg detection
    original_lifespan = app.router.lifespan_context

    @asynccontextmanager
    async def test_lifespan(app):
        yield

    app.router.lifespan_context = test_lifespan
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_thumbnail_generator] = lambda: generator
    app.dependency_overrides[get_media_probe] = lambda: generator.probe
    app.dependency_overrides[get_settings] = lambda: test_settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    app.router.lifespan_context = original_lifespan


@pytest.fixture
def make_video(db_session):
    """Factory inserting video rows directly."""
    from videolib.models import Video

    def _make(title, filename=None, height=1080, duration=60, created_at=None, **extra):
        filename = filename or f"{title.lower().replace(' ', '_')}.mp4"
        video = Video(
            filename=filename,
            title=title,
            file_path=extra.pop("file_path", os.path.join("/videos", filename)),
            file_size=1024,
            duration=duration,
            width=height * 16 // 9,
            height=height,
            **extra,
        )
        if created_at is not None:
            video.created_at = created_at
        db_session.add(video)
        db_session.commit()
        db_session.refresh(video)
        return video

    return _make


@pytest.fixture
def make_tag(db_session):
    """Factory inserting tag rows directly."""
    from videolib.models import Tag

    def _make(name, **extra):
        tag = Tag(name=name, **extra)
        db_session.add(tag)
        db_session.commit()
        db_session.refresh(tag)
        return tag

    return _make


@pytest.fixture
def link(db_session):
    """Attach a tag to a video without going through the service."""
    from videolib.models import VideoTag

    def _link(video, tag):
        db_session.add(VideoTag(video_id=video.id, tag_id=tag.id))
        db_session.commit()

    return _link


@pytest.fixture
def sample_video(make_video):
    """Create a sample video for testing."""
    return make_video("Sample Clip", filename="sample_clip.mp4")


@pytest.fixture
def sample_tag(make_tag):
    """Create a sample tag for testing."""
    return make_tag("Comedy", color="#f1c40f", category="genre")
