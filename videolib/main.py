"""
Personal Video Library API

FastAPI application for cataloging, tagging and browsing local video files.
"""
import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from videolib.config import settings
from videolib.database import SessionLocal, init_db
from videolib.exceptions import CatalogError
from videolib.services.media_probe import detect_media_probe
from videolib.services.tag_service import TagService
from videolib.services.thumbnail_service import ThumbnailGenerator
from videolib.api import (
    videos_router,
    search_router,
    tags_router,
    ingest_router,
    health_router,
    dev_router,
)

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup: Create tables if they don't exist
    init_db()

    if settings.seed_default_tags:
        db = SessionLocal()
        try:
            TagService(db).seed_default_tags()
        finally:
            db.close()

    os.makedirs(settings.upload_dir, exist_ok=True)

    # ffmpeg is looked up once; everything downstream gets this probe
    probe = detect_media_probe(settings)
    app.state.media_probe = probe
    app.state.thumbnail_generator = ThumbnailGenerator(settings.thumbnail_dir, probe)

    logger.info(f"{settings.app_name} {settings.app_version} started (media tools: {probe.name})")
    yield


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="""
    Personal Video Library API

    API for a local video collection:
    - **Videos**: Cataloged files with probed duration and resolution
    - **Tags**: Two-level hierarchy (regions, genres, custom labels)
    - **Search**: Ranked title search, autocomplete, tag intersection
    - **Thumbnails**: Generated thumbnails, selectable candidates, hover previews

    ## Features
    - Upload or directory scan ingest
    - Composite filtering with pagination
    - Degraded mode without ffmpeg (placeholder thumbnails)
    """,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(CatalogError)
async def catalog_exception_handler(request: Request, exc: CatalogError):
    """Map catalog errors to their HTTP status."""
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc} - Path: {request.url.path}")
    else:
        logger.warning(f"{type(exc).__name__}: {exc} - Path: {request.url.path}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# Register routers
app.include_router(videos_router)
app.include_router(search_router)
app.include_router(tags_router)
app.include_router(ingest_router)
app.include_router(health_router)
app.include_router(dev_router)

# Generated artifacts and uploaded files
app.mount("/thumbnails", StaticFiles(directory=settings.thumbnail_dir, check_dir=False), name="thumbnails")
app.mount("/uploads", StaticFiles(directory=settings.upload_dir, check_dir=False), name="uploads")


@app.get("/", tags=["health"])
def root():
    """Root endpoint returning API info."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc",
    }


@app.get("/health", tags=["health"])
def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy"}
