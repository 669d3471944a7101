"""
API Package

FastAPI routers for all endpoints.
"""
from videolib.api.videos import router as videos_router
from videolib.api.search import router as search_router
from videolib.api.tags import router as tags_router
from videolib.api.ingest import router as ingest_router
from videolib.api.health import router as health_router
from videolib.api.dev import router as dev_router

__all__ = [
    "videos_router",
    "search_router",
    "tags_router",
    "ingest_router",
    "health_router",
    "dev_router",
]
