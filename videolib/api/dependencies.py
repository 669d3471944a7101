"""
API Dependencies

Shared FastAPI dependencies and query parameter parsing.
"""
import json
from typing import List, Optional

from fastapi import Depends, HTTPException, Request

from videolib.config import Settings, get_settings
from videolib.exceptions import BadInputError
from videolib.services.media_probe import MediaProbe
from videolib.services.thumbnail_service import ThumbnailGenerator


def get_media_probe(request: Request) -> MediaProbe:
    """Probe chosen once at startup"""
    return request.app.state.media_probe


def get_thumbnail_generator(request: Request) -> ThumbnailGenerator:
    return request.app.state.thumbnail_generator


def require_dev_endpoints(settings: Settings = Depends(get_settings)) -> None:
    """Hide dev-only routes unless explicitly enabled"""
    if not settings.enable_dev_endpoints:
        raise HTTPException(status_code=404, detail="Not Found")


def parse_string_list(raw: Optional[str], field: str) -> List[str]:
    """
    Parse a JSON array of strings from a query parameter.

    Raises:
        BadInputError: not valid JSON or not a list of strings
    """
    if raw is None or raw == "":
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError as e:
        raise BadInputError(f"Invalid {field} parameter: {e.msg}") from e
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise BadInputError(f"Invalid {field} parameter: expected a JSON array of strings")
    return value
