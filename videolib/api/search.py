"""
Search API Router

Search-box helpers.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from videolib.database import get_db
from videolib.services.search_service import SearchService

router = APIRouter(prefix="/api/search", tags=["search"])


class AutocompleteResponse(BaseModel):
    """Title suggestions, best match first"""
    suggestions: List[str]


@router.get("/autocomplete", response_model=AutocompleteResponse)
def autocomplete(
    q: Optional[str] = Query(None, description="Partial title (2+ characters)"),
    limit: int = Query(10, ge=1, le=50, description="Maximum suggestions"),
    db: Session = Depends(get_db),
) -> AutocompleteResponse:
    """
    Suggest distinct video titles for a partial query.

    Queries shorter than 2 characters return no suggestions.
    """
    service = SearchService(db)
    return AutocompleteResponse(
        suggestions=service.get_autocomplete_suggestions(q or "", limit=limit)
    )
