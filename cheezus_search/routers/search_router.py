"""
Catalogue search API router.

Exposes the global search bar and the add-cheese search, returning ranked
results ready to be rendered as a list.
"""

import time
from typing import Any, Dict, List, Optional

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from ..dependencies import get_search_service
from ..domain.entities import ScoredResult, SearchMode
from ..domain.exceptions import DataFetchException
from ..services.search_service import CatalogSearchService

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1", tags=["search"])


class SearchResultItem(BaseModel):
    """Search result item."""

    id: str = Field(..., description="Record identifier")
    category: str = Field(
        ...,
        description="cheese, article, recipe, pairing, producer_cheese or cheese_type",
    )
    title: str = Field(..., description="Display title")
    description: str = Field("", description="Description, or a 'Did you mean' prompt")
    score: float = Field(..., description="Rank score (1.0 for exact matches)")
    similarity: float = Field(..., description="Best edit-distance similarity (0-1)")
    suggestion: bool = Field(False, description="True for fallback suggestions")
    metadata: Dict[str, Any] = Field(default_factory=dict)


class SearchResponse(BaseModel):
    """Search response."""

    success: bool = True
    query: str = Field(..., description="Original query")
    mode: str = Field(..., description="Search mode")
    results: List[SearchResultItem] = Field(default_factory=list)
    count: int = Field(..., description="Number of results")
    suggestions: bool = Field(False, description="Results are 'did you mean' suggestions")
    latency_ms: float = Field(..., description="Search latency in milliseconds")


class ErrorResponse(BaseModel):
    """Error response model."""

    success: bool = False
    error: str
    message: str
    details: dict = {}


def _build_response(
    query: str, mode: str, results: List[ScoredResult], start_time: float
) -> SearchResponse:
    return SearchResponse(
        query=query,
        mode=mode,
        results=[SearchResultItem(**result.to_dict()) for result in results],
        count=len(results),
        suggestions=any(result.suggestion for result in results),
        latency_ms=round((time.time() - start_time) * 1000, 2),
    )


def _fetch_failed(e: DataFetchException) -> HTTPException:
    """Map a catalogue fetch failure onto a 503 response."""
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail={
            "success": False,
            "error": "service_unavailable",
            "message": "Failed to search. Please try again.",
            "details": e.details,
        },
    )


@router.get(
    "/search",
    response_model=SearchResponse,
    responses={
        200: {"description": "Search completed (results may be empty)"},
        503: {"description": "Catalogue unavailable", "model": ErrorResponse},
    },
    summary="Search the catalogue",
    description="""
    Search cheeses, pairings and Cheezopedia entries.

    Ranking:
    - Exact (substring) matches first, score 1.0
    - Then the best fuzzy matches by edit-distance similarity
    - If nothing matches, up to 3 "Did you mean" suggestions
    """,
)
async def search_catalogue(
    q: str = Query(
        "",
        max_length=100,
        description="Search term (empty returns no results)",
        examples=["cheddar", "cheder", "goat"],
    ),
    mode: SearchMode = Query(SearchMode.ALL, description="all, cheese or pairing"),
    service: CatalogSearchService = Depends(get_search_service),
):
    """Search the catalogue with fuzzy matching."""
    start_time = time.time()

    try:
        results = await service.search(q, mode=mode)
    except DataFetchException as e:
        logger.error("Search failed", query=q, mode=mode.value, error=str(e))
        raise _fetch_failed(e) from e

    response = _build_response(q, mode.value, results, start_time)
    logger.info(
        "Search completed",
        query=q,
        mode=mode.value,
        count=response.count,
        suggestions=response.suggestions,
        latency_ms=response.latency_ms,
    )
    return response


@router.get(
    "/search/cheeses",
    response_model=SearchResponse,
    responses={
        200: {"description": "Search completed (results may be empty)"},
        503: {"description": "Catalogue unavailable", "model": ErrorResponse},
    },
    summary="Search cheeses to add to a cheese box",
    description="""
    Search approved producer cheeses and cheese types, with synonym
    expansion ("chevre" also finds "goat"). Cheeses already in the user's
    cheese box are excluded. Terms shorter than 2 characters return no results.
    """,
)
async def search_cheeses_to_add(
    q: str = Query("", max_length=100, description="Search term"),
    user_id: Optional[str] = Query(None, max_length=36, description="Current user id"),
    service: CatalogSearchService = Depends(get_search_service),
):
    """Search cheeses for the add-cheese flow."""
    start_time = time.time()

    try:
        results = await service.search_cheeses_to_add(q, user_id=user_id)
    except DataFetchException as e:
        logger.error("Add-cheese search failed", query=q, error=str(e))
        raise _fetch_failed(e) from e

    response = _build_response(q, "add_cheese", results, start_time)
    logger.info(
        "Add-cheese search completed",
        query=q,
        count=response.count,
        latency_ms=response.latency_ms,
    )
    return response
