"""
Movie API router.
Implements preference search, single-movie lookup and the genre vocabulary.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Path, Request

from app.api.dependencies import get_history_repository, get_search_service
from app.models.interfaces import HistoryRepository
from app.models.schemas import (
    CatalogItem,
    ErrorResponse,
    Genre,
    PreferenceProfile,
    SearchResponse,
)
from app.services.search import SearchService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/v1", tags=["movies"])


@router.post(
    "/movies/search",
    response_model=SearchResponse,
    summary="Search Movies by Preferences",
    description="""
    Recommend movies for a preference profile.

    Objective constraints (years, rating, runtime, language, certification)
    filter the catalog; movies the user already liked or disliked are removed.
    When the profile carries a description or any non-neutral slider the
    remaining pool is ranked by the generative ranking service, otherwise by
    popularity and rating.
    """,
    responses={
        200: {"description": "Ranked movies (possibly none)"},
        422: {"description": "Invalid preference profile"},
        503: {"model": ErrorResponse, "description": "Catalog or ranking service unavailable - retry"},
    },
)
async def search_movies(
    request: Request,
    profile: PreferenceProfile,
    x_user_id: Optional[str] = Header(
        default=None,
        alias="X-User-ID",
        description="Authenticated user identifier (set by the auth gateway)",
    ),
    search_service: SearchService = Depends(get_search_service),
    history_repo: HistoryRepository = Depends(get_history_repository),
) -> SearchResponse:
    """Preference search endpoint."""
    history = await history_repo.get_history(x_user_id) if x_user_id else frozenset()
    if history:
        logger.debug(f"Excluding {len(history)} judged movies", extra={"user_id": x_user_id})
    return await search_service.search_response(
        profile,
        history,
        request_id=getattr(request.state, "request_id", None),
        user_id=x_user_id,
    )


@router.get(
    "/movies/{movie_id}",
    response_model=CatalogItem,
    summary="Get Movie",
    responses={404: {"model": ErrorResponse, "description": "Unknown movie"}},
)
async def get_movie(
    movie_id: int = Path(..., ge=1, description="Catalog identifier"),
    search_service: SearchService = Depends(get_search_service),
) -> CatalogItem:
    """Single-movie lookup served from the detail cache when possible."""
    return await search_service.get_movie(movie_id)


@router.get(
    "/genres",
    response_model=List[Genre],
    summary="Genre Vocabulary",
)
async def list_genres(
    search_service: SearchService = Depends(get_search_service),
) -> List[Genre]:
    """Catalog genre list (cached for a day)."""
    return await search_service.get_genres()
