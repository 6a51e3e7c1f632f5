"""
Liveness and readiness probes.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends

from app.api.dependencies import (
    get_detail_cache,
    get_genre_cache,
    get_ranking_circuit_breaker,
)
from app.config import Settings, get_settings
from app.core.cache import InMemoryCache
from app.core.circuit_breaker import CircuitBreaker, CircuitState

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness")
async def health_check() -> dict:
    return {"status": "healthy"}


@router.get("/health/ready", summary="Readiness")
async def readiness_check(
    circuit_breaker: CircuitBreaker = Depends(get_ranking_circuit_breaker),
    detail_cache: InMemoryCache = Depends(get_detail_cache),
    genre_cache: InMemoryCache = Depends(get_genre_cache),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    """
    Readiness for the orchestrator.

    ``degraded`` while the ranking circuit is open: heuristic searches still
    work but subjective ones fail fast with RANKING_UNAVAILABLE.
    """
    degraded = circuit_breaker.state == CircuitState.OPEN
    return {
        "status": "degraded" if degraded else "ready",
        "circuit_breaker": circuit_breaker.snapshot(),
        "services": {
            "catalog_configured": settings.catalog_configured,
            "ranking_configured": settings.ranking_configured,
        },
        "caches": {
            "movie_details": detail_cache.size(),
            "genres": genre_cache.size(),
        },
    }
