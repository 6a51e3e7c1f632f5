"""
Dependency injection container.
Creates and wires all application components.
Uses FastAPI's dependency injection system.
"""
from functools import lru_cache
from typing import List

from app.clients.cached_catalog import CachedCatalog
from app.clients.catalog import CatalogClient
from app.clients.gemini import GeminiRankingClient
from app.config import get_settings
from app.core.cache import InMemoryCache
from app.core.circuit_breaker import CircuitBreaker
from app.core.exceptions import RankingUnavailableError
from app.models.schemas import CatalogItem, Genre
from app.repositories.memory import InMemoryHistoryRepository
from app.services.candidate_filter import CandidateFilter
from app.services.ranking import AIRankingStrategy, HeuristicRankingStrategy, RelevanceRanker
from app.services.search import SearchService


# =============================================================================
# Singleton Instances (Application Lifetime)
# =============================================================================


@lru_cache()
def get_catalog_client() -> CatalogClient:
    """Get singleton TMDB client."""
    settings = get_settings()
    return CatalogClient(
        access_token=settings.TMDB_ACCESS_TOKEN,
        base_url=settings.TMDB_BASE_URL,
        locale=settings.CATALOG_LOCALE,
        timeout=settings.CATALOG_TIMEOUT_SEC,
    )


@lru_cache()
def get_detail_cache() -> InMemoryCache[CatalogItem]:
    """Get singleton movie detail cache."""
    return InMemoryCache[CatalogItem](default_ttl_seconds=get_settings().DETAIL_CACHE_TTL_SEC)


@lru_cache()
def get_genre_cache() -> InMemoryCache[List[Genre]]:
    """Get singleton genre vocabulary cache."""
    return InMemoryCache[List[Genre]](default_ttl_seconds=get_settings().GENRE_CACHE_TTL_SEC)


@lru_cache()
def get_cached_catalog() -> CachedCatalog:
    """Get singleton cache-backed catalog."""
    settings = get_settings()
    return CachedCatalog(
        client=get_catalog_client(),
        detail_cache=get_detail_cache(),
        genre_cache=get_genre_cache(),
        detail_ttl_seconds=settings.DETAIL_CACHE_TTL_SEC,
        genre_ttl_seconds=settings.GENRE_CACHE_TTL_SEC,
    )


@lru_cache()
def get_ranking_client() -> GeminiRankingClient:
    """Get singleton ranking service client."""
    settings = get_settings()
    return GeminiRankingClient(
        api_key=settings.GEMINI_API_KEY,
        model=settings.GEMINI_MODEL,
        base_url=settings.GEMINI_BASE_URL,
        timeout=settings.RANKING_TIMEOUT_SEC,
        temperature=settings.RANKING_TEMPERATURE,
    )


@lru_cache()
def get_ranking_circuit_breaker() -> CircuitBreaker:
    """Get singleton circuit breaker for ranking service."""
    settings = get_settings()
    return CircuitBreaker(
        name="ranking_service",
        failure_threshold=settings.CIRCUIT_BREAKER_FAILURE_THRESHOLD,
        recovery_timeout_sec=settings.CIRCUIT_BREAKER_RECOVERY_TIMEOUT_SEC,
        tracked_exceptions=(RankingUnavailableError,),
    )


@lru_cache()
def get_history_repository() -> InMemoryHistoryRepository:
    """Get singleton history repository."""
    return InMemoryHistoryRepository()


@lru_cache()
def get_relevance_ranker() -> RelevanceRanker:
    """Get singleton relevance ranker."""
    settings = get_settings()
    return RelevanceRanker(
        ai_strategy=AIRankingStrategy(
            ranking_service=get_ranking_client(),
            circuit_breaker=get_ranking_circuit_breaker(),
            pool_limit=settings.AI_POOL_LIMIT,
            min_score=settings.MIN_MATCH_SCORE,
            max_results=settings.MAX_RESULTS,
        ),
        heuristic_strategy=HeuristicRankingStrategy(max_results=settings.MAX_RESULTS),
    )


# =============================================================================
# Request-Scoped Dependencies (Per-Request Lifetime)
# =============================================================================


def get_search_service() -> SearchService:
    """
    Get search service with all dependencies wired.
    This is the main entry point for the movie endpoints.
    """
    catalog = get_cached_catalog()
    return SearchService(
        candidate_filter=CandidateFilter(catalog, max_pages=get_settings().DISCOVER_PAGES),
        ranker=get_relevance_ranker(),
        catalog=catalog,
    )


# =============================================================================
# Cleanup Functions
# =============================================================================


async def close_clients() -> None:
    """Close outbound HTTP clients that were created (application shutdown)."""
    if get_catalog_client.cache_info().currsize:
        await get_catalog_client().close()
    if get_ranking_client.cache_info().currsize:
        await get_ranking_client().close()


def clear_caches() -> None:
    """Clear all cached singleton instances (for testing)."""
    get_catalog_client.cache_clear()
    get_detail_cache.cache_clear()
    get_genre_cache.cache_clear()
    get_cached_catalog.cache_clear()
    get_ranking_client.cache_clear()
    get_ranking_circuit_breaker.cache_clear()
    get_history_repository.cache_clear()
    get_relevance_ranker.cache_clear()
