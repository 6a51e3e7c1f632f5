"""
Cache-backed catalog.
Memoizes per-movie detail lookups and the genre vocabulary in front of
any CatalogService. Only successful, non-empty fetches are stored.
"""
import logging
from typing import List, Optional

from app.core.cache import CacheInterface
from app.core.telemetry import CATALOG_CACHE_LOOKUPS
from app.models.interfaces import CatalogService
from app.models.schemas import CatalogItem, DiscoverPage, DiscoverQuery, Genre

logger = logging.getLogger(__name__)

GENRES_KEY = "genres"


def detail_key(movie_id: int) -> str:
    return f"movie:{movie_id}"


class CachedCatalog:
    """CatalogService wrapper with TTL caches for details and genres."""

    def __init__(
        self,
        client: CatalogService,
        detail_cache: CacheInterface[CatalogItem],
        genre_cache: CacheInterface[List[Genre]],
        detail_ttl_seconds: float = 3600,
        genre_ttl_seconds: float = 86400,
    ) -> None:
        self._client = client
        self._detail_cache = detail_cache
        self._genre_cache = genre_cache
        self._detail_ttl = detail_ttl_seconds
        self._genre_ttl = genre_ttl_seconds

    async def discover(self, query: DiscoverQuery, page: int) -> DiscoverPage:
        # Discovery pages are not cached
        return await self._client.discover(query, page)

    async def get_detail(self, movie_id: int) -> Optional[CatalogItem]:
        key = detail_key(movie_id)
        cached = self._detail_cache.get(key)
        if cached is not None:
            CATALOG_CACHE_LOOKUPS.labels(kind="detail", result="hit").inc()
            return cached

        CATALOG_CACHE_LOOKUPS.labels(kind="detail", result="miss").inc()
        item = await self._client.get_detail(movie_id)
        if item is not None:
            self._detail_cache.set(key, item, self._detail_ttl)
        return item

    async def get_genre_vocabulary(self) -> List[Genre]:
        cached = self._genre_cache.get(GENRES_KEY)
        if cached is not None:
            CATALOG_CACHE_LOOKUPS.labels(kind="genres", result="hit").inc()
            return cached

        CATALOG_CACHE_LOOKUPS.labels(kind="genres", result="miss").inc()
        genres = await self._client.get_genre_vocabulary()
        if genres:
            self._genre_cache.set(GENRES_KEY, genres, self._genre_ttl)
        else:
            logger.warning("Catalog returned an empty genre vocabulary; not caching")
        return genres
