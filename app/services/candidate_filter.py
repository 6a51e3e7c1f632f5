"""
Candidate filter service.
Builds the deduplicated candidate pool for a preference profile.

The catalog's discovery endpoint only understands release years, rating and
language, so runtime and certification are applied client-side after each
listing is resolved to its full record.
"""
import asyncio
import logging
from typing import Iterable, List

from app.models.interfaces import CatalogService
from app.models.schemas import ANY, CatalogItem, CatalogSummary, DiscoverQuery, PreferenceProfile

logger = logging.getLogger(__name__)

DEFAULT_DISCOVER_PAGES = 10


def matches_constraints(item: CatalogItem, profile: PreferenceProfile) -> bool:
    """Check every objective constraint; all interval bounds are inclusive."""
    if profile.year_range:
        if item.year is None:
            return False
        if not profile.year_range[0] <= item.year <= profile.year_range[1]:
            return False

    if profile.rating_range and not profile.rating_range[0] <= item.rating <= profile.rating_range[1]:
        return False

    if profile.runtime_range and not profile.runtime_range[0] <= item.runtime <= profile.runtime_range[1]:
        return False

    if profile.age_rating != ANY and item.certification != profile.age_rating:
        return False

    language = profile.language_code()
    if language and item.language != language:
        return False

    return True


def dedupe_by_id(items: Iterable[CatalogItem]) -> List[CatalogItem]:
    """Drop repeated identifiers, keeping first occurrence order."""
    seen = set()
    unique = []
    for item in items:
        if item.id in seen:
            continue
        seen.add(item.id)
        unique.append(item)
    return unique


class CandidateFilter:
    """
    Objective filtering stage of the search pipeline.

    Responsibilities:
    - Scan a fixed number of discovery pages
    - Resolve every listing to its full record (concurrently, cache-backed)
    - Drop listings the catalog refuses to detail
    - Apply runtime and certification client-side
    - Deduplicate by identifier
    """

    def __init__(
        self,
        catalog: CatalogService,
        max_pages: int = DEFAULT_DISCOVER_PAGES,
    ) -> None:
        """
        Initialize candidate filter.

        Args:
            catalog: Catalog service, normally the cache-backed wrapper
            max_pages: Discovery pages to scan per search
        """
        self._catalog = catalog
        self._max_pages = max_pages

    async def build_pool(self, profile: PreferenceProfile) -> List[CatalogItem]:
        """
        Produce the candidate pool for a profile.

        Raises:
            CatalogUnavailableError: Any catalog failure aborts the whole pool
        """
        query = DiscoverQuery.from_profile(profile)
        summaries = await self._discover(query)
        if not summaries:
            logger.info("Discovery returned no listings")
            return []

        movie_ids = list(dict.fromkeys(summary.id for summary in summaries))
        details = await asyncio.gather(
            *(self._catalog.get_detail(movie_id) for movie_id in movie_ids)
        )

        resolved = [item for item in details if item is not None]
        pool = dedupe_by_id(item for item in resolved if matches_constraints(item, profile))

        logger.info(
            f"Candidate pool built: listings={len(summaries)}, unique={len(movie_ids)}, "
            f"resolved={len(resolved)}, kept={len(pool)}"
        )
        return pool

    async def _discover(self, query: DiscoverQuery) -> List[CatalogSummary]:
        """Collect listings across discovery pages, stopping at the last page."""
        summaries: List[CatalogSummary] = []
        for page_number in range(1, self._max_pages + 1):
            page = await self._catalog.discover(query, page_number)
            if not page.results:
                break
            summaries.extend(page.results)
            if page_number >= page.total_pages:
                break
        return summaries
