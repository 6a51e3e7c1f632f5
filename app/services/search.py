"""
Search service - main business logic orchestrator.
Sequences candidate filtering, history exclusion and relevance ranking.
Empty pools short-circuit before any ranking call; infrastructure failures
propagate to the caller as SearchFailure subclasses.
"""
import logging
import time
import uuid
from typing import List, Optional

from app.core.exceptions import NotFoundError, SearchFailure
from app.core.telemetry import SEARCH_LATENCY, SEARCH_REQUESTS
from app.models.interfaces import CatalogService, HistorySet
from app.models.schemas import CatalogItem, Genre, PreferenceProfile, RankedResult, SearchResponse
from app.services.candidate_filter import CandidateFilter
from app.services.history import exclude_history
from app.services.ranking import RelevanceRanker

logger = logging.getLogger(__name__)


class SearchService:
    """
    Movie search orchestrating the discovery and ranking pipeline.

    Responsibilities:
    - Build the objective candidate pool
    - Remove movies the user already judged
    - Rank with the branch chosen by the profile
    - Return one response shape whatever branch ran
    """

    def __init__(
            self,
            candidate_filter: CandidateFilter,
            ranker: RelevanceRanker,
            catalog: CatalogService,
    ) -> None:
        """
        Initialize search service with dependencies.

        Args:
            candidate_filter: Objective filtering stage
            ranker: Relevance ranking stage
            catalog: Cache-backed catalog for single lookups
        """
        self._candidate_filter = candidate_filter
        self._ranker = ranker
        self._catalog = catalog

    async def search(
            self,
            profile: PreferenceProfile,
            history: HistorySet = frozenset(),
            request_id: Optional[str] = None,
            user_id: Optional[str] = None,
    ) -> List[RankedResult]:
        """
        Run the full pipeline for one profile.

        Args:
            profile: The user's preferences for this search
            history: Ids the user already liked or disliked
            request_id: Correlation id for logs (generated when absent)
            user_id: Requesting user, for logs only

        Returns:
            Ranked results, possibly empty

        Raises:
            CatalogUnavailableError: Catalog failed; partial pools are discarded
            RankingUnavailableError: Ranking service failed
        """
        start_time = time.perf_counter()
        log_ctx = {"request_id": request_id or uuid.uuid4().hex[:12]}
        if user_id:
            log_ctx["user_id"] = user_id
        branch = self._ranker.select_strategy(profile).name

        try:
            results = await self._run(profile, history, log_ctx)
        except SearchFailure as e:
            SEARCH_REQUESTS.labels(branch=branch, outcome=e.error_code.lower()).inc()
            logger.error(f"Search failed: branch={branch}, error={e.message}", extra=log_ctx)
            raise
        finally:
            SEARCH_LATENCY.labels(branch=branch).observe(time.perf_counter() - start_time)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        SEARCH_REQUESTS.labels(branch=branch, outcome="ok" if results else "empty").inc()
        logger.info(
            f"Search served: branch={branch}, results={len(results)}, "
            f"elapsed_ms={elapsed_ms:.2f}",
            extra=log_ctx,
        )
        return results

    async def search_response(
            self,
            profile: PreferenceProfile,
            history: HistorySet = frozenset(),
            request_id: Optional[str] = None,
            user_id: Optional[str] = None,
    ) -> SearchResponse:
        """Run a search and wrap it in the response envelope."""
        results = await self.search(profile, history, request_id, user_id)
        return SearchResponse(count=len(results), movies=results)

    async def _run(
            self,
            profile: PreferenceProfile,
            history: HistorySet,
            log_ctx: dict,
    ) -> List[RankedResult]:
        pool = await self._candidate_filter.build_pool(profile)
        if not pool:
            logger.info("No movies match the objective constraints", extra=log_ctx)
            return []

        pool = exclude_history(pool, history)
        if not pool:
            logger.info("Every candidate was already judged by the user", extra=log_ctx)
            return []

        return await self._ranker.rank(pool, profile)

    async def get_movie(self, movie_id: int) -> CatalogItem:
        """Cached single-movie lookup; raises NotFoundError when absent."""
        item = await self._catalog.get_detail(movie_id)
        if item is None:
            raise NotFoundError("Movie", str(movie_id))
        return item

    async def get_genres(self) -> List[Genre]:
        """Cached genre vocabulary."""
        return await self._catalog.get_genre_vocabulary()
