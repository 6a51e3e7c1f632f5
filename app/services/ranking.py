"""
Relevance ranking service.
Orders a candidate pool either with the generative ranking service or with a
deterministic popularity/rating heuristic. Both branches return the same
result shape: RankedResult lists sorted by score (ties by ascending id) and
capped at the same maximum length.
"""
import logging
from abc import ABC, abstractmethod
from typing import List, Optional

from app.core.circuit_breaker import CircuitBreaker
from app.core.exceptions import CircuitBreakerOpenError, RankingUnavailableError
from app.models.interfaces import RankingService
from app.models.schemas import CatalogItem, PreferenceProfile, RankedResult
from app.services.prompting import RankingPromptBuilder, parse_ranking_response

logger = logging.getLogger(__name__)

HEURISTIC_REASON = "Sorted by popularity and rating"
DEFAULT_AI_REASON = "Matches your preferences"


def heuristic_score(item: CatalogItem) -> float:
    """Fixed popularity/rating composite, clamped to 1.0."""
    return min(1.0, item.popularity / 1000 + item.rating / 100)


def sort_results(results: List[RankedResult]) -> List[RankedResult]:
    """Score descending; equal scores ordered by ascending id."""
    return sorted(results, key=lambda r: (-r.match_score, r.id))


# =============================================================================
# Ranking Strategy (Strategy Pattern)
# =============================================================================


class RankingStrategy(ABC):
    """Abstract base class for ranking strategies."""

    name: str = "base"

    @abstractmethod
    async def rank(
        self,
        pool: List[CatalogItem],
        profile: PreferenceProfile,
    ) -> List[RankedResult]:
        """
        Rank a candidate pool.

        Returns:
            Results sorted by match score, possibly empty
        """
        pass


class HeuristicRankingStrategy(RankingStrategy):
    """Deterministic ranking used when the profile has no subjective signal."""

    name = "heuristic"

    def __init__(self, max_results: int = 30) -> None:
        self._max_results = max_results

    async def rank(
        self,
        pool: List[CatalogItem],
        profile: PreferenceProfile,
    ) -> List[RankedResult]:
        results = [
            RankedResult.from_item(item, heuristic_score(item), HEURISTIC_REASON)
            for item in pool
        ]
        return sort_results(results)[: self._max_results]


class AIRankingStrategy(RankingStrategy):
    """Ranking delegated to the generative ranking service."""

    name = "ai"

    def __init__(
        self,
        ranking_service: RankingService,
        circuit_breaker: Optional[CircuitBreaker] = None,
        prompt_builder: Optional[RankingPromptBuilder] = None,
        pool_limit: int = 60,
        min_score: float = 0.4,
        max_results: int = 30,
    ) -> None:
        """
        Initialize AI ranking.

        Args:
            ranking_service: Generative text service
            circuit_breaker: Breaker guarding the service (default: private one)
            prompt_builder: Prompt builder (default: uses min_score/max_results)
            pool_limit: Maximum candidates sent in one prompt
            min_score: Results below this score are dropped
            max_results: Maximum results returned
        """
        self._service = ranking_service
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            name="ranking_service",
            tracked_exceptions=(RankingUnavailableError,),
        )
        self._prompt_builder = prompt_builder or RankingPromptBuilder(
            min_score=min_score,
            max_results=max_results,
        )
        self._pool_limit = pool_limit
        self._min_score = min_score
        self._max_results = max_results

    async def rank(
        self,
        pool: List[CatalogItem],
        profile: PreferenceProfile,
    ) -> List[RankedResult]:
        """
        Rank through the external service.

        Raises:
            RankingUnavailableError: Service unreachable, failing or circuit open
        """
        candidates = pool[: self._pool_limit]
        if not candidates:
            return []

        prompt = self._prompt_builder.build(profile, candidates)
        text = await self._generate(prompt.render())

        elements = parse_ranking_response(text, prompt.valid_ids)
        by_id = {item.id: item for item in candidates}
        results = [
            RankedResult.from_item(
                by_id[element.id],
                element.score,
                element.reason.strip() or DEFAULT_AI_REASON,
            )
            for element in elements
            if element.score >= self._min_score
        ]

        if not results:
            logger.info(f"No good matches among {len(candidates)} ranked candidates")
        return sort_results(results)[: self._max_results]

    async def _generate(self, prompt_text: str) -> str:
        try:
            return await self._circuit_breaker.call(
                lambda: self._service.generate(prompt_text)
            )
        except CircuitBreakerOpenError as e:
            raise RankingUnavailableError("circuit breaker open") from e


# =============================================================================
# Relevance Ranker
# =============================================================================


class RelevanceRanker:
    """
    Chooses between AI and heuristic ranking.
    The choice is made solely by PreferenceProfile.has_subjective_signal().
    """

    def __init__(
        self,
        ai_strategy: RankingStrategy,
        heuristic_strategy: RankingStrategy,
    ) -> None:
        self._ai_strategy = ai_strategy
        self._heuristic_strategy = heuristic_strategy

    def select_strategy(self, profile: PreferenceProfile) -> RankingStrategy:
        if profile.has_subjective_signal():
            return self._ai_strategy
        return self._heuristic_strategy

    async def rank(
        self,
        pool: List[CatalogItem],
        profile: PreferenceProfile,
    ) -> List[RankedResult]:
        strategy = self.select_strategy(profile)
        results = await strategy.rank(pool, profile)
        logger.debug(f"Ranked {len(pool)} candidates with {strategy.name} -> {len(results)} results")
        return results
