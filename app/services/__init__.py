"""Services package - business logic layer."""
from .candidate_filter import CandidateFilter
from .history import exclude_history
from .prompting import RankingPromptBuilder, parse_ranking_response
from .ranking import (
    AIRankingStrategy,
    HeuristicRankingStrategy,
    RankingStrategy,
    RelevanceRanker,
)
from .search import SearchService

__all__ = [
    "AIRankingStrategy",
    "CandidateFilter",
    "HeuristicRankingStrategy",
    "RankingPromptBuilder",
    "RankingStrategy",
    "RelevanceRanker",
    "SearchService",
    "exclude_history",
    "parse_ranking_response",
]
