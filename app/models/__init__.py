"""Models package - domain entities and interfaces."""
from .interfaces import (
    CatalogService,
    HistoryRepository,
    HistorySet,
    RankingService,
)
from .schemas import (
    CatalogItem,
    CatalogSummary,
    DiscoverPage,
    DiscoverQuery,
    ErrorResponse,
    Genre,
    PreferenceProfile,
    RankedElement,
    RankedResult,
    SearchResponse,
)

__all__ = [
    # Interfaces
    "CatalogService",
    "HistoryRepository",
    "HistorySet",
    "RankingService",
    # Schemas
    "CatalogItem",
    "CatalogSummary",
    "DiscoverPage",
    "DiscoverQuery",
    "ErrorResponse",
    "Genre",
    "PreferenceProfile",
    "RankedElement",
    "RankedResult",
    "SearchResponse",
]
