"""
Collaborator interfaces (abstractions).
Using Protocol for structural subtyping (duck typing with type hints).
These define the contracts that external services and stores must follow.
"""
from typing import FrozenSet, List, Optional, Protocol, runtime_checkable

from app.models.schemas import CatalogItem, DiscoverPage, DiscoverQuery, Genre

HistorySet = FrozenSet[int]


@runtime_checkable
class CatalogService(Protocol):
    """
    Interface for the external movie catalog.
    Production: TMDB client, usually behind the cache wrapper.
    Testing: In-memory fake.
    """

    async def discover(self, query: DiscoverQuery, page: int) -> DiscoverPage:
        """
        Fetch one page of discovery results, sorted by popularity.

        Args:
            query: Server-side constraints (years, rating, language)
            page: 1-based page number

        Returns:
            The page, possibly with no results
        """
        ...

    async def get_detail(self, movie_id: int) -> Optional[CatalogItem]:
        """
        Fetch the full record for one movie.

        Args:
            movie_id: Catalog identifier

        Returns:
            CatalogItem, or None when the catalog does not know the id
        """
        ...

    async def get_genre_vocabulary(self) -> List[Genre]:
        """
        Fetch the catalog's genre list.

        Returns:
            All (id, name) pairs
        """
        ...


@runtime_checkable
class RankingService(Protocol):
    """
    Interface for the generative ranking service.
    Production: Gemini generateContent client.
    Testing: Scripted fake returning canned text.
    """

    async def generate(self, prompt: str) -> str:
        """
        Single-shot text generation.

        Args:
            prompt: Complete prompt text

        Returns:
            Raw response text (untrusted)

        Raises:
            RankingUnavailableError: On network, timeout or status failures
        """
        ...


@runtime_checkable
class HistoryRepository(Protocol):
    """
    Interface for the user store's judgement history.
    Production: user database owned by another service.
    Testing: In-memory implementation.
    """

    async def get_history(self, user_id: str) -> HistorySet:
        """
        Fetch ids of movies the user liked or disliked.

        Args:
            user_id: User identifier

        Returns:
            Immutable set of movie ids (empty for unknown users)
        """
        ...
