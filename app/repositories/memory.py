"""
In-memory repository implementations.
Used for prototyping and testing.
Production would replace these with the user store's own persistence.
"""
from threading import Lock
from typing import Dict, Iterable, Optional, Set

from app.models.interfaces import HistorySet


class InMemoryHistoryRepository:
    """
    In-memory implementation of HistoryRepository.
    Simulates the user store's liked/disliked movie lists.
    """

    def __init__(
        self,
        liked: Optional[Dict[str, Iterable[int]]] = None,
        disliked: Optional[Dict[str, Iterable[int]]] = None,
    ) -> None:
        self._liked: Dict[str, Set[int]] = {
            user: set(ids) for user, ids in (liked or {}).items()
        }
        self._disliked: Dict[str, Set[int]] = {
            user: set(ids) for user, ids in (disliked or {}).items()
        }
        self._lock = Lock()

    async def get_history(self, user_id: str) -> HistorySet:
        """Fetch every movie id the user liked or disliked."""
        with self._lock:
            return frozenset(
                self._liked.get(user_id, set()) | self._disliked.get(user_id, set())
            )
