"""
History exclusion.
Removes movies the user has already liked or disliked from the candidate pool.
"""
import logging
from typing import List

from app.models.interfaces import HistorySet
from app.models.schemas import CatalogItem

logger = logging.getLogger(__name__)


def exclude_history(pool: List[CatalogItem], history: HistorySet) -> List[CatalogItem]:
    """Return the pool without judged movies, preserving order.

    Must run before the pool is capped for ranking so exclusion never shrinks
    the ranker's input below its intended size.
    """
    if not history:
        return list(pool)

    remaining = [item for item in pool if item.id not in history]
    removed = len(pool) - len(remaining)
    if removed:
        logger.info(f"Excluded {removed} already-judged movies, {len(remaining)} remaining")
    return remaining
