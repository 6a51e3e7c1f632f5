"""Repository implementations package."""
from .memory import InMemoryHistoryRepository

__all__ = ["InMemoryHistoryRepository"]
