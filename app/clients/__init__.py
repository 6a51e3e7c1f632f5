"""Clients package - outbound HTTP integrations."""
from .cached_catalog import CachedCatalog
from .catalog import CatalogClient
from .gemini import GeminiRankingClient

__all__ = ["CachedCatalog", "CatalogClient", "GeminiRankingClient"]
