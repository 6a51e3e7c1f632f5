"""Core infrastructure components."""
from .cache import CacheInterface, InMemoryCache
from .circuit_breaker import CircuitBreaker, CircuitState
from .exceptions import (
    AppException,
    CatalogUnavailableError,
    CircuitBreakerOpenError,
    NotFoundError,
    RankingUnavailableError,
    SearchFailure,
    ServiceUnavailableError,
)

__all__ = [
    "AppException",
    "CacheInterface",
    "CatalogUnavailableError",
    "CircuitBreaker",
    "CircuitBreakerOpenError",
    "CircuitState",
    "InMemoryCache",
    "NotFoundError",
    "RankingUnavailableError",
    "SearchFailure",
    "ServiceUnavailableError",
]
