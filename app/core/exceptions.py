"""
Custom exception hierarchy for centralized error handling.
All exceptions map to appropriate HTTP status codes.

Expected pipeline outcomes (missing catalog item, empty pool, no good
matches, malformed ranking output) are not exceptions; they surface as
absences or empty result lists. Only infrastructure failures are raised
past the search service.
"""
from typing import Any, Dict, Optional


class AppException(Exception):
    """Base exception for all application errors."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        error_code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response format."""
        return {
            "error": {
                "code": self.error_code,
                "message": self.message,
                "details": self.details,
            }
        }


class NotFoundError(AppException):
    """Resource not found."""

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(
            message=f"{resource} not found: {identifier}",
            status_code=404,
            error_code="NOT_FOUND",
            details={"resource": resource, "identifier": identifier},
        )


class ServiceUnavailableError(AppException):
    """Dependency service is unavailable."""

    def __init__(
        self,
        service_name: str,
        reason: str = "Unknown error",
        error_code: str = "SERVICE_UNAVAILABLE",
    ) -> None:
        super().__init__(
            message=f"Service temporarily unavailable: {service_name} ({reason})",
            status_code=503,
            error_code=error_code,
            details={"service": service_name, "reason": reason, "retryable": True},
        )
        self.service_name = service_name
        self.reason = reason


class SearchFailure(ServiceUnavailableError):
    """Retryable infrastructure failure that aborts a movie search."""


class CatalogUnavailableError(SearchFailure):
    """The external movie catalog could not be reached or answered with an error."""

    def __init__(self, reason: str = "Unknown error") -> None:
        super().__init__(
            service_name="catalog",
            reason=reason,
            error_code="CATALOG_UNAVAILABLE",
        )


class RankingUnavailableError(SearchFailure):
    """The generative ranking service could not be reached or answered with an error."""

    def __init__(self, reason: str = "Unknown error") -> None:
        super().__init__(
            service_name="ranking",
            reason=reason,
            error_code="RANKING_UNAVAILABLE",
        )


class CircuitBreakerOpenError(AppException):
    """Circuit breaker is open - service calls blocked."""

    def __init__(self, service_name: str) -> None:
        super().__init__(
            message=f"Circuit breaker open for: {service_name}",
            status_code=503,
            error_code="CIRCUIT_BREAKER_OPEN",
            details={"service": service_name},
        )
