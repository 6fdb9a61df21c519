"""Error types raised by the engine."""

from __future__ import annotations


class HealthEngineError(Exception):
    """Base class for relationship health errors."""


class ValidationError(HealthEngineError):
    """Raised when an identifying field is missing or malformed.

    Never retried; the caller has to fix the input.
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize error.

        Args:
            field: Name of the offending field.
            message: Human-readable reason.
        """
        self.field = field
        super().__init__(f"{field}: {message}")


class PersistenceError(HealthEngineError):
    """Raised when the store cannot be read or written."""

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        """Initialize error.

        Args:
            operation: Store operation that failed.
            cause: Underlying driver or ORM exception.
        """
        self.operation = operation
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Store operation '{operation}' failed{detail}")


class RecommendationNotFoundError(HealthEngineError):
    """Raised when a recommendation is not found."""

    def __init__(self, recommendation_id: object) -> None:
        """Initialize error.

        Args:
            recommendation_id: The recommendation ID that was not found.
        """
        self.recommendation_id = recommendation_id
        super().__init__(f"Recommendation {recommendation_id} not found")
