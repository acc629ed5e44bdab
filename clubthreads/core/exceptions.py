"""Exception types for the collaborators around the thread builder.

The builder itself is pure and raises nothing beyond ``ValueError`` for a bad
orphan policy; these cover storage and session-state access.
"""

from typing import Optional


class ClubThreadsError(Exception):
    """Base exception for all clubthreads errors."""

    def __init__(  # noqa: B042
        self,
        message: str,
        *,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize error with message and optional correlation id."""
        super().__init__(message)
        self.correlation_id = correlation_id


class TopicNotFoundError(ClubThreadsError):
    """No stored posts exist for the requested topic."""

    def __init__(  # noqa: B042
        self,
        message: str,
        topic_id: str,
        *,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize topic not found error.

        Args:
            message: Error message
            topic_id: Topic identifier that wasn't found
            correlation_id: Optional correlation ID for tracing
        """
        super().__init__(message, correlation_id=correlation_id)
        self.topic_id = topic_id


class PostDataError(ClubThreadsError):
    """Stored post records could not be parsed.

    Raised when:
    - The topic file is not valid JSON
    - A record fails Pydantic validation
    """

    def __init__(  # noqa: B042
        self,
        message: str,
        validation_errors: Optional[list] = None,
        *,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize post data error.

        Args:
            message: Error message
            validation_errors: List of validation errors from Pydantic
            correlation_id: Optional correlation ID for tracing
        """
        self.validation_errors = validation_errors or []
        super().__init__(message, correlation_id=correlation_id)


class SessionStoreError(ClubThreadsError):
    """Session key/value store operation failed (e.g. Redis unreachable)."""

    def __init__(  # noqa: B042
        self,
        message: str,
        operation: str,
        *,
        correlation_id: Optional[str] = None,
    ) -> None:
        """Initialize session store error.

        Args:
            message: Error message
            operation: Store operation that failed (get, set, delete, scan)
            correlation_id: Optional correlation ID for tracing
        """
        super().__init__(message, correlation_id=correlation_id)
        self.operation = operation
