"""Correlation IDs tying together the log lines of one topic load or reset."""

import contextvars
import uuid
from typing import Optional

_correlation_id: contextvars.ContextVar[Optional[str]] = contextvars.ContextVar(
    "correlation_id", default=None
)


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    """Return the correlation ID of the current context, if any."""
    return _correlation_id.get()


class CorrelationContext:
    """Set a correlation ID for the duration of a ``with`` block.

    Reuses the surrounding ID when one is already active and none is given,
    so nested operations (reset_view -> load) share one ID.

    Usage:
        with CorrelationContext() as correlation_id:
            logger.info("Loading topic", extra={"topic_id": topic_id})
    """

    def __init__(self, correlation_id: Optional[str] = None):
        self.correlation_id = (
            correlation_id or get_correlation_id() or generate_correlation_id()
        )
        self._token: Optional[contextvars.Token] = None

    def __enter__(self) -> str:
        self._token = _correlation_id.set(self.correlation_id)
        return self.correlation_id

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._token is not None:
            _correlation_id.reset(self._token)
            self._token = None
