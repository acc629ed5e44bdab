"""Metrics adapter keeping services free of direct Prometheus usage.

Provides a Prometheus-backed implementation and a no-op fallback used when
metrics are disabled or in tests.
"""

from __future__ import annotations

import logging
import os
from typing import Protocol

from clubthreads.observability.metrics import (
    collapse_reset_failures_total,
    collapse_resets_total,
    orphans_dropped_total,
    thread_build_duration_seconds,
    thread_posts_total,
    threads_built_total,
)

logger = logging.getLogger(__name__)


class MetricsAdapter(Protocol):
    """Metrics interface used by the use case and collapse-state helpers."""

    def observe_build(
        self,
        *,
        orphan_policy: str,
        duration_seconds: float,
        post_count: int,
        dropped_count: int,
    ) -> None:
        """Record one forest build."""

    def inc_collapse_reset(self) -> None:
        """Increment when a topic's collapse state was cleared."""

    def inc_collapse_reset_failed(self, error_type: str) -> None:
        """Increment when clearing collapse state failed."""


class PrometheusMetricsAdapter:
    """Prometheus-backed metrics adapter.

    Handles exceptions internally to avoid impacting the main workflow.
    """

    def __init__(self) -> None:
        self._worker_id = os.getenv("HOSTNAME", "clubthreads-1")

    def observe_build(
        self,
        *,
        orphan_policy: str,
        duration_seconds: float,
        post_count: int,
        dropped_count: int,
    ) -> None:
        try:
            threads_built_total.labels(
                orphan_policy=orphan_policy, worker=self._worker_id
            ).inc()
            thread_build_duration_seconds.labels(worker=self._worker_id).observe(
                duration_seconds
            )
            thread_posts_total.labels(worker=self._worker_id).inc(post_count)
            if dropped_count:
                orphans_dropped_total.labels(worker=self._worker_id).inc(
                    dropped_count
                )
        except Exception:
            logger.debug(
                "Prometheus observe_build failed (non-fatal)",
                extra={"post_count": post_count, "dropped_count": dropped_count},
                exc_info=True,
            )

    def inc_collapse_reset(self) -> None:
        try:
            collapse_resets_total.labels(worker=self._worker_id).inc()
        except Exception:
            logger.debug("Prometheus inc_collapse_reset failed", exc_info=True)

    def inc_collapse_reset_failed(self, error_type: str) -> None:
        try:
            collapse_reset_failures_total.labels(
                worker=self._worker_id, error_type=error_type
            ).inc()
        except Exception:
            logger.debug("Prometheus inc_collapse_reset_failed failed", exc_info=True)


class NoopMetricsAdapter:
    """No-op adapter used when metrics are disabled."""

    def observe_build(
        self,
        *,
        orphan_policy: str,
        duration_seconds: float,
        post_count: int,
        dropped_count: int,
    ) -> None:  # noqa: ARG002
        return

    def inc_collapse_reset(self) -> None:
        return

    def inc_collapse_reset_failed(self, error_type: str) -> None:  # noqa: ARG002
        return
