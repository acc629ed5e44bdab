"""Prometheus metrics for thread building and collapse-state resets.

Labels stay low-cardinality: topic and post ids are never used as labels.
"""

from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)


threads_built_total = Counter(
    "threads_built_total",
    "Number of topic forests built",
    labelnames=("orphan_policy", "worker"),
)

thread_build_duration_seconds = Histogram(
    "thread_build_duration_seconds",
    "Time spent building a topic forest from flat posts",
    labelnames=("worker",),
    buckets=(0.0005, 0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1, 5),
)

thread_posts_total = Counter(
    "thread_posts_total",
    "Number of posts placed into built forests",
    labelnames=("worker",),
)

orphans_dropped_total = Counter(
    "orphans_dropped_total",
    "Number of posts left out of a forest because their parent is missing",
    labelnames=("worker",),
)

collapse_resets_total = Counter(
    "collapse_resets_total",
    "Number of topic collapse-state resets",
    labelnames=("worker",),
)

collapse_reset_failures_total = Counter(
    "collapse_reset_failures_total",
    "Number of collapse-state resets that failed (swallowed)",
    labelnames=("worker", "error_type"),
)


_server_started: bool = False


def ensure_metrics_server(port: int) -> None:
    """Start Prometheus metrics HTTP server once per process.

    Args:
        port: Port to bind the metrics endpoint to.
    """
    global _server_started
    if _server_started:
        return
    try:
        start_http_server(port)
        _server_started = True
        logger.info("Prometheus metrics server started", extra={"port": port})
    except Exception as e:
        # Don't fail the service if metrics cannot be started
        logger.warning("Failed to start metrics server: %s", e, exc_info=True)
