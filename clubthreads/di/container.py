"""Application DI container.

Builds the repository, metrics adapter, session stores and the topic
threads use case from configuration.
"""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import Optional

from clubthreads.core.config import ThreadsConfig
from clubthreads.observability.metrics import ensure_metrics_server
from clubthreads.observability.metrics_adapter import (
    MetricsAdapter,
    NoopMetricsAdapter,
    PrometheusMetricsAdapter,
)
from clubthreads.repositories.post_repository import PostRepository
from clubthreads.services.collapse.session_store import (
    InMemorySessionStore,
    RedisSessionStore,
    SessionStoreProtocol,
)
from clubthreads.services.usecases.load_topic_threads import TopicThreadsUseCase

logger = logging.getLogger(__name__)


class Container:
    """Container wiring the clubthreads services."""

    def __init__(self, *, config: ThreadsConfig) -> None:
        self._config = config
        self._repository = PostRepository(config.data_dir)
        self._metrics: MetricsAdapter = (
            PrometheusMetricsAdapter() if config.enable_metrics else NoopMetricsAdapter()
        )
        self._memory_sessions: dict[str, InMemorySessionStore] = {}
        self._redis_stores: list[RedisSessionStore] = []

    @property
    def config(self) -> ThreadsConfig:
        return self._config

    @property
    def repository(self) -> PostRepository:
        return self._repository

    @property
    def metrics(self) -> MetricsAdapter:
        return self._metrics

    def initialize_runtime(self) -> None:
        """Start the metrics endpoint when enabled and a port is configured."""
        if self._config.enable_metrics and self._config.metrics_port:
            ensure_metrics_server(self._config.metrics_port)

    def provide_session_store(
        self, session_id: Optional[str]
    ) -> Optional[SessionStoreProtocol]:
        """Session store for a viewer, or None when there is no session."""
        if not session_id:
            return None
        if self._config.collapse_store == "redis":
            store = RedisSessionStore.from_url(
                self._config.redis_url,
                session_id=session_id,
                password=self._config.redis_password,
                namespace=self._config.collapse_state_namespace,
                ttl_seconds=self._config.collapse_state_ttl_seconds,
            )
            self._redis_stores.append(store)
            return store
        return self._memory_sessions.setdefault(session_id, InMemorySessionStore())

    def provide_topic_threads(
        self, *, session_id: Optional[str] = None, orphan_policy: Optional[str] = None
    ) -> TopicThreadsUseCase:
        return TopicThreadsUseCase(
            repository=self._repository,
            collapse_store=self.provide_session_store(session_id),
            metrics=self._metrics,
            orphan_policy=orphan_policy or self._config.orphan_policy,
            session_key_prefix=self._config.session_key_prefix,
        )

    def close(self) -> None:
        """Release Redis connections opened for session stores."""
        for store in self._redis_stores:
            with suppress(Exception):
                store.close()
        self._redis_stores.clear()
        logger.debug("Container closed")
