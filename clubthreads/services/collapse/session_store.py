"""Session-scoped key/value stores for per-viewer collapse state.

``InMemorySessionStore`` holds one viewer session in a dict.
``RedisSessionStore`` keeps sessions in Redis under
``{namespace}:{session_id}:{key}`` so state survives across requests.
"""

from __future__ import annotations

import logging
import re
from typing import Optional, Protocol

import redis

from clubthreads.core.exceptions import SessionStoreError

logger = logging.getLogger(__name__)

_GLOB_SPECIALS = re.compile(r"([*?\[\]\\])")


class SessionStoreProtocol(Protocol):
    """Minimal key/value contract for session-scoped state."""

    def get(self, key: str) -> Optional[str]:  # noqa: D401
        """Return the value for key, or None if absent."""

    def set(self, key: str, value: str) -> None:  # noqa: D401
        """Store value under key."""

    def delete(self, *keys: str) -> int:  # noqa: D401
        """Remove keys and return how many existed."""

    def keys_with_prefix(self, prefix: str) -> list[str]:  # noqa: D401
        """Return all keys starting with prefix."""


class InMemorySessionStore:
    """Dict-backed store for a single viewer session."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self._data.pop(key, None) is not None:
                removed += 1
        return removed

    def keys_with_prefix(self, prefix: str) -> list[str]:
        return [key for key in self._data if key.startswith(prefix)]

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data


def escape_glob(value: str) -> str:
    """Escape Redis MATCH glob metacharacters in value."""
    return _GLOB_SPECIALS.sub(r"\\\1", value)


class RedisSessionStore:
    """Redis-backed store for one viewer session.

    All Redis failures surface as ``SessionStoreError``.
    """

    def __init__(
        self,
        client: redis.Redis,
        *,
        session_id: str,
        namespace: str = "clubthreads",
        ttl_seconds: int = 0,
    ) -> None:
        """Initialize store.

        Args:
            client: Redis client (``decode_responses=True`` recommended)
            session_id: Viewer session identifier
            namespace: Key namespace shared by all sessions
            ttl_seconds: Expiry applied on every write; 0 disables expiry
        """
        self._client = client
        self._session_id = session_id
        self._namespace = namespace
        self._ttl = ttl_seconds
        self._base = f"{namespace}:{session_id}:"

    @classmethod
    def from_url(
        cls,
        redis_url: str,
        *,
        session_id: str,
        password: Optional[str] = None,
        namespace: str = "clubthreads",
        ttl_seconds: int = 0,
    ) -> "RedisSessionStore":
        client = redis.from_url(redis_url, password=password, decode_responses=True)
        return cls(
            client, session_id=session_id, namespace=namespace, ttl_seconds=ttl_seconds
        )

    @property
    def session_id(self) -> str:
        return self._session_id

    def _full_key(self, key: str) -> str:
        return f"{self._base}{key}"

    def _strip(self, full_key: str | bytes) -> str:
        if isinstance(full_key, bytes):
            full_key = full_key.decode("utf-8")
        return full_key[len(self._base) :]

    def get(self, key: str) -> Optional[str]:
        try:
            value = self._client.get(self._full_key(key))
        except redis.RedisError as e:
            raise SessionStoreError(f"Redis GET failed: {e}", "get") from e
        if isinstance(value, bytes):
            return value.decode("utf-8")
        return value

    def set(self, key: str, value: str) -> None:
        try:
            self._client.set(self._full_key(key), value, ex=self._ttl or None)
        except redis.RedisError as e:
            raise SessionStoreError(f"Redis SET failed: {e}", "set") from e

    def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        try:
            return int(self._client.delete(*(self._full_key(k) for k in keys)))
        except redis.RedisError as e:
            raise SessionStoreError(f"Redis DEL failed: {e}", "delete") from e

    def keys_with_prefix(self, prefix: str) -> list[str]:
        pattern = escape_glob(self._full_key(prefix)) + "*"
        try:
            return [
                self._strip(k) for k in self._client.scan_iter(match=pattern, count=100)
            ]
        except redis.RedisError as e:
            raise SessionStoreError(f"Redis SCAN failed: {e}", "scan") from e

    def close(self) -> None:
        try:
            self._client.close()
        except Exception as e:
            logger.warning(f"Error closing Redis session store: {e}")
