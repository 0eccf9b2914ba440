"""Redis-backed preference store."""

from __future__ import annotations

from typing import Any

from prefstore.core.errors import BackendUnavailableError, CommitFailedError
from prefstore.storage.kv import PreferenceBackend, validate_store_name
from prefstore.util.logger import logger

try:
    import redis
except Exception:  # pragma: no cover - optional dependency
    redis = None


def _to_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


class RedisPreferenceBackend(PreferenceBackend):
    """Each named store is one hash at ``<prefix>:prefs:<store>``; HSET is atomic per field."""

    def __init__(self, *, redis_url: str = "", key_prefix: str = "prefstore", client: Any = None) -> None:
        if client is None:
            if redis is None:  # pragma: no cover - depends on optional package
                raise BackendUnavailableError("redis package is not installed, cannot use RedisPreferenceBackend")
            client = redis.Redis.from_url(redis_url, decode_responses=False)
        self.client = client
        self.key_prefix = key_prefix.strip() or "prefstore"

    def _store_key(self, store_name: str) -> str:
        return f"{self.key_prefix}:prefs:{validate_store_name(store_name)}"

    def read(self, store_name: str, key: str) -> str | None:
        raw = self.client.hget(self._store_key(store_name), key)
        if raw is None:
            return None
        return _to_str(raw)

    def commit(self, store_name: str, key: str, value: str) -> None:
        store_key = self._store_key(store_name)
        try:
            self.client.hset(store_key, key, value.encode("utf-8"))
        except Exception as exc:
            raise CommitFailedError(f"redis commit failed key={store_key} error={exc}") from exc
        logger.debug("redis store committed key=%s field=%s", store_key, key)

    def close(self) -> None:
        close = getattr(self.client, "close", None)
        if callable(close):
            close()
