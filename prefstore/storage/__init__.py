"""Storage backend selection helpers."""

from __future__ import annotations

from prefstore.config.settings import settings
from prefstore.core.errors import BackendUnavailableError
from prefstore.storage.file_store import FilePreferenceBackend
from prefstore.storage.kv import PreferenceBackend
from prefstore.storage.postgres_store import PostgresPreferenceBackend
from prefstore.storage.redis_store import RedisPreferenceBackend
from prefstore.storage.sqlite_store import SqlitePreferenceBackend


def create_backend() -> PreferenceBackend:
    backend = settings.storage_backend.strip().lower()
    if backend == "file":
        return FilePreferenceBackend(data_dir=settings.data_dir, fsync=settings.fsync_on_commit)
    if backend == "sqlite":
        return SqlitePreferenceBackend(db_path=settings.sqlite_db_path, lock_retries=settings.sqlite_lock_retries)
    if backend == "redis":
        return RedisPreferenceBackend(redis_url=settings.redis_url, key_prefix=settings.redis_key_prefix)
    if backend in {"postgres", "postgresql"}:
        return PostgresPreferenceBackend(dsn=settings.postgres_dsn, schema=settings.postgres_schema)
    raise BackendUnavailableError(f"unknown storage backend: {settings.storage_backend!r}")
