"""Named durable string preferences over a pluggable backend."""

from __future__ import annotations

from prefstore.core.errors import PrefStoreError
from prefstore.storage.kv import PreferenceBackend, validate_store_name
from prefstore.util.logger import logger


class PreferenceStore:
    """get/put access to named stores.

    Reads never fail: a missing store, missing key or unreadable store yields
    the caller's default. Writes report durability through their return value
    and leave the previous value in place when the commit fails.
    """

    def __init__(self, backend: PreferenceBackend) -> None:
        self.backend = backend

    def get(self, store_name: str, key: str, default: str | None = None) -> str | None:
        validate_store_name(store_name)
        try:
            value = self.backend.read(store_name, key)
        except Exception as exc:
            logger.warning("preference read failed store=%s key=%s error=%s", store_name, key, exc)
            return default
        if value is None:
            return default
        return value

    def put(self, store_name: str, key: str, value: str) -> bool:
        validate_store_name(store_name)
        if not isinstance(value, str):
            raise TypeError(f"preference values must be str, got {type(value).__name__}")
        try:
            self.backend.commit(store_name, key, value)
        except (PrefStoreError, OSError) as exc:
            logger.warning("preference commit failed store=%s key=%s error=%s", store_name, key, exc)
            return False
        logger.info("preference committed store=%s key=%s size=%d", store_name, key, len(value))
        return True

    def handle(self, store_name: str) -> NamedPreferences:
        return NamedPreferences(self, validate_store_name(store_name))

    def close(self) -> None:
        self.backend.close()


class NamedPreferences:
    """A PreferenceStore bound to one store name."""

    def __init__(self, store: PreferenceStore, store_name: str) -> None:
        self.store = store
        self.name = store_name

    def get(self, key: str, default: str | None = None) -> str | None:
        return self.store.get(self.name, key, default)

    def put(self, key: str, value: str) -> bool:
        return self.store.put(self.name, key, value)
