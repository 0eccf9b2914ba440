"""Backend abstraction for named preference stores."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod

from prefstore.core.errors import InvalidStoreNameError


_STORE_NAME_RE = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_.\-]*")


def validate_store_name(store_name: str) -> str:
    if not isinstance(store_name, str) or not _STORE_NAME_RE.fullmatch(store_name):
        raise InvalidStoreNameError(f"invalid store name: {store_name!r}")
    return store_name


class PreferenceBackend(ABC):
    @abstractmethod
    def read(self, store_name: str, key: str) -> str | None:
        """Return the stored value, or None when the store or key is absent."""
        pass

    @abstractmethod
    def commit(self, store_name: str, key: str, value: str) -> None:
        """Durably replace one value; raise CommitFailedError if it did not persist."""
        pass

    def close(self) -> None:
        pass
