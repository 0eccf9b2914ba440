"""JSON-file preference stores with atomic replace-on-commit."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path

from prefstore.core.errors import CommitFailedError, CorruptStoreError
from prefstore.storage.kv import PreferenceBackend, validate_store_name
from prefstore.util.logger import logger


class FilePreferenceBackend(PreferenceBackend):
    """One ``<store>.json`` object per named store under ``data_dir``.

    A commit never edits the live file: the whole mapping is written to a
    temporary sibling and moved over the target with ``os.replace``, so readers
    in any process see either the previous mapping or the new one.
    """

    def __init__(self, data_dir: str = "data/prefs", fsync: bool = True) -> None:
        self.data_dir = Path(data_dir)
        self.fsync = fsync
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _path(self, store_name: str) -> Path:
        return self.data_dir / f"{validate_store_name(store_name)}.json"

    def _lock_for(self, store_name: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(store_name)
            if lock is None:
                lock = threading.Lock()
                self._locks[store_name] = lock
            return lock

    def _load(self, path: Path) -> dict[str, object]:
        """Whole store object; entries written by other tools are kept as-is."""
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except UnicodeDecodeError as exc:
            raise CorruptStoreError(f"store file is not valid utf-8 path={path}") from exc
        try:
            loaded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CorruptStoreError(f"store file is not valid json path={path}") from exc
        if not isinstance(loaded, dict):
            raise CorruptStoreError(f"store file is not a json object path={path}")
        return loaded

    def _write_atomic(self, path: Path, data: dict[str, object]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=2, sort_keys=True)
                handle.flush()
                if self.fsync:
                    os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
        if self.fsync:
            # the rename already installed the new file; a directory fsync error cannot undo it
            try:
                self._fsync_dir(path.parent)
            except OSError as exc:
                logger.warning("file store directory fsync failed path=%s error=%s", path.parent, exc)

    @staticmethod
    def _fsync_dir(directory: Path) -> None:
        if os.name != "posix":
            return
        dir_fd = os.open(directory, os.O_RDONLY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)

    def read(self, store_name: str, key: str) -> str | None:
        path = self._path(store_name)
        value = self._load(path).get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            logger.warning("file store ignoring non-string value path=%s key=%s", path, key)
            return None
        return value

    def commit(self, store_name: str, key: str, value: str) -> None:
        path = self._path(store_name)
        with self._lock_for(store_name):
            data = self._load(path)
            data[key] = value
            try:
                self._write_atomic(path, data)
            except OSError as exc:
                raise CommitFailedError(f"file commit failed path={path} error={exc}") from exc
        logger.debug("file store committed path=%s key=%s", path, key)
