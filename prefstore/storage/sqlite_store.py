"""SQLite-backed preference store."""

from __future__ import annotations

import sqlite3
import time
from pathlib import Path
from typing import Callable, TypeVar

from prefstore.core.errors import CommitFailedError
from prefstore.storage.kv import PreferenceBackend, validate_store_name
from prefstore.util.logger import logger


T = TypeVar("T")


class SqlitePreferenceBackend(PreferenceBackend):
    def __init__(self, db_path: str = "data/prefstore.db", lock_retries: int = 5) -> None:
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.lock_retries = max(1, lock_retries)
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, timeout=5.0)
        conn.execute("PRAGMA busy_timeout=5000")
        return conn

    def _init_db(self) -> None:
        with self._connect() as conn:
            conn.execute("PRAGMA journal_mode=WAL")
            # FULL: a committed transaction survives power loss
            conn.execute("PRAGMA synchronous=FULL")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS preferences (
                  store_name TEXT NOT NULL,
                  pref_key TEXT NOT NULL,
                  value TEXT NOT NULL,
                  updated_at REAL NOT NULL,
                  PRIMARY KEY (store_name, pref_key)
                )
                """
            )
            conn.commit()
        logger.info("sqlite preference store initialized path=%s", self.db_path)

    def _with_retry(self, fn: Callable[[], T]) -> T:
        for attempt in range(self.lock_retries):
            try:
                return fn()
            except sqlite3.OperationalError as exc:
                if "locked" not in str(exc).lower() or attempt == self.lock_retries - 1:
                    raise
                time.sleep(0.01 * (attempt + 1))
        raise RuntimeError("unreachable retry state")

    def read(self, store_name: str, key: str) -> str | None:
        validate_store_name(store_name)

        def _read() -> tuple | None:
            with self._connect() as conn:
                return conn.execute(
                    "SELECT value FROM preferences WHERE store_name = ? AND pref_key = ?",
                    (store_name, key),
                ).fetchone()

        row = self._with_retry(_read)
        if not row:
            return None
        return str(row[0])

    def commit(self, store_name: str, key: str, value: str) -> None:
        validate_store_name(store_name)

        def _write() -> None:
            with self._connect() as conn:
                conn.execute(
                    """
                    INSERT INTO preferences (store_name, pref_key, value, updated_at)
                    VALUES (?, ?, ?, ?)
                    ON CONFLICT(store_name, pref_key)
                    DO UPDATE SET value=excluded.value, updated_at=excluded.updated_at
                    """,
                    (store_name, key, value, time.time()),
                )
                conn.commit()

        try:
            self._with_retry(_write)
        except sqlite3.Error as exc:
            raise CommitFailedError(f"sqlite commit failed store={store_name} error={exc}") from exc
        logger.debug("sqlite store committed store=%s key=%s", store_name, key)
