"""PostgreSQL-backed preference store."""

from __future__ import annotations

import re

from prefstore.core.errors import BackendUnavailableError, CommitFailedError
from prefstore.storage.kv import PreferenceBackend, validate_store_name
from prefstore.util.logger import logger

try:
    import psycopg
except Exception:  # pragma: no cover - optional dependency
    psycopg = None


class PostgresPreferenceBackend(PreferenceBackend):
    def __init__(self, *, dsn: str, schema: str = "public") -> None:
        if psycopg is None:  # pragma: no cover - optional dependency
            raise BackendUnavailableError("psycopg package is not installed, cannot use PostgresPreferenceBackend")
        if not dsn.strip():
            raise BackendUnavailableError("postgres dsn is empty")
        if not re.fullmatch(r"[A-Za-z_][A-Za-z0-9_]*", schema):
            raise BackendUnavailableError("postgres schema contains invalid characters")

        self.dsn = dsn
        self.schema = schema
        self.table = f"{schema}.preferences"
        self._init_db()

    def _connect(self):
        return psycopg.connect(self.dsn)

    def _init_db(self) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(f"CREATE SCHEMA IF NOT EXISTS {self.schema}")
                cur.execute(
                    f"""
                    CREATE TABLE IF NOT EXISTS {self.table} (
                      store_name TEXT NOT NULL,
                      pref_key TEXT NOT NULL,
                      value TEXT NOT NULL,
                      updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
                      PRIMARY KEY (store_name, pref_key)
                    )
                    """
                )
            conn.commit()
        logger.info("postgres preference store initialized schema=%s", self.schema)

    def read(self, store_name: str, key: str) -> str | None:
        validate_store_name(store_name)
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    f"SELECT value FROM {self.table} WHERE store_name = %s AND pref_key = %s",
                    (store_name, key),
                )
                row = cur.fetchone()
        if not row:
            return None
        return str(row[0])

    def commit(self, store_name: str, key: str, value: str) -> None:
        validate_store_name(store_name)
        try:
            with self._connect() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        f"""
                        INSERT INTO {self.table} (store_name, pref_key, value, updated_at)
                        VALUES (%s, %s, %s, now())
                        ON CONFLICT (store_name, pref_key)
                        DO UPDATE SET value = EXCLUDED.value, updated_at = EXCLUDED.updated_at
                        """,
                        (store_name, key, value),
                    )
                conn.commit()
        except psycopg.Error as exc:
            raise CommitFailedError(f"postgres commit failed store={store_name} error={exc}") from exc
        logger.debug("postgres store committed store=%s key=%s", store_name, key)
