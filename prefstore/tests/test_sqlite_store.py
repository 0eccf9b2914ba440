import sqlite3
from concurrent.futures import ThreadPoolExecutor

import pytest

from prefstore.core.errors import CommitFailedError
from prefstore.storage.sqlite_store import SqlitePreferenceBackend


def test_sqlite_commit_and_read(tmp_path):
    backend = SqlitePreferenceBackend(db_path=str(tmp_path / "prefs.db"))
    assert backend.read("RedirectData", "text") is None

    backend.commit("RedirectData", "text", "hello")
    backend.commit("RedirectData", "text", "world")
    assert backend.read("RedirectData", "text") == "world"
    assert backend.read("OtherStore", "text") is None


def test_sqlite_survives_reopen(tmp_path):
    db_path = str(tmp_path / "prefs.db")
    SqlitePreferenceBackend(db_path=db_path).commit("RedirectData", "text", "persisted")
    assert SqlitePreferenceBackend(db_path=db_path).read("RedirectData", "text") == "persisted"


def test_sqlite_retries_locked_database(tmp_path, monkeypatch):
    backend = SqlitePreferenceBackend(db_path=str(tmp_path / "prefs.db"), lock_retries=3)
    calls = {"n": 0}

    def flaky() -> str:
        calls["n"] += 1
        if calls["n"] < 3:
            raise sqlite3.OperationalError("database is locked")
        return "done"

    monkeypatch.setattr("prefstore.storage.sqlite_store.time.sleep", lambda _s: None)
    assert backend._with_retry(flaky) == "done"
    assert calls["n"] == 3


def test_sqlite_commit_failure_is_wrapped(tmp_path, monkeypatch):
    backend = SqlitePreferenceBackend(db_path=str(tmp_path / "prefs.db"), lock_retries=2)
    backend.commit("RedirectData", "text", "before")

    def locked():
        raise sqlite3.OperationalError("database is locked")

    monkeypatch.setattr(backend, "_connect", locked)
    monkeypatch.setattr("prefstore.storage.sqlite_store.time.sleep", lambda _s: None)
    with pytest.raises(CommitFailedError):
        backend.commit("RedirectData", "text", "after")
    monkeypatch.undo()

    assert backend.read("RedirectData", "text") == "before"


def test_sqlite_concurrent_writers_last_writer_wins(tmp_path):
    backend = SqlitePreferenceBackend(db_path=str(tmp_path / "prefs.db"))

    def write(i: int) -> None:
        backend.commit("RedirectData", f"key-{i % 4}", f"value-{i}")

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(write, range(40)))

    for k in range(4):
        value = backend.read("RedirectData", f"key-{k}")
        assert value is not None
        assert value.startswith("value-")
