import pytest
from pydantic import ValidationError

from prefstore import storage
from prefstore.config.settings import Settings
from prefstore.core.errors import BackendUnavailableError
from prefstore.storage.file_store import FilePreferenceBackend
from prefstore.storage.sqlite_store import SqlitePreferenceBackend


def test_settings_read_prefixed_env(monkeypatch):
    monkeypatch.setenv("PREFSTORE_STORAGE_BACKEND", "sqlite")
    monkeypatch.setenv("PREFSTORE_REDIRECT_STORE_NAME", "Other")
    monkeypatch.setenv("PREFSTORE_COMMIT_FAILURE_POLICY", " REPORT ")
    loaded = Settings()
    assert loaded.storage_backend == "sqlite"
    assert loaded.redirect_store_name == "Other"
    assert loaded.commit_failure_policy == "report"


def test_settings_defaults():
    loaded = Settings()
    assert loaded.redirect_store_name == "RedirectData"
    assert loaded.redirect_text_key == "text"
    assert loaded.commit_failure_policy == "silent"


def test_settings_reject_unknown_policy():
    with pytest.raises(ValidationError):
        Settings(commit_failure_policy="retry")


def test_create_backend_selects_by_setting(monkeypatch, tmp_path):
    monkeypatch.setattr(storage.settings, "data_dir", str(tmp_path / "prefs"))
    monkeypatch.setattr(storage.settings, "sqlite_db_path", str(tmp_path / "prefs.db"))

    monkeypatch.setattr(storage.settings, "storage_backend", "file")
    assert isinstance(storage.create_backend(), FilePreferenceBackend)

    monkeypatch.setattr(storage.settings, "storage_backend", " SQLite ")
    assert isinstance(storage.create_backend(), SqlitePreferenceBackend)

    monkeypatch.setattr(storage.settings, "storage_backend", "memcached")
    with pytest.raises(BackendUnavailableError):
        storage.create_backend()
