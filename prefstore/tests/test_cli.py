import json

import pytest

from prefstore import cli
from prefstore.config.settings import settings
from prefstore.core.errors import CommitFailedError
from prefstore.core.preferences import PreferenceStore
from prefstore.storage.kv import PreferenceBackend


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch, tmp_path):
    monkeypatch.setattr(settings, "storage_backend", "file")
    monkeypatch.setattr(settings, "data_dir", str(tmp_path / "prefs"))
    monkeypatch.setattr(settings, "sqlite_db_path", str(tmp_path / "prefs.db"))
    monkeypatch.setattr(settings, "fsync_on_commit", False)
    monkeypatch.setattr(settings, "commit_failure_policy", "silent")


def test_put_then_get(capsys):
    assert cli.main(["put", "RedirectData", "text", "hello"]) == 0
    assert capsys.readouterr().out.strip() == "committed"

    assert cli.main(["get", "RedirectData", "text"]) == 0
    assert capsys.readouterr().out.strip() == "hello"


def test_get_missing_prints_default_or_nothing(capsys):
    assert cli.main(["get", "RedirectData", "text", "--default", "none-yet"]) == 0
    assert capsys.readouterr().out.strip() == "none-yet"

    assert cli.main(["get", "RedirectData", "text"]) == 0
    assert capsys.readouterr().out == ""


def test_get_json_output(capsys):
    cli.main(["put", "RedirectData", "text", "hi"])
    capsys.readouterr()
    assert cli.main(["get", "RedirectData", "text", "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == {"store": "RedirectData", "key": "text", "value": "hi"}


def test_load_and_apply(capsys):
    assert cli.main(["load"]) == 0
    assert capsys.readouterr().out == "\n"

    assert cli.main(["apply", "redirect me"]) == 0
    assert capsys.readouterr().out.strip() == "OK"

    assert cli.main(["load"]) == 0
    assert capsys.readouterr().out.strip() == "redirect me"


def test_sqlite_backend_flag(tmp_path, capsys):
    db_path = str(tmp_path / "cli.db")
    assert cli.main(["--backend", "sqlite", "--db-path", db_path, "put", "RedirectData", "text", "v"]) == 0
    assert cli.main(["--backend", "sqlite", "--db-path", db_path, "get", "RedirectData", "text"]) == 0
    assert capsys.readouterr().out.splitlines()[-1] == "v"
    assert (tmp_path / "cli.db").exists()


def test_invalid_store_name_exits_1(capsys):
    assert cli.main(["put", "../x", "text", "v"]) == 1
    assert "invalid store name" in capsys.readouterr().err


class _Refusing(PreferenceBackend):
    def read(self, store_name, key):
        return None

    def commit(self, store_name, key, value):
        raise CommitFailedError("read-only volume")


def test_apply_failure_policies(monkeypatch, capsys):
    monkeypatch.setattr(cli, "create_backend", lambda: _Refusing())

    assert cli.main(["apply", "x"]) == 1
    assert capsys.readouterr().out.strip() == "CANCELED"

    assert cli.main(["apply", "x", "--policy", "report"]) == 1
    assert "read-only volume" in capsys.readouterr().err

    assert cli.main(["put", "RedirectData", "text", "x"]) == 1
    assert capsys.readouterr().out.strip() == "not committed"


def test_store_is_closed_after_command(monkeypatch):
    closed = []
    monkeypatch.setattr(PreferenceStore, "close", lambda self: closed.append(True))
    cli.main(["get", "RedirectData", "text"])
    assert closed == [True]
