from __future__ import annotations

import json
from pathlib import Path

import pytest

import main
from main import _parse_args


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch) -> None:
    for name in (
        "USERS_API_CONFIG",
        "USERS_DB_PATH",
        "USERS_API_PORT",
        "USERS_API_HOST",
        "USERS_API_RESTRICT_UPDATES",
        "USERS_API_EXPOSE_ERRORS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_default_command_invokes_serve() -> None:
    args = _parse_args([])
    assert args.command == "serve"


def test_default_command_accepts_options_without_subcommand() -> None:
    args = _parse_args(["--host", "127.0.0.1", "--port", "8080"])
    assert args.command == "serve"
    assert args.host == "127.0.0.1"
    assert args.port == 8080


def test_list_subcommand_accepts_data_file() -> None:
    args = _parse_args(["list", "--data-file", "users.json"])
    assert args.command == "list"
    assert args.data_file == "users.json"


def test_init_db_creates_users_file(tmp_path: Path, capsys) -> None:
    data_file = tmp_path / "data" / "users.json"

    assert main.main(["init-db", "--data-file", str(data_file)]) == 0

    assert json.loads(data_file.read_text(encoding="utf-8")) == []
    assert "initialisation complete" in capsys.readouterr().out


def test_list_prints_stored_users(tmp_path: Path, capsys) -> None:
    data_file = tmp_path / "users.json"
    data_file.write_text(
        json.dumps(
            [
                {
                    "_id": "abc123",
                    "name": "Ada",
                    "email": "ada@example.com",
                    "createdAt": "2024-01-01T00:00:00.000Z",
                }
            ]
        ),
        encoding="utf-8",
    )

    assert main.main(["list", "--data-file", str(data_file)]) == 0

    output = capsys.readouterr().out
    assert "1 user(s) found" in output
    assert "ada@example.com" in output


def test_list_reports_empty_store(tmp_path: Path, capsys) -> None:
    assert main.main(["list", "--data-file", str(tmp_path / "users.json")]) == 0
    assert "No users are currently stored." in capsys.readouterr().out


def test_list_reports_unreadable_store(tmp_path: Path, capsys) -> None:
    data_file = tmp_path / "users.json"
    data_file.write_bytes(b"[\xff\xfe]")

    assert main.main(["list", "--data-file", str(data_file)]) == 1
    assert "Failed to read users" in capsys.readouterr().err


def test_serve_passes_settings_to_uvicorn(tmp_path: Path, monkeypatch) -> None:
    calls = {}

    def fake_run(app, **kwargs):
        calls["app"] = app
        calls.update(kwargs)

    monkeypatch.setattr("uvicorn.run", fake_run)

    main.main(["--port", "8081", "--data-file", str(tmp_path / "users.json")])

    assert calls["port"] == 8081
    assert calls["host"] == "0.0.0.0"
    assert calls["app"].state.settings.data_file == (tmp_path / "users.json").resolve()
