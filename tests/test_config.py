from __future__ import annotations

from pathlib import Path

import pytest

from app.config import DEFAULT_PORT, load_settings, resolve_data_path


def test_defaults_without_config_or_environment() -> None:
    settings = load_settings(environ={})

    assert settings.port == DEFAULT_PORT == 5000
    assert settings.host == "0.0.0.0"
    assert settings.data_file == resolve_data_path(None)
    assert settings.data_file.name == "users.json"
    assert settings.restrict_updates is True
    assert settings.expose_errors is True


def test_yaml_config_is_loaded(tmp_path: Path) -> None:
    config = tmp_path / "users-api.yaml"
    config.write_text(
        "data_file: store/users.json\n"
        "host: 127.0.0.1\n"
        "port: 8080\n"
        "restrict_updates: false\n"
        "expose_errors: no\n",
        encoding="utf-8",
    )

    settings = load_settings(config, environ={})

    assert settings.data_file == (tmp_path / "store" / "users.json").resolve()
    assert settings.host == "127.0.0.1"
    assert settings.port == 8080
    assert settings.restrict_updates is False
    assert settings.expose_errors is False


def test_config_path_from_environment(tmp_path: Path) -> None:
    config = tmp_path / "users-api.yaml"
    config.write_text("port: 7000\n", encoding="utf-8")

    settings = load_settings(environ={"USERS_API_CONFIG": str(config)})

    assert settings.port == 7000


def test_environment_overrides_config(tmp_path: Path) -> None:
    config = tmp_path / "users-api.yaml"
    config.write_text("port: 8080\nrestrict_updates: true\n", encoding="utf-8")
    data_file = tmp_path / "env-users.json"

    settings = load_settings(
        config,
        environ={
            "USERS_DB_PATH": str(data_file),
            "USERS_API_PORT": "9090",
            "USERS_API_HOST": "localhost",
            "USERS_API_RESTRICT_UPDATES": "off",
        },
    )

    assert settings.data_file == data_file.resolve()
    assert settings.port == 9090
    assert settings.host == "localhost"
    assert settings.restrict_updates is False


def test_missing_config_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="not found"):
        load_settings(tmp_path / "missing.yaml", environ={})


def test_non_mapping_config_is_rejected(tmp_path: Path) -> None:
    config = tmp_path / "users-api.yaml"
    config.write_text("- port\n- 8080\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        load_settings(config, environ={})


@pytest.mark.parametrize("value", ["0", "70000", "http"])
def test_invalid_port_is_rejected(value: str) -> None:
    with pytest.raises(ValueError):
        load_settings(environ={"USERS_API_PORT": value})


def test_invalid_boolean_is_rejected() -> None:
    with pytest.raises(ValueError, match="USERS_API_EXPOSE_ERRORS"):
        load_settings(environ={"USERS_API_EXPOSE_ERRORS": "maybe"})
