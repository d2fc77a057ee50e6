"""Configuration management for the users API service."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 5000

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the users API."""

    data_file: Path
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    restrict_updates: bool = True
    expose_errors: bool = True


def resolve_data_path(env_value: Optional[str], base_path: Path | None = None) -> Path:
    """Resolve the on-disk path for the JSON users file."""

    if env_value:
        raw = Path(env_value).expanduser()
        if not raw.is_absolute() and base_path is not None:
            raw = base_path / raw
        return raw.resolve(strict=False)
    base_dir = Path(__file__).resolve().parent.parent / "data"
    return (base_dir / "users.json").resolve(strict=False)


def _parse_bool(value: object, *, name: str) -> bool:
    if isinstance(value, bool):
        return value
    lowered = str(value).strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")


def _parse_port(value: object) -> int:
    try:
        port = int(str(value).strip())
    except ValueError as exc:
        raise ValueError(f"Invalid port: {value!r}") from exc
    if not 1 <= port <= 65535:
        raise ValueError(f"Port must be between 1 and 65535, got {port}")
    return port


def _load_yaml(config_path: Path) -> Dict[str, object]:
    if not config_path.is_file():
        raise ValueError(f"Configuration file not found: {config_path}")
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle)
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ValueError("Configuration file must contain a mapping at the top level")
    return raw


def load_settings(
    config_path: Optional[Path] = None,
    environ: Mapping[str, str] | None = None,
) -> Settings:
    """Build :class:`Settings` from defaults, an optional YAML file and the environment."""

    env = os.environ if environ is None else environ
    settings = Settings(data_file=resolve_data_path(None))

    if config_path is None and env.get("USERS_API_CONFIG"):
        config_path = Path(env["USERS_API_CONFIG"])

    if config_path is not None:
        config_path = config_path.expanduser().resolve(strict=False)
        raw = _load_yaml(config_path)
        if raw.get("data_file"):
            settings = replace(
                settings,
                data_file=resolve_data_path(str(raw["data_file"]), base_path=config_path.parent),
            )
        if raw.get("host"):
            settings = replace(settings, host=str(raw["host"]))
        if raw.get("port") is not None:
            settings = replace(settings, port=_parse_port(raw["port"]))
        if raw.get("restrict_updates") is not None:
            settings = replace(
                settings,
                restrict_updates=_parse_bool(raw["restrict_updates"], name="restrict_updates"),
            )
        if raw.get("expose_errors") is not None:
            settings = replace(
                settings,
                expose_errors=_parse_bool(raw["expose_errors"], name="expose_errors"),
            )

    if env.get("USERS_DB_PATH"):
        settings = replace(settings, data_file=resolve_data_path(env["USERS_DB_PATH"]))
    if env.get("USERS_API_HOST"):
        settings = replace(settings, host=env["USERS_API_HOST"].strip())
    if env.get("USERS_API_PORT"):
        settings = replace(settings, port=_parse_port(env["USERS_API_PORT"]))
    if env.get("USERS_API_RESTRICT_UPDATES"):
        settings = replace(
            settings,
            restrict_updates=_parse_bool(
                env["USERS_API_RESTRICT_UPDATES"], name="USERS_API_RESTRICT_UPDATES"
            ),
        )
    if env.get("USERS_API_EXPOSE_ERRORS"):
        settings = replace(
            settings,
            expose_errors=_parse_bool(env["USERS_API_EXPOSE_ERRORS"], name="USERS_API_EXPOSE_ERRORS"),
        )

    return settings


__all__ = ["DEFAULT_HOST", "DEFAULT_PORT", "Settings", "load_settings", "resolve_data_path"]
