from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class ConfigurationError(Exception):
    """Invalid or unusable configuration."""


Environment = Literal["development", "test", "production"]
LogFormat = Literal["json", "console"]

DEFAULT_ENV_FILE = ".env"


class Settings(BaseModel):
    app_name: str = Field(default="Failpoint Control Plane")
    app_env: Environment = Field(default="development")
    debug: bool = Field(default=True)
    # Go-style listen address, e.g. ":22381" or "127.0.0.1:22381".
    http_listen: str | None = Field(default=None)
    initial_failpoints: str | None = Field(default=None)
    log_level: str = Field(default="INFO")
    log_format: LogFormat = Field(default="json")
    log_file: str | None = Field(default=None)


def parse_listen_address(value: str) -> tuple[str, int]:
    host, separator, port_text = value.strip().rpartition(":")
    if not separator:
        raise ConfigurationError(f"listen address must look like 'host:port' or ':port': {value!r}")
    if not port_text.isdigit():
        raise ConfigurationError(f"listen address has an invalid port: {value!r}")
    port = int(port_text)
    if port > 65535:
        raise ConfigurationError(f"listen address port is out of range: {value!r}")
    host = host.strip("[]") or "0.0.0.0"
    return host, port


def _load_env_file() -> None:
    """Load an optional .env file without overriding variables already set."""
    env_file = Path(os.getenv("FAILPOINTS_ENV_FILE", DEFAULT_ENV_FILE))
    if env_file.is_file():
        load_dotenv(env_file, override=False)


def _to_bool(value: str | None, *, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _normalize_optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    normalized = value.strip()
    return normalized if normalized else None


def _normalize_env(value: str | None) -> Environment:
    if value is None:
        return "development"
    lowered = value.strip().lower()
    if lowered == "test":
        return "test"
    if lowered == "production":
        return "production"
    return "development"


def _normalize_log_format(value: str | None, app_env: Environment) -> LogFormat:
    if value is not None:
        lowered = value.strip().lower()
        if lowered == "console":
            return "console"
        if lowered == "json":
            return "json"
    # development renders for humans, everything else for collectors
    return "console" if app_env == "development" else "json"


def load_settings() -> Settings:
    _load_env_file()
    app_env = _normalize_env(os.getenv("APP_ENV"))

    http_listen = _normalize_optional_text(os.getenv("FAILPOINTS_HTTP"))
    if http_listen is not None:
        parse_listen_address(http_listen)

    return Settings(
        app_name=os.getenv("APP_NAME", "Failpoint Control Plane"),
        app_env=app_env,
        debug=_to_bool(os.getenv("DEBUG"), default=app_env != "production"),
        http_listen=http_listen,
        initial_failpoints=_normalize_optional_text(os.getenv("FAILPOINTS")),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_format=_normalize_log_format(os.getenv("LOG_FORMAT"), app_env),
        log_file=_normalize_optional_text(os.getenv("LOG_FILE")),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()
