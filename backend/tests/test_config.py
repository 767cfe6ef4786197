from pathlib import Path

import pytest
from pytest import MonkeyPatch

from failpoints.core.config import ConfigurationError, load_settings, parse_listen_address
from failpoints.main import build_registry

_ENV_KEYS = (
    "APP_ENV",
    "APP_NAME",
    "DEBUG",
    "FAILPOINTS",
    "FAILPOINTS_HTTP",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FILE",
)


@pytest.fixture(autouse=True)
def _reset_env(monkeypatch: MonkeyPatch, tmp_path: Path) -> None:
    for key in _ENV_KEYS:
        # record the original state so values loaded from env files are undone
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    monkeypatch.setenv("FAILPOINTS_ENV_FILE", str(tmp_path / "missing.env"))


def test_load_settings_defaults() -> None:
    settings = load_settings()

    assert settings.app_env == "development"
    assert settings.debug is True
    assert settings.http_listen is None
    assert settings.initial_failpoints is None
    assert settings.log_format == "console"


def test_load_settings_for_production_env(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("APP_ENV", "production")

    settings = load_settings()

    assert settings.app_env == "production"
    assert settings.debug is False
    assert settings.log_format == "json"


def test_load_settings_reads_failpoint_variables(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("FAILPOINTS_HTTP", "127.0.0.1:1234")
    monkeypatch.setenv("FAILPOINTS", "a=return;b=off")

    settings = load_settings()

    assert settings.http_listen == "127.0.0.1:1234"
    assert settings.initial_failpoints == "a=return;b=off"


def test_load_settings_rejects_bad_listen_address(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("FAILPOINTS_HTTP", "localhost")

    with pytest.raises(ConfigurationError):
        load_settings()


def test_load_settings_reads_env_file_without_overriding(
    monkeypatch: MonkeyPatch,
    tmp_path: Path,
) -> None:
    env_file = tmp_path / "failpoints.env"
    env_file.write_text("FAILPOINTS=a=return\nLOG_LEVEL=DEBUG\n", encoding="utf-8")
    monkeypatch.setenv("FAILPOINTS_ENV_FILE", str(env_file))
    monkeypatch.setenv("LOG_LEVEL", "ERROR")

    settings = load_settings()

    assert settings.initial_failpoints == "a=return"
    assert settings.log_level == "ERROR"


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (":22381", ("0.0.0.0", 22381)),
        ("127.0.0.1:8080", ("127.0.0.1", 8080)),
        ("[::1]:9000", ("::1", 9000)),
    ],
)
def test_parse_listen_address(value: str, expected: tuple[str, int]) -> None:
    assert parse_listen_address(value) == expected


@pytest.mark.parametrize("value", ["8080", "host:", "host:http", ":70000"])
def test_parse_listen_address_rejects_invalid(value: str) -> None:
    with pytest.raises(ConfigurationError):
        parse_listen_address(value)


def test_build_registry_installs_initial_terms(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("FAILPOINTS", 'alpha=1*return("x")->off;beta=sleep(10ms)')

    registry = build_registry(["alpha", "beta", "gamma"], load_settings())

    assert registry.list_all() == [
        ("alpha", '1*return("x")->off'),
        ("beta", "sleep(10ms)"),
        ("gamma", ""),
    ]


def test_build_registry_fails_on_bad_initial_terms(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setenv("FAILPOINTS", "alpha=return;unknown=return")

    with pytest.raises(ConfigurationError, match="failpoint does not exist"):
        build_registry(["alpha"], load_settings())
