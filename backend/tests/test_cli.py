from __future__ import annotations

from typing import Any

import pytest
from pytest import MonkeyPatch

from failpoints import cli
from failpoints.core.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _test_settings(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setattr(
        cli,
        "get_settings",
        lambda: Settings(app_env="test", log_level="WARNING", log_format="json"),
    )
    get_settings.cache_clear()


def test_build_parser_serve_collects_failpoints() -> None:
    args = cli.build_parser().parse_args(
        ["serve", "-f", "alpha", "--failpoint", "beta", "--listen", ":9999"]
    )

    assert args.command == "serve"
    assert args.failpoints == ["alpha", "beta"]
    assert args.listen == ":9999"


def test_build_parser_requires_command() -> None:
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])


def test_serve_runs_control_plane_with_initial_terms(monkeypatch: MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def fake_run(app: Any, *, host: str, port: int, log_config: Any) -> None:
        captured.update(app=app, host=host, port=port)

    monkeypatch.setattr(cli.uvicorn, "run", fake_run)

    exit_code = cli.main(
        ["serve", "-f", "alpha", "-f", "beta", "--listen", ":4321", "--terms", "beta=off"]
    )

    assert exit_code == 0
    assert captured["host"] == "0.0.0.0"
    assert captured["port"] == 4321
    registry = captured["app"].state.registry
    assert registry.list_all() == [("alpha", ""), ("beta", "off")]


def test_serve_rejects_bad_initial_terms(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.setattr(cli.uvicorn, "run", lambda *args, **kwargs: None)

    with pytest.raises(SystemExit) as exc_info:
        cli.main(["serve", "-f", "alpha", "--terms", "alpha=bogus"])

    assert exc_info.value.code == 2


def test_demo_serves_both_apps(monkeypatch: MonkeyPatch) -> None:
    served: list[tuple[str, int]] = []

    async def fake_serve_all(configs: Any) -> None:
        served.extend((config.host, config.port) for config in configs)

    monkeypatch.setattr(cli, "_serve_all", fake_serve_all)

    exit_code = cli.main(["demo", "8081", "--listen", "127.0.0.1:8082"])

    assert exit_code == 0
    assert served == [("127.0.0.1", 8081), ("127.0.0.1", 8082)]
