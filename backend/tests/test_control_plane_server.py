from __future__ import annotations

import socket

import httpx
import pytest

from failpoints.core.config import Settings
from failpoints.runtime import FailpointHook, Registry
from failpoints.server import start_control_plane


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return int(sock.getsockname()[1])


def test_start_control_plane_is_skipped_without_listen_address() -> None:
    registry = Registry(["alpha"])

    assert start_control_plane(registry, settings=Settings(app_env="test")) is None


def test_background_server_controls_hook() -> None:
    port = _free_port()
    registry = Registry(["alpha"])
    hook = FailpointHook(registry)
    settings = Settings(
        app_env="test",
        http_listen=f"127.0.0.1:{port}",
        log_level="WARNING",
        log_format="json",
    )

    server = start_control_plane(registry, settings=settings)
    assert server is not None
    assert server.started
    try:
        base_url = f"http://127.0.0.1:{port}"
        response = httpx.put(f"{base_url}/alpha", content='return("remote")', timeout=5.0)
        assert response.status_code == 204

        action = hook.inject("alpha")
        assert action is not None
        assert action.value == "remote"
        assert httpx.get(f"{base_url}/alpha/count", timeout=5.0).text == "1"
    finally:
        server.stop()

    assert server.address == ("127.0.0.1", port)


def test_server_start_twice_is_rejected() -> None:
    port = _free_port()
    settings = Settings(app_env="test", http_listen=f"127.0.0.1:{port}", log_level="WARNING")

    server = start_control_plane(Registry(["alpha"]), settings=settings)
    assert server is not None
    try:
        with pytest.raises(RuntimeError, match="already running"):
            server.start()
    finally:
        server.stop()
