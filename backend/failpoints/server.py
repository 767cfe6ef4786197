from __future__ import annotations

import threading
import time

import uvicorn
from fastapi import FastAPI

from failpoints.core.config import Settings, get_settings, parse_listen_address
from failpoints.core.logging import get_logger
from failpoints.main import create_app
from failpoints.runtime import Registry

logger = get_logger("failpoints.server")


class ControlPlaneServer:
    """Serves a control-plane app with uvicorn on a background daemon thread."""

    def __init__(self, app: FastAPI, *, host: str, port: int) -> None:
        self._host = host
        self._port = port
        self._server = uvicorn.Server(
            uvicorn.Config(app, host=host, port=port, log_config=None, lifespan="off")
        )
        self._thread: threading.Thread | None = None

    @property
    def address(self) -> tuple[str, int]:
        return self._host, self._port

    @property
    def started(self) -> bool:
        return self._server.started

    def start(self, *, timeout: float = 5.0) -> None:
        if self._thread is not None:
            raise RuntimeError("control plane server is already running")
        self._server.should_exit = False
        thread = threading.Thread(target=self._server.run, name="failpoints-http", daemon=True)
        self._thread = thread
        thread.start()

        deadline = time.monotonic() + timeout
        while not self._server.started:
            if not thread.is_alive():
                self._thread = None
                raise RuntimeError(f"control plane server failed to start on {self._host}:{self._port}")
            if time.monotonic() > deadline:
                self.stop()
                raise TimeoutError(f"control plane server did not start within {timeout}s")
            time.sleep(0.01)
        logger.info("control_plane.started", host=self._host, port=self._port)

    def stop(self, *, timeout: float = 5.0) -> None:
        thread = self._thread
        if thread is None:
            return
        self._server.should_exit = True
        thread.join(timeout)
        self._thread = None
        logger.info("control_plane.stopped", host=self._host, port=self._port)


def start_control_plane(
    registry: Registry,
    *,
    settings: Settings | None = None,
) -> ControlPlaneServer | None:
    """Start the control plane when a listen address is configured."""
    settings = settings or get_settings()
    if settings.http_listen is None:
        return None
    host, port = parse_listen_address(settings.http_listen)
    server = ControlPlaneServer(create_app(registry, settings=settings), host=host, port=port)
    server.start()
    return server
