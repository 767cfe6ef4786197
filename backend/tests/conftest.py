from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from pytest import MonkeyPatch

from failpoints.core.config import Settings, get_settings
from failpoints.demo import DEMO_FAILPOINTS
from failpoints.main import build_registry, create_app, create_demo_app
from failpoints.runtime import FailpointHook, Registry
from tests.shared import ControlPlaneTestContext


@pytest.fixture
def settings(monkeypatch: MonkeyPatch) -> Iterator[Settings]:
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.delenv("FAILPOINTS", raising=False)
    monkeypatch.delenv("FAILPOINTS_HTTP", raising=False)
    get_settings.cache_clear()
    yield Settings(app_env="test", debug=False, log_level="WARNING", log_format="json")
    get_settings.cache_clear()


@pytest.fixture
def registry(settings: Settings) -> Registry:
    return build_registry(DEMO_FAILPOINTS, settings)


@pytest.fixture
def api_context(settings: Settings, registry: Registry) -> Iterator[ControlPlaneTestContext]:
    """
    Control plane and demo apps sharing one registry, as in a single
    instrumented process exposing both servers.
    """
    hook = FailpointHook(registry, sleep=lambda _: None)
    with (
        TestClient(create_app(registry, settings=settings)) as control,
        TestClient(create_demo_app(hook, settings=settings)) as demo,
    ):
        yield ControlPlaneTestContext(
            control=control,
            demo=demo,
            registry=registry,
            hook=hook,
        )
