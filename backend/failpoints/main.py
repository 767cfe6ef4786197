from __future__ import annotations

from collections.abc import Iterable

from fastapi import FastAPI

from failpoints.api.demo import router as demo_router
from failpoints.api.errors import register_exception_handlers
from failpoints.api.failpoints import router as failpoints_router
from failpoints.core.config import ConfigurationError, Settings, get_settings
from failpoints.core.logging import TraceContextMiddleware, configure_logging, get_logger
from failpoints.runtime import FailpointError, FailpointHook, Registry, parse_assignments

logger = get_logger("failpoints.main")


def build_registry(names: Iterable[str], settings: Settings | None = None) -> Registry:
    """Register every known failpoint and install the configured initial terms."""
    settings = settings or get_settings()
    registry = Registry(names)
    if settings.initial_failpoints:
        try:
            registry.set_many(parse_assignments(settings.initial_failpoints))
        except FailpointError as exc:
            raise ConfigurationError(f"fail to enable failpoint: {exc}") from exc
    logger.info("registry.initialized", failpoints=len(registry))
    return registry


def _new_app(settings: Settings) -> FastAPI:
    # Interactive docs would shadow failpoints named "docs" or "openapi.json".
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    register_exception_handlers(app)
    app.add_middleware(TraceContextMiddleware)
    return app


def create_app(registry: Registry, *, settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = _new_app(settings)
    app.state.registry = registry
    app.include_router(failpoints_router)
    return app


def create_demo_app(hook: FailpointHook, *, settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings)

    app = _new_app(settings)
    app.state.hook = hook
    app.include_router(demo_router)
    return app
