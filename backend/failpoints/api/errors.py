from __future__ import annotations

from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from failpoints.runtime.errors import FailpointError, FailpointPanic

GET_FAILURE_PREFIX = "failed to GET"
SET_FAILURE_PREFIX = "fail to set failpoint"
DELETE_FAILURE_PREFIX = "failed to delete failpoint"


class ControlPlaneError(Exception):
    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(message)

    @classmethod
    def from_failpoint_error(
        cls,
        status_code: int,
        prefix: str,
        exc: FailpointError,
    ) -> ControlPlaneError:
        return cls(status_code, f"{prefix}: {exc}")


def _status_phrase(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return "Unknown Error"


def build_error_response(
    status_code: int,
    message: str,
    *,
    headers: dict[str, str] | None = None,
) -> PlainTextResponse:
    """Plain-text error body terminated by a newline, as clients compare bytes."""
    response = PlainTextResponse(f"{message}\n", status_code=status_code, headers=headers)
    response.headers["X-Content-Type-Options"] = "nosniff"
    return response


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(ControlPlaneError)
    async def handle_control_plane_error(_: Request, exc: ControlPlaneError) -> PlainTextResponse:
        return build_error_response(exc.status_code, exc.message)

    @app.exception_handler(FailpointPanic)
    async def handle_failpoint_panic(_: Request, exc: FailpointPanic) -> PlainTextResponse:
        return build_error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_: Request, __: RequestValidationError) -> PlainTextResponse:
        return build_error_response(status.HTTP_400_BAD_REQUEST, "invalid request")

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(_: Request, exc: StarletteHTTPException) -> PlainTextResponse:
        message = exc.detail if isinstance(exc.detail, str) else _status_phrase(exc.status_code)
        return build_error_response(exc.status_code, message, headers=exc.headers)
