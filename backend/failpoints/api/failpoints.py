from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import PlainTextResponse, Response

from failpoints.api.errors import (
    DELETE_FAILURE_PREFIX,
    GET_FAILURE_PREFIX,
    SET_FAILURE_PREFIX,
    ControlPlaneError,
)
from failpoints.core.logging import bind_log_context
from failpoints.runtime import (
    FailpointDisabledError,
    FailpointError,
    FailpointNotFoundError,
    Registry,
    TermParseError,
    parse_assignments,
)

router = APIRouter(tags=["failpoints"])
BULK_PATH = "/failpoints"


def get_registry(request: Request) -> Registry:
    return request.app.state.registry


RegistryDep = Annotated[Registry, Depends(get_registry)]


async def _read_text(request: Request) -> str:
    body = await request.body()
    return body.decode("utf-8", errors="replace")


@router.get("/", response_class=PlainTextResponse)
def list_failpoints(registry: RegistryDep) -> PlainTextResponse:
    return PlainTextResponse("".join(f"{name}={term}\n" for name, term in registry.list_all()))


@router.api_route(BULK_PATH, methods=["PUT", "POST"], status_code=status.HTTP_204_NO_CONTENT)
async def set_failpoints(request: Request, registry: RegistryDep) -> Response:
    assignments = parse_assignments(await _read_text(request))
    try:
        registry.set_many(assignments)
    except FailpointError as exc:
        raise ControlPlaneError.from_failpoint_error(
            status.HTTP_400_BAD_REQUEST,
            SET_FAILURE_PREFIX,
            exc,
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{name}/count", response_class=PlainTextResponse)
def count_failpoint_hits(name: str, registry: RegistryDep) -> PlainTextResponse:
    bind_log_context(failpoint=name)
    try:
        hit_count = registry.count(name)
    except FailpointNotFoundError as exc:
        raise ControlPlaneError.from_failpoint_error(
            status.HTTP_404_NOT_FOUND,
            GET_FAILURE_PREFIX,
            exc,
        ) from exc
    except FailpointDisabledError as exc:
        raise ControlPlaneError.from_failpoint_error(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            GET_FAILURE_PREFIX,
            exc,
        ) from exc
    return PlainTextResponse(str(hit_count))


@router.get("/{name}", response_class=PlainTextResponse)
def get_failpoint(name: str, registry: RegistryDep) -> PlainTextResponse:
    bind_log_context(failpoint=name)
    try:
        term, _ = registry.status(name)
    except FailpointError as exc:
        # Clients expect the empty term line to follow the error text.
        raise ControlPlaneError(
            status.HTTP_404_NOT_FOUND,
            f"{GET_FAILURE_PREFIX}: {exc}\n",
        ) from exc
    return PlainTextResponse(f"{term}\n")


@router.api_route("/{name}", methods=["PUT", "POST"], status_code=status.HTTP_204_NO_CONTENT)
async def set_failpoint(name: str, request: Request, registry: RegistryDep) -> Response:
    bind_log_context(failpoint=name)
    spec = await _read_text(request)
    try:
        registry.set(name, spec)
    except FailpointNotFoundError as exc:
        raise ControlPlaneError.from_failpoint_error(
            status.HTTP_404_NOT_FOUND,
            SET_FAILURE_PREFIX,
            exc,
        ) from exc
    except TermParseError as exc:
        raise ControlPlaneError.from_failpoint_error(
            status.HTTP_400_BAD_REQUEST,
            SET_FAILURE_PREFIX,
            exc,
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_failpoint(name: str, registry: RegistryDep) -> Response:
    bind_log_context(failpoint=name)
    try:
        registry.deactivate(name)
    except FailpointNotFoundError as exc:
        raise ControlPlaneError.from_failpoint_error(
            status.HTTP_404_NOT_FOUND,
            DELETE_FAILURE_PREFIX,
            exc,
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)
