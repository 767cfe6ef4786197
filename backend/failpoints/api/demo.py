from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import JSONResponse

from failpoints.api.errors import ControlPlaneError
from failpoints.demo import DemoCallError, call_demo_function
from failpoints.runtime import FailpointHook

router = APIRouter(prefix="/call", tags=["demo"])


def get_hook(request: Request) -> FailpointHook:
    return request.app.state.hook


HookDep = Annotated[FailpointHook, Depends(get_hook)]


@router.get("/{name}")
def call_function(
    name: str,
    hook: HookDep,
    arg: Annotated[list[str] | None, Query()] = None,
) -> JSONResponse:
    try:
        result = call_demo_function(hook, name, arg or [])
    except DemoCallError as exc:
        raise ControlPlaneError(status.HTTP_400_BAD_REQUEST, str(exc)) from exc
    return JSONResponse(result)
