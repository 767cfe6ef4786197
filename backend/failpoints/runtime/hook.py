"""Entry point consulted by instrumented call sites.

A rewritten call site reads::

    action = hook.inject("ExampleString")
    if action is not None:
        return action.value

``inject`` sleeps or raises on behalf of the caller, outside any failpoint
lock, and only hands back ``return`` actions.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

from failpoints.core.logging import get_logger
from failpoints.runtime.errors import (
    FailpointDisabledError,
    FailpointNotFoundError,
    FailpointPanic,
)
from failpoints.runtime.registry import Registry
from failpoints.runtime.terms import OFF_ACTION, Action, ActionKind

logger = get_logger("failpoints.runtime.hook")


class FailpointHook:
    def __init__(
        self,
        registry: Registry,
        *,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._registry = registry
        self._sleep = sleep

    def evaluate(self, name: str) -> tuple[bool, Action]:
        try:
            hit = self._registry.hit(name)
        except FailpointNotFoundError:
            logger.warning("failpoint.unknown_call_site", failpoint=name)
            return False, OFF_ACTION
        except FailpointDisabledError:
            return False, OFF_ACTION
        return not hit.action.is_off, hit.action

    def inject(self, name: str) -> Action | None:
        should_act, action = self.evaluate(name)
        if not should_act:
            return None
        if action.kind == ActionKind.SLEEP:
            self._sleep(_seconds(action))
            return None
        if action.kind == ActionKind.PANIC:
            raise _panic(name, action)
        return action

    async def ainject(self, name: str) -> Action | None:
        should_act, action = self.evaluate(name)
        if not should_act:
            return None
        if action.kind == ActionKind.SLEEP:
            await asyncio.sleep(_seconds(action))
            return None
        if action.kind == ActionKind.PANIC:
            raise _panic(name, action)
        return action


def _seconds(action: Action) -> float:
    return float(action.value) if isinstance(action.value, (int, float)) else 0.0


def _panic(name: str, action: Action) -> FailpointPanic:
    message = action.value if isinstance(action.value, str) else None
    logger.warning("failpoint.panic", failpoint=name, message=message)
    return FailpointPanic(name, message)
