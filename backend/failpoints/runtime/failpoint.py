from __future__ import annotations

import threading
from dataclasses import dataclass

from failpoints.runtime.errors import FailpointDisabledError
from failpoints.runtime.state_machine import TermPosition, advance, initial_position
from failpoints.runtime.terms import Action, Term


@dataclass(frozen=True, slots=True)
class FailpointHit:
    action: Action
    hit_count: int


@dataclass(frozen=True, slots=True)
class FailpointSnapshot:
    name: str
    enabled: bool
    term: Term | None
    position: TermPosition | None
    hit_count: int

    @property
    def term_text(self) -> str:
        return "" if self.term is None else self.term.source


class Failpoint:
    """One named injection point.

    The lock guards term, position and hit count as a single unit; callers
    enact the returned action after the lock is released.
    """

    def __init__(self, name: str) -> None:
        self._name = name
        self._lock = threading.Lock()
        self._term: Term | None = None
        self._position: TermPosition | None = None
        self._hit_count = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def enabled(self) -> bool:
        with self._lock:
            return self._term is not None

    def enable(self, term: Term) -> None:
        with self._lock:
            self._term = term
            self._position = initial_position(term)
            self._hit_count = 0

    def disable(self) -> None:
        with self._lock:
            self._term = None
            self._position = None
            self._hit_count = 0

    def hit(self) -> FailpointHit:
        with self._lock:
            if self._term is None or self._position is None:
                raise FailpointDisabledError(self._name)
            self._hit_count += 1
            action, self._position = advance(self._term, self._position)
            return FailpointHit(action=action, hit_count=self._hit_count)

    def status(self) -> tuple[str, int]:
        with self._lock:
            if self._term is None:
                raise FailpointDisabledError(self._name)
            return self._term.source, self._hit_count

    def snapshot(self) -> FailpointSnapshot:
        with self._lock:
            return FailpointSnapshot(
                name=self._name,
                enabled=self._term is not None,
                term=self._term,
                position=self._position,
                hit_count=self._hit_count,
            )

    def __repr__(self) -> str:
        return f"Failpoint(name={self._name!r})"
