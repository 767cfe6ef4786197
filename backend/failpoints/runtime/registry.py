from __future__ import annotations

from collections.abc import Iterable, Sequence

from failpoints.core.logging import get_logger
from failpoints.runtime.errors import FailpointError, FailpointNotFoundError, TermParseError
from failpoints.runtime.failpoint import Failpoint, FailpointHit, FailpointSnapshot
from failpoints.runtime.terms import Term, parse_terms

ASSIGNMENT_SEPARATOR = ";"
logger = get_logger("failpoints.runtime.registry")


def parse_assignments(text: str) -> list[tuple[str, str]]:
    """Split ``name1=spec1;name2=spec2`` into ordered pairs.

    Empty entries are skipped. An entry without ``=`` keeps an empty spec so
    that it is rejected by ``Registry.set`` like any other bad pair.
    """
    assignments: list[tuple[str, str]] = []
    for entry in text.split(ASSIGNMENT_SEPARATOR):
        if not entry:
            continue
        name, _, spec = entry.partition("=")
        assignments.append((name, spec))
    return assignments


class Registry:
    """Fixed set of failpoints, keyed by name.

    The name mapping is built once and only read afterwards, so lookups take
    no lock; every mutation is serialized by the failpoint's own lock.
    """

    def __init__(self, names: Iterable[str]) -> None:
        failpoints: dict[str, Failpoint] = {}
        for name in names:
            if not name:
                raise ValueError("failpoint name cannot be empty")
            if name in failpoints:
                raise ValueError(f"failpoint {name!r} is registered more than once")
            failpoints[name] = Failpoint(name)
        self._failpoints = failpoints

    def __contains__(self, name: object) -> bool:
        return name in self._failpoints

    def __len__(self) -> int:
        return len(self._failpoints)

    def names(self) -> list[str]:
        return sorted(self._failpoints)

    def lookup(self, name: str) -> Failpoint:
        failpoint = self._failpoints.get(name)
        if failpoint is None:
            raise FailpointNotFoundError(name)
        return failpoint

    def get(self, name: str) -> FailpointSnapshot:
        return self.lookup(name).snapshot()

    def status(self, name: str) -> tuple[str, int]:
        return self.lookup(name).status()

    def count(self, name: str) -> int:
        _, hit_count = self.status(name)
        return hit_count

    def set(self, name: str, spec: str) -> Term:
        failpoint = self.lookup(name)
        try:
            term = parse_terms(spec)
        except TermParseError as exc:
            exc.name = name
            logger.warning(
                "failpoint.terms_rejected",
                failpoint=name,
                spec=spec,
                detail=exc.detail,
            )
            raise
        failpoint.enable(term)
        logger.info("failpoint.enabled", failpoint=name, term=term.source)
        return term

    def set_many(self, assignments: Sequence[tuple[str, str]]) -> None:
        """Apply every pair in order; raise the first failure afterwards.

        Pairs that succeed stay applied even when a sibling fails.
        """
        first_error: FailpointError | None = None
        for name, spec in assignments:
            try:
                self.set(name, spec)
            except FailpointError as exc:
                if first_error is None:
                    first_error = exc
        if first_error is not None:
            raise first_error

    def deactivate(self, name: str) -> None:
        self.lookup(name).disable()
        logger.info("failpoint.disabled", failpoint=name)

    def list_all(self) -> list[tuple[str, str]]:
        return [(name, self._failpoints[name].snapshot().term_text) for name in self.names()]

    def hit(self, name: str) -> FailpointHit:
        return self.lookup(name).hit()
