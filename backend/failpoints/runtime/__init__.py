from failpoints.runtime.errors import (
    FailpointDisabledError,
    FailpointError,
    FailpointNotFoundError,
    FailpointPanic,
    TermParseError,
)
from failpoints.runtime.failpoint import Failpoint, FailpointHit, FailpointSnapshot
from failpoints.runtime.hook import FailpointHook
from failpoints.runtime.registry import Registry, parse_assignments
from failpoints.runtime.state_machine import TermPosition, advance, initial_position
from failpoints.runtime.terms import (
    OFF_ACTION,
    Action,
    ActionKind,
    Segment,
    Term,
    parse_terms,
)

__all__ = [
    "OFF_ACTION",
    "Action",
    "ActionKind",
    "Failpoint",
    "FailpointDisabledError",
    "FailpointError",
    "FailpointHit",
    "FailpointHook",
    "FailpointNotFoundError",
    "FailpointPanic",
    "FailpointSnapshot",
    "Registry",
    "Segment",
    "Term",
    "TermParseError",
    "TermPosition",
    "advance",
    "initial_position",
    "parse_assignments",
    "parse_terms",
]
