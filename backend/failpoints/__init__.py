"""Named failpoints toggled at runtime over an HTTP control plane."""

from failpoints.runtime import (
    OFF_ACTION,
    Action,
    ActionKind,
    FailpointHook,
    FailpointPanic,
    Registry,
    Term,
    parse_terms,
)

__all__ = [
    "OFF_ACTION",
    "Action",
    "ActionKind",
    "FailpointHook",
    "FailpointPanic",
    "Registry",
    "Term",
    "parse_terms",
]
