"""Example instrumented functions used to exercise the control plane end to end.

Each function consults the hook exactly where an annotated call site would.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence

from failpoints.runtime import FailpointHook

EXAMPLE_STRING = "ExampleString"
EXAMPLE_ONE_LINE = "ExampleOneLine"
EXAMPLE_LABELS = "ExampleLabels"
DEMO_FAILPOINTS: tuple[str, ...] = (EXAMPLE_LABELS, EXAMPLE_ONE_LINE, EXAMPLE_STRING)


class DemoCallError(ValueError):
    """Raised when a demo function cannot be invoked as requested."""


def example_func(hook: FailpointHook) -> str:
    action = hook.inject(EXAMPLE_STRING)
    if action is not None:
        return "" if action.value is None else str(action.value)
    return "example"


def example_one_line_func(hook: FailpointHook) -> str:
    hook.inject(EXAMPLE_ONE_LINE)
    return "abc"


def example_labels_func(hook: FailpointHook) -> str:
    result = ""
    i = 0
    while i < 5:
        result += "i"
        i += 1
        for _ in range(5):
            result += "j"
            if hook.inject(EXAMPLE_LABELS) is not None:
                # next outer iteration
                break
    return result


DEMO_FUNCTIONS: Mapping[str, Callable[[FailpointHook], str]] = {
    "ExampleFunc": example_func,
    "ExampleOneLineFunc": example_one_line_func,
    "ExampleLabelsFunc": example_labels_func,
}


def call_demo_function(hook: FailpointHook, name: str, args: Sequence[str] = ()) -> str:
    function = DEMO_FUNCTIONS.get(name)
    if function is None:
        raise DemoCallError(f"function {name} does not exist")
    if args:
        raise DemoCallError(f"wrong number of arguments for function {name}")
    return function(hook)
