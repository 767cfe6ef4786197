from failpoints.demo.functions import (
    DEMO_FAILPOINTS,
    DEMO_FUNCTIONS,
    EXAMPLE_LABELS,
    EXAMPLE_ONE_LINE,
    EXAMPLE_STRING,
    DemoCallError,
    call_demo_function,
    example_func,
    example_labels_func,
    example_one_line_func,
)

__all__ = [
    "DEMO_FAILPOINTS",
    "DEMO_FUNCTIONS",
    "EXAMPLE_LABELS",
    "EXAMPLE_ONE_LINE",
    "EXAMPLE_STRING",
    "DemoCallError",
    "call_demo_function",
    "example_func",
    "example_labels_func",
    "example_one_line_func",
]
