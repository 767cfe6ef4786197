from __future__ import annotations

_PREFIX = "failpoint"


class FailpointError(RuntimeError):
    """Base exception for registry and term failures."""

    reason = "failpoint error"

    def __init__(self, name: str | None = None) -> None:
        self.name = name
        super().__init__(f"{_PREFIX}: {self.reason}")


class FailpointNotFoundError(FailpointError):
    """Raised when the name was never registered."""

    reason = "failpoint does not exist"


class FailpointDisabledError(FailpointError):
    """Raised when the operation requires an installed term."""

    reason = "failpoint is disabled"


class TermParseError(FailpointError):
    """Raised when a term specification is malformed."""

    reason = "could not parse terms"

    def __init__(self, spec: str, detail: str, *, name: str | None = None) -> None:
        self.spec = spec
        self.detail = detail
        super().__init__(name)


class FailpointPanic(RuntimeError):
    """Raised at an instrumented site whose failpoint selected ``panic``."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.failpoint = name
        self.panic_message = message
        text = f"failpoint panic: {name}"
        if message:
            text = f"{text}: {message}"
        super().__init__(text)
