"""Term language: the ``[count*]action -> ...`` strings installed on failpoints.

Grammar::

    term    := segment ('->' segment)*
    segment := [<positive int> '*'] action
    action  := off | return | return(<literal>) | sleep(<duration>)
             | panic | panic(<string>)

Parsing never touches a registry; the result is an immutable ``Term`` that
remembers the exact text it was parsed from so listings echo it verbatim.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import StrEnum

from failpoints.runtime.errors import TermParseError

SEGMENT_SEPARATOR = "->"

_COUNT_PATTERN = re.compile(r"(\d+)\s*\*")
_NAME_PATTERN = re.compile(r"[A-Za-z_]+")
_BARE_ARGUMENT_PATTERN = re.compile(r"[^()\s\"]+")
_INT_PATTERN = re.compile(r"[+-]?\d+")
_FLOAT_PATTERN = re.compile(r"[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?")
_MILLISECONDS_PATTERN = re.compile(r"\d+")
_DURATION_PATTERN = re.compile(r"(?:(?:\d+(?:\.\d*)?|\.\d+)(?:ns|us|µs|μs|ms|s|m|h))+")
_DURATION_PART_PATTERN = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|μs|ms|s|m|h)")
_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "μs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


class ActionKind(StrEnum):
    OFF = "off"
    RETURN = "return"
    SLEEP = "sleep"
    PANIC = "panic"


@dataclass(frozen=True, slots=True)
class Action:
    """What an instrumented site should do for one hit.

    ``value`` is the returned literal for ``return``, the pause in seconds for
    ``sleep`` and the message for ``panic``; ``None`` when absent.
    """

    kind: ActionKind
    value: object | None = None

    @property
    def is_off(self) -> bool:
        return self.kind == ActionKind.OFF


OFF_ACTION = Action(ActionKind.OFF)


@dataclass(frozen=True, slots=True)
class Segment:
    action: Action
    count: int | None = None


@dataclass(frozen=True, slots=True)
class Term:
    source: str
    segments: tuple[Segment, ...]

    def __post_init__(self) -> None:
        if not self.segments:
            raise ValueError("term requires at least one segment")

    def __str__(self) -> str:
        return self.source


@dataclass(frozen=True, slots=True)
class _Argument:
    text: str
    quoted: bool
    value: object


def parse_terms(spec: str) -> Term:
    if not spec.strip():
        raise TermParseError(spec, "empty term")
    segments = _TermScanner(spec).scan()
    return Term(source=spec, segments=tuple(segments))


class _TermScanner:
    def __init__(self, spec: str) -> None:
        self._spec = spec
        self._pos = 0

    def scan(self) -> list[Segment]:
        segments: list[Segment] = []
        while True:
            self._skip_whitespace()
            segments.append(self._segment())
            self._skip_whitespace()
            if self._pos >= len(self._spec):
                return segments
            if not self._spec.startswith(SEGMENT_SEPARATOR, self._pos):
                raise self._error(f"unexpected {self._spec[self._pos]!r}")
            self._pos += len(SEGMENT_SEPARATOR)

    def _segment(self) -> Segment:
        count: int | None = None
        count_match = _COUNT_PATTERN.match(self._spec, self._pos)
        if count_match is not None:
            count = int(count_match.group(1))
            if count <= 0:
                raise self._error("count must be a positive integer")
            self._pos = count_match.end()
            self._skip_whitespace()

        name_match = _NAME_PATTERN.match(self._spec, self._pos)
        if name_match is None:
            raise self._error("expected an action")
        name = name_match.group(0)
        try:
            kind = ActionKind(name)
        except ValueError:
            raise self._error(f"unknown action {name!r}") from None
        self._pos = name_match.end()
        self._skip_whitespace()

        argument: _Argument | None = None
        if self._peek() == "(":
            argument = self._argument()
        return Segment(action=self._build_action(kind, argument), count=count)

    def _argument(self) -> _Argument:
        self._pos += 1
        self._skip_whitespace()
        if self._peek() == '"':
            argument = self._string_literal()
        else:
            bare_match = _BARE_ARGUMENT_PATTERN.match(self._spec, self._pos)
            if bare_match is None:
                raise self._error("expected an argument")
            text = bare_match.group(0)
            argument = _Argument(text=text, quoted=False, value=text)
            self._pos = bare_match.end()
        self._skip_whitespace()
        if self._peek() != ")":
            raise self._error("expected ')'")
        self._pos += 1
        return argument

    def _string_literal(self) -> _Argument:
        start = self._pos
        index = start + 1
        while index < len(self._spec):
            char = self._spec[index]
            if char == "\\":
                index += 2
                continue
            if char == '"':
                raw = self._spec[start : index + 1]
                try:
                    value = json.loads(raw)
                except ValueError:
                    raise self._error(f"malformed string literal {raw}") from None
                self._pos = index + 1
                return _Argument(text=raw, quoted=True, value=value)
            index += 1
        raise self._error("unterminated string literal")

    def _build_action(self, kind: ActionKind, argument: _Argument | None) -> Action:
        if kind == ActionKind.OFF:
            if argument is not None:
                raise self._error("off takes no argument")
            return OFF_ACTION
        if kind == ActionKind.RETURN:
            if argument is None:
                return Action(kind)
            if argument.quoted:
                return Action(kind, argument.value)
            return Action(kind, self._bare_literal(argument.text))
        if kind == ActionKind.SLEEP:
            if argument is None:
                raise self._error("sleep requires a duration")
            return Action(kind, self._duration(str(argument.value)))
        if argument is None:
            return Action(kind)
        if not argument.quoted:
            raise self._error("panic message must be a string literal")
        return Action(kind, argument.value)

    def _bare_literal(self, text: str) -> object:
        if text == "true":
            return True
        if text == "false":
            return False
        if _INT_PATTERN.fullmatch(text):
            return int(text)
        if _FLOAT_PATTERN.fullmatch(text):
            return float(text)
        raise self._error(f"malformed literal {text!r}")

    def _duration(self, text: str) -> float:
        if _MILLISECONDS_PATTERN.fullmatch(text):
            return int(text) / 1000
        if not _DURATION_PATTERN.fullmatch(text):
            raise self._error(f"malformed duration {text!r}")
        return sum(
            float(amount) * _DURATION_UNITS[unit]
            for amount, unit in _DURATION_PART_PATTERN.findall(text)
        )

    def _peek(self) -> str:
        return self._spec[self._pos] if self._pos < len(self._spec) else ""

    def _skip_whitespace(self) -> None:
        while self._pos < len(self._spec) and self._spec[self._pos].isspace():
            self._pos += 1

    def _error(self, detail: str) -> TermParseError:
        return TermParseError(self._spec, f"{detail} at offset {self._pos}")
