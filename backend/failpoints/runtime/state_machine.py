from __future__ import annotations

from dataclasses import dataclass

from failpoints.runtime.terms import Action, Term


@dataclass(frozen=True, slots=True)
class TermPosition:
    """Cursor into a term: current segment and hits left before moving on.

    ``remaining`` is ``None`` on the terminal segment, which never exhausts.
    The first segment without a count is terminal; anything after it is unreachable.
    """

    segment_index: int = 0
    remaining: int | None = None


def initial_position(term: Term) -> TermPosition:
    return _enter_segment(term, 0)


def advance(term: Term, position: TermPosition) -> tuple[Action, TermPosition]:
    if not 0 <= position.segment_index < len(term.segments):
        raise ValueError(
            f"segment index {position.segment_index} is outside a term of "
            f"{len(term.segments)} segment(s)"
        )
    segment = term.segments[position.segment_index]
    if position.remaining is None:
        return segment.action, position

    remaining = position.remaining - 1
    if remaining > 0:
        return segment.action, TermPosition(position.segment_index, remaining)
    return segment.action, _enter_segment(term, position.segment_index + 1)


def _enter_segment(term: Term, index: int) -> TermPosition:
    last_index = len(term.segments) - 1
    if index >= last_index:
        return TermPosition(last_index, None)
    count = term.segments[index].count
    if count is None:
        return TermPosition(index, None)
    return TermPosition(index, count)
