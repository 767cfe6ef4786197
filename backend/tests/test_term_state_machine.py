from __future__ import annotations

import pytest

from failpoints.runtime.state_machine import TermPosition, advance, initial_position
from failpoints.runtime.terms import Action, ActionKind, Term, parse_terms


def _run(term: Term, hits: int) -> list[object]:
    position = initial_position(term)
    values: list[object] = []
    for _ in range(hits):
        action, position = advance(term, position)
        values.append(action.value)
    return values


def test_first_segment_then_terminal_forever() -> None:
    term = parse_terms('1*return("A")->return("B")')

    assert _run(term, 5) == ["A", "B", "B", "B", "B"]


def test_counted_segments_are_consumed_in_order() -> None:
    term = parse_terms("2*return(1)->3*return(2)->return(3)")

    assert _run(term, 8) == [1, 1, 2, 2, 2, 3, 3, 3]


def test_terminal_count_never_exhausts() -> None:
    term = parse_terms("2*return(7)")

    assert initial_position(term) == TermPosition(0, None)
    assert _run(term, 4) == [7, 7, 7, 7]


def test_off_segment_yields_off_action() -> None:
    term = parse_terms("1*off->return(1)")
    position = initial_position(term)

    action, position = advance(term, position)
    assert action.kind == ActionKind.OFF
    action, position = advance(term, position)
    assert action == Action(ActionKind.RETURN, 1)


def test_initial_position_carries_first_count() -> None:
    term = parse_terms("4*return->off")

    assert initial_position(term) == TermPosition(0, 4)


def test_advance_rejects_position_outside_term() -> None:
    term = parse_terms("return")

    with pytest.raises(ValueError, match="outside a term"):
        advance(term, TermPosition(3, None))


def test_first_countless_segment_repeats_forever() -> None:
    term = parse_terms('return("a")->return("b")')

    assert initial_position(term) == TermPosition(0, None)
    assert _run(term, 3) == ["a", "a", "a"]


def test_countless_segment_in_the_middle_stops_the_chain() -> None:
    term = parse_terms("1*return(1)->return(2)->return(3)")

    assert _run(term, 4) == [1, 2, 2, 2]
