"""Tests for the interactive reading session."""

from __future__ import annotations

import pytest

from cyoa.errors import OutOfRangeError
from cyoa.models.page import PageType
from cyoa.session import ReadingSession, SessionOverError
from tests.fixtures.stories import LOOP_BACK, TWO_DOORS, make_graph


def test_starts_on_page_one() -> None:
    session = ReadingSession(make_graph(TWO_DOORS))

    assert session.current.number == 1
    assert session.history == [1]
    assert not session.is_over


def test_choose_follows_choice_index() -> None:
    """Typing "2" takes the second choice, which leads to page 3."""
    session = ReadingSession(make_graph(TWO_DOORS))

    page = session.choose("2")

    assert page is not None
    assert page.number == 3
    assert page.page_type is PageType.WIN
    assert session.history == [1, 3]
    assert session.is_over


@pytest.mark.parametrize("raw", ["0", "3", "-1", "two", "", " 1", "1.0"])
def test_invalid_choice_leaves_session_unchanged(raw: str) -> None:
    session = ReadingSession(make_graph(TWO_DOORS))

    assert session.choose(raw) is None
    assert session.history == [1]


def test_resolve_choice() -> None:
    session = ReadingSession(make_graph(TWO_DOORS))

    assert session.resolve_choice("1") == 2
    assert session.resolve_choice("2") == 3
    assert session.resolve_choice("9") is None


def test_loops_are_allowed_while_reading() -> None:
    session = ReadingSession(make_graph(LOOP_BACK))

    session.choose("1")
    session.choose("1")
    session.choose("1")

    assert session.history == [1, 2, 1, 2]
    assert not session.is_over


def test_choice_after_ending_raises() -> None:
    session = ReadingSession(make_graph(TWO_DOORS))
    session.choose("1")

    with pytest.raises(SessionOverError, match="ended on page 2"):
        session.choose("1")


def test_resume_from_history() -> None:
    session = ReadingSession(make_graph(LOOP_BACK), history=[1, 2])

    assert session.current.number == 2
    assert session.choose("2") is not None
    assert session.current.page_type is PageType.LOSE


def test_history_must_point_at_a_page() -> None:
    with pytest.raises(OutOfRangeError):
        ReadingSession(make_graph(TWO_DOORS), history=[9])


def test_history_must_not_be_empty() -> None:
    with pytest.raises(ValueError, match="at least the current page"):
        ReadingSession(make_graph(TWO_DOORS), history=[])
