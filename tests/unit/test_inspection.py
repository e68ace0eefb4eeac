"""Tests for story inspection."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from cyoa.errors import MissingStartPageError
from cyoa.inspection import inspect_graph, inspect_story
from tests.fixtures.stories import DIAMOND, LOOP_BACK, UNWINNABLE, make_graph

if TYPE_CHECKING:
    from pathlib import Path


class TestInspectGraph:
    """Tests for inspect_graph."""

    def test_summary(self) -> None:
        report = inspect_graph(make_graph(DIAMOND), title="Diamond")

        assert report.summary.title == "Diamond"
        assert report.summary.page_count == 5
        assert report.summary.choice_count == 5
        assert report.summary.page_types == {"CHOICE": 3, "WIN": 1, "LOSE": 1}

    def test_reachability(self) -> None:
        report = inspect_graph(make_graph(LOOP_BACK))

        assert report.reachability.reachable == 4
        assert report.reachability.unreachable_pages == []
        assert report.reachability.max_depth == 2
        assert report.reachability.unreachable_wins == []

    def test_route_stats(self) -> None:
        report = inspect_graph(make_graph(DIAMOND))

        assert report.routes.winnable
        assert report.routes.route_count == 2
        assert report.routes.shortest == 3
        assert report.routes.longest == 3

    def test_unwinnable_story(self) -> None:
        report = inspect_graph(make_graph(UNWINNABLE))

        assert report.reachability.unreachable_pages == [3, 4, 6]
        assert report.reachability.unreachable_wins == [3]
        assert report.reachability.max_depth == 2
        assert not report.routes.winnable
        assert report.routes.route_count == 0
        assert report.routes.shortest is None


class TestInspectStory:
    """Tests for inspect_story."""

    def test_loads_and_inspects(self, simple_story: Path) -> None:
        report = inspect_story(simple_story)

        assert report.summary.title == "tunnels"
        assert report.summary.page_types == {"CHOICE": 1, "WIN": 1, "LOSE": 1}
        assert report.routes.route_count == 1
        assert report.routes.shortest == 2

    def test_missing_story(self, tmp_path: Path) -> None:
        with pytest.raises(MissingStartPageError):
            inspect_story(tmp_path)
