"""Story inspection and structure analysis.

Summarises a validated story: page mix, reachability from the start page,
and how many winning routes exist. Pure graph analysis, no I/O beyond
loading the story.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cyoa.graph.algorithms import compute_depths, enumerate_win_routes, has_winning_outcome
from cyoa.loader import load_story
from cyoa.models.page import PageType
from cyoa.observability.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

    from cyoa.graph.story import StoryGraph

log = get_logger(__name__)


@dataclass
class StorySummary:
    """High-level page statistics."""

    title: str
    page_count: int
    choice_count: int
    page_types: dict[str, int] = field(default_factory=dict)


@dataclass
class ReachabilityStats:
    """Which pages the start page can reach, and how deep they are."""

    reachable: int = 0
    unreachable_pages: list[int] = field(default_factory=list)
    max_depth: int = 0
    unreachable_wins: list[int] = field(default_factory=list)


@dataclass
class RouteStats:
    """Winning route metrics. Lengths count pages, start and WIN page included."""

    winnable: bool = False
    route_count: int = 0
    shortest: int | None = None
    longest: int | None = None


@dataclass
class InspectionReport:
    """Complete story inspection report."""

    summary: StorySummary
    reachability: ReachabilityStats
    routes: RouteStats


def inspect_story(story_dir: Path) -> InspectionReport:
    """Load a story directory and inspect it.

    Raises:
        StoryError: If the story cannot be loaded or is invalid.
        StoryConfigError: If story.yaml is invalid.
    """
    story = load_story(story_dir)
    return inspect_graph(story.graph, title=story.title)


def inspect_graph(graph: StoryGraph, title: str = "") -> InspectionReport:
    """Inspect an already-built story graph."""
    summary = _story_summary(graph, title)
    reachability = _reachability_stats(graph)
    routes = _route_stats(graph)

    log.info(
        "inspection_complete",
        title=title,
        pages=summary.page_count,
        reachable=reachability.reachable,
        routes=routes.route_count,
    )

    return InspectionReport(summary=summary, reachability=reachability, routes=routes)


def _story_summary(graph: StoryGraph, title: str) -> StorySummary:
    counts = Counter(str(page.page_type) for page in graph)
    return StorySummary(
        title=title,
        page_count=graph.page_count,
        choice_count=sum(len(page.choices) for page in graph),
        # Every classification listed, zero counts included
        page_types={str(t): counts.get(str(t), 0) for t in PageType},
    )


def _reachability_stats(graph: StoryGraph) -> ReachabilityStats:
    depths = compute_depths(graph)
    unreachable = [page.number for page in graph if page.number not in depths]
    unreachable_wins = [
        page.number for page in graph.pages_of_type(PageType.WIN) if page.number not in depths
    ]
    return ReachabilityStats(
        reachable=len(depths),
        unreachable_pages=unreachable,
        max_depth=max(depths.values()),
        unreachable_wins=unreachable_wins,
    )


def _route_stats(graph: StoryGraph) -> RouteStats:
    """Enumerate routes only when the story is winnable."""
    if not has_winning_outcome(graph):
        return RouteStats()

    routes = enumerate_win_routes(graph)
    lengths = [len(route) for route in routes]
    return RouteStats(
        winnable=True,
        route_count=len(routes),
        shortest=min(lengths),
        longest=max(lengths),
    )
