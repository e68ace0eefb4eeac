"""Graph package - validated story graph and the algorithms over it.

The StoryGraph is built once from page records and is read-only afterwards;
reachability and route enumeration are pure queries against it.
"""

from cyoa.graph.algorithms import (
    Route,
    RouteSearch,
    RouteStep,
    compute_depths,
    enumerate_win_routes,
    format_route,
    has_winning_outcome,
    unreachable_pages,
)
from cyoa.graph.story import START_PAGE, StoryGraph

__all__ = [
    "START_PAGE",
    "Route",
    "RouteSearch",
    "RouteStep",
    "StoryGraph",
    "compute_depths",
    "enumerate_win_routes",
    "format_route",
    "has_winning_outcome",
    "unreachable_pages",
]
