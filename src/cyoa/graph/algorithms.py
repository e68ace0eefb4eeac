"""Reachability and win-route algorithms over a story graph.

Pure functions (and one explicit search object) that read the graph without
modifying it:

- ``compute_depths``: breadth-first shortest hop count from the start page.
- ``has_winning_outcome``: whether any WIN page is reachable at all.
- ``enumerate_win_routes``: every simple path from the start page to a WIN
  page, found by an iterative depth-first search with explicit backtracking
  state (``RouteSearch``).
"""

from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, NamedTuple

from cyoa.errors import UnwinnableStoryError
from cyoa.graph.story import START_PAGE
from cyoa.models.page import PageType
from cyoa.observability.logging import get_logger

if TYPE_CHECKING:
    from cyoa.graph.story import StoryGraph

log = get_logger(__name__)


class RouteStep(NamedTuple):
    """One page on a route and the choice taken to leave it.

    ``choice`` is the 1-based index of the choice taken from ``page``; it is
    None on the final page of a route.
    """

    page: int
    choice: int | None


Route = tuple[RouteStep, ...]


# ---------------------------------------------------------------------------
# Reachability
# ---------------------------------------------------------------------------


def compute_depths(graph: StoryGraph, start: int = START_PAGE) -> dict[int, int]:
    """Compute the minimum number of choices needed to reach each page.

    Breadth-first from ``start``. A page's depth is fixed when it is first
    discovered; it is never enqueued twice.

    Args:
        graph: The story graph.
        start: Ordinal to measure from (depth 0).

    Returns:
        Dict mapping each reachable ordinal to its depth, in discovery order.
        Unreachable pages are absent.

    Raises:
        OutOfRangeError: If start is not a page of the graph.
    """
    graph.page(start)

    depths: dict[int, int] = {start: 0}
    queue: deque[int] = deque([start])
    while queue:
        current = queue.popleft()
        next_depth = depths[current] + 1
        for target in graph.page(current).targets():
            if target not in depths:
                depths[target] = next_depth
                queue.append(target)
    return depths


def unreachable_pages(graph: StoryGraph, start: int = START_PAGE) -> list[int]:
    """Ordinals (ascending) that no sequence of choices reaches from start."""
    depths = compute_depths(graph, start)
    return [page.number for page in graph if page.number not in depths]


def has_winning_outcome(graph: StoryGraph, start: int = START_PAGE) -> bool:
    """True iff at least one WIN page is reachable from start."""
    depths = compute_depths(graph, start)
    return any(page.number in depths for page in graph.pages_of_type(PageType.WIN))


# ---------------------------------------------------------------------------
# Win routes
# ---------------------------------------------------------------------------


class RouteSearch:
    """Iterative depth-first search for every simple route to a WIN page.

    The search state is held in plain attributes so it can be stepped and
    inspected:

    Attributes:
        path: Current candidate route as ``[page, choice]`` entries. The first
            entry's choice starts at 0; each entry's choice is overwritten
            with the index used to leave it when the next page is popped.
        remaining: For each page open on the path, how many of its children
            are still unexplored.
        stack: Pending ``(page, choice_index)`` pairs; last pushed is
            explored first.
        routes: Routes found so far, in discovery order.
    """

    def __init__(self, graph: StoryGraph, start: int = START_PAGE) -> None:
        graph.page(start)
        self.graph = graph
        self.start = start
        self.path: list[list[int]] = []
        self.remaining: dict[int, int] = {}
        self.stack: list[tuple[int, int]] = [(start, 0)]
        self.routes: list[Route] = []

    @property
    def done(self) -> bool:
        return not self.stack

    def on_path(self, page: int) -> bool:
        return any(entry[0] == page for entry in self.path)

    def step(self) -> None:
        """Pop one pending page, extend or prune the path, then backtrack.

        Raises:
            RuntimeError: If the search is already done.
        """
        if not self.stack:
            msg = "route search is already done"
            raise RuntimeError(msg)
        number, choice = self.stack.pop()
        if self.path:
            self.path[-1][1] = choice

        if self.on_path(number):
            # Cycle: the child is pruned, which finishes it for its parent
            self.remaining[self.path[-1][0]] -= 1
        else:
            self.path.append([number, choice])
            page = self.graph.page(number)
            targets = page.targets()
            self.remaining[number] = len(targets)
            if not targets:
                if page.page_type is PageType.WIN:
                    self.routes.append(self._snapshot())
            else:
                for index, target in enumerate(targets, start=1):
                    self.stack.append((target, index))

        self._unwind()

    def run(self) -> list[Route]:
        """Step until no pages are pending and return all routes found."""
        while self.stack:
            self.step()
        return self.routes

    def _unwind(self) -> None:
        """Pop fully explored pages off the end of the path."""
        while len(self.path) > 1 and self.remaining[self.path[-1][0]] == 0:
            finished, _ = self.path.pop()
            del self.remaining[finished]
            self.remaining[self.path[-1][0]] -= 1

    def _snapshot(self) -> Route:
        *leading, (last, _) = self.path
        return (*(RouteStep(page, choice) for page, choice in leading), RouteStep(last, None))


def enumerate_win_routes(graph: StoryGraph, start: int = START_PAGE) -> list[Route]:
    """Enumerate every simple route from start to a WIN page.

    Routes never repeat a page; a choice leading back onto the current route
    is pruned, so cyclic stories terminate. Routes come out in depth-first
    order with the highest-numbered choice of each page explored first.

    Args:
        graph: The story graph.
        start: Ordinal to start from.

    Returns:
        Routes in discovery order. Never empty.

    Raises:
        UnwinnableStoryError: If no WIN page is reachable from start.
        OutOfRangeError: If start is not a page of the graph.
    """
    if not has_winning_outcome(graph, start):
        raise UnwinnableStoryError(start)

    routes = RouteSearch(graph, start).run()
    log.info("win_routes_enumerated", start=start, routes=len(routes))
    return routes


def format_route(route: Route) -> str:
    """Render a route as ``1(2),3(win)``: each page with the choice taken from it."""
    parts = [
        f"{step.page}(win)" if step.choice is None else f"{step.page}({step.choice})"
        for step in route
    ]
    return ",".join(parts)
