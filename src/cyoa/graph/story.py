"""Validated story graph.

A StoryGraph owns the pages of one story, indexed by ordinal, together with
the reverse-reference index (which pages point at each page). Structural
rules are checked once, eagerly, when the graph is built:

- every choice targets an existing page
- at least one WIN page and at least one LOSE page exist
- every page except the start page is the target of some other page's choice

A graph that builds successfully is consistent for its whole lifetime; it
cannot be mutated afterwards.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING

from cyoa.errors import (
    DanglingReferenceError,
    MissingOutcomeError,
    MissingStartPageError,
    OrphanPageError,
    OutOfRangeError,
)
from cyoa.models.page import Page, PageType
from cyoa.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping

log = get_logger(__name__)

START_PAGE = 1


class StoryGraph:
    """Immutable directed graph of story pages.

    Use :meth:`build` to construct one; it validates the pages and raises
    on the first structural violation.
    """

    __slots__ = ("_pages", "_referenced_by")

    def __init__(
        self,
        pages: tuple[Page, ...],
        referenced_by: Mapping[int, frozenset[int]],
    ) -> None:
        self._pages = pages
        self._referenced_by = referenced_by

    @classmethod
    def build(cls, pages: Iterable[Page]) -> StoryGraph:
        """Validate pages and build the graph.

        Args:
            pages: Page records for ordinals 1..N, in order.

        Returns:
            The validated graph.

        Raises:
            MissingStartPageError: If no pages are given.
            ValueError: If a page's ordinal does not match its position.
            DanglingReferenceError: If a choice targets a page outside [1, N].
            MissingOutcomeError: If there is no WIN page or no LOSE page.
            OrphanPageError: If a non-start page is referenced by no other page.
        """
        ordered = tuple(pages)
        if not ordered:
            raise MissingStartPageError("no pages were provided")

        for position, page in enumerate(ordered, start=1):
            if page.number != position:
                msg = (
                    f"Page at position {position} has ordinal {page.number}; "
                    "pages must be numbered 1..N in order"
                )
                raise ValueError(msg)

        page_count = len(ordered)
        for page in ordered:
            for target in page.targets():
                if not 1 <= target <= page_count:
                    raise DanglingReferenceError(page.number, target, page_count)

        referenced_by = _build_referenced_by(ordered)

        present = {page.page_type for page in ordered}
        missing = [str(t) for t in (PageType.WIN, PageType.LOSE) if t not in present]
        if missing:
            raise MissingOutcomeError(missing)

        for number in range(START_PAGE + 1, page_count + 1):
            if not referenced_by[number]:
                raise OrphanPageError(number)

        log.debug(
            "story_graph_built",
            pages=page_count,
            choices=sum(len(p.choices) for p in ordered),
        )
        return cls(ordered, referenced_by)

    # -------------------------------------------------------------------------
    # Page access
    # -------------------------------------------------------------------------

    @property
    def page_count(self) -> int:
        """Number of pages, N."""
        return len(self._pages)

    @property
    def pages(self) -> tuple[Page, ...]:
        """All pages, ordinal order."""
        return self._pages

    def page(self, ordinal: int) -> Page:
        """Get a page by ordinal.

        Raises:
            OutOfRangeError: If ordinal is not in [1, page_count].
        """
        if not 1 <= ordinal <= len(self._pages):
            raise OutOfRangeError(ordinal, len(self._pages))
        return self._pages[ordinal - 1]

    def has_page(self, ordinal: int) -> bool:
        return 1 <= ordinal <= len(self._pages)

    def referenced_by(self, ordinal: int) -> frozenset[int]:
        """Ordinals of pages with a choice leading to this page.

        Raises:
            OutOfRangeError: If ordinal is not in [1, page_count].
        """
        if not self.has_page(ordinal):
            raise OutOfRangeError(ordinal, len(self._pages))
        return self._referenced_by[ordinal]

    @property
    def reverse_index(self) -> Mapping[int, frozenset[int]]:
        """Read-only view of the whole reverse-reference index."""
        return self._referenced_by

    def pages_of_type(self, page_type: PageType) -> list[Page]:
        return [page for page in self._pages if page.page_type is page_type]

    def __len__(self) -> int:
        return len(self._pages)

    def __iter__(self) -> Iterator[Page]:
        return iter(self._pages)

    def __repr__(self) -> str:
        wins = len(self.pages_of_type(PageType.WIN))
        loses = len(self.pages_of_type(PageType.LOSE))
        return f"StoryGraph(pages={len(self._pages)}, win={wins}, lose={loses})"


def _build_referenced_by(pages: tuple[Page, ...]) -> Mapping[int, frozenset[int]]:
    """Invert the forward choice edges in a single pass.

    Self-references do not count: a page must be reached from some *other*
    page.
    """
    sources: dict[int, set[int]] = {page.number: set() for page in pages}
    for page in pages:
        for target in page.targets():
            if target != page.number:
                sources[target].add(page.number)
    return MappingProxyType({number: frozenset(refs) for number, refs in sources.items()})
