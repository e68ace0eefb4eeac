"""Reading session state.

Tracks one reader's walk through a story: the current page, the pages
visited so far, and whether an ending has been reached. Input handling is
kept free of I/O so the CLI (or a test) can feed it raw lines.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cyoa.graph.story import START_PAGE
from cyoa.loader import parse_positive_int
from cyoa.observability.logging import get_logger

if TYPE_CHECKING:
    from cyoa.graph.story import StoryGraph
    from cyoa.models.page import Page

log = get_logger(__name__)


class SessionOverError(Exception):
    """Raised when a choice is made after the story has ended."""


@dataclass
class ReadingSession:
    """Tracks state while a reader traverses a story.

    Attributes:
        graph: The story being read.
        history: Ordinals of the pages visited, starting page first.

    Example:
        >>> session = ReadingSession(graph)
        >>> session.current.number
        1
        >>> session.choose("2")  # take the second choice
    """

    graph: StoryGraph
    history: list[int] = field(default_factory=lambda: [START_PAGE])

    def __post_init__(self) -> None:
        if not self.history:
            msg = "history must contain at least the current page"
            raise ValueError(msg)
        self.graph.page(self.history[-1])

    @property
    def current(self) -> Page:
        return self.graph.page(self.history[-1])

    @property
    def is_over(self) -> bool:
        """True once a WIN or LOSE page has been reached."""
        return self.current.is_ending

    def resolve_choice(self, raw: str) -> int | None:
        """Map a reader's input to the ordinal of the chosen page.

        Returns:
            Target ordinal, or None if ``raw`` is not the number of one of the
            current page's choices.
        """
        selection = parse_positive_int(raw)
        choices = self.current.choices
        if selection is None or selection > len(choices):
            return None
        return choices[selection - 1].target

    def choose(self, raw: str) -> Page | None:
        """Follow the choice the reader typed.

        Args:
            raw: The reader's input line, e.g. ``"2"``.

        Returns:
            The new current page, or None if the input was not a valid choice
            (the session is unchanged and the reader should be asked again).

        Raises:
            SessionOverError: If the story has already ended.
        """
        if self.is_over:
            raise SessionOverError(f"Story already ended on page {self.current.number}")

        target = self.resolve_choice(raw)
        if target is None:
            log.debug("invalid_choice", page=self.current.number, raw=raw)
            return None

        self.history.append(target)
        log.debug("page_turned", page=target, steps=len(self.history) - 1)
        return self.current
