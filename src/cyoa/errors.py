"""Story graph error types.

These errors are raised when a story's pages or its page graph violate a
structural rule: a choice points nowhere, a page cannot be reached through
any choice, an outcome is missing. They are fatal to the operation that
raised them; nothing is retried and no partially-built graph is returned.

Every error carries the offending ordinals as attributes so callers can
report them without parsing the message.
"""

from __future__ import annotations

from dataclasses import dataclass, field


class StoryError(Exception):
    """Base class for all story errors."""


class StoryValidationError(StoryError):
    """Base class for structural violations detected while building a story."""


class PageSourceError(StoryError):
    """Base class for errors reading pages from their source."""


@dataclass
class DanglingReferenceError(StoryValidationError):
    """Raised when a choice targets a page outside [1, page_count].

    Attributes:
        page: Ordinal of the page holding the choice.
        target: The out-of-range target ordinal.
        page_count: Number of pages in the story.
    """

    page: int
    target: int
    page_count: int

    def __post_init__(self) -> None:
        super().__init__(
            f"Page {self.page} has a choice to page {self.target}, "
            f"but the story only has pages 1-{self.page_count}"
        )


@dataclass
class MissingOutcomeError(StoryValidationError):
    """Raised when the story has no WIN page or no LOSE page.

    Attributes:
        missing: Classifications with no page at all ("WIN", "LOSE").
    """

    missing: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        names = " and ".join(self.missing) or "WIN or LOSE"
        super().__init__(
            f"No {names} page found: at least one page must be a WIN page "
            "and at least one page must be a LOSE page"
        )


@dataclass
class OrphanPageError(StoryValidationError):
    """Raised when a non-start page is not referenced by any other page.

    Attributes:
        page: Ordinal of the first unreferenced page.
    """

    page: int

    def __post_init__(self) -> None:
        super().__init__(f"Page {self.page} is not referenced by any other page's choices")


@dataclass
class MixedPageTypeError(StoryValidationError):
    """Raised when a page's content implies two different classifications.

    Attributes:
        page: Ordinal of the page.
        existing: Classification already implied by earlier content.
        declared: Conflicting classification.
    """

    page: int
    existing: str
    declared: str

    def __post_init__(self) -> None:
        super().__init__(
            f"Page {self.page} mixes page types: already {self.existing}, "
            f"but its content also makes it {self.declared}"
        )


@dataclass
class OutOfRangeError(StoryError):
    """Raised when a page lookup uses an ordinal outside [1, page_count].

    Attributes:
        ordinal: The requested ordinal.
        page_count: Number of pages in the story.
    """

    ordinal: int
    page_count: int

    def __post_init__(self) -> None:
        super().__init__(f"Page {self.ordinal} does not exist (story has {self.page_count} pages)")


@dataclass
class UnwinnableStoryError(StoryError):
    """Raised when a win-dependent query runs on a story with no reachable WIN page.

    Attributes:
        start: Ordinal the search started from.
    """

    start: int = 1

    def __post_init__(self) -> None:
        super().__init__(
            f"This story is unwinnable: no WIN page is reachable from page {self.start}"
        )


@dataclass
class MissingStartPageError(PageSourceError):
    """Raised when the story has no page 1.

    Attributes:
        location: Where page 1 was expected (file path or description).
    """

    location: str

    def __post_init__(self) -> None:
        super().__init__(f"Start page does not exist: {self.location}")


@dataclass
class PageFormatError(PageSourceError):
    """Raised when a page's text cannot be parsed.

    Attributes:
        page: Ordinal of the page being parsed.
        reason: What is wrong with it.
        line_number: 1-based line of the offending content, 0 for whole-page problems.
    """

    page: int
    reason: str
    line_number: int = 0

    def __post_init__(self) -> None:
        where = f"page {self.page}"
        if self.line_number:
            where += f", line {self.line_number}"
        super().__init__(f"Malformed {where}: {self.reason}")
