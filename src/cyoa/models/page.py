"""Page records: the nodes of a story graph.

A page is one narrative unit. CHOICE pages lead on to other pages through
ordered, labelled choices; WIN and LOSE pages end the story and have no
choices at all.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cyoa.errors import MixedPageTypeError


class PageType(StrEnum):
    """Classification of a page."""

    CHOICE = "CHOICE"
    WIN = "WIN"
    LOSE = "LOSE"

    @property
    def is_ending(self) -> bool:
        """True for WIN and LOSE pages."""
        return self is not PageType.CHOICE


class Choice(BaseModel):
    """A labelled edge from one page to another."""

    model_config = ConfigDict(frozen=True)

    text: str
    target: int = Field(ge=1)


class Page(BaseModel):
    """An immutable page record.

    Attributes:
        number: 1-based ordinal of the page within its story.
        page_type: CHOICE, WIN or LOSE.
        choices: Ordered choices; non-empty iff page_type is CHOICE.
        narrative: Story text lines, in order.
    """

    model_config = ConfigDict(frozen=True)

    number: int = Field(ge=1)
    page_type: PageType
    choices: tuple[Choice, ...] = ()
    narrative: tuple[str, ...] = ()

    @model_validator(mode="after")
    def choices_match_page_type(self) -> Page:
        """Reject CHOICE pages without choices and endings with choices."""
        if self.page_type is PageType.CHOICE and not self.choices:
            # A CHOICE page with nothing to choose is an ending of unknown kind
            raise MixedPageTypeError(self.number, PageType.CHOICE, "an ending")
        if self.page_type.is_ending and self.choices:
            raise MixedPageTypeError(self.number, self.page_type, PageType.CHOICE)
        return self

    def targets(self) -> list[int]:
        """Target ordinals of the choices, in choice order."""
        return [choice.target for choice in self.choices]

    @property
    def is_ending(self) -> bool:
        return self.page_type.is_ending


def assign_page_type(number: int, current: PageType | None, declared: PageType) -> PageType:
    """Assign a classification while a page's content is being read.

    The first classification implied by the content sticks; a later one that
    differs means the page mixes types.

    Args:
        number: Ordinal of the page being classified.
        current: Classification assigned so far, or None.
        declared: Classification implied by the content just read.

    Returns:
        The page's classification.

    Raises:
        MixedPageTypeError: If current and declared disagree.
    """
    if current is None or current is declared:
        return declared
    raise MixedPageTypeError(number, current, declared)
