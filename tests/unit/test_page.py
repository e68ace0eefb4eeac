"""Tests for page records and page classification."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from cyoa.errors import MixedPageTypeError
from cyoa.models.page import Choice, Page, PageType, assign_page_type


class TestPageType:
    """Tests for the PageType enum."""

    def test_endings(self) -> None:
        """WIN and LOSE end the story, CHOICE does not."""
        assert PageType.WIN.is_ending
        assert PageType.LOSE.is_ending
        assert not PageType.CHOICE.is_ending

    def test_string_value(self) -> None:
        """Members compare equal to their page-file spelling."""
        assert PageType("WIN") is PageType.WIN
        assert str(PageType.LOSE) == "LOSE"


class TestPage:
    """Tests for the Page model."""

    def test_choice_page(self) -> None:
        """A CHOICE page exposes its targets in choice order."""
        page = Page(
            number=1,
            page_type=PageType.CHOICE,
            choices=(Choice(text="Left", target=3), Choice(text="Right", target=2)),
            narrative=("A fork in the road.",),
        )

        assert page.targets() == [3, 2]
        assert not page.is_ending
        assert page.narrative == ("A fork in the road.",)

    def test_ending_page(self) -> None:
        page = Page(number=4, page_type=PageType.LOSE)

        assert page.is_ending
        assert page.targets() == []

    def test_choice_page_without_choices_rejected(self) -> None:
        """A CHOICE page must offer at least one choice."""
        with pytest.raises(MixedPageTypeError) as exc_info:
            Page(number=2, page_type=PageType.CHOICE)

        assert exc_info.value.page == 2

    def test_ending_with_choices_rejected(self) -> None:
        """WIN and LOSE pages cannot carry choices."""
        with pytest.raises(MixedPageTypeError, match="Page 3 mixes page types"):
            Page(number=3, page_type=PageType.WIN, choices=(Choice(text="Go", target=1),))

    def test_page_is_frozen(self) -> None:
        page = Page(number=1, page_type=PageType.WIN)

        with pytest.raises(ValidationError):
            page.number = 2  # type: ignore[misc]

    def test_number_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Page(number=0, page_type=PageType.WIN)

    def test_choice_target_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            Choice(text="Nowhere", target=0)


class TestAssignPageType:
    """Tests for assign_page_type."""

    def test_first_classification_sticks(self) -> None:
        assert assign_page_type(1, None, PageType.WIN) is PageType.WIN

    def test_repeated_classification_is_accepted(self) -> None:
        """Several choice lines all imply CHOICE."""
        assert assign_page_type(1, PageType.CHOICE, PageType.CHOICE) is PageType.CHOICE

    @pytest.mark.parametrize(
        ("current", "declared"),
        [
            (PageType.WIN, PageType.LOSE),
            (PageType.LOSE, PageType.CHOICE),
            (PageType.CHOICE, PageType.WIN),
        ],
    )
    def test_conflicting_classification_raises(
        self, current: PageType, declared: PageType
    ) -> None:
        with pytest.raises(MixedPageTypeError) as exc_info:
            assign_page_type(7, current, declared)

        assert exc_info.value.page == 7
        assert exc_info.value.existing == current
        assert exc_info.value.declared == declared
