"""Load stories from a directory of page files.

A story directory holds ``page1.txt``, ``page2.txt``, ... (the name pattern
comes from ``story.yaml``, see :mod:`cyoa.config`). Pages are numbered
contiguously from 1: loading stops at the first missing number.

Each page file has a navigation section, a line starting with ``#``, and
then the narrative text::

    1:Open the door
    2:Run away
    #
    You stand in front of an old oak door.

The navigation section is either exactly ``WIN``, exactly ``LOSE``, or one
or more ``N:text`` choice lines where ``N`` is a positive page number.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cyoa.config import StoryConfig, load_story_config
from cyoa.errors import MissingStartPageError, PageFormatError
from cyoa.graph.story import StoryGraph
from cyoa.models.page import Choice, Page, PageType, assign_page_type
from cyoa.observability.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

log = get_logger(__name__)

_DIGITS = re.compile(r"[0-9]+")
_NARRATIVE_MARKER = "#"


@dataclass(frozen=True)
class Story:
    """A loaded story: where it came from, its config, and its graph."""

    path: Path
    config: StoryConfig
    graph: StoryGraph

    @property
    def title(self) -> str:
        return self.config.title


def parse_positive_int(text: str) -> int | None:
    """Return the value of ``text`` if it is a plain decimal number >= 1.

    Signs, whitespace and non-ASCII digits are rejected.
    """
    if not _DIGITS.fullmatch(text):
        return None
    value = int(text)
    return value if value >= 1 else None


def parse_page(number: int, lines: Iterable[str]) -> Page:
    """Parse the lines of one page file.

    Args:
        number: Ordinal of the page.
        lines: Lines of the page, without line terminators.

    Returns:
        The page record.

    Raises:
        PageFormatError: If the page is empty or a navigation line is malformed.
        MixedPageTypeError: If the navigation section mixes WIN, LOSE and choices.
    """
    page_type: PageType | None = None
    choices: list[Choice] = []
    narrative: list[str] = []
    in_navigation = True
    seen_any = False

    for line_number, line in enumerate(lines, start=1):
        seen_any = True
        if not in_navigation:
            narrative.append(line)
            continue

        if line in (PageType.WIN, PageType.LOSE):
            declared = PageType(line)
            if page_type is declared:
                raise PageFormatError(number, f"redundant {declared} line", line_number)
            page_type = assign_page_type(number, page_type, declared)
        elif line.startswith(_NARRATIVE_MARKER):
            in_navigation = False
        else:
            choices.append(_parse_choice(number, line, line_number))
            page_type = assign_page_type(number, page_type, PageType.CHOICE)

    if not seen_any:
        raise PageFormatError(number, "page is empty")
    if page_type is None:
        raise PageFormatError(
            number, "navigation section has no choices and is neither WIN nor LOSE"
        )

    return Page(
        number=number,
        page_type=page_type,
        choices=tuple(choices),
        narrative=tuple(narrative),
    )


def _parse_choice(number: int, line: str, line_number: int) -> Choice:
    target_text, colon, text = line.partition(":")
    if not colon:
        raise PageFormatError(number, f"choice has no colon: {line!r}", line_number)
    target = parse_positive_int(target_text)
    if target is None:
        raise PageFormatError(
            number, f"choice has an invalid page number: {target_text!r}", line_number
        )
    return Choice(text=text, target=target)


def split_lines(text: str) -> list[str]:
    """Split page text on newlines only.

    Form feeds, vertical tabs and Unicode line separators stay part of the
    line. A trailing carriage return is dropped; a final newline does not
    start an empty line.
    """
    lines = [line.removesuffix("\r") for line in text.split("\n")]
    if lines[-1] == "":
        lines.pop()
    return lines


def page_path(story_dir: Path, number: int, config: StoryConfig) -> Path:
    """Path of page ``number`` within the story directory."""
    return story_dir / config.page_filename(number)


def discover_page_count(story_dir: Path, config: StoryConfig) -> int:
    """Count contiguous page files starting at page 1.

    Returns:
        N such that pages 1..N exist and page N+1 does not; 0 if page 1 is missing.
    """
    count = 0
    while page_path(story_dir, count + 1, config).is_file():
        count += 1
    return count


def read_page(story_dir: Path, number: int, config: StoryConfig) -> Page:
    """Read and parse one page file.

    Raises:
        PageFormatError: If the file is not valid text or not a valid page.
        OSError: If the file cannot be read.
    """
    path = page_path(story_dir, number, config)
    try:
        text = path.read_text(encoding=config.encoding)
    except UnicodeDecodeError as e:
        raise PageFormatError(number, f"{path.name} is not valid {config.encoding} text") from e
    return parse_page(number, split_lines(text))


def load_pages(story_dir: Path, config: StoryConfig) -> list[Page]:
    """Load every page of a story, in ordinal order.

    Raises:
        MissingStartPageError: If page 1 does not exist.
        PageFormatError: If a page cannot be parsed.
    """
    count = discover_page_count(story_dir, config)
    if count == 0:
        raise MissingStartPageError(str(page_path(story_dir, 1, config)))
    return [read_page(story_dir, number, config) for number in range(1, count + 1)]


def load_story(story_dir: Path) -> Story:
    """Load, parse and validate a story directory.

    Args:
        story_dir: Directory holding the page files (and optional story.yaml).

    Returns:
        The loaded story with its validated graph.

    Raises:
        StoryConfigError: If story.yaml is invalid.
        MissingStartPageError: If page 1 does not exist.
        PageFormatError: If a page cannot be parsed.
        StoryValidationError: If the pages do not form a valid story.
    """
    config = load_story_config(story_dir)
    pages = load_pages(story_dir, config)
    graph = StoryGraph.build(pages)
    log.info("story_loaded", path=str(story_dir), title=config.title, pages=graph.page_count)
    return Story(path=story_dir, config=config, graph=graph)
