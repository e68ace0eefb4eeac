"""Story configuration loading.

A story directory may carry an optional ``story.yaml``::

    title: The Haunted Lighthouse
    page_template: "page{number}.txt"
    encoding: utf-8

Every key is optional; a missing file means all defaults.
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from ruamel.yaml import YAML

from cyoa.observability.logging import get_logger

log = get_logger(__name__)

CONFIG_FILENAME = "story.yaml"

# Default configuration values
DEFAULT_PAGE_TEMPLATE = "page{number}.txt"
DEFAULT_ENCODING = "utf-8"


class StoryConfigError(Exception):
    """Raised when story configuration cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load story config at {path}: {reason}")


@dataclass
class StoryConfig:
    """Configuration for one story directory."""

    title: str
    page_template: str = DEFAULT_PAGE_TEMPLATE
    encoding: str = DEFAULT_ENCODING

    def page_filename(self, number: int) -> str:
        """File name of page ``number`` (e.g. ``page3.txt``)."""
        return self.page_template.format(number=number)

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, default_title: str) -> StoryConfig:
        """Create config from dictionary.

        Args:
            data: Dictionary containing config fields.
            default_title: Title to use when ``title`` is absent.

        Returns:
            StoryConfig instance.

        Raises:
            ValueError: If a field has the wrong type or value.
        """
        title = data.get("title", default_title)
        template = data.get("page_template", DEFAULT_PAGE_TEMPLATE)
        encoding = data.get("encoding", DEFAULT_ENCODING)

        if not isinstance(title, str) or not title.strip():
            msg = "title must be a non-empty string"
            raise ValueError(msg)
        if not isinstance(template, str) or "{number}" not in template:
            msg = "page_template must be a string containing '{number}'"
            raise ValueError(msg)
        try:
            template.format(number=1)
        except (KeyError, IndexError, ValueError) as e:
            msg = f"page_template may only use the '{{number}}' field: {e}"
            raise ValueError(msg) from e
        if not isinstance(encoding, str):
            msg = "encoding must be a string"
            raise ValueError(msg)
        try:
            codecs.lookup(encoding)
        except LookupError as e:
            msg = f"unknown encoding: {encoding!r}"
            raise ValueError(msg) from e

        return cls(
            title=title.strip(),
            page_template=template,
            encoding=encoding,
        )


def load_story_config(story_dir: Path) -> StoryConfig:
    """Load story configuration from story.yaml, falling back to defaults.

    Args:
        story_dir: Path to the story directory.

    Returns:
        StoryConfig instance.

    Raises:
        StoryConfigError: If story.yaml exists but cannot be parsed or is invalid.
    """
    config_path = story_dir / CONFIG_FILENAME
    default_title = story_dir.resolve().name

    if not config_path.exists():
        return StoryConfig(title=default_title)

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            return StoryConfig(title=default_title)
        if not isinstance(data, dict):
            raise StoryConfigError(config_path, "Top level must be a mapping")

        config = StoryConfig.from_dict(dict(data), default_title=default_title)
    except Exception as e:
        if isinstance(e, StoryConfigError):
            raise
        raise StoryConfigError(config_path, str(e)) from e

    log.debug("story_config_loaded", path=str(config_path), title=config.title)
    return config
