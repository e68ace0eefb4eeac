"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

StoryWriter = Callable[..., Path]


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def write_story(tmp_path: Path) -> StoryWriter:
    """Factory writing page files into a fresh story directory.

    Usage: ``write_story({1: "2:Go\\n#\\nStart", 2: "WIN\\n#\\nYay"}, name="demo")``
    """

    def _write(pages: dict[int, str], name: str = "story", config: str | None = None) -> Path:
        story_dir = tmp_path / name
        story_dir.mkdir(parents=True, exist_ok=True)
        for number, text in pages.items():
            (story_dir / f"page{number}.txt").write_text(text, encoding="utf-8")
        if config is not None:
            (story_dir / "story.yaml").write_text(config, encoding="utf-8")
        return story_dir

    return _write


@pytest.fixture
def simple_story(write_story: StoryWriter) -> Path:
    """Story where page 1 leads to page 2 (LOSE) and page 3 (WIN)."""
    return write_story(
        {
            1: "2:Take the left tunnel\n3:Take the right tunnel\n#\nTwo tunnels open before you.\n",
            2: "LOSE\n#\nThe tunnel collapses.\n",
            3: "WIN\n#\nDaylight! You made it out.\n",
        },
        name="tunnels",
    )
