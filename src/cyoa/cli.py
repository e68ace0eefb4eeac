"""CYOA CLI - typer application entry point."""

from __future__ import annotations

import atexit
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from cyoa.config import StoryConfigError
from cyoa.errors import StoryError, UnwinnableStoryError
from cyoa.graph.algorithms import (
    compute_depths,
    enumerate_win_routes,
    format_route,
    has_winning_outcome,
)
from cyoa.loader import Story, load_story
from cyoa.models.page import PageType
from cyoa.observability import close_file_logging, configure_logging, get_logger
from cyoa.session import ReadingSession

if TYPE_CHECKING:
    from collections.abc import Iterator

    from cyoa.models.page import Page


def _is_interactive_tty() -> bool:
    """Check if stdin/stdout are connected to a TTY."""
    return sys.stdin.isatty() and sys.stdout.isatty()


# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="cyoa",
    help="CYOA: read, validate and solve choose-your-own-adventure stories.",
    no_args_is_help=True,
)
console = Console()

# Default directory for stories
DEFAULT_STORIES_DIR = Path("stories")

CHOICE_PROMPT = "What would you like to do?"
WIN_MESSAGE = "Congratulations! You have won. Hooray!"
LOSE_MESSAGE = "Sorry, you have lost. Better luck next time!"
INVALID_CHOICE_MESSAGE = "That is not a valid choice, please try again"
UNWINNABLE_MESSAGE = "This story is unwinnable!"

DIAGRAM_FORMATS = ("dot", "mermaid")

# Global state for logging flags (set by callback, used by commands)
_verbose: int = 0
_log_enabled: bool = False
_stories_dir: Path = DEFAULT_STORIES_DIR

StoryArgument = Annotated[
    Path,
    typer.Argument(help="Story directory. Can be a path or name (looks in --stories-dir)."),
]


@app.callback()
def main(
    verbose: Annotated[
        int,
        typer.Option(
            "-v",
            "--verbose",
            count=True,
            help="Increase verbosity: -v for INFO, -vv for DEBUG.",
        ),
    ] = 0,
    log: Annotated[
        bool,
        typer.Option(
            "--log",
            help="Enable file logging to {story}/logs/debug.jsonl.",
        ),
    ] = False,
    stories_dir: Annotated[
        Path,
        typer.Option(
            "--stories-dir",
            "-d",
            help="Base directory for stories (default: ./stories).",
            envvar="CYOA_STORIES_DIR",
        ),
    ] = DEFAULT_STORIES_DIR,
) -> None:
    """CYOA: read, validate and solve choose-your-own-adventure stories."""
    global _verbose, _log_enabled, _stories_dir
    _verbose = verbose
    _log_enabled = log
    _stories_dir = stories_dir

    # Configure console logging (file logging configured later when the story is known)
    configure_logging(verbosity=verbose)


def _configure_story_logging(story_path: Path) -> None:
    """Configure file logging if --log flag was set."""
    if _log_enabled:
        configure_logging(verbosity=_verbose, log_to_file=True, log_dir=story_path / "logs")
        atexit.register(close_file_logging)


def _resolve_story_path(story: Path) -> Path:
    """Resolve a story argument to a directory.

    Resolution order:
    1. If story exists as given, use it
    2. If story is a name (no path separators), look in _stories_dir

    Args:
        story: Story path or name from CLI argument.

    Returns:
        Resolved story path.
    """
    if story.exists():
        return story

    if len(story.parts) == 1:
        candidate = _stories_dir / story
        if candidate.exists():
            return candidate

    # Return as-is (will fail in _load_or_exit with helpful error)
    return story


def _load_or_exit(story: Path) -> Story:
    """Resolve, load and validate a story, exiting with status 1 on failure.

    Args:
        story: Story path or name from CLI argument.

    Returns:
        The loaded story.

    Raises:
        typer.Exit: If the story is missing or invalid.
    """
    log = get_logger(__name__)
    story_path = _resolve_story_path(story)

    if not story_path.is_dir():
        console.print(f"[red]Error:[/red] Story directory not found: {escape(str(story_path))}")
        raise typer.Exit(1)

    _configure_story_logging(story_path)

    try:
        return load_story(story_path)
    except (StoryError, StoryConfigError, OSError) as e:
        log.error("story_load_failed", path=str(story_path), error=str(e))
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from None


def _out(text: str = "") -> None:
    """Print story text verbatim, tabs and control characters included."""
    typer.echo(text)


def _print_page(page: Page) -> None:
    """Display a page the way a reader sees it."""
    for line in page.narrative:
        _out(line)
    _out()

    if page.page_type is PageType.CHOICE:
        _out(CHOICE_PROMPT)
        _out()
        for index, choice in enumerate(page.choices, start=1):
            _out(f" {index}. {choice.text}")
    elif page.page_type is PageType.WIN:
        _out(WIN_MESSAGE)
    else:
        _out(LOSE_MESSAGE)


def _reader_lines() -> Iterator[str]:
    """Yield the reader's input lines until end of input.

    Uses prompt_toolkit on a terminal, plain stdin lines otherwise.
    """
    if _is_interactive_tty():  # pragma: no cover - UI behavior
        from prompt_toolkit import PromptSession

        session: PromptSession[str] = PromptSession()
        while True:
            try:
                yield session.prompt("> ")
            except (EOFError, KeyboardInterrupt):
                return
    else:
        for line in sys.stdin:
            yield line.rstrip("\r\n")


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version() -> None:
    """Show version information."""
    from cyoa import __version__

    console.print(f"CYOA v{__version__}")


@app.command()
def read(story: StoryArgument) -> None:
    """Read a story interactively.

    Type the number of a choice and press Enter to turn the page. The story
    ends on a WIN or LOSE page, or when input runs out.
    """
    log = get_logger(__name__)
    loaded = _load_or_exit(story)
    session = ReadingSession(loaded.graph)

    log.info("reading_start", title=loaded.title)
    _print_page(session.current)
    if session.is_over:
        return

    for line in _reader_lines():
        if session.choose(line) is None:
            _out(INVALID_CHOICE_MESSAGE)
            continue
        _print_page(session.current)
        if session.is_over:
            break

    log.info(
        "reading_end",
        title=loaded.title,
        page=session.current.number,
        outcome=str(session.current.page_type),
        steps=len(session.history) - 1,
    )


@app.command()
def depth(story: StoryArgument) -> None:
    """Show how many choices it takes to reach each page."""
    loaded = _load_or_exit(story)
    depths = compute_depths(loaded.graph)

    for page in loaded.graph:
        if page.number in depths:
            _out(f"Page {page.number}:{depths[page.number]}")
        else:
            _out(f"Page {page.number} is not reachable")


@app.command()
def routes(story: StoryArgument) -> None:
    """List every way to win, one route per line.

    Each page on a route is followed by the number of the choice taken on
    it, e.g. ``1(2),3(win)``.
    """
    loaded = _load_or_exit(story)
    try:
        win_routes = enumerate_win_routes(loaded.graph)
    except UnwinnableStoryError:
        _out(UNWINNABLE_MESSAGE)
        return

    for route in win_routes:
        _out(format_route(route))


@app.command()
def check(story: StoryArgument) -> None:
    """Validate a story and summarize its structure."""
    loaded = _load_or_exit(story)
    graph = loaded.graph
    depths = compute_depths(graph)

    console.print(f"[bold]{escape(loaded.title)}[/bold]")
    console.print(f"  [green]✓[/green] Pages: {graph.page_count}")
    console.print(
        f"  [green]✓[/green] Endings: {len(graph.pages_of_type(PageType.WIN))} WIN, "
        f"{len(graph.pages_of_type(PageType.LOSE))} LOSE"
    )
    console.print("  [green]✓[/green] Every page is referenced by another page")

    unreachable = graph.page_count - len(depths)
    if unreachable:
        console.print(
            f"  [yellow]○[/yellow] Reachable pages: {len(depths)} ({unreachable} unreachable)"
        )
    else:
        console.print(f"  [green]✓[/green] Reachable pages: {len(depths)}")

    if has_winning_outcome(graph):
        console.print("  [green]✓[/green] Winnable")
    else:
        console.print("  [yellow]○[/yellow] No WIN page is reachable from page 1")

    console.print()
    console.print("[green]Story is valid.[/green]")


@app.command()
def inspect(story: StoryArgument) -> None:
    """Show a structural report: page mix, reachability and winning routes."""
    from cyoa.inspection import inspect_graph

    loaded = _load_or_exit(story)
    report = inspect_graph(loaded.graph, title=loaded.title)

    summary = Table(title=f"Story: {escape(report.summary.title)}")
    summary.add_column("Metric", style="cyan")
    summary.add_column("Value", style="bold")
    summary.add_row("Pages", str(report.summary.page_count))
    summary.add_row("Choices", str(report.summary.choice_count))
    for page_type, count in report.summary.page_types.items():
        summary.add_row(f"{page_type} pages", str(count))

    reach = report.reachability
    unreachable = ", ".join(str(n) for n in reach.unreachable_pages) or "-"
    summary.add_row("Reachable pages", str(reach.reachable))
    summary.add_row("Unreachable pages", unreachable)
    summary.add_row("Max depth", str(reach.max_depth))
    if reach.unreachable_wins:
        summary.add_row(
            "Unreachable WIN pages",
            "[yellow]" + ", ".join(str(n) for n in reach.unreachable_wins) + "[/yellow]",
        )

    route_stats = report.routes
    summary.add_row("Winnable", "[green]yes[/green]" if route_stats.winnable else "[red]no[/red]")
    summary.add_row("Winning routes", str(route_stats.route_count))
    if route_stats.winnable:
        summary.add_row("Shortest route", f"{route_stats.shortest} pages")
        summary.add_row("Longest route", f"{route_stats.longest} pages")

    console.print()
    console.print(summary)
    console.print()


@app.command()
def visualize(
    story: StoryArgument,
    fmt: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: dot or mermaid."),
    ] = "dot",
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write to this file instead of stdout."),
    ] = None,
    no_labels: Annotated[
        bool,
        typer.Option("--no-labels", help="Label edges with choice numbers instead of text."),
    ] = False,
) -> None:
    """Render the story graph as a Graphviz or Mermaid diagram."""
    from cyoa.visualization import build_diagram, render_dot, render_mermaid

    fmt = fmt.lower()
    if fmt not in DIAGRAM_FORMATS:
        console.print(
            f"[red]Error:[/red] Unknown format '{escape(fmt)}'. "
            f"Use one of: {', '.join(DIAGRAM_FORMATS)}."
        )
        raise typer.Exit(1)

    loaded = _load_or_exit(story)
    diagram = build_diagram(loaded.graph)
    rendered = (
        render_dot(diagram, no_labels=no_labels)
        if fmt == "dot"
        else render_mermaid(diagram, no_labels=no_labels)
    )

    if output is None:
        _out(rendered)
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(rendered + "\n", encoding="utf-8")
    console.print(f"[green]✓[/green] Wrote {fmt} diagram: [cyan]{escape(str(output))}[/cyan]")


if __name__ == "__main__":
    app()
