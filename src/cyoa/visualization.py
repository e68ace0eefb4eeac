"""Story graph visualization.

Extracts page/choice structure from a story graph and renders it as
DOT (Graphviz) or Mermaid markup. Pure graph analysis.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from cyoa.graph.algorithms import compute_depths
from cyoa.graph.story import START_PAGE
from cyoa.models.page import PageType
from cyoa.observability.logging import get_logger

if TYPE_CHECKING:
    from cyoa.graph.story import StoryGraph

log = get_logger(__name__)

_START_COLOR = "#90EE90"  # light green
_WIN_COLOR = "#FFD700"  # gold
_LOSE_COLOR = "#FFB6C1"  # light pink
_CHOICE_COLOR = "#ADD8E6"  # light blue
_UNREACHABLE_COLOR = "#D3D3D3"  # light grey

_LABEL_LENGTH = 40


@dataclass
class DiagramNode:
    """A page node in the diagram."""

    page: int
    label: str
    page_type: PageType
    is_start: bool = False
    reachable: bool = True

    @property
    def id(self) -> str:
        return f"page{self.page}"


@dataclass
class DiagramEdge:
    """A choice edge in the diagram."""

    from_page: int
    to_page: int
    index: int
    label: str = ""


@dataclass
class StoryDiagram:
    """Complete visualization data extracted from a story graph."""

    nodes: list[DiagramNode] = field(default_factory=list)
    edges: list[DiagramEdge] = field(default_factory=list)


def build_diagram(graph: StoryGraph, start: int = START_PAGE) -> StoryDiagram:
    """Extract visualization data from a story graph.

    Node labels use the page number and the first narrative line.

    Args:
        graph: Validated story graph.
        start: Page highlighted as the start; reachability is measured from it.

    Returns:
        StoryDiagram with one node per page and one edge per choice.
    """
    depths = compute_depths(graph, start)

    nodes: list[DiagramNode] = []
    edges: list[DiagramEdge] = []
    for page in graph:
        first_line = next((line.strip() for line in page.narrative if line.strip()), "")
        label = f"{page.number}: {first_line}" if first_line else str(page.number)
        nodes.append(
            DiagramNode(
                page=page.number,
                label=_truncate(label, _LABEL_LENGTH),
                page_type=page.page_type,
                is_start=page.number == start,
                reachable=page.number in depths,
            )
        )
        for index, choice in enumerate(page.choices, start=1):
            edges.append(
                DiagramEdge(
                    from_page=page.number,
                    to_page=choice.target,
                    index=index,
                    label=_truncate(choice.text.strip(), _LABEL_LENGTH),
                )
            )

    log.info("story_diagram_built", nodes=len(nodes), edges=len(edges))
    return StoryDiagram(nodes=nodes, edges=edges)


def render_dot(diagram: StoryDiagram, *, no_labels: bool = False) -> str:
    """Render a StoryDiagram as DOT (Graphviz) markup.

    Args:
        diagram: Diagram data.
        no_labels: If True, label edges with the choice number instead of its text.

    Returns:
        DOT format string.
    """
    lines = [
        "digraph story {",
        "  rankdir=LR;",
        '  node [fontname="Helvetica" fontsize=10 style="filled,solid"];',
        '  edge [fontname="Helvetica" fontsize=8];',
        "",
    ]

    for node in diagram.nodes:
        attrs = _dot_node_attrs(node)
        attr_str = " ".join(f"{k}={v}" for k, v in attrs.items())
        lines.append(f'  "{node.id}" [{attr_str}];')

    lines.append("")

    for edge in diagram.edges:
        label = str(edge.index) if no_labels or not edge.label else edge.label
        lines.append(
            f'  "page{edge.from_page}" -> "page{edge.to_page}" [label="{_dot_escape(label)}"];'
        )

    lines.append("}")
    return "\n".join(lines)


def render_mermaid(diagram: StoryDiagram, *, no_labels: bool = False) -> str:
    """Render a StoryDiagram as Mermaid markup.

    Args:
        diagram: Diagram data.
        no_labels: If True, label edges with the choice number instead of its text.

    Returns:
        Mermaid format string.
    """
    lines = ["graph LR"]

    for node in diagram.nodes:
        label = _mermaid_escape(node.label)
        if node.page_type is PageType.CHOICE:
            shape = f'["{label}"]'
        else:
            shape = f'(["{label}"])'
        lines.append(f"  {node.id}{shape}:::{_node_class(node)}")

    lines.append("")

    for edge in diagram.edges:
        label = str(edge.index) if no_labels or not edge.label else edge.label
        lines.append(f'  page{edge.from_page} -->|"{_mermaid_escape(label)}"| page{edge.to_page}')

    lines.append("")
    lines.append(f"  classDef start fill:{_START_COLOR},stroke:#333")
    lines.append(f"  classDef choice fill:{_CHOICE_COLOR},stroke:#333")
    lines.append(f"  classDef win fill:{_WIN_COLOR},stroke:#333")
    lines.append(f"  classDef lose fill:{_LOSE_COLOR},stroke:#333")
    lines.append(f"  classDef unreachable fill:{_UNREACHABLE_COLOR},stroke:#999,stroke-dasharray:4")

    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _node_class(node: DiagramNode) -> str:
    """Style class: start beats reachability, which beats page type."""
    if node.is_start:
        return "start"
    if not node.reachable:
        return "unreachable"
    return str(node.page_type).lower()


def _truncate(text: str, max_len: int) -> str:
    """Truncate text with ellipsis if too long."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 3] + "..."


def _dot_node_attrs(node: DiagramNode) -> dict[str, str]:
    """Build DOT attribute dict for a node."""
    attrs: dict[str, str] = {}

    if node.page_type is PageType.WIN:
        attrs["shape"] = "doubleoctagon"
        attrs["fillcolor"] = f'"{_WIN_COLOR}"'
    elif node.page_type is PageType.LOSE:
        attrs["shape"] = "octagon"
        attrs["fillcolor"] = f'"{_LOSE_COLOR}"'
    else:
        attrs["shape"] = "box"
        attrs["fillcolor"] = f'"{_CHOICE_COLOR}"'

    if node.is_start:
        attrs["fillcolor"] = f'"{_START_COLOR}"'
        attrs["penwidth"] = '"2"'
    elif not node.reachable:
        attrs["fillcolor"] = f'"{_UNREACHABLE_COLOR}"'
        attrs["style"] = '"filled,dashed"'

    attrs["label"] = f'"{_dot_escape(node.label)}"'
    return attrs


def _dot_escape(text: str) -> str:
    """Escape special characters for DOT labels."""
    return text.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")


def _mermaid_escape(text: str) -> str:
    """Escape special characters for Mermaid labels."""
    return text.replace('"', "&quot;").replace("\n", " ")
