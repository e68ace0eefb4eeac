"""Tests for story graph visualization."""

from __future__ import annotations

from cyoa.graph.story import StoryGraph
from cyoa.models.page import Choice, Page, PageType
from cyoa.visualization import build_diagram, render_dot, render_mermaid
from tests.fixtures.stories import UNWINNABLE, make_graph


def _make_tunnels() -> StoryGraph:
    """Three pages with narrative, one of them too long for a label."""
    return StoryGraph.build(
        [
            Page(
                number=1,
                page_type=PageType.CHOICE,
                choices=(
                    Choice(text="Take the left tunnel", target=2),
                    Choice(text='Shout "hello"', target=3),
                ),
                narrative=("", "Two tunnels open before you, both of them very dark."),
            ),
            Page(number=2, page_type=PageType.LOSE, narrative=("The tunnel collapses.",)),
            Page(number=3, page_type=PageType.WIN),
        ]
    )


class TestBuildDiagram:
    """Tests for build_diagram."""

    def test_nodes_and_edges(self) -> None:
        diagram = build_diagram(_make_tunnels())

        assert [node.id for node in diagram.nodes] == ["page1", "page2", "page3"]
        assert [(e.from_page, e.to_page, e.index) for e in diagram.edges] == [
            (1, 2, 1),
            (1, 3, 2),
        ]

    def test_labels_use_first_narrative_line(self) -> None:
        nodes = build_diagram(_make_tunnels()).nodes

        assert nodes[1].label == "2: The tunnel collapses."
        assert nodes[2].label == "3"

    def test_long_labels_are_truncated(self) -> None:
        label = build_diagram(_make_tunnels()).nodes[0].label

        assert label.startswith("1: Two tunnels")
        assert label.endswith("...")
        assert len(label) == 40

    def test_start_and_reachability(self) -> None:
        nodes = build_diagram(make_graph(UNWINNABLE)).nodes

        assert nodes[0].is_start
        assert [n.page for n in nodes if not n.reachable] == [3, 4, 6]


class TestRenderDot:
    """Tests for render_dot."""

    def test_structure(self) -> None:
        dot = render_dot(build_diagram(_make_tunnels()))

        assert dot.startswith("digraph story {")
        assert dot.endswith("}")
        assert '"page1" -> "page2" [label="Take the left tunnel"];' in dot

    def test_shapes(self) -> None:
        lines = render_dot(build_diagram(_make_tunnels())).splitlines()

        page2 = next(line for line in lines if line.startswith('  "page2" ['))
        page3 = next(line for line in lines if line.startswith('  "page3" ['))
        assert "shape=octagon" in page2
        assert "shape=doubleoctagon" in page3

    def test_quotes_are_escaped(self) -> None:
        dot = render_dot(build_diagram(_make_tunnels()))

        assert '[label="Shout \\"hello\\""]' in dot

    def test_no_labels(self) -> None:
        dot = render_dot(build_diagram(_make_tunnels()), no_labels=True)

        assert '"page1" -> "page3" [label="2"];' in dot
        assert "Take the left tunnel" not in dot

    def test_unreachable_pages_are_dashed(self) -> None:
        lines = render_dot(build_diagram(make_graph(UNWINNABLE))).splitlines()

        page4 = next(line for line in lines if line.startswith('  "page4" ['))
        assert "filled,dashed" in page4


class TestRenderMermaid:
    """Tests for render_mermaid."""

    def test_structure(self) -> None:
        mermaid = render_mermaid(build_diagram(_make_tunnels()))

        assert mermaid.startswith("graph LR")
        assert '  page1 -->|"Take the left tunnel"| page2' in mermaid
        assert '  page3(["3"]):::win' in mermaid
        assert "classDef unreachable" in mermaid

    def test_start_class(self) -> None:
        mermaid = render_mermaid(build_diagram(_make_tunnels()))

        assert ":::start" in mermaid.splitlines()[1]

    def test_quotes_are_escaped(self) -> None:
        mermaid = render_mermaid(build_diagram(_make_tunnels()))

        assert "Shout &quot;hello&quot;" in mermaid

    def test_unreachable_class(self) -> None:
        mermaid = render_mermaid(build_diagram(make_graph(UNWINNABLE)), no_labels=True)

        assert '  page3(["3"]):::unreachable' in mermaid
        assert '  page1 -->|"1"| page2' in mermaid
