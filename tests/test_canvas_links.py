import pytest

from calloutdex.domain.callout import Outlink
from calloutdex.domain.canvas import CanvasData, CanvasEdge, CanvasNode
from calloutdex.graph.canvas_links import (
    canvas_filename,
    canvas_path,
    merge_canvas_links,
    parse_canvas,
    parse_canvas_filename,
)


def _file_node(node_id: str, path: str, callout_id: str) -> CanvasNode:
    return CanvasNode(id=node_id, file=path, subpath=f"#^{callout_id}", width=350, height=150)


def test_canvas_filename_encodes_document_and_id(make_callout) -> None:
    callout = make_callout("folder/My Notes.md", "note-abc123")

    assert canvas_filename(callout) == "callout_My Notes_note-abc123.canvas"
    assert canvas_path("Callout Canvas", callout) == "Callout Canvas/callout_My Notes_note-abc123.canvas"
    assert canvas_path("", callout) == "callout_My Notes_note-abc123.canvas"
    assert parse_canvas_filename("Callout Canvas/callout_My Notes_note-abc123.canvas") == (
        "My Notes",
        "note-abc123",
    )
    assert parse_canvas_filename("Board.canvas") is None


def test_canvas_filename_requires_id(make_callout) -> None:
    with pytest.raises(ValueError):
        canvas_filename(make_callout())


def test_parse_canvas_reads_obsidian_format() -> None:
    text = """{
      "nodes": [
        {"id": "a1", "type": "file", "file": "A.md", "subpath": "#^note-aaaaaa",
         "x": 10.4, "y": -20, "width": 400, "height": 180, "color": "4"},
        {"id": "t1", "type": "text", "text": "free text", "x": 0, "y": 0, "width": 10, "height": 10}
      ],
      "edges": [{"id": "e1", "fromNode": "a1", "toNode": "t1", "toEnd": "arrow"}]
    }"""

    canvas = parse_canvas(text)

    assert canvas is not None
    assert canvas.nodes[0].x == 10
    assert canvas.nodes[0].callout_ref == ("A.md", "note-aaaaaa")
    assert canvas.nodes[1].callout_ref is None
    assert canvas.edges[0].from_node == "a1"
    assert canvas.find_node("A.md", "note-aaaaaa") is canvas.nodes[0]


def test_parse_canvas_rejects_garbage() -> None:
    assert parse_canvas("not json") is None
    assert parse_canvas('{"nodes": "nope"}') is None


def test_manual_edges_become_outlinks(make_callout) -> None:
    callouts = [make_callout("A.md", "note-aaaaaa"), make_callout("B.md", "note-bbbbbb")]
    canvas = CanvasData(
        nodes=[_file_node("n1", "A.md", "note-aaaaaa"), _file_node("n2", "B.md", "note-bbbbbb")],
        edges=[CanvasEdge(id="manual1", from_node="n1", to_node="n2", label="drawn")],
    )

    merged = merge_canvas_links(callouts, [canvas])

    assert merged[0].outlinks == [Outlink("B.md", "note-bbbbbb", "drawn")]
    assert callouts[0].outlinks == []


def test_generated_and_duplicate_edges_are_ignored(make_callout) -> None:
    callouts = [
        make_callout("A.md", "note-aaaaaa", outlinks=[Outlink("B.md", "note-bbbbbb")]),
        make_callout("B.md", "note-bbbbbb"),
    ]
    canvas = CanvasData(
        nodes=[
            _file_node("n1", "A.md", "note-aaaaaa"),
            _file_node("n2", "B.md", "note-bbbbbb"),
            CanvasNode(id="n3", type="text"),
        ],
        edges=[
            CanvasEdge(id="calloutdex-0123456789abcdef", from_node="n2", to_node="n1"),
            CanvasEdge(id="manual1", from_node="n1", to_node="n2"),
            CanvasEdge(id="manual2", from_node="n1", to_node="n3"),
            CanvasEdge(id="manual3", from_node="n1", to_node="n1"),
        ],
    )

    merged = merge_canvas_links(callouts, [canvas])

    assert merged[0].outlinks == [Outlink("B.md", "note-bbbbbb")]
    assert merged[1].outlinks == []
