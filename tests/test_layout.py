from calloutdex.graph.layout import ColumnLayout, Side, Size
from calloutdex.graph.relations import Relations


def _related(make_callout, prefix: str, count: int):
    return [make_callout(f"{prefix}{i}.md", f"note-{prefix}{i:04d}") for i in range(count)]


def test_column_gap_scales_with_focal_width() -> None:
    layout = ColumnLayout()

    assert layout.column_gap(200) == 150
    assert layout.column_gap(400) == 200
    assert layout.column_gap(1000) == 500


def test_focal_at_origin(make_callout) -> None:
    focal = make_callout("F.md", "note-focal1")
    placements = ColumnLayout().layout(focal, Size(width=400, height=180), Relations())

    assert len(placements) == 1
    assert (placements[0].side, placements[0].x, placements[0].y) == (Side.FOCAL, 0, 0)


def test_side_columns_are_centered_on_focal(make_callout) -> None:
    focal = make_callout("F.md", "note-focal1")
    relations = Relations(
        inbound=_related(make_callout, "in", 3), outbound=_related(make_callout, "out", 2)
    )

    placements = ColumnLayout().layout(focal, Size(width=400, height=180), relations)

    inbound = [p for p in placements if p.side == Side.INBOUND]
    outbound = [p for p in placements if p.side == Side.OUTBOUND]
    # Gap is 200 for a 400 wide focal; nodes are 350x150 with 50 between them
    assert {p.x for p in inbound} == {-550}
    assert {p.x for p in outbound} == {600}
    assert [p.y for p in inbound] == [-185, 15, 215]
    assert [p.y for p in outbound] == [-85, 115]

    for column in (inbound, outbound):
        top = column[0].y
        bottom = column[-1].y + column[-1].height
        assert abs((top + bottom) / 2 - 90) <= 1


def test_bidirectional_alternate_above_and_below(make_callout) -> None:
    focal = make_callout("F.md", "note-focal1")
    relations = Relations(bidirectional=_related(make_callout, "bi", 3))

    placements = ColumnLayout().layout(focal, Size(width=400, height=180), relations)[1:]

    assert [p.side for p in placements] == [Side.ABOVE, Side.BELOW, Side.ABOVE]
    assert {p.x for p in placements} == {25}
    assert [p.y for p in placements] == [-200, 230, -400]


def test_layout_is_deterministic(make_callout) -> None:
    focal = make_callout("F.md", "note-focal1")
    relations = Relations(
        inbound=_related(make_callout, "in", 4),
        outbound=_related(make_callout, "out", 5),
        bidirectional=_related(make_callout, "bi", 2),
    )
    layout = ColumnLayout()

    first = [(p.x, p.y, p.width, p.height) for p in layout.layout(focal, Size(width=437, height=211), relations)]
    second = [(p.x, p.y, p.width, p.height) for p in layout.layout(focal, Size(width=437, height=211), relations)]

    assert first == second
    assert all(isinstance(value, int) for row in first for value in row)
