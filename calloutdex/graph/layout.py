"""Deterministic placement of a focal callout and its related callouts.

The focal node sits at the origin. Inbound callouts form a column to its
left and outbound callouts a column to its right, both centered on the
focal node's vertical midpoint. Bidirectional callouts are centered above
and below the focal node, alternating.
"""

from enum import Enum
from typing import Sequence

from pydantic import BaseModel

from calloutdex.domain.callout import CalloutItem
from calloutdex.graph.relations import Relations


class Side(str, Enum):
    FOCAL = "focal"
    INBOUND = "inbound"
    OUTBOUND = "outbound"
    ABOVE = "above"
    BELOW = "below"


class Size(BaseModel):
    width: int
    height: int


class Placement(BaseModel):
    """Where one callout goes on the canvas."""

    callout: CalloutItem
    side: Side
    x: int
    y: int
    width: int
    height: int


class ColumnLayout:
    """Three-column layout with fixed gaps.

    Coordinates are integers computed only from node sizes and list order,
    so equal inputs always give equal output.
    """

    def __init__(
        self,
        *,
        node_width: int = 350,
        node_height: int = 150,
        vertical_gap: int = 50,
        min_column_gap: int = 150,
        column_gap_ratio: float = 0.5,
    ):
        self.node_width = node_width
        self.node_height = node_height
        self.vertical_gap = vertical_gap
        self.min_column_gap = min_column_gap
        self.column_gap_ratio = column_gap_ratio

    def column_gap(self, focal_width: int) -> int:
        """Horizontal gap between the focal node and the side columns, wider for wide focals."""
        return max(self.min_column_gap, round(focal_width * self.column_gap_ratio))

    def node_size(self, callout: CalloutItem) -> Size:
        # Stored canvas sizes only apply to a callout shown as the focal node
        return Size(width=self.node_width, height=self.node_height)

    def layout(self, focal: CalloutItem, focal_size: Size, relations: Relations) -> list[Placement]:
        """Place the focal callout first, then inbound, outbound and bidirectional callouts."""
        gap = self.column_gap(focal_size.width)
        placements = [
            Placement(
                callout=focal,
                side=Side.FOCAL,
                x=0,
                y=0,
                width=focal_size.width,
                height=focal_size.height,
            )
        ]
        placements.extend(
            self._column(relations.inbound, Side.INBOUND, focal_size, lambda w: -(gap + w))
        )
        placements.extend(
            self._column(relations.outbound, Side.OUTBOUND, focal_size, lambda w: focal_size.width + gap)
        )
        placements.extend(self._above_and_below(relations.bidirectional, focal_size))
        return placements

    def _column(self, callouts: Sequence[CalloutItem], side: Side, focal_size: Size, x_for):
        sizes = [self.node_size(c) for c in callouts]
        total = sum(s.height for s in sizes) + self.vertical_gap * max(len(sizes) - 1, 0)
        y = focal_size.height // 2 - total // 2
        for callout, size in zip(callouts, sizes):
            yield Placement(
                callout=callout,
                side=side,
                x=x_for(size.width),
                y=y,
                width=size.width,
                height=size.height,
            )
            y += size.height + self.vertical_gap

    def _above_and_below(self, callouts: Sequence[CalloutItem], focal_size: Size):
        above = -self.vertical_gap
        below = focal_size.height + self.vertical_gap
        for index, callout in enumerate(callouts):
            size = self.node_size(callout)
            x = (focal_size.width - size.width) // 2
            if index % 2 == 0:
                above -= size.height
                yield Placement(
                    callout=callout, side=Side.ABOVE, x=x, y=above, width=size.width, height=size.height
                )
                above -= self.vertical_gap
            else:
                yield Placement(
                    callout=callout, side=Side.BELOW, x=x, y=below, width=size.width, height=size.height
                )
                below += size.height + self.vertical_gap
