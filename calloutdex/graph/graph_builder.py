import hashlib

from loguru import logger

from calloutdex.domain.callout import CalloutItem
from calloutdex.domain.canvas import CanvasData, CanvasEdge, CanvasNode
from calloutdex.domain.palette import canvas_color
from calloutdex.graph.canvas_links import GENERATED_ID_PREFIX
from calloutdex.graph.layout import ColumnLayout, Placement, Side, Size
from calloutdex.graph.relations import EdgeLabels, LinkResolver, find_relations

# (fromSide, toSide) for the edge between the focal node and each side
_FOCAL_EDGE_SIDES = {
    Side.INBOUND: ("right", "left"),
    Side.OUTBOUND: ("right", "left"),
    Side.ABOVE: ("top", "bottom"),
    Side.BELOW: ("bottom", "top"),
}


def _stable_id(*parts: str) -> str:
    digest = hashlib.md5("\x1f".join(parts).encode("utf-8")).hexdigest()[:16]
    return f"{GENERATED_ID_PREFIX}{digest}"


def node_id(callout: CalloutItem) -> str:
    return _stable_id("node", callout.document_path, callout.id or "")


def edge_id(source: str, target: str) -> str:
    return _stable_id("edge", source, target)


class RelationshipGraphBuilder:
    """Builds the canvas showing how one callout links to others."""

    def __init__(
        self,
        *,
        layout: ColumnLayout | None = None,
        focal_width: int = 400,
        focal_height: int = 180,
    ):
        self.layout = layout or ColumnLayout()
        self.focal_width = focal_width
        self.focal_height = focal_height

    def focal_size(
        self, focal: CalloutItem, width: int | None = None, height: int | None = None
    ) -> Size:
        """Explicit size, else the size stored on the callout, else the defaults."""
        return Size(
            width=width or focal.canvas_width or self.focal_width,
            height=height or focal.canvas_height or self.focal_height,
        )

    def build(
        self,
        focal: CalloutItem,
        callouts: list[CalloutItem],
        *,
        width: int | None = None,
        height: int | None = None,
    ) -> CanvasData:
        """Compute the complete canvas for ``focal`` from the full callout index.

        Args:
            focal: Callout at the center; must have an id
            callouts: Every indexed callout
            width: Focal node width overriding any stored size
            height: Focal node height overriding any stored size
        """
        if not focal.id:
            raise ValueError("The focal callout needs an id before a graph can be built")

        resolver = LinkResolver(callouts)
        relations = find_relations(focal, callouts, resolver)
        labels = EdgeLabels(resolver, callouts, focal)
        placements = self.layout.layout(focal, self.focal_size(focal, width, height), relations)

        nodes = [self._node(placement) for placement in placements]
        edges = self._focal_edges(placements, labels)
        edges.extend(self._cross_edges(placements, resolver, labels))

        logger.info(
            f"Built graph for {focal.document_path}#^{focal.id}: "
            f"{len(nodes)} nodes, {len(edges)} edges"
        )
        return CanvasData(nodes=nodes, edges=edges)

    @staticmethod
    def _node(placement: Placement) -> CanvasNode:
        callout = placement.callout
        return CanvasNode(
            id=node_id(callout),
            type="file",
            file=callout.document_path,
            subpath=f"#^{callout.id}",
            x=placement.x,
            y=placement.y,
            width=placement.width,
            height=placement.height,
            color=canvas_color(callout.type),
        )

    @staticmethod
    def _focal_edges(placements: list[Placement], labels: EdgeLabels) -> list[CanvasEdge]:
        focal = placements[0].callout
        focal_node = node_id(focal)
        edges = []
        for placement in placements[1:]:
            other = placement.callout
            other_node = node_id(other)
            from_side, to_side = _FOCAL_EDGE_SIDES[placement.side]

            if placement.side == Side.INBOUND:
                edges.append(
                    CanvasEdge(
                        id=edge_id(other_node, focal_node),
                        from_node=other_node,
                        to_node=focal_node,
                        from_side=from_side,
                        to_side=to_side,
                        label=labels.get(other.key, focal.key),
                    )
                )
                continue

            bidirectional = placement.side in (Side.ABOVE, Side.BELOW)
            label = labels.get(focal.key, other.key)
            if bidirectional and not label:
                label = labels.get(other.key, focal.key)
            edges.append(
                CanvasEdge(
                    id=edge_id(focal_node, other_node),
                    from_node=focal_node,
                    to_node=other_node,
                    from_side=from_side,
                    to_side=to_side,
                    from_end="arrow" if bidirectional else None,
                    to_end="arrow",
                    label=label,
                )
            )
        return edges

    @staticmethod
    def _cross_edges(
        placements: list[Placement], resolver: LinkResolver, labels: EdgeLabels
    ) -> list[CanvasEdge]:
        """Edges between related callouts that link to each other."""
        placed = {p.callout.key for p in placements[1:]}
        seen = set()
        edges = []
        for placement in placements[1:]:
            source = placement.callout
            for target, _ in resolver.targets(source):
                pair = (source.key, target.key)
                if target.key not in placed or pair in seen:
                    continue
                seen.add(pair)
                source_node, target_node = node_id(source), node_id(target)
                edges.append(
                    CanvasEdge(
                        id=edge_id(source_node, target_node),
                        from_node=source_node,
                        to_node=target_node,
                        to_end="arrow",
                        label=labels.get(source.key, target.key),
                    )
                )
        return edges
