"""Canvas (exported relationship graph) domain models."""

from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field


def _round_coordinate(value: Any) -> Any:
    if isinstance(value, float):
        return round(value)
    return value


Coordinate = Annotated[int, BeforeValidator(_round_coordinate)]


class CanvasNode(BaseModel):
    """A positioned node. File nodes point at a callout through ``#^id`` subpaths."""

    model_config = ConfigDict(extra="allow")

    id: str
    type: str = "file"
    file: str | None = None
    subpath: str | None = None
    x: Coordinate = 0
    y: Coordinate = 0
    width: Coordinate = 0
    height: Coordinate = 0
    color: str | None = None

    @property
    def callout_ref(self) -> tuple[str, str] | None:
        """``(document_path, id)`` when this node embeds a callout."""
        if self.type != "file" or not self.file or not self.subpath:
            return None
        if not self.subpath.startswith("#^"):
            return None
        return (self.file, self.subpath[2:])


class CanvasEdge(BaseModel):
    """A directed edge between two canvas nodes."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    from_node: str = Field(alias="fromNode")
    to_node: str = Field(alias="toNode")
    from_side: str | None = Field(default=None, alias="fromSide")
    to_side: str | None = Field(default=None, alias="toSide")
    from_end: str | None = Field(default=None, alias="fromEnd")
    to_end: str | None = Field(default=None, alias="toEnd")
    label: str | None = None


class CanvasData(BaseModel):
    """Content of a ``.canvas`` file."""

    model_config = ConfigDict(extra="allow")

    nodes: list[CanvasNode] = []
    edges: list[CanvasEdge] = []

    def to_json(self) -> str:
        return self.model_dump_json(indent=2, by_alias=True, exclude_none=True)

    def find_node(self, document_path: str, callout_id: str) -> CanvasNode | None:
        for node in self.nodes:
            if node.callout_ref == (document_path, callout_id):
                return node
        return None
