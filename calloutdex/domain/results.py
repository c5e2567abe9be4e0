"""Typed results returned by index operations instead of raising."""

from pydantic import BaseModel

from calloutdex.domain.callout import CalloutItem
from calloutdex.domain.canvas import CanvasData


class IdAssignment(BaseModel):
    """Outcome of giving a callout a persistent id.

    On failure ``callout`` is the untouched input, so nothing references an id
    that never reached the source document.
    """

    success: bool
    callout: CalloutItem
    callout_id: str | None = None
    error: str = ""


class GraphResult(BaseModel):
    """Outcome of building and exporting a relationship graph."""

    success: bool
    focal: CalloutItem | None = None
    canvas_path: str | None = None
    canvas: CanvasData | None = None
    error: str = ""
