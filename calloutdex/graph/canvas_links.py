"""Reading exported canvases back into the callout index."""

import json
import re
from pathlib import PurePosixPath
from typing import Iterable

from loguru import logger

from calloutdex.domain.callout import CalloutItem, Outlink, build_identity_index
from calloutdex.domain.canvas import CanvasData

CANVAS_EXTENSION = ".canvas"
CANVAS_PREFIX = "callout_"
# Prefix of node and edge ids written by the graph builder
GENERATED_ID_PREFIX = "calloutdex-"

_CANVAS_NAME_PATTERN = re.compile(rf"^{CANVAS_PREFIX}(.+)_([^_]+){re.escape(CANVAS_EXTENSION)}$")


def canvas_filename(callout: CalloutItem) -> str:
    """Artifact name for a focal callout, ``callout_<document stem>_<id>.canvas``."""
    if not callout.id:
        raise ValueError("Only callouts with an id have a canvas")
    stem = PurePosixPath(callout.document_path).stem
    return f"{CANVAS_PREFIX}{stem}_{callout.id}{CANVAS_EXTENSION}"


def canvas_path(folder: str, callout: CalloutItem) -> str:
    name = canvas_filename(callout)
    folder = folder.strip("/")
    return f"{folder}/{name}" if folder else name


def parse_canvas_filename(path: str) -> tuple[str, str] | None:
    """Recover ``(document stem, id)`` from an artifact path, or None for other canvases."""
    match = _CANVAS_NAME_PATTERN.match(PurePosixPath(path).name)
    if not match:
        return None
    return match.group(1), match.group(2)


def parse_canvas(text: str, path: str = "<canvas>") -> CanvasData | None:
    """Parse canvas JSON, returning None for content that is not a canvas."""
    try:
        return CanvasData.model_validate(json.loads(text))
    except ValueError as e:
        logger.warning(f"Skipping unreadable canvas {path}: {e}")
        return None


def merge_canvas_links(
    callouts: list[CalloutItem], canvases: Iterable[CanvasData]
) -> list[CalloutItem]:
    """Add edges drawn between callout nodes on canvases as outlinks.

    Edges the graph builder generated mirror links that already exist in the
    documents and are ignored. Returns copies; the input callouts are untouched.
    """
    merged = [callout.model_copy(update={"outlinks": list(callout.outlinks)}) for callout in callouts]
    by_key = build_identity_index(merged)

    added = 0
    for canvas in canvases:
        refs = {node.id: node.callout_ref for node in canvas.nodes if node.callout_ref}
        for edge in canvas.edges:
            if edge.id.startswith(GENERATED_ID_PREFIX):
                continue
            source_ref = refs.get(edge.from_node)
            target_ref = refs.get(edge.to_node)
            if not source_ref or not target_ref or source_ref == target_ref:
                continue
            source = by_key.get(source_ref)
            if source is None:
                continue
            if any((o.target_file, o.target_id) == target_ref for o in source.outlinks):
                continue
            source.outlinks.append(Outlink(target_ref[0], target_ref[1], edge.label))
            added += 1

    if added:
        logger.debug(f"Merged {added} links from canvases")
    return merged
