"""CLI for refreshing the callout cache of a vault and exporting relationship graphs"""

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from calloutdex.config import settings
from calloutdex.index.factory import create_index


def parse_focal(value: str) -> tuple[str, str]:
    """Split ``document#^id`` (or ``document#id``) into a path and an id."""
    document, sep, callout_id = value.partition("#")
    callout_id = callout_id.removeprefix("^")
    if not sep or not document or not callout_id:
        raise argparse.ArgumentTypeError(f"Expected DOCUMENT#^ID, got {value!r}")
    if not document.endswith(".md"):
        document = f"{document}.md"
    return document, callout_id


async def run(vault: str, graph: tuple[str, str] | None, full: bool) -> int:
    index = create_index(settings.model_copy(update={"vault_path": Path(vault)}))

    if full:
        callouts = await index.refresh_all()
    else:
        callouts = await index.current_callouts()
    logger.info(f"{len(callouts)} callouts indexed")

    if graph is None:
        return 0

    document, callout_id = graph
    focal = next(
        (c for c in callouts if c.document_path == document and c.id == callout_id), None
    )
    if focal is None:
        logger.error(f"No callout with id {callout_id} in {document}")
        return 1

    result = await index.build_relationship_graph(focal)
    if not result.success:
        logger.error(f"Failed to build graph: {result.error}")
        return 1
    logger.info(f"Graph written to {result.canvas_path}")
    return 0


def main(vault: str, graph: tuple[str, str] | None = None, full: bool = False) -> int:
    return asyncio.run(run(vault, graph, full))


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--vault", type=str, required=True, help="Vault folder containing markdown files")
    parser.add_argument(
        "--graph",
        type=parse_focal,
        required=False,
        help="Export the relationship graph of DOCUMENT#^ID",
        default=None,
    )
    parser.add_argument(
        "--full", action="store_true", help="Rescan every document even if the cache is valid"
    )
    parser.add_argument("--log-level", type=str, default=settings.log_level)

    args = parser.parse_args()
    logger.configure(handlers=[{"sink": sys.stderr, "level": args.log_level}])

    sys.exit(main(vault=args.vault, graph=args.graph, full=args.full))
