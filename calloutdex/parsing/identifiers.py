"""Generating callout ids and writing them back into document text."""

import logging
import random
import re
import string
from typing import Collection

from calloutdex.domain.callout import CalloutItem

from .patterns import CALLOUT_HEADER_PATTERN, EXISTING_BLOCK_ID_PATTERN, callout_block_end

logger = logging.getLogger(__name__)

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_SUFFIX_LENGTH = 6
# Lines above and below the recorded line number searched for the header
HEADER_SEARCH_RANGE = 10


def generate_callout_id(
    callout_type: str,
    existing_ids: Collection[str] = (),
    rng: random.Random | None = None,
) -> str:
    """Generate an id of the form ``<type>-<6 chars>`` not present in ``existing_ids``."""
    rng = rng or random.Random()
    prefix = re.sub(r"[^\w-]+", "-", callout_type.lower()).strip("-") or "callout"
    while True:
        suffix = "".join(rng.choice(ID_ALPHABET) for _ in range(ID_SUFFIX_LENGTH))
        candidate = f"{prefix}-{suffix}"
        if candidate not in existing_ids:
            return candidate


def link_text(callout: CalloutItem, *, embed: bool = True, hide_filename: bool = False) -> str:
    """Wikilink text pointing at an identified callout.

    Raises:
        ValueError: If the callout has no id yet
    """
    if not callout.id:
        raise ValueError(f"Callout at {callout.document_path}:{callout.line_number} has no id")

    document = callout.document_path.removesuffix(".md")
    target = f"{document}#^{callout.id}"
    if hide_filename:
        target = f"{target}|{callout.id}"
    prefix = "!" if embed else ""
    return f"{prefix}[[{target}]]"


def _search_order(expected: int, line_count: int) -> list[int]:
    """Exact line first, then upwards, then downwards."""
    order = [expected] if 0 <= expected < line_count else []
    order.extend(expected - i for i in range(1, HEADER_SEARCH_RANGE + 1) if expected - i >= 0)
    order.extend(
        expected + i
        for i in range(1, HEADER_SEARCH_RANGE + 1)
        if 0 <= expected + i < line_count
    )
    return order


def _titles_match(expected: str, found: str) -> bool:
    expected = expected.strip().lower()
    found = found.strip().lower()
    return expected == found or expected in found or found in expected


def find_header_line(lines: list[str], callout: CalloutItem) -> int | None:
    """Locate the header line of ``callout`` near its recorded line number.

    Returns:
        0-based line index, or None if no matching header is close enough
    """
    for index in _search_order(callout.line_number - 1, len(lines)):
        match = CALLOUT_HEADER_PATTERN.match(lines[index].rstrip("\r"))
        if not match or match.group(1).strip().lower() != callout.type.lower():
            continue
        found_title = match.group(3).strip()
        if callout.title and found_title and not _titles_match(callout.title, found_title):
            continue
        return index
    return None


def inject_callout_id(text: str, callout: CalloutItem, callout_id: str) -> str:
    """Append a ``> ^id`` line to the end of the callout block in ``text``.

    Args:
        text: Current document text
        callout: The callout to identify, as last parsed
        callout_id: The id to write

    Returns:
        The updated document text

    Raises:
        ValueError: If the callout cannot be located or already carries an id
    """
    lines = text.split("\n")
    start = find_header_line(lines, callout)
    if start is None:
        raise ValueError(
            f"Could not locate [!{callout.type}] {callout.title!r} "
            f"near line {callout.line_number} of {callout.document_path}"
        )

    last = callout_block_end(lines, start) - 1

    for index in range(start + 1, last + 1):
        if EXISTING_BLOCK_ID_PATTERN.match(lines[index].rstrip("\r")):
            raise ValueError(f"Callout at line {start + 1} of {callout.document_path} has an id")

    lines.insert(last + 1, f"> ^{callout_id}")
    if last + 2 >= len(lines):
        lines.append("")
    elif lines[last + 2].strip():
        lines.insert(last + 2, "")

    logger.info(f"Added id {callout_id} to callout at line {start + 1} of {callout.document_path}")
    return "\n".join(lines)
