"""Callout and heading grammar shared by the parser and the id writer."""

import logging
import re
from typing import Iterator

logger = logging.getLogger(__name__)

# Upper bound on regex matches collected from a single document
MAX_MATCHES_PER_DOCUMENT = 1000

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.+)$")
# > [!type] Title, with an optional +/- fold marker right after the tag
CALLOUT_HEADER_PATTERN = re.compile(r"^>\s*\[!([^\]]+)\]([+-]?)\s*(.*?)$")
CALLOUT_TYPE_PATTERN = re.compile(r"^>\s*\[!([^\]]+)\]", re.MULTILINE)
QUOTE_PREFIX_PATTERN = re.compile(r"^>\s?")
BLOCK_ID_PATTERN = re.compile(r"(?:^|\s)\^([\w-]+)\s*$")
EXISTING_BLOCK_ID_PATTERN = re.compile(r"^>(?:.*\s)?\^[\w-]+\s*$")
# [[document#^id]] and [[document#^id|label]]
OUTLINK_PATTERN = re.compile(r"\[\[([^\]]+?)#\^([^\]|]+?)(?:\|([^\]]+?))?\]\]")


def callout_block_end(lines: list[str], header: int) -> int:
    """Index of the first line after the callout whose header is at ``header``.

    Blank unquoted lines between ``>`` lines belong to the block. A non-blank
    unquoted line or another callout header ends it. Trailing blank lines are
    left outside the block.
    """
    end = header + 1
    index = end
    while index < len(lines):
        line = lines[index]
        if not line.startswith(">"):
            if line.strip():
                break
            index += 1
            continue
        if "[!" in line and CALLOUT_HEADER_PATTERN.match(line):
            break
        index += 1
        end = index
    return end


def bounded_finditer(
    pattern: re.Pattern[str], text: str, max_matches: int = MAX_MATCHES_PER_DOCUMENT
) -> Iterator[re.Match[str]]:
    """Yield successive matches of ``pattern`` in ``text``, at most ``max_matches``.

    Zero-length matches advance the scan position by one character so the
    loop always makes progress. Hitting the cap ends the scan quietly; the
    matches yielded so far stand as a partial result.
    """
    position = 0
    matches = 0
    while position <= len(text):
        if matches >= max_matches:
            logger.warning(f"Stopped scanning after {max_matches} matches of {pattern.pattern!r}")
            return
        match = pattern.search(text, position)
        if match is None:
            return
        matches += 1
        yield match
        position = match.end() if match.end() > match.start() else match.end() + 1


def scan_callout_types(text: str, max_matches: int = MAX_MATCHES_PER_DOCUMENT) -> set[str]:
    """Collect every distinct callout type used in ``text``."""
    return {
        match.group(1).lower().strip()
        for match in bounded_finditer(CALLOUT_TYPE_PATTERN, text, max_matches)
    }
