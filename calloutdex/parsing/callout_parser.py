"""Line-oriented callout parser."""

import logging
from typing import Mapping

from calloutdex.domain.callout import CalloutItem, HeadingRef, Outlink, timestamp_to_readable

from .patterns import (
    BLOCK_ID_PATTERN,
    CALLOUT_HEADER_PATTERN,
    HEADING_PATTERN,
    MAX_MATCHES_PER_DOCUMENT,
    OUTLINK_PATTERN,
    QUOTE_PREFIX_PATTERN,
    bounded_finditer,
    callout_block_end,
)

logger = logging.getLogger(__name__)

IdentityIndex = Mapping[tuple[str, str], CalloutItem]


class CalloutParser:
    """Extracts callouts, their heading context and outgoing links from document text.

    Parsing is pure: the same text, modification time and previous index always
    give the same records, and malformed input is skipped rather than rejected.
    """

    def __init__(
        self,
        *,
        document_extension: str = ".md",
        max_matches: int = MAX_MATCHES_PER_DOCUMENT,
    ):
        """Initialize the parser.

        Args:
            document_extension: Extension appended to link targets that lack one
            max_matches: Cap on regex matches collected per scan
        """
        self.document_extension = document_extension
        self.max_matches = max_matches

    def parse(
        self,
        document_path: str,
        text: str,
        file_mtime: float | None = None,
        previous: IdentityIndex | None = None,
    ) -> list[CalloutItem]:
        """Parse every callout in a document.

        Args:
            document_path: Vault-relative path of the document
            text: Full document text
            file_mtime: Document modification time (seconds since epoch)
            previous: Callouts from the last index, keyed by ``(document_path, id)``,
                used to carry creation and modification times forward

        Returns:
            Callouts in document order
        """
        lines = text.splitlines()
        headings = self.extract_headings(lines)
        mtime = timestamp_to_readable(file_mtime) if file_mtime is not None else None

        callouts = []
        index = 0
        while index < len(lines):
            line = lines[index]
            # Most lines are plain prose; skip them before touching a regex
            if not line.startswith(">"):
                index += 1
                continue

            header = CALLOUT_HEADER_PATTERN.match(line)
            if header is None:
                index += 1
                continue

            line_number = index + 1
            body_lines, callout_id, index = self._consume_body(lines, index + 1)
            body = "\n".join(body_lines).strip()

            callout = CalloutItem(
                document_path=document_path,
                type=header.group(1).strip().lower(),
                title=header.group(3).strip(),
                body=body,
                id=callout_id,
                line_number=line_number,
                heading_path=self.build_heading_path(headings, line_number),
                file_mtime=mtime,
                outlinks=self.extract_outlinks(body),
            )
            self._resolve_times(callout, previous, mtime)
            callouts.append(callout)

        logger.debug(f"Parsed {len(callouts)} callouts from {document_path}")
        return callouts

    @staticmethod
    def _consume_body(lines: list[str], start: int) -> tuple[list[str], str | None, int]:
        """Collect the body lines following a callout header.

        Returns:
            Tuple of (body lines, block id if any, index of the first line after the callout)
        """
        body_lines: list[str] = []
        callout_id = None
        end = callout_block_end(lines, start - 1)
        for line in lines[start:end]:
            if not line.startswith(">"):
                continue

            content = QUOTE_PREFIX_PATTERN.sub("", line, count=1)
            id_match = BLOCK_ID_PATTERN.search(content)
            if id_match:
                callout_id = id_match.group(1)
                content = content[: id_match.start()].rstrip()
                if content.strip():
                    body_lines.append(content)
            else:
                body_lines.append(content)

        return body_lines, callout_id, end

    @staticmethod
    def extract_headings(lines: list[str]) -> list[tuple[int, HeadingRef]]:
        """Collect ``(line_number, heading)`` for every heading line."""
        headings = []
        for index, line in enumerate(lines):
            if not line.startswith("#"):
                continue
            match = HEADING_PATTERN.match(line)
            if match:
                headings.append(
                    (index + 1, HeadingRef(title=match.group(2).strip(), level=len(match.group(1))))
                )
        return headings

    @staticmethod
    def build_heading_path(
        headings: list[tuple[int, HeadingRef]], line_number: int
    ) -> list[HeadingRef]:
        """Nearest enclosing heading per level for a position in the document."""
        stack: list[HeadingRef] = []
        for heading_line, heading in headings:
            if heading_line > line_number:
                break
            while stack and stack[-1].level >= heading.level:
                stack.pop()
            stack.append(heading)
        return stack

    def extract_outlinks(self, body: str) -> list[Outlink]:
        """Extract ``[[document#^id|label]]`` references from a callout body."""
        outlinks = []
        for match in bounded_finditer(OUTLINK_PATTERN, body, self.max_matches):
            target_file = match.group(1).strip()
            if not target_file.endswith(self.document_extension):
                target_file = f"{target_file}{self.document_extension}"
            outlinks.append(Outlink(target_file, match.group(2).strip(), match.group(3)))
        return outlinks

    @staticmethod
    def _resolve_times(
        callout: CalloutItem, previous: IdentityIndex | None, mtime: str | None
    ) -> None:
        # Callouts without an id have no identity across edits
        existing = previous.get(callout.key) if previous and callout.key else None
        if existing is None:
            callout.created_time = mtime
            callout.modified_time = mtime
            return

        callout.created_time = existing.created_time or mtime
        if callout.has_changed(existing):
            callout.modified_time = mtime
        else:
            callout.modified_time = existing.modified_time or mtime
        callout.canvas_width = existing.canvas_width
        callout.canvas_height = existing.canvas_height


_default_parser = CalloutParser()


def parse(
    document_path: str,
    text: str,
    file_mtime: float | None = None,
    previous: IdentityIndex | None = None,
) -> list[CalloutItem]:
    """Parse ``text`` with a default :class:`CalloutParser`."""
    return _default_parser.parse(document_path, text, file_mtime, previous)
