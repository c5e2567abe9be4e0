"""Callout domain models."""

from datetime import datetime
from typing import Annotated, Any, NamedTuple

from pydantic import BaseModel, BeforeValidator

READABLE_FORMAT = "%Y-%m-%d %H:%M:%S"
EPOCH_READABLE = "1970-01-01 00:00:00"

# Legacy caches stored epoch milliseconds; anything this large cannot be seconds.
_MILLISECONDS_THRESHOLD = 1e11


def timestamp_to_readable(timestamp: float) -> str:
    """Format an epoch timestamp (seconds) as ``YYYY-MM-DD HH:MM:SS`` local time."""
    return datetime.fromtimestamp(timestamp).strftime(READABLE_FORMAT)


def readable_to_timestamp(readable: str) -> float:
    """Inverse of :func:`timestamp_to_readable`. Raises ValueError on bad input."""
    return datetime.strptime(readable, READABLE_FORMAT).timestamp()


def upgrade_timestamp(value: Any) -> Any:
    """Convert numeric timestamps from older cache files to the readable format."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > _MILLISECONDS_THRESHOLD else value
        return timestamp_to_readable(seconds)
    return value


ReadableTime = Annotated[str, BeforeValidator(upgrade_timestamp)]


class HeadingRef(BaseModel):
    """A heading enclosing a callout."""

    title: str
    level: int


class Outlink(NamedTuple):
    """A ``[[document#^id|label]]`` reference found in a callout body."""

    target_file: str
    target_id: str
    label: str | None = None


class CalloutItem(BaseModel):
    """Represents a single callout block extracted from a document.

    Attributes:
        document_path: Vault-relative path of the owning document
        type: Lowercase callout type tag (``note``, ``warning``, ...)
        title: Title text after the type tag, may be empty
        body: Callout content with the quote markers stripped
        id: Short block identifier (``^id``), unique within the vault once assigned
        line_number: 1-based line of the callout header at last parse time
        heading_path: Nearest enclosing heading per level, outermost first
        file_mtime: Modification time of the owning document
        created_time: When the callout was first seen
        modified_time: When the callout's type, title or body last changed
        outlinks: References to other callouts found in the body
        canvas_width: Preferred canvas node width when used as focal node
        canvas_height: Preferred canvas node height when used as focal node
    """

    document_path: str
    type: str
    title: str = ""
    body: str = ""
    id: str | None = None
    line_number: int
    heading_path: list[HeadingRef] = []
    file_mtime: ReadableTime | None = None
    created_time: ReadableTime | None = None
    modified_time: ReadableTime | None = None
    outlinks: list[Outlink] = []
    canvas_width: int | None = None
    canvas_height: int | None = None

    @property
    def key(self) -> tuple[str, str] | None:
        """Stable identity, only available once the callout has an id."""
        if not self.id:
            return None
        return (self.document_path, self.id)

    def has_changed(self, other: "CalloutItem") -> bool:
        """Whether the user-visible content differs from ``other``."""
        return self.type != other.type or self.title != other.title or self.body != other.body

    def sort_time(self) -> str:
        return self.modified_time or self.file_mtime or EPOCH_READABLE


class CalloutCache(BaseModel):
    """Versioned snapshot of every callout in a vault.

    Attributes:
        version: Cache schema version
        timestamp: When the snapshot was written (seconds since epoch)
        vault_name: Identity of the vault the snapshot belongs to
        callouts: All indexed callouts
        file_mod_times: Document path -> modification time seen when it was parsed
    """

    version: str
    timestamp: float = 0.0
    vault_name: str
    callouts: list[CalloutItem] = []
    file_mod_times: dict[str, ReadableTime] = {}


def build_identity_index(callouts: list[CalloutItem]) -> dict[tuple[str, str], CalloutItem]:
    """Map ``(document_path, id)`` to the callout for every identified callout."""
    return {callout.key: callout for callout in callouts if callout.key is not None}
