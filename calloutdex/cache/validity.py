"""Deciding whether a persisted cache can still be served."""

from enum import Enum
from typing import Callable

from loguru import logger
from pydantic import BaseModel

from calloutdex.documents.base import DocumentStore
from calloutdex.domain.callout import CalloutCache, readable_to_timestamp


class DocumentState(str, Enum):
    UNCHANGED = "unchanged"
    MODIFIED = "modified"
    NEW = "new"
    DELETED = "deleted"


class CacheCheck(BaseModel):
    """Result of comparing a cache with the current documents."""

    valid: bool
    reason: str = ""
    modified: list[str] = []
    added: list[str] = []
    deleted: list[str] = []

    @property
    def pending(self) -> list[str]:
        """Documents to re-parse incrementally while the cache stays valid."""
        return [*self.modified, *self.added]


def document_state(current_mtime: float | None, cached_mtime: str | None) -> DocumentState:
    """Classify one document by comparing its modification time with the cached one.

    Stored times have second precision, so the current time is truncated first.
    """
    if current_mtime is None:
        return DocumentState.DELETED
    if cached_mtime is None:
        return DocumentState.NEW
    try:
        cached = readable_to_timestamp(cached_mtime)
    except ValueError:
        return DocumentState.MODIFIED
    return DocumentState.MODIFIED if int(current_mtime) > cached else DocumentState.UNCHANGED


class CacheValidator:
    """Checks a cache against the document store."""

    def __init__(
        self,
        documents: DocumentStore,
        *,
        should_skip: Callable[[str], bool] = lambda path: False,
        max_modified: int = 5,
        max_new: int = 5,
    ):
        """Initialize the validator.

        Args:
            documents: Store holding the current documents
            should_skip: Predicate for documents excluded from indexing
            max_modified: Most modified documents that may be updated incrementally
            max_new: Most new documents that may be added incrementally
        """
        self.documents = documents
        self.should_skip = should_skip
        self.max_modified = max_modified
        self.max_new = max_new

    async def check(self, cache: CalloutCache | None) -> CacheCheck:
        if cache is None:
            return CacheCheck(valid=False, reason="no cache")

        modified = []
        deleted = []
        for path, cached_mtime in cache.file_mod_times.items():
            if self.should_skip(path):
                # Excluded since the last scan; a rescan drops its callouts
                deleted.append(path)
                continue
            state = document_state(await self.documents.modified_time(path), cached_mtime)
            if state == DocumentState.DELETED:
                deleted.append(path)
            elif state == DocumentState.MODIFIED:
                modified.append(path)

        added = [
            path
            for path in await self.documents.list_documents()
            if not self.should_skip(path) and path not in cache.file_mod_times
        ]

        reason = ""
        if deleted:
            reason = f"{len(deleted)} documents deleted"
        elif len(modified) > self.max_modified:
            reason = f"{len(modified)} documents modified (limit {self.max_modified})"
        elif len(added) > self.max_new:
            reason = f"{len(added)} new documents (limit {self.max_new})"

        if reason:
            logger.info(f"Cache invalid: {reason}")
        return CacheCheck(
            valid=not reason, reason=reason, modified=modified, added=added, deleted=deleted
        )
