"""Incremental cache maintenance.

Edits to a handful of documents are folded into the persisted cache by
re-parsing only those documents. Anything larger, or any deletion, marks the
cache stale so the next read falls back to a full rescan.
"""

import asyncio
from typing import Iterable

from loguru import logger

from calloutdex.cache.base import CacheStore
from calloutdex.cache.validity import CacheValidator
from calloutdex.documents.base import DocumentStore
from calloutdex.domain.callout import (
    CalloutCache,
    CalloutItem,
    build_identity_index,
    timestamp_to_readable,
)
from calloutdex.parsing.callout_parser import CalloutParser, IdentityIndex


async def parse_document(
    documents: DocumentStore,
    parser: CalloutParser,
    path: str,
    previous: IdentityIndex | None = None,
) -> tuple[list[CalloutItem], float] | None:
    """Read and parse one document.

    Returns:
        Tuple of (callouts, modification time), or None if the document could not be read
    """
    mtime = await documents.modified_time(path)
    if mtime is None:
        logger.warning(f"Document {path} no longer exists, skipping")
        return None
    try:
        text = await documents.read(path)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Failed to read {path}, skipping: {e}")
        return None
    return parser.parse(path, text, mtime, previous), mtime


class IncrementalUpdater:
    """Queues changed documents and folds them into the cache in small batches.

    Notifications are debounced, and only one batch runs at a time. Each batch
    loads the cache once, re-parses its documents and saves once.
    """

    def __init__(
        self,
        *,
        documents: DocumentStore,
        cache_store: CacheStore,
        parser: CalloutParser,
        validator: CacheValidator,
        debounce_seconds: float = 0.5,
        max_batch: int = 5,
    ):
        self.documents = documents
        self.cache_store = cache_store
        self.parser = parser
        self.validator = validator
        self.debounce_seconds = debounce_seconds
        self.max_batch = max_batch

        self._pending: set[str] = set()
        self._stale = False
        self._timer: asyncio.Task | None = None
        self._batch_lock = asyncio.Lock()

    @property
    def pending(self) -> frozenset[str]:
        return frozenset(self._pending)

    @property
    def stale(self) -> bool:
        """True when the cache can only be repaired by a full rescan."""
        return self._stale

    @property
    def lock(self) -> asyncio.Lock:
        """Held across every load, modify and save of the cache."""
        return self._batch_lock

    def reset(self, processed: Iterable[str] | None = None) -> None:
        """Forget queued work after a full rescan has rebuilt the cache.

        Args:
            processed: Documents that were queued when the rescan started.
                Documents queued later stay pending. None forgets everything.
        """
        if processed is None:
            self._pending.clear()
        else:
            self._pending.difference_update(processed)
        self._stale = False
        if not self._pending:
            self._cancel_timer()

    async def is_cache_valid(self, cache: CalloutCache | None) -> bool:
        """Check the cache and queue the documents that changed since it was written."""
        if self._stale:
            return False
        check = await self.validator.check(cache)
        if not check.valid:
            return False
        if check.pending:
            logger.info(f"Queueing {len(check.pending)} changed documents for incremental update")
            self.queue(check.pending)
        return True

    def queue(self, paths: Iterable[str]) -> None:
        self._pending.update(paths)
        if len(self._pending) > self.max_batch:
            logger.info(f"{len(self._pending)} documents pending, a full rescan is needed")
            self.mark_stale()
            return
        if self._pending:
            self._schedule()

    def notify_changed(self, path: str) -> None:
        self.queue([path])

    def notify_deleted(self, path: str) -> None:
        self._pending.discard(path)
        self.mark_stale()

    def mark_stale(self) -> None:
        self._cancel_timer()
        self._pending.clear()
        self._stale = True

    def _schedule(self) -> None:
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().create_task(self._flush_after_delay())
        self._timer.add_done_callback(self._report_failure)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None

    @staticmethod
    def _report_failure(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(f"Debounced cache update failed: {exc}")

    async def _flush_after_delay(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        self._timer = None
        await self.flush()

    async def flush(self) -> bool:
        """Process queued documents now.

        Returns:
            False if the cache is stale and needs a full rescan
        """
        self._cancel_timer()
        async with self._batch_lock:
            if self._stale:
                return False
            if not self._pending:
                return True
            batch = sorted(self._pending)
            self._pending.clear()
            return await self._apply(batch)

    async def update_documents(self, paths: list[str]) -> bool:
        """Re-parse ``paths`` and write the result into the cache with a single save.

        Documents that cannot be read lose their callouts and their recorded
        modification time, so the next validity check sees them as new.
        """
        async with self._batch_lock:
            return await self._apply(paths)

    async def _apply(self, paths: list[str]) -> bool:
        cache = await self.cache_store.load()
        if cache is None:
            logger.info("No cache to update incrementally")
            self._stale = True
            return False

        previous = build_identity_index(cache.callouts)
        touched = set(paths)
        callouts = [c for c in cache.callouts if c.document_path not in touched]
        file_mod_times = {
            path: mtime for path, mtime in cache.file_mod_times.items() if path not in touched
        }

        for path in paths:
            result = await parse_document(self.documents, self.parser, path, previous)
            if result is None:
                continue
            parsed, mtime = result
            callouts.extend(parsed)
            file_mod_times[path] = timestamp_to_readable(mtime)

        saved = await self.cache_store.save(self.cache_store.snapshot(callouts, file_mod_times))
        if saved:
            logger.info(f"Incrementally updated {len(paths)} documents")
        return saved
