"""The callout index: extraction, caching, id assignment and graph export."""

import asyncio
import logging
import random
from typing import Iterable

from calloutdex.cache.base import CacheStore
from calloutdex.cache.incremental import IncrementalUpdater, parse_document
from calloutdex.cache.validity import CacheValidator
from calloutdex.documents.base import DocumentStore
from calloutdex.domain.callout import CalloutItem, build_identity_index, timestamp_to_readable
from calloutdex.domain.canvas import CanvasData
from calloutdex.domain.results import GraphResult, IdAssignment
from calloutdex.graph.canvas_links import (
    CANVAS_EXTENSION,
    canvas_path,
    merge_canvas_links,
    parse_canvas,
)
from calloutdex.graph.graph_builder import RelationshipGraphBuilder
from calloutdex.index.search import CalloutType, SearchOptions, group_by_type, search_callouts
from calloutdex.parsing.callout_parser import CalloutParser
from calloutdex.parsing.identifiers import generate_callout_id, inject_callout_id
from calloutdex.parsing.patterns import scan_callout_types

logger = logging.getLogger(__name__)


def _snapshot(callouts: Iterable[CalloutItem]) -> list[CalloutItem]:
    """Copies sorted most recently modified first."""
    copies = [callout.model_copy(deep=True) for callout in callouts]
    return sorted(copies, key=lambda c: c.sort_time(), reverse=True)


class CalloutIndex:
    """Keeps an index of every callout in a set of documents.

    Reads are served from the cache while it is valid; small edits are folded
    in incrementally and anything else triggers a full rescan. Callers always
    receive copies, so mutating a result never affects the index.
    """

    def __init__(
        self,
        *,
        documents: DocumentStore,
        cache_store: CacheStore,
        parser: CalloutParser | None = None,
        graph_builder: RelationshipGraphBuilder | None = None,
        excluded_folders: Iterable[str] = (),
        canvas_folder: str = "Callout Canvas",
        max_incremental_documents: int = 5,
        max_new_documents: int = 5,
        debounce_seconds: float = 0.5,
        search_options: SearchOptions | None = None,
        rng: random.Random | None = None,
    ):
        self.documents = documents
        self.cache_store = cache_store
        self.parser = parser or CalloutParser()
        self.graph_builder = graph_builder or RelationshipGraphBuilder()
        self.excluded_folders = [f.strip("/") for f in excluded_folders if f.strip("/")]
        self.canvas_folder = canvas_folder
        self.search_options = search_options or SearchOptions()
        self.rng = rng or random.Random()

        self.validator = CacheValidator(
            documents,
            should_skip=self.should_skip,
            max_modified=max_incremental_documents,
            max_new=max_new_documents,
        )
        self.updater = IncrementalUpdater(
            documents=documents,
            cache_store=cache_store,
            parser=self.parser,
            validator=self.validator,
            debounce_seconds=debounce_seconds,
            max_batch=max_incremental_documents + max_new_documents,
        )
        # Serializes id assignment so two callouts never receive the same new id
        self._id_lock = asyncio.Lock()

    def should_skip(self, path: str) -> bool:
        """Whether ``path`` lies in an excluded folder."""
        return any(path == folder or path.startswith(f"{folder}/") for folder in self.excluded_folders)

    async def _previous_index(self) -> dict[tuple[str, str], CalloutItem] | None:
        cache = await self.cache_store.load()
        return build_identity_index(cache.callouts) if cache else None

    async def extract_current_document(self, path: str | None) -> list[CalloutItem]:
        """Parse the open document directly, ignoring exclusions.

        Returns:
            Callouts in document order, empty if the document cannot be read
        """
        if not path or not path.endswith(self.parser.document_extension):
            return []
        result = await parse_document(self.documents, self.parser, path, await self._previous_index())
        if result is None:
            return []
        callouts, _ = result
        return callouts

    async def extract_all_documents(self, current_path: str | None = None) -> list[CalloutItem]:
        """Every callout in the vault, from the cache when it is still valid.

        Documents modified since the cache was written are queued for an
        incremental update and show up on a later call.
        """
        cache = None if self.updater.stale else await self.cache_store.load()
        if cache is not None and await self.updater.is_cache_valid(cache):
            logger.info(f"Serving {len(cache.callouts)} callouts from cache")
            return _snapshot(cache.callouts)
        return await self.refresh_all(current_path)

    async def refresh_all(self, current_path: str | None = None) -> list[CalloutItem]:
        """Rescan every document and rewrite the cache.

        Runs under the updater's lock, so no incremental batch or id assignment
        can save in between the scan and the save.
        """
        async with self.updater.lock:
            queued = self.updater.pending
            callouts, file_mod_times = await self.scan_all(current_path)
            saved = await self.cache_store.save(self.cache_store.snapshot(callouts, file_mod_times))
            if not saved:
                logger.warning("Full scan finished but the cache could not be saved")
            self.updater.reset(queued)
        return _snapshot(callouts)

    async def scan_all(self, current_path: str | None = None) -> tuple[list[CalloutItem], dict[str, str]]:
        """Parse every indexed document, the current one first.

        Returns:
            Tuple of (callouts, document path -> modification time seen while reading)
        """
        previous = await self._previous_index()
        paths = [p for p in await self.documents.list_documents() if not self.should_skip(p)]
        if current_path in paths:
            paths.remove(current_path)
            paths.insert(0, current_path)

        callouts: list[CalloutItem] = []
        file_mod_times: dict[str, str] = {}
        for path in paths:
            result = await parse_document(self.documents, self.parser, path, previous)
            if result is None:
                continue
            parsed, mtime = result
            callouts.extend(parsed)
            file_mod_times[path] = timestamp_to_readable(mtime)

        logger.info(f"Scanned {len(file_mod_times)} documents, found {len(callouts)} callouts")
        return callouts, file_mod_times

    async def current_callouts(self, current_path: str | None = None) -> list[CalloutItem]:
        """Like :meth:`extract_all_documents`, but waits for queued updates first."""
        callouts = await self.extract_all_documents(current_path)
        if not self.updater.pending:
            return callouts
        if await self.updater.flush():
            cache = await self.cache_store.load()
            if cache is not None:
                return _snapshot(cache.callouts)
        return await self.refresh_all(current_path)

    def notify_changed(self, path: str) -> None:
        if path.endswith(self.parser.document_extension) and not self.should_skip(path):
            self.updater.notify_changed(path)

    def notify_deleted(self, path: str) -> None:
        if path.endswith(self.parser.document_extension):
            self.updater.notify_deleted(path)

    async def search(
        self,
        query: str = "",
        types: Iterable[str] | None = None,
        document_path: str | None = None,
    ) -> list[CalloutItem]:
        """Keyword search over the whole vault, or over one document including its headings."""
        if document_path:
            callouts = await self.extract_current_document(document_path)
            options = self.search_options.model_copy(update={"in_headings": True, "max_results": None})
        else:
            callouts = await self.extract_all_documents()
            options = self.search_options
        return search_callouts(callouts, query, list(types) if types else None, options)

    async def callout_types(self, document_path: str | None = None) -> list[CalloutType]:
        """Distinct callout types in one document, or in the whole vault."""
        if document_path:
            try:
                types = scan_callout_types(await self.documents.read(document_path))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Failed to read {document_path}: {e}")
                return []
        else:
            types = set(group_by_type(await self.extract_all_documents()))
        return [CalloutType.of(t) for t in sorted(types)]

    async def assign_id(self, callout: CalloutItem) -> IdAssignment:
        """Give ``callout`` a new id and write it into its document.

        The input record is never modified. If the id cannot be written the
        result reports failure and no record anywhere carries the new id.
        """
        if callout.id:
            return IdAssignment(success=True, callout=callout, callout_id=callout.id)

        async with self._id_lock:
            cache = await self.cache_store.load()
            existing_ids = {c.id for c in cache.callouts if c.id} if cache else set()
            callout_id = generate_callout_id(callout.type, existing_ids, self.rng)

            try:
                text = await self.documents.read(callout.document_path)
                await self.documents.write(
                    callout.document_path, inject_callout_id(text, callout, callout_id)
                )
            except (OSError, ValueError) as e:
                logger.warning(f"Could not assign an id in {callout.document_path}: {e}")
                return IdAssignment(success=False, callout=callout, error=str(e))

            logger.info(f"Assigned id {callout_id} to callout in {callout.document_path}")
            await self.updater.update_documents([callout.document_path])

        assigned = callout.model_copy(update={"id": callout_id})
        cache = await self.cache_store.load()
        if cache is not None:
            assigned = build_identity_index(cache.callouts).get(assigned.key, assigned)
        return IdAssignment(success=True, callout=assigned, callout_id=callout_id)

    async def load_canvases(self) -> dict[str, CanvasData]:
        """Every readable canvas in the vault by path."""
        canvases = {}
        for path in await self.documents.list_files(CANVAS_EXTENSION):
            try:
                text = await self.documents.read(path)
            except (OSError, UnicodeDecodeError) as e:
                logger.warning(f"Failed to read canvas {path}: {e}")
                continue
            canvas = parse_canvas(text, path)
            if canvas is not None:
                canvases[path] = canvas
        return canvases

    async def build_relationship_graph(
        self,
        focal: CalloutItem,
        *,
        width: int | None = None,
        height: int | None = None,
        current_path: str | None = None,
    ) -> GraphResult:
        """Build the graph around ``focal`` and export it, replacing any earlier export.

        Args:
            focal: Callout at the center. It is given an id first if it has none.
            width: Focal node width, else the width of the previous export
            height: Focal node height, else the height of the previous export
            current_path: Document to scan first if a full rescan is needed
        """
        assignment = await self.assign_id(focal)
        if not assignment.success:
            return GraphResult(success=False, focal=focal, error=assignment.error)
        focal = assignment.callout

        callouts = await self.current_callouts(current_path)
        canvases = await self.load_canvases()
        callouts = merge_canvas_links(callouts, canvases.values())
        focal = build_identity_index(callouts).get(focal.key, focal)

        output_path = canvas_path(self.canvas_folder, focal)
        previous = canvases.get(output_path)
        if previous is not None:
            node = previous.find_node(focal.document_path, focal.id)
            if node is not None and node.width and node.height:
                focal = focal.model_copy(update={"canvas_width": node.width, "canvas_height": node.height})

        canvas = self.graph_builder.build(focal, callouts, width=width, height=height)

        try:
            if self.canvas_folder:
                await self.documents.ensure_folder(self.canvas_folder)
            if await self.documents.exists(output_path):
                await self.documents.delete(output_path)
            await self.documents.write(output_path, canvas.to_json())
        except OSError as e:
            logger.warning(f"Failed to write canvas {output_path}: {e}")
            return GraphResult(success=False, focal=focal, error=str(e))

        logger.info(f"Exported relationship graph to {output_path}")
        return GraphResult(success=True, focal=focal, canvas_path=output_path, canvas=canvas)
