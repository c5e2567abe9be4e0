from calloutdex.cache.local import LocalCacheStore
from calloutdex.config import Settings
from calloutdex.documents.local import LocalDocumentStore
from calloutdex.graph.graph_builder import RelationshipGraphBuilder
from calloutdex.graph.layout import ColumnLayout
from calloutdex.index.orchestrator import CalloutIndex
from calloutdex.index.search import SearchOptions


def create_index(config: Settings) -> CalloutIndex:
    """Wire a CalloutIndex over the local vault described by ``config``."""
    documents = LocalDocumentStore(config.vault_path)
    cache_store = LocalCacheStore(
        config.vault_path / config.cache_path, vault_name=config.resolved_vault_name()
    )
    graph_builder = RelationshipGraphBuilder(
        layout=ColumnLayout(
            node_width=config.default_node_width, node_height=config.default_node_height
        ),
        focal_width=config.default_focal_width,
        focal_height=config.default_focal_height,
    )
    search_options = SearchOptions(
        in_filenames=config.search_in_filenames,
        in_titles=config.search_in_titles,
        in_ids=config.search_in_ids,
        in_content=config.search_in_content,
        max_results=config.max_search_results,
    )
    return CalloutIndex(
        documents=documents,
        cache_store=cache_store,
        graph_builder=graph_builder,
        excluded_folders=config.excluded_folders,
        canvas_folder=config.canvas_folder,
        max_incremental_documents=config.max_incremental_documents,
        max_new_documents=config.max_new_documents,
        debounce_seconds=config.incremental_debounce_seconds,
        search_options=search_options,
    )
