from fastapi import APIRouter, HTTPException, Query
from loguru import logger

from calloutdex.api.schemas import CalloutList, CalloutRef, GraphRequest
from calloutdex.domain.results import GraphResult, IdAssignment
from calloutdex.index.orchestrator import CalloutIndex
from calloutdex.index.search import CalloutType


def _create_current_document_endpoint(index: CalloutIndex):
    """Create the current document endpoint handler."""

    async def get_document_callouts(path: str) -> CalloutList:
        if not path:
            raise HTTPException(status_code=400, detail="No document path provided")
        return CalloutList.of(await index.extract_current_document(path))

    return get_document_callouts


def _create_all_callouts_endpoint(index: CalloutIndex):
    """Create the whole-vault endpoint handler."""

    async def get_all_callouts(current_path: str | None = None) -> CalloutList:
        try:
            return CalloutList.of(await index.extract_all_documents(current_path))
        except Exception as e:
            logger.error(f"Error listing callouts: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return get_all_callouts


def _create_search_endpoint(index: CalloutIndex):
    """Create the search endpoint handler."""

    async def search_callouts(
        q: str = "",
        types: list[str] | None = Query(default=None),
        path: str | None = None,
    ) -> CalloutList:
        try:
            return CalloutList.of(await index.search(q, types, document_path=path))
        except Exception as e:
            logger.error(f"Error searching callouts for '{q}': {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return search_callouts


def _create_refresh_endpoint(index: CalloutIndex):
    async def refresh(current_path: str | None = None) -> CalloutList:
        try:
            return CalloutList.of(await index.refresh_all(current_path))
        except Exception as e:
            logger.error(f"Error refreshing callouts: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return refresh


def _create_assign_id_endpoint(index: CalloutIndex):
    """Create the id assignment endpoint handler.

    Assignment failures are reported in the body, not as HTTP errors.
    """

    async def assign_id(ref: CalloutRef) -> IdAssignment:
        return await index.assign_id(ref.to_callout())

    return assign_id


def _create_graph_endpoint(index: CalloutIndex):
    """Create the relationship graph endpoint handler."""

    async def build_graph(request: GraphRequest) -> GraphResult:
        return await index.build_relationship_graph(
            request.focal.to_callout(),
            width=request.width,
            height=request.height,
            current_path=request.current_path,
        )

    return build_graph


def _create_types_endpoint(index: CalloutIndex):
    async def get_callout_types(path: str | None = None) -> list[CalloutType]:
        try:
            return await index.callout_types(path)
        except Exception as e:
            logger.error(f"Error listing callout types: {str(e)}")
            raise HTTPException(status_code=500, detail="Internal server error") from e

    return get_callout_types


def get_endpoints_router(*, index: CalloutIndex) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    router.get("/api/callouts")(_create_current_document_endpoint(index))
    router.get("/api/callouts/all")(_create_all_callouts_endpoint(index))
    router.get("/api/callouts/search")(_create_search_endpoint(index))
    router.get("/api/callouts/types")(_create_types_endpoint(index))
    router.post("/api/callouts/refresh")(_create_refresh_endpoint(index))
    router.post("/api/callouts/id")(_create_assign_id_endpoint(index))
    router.post("/api/graph")(_create_graph_endpoint(index))

    return router
