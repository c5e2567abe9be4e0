from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from calloutdex.api.endpoints import get_endpoints_router
from calloutdex.index.orchestrator import CalloutIndex


def create_app(*, index: CalloutIndex) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router=get_endpoints_router(index=index))

    return app
