from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from chatarchive.api.endpoints import get_endpoints_router
from chatarchive.entry_stores.base import EntryStore
from chatarchive.errors import ChatArchiveError
from chatarchive.relationships.detector import RelationshipDetector
from chatarchive.relationships.store import RelationshipStore


async def handle_archive_error(request: Request, exc: ChatArchiveError) -> JSONResponse:
    """Render archive errors as JSON with a retry hint."""
    logger.warning(f"{exc.error_type} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app(
    *,
    entry_store: EntryStore,
    relationship_store: RelationshipStore,
    detector: RelationshipDetector,
) -> FastAPI:
    """Create FastAPI app."""
    app = FastAPI()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ChatArchiveError, handle_archive_error)

    app.include_router(
        router=get_endpoints_router(
            entry_store=entry_store, relationship_store=relationship_store, detector=detector
        )
    )

    return app
