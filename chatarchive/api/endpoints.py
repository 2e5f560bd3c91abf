from typing import List

from fastapi import APIRouter
from fastapi.responses import Response
from loguru import logger

from chatarchive.api.schemas import (
    ManualLinkRequest,
    RelatedEntryView,
    SuggestionView,
)
from chatarchive.config import settings
from chatarchive.domain.graph import GraphDataset
from chatarchive.entry_stores.base import EntryStore
from chatarchive.relationships.detector import DetectionResult, RelationshipDetector
from chatarchive.relationships.store import RelationshipStore
from chatarchive.relationships.suggestions import suggest_similar
from chatarchive.visualization.layout import LayoutParams
from chatarchive.visualization.static import build_settled_graph, render_svg


def _create_related_endpoint(relationship_store: RelationshipStore):
    """Create the related entries endpoint handler."""

    async def get_related(entry_id: str, limit: int = settings.related_limit):
        related = relationship_store.query_related(entry_id, limit=limit)
        return [RelatedEntryView.from_related(item) for item in related]

    return get_related


def _create_detect_endpoint(detector: RelationshipDetector):
    """Create the relationship detection endpoint handler."""

    async def detect(entry_id: str) -> DetectionResult:
        return await detector.detect_and_link(entry_id)

    return detect


def _create_suggestions_endpoint(entry_store: EntryStore):
    """Create the neural proximity suggestions endpoint handler."""

    async def get_suggestions(entry_id: str, limit: int = settings.suggestion_limit):
        entry = entry_store.get_by_id(entry_id)
        if entry is None:
            return []
        suggestions = suggest_similar(entry, entry_store.get_all_except(entry_id), limit=limit)
        return [SuggestionView.from_suggestion(suggestion) for suggestion in suggestions]

    return get_suggestions


def _create_graph_endpoints(relationship_store: RelationshipStore):
    """Create the graph dataset and SVG endpoint handlers."""

    def settled_graph() -> GraphDataset:
        return build_settled_graph(
            relationship_store,
            width=settings.canvas_width,
            height=settings.canvas_height,
            params=LayoutParams(max_iterations=settings.layout_max_iterations),
        )

    # Plain handlers so the layout runs in the threadpool, off the event loop
    def get_graph() -> GraphDataset:
        return settled_graph()

    def get_graph_svg(selected: str | None = None) -> Response:
        svg = render_svg(
            settled_graph(),
            width=settings.canvas_width,
            height=settings.canvas_height,
            selected_id=selected,
        )
        return Response(content=svg, media_type="image/svg+xml")

    return get_graph, get_graph_svg


def get_endpoints_router(
    *,
    entry_store: EntryStore,
    relationship_store: RelationshipStore,
    detector: RelationshipDetector,
) -> APIRouter:
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    @router.post("/api/relationships")
    async def create_manual_link(request: ManualLinkRequest):
        created = relationship_store.create_manual(request.source_id, request.target_id)
        return {"created": created}

    @router.delete("/api/relationships/{entry_id_a}/{entry_id_b}")
    async def remove_link(entry_id_a: str, entry_id_b: str):
        relationship_store.remove(entry_id_a, entry_id_b)
        return {"removed": True}

    @router.delete("/api/entries/{entry_id}")
    async def delete_entry(entry_id: str):
        if entry_store.get_by_id(entry_id) is None:
            return {"deleted": False}
        relationship_store.delete_entry(entry_id)
        entry_store.save()
        logger.info(f"Entry {entry_id} deleted via API")
        return {"deleted": True}

    get_graph, get_graph_svg = _create_graph_endpoints(relationship_store)

    router.get("/api/entries/{entry_id}/related", response_model=List[RelatedEntryView])(
        _create_related_endpoint(relationship_store)
    )
    router.post("/api/entries/{entry_id}/detect")(_create_detect_endpoint(detector))
    router.get("/api/entries/{entry_id}/suggestions", response_model=List[SuggestionView])(
        _create_suggestions_endpoint(entry_store)
    )
    router.get("/api/graph")(get_graph)
    router.get("/api/graph.svg")(get_graph_svg)

    return router
