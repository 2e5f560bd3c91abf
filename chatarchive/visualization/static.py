"""Settled layouts for callers without an event loop, such as the API and CLI."""

from chatarchive.domain.graph import GraphDataset
from chatarchive.relationships.store import RelationshipStore
from chatarchive.visualization.layout import LayoutParams, LayoutSimulator
from chatarchive.visualization.projector import GraphProjector
from chatarchive.visualization.renderer import GraphRenderer, SvgSurface, Viewport


def build_settled_graph(
    relationship_store: RelationshipStore,
    *,
    width: float = 1200,
    height: float = 800,
    params: LayoutParams | None = None,
) -> GraphDataset:
    """Project the stored graph and run the layout until it settles."""
    dataset = GraphProjector().project(relationship_store.query_all_for_visualization())
    simulator = LayoutSimulator(dataset, width=width, height=height, params=params)
    return GraphDataset(nodes=simulator.run_to_settled(), edges=dataset.edges)


def render_svg(
    dataset: GraphDataset,
    *,
    width: float = 1200,
    height: float = 800,
    selected_id: str | None = None,
    viewport: Viewport | None = None,
) -> str:
    surface = SvgSurface()
    GraphRenderer(width=width, height=height).draw(
        surface, dataset.nodes, dataset.edges, viewport or Viewport(), selected_id=selected_id
    )
    return surface.to_svg()
