"""Projection of the stored relationship graph into a layout dataset."""

from chatarchive.domain.graph import GraphDataset, GraphEdge, GraphNode
from chatarchive.domain.relationships import VisualizationSnapshot

DEFAULT_SOURCE = "Other"

SOURCE_COLORS = {
    "ChatGPT": "#10a37f",
    "Claude": "#cc785c",
    "Gemini": "#4285f4",
    "Perplexity": "#20808d",
    "DeepSeek": "#4d6bfe",
    "Grok": "#9ca3af",
    "Copilot": "#7f5af0",
    DEFAULT_SOURCE: "#84cc16",
}


def color_for_source(source_label: str) -> str:
    """Stable color for an AI source; unknown sources share the default color."""
    return SOURCE_COLORS.get(source_label, SOURCE_COLORS[DEFAULT_SOURCE])


class GraphProjector:
    """Turns an entries + edges snapshot into nodes and undirected edges."""

    def project(self, snapshot: VisualizationSnapshot) -> GraphDataset:
        nodes = [
            GraphNode(id=node.id, label=node.title, color_key=color_for_source(node.source_label))
            for node in snapshot.nodes
        ]
        known_ids = {node.id for node in nodes}

        # Mirrored rows share one score, keep a single edge per unordered pair
        edges: dict[frozenset[str], GraphEdge] = {}
        for edge in snapshot.edges:
            if edge.source == edge.target:
                continue
            if edge.source not in known_ids or edge.target not in known_ids:
                continue
            key = frozenset((edge.source, edge.target))
            if key not in edges:
                edges[key] = GraphEdge(
                    source_id=edge.source, target_id=edge.target, strength=edge.strength
                )

        return GraphDataset(nodes=nodes, edges=list(edges.values()))
