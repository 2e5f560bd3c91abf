"""Ephemeral graph models used by the layout and renderer."""

from pydantic import BaseModel


class GraphNode(BaseModel):
    """A layout node. Lives only for one visualization session."""

    id: str
    label: str
    color_key: str
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0


class GraphEdge(BaseModel):
    """Undirected projection of a relationship pair."""

    source_id: str
    target_id: str
    strength: float


class GraphDataset(BaseModel):
    nodes: list[GraphNode] = []
    edges: list[GraphEdge] = []
