from typing import List, Protocol

from chatarchive.domain.relationships import RelationshipEdge


class RelationshipBackend(Protocol):
    """Row storage for relationship edges keyed by (source_id, target_id).

    Multi-row writes are applied as a unit: either every row in the call is
    stored or none is.
    """

    def get_edge(self, source_id: str, target_id: str) -> RelationshipEdge | None:
        """Get the edge stored under a (source_id, target_id) key."""
        ...

    def get_edges_from(self, source_id: str) -> List[RelationshipEdge]:
        """Get every edge whose source is the given entry."""
        ...

    def get_all_edges(self, min_score: float = 0.0) -> List[RelationshipEdge]:
        """Get every stored edge scoring at least min_score."""
        ...

    def upsert_edges(self, edges: List[RelationshipEdge]) -> None:
        """Insert or overwrite edges by key, keeping creation time and sequence of existing rows."""
        ...

    def delete_edges(self, keys: List[tuple[str, str]]) -> None:
        """Delete edges by key. Missing keys are ignored."""
        ...

    def delete_edges_touching(self, entry_id: str) -> None:
        """Delete every edge that has the entry as source or target."""
        ...

    def save(self, filepath: str | None = None) -> None:
        """Save the backend to disk."""
        ...
