from typing import List

from chatarchive.domain.relationships import RelationshipEdge
from chatarchive.relationship_backends.base import RelationshipBackend


class FailingRelationshipBackend(RelationshipBackend):
    """Backend whose storage is unreachable."""

    def _fail(self) -> None:
        raise OSError("relationship storage unreachable")

    def get_edge(self, source_id: str, target_id: str) -> RelationshipEdge | None:
        self._fail()

    def get_edges_from(self, source_id: str) -> List[RelationshipEdge]:
        self._fail()

    def get_all_edges(self, min_score: float = 0.0) -> List[RelationshipEdge]:
        self._fail()

    def upsert_edges(self, edges: List[RelationshipEdge]) -> None:
        self._fail()

    def delete_edges(self, keys: List[tuple[str, str]]) -> None:
        self._fail()

    def delete_edges_touching(self, entry_id: str) -> None:
        self._fail()

    def save(self, filepath: str | None = None) -> None:
        self._fail()
