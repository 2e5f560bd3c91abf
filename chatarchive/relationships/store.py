"""Symmetric relationship persistence on top of a row backend."""

from typing import Callable, List, TypeVar

from loguru import logger

from chatarchive.domain.relationships import (
    EdgePair,
    RelatedEntry,
    RelationshipEdge,
    VisualizationEdge,
    VisualizationNode,
    VisualizationSnapshot,
)
from chatarchive.entry_stores.base import EntryStore
from chatarchive.errors import BackendUnavailableError
from chatarchive.relationship_backends.base import RelationshipBackend

T = TypeVar("T")

MANUAL_SCORE = 1.0


class RelationshipStore:
    """Reads and writes relationship edges, always as mirrored pairs.

    Operations on entry ids that don't exist are no-ops returning empty
    results. Backend failures surface as BackendUnavailableError.
    """

    def __init__(
        self,
        *,
        entry_store: EntryStore,
        backend: RelationshipBackend,
        min_visualization_score: float = 0.3,
    ):
        self.entry_store = entry_store
        self.backend = backend
        self.min_visualization_score = min_visualization_score

    def upsert(self, pair: EdgePair) -> bool:
        """Write both directions of a relationship.

        Automatic detections never replace a manual link between the same pair. The
        backward row is always written as the mirror of the forward one.

        Args:
            pair: The two mirrored edges

        Returns:
            True if the pair was written, False if it was skipped
        """
        source_id, target_id = pair.forward.source_id, pair.forward.target_id
        if not self._entries_exist(source_id, target_id):
            logger.debug(f"Skipping upsert for missing entry {source_id} or {target_id}")
            return False

        if pair.kind == "ai_detected" and self._has_manual_link(source_id, target_id):
            logger.debug(f"Keeping manual link between {source_id} and {target_id}")
            return False

        rows = [pair.forward, pair.forward.mirrored()]
        self._call_backend(lambda: self.backend.upsert_edges(rows))
        return True

    def create_manual(self, entry_id_a: str, entry_id_b: str) -> bool:
        """Link two entries by hand. Manual links always score 1.0."""
        if entry_id_a == entry_id_b:
            return False
        pair = EdgePair.between(entry_id_a, entry_id_b, score=MANUAL_SCORE, kind="manual")
        written = self.upsert(pair)
        if written:
            logger.info(f"Created manual link between {entry_id_a} and {entry_id_b}")
        return written

    def remove(self, entry_id_a: str, entry_id_b: str) -> None:
        """Delete both directions of a relationship."""
        self._call_backend(
            lambda: self.backend.delete_edges([(entry_id_a, entry_id_b), (entry_id_b, entry_id_a)])
        )

    def remove_all_for_entry(self, entry_id: str) -> None:
        """Delete every relationship touching an entry, in both directions."""
        self._call_backend(lambda: self.backend.delete_edges_touching(entry_id))

    def delete_entry(self, entry_id: str) -> None:
        """Delete an entry together with its relationships."""
        self.remove_all_for_entry(entry_id)
        self.entry_store.delete_entry(entry_id)
        logger.info(f"Deleted entry {entry_id} and its relationships")

    def query_related(self, entry_id: str, limit: int = 10) -> List[RelatedEntry]:
        """Entries linked to the given one, strongest first.

        Ties are broken by the most recently created edge first.

        Args:
            entry_id: Entry to find relationships for
            limit: Maximum number of results

        Returns:
            Related entries with their score and relationship kind
        """
        if limit <= 0 or self.entry_store.get_by_id(entry_id) is None:
            return []

        edges = self._call_backend(lambda: self.backend.get_edges_from(entry_id))
        edges = sorted(edges, key=_related_sort_key)
        entries = self.entry_store.get_entries_by_ids([edge.target_id for edge in edges])

        related = []
        for edge in edges:
            entry = entries.get(edge.target_id)
            if entry is None:
                continue
            related.append(RelatedEntry(entry=entry, score=edge.score, kind=edge.kind))
            if len(related) == limit:
                break
        return related

    def get_links(self, entry_id: str) -> dict[str, RelationshipEdge]:
        """Outgoing edges of an entry keyed by target id, including edges to deleted entries."""
        edges = self._call_backend(lambda: self.backend.get_edges_from(entry_id))
        return {edge.target_id: edge for edge in edges}

    def query_all_for_visualization(self) -> VisualizationSnapshot:
        """Snapshot of every entry and every edge scoring at least the visualization minimum."""
        entries = self.entry_store.get_all()
        known_ids = {entry.id for entry in entries}
        edges = self._call_backend(
            lambda: self.backend.get_all_edges(min_score=self.min_visualization_score)
        )

        nodes = [
            VisualizationNode(
                id=entry.id,
                title=entry.title,
                source_label=entry.source_label,
                tags=sorted(entry.tags),
                created_at=entry.created_at,
            )
            for entry in entries
        ]
        visual_edges = [
            VisualizationEdge(
                source=edge.source_id, target=edge.target_id, strength=edge.score, kind=edge.kind
            )
            for edge in edges
            if edge.source_id in known_ids and edge.target_id in known_ids
        ]
        return VisualizationSnapshot(nodes=nodes, edges=visual_edges)

    def _entries_exist(self, *entry_ids: str) -> bool:
        return all(self.entry_store.get_by_id(entry_id) is not None for entry_id in entry_ids)

    def _has_manual_link(self, source_id: str, target_id: str) -> bool:
        def lookup() -> list[RelationshipEdge | None]:
            return [
                self.backend.get_edge(source_id, target_id),
                self.backend.get_edge(target_id, source_id),
            ]

        edges = self._call_backend(lookup)
        return any(edge is not None and edge.kind == "manual" for edge in edges)

    @staticmethod
    def _call_backend(operation: Callable[[], T]) -> T:
        try:
            return operation()
        except OSError as e:
            logger.error(f"Relationship backend failed: {e}")
            raise BackendUnavailableError(str(e)) from e


def _related_sort_key(edge: RelationshipEdge) -> tuple[float, float, int]:
    return (-edge.score, -edge.created_at.timestamp(), -edge.sequence)
