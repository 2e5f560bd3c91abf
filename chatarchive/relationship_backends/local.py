import json
import os
import tempfile
from pathlib import Path
from typing import Dict, List

from loguru import logger

from chatarchive.domain.relationships import RelationshipEdge
from chatarchive.relationship_backends.base import RelationshipBackend

EdgeKey = tuple[str, str]


class LocalRelationshipBackend(RelationshipBackend):
    """Relationship rows kept in memory and written through to a JSON file."""

    def __init__(self, filepath: str | Path | None = None) -> None:
        """Initialize LocalRelationshipBackend.

        Args:
            filepath: Path to the relationship file. If provided and exists, will auto-load.
                     If provided, every write is persisted to this path immediately.
                     If not provided, rows live in memory only.
        """
        self._filepath = str(filepath) if filepath else None
        self._edges: Dict[EdgeKey, RelationshipEdge] = {}
        self._next_sequence = 1

        if self._filepath and Path(self._filepath).exists():
            with open(self._filepath, "r") as f:
                data = json.load(f)
            for edge_data in data["edges"]:
                edge = RelationshipEdge(**edge_data)
                self._edges[edge.key] = edge
            self._next_sequence = data.get("next_sequence", len(self._edges) + 1)

    @classmethod
    def from_data(cls, edges: List[RelationshipEdge] | None = None) -> "LocalRelationshipBackend":
        """Create an in-memory backend holding the given edges (useful for testing)."""
        instance = cls(filepath=None)
        instance.upsert_edges(edges or [])
        return instance

    def get_edge(self, source_id: str, target_id: str) -> RelationshipEdge | None:
        return self._edges.get((source_id, target_id))

    def get_edges_from(self, source_id: str) -> List[RelationshipEdge]:
        return [edge for edge in self._edges.values() if edge.source_id == source_id]

    def get_all_edges(self, min_score: float = 0.0) -> List[RelationshipEdge]:
        return [edge for edge in self._edges.values() if edge.score >= min_score]

    def upsert_edges(self, edges: List[RelationshipEdge]) -> None:
        staged = dict(self._edges)
        next_sequence = self._next_sequence
        for edge in edges:
            existing = staged.get(edge.key)
            if existing is not None:
                edge = edge.model_copy(
                    update={"created_at": existing.created_at, "sequence": existing.sequence}
                )
            else:
                edge = edge.model_copy(update={"sequence": next_sequence})
                next_sequence += 1
            staged[edge.key] = edge
        self._commit(staged, next_sequence)

    def delete_edges(self, keys: List[EdgeKey]) -> None:
        doomed = set(keys)
        staged = {key: edge for key, edge in self._edges.items() if key not in doomed}
        self._commit(staged, self._next_sequence)

    def delete_edges_touching(self, entry_id: str) -> None:
        staged = {key: edge for key, edge in self._edges.items() if entry_id not in key}
        self._commit(staged, self._next_sequence)

    def save(self, filepath: str | None = None) -> None:
        """Save the relationship rows to a JSON file.

        Args:
            filepath: Path to save to. If not provided, uses the filepath from initialization.
        """
        save_path = filepath or self._filepath
        if not save_path:
            raise ValueError(
                "No filepath provided and no default filepath set during initialization"
            )
        self._write(str(save_path), self._edges, self._next_sequence)

    def _commit(self, staged: Dict[EdgeKey, RelationshipEdge], next_sequence: int) -> None:
        # Persist first so a failed write leaves the in-memory rows untouched
        if self._filepath:
            self._write(self._filepath, staged, next_sequence)
        self._edges = staged
        self._next_sequence = next_sequence

    @staticmethod
    def _write(path: str, edges: Dict[EdgeKey, RelationshipEdge], next_sequence: int) -> None:
        directory = Path(path).parent
        directory.mkdir(parents=True, exist_ok=True)
        data = {
            "next_sequence": next_sequence,
            "edges": [edge.model_dump(mode="json") for edge in edges.values()],
        }
        fd, tmp_path = tempfile.mkstemp(dir=directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f)
            os.replace(tmp_path, path)
        except OSError:
            logger.error(f"Failed to write relationship file {path}")
            Path(tmp_path).unlink(missing_ok=True)
            raise
