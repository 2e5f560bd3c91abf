"""Relationship domain models."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from chatarchive.domain.entry import Entry, utcnow

RelationshipKind = Literal["ai_detected", "manual"]


class RelationshipEdge(BaseModel):
    """A scored, directed link between two entries.

    Edges are always stored in mirrored pairs, see `EdgePair`.
    """

    source_id: str
    target_id: str
    kind: RelationshipKind = "ai_detected"
    score: float = Field(ge=0.0, le=1.0)
    created_at: datetime = Field(default_factory=utcnow)
    sequence: int = 0  # assigned by the backend on first insert

    @property
    def key(self) -> tuple[str, str]:
        return (self.source_id, self.target_id)

    def mirrored(self) -> "RelationshipEdge":
        return self.model_copy(update={"source_id": self.target_id, "target_id": self.source_id})


class EdgePair(BaseModel):
    """Both directions of one relationship, written and removed together."""

    forward: RelationshipEdge
    backward: RelationshipEdge

    @model_validator(mode="after")
    def check_mirrored(self) -> "EdgePair":
        forward, backward = self.forward, self.backward
        if backward.key != (forward.target_id, forward.source_id):
            raise ValueError(f"Backward edge {backward.key} does not reverse {forward.key}")
        if backward.score != forward.score or backward.kind != forward.kind:
            raise ValueError("Both directions of a pair must share score and kind")
        return self

    @classmethod
    def between(
        cls, entry_id_a: str, entry_id_b: str, *, score: float, kind: RelationshipKind
    ) -> "EdgePair":
        forward = RelationshipEdge(
            source_id=entry_id_a, target_id=entry_id_b, score=score, kind=kind
        )
        return cls(forward=forward, backward=forward.mirrored())

    @property
    def kind(self) -> RelationshipKind:
        return self.forward.kind

    @property
    def score(self) -> float:
        return self.forward.score


class RelatedEntry(BaseModel):
    """An entry returned for a "related entries" panel."""

    entry: Entry
    score: float
    kind: RelationshipKind

    model_config = {"arbitrary_types_allowed": True}


class VisualizationNode(BaseModel):
    id: str
    title: str
    source_label: str
    tags: list[str] = []
    created_at: datetime


class VisualizationEdge(BaseModel):
    source: str
    target: str
    strength: float
    kind: RelationshipKind


class VisualizationSnapshot(BaseModel):
    """Entries and edges used to build the graph view."""

    nodes: list[VisualizationNode] = []
    edges: list[VisualizationEdge] = []
