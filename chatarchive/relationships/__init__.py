"""Relationship discovery: scoring, persistence and detection."""

from chatarchive.relationships.detector import DetectionResult, RelationshipDetector
from chatarchive.relationships.scorer import ScoringWeights, SimilarityScorer
from chatarchive.relationships.store import RelationshipStore
from chatarchive.relationships.suggestions import Suggestion, suggest_similar

__all__ = [
    "DetectionResult",
    "RelationshipDetector",
    "RelationshipStore",
    "ScoringWeights",
    "SimilarityScorer",
    "Suggestion",
    "suggest_similar",
]
