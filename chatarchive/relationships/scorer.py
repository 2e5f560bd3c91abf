"""Pairwise similarity scoring between archive entries."""

import re

import numpy as np
from loguru import logger
from pydantic import BaseModel

from chatarchive.domain.entry import Entry
from chatarchive.errors import MalformedVectorError

BODY_TEXT_CHARS = 1000
MIN_KEYWORD_LENGTH = 4

STOP_WORDS = frozenset(
    {
        "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
        "of", "with", "by", "from", "as", "is", "was", "are", "been", "be",
        "have", "has", "had", "do", "does", "did", "will", "would", "could",
        "should", "may", "might", "can", "this", "that", "these", "those",
        "i", "you", "he", "she", "it", "we", "they", "what", "which", "who",
        "when", "where", "why", "how", "all", "each", "every", "both", "few",
        "more", "most", "other", "some", "such", "no", "nor", "not", "only",
        "own", "same", "so", "than", "too", "very", "just", "about", "me",
        "my", "your", "their", "our",
    }
)  # fmt: skip


class ScoringWeights(BaseModel):
    """Tunable weights for the similarity signals.

    The defaults were observed to give useful links, they are not derived.
    """

    source: float = 0.2
    tags: float = 0.3
    text: float = 0.5
    embedding: float = 0.0


def extract_text(entry: Entry) -> str:
    """Text used for keyword comparison: title, summary and the start of the body."""
    body = entry.body_text.lower()[:BODY_TEXT_CHARS]
    return f"{entry.title.lower()} {entry.summary.lower()} {body}"


def extract_keywords(text: str) -> set[str]:
    """Lower-cased words longer than three characters that are not stop words."""
    words = re.sub(r"[^\w\s]", " ", text.lower()).split()
    return {word for word in words if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS}


def jaccard(first: set[str], second: set[str]) -> float:
    if not first or not second:
        return 0.0
    return len(first & second) / len(first | second)


def tag_overlap(first: set[str], second: set[str]) -> float:
    """Shared tags relative to the larger tag set."""
    if not first or not second:
        return 0.0
    return len(first & second) / max(len(first), len(second))


def validate_vector_pair(first: np.ndarray | None, second: np.ndarray | None) -> None:
    """Raise MalformedVectorError unless both vectors can be compared.

    Args:
        first: Embedding of the first entry
        second: Embedding of the second entry
    """
    if first is None or second is None:
        raise MalformedVectorError("Embedding missing")
    if first.ndim != 1 or second.ndim != 1:
        raise MalformedVectorError("Embedding must be one-dimensional")
    if first.shape != second.shape:
        raise MalformedVectorError(
            "Embedding dimensions differ", first=first.shape[0], second=second.shape[0]
        )
    if not (np.all(np.isfinite(first)) and np.all(np.isfinite(second))):
        raise MalformedVectorError("Embedding contains non-finite values")
    if np.linalg.norm(first) == 0 or np.linalg.norm(second) == 0:
        raise MalformedVectorError("Embedding has zero length")


def cosine_similarity(first: np.ndarray, second: np.ndarray) -> float:
    """Cosine similarity of two validated vectors, in [-1, 1]."""
    first = first.astype(np.float64)
    second = second.astype(np.float64)
    similarity = np.dot(first, second) / (np.linalg.norm(first) * np.linalg.norm(second))
    return float(np.clip(similarity, -1.0, 1.0))


def compare_embeddings(first: Entry, second: Entry) -> float | None:
    """Cosine similarity of two entries' embeddings, or None when they can't be compared."""
    if not (first.has_embedding and second.has_embedding):
        return None
    try:
        validate_vector_pair(first.embedding, second.embedding)
    except MalformedVectorError as e:
        logger.debug(f"Skipping embedding signal for {first.id}/{second.id}: {e.message}")
        return None
    return cosine_similarity(first.embedding, second.embedding)


def embedding_similarity(first: Entry, second: Entry) -> float | None:
    """Cosine similarity scaled into [0, 1], or None when the embeddings can't be compared."""
    similarity = compare_embeddings(first, second)
    if similarity is None:
        return None
    return (similarity + 1.0) / 2.0


class SimilarityScorer:
    """Scores how related two entries are, as a weighted sum of independent signals.

    Each signal is normalized to [0, 1] before weighting and the total is
    clamped at 1.0. The score is symmetric in its arguments.
    """

    def __init__(self, weights: ScoringWeights | None = None):
        self.weights = weights or ScoringWeights()

    def score(self, first: Entry, second: Entry) -> float:
        score = 0.0

        if first.source_label == second.source_label:
            score += self.weights.source

        score += tag_overlap(first.tags, second.tags) * self.weights.tags

        text_similarity = jaccard(
            extract_keywords(extract_text(first)), extract_keywords(extract_text(second))
        )
        score += text_similarity * self.weights.text

        if self.weights.embedding > 0:
            similarity = embedding_similarity(first, second)
            if similarity is not None:
                score += similarity * self.weights.embedding

        return min(max(score, 0.0), 1.0)
