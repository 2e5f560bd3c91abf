"""Ephemeral "more like this" ranking for the entry detail view.

Uses a point scale dominated by embedding proximity. Nothing here is
persisted; stored relationships always come from SimilarityScorer.
"""

import re
from typing import List

from pydantic import BaseModel

from chatarchive.domain.entry import Entry
from chatarchive.relationships.scorer import compare_embeddings

SEMANTIC_POINTS = 50.0
TAG_POINTS = 10.0
TITLE_TOKEN_POINTS = 5.0
SUMMARY_TOKEN_POINTS = 2.0
MIN_POINTS = 1.0


class Suggestion(BaseModel):
    entry: Entry
    points: float
    semantic_match: int | None = None  # cosine similarity as a percentage

    model_config = {"arbitrary_types_allowed": True}


def tokens(text: str) -> list[str]:
    return [word for word in re.split(r"\W+", text.lower()) if len(word) > 3]


def proximity_points(entry: Entry, other: Entry) -> tuple[float, int | None]:
    """Points for one candidate and the semantic match percentage, if any."""
    points = 0.0
    semantic_match = None

    similarity = compare_embeddings(entry, other)
    if similarity is not None:
        points += similarity * SEMANTIC_POINTS
        if similarity > 0:
            semantic_match = round(similarity * 100)

    entry_tags = {tag.lower() for tag in entry.tags}
    points += sum(TAG_POINTS for tag in other.tags if tag.lower() in entry_tags)

    title_tokens = set(tokens(entry.title))
    points += sum(TITLE_TOKEN_POINTS for token in tokens(other.title) if token in title_tokens)

    summary_tokens = set(tokens(entry.summary))
    points += sum(
        SUMMARY_TOKEN_POINTS for token in tokens(other.summary) if token in summary_tokens
    )

    return points, semantic_match


def suggest_similar(entry: Entry, candidates: List[Entry], limit: int = 6) -> List[Suggestion]:
    """Rank candidates by proximity to an entry.

    Args:
        entry: The entry being viewed
        candidates: Entries to rank; the entry itself is ignored if present
        limit: Maximum number of suggestions

    Returns:
        Suggestions scoring above MIN_POINTS, best first
    """
    suggestions = []
    for other in candidates:
        if other.id == entry.id:
            continue
        points, semantic_match = proximity_points(entry, other)
        if points > MIN_POINTS:
            suggestions.append(
                Suggestion(entry=other, points=points, semantic_match=semantic_match)
            )

    suggestions.sort(key=lambda suggestion: suggestion.points, reverse=True)
    return suggestions[:limit]
