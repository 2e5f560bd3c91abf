from datetime import datetime
from typing import List

from pydantic import BaseModel

from chatarchive.domain.entry import Entry
from chatarchive.domain.relationships import RelatedEntry, RelationshipKind
from chatarchive.relationships.suggestions import Suggestion


class EntryView(BaseModel):
    """Entry fields shown in panels, without messages or embedding"""

    id: str
    title: str
    summary: str
    tags: List[str]
    source_label: str
    created_at: datetime

    @classmethod
    def from_entry(cls, entry: Entry) -> "EntryView":
        return cls(
            id=entry.id,
            title=entry.title,
            summary=entry.summary,
            tags=sorted(entry.tags),
            source_label=entry.source_label,
            created_at=entry.created_at,
        )


class RelatedEntryView(BaseModel):
    entry: EntryView
    score: float
    kind: RelationshipKind

    @classmethod
    def from_related(cls, related: RelatedEntry) -> "RelatedEntryView":
        return cls(
            entry=EntryView.from_entry(related.entry), score=related.score, kind=related.kind
        )


class SuggestionView(BaseModel):
    entry: EntryView
    points: float
    semantic_match: int | None = None

    @classmethod
    def from_suggestion(cls, suggestion: Suggestion) -> "SuggestionView":
        return cls(
            entry=EntryView.from_entry(suggestion.entry),
            points=suggestion.points,
            semantic_match=suggestion.semantic_match,
        )


class ManualLinkRequest(BaseModel):
    source_id: str
    target_id: str
