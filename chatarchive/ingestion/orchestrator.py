"""Orchestration of importing structured transcripts into the archive."""

import json
from datetime import datetime
from hashlib import md5
from pathlib import Path

import numpy as np
from loguru import logger
from pydantic import BaseModel, TypeAdapter

from chatarchive.domain.entry import Entry, Message, utcnow
from chatarchive.embedders.base import Embedder
from chatarchive.entry_stores.base import EntryStore
from chatarchive.llms.base import Summarizer
from chatarchive.relationships.detector import RelationshipDetector

UNTITLED = "Untitled conversation"
FALLBACK_TITLE_CHARS = 60


class ImportedTranscript(BaseModel):
    """A conversation already parsed out of an export file."""

    id: str | None = None
    title: str = ""
    summary: str = ""
    tags: list[str] = []
    source_label: str = "Other"
    created_at: datetime | None = None
    messages: list[Message] = []


class ImportOrchestrator:
    """Turns transcripts into archive entries, enriches them and links them to the archive."""

    def __init__(
        self,
        *,
        entry_store: EntryStore,
        detector: RelationshipDetector,
        embedder: Embedder | None = None,
        summarizer: Summarizer | None = None,
    ):
        """Initialize the orchestrator with required services.

        Args:
            entry_store: Store the entries are written to
            detector: Relationship detector run for every imported entry
            embedder: Optional embedder; without it entries are scored lexically only
            summarizer: Optional summarizer used to fill in missing titles and tags
        """
        self.entry_store = entry_store
        self.detector = detector
        self.embedder = embedder
        self.summarizer = summarizer

    def load_file(self, path: Path) -> list[ImportedTranscript]:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return TypeAdapter(list[ImportedTranscript]).validate_python(data)

    async def ingest(self, transcripts: list[ImportedTranscript]) -> list[Entry]:
        """Store transcripts as entries and detect relationships for each of them.

        Args:
            transcripts: Parsed conversations to import

        Returns:
            The stored entries
        """
        entries = [self._build_entry(transcript) for transcript in transcripts]
        for entry in entries:
            self.entry_store.update_entry(entry)
        logger.info(f"Stored {len(entries)} entries, detecting relationships...")

        linked = 0
        for entry in entries:
            result = await self.detector.detect_and_link(entry.id)
            linked += len(result.linked)

        self.entry_store.save()
        logger.info(f"Import complete: {len(entries)} entries, {linked} relationship pairs")
        return entries

    def _build_entry(self, transcript: ImportedTranscript) -> Entry:
        text = conversation_text(transcript.messages)
        title = transcript.title.strip()
        tags = list(transcript.tags)

        if self.summarizer is not None and (not title or not tags):
            try:
                generated = self.summarizer.summarize(text)
                title = title or generated.title
                tags = tags or generated.tags
            except Exception as e:
                logger.warning(f"Summarizer failed, keeping imported title and tags: {e}")

        entry = Entry(
            id=transcript.id or generate_entry_id(transcript),
            title=title or fallback_title(transcript.messages),
            summary=transcript.summary,
            tags=set(tags),
            source_label=transcript.source_label,
            created_at=transcript.created_at or utcnow(),
            messages=transcript.messages,
        )
        entry.embedding = self._embed(entry)
        return entry

    def _embed(self, entry: Entry) -> np.ndarray | None:
        if self.embedder is None:
            return None
        try:
            return self.embedder.embed(f"{entry.title}\n{entry.summary}\n{entry.body_text}")
        except Exception as e:
            logger.warning(f"Embedding failed for {entry.id}, storing without embedding: {e}")
            return None


def conversation_text(messages: list[Message]) -> str:
    return "\n\n".join(
        f"{'User' if message.role == 'user' else 'Assistant'}: {message.content}"
        for message in messages
    )


def fallback_title(messages: list[Message]) -> str:
    for message in messages:
        if message.role == "user" and message.content.strip():
            first_line = message.content.strip().splitlines()[0]
            return first_line[:FALLBACK_TITLE_CHARS]
    return UNTITLED


def generate_entry_id(transcript: ImportedTranscript) -> str:
    """Stable ID from the source, title and first message of a transcript."""
    first_message = transcript.messages[0].content if transcript.messages else ""
    material = f"{transcript.source_label}|{transcript.title}|{first_message}"
    return md5(material.encode()).hexdigest()
