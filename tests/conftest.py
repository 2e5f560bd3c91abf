from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pytest
from fastapi.testclient import TestClient

from chatarchive.api import create_app
from chatarchive.domain.entry import Entry, Message
from chatarchive.entry_stores.local import LocalEntryStore
from chatarchive.relationship_backends.local import LocalRelationshipBackend
from chatarchive.relationships.detector import RelationshipDetector
from chatarchive.relationships.store import RelationshipStore


@pytest.fixture
def make_entry() -> Callable[..., Entry]:
    """Factory for entries with sensible defaults."""

    def _make_entry(
        entry_id: str,
        title: str = "",
        summary: str = "",
        tags: set[str] | None = None,
        source_label: str = "Other",
        body: str = "",
        created_at: datetime | None = None,
        embedding: list[float] | None = None,
    ) -> Entry:
        return Entry(
            id=entry_id,
            title=title,
            summary=summary,
            tags=tags or set(),
            source_label=source_label,
            created_at=created_at or datetime(2024, 1, 1, tzinfo=timezone.utc),
            messages=[Message(role="user", content=body)] if body else [],
            embedding=embedding,
        )

    return _make_entry


@pytest.fixture
def test_entries(make_entry: Callable[..., Entry]) -> dict[str, Entry]:
    return {
        "asyncio1": make_entry(
            "asyncio1",
            title="Python asyncio event loop",
            summary="Async patterns",
            tags={"python", "async"},
            source_label="Claude",
            body="How does the asyncio event loop schedule coroutines?",
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        ),
        "asyncio2": make_entry(
            "asyncio2",
            title="Python asyncio tasks",
            summary="Running tasks concurrently",
            tags={"python", "async"},
            source_label="Claude",
            body="Create tasks with asyncio gather on the event loop",
            created_at=datetime(2024, 1, 2, tzinfo=timezone.utc),
        ),
        "sourdough": make_entry(
            "sourdough",
            title="Sourdough bread starter",
            summary="Baking tips",
            tags={"cooking"},
            source_label="ChatGPT",
            body="What flour hydration works best for a sourdough starter?",
            created_at=datetime(2024, 1, 3, tzinfo=timezone.utc),
        ),
    }


@pytest.fixture
def entry_store(test_entries: dict[str, Entry]) -> LocalEntryStore:
    return LocalEntryStore.from_data(test_entries)


@pytest.fixture
def relationship_backend() -> LocalRelationshipBackend:
    return LocalRelationshipBackend.from_data()


@pytest.fixture
def relationship_store(
    entry_store: LocalEntryStore, relationship_backend: LocalRelationshipBackend
) -> RelationshipStore:
    return RelationshipStore(entry_store=entry_store, backend=relationship_backend)


@pytest.fixture
def detector(
    entry_store: LocalEntryStore, relationship_store: RelationshipStore
) -> RelationshipDetector:
    return RelationshipDetector(
        entry_store=entry_store, relationship_store=relationship_store, threshold=0.3
    )


@pytest.fixture
def persistent_entry_store(tmp_path: Path, test_entries: dict[str, Entry]) -> LocalEntryStore:
    """Entry store backed by a file in a temporary directory."""
    store = LocalEntryStore(filepath=tmp_path / "entries.json")
    for entry in test_entries.values():
        store.update_entry(entry)
    store.save()
    return store


@pytest.fixture
def test_client(tmp_path: Path, persistent_entry_store: LocalEntryStore) -> TestClient:
    """Create test client on file-backed local stores."""
    relationship_store = RelationshipStore(
        entry_store=persistent_entry_store,
        backend=LocalRelationshipBackend(filepath=tmp_path / "relationships.json"),
    )
    detector = RelationshipDetector(
        entry_store=persistent_entry_store, relationship_store=relationship_store
    )
    app = create_app(
        entry_store=persistent_entry_store,
        relationship_store=relationship_store,
        detector=detector,
    )
    return TestClient(app)
