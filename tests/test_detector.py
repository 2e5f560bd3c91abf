"""Tests for relationship detection."""

import asyncio
from typing import Callable

import pytest

from chatarchive.domain.entry import Entry
from chatarchive.entry_stores.local import LocalEntryStore
from chatarchive.errors import (
    BackendUnavailableError,
    DetectionInProgressError,
    DetectionTimeoutError,
)
from chatarchive.relationship_backends.local import LocalRelationshipBackend
from chatarchive.relationships.detector import RelationshipDetector
from chatarchive.relationships.store import RelationshipStore
from tests.fakes import FailingRelationshipBackend


def edge_keys(backend: LocalRelationshipBackend) -> set[tuple[str, str]]:
    return {edge.key for edge in backend.get_all_edges()}


def test_detect_links_related_entries_in_both_directions(
    detector: RelationshipDetector, relationship_backend: LocalRelationshipBackend
) -> None:
    result = asyncio.run(detector.detect_and_link("asyncio1"))

    assert result.compared == 2
    assert result.linked == ["asyncio2"]
    assert edge_keys(relationship_backend) == {("asyncio1", "asyncio2"), ("asyncio2", "asyncio1")}
    assert all(edge.score > 0.3 for edge in relationship_backend.get_all_edges())


def test_detect_is_idempotent(
    detector: RelationshipDetector, relationship_backend: LocalRelationshipBackend
) -> None:
    asyncio.run(detector.detect_and_link("asyncio1"))
    first_run = {edge.key: edge.score for edge in relationship_backend.get_all_edges()}

    asyncio.run(detector.detect_and_link("asyncio1"))
    asyncio.run(detector.detect_and_link("asyncio2"))
    second_run = {edge.key: edge.score for edge in relationship_backend.get_all_edges()}

    assert first_run == second_run


def test_detect_for_missing_entry_returns_empty_result(
    detector: RelationshipDetector, relationship_backend: LocalRelationshipBackend
) -> None:
    result = asyncio.run(detector.detect_and_link("ghost"))

    assert result.entry_id == "ghost"
    assert result.compared == 0
    assert relationship_backend.get_all_edges() == []


def test_score_at_threshold_is_not_linked(
    make_entry: Callable[..., Entry], relationship_backend: LocalRelationshipBackend
) -> None:
    entry_store = LocalEntryStore.from_data(
        [make_entry("a", source_label="Claude"), make_entry("b", source_label="Claude")]
    )
    relationship_store = RelationshipStore(entry_store=entry_store, backend=relationship_backend)
    detector = RelationshipDetector(
        entry_store=entry_store, relationship_store=relationship_store, threshold=0.2
    )

    result = asyncio.run(detector.detect_and_link("a"))

    assert result.linked == []
    assert relationship_backend.get_all_edges() == []


def test_detect_keeps_manual_links(
    detector: RelationshipDetector,
    relationship_store: RelationshipStore,
    relationship_backend: LocalRelationshipBackend,
) -> None:
    relationship_store.create_manual("asyncio1", "asyncio2")

    result = asyncio.run(detector.detect_and_link("asyncio1"))

    assert result.skipped == ["asyncio2"]
    assert relationship_backend.get_edge("asyncio2", "asyncio1").kind == "manual"
    assert relationship_backend.get_edge("asyncio2", "asyncio1").score == 1.0


def test_detect_removes_links_that_no_longer_qualify(
    detector: RelationshipDetector,
    entry_store: LocalEntryStore,
    relationship_backend: LocalRelationshipBackend,
) -> None:
    asyncio.run(detector.detect_and_link("asyncio1"))
    changed = entry_store.get_by_id("asyncio2").model_copy(
        update={
            "title": "Tomato seedlings",
            "summary": "",
            "tags": {"gardening"},
            "source_label": "Gemini",
            "messages": [],
        }
    )
    entry_store.update_entry(changed)

    result = asyncio.run(detector.detect_and_link("asyncio1"))

    assert result.unlinked == ["asyncio2"]
    assert relationship_backend.get_all_edges() == []


def test_concurrent_detection_for_same_entry_is_rejected(
    entry_store: LocalEntryStore, relationship_store: RelationshipStore
) -> None:
    detector = RelationshipDetector(
        entry_store=entry_store, relationship_store=relationship_store, yield_every=1
    )

    async def run_twice() -> None:
        first = asyncio.create_task(detector.detect_and_link("asyncio1"))
        await asyncio.sleep(0)
        assert detector.is_running("asyncio1")
        with pytest.raises(DetectionInProgressError):
            await detector.detect_and_link("asyncio1")
        await first

    asyncio.run(run_twice())

    assert not detector.is_running("asyncio1")


def test_detection_timeout_raises_and_releases_entry(
    entry_store: LocalEntryStore,
    relationship_store: RelationshipStore,
    relationship_backend: LocalRelationshipBackend,
) -> None:
    detector = RelationshipDetector(
        entry_store=entry_store,
        relationship_store=relationship_store,
        timeout_seconds=0,
        yield_every=1,
    )

    with pytest.raises(DetectionTimeoutError) as exc_info:
        asyncio.run(detector.detect_and_link("asyncio1"))

    assert exc_info.value.retryable
    assert not detector.is_running("asyncio1")
    assert relationship_backend.get_all_edges() == []


def test_backend_failure_raises_backend_unavailable(entry_store: LocalEntryStore) -> None:
    relationship_store = RelationshipStore(
        entry_store=entry_store, backend=FailingRelationshipBackend()
    )
    detector = RelationshipDetector(entry_store=entry_store, relationship_store=relationship_store)

    with pytest.raises(BackendUnavailableError):
        asyncio.run(detector.detect_and_link("asyncio1"))

    assert not detector.is_running("asyncio1")


def test_detect_all_links_every_entry(
    detector: RelationshipDetector, relationship_backend: LocalRelationshipBackend
) -> None:
    results = asyncio.run(detector.detect_all())

    assert [result.entry_id for result in results] == ["asyncio1", "asyncio2", "sourdough"]
    assert edge_keys(relationship_backend) == {("asyncio1", "asyncio2"), ("asyncio2", "asyncio1")}
