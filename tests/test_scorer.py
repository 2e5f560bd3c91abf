"""Tests for pairwise similarity scoring."""

from typing import Callable

import numpy as np
import pytest

from chatarchive.domain.entry import Entry
from chatarchive.errors import MalformedVectorError
from chatarchive.relationships.scorer import (
    ScoringWeights,
    SimilarityScorer,
    embedding_similarity,
    extract_keywords,
    extract_text,
    jaccard,
    tag_overlap,
    validate_vector_pair,
)


@pytest.fixture
def scorer() -> SimilarityScorer:
    return SimilarityScorer()


def test_extract_keywords_drops_short_words_stop_words_and_punctuation() -> None:
    keywords = extract_keywords("The React, dashboard; with hooks! and a map")

    assert keywords == {"react", "dashboard", "hooks"}


def test_extract_text_only_uses_start_of_body(make_entry: Callable[..., Entry]) -> None:
    entry = make_entry("long", title="Title", body="x" * 1000 + " tailword")

    assert "tailword" not in extract_text(entry)
    assert extract_text(entry).startswith("title ")


def test_jaccard_and_tag_overlap_are_zero_for_empty_sets() -> None:
    assert jaccard(set(), {"react"}) == 0.0
    assert tag_overlap({"react"}, set()) == 0.0
    assert tag_overlap({"react", "frontend"}, {"react", "backend"}) == 0.5
    assert jaccard({"a", "b"}, {"b", "c"}) == pytest.approx(1 / 3)


def test_shared_tags_and_keywords_create_relationship(
    scorer: SimilarityScorer, make_entry: Callable[..., Entry]
) -> None:
    """Different sources, one shared tag and overlapping summaries score above the threshold."""
    first = make_entry(
        "a", tags={"react", "frontend"}, source_label="ChatGPT", summary="building dashboards"
    )
    second = make_entry(
        "b",
        tags={"react", "backend"},
        source_label="Claude",
        summary="building dashboards with react",
    )

    score = scorer.score(first, second)

    # tag overlap 1/2 * 0.3 + keyword jaccard 2/3 * 0.5
    assert score == pytest.approx(0.15 + 0.5 * 2 / 3)
    assert score > 0.3


def test_unrelated_entries_stay_below_threshold(
    scorer: SimilarityScorer, make_entry: Callable[..., Entry]
) -> None:
    first = make_entry("a", title="Kubernetes ingress", tags={"devops"}, source_label="ChatGPT")
    second = make_entry("b", title="Sourdough hydration", tags={"baking"}, source_label="Claude")

    score = scorer.score(first, second)

    assert score <= 0.2
    assert score == 0.0


def test_empty_entries_only_score_source_match(
    scorer: SimilarityScorer, make_entry: Callable[..., Entry]
) -> None:
    first = make_entry("a", source_label="Claude")
    second = make_entry("b", source_label="Claude")

    assert scorer.score(first, second) == pytest.approx(0.2)


def test_score_is_symmetric_and_in_range(
    scorer: SimilarityScorer, test_entries: dict[str, Entry]
) -> None:
    entries = list(test_entries.values())
    for first in entries:
        for second in entries:
            score = scorer.score(first, second)
            assert 0.0 <= score <= 1.0
            assert score == scorer.score(second, first)


def test_identical_entries_saturate_at_one(make_entry: Callable[..., Entry]) -> None:
    scorer = SimilarityScorer(ScoringWeights(source=0.5, tags=0.5, text=0.5))
    entry = make_entry("a", title="Vector search", tags={"search"}, source_label="Claude")

    assert scorer.score(entry, entry.model_copy(update={"id": "b"})) == 1.0


def test_embedding_signal_is_ignored_by_default(make_entry: Callable[..., Entry]) -> None:
    first = make_entry("a", embedding=[1.0, 0.0, 0.0])
    second = make_entry("b", embedding=[1.0, 0.0, 0.0])

    assert SimilarityScorer().score(first, second) == pytest.approx(0.2)


def test_embedding_signal_adds_when_weighted(make_entry: Callable[..., Entry]) -> None:
    scorer = SimilarityScorer(ScoringWeights(embedding=0.4))
    first = make_entry("a", source_label="Claude", embedding=[1.0, 0.0])
    second = make_entry("b", source_label="ChatGPT", embedding=[0.0, 1.0])

    # orthogonal vectors scale to 0.5
    assert scorer.score(first, second) == pytest.approx(0.2)


def test_missing_embeddings_degrade_to_lexical_score(
    test_entries: dict[str, Entry],
) -> None:
    lexical = SimilarityScorer()
    with_embeddings = SimilarityScorer(ScoringWeights(embedding=0.3))

    first, second = test_entries["asyncio1"], test_entries["asyncio2"]

    assert with_embeddings.score(first, second) == lexical.score(first, second)


@pytest.mark.parametrize(
    "first,second",
    [
        ([1.0, 0.0], [1.0, 0.0, 0.0]),
        ([0.0, 0.0], [1.0, 0.0]),
        ([float("nan"), 1.0], [1.0, 0.0]),
    ],
)
def test_malformed_embeddings_skip_the_signal(
    make_entry: Callable[..., Entry], first: list[float], second: list[float]
) -> None:
    scorer = SimilarityScorer(ScoringWeights(embedding=0.5))
    entry_a = make_entry("a", source_label="Claude", embedding=first)
    entry_b = make_entry("b", source_label="Claude", embedding=second)

    assert embedding_similarity(entry_a, entry_b) is None
    assert scorer.score(entry_a, entry_b) == pytest.approx(0.2)


def test_validate_vector_pair_raises_on_dimension_mismatch() -> None:
    with pytest.raises(MalformedVectorError) as exc_info:
        validate_vector_pair(np.ones(3), np.ones(4))

    assert exc_info.value.details == {"first": 3, "second": 4}
