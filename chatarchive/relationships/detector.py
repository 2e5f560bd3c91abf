"""Detection of relationships between one entry and the rest of the archive."""

import asyncio
from typing import Callable, List, TypeVar

from loguru import logger
from pydantic import BaseModel

from chatarchive.domain.relationships import EdgePair
from chatarchive.entry_stores.base import EntryStore
from chatarchive.errors import (
    BackendUnavailableError,
    DetectionInProgressError,
    DetectionTimeoutError,
)
from chatarchive.relationships.scorer import SimilarityScorer
from chatarchive.relationships.store import RelationshipStore

T = TypeVar("T")


class DetectionResult(BaseModel):
    """What a single detection pass did."""

    entry_id: str
    compared: int = 0
    linked: List[str] = []  # entry ids a pair was written for
    skipped: List[str] = []  # qualifying entries linked by hand or deleted meanwhile
    unlinked: List[str] = []  # stale automatic links that no longer qualify


class RelationshipDetector:
    """Scores one entry against every other entry and stores the qualifying pairs.

    Only one detection per entry may run at a time. The scan yields to the
    event loop every `yield_every` comparisons so the UI stays responsive, and
    gives up after `timeout_seconds`.
    """

    def __init__(
        self,
        *,
        entry_store: EntryStore,
        relationship_store: RelationshipStore,
        scorer: SimilarityScorer | None = None,
        threshold: float = 0.3,
        timeout_seconds: float | None = 30.0,
        yield_every: int = 50,
    ):
        """Initialize the detector.

        Args:
            entry_store: Repository the entries are loaded from
            relationship_store: Store the edge pairs are written to
            scorer: Pairwise scorer, defaults to the lexical SimilarityScorer
            threshold: Pairs must score strictly above this to be linked
            timeout_seconds: Upper bound for one detection, None disables it
            yield_every: Number of comparisons between yields to the event loop
        """
        self.entry_store = entry_store
        self.relationship_store = relationship_store
        self.scorer = scorer or SimilarityScorer()
        self.threshold = threshold
        self.timeout_seconds = timeout_seconds
        self.yield_every = max(yield_every, 1)
        self._in_flight: set[str] = set()

    def is_running(self, entry_id: str) -> bool:
        return entry_id in self._in_flight

    async def detect_and_link(self, entry_id: str) -> DetectionResult:
        """Detect and persist relationships for one entry.

        Running it again with unchanged entries produces the same edge set.

        Raises:
            DetectionInProgressError: A detection for this entry is already running
            DetectionTimeoutError: The scan took longer than the timeout
            BackendUnavailableError: Entries or relationships could not be read or written
        """
        if entry_id in self._in_flight:
            raise DetectionInProgressError(entry_id=entry_id)

        self._in_flight.add(entry_id)
        try:
            return await asyncio.wait_for(self._detect(entry_id), timeout=self.timeout_seconds)
        except asyncio.TimeoutError as e:
            logger.warning(f"Detection for {entry_id} timed out after {self.timeout_seconds}s")
            raise DetectionTimeoutError(
                entry_id=entry_id, timeout_seconds=self.timeout_seconds
            ) from e
        finally:
            self._in_flight.discard(entry_id)

    async def detect_all(self) -> List[DetectionResult]:
        """Run detection for every entry in the archive, one after another."""
        entries = self._load(self.entry_store.get_all)
        results = []
        for entry in entries:
            results.append(await self.detect_and_link(entry.id))
        return results

    async def _detect(self, entry_id: str) -> DetectionResult:
        target = self._load(lambda: self.entry_store.get_by_id(entry_id))
        if target is None:
            logger.debug(f"Entry {entry_id} not found, nothing to detect")
            return DetectionResult(entry_id=entry_id)

        others = self._load(lambda: self.entry_store.get_all_except(entry_id))
        logger.info(f"Detecting relationships for {entry_id} against {len(others)} entries")

        scores: dict[str, float] = {}
        for index, other in enumerate(others, start=1):
            scores[other.id] = self.scorer.score(target, other)
            if index % self.yield_every == 0:
                await asyncio.sleep(0)

        # No awaits past this point: every pair below is written or removed whole
        result = DetectionResult(entry_id=entry_id, compared=len(others))
        existing = self.relationship_store.get_links(entry_id)
        for other_id, score in scores.items():
            link = existing.get(other_id)
            if score > self.threshold:
                pair = EdgePair.between(entry_id, other_id, score=score, kind="ai_detected")
                if self.relationship_store.upsert(pair):
                    result.linked.append(other_id)
                else:
                    result.skipped.append(other_id)
            elif link is not None and link.kind == "ai_detected":
                self.relationship_store.remove(entry_id, other_id)
                result.unlinked.append(other_id)

        logger.info(
            f"Detection for {entry_id} done: {len(result.linked)} linked, "
            f"{len(result.unlinked)} unlinked"
        )
        return result

    @staticmethod
    def _load(operation: Callable[[], T]) -> T:
        try:
            return operation()
        except OSError as e:
            logger.error(f"Entry store failed: {e}")
            raise BackendUnavailableError(str(e)) from e
