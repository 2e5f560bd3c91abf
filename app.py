import sys

from loguru import logger

from chatarchive.api import create_app
from chatarchive.config import settings
from chatarchive.entry_stores.local import LocalEntryStore
from chatarchive.providers import build_scorer
from chatarchive.relationship_backends.local import LocalRelationshipBackend
from chatarchive.relationships.detector import RelationshipDetector
from chatarchive.relationships.store import RelationshipStore

logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

logger.info("Initializing chat archive relationship service")

entry_store = LocalEntryStore(settings.local_entry_store_path)
relationship_store = RelationshipStore(
    entry_store=entry_store,
    backend=LocalRelationshipBackend(settings.local_relationship_store_path),
    min_visualization_score=settings.relationship_threshold,
)
detector = RelationshipDetector(
    entry_store=entry_store,
    relationship_store=relationship_store,
    scorer=build_scorer(settings),
    threshold=settings.relationship_threshold,
    timeout_seconds=settings.detection_timeout_seconds,
)
app = create_app(
    entry_store=entry_store,
    relationship_store=relationship_store,
    detector=detector,
)
