"""CLI for importing structured transcripts into the local archive and linking related entries"""

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from chatarchive.config import settings
from chatarchive.entry_stores.local import LocalEntryStore
from chatarchive.ingestion.orchestrator import ImportOrchestrator
from chatarchive.providers import build_embedder, build_scorer, build_summarizer
from chatarchive.relationship_backends.local import LocalRelationshipBackend
from chatarchive.relationships.detector import RelationshipDetector
from chatarchive.relationships.store import RelationshipStore


def main(
    in_file: str,
    local_outfile_entry_store: str,
    local_outfile_relationships: str,
) -> None:
    # Setup paths and services
    entry_store = LocalEntryStore(filepath=Path(local_outfile_entry_store))
    relationship_store = RelationshipStore(
        entry_store=entry_store,
        backend=LocalRelationshipBackend(filepath=Path(local_outfile_relationships)),
        min_visualization_score=settings.relationship_threshold,
    )
    detector = RelationshipDetector(
        entry_store=entry_store,
        relationship_store=relationship_store,
        scorer=build_scorer(settings),
        threshold=settings.relationship_threshold,
        timeout_seconds=None,
    )

    orchestrator = ImportOrchestrator(
        entry_store=entry_store,
        detector=detector,
        embedder=build_embedder(settings),
        summarizer=build_summarizer(settings),
    )
    transcripts = orchestrator.load_file(Path(in_file))
    asyncio.run(orchestrator.ingest(transcripts))


if __name__ == "__main__":
    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

    parser = argparse.ArgumentParser()
    parser.add_argument(
        "--in-file", type=str, required=True, help="JSON file with a list of transcripts"
    )
    parser.add_argument(
        "--outfile-entry-store",
        type=str,
        required=False,
        help="Local output entry store file",
        default=settings.local_entry_store_path,
    )
    parser.add_argument(
        "--outfile-relationships",
        type=str,
        required=False,
        help="Local output relationship file",
        default=settings.local_relationship_store_path,
    )

    args = parser.parse_args()

    main(
        in_file=args.in_file,
        local_outfile_entry_store=args.outfile_entry_store,
        local_outfile_relationships=args.outfile_relationships,
    )
