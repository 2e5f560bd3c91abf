"""CLI for laying out the relationship graph and writing the settled frame as SVG"""

import argparse
import asyncio
import sys
from pathlib import Path

from loguru import logger

from chatarchive.config import settings
from chatarchive.entry_stores.local import LocalEntryStore
from chatarchive.relationship_backends.local import LocalRelationshipBackend
from chatarchive.relationships.store import RelationshipStore
from chatarchive.visualization.layout import LayoutParams
from chatarchive.visualization.view import GraphView


async def render(relationship_store: RelationshipStore, focused_entry_id: str | None) -> str:
    view = GraphView(
        relationship_store=relationship_store,
        on_close=lambda: logger.debug("View closed"),
        on_select_entry=lambda entry_id: logger.info(f"Selected {entry_id}"),
        focused_entry_id=focused_entry_id,
        width=settings.canvas_width,
        height=settings.canvas_height,
        params=LayoutParams(max_iterations=settings.layout_max_iterations),
        step_interval=0,
    )
    await view.open()
    try:
        await view.wait_settled()
        return view.frame.to_svg()
    finally:
        view.close()


def main(entry_store_path: str, relationships_path: str, outfile: str, focus: str | None) -> None:
    entry_store = LocalEntryStore(filepath=entry_store_path)
    relationship_store = RelationshipStore(
        entry_store=entry_store,
        backend=LocalRelationshipBackend(filepath=relationships_path),
        min_visualization_score=settings.relationship_threshold,
    )
    svg = asyncio.run(render(relationship_store, focus))
    Path(outfile).write_text(svg, encoding="utf-8")
    logger.info(f"Wrote graph to {outfile}")


if __name__ == "__main__":
    logger.configure(handlers=[{"sink": sys.stderr, "level": settings.log_level}])

    parser = argparse.ArgumentParser()
    parser.add_argument("--outfile", type=str, required=True, help="SVG file to write")
    parser.add_argument("--focus", type=str, required=False, help="Entry id to highlight")
    parser.add_argument(
        "--entry-store",
        type=str,
        required=False,
        help="Local entry store file",
        default=settings.local_entry_store_path,
    )
    parser.add_argument(
        "--relationships",
        type=str,
        required=False,
        help="Local relationship file",
        default=settings.local_relationship_store_path,
    )

    args = parser.parse_args()

    main(
        entry_store_path=args.entry_store,
        relationships_path=args.relationships,
        outfile=args.outfile,
        focus=args.focus,
    )
