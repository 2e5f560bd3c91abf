"""Interactive graph view driving layout and rendering on the asyncio event loop."""

import asyncio
from typing import Callable

from loguru import logger

from chatarchive.domain.graph import GraphDataset
from chatarchive.relationships.store import RelationshipStore
from chatarchive.visualization.layout import LayoutParams, LayoutSimulator
from chatarchive.visualization.projector import GraphProjector
from chatarchive.visualization.renderer import GraphRenderer, SvgSurface, Viewport


class GraphView:
    """One visualization session of the relationship graph.

    Each simulation step runs as its own callback on the running event loop,
    interleaved with pointer handling. Frames are rendered at most every
    `render_interval` seconds while simulating. Scheduling stops once the layout
    settles and any pending step is cancelled on close.
    """

    def __init__(
        self,
        *,
        relationship_store: RelationshipStore,
        on_close: Callable[[], None],
        on_select_entry: Callable[[str], None],
        focused_entry_id: str | None = None,
        width: float = 1200,
        height: float = 800,
        params: LayoutParams | None = None,
        step_interval: float = 1 / 60,
        render_interval: float = 1 / 30,
        surface_factory: Callable[[], SvgSurface] = SvgSurface,
    ):
        self.relationship_store = relationship_store
        self.on_close = on_close
        self.on_select_entry = on_select_entry
        self.focused_entry_id = focused_entry_id
        self.width = width
        self.height = height
        self.params = params or LayoutParams()
        self.step_interval = step_interval
        self.render_interval = render_interval
        self.surface_factory = surface_factory

        self.projector = GraphProjector()
        self.renderer = GraphRenderer(width=width, height=height)
        self.viewport = Viewport()
        self.dataset = GraphDataset()
        self.simulator = LayoutSimulator(self.dataset, width=width, height=height, params=params)
        self.frame: SvgSurface | None = None
        self.frames_rendered = 0

        self._loop: asyncio.AbstractEventLoop | None = None
        self._handle: asyncio.TimerHandle | None = None
        self._settled = asyncio.Event()
        self._last_render = 0.0
        self._opened = False
        self._closed = False

    @property
    def is_scheduled(self) -> bool:
        return self._handle is not None

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def open(self) -> None:
        """Load the graph snapshot and start the layout."""
        if self._opened or self._closed:
            return
        self._opened = True
        self._loop = asyncio.get_running_loop()

        snapshot = self.relationship_store.query_all_for_visualization()
        self.dataset = self.projector.project(snapshot)
        self.simulator = LayoutSimulator(
            self.dataset, width=self.width, height=self.height, params=self.params
        )
        self.simulator.initialize()
        logger.info(
            f"Graph view opened with {len(self.dataset.nodes)} nodes "
            f"and {len(self.dataset.edges)} edges"
        )

        self._render()
        if self.simulator.is_settled:
            self._settled.set()
        elif not self._closed:
            self._schedule()

    async def wait_settled(self) -> None:
        await self._settled.wait()

    def close(self) -> None:
        """Tear down the view. No callbacks remain scheduled afterwards."""
        if self._closed:
            return
        self._closed = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._settled.set()
        logger.debug("Graph view closed")
        self.on_close()

    def pointer_down(self, x: float, y: float) -> None:
        entry_id = self.viewport.pointer_down(
            self.simulator.nodes, x, y, self.focused_entry_id
        )
        if entry_id is not None:
            self.focused_entry_id = entry_id
            self._render()
            self.on_select_entry(entry_id)

    def pointer_move(self, x: float, y: float) -> None:
        if self.viewport.pointer_move(x, y):
            self._render()

    def pointer_up(self) -> None:
        self.viewport.pointer_up()

    def zoom_in(self) -> None:
        self.viewport.zoom_in()
        self._render()

    def zoom_out(self) -> None:
        self.viewport.zoom_out()
        self._render()

    def reset_view(self) -> None:
        self.viewport.reset()
        self._render()

    def _schedule(self) -> None:
        if self._closed:
            return
        self._handle = self._loop.call_later(self.step_interval, self._on_step)

    def _on_step(self) -> None:
        self._handle = None
        if self._closed:
            return

        self.simulator.advance()
        if self.simulator.is_settled:
            self._render()
            self._settled.set()
            logger.debug(f"Graph layout settled after {self.simulator.iteration} steps")
            return

        if self._loop.time() - self._last_render >= self.render_interval:
            self._render()
        self._schedule()

    def _render(self) -> None:
        if self._closed:
            return
        surface = self.surface_factory()
        self.renderer.draw(
            surface,
            self.simulator.nodes,
            self.dataset.edges,
            self.viewport,
            selected_id=self.focused_entry_id,
        )
        self.frame = surface
        self.frames_rendered += 1
        if self._loop is not None:
            self._last_render = self._loop.time()
