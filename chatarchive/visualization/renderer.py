"""Frame rendering and pointer handling for the graph canvas."""

import math
from html import escape
from typing import List, Protocol

from pydantic import BaseModel

from chatarchive.domain.graph import GraphEdge, GraphNode

NODE_RADIUS = 20.0
SELECTED_NODE_RADIUS = 30.0
PICK_RADIUS = 20.0
LABEL_MAX_CHARS = 15
LABEL_OFFSET = 15.0
EDGE_COLOR = "#84cc16"
SELECTION_OUTLINE = "#fef3c7"
BACKGROUND = "#1c1917"
ZOOM_STEP = 1.2
MIN_ZOOM = 0.3
MAX_ZOOM = 3.0


def truncate_label(title: str) -> str:
    if len(title) > LABEL_MAX_CHARS:
        return title[:LABEL_MAX_CHARS] + "..."
    return title


class Surface(Protocol):
    """Drawing target for one frame."""

    def clear(self, width: float, height: float) -> None: ...

    def set_transform(self, offset_x: float, offset_y: float, zoom: float) -> None: ...

    def line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        color: str,
        opacity: float,
        width: float,
    ) -> None: ...

    def circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        *,
        fill: str,
        outline: str | None = None,
        outline_width: float = 0.0,
    ) -> None: ...

    def text(self, x: float, y: float, content: str) -> None: ...


class SvgSurface:
    """Surface that records a frame as an SVG document."""

    def __init__(self) -> None:
        self.width = 0.0
        self.height = 0.0
        self._transform = ""
        self._elements: List[str] = []

    def clear(self, width: float, height: float) -> None:
        self.width = width
        self.height = height
        self._elements = []

    def set_transform(self, offset_x: float, offset_y: float, zoom: float) -> None:
        self._transform = f"translate({offset_x:.2f} {offset_y:.2f}) scale({zoom:.4f})"

    def line(
        self,
        x1: float,
        y1: float,
        x2: float,
        y2: float,
        *,
        color: str,
        opacity: float,
        width: float,
    ) -> None:
        self._elements.append(
            f'<line x1="{x1:.2f}" y1="{y1:.2f}" x2="{x2:.2f}" y2="{y2:.2f}" '
            f'stroke="{color}" stroke-opacity="{opacity:.3f}" stroke-width="{width:.2f}"/>'
        )

    def circle(
        self,
        cx: float,
        cy: float,
        radius: float,
        *,
        fill: str,
        outline: str | None = None,
        outline_width: float = 0.0,
    ) -> None:
        stroke = f' stroke="{outline}" stroke-width="{outline_width:.2f}"' if outline else ""
        self._elements.append(
            f'<circle cx="{cx:.2f}" cy="{cy:.2f}" r="{radius:.2f}" fill="{fill}"{stroke}/>'
        )

    def text(self, x: float, y: float, content: str) -> None:
        self._elements.append(
            f'<text x="{x:.2f}" y="{y:.2f}" text-anchor="middle" dominant-baseline="middle" '
            f'font-family="sans-serif" font-size="12" font-weight="bold" fill="white" '
            f'stroke="rgba(0,0,0,0.2)" stroke-width="1">{escape(content)}</text>'
        )

    def to_svg(self) -> str:
        return (
            f'<svg xmlns="http://www.w3.org/2000/svg" width="{self.width:.0f}" '
            f'height="{self.height:.0f}" viewBox="0 0 {self.width:.0f} {self.height:.0f}">'
            f'<rect width="100%" height="100%" fill="{BACKGROUND}"/>'
            f'<g transform="{self._transform}">{"".join(self._elements)}</g></svg>'
        )


class Viewport(BaseModel):
    """Pan/zoom state and pointer handling for the canvas."""

    zoom: float = 1.0
    offset_x: float = 0.0
    offset_y: float = 0.0
    dragging: bool = False
    drag_start_x: float = 0.0
    drag_start_y: float = 0.0

    def screen_to_world(self, x: float, y: float) -> tuple[float, float]:
        return ((x - self.offset_x) / self.zoom, (y - self.offset_y) / self.zoom)

    def pick(
        self, nodes: List[GraphNode], x: float, y: float, selected_id: str | None = None
    ) -> GraphNode | None:
        """The topmost node under a screen position, if any.

        Nodes are drawn in list order, so later nodes sit on top. The selected node is hit
        within its larger drawn radius.
        """
        world_x, world_y = self.screen_to_world(x, y)
        for node in reversed(nodes):
            radius = SELECTED_NODE_RADIUS if node.id == selected_id else PICK_RADIUS
            if math.hypot(node.x - world_x, node.y - world_y) < radius:
                return node
        return None

    def pointer_down(
        self, nodes: List[GraphNode], x: float, y: float, selected_id: str | None = None
    ) -> str | None:
        """Select the node under the pointer, or start panning on empty canvas.

        Returns:
            The id of the picked node, None when a pan-drag started
        """
        node = self.pick(nodes, x, y, selected_id)
        if node is not None:
            return node.id
        self.dragging = True
        self.drag_start_x = x - self.offset_x
        self.drag_start_y = y - self.offset_y
        return None

    def pointer_move(self, x: float, y: float) -> bool:
        """Update the pan offset while dragging. Returns whether the view moved."""
        if not self.dragging:
            return False
        self.offset_x = x - self.drag_start_x
        self.offset_y = y - self.drag_start_y
        return True

    def pointer_up(self) -> None:
        self.dragging = False

    def zoom_in(self) -> None:
        self.zoom = min(self.zoom * ZOOM_STEP, MAX_ZOOM)

    def zoom_out(self) -> None:
        self.zoom = max(self.zoom / ZOOM_STEP, MIN_ZOOM)

    def reset(self) -> None:
        self.zoom = 1.0
        self.offset_x = 0.0
        self.offset_y = 0.0


class GraphRenderer:
    """Draws one frame of the graph onto a surface."""

    def __init__(self, width: float = 1200, height: float = 800):
        self.width = width
        self.height = height

    def draw(
        self,
        surface: Surface,
        nodes: List[GraphNode],
        edges: List[GraphEdge],
        viewport: Viewport,
        selected_id: str | None = None,
    ) -> None:
        surface.clear(self.width, self.height)
        surface.set_transform(viewport.offset_x, viewport.offset_y, viewport.zoom)

        by_id = {node.id: node for node in nodes}
        for edge in edges:
            source = by_id.get(edge.source_id)
            target = by_id.get(edge.target_id)
            if source is None or target is None:
                continue
            surface.line(
                source.x,
                source.y,
                target.x,
                target.y,
                color=EDGE_COLOR,
                opacity=edge.strength * 0.6,
                width=edge.strength * 3,
            )

        for node in nodes:
            selected = node.id == selected_id
            radius = SELECTED_NODE_RADIUS if selected else NODE_RADIUS
            surface.circle(
                node.x,
                node.y,
                radius,
                fill=node.color_key,
                outline=SELECTION_OUTLINE if selected else None,
                outline_width=3.0 if selected else 0.0,
            )
            surface.text(node.x, node.y - radius - LABEL_OFFSET, truncate_label(node.label))
