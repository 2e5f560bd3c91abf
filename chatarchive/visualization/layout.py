"""Force-directed layout of the relationship graph.

Damped spring-repulsion simulation in the style of Fruchterman-Reingold.
Numeric state lives in numpy arrays, separate from the GraphNode models the
renderer consumes, so stepping never depends on rendering cadence.
"""

import math
from enum import Enum
from typing import List

import numpy as np
from loguru import logger
from pydantic import BaseModel

from chatarchive.domain.graph import GraphDataset, GraphNode

COINCIDENT_DISTANCE = 1e-9


class LayoutParams(BaseModel):
    """Tunable simulation constants."""

    max_iterations: int = 300
    repulsion: float = 5000.0
    rest_length: float = 150.0
    spring_constant: float = 0.1
    damping: float = 0.8  # share of the previous velocity kept each step
    force_scale: float = 0.01  # share of the computed force added each step
    min_distance: float = 1.0
    max_speed: float = 50.0


class LayoutPhase(str, Enum):
    IDLE = "idle"
    INITIALIZING = "initializing"
    SIMULATING = "simulating"
    SETTLED = "settled"


class LayoutState(BaseModel):
    """Immutable snapshot of positions and velocities, one row per node."""

    positions: np.ndarray
    velocities: np.ndarray
    iteration: int = 0

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    def __init__(self, **data) -> None:
        super().__init__(**data)
        self.positions.flags.writeable = False
        self.velocities.flags.writeable = False

    @property
    def node_count(self) -> int:
        return self.positions.shape[0]


class EdgeArrays(BaseModel):
    """Edges as index arrays into the node rows."""

    sources: np.ndarray
    targets: np.ndarray
    strengths: np.ndarray

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @classmethod
    def empty(cls) -> "EdgeArrays":
        return cls(
            sources=np.zeros(0, dtype=np.intp),
            targets=np.zeros(0, dtype=np.intp),
            strengths=np.zeros(0, dtype=np.float64),
        )

    @classmethod
    def from_dataset(cls, dataset: GraphDataset) -> "EdgeArrays":
        index = {node.id: i for i, node in enumerate(dataset.nodes)}
        rows = [
            (index[edge.source_id], index[edge.target_id], edge.strength)
            for edge in dataset.edges
            if edge.source_id in index and edge.target_id in index
        ]
        if not rows:
            return cls.empty()
        sources, targets, strengths = zip(*rows)
        return cls(
            sources=np.array(sources, dtype=np.intp),
            targets=np.array(targets, dtype=np.intp),
            strengths=np.array(strengths, dtype=np.float64),
        )


def circle_positions(node_count: int, width: float, height: float) -> np.ndarray:
    """Evenly spaced positions on a circle of radius min(width, height) / 3."""
    if node_count == 0:
        return np.zeros((0, 2))
    radius = min(width, height) / 3
    angles = np.arange(node_count) / node_count * 2 * math.pi
    return np.column_stack(
        (width / 2 + radius * np.cos(angles), height / 2 + radius * np.sin(angles))
    )


def initial_state(node_count: int, width: float, height: float) -> LayoutState:
    return LayoutState(
        positions=circle_positions(node_count, width, height),
        velocities=np.zeros((node_count, 2)),
    )


def repulsion_forces(positions: np.ndarray, params: LayoutParams) -> np.ndarray:
    """Inverse-square repulsion between every pair of nodes."""
    node_count = positions.shape[0]
    # delta[i, j] points from node i to node j
    delta = positions[np.newaxis, :, :] - positions[:, np.newaxis, :]
    raw_distance = np.sqrt(np.sum(delta**2, axis=-1))

    # Nodes stacked on top of each other get pushed apart along x by index order
    coincident = raw_distance < COINCIDENT_DISTANCE
    np.fill_diagonal(coincident, False)
    if coincident.any():
        indices = np.arange(node_count)
        order = np.sign(indices[np.newaxis, :] - indices[:, np.newaxis])
        delta = delta.copy()
        delta[coincident] = np.column_stack(
            (order[coincident], np.zeros(int(coincident.sum())))
        )
        raw_distance = np.where(coincident, 1.0, raw_distance)

    distance = np.maximum(raw_distance, params.min_distance)
    magnitude = params.repulsion / distance**2
    np.fill_diagonal(magnitude, 0.0)
    return -np.sum(delta / distance[..., np.newaxis] * magnitude[..., np.newaxis], axis=1)


def spring_forces(positions: np.ndarray, edges: EdgeArrays, params: LayoutParams) -> np.ndarray:
    """Springs pulling each edge's endpoints toward the rest length, scaled by strength."""
    forces = np.zeros_like(positions)
    if edges.sources.size == 0:
        return forces
    delta = positions[edges.targets] - positions[edges.sources]
    distance = np.maximum(np.sqrt(np.sum(delta**2, axis=-1)), params.min_distance)
    attraction = (distance - params.rest_length) * params.spring_constant * edges.strengths
    pull = delta / distance[:, np.newaxis] * attraction[:, np.newaxis]
    np.add.at(forces, edges.sources, pull)
    np.add.at(forces, edges.targets, -pull)
    return forces


def step(state: LayoutState, edges: EdgeArrays, params: LayoutParams) -> LayoutState:
    """Advance the simulation by one step: apply forces, damp, integrate.

    Args:
        state: Current positions and velocities
        edges: Edge index arrays for the same node ordering
        params: Simulation constants

    Returns:
        A new state; the input is left untouched
    """
    if state.node_count == 0:
        return LayoutState(
            positions=state.positions.copy(),
            velocities=state.velocities.copy(),
            iteration=state.iteration + 1,
        )

    forces = repulsion_forces(state.positions, params) + spring_forces(
        state.positions, edges, params
    )
    velocities = state.velocities * params.damping + forces * params.force_scale

    speed = np.sqrt(np.sum(velocities**2, axis=-1))
    too_fast = speed > params.max_speed
    if too_fast.any():
        velocities[too_fast] *= (params.max_speed / speed[too_fast])[:, np.newaxis]

    return LayoutState(
        positions=state.positions + velocities,
        velocities=velocities,
        iteration=state.iteration + 1,
    )


class LayoutSimulator:
    """Runs the layout through Idle -> Initializing -> Simulating -> Settled.

    Callers drive it one step at a time with `advance()`; once settled it
    refuses further steps.
    """

    def __init__(
        self,
        dataset: GraphDataset,
        *,
        width: float = 1200,
        height: float = 800,
        params: LayoutParams | None = None,
    ):
        self.dataset = dataset
        self.width = width
        self.height = height
        self.params = params or LayoutParams()
        self.edges = EdgeArrays.from_dataset(dataset)
        self.phase = LayoutPhase.IDLE
        self.state = initial_state(0, width, height)

    @property
    def is_settled(self) -> bool:
        return self.phase == LayoutPhase.SETTLED

    @property
    def iteration(self) -> int:
        return self.state.iteration

    def initialize(self) -> None:
        """Place the nodes on the initial circle and start simulating."""
        self.phase = LayoutPhase.INITIALIZING
        self.state = initial_state(len(self.dataset.nodes), self.width, self.height)
        if self.state.node_count == 0 or self.params.max_iterations <= 0:
            self.phase = LayoutPhase.SETTLED
        else:
            self.phase = LayoutPhase.SIMULATING
        logger.debug(f"Layout initialized with {self.state.node_count} nodes, phase {self.phase}")

    def advance(self) -> bool:
        """Run one step. Returns False when there is nothing left to simulate."""
        if self.phase != LayoutPhase.SIMULATING:
            return False
        self.state = step(self.state, self.edges, self.params)
        if self.state.iteration >= self.params.max_iterations:
            self.phase = LayoutPhase.SETTLED
            logger.debug(f"Layout settled after {self.state.iteration} steps")
        return True

    def run_to_settled(self) -> List[GraphNode]:
        """Initialize if needed and step until settled."""
        if self.phase == LayoutPhase.IDLE:
            self.initialize()
        while self.advance():
            pass
        return self.nodes

    def reset(self) -> None:
        self.phase = LayoutPhase.IDLE
        self.state = initial_state(0, self.width, self.height)

    @property
    def nodes(self) -> List[GraphNode]:
        """The dataset's nodes with the current positions and velocities."""
        if self.state.node_count != len(self.dataset.nodes):
            return [node.model_copy() for node in self.dataset.nodes]
        return [
            node.model_copy(
                update={
                    "x": float(self.state.positions[i, 0]),
                    "y": float(self.state.positions[i, 1]),
                    "vx": float(self.state.velocities[i, 0]),
                    "vy": float(self.state.velocities[i, 1]),
                }
            )
            for i, node in enumerate(self.dataset.nodes)
        ]
