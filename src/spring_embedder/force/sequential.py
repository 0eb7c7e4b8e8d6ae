"""
Sequential Fruchterman-Reingold force engine.

Based on the paper:
"Graph Drawing by Force-directed Placement" by Fruchterman and Reingold (1991)

This is the reference implementation. It works directly on vertex-keyed maps
of Vector2D values:
- All vertex pairs repel each other (inversely proportional to distance)
- Edge endpoints attract each other (proportional to distance squared,
  scaled by the normalized edge weight)
- Movement per iteration is capped by the current temperature and positions
  are clamped to the layout area
"""

from __future__ import annotations

import logging
from typing import Any

from ..types import PositionMap
from ..vector import Vector2D
from .engine import FORCE_CONSTANT, ForceEngine, LayoutSession, optimal_distance

logger = logging.getLogger(__name__)


def _zero_displacements(vertices: list[Any]) -> dict[Any, Vector2D]:
    zero = Vector2D.zero()
    return {v: zero for v in vertices}


def repulsive_forces(
    vertices: list[Any],
    positions: PositionMap,
    k: float,
    c: float = FORCE_CONSTANT,
) -> dict[Any, Vector2D]:
    """
    Compute repulsion between every unordered pair of vertices.

    Coincident vertices exert no force on each other.

    Args:
        vertices: Vertices of the graph
        positions: Current position of every vertex
        k: Optimal distance
        c: Force constant

    Returns:
        New dict from vertex to summed repulsive displacement
    """
    result = _zero_displacements(vertices)
    k_sq = k * k
    n = len(vertices)

    for i in range(n):
        v = vertices[i]
        pos_v = positions[v]
        for j in range(i + 1, n):
            u = vertices[j]
            delta = pos_v.subtract(positions[u])
            distance = delta.length()

            if distance > 0:
                repulsion = c * k_sq / distance
                force = delta.normalize().scale(repulsion)
                result[v] = result[v].add(force)
                result[u] = result[u].subtract(force)

    return result


def attractive_forces(
    graph: Any,
    positions: PositionMap,
    normalized_weights: dict[Any, float],
    k: float,
    c: float = FORCE_CONSTANT,
) -> dict[Any, Vector2D]:
    """
    Compute attraction along every edge.

    Self-loops and edges between coincident vertices contribute nothing.
    Parallel edges each contribute.

    Args:
        graph: Object implementing the GraphView protocol
        positions: Current position of every vertex
        normalized_weights: Edge to normalized weight map
        k: Optimal distance
        c: Force constant

    Returns:
        New dict from vertex to summed attractive displacement
    """
    result = _zero_displacements(list(graph.vertices))

    for edge in graph.edges:
        source = graph.edge_source(edge)
        target = graph.edge_target(edge)

        delta = positions[source].subtract(positions[target])
        distance = delta.length()

        if distance > 0:
            attraction = c * distance * distance / k * normalized_weights[edge]
            force = delta.normalize().scale(attraction)
            result[source] = result[source].subtract(force)
            result[target] = result[target].add(force)

    return result


def compute_forces(
    graph: Any,
    positions: PositionMap,
    normalized_weights: dict[Any, float],
    size: tuple[float, float],
    c: float = FORCE_CONSTANT,
) -> dict[Any, Vector2D]:
    """
    Total displacement of every vertex for one iteration.

    Args:
        graph: Object implementing the GraphView protocol
        positions: Current position of every vertex
        normalized_weights: Edge to normalized weight map
        size: Layout area as (width, height)
        c: Force constant

    Returns:
        New dict from vertex to repulsive + attractive displacement
    """
    vertices = list(graph.vertices)
    if not vertices:
        return {}

    k = optimal_distance(size[0], size[1], len(vertices))
    repulsive = repulsive_forces(vertices, positions, k, c)
    attractive = attractive_forces(graph, positions, normalized_weights, k, c)
    return {v: repulsive[v].add(attractive[v]) for v in vertices}


def update_positions(
    positions: PositionMap,
    displacements: dict[Any, Vector2D],
    temperature: float,
    size: tuple[float, float],
) -> PositionMap:
    """
    Move every vertex along its displacement, capped by the temperature.

    Args:
        positions: Current position of every vertex
        displacements: Summed displacement of every vertex
        temperature: Maximum distance a vertex may move
        size: Layout area as (width, height)

    Returns:
        New position map, clamped to [0, width] x [0, height]
    """
    width, height = size
    result: PositionMap = {}

    for v, pos in positions.items():
        displacement = displacements[v]
        length = displacement.length()
        if length > 0:
            pos = pos.add(displacement.scale(min(length, temperature) / length))

        x = max(0.0, min(width, pos.x))
        y = max(0.0, min(height, pos.y))
        result[v] = Vector2D(x, y)

    return result


class SequentialSession(LayoutSession):
    """Layout run of the sequential engine."""

    def __init__(
        self,
        graph: Any,
        positions: PositionMap,
        normalized_weights: dict[Any, float],
        size: tuple[float, float],
        c: float,
    ) -> None:
        super().__init__()
        self._graph = graph
        self._current: PositionMap = dict(positions)
        self._weights = normalized_weights
        self._size = size
        self._c = c

    def _step(self, temperature: float) -> PositionMap:
        displacements = compute_forces(
            self._graph, self._current, self._weights, self._size, self._c
        )
        self._current = update_positions(
            self._current, displacements, temperature, self._size
        )
        return dict(self._current)

    def _positions(self) -> PositionMap:
        return dict(self._current)


class SequentialForceEngine(ForceEngine):
    """
    Reference force engine with no internal concurrency.

    Cost per iteration is O(V^2) for repulsion plus O(E) for attraction.

    Example:
        layout = FruchtermanReingoldLayout(
            size=(640, 480),
            engine=SequentialForceEngine(),
        )
        positions = layout.layout(graph, iterations=100)
    """

    name = "sequential"

    def __init__(self, *, force_constant: float = FORCE_CONSTANT) -> None:
        """
        Initialize the sequential engine.

        Args:
            force_constant: Constant C scaling both force types
        """
        super().__init__()
        self._c = float(force_constant)

    @property
    def force_constant(self) -> float:
        """Get the force constant C."""
        return self._c

    def _open(
        self,
        graph: Any,
        positions: PositionMap,
        normalized_weights: dict[Any, float],
        size: tuple[float, float],
    ) -> SequentialSession:
        logger.debug(
            "Opening sequential session for %d vertices",
            len(positions),
        )
        return SequentialSession(graph, positions, normalized_weights, size, self._c)


__all__ = [
    "repulsive_forces",
    "attractive_forces",
    "compute_forces",
    "update_positions",
    "SequentialSession",
    "SequentialForceEngine",
]
