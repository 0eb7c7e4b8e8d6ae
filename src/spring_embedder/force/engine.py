"""
Force engine contract shared by the sequential and data-parallel engines.

The layout driver only talks to a ForceEngine: it opens one LayoutSession per
``layout`` call and asks it to advance one iteration at a time. Everything
the engine needs for a run (index maps, buffers, cached distances) lives in
the session and is released when the session closes.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from typing_extensions import Self

from ..types import PositionMap

# Force constant C scaling both repulsion and attraction.
FORCE_CONSTANT = 0.01


class EngineError(RuntimeError):
    """Base exception for force engine failures."""

    pass


class BackendInitializationError(EngineError):
    """Raised when a parallel execution backend cannot be set up."""

    pass


class EngineClosedError(EngineError):
    """Raised when a closed engine or session is asked to do more work."""

    pass


class LayoutStateError(EngineError):
    """Raised on an illegal layout state transition (e.g. re-entry)."""

    pass


def optimal_distance(width: float, height: float, vertex_count: int) -> float:
    """
    Target spacing between vertices for a layout area.

    Args:
        width: Layout area width
        height: Layout area height
        vertex_count: Number of vertices (must be positive)

    Returns:
        ``sqrt(width * height / vertex_count) / 2``
    """
    if vertex_count <= 0:
        raise ValueError(f"vertex_count must be positive, got {vertex_count}")
    return math.sqrt(width * height / vertex_count) / 2


class LayoutSession(ABC):
    """
    Per-call state of a force engine.

    A session is created by :meth:`ForceEngine.open_session` and advanced by
    the driver with :meth:`step`. It is a context manager; leaving the block
    releases per-call resources whether or not an error occurred.
    """

    def __init__(self) -> None:
        self._closed = False

    def step(self, temperature: float) -> PositionMap:
        """
        Run one iteration: forces, summation and bounded position update.

        Args:
            temperature: Maximum displacement of any vertex this iteration

        Returns:
            A new, complete position map for the updated positions

        Raises:
            EngineClosedError: If the session was closed.
        """
        self._check_open()
        return self._step(temperature)

    def positions(self) -> PositionMap:
        """
        Return a new position map for the current positions.

        Raises:
            EngineClosedError: If the session was closed.
        """
        self._check_open()
        return self._positions()

    def _check_open(self) -> None:
        if self._closed:
            raise EngineClosedError(f"{type(self).__name__} is closed")

    @abstractmethod
    def _step(self, temperature: float) -> PositionMap:
        pass

    @abstractmethod
    def _positions(self) -> PositionMap:
        pass

    def _release(self) -> None:
        """Release per-call resources. Subclasses override."""
        pass

    def close(self) -> None:
        """Release per-call resources. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._release()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


class ForceEngine(ABC):
    """
    Abstract force engine.

    Engines own whatever long-lived compute resources they need. Those are
    acquired in the constructor and released exactly once by :meth:`close`
    (or by leaving a ``with`` block).

    Example:
        with ParallelForceEngine() as engine:
            layout = FruchtermanReingoldLayout(size=(640, 480), engine=engine)
            positions = layout.layout(graph, iterations=100)
    """

    name: str = "abstract"

    def __init__(self) -> None:
        self._closed = False

    @abstractmethod
    def _open(
        self,
        graph: Any,
        positions: PositionMap,
        normalized_weights: dict[Any, float],
        size: tuple[float, float],
    ) -> LayoutSession:
        pass

    def open_session(
        self,
        graph: Any,
        positions: PositionMap,
        normalized_weights: dict[Any, float],
        size: tuple[float, float],
    ) -> LayoutSession:
        """
        Start a layout run.

        Args:
            graph: Object implementing the GraphView protocol
            positions: Complete initial position map
            normalized_weights: Edge to normalized weight map
            size: Layout area as (width, height)

        Returns:
            A LayoutSession to be closed by the caller

        Raises:
            EngineClosedError: If the engine was already closed.
        """
        if self._closed:
            raise EngineClosedError(f"{type(self).__name__} is closed")
        return self._open(graph, positions, normalized_weights, size)

    def _release(self) -> None:
        """Release engine resources. Subclasses override."""
        pass

    def close(self) -> None:
        """Release engine resources. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._release()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def create_engine(name: str, **options: Any) -> ForceEngine:
    """
    Create a force engine by name.

    Args:
        name: ``"sequential"`` or ``"parallel"``
        **options: Passed to the engine constructor

    Returns:
        New ForceEngine

    Raises:
        ValueError: If the name is unknown.
        BackendInitializationError: If the parallel backend cannot start.
    """
    from .parallel import ParallelForceEngine
    from .sequential import SequentialForceEngine

    engines: dict[str, type[ForceEngine]] = {
        SequentialForceEngine.name: SequentialForceEngine,
        ParallelForceEngine.name: ParallelForceEngine,
    }
    engine_class: Optional[type[ForceEngine]] = engines.get(name)
    if engine_class is None:
        raise ValueError(f"Unknown force engine {name!r}, expected one of {sorted(engines)}")
    return engine_class(**options)


__all__ = [
    "FORCE_CONSTANT",
    "EngineError",
    "BackendInitializationError",
    "EngineClosedError",
    "LayoutStateError",
    "optimal_distance",
    "LayoutSession",
    "ForceEngine",
    "create_engine",
]
