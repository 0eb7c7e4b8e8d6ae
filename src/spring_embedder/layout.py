"""
Fruchterman-Reingold layout driver.

Based on the paper:
"Graph Drawing by Force-directed Placement" by Fruchterman and Reingold (1991)

The driver owns the iteration loop and the cooling schedule. The physics is
delegated to a force engine, so the same loop runs the sequential reference
engine or the data-parallel one:

    place randomly -> normalize weights -> repeat:
        engine step -> renderer.render -> tick event -> cool
    renderer.finish -> return positions
"""

from __future__ import annotations

import logging
import time
from enum import IntEnum
from typing import TYPE_CHECKING, Any, Callable, Optional, Union

if TYPE_CHECKING:
    from typing_extensions import Self

from .base import IterativeLayout
from .force.engine import ForceEngine, LayoutStateError, create_engine
from .normalization import normalize_edge_weights
from .renderers import NoOpRenderer, Renderer
from .types import Event, EventType, PositionMap, SizeType
from .validation import validate_edge_endpoints, validate_iterations

logger = logging.getLogger(__name__)


class LayoutState(IntEnum):
    """
    Driver states.

    - initialized: No layout call has started yet
    - running: A layout call is iterating
    - finished: The last layout call returned or raised

    Within one call the state only moves forward, running to finished. A
    later call on the same instance starts a new run, finished to running;
    the positions of the previous run are not reused.
    """

    initialized = 0
    running = 1
    finished = 2


class FruchtermanReingoldLayout(IterativeLayout):
    """
    Fruchterman-Reingold force-directed graph layout.

    Example:
        graph = Graph.from_edges([("a", "b", 2.0), ("b", "c", 1.0)])
        layout = FruchtermanReingoldLayout(size=(640, 480), random_seed=1)
        positions = layout.layout(graph, iterations=200)

        for vertex, pos in positions.items():
            print(f"{vertex}: ({pos.x:.1f}, {pos.y:.1f})")

        # Data-parallel engine, released when the block exits
        with FruchtermanReingoldLayout(size=(640, 480), engine="parallel") as layout:
            positions = layout.layout(graph, iterations=200)

        # Without "with", an engine created from a name keeps its worker
        # threads until close() is called
        layout = FruchtermanReingoldLayout(size=(640, 480), engine="parallel")
        try:
            positions = layout.layout(graph, iterations=200)
        finally:
            layout.close()
    """

    def __init__(
        self,
        *,
        size: SizeType = (640, 480),
        engine: Union[str, ForceEngine] = "sequential",
        renderer: Optional[Renderer] = None,
        random_seed: Optional[int] = None,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_tick: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
        initial_temperature: float = 50.0,
        min_temperature: float = 1.5,
        cooling_factor: float = 0.95,
        engine_options: Optional[dict[str, Any]] = None,
    ) -> None:
        """
        Initialize Fruchterman-Reingold layout.

        Args:
            size: Layout area as (width, height)
            engine: Force engine instance, or ``"sequential"``/``"parallel"``
                to have the layout create (and own) one
            renderer: Receives every iteration's positions (default: no-op)
            random_seed: Random seed for reproducible initial placement
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event
            initial_temperature: Temperature of the first iteration
            min_temperature: Floor of the temperature
            cooling_factor: Multiplicative decay per iteration (0 to 1)
            engine_options: Constructor options when ``engine`` is a name

        Raises:
            BackendInitializationError: If a named parallel engine cannot start.
        """
        super().__init__(
            size=size,
            random_seed=random_seed,
            on_start=on_start,
            on_tick=on_tick,
            on_end=on_end,
            initial_temperature=initial_temperature,
            min_temperature=min_temperature,
            cooling_factor=cooling_factor,
        )
        if isinstance(engine, str):
            self._engine: ForceEngine = create_engine(engine, **(engine_options or {}))
            self._owns_engine = True
        else:
            self._engine = engine
            self._owns_engine = False
        self._renderer: Renderer = renderer if renderer is not None else NoOpRenderer()
        self._state = LayoutState.initialized

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def engine(self) -> ForceEngine:
        """Get the force engine."""
        return self._engine

    @property
    def renderer(self) -> Renderer:
        """Get the renderer."""
        return self._renderer

    @renderer.setter
    def renderer(self, value: Optional[Renderer]) -> None:
        """Set the renderer (None restores the no-op renderer)."""
        if self._state == LayoutState.running:
            raise LayoutStateError("Cannot replace the renderer while a layout is running")
        self._renderer = value if value is not None else NoOpRenderer()

    @property
    def state(self) -> LayoutState:
        """Get the driver state."""
        return self._state

    # -------------------------------------------------------------------------
    # Layout
    # -------------------------------------------------------------------------

    def layout(self, graph: Any, iterations: int) -> PositionMap:
        """
        Lay out a graph.

        Args:
            graph: Object implementing the GraphView protocol
            iterations: Number of iterations (0 returns the initial placement)

        Returns:
            New map with the final position of every vertex

        Raises:
            LayoutStateError: If called while a layout is already running.
            InvalidIterationsError: If iterations is negative.
            InvalidEdgeError: If an edge references an unknown vertex.
        """
        if self._state == LayoutState.running:
            raise LayoutStateError("layout() is already running on this instance")
        iterations = validate_iterations(iterations)
        validate_edge_endpoints(graph)

        self._state = LayoutState.running
        try:
            return self._run(graph, iterations)
        finally:
            self._state = LayoutState.finished

    def _run(self, graph: Any, iterations: int) -> PositionMap:
        vertices = list(graph.vertices)
        positions = self._initial_positions(vertices)
        normalized_weights = normalize_edge_weights(graph)
        temperature = self._initial_temperature

        logger.info(
            "Starting %s layout: %d vertices, %d edges, %d iterations",
            self._engine.name,
            len(vertices),
            len(normalized_weights),
            iterations,
        )
        self.trigger({"type": EventType.start, "iteration": 0, "temperature": temperature})

        started = time.perf_counter()
        with self._engine.open_session(
            graph, positions, normalized_weights, self._canvas_size
        ) as session:
            for i in range(iterations):
                tick = time.perf_counter()
                positions = session.step(temperature)
                logger.debug(
                    "Iteration %d took %.2f ms (temperature %.3f)",
                    i,
                    (time.perf_counter() - tick) * 1000.0,
                    temperature,
                )

                self._renderer.render(graph, i, positions)
                self.trigger({"type": EventType.tick, "iteration": i, "temperature": temperature})

                temperature = self.cool(temperature)

        self._renderer.finish()
        self.trigger({"type": EventType.end, "iteration": iterations, "temperature": temperature})
        logger.info(
            "Finished %s layout in %.3f s", self._engine.name, time.perf_counter() - started
        )
        return positions

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Release the engine if this layout created it."""
        if self._owns_engine:
            self._engine.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


__all__ = ["LayoutState", "FruchtermanReingoldLayout"]
