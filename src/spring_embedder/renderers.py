"""
Renderer collaborators invoked by the layout driver.

A renderer receives every iteration's position snapshot through ``render``
and is told through ``finish`` that no more frames will come. Renderers run
synchronously on the layout thread; the driver waits for them before cooling.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Optional, Union

from .normalization import normalize_edge_weights
from .types import PositionMap, SizeType
from .validation import validate_canvas_size

logger = logging.getLogger(__name__)


class Renderer(ABC):
    """Abstract renderer."""

    @abstractmethod
    def render(self, graph: Any, iteration: int, positions: PositionMap) -> None:
        """Called once per iteration with that iteration's final positions."""
        pass

    @abstractmethod
    def finish(self) -> None:
        """Called once after the last iteration."""
        pass


class NoOpRenderer(Renderer):
    """Renderer that ignores every call. The default collaborator."""

    def render(self, graph: Any, iteration: int, positions: PositionMap) -> None:
        pass

    def finish(self) -> None:
        pass


class CallbackRenderer(Renderer):
    """
    Adapts plain callables to the renderer interface.

    Example:
        frames = []
        renderer = CallbackRenderer(
            on_render=lambda g, i, pos: frames.append(pos),
        )
    """

    def __init__(
        self,
        on_render: Optional[Callable[[Any, int, PositionMap], None]] = None,
        on_finish: Optional[Callable[[], None]] = None,
    ) -> None:
        self._on_render = on_render
        self._on_finish = on_finish

    def render(self, graph: Any, iteration: int, positions: PositionMap) -> None:
        if self._on_render is not None:
            self._on_render(graph, iteration, positions)

    def finish(self) -> None:
        if self._on_finish is not None:
            self._on_finish()


class FrameRenderer(Renderer):
    """
    Writes one PNG image per iteration using matplotlib.

    Frames are named ``iteration-0000.png``. Edges are drawn black with a line
    width equal to their normalized weight, vertices as red dots, on a white
    background the size of the layout area (one pixel per unit).

    Example:
        renderer = FrameRenderer("frames/", size=(640, 480))
        layout = FruchtermanReingoldLayout(size=(640, 480), renderer=renderer)
        layout.layout(graph, iterations=200)
    """

    def __init__(
        self,
        output_dir: Union[str, Path],
        size: SizeType,
        *,
        every: int = 1,
        vertex_size: float = 10.0,
    ) -> None:
        """
        Initialize the frame renderer.

        Args:
            output_dir: Directory for the frames (created if missing)
            size: Image size as (width, height) in pixels
            every: Only write iterations divisible by this number
            vertex_size: Vertex dot diameter in pixels
        """
        self._output_dir = Path(output_dir)
        self._output_dir.mkdir(parents=True, exist_ok=True)
        self._width, self._height = validate_canvas_size(size)
        self._every = max(1, int(every))
        self._vertex_size = float(vertex_size)
        self._weights: Optional[dict[Any, float]] = None
        self._weights_graph: Any = None
        self._written: list[Path] = []

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    @property
    def written(self) -> list[Path]:
        """Paths of the frames written so far."""
        return list(self._written)

    def frame_path(self, iteration: int) -> Path:
        return self._output_dir / f"iteration-{iteration:04d}.png"

    def render(self, graph: Any, iteration: int, positions: PositionMap) -> None:
        if iteration % self._every != 0:
            return

        if self._weights is None or self._weights_graph is not graph:
            self._weights = normalize_edge_weights(graph)
            self._weights_graph = graph

        path = self.frame_path(iteration)
        self._draw(graph, positions, self._weights, path)
        self._written.append(path)

    def _draw(
        self,
        graph: Any,
        positions: PositionMap,
        weights: dict[Any, float],
        path: Path,
    ) -> None:
        from matplotlib.backends.backend_agg import FigureCanvasAgg
        from matplotlib.collections import LineCollection
        from matplotlib.figure import Figure

        dpi = 100
        fig = Figure(figsize=(self._width / dpi, self._height / dpi), dpi=dpi)
        FigureCanvasAgg(fig)
        ax = fig.add_axes((0, 0, 1, 1))
        ax.set_xlim(0, self._width)
        # Image coordinates: y grows downwards
        ax.set_ylim(self._height, 0)
        ax.axis("off")
        fig.patch.set_facecolor("white")

        segments = []
        widths = []
        for edge in graph.edges:
            a = positions[graph.edge_source(edge)]
            b = positions[graph.edge_target(edge)]
            segments.append([(a.x, a.y), (b.x, b.y)])
            widths.append(weights[edge])
        if segments:
            ax.add_collection(LineCollection(segments, colors="black", linewidths=widths))

        if positions:
            xs = [p.x for p in positions.values()]
            ys = [p.y for p in positions.values()]
            ax.scatter(xs, ys, s=self._vertex_size**2 / 4, c="red", zorder=5)

        fig.savefig(path, dpi=dpi, facecolor="white")

    def finish(self) -> None:
        logger.info(
            "Wrote %d frames to %s", len(self._written), self._output_dir.resolve()
        )


__all__ = [
    "Renderer",
    "NoOpRenderer",
    "CallbackRenderer",
    "FrameRenderer",
]
