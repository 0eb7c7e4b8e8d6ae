"""
Data-parallel Fruchterman-Reingold force engine.

Computes the same forces as the sequential engine, but on flat
index-addressed buffers with every stage expressed as a kernel of
independent work units:

    zero -> repulsion, attraction -> summation -> update -> read back

Each ``dispatch`` returns only after all its work units completed, so
repulsion and attraction are both done before summation, summation before
the update, and the update before positions are copied back for the
renderer.

With the default float32 buffers results deviate from the float64 sequential
engine by single-precision rounding; pass ``dtype=np.float64`` for a
near-exact match.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import numpy as np

from ...types import PositionMap
from ..engine import (
    FORCE_CONSTANT,
    BackendInitializationError,
    EngineClosedError,
    ForceEngine,
    LayoutSession,
    LayoutStateError,
    optimal_distance,
)
from .buffers import GraphBuffers, VertexIndex, marshal_graph, read_positions
from .device import DEFAULT_WORK_GROUP_SIZE, ComputeDevice, create_device

logger = logging.getLogger(__name__)

_SUPPORTED_DTYPES = (np.dtype(np.float32), np.dtype(np.float64))


class ParallelSession(LayoutSession):
    """Layout run of the data-parallel engine."""

    def __init__(
        self,
        device: ComputeDevice,
        index: VertexIndex,
        buffers: GraphBuffers,
        size: tuple[float, float],
        c: float,
    ) -> None:
        super().__init__()
        self._device = device
        self._index = index
        self._buffers: Optional[GraphBuffers] = buffers
        self._size = size
        self._c = c
        n = buffers.vertex_count
        self._k = optimal_distance(size[0], size[1], n) if n > 0 else 0.0

    @property
    def buffers(self) -> GraphBuffers:
        """
        Buffers of this layout call.

        Raises:
            EngineClosedError: If the session was closed.
        """
        if self._buffers is None:
            raise EngineClosedError("ParallelSession is closed")
        return self._buffers

    @property
    def index(self) -> VertexIndex:
        return self._index

    def clear_intermediates(self) -> None:
        """Zero the force accumulators before a new iteration."""
        device = self._device
        b = self.buffers
        device.dispatch("zero", len(b.repulsive), b.repulsive)
        device.dispatch("zero", len(b.attractive), b.attractive)
        device.dispatch("zero", len(b.displacements), b.displacements)

    def compute_forces(self) -> None:
        """Fill ``displacements`` with the summed force of every vertex."""
        device = self._device
        b = self.buffers
        n = b.vertex_count
        m = b.edge_count
        device.dispatch("repulsion", n, b.positions, b.repulsive, self._k, self._c)
        device.dispatch(
            "attraction", m, b.positions, b.edges, b.weights, b.attractive, self._k, self._c
        )
        device.dispatch(
            "summation",
            n,
            b.repulsive,
            b.attractive,
            b.incidence_ptr,
            b.incidence_slots,
            b.displacements,
        )

    def update_positions(self, temperature: float) -> None:
        """Apply displacements, capped by ``temperature`` and clamped to the area."""
        b = self.buffers
        width, height = self._size
        self._device.dispatch(
            "update",
            b.vertex_count,
            b.positions,
            b.displacements,
            float(temperature),
            width,
            height,
        )

    def _step(self, temperature: float) -> PositionMap:
        if self.buffers.vertex_count == 0:
            return {}
        self.clear_intermediates()
        self.compute_forces()
        self.update_positions(temperature)
        self._device.finish()
        return self._positions()

    def _positions(self) -> PositionMap:
        return read_positions(self._index, self.buffers.positions)

    def _release(self) -> None:
        self._buffers = None
        self._device.buffers.release()


class ParallelForceEngine(ForceEngine):
    """
    Force engine running each stage as a data-parallel kernel.

    The device (worker pool or compiled kernels) and its buffer pool are
    created once in the constructor and released by :meth:`close`.

    Example:
        with ParallelForceEngine(backend="threads", workers=4) as engine:
            layout = FruchtermanReingoldLayout(size=(640, 480), engine=engine)
            positions = layout.layout(graph, iterations=500)
    """

    name = "parallel"

    def __init__(
        self,
        *,
        backend: str = "threads",
        dtype: Any = np.float32,
        workers: Optional[int] = None,
        work_group_size: int = DEFAULT_WORK_GROUP_SIZE,
        force_constant: float = FORCE_CONSTANT,
    ) -> None:
        """
        Initialize the parallel engine and its device.

        Args:
            backend: ``"threads"`` (numpy kernels on a thread pool) or
                ``"numba"`` (compiled parallel kernels)
            dtype: Buffer precision, float32 or float64
            workers: Thread count for the ``threads`` backend
                (default: CPU count, at most 32)
            work_group_size: Work units per task for the ``threads`` backend
            force_constant: Constant C scaling both force types

        Raises:
            BackendInitializationError: If the device cannot be created.
        """
        super().__init__()
        np_dtype = np.dtype(dtype)
        if np_dtype not in _SUPPORTED_DTYPES:
            raise BackendInitializationError(
                f"Unsupported buffer dtype {np_dtype.name}, expected float32 or float64"
            )
        self._c = float(force_constant)
        self._backend = backend

        options: dict[str, Any] = {"dtype": np_dtype}
        if backend == "threads":
            options["workers"] = workers
            options["work_group_size"] = work_group_size
        self._device: ComputeDevice = create_device(backend, **options)

    @property
    def backend(self) -> str:
        return self._backend

    @property
    def dtype(self) -> np.dtype:
        return self._device.dtype

    @property
    def device(self) -> ComputeDevice:
        return self._device

    @property
    def force_constant(self) -> float:
        return self._c

    def _open(
        self,
        graph: Any,
        positions: PositionMap,
        normalized_weights: dict[Any, float],
        size: tuple[float, float],
    ) -> ParallelSession:
        pool = self._device.buffers
        if pool.in_use:
            raise LayoutStateError("A layout session is already open on this engine")
        try:
            index, buffers = marshal_graph(
                graph,
                positions,
                normalized_weights,
                dtype=self._device.dtype,
                allocator=pool.acquire,
            )
        except BaseException:
            pool.release()
            raise
        logger.debug(
            "Marshalled %d vertices and %d edges into %d bytes of %s buffers",
            buffers.vertex_count,
            buffers.edge_count,
            pool.nbytes,
            self._device.backend,
        )
        return ParallelSession(self._device, index, buffers, size, self._c)

    def _release(self) -> None:
        self._device.release()


__all__ = ["ParallelSession", "ParallelForceEngine"]
