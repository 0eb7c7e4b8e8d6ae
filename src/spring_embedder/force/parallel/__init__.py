"""
Data-parallel force engine.

- engine: ParallelForceEngine and its per-call session
- device: Execution backends (thread pool of numpy kernels, numba)
- kernels: Numpy kernels over index ranges
- buffers: Vertex indexing and flat buffer marshalling
"""

from .buffers import GraphBuffers, VertexIndex, marshal_graph, read_positions
from .device import BufferPool, ComputeDevice, NumbaDevice, ThreadPoolDevice, create_device
from .engine import ParallelForceEngine, ParallelSession

__all__ = [
    "ParallelForceEngine",
    "ParallelSession",
    "ComputeDevice",
    "ThreadPoolDevice",
    "NumbaDevice",
    "BufferPool",
    "create_device",
    "VertexIndex",
    "GraphBuffers",
    "marshal_graph",
    "read_positions",
]
