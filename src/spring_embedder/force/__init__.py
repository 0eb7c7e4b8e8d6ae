"""
Fruchterman-Reingold force engines.

This module provides two interchangeable engines behind one contract:
- SequentialForceEngine: Reference implementation over vertex-keyed maps
- ParallelForceEngine: Flat buffers and data-parallel kernels
"""

from .engine import (
    FORCE_CONSTANT,
    BackendInitializationError,
    EngineClosedError,
    EngineError,
    ForceEngine,
    LayoutSession,
    LayoutStateError,
    create_engine,
    optimal_distance,
)
from .parallel import ParallelForceEngine
from .sequential import SequentialForceEngine

__all__ = [
    "FORCE_CONSTANT",
    "EngineError",
    "BackendInitializationError",
    "EngineClosedError",
    "LayoutStateError",
    "ForceEngine",
    "LayoutSession",
    "create_engine",
    "optimal_distance",
    "SequentialForceEngine",
    "ParallelForceEngine",
]
