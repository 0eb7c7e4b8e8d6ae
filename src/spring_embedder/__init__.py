"""
spring-embedder: Fruchterman-Reingold graph layout with interchangeable
sequential and data-parallel force engines.

Vertices repel each other, edges pull their endpoints together, and a
cooling schedule damps motion until the positions settle.

Modules:
- layout: FruchtermanReingoldLayout driver (iteration loop, cooling, hooks)
- force: Sequential and data-parallel force engines
- normalization: Edge weight rescaling into [1, 10]
- renderers: Renderer collaborators (no-op, callbacks, PNG frames)
- types / vector: Graph view, Graph, Vector2D
"""

import logging

__version__ = "0.1.0"

from .base import BaseLayout, IterativeLayout
from .demo import star_of_stars

# Force engines
from .force import (
    FORCE_CONSTANT,
    BackendInitializationError,
    EngineClosedError,
    EngineError,
    ForceEngine,
    LayoutSession,
    LayoutStateError,
    ParallelForceEngine,
    SequentialForceEngine,
    create_engine,
    optimal_distance,
)
from .layout import FruchtermanReingoldLayout, LayoutState
from .normalization import (
    MAX_NORMALIZED_WEIGHT,
    MIN_NORMALIZED_WEIGHT,
    EdgeWeightNormalizer,
    normalize_edge_weights,
)
from .renderers import CallbackRenderer, FrameRenderer, NoOpRenderer, Renderer
from .types import Edge, Event, EventType, Graph, GraphView, PositionMap, SizeType

# Validation utilities
from .validation import (
    InvalidCanvasSizeError,
    InvalidEdgeError,
    InvalidIterationsError,
    ValidationError,
    validate_canvas_size,
    validate_edge_endpoints,
    validate_iterations,
)
from .vector import Vector2D

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",
    # Shared types
    "Vector2D",
    "Graph",
    "GraphView",
    "Edge",
    "EventType",
    "Event",
    "PositionMap",
    "SizeType",
    # Base classes
    "BaseLayout",
    "IterativeLayout",
    # Driver
    "FruchtermanReingoldLayout",
    "LayoutState",
    # Force engines
    "FORCE_CONSTANT",
    "ForceEngine",
    "LayoutSession",
    "SequentialForceEngine",
    "ParallelForceEngine",
    "create_engine",
    "optimal_distance",
    "EngineError",
    "BackendInitializationError",
    "EngineClosedError",
    "LayoutStateError",
    # Normalization
    "MIN_NORMALIZED_WEIGHT",
    "MAX_NORMALIZED_WEIGHT",
    "EdgeWeightNormalizer",
    "normalize_edge_weights",
    # Renderers
    "Renderer",
    "NoOpRenderer",
    "CallbackRenderer",
    "FrameRenderer",
    # Demo
    "star_of_stars",
    # Validation
    "ValidationError",
    "InvalidCanvasSizeError",
    "InvalidEdgeError",
    "InvalidIterationsError",
    "validate_canvas_size",
    "validate_edge_endpoints",
    "validate_iterations",
]
