"""
Base classes for the layout driver.

- BaseLayout: Abstract base with event system, layout area and seeding
- IterativeLayout: Adds the annealing temperature schedule
"""

from __future__ import annotations

import random
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Optional

if TYPE_CHECKING:
    from typing_extensions import Self

from .types import Event, EventType, PositionMap, SizeType
from .validation import ValidationError, validate_canvas_size
from .vector import Vector2D


class BaseLayout(ABC):
    """
    Abstract base class for layouts.

    Provides shared infrastructure:
    - Event system (start/tick/end events)
    - Layout area management
    - Seeded random initial placement
    """

    def __init__(
        self,
        *,
        size: SizeType = (1.0, 1.0),
        random_seed: Optional[int] = None,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_tick: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
    ) -> None:
        """
        Initialize layout with configuration.

        Args:
            size: Layout area as (width, height)
            random_seed: Random seed for reproducible initial placement
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event
        """
        self._canvas_size: tuple[float, float] = (1.0, 1.0)
        self._events: dict[EventType, Callable[[Optional[Event]], None]] = {}
        self._random_seed: Optional[int] = None

        self.size = size
        if random_seed is not None:
            self.random_seed = random_seed

        if on_start:
            self._events[EventType.start] = on_start
        if on_tick:
            self._events[EventType.tick] = on_tick
        if on_end:
            self._events[EventType.end] = on_end

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def size(self) -> tuple[float, float]:
        """Get layout area as (width, height)."""
        return self._canvas_size

    @size.setter
    def size(self, value: SizeType) -> None:
        """
        Set layout area.

        Raises:
            InvalidCanvasSizeError: If width or height is not positive.
        """
        self._canvas_size = validate_canvas_size(value)

    @property
    def random_seed(self) -> Optional[int]:
        """Get random seed for reproducible layouts."""
        return self._random_seed

    @random_seed.setter
    def random_seed(self, value: Optional[int]) -> None:
        """Set random seed for reproducible layouts."""
        self._random_seed = value

    # -------------------------------------------------------------------------
    # Event System
    # -------------------------------------------------------------------------

    def on(self, event: EventType | str, callback: Callable[[Optional[Event]], None]) -> Self:
        """
        Subscribe to a layout event.

        Args:
            event: Event type (EventType enum or string name)
            callback: Function to call when event fires

        Returns:
            self (for chaining)
        """
        if isinstance(event, str):
            event = EventType[event]
        self._events[event] = callback
        return self

    def trigger(self, event: Event) -> None:
        """
        Trigger an event, calling the registered callback.

        Args:
            event: Event payload with type and optional data
        """
        event_type = event.get("type")
        if event_type is not None and event_type in self._events:
            self._events[event_type](event)

    # -------------------------------------------------------------------------
    # Utility Methods
    # -------------------------------------------------------------------------

    def _initial_positions(self, vertices: list[Any]) -> PositionMap:
        """
        Place every vertex uniformly at random in [0, width) x [0, height).

        Uses a private generator seeded with ``random_seed`` so placement is
        reproducible without touching the global random state.
        """
        rng = random.Random(self._random_seed)
        w, h = self._canvas_size
        return {v: Vector2D(rng.random() * w, rng.random() * h) for v in vertices}

    @abstractmethod
    def layout(self, graph: Any, iterations: int) -> PositionMap:
        """Compute and return the position of every vertex."""
        pass


class IterativeLayout(BaseLayout):
    """
    Base class for annealed iterative layouts.

    The temperature caps how far a vertex may move in one iteration. It
    starts at ``initial_temperature`` and after each iteration becomes
    ``max(min_temperature, temperature * cooling_factor)``.
    """

    def __init__(
        self,
        *,
        size: SizeType = (1.0, 1.0),
        random_seed: Optional[int] = None,
        on_start: Optional[Callable[[Optional[Event]], None]] = None,
        on_tick: Optional[Callable[[Optional[Event]], None]] = None,
        on_end: Optional[Callable[[Optional[Event]], None]] = None,
        initial_temperature: float = 50.0,
        min_temperature: float = 1.5,
        cooling_factor: float = 0.95,
    ) -> None:
        """
        Initialize iterative layout.

        Args:
            size: Layout area as (width, height)
            random_seed: Random seed for reproducible initial placement
            on_start: Callback for start event
            on_tick: Callback for tick event
            on_end: Callback for end event
            initial_temperature: Temperature of the first iteration
            min_temperature: Floor of the temperature
            cooling_factor: Multiplicative decay per iteration (0 to 1)
        """
        super().__init__(
            size=size,
            random_seed=random_seed,
            on_start=on_start,
            on_tick=on_tick,
            on_end=on_end,
        )
        self._initial_temperature = 50.0
        self._min_temperature = 1.5
        self._cooling_factor = 0.95
        self.initial_temperature = initial_temperature
        self.min_temperature = min_temperature
        self.cooling_factor = cooling_factor

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def initial_temperature(self) -> float:
        """Get the starting temperature."""
        return self._initial_temperature

    @initial_temperature.setter
    def initial_temperature(self, value: float) -> None:
        """Set the starting temperature (must be >= 0)."""
        value = float(value)
        if value < 0:
            raise ValidationError(f"initial_temperature must be >= 0, got {value}")
        self._initial_temperature = value

    @property
    def min_temperature(self) -> float:
        """Get the temperature floor."""
        return self._min_temperature

    @min_temperature.setter
    def min_temperature(self, value: float) -> None:
        """Set the temperature floor (must be >= 0)."""
        value = float(value)
        if value < 0:
            raise ValidationError(f"min_temperature must be >= 0, got {value}")
        self._min_temperature = value

    @property
    def cooling_factor(self) -> float:
        """Get cooling factor (temperature decay per iteration)."""
        return self._cooling_factor

    @cooling_factor.setter
    def cooling_factor(self, value: float) -> None:
        """Set cooling factor (clamped to [0, 1])."""
        self._cooling_factor = max(0.0, min(1.0, float(value)))

    # -------------------------------------------------------------------------
    # Schedule
    # -------------------------------------------------------------------------

    def cool(self, temperature: float) -> float:
        """Temperature of the iteration following one run at ``temperature``."""
        return max(self._min_temperature, temperature * self._cooling_factor)

    def temperature_after(self, iterations: int) -> float:
        """
        Temperature in effect after ``iterations`` cooling steps.

        This is the cap on vertex movement during iteration ``iterations``
        (zero-based).
        """
        temperature = self._initial_temperature
        for _ in range(iterations):
            temperature = self.cool(temperature)
        return temperature


__all__ = [
    "BaseLayout",
    "IterativeLayout",
]
