"""
Execution devices for the data-parallel engine.

A device owns the long-lived compute resources of an engine: its worker pool
or compiled kernels, and a pool of reusable buffers. ``dispatch`` runs one
kernel over a global work size and returns once every work unit finished,
which gives the strict ordering between kernel stages.

Backends:
- ``threads``: numpy kernels split into work groups and run on a
  ThreadPoolExecutor (numpy releases the GIL inside its loops)
- ``numba``: kernels compiled with ``numba`` and run as parallel loops
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional

import numpy as np

from ..engine import BackendInitializationError, EngineClosedError
from . import kernels

logger = logging.getLogger(__name__)

# Work units per dispatched task for the thread backend.
DEFAULT_WORK_GROUP_SIZE = 256

KERNEL_NAMES = ("zero", "repulsion", "attraction", "summation", "update")


class BufferPool:
    """
    Grow-only pool of named flat arrays.

    ``acquire`` hands out a zeroed view of the requested length, reusing the
    backing array when it is large enough. Views must not be used after
    ``release``.
    """

    def __init__(self) -> None:
        self._arrays: dict[str, np.ndarray] = {}
        self._in_use = False

    def acquire(self, name: str, length: int, dtype: Any) -> np.ndarray:
        dtype = np.dtype(dtype)
        backing = self._arrays.get(name)
        if backing is None or backing.dtype != dtype or len(backing) < length:
            backing = np.zeros(max(length, 1), dtype=dtype)
            self._arrays[name] = backing
        view = backing[:length]
        view.fill(0)
        self._in_use = True
        return view

    def release(self) -> None:
        """Mark all views as returned; the backing arrays are kept."""
        self._in_use = False

    def clear(self) -> None:
        """Drop every backing array."""
        self._arrays.clear()
        self._in_use = False

    @property
    def in_use(self) -> bool:
        return self._in_use

    @property
    def nbytes(self) -> int:
        return sum(a.nbytes for a in self._arrays.values())


class ComputeDevice(ABC):
    """Abstract device: kernel dispatch plus buffer pool."""

    backend: str = "abstract"

    def __init__(self, dtype: Any = np.float32) -> None:
        self._dtype = np.dtype(dtype)
        self._buffers = BufferPool()
        self._released = False

    @property
    def dtype(self) -> np.dtype:
        return self._dtype

    @property
    def buffers(self) -> BufferPool:
        return self._buffers

    @property
    def released(self) -> bool:
        return self._released

    @abstractmethod
    def _run(self, kernel: str, global_size: int, args: tuple[Any, ...]) -> None:
        pass

    def dispatch(self, kernel: str, global_size: int, *args: Any) -> None:
        """
        Run ``kernel`` over ``range(global_size)`` and wait for completion.

        Raises:
            EngineClosedError: If the device was released.
            KeyError: If the kernel name is unknown.
        """
        if self._released:
            raise EngineClosedError(f"{type(self).__name__} was released")
        if kernel not in KERNEL_NAMES:
            raise KeyError(f"Unknown kernel {kernel!r}")
        if global_size <= 0:
            return
        self._run(kernel, int(global_size), args)

    def finish(self) -> None:
        """Block until all dispatched work is visible to the host."""
        pass

    def _teardown(self) -> None:
        pass

    def release(self) -> None:
        """Release the device. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        self._buffers.clear()
        self._teardown()
        logger.debug("Released %s device", self.backend)


class ThreadPoolDevice(ComputeDevice):
    """
    Numpy kernels run in work groups on a thread pool.

    Example:
        device = ThreadPoolDevice(workers=4)
        device.dispatch("zero", len(buf), buf)
        device.release()
    """

    backend = "threads"

    def __init__(
        self,
        dtype: Any = np.float32,
        workers: Optional[int] = None,
        work_group_size: int = DEFAULT_WORK_GROUP_SIZE,
    ) -> None:
        super().__init__(dtype)
        if workers is None:
            workers = min(32, os.cpu_count() or 1)
        if workers < 1:
            raise BackendInitializationError(f"workers must be >= 1, got {workers}")
        if work_group_size < 1:
            raise BackendInitializationError(
                f"work_group_size must be >= 1, got {work_group_size}"
            )
        self._kernels: dict[str, Callable[..., None]] = {
            name: kernels.KERNELS[name] for name in KERNEL_NAMES
        }
        self._workers = int(workers)
        self._work_group_size = int(work_group_size)
        self._executor: Optional[ThreadPoolExecutor] = ThreadPoolExecutor(
            max_workers=self._workers, thread_name_prefix="spring-embedder"
        )
        logger.info(
            "Initialized threads device: %d workers, work group size %d, %s",
            self._workers,
            self._work_group_size,
            self._dtype.name,
        )

    @property
    def workers(self) -> int:
        return self._workers

    @property
    def work_group_size(self) -> int:
        return self._work_group_size

    def _run(self, kernel: str, global_size: int, args: tuple[Any, ...]) -> None:
        func = self._kernels[kernel]
        step = self._work_group_size
        ranges = [(lo, min(lo + step, global_size)) for lo in range(0, global_size, step)]

        if len(ranges) == 1 or self._workers == 1:
            for lo, hi in ranges:
                func(lo, hi, *args)
            return

        assert self._executor is not None
        futures = [self._executor.submit(func, lo, hi, *args) for lo, hi in ranges]
        # Barrier: every work group must finish before the next stage.
        for future in futures:
            future.result()

    def _teardown(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


class NumbaDevice(ComputeDevice):
    """Kernels compiled with numba and run as parallel loops."""

    backend = "numba"

    def __init__(self, dtype: Any = np.float32) -> None:
        super().__init__(dtype)
        try:
            from . import numba_kernels

            self._kernels = numba_kernels.compile_kernels(self._dtype)
        except Exception as exc:
            raise BackendInitializationError(
                f"Failed to initialize numba backend: {exc}"
            ) from exc
        logger.info("Initialized numba device (%s)", self._dtype.name)

    def _run(self, kernel: str, global_size: int, args: tuple[Any, ...]) -> None:
        self._kernels[kernel](0, global_size, *args)

    def _teardown(self) -> None:
        self._kernels = {}


def create_device(backend: str = "threads", **options: Any) -> ComputeDevice:
    """
    Create a compute device.

    Args:
        backend: ``"threads"`` or ``"numba"``
        **options: Passed to the device constructor

    Raises:
        BackendInitializationError: If the backend is unknown or fails to start.
    """
    devices: dict[str, Callable[..., ComputeDevice]] = {
        ThreadPoolDevice.backend: ThreadPoolDevice,
        NumbaDevice.backend: NumbaDevice,
    }
    factory = devices.get(backend)
    if factory is None:
        raise BackendInitializationError(
            f"Unknown backend {backend!r}, expected one of {sorted(devices)}"
        )
    return factory(**options)


__all__ = [
    "DEFAULT_WORK_GROUP_SIZE",
    "KERNEL_NAMES",
    "BufferPool",
    "ComputeDevice",
    "ThreadPoolDevice",
    "NumbaDevice",
    "create_device",
]
