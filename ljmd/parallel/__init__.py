"""Parallel execution of per-particle force work."""

from .backends.base import ParallelBackend, partition_range
from .backends.serial import SerialBackend
from .backends.threaded import ThreadPoolBackend
from .dispatcher import create_backend, get_backend

__all__ = [
    "ParallelBackend",
    "SerialBackend",
    "ThreadPoolBackend",
    "create_backend",
    "get_backend",
    "partition_range",
]
