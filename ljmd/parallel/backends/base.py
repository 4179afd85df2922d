"""Abstract base class for parallel backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from typing import Any


def partition_range(n_items: int, n_chunks: int) -> list[tuple[int, int]]:
    """
    Split [0, n_items) into contiguous, near-equal ranges.

    The first n_items % n_chunks ranges receive one extra item. Empty
    ranges are dropped, so fewer than n_chunks ranges may be returned.

    Args:
        n_items: Total number of items.
        n_chunks: Number of ranges to produce.

    Returns:
        List of (start, end) tuples covering [0, n_items) in order.
    """
    n_chunks = max(1, n_chunks)
    per_chunk = n_items // n_chunks
    remainder = n_items % n_chunks

    ranges = []
    for rank in range(n_chunks):
        if rank < remainder:
            start = rank * (per_chunk + 1)
            end = start + per_chunk + 1
        else:
            start = rank * per_chunk + remainder
            end = start + per_chunk
        if end > start:
            ranges.append((start, end))
    return ranges


class ParallelBackend(ABC):
    """
    Abstract base class for parallelization backends.

    Force evaluation goes through this interface, allowing transparent
    switching between serial and threaded execution. Work is split by
    particle index so that each task owns a disjoint range of force rows.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return backend name."""
        ...

    @property
    @abstractmethod
    def n_workers(self) -> int:
        """Return number of parallel workers."""
        ...

    @abstractmethod
    def parallel_map(
        self,
        func: Callable[[Any], Any],
        items: Sequence[Any],
    ) -> list[Any]:
        """
        Apply function to items, possibly concurrently.

        Args:
            func: Function to apply.
            items: Items to process.

        Returns:
            Results for each item, in input order.
        """
        ...

    def partition(self, n_items: int) -> list[tuple[int, int]]:
        """Split [0, n_items) into one range per worker."""
        return partition_range(n_items, self.n_workers)

    def close(self) -> None:
        """Release any worker resources."""

    def __enter__(self) -> ParallelBackend:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
