"""Base interface for force evaluation strategies."""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from ..parallel import ParallelBackend
    from ..system import Box, ParticleSystem
    from .lj import LennardJones


@dataclass
class ForceTimings:
    """
    Cumulative diagnostic counters for force evaluation.

    All times are wall-clock seconds. These are observability hooks only
    and never affect the computed forces.
    """

    cell_list_build: float = 0.0
    neighbor_list_build: float = 0.0
    force_evaluation: float = 0.0
    neighbor_list_builds: int = 0
    force_calls: int = 0

    def reset(self) -> None:
        """Zero all counters."""
        self.cell_list_build = 0.0
        self.neighbor_list_build = 0.0
        self.force_evaluation = 0.0
        self.neighbor_list_builds = 0
        self.force_calls = 0

    @property
    def total(self) -> float:
        """Total time spent in builds and force evaluation."""
        return self.cell_list_build + self.neighbor_list_build + self.force_evaluation


class ForceEvaluator(ABC):
    """
    Abstract base class for force evaluation strategies.

    Every strategy computes the same Lennard-Jones forces; they differ
    only in how candidate pairs are found. Subclasses implement
    ``_evaluate``; ``compute`` takes care of clearing the force buffer,
    the empty system and the diagnostic counters.

    Attributes:
        potential: Pair kernel shared with the owning force field.
        backend: Parallel backend used to split work by particle.
        timings: Diagnostic counters, usually shared with the force field.
    """

    name: str = "base"

    def __init__(
        self,
        potential: LennardJones,
        backend: ParallelBackend,
        timings: ForceTimings | None = None,
    ) -> None:
        self.potential = potential
        self.backend = backend
        self.timings = timings if timings is not None else ForceTimings()

    def compute(self, system: ParticleSystem) -> float:
        """
        Compute forces on all active particles of a system.

        The whole force buffer is zeroed first, including the slots of
        inactive particles beyond 3 * count.

        Args:
            system: Particle system; its force buffer is overwritten.

        Returns:
            Total potential energy.
        """
        system.forces.fill(0.0)
        self.timings.force_calls += 1
        if system.count == 0:
            return 0.0
        return float(
            self._evaluate(system.active_positions, system.box, system.active_forces)
        )

    @abstractmethod
    def _evaluate(
        self,
        positions: NDArray[np.floating],
        box: Box,
        forces: NDArray[np.floating],
    ) -> float:
        """
        Accumulate forces for a non-empty system.

        Args:
            positions: Active positions, shape (N, 3).
            box: Simulation box.
            forces: Zeroed force view to fill, shape (N, 3).

        Returns:
            Total potential energy.
        """
        ...

    def _timed_kernel(self, func, *args) -> float:
        """Run a kernel call and add its duration to force_evaluation."""
        start = time.perf_counter()
        try:
            return func(*args)
        finally:
            self.timings.force_evaluation += time.perf_counter() - start
