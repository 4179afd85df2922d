"""Particle storage for the simulation core."""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import CapacityExceeded
from .box import Box
from .lattice import fcc_particle_count, fcc_positions

logger = logging.getLogger(__name__)


class ParticleSystem:
    """
    Fixed-capacity particle arrays in a cubic periodic box.

    Positions, velocities and forces are flat float64 buffers of length
    3 * capacity with x, y, z interleaved per particle. They are
    allocated once and never resized; only the leading 3 * count
    entries describe active particles. Renderers and lattice builders
    may read or write the buffers directly.

    Attributes:
        capacity: Number of particle slots, fixed at construction.
        count: Number of active particles.
        size: Cubic box edge length L.
        positions: Flat position buffer, shape (3 * capacity,).
        velocities: Flat velocity buffer, shape (3 * capacity,).
        forces: Flat force buffer, shape (3 * capacity,).
    """

    def __init__(self, capacity: int, size: float = 0.0) -> None:
        """
        Allocate particle buffers.

        Args:
            capacity: Maximum number of particles.
            size: Initial box edge length.
        """
        if capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {capacity}")
        self.capacity = int(capacity)
        self.count = 0
        self.size = float(Box(size).length)

        self.positions: NDArray[np.floating] = np.zeros(3 * self.capacity)
        self.velocities: NDArray[np.floating] = np.zeros(3 * self.capacity)
        self.forces: NDArray[np.floating] = np.zeros(3 * self.capacity)

    def __repr__(self) -> str:
        return (
            f"ParticleSystem(count={self.count}, capacity={self.capacity}, "
            f"size={self.size})"
        )

    @property
    def box(self) -> Box:
        """Return the simulation box."""
        return Box(self.size)

    @property
    def active_positions(self) -> NDArray[np.floating]:
        """Writable (count, 3) view of active positions."""
        return self.positions[: 3 * self.count].reshape(self.count, 3)

    @property
    def active_velocities(self) -> NDArray[np.floating]:
        """Writable (count, 3) view of active velocities."""
        return self.velocities[: 3 * self.count].reshape(self.count, 3)

    @property
    def active_forces(self) -> NDArray[np.floating]:
        """Writable (count, 3) view of active forces."""
        return self.forces[: 3 * self.count].reshape(self.count, 3)

    def place(
        self,
        positions: ArrayLike,
        size: float | None = None,
        velocities: ArrayLike | None = None,
    ) -> None:
        """
        Replace the active particles with a new configuration.

        Everything is validated before any buffer is touched, so a
        failed placement leaves the system exactly as it was. Velocities
        and forces of the new particles start at zero unless given.

        Args:
            positions: New positions, shape (N, 3).
            size: New box edge length; keeps the current one if None.
            velocities: Optional velocities, shape (N, 3).

        Raises:
            CapacityExceeded: If N exceeds capacity.
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        n = len(positions)
        if n > self.capacity:
            raise CapacityExceeded(n, self.capacity)

        new_size = self.size if size is None else Box(size).length
        if velocities is not None:
            velocities = np.asarray(velocities, dtype=np.float64).reshape(-1, 3)
            if velocities.shape != positions.shape:
                raise ValueError(
                    f"velocities shape {velocities.shape} incompatible with "
                    f"{n} particles"
                )

        self.positions.fill(0.0)
        self.velocities.fill(0.0)
        self.forces.fill(0.0)
        self.count = n
        self.size = new_size
        self.active_positions[:] = positions
        if velocities is not None:
            self.active_velocities[:] = velocities

        logger.debug("Placed %d particles in box of size %g", n, new_size)

    def place_fcc(
        self, n_cells: int, lattice_constant: float, offset: float = 0.0
    ) -> None:
        """
        Fill the box with an FCC lattice of n_cells^3 conventional cells.

        The box edge becomes n_cells * lattice_constant.

        Raises:
            CapacityExceeded: If 4 * n_cells^3 exceeds capacity.
        """
        needed = fcc_particle_count(n_cells)
        if needed > self.capacity:
            raise CapacityExceeded(needed, self.capacity)
        self.place(
            fcc_positions(n_cells, lattice_constant, offset),
            size=n_cells * lattice_constant,
        )

    def kinetic_energy(self, mass: float = 1.0) -> float:
        """Compute total kinetic energy: sum(0.5 * m * v^2)."""
        return float(0.5 * mass * np.sum(self.active_velocities**2))

    def temperature(self, mass: float = 1.0) -> float:
        """
        Instantaneous temperature in reduced units (k_B = 1).

        Uses N_dof = 3N - 3; returns 0 if N <= 1.
        """
        if self.count <= 1:
            return 0.0
        return 2.0 * self.kinetic_energy(mass) / (3 * self.count - 3)

    def remove_drift(self) -> None:
        """Subtract the center-of-mass velocity from all active particles."""
        if self.count == 0:
            return
        velocities = self.active_velocities
        velocities -= velocities.mean(axis=0)
