"""Lattice generators that produce starting configurations."""

from __future__ import annotations

import numpy as np
from numpy.typing import NDArray

# Fractional coordinates of the four atoms in the conventional FCC cell
FCC_BASIS = np.array(
    [
        [0.0, 0.0, 0.0],
        [0.5, 0.5, 0.0],
        [0.5, 0.0, 0.5],
        [0.0, 0.5, 0.5],
    ]
)


def fcc_particle_count(n_cells: int) -> int:
    """Return the number of particles in an n_cells^3 FCC block."""
    return 4 * n_cells**3


def fcc_positions(
    n_cells: int, lattice_constant: float, offset: float = 0.0
) -> NDArray[np.floating]:
    """
    Generate face-centered cubic lattice positions.

    Cells are enumerated with x slowest and z fastest, four basis atoms
    per cell, so particle 4*(i*n^2 + j*n + k) + l sits in cell (i, j, k).

    Args:
        n_cells: Number of conventional cells along each edge.
        lattice_constant: Edge length of one conventional cell.
        offset: Constant shift added to every coordinate.

    Returns:
        Positions array of shape (4 * n_cells^3, 3).
    """
    if n_cells < 0:
        raise ValueError(f"n_cells must be >= 0, got {n_cells}")
    if lattice_constant <= 0:
        raise ValueError(f"lattice_constant must be positive, got {lattice_constant}")

    idx = np.arange(n_cells)
    cells = np.stack(np.meshgrid(idx, idx, idx, indexing="ij"), axis=-1).reshape(-1, 3)
    positions = (cells[:, np.newaxis, :] + FCC_BASIS[np.newaxis, :, :]).reshape(-1, 3)
    return positions * lattice_constant + offset
