"""
ljmd - Lennard-Jones molecular dynamics in a periodic cubic box.

Particles start on an FCC lattice and are advanced with velocity Verlet.
Forces come from one of three interchangeable strategies: all pairs,
cell list, or neighbor list built from a cell list.

Quick Start:
    >>> from ljmd import simulate
    >>> result = simulate.lj_crystal(n_cells=4, n_steps=1000)
    >>> print(f"Relative energy drift: {result.energy_drift:.2e}")
"""

__version__ = "0.1.0"

from . import plotting, simulate
from .config import SimulationConfig, load_config
from .errors import (
    CapacityExceeded,
    InvalidCellGeometry,
    OutOfBoundsPosition,
    SimulationError,
)
from .forcefields import ForceField
from .integrators import VelocityVerletIntegrator
from .logging_config import setup_logging
from .neighborlists import CellList, NeighborList
from .system import Box, ParticleSystem

__all__ = [
    "simulate",
    "plotting",
    "Box",
    "ParticleSystem",
    "ForceField",
    "VelocityVerletIntegrator",
    "CellList",
    "NeighborList",
    "SimulationConfig",
    "load_config",
    "setup_logging",
    "SimulationError",
    "CapacityExceeded",
    "InvalidCellGeometry",
    "OutOfBoundsPosition",
]
