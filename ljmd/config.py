"""
Simulation configuration.

Configurations are plain dataclasses that can be loaded from JSON or
YAML files. Every field has a default that describes a small, stable
Lennard-Jones FCC crystal in reduced units.

Example YAML:
    n_cells: 4
    lattice_constant: 1.5874
    temperature: 0.05
    dt: 0.002
    strategy: neighbor
    rebuild: displacement
"""

from __future__ import annotations

import json
import math
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

import yaml

from .errors import InvalidCellGeometry
from .forcefields.forcefield import STRATEGIES
from .forcefields.strategies import REBUILD_POLICIES
from .neighborlists.cell import MIN_CELLS_PER_EDGE

BACKENDS = ("serial", "threads")

INT_FIELDS = ("n_cells", "n_steps", "seed", "sample_every")
OPTIONAL_INT_FIELDS = ("n_workers", "capacity")
FLOAT_FIELDS = (
    "lattice_constant",
    "temperature",
    "dt",
    "epsilon",
    "sigma",
    "r_cut",
    "skin",
)
STRING_FIELDS = ("strategy", "rebuild", "backend")


@dataclass
class SimulationConfig:
    """
    Parameters for a Lennard-Jones crystal simulation.

    Attributes:
        n_cells: FCC conventional cells per box edge (4 * n_cells^3 particles).
        lattice_constant: FCC lattice constant; 2^(2/3) puts nearest
            neighbors at the pair potential minimum for sigma = 1.
        temperature: Initial reduced temperature.
        dt: Integration timestep.
        n_steps: Number of steps to run.
        epsilon: LJ well depth.
        sigma: LJ length scale.
        r_cut: LJ cutoff.
        skin: Neighbor list skin.
        strategy: Force strategy: all_pairs, cell or neighbor.
        rebuild: Neighbor list rebuild policy: always or displacement.
        reciprocal: Store neighbor pairs at both endpoints.
        backend: Parallel backend: serial or threads.
        n_workers: Worker count for the threads backend.
        seed: Random seed for initial velocities.
        sample_every: Record energies every this many steps.
        capacity: Particle capacity; defaults to the lattice size.
    """

    n_cells: int = 4
    lattice_constant: float = 1.5874
    temperature: float = 0.05
    dt: float = 0.002
    n_steps: int = 1000
    epsilon: float = 1.0
    sigma: float = 1.0
    r_cut: float = 2.4
    skin: float = 0.3
    strategy: str = "all_pairs"
    rebuild: str = "always"
    reciprocal: bool = True
    backend: str = "serial"
    n_workers: int | None = None
    seed: int = 42
    sample_every: int = 10
    capacity: int | None = None

    @property
    def n_particles(self) -> int:
        """Number of particles in the lattice."""
        return 4 * self.n_cells**3

    @property
    def box_size(self) -> float:
        """Box edge length implied by the lattice."""
        return self.n_cells * self.lattice_constant

    def validate(self) -> SimulationConfig:
        """
        Check parameter ranges and names.

        Returns:
            self, so calls can be chained.

        Raises:
            ValueError: If any parameter is invalid.
        """
        self._check_types()
        if self.n_cells < 1:
            raise ValueError(f"n_cells must be >= 1, got {self.n_cells}")
        for label in ("lattice_constant", "dt", "epsilon", "sigma", "r_cut"):
            value = getattr(self, label)
            if not value > 0:
                raise ValueError(f"{label} must be positive, got {value}")
        if self.temperature < 0:
            raise ValueError(f"temperature must be >= 0, got {self.temperature}")
        if self.skin < 0:
            raise ValueError(f"skin must be >= 0, got {self.skin}")
        if self.n_steps < 0:
            raise ValueError(f"n_steps must be >= 0, got {self.n_steps}")
        if self.sample_every < 1:
            raise ValueError(f"sample_every must be >= 1, got {self.sample_every}")
        if self.strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown strategy: {self.strategy}. Available: "
                + ", ".join(STRATEGIES)
            )
        if self.rebuild not in REBUILD_POLICIES:
            raise ValueError(
                f"Unknown rebuild policy: {self.rebuild}. Available: "
                + ", ".join(REBUILD_POLICIES)
            )
        if self.backend not in BACKENDS:
            raise ValueError(
                f"Unknown backend: {self.backend}. Available: " + ", ".join(BACKENDS)
            )
        if self.capacity is not None and self.capacity < 0:
            raise ValueError(f"capacity must be >= 0, got {self.capacity}")
        if self.r_cut > 0.5 * self.box_size:
            raise ValueError(
                f"r_cut {self.r_cut} exceeds half the box length {self.box_size}"
            )
        if self.strategy != "all_pairs":
            cell_cutoff = self.r_cut
            if self.strategy == "neighbor":
                cell_cutoff += self.skin
            n = int(math.floor(self.box_size / cell_cutoff))
            if n < MIN_CELLS_PER_EDGE:
                raise InvalidCellGeometry(self.box_size, cell_cutoff, n)
        return self

    def _check_types(self) -> None:
        """Reject values of the wrong type, e.g. quoted booleans from YAML."""
        for label in INT_FIELDS + OPTIONAL_INT_FIELDS:
            value = getattr(self, label)
            if value is None and label in OPTIONAL_INT_FIELDS:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValueError(f"{label} must be an integer, got {value!r}")
        for label in FLOAT_FIELDS:
            value = getattr(self, label)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{label} must be a number, got {value!r}")
        for label in STRING_FIELDS:
            value = getattr(self, label)
            if not isinstance(value, str):
                raise ValueError(f"{label} must be a string, got {value!r}")
        if not isinstance(self.reciprocal, bool):
            raise ValueError(
                f"reciprocal must be true or false, got {self.reciprocal!r}"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SimulationConfig:
        """
        Build a validated config from a mapping.

        Raises:
            ValueError: On unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data).validate()

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary."""
        return asdict(self)


def load_config(path: str | Path) -> SimulationConfig:
    """
    Load a simulation configuration from a JSON or YAML file.

    Args:
        path: File ending in .json, .yaml or .yml.

    Returns:
        Validated SimulationConfig.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    with open(path) as f:
        if suffix == ".json":
            data = json.load(f)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported config format: {path.suffix}")

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return SimulationConfig.from_dict(data)
