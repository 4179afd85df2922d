"""
Simple high-level simulation API.

This module wires a lattice, a force field and the integrator together
from a SimulationConfig and records an energy time series.

Example:
    >>> from ljmd import simulate
    >>> result = simulate.lj_crystal(n_cells=3, n_steps=200)
    >>> print(f"Energy drift: {result.energy_drift:.2e}")
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field

import numpy as np
from numpy.typing import NDArray

from .analysis import EnergyAnalyzer
from .config import SimulationConfig
from .forcefields import ForceField, ForceTimings
from .integrators import VelocityVerletIntegrator
from .parallel import create_backend
from .system import ParticleSystem

logger = logging.getLogger(__name__)


@dataclass
class SimulationResult:
    """Results from a simulation run."""

    # Energy time series
    time: NDArray[np.floating] = field(default_factory=lambda: np.array([]))
    kinetic_energy: NDArray[np.floating] = field(default_factory=lambda: np.array([]))
    potential_energy: NDArray[np.floating] = field(default_factory=lambda: np.array([]))
    total_energy: NDArray[np.floating] = field(default_factory=lambda: np.array([]))
    temperature: NDArray[np.floating] = field(default_factory=lambda: np.array([]))

    # Final configuration, shape (N, 3)
    positions: NDArray[np.floating] = field(default_factory=lambda: np.empty((0, 3)))
    velocities: NDArray[np.floating] = field(default_factory=lambda: np.empty((0, 3)))

    # Summary statistics
    mean_temperature: float = 0.0
    energy_drift: float = 0.0

    # Performance
    wall_time: float = 0.0
    steps_per_second: float = 0.0
    timings: ForceTimings = field(default_factory=ForceTimings)

    # Metadata
    n_particles: int = 0
    n_steps: int = 0
    timestep: float = 0.0
    box_size: float = 0.0
    strategy: str = ""


def _rescale_velocities(system: ParticleSystem, target_temp: float) -> None:
    """Rescale active velocities in place to a target temperature."""
    current_temp = system.temperature()
    if current_temp > 0:
        system.active_velocities[:] *= np.sqrt(target_temp / current_temp)


def build_system(config: SimulationConfig) -> ParticleSystem:
    """
    Create an FCC crystal with Maxwell-Boltzmann velocities.

    Velocities are drawn from a seeded generator, stripped of
    center-of-mass motion and rescaled to the configured temperature.
    """
    capacity = config.n_particles if config.capacity is None else config.capacity
    system = ParticleSystem(capacity)
    system.place_fcc(config.n_cells, config.lattice_constant)

    if config.temperature > 0 and system.count > 1:
        rng = np.random.default_rng(config.seed)
        system.active_velocities[:] = rng.normal(
            0.0, np.sqrt(config.temperature), (system.count, 3)
        )
        system.remove_drift()
        _rescale_velocities(system, config.temperature)
    return system


def build_force_field(config: SimulationConfig) -> ForceField:
    """Create the force field described by a config."""
    if config.backend == "threads":
        backend = create_backend("threads", n_workers=config.n_workers)
    else:
        backend = create_backend("serial")
    return ForceField(
        epsilon=config.epsilon,
        sigma=config.sigma,
        r_cut=config.r_cut,
        strategy=config.strategy,
        skin=config.skin,
        reciprocal=config.reciprocal,
        rebuild=config.rebuild,
        backend=backend,
    )


def run(config: SimulationConfig) -> SimulationResult:
    """
    Run an NVE simulation of a Lennard-Jones FCC crystal.

    Args:
        config: Simulation parameters.

    Returns:
        SimulationResult with energy time series and final configuration.
    """
    config.validate()
    system = build_system(config)
    force_field = build_force_field(config)
    integrator = VelocityVerletIntegrator(dt=config.dt, force_field=force_field)
    analyzer = EnergyAnalyzer()

    logger.info(
        "LJ crystal: N=%d, L=%.4f, T*=%g, strategy=%s, backend=%s",
        system.count,
        system.size,
        config.temperature,
        force_field.strategy,
        force_field.backend.name,
    )

    report_every = max(1, config.n_steps // 10)
    start = time.perf_counter()
    try:
        potential_energy = integrator.prime(system)
        analyzer.update(system, potential_energy, time=0.0)

        for step in range(1, config.n_steps + 1):
            integrator.integrate(system)
            if step % config.sample_every == 0 or step == config.n_steps:
                analyzer.update(
                    system, force_field.potential_energy, time=integrator.time
                )
            if step % report_every == 0:
                logger.info(
                    "step %d/%d  E_total=%.6f  T=%.4f",
                    step,
                    config.n_steps,
                    system.kinetic_energy() + force_field.potential_energy,
                    system.temperature(),
                )
    finally:
        force_field.close()
    wall_time = time.perf_counter() - start

    stats = analyzer.result()
    result = SimulationResult(
        time=stats["time"],
        kinetic_energy=stats["kinetic"],
        potential_energy=stats["potential"],
        total_energy=stats["total"],
        temperature=stats["temperature"],
        positions=system.active_positions.copy(),
        velocities=system.active_velocities.copy(),
        mean_temperature=stats.get("temperature_mean", 0.0),
        energy_drift=stats.get("relative_drift", 0.0),
        wall_time=wall_time,
        steps_per_second=config.n_steps / wall_time if wall_time > 0 else 0.0,
        timings=force_field.timings,
        n_particles=system.count,
        n_steps=config.n_steps,
        timestep=config.dt,
        box_size=system.size,
        strategy=force_field.strategy,
    )

    logger.info(
        "Finished %d steps in %.2f s; relative energy drift %.3e",
        config.n_steps,
        wall_time,
        result.energy_drift,
    )
    return result


def lj_crystal(**kwargs) -> SimulationResult:
    """
    Run a Lennard-Jones crystal simulation from keyword parameters.

    Accepts any SimulationConfig field as a keyword argument.

    Example:
        >>> result = lj_crystal(n_cells=3, strategy="all_pairs", n_steps=100)
    """
    return run(SimulationConfig.from_dict(kwargs))
