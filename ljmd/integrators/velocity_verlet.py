"""Velocity Verlet integrator implementation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .base import Integrator

if TYPE_CHECKING:
    from ..forcefields import ForceField
    from ..system import ParticleSystem


class VelocityVerletIntegrator(Integrator):
    """
    Velocity Verlet integrator (kick-drift-kick formulation).

    The standard symplectic integrator for molecular dynamics with
    excellent energy conservation and time-reversibility.

    Algorithm:
        v(t + dt/2) = v(t) + 0.5 * dt * f(t) / m      # First kick
        r(t + dt) = wrap(r(t) + dt * v(t + dt/2))     # Drift
        f(t + dt) = force_field(r(t + dt))            # Forces
        v(t + dt) = v(t + dt/2) + 0.5 * dt * f(t+dt) / m  # Second kick

    The first kick uses whatever the force buffer holds, i.e. the forces
    from the previous step. Call prime() once before the first step so
    that buffer matches the initial positions.

    Positions are wrapped into the box with a single periodic shift, so
    no particle may travel more than one box length per step.

    Attributes:
        dt: Integration timestep.
        mass: Particle mass, shared by all particles.
        force_field: Force field evaluated once per step.
        step: Number of completed steps.
    """

    def __init__(self, dt: float, force_field: ForceField, mass: float = 1.0) -> None:
        """
        Initialize Velocity Verlet integrator.

        Args:
            dt: Integration timestep.
            force_field: Force field used to recompute forces.
            mass: Particle mass.
        """
        if not dt > 0:
            raise ValueError(f"dt must be positive, got {dt}")
        if not mass > 0:
            raise ValueError(f"mass must be positive, got {mass}")
        self.dt = float(dt)
        self.mass = float(mass)
        self.force_field = force_field
        self.step = 0

    @property
    def timestep(self) -> float:
        """Return the integration timestep."""
        return self.dt

    @property
    def time(self) -> float:
        """Return the elapsed simulation time."""
        return self.step * self.dt

    def prime(self, system: ParticleSystem) -> float:
        """
        Compute forces for the current positions without moving anything.

        Returns:
            Potential energy of the current configuration.
        """
        return self.force_field.compute(system)

    def half_kick(self, system: ParticleSystem) -> None:
        """Advance velocities by half a step using the current forces."""
        velocities = system.active_velocities
        velocities += system.active_forces / self.mass * (0.5 * self.dt)

    def drift(self, system: ParticleSystem) -> None:
        """Advance positions by a full step and wrap them into the box."""
        positions = system.active_positions
        positions += system.active_velocities * self.dt
        system.box.wrap(positions)

    def integrate(self, system: ParticleSystem) -> None:
        """
        Perform one complete kick-drift-force-kick step in place.

        Args:
            system: Particle system to advance.

        Raises:
            OutOfBoundsPosition: If a particle moved more than one box
                length in this step.
        """
        self.half_kick(system)
        self.drift(system)
        self.force_field.compute(system)
        self.half_kick(system)
        self.step += 1

    def reset(self) -> None:
        """Reset the step counter for a new simulation."""
        self.step = 0
