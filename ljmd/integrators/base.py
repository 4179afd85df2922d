"""Base interface for integrators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..system import ParticleSystem


class Integrator(ABC):
    """
    Abstract base class for time integration algorithms.

    Integrators advance a particle system forward in time, in place,
    one step per call.
    """

    @abstractmethod
    def integrate(self, system: ParticleSystem) -> None:
        """
        Advance the system by one time step.

        Args:
            system: Particle system, modified in place.
        """
        ...

    @property
    @abstractmethod
    def timestep(self) -> float:
        """Return the integration timestep."""
        ...
