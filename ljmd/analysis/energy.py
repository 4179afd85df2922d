"""Energy analysis."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from ..system import ParticleSystem


class EnergyAnalyzer:
    """
    Energy and temperature analyzer.

    Records a time series of:
    - Kinetic energy
    - Potential energy
    - Total energy
    - Temperature

    and summarizes energy conservation (drift).
    """

    def __init__(self, mass: float = 1.0) -> None:
        """Initialize energy analyzer."""
        self.mass = mass
        self.reset()

    @property
    def n_frames(self) -> int:
        """Number of recorded frames."""
        return len(self._total)

    def reset(self) -> None:
        """Reset statistics."""
        self._kinetic: list[float] = []
        self._potential: list[float] = []
        self._total: list[float] = []
        self._temperature: list[float] = []
        self._times: list[float] = []

    def update(
        self, system: ParticleSystem, potential_energy: float, time: float | None = None
    ) -> None:
        """
        Record one frame.

        Args:
            system: Current particle system.
            potential_energy: Potential energy of the current positions.
            time: Simulation time; defaults to the frame number.
        """
        ke = system.kinetic_energy(self.mass)
        self._kinetic.append(ke)
        self._potential.append(float(potential_energy))
        self._total.append(ke + float(potential_energy))
        self._temperature.append(system.temperature(self.mass))
        self._times.append(float(self.n_frames - 1) if time is None else float(time))

    def result(self) -> dict[str, Any]:
        """
        Get energy statistics.

        Returns:
            Dictionary with energy arrays and statistics.
        """
        kinetic = np.array(self._kinetic)
        potential = np.array(self._potential)
        total = np.array(self._total)
        temperature = np.array(self._temperature)
        times = np.array(self._times)

        results: dict[str, Any] = {
            "time": times,
            "kinetic": kinetic,
            "potential": potential,
            "total": total,
            "temperature": temperature,
            "n_frames": self.n_frames,
        }

        if self.n_frames > 0:
            results.update(
                {
                    "kinetic_mean": float(np.mean(kinetic)),
                    "potential_mean": float(np.mean(potential)),
                    "total_mean": float(np.mean(total)),
                    "total_std": float(np.std(total)),
                    "temperature_mean": float(np.mean(temperature)),
                    "relative_drift": relative_drift(total),
                }
            )

            if self.n_frames > 1:
                # Linear fit to total energy
                slope, _ = np.polyfit(times, total, 1)
                results["energy_drift_per_time"] = float(slope)

        return results

    @property
    def total_energy(self) -> NDArray[np.floating]:
        """Total energy array."""
        return np.array(self._total)


def relative_drift(total: NDArray[np.floating]) -> float:
    """
    Largest deviation of total energy from its initial value, relative to it.

    Returns 0.0 for empty series or a zero initial energy.
    """
    total = np.asarray(total, dtype=np.float64)
    if len(total) == 0 or total[0] == 0.0:
        return 0.0
    return float(np.max(np.abs(total - total[0])) / abs(total[0]))
