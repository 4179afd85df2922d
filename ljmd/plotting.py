"""
Plotting utilities for simulation results.

Example:
    >>> from ljmd import simulate, plotting
    >>> result = simulate.lj_crystal(n_cells=3)
    >>> plotting.energy(result)
    >>> plotting.save("energy.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import matplotlib.pyplot as plt

if TYPE_CHECKING:
    from matplotlib.figure import Figure

    from .simulate import SimulationResult


def energy(
    result: SimulationResult,
    show: bool = False,
    figsize: tuple[float, float] = (10, 4),
) -> Figure:
    """
    Plot energy time series and relative energy error.

    Args:
        result: SimulationResult from a simulation.
        show: Whether to display the plot immediately.
        figsize: Figure size (width, height) in inches.

    Returns:
        The matplotlib figure.
    """
    fig, axes = plt.subplots(1, 2, figsize=figsize)
    times = result.time

    ax = axes[0]
    ax.plot(times, result.kinetic_energy, "b-", label="Kinetic", alpha=0.7, lw=0.8)
    ax.plot(times, result.potential_energy, "r-", label="Potential", alpha=0.7, lw=0.8)
    ax.plot(times, result.total_energy, "k-", label="Total", lw=1.5)
    ax.set_xlabel("Time (τ)")
    ax.set_ylabel("Energy (ε)")
    ax.set_title(f"Energy vs Time (N={result.n_particles})")
    ax.legend()
    ax.grid(True, alpha=0.3)

    ax = axes[1]
    if len(result.total_energy) > 0 and result.total_energy[0] != 0:
        e0 = result.total_energy[0]
        ax.plot(times, (result.total_energy - e0) / abs(e0) * 100, "k-", lw=1)
        ax.axhline(y=0, color="r", linestyle="--", alpha=0.5)
    ax.set_xlabel("Time (τ)")
    ax.set_ylabel("Relative Energy Error (%)")
    ax.set_title(f"Energy Conservation (drift: {result.energy_drift:.2e})")
    ax.grid(True, alpha=0.3)

    fig.tight_layout()
    if show:
        plt.show()
    return fig


def save(filename: str | Path, dpi: int = 150) -> None:
    """
    Save the current figure to file.

    Args:
        filename: Output filename (png, pdf, svg, etc.)
        dpi: Resolution for raster formats.
    """
    plt.savefig(filename, dpi=dpi, bbox_inches="tight")
    plt.close()
