"""Lennard-Jones pair kernel."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray


class LennardJones:
    """
    Truncated Lennard-Jones 12-6 potential for a single particle species.

    V(r) = 4 * epsilon * [(sigma/r)^12 - (sigma/r)^6]   for r < r_cut

    The force on particle i from particle j is ``force_scale(r^2) * delta``
    with ``delta = r_i - r_j`` under the minimum image convention, where

        force_scale = 24 * eps * sigma^6 / r^6 * (2 * sigma^6 / r^6 - 1) / r^2

    The potential is not shifted, so the energy jumps by V(r_cut) when a
    pair crosses the cutoff.

    Attributes:
        epsilon: Well depth.
        sigma: Length scale.
        r_cut: Cutoff distance.
    """

    def __init__(self, epsilon: float = 1.0, sigma: float = 1.0, r_cut: float = 2.5):
        for label, value in (("epsilon", epsilon), ("sigma", sigma), ("r_cut", r_cut)):
            if not value > 0:
                raise ValueError(f"{label} must be positive, got {value}")
        self.epsilon = float(epsilon)
        self.sigma = float(sigma)
        self.r_cut = float(r_cut)
        self.sigma6 = self.sigma**6
        self.r_cut_sq = self.r_cut**2

    def __repr__(self) -> str:
        return (
            f"LennardJones(epsilon={self.epsilon}, sigma={self.sigma}, "
            f"r_cut={self.r_cut})"
        )

    def force_scale(self, r_sq: ArrayLike) -> NDArray[np.floating]:
        """Return the factor multiplying delta, for squared distances r_sq."""
        one_over_dr2 = 1.0 / np.asarray(r_sq, dtype=np.float64)
        one_over_dr6 = one_over_dr2 * one_over_dr2 * one_over_dr2
        return (
            24.0
            * self.epsilon
            * self.sigma6
            * one_over_dr6
            * (2.0 * self.sigma6 * one_over_dr6 - 1.0)
            * one_over_dr2
        )

    def energy(self, r_sq: ArrayLike) -> NDArray[np.floating]:
        """Return the pair energy for squared distances r_sq."""
        one_over_dr2 = 1.0 / np.asarray(r_sq, dtype=np.float64)
        sr6 = self.sigma6 * one_over_dr2 * one_over_dr2 * one_over_dr2
        return 4.0 * self.epsilon * (sr6 * sr6 - sr6)

    def pair_terms(
        self, delta: NDArray[np.floating], mask: NDArray[np.bool_]
    ) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
        """
        Evaluate force vectors and energies for a batch of displacements.

        Entries outside ``mask`` or beyond the cutoff contribute nothing.

        Args:
            delta: Minimum-image displacements r_i - r_j, shape (..., 3).
            mask: Which entries are real pairs, shape delta.shape[:-1].

        Returns:
            Tuple of (force vectors on i, shape (..., 3); pair energies,
            shape (...)).
        """
        r_sq = np.einsum("...k,...k->...", delta, delta)
        within = mask & (r_sq < self.r_cut_sq)
        # Padding entries get r^2 = 1 so they never divide by zero
        safe_r_sq = np.where(within, r_sq, 1.0)
        scale = np.where(within, self.force_scale(safe_r_sq), 0.0)
        energy = np.where(within, self.energy(safe_r_sq), 0.0)
        return scale[..., np.newaxis] * delta, energy

    def pair_force(self, delta: ArrayLike) -> NDArray[np.floating]:
        """
        Force on i from j for one minimum-image displacement delta = r_i - r_j.

        Returns the zero vector beyond the cutoff.
        """
        delta = np.asarray(delta, dtype=np.float64)
        force, _ = self.pair_terms(delta, np.array(True))
        return force
