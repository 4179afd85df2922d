"""Cubic periodic simulation box."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import OutOfBoundsPosition


@dataclass(frozen=True)
class Box:
    """
    Cubic simulation box with periodic boundaries on every axis.

    The primary image spans [0, length) along x, y and z.

    Attributes:
        length: Box edge length L.
    """

    length: float

    def __post_init__(self) -> None:
        """Validate edge length."""
        length = float(self.length)
        if not np.isfinite(length) or length < 0.0:
            raise ValueError(f"Box length must be finite and >= 0, got {self.length}")
        # Use object.__setattr__ since dataclass is frozen
        object.__setattr__(self, "length", length)

    @classmethod
    def cubic(cls, length: float) -> Box:
        """Create a cubic box with given side length."""
        return cls(length)

    @property
    def volume(self) -> float:
        """Return box volume."""
        return self.length**3

    def minimum_image(self, delta: ArrayLike) -> NDArray[np.floating]:
        """
        Fold displacement vectors onto their nearest periodic image.

        Each component is folded once: components above L/2 have L
        subtracted, components below -L/2 have L added. Inputs are
        assumed to come from positions inside the primary box, so a
        single fold is always enough.

        Args:
            delta: Raw displacement(s) r_i - r_j, any shape ending in 3.

        Returns:
            Minimum-image displacement(s) with the same shape.
        """
        delta = np.array(delta, dtype=np.float64)
        half = 0.5 * self.length
        delta -= self.length * (delta > half)
        delta += self.length * (delta < -half)
        return delta

    def minimum_image_distance(
        self, r1: ArrayLike, r2: ArrayLike
    ) -> float | NDArray[np.floating]:
        """
        Compute minimum image distance between positions.

        Args:
            r1: First position(s), shape (3,) or (N, 3).
            r2: Second position(s), shape (3,) or (N, 3).

        Returns:
            Distance(s) under minimum image convention.
        """
        dr = self.minimum_image(np.asarray(r1) - np.asarray(r2))
        return np.linalg.norm(dr, axis=-1)

    def wrap(self, positions: NDArray[np.floating]) -> None:
        """
        Wrap positions into [0, L) in place with a single periodic shift.

        A coordinate below zero gains L, and one at or above L loses L.
        The shifts run in that order so a tiny negative coordinate that
        rounds to exactly L is brought back to 0. Coordinates that
        remain outside the box moved more than one box length in a
        single step, which is reported rather than looped over.

        Args:
            positions: Positions array of shape (N, 3), modified in place.

        Raises:
            OutOfBoundsPosition: If any coordinate is still outside the box.
        """
        length = self.length
        positions[positions < 0.0] += length
        positions[positions >= length] -= length
        self.check_inside(positions)

    def check_inside(self, positions: NDArray[np.floating]) -> None:
        """Raise OutOfBoundsPosition if any position lies outside [0, L)."""
        inside = (positions >= 0.0) & (positions < self.length)
        outside = ~np.all(inside, axis=-1)
        if np.any(outside):
            raise OutOfBoundsPosition(np.flatnonzero(outside), self.length)
