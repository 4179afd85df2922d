"""Per-particle neighbor list derived from a cell list."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..system.box import Box

if TYPE_CHECKING:
    from .cell import CellList

logger = logging.getLogger(__name__)

# Upper bound on candidate entries handled at once during a build
BLOCK_ELEMENTS = 1 << 20


def row_blocks(start: int, end: int, width: int) -> Iterator[tuple[int, int]]:
    """Split [start, end) into row blocks of at most BLOCK_ELEMENTS entries."""
    step = max(1, BLOCK_ELEMENTS // max(width, 1))
    for lo in range(start, end, step):
        yield lo, min(lo + step, end)


def sized_blocks(
    start: int, end: int, sizes: NDArray[np.integer]
) -> Iterator[tuple[int, int]]:
    """
    Split [start, end) into row blocks of at most BLOCK_ELEMENTS entries.

    Row i holds sizes[i] entries. A single row larger than the limit
    still forms a block of its own.
    """
    totals = np.cumsum(sizes[start:end])
    lo = start
    while lo < end:
        offset = totals[lo - start - 1] if lo > start else 0
        limit = offset + BLOCK_ELEMENTS
        hi = start + int(np.searchsorted(totals, limit, side="right"))
        hi = max(hi, lo + 1)
        yield lo, hi
        lo = hi


class NeighborList:
    """
    Neighbor list built by scanning the 27-cell neighborhood of each particle.

    A pair (i, j) is stored when its minimum-image distance is below the
    build cutoff, which is normally the force cutoff plus a skin margin.
    How a pair is recorded depends on ``reciprocal``:

    - True: j is stored in the list of i and i in the list of j.
    - False: the pair is stored once, in the list of min(i, j). Force
      kernels consuming such a list must apply each pair to both ends.

    Lists live in a padded table of shape (n_particles, slot_capacity)
    whose width grows by doubling on overflow.

    Attributes:
        reciprocal: Whether pairs are recorded at both endpoints.
        neighbors: Padded neighbor table, unused slots hold -1.
        neighbor_count: Number of stored neighbors per particle.
        cutoff: Cutoff used for the last build.
        build_count: Number of builds performed.
    """

    def __init__(self, reciprocal: bool = True, slot_capacity: int = 16) -> None:
        """
        Initialize an empty neighbor list.

        Args:
            reciprocal: Record each pair at both endpoints.
            slot_capacity: Initial per-particle buffer size.
        """
        self.reciprocal = reciprocal
        self.neighbors: NDArray[np.integer] = np.full(
            (0, max(1, slot_capacity)), -1, dtype=np.int64
        )
        self.neighbor_count: NDArray[np.integer] = np.zeros(0, dtype=np.int64)
        self.n_particles = 0
        self.cutoff = 0.0
        self.box_size = 0.0
        self.build_count = 0
        self._positions_at_build: NDArray[np.floating] | None = None

    @property
    def slot_capacity(self) -> int:
        """Return the per-particle buffer size."""
        return self.neighbors.shape[1]

    @property
    def is_built(self) -> bool:
        """Return True once build() has run."""
        return self._positions_at_build is not None

    @property
    def n_entries(self) -> int:
        """Return the total number of stored entries."""
        return int(self.neighbor_count.sum())

    def build(
        self,
        particle_count: int,
        box_size: float,
        cutoff: float,
        cell_list: CellList,
        positions: ArrayLike,
    ) -> None:
        """
        Build neighbor lists from an up-to-date cell list.

        Args:
            particle_count: Number of active particles.
            box_size: Cubic box edge length.
            cutoff: Build cutoff (force cutoff plus skin).
            cell_list: Cell list already built for the same positions.
            positions: Positions, flat or shaped (M, 3) with M >= count.
        """
        if cell_list.n_particles != particle_count:
            raise ValueError(
                f"cell list holds {cell_list.n_particles} particles, "
                f"expected {particle_count}"
            )
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        positions = positions[:particle_count]
        box = Box(box_size)
        cutoff_sq = cutoff * cutoff

        sizes = cell_list.candidate_counts()
        owner_parts = [np.empty(0, dtype=np.int64)]
        partner_parts = [np.empty(0, dtype=np.int64)]

        for lo, hi in sized_blocks(0, particle_count, sizes):
            owners, partners = cell_list.candidates(lo, hi)
            valid = partners != owners
            if not self.reciprocal:
                valid &= partners > owners
            owners, partners = owners[valid], partners[valid]
            delta = box.minimum_image(positions[owners] - positions[partners])
            accepted = np.einsum("ij,ij->i", delta, delta) < cutoff_sq
            owner_parts.append(owners[accepted])
            partner_parts.append(partners[accepted])

        owners = np.concatenate(owner_parts)
        partners = np.concatenate(partner_parts)
        counts = np.bincount(owners, minlength=particle_count)
        max_neighbors = int(counts.max()) if particle_count else 0
        self._ensure_capacity(particle_count, max_neighbors)

        # Accepted entries arrive grouped by owner, so slots run 0..count-1
        slots = np.arange(len(owners)) - (np.cumsum(counts) - counts)[owners]

        self.neighbors[:particle_count].fill(-1)
        self.neighbors[owners, slots] = partners
        self.neighbor_count = counts.astype(np.int64)
        self.n_particles = particle_count
        self.cutoff = float(cutoff)
        self.box_size = float(box_size)
        self._positions_at_build = positions.copy()
        self.build_count += 1

        logger.debug(
            "Neighbor list built: %d particles, %d entries, cutoff %g",
            particle_count,
            len(owners),
            cutoff,
        )

    def _ensure_capacity(self, n_particles: int, max_neighbors: int) -> None:
        """Grow the neighbor table to n_particles rows of max_neighbors slots."""
        rows, width = self.neighbors.shape
        new_width = width
        while new_width < max_neighbors:
            new_width *= 2
        if rows >= n_particles and new_width == width:
            return
        if new_width != width:
            logger.debug("Neighbor slot capacity grown from %d to %d", width, new_width)
        self.neighbors = np.full(
            (max(rows, n_particles), new_width), -1, dtype=np.int64
        )

    def neighbors_of(self, index: int) -> NDArray[np.integer]:
        """Return the stored neighbors of one particle."""
        return self.neighbors[index, : self.neighbor_count[index]]

    def entries(
        self, lo: int, hi: int
    ) -> tuple[NDArray[np.integer], NDArray[np.integer]]:
        """
        Return the stored entries of particles lo..hi-1 without padding.

        Returns:
            Tuple (owners, partners) of flat arrays, grouped by owner in
            ascending order.
        """
        counts = self.neighbor_count[lo:hi]
        owners = np.repeat(np.arange(lo, hi, dtype=np.int64), counts)
        row_start = np.repeat(np.cumsum(counts) - counts, counts)
        slots = np.arange(int(counts.sum())) - row_start
        return owners, self.neighbors[owners, slots]

    def table(self) -> NDArray[np.integer]:
        """Return the active part of the padded table, shape (n_particles, w)."""
        width = max(int(self.neighbor_count.max()), 1) if self.n_particles else 1
        return self.neighbors[: self.n_particles, :width]

    def pairs(self) -> NDArray[np.integer]:
        """
        Return every stored pair once.

        Returns:
            Array of shape (n_pairs, 2) with i < j, sorted lexicographically.
        """
        table = self.table()
        rows, cols = np.nonzero(table >= 0)
        i = rows
        j = table[rows, cols]
        keep = i < j
        pairs = np.stack([i[keep], j[keep]], axis=1)
        if len(pairs) == 0:
            return np.empty((0, 2), dtype=np.int64)
        return np.unique(pairs, axis=0)

    def max_displacement(self, positions: ArrayLike) -> float:
        """
        Largest minimum-image displacement since the last build.

        Args:
            positions: Current positions, flat or shaped (M, 3).
        """
        if self._positions_at_build is None:
            raise RuntimeError("Neighbor list has not been built yet")
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        positions = positions[: self.n_particles]
        if self.n_particles == 0:
            return 0.0
        dr = Box(self.box_size).minimum_image(positions - self._positions_at_build)
        return float(np.sqrt(np.max(np.einsum("ij,ij->i", dr, dr))))

    def needs_rebuild(
        self, positions: ArrayLike, particle_count: int, box_size: float, skin: float
    ) -> bool:
        """
        Check whether the list may have gone stale.

        The list stays valid while no particle has moved more than skin/2
        since the last build (two particles approaching each other can
        then close at most one skin width).

        Args:
            positions: Current positions.
            particle_count: Current number of active particles.
            box_size: Current box edge length.
            skin: Skin margin included in the build cutoff.
        """
        if not self.is_built:
            return True
        if particle_count != self.n_particles or box_size != self.box_size:
            logger.info(
                "Neighbor list rebuild forced by system change (%d -> %d particles)",
                self.n_particles,
                particle_count,
            )
            return True
        return self.max_displacement(positions) > 0.5 * skin
