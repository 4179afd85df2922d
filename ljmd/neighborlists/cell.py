"""Cell list spatial index."""

from __future__ import annotations

import logging

import numpy as np
from numpy.typing import ArrayLike, NDArray

from ..errors import InvalidCellGeometry, OutOfBoundsPosition

logger = logging.getLogger(__name__)

# Offsets of the 3x3x3 stencil, ordered dx slowest and dz fastest
STENCIL = np.array(
    [(dx, dy, dz) for dx in (-1, 0, 1) for dy in (-1, 0, 1) for dz in (-1, 0, 1)],
    dtype=np.int64,
)

MIN_CELLS_PER_EDGE = 3


class CellList:
    """
    Uniform cubic grid that bins particle indices by position.

    The box is divided into n x n x n cells with n = floor(L / cutoff),
    so every cell edge is at least the cutoff and all partners of a
    particle lie in its own cell or one of the 26 surrounding ones.
    The grid is rebuilt from scratch on every call to build().

    Cell contents live in a padded table: row c of ``cells`` holds the
    particles of linear cell c in insertion order, and ``cell_count[c]``
    says how many slots of that row are used. Unused slots hold -1.
    The row width grows by doubling when a cell overflows and never
    shrinks.

    Attributes:
        number_of_cells: Cells per box edge.
        cells: Padded cell table, shape (n^3, slot_capacity).
        cell_count: Occupancy of each cell, shape (n^3,).
        cell_coords: Integer (cx, cy, cz) of each binned particle.
        cell_of: Linear cell index of each binned particle.
        order: Particle indices sorted by cell, insertion order kept.
        cell_start: Offset of each cell's first member in ``order``.
        build_count: Number of builds performed.
    """

    def __init__(self, slot_capacity: int = 8) -> None:
        """
        Initialize an empty cell list.

        Args:
            slot_capacity: Initial per-cell buffer size.
        """
        self.number_of_cells = 0
        self.box_size = 0.0
        self.cutoff = 0.0
        self.n_particles = 0
        self.cells: NDArray[np.integer] = np.full(
            (0, max(1, slot_capacity)), -1, dtype=np.int64
        )
        self.cell_count: NDArray[np.integer] = np.zeros(0, dtype=np.int64)
        self.cell_coords: NDArray[np.integer] = np.empty((0, 3), dtype=np.int64)
        self.cell_of: NDArray[np.integer] = np.empty(0, dtype=np.int64)
        self.order: NDArray[np.integer] = np.empty(0, dtype=np.int64)
        self.cell_start: NDArray[np.integer] = np.zeros(0, dtype=np.int64)
        self.build_count = 0

    @property
    def total_cells(self) -> int:
        """Return the number of cells in the grid."""
        return self.number_of_cells**3

    @property
    def slot_capacity(self) -> int:
        """Return the per-cell buffer size."""
        return self.cells.shape[1]

    def index(self, cx: int, cy: int, cz: int) -> int:
        """Convert an in-range 3D cell coordinate to a linear index."""
        n = self.number_of_cells
        return cx * n * n + cy * n + cz

    def periodic_index(
        self, cx: ArrayLike, cy: ArrayLike, cz: ArrayLike
    ) -> NDArray[np.integer]:
        """
        Convert 3D cell coordinates to linear indices with periodic folding.

        Works on scalars or arrays; any integer offset, including
        negative ones, resolves to a valid cell.
        """
        n = self.number_of_cells
        cx = (np.asarray(cx) + n) % n
        cy = (np.asarray(cy) + n) % n
        cz = (np.asarray(cz) + n) % n
        return cx * n * n + cy * n + cz

    def neighbor_cells(self, cx: int, cy: int, cz: int) -> NDArray[np.integer]:
        """Return the 27 linear indices of the periodic neighborhood of a cell."""
        return self.periodic_index(
            cx + STENCIL[:, 0], cy + STENCIL[:, 1], cz + STENCIL[:, 2]
        )

    def particles_in(self, cell: int) -> NDArray[np.integer]:
        """Return the particle indices stored in a linear cell."""
        return self.cells[cell, : self.cell_count[cell]]

    def build(
        self,
        positions: ArrayLike,
        particle_count: int,
        box_size: float,
        cutoff: float,
    ) -> None:
        """
        Bin the first particle_count particles into cells.

        Args:
            positions: Positions, flat (3 * capacity,) or shaped (M, 3)
                with M >= particle_count.
            particle_count: Number of active particles to bin.
            box_size: Cubic box edge length.
            cutoff: Minimum cell edge length.

        Raises:
            InvalidCellGeometry: If fewer than 3 cells fit along an edge.
            OutOfBoundsPosition: If a position lies outside [0, box_size).
        """
        if cutoff <= 0:
            raise ValueError(f"cutoff must be positive, got {cutoff}")
        n = int(np.floor(box_size / cutoff))
        if n < MIN_CELLS_PER_EDGE:
            raise InvalidCellGeometry(box_size, cutoff, n)

        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        positions = positions[:particle_count]

        coords = np.floor(positions / box_size * n).astype(np.int64)
        bad = np.any((coords < 0) | (coords >= n), axis=1)
        if np.any(bad):
            raise OutOfBoundsPosition(np.flatnonzero(bad), box_size)

        if n != self.number_of_cells:
            logger.debug(
                "Cell grid resized to %d^3 (box %g, cutoff %g)", n, box_size, cutoff
            )
        self.number_of_cells = n
        self.box_size = float(box_size)
        self.cutoff = float(cutoff)
        self.n_particles = particle_count

        linear = coords[:, 0] * n * n + coords[:, 1] * n + coords[:, 2]

        # Count phase
        counts = np.bincount(linear, minlength=n**3).astype(np.int64)
        self._ensure_capacity(n**3, int(counts.max()) if particle_count else 0)

        # Scatter phase: a stable sort keeps insertion order inside each cell
        order = np.argsort(linear, kind="stable")
        sorted_cells = linear[order]
        starts = np.cumsum(counts) - counts
        slots = np.arange(particle_count) - starts[sorted_cells]

        self.cells[: n**3].fill(-1)
        self.cells[sorted_cells, slots] = order
        self.cell_count = counts
        self.cell_coords = coords
        self.cell_of = linear
        self.order = order
        self.cell_start = starts
        self.build_count += 1

    def _ensure_capacity(self, total_cells: int, max_occupancy: int) -> None:
        """Grow the cell table so it has total_cells rows of max_occupancy slots."""
        rows, width = self.cells.shape
        new_width = width
        while new_width < max_occupancy:
            new_width *= 2
        if rows >= total_cells and new_width == width:
            return
        if new_width != width:
            logger.debug("Cell slot capacity grown from %d to %d", width, new_width)
        self.cells = np.full((max(rows, total_cells), new_width), -1, dtype=np.int64)

    def neighborhoods(self, lo: int = 0, hi: int | None = None) -> NDArray[np.integer]:
        """Return the 27 neighbor cell indices of binned particles lo..hi-1."""
        coords = self.cell_coords[lo:hi]
        return self.periodic_index(
            coords[:, 0, np.newaxis] + STENCIL[np.newaxis, :, 0],
            coords[:, 1, np.newaxis] + STENCIL[np.newaxis, :, 1],
            coords[:, 2, np.newaxis] + STENCIL[np.newaxis, :, 2],
        )

    def candidate_counts(self) -> NDArray[np.integer]:
        """Return how many candidates, self included, each binned particle has."""
        return self.cell_count[self.neighborhoods()].sum(axis=1)

    def candidates(
        self, lo: int, hi: int
    ) -> tuple[NDArray[np.integer], NDArray[np.integer]]:
        """
        Gather the 27-cell neighborhood of binned particles lo..hi-1.

        Members are read from the cell-sorted particle order, so the
        result holds only real candidates and no padding.

        Returns:
            Tuple (owners, partners) of flat arrays of equal length. Entries
            are grouped by owner in ascending order; within an owner, cells
            follow the stencil order and members keep insertion order. Each
            particle is listed among its own candidates.
        """
        neighborhood = self.neighborhoods(lo, hi)
        sizes = self.cell_count[neighborhood]
        per_owner = sizes.sum(axis=1)
        sizes = sizes.ravel()
        first = self.cell_start[neighborhood].ravel()

        segment_start = np.cumsum(sizes) - sizes
        offsets = np.arange(int(sizes.sum())) - np.repeat(segment_start, sizes)
        slots = np.repeat(first, sizes) + offsets
        owners = np.repeat(np.arange(lo, hi, dtype=np.int64), per_owner)
        return owners, self.order[slots]

    def check_complete(self) -> bool:
        """Return True if every binned particle appears in exactly one cell."""
        members = self.cells[: self.total_cells]
        found = np.sort(members[members >= 0])
        return bool(np.array_equal(found, np.arange(self.n_particles)))
