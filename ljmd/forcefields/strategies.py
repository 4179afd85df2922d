"""Force evaluation strategies: all pairs, cell list and neighbor list."""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import numpy as np
from numpy.typing import NDArray

from ..neighborlists.neighbor import row_blocks, sized_blocks
from .base import ForceEvaluator, ForceTimings

if TYPE_CHECKING:
    from ..neighborlists import CellList, NeighborList
    from ..parallel import ParallelBackend
    from ..system import Box
    from .lj import LennardJones

logger = logging.getLogger(__name__)

REBUILD_POLICIES = ("always", "displacement")


def _partner_terms(
    potential: LennardJones,
    box: Box,
    positions: NDArray[np.floating],
    lo: int,
    hi: int,
    partners: NDArray[np.integer],
    mask: NDArray[np.bool_],
) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
    """
    Evaluate pair terms for owners lo..hi-1 against a padded partner table.

    Args:
        partners: Partner indices, shape (hi - lo, K); masked-out slots
            may hold any valid index.
        mask: Which partner slots are real pairs.

    Returns:
        Force vectors on each owner from each partner, shape (hi - lo, K, 3),
        and the matching pair energies, shape (hi - lo, K).
    """
    delta = box.minimum_image(positions[lo:hi, np.newaxis, :] - positions[partners])
    return potential.pair_terms(delta, mask)


def _flat_terms(
    potential: LennardJones,
    box: Box,
    positions: NDArray[np.floating],
    owners: NDArray[np.integer],
    partners: NDArray[np.integer],
) -> tuple[NDArray[np.floating], NDArray[np.floating]]:
    """Evaluate pair terms for flat (owner, partner) entries."""
    delta = box.minimum_image(positions[owners] - positions[partners])
    return potential.pair_terms(delta, np.ones(len(owners), dtype=bool))


def _row_sums(
    vectors: NDArray[np.floating], rows: NDArray[np.integer], n_rows: int
) -> NDArray[np.floating]:
    """Sum 3-vectors into n_rows rows by row index."""
    return np.stack(
        [
            np.bincount(rows, weights=vectors[:, k], minlength=n_rows)
            for k in range(3)
        ],
        axis=1,
    )


class AllPairsEvaluator(ForceEvaluator):
    """
    Reference O(N^2) strategy over every ordered pair except self.

    Serves as ground truth for the cell and neighbor list strategies.
    Requires r_cut <= L/2 so the minimum image is the only image that
    can interact.
    """

    name = "all_pairs"

    def _evaluate(
        self,
        positions: NDArray[np.floating],
        box: Box,
        forces: NDArray[np.floating],
    ) -> float:
        if self.potential.r_cut > 0.5 * box.length:
            raise ValueError(
                f"r_cut {self.potential.r_cut} exceeds half the box length "
                f"{box.length}; the minimum image is ambiguous"
            )
        n = len(positions)
        ranges = self.backend.partition(n)

        def owner_rows(bounds: tuple[int, int]) -> float:
            energy = 0.0
            start, end = bounds
            for lo, hi in row_blocks(start, end, n):
                owners = np.arange(lo, hi)[:, np.newaxis]
                partners = np.broadcast_to(np.arange(n), (hi - lo, n))
                f, e = _partner_terms(
                    self.potential, box, positions, lo, hi, partners, partners != owners
                )
                forces[lo:hi] = f.sum(axis=1)
                energy += 0.5 * float(e.sum())
            return energy

        energies = self._timed_kernel(self.backend.parallel_map, owner_rows, ranges)
        return sum(energies)


class CellListEvaluator(ForceEvaluator):
    """
    Strategy that scans each particle's 27-cell periodic neighborhood.

    The cell list is rebuilt at the force cutoff on every call; no
    separate neighbor list is kept.
    """

    name = "cell"

    def __init__(
        self,
        potential: LennardJones,
        backend: ParallelBackend,
        cell_list: CellList,
        timings: ForceTimings | None = None,
    ) -> None:
        super().__init__(potential, backend, timings)
        self.cell_list = cell_list

    def _evaluate(
        self,
        positions: NDArray[np.floating],
        box: Box,
        forces: NDArray[np.floating],
    ) -> float:
        n = len(positions)
        start = time.perf_counter()
        self.cell_list.build(positions, n, box.length, self.potential.r_cut)
        self.timings.cell_list_build += time.perf_counter() - start

        sizes = self.cell_list.candidate_counts()
        ranges = self.backend.partition(n)

        def owner_rows(bounds: tuple[int, int]) -> float:
            energy = 0.0
            start, end = bounds
            for lo, hi in sized_blocks(start, end, sizes):
                owners, partners = self.cell_list.candidates(lo, hi)
                keep = partners != owners
                owners, partners = owners[keep], partners[keep]
                f, e = _flat_terms(self.potential, box, positions, owners, partners)
                forces[lo:hi] = _row_sums(f, owners - lo, hi - lo)
                energy += 0.5 * float(e.sum())
            return energy

        energies = self._timed_kernel(self.backend.parallel_map, owner_rows, ranges)
        return sum(energies)


class NeighborListEvaluator(ForceEvaluator):
    """
    Strategy that iterates precomputed neighbor lists.

    Lists are built at r_cut + skin from a cell list at the same cutoff.
    The kernel still truncates at r_cut, so any pair inside the skin is
    simply skipped.

    Rebuild policies:
        always: rebuild the cell and neighbor lists on every call.
        displacement: rebuild only once some particle has moved more
            than skin/2 since the last build.

    With a reciprocal list each particle only accumulates its own force
    row. With a non-reciprocal list every stored pair applies +f to the
    owner and -f to the partner, so each worker fills a private buffer
    and the buffers are summed.
    """

    name = "neighbor"

    def __init__(
        self,
        potential: LennardJones,
        backend: ParallelBackend,
        cell_list: CellList,
        neighbor_list: NeighborList,
        skin: float = 0.3,
        rebuild: str = "always",
        timings: ForceTimings | None = None,
    ) -> None:
        super().__init__(potential, backend, timings)
        if skin < 0:
            raise ValueError(f"skin must be >= 0, got {skin}")
        if rebuild not in REBUILD_POLICIES:
            raise ValueError(
                f"Unknown rebuild policy: {rebuild}. Available: "
                + ", ".join(REBUILD_POLICIES)
            )
        self.cell_list = cell_list
        self.neighbor_list = neighbor_list
        self.skin = float(skin)
        self.rebuild = rebuild

    @property
    def list_cutoff(self) -> float:
        """Return the neighbor list build cutoff (r_cut + skin)."""
        return self.potential.r_cut + self.skin

    def update_lists(self, positions: NDArray[np.floating], box: Box) -> bool:
        """
        Rebuild the cell and neighbor lists according to the rebuild policy.

        Returns:
            True if the lists were rebuilt.
        """
        n = len(positions)
        if self.rebuild == "displacement" and not self.neighbor_list.needs_rebuild(
            positions, n, box.length, self.skin
        ):
            return False

        logger.debug(
            "Rebuilding cell and neighbor lists at cutoff %g", self.list_cutoff
        )
        start = time.perf_counter()
        self.cell_list.build(positions, n, box.length, self.list_cutoff)
        mid = time.perf_counter()
        self.neighbor_list.build(
            n, box.length, self.list_cutoff, self.cell_list, positions
        )
        end = time.perf_counter()

        self.timings.cell_list_build += mid - start
        self.timings.neighbor_list_build += end - mid
        self.timings.neighbor_list_builds += 1
        return True

    def _evaluate(
        self,
        positions: NDArray[np.floating],
        box: Box,
        forces: NDArray[np.floating],
    ) -> float:
        self.update_lists(positions, box)

        ranges = self.backend.partition(len(positions))

        if self.neighbor_list.reciprocal:
            energies = self._timed_kernel(
                self.backend.parallel_map,
                lambda bounds: self._owner_rows(positions, box, forces, bounds),
                ranges,
            )
            return sum(energies)

        results = self._timed_kernel(
            self.backend.parallel_map,
            lambda bounds: self._pair_rows(positions, box, bounds),
            ranges,
        )
        energy = 0.0
        for local, local_energy in results:
            forces += local
            energy += local_energy
        return energy

    def _owner_rows(
        self,
        positions: NDArray[np.floating],
        box: Box,
        forces: NDArray[np.floating],
        bounds: tuple[int, int],
    ) -> float:
        """Fill force rows of owners in bounds from a reciprocal list."""
        energy = 0.0
        start, end = bounds
        sizes = self.neighbor_list.neighbor_count
        for lo, hi in sized_blocks(start, end, sizes):
            owners, partners = self.neighbor_list.entries(lo, hi)
            f, e = _flat_terms(self.potential, box, positions, owners, partners)
            forces[lo:hi] = _row_sums(f, owners - lo, hi - lo)
            energy += 0.5 * float(e.sum())
        return energy

    def _pair_rows(
        self,
        positions: NDArray[np.floating],
        box: Box,
        bounds: tuple[int, int],
    ) -> tuple[NDArray[np.floating], float]:
        """Accumulate pairs owned by particles in bounds into a private buffer."""
        local = np.zeros_like(positions)
        energy = 0.0
        start, end = bounds
        sizes = self.neighbor_list.neighbor_count
        for lo, hi in sized_blocks(start, end, sizes):
            owners, partners = self.neighbor_list.entries(lo, hi)
            f, e = _flat_terms(self.potential, box, positions, owners, partners)
            local[lo:hi] += _row_sums(f, owners - lo, hi - lo)
            np.add.at(local, partners, -f)
            energy += float(e.sum())
        return local, energy
