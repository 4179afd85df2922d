"""Lennard-Jones force field with selectable evaluation strategy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from ..neighborlists import CellList, NeighborList
from ..parallel import get_backend
from .base import ForceEvaluator, ForceTimings
from .lj import LennardJones
from .strategies import AllPairsEvaluator, CellListEvaluator, NeighborListEvaluator

if TYPE_CHECKING:
    from ..parallel import ParallelBackend
    from ..system import ParticleSystem

StrategyName = Literal["all_pairs", "cell", "neighbor"]
STRATEGIES: tuple[str, ...] = ("all_pairs", "cell", "neighbor")


class ForceField:
    """
    Lennard-Jones force field for a particle system.

    Owns the pair kernel, one CellList and one NeighborList, and the
    evaluation strategy that uses them. The caches are created here, up
    front, and reused across calls; they are never shared with another
    force field.

    Example:
        ff = ForceField(epsilon=1.0, sigma=1.0, r_cut=2.5, strategy="neighbor")
        energy = ff.compute(system)

    Attributes:
        potential: The Lennard-Jones pair kernel.
        cell_list: Cell list used by the cell and neighbor strategies.
        neighbor_list: Neighbor list used by the neighbor strategy.
        evaluator: The active ForceEvaluator.
        timings: Cumulative diagnostic counters.
        potential_energy: Potential energy from the last compute().
    """

    def __init__(
        self,
        epsilon: float = 1.0,
        sigma: float = 1.0,
        r_cut: float = 2.5,
        strategy: StrategyName = "all_pairs",
        skin: float = 0.3,
        reciprocal: bool | None = None,
        rebuild: str = "always",
        backend: str | ParallelBackend | None = None,
        cell_list: CellList | None = None,
        neighbor_list: NeighborList | None = None,
    ) -> None:
        """
        Initialize force field.

        Args:
            epsilon: Potential well depth.
            sigma: Length scale.
            r_cut: Interaction cutoff.
            strategy: One of "all_pairs", "cell" or "neighbor".
            skin: Extra neighbor list radius beyond r_cut.
            reciprocal: Store neighbor pairs at both endpoints. Defaults to
                True, or to the flag of an injected neighbor_list.
            rebuild: Neighbor list rebuild policy, "always" or "displacement".
            backend: Parallel backend name or instance (serial by default).
            cell_list: Optional cell list to use instead of a new one.
            neighbor_list: Optional neighbor list to use instead of a new one.

        Raises:
            ValueError: On an unknown strategy, or if reciprocal disagrees
                with an injected neighbor_list.
        """
        if strategy not in STRATEGIES:
            raise ValueError(
                f"Unknown strategy: {strategy}. Available: " + ", ".join(STRATEGIES)
            )
        if neighbor_list is None:
            neighbor_list = NeighborList(
                reciprocal=True if reciprocal is None else reciprocal
            )
        elif reciprocal is not None and reciprocal != neighbor_list.reciprocal:
            raise ValueError(
                f"reciprocal={reciprocal} conflicts with the given neighbor list "
                f"(reciprocal={neighbor_list.reciprocal})"
            )
        self.neighbor_list = neighbor_list
        self.potential = LennardJones(epsilon, sigma, r_cut)
        self.backend = get_backend(backend)
        self.cell_list = cell_list if cell_list is not None else CellList()
        self.timings = ForceTimings()
        self.potential_energy = 0.0

        if strategy == "all_pairs":
            evaluator: ForceEvaluator = AllPairsEvaluator(
                self.potential, self.backend, self.timings
            )
        elif strategy == "cell":
            evaluator = CellListEvaluator(
                self.potential, self.backend, self.cell_list, self.timings
            )
        else:
            evaluator = NeighborListEvaluator(
                self.potential,
                self.backend,
                self.cell_list,
                self.neighbor_list,
                skin=skin,
                rebuild=rebuild,
                timings=self.timings,
            )
        self.evaluator = evaluator

    def __repr__(self) -> str:
        return (
            f"ForceField({self.potential!r}, strategy={self.strategy!r}, "
            f"backend={self.backend.name!r})"
        )

    @property
    def epsilon(self) -> float:
        """Return the well depth."""
        return self.potential.epsilon

    @property
    def sigma(self) -> float:
        """Return the length scale."""
        return self.potential.sigma

    @property
    def r_cut(self) -> float:
        """Return the interaction cutoff."""
        return self.potential.r_cut

    @property
    def strategy(self) -> str:
        """Return the name of the active strategy."""
        return self.evaluator.name

    def compute(self, system: ParticleSystem) -> float:
        """
        Overwrite the force buffer of a system with Lennard-Jones forces.

        Args:
            system: Particle system; positions must lie inside the box.

        Returns:
            Total potential energy, also stored in ``potential_energy``.
        """
        self.potential_energy = self.evaluator.compute(system)
        return self.potential_energy

    def close(self) -> None:
        """Shut down the parallel backend."""
        self.backend.close()

    def __enter__(self) -> ForceField:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
