"""Lennard-Jones force evaluation."""

from .base import ForceEvaluator, ForceTimings
from .forcefield import STRATEGIES, ForceField
from .lj import LennardJones
from .strategies import AllPairsEvaluator, CellListEvaluator, NeighborListEvaluator

__all__ = [
    "ForceField",
    "ForceEvaluator",
    "ForceTimings",
    "LennardJones",
    "AllPairsEvaluator",
    "CellListEvaluator",
    "NeighborListEvaluator",
    "STRATEGIES",
]
