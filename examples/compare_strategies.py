#!/usr/bin/env python
"""
Example: compare the three force strategies on one LJ crystal.

Builds an FCC crystal, evaluates forces with the all-pairs, cell list
and neighbor list strategies, checks that they agree, and prints the
time each one spent in list builds and force evaluation. Then runs a
short NVE trajectory and plots its energy.

Reduced LJ units:
- Length: σ (LJ size parameter)
- Energy: ε (LJ well depth)
- Time: τ = σ√(m/ε)

Usage:
    python examples/compare_strategies.py
"""

import numpy as np

from ljmd import plotting, setup_logging, simulate
from ljmd.config import SimulationConfig
from ljmd.forcefields import ForceField


def compare_forces(n_cells: int = 6, r_cut: float = 2.4, skin: float = 0.3):
    """Evaluate each strategy on the same configuration."""
    config = SimulationConfig(
        n_cells=n_cells, temperature=0.5, r_cut=r_cut, skin=skin, strategy="neighbor"
    ).validate()
    system = simulate.build_system(config)
    rng = np.random.default_rng(0)
    system.active_positions[:] += rng.uniform(-0.1, 0.1, (system.count, 3))
    system.box.wrap(system.active_positions)

    print(f"N = {system.count}, L = {system.size:.3f}, r_cut = {r_cut}")
    reference = None
    for strategy in ("all_pairs", "cell", "neighbor"):
        force_field = ForceField(r_cut=r_cut, strategy=strategy, skin=skin)
        for _ in range(5):
            energy = force_field.compute(system)
        forces = system.active_forces.copy()
        if reference is None:
            reference = forces
        error = np.max(np.abs(forces - reference))
        t = force_field.timings
        print(
            f"  {strategy:>9}: U = {energy:.6f}  max |dF| = {error:.1e}  "
            f"lists {t.cell_list_build + t.neighbor_list_build:.4f}s  "
            f"force {t.force_evaluation:.4f}s"
        )


def main():
    setup_logging("WARNING")
    compare_forces()

    result = simulate.lj_crystal(
        n_cells=5, r_cut=2.4, skin=0.2, strategy="neighbor", rebuild="displacement"
    )
    drift = result.energy_drift
    print(f"Relative energy drift over {result.n_steps} steps: {drift:.2e}")
    plotting.energy(result)
    plotting.save("lj_crystal_energy.png")
    print("Saved lj_crystal_energy.png")


if __name__ == "__main__":
    main()
