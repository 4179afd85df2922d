"""
Smoke tests for the high-level API, plotting and command line.

Runs are short and seeded so they stay fast and deterministic.
"""

import matplotlib

matplotlib.use("Agg")

import logging

import numpy as np
import pytest
import yaml

from ljmd import plotting, simulate
from ljmd.__main__ import main
from ljmd.config import SimulationConfig
from ljmd.errors import CapacityExceeded


@pytest.fixture
def small_result():
    """Short all-pairs run of a 108 particle crystal."""
    return simulate.lj_crystal(n_cells=3, r_cut=2.0, n_steps=50, sample_every=10)


class TestBuildSystem:
    """Test initial conditions."""

    def test_initial_temperature_and_momentum(self):
        """Test that velocities match the target temperature with no drift."""
        system = simulate.build_system(SimulationConfig(n_cells=3, temperature=0.3))
        assert system.temperature() == pytest.approx(0.3)
        np.testing.assert_allclose(
            system.active_velocities.sum(axis=0), 0.0, atol=1e-10
        )

    def test_seed_reproducible(self):
        """Test that equal seeds give equal velocities."""
        config = SimulationConfig(n_cells=2, seed=7)
        a = simulate.build_system(config)
        b = simulate.build_system(config)
        np.testing.assert_array_equal(a.velocities, b.velocities)

    def test_zero_temperature(self):
        """Test that T = 0 starts the crystal at rest."""
        system = simulate.build_system(SimulationConfig(n_cells=2, temperature=0.0))
        assert np.all(system.velocities == 0.0)

    def test_capacity_guard(self):
        """Test that an explicit capacity below the lattice size fails."""
        with pytest.raises(CapacityExceeded):
            simulate.build_system(SimulationConfig(n_cells=3, capacity=100))


class TestRun:
    """Test simulate.run."""

    def test_result_series(self, small_result):
        """Test sampling and metadata."""
        assert small_result.n_particles == 108
        assert small_result.n_steps == 50
        assert len(small_result.total_energy) == 6
        np.testing.assert_allclose(small_result.time, np.arange(6) * 0.02)
        np.testing.assert_allclose(
            small_result.total_energy,
            small_result.kinetic_energy + small_result.potential_energy,
        )
        assert small_result.positions.shape == (108, 3)

    def test_energy_conserved(self, small_result):
        """Test that a short run has small drift."""
        assert small_result.energy_drift < 0.01
        assert small_result.mean_temperature > 0

    def test_timings_reported(self, small_result):
        """Test that diagnostics are attached to the result."""
        assert small_result.timings.force_calls == 51
        assert small_result.wall_time > 0
        assert small_result.strategy == "all_pairs"

    def test_neighbor_strategy_with_threads(self):
        """Test a neighbor list run on the thread backend."""
        result = simulate.lj_crystal(
            n_cells=4,
            r_cut=2.0,
            skin=0.1,
            strategy="neighbor",
            rebuild="displacement",
            backend="threads",
            n_workers=2,
            n_steps=40,
        )
        assert result.strategy == "neighbor"
        assert result.timings.neighbor_list_builds >= 1
        assert result.energy_drift < 0.01

    def test_strategies_agree(self):
        """Test that all strategies produce the same trajectory."""
        common = {"n_cells": 4, "r_cut": 2.0, "skin": 0.1, "n_steps": 20}
        reference = simulate.lj_crystal(strategy="all_pairs", **common)
        for strategy in ("cell", "neighbor"):
            result = simulate.lj_crystal(strategy=strategy, **common)
            np.testing.assert_allclose(
                result.positions, reference.positions, rtol=1e-8, atol=1e-8
            )

    def test_invalid_config(self):
        """Test that invalid keyword parameters are rejected."""
        with pytest.raises(ValueError):
            simulate.lj_crystal(dt=-1.0)

    def test_progress_logged(self, caplog):
        """Test INFO progress messages."""
        with caplog.at_level(logging.INFO, logger="ljmd"):
            simulate.lj_crystal(n_cells=2, r_cut=1.5, n_steps=10)
        assert any("LJ crystal" in r.getMessage() for r in caplog.records)
        assert any("Finished 10 steps" in r.getMessage() for r in caplog.records)


class TestPlotting:
    """Test plotting with a non-interactive backend."""

    def test_energy_plot(self, small_result, tmp_path):
        """Test plotting and saving an energy trace."""
        fig = plotting.energy(small_result)
        assert len(fig.axes) == 2

        path = tmp_path / "energy.png"
        plotting.save(path)
        assert path.exists()


class TestCommandLine:
    """Test python -m ljmd."""

    def test_run_from_yaml(self, tmp_path):
        """Test a successful run."""
        path = tmp_path / "run.yaml"
        path.write_text(yaml.safe_dump({"n_cells": 2, "r_cut": 1.5}))

        assert main([str(path), "--steps", "5", "--log-level", "WARNING"]) == 0

    def test_log_file(self, tmp_path):
        """Test that --log-file captures the summary."""
        config = tmp_path / "run.json"
        config.write_text('{"n_cells": 2, "r_cut": 1.5, "n_steps": 5}')
        log_file = tmp_path / "run.log"

        assert main([str(config), "--log-file", str(log_file)]) == 0
        assert "relative drift" in log_file.read_text()

    def test_invalid_config_exits_nonzero(self, tmp_path):
        """Test that a bad config is reported, not raised."""
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.safe_dump({"n_cells": 4, "strategy": "cell"}))

        assert main([str(path), "--log-level", "CRITICAL"]) == 1

    def test_missing_config_exits_nonzero(self, tmp_path):
        """Test that a missing file is reported."""
        assert main([str(tmp_path / "nope.yaml"), "--log-level", "CRITICAL"]) == 1

    def test_unknown_log_level_is_a_usage_error(self, tmp_path, capsys):
        """Test that argparse rejects an unknown level before running."""
        path = tmp_path / "run.yaml"
        path.write_text(yaml.safe_dump({"n_cells": 2, "r_cut": 1.5}))

        with pytest.raises(SystemExit) as excinfo:
            main([str(path), "--log-level", "LOUD"])

        assert excinfo.value.code == 2
        assert "--log-level" in capsys.readouterr().err

    def test_log_level_is_case_insensitive(self, tmp_path):
        """Test lower case level names."""
        path = tmp_path / "run.yaml"
        path.write_text(yaml.safe_dump({"n_cells": 2, "r_cut": 1.5}))

        assert main([str(path), "--steps", "2", "--log-level", "warning"]) == 0

    def test_unwritable_log_file_exits_nonzero(self, tmp_path):
        """Test that a log file in a missing directory is reported."""
        path = tmp_path / "run.yaml"
        path.write_text(yaml.safe_dump({"n_cells": 2, "r_cut": 1.5}))
        log_file = tmp_path / "missing" / "run.log"

        assert main([str(path), "--log-file", str(log_file)]) == 1
