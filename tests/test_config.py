"""Tests for simulation configuration loading and validation."""

import json

import pytest
import yaml

from ljmd.config import SimulationConfig, load_config
from ljmd.errors import InvalidCellGeometry


class TestSimulationConfig:
    """Test SimulationConfig defaults and validation."""

    def test_defaults(self):
        """Test the default crystal."""
        config = SimulationConfig().validate()
        assert config.n_particles == 256
        assert config.box_size == pytest.approx(6.3496)
        assert config.strategy == "all_pairs"

    @pytest.mark.parametrize(
        "overrides",
        [
            {"dt": 0.0},
            {"n_cells": 0},
            {"temperature": -1.0},
            {"skin": -0.1},
            {"n_steps": -1},
            {"sample_every": 0},
            {"strategy": "octree"},
            {"rebuild": "never"},
            {"backend": "mpi"},
            {"capacity": -5},
        ],
    )
    def test_invalid_values(self, overrides):
        """Test that bad parameters are rejected."""
        with pytest.raises(ValueError):
            SimulationConfig(**overrides).validate()

    def test_cutoff_beyond_half_box(self):
        """Test that r_cut > L/2 is rejected up front."""
        with pytest.raises(ValueError):
            SimulationConfig(n_cells=2, r_cut=2.5).validate()

    def test_cell_geometry_checked(self):
        """Test that list strategies need three cells per edge."""
        with pytest.raises(InvalidCellGeometry):
            SimulationConfig(strategy="cell").validate()
        with pytest.raises(InvalidCellGeometry):
            SimulationConfig(n_cells=5, strategy="neighbor", skin=0.3).validate()
        SimulationConfig(n_cells=5, strategy="neighbor", skin=0.2).validate()

    def test_from_dict_rejects_unknown_keys(self):
        """Test that typos in config files are caught."""
        with pytest.raises(ValueError, match="n_cell"):
            SimulationConfig.from_dict({"n_cell": 3})

    def test_round_trip_dict(self):
        """Test to_dict / from_dict."""
        config = SimulationConfig(n_cells=3, strategy="all_pairs", r_cut=2.0)
        assert SimulationConfig.from_dict(config.to_dict()) == config


class TestLoadConfig:
    """Test reading config files."""

    def test_load_yaml(self, tmp_path):
        """Test YAML config loading."""
        path = tmp_path / "run.yaml"
        path.write_text(
            yaml.safe_dump({"n_cells": 5, "strategy": "neighbor", "skin": 0.2})
        )

        config = load_config(path)

        assert config.n_cells == 5
        assert config.strategy == "neighbor"
        assert config.dt == 0.002

    def test_load_json(self, tmp_path):
        """Test JSON config loading."""
        path = tmp_path / "run.json"
        path.write_text(json.dumps({"temperature": 0.1, "backend": "threads"}))

        config = load_config(str(path))

        assert config.temperature == 0.1
        assert config.backend == "threads"

    def test_empty_yaml_gives_defaults(self, tmp_path):
        """Test that an empty file means all defaults."""
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_config(path) == SimulationConfig()

    def test_non_mapping_rejected(self, tmp_path):
        """Test that a YAML list is not a config."""
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_unsupported_suffix(self, tmp_path):
        """Test that unknown file types are rejected."""
        path = tmp_path / "run.toml"
        path.write_text("n_cells = 3\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        """Test that a missing file raises."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")


class TestTypeChecks:
    """Test that values of the wrong type are rejected."""

    @pytest.mark.parametrize(
        "overrides",
        [
            {"reciprocal": "false"},
            {"reciprocal": 0},
            {"n_cells": 4.0},
            {"n_steps": True},
            {"dt": "0.002"},
            {"capacity": "100"},
            {"strategy": 1},
        ],
    )
    def test_wrong_types(self, overrides):
        """Test each mistyped field."""
        with pytest.raises(ValueError):
            SimulationConfig(**overrides).validate()

    def test_integers_accepted_for_floats(self):
        """Test that YAML integers work for real-valued fields."""
        config = SimulationConfig(n_cells=4, lattice_constant=2, r_cut=2).validate()
        assert config.box_size == 8

    def test_quoted_boolean_in_yaml(self, tmp_path):
        """Test that reciprocal: "false" is not silently truthy."""
        path = tmp_path / "run.yaml"
        path.write_text('reciprocal: "false"\n')

        with pytest.raises(ValueError, match="reciprocal"):
            load_config(path)

    def test_unquoted_boolean_in_yaml(self, tmp_path):
        """Test that a real YAML boolean loads."""
        path = tmp_path / "run.yaml"
        path.write_text("reciprocal: false\n")

        assert load_config(path).reciprocal is False
