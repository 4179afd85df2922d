"""Tests for the velocity Verlet integrator."""

import numpy as np
import pytest

from ljmd.analysis import relative_drift
from ljmd.config import SimulationConfig
from ljmd.errors import OutOfBoundsPosition
from ljmd.forcefields import ForceField
from ljmd.integrators import VelocityVerletIntegrator
from ljmd.simulate import build_system
from ljmd.system import ParticleSystem


class TestVelocityVerlet:
    """Test Velocity Verlet integrator."""

    def test_invalid_parameters(self):
        """Test timestep and mass validation."""
        with pytest.raises(ValueError):
            VelocityVerletIntegrator(dt=0.0, force_field=ForceField())
        with pytest.raises(ValueError):
            VelocityVerletIntegrator(dt=0.001, force_field=ForceField(), mass=-1.0)

    def test_step_counter(self):
        """Test that each integrate call advances the step and time."""
        system = ParticleSystem(2)
        system.place([[1.0, 1.0, 1.0], [2.2, 1.0, 1.0]], size=10.0)
        integrator = VelocityVerletIntegrator(dt=0.005, force_field=ForceField())
        integrator.prime(system)

        for _ in range(4):
            integrator.integrate(system)

        assert integrator.step == 4
        assert integrator.time == pytest.approx(0.02)
        integrator.reset()
        assert integrator.step == 0

    def test_zero_particles(self):
        """Test that an empty system steps without error."""
        system = ParticleSystem(10, size=5.0)
        force_field = ForceField(r_cut=2.0)
        integrator = VelocityVerletIntegrator(dt=0.01, force_field=force_field)

        integrator.integrate(system)

        assert integrator.step == 1
        assert system.count == 0
        assert np.all(system.positions == 0.0)
        assert np.all(system.velocities == 0.0)
        assert np.all(system.forces == 0.0)

    def test_free_particle_moves_and_wraps(self):
        """Test ballistic motion across the periodic boundary."""
        system = ParticleSystem(1)
        system.place([[9.9, 5.0, 5.0]], size=10.0, velocities=[[1.0, 0.0, -0.5]])
        integrator = VelocityVerletIntegrator(dt=0.1, force_field=ForceField())

        for _ in range(3):
            integrator.integrate(system)

        np.testing.assert_allclose(system.active_positions[0], [0.2, 5.0, 4.85])
        np.testing.assert_allclose(system.active_velocities[0], [1.0, 0.0, -0.5])

    def test_positions_stay_in_box(self):
        """Test that every step leaves positions in [0, L)."""
        config = SimulationConfig(n_cells=4, temperature=0.5, r_cut=2.0)
        system = build_system(config)
        force_field = ForceField(r_cut=2.0, strategy="cell")
        integrator = VelocityVerletIntegrator(dt=0.005, force_field=force_field)
        integrator.prime(system)

        for _ in range(50):
            integrator.integrate(system)
            positions = system.active_positions
            assert np.all(positions >= 0.0)
            assert np.all(positions < system.size)

    def test_jump_beyond_one_box_raises(self):
        """Test that a runaway particle is reported."""
        system = ParticleSystem(1)
        system.place([[5.0, 5.0, 5.0]], size=10.0, velocities=[[200.0, 0.0, 0.0]])
        integrator = VelocityVerletIntegrator(dt=0.1, force_field=ForceField())

        with pytest.raises(OutOfBoundsPosition):
            integrator.integrate(system)

    def test_first_kick_uses_previous_forces(self):
        """Test that prime() supplies the forces for the first half kick."""
        system = ParticleSystem(2)
        system.place([[1.0, 1.0, 1.0], [2.0, 1.0, 1.0]], size=10.0)
        force_field = ForceField()
        integrator = VelocityVerletIntegrator(dt=0.001, force_field=force_field)

        integrator.prime(system)
        f0 = system.active_forces[0, 0]
        integrator.half_kick(system)

        assert system.active_velocities[0, 0] == pytest.approx(0.0005 * f0)


class TestEnergyConservation:
    """Test NVE energy conservation on an LJ crystal."""

    @staticmethod
    def run_nve(system, force_field, dt, n_steps):
        """Integrate and return the total energy after every step."""
        integrator = VelocityVerletIntegrator(dt=dt, force_field=force_field)
        potential = integrator.prime(system)
        totals = [system.kinetic_energy() + potential]
        for _ in range(n_steps):
            integrator.integrate(system)
            totals.append(system.kinetic_energy() + force_field.potential_energy)
        return np.array(totals)

    def test_energy_drift_below_one_percent(self):
        """Test relative energy drift over 1000 steps of a 256 particle crystal."""
        config = SimulationConfig(
            n_cells=4, lattice_constant=1.5874, temperature=0.05, dt=0.002, r_cut=2.4
        )
        system = build_system(config)
        assert system.count == 256
        assert system.temperature() == pytest.approx(0.05)

        totals = self.run_nve(system, ForceField(r_cut=2.4), config.dt, 1000)

        assert relative_drift(totals) < 0.01

    def test_neighbor_list_conserves_energy(self):
        """Test drift with displacement-tracked neighbor lists."""
        config = SimulationConfig(n_cells=5, temperature=0.05, dt=0.002, r_cut=2.4)
        system = build_system(config)
        force_field = ForceField(
            r_cut=2.4, strategy="neighbor", skin=0.2, rebuild="displacement"
        )

        totals = self.run_nve(system, force_field, config.dt, 300)

        assert relative_drift(totals) < 0.01
        assert force_field.timings.neighbor_list_builds < 300
