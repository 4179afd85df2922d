"""Particle storage, box geometry and lattice placement."""

from .box import Box
from .lattice import fcc_particle_count, fcc_positions
from .particles import ParticleSystem

__all__ = ["Box", "ParticleSystem", "fcc_positions", "fcc_particle_count"]
