"""Trajectory analysis."""

from .energy import EnergyAnalyzer, relative_drift

__all__ = ["EnergyAnalyzer", "relative_drift"]
