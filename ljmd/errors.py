"""Exception hierarchy for the simulation core."""

from __future__ import annotations

from collections.abc import Sequence


class SimulationError(ValueError):
    """Base class for errors raised by the simulation core."""


class CapacityExceeded(SimulationError):
    """A placement requested more particles than the system has room for."""

    def __init__(self, requested: int, capacity: int) -> None:
        self.requested = requested
        self.capacity = capacity
        super().__init__(
            f"placement needs {requested} particles but capacity is {capacity}"
        )


class InvalidCellGeometry(SimulationError):
    """The cutoff is too large for the box to hold a 3x3x3 cell stencil."""

    def __init__(self, box_size: float, cutoff: float, number_of_cells: int) -> None:
        self.box_size = box_size
        self.cutoff = cutoff
        self.number_of_cells = number_of_cells
        super().__init__(
            f"box size {box_size} with cutoff {cutoff} gives {number_of_cells} "
            "cells per edge; at least 3 are required"
        )


class OutOfBoundsPosition(SimulationError):
    """One or more particle positions lie outside the primary box."""

    def __init__(self, indices: Sequence[int], box_size: float) -> None:
        self.indices = [int(i) for i in indices]
        self.box_size = box_size
        shown = ", ".join(str(i) for i in self.indices[:10])
        more = "" if len(self.indices) <= 10 else f" (+{len(self.indices) - 10} more)"
        super().__init__(
            f"particles [{shown}]{more} lie outside [0, {box_size})"
        )
