"""Spatial indexing: cell lists and the neighbor lists derived from them."""

from .cell import CellList
from .neighbor import NeighborList

__all__ = ["CellList", "NeighborList"]
