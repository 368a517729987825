"""
Terrain
=======

Land/water classification of positions.
"""

import logging
from abc import ABC, abstractmethod

import numpy as np

from ..geo import GeoPos
from .grid import GridField, load_fields

logger = logging.getLogger(__name__)


class WaterMap(ABC):
    """Answers whether a position is water."""

    @abstractmethod
    def is_water(self, pos: GeoPos) -> bool:
        """Return True if the position is navigable water."""


class OpenWaterMap(WaterMap):
    """Everywhere is water."""

    def is_water(self, pos: GeoPos) -> bool:
        return True


class GridWaterMap(WaterMap):
    """
    Water mask on a regular lat/lon grid.

    Each cell is True for water and False for land; queries use the
    nearest cell. Positions outside the grid are treated as open water.
    """

    def __init__(self, mask: GridField):
        self.mask = GridField(
            name=mask.name,
            data=np.asarray(mask.data, dtype=bool),
            lats=mask.lats,
            lons=mask.lons,
        )

    @classmethod
    def from_npz(cls, filepath: str) -> 'GridWaterMap':
        """Load a mask from an .npz archive with 'lats', 'lons' and 'water' arrays."""
        fields = load_fields(filepath, ['water'])
        return cls(fields['water'])

    def is_water(self, pos: GeoPos) -> bool:
        if not self.mask.contains(pos.lat, pos.lon):
            return True
        return bool(self.mask.nearest(pos.lat, pos.lon))
