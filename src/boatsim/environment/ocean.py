"""
Ocean Data
==========

Ocean current and sea-ice cover at a position.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

from ..geo import GeoPos, GeoVec
from .grid import GridField, load_fields

logger = logging.getLogger(__name__)


@dataclass
class OceanData:
    """Ocean conditions at a specific point."""
    valid: bool = False
    current: GeoVec = field(default_factory=GeoVec)   # Direction flowing TO (deg), speed (m/s)
    ice: float = 0.0                                   # Sea-ice cover (percent, 0-100)

    @property
    def ice_speed_factor(self) -> float:
        """Multiplicative boat speed penalty from ice cover."""
        if not self.valid:
            return 1.0
        return 1.0 - (self.ice / 100.0)


def clamp_ice(ice: float) -> float:
    """Clamp ice cover to [0, 100] percent."""
    return max(0.0, min(100.0, ice))


class OceanProvider(ABC):
    """Provides ocean data for simulation."""

    @abstractmethod
    def get(self, pos: GeoPos) -> OceanData:
        """Ocean data at a position; valid=False where there is none (e.g. land)."""


class NoOceanData(OceanProvider):
    """No ocean data anywhere."""

    def get(self, pos: GeoPos) -> OceanData:
        return OceanData(valid=False)


class UniformOcean(OceanProvider):
    """The same current and ice cover everywhere."""

    def __init__(self, current: Optional[GeoVec] = None, ice: float = 0.0):
        self.current = current or GeoVec()
        self.ice = clamp_ice(ice)

    def get(self, pos: GeoPos) -> OceanData:
        return OceanData(
            valid=True,
            current=GeoVec(self.current.angle, self.current.mag),
            ice=self.ice,
        )


class GridOceanProvider(OceanProvider):
    """
    Gridded ocean currents and ice.

    Fields:
        u: Eastward current (m/s)
        v: Northward current (m/s)
        ice: Ice cover (percent), optional

    NaN cells mark missing data (typically land). Positions outside the
    grid or next to a NaN cell return invalid data.
    """

    def __init__(self, u: GridField, v: GridField, ice: Optional[GridField] = None):
        self.u = u
        self.v = v
        self.ice = ice

    @classmethod
    def from_npz(cls, filepath: str) -> 'GridOceanProvider':
        """Load from an .npz archive with 'lats', 'lons', 'u', 'v' and optional 'ice'."""
        fields = load_fields(filepath, ['u', 'v'], optional=['ice'])
        return cls(fields['u'], fields['v'], fields.get('ice'))

    def get(self, pos: GeoPos) -> OceanData:
        if not self.u.contains(pos.lat, pos.lon):
            return OceanData(valid=False)

        u = self.u.interpolate(pos.lat, pos.lon)
        v = self.v.interpolate(pos.lat, pos.lon)
        if math.isnan(u) or math.isnan(v):
            return OceanData(valid=False)

        ice = 0.0
        if self.ice is not None:
            ice = self.ice.interpolate(pos.lat, pos.lon)
            if math.isnan(ice):
                ice = 0.0

        return OceanData(
            valid=True,
            current=GeoVec.from_components(u, v),
            ice=clamp_ice(ice),
        )
