"""
Weather
=======

Provides wind at any position, from a uniform setting or from
gridded forecast/live fields.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..geo import GeoPos, GeoVec, normalize_angle
from .grid import GridField, load_fields

logger = logging.getLogger(__name__)


@dataclass
class Weather:
    """Weather conditions at a specific point."""
    wind: GeoVec        # Direction wind blows FROM (deg), speed (m/s)
    source: str         # 'uniform', 'forecast', 'live' or 'none'


class WindProvider(ABC):
    """Provides wind data for simulation."""

    @abstractmethod
    def get_weather(self, pos: GeoPos, prefer_live: bool = True) -> Weather:
        """
        Get weather at a position.

        Args:
            pos: Query position
            prefer_live: Use live observations over forecast where available
        """


class UniformWindProvider(WindProvider):
    """Constant wind everywhere."""

    def __init__(self, direction: float = 180.0, speed: float = 7.0):
        if speed < 0:
            raise ValueError(f"Wind speed must be non-negative, got {speed}")
        self.direction = normalize_angle(direction)
        self.speed = speed

    def get_weather(self, pos: GeoPos, prefer_live: bool = True) -> Weather:
        return Weather(wind=GeoVec(self.direction, self.speed), source='uniform')


class GridWindProvider(WindProvider):
    """
    Gridded 10 m wind.

    Priority:
    1. Live field (if preferred, loaded and covering the position)
    2. Forecast field
    3. Calm (outside every grid, source 'none')

    Fields hold u/v components in m/s in the direction the air moves
    (GRIB convention); Weather.wind is converted to the direction the
    wind blows from.
    """

    def __init__(self, u: GridField, v: GridField,
                 live_u: Optional[GridField] = None,
                 live_v: Optional[GridField] = None):
        if (live_u is None) != (live_v is None):
            raise ValueError("Live wind needs both u and v fields")
        self.u = u
        self.v = v
        self.live_u = live_u
        self.live_v = live_v

    @classmethod
    def from_npz(cls, forecast_file: str,
                 live_file: Optional[str] = None) -> 'GridWindProvider':
        """Load forecast (and optionally live) wind from .npz archives with 'u' and 'v'."""
        forecast = load_fields(forecast_file, ['u', 'v'])
        live_u = live_v = None
        if live_file:
            live = load_fields(live_file, ['u', 'v'])
            live_u, live_v = live['u'], live['v']
        return cls(forecast['u'], forecast['v'], live_u, live_v)

    def get_weather(self, pos: GeoPos, prefer_live: bool = True) -> Weather:
        if prefer_live and self.live_u is not None:
            wind = self._sample(self.live_u, self.live_v, pos)
            if wind is not None:
                return Weather(wind=wind, source='live')

        wind = self._sample(self.u, self.v, pos)
        if wind is not None:
            return Weather(wind=wind, source='forecast')

        logger.debug(f"No wind data at {pos.lat:.4f}, {pos.lon:.4f}; using calm")
        return Weather(wind=GeoVec(0.0, 0.0), source='none')

    @staticmethod
    def _sample(u_field: GridField, v_field: GridField, pos: GeoPos) -> Optional[GeoVec]:
        if not u_field.contains(pos.lat, pos.lon):
            return None
        u = u_field.interpolate(pos.lat, pos.lon)
        v = v_field.interpolate(pos.lat, pos.lon)
        if math.isnan(u) or math.isnan(v):
            return None

        speed = math.hypot(u, v)
        # Meteorological convention: direction wind is FROM
        direction = normalize_angle(math.degrees(math.atan2(-u, -v))) if speed > 0 else 0.0
        return GeoVec(direction, speed)
