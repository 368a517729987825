"""
Grid Fields
===========

Regular latitude/longitude grids backing the terrain, ocean and
wind providers. Grids are stored as numpy arrays and can be loaded
from .npz archives.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class GridField:
    """A single gridded field with spatial data."""
    name: str
    data: np.ndarray  # 2D array [lat, lon]
    lats: np.ndarray  # 1D array of latitudes (increasing)
    lons: np.ndarray  # 1D array of longitudes (increasing)

    def __post_init__(self):
        self.data = np.asarray(self.data)
        self.lats = np.asarray(self.lats, dtype=float)
        self.lons = np.asarray(self.lons, dtype=float)

        if self.data.ndim != 2:
            raise ValueError(f"Field '{self.name}' must be 2D, got {self.data.ndim}D")
        if self.data.shape != (len(self.lats), len(self.lons)):
            raise ValueError(
                f"Field '{self.name}' shape {self.data.shape} does not match "
                f"grid ({len(self.lats)} x {len(self.lons)})"
            )

        # Store latitudes increasing (GRIB-style grids often run north to south)
        if len(self.lats) > 1 and self.lats[0] > self.lats[-1]:
            self.lats = self.lats[::-1]
            self.data = self.data[::-1, :]

        if np.any(np.diff(self.lats) <= 0) or np.any(np.diff(self.lons) <= 0):
            raise ValueError(f"Field '{self.name}' axes must be strictly monotonic")

    @property
    def lat_min(self) -> float:
        return float(self.lats[0])

    @property
    def lat_max(self) -> float:
        return float(self.lats[-1])

    @property
    def lon_min(self) -> float:
        return float(self.lons[0])

    @property
    def lon_max(self) -> float:
        return float(self.lons[-1])

    def wrap_lon(self, lon: float) -> float:
        """
        Shift a longitude by whole turns into the grid's range.

        Lets a 0-360 grid answer queries in [-180, 180) and vice versa.
        Longitudes that fall outside the grid either way are returned as is.
        """
        if self.lon_min <= lon <= self.lon_max:
            return lon
        wrapped = self.lon_min + (lon - self.lon_min) % 360.0
        return wrapped if wrapped <= self.lon_max else lon

    def contains(self, lat: float, lon: float) -> bool:
        """Check whether a point lies within the grid bounds."""
        lon = self.wrap_lon(lon)
        return (self.lat_min <= lat <= self.lat_max and
                self.lon_min <= lon <= self.lon_max)

    def nearest(self, lat: float, lon: float):
        """Value of the grid cell nearest to a point (clamped to the grid)."""
        i = int(np.abs(self.lats - lat).argmin())
        j = int(np.abs(self.lons - self.wrap_lon(lon)).argmin())
        return self.data[i, j]

    def interpolate(self, lat: float, lon: float) -> float:
        """Bilinear interpolation; NaN if any surrounding cell is NaN."""
        return bilinear_interpolate(self.data, self.lats, self.lons, lat, self.wrap_lon(lon))


def bilinear_interpolate(data: np.ndarray, lats: np.ndarray, lons: np.ndarray,
                         lat: float, lon: float) -> float:
    """
    Bilinear interpolation on a regular lat/lon grid.

    Args:
        data: 2D array [lat, lon]
        lats: 1D array of increasing latitudes
        lons: 1D array of increasing longitudes
        lat: Query latitude
        lon: Query longitude

    Returns:
        Interpolated value. Points outside the grid are clamped to
        the edge. NaN corners propagate (NaN marks missing data).
    """
    if len(lats) == 1 and len(lons) == 1:
        return float(data[0, 0])

    lat_idx = int(np.searchsorted(lats, lat))
    lon_idx = int(np.searchsorted(lons, lon))

    # Clamp to valid range
    lat_idx = max(1, min(lat_idx, len(lats) - 1)) if len(lats) > 1 else 0
    lon_idx = max(1, min(lon_idx, len(lons) - 1)) if len(lons) > 1 else 0

    i0, i1 = max(lat_idx - 1, 0), lat_idx
    j0, j1 = max(lon_idx - 1, 0), lon_idx

    lat0, lat1 = lats[i0], lats[i1]
    lon0, lon1 = lons[j0], lons[j1]

    lat_frac = (lat - lat0) / (lat1 - lat0) if lat1 != lat0 else 0.0
    lon_frac = (lon - lon0) / (lon1 - lon0) if lon1 != lon0 else 0.0

    lat_frac = max(0.0, min(1.0, lat_frac))
    lon_frac = max(0.0, min(1.0, lon_frac))

    v00 = float(data[i0, j0])
    v01 = float(data[i0, j1])
    v10 = float(data[i1, j0])
    v11 = float(data[i1, j1])

    v0 = v00 + (v01 - v00) * lon_frac
    v1 = v10 + (v11 - v10) * lon_frac
    return v0 + (v1 - v0) * lat_frac


def load_fields(filepath: str, names: list[str],
                optional: Optional[list[str]] = None) -> Dict[str, GridField]:
    """
    Load named fields from an .npz archive holding 'lats' and 'lons'.

    Args:
        filepath: Path to the .npz file
        names: Required field names
        optional: Field names loaded only if present

    Returns:
        Mapping of field name to GridField
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Grid file not found: {path}")

    with np.load(path) as archive:
        for key in ['lats', 'lons', *names]:
            if key not in archive.files:
                raise ValueError(f"Grid file {path} is missing array '{key}'")

        lats = archive['lats']
        lons = archive['lons']
        fields = {}
        for name in [*names, *(optional or [])]:
            if name in archive.files:
                fields[name] = GridField(name=name, data=archive[name], lats=lats, lons=lons)

    logger.info(f"Loaded {sorted(fields)} from {path} "
                f"({len(lats)} x {len(lons)} grid)")
    return fields
