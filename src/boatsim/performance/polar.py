"""
Polar Diagram Module
====================

Loads and interpolates a boat's polar performance diagram.
Used to look up target boat speed for a true wind speed and angle.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
import logging

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class PolarData:
    """Polar diagram data structure."""
    name: str
    tws: list[float]    # True wind speeds (knots)
    twa: list[float]    # True wind angles (degrees)
    stw: list[list[float]]  # Speed through water [twa_idx][tws_idx]


class Polar:
    """
    Boat polar diagram for target speed lookup.

    The polar provides target boat speed for given TWA and TWS.
    Table values are knots; conversion to simulation units is done
    by the caller (see BoatWindResponse).
    """

    def __init__(self, polar_data: Optional[PolarData] = None):
        self._data = polar_data or self._pogo_1250_polar()
        self._tws = np.asarray(self._data.tws, dtype=float)
        self._twa = np.asarray(self._data.twa, dtype=float)
        self._stw = np.asarray(self._data.stw, dtype=float)
        self._validate()

    def _validate(self):
        """Check table shape and axis ordering."""
        if self._stw.shape != (len(self._twa), len(self._tws)):
            raise ValueError(
                f"Polar '{self._data.name}': stw table shape {self._stw.shape} "
                f"does not match twa x tws ({len(self._twa)} x {len(self._tws)})"
            )
        if len(self._tws) < 2 or len(self._twa) < 2:
            raise ValueError(f"Polar '{self._data.name}': need at least two TWS and TWA columns")
        if np.any(np.diff(self._tws) <= 0) or np.any(np.diff(self._twa) <= 0):
            raise ValueError(f"Polar '{self._data.name}': TWS and TWA axes must be increasing")
        if np.any(self._stw < 0):
            raise ValueError(f"Polar '{self._data.name}': negative boat speed in table")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Polar':
        """Build a polar from a dict with 'tws', 'twa' and 'stw' keys."""
        try:
            polar_data = PolarData(
                name=data.get('name', 'unknown'),
                tws=list(data['tws']),
                twa=list(data['twa']),
                stw=[list(row) for row in data['stw']]
            )
        except KeyError as e:
            raise ValueError(f"Polar definition missing key {e}") from e
        return cls(polar_data)

    @classmethod
    def from_json(cls, filepath: str) -> 'Polar':
        """Load polar from JSON file."""
        with open(filepath, 'r') as f:
            data = json.load(f)
        return cls.from_dict(data)

    @classmethod
    def pogo_1250(cls) -> 'Polar':
        """Return the Pogo 1250 polar (built-in)."""
        return cls(cls._pogo_1250_polar())

    @staticmethod
    def _pogo_1250_polar() -> PolarData:
        """Built-in Pogo 1250 polar data."""
        return PolarData(
            name='pogo1250',
            tws=[0, 4, 6, 8, 10, 12, 14, 16, 20, 25, 30, 35, 40, 45, 50, 55, 60],
            twa=[
                0, 5, 10, 15, 20, 25, 32, 36, 40, 45, 52, 60,
                70, 80, 90, 100, 110, 120, 130, 140, 150, 160, 170, 180
            ],
            stw=[
                [0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0, 0],
                [0, 0.4, 0.6, 0.8, 0.9, 1, 1, 1, 1.1, 1.1, 1.1, 1.1, 0.1, 0.1, 0.1, 0, 0],
                [0, 0.8, 1.2, 1.6, 1.8, 2, 2, 2.1, 2.1, 2.2, 2.2, 2.2, 0.5, 0.2, 0.2, 0, 0],
                [0, 1.2, 1.8, 2.4, 2.7, 2.9, 3, 3.1, 3.2, 3.3, 3.3, 3.3, 1.2, 0.5, 0.3, 0, 0],
                [0, 1.4, 2.1, 2.7, 3.1, 3.4, 3.5, 3.6, 3.6, 3.7, 3.8, 3.7, 1.7, 0.7, 0.4, 0, 0],
                [0, 1.7, 2.5, 3.2, 3.7, 4, 4.1, 4.3, 4.3, 4.4, 4.5, 4.4, 2.6, 1.1, 0.4, 0, 0],
                [0, 2.8, 4.2, 5.4, 6.2, 6.7, 6.9, 7.1, 7.2, 7.4, 7.5, 7.4, 5.6, 2.2, 0.7, 0, 0],
                [0, 3.1, 4.7, 5.9, 6.7, 7, 7.2, 7.4, 7.6, 7.8, 7.9, 7.9, 6.5, 2.6, 0.8, 0, 0],
                [0, 3.5, 5.1, 6.3, 7, 7.3, 7.5, 7.7, 7.9, 8.1, 8.2, 8.3, 7.4, 2.9, 1.2, 0, 0],
                [0, 3.8, 5.6, 6.7, 7.3, 7.6, 7.8, 8, 8.2, 8.4, 8.5, 8.6, 8.2, 3, 1.3, 0, 0],
                [0, 4.2, 6, 7, 7.7, 8, 8.2, 8.3, 8.6, 8.9, 9, 9.1, 8.9, 3.2, 1.4, 0, 0],
                [0, 4.6, 6.3, 7.3, 8, 8.3, 8.5, 8.7, 9, 9.3, 9.5, 9.6, 9.6, 3.8, 1.9, 0, 0],
                [0, 4.8, 6.6, 7.5, 8.2, 8.6, 8.9, 9.1, 9.5, 9.8, 10.1, 10.4, 10.4, 4.2, 2.1, 0, 0],
                [0, 5, 6.9, 7.9, 8.3, 8.8, 9.2, 9.4, 9.9, 10.4, 10.9, 11.3, 11.3, 4.5, 2.3, 0, 0],
                [0, 5.3, 7.1, 8.1, 8.6, 8.9, 9.3, 9.7, 10.4, 11.1, 11.8, 12.5, 12.5, 5.6, 3.1, 0.6, 0.6],
                [0, 5.4, 7.1, 8.2, 8.8, 9.2, 9.5, 9.9, 10.9, 11.9, 12.8, 14.1, 14.1, 7.1, 4.2, 0.7, 0.7],
                [0, 5.3, 7, 8.1, 8.8, 9.4, 9.8, 10.3, 11.2, 12.7, 14.3, 15, 15, 8.3, 5.3, 1.5, 1.5],
                [0, 5, 6.8, 7.8, 8.6, 9.4, 10, 10.6, 11.8, 13.2, 14.9, 15.7, 15.7, 9.4, 6.3, 1.6, 1.6],
                [0, 4.5, 6.3, 7.4, 8.3, 9, 9.8, 10.6, 12.3, 14.4, 15.6, 16.6, 16.6, 10.8, 7.5, 2.5, 2.5],
                [0, 3.8, 5.6, 6.9, 7.8, 8.5, 9.2, 10, 12.2, 15, 16.3, 17.6, 17.6, 13.2, 9.7, 3.5, 2.6],
                [0, 3.2, 4.8, 6.1, 7.1, 7.9, 8.6, 9.3, 10.9, 14.4, 16.8, 18.6, 18.6, 14.9, 11.2, 3.7, 3.7],
                [0, 2.7, 4.1, 5.3, 6.4, 7.3, 8, 8.7, 10, 12.4, 15.4, 17.9, 17.9, 15.2, 11.6, 4.5, 3.6],
                [0, 2.4, 3.6, 4.8, 5.9, 6.8, 7.6, 8.2, 9.4, 11.4, 14.3, 16.6, 16.6, 15.8, 12.5, 5, 4.2],
                [0, 2.2, 3.3, 4.4, 5.5, 6.4, 7.2, 7.9, 9, 10.6, 12.8, 15.4, 15.4, 15.4, 12.3, 4.6, 3.9],
            ]
        )

    @property
    def name(self) -> str:
        return self._data.name

    def scaled(self, factor: float, name: Optional[str] = None) -> 'Polar':
        """
        Return a copy with every boat speed multiplied by factor.

        Used to derive slower or faster hulls from a reference polar.
        """
        if factor < 0:
            raise ValueError(f"Polar scale factor must be non-negative, got {factor}")
        return Polar(PolarData(
            name=name or f"{self._data.name}x{factor:g}",
            tws=list(self._data.tws),
            twa=list(self._data.twa),
            stw=(self._stw * factor).tolist()
        ))

    def get_target_speed(self, twa: float, tws: float) -> float:
        """
        Get target boat speed from polar.

        Args:
            twa: True wind angle (degrees, signed or 0-360)
            tws: True wind speed (knots)

        Returns:
            Target speed through water (knots)
        """
        # Fold TWA into 0-180; the polar is symmetric port/starboard
        twa = abs(twa) % 360.0
        if twa > 180:
            twa = 360 - twa

        i0, i1, twa_frac = self._bracket(self._twa, twa)
        j0, j1, tws_frac = self._bracket(self._tws, tws)

        # Interpolate along TWS axis, then TWA axis
        v0 = self._stw[i0, j0] + (self._stw[i0, j1] - self._stw[i0, j0]) * tws_frac
        v1 = self._stw[i1, j0] + (self._stw[i1, j1] - self._stw[i1, j0]) * tws_frac
        return float(v0 + (v1 - v0) * twa_frac)

    @staticmethod
    def _bracket(axis: np.ndarray, val: float) -> Tuple[int, int, float]:
        """Find bracketing indices and interpolation factor, clamped to the axis."""
        if val <= axis[0]:
            return (0, 0, 0.0)
        if val >= axis[-1]:
            last = len(axis) - 1
            return (last, last, 0.0)

        hi = int(np.searchsorted(axis, val, side='right'))
        lo = hi - 1
        frac = (val - axis[lo]) / (axis[hi] - axis[lo])
        return (lo, hi, float(frac))
