"""
Boat Types
==========

Per-boat-type performance profiles: polar diagram, turn rate and
speed-change responsiveness. BoatWindResponse is the lookup the
simulation core consults every tick.
"""

import json
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, Optional
import logging

from .polar import Polar

logger = logging.getLogger(__name__)


KNOTS_PER_MPS = 1.94384
MPS_PER_KNOT = 0.514444


class BoatType(IntEnum):
    """Built-in boat types."""
    OFFSHORE_RACER = 0      # Pogo 1250 reference polar
    CRUISING_YACHT = 1      # Heavier, slower to respond
    DAYSAILER = 2           # Small, quick turning
    CLIPPER = 3             # Large square-rigger, slow to turn


@dataclass
class BoatProfile:
    """Performance profile for one boat type."""
    name: str
    polar: Polar
    course_change_rate: float      # Max heading change (deg/s)
    speed_change_response: float   # Speed smoothing time constant (s)

    def __post_init__(self):
        if self.course_change_rate <= 0:
            raise ValueError(f"{self.name}: course_change_rate must be positive")
        if self.speed_change_response < 0:
            raise ValueError(f"{self.name}: speed_change_response must be non-negative")


def _builtin_profiles() -> Dict[int, BoatProfile]:
    reference = Polar.pogo_1250()
    return {
        BoatType.OFFSHORE_RACER: BoatProfile(
            name='offshore_racer',
            polar=reference,
            course_change_rate=4.0,
            speed_change_response=30.0,
        ),
        BoatType.CRUISING_YACHT: BoatProfile(
            name='cruising_yacht',
            polar=reference.scaled(0.8, name='cruising_yacht'),
            course_change_rate=3.0,
            speed_change_response=60.0,
        ),
        BoatType.DAYSAILER: BoatProfile(
            name='daysailer',
            polar=reference.scaled(0.6, name='daysailer'),
            course_change_rate=10.0,
            speed_change_response=10.0,
        ),
        BoatType.CLIPPER: BoatProfile(
            name='clipper',
            polar=reference.scaled(1.1, name='clipper'),
            course_change_rate=1.0,
            speed_change_response=180.0,
        ),
    }


class BoatWindResponse:
    """
    Boat-type lookup of turn rate, polar speed and responsiveness.

    Built-in types are always present; extra profiles can be
    registered under new integer ids.
    """

    def __init__(self, profiles: Optional[Dict[int, BoatProfile]] = None):
        self._profiles: Dict[int, BoatProfile] = _builtin_profiles()
        if profiles:
            self._profiles.update(profiles)

    def register(self, boat_type: int, profile: BoatProfile):
        """Add or replace the profile for a boat type id."""
        if boat_type in self._profiles:
            logger.info(f"Replacing profile for boat type {boat_type} with '{profile.name}'")
        self._profiles[int(boat_type)] = profile

    def load_profile(self, boat_type: int, filepath: str) -> BoatProfile:
        """
        Register a profile from a JSON file.

        Expected keys: name, course_change_rate, speed_change_response
        and polar (tws/twa/stw tables, knots).
        """
        with open(filepath, 'r') as f:
            data = json.load(f)
        try:
            profile = BoatProfile(
                name=data.get('name', f'type_{boat_type}'),
                polar=Polar.from_dict(data['polar']),
                course_change_rate=float(data['course_change_rate']),
                speed_change_response=float(data['speed_change_response']),
            )
        except KeyError as e:
            raise ValueError(f"Boat profile {filepath} missing key {e}") from e
        self.register(boat_type, profile)
        logger.info(f"Loaded boat profile '{profile.name}' as type {boat_type}")
        return profile

    def is_known(self, boat_type: int) -> bool:
        return boat_type in self._profiles

    def profile(self, boat_type: int) -> BoatProfile:
        try:
            return self._profiles[boat_type]
        except KeyError:
            raise ValueError(f"Unknown boat type: {boat_type}") from None

    def get_course_change_rate(self, boat_type: int) -> float:
        """Maximum heading change in degrees per second."""
        return self.profile(boat_type).course_change_rate

    def get_boat_speed(self, wind_mag: float, angle_from_wind: float, boat_type: int) -> float:
        """
        Target boat speed for the given wind.

        Args:
            wind_mag: True wind speed (m/s)
            angle_from_wind: Signed angle between wind and heading (degrees)
            boat_type: Boat type id

        Returns:
            Boat speed (m/s)
        """
        polar = self.profile(boat_type).polar
        stw_kts = polar.get_target_speed(angle_from_wind, wind_mag * KNOTS_PER_MPS)
        return stw_kts * MPS_PER_KNOT

    def get_speed_change_response(self, boat_type: int) -> float:
        """Speed smoothing time constant in seconds."""
        return self.profile(boat_type).speed_change_response
