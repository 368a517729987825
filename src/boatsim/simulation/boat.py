"""
Boat Dynamics Model
===================

Per-tick motion of a single wind-powered boat on a spherical earth.

Each tick runs, in order:
    1. Boundary guard (stopped / pole proximity)
    2. Transit to water (boat started on land)
    3. Ocean and weather lookup
    4. Drifting (sails down) or course + speed update (sailing)
    5. Position update: propulsion, then ocean current
    6. Aground check
"""

import math
import random
from enum import Enum, auto
from typing import Optional
import logging

from ..geo import GeoPos, GeoVec, advance, compass_diff, normalize_angle
from ..environment.ocean import OceanData, OceanProvider, NoOceanData
from ..environment.terrain import WaterMap, OpenWaterMap
from ..environment.weather import WindProvider, UniformWindProvider
from ..performance.boat_types import BoatType, BoatWindResponse

logger = logging.getLogger(__name__)


# Latitude margin around each pole where boats are stopped (degrees)
FORBIDDEN_LAT = 0.0001

# Look-ahead for water when starting on land (metres)
MOVE_TO_WATER_DISTANCE = 100.0
MOVE_TO_WATER_SEARCH_STEP = 10.0

# Speed while walking off land (m/s)
MOVE_TO_WATER_SPEED = 0.5

# Share of wind speed a boat drifts at with sails down
SAILS_DOWN_WIND_FACTOR = 0.1

# Course difference beyond which the turn direction is ambiguous (degrees)
OPPOSITE_COURSE_THRESHOLD = 179.0


class BoatState(Enum):
    """Motion state of a boat."""
    STOPPED = auto()                # No motion, ignores all forcing
    TRANSITING_TO_WATER = auto()    # Walking toward water along desired course
    SAILING = auto()                # Polar-driven propulsion
    DRIFTING = auto()               # Sails down, pushed by the wind


class Boat:
    """
    A single simulated boat.

    Created stopped with zero velocity. The owner (a pilot or driver)
    starts, stops and steers it; BoatDynamics.advance moves it.
    """

    def __init__(self, lat: float, lon: float, boat_type: int,
                 response: Optional[BoatWindResponse] = None):
        """
        Initialize a boat.

        Args:
            lat: Latitude (degrees, -90 to 90)
            lon: Longitude (degrees)
            boat_type: Boat type id
            response: Registry used to validate boat_type. Without one,
                      only built-in BoatType values are accepted.

        Raises:
            ValueError: On out-of-range coordinates or unknown boat type
        """
        if not (math.isfinite(lat) and math.isfinite(lon)):
            raise ValueError(f"Position must be finite, got ({lat}, {lon})")
        if not -90.0 <= lat <= 90.0:
            raise ValueError(f"Latitude must be within [-90, 90], got {lat}")

        if response is not None:
            if not response.is_known(boat_type):
                raise ValueError(f"Unknown boat type: {boat_type}")
        elif boat_type not in BoatType.__members__.values():
            raise ValueError(f"Unknown boat type: {boat_type}")

        self.position = GeoPos(lat, lon)
        self.velocity = GeoVec(0.0, 0.0)
        self.desired_course = 0.0
        self.distance_travelled = 0.0

        self._boat_type = int(boat_type)

        self.state = BoatState.STOPPED
        self.sails_down = False

        # First motion after launch snaps heading to the desired course
        self.immediate_course_pending = True

    @property
    def boat_type(self) -> int:
        return self._boat_type

    @property
    def stopped(self) -> bool:
        return self.state == BoatState.STOPPED

    @property
    def moving_to_sea(self) -> bool:
        return self.state == BoatState.TRANSITING_TO_WATER

    @property
    def heading(self) -> float:
        return self.velocity.angle

    @property
    def speed(self) -> float:
        return self.velocity.mag

    def start(self):
        """Get underway. The boat first makes sure it is on water."""
        if self.state != BoatState.TRANSITING_TO_WATER:
            logger.info(f"Boat starting from {self.state.name} at "
                        f"{self.position.lat:.4f}, {self.position.lon:.4f}")
        self.state = BoatState.TRANSITING_TO_WATER

    def stop(self):
        """Stop the boat where it is."""
        if self.state != BoatState.STOPPED:
            logger.info(f"Boat stopped from {self.state.name}")
        self.state = BoatState.STOPPED
        self.velocity.mag = 0.0

    def set_desired_course(self, course: float):
        """Set the course the boat steers toward (degrees)."""
        if not math.isfinite(course):
            raise ValueError(f"Course must be finite, got {course}")
        self.desired_course = normalize_angle(course)

    def set_sails_down(self, sails_down: bool):
        """Lower or raise the sails."""
        self.sails_down = bool(sails_down)
        if self.state in (BoatState.SAILING, BoatState.DRIFTING):
            self.state = self._underway_state()

    def _underway_state(self) -> BoatState:
        return BoatState.DRIFTING if self.sails_down else BoatState.SAILING

    def __repr__(self) -> str:
        return (f"Boat(type={self._boat_type}, state={self.state.name}, "
                f"pos=({self.position.lat:.5f}, {self.position.lon:.5f}), "
                f"hdg={self.velocity.angle:.1f}, spd={self.velocity.mag:.2f})")


class BoatDynamics:
    """
    Advances boats through wind, current, ice and land boundaries.

    Holds the environment collaborators and the random source used to
    break ties when the desired course is directly behind. Boats hold
    no reference to it, so one instance can drive many independent boats
    from a single thread.
    """

    def __init__(self,
                 water_map: Optional[WaterMap] = None,
                 ocean: Optional[OceanProvider] = None,
                 wind: Optional[WindProvider] = None,
                 response: Optional[BoatWindResponse] = None,
                 rng: Optional[random.Random] = None,
                 prefer_live_weather: bool = True):
        """
        Initialize boat dynamics.

        Args:
            water_map: Land/water classification (default: all water)
            ocean: Ocean current and ice provider (default: none)
            wind: Wind provider (default: uniform 7 m/s from the south)
            response: Boat type performance registry
            rng: Random source for course tie-breaks
            prefer_live_weather: Ask the wind provider for live data first
        """
        self.water_map = water_map or OpenWaterMap()
        self.ocean = ocean or NoOceanData()
        self.wind = wind or UniformWindProvider()
        self.response = response or BoatWindResponse()
        self.rng = rng or random.Random()
        self.prefer_live_weather = prefer_live_weather

    def create_boat(self, lat: float, lon: float, boat_type: int) -> Boat:
        """Create a stopped boat validated against this instance's boat types."""
        return Boat(lat, lon, boat_type, response=self.response)

    def advance(self, boat: Boat, dt: float) -> BoatState:
        """
        Advance a boat by one tick.

        Args:
            boat: Boat to move
            dt: Tick duration (seconds, > 0)

        Returns:
            Boat state after the tick
        """
        if not dt > 0:
            raise ValueError(f"Tick duration must be positive, got {dt}")

        if boat.stopped:
            return boat.state

        lat = boat.position.lat
        if lat >= 90.0 - FORBIDDEN_LAT or lat <= -90.0 + FORBIDDEN_LAT:
            # Bearing math degenerates at the poles
            self._force_stop(boat, f"too close to pole (lat {lat:.5f})")
            return boat.state

        if boat.moving_to_sea and self._transit_to_water(boat, dt):
            return boat.state

        od = self.ocean.get(boat.position)

        boat.state = boat._underway_state()
        if boat.state == BoatState.DRIFTING:
            self._drift(boat, od)
        else:
            self._update_course(boat, dt)
            self._update_speed(boat, dt, od)

        self._update_position(boat, dt, od)

        if not self.water_map.is_water(boat.position):
            self._force_stop(boat, "ran aground")

        return boat.state

    def is_heading_toward_water(self, boat: Boat) -> bool:
        """
        Check whether water lies ahead along the desired course.

        Searches in fixed steps from the boat's position up to a bounded
        distance. Does not modify the boat.
        """
        pos = boat.position.copy()
        step = GeoVec(boat.desired_course, MOVE_TO_WATER_SEARCH_STEP)

        searched = 0.0
        while searched <= MOVE_TO_WATER_DISTANCE + MOVE_TO_WATER_SEARCH_STEP:
            if self.water_map.is_water(pos):
                return True
            advance(pos, step)
            searched += MOVE_TO_WATER_SEARCH_STEP

        return False

    def _transit_to_water(self, boat: Boat, dt: float) -> bool:
        """
        Handle a boat that may be on land.

        Returns:
            True if the tick is complete, False to continue with normal motion
        """
        if self.water_map.is_water(boat.position):
            boat.state = boat._underway_state()
            logger.debug(f"Reached water, now {boat.state.name}")

            if boat.immediate_course_pending:
                boat.velocity.angle = boat.desired_course
                boat.immediate_course_pending = False
            return False

        if self.is_heading_toward_water(boat):
            boat.velocity.angle = boat.desired_course
            boat.velocity.mag = MOVE_TO_WATER_SPEED
            advance(boat.position, GeoVec(boat.desired_course, MOVE_TO_WATER_SPEED * dt))
        else:
            self._force_stop(boat, f"no water within {MOVE_TO_WATER_DISTANCE:.0f} m "
                                   f"on course {boat.desired_course:.0f}")
        return True

    def _update_course(self, boat: Boat, dt: float):
        """Turn toward the desired course at the boat type's maximum rate."""
        course_diff = compass_diff(boat.velocity.angle, boat.desired_course)
        step = self.response.get_course_change_rate(boat.boat_type) * dt

        if abs(course_diff) <= step:
            boat.velocity.angle = boat.desired_course
            return

        if -OPPOSITE_COURSE_THRESHOLD <= course_diff < 0.0:
            turn = -step
        elif 0.0 < course_diff <= OPPOSITE_COURSE_THRESHOLD:
            turn = step
        else:
            # Desired course is (nearly) dead astern: no preferred side
            turn = -step if self.rng.random() < 0.5 else step

        boat.velocity.angle = normalize_angle(boat.velocity.angle + turn)

    def _update_speed(self, boat: Boat, dt: float, od: OceanData):
        """Blend speed toward the polar target for the current wind."""
        wx = self.wind.get_weather(boat.position, self.prefer_live_weather)

        angle_from_wind = compass_diff(wx.wind.angle, boat.velocity.angle)
        target = (self.response.get_boat_speed(wx.wind.mag, angle_from_wind, boat.boat_type) *
                  od.ice_speed_factor)

        response = self.response.get_speed_change_response(boat.boat_type)
        boat.velocity.mag = (response * boat.velocity.mag + dt * target) / (response + dt)

    def _drift(self, boat: Boat, od: OceanData):
        """Sails down: move downwind at a fraction of wind speed."""
        wx = self.wind.get_weather(boat.position, self.prefer_live_weather)

        boat.velocity.angle = normalize_angle(wx.wind.angle + 180.0)
        boat.velocity.mag = wx.wind.mag * SAILS_DOWN_WIND_FACTOR * od.ice_speed_factor

    def _update_position(self, boat: Boat, dt: float, od: OceanData):
        """Move by velocity over water, then by ocean current."""
        over_water = boat.velocity.scaled(dt)
        advance(boat.position, over_water)

        if od.valid:
            drift = od.current.scaled(dt)
            advance(boat.position, drift)
            boat.distance_travelled += over_water.add(drift).mag
        else:
            boat.distance_travelled += abs(over_water.mag)

    def _force_stop(self, boat: Boat, reason: str):
        logger.info(f"Boat stopped at {boat.position.lat:.5f}, "
                    f"{boat.position.lon:.5f}: {reason}")
        boat.state = BoatState.STOPPED
        boat.velocity.mag = 0.0
