"""
Shared test fixtures for boatsim unit tests.
"""

import math
import random

import numpy as np
import pytest

from boatsim.geo import EARTH_RADIUS_M, GeoPos, GeoVec
from boatsim.environment.grid import GridField
from boatsim.environment.ocean import NoOceanData, OceanProvider, UniformOcean
from boatsim.environment.terrain import GridWaterMap, OpenWaterMap, WaterMap
from boatsim.environment.weather import UniformWindProvider
from boatsim.performance.boat_types import BoatType, BoatWindResponse
from boatsim.performance.polar import Polar
from boatsim.simulation.boat import BoatDynamics


class EastOfWaterMap(WaterMap):
    """Land west of a meridian, water east of it."""

    def __init__(self, coast_lon: float):
        self.coast_lon = coast_lon

    def is_water(self, pos: GeoPos) -> bool:
        return pos.lon >= self.coast_lon


class LandEverywhere(WaterMap):
    def is_water(self, pos: GeoPos) -> bool:
        return False


@pytest.fixture
def polar():
    """Pogo 1250 polar diagram for testing."""
    return Polar.pogo_1250()


@pytest.fixture
def response():
    """Boat type registry with built-in profiles."""
    return BoatWindResponse()


@pytest.fixture
def calm_wind():
    return UniformWindProvider(direction=0.0, speed=0.0)


@pytest.fixture
def north_wind():
    """10 m/s wind from the north."""
    return UniformWindProvider(direction=0.0, speed=10.0)


@pytest.fixture
def seeded_rng():
    return random.Random(1234)


@pytest.fixture
def make_dynamics(response, north_wind, seeded_rng):
    """Factory for BoatDynamics with overridable collaborators."""
    def _make(water_map=None, ocean=None, wind=None, rng=None):
        return BoatDynamics(
            water_map=water_map or OpenWaterMap(),
            ocean=ocean or NoOceanData(),
            wind=wind or north_wind,
            response=response,
            rng=rng or seeded_rng,
        )
    return _make


@pytest.fixture
def dynamics(make_dynamics):
    """Open water, 10 m/s northerly, no ocean data."""
    return make_dynamics()


@pytest.fixture
def sailing_boat(dynamics):
    """Offshore racer at 45N 10W, started and on water."""
    boat = dynamics.create_boat(45.0, -10.0, BoatType.OFFSHORE_RACER)
    boat.set_desired_course(90.0)
    boat.start()
    return boat


@pytest.fixture
def coast():
    """Coastline at 10.001E: land to the west, water to the east."""
    return EastOfWaterMap(coast_lon=10.001)


@pytest.fixture
def land_everywhere():
    return LandEverywhere()


@pytest.fixture
def island_mask():
    """1 degree grid with a 3x3 land block in the middle of open water."""
    lats = np.arange(40.0, 51.0)
    lons = np.arange(-5.0, 6.0)
    water = np.ones((len(lats), len(lons)), dtype=bool)
    water[4:7, 4:7] = False   # 44-46N, 1W-1E
    return GridWaterMap(GridField(name='water', data=water, lats=lats, lons=lons))


@pytest.fixture
def uniform_ocean():
    """1 m/s current flowing east, no ice."""
    return UniformOcean(current=GeoVec(90.0, 1.0), ice=0.0)


@pytest.fixture
def coast_at():
    """Factory: coastline the given number of metres east of 0E, for boats on the equator."""
    def _make(metres: float) -> WaterMap:
        return EastOfWaterMap(coast_lon=math.degrees(metres / EARTH_RADIUS_M))
    return _make
