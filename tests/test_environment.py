"""
Unit tests for grid fields and the terrain, ocean and weather providers.
"""

import math

import numpy as np
import pytest

from boatsim.geo import GeoPos, GeoVec
from boatsim.environment.grid import GridField, bilinear_interpolate, load_fields
from boatsim.environment.ocean import (
    GridOceanProvider, NoOceanData, OceanData, UniformOcean, clamp_ice,
)
from boatsim.environment.terrain import GridWaterMap, OpenWaterMap
from boatsim.environment.weather import GridWindProvider, UniformWindProvider


LATS = np.array([0.0, 1.0, 2.0])
LONS = np.array([10.0, 11.0, 12.0])


def field(name, data, lats=LATS, lons=LONS):
    return GridField(name=name, data=np.asarray(data, dtype=float), lats=lats, lons=lons)


def constant(name, value):
    return field(name, np.full((3, 3), value))


class TestGridField:
    """Tests for GridField and bilinear interpolation."""

    def test_shape_mismatch(self):
        with pytest.raises(ValueError, match="does not match"):
            GridField(name='bad', data=np.zeros((2, 3)), lats=LATS, lons=LONS)

    def test_not_2d(self):
        with pytest.raises(ValueError, match="2D"):
            GridField(name='bad', data=np.zeros(3), lats=LATS, lons=LONS)

    def test_decreasing_lats_flipped(self):
        """North-to-south grids are stored south-to-north."""
        data = [[2.0, 2.0, 2.0], [1.0, 1.0, 1.0], [0.0, 0.0, 0.0]]
        f = field('flip', data, lats=np.array([2.0, 1.0, 0.0]))

        assert f.lats[0] == 0.0
        assert f.interpolate(0.0, 11.0) == pytest.approx(0.0)
        assert f.interpolate(2.0, 11.0) == pytest.approx(2.0)

    def test_interpolate_center(self):
        data = [[0.0, 1.0, 2.0], [1.0, 2.0, 3.0], [2.0, 3.0, 4.0]]
        f = field('ramp', data)

        assert f.interpolate(0.5, 10.5) == pytest.approx(1.0)
        assert f.interpolate(1.5, 11.5) == pytest.approx(3.0)

    def test_interpolate_clamps_outside(self):
        f = field('ramp', [[0.0, 1.0, 2.0], [1.0, 2.0, 3.0], [2.0, 3.0, 4.0]])
        assert f.interpolate(-5.0, 0.0) == pytest.approx(0.0)
        assert f.interpolate(5.0, 50.0) == pytest.approx(4.0)

    def test_nan_propagates(self):
        data = np.ones((3, 3))
        data[1, 1] = np.nan
        assert math.isnan(bilinear_interpolate(data, LATS, LONS, 0.5, 10.5))

    def test_contains(self):
        f = constant('c', 1.0)
        assert f.contains(1.0, 11.0)
        assert not f.contains(3.0, 11.0)
        assert not f.contains(1.0, 9.0)

    def test_nearest(self):
        f = field('ramp', [[0.0, 1.0, 2.0], [1.0, 2.0, 3.0], [2.0, 3.0, 4.0]])
        assert f.nearest(1.2, 11.9) == pytest.approx(3.0)

    def test_load_fields(self, tmp_path):
        path = tmp_path / 'grid.npz'
        np.savez(path, lats=LATS, lons=LONS, u=np.ones((3, 3)), ice=np.zeros((3, 3)))

        fields = load_fields(str(path), ['u'], optional=['ice', 'v'])
        assert set(fields) == {'u', 'ice'}
        assert fields['u'].interpolate(1.0, 11.0) == pytest.approx(1.0)

    def test_load_fields_missing_array(self, tmp_path):
        path = tmp_path / 'grid.npz'
        np.savez(path, lats=LATS, lons=LONS, u=np.ones((3, 3)))

        with pytest.raises(ValueError, match="'v'"):
            load_fields(str(path), ['u', 'v'])

    def test_load_fields_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_fields(str(tmp_path / 'nope.npz'), ['u'])


class TestLongitudeWrap:
    """Tests for grids stored with 0-360 longitudes."""

    @pytest.fixture
    def global_field(self):
        lons = np.array([0.0, 90.0, 180.0, 270.0])
        return GridField(name='lon', data=np.tile(lons, (2, 1)),
                         lats=np.array([0.0, 1.0]), lons=lons)

    def test_western_longitudes_inside(self, global_field):
        assert global_field.contains(0.5, -90.0)
        assert global_field.interpolate(0.5, -90.0) == pytest.approx(270.0)
        assert global_field.interpolate(0.5, -135.0) == pytest.approx(225.0)
        assert global_field.nearest(0.5, -85.0) == pytest.approx(270.0)

    def test_eastern_longitudes_unchanged(self, global_field):
        assert global_field.interpolate(0.5, 45.0) == pytest.approx(45.0)

    def test_gap_after_last_column_is_outside(self, global_field):
        """Columns stop at 270E, so 10W (350E) is not covered."""
        assert not global_field.contains(0.5, -10.0)

    def test_signed_grid_accepts_0_360_query(self):
        lons = np.array([-180.0, -90.0, 0.0, 90.0])
        f = GridField(name='lon', data=np.tile(lons, (2, 1)), lats=np.array([0.0, 1.0]), lons=lons)

        assert f.contains(0.5, 190.0)
        assert f.interpolate(0.5, 190.0) == pytest.approx(-170.0)

    def test_water_map(self):
        lons = np.array([0.0, 90.0, 180.0, 270.0])
        water = np.array([[True, True, True, False]] * 2)
        water_map = GridWaterMap(GridField(name='water', data=water,
                                           lats=np.array([0.0, 1.0]), lons=lons))

        assert not water_map.is_water(GeoPos(0.5, -90.0))
        assert water_map.is_water(GeoPos(0.5, 0.0))

    def test_wind_and_ocean(self):
        lats = np.array([0.0, 1.0])
        lons = np.array([0.0, 90.0, 180.0, 270.0])

        def grid(name, value):
            return GridField(name=name, data=np.full((2, 4), value), lats=lats, lons=lons)

        wind = GridWindProvider(grid('u', 0.0), grid('v', 5.0))
        ocean = GridOceanProvider(grid('u', 1.0), grid('v', 0.0))

        assert wind.get_weather(GeoPos(0.5, -120.0)).source == 'forecast'
        assert ocean.get(GeoPos(0.5, -120.0)).valid


class TestWaterMaps:
    """Tests for terrain classification."""

    def test_open_water(self):
        assert OpenWaterMap().is_water(GeoPos(45.0, 0.0))

    def test_island(self, island_mask):
        assert not island_mask.is_water(GeoPos(45.0, 0.0))
        assert island_mask.is_water(GeoPos(42.0, -3.0))

    def test_outside_grid_is_water(self, island_mask):
        assert island_mask.is_water(GeoPos(-30.0, 100.0))

    def test_from_npz(self, tmp_path):
        path = tmp_path / 'mask.npz'
        water = np.array([[True, False, True]] * 3)
        np.savez(path, lats=LATS, lons=LONS, water=water)

        water_map = GridWaterMap.from_npz(str(path))
        assert not water_map.is_water(GeoPos(1.0, 11.0))
        assert water_map.is_water(GeoPos(1.0, 10.0))


class TestOceanData:
    """Tests for the ice speed factor."""

    def test_invalid_factor_is_one(self):
        assert OceanData(valid=False, ice=80.0).ice_speed_factor == 1.0

    def test_factor_linear_in_ice(self):
        assert OceanData(valid=True, ice=0.0).ice_speed_factor == 1.0
        assert OceanData(valid=True, ice=25.0).ice_speed_factor == pytest.approx(0.75)
        assert OceanData(valid=True, ice=100.0).ice_speed_factor == pytest.approx(0.0)

    def test_clamp_ice(self):
        assert clamp_ice(-5.0) == 0.0
        assert clamp_ice(130.0) == 100.0
        assert clamp_ice(40.0) == 40.0


class TestOceanProviders:
    """Tests for ocean providers."""

    def test_no_ocean_data(self):
        assert not NoOceanData().get(GeoPos(0.0, 0.0)).valid

    def test_uniform_ocean_clamps_ice(self):
        od = UniformOcean(GeoVec(45.0, 0.5), ice=150.0).get(GeoPos(0.0, 0.0))
        assert od.valid
        assert od.ice == 100.0
        assert od.current.angle == 45.0

    def test_uniform_ocean_returns_copies(self):
        ocean = UniformOcean(GeoVec(45.0, 0.5))
        od = ocean.get(GeoPos(0.0, 0.0))
        od.current.mag = 99.0
        assert ocean.current.mag == 0.5

    def test_grid_current_direction(self):
        """Positive u and v flow toward the north-east."""
        ocean = GridOceanProvider(constant('u', 1.0), constant('v', 1.0), constant('ice', 20.0))
        od = ocean.get(GeoPos(1.0, 11.0))

        assert od.valid
        assert od.current.angle == pytest.approx(45.0)
        assert od.current.mag == pytest.approx(math.sqrt(2.0))
        assert od.ice == pytest.approx(20.0)

    def test_grid_nan_is_invalid(self):
        u = np.ones((3, 3))
        u[:, 2] = np.nan
        ocean = GridOceanProvider(field('u', u), constant('v', 0.0))

        assert not ocean.get(GeoPos(1.0, 12.0)).valid
        assert ocean.get(GeoPos(1.0, 10.0)).valid

    def test_grid_outside_is_invalid(self):
        ocean = GridOceanProvider(constant('u', 1.0), constant('v', 1.0))
        assert not ocean.get(GeoPos(40.0, 11.0)).valid

    def test_grid_without_ice(self):
        ocean = GridOceanProvider(constant('u', 0.0), constant('v', -1.0))
        od = ocean.get(GeoPos(1.0, 11.0))
        assert od.ice == 0.0
        assert od.current.angle == pytest.approx(180.0)


class TestWindProviders:
    """Tests for wind providers."""

    def test_uniform_wind(self):
        wx = UniformWindProvider(direction=370.0, speed=5.0).get_weather(GeoPos(0.0, 0.0))
        assert wx.wind.angle == pytest.approx(10.0)
        assert wx.wind.mag == 5.0
        assert wx.source == 'uniform'

    def test_uniform_negative_speed_rejected(self):
        with pytest.raises(ValueError):
            UniformWindProvider(speed=-1.0)

    def test_grid_wind_from_direction(self):
        """Air moving north (v > 0) is a southerly: blows from 180."""
        wind = GridWindProvider(constant('u', 0.0), constant('v', 5.0))
        wx = wind.get_weather(GeoPos(1.0, 11.0))

        assert wx.wind.angle == pytest.approx(180.0)
        assert wx.wind.mag == pytest.approx(5.0)
        assert wx.source == 'forecast'

    def test_live_preferred(self):
        wind = GridWindProvider(
            constant('u', 0.0), constant('v', 5.0),
            live_u=constant('u', -3.0), live_v=constant('v', 0.0),
        )
        live = wind.get_weather(GeoPos(1.0, 11.0), prefer_live=True)
        forecast = wind.get_weather(GeoPos(1.0, 11.0), prefer_live=False)

        assert live.source == 'live'
        assert live.wind.angle == pytest.approx(90.0)   # air moving west, from the east
        assert forecast.source == 'forecast'

    def test_live_falls_back_outside_coverage(self):
        live_lats = np.array([0.0, 0.5])
        live_lons = np.array([10.0, 10.5])
        wind = GridWindProvider(
            constant('u', 0.0), constant('v', 5.0),
            live_u=field('u', np.zeros((2, 2)), live_lats, live_lons),
            live_v=field('v', np.ones((2, 2)), live_lats, live_lons),
        )
        assert wind.get_weather(GeoPos(1.5, 11.5)).source == 'forecast'

    def test_calm_outside_grid(self):
        wind = GridWindProvider(constant('u', 3.0), constant('v', 4.0))
        wx = wind.get_weather(GeoPos(50.0, 50.0))
        assert wx.wind.mag == 0.0
        assert wx.source == 'none'

    def test_live_needs_both_components(self):
        with pytest.raises(ValueError):
            GridWindProvider(constant('u', 0.0), constant('v', 5.0), live_u=constant('u', 1.0))
