"""
Environment Module
==================

Terrain, ocean and weather providers consulted by the boat dynamics.
"""

from .grid import GridField, bilinear_interpolate, load_fields
from .terrain import WaterMap, OpenWaterMap, GridWaterMap
from .ocean import OceanData, OceanProvider, NoOceanData, UniformOcean, GridOceanProvider
from .weather import Weather, WindProvider, UniformWindProvider, GridWindProvider

__all__ = [
    'GridField', 'bilinear_interpolate', 'load_fields',
    'WaterMap', 'OpenWaterMap', 'GridWaterMap',
    'OceanData', 'OceanProvider', 'NoOceanData', 'UniformOcean', 'GridOceanProvider',
    'Weather', 'WindProvider', 'UniformWindProvider', 'GridWindProvider',
]
