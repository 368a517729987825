"""
Performance Module
==================

Polar diagrams and per-boat-type performance profiles.
"""

from .polar import Polar, PolarData
from .boat_types import BoatType, BoatProfile, BoatWindResponse

__all__ = [
    'Polar', 'PolarData',
    'BoatType', 'BoatProfile', 'BoatWindResponse',
]
