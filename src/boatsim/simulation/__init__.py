"""
Simulation Module
=================

Per-tick boat dynamics and the voyage driver that records a track.
"""

from .boat import Boat, BoatDynamics, BoatState
from .voyage import VoyageSimulator, TrackPoint

__all__ = [
    'Boat', 'BoatDynamics', 'BoatState',
    'VoyageSimulator', 'TrackPoint',
]
