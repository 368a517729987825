"""
boatsim
=======

Single-boat sailing simulation on a spherical earth: wind, ocean
current, sea ice and land boundaries, advanced one tick at a time.
"""

__version__ = '0.1.0'
