"""
Utility functions and scene constants.

Constants
---------
GROUND_Y : float
    y coordinate of the ground surface (px)
KM_PER_PIXEL : float
    Scale of the simulation (10 km per pixel)

Functions
---------
pixels_to_km
    Convert a pixel length to kilometres
altitude_km
    Altitude above ground of a world y coordinate
"""

from flatrefract.utils.constants import (
    GROUND_Y,
    KM_PER_PIXEL,
    altitude_km,
    pixels_to_km,
)

__all__ = [
    "GROUND_Y",
    "KM_PER_PIXEL",
    "altitude_km",
    "pixels_to_km",
]
