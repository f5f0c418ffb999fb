"""
Refraction and reflection at horizontal layer boundaries.

Headings are measured with the y axis pointing down, so a ray travelling
straight down has heading pi/2. All functions are pure and guard against
out-of-domain arguments instead of producing NaN.
"""

from typing import Optional, Tuple

import numpy as np

from flatrefract.geometry.primitives import Point
from flatrefract.utils.constants import STRAIGHT_DOWN, UPWARD_NORMAL


def fresnel_reflectance(n1: float, n2: float, cos_i: float) -> float:
    """
    Unpolarized Fresnel reflectance at a boundary.

    Parameters
    ----------
    n1 : float
        Refractive index of the medium the ray is leaving
    n2 : float
        Refractive index of the medium the ray is entering
    cos_i : float
        Cosine of the incident angle, in [0, 1]

    Returns
    -------
    reflectance : float
        Average of the S and P reflectances, in [0, 1].
        Exactly 1.0 under total internal reflection.
    """
    r = n1 / n2
    sin_t2 = r * r * (1.0 - cos_i * cos_i)
    if sin_t2 >= 1.0:
        return 1.0

    cos_t = np.sqrt(1.0 - sin_t2)
    rs = ((n1 * cos_i - n2 * cos_t) / (n1 * cos_i + n2 * cos_t)) ** 2
    rp = ((n1 * cos_t - n2 * cos_i) / (n1 * cos_t + n2 * cos_i)) ** 2

    return float((rs + rp) / 2.0)


def incident_angle(heading: float) -> float:
    """Angle between a ray heading and the upward boundary normal."""
    return heading - UPWARD_NORMAL


def reflection_strength(incident: float) -> float:
    """Heuristic strength used to decide whether to show a reflection."""
    return abs(float(np.sin(incident)))


def refracted_heading(n1: float, n2: float, incident: float, heading: float) -> float:
    """
    New heading after crossing a boundary (Snell's law).

    Parameters
    ----------
    n1, n2 : float
        Indices before and after the boundary
    incident : float
        Incident angle relative to the upward normal (see ``incident_angle``)
    heading : float
        Current heading, returned unchanged in the evanescent case

    Returns
    -------
    heading : float
        ``pi/2 - asin(n1 sin(incident) / n2)``, or the input heading when
        no transmitted angle exists.
    """
    sin_t = n1 * np.sin(incident) / n2
    if abs(sin_t) > 1:
        return heading
    return float(STRAIGHT_DOWN - np.arcsin(sin_t))


def terrain_incidence(
    start: Point,
    hit: Point,
    n1: float,
    n2: float = 1.0,
) -> Tuple[Optional[float], Optional[float]]:
    """
    Incident and refracted angles of a ray striking terrain.

    The incident angle is taken against a flat-ground normal (0, 1).
    Either angle is None when it is undefined (zero-length step or
    arcsine argument outside [-1, 1]).
    """
    length = np.hypot(start.x - hit.x, start.y - hit.y)
    if length == 0:
        return None, None

    cos_i = (start.y - hit.y) / length
    incident = float(np.arccos(np.clip(cos_i, -1.0, 1.0)))

    sin_t = (n1 / n2) * np.sin(incident)
    if abs(sin_t) > 1:
        return incident, None
    return incident, float(np.arcsin(sin_t))
