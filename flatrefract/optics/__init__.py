"""
Optics at horizontal layer boundaries.
"""

from flatrefract.optics.fresnel import (
    fresnel_reflectance,
    incident_angle,
    reflection_strength,
    refracted_heading,
    terrain_incidence,
)

__all__ = [
    "fresnel_reflectance",
    "incident_angle",
    "reflection_strength",
    "refracted_heading",
    "terrain_incidence",
]
