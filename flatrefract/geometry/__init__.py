"""
2D Geometry and Ray Marching
============================

- Points and obstacle shapes (terrain triangles, cloud boxes)
- Randomized obstacle generation from a seeded generator
- Ray marching with refraction, occlusion and observer detection
"""

from flatrefract.geometry.primitives import Point

from flatrefract.geometry.obstacles import (
    Cloud,
    Obstacle,
    ObstacleKind,
    Terrain,
    generate_clouds,
    generate_terrain,
    make_moon,
    occlusion_order,
)

from flatrefract.geometry.paths import (
    Occlusion,
    PathSegment,
    RayPath,
    ReflectionEvent,
    ground_targets,
    trace_ray,
    trace_rays,
)

__all__ = [
    "Point",
    # Obstacles
    "Cloud",
    "Obstacle",
    "ObstacleKind",
    "Terrain",
    "generate_clouds",
    "generate_terrain",
    "make_moon",
    "occlusion_order",
    # Ray marching
    "Occlusion",
    "PathSegment",
    "RayPath",
    "ReflectionEvent",
    "ground_targets",
    "trace_ray",
    "trace_rays",
]
