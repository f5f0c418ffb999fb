"""
Ray Marching Through the Layered Atmosphere
===========================================

This module traces single rays from the source towards the ground,
bending them at refractive boundaries, stopping their light at
obstacles and checking whether they reach the observer.

All calculations are 2D with the y axis pointing down.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from flatrefract.atmosphere.layers import LayeredMedium
from flatrefract.geometry.obstacles import Obstacle, ObstacleKind, occlusion_order
from flatrefract.geometry.primitives import Point
from flatrefract.observer.aggregator import ObserverHit
from flatrefract.optics.fresnel import (
    fresnel_reflectance,
    incident_angle,
    reflection_strength,
    refracted_heading,
    terrain_incidence,
)
from flatrefract.utils.constants import (
    BASE_STEP,
    CANVAS_WIDTH,
    GROUND_Y,
    INDEX_EPSILON,
    OBSERVER_RADIUS,
    REFLECTION_EVERY,
    REFLECTION_THRESHOLD,
)


@dataclass
class PathSegment:
    """
    A contiguous stretch of a ray path.

    Attributes
    ----------
    points : list of Point
        Path vertices in travel order
    in_shadow : bool
        True once the ray has been blocked by an obstacle
    """
    points: List[Point]
    in_shadow: bool = False

    @property
    def length(self) -> float:
        """Geometric length of the segment in pixels."""
        return sum(a.distance_to(b) for a, b in zip(self.points[:-1], self.points[1:]))


@dataclass(frozen=True)
class ReflectionEvent:
    """
    Partial reflection at a layer boundary (display only).

    Attributes
    ----------
    point : Point
        Position of the ray when the boundary was crossed
    incident_angle : float
        Angle to the upward normal in radians
    strength : float
        |sin(incident_angle)|
    reflectance : float
        Fresnel reflectance of the boundary
    """
    point: Point
    incident_angle: float
    strength: float
    reflectance: float


@dataclass(frozen=True)
class Occlusion:
    """
    Where and how a ray was blocked.

    Attributes
    ----------
    point : Point
        Point at which the shadow segment starts
    kind : ObstacleKind
        Type of the blocking obstacle
    incident_angle : float, optional
        Terrain diagnostic angle against the ground normal
    refracted_angle : float, optional
        Terrain diagnostic refracted angle
    """
    point: Point
    kind: ObstacleKind
    incident_angle: Optional[float] = None
    refracted_angle: Optional[float] = None


@dataclass
class RayPath:
    """
    Result of tracing one ray.

    Attributes
    ----------
    segments : list of PathSegment
        Lit segment followed, if the ray was blocked, by a shadow segment
    hit : ObserverHit, optional
        Set when the ray ended inside the observer's capture disc
    reflections : list of ReflectionEvent
        Boundary reflections recorded for display
    occlusion : Occlusion, optional
        First obstacle hit
    target_x : float
        Ground x coordinate the ray was aimed at
    """
    segments: List[PathSegment] = field(default_factory=list)
    hit: Optional[ObserverHit] = None
    reflections: List[ReflectionEvent] = field(default_factory=list)
    occlusion: Optional[Occlusion] = None
    target_x: float = 0.0

    @property
    def is_empty(self) -> bool:
        return not self.segments

    @property
    def in_shadow(self) -> bool:
        return self.occlusion is not None

    @property
    def points(self) -> np.ndarray:
        """Path vertices as an (n, 2) array, without the repeated shadow start."""
        pts = []
        for i, seg in enumerate(self.segments):
            # The shadow segment repeats the occlusion point first
            body = seg.points if i == 0 else seg.points[1:]
            pts.extend((p.x, p.y) for p in body)
        return np.array(pts, dtype=float).reshape(-1, 2)

    @property
    def end(self) -> Optional[Point]:
        if not self.segments:
            return None
        return self.segments[-1].points[-1]


def trace_ray(
    source: Point,
    target_x: float,
    medium: LayeredMedium,
    obstacles: Sequence[Obstacle],
    observer: Point,
    emit_reflection: bool = False,
    step_scale: float = 1.0,
    observer_radius: float = OBSERVER_RADIUS,
    ground_y: float = GROUND_Y,
    canvas_width: float = CANVAS_WIDTH,
    base_step: float = BASE_STEP,
    index_epsilon: float = INDEX_EPSILON,
    reflection_threshold: float = REFLECTION_THRESHOLD,
) -> RayPath:
    """
    March a ray from the source towards a ground target.

    Parameters
    ----------
    source : Point
        Ray origin (the sun)
    target_x : float
        Ground x coordinate that sets the initial heading
    medium : LayeredMedium
        Refractive layers
    obstacles : sequence of Obstacle
        Occluders in any order; they are tested in ``occlusion_order``
    observer : Point
        Centre of the observer's capture disc
    emit_reflection : bool
        Record boundary reflections for this ray
    step_scale : float
        Zoom factor; the step length is ``base_step / step_scale``
    observer_radius : float
        Capture disc radius in pixels
    ground_y : float
        y coordinate of the ground
    canvas_width : float
        Horizontal extent of the world
    base_step : float
        Step length at ``step_scale == 1``
    index_epsilon : float
        Index difference treated as a boundary crossing
    reflection_threshold : float
        Minimum reflection strength that is recorded

    Returns
    -------
    path : RayPath
        Empty (no segments, no hit) if the ray would leave upward.

    Notes
    -----
    The observer test compares the distance from the *start* of the last
    step to the observer against the capture radius; it is not a full
    segment/circle intersection.
    """
    x = source.x
    y = source.y
    heading = float(np.arctan2(ground_y - y, target_x - x))

    if heading < 0:
        return RayPath(target_x=target_x)

    ordered = occlusion_order(obstacles)
    step = base_step / step_scale
    current_index = medium.lookup(y)
    in_shadow = False

    path = RayPath(target_x=target_x)
    segment = PathSegment(points=[Point(x, y)])
    path.segments.append(segment)
    steps = 0

    while y < ground_y and y >= 0 and 0 <= x <= canvas_width:
        next_x = x + np.cos(heading) * step
        next_y = y + np.sin(heading) * step
        new_index = medium.lookup(next_y)

        if abs(new_index - current_index) > index_epsilon and not in_shadow:
            incident = incident_angle(heading)
            reflectance = fresnel_reflectance(
                current_index, new_index, abs(float(np.cos(incident)))
            )
            strength = reflection_strength(incident)
            if strength > reflection_threshold and emit_reflection:
                path.reflections.append(ReflectionEvent(
                    point=Point(x, y),
                    incident_angle=float(incident),
                    strength=strength,
                    reflectance=reflectance,
                ))

            heading = refracted_heading(current_index, new_index, incident, heading)
            current_index = new_index

        if not in_shadow:
            start = Point(x, y)
            end = Point(float(next_x), float(next_y))
            for obstacle in ordered:
                if obstacle.shelf > next_y:
                    break
                hit = obstacle.intersect(start, end)
                if hit is None:
                    continue

                incident_diag, refracted_diag = None, None
                if obstacle.kind is ObstacleKind.TERRAIN:
                    incident_diag, refracted_diag = terrain_incidence(
                        start, hit, medium.lookup(hit.y)
                    )
                path.occlusion = Occlusion(
                    point=hit,
                    kind=obstacle.kind,
                    incident_angle=incident_diag,
                    refracted_angle=refracted_diag,
                )
                if hit != start:
                    segment.points.append(hit)
                in_shadow = True
                segment = PathSegment(points=[hit], in_shadow=True)
                path.segments.append(segment)
                break

        x = float(next_x)
        y = float(next_y)
        segment.points.append(Point(x, y))
        steps += 1

    if steps:
        path.hit = _observer_hit(x, y, heading, step, observer, observer_radius)

    return path


def _observer_hit(
    x: float,
    y: float,
    heading: float,
    step: float,
    observer: Point,
    radius: float,
) -> Optional[ObserverHit]:
    """Check the final step against the observer's capture disc."""
    dx = np.cos(heading) * step
    dy = np.sin(heading) * step
    last_start = Point(x - dx, y - dy)

    if last_start.distance_to(observer) >= radius:
        return None

    length = np.hypot(dx, dy)
    return ObserverHit(
        x=x,
        y=y,
        normal_x=float(-dx / length),
        normal_y=float(-dy / length),
    )


def ground_targets(left: float, right: float, ray_count: int) -> np.ndarray:
    """
    Evenly spaced ground x coordinates for a batch of rays.

    The span is divided into ``ray_count`` intervals and the left edge of
    each is used, so ``right`` itself is never targeted.
    """
    if ray_count <= 0:
        return np.array([], dtype=float)
    spacing = (right - left) / ray_count
    return left + np.arange(ray_count) * spacing


def trace_rays(
    source: Point,
    targets: Sequence[float],
    medium: LayeredMedium,
    obstacles: Sequence[Obstacle],
    observer: Point,
    reflection_every: int = REFLECTION_EVERY,
    **kwargs,
) -> List[RayPath]:
    """
    Trace a batch of rays, showing reflections on every n-th ray.

    Extra keyword arguments are passed on to ``trace_ray``.
    """
    paths = []
    for i, target_x in enumerate(targets):
        emit = reflection_every > 0 and i % reflection_every == 0
        paths.append(trace_ray(
            source, float(target_x), medium, obstacles, observer,
            emit_reflection=emit, **kwargs,
        ))
    return paths
