"""
Obstacle Geometry
=================

Terrain and cloud shapes that can occlude rays, plus their randomized
generation.

The intersection tests are deliberately coarse. Terrain checks the edge
height at the end of the current step; clouds only check whether the
step already starts inside the box.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

import numpy as np

from flatrefract.geometry.primitives import Point
from flatrefract.utils.constants import (
    CLOUD_COUNT,
    EARTH_WIDTH,
    GROUND_Y,
    MOON_DROP,
    MOON_X,
    SUN_RADIUS,
    TERRAIN_COUNT,
)


class ObstacleKind(Enum):
    """Obstacle variants. Order defines test priority at equal shelves."""
    CLOUD = 0
    TERRAIN = 1


@dataclass(frozen=True)
class Terrain:
    """
    Triangular mountain standing on the ground.

    Attributes
    ----------
    x : float
        Left base corner in pixels
    width : float
        Base width in pixels
    height : float
        Peak height above ground in pixels
    ground_y : float
        y coordinate of the ground the mountain stands on
    """
    x: float
    width: float
    height: float
    ground_y: float = GROUND_Y

    kind = ObstacleKind.TERRAIN

    def __post_init__(self):
        if self.width <= 0:
            raise ValueError(f"Terrain width must be positive, got {self.width}")

    @property
    def peak(self) -> Point:
        return Point(self.x + self.width / 2, self.ground_y - self.height)

    @property
    def shelf(self) -> float:
        """y coordinate below which rays are tested against the mountain."""
        return self.ground_y - self.height

    def vertices(self) -> Tuple[Point, Point, Point]:
        """Left base, peak and right base corners."""
        return (
            Point(self.x, self.ground_y),
            self.peak,
            Point(self.x + self.width, self.ground_y),
        )

    def edge_y(self, x: float) -> float:
        """Height of the triangle outline at ``x``."""
        peak = self.peak
        if x <= peak.x:
            slope = (peak.y - self.ground_y) / (peak.x - self.x)
            return self.ground_y + slope * (x - self.x)
        slope = (peak.y - self.ground_y) / (peak.x - (self.x + self.width))
        return self.ground_y + slope * (x - (self.x + self.width))

    def contains(self, point: Point) -> bool:
        if point.x < self.x or point.x > self.x + self.width:
            return False
        return self.edge_y(point.x) <= point.y <= self.ground_y

    def intersect(self, start: Point, end: Point) -> Optional[Point]:
        """
        Point where a ray step meets the mountain outline.

        Only the step's end is examined: if ``end`` lies within the
        horizontal span and at or below the outline, the outline point at
        ``end.x`` is returned.
        """
        if end.x < self.x or end.x > self.x + self.width:
            return None

        outline_y = self.edge_y(end.x)
        if end.y >= outline_y:
            return Point(end.x, outline_y)
        return None


@dataclass(frozen=True)
class Cloud:
    """
    Axis-aligned (rounded) rectangle floating above the ground.

    Attributes
    ----------
    x, y : float
        Top-left corner in pixels
    width, height : float
        Size in pixels
    """
    x: float
    y: float
    width: float
    height: float

    kind = ObstacleKind.CLOUD

    @property
    def shelf(self) -> float:
        return self.y

    def bounds(self) -> Tuple[float, float, float, float]:
        """(left, top, right, bottom) of the rectangle."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def contains(self, point: Point) -> bool:
        return (
            self.x <= point.x <= self.x + self.width
            and self.y <= point.y <= self.y + self.height
        )

    def intersect(self, start: Point, end: Point) -> Optional[Point]:
        """Return ``start`` if the step begins inside the cloud."""
        if self.contains(start):
            return start
        return None


Obstacle = Union[Terrain, Cloud]


def occlusion_order(obstacles: Sequence[Obstacle]) -> List[Obstacle]:
    """
    Sort obstacles in the order a descending ray should test them.

    Obstacles are ordered by shelf (highest in the sky first) and clouds
    come before terrain on the same shelf.
    """
    return sorted(obstacles, key=lambda o: (o.shelf, o.kind.value))


def generate_terrain(
    rng: np.random.Generator,
    count: int = TERRAIN_COUNT,
    min_height: float = 1.2,
    height_range: float = 3.0,
    base_width: float = 3.0,
    width_per_height: float = 3.0,
    earth_width: float = EARTH_WIDTH,
    ground_y: float = GROUND_Y,
) -> List[Terrain]:
    """
    Sample mountains across the ground plane.

    Parameters
    ----------
    rng : np.random.Generator
        Random source (seed it for reproducible scenes)
    count : int
        Number of mountains
    min_height, height_range : float
        Height is drawn uniformly from [min_height, min_height + height_range)
    base_width, width_per_height : float
        Width is ``base_width + width_per_height * height``
    earth_width : float
        Width of the ground plane in pixels
    ground_y : float
        y coordinate of the ground

    Returns
    -------
    list of Terrain
    """
    mountains = []
    for _ in range(count):
        height = min_height + rng.random() * height_range
        width = base_width + height * width_per_height
        x = rng.random() * (earth_width - width)
        mountains.append(Terrain(x=x, width=width, height=height, ground_y=ground_y))
    return mountains


def generate_clouds(
    rng: np.random.Generator,
    count: int = CLOUD_COUNT,
    min_width: float = 5.0,
    width_range: float = 15.0,
    min_height: float = 0.5,
    height_range: float = 0.5,
    min_altitude: float = 2.0,
    altitude_range: float = 2.0,
    earth_width: float = EARTH_WIDTH,
    ground_y: float = GROUND_Y,
) -> List[Cloud]:
    """
    Sample low clouds above the ground plane.

    Altitude is measured from the ground to the cloud's top edge.
    """
    clouds = []
    for _ in range(count):
        width = min_width + rng.random() * width_range
        height = min_height + rng.random() * height_range
        x = rng.random() * (earth_width - width)
        y = ground_y - (min_altitude + rng.random() * altitude_range)
        clouds.append(Cloud(x=x, y=y, width=width, height=height))
    return clouds


def make_moon(
    cloud: Cloud,
    sun_y: float,
    sun_radius: float = SUN_RADIUS,
    x: float = MOON_X,
    drop: float = MOON_DROP,
) -> Cloud:
    """Turn a sampled cloud into the sun-sized, movable moon."""
    return replace(
        cloud,
        x=x,
        y=sun_y + drop,
        width=sun_radius * 2,
        height=sun_radius * 2,
    )
