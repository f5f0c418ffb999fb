"""
Observer hit aggregation and apparent-source reconstruction.

Rays that end inside the observer's capture disc are collected here. The
leftmost and rightmost hits are back-extrapolated along their arrival
directions; where the two lines meet is where the source appears to be.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from flatrefract.geometry.primitives import Point
from flatrefract.utils.constants import MAX_HITS, SPREAD_FACTOR

logger = logging.getLogger(__name__)

# Back directions with |normal_x| below this are treated as vertical
VERTICAL_TOLERANCE = 1e-12


@dataclass(frozen=True)
class ObserverHit:
    """
    A ray segment that ended inside the observer's capture disc.

    Attributes
    ----------
    x, y : float
        Terminal point of the ray
    normal_x, normal_y : float
        Unit vector pointing back along the ray's final travel direction
    """
    x: float
    y: float
    normal_x: float
    normal_y: float

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)

    def extend(self, distance: float) -> Point:
        """Point ``distance`` along the back direction."""
        return Point(self.x + self.normal_x * distance, self.y + self.normal_y * distance)


@dataclass(frozen=True)
class ApparentSource:
    """
    Reconstructed source position.

    Attributes
    ----------
    position : Point
        Intersection of the extremal back-extrapolated hits
    spread : float
        Length used to draw extrapolation lines (distance from the
        leftmost hit to ``position``, times the spread factor)
    """
    position: Point
    spread: float


def intersect_back_directions(first: ObserverHit, last: ObserverHit) -> Optional[Point]:
    """
    Intersection of the lines through two hits along their back directions.

    Returns None when the lines are parallel.
    """
    first_vertical = abs(first.normal_x) < VERTICAL_TOLERANCE
    last_vertical = abs(last.normal_x) < VERTICAL_TOLERANCE

    if first_vertical and last_vertical:
        return None
    if first_vertical or last_vertical:
        vertical, other = (first, last) if first_vertical else (last, first)
        slope = other.normal_y / other.normal_x
        return Point(vertical.x, slope * (vertical.x - other.x) + other.y)

    m1 = first.normal_y / first.normal_x
    m2 = last.normal_y / last.normal_x
    if m1 == m2:
        return None

    x = (m1 * first.x - m2 * last.x + last.y - first.y) / (m1 - m2)
    y = m1 * (x - first.x) + first.y
    return Point(float(x), float(y))


class HitAggregator:
    """
    Bounded, x-sorted collection of observer hits.

    When a new hit pushes the collection past ``max_hits``, one interior
    hit chosen uniformly at random is dropped. The leftmost and rightmost
    hits are never evicted, so the apparent-source reconstruction always
    uses the widest spread seen since the last reset.

    Example:
        >>> aggregator = HitAggregator(rng=np.random.default_rng(0))
        >>> aggregator.record(ObserverHit(100, 948, -0.6, -0.8))
        >>> aggregator.record(ObserverHit(102, 948, -0.5, -0.866))
        >>> apparent = aggregator.compute_apparent_source()
    """

    def __init__(
        self,
        max_hits: int = MAX_HITS,
        spread_factor: float = SPREAD_FACTOR,
        rng: Optional[np.random.Generator] = None,
    ):
        """Initialize the aggregator.

        Args:
            max_hits: Maximum number of hits kept (at least 2)
            spread_factor: Extension applied to the extrapolation length
            rng: Random source for interior eviction

        Raises:
            ValueError: If max_hits is below 2
        """
        if max_hits < 2:
            raise ValueError(f"max_hits must be at least 2, got {max_hits}")

        self.max_hits = max_hits
        self.spread_factor = spread_factor
        self.rng = rng if rng is not None else np.random.default_rng()
        self._hits: List[ObserverHit] = []

    def __len__(self) -> int:
        return len(self._hits)

    @property
    def hits(self) -> Tuple[ObserverHit, ...]:
        """Recorded hits, ascending by x."""
        return tuple(self._hits)

    def record(self, hit: ObserverHit) -> None:
        """Insert a hit, keeping x order and the size bound."""
        position = len(self._hits)
        for i, existing in enumerate(self._hits):
            if hit.x < existing.x:
                position = i
                break
        self._hits.insert(position, hit)

        if len(self._hits) > self.max_hits:
            evicted = int(self.rng.integers(1, len(self._hits) - 1))
            del self._hits[evicted]

    def reset(self) -> None:
        """Forget all hits (source or observer has moved)."""
        if self._hits:
            logger.debug(f"Discarding {len(self._hits)} stale observer hits")
        self._hits.clear()

    def compute_apparent_source(self) -> Optional[ApparentSource]:
        """
        Reconstruct where the source appears to be.

        Returns:
            ApparentSource, or None with fewer than two hits or when the
            extremal back directions are parallel
        """
        if len(self._hits) < 2:
            return None

        first = self._hits[0]
        last = self._hits[-1]
        position = intersect_back_directions(first, last)
        if position is None:
            return None

        spread = position.distance_to(first.position) * self.spread_factor
        return ApparentSource(position=position, spread=spread)

    def view_lines(self, apparent: ApparentSource) -> List[Tuple[Point, Point]]:
        """Extrapolation segment for every hit, for drawing."""
        return [(hit.position, hit.extend(apparent.spread)) for hit in self._hits]
