"""
Observer hit aggregation.
"""

from flatrefract.observer.aggregator import (
    ApparentSource,
    HitAggregator,
    ObserverHit,
    intersect_back_directions,
)

__all__ = [
    "ApparentSource",
    "HitAggregator",
    "ObserverHit",
    "intersect_back_directions",
]
