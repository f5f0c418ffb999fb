"""
Basic 2D geometry types.
"""

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Point:
    """
    A point in world coordinates.

    Attributes
    ----------
    x : float
        Horizontal position in pixels
    y : float
        Vertical position in pixels (grows towards the ground)
    """
    x: float
    y: float

    def distance_to(self, other: "Point") -> float:
        """Euclidean distance to another point."""
        return float(np.hypot(self.x - other.x, self.y - other.y))

    def as_array(self) -> np.ndarray:
        """Point as a (2,) array."""
        return np.array([self.x, self.y], dtype=float)
