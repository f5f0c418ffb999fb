"""
Pan and zoom state of the viewer.

The view decides which stretch of ground rays are aimed at and how long
each ray-marching step is.
"""

from dataclasses import dataclass
from typing import Tuple

from flatrefract.geometry.primitives import Point
from flatrefract.utils.constants import (
    EARTH_WIDTH,
    MAX_ZOOM,
    MIN_ZOOM,
    VIEW_MARGIN_LEFT,
    VIEW_MARGIN_RIGHT,
)


@dataclass
class ViewState:
    """
    Viewer transform: world = screen / zoom + offset.

    Attributes
    ----------
    view_x, view_y : float
        World coordinates of the top-left screen corner
    zoom : float
        Magnification, kept within [MIN_ZOOM, MAX_ZOOM]
    """
    view_x: float = 0.0
    view_y: float = 0.0
    zoom: float = 1.0

    def __post_init__(self):
        self.zoom = clamp_zoom(self.zoom)

    @property
    def step_scale(self) -> float:
        """Scale applied to the ray-marching step (finer when zoomed in)."""
        return self.zoom

    def world_to_screen(self, point: Point) -> Point:
        return Point((point.x - self.view_x) * self.zoom, (point.y - self.view_y) * self.zoom)

    def screen_to_world(self, point: Point) -> Point:
        return Point(point.x / self.zoom + self.view_x, point.y / self.zoom + self.view_y)

    def pan(self, dx_screen: float, dy_screen: float) -> None:
        """Drag the view by a screen-space offset."""
        self.view_x -= dx_screen / self.zoom
        self.view_y -= dy_screen / self.zoom

    def zoom_at(self, delta: float, screen_point: Point) -> None:
        """Change zoom by ``delta`` keeping ``screen_point`` fixed."""
        old_zoom = self.zoom
        self.zoom = clamp_zoom(self.zoom + delta)
        self.view_x += screen_point.x * (1 / old_zoom - 1 / self.zoom)
        self.view_y += screen_point.y * (1 / old_zoom - 1 / self.zoom)

    def reset(self) -> None:
        self.view_x = 0.0
        self.view_y = 0.0
        self.zoom = 1.0

    def visible_ground_range(self, earth_width: float = EARTH_WIDTH) -> Tuple[float, float]:
        """
        Stretch of ground currently on screen, clamped to the ground plane.

        Returns
        -------
        (left, right) : tuple of float
        """
        left = self.view_x - VIEW_MARGIN_LEFT
        right = self.view_x + (earth_width + VIEW_MARGIN_RIGHT) / self.zoom
        return _clamp(left, 0.0, earth_width), _clamp(right, 0.0, earth_width)


def clamp_zoom(zoom: float) -> float:
    return _clamp(zoom, MIN_ZOOM, MAX_ZOOM)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
