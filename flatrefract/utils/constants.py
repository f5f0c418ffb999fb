"""
Scene constants for the flat-earth refraction model.

All lengths are in simulation pixels unless otherwise specified.
One pixel corresponds to 10 km by convention. The y axis points down,
so larger y values are closer to the ground.
"""

import numpy as np

# Scale
KM_PER_PIXEL = 10.0

# Canvas and ground plane
CANVAS_WIDTH = 1300.0  # px
CANVAS_HEIGHT = 1000.0  # px
EARTH_HEIGHT = 50.0  # px, thickness of the drawn ground strip
EARTH_WIDTH = 1200.0  # px (12000 km)
GROUND_Y = CANVAS_HEIGHT - EARTH_HEIGHT  # px

# Sun (light source)
SUN_RADIUS = 5.0  # px
SUN_HEIGHT = 500.0  # px above ground (5000 km)
SUN_MIN_CLEARANCE = 10.0  # px, closest a dragged sun may get to the ground

# Observer
OBSERVER_RADIUS = 5.0  # px, capture disc radius
OBSERVER_HEIGHT = 2.0  # px above ground

# Obstacles
TERRAIN_COUNT = 38
CLOUD_COUNT = 32
MOON_X = 400.0  # px
MOON_DROP = 50.0  # px below the sun

# Refractive layers
LAYER_COUNT = 10
LAYER_SPACING = 20.0  # px
TOP_INDEX = 1.0
BOTTOM_INDEX = 1.3
DEFAULT_REFRACTIVE_INDEX = 1.0

# Ray marching
BASE_STEP = 2.0  # px at zoom 1
INDEX_EPSILON = 1e-3
REFLECTION_THRESHOLD = 1e-4
RAY_COUNT = 100
REFLECTION_EVERY = 5

# Observer hit aggregation
MAX_HITS = 10
SPREAD_FACTOR = 1.3

# View
MIN_ZOOM = 0.5
MAX_ZOOM = 15.0
VIEW_MARGIN_LEFT = 10.0  # px
VIEW_MARGIN_RIGHT = 40.0  # px
MAX_FPS = 30.0

# Heading of a ray travelling straight down (y grows towards the ground)
STRAIGHT_DOWN = np.pi / 2
# Upward surface normal of the horizontal layer boundaries
UPWARD_NORMAL = -np.pi / 2


def pixels_to_km(pixels: float) -> float:
    """Convert a length in simulation pixels to kilometres."""
    return pixels * KM_PER_PIXEL


def altitude_km(y: float, ground_y: float = GROUND_Y) -> float:
    """
    Altitude above ground for a world y coordinate.

    Parameters
    ----------
    y : float
        World y coordinate in pixels
    ground_y : float
        y coordinate of the ground surface

    Returns
    -------
    float
        Altitude in km (positive above ground)
    """
    return pixels_to_km(ground_y - y)
