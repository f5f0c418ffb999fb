"""
FlatRefract: atmospheric refraction over a flat-earth model.

A point light source (the sun) sends rays towards a flat ground plane.
Rays bend where they cross horizontal refractive layers, can be blocked
by mountains and clouds, and are collected when they reach an observer.
Back-extrapolating the collected rays shows where the sun *appears* to
be compared with where it really is.

Modules
-------
atmosphere
    Layered refractive medium (step changes of refractive index)
optics
    Snell's law and Fresnel reflectance at layer boundaries
geometry
    Points, obstacles (terrain, clouds) and ray marching
observer
    Observer hit aggregation and apparent-source reconstruction
core
    Scene, frame pacing and view (pan/zoom) state
config
    Scene configuration loading and validation
utils
    Scene constants and output formatting
"""

__version__ = "0.1.0"
__author__ = "FlatRefract Contributors"

from flatrefract.atmosphere import LayeredMedium, RefractiveLayer
from flatrefract.config import SceneConfig
from flatrefract.core import FrameResult, Scene, ViewState
from flatrefract.geometry import Cloud, Point, Terrain, trace_ray
from flatrefract.observer import ApparentSource, HitAggregator, ObserverHit

__all__ = [
    "__version__",
    "LayeredMedium",
    "RefractiveLayer",
    "SceneConfig",
    "Scene",
    "FrameResult",
    "ViewState",
    "Point",
    "Terrain",
    "Cloud",
    "trace_ray",
    "HitAggregator",
    "ObserverHit",
    "ApparentSource",
]
