"""
Scene: the frame-driven entry point of FlatRefract.

Holds the source, observer, refractive layers, obstacles and the observer
hit aggregator, and runs one ray-tracing pass per frame:

- rays are aimed at evenly spaced points on the visible ground
- each ray is traced through the layers and past the obstacles
- rays reaching the observer are aggregated into an apparent source

Any change to the source or observer position (or to the layers)
discards the aggregated hits, since they no longer describe the scene.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

import numpy as np

from flatrefract.atmosphere.layers import LayeredMedium
from flatrefract.config.manager import ConfigurationManager
from flatrefract.config.settings import SceneConfig
from flatrefract.core.view import ViewState
from flatrefract.geometry.obstacles import (
    Cloud,
    Obstacle,
    Terrain,
    generate_clouds,
    generate_terrain,
    make_moon,
)
from flatrefract.geometry.paths import RayPath, ground_targets, trace_rays
from flatrefract.geometry.primitives import Point
from flatrefract.observer.aggregator import ApparentSource, HitAggregator, ObserverHit
from flatrefract.utils.constants import SUN_MIN_CLEARANCE

logger = logging.getLogger(__name__)


@dataclass
class FrameResult:
    """Output of one ray-tracing pass.

    Attributes:
        paths: Traced ray paths (empty RayPaths for discarded rays)
        targets: Ground x coordinates the rays were aimed at
        new_hits: Number of observer hits produced this frame
        hits: Aggregated hits after the frame, ascending by x
        apparent_source: Reconstructed source position, if any
        source: True source position used for the frame
        observer: Observer position used for the frame
        metadata: Frame statistics
    """
    paths: List[RayPath]
    targets: np.ndarray
    new_hits: int
    hits: Tuple[ObserverHit, ...]
    apparent_source: Optional[ApparentSource]
    source: Point
    observer: Point
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def shadowed_rays(self) -> int:
        return sum(1 for p in self.paths if p.in_shadow)


class FrameThrottle:
    """Drops frames requested faster than ``max_fps``.

    Example:
        >>> throttle = FrameThrottle(max_fps=30)
        >>> if throttle.ready():
        ...     scene.run_frame()
    """

    def __init__(self, max_fps: float, clock: Callable[[], float] = time.monotonic):
        """Initialize the throttle.

        Args:
            max_fps: Maximum accepted frames per second
            clock: Time source in seconds

        Raises:
            ValueError: If max_fps is not positive
        """
        if max_fps <= 0:
            raise ValueError(f"max_fps must be positive, got {max_fps}")

        self.interval = 1.0 / max_fps
        self.clock = clock
        self._last: Optional[float] = None

    def ready(self) -> bool:
        """Whether a frame may run now; accepting it starts a new interval."""
        now = self.clock()
        if self._last is not None and now - self._last < self.interval:
            return False
        self._last = now
        return True


class Scene:
    """Flat-earth refraction scene.

    Example:
        >>> scene = Scene({"obstacles": {"seed": 1}})
        >>> scene.move_observer(700, scene.ground_y - 2)
        >>> result = scene.run_frame()
        >>> if result.apparent_source:
        ...     print(result.apparent_source.position)
    """

    def __init__(
        self,
        config: Dict[str, Any] | str | SceneConfig | None = None,
        rng: Optional[np.random.Generator] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the scene.

        Args:
            config: Configuration dictionary, file path or SceneConfig
            rng: Random source for obstacles and hit eviction. Defaults to
                a generator seeded from ``config.obstacles.seed``.
            clock: Time source for frame throttling
        """
        loaded = ConfigurationManager().load_config(config if config is not None else SceneConfig())
        self.config = loaded.config

        self.rng = rng if rng is not None else np.random.default_rng(self.config.obstacles.seed)

        canvas = self.config.canvas
        self.ground_y = canvas.ground_y

        self._medium = LayeredMedium.from_config(self.config.medium, ground_y=self.ground_y)
        self.aggregator = HitAggregator(
            max_hits=self.config.aggregator.max_hits,
            spread_factor=self.config.aggregator.spread_factor,
            rng=self.rng,
        )
        self._source = Point(self.config.source.x, self.ground_y - self.config.source.height)
        self._observer = Point(self.config.observer.x, self.ground_y - self.config.observer.height)

        self.terrain, self.clouds = self._generate_obstacles()
        self.throttle = FrameThrottle(self.config.frame.max_fps, clock=clock)

        logger.info(
            f"Scene ready: {self._medium.num_layers} layers, "
            f"{len(self.terrain)} mountains, {len(self.clouds)} clouds"
        )

    def _generate_obstacles(self) -> Tuple[List[Terrain], List[Cloud]]:
        cfg = self.config.obstacles
        earth_width = self.config.canvas.earth_width

        terrain = generate_terrain(
            self.rng,
            count=cfg.terrain_count,
            min_height=cfg.terrain_min_height,
            height_range=cfg.terrain_height_range,
            earth_width=earth_width,
            ground_y=self.ground_y,
        )
        clouds = generate_clouds(
            self.rng,
            count=cfg.cloud_count,
            min_width=cfg.cloud_min_width,
            width_range=cfg.cloud_width_range,
            min_altitude=cfg.cloud_min_altitude,
            altitude_range=cfg.cloud_altitude_range,
            earth_width=earth_width,
            ground_y=self.ground_y,
        )
        if cfg.moon and clouds:
            clouds[0] = make_moon(clouds[0], self._source.y, sun_radius=self.config.source.radius)
        return terrain, clouds

    # ------------------------------------------------------------------
    # Scene state
    # ------------------------------------------------------------------

    @property
    def source(self) -> Point:
        """True source (sun) position."""
        return self._source

    @source.setter
    def source(self, point: Point) -> None:
        self._source = point
        self.aggregator.reset()

    @property
    def observer(self) -> Point:
        """Centre of the observer's capture disc."""
        return self._observer

    @observer.setter
    def observer(self, point: Point) -> None:
        self._observer = point
        self.aggregator.reset()

    @property
    def medium(self) -> LayeredMedium:
        return self._medium

    @property
    def moon(self) -> Optional[Cloud]:
        """The movable cloud, if the scene has one."""
        if self.config.obstacles.moon and self.clouds:
            return self.clouds[0]
        return None

    @property
    def obstacles(self) -> List[Obstacle]:
        return [*self.terrain, *self.clouds]

    def update_layers(
        self,
        layer_count: Optional[int] = None,
        layer_spacing: Optional[float] = None,
        top_index: Optional[float] = None,
        bottom_index: Optional[float] = None,
    ) -> LayeredMedium:
        """Rebuild the refractive layers from updated parameters.

        Args:
            layer_count: Number of boundaries
            layer_spacing: Distance between boundaries [px]
            top_index: Index of the highest layer
            bottom_index: Index of the lowest layer

        Returns:
            The new LayeredMedium
        """
        medium_cfg = self.config.medium
        if layer_count is not None:
            medium_cfg.layer_count = layer_count
        if layer_spacing is not None:
            medium_cfg.layer_spacing = layer_spacing
        if top_index is not None:
            medium_cfg.top_index = top_index
        if bottom_index is not None:
            medium_cfg.bottom_index = bottom_index

        self._medium = LayeredMedium.from_config(medium_cfg, ground_y=self.ground_y)
        self.aggregator.reset()
        logger.info(
            f"Rebuilt medium: {medium_cfg.layer_count} layers, "
            f"index {medium_cfg.top_index} -> {medium_cfg.bottom_index}"
        )
        return self._medium

    # ------------------------------------------------------------------
    # Drag helpers
    # ------------------------------------------------------------------

    def move_source(self, x: float, y: float) -> Point:
        """Move the sun, keeping it on the canvas and above the ground."""
        x = min(max(x, 0.0), self.config.canvas.width)
        y = min(max(y, 0.0), self.ground_y - SUN_MIN_CLEARANCE)
        self.source = Point(x, y)
        return self.source

    def set_source_height(self, height: float) -> Point:
        """Place the sun ``height`` pixels above the ground."""
        self.source = Point(self._source.x, self.ground_y - height)
        return self.source

    def move_observer(self, x: float, y: float) -> Point:
        """Move the observer, keeping it within its band above the ground."""
        x = min(max(x, 0.0), self.config.canvas.width)
        y = min(max(y, self.ground_y - self.config.observer.height), self.ground_y)
        self.observer = Point(x, y)
        return self.observer

    def move_moon(self, x: float, y: float) -> Optional[Cloud]:
        """Move the moon, keeping it on the canvas and above the ground."""
        moon = self.moon
        if moon is None:
            return None
        x = min(max(x, 0.0), self.config.canvas.width - moon.width)
        y = min(max(y, 0.0), self.ground_y - moon.height)
        self.clouds[0] = Cloud(x=x, y=y, width=moon.width, height=moon.height)
        return self.clouds[0]

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def run_frame(self, view: Optional[ViewState] = None) -> FrameResult:
        """Trace one full batch of rays and update the aggregated hits.

        Args:
            view: Current pan/zoom state (default: unzoomed, unpanned)

        Returns:
            FrameResult
        """
        view = view if view is not None else ViewState()
        tracer_cfg = self.config.tracer
        canvas = self.config.canvas

        left, right = view.visible_ground_range(canvas.earth_width)
        targets = ground_targets(left, right, tracer_cfg.ray_count)

        paths = trace_rays(
            self._source,
            targets,
            self._medium,
            self.obstacles,
            self._observer,
            reflection_every=tracer_cfg.reflection_every,
            step_scale=view.step_scale,
            observer_radius=self.config.observer.radius,
            ground_y=self.ground_y,
            canvas_width=canvas.width,
            base_step=tracer_cfg.base_step,
            index_epsilon=tracer_cfg.index_epsilon,
            reflection_threshold=tracer_cfg.reflection_threshold,
        )

        new_hits = 0
        for path in paths:
            if path.hit is not None:
                self.aggregator.record(path.hit)
                new_hits += 1

        apparent = self.aggregator.compute_apparent_source()

        result = FrameResult(
            paths=paths,
            targets=targets,
            new_hits=new_hits,
            hits=self.aggregator.hits,
            apparent_source=apparent,
            source=self._source,
            observer=self._observer,
            metadata={
                "ray_count": len(paths),
                "discarded_rays": sum(1 for p in paths if p.is_empty),
                "visible_range": [left, right],
                "zoom": view.zoom,
            },
        )
        result.metadata["shadowed_rays"] = result.shadowed_rays

        logger.debug(
            f"Frame: {len(paths)} rays, {new_hits} new hits, "
            f"{len(self.aggregator)} held, apparent source={apparent}"
        )
        return result

    def render(self, view: Optional[ViewState] = None) -> Optional[FrameResult]:
        """Run a frame unless one ran less than a frame interval ago.

        Returns:
            FrameResult, or None when the frame was dropped
        """
        if not self.throttle.ready():
            return None
        return self.run_frame(view)
