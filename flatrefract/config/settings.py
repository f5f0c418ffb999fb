"""
Scene configuration data structures.

Defines the complete configuration schema for a flat-earth refraction
scene: canvas, refractive layers, source, observer, obstacles, ray
tracing and frame pacing.
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Optional, Any
import json
import yaml

from flatrefract.utils import constants as C


@dataclass
class CanvasConfig:
    """World extent.

    Attributes:
        width: Canvas width [px]
        height: Canvas height [px]
        earth_height: Thickness of the ground strip [px]
        earth_width: Width of the ground plane [px]
    """
    width: float = C.CANVAS_WIDTH
    height: float = C.CANVAS_HEIGHT
    earth_height: float = C.EARTH_HEIGHT
    earth_width: float = C.EARTH_WIDTH

    @property
    def ground_y(self) -> float:
        """y coordinate of the ground surface."""
        return self.height - self.earth_height


@dataclass
class MediumConfig:
    """Refractive layer configuration.

    Attributes:
        layer_count: Number of layer boundaries
        layer_spacing: Vertical distance between boundaries [px]
        top_index: Refractive index of the highest layer
        bottom_index: Refractive index of the lowest layer
    """
    layer_count: int = C.LAYER_COUNT
    layer_spacing: float = C.LAYER_SPACING
    top_index: float = C.TOP_INDEX
    bottom_index: float = C.BOTTOM_INDEX


@dataclass
class SourceConfig:
    """Light source (sun) configuration.

    Attributes:
        x: Horizontal position [px]
        height: Height above ground [px]
        radius: Drawn radius [px]
    """
    x: float = C.CANVAS_WIDTH / 2
    height: float = C.SUN_HEIGHT
    radius: float = C.SUN_RADIUS


@dataclass
class ObserverConfig:
    """Observer configuration.

    Attributes:
        x: Horizontal position [px]
        height: Height above ground [px]
        radius: Capture disc radius [px]
    """
    x: float = C.CANVAS_WIDTH / 2
    height: float = C.OBSERVER_HEIGHT
    radius: float = C.OBSERVER_RADIUS


@dataclass
class ObstacleConfig:
    """Obstacle sampling configuration.

    Attributes:
        seed: Seed for the scene's random generator (None for fresh entropy)
        terrain_count: Number of mountains
        cloud_count: Number of clouds
        terrain_min_height: Smallest mountain height [px]
        terrain_height_range: Spread of mountain heights [px]
        cloud_min_width: Narrowest cloud [px]
        cloud_width_range: Spread of cloud widths [px]
        cloud_min_altitude: Lowest cloud top above ground [px]
        cloud_altitude_range: Spread of cloud altitudes [px]
        moon: Turn the first cloud into a movable, sun-sized moon
    """
    seed: Optional[int] = None
    terrain_count: int = C.TERRAIN_COUNT
    cloud_count: int = C.CLOUD_COUNT
    terrain_min_height: float = 1.2
    terrain_height_range: float = 3.0
    cloud_min_width: float = 5.0
    cloud_width_range: float = 15.0
    cloud_min_altitude: float = 2.0
    cloud_altitude_range: float = 2.0
    moon: bool = True


@dataclass
class TracerConfig:
    """Ray marching parameters.

    Attributes:
        ray_count: Rays traced per frame
        reflection_every: Show reflections on every n-th ray (0 disables)
        base_step: Step length at zoom 1 [px]
        index_epsilon: Index change treated as a boundary crossing
        reflection_threshold: Minimum reflection strength recorded
    """
    ray_count: int = C.RAY_COUNT
    reflection_every: int = C.REFLECTION_EVERY
    base_step: float = C.BASE_STEP
    index_epsilon: float = C.INDEX_EPSILON
    reflection_threshold: float = C.REFLECTION_THRESHOLD


@dataclass
class AggregatorConfig:
    """Observer hit aggregation.

    Attributes:
        max_hits: Hits kept for apparent-source reconstruction
        spread_factor: Extension of drawn extrapolation lines
    """
    max_hits: int = C.MAX_HITS
    spread_factor: float = C.SPREAD_FACTOR


@dataclass
class FrameConfig:
    """Frame pacing.

    Attributes:
        max_fps: Frames requested faster than this are dropped
    """
    max_fps: float = C.MAX_FPS


@dataclass
class SceneConfig:
    """Complete scene configuration.

    Example YAML input:
        medium: {layer_count: 10, layer_spacing: 20, top_index: 1.0, bottom_index: 1.3}
        source: {x: 650, height: 500}
        observer: {x: 700}
        obstacles: {seed: 42}
        tracer: {ray_count: 100}
    """
    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    medium: MediumConfig = field(default_factory=MediumConfig)
    source: SourceConfig = field(default_factory=SourceConfig)
    observer: ObserverConfig = field(default_factory=ObserverConfig)
    obstacles: ObstacleConfig = field(default_factory=ObstacleConfig)
    tracer: TracerConfig = field(default_factory=TracerConfig)
    aggregator: AggregatorConfig = field(default_factory=AggregatorConfig)
    frame: FrameConfig = field(default_factory=FrameConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "SceneConfig":
        """Create SceneConfig from a dictionary.

        Missing sections and keys fall back to defaults; unknown keys
        are ignored.

        Args:
            config_dict: Configuration dictionary

        Returns:
            SceneConfig instance
        """
        sections = {
            "canvas": CanvasConfig,
            "medium": MediumConfig,
            "source": SourceConfig,
            "observer": ObserverConfig,
            "obstacles": ObstacleConfig,
            "tracer": TracerConfig,
            "aggregator": AggregatorConfig,
            "frame": FrameConfig,
        }

        kwargs = {}
        for name, section_cls in sections.items():
            section_dict = config_dict.get(name) or {}
            known = section_cls.__dataclass_fields__
            kwargs[name] = section_cls(
                **{k: v for k, v in section_dict.items() if k in known}
            )

        return cls(**kwargs)

    @classmethod
    def from_json(cls, json_path: str) -> "SceneConfig":
        """Load configuration from a JSON file.

        Args:
            json_path: Path to JSON configuration file

        Returns:
            SceneConfig instance
        """
        with open(json_path, 'r') as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "SceneConfig":
        """Load configuration from a YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            SceneConfig instance
        """
        with open(yaml_path, 'r') as f:
            config_dict = yaml.safe_load(f) or {}
        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a nested dictionary."""
        return asdict(self)

    def to_json(self, json_path: str, indent: int = 2) -> None:
        """Save configuration to JSON file.

        Args:
            json_path: Output file path
            indent: JSON indentation level
        """
        with open(json_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=indent)

    def validate(self) -> list:
        """Validate configuration parameters.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []
        ground_y = self.canvas.ground_y

        # Canvas
        if self.canvas.width <= 0 or self.canvas.height <= 0:
            errors.append("canvas dimensions must be positive")
        if not (0 < self.canvas.earth_height < self.canvas.height):
            errors.append("earth_height must be between 0 and canvas height")
        if self.canvas.earth_width <= 0:
            errors.append("earth_width must be positive")

        # Medium
        if self.medium.layer_count < 1:
            errors.append("layer_count must be at least 1")
        if self.medium.layer_spacing <= 0:
            errors.append("layer_spacing must be positive")
        if self.medium.top_index <= 0 or self.medium.bottom_index <= 0:
            errors.append("refractive indices must be positive")

        # Source and observer
        if not (0 <= self.source.x <= self.canvas.width):
            errors.append("source x must lie on the canvas")
        if not (0 < self.source.height <= ground_y):
            errors.append("source height must be above ground and on the canvas")
        if not (0 <= self.observer.x <= self.canvas.width):
            errors.append("observer x must lie on the canvas")
        if self.observer.height < 0:
            errors.append("observer height must be non-negative")
        if self.observer.radius <= 0:
            errors.append("observer radius must be positive")

        # Obstacles
        if self.obstacles.terrain_count < 0 or self.obstacles.cloud_count < 0:
            errors.append("obstacle counts must be non-negative")
        if self.obstacles.terrain_min_height <= 0:
            errors.append("terrain_min_height must be positive")

        # Tracer
        if self.tracer.ray_count < 0:
            errors.append("ray_count must be non-negative")
        if self.tracer.base_step <= 0:
            errors.append("base_step must be positive")

        # Aggregator and frame pacing
        if self.aggregator.max_hits < 2:
            errors.append("max_hits must be at least 2")
        if self.frame.max_fps <= 0:
            errors.append("max_fps must be positive")

        return errors
