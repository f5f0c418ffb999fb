"""
Layered refractive medium.

The atmosphere is modelled as a stack of horizontal boundaries, each
carrying a refractive index. The index changes abruptly at every
boundary; there is no interpolation within a band.
"""

import logging
from dataclasses import dataclass, field
from typing import List

import numpy as np

from flatrefract.utils.constants import (
    BOTTOM_INDEX,
    DEFAULT_REFRACTIVE_INDEX,
    GROUND_Y,
    LAYER_COUNT,
    LAYER_SPACING,
    TOP_INDEX,
    altitude_km,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RefractiveLayer:
    """Single refractive boundary.

    Attributes:
        y: Boundary y coordinate [px]
        index: Refractive index of the layer (> 0)
    """
    y: float
    index: float


@dataclass
class LayeredMedium:
    """Ordered stack of refractive layers.

    Layers are kept sorted descending by ``y``: the first layer is the one
    closest to the ground, the last one is the topmost.

    Attributes:
        layers: Refractive layers, ground-most first
        default_index: Index returned when there are no layers
    """
    layers: List[RefractiveLayer] = field(default_factory=list)
    default_index: float = DEFAULT_REFRACTIVE_INDEX

    def __post_init__(self):
        self.layers = sorted(self.layers, key=lambda layer: layer.y, reverse=True)

    @classmethod
    def build(
        cls,
        layer_count: int = LAYER_COUNT,
        layer_spacing: float = LAYER_SPACING,
        top_index: float = TOP_INDEX,
        bottom_index: float = BOTTOM_INDEX,
        ground_y: float = GROUND_Y,
    ) -> "LayeredMedium":
        """Create evenly spaced layers with linearly interpolated indices.

        Args:
            layer_count: Number of boundaries (0 gives an empty medium)
            layer_spacing: Vertical distance between boundaries [px]
            top_index: Index of the highest layer
            bottom_index: Index of the layer closest to the ground
            ground_y: y coordinate of the ground surface

        Returns:
            LayeredMedium instance
        """
        layers = []
        for i in range(max(layer_count, 0)):
            t = i / (layer_count - 1) if layer_count > 1 else 0.0
            layers.append(RefractiveLayer(
                y=ground_y - (i + 1) * layer_spacing,
                index=bottom_index + (top_index - bottom_index) * t,
            ))

        logger.debug(
            f"Built {len(layers)} refractive layers "
            f"(spacing={layer_spacing}, top={top_index}, bottom={bottom_index})"
        )
        return cls(layers=layers)

    @classmethod
    def from_config(cls, config, ground_y: float = GROUND_Y) -> "LayeredMedium":
        """Create a medium from a MediumConfig."""
        return cls.build(
            layer_count=config.layer_count,
            layer_spacing=config.layer_spacing,
            top_index=config.top_index,
            bottom_index=config.bottom_index,
            ground_y=ground_y,
        )

    @property
    def num_layers(self) -> int:
        """Number of layers."""
        return len(self.layers)

    @property
    def boundaries(self) -> np.ndarray:
        """Boundary y coordinates, ground-most first [px]."""
        return np.array([layer.y for layer in self.layers])

    @property
    def indices(self) -> np.ndarray:
        """Refractive indices, ground-most first."""
        return np.array([layer.index for layer in self.layers])

    def lookup(self, y: float) -> float:
        """Refractive index in effect at height ``y``.

        Above the topmost boundary the topmost index applies and below
        the ground-most boundary the ground-most index applies. In between,
        a point takes the index of the boundary it has most recently
        crossed when scanning down from the top.
        """
        if not self.layers:
            return self.default_index

        upper = self.layers[-1]
        lower = self.layers[0]

        if y <= upper.y:
            return upper.index
        if y >= lower.y:
            return lower.index

        for below, above in zip(self.layers[:-1], self.layers[1:]):
            if above.y <= y <= below.y:
                return above.index

        return self.default_index

    def labels(self, ground_y: float = GROUND_Y) -> List[str]:
        """Altitude/index captions for each boundary, ground-most first."""
        return [
            f"{altitude_km(layer.y, ground_y):g}km, {layer.index:.2f}"
            for layer in self.layers
        ]
