"""
Configuration Manager for flat-earth refraction scenes.

Handles loading and validation of scene configurations from
dictionaries, JSON and YAML files.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass

from flatrefract.config.settings import SceneConfig

logger = logging.getLogger(__name__)


@dataclass
class LoadedConfiguration:
    """Container for a loaded and validated configuration.

    Attributes:
        config: The scene configuration settings
        is_valid: Whether the configuration passed validation
        validation_errors: List of validation error messages
    """
    config: SceneConfig
    is_valid: bool
    validation_errors: list


class ConfigurationManager:
    """Loads scene configurations and reports validation problems.

    Example:
        >>> manager = ConfigurationManager()
        >>> loaded = manager.load_config({"medium": {"layer_count": 5}})
        >>> if loaded.is_valid:
        ...     print(loaded.config.medium.layer_count)
    """

    def __init__(self, base_path: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            base_path: Base path for relative file references.
                      Defaults to current working directory.
        """
        self.base_path = Path(base_path) if base_path else Path.cwd()

    def load_config(
        self,
        config_source: Dict[str, Any] | str | SceneConfig,
    ) -> LoadedConfiguration:
        """Load and validate a complete configuration.

        Args:
            config_source: Configuration dictionary, SceneConfig, JSON path
                or YAML path

        Returns:
            LoadedConfiguration with parsed config and validation result
        """
        if isinstance(config_source, SceneConfig):
            config = config_source
        elif isinstance(config_source, dict):
            config = SceneConfig.from_dict(config_source)
        elif isinstance(config_source, str):
            path = self.resolve_path(config_source)
            if path.suffix.lower() == '.json':
                config = SceneConfig.from_json(str(path))
            elif path.suffix.lower() in ('.yaml', '.yml'):
                config = SceneConfig.from_yaml(str(path))
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")
            logger.info(f"Loaded scene configuration from {path}")
        else:
            raise TypeError(f"Invalid config source type: {type(config_source)}")

        validation_errors = config.validate()
        is_valid = len(validation_errors) == 0

        if not is_valid:
            for error in validation_errors:
                logger.warning(f"Configuration validation error: {error}")

        return LoadedConfiguration(
            config=config,
            is_valid=is_valid,
            validation_errors=validation_errors,
        )

    def resolve_path(self, path: str) -> Path:
        """Resolve a path relative to base_path.

        Args:
            path: Relative or absolute path string

        Returns:
            Resolved absolute Path
        """
        p = Path(path)
        if p.is_absolute():
            return p
        return (self.base_path / p).resolve()

    @staticmethod
    def create_example_config() -> Dict[str, Any]:
        """Create an example configuration dictionary.

        Returns:
            Example configuration with every section present
        """
        return {
            "medium": {
                "layer_count": 10,
                "layer_spacing": 20.0,
                "top_index": 1.0,
                "bottom_index": 1.3,
            },
            "source": {"x": 650.0, "height": 500.0},
            "observer": {"x": 700.0, "height": 2.0, "radius": 5.0},
            "obstacles": {"seed": 42, "terrain_count": 38, "cloud_count": 32},
            "tracer": {"ray_count": 100, "reflection_every": 5},
            "aggregator": {"max_hits": 10, "spread_factor": 1.3},
            "frame": {"max_fps": 30.0},
        }

    def save_example_config(self, output_path: str) -> None:
        """Save an example configuration file.

        Args:
            output_path: Path to save the example JSON
        """
        example = self.create_example_config()
        with open(output_path, 'w') as f:
            json.dump(example, f, indent=2)
        logger.info(f"Saved example configuration to {output_path}")
