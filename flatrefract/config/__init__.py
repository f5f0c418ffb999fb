"""
Configuration management for FlatRefract scenes.

This module provides:
- SceneConfig: Data classes for scene parameters
- ConfigurationManager: Loading and validation of configurations
"""

from flatrefract.config.settings import SceneConfig
from flatrefract.config.manager import ConfigurationManager, LoadedConfiguration

__all__ = [
    "SceneConfig",
    "ConfigurationManager",
    "LoadedConfiguration",
]
