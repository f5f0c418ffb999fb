#!/usr/bin/env python3
"""
Example 03: Configuration File Usage
====================================

Demonstrates loading scene setups from YAML/JSON files, validating
them and saving a frame for later analysis.

Usage:
    python 03_config_file_demo.py
    python 03_config_file_demo.py --config configs/low_sun.yaml
    python 03_config_file_demo.py --create-default my_scene.json
"""

import argparse
import sys
from pathlib import Path

# Add parent to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from flatrefract import Scene
from flatrefract.config import ConfigurationManager
from flatrefract.utils.output import OutputFormatter


def parse_args():
    parser = argparse.ArgumentParser(
        description="Configuration file usage demonstration"
    )
    parser.add_argument(
        "--config", type=str,
        default=str(Path(__file__).parent / "configs" / "low_sun.yaml"),
        help="Scene configuration (YAML or JSON)",
    )
    parser.add_argument("--create-default", type=str, help="Write an example config and exit")
    parser.add_argument("--frames", type=int, default=10, help="Frames to run")
    parser.add_argument("--output", type=str, default="low_sun_frame.json")
    return parser.parse_args()


def main():
    args = parse_args()
    manager = ConfigurationManager()

    if args.create_default:
        manager.save_example_config(args.create_default)
        print(f"Example configuration written to: {args.create_default}")
        return

    loaded = manager.load_config(args.config)
    print(f"Loaded: {args.config}")
    if not loaded.is_valid:
        print("Configuration problems:")
        for error in loaded.validation_errors:
            print(f"  - {error}")
        return

    cfg = loaded.config
    print(f"  Layers: {cfg.medium.layer_count} x {cfg.medium.layer_spacing} px, "
          f"index {cfg.medium.top_index} -> {cfg.medium.bottom_index}")
    print(f"  Sun: x={cfg.source.x}, height={cfg.source.height} px")
    print(f"  Observer: x={cfg.observer.x}")

    scene = Scene(cfg)
    for _ in range(args.frames):
        result = scene.run_frame()

    path = OutputFormatter().save(result, args.output, config=cfg.to_dict())
    print(f"\nFrame with {len(result.hits)} observer hits saved to: {path}")


if __name__ == "__main__":
    main()
