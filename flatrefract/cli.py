"""
Command-line interface for FlatRefract.

Runs one or more frames of a scene and prints where the sun appears to
be from the observer's position, or saves the frame to a file.
"""

import argparse
import logging
import sys

from flatrefract.utils.constants import altitude_km


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def build_config(args: argparse.Namespace) -> dict:
    """Scene configuration from a config file plus CLI overrides."""
    from flatrefract.config import ConfigurationManager

    if args.config:
        config = ConfigurationManager().load_config(args.config).config.to_dict()
    else:
        config = {}

    overrides = {
        "medium": {
            "layer_count": args.layers,
            "layer_spacing": args.layer_spacing,
            "top_index": args.top_index,
            "bottom_index": args.bottom_index,
        },
        "source": {"x": args.sun_x, "height": args.sun_height},
        "observer": {"x": args.observer_x},
        "obstacles": {"seed": args.seed},
        "tracer": {"ray_count": args.rays},
    }
    for section, values in overrides.items():
        for key, value in values.items():
            if value is not None:
                config.setdefault(section, {})[key] = value

    return config


def run_scene(args: argparse.Namespace) -> int:
    """Run frames of a scene and report the apparent sun."""
    from flatrefract import Scene, ViewState
    from flatrefract.utils.output import OutputFormatter

    config = build_config(args)
    scene = Scene(config)
    view = ViewState(zoom=args.zoom)

    result = None
    for _ in range(args.frames):
        result = scene.run_frame(view)

    if result is None:
        print("No frames were run.")
        return 1

    if args.output:
        output_path = OutputFormatter().save(
            result, args.output, format=args.format or "json",
            config=scene.config.to_dict(),
        )
        print(f"Frame saved to: {output_path}")
        return 0

    ground_y = scene.ground_y
    print(f"\nFrame Results:")
    print(f"  Rays traced: {result.metadata['ray_count']}")
    print(f"  Rays discarded (upward): {result.metadata['discarded_rays']}")
    print(f"  Rays in shadow: {result.shadowed_rays}")
    print(f"  Observer hits held: {len(result.hits)}")
    print(f"  True sun: x={result.source.x:.1f}, "
          f"altitude={altitude_km(result.source.y, ground_y):.0f} km")

    apparent = result.apparent_source
    if apparent is None:
        print("  Apparent sun: not enough observer hits")
    else:
        print(f"  Apparent sun: x={apparent.position.x:.1f}, "
              f"altitude={altitude_km(apparent.position.y, ground_y):.0f} km")

    return 0


def main() -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="FlatRefract: light refraction over a flat-earth model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Run the default scene for a few frames
    flatrefract --frames 20 --seed 42

    # Low sun, far observer, saved to JSON
    flatrefract --sun-height 100 --observer-x 900 --frames 30 -o frame.json
        """,
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="FlatRefract 0.1.0",
    )
    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to JSON or YAML scene configuration",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for obstacle generation",
    )
    parser.add_argument(
        "-n", "--frames",
        type=int,
        default=10,
        help="Number of frames to run (hits accumulate across frames)",
    )

    # Scene options
    parser.add_argument("--sun-x", type=float, help="Sun x position [px]")
    parser.add_argument("--sun-height", type=float, help="Sun height above ground [px]")
    parser.add_argument("--observer-x", type=float, help="Observer x position [px]")
    parser.add_argument("--layers", type=int, help="Number of refractive layers")
    parser.add_argument("--layer-spacing", type=float, help="Layer spacing [px]")
    parser.add_argument("--top-index", type=float, help="Refractive index of the top layer")
    parser.add_argument("--bottom-index", type=float, help="Refractive index of the bottom layer")
    parser.add_argument("--rays", type=int, help="Rays per frame")
    parser.add_argument("--zoom", type=float, default=1.0, help="View zoom (sets step length)")

    # Output options
    parser.add_argument(
        "-o", "--output",
        type=str,
        help="Output file path",
    )
    parser.add_argument(
        "-f", "--format",
        type=str,
        choices=["json", "csv"],
        help="Output format",
    )

    args = parser.parse_args()
    setup_logging(args.verbose)

    try:
        return run_scene(args)
    except Exception as e:
        logging.exception(f"Scene failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
