#!/usr/bin/env python3
"""
Example 01: Apparent Sun over a Flat Earth
==========================================

Traces a batch of rays from the sun through the layered atmosphere and
plots them together with the mountains, clouds, refractive boundaries
and the apparent sun reconstructed from the rays reaching the observer.

Key concepts:
- Refraction at horizontal index boundaries (Snell's law)
- Shadowing by terrain and clouds
- Back-extrapolation of observed rays

Usage:
    python 01_apparent_sun.py
    python 01_apparent_sun.py --sun-height 200 --observer-x 900 --frames 30
"""

import argparse
import sys
from pathlib import Path

import numpy as np

# Add parent to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from flatrefract import Scene
from flatrefract.utils import altitude_km


def parse_args():
    parser = argparse.ArgumentParser(
        description="Trace rays and reconstruct the apparent sun"
    )
    parser.add_argument("--sun-x", type=float, default=650.0, help="Sun x position [px]")
    parser.add_argument("--sun-height", type=float, default=500.0, help="Sun height [px]")
    parser.add_argument("--observer-x", type=float, default=700.0, help="Observer x [px]")
    parser.add_argument("--frames", type=int, default=20, help="Frames to accumulate hits")
    parser.add_argument("--seed", type=int, default=42, help="Obstacle seed")
    parser.add_argument("--no-plot", action="store_true", help="Disable plotting")
    parser.add_argument("--output", type=str, default="apparent_sun.png")
    return parser.parse_args()


def main():
    args = parse_args()

    print("=" * 60)
    print("APPARENT SUN OVER A FLAT EARTH")
    print("=" * 60)

    scene = Scene({
        "source": {"x": args.sun_x, "height": args.sun_height},
        "observer": {"x": args.observer_x},
        "obstacles": {"seed": args.seed},
        "tracer": {"ray_count": 400},
    })
    ground_y = scene.ground_y

    result = None
    for _ in range(args.frames):
        result = scene.run_frame()

    print(f"\nRays per frame: {len(result.paths)}")
    print(f"Rays in shadow: {result.shadowed_rays}")
    print(f"Observer hits held: {len(result.hits)}")
    print(f"True sun altitude: {altitude_km(scene.source.y, ground_y):.0f} km")

    apparent = result.apparent_source
    if apparent is None:
        print("Apparent sun: not enough observer hits (move the observer closer)")
    else:
        print(f"Apparent sun altitude: {altitude_km(apparent.position.y, ground_y):.0f} km")
        print(f"Apparent sun offset: {apparent.position.x - scene.source.x:+.1f} px")

    if not args.no_plot:
        try:
            import matplotlib.pyplot as plt
            from matplotlib.patches import Circle, Polygon, Rectangle

            fig, ax = plt.subplots(figsize=(13, 8))
            fig.suptitle('Refraction in a Layered Flat-Earth Atmosphere',
                         fontsize=14, fontweight='bold')

            # Refractive boundaries
            for y, label in zip(scene.medium.boundaries, scene.medium.labels(ground_y)):
                ax.axhline(y, color='gray', linewidth=0.5, alpha=0.5)
                ax.text(5, y - 2, label, fontsize=7, color='gray')

            # Ray paths, shadowed parts dashed
            for path in result.paths:
                for seg in path.segments:
                    pts = np.array([(p.x, p.y) for p in seg.points])
                    style = 'k:' if seg.in_shadow else 'y-'
                    ax.plot(pts[:, 0], pts[:, 1], style, linewidth=0.4, alpha=0.6)
                for event in path.reflections:
                    ax.plot(event.point.x, event.point.y, 'c.', markersize=2)

            for mountain in scene.terrain:
                ax.add_patch(Polygon([(p.x, p.y) for p in mountain.vertices()],
                                     color='saddlebrown'))
            for cloud in scene.clouds:
                ax.add_patch(Rectangle((cloud.x, cloud.y), cloud.width, cloud.height,
                                       color='lightgray'))

            ax.add_patch(Circle((scene.source.x, scene.source.y),
                                scene.config.source.radius, color='orange'))
            ax.add_patch(Circle((scene.observer.x, scene.observer.y),
                                scene.config.observer.radius, color='blue', fill=False))

            if apparent is not None:
                for start, end in scene.aggregator.view_lines(apparent):
                    ax.plot([start.x, end.x], [start.y, end.y], 'r-', linewidth=0.8)
                ax.plot(apparent.position.x, apparent.position.y, 'r*', markersize=12,
                        label='Apparent sun')

            ax.axhspan(ground_y, scene.config.canvas.height, color='green', alpha=0.4)
            ax.set_xlim(0, scene.config.canvas.width)
            ax.set_ylim(scene.config.canvas.height, 0)
            ax.set_xlabel('x (px, 1 px = 10 km)')
            ax.set_ylabel('y (px)')
            ax.legend(loc='upper right')

            plt.tight_layout()
            plt.savefig(args.output, dpi=150, bbox_inches='tight')
            print(f"\nPlot saved to: {args.output}")

        except ImportError:
            print("\nNote: matplotlib not available")


if __name__ == "__main__":
    main()
