#!/usr/bin/env python3
"""
Example 02: Apparent Sun Altitude vs Index Gradient
===================================================

Sweeps the refractive index of the lowest layer and reports how high
the sun appears to an observer standing right below it. With no
gradient the apparent and true sun coincide; denser air near the
ground lifts the apparent sun.

Usage:
    python 02_index_gradient_study.py
    python 02_index_gradient_study.py --max-index 1.5 --steps 11
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
        description="Apparent sun altitude as a function of the index gradient"
    )
    parser.add_argument("--max-index", type=float, default=1.3, help="Largest bottom index")
    parser.add_argument("--steps", type=int, default=7, help="Number of sweep points")
    parser.add_argument("--sun-height", type=float, default=500.0, help="Sun height [px]")
    parser.add_argument("--no-plot", action="store_true", help="Disable plotting")
    parser.add_argument("--output", type=str, default="index_gradient_study.png")
    return parser.parse_args()


def apparent_altitude(bottom_index, sun_height):
    """
    Apparent sun altitude for one bottom-layer index.

    Parameters
    ----------
    bottom_index : float
        Refractive index of the layer closest to the ground
    sun_height : float
        Sun height above ground in pixels

    Returns
    -------
    altitude : float
        Apparent altitude in km, NaN if it could not be reconstructed
    """
    scene = Scene({
        "medium": {"top_index": 1.0, "bottom_index": bottom_index},
        "source": {"x": 650.0, "height": sun_height},
        "observer": {"x": 650.0},
        "obstacles": {"seed": 0, "terrain_count": 0, "cloud_count": 0},
        "tracer": {"ray_count": 600},
    })
    apparent = scene.run_frame().apparent_source
    if apparent is None:
        return np.nan
    return altitude_km(apparent.position.y, scene.ground_y)


def main():
    args = parse_args()

    print("=" * 60)
    print("APPARENT SUN ALTITUDE VS INDEX GRADIENT")
    print("=" * 60)

    true_altitude = args.sun_height * 10.0
    indices = np.linspace(1.0, args.max_index, args.steps)
    altitudes = np.array([apparent_altitude(n, args.sun_height) for n in indices])

    print(f"\nTrue sun altitude: {true_altitude:.0f} km\n")
    print(f"{'Bottom index':>14} {'Apparent (km)':>15} {'Lift (km)':>10}")
    print("-" * 42)
    for n, alt in zip(indices, altitudes):
        print(f"{n:>14.3f} {alt:>15.0f} {alt - true_altitude:>10.0f}")

    if not args.no_plot:
        try:
            import matplotlib.pyplot as plt

            fig, ax = plt.subplots(figsize=(8, 6))
            ax.plot(indices, altitudes, 'bo-', linewidth=2, label='Apparent sun')
            ax.axhline(true_altitude, color='orange', linestyle='--', label='True sun')
            ax.set_xlabel('Bottom Layer Refractive Index')
            ax.set_ylabel('Altitude (km)')
            ax.set_title('Apparent Sun Altitude vs Index Gradient')
            ax.legend()
            ax.grid(True, alpha=0.3)

            plt.tight_layout()
            plt.savefig(args.output, dpi=150, bbox_inches='tight')
            print(f"\nPlot saved to: {args.output}")

        except ImportError:
            print("\nNote: matplotlib not available")


if __name__ == "__main__":
    main()
