"""Concave versus convex arc mirrors.

Sends the same parallel beam into a concave arc and into the convex side
of an identical arc, then prints where each reflected ray crosses the
beam axis. Rays off a concave mirror cross near half its radius; rays off
a convex mirror spread out and never cross in front of it. The two scenes
are rendered side by side to ``examples/output/focusing_mirror.png`` when
OpenCV is installed.

Run with::

    python examples/focusing_mirror.py
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np

from mirror_trace import Beam, Scene, SphericalMirror
from mirror_trace.ray import RaySegment
from mirror_trace.visualize import HAS_CV2, draw_scene

EXAMPLES_DIR = Path(__file__).resolve().parent
OUTPUT_DIR = EXAMPLES_DIR / "output"
OUTPUT_PATH = OUTPUT_DIR / "focusing_mirror.png"

CANVAS_SIZE = (400, 500)

# Circle of radius 150 about (250, 200); the arc spans about 74 degrees
ARC_POINTS = ((370, 110), (400, 200), (370, 290))


def build_scene(is_convex: bool) -> Scene:
    arc = SphericalMirror(*ARC_POINTS, is_convex=is_convex)
    if is_convex:
        beam = Beam((480, 200), (-1, 0), count=9, width=120)
    else:
        beam = Beam((120, 200), (1, 0), count=9, width=120)
    return Scene(sources=[beam], mirrors=[arc])


def axis_crossing(path: list[RaySegment], axis_y: float) -> Optional[float]:
    """x where the first reflected segment crosses y = axis_y, if it does."""
    if len(path) < 2:
        return None
    reflected = path[1]
    delta = reflected.end - reflected.origin
    if abs(delta[1]) < 1e-9:
        return None
    s = (axis_y - reflected.origin[1]) / delta[1]
    if not 0.0 <= s <= 1.0:
        return None
    return float(reflected.origin[0] + s * delta[0])


def report(name: str, scene: Scene) -> None:
    arc = scene.mirrors[0]
    axis_y = float(arc.center[1])
    print(f"\n{name}: radius {arc.radius:.1f}, center x {arc.center[0]:.1f}")
    crossings = []
    for i, path in enumerate(scene.paths()):
        x = axis_crossing(path, axis_y)
        if x is None:
            print(f"  ray {i}: no crossing")
        else:
            crossings.append(x)
            print(f"  ray {i}: crosses axis at x = {x:.2f}")
    if crossings:
        focus = arc.center[0] + arc.radius / 2
        print(f"  mean crossing {np.mean(crossings):.2f} (paraxial focus {focus:.2f})")


def main() -> None:
    concave = build_scene(is_convex=False)
    convex = build_scene(is_convex=True)

    report("Concave", concave)
    report("Convex", convex)

    if not HAS_CV2:
        print("OpenCV not installed; skipping visualization output.")
        return

    panels = [draw_scene(None, scene, size=CANVAS_SIZE) for scene in (concave, convex)]
    image = np.hstack(panels)

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    import cv2  # Imported lazily to keep dependency optional at module import time

    cv2.imwrite(str(OUTPUT_PATH), image)
    print(f"\nSaved visualization to {OUTPUT_PATH}")


if __name__ == "__main__":
    main()
