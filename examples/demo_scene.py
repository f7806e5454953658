"""Four-mirror demo scene for the mirror_trace package.

Builds the classic demo layout: a floor, a ceiling, a left wall and one
slanted mirror, with two rays bouncing between them. The first ray is then
aimed at a few pointer positions, the way an interactive front end would
follow the mouse, and every traced path is summarised. When OpenCV is
installed the final scene is rendered to ``examples/output/demo_scene.png``.

Run with::

    python examples/demo_scene.py
"""

from __future__ import annotations

import logging
from pathlib import Path

from mirror_trace import (
    PlaneMirror,
    Ray,
    Scene,
    log_scene_summary,
    setup_debug_logging,
)
from mirror_trace.debug import format_point
from mirror_trace.visualize import HAS_CV2, draw_scene

EXAMPLES_DIR = Path(__file__).resolve().parent
OUTPUT_DIR = EXAMPLES_DIR / "output"
OUTPUT_PATH = OUTPUT_DIR / "demo_scene.png"

CANVAS_SIZE = (500, 830)

POINTER_TRACK = [(250, 150), (400, 250), (150, 380), (300, 120)]


def build_scene() -> Scene:
    """Create the demo mirrors and rays."""
    mirrors = [
        PlaneMirror((50, 400), (550, 400)),
        PlaneMirror((550, 100), (50, 100)),
        PlaneMirror((100, 200), (100, 400)),
        PlaneMirror((350, 200), (500, 400)),
    ]
    rays = [
        Ray((300, 300), (-13, 50)),
        Ray((550, 300), (-100, -20)),
    ]
    return Scene(sources=rays, mirrors=mirrors)


def follow_pointer(scene: Scene) -> None:
    """Aim the first ray at each pointer position and report its path."""
    ray = scene.sources[0]
    for target in POINTER_TRACK:
        recast = scene.update_direction(ray, target)
        path = scene.paths()[0]
        print(
            f"pointer {format_point(target, 0)}: re-cast {recast} source(s), "
            f"{len(path) - 1} bounce(s), ends at {format_point(path[-1].end)}"
        )


def main() -> None:
    setup_debug_logging(logging.INFO)

    scene = build_scene()
    log_scene_summary(scene)

    print("\nFollowing the pointer with the first ray:")
    follow_pointer(scene)

    if not HAS_CV2:
        print("OpenCV not installed; skipping visualization output.")
        return

    image = draw_scene(None, scene, size=CANVAS_SIZE)

    OUTPUT_DIR.mkdir(parents=True, exist_ok=True)

    import cv2  # Imported lazily to keep dependency optional at module import time

    cv2.imwrite(str(OUTPUT_PATH), image)
    print(f"Saved visualization to {OUTPUT_PATH}")


if __name__ == "__main__":
    main()
