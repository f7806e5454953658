"""
Visualization utilities for debugging traced scenes.

Draws mirrors and reflection chains onto BGR images with OpenCV. Scene
coordinates are used directly as pixel coordinates.
"""

from typing import Iterable, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from mirror_trace.geometry import Vector2, perp
from mirror_trace.mirrors import Mirror, PlaneMirror, SphericalMirror
from mirror_trace.ray import Ray
from mirror_trace.scene import Scene

# Try to import cv2, set flag if not available
try:
    import cv2

    HAS_CV2 = True
except ImportError:
    HAS_CV2 = False

MIRROR_COLOR = (255, 255, 255)
# (247, 213, 74) in RGB
RAY_COLOR = (74, 213, 247)
ARROW_SIZE = 4.0


def _ensure_cv2() -> None:
    """Raise an error if cv2 is not available."""
    if not HAS_CV2:
        raise ImportError(
            "OpenCV (cv2) is required for visualization functions. "
            "Install with: pip install opencv-python"
        )


def _pt(point: Vector2) -> Tuple[int, int]:
    return int(round(float(point[0]))), int(round(float(point[1])))


def _scaled(color: Tuple[int, int, int], factor: float) -> Tuple[int, int, int]:
    return tuple(int(round(c * factor)) for c in color)  # type: ignore[return-value]


def draw_mirror(
    image: NDArray[np.uint8],
    mirror: Mirror,
    color: Tuple[int, int, int] = MIRROR_COLOR,
    thickness: int = 3,
    draw_shade: bool = True
) -> NDArray[np.uint8]:
    """
    Draw one mirror with back-side shade ticks.

    Parameters:
        image: Input image (H, W, 3) BGR format
        mirror: PlaneMirror or SphericalMirror
        color: BGR color
        thickness: Line thickness of the reflective surface
        draw_shade: If True, draw thin ticks on the non-reflective side

    Returns:
        Image with the mirror drawn (modified copy)
    """
    _ensure_cv2()
    output = image.copy()

    if isinstance(mirror, PlaneMirror):
        cv2.line(output, _pt(mirror.start), _pt(mirror.end), color, thickness, cv2.LINE_AA)
    elif isinstance(mirror, SphericalMirror):
        pts = np.round(mirror.arc_points()).astype(np.int32).reshape((-1, 1, 2))
        cv2.polylines(output, [pts], isClosed=False, color=color,
                      thickness=thickness, lineType=cv2.LINE_AA)
    else:
        raise TypeError(f"cannot draw mirror of type {type(mirror).__name__}")

    if draw_shade:
        for start, end in mirror.shade_segments():
            cv2.line(output, _pt(start), _pt(end), color, 1, cv2.LINE_AA)

    return output


def draw_mirrors(
    image: NDArray[np.uint8],
    mirrors: Iterable[Mirror],
    color: Tuple[int, int, int] = MIRROR_COLOR,
    thickness: int = 3
) -> NDArray[np.uint8]:
    output = image.copy()
    for mirror in mirrors:
        output = draw_mirror(output, mirror, color=color, thickness=thickness)
    return output


def draw_ray_chain(
    image: NDArray[np.uint8],
    ray: Ray,
    color: Tuple[int, int, int] = RAY_COLOR,
    thickness: int = 1,
    draw_arrows: bool = True
) -> NDArray[np.uint8]:
    """
    Draw a ray and every reflection that follows it.

    Each segment's color is scaled by its opacity, so deep bounces fade
    towards black. An origin dot and a direction arrow mark each segment.

    Parameters:
        image: Input image (H, W, 3) BGR format
        ray: Source ray, already cast
        color: BGR color of a level-0 segment
        thickness: Line thickness
        draw_arrows: If True, draw a filled arrow head per segment

    Returns:
        Image with the chain drawn (modified copy)
    """
    _ensure_cv2()
    output = image.copy()

    for segment in ray.chain():
        seg_color = _scaled(color, segment.opacity)
        cv2.circle(output, _pt(segment.origin), 2, seg_color, 1, cv2.LINE_AA)
        cv2.line(output, _pt(segment.origin), _pt(segment.end), seg_color,
                 thickness, cv2.LINE_AA)

        if draw_arrows:
            tip = segment.arrow_position
            back = tip - segment.direction * (2 * ARROW_SIZE)
            side = perp(segment.direction) * ARROW_SIZE
            triangle = np.round(np.array([tip, back + side, back - side])).astype(np.int32)
            cv2.fillPoly(output, [triangle.reshape((-1, 1, 2))], seg_color, cv2.LINE_AA)

    return output


def draw_scene(
    image: Optional[NDArray[np.uint8]],
    scene: Scene,
    size: Tuple[int, int] = (500, 830),
    mirror_color: Tuple[int, int, int] = MIRROR_COLOR,
    ray_color: Tuple[int, int, int] = RAY_COLOR
) -> NDArray[np.uint8]:
    """
    Draw all mirrors and traced rays of a scene.

    Parameters:
        image: Background image (H, W, 3) BGR, or None for a black canvas
        scene: Scene to draw; it is updated first if any edit is pending
        size: (height, width) of the black canvas when image is None
        mirror_color: BGR color for mirrors
        ray_color: BGR color for level-0 ray segments

    Returns:
        Rendered image
    """
    _ensure_cv2()
    if image is None:
        output = np.zeros((size[0], size[1], 3), dtype=np.uint8)
    else:
        output = image.copy()

    output = draw_mirrors(output, scene.mirrors, color=mirror_color)
    for ray in scene.rays():
        output = draw_ray_chain(output, ray, color=ray_color)
    return output
