"""
Debug logging utilities for tracing.

The library only creates loggers; nothing is printed unless the host
application configures logging or calls setup_debug_logging().
"""

import logging
import math
from typing import TYPE_CHECKING, Optional

from mirror_trace.geometry import Vector2
from mirror_trace.ray import Ray, RaySegment

if TYPE_CHECKING:
    from mirror_trace.scene import Scene

LOGGER_NAME = "mirror_trace"
DEBUG_FORMAT = "[%(levelname)s] %(name)s - %(message)s"

_debug_handler: Optional[logging.Handler] = None


def setup_debug_logging(level: int = logging.DEBUG) -> logging.Logger:
    """
    Send mirror_trace log records to stderr.

    Calling it again only changes the level; a single handler is kept.

    Parameters:
        level: Logging level for the mirror_trace logger tree

    Returns:
        The package logger
    """
    global _debug_handler
    pkg_logger = logging.getLogger(LOGGER_NAME)
    if _debug_handler is None:
        _debug_handler = logging.StreamHandler()
        _debug_handler.setFormatter(logging.Formatter(DEBUG_FORMAT))
        pkg_logger.addHandler(_debug_handler)
    pkg_logger.setLevel(level)
    return pkg_logger


def disable_debug_logging() -> None:
    """Remove the handler installed by setup_debug_logging() and reset the level."""
    global _debug_handler
    pkg_logger = logging.getLogger(LOGGER_NAME)
    if _debug_handler is not None:
        pkg_logger.removeHandler(_debug_handler)
        _debug_handler = None
    pkg_logger.setLevel(logging.NOTSET)


def format_point(point: Vector2, precision: int = 2) -> str:
    return f"({point[0]:.{precision}f}, {point[1]:.{precision}f})"


def format_angle(angle: float) -> str:
    """Format an angle in radians with its value in degrees."""
    return f"{angle:.4f} rad ({math.degrees(angle):.1f}°)"


def format_segment(segment: RaySegment, precision: int = 2) -> str:
    return (
        f"L{segment.level} {format_point(segment.origin, precision)} -> "
        f"{format_point(segment.end, precision)}"
    )


def log_ray_chain(
    ray: Ray,
    logger: Optional[logging.Logger] = None,
    level: int = logging.DEBUG
) -> None:
    """Log every segment of a ray's reflection chain, one line each."""
    log = logger or logging.getLogger(LOGGER_NAME)
    if not log.isEnabledFor(level):
        return
    segments = ray.segments()
    log.log(level, f"Ray chain with {len(segments)} segment(s)")
    for segment in segments:
        log.log(level, f"  {format_segment(segment)}")


def log_scene_summary(
    scene: "Scene",
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO
) -> None:
    """Log mirror/source counts and the depth of every traced path."""
    log = logger or logging.getLogger(LOGGER_NAME)
    if not log.isEnabledFor(level):
        return
    paths = scene.paths()
    log.log(
        level,
        f"Scene: {len(scene.mirrors)} mirror(s), {len(scene.sources)} source(s), "
        f"{len(paths)} traced ray(s)",
    )
    for i, path in enumerate(paths):
        bounces = len(path) - 1
        log.log(level, f"  ray {i}: {bounces} bounce(s), ends at {format_point(path[-1].end)}")
