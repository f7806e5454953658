"""
Beams: bundles of parallel rays spread across a width.
"""

import logging
from numbers import Real
from typing import List, Optional, Sequence

from mirror_trace.config import (
    DEFAULT_CONFIG,
    TraceConfig,
    ValidationError,
    validate_angle,
    validate_direction,
    validate_offset,
    validate_point,
)
from mirror_trace.geometry import (
    PointLike,
    Vector2,
    is_point_near_segment,
    perp,
    rotate,
    vector,
)
from mirror_trace.mirrors import Mirror
from mirror_trace.ray import ORIGIN_PICK_RADIUS, Ray, RaySegment

logger = logging.getLogger(__name__)


def _validate_count(count: object) -> int:
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError(f"count must be an integer, got {type(count).__name__}")
    if count < 0:
        raise ValidationError(f"count must be non-negative, got {count}")
    return count


def _validate_width(width: object) -> float:
    if isinstance(width, bool) or not isinstance(width, Real):
        raise ValidationError(f"width must be a number, got {type(width).__name__}")
    value = float(width)
    if not value >= 0.0 or value == float("inf"):
        raise ValidationError(f"width must be finite and non-negative, got {width}")
    return value


class Beam:
    """
    A bundle of coherent parallel rays.

    The rays share one direction and start on the line through origin
    perpendicular to it, evenly spaced across width and centered on origin.
    A count of 1, or a width below 1, collapses the beam to a single ray at
    origin; a count of 0 leaves it empty. The rays are traced independently
    and are rebuilt whenever any beam parameter changes.

    Parameters:
        origin: Center of the beam's starting line
        direction: Shared ray direction; normalized on assignment
        count: Number of rays (>= 0)
        width: Distance between the outermost rays (>= 0)
        config: Tracing limits, defaults to DEFAULT_CONFIG

    Raises:
        ValidationError: If any parameter is malformed
    """

    def __init__(
        self,
        origin: PointLike,
        direction: PointLike,
        count: int = 5,
        width: float = 40.0,
        config: Optional[TraceConfig] = None
    ) -> None:
        self.config = DEFAULT_CONFIG if config is None else config
        self.origin = validate_point("origin", origin)
        self.direction = validate_direction("direction", direction)
        self.count = _validate_count(count)
        self.width = _validate_width(width)
        self.rays: List[Ray] = []
        self._dirty = True
        self._regenerate()

    def __repr__(self) -> str:
        return (
            f"Beam(origin={self.origin.tolist()}, direction={self.direction.tolist()}, "
            f"count={self.count}, width={self.width})"
        )

    @property
    def dirty(self) -> bool:
        """True when the beam or any member ray needs re-casting."""
        return self._dirty or any(ray.dirty for ray in self.rays)

    @dirty.setter
    def dirty(self, value: bool) -> None:
        self._dirty = bool(value)

    @property
    def perpendicular(self) -> Vector2:
        """Unit vector along the beam's starting line."""
        return perp(self.direction)

    @property
    def spacing(self) -> float:
        """Distance between neighbouring ray origins (0 for a single ray)."""
        if self.count <= 1 or self.width < 1:
            return 0.0
        return self.width / (self.count - 1)

    def _regenerate(self) -> None:
        if self.count == 0:
            origins: List[Vector2] = []
        elif self.count == 1 or self.width < 1:
            origins = [self.origin]
        else:
            side = self.perpendicular
            spacing = self.spacing
            first = -self.width / 2.0
            origins = [
                self.origin + side * (first + i * spacing)
                for i in range(self.count)
            ]
        self.rays = [Ray(p, self.direction, config=self.config) for p in origins]
        self._dirty = True
        logger.debug(f"Beam regenerated with {len(self.rays)} rays")

    def cast(self, mirrors: Sequence[Mirror]) -> None:
        for ray in self.rays:
            ray.cast(mirrors)
        self._dirty = False

    # -------------------------------------------------------------------------
    # Mutators (the owning scene re-casts afterwards)
    # -------------------------------------------------------------------------

    def translate(self, dx: float, dy: float) -> None:
        origin = validate_point("origin", self.origin + validate_offset(dx, dy))
        self.origin = origin
        self._regenerate()

    def rotate(self, angle: float) -> None:
        """Rotate the beam about its origin."""
        direction = validate_direction(
            "direction", rotate(self.direction, validate_angle(angle))
        )
        self.direction = direction
        self._regenerate()

    def update_direction(self, target: PointLike) -> None:
        """Aim the beam from its origin towards target."""
        target_vec = validate_point("target", target)
        self.direction = validate_direction("direction", target_vec - self.origin)
        self._regenerate()

    def set_direction(self, direction: PointLike) -> None:
        self.direction = validate_direction("direction", direction)
        self._regenerate()

    def update_origin(self, point: PointLike) -> None:
        self.origin = validate_point("origin", point)
        self._regenerate()

    def set_count(self, count: int) -> None:
        self.count = _validate_count(count)
        self._regenerate()

    def increment_count(self, step: int = 1) -> None:
        self.set_count(self.count + step)

    def decrement_count(self, step: int = 1) -> None:
        """Remove rays from the beam, stopping at zero."""
        self.set_count(max(0, self.count - step))

    def set_width(self, width: float) -> None:
        self.width = _validate_width(width)
        self._regenerate()

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    def paths(self) -> List[List[RaySegment]]:
        """Reflection chain of every ray in the beam, in ray order."""
        return [ray.segments() for ray in self.rays]

    def is_point_inside(self, x: float, y: float, tolerance: float = ORIGIN_PICK_RADIUS) -> bool:
        """Check whether (x, y) falls on the beam's starting line (padded by tolerance)."""
        half = self.perpendicular * (self.width / 2.0)
        return is_point_near_segment(
            vector(x, y), self.origin - half, self.origin + half, tolerance
        )
