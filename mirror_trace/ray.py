"""
Traced light rays and their chains of reflections.

A Ray is one straight segment of a light path. When cast against a set of
mirrors it finds the nearest hit, and if it may reflect there it spawns
exactly one child Ray (its ``next``), which is cast in turn. The chain is
owned by the source ray and rebuilt from scratch on every cast.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence

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
    dot,
    magnitude,
    reflect,
    rotate,
    vector,
)
from mirror_trace.mirrors import Hit, Mirror

logger = logging.getLogger(__name__)

# Radius of the grab handle around a ray origin, in scene units
ORIGIN_PICK_RADIUS = 8.0

# Direction arrows sit this far along long segments, mid-way along short ones
ARROW_DISTANCE = 100.0


@dataclass(frozen=True)
class RaySegment:
    """
    One straight piece of a traced light path.

    Attributes:
        origin: Start point of the segment
        end: Hit point on a mirror, or the escape point at max_length
        level: Bounce depth (0 for the source ray)
    """
    origin: Vector2
    end: Vector2
    level: int


class Ray:
    """
    A ray with an origin, a unit direction and an optional reflected child.

    Parameters:
        origin: Start point (x, y)
        direction: Direction (dx, dy); normalized on assignment
        level: Bounce depth, 0 for a source ray
        config: Tracing limits, defaults to DEFAULT_CONFIG

    Raises:
        ValidationError: If origin/direction are malformed, direction has zero
            length, or level is negative
    """

    def __init__(
        self,
        origin: PointLike,
        direction: PointLike,
        level: int = 0,
        config: Optional[TraceConfig] = None
    ) -> None:
        if isinstance(level, bool) or not isinstance(level, int) or level < 0:
            raise ValidationError(f"level must be a non-negative integer, got {level!r}")
        self.config = DEFAULT_CONFIG if config is None else config
        self.origin = validate_point("origin", origin)
        self.direction = validate_direction("direction", direction)
        self.level = level
        self.next: Optional["Ray"] = None
        self.end = self._escape_point()
        self.dirty = True

    def __repr__(self) -> str:
        return (
            f"Ray(origin={self.origin.tolist()}, direction={self.direction.tolist()}, "
            f"level={self.level})"
        )

    def _escape_point(self) -> Vector2:
        return self.origin + self.direction * self.config.max_length

    def _invalidate(self) -> None:
        """Drop the reflection chain after a geometry change."""
        self.next = None
        self.end = self._escape_point()
        self.dirty = True

    # -------------------------------------------------------------------------
    # Tracing
    # -------------------------------------------------------------------------

    def nearest_hit(self, mirrors: Sequence[Mirror]) -> Optional[Hit]:
        """
        Find the closest mirror hit in front of the ray.

        Only hits with 0 < t < max_length count. Ties keep the first mirror
        in iteration order.
        """
        best: Optional[Hit] = None
        best_t = self.config.max_length
        for mirror in mirrors:
            hit = mirror.intersect_ray(self, self.config.epsilon)
            if hit is not None and 0.0 < hit.t < best_t:
                best = hit
                best_t = hit.t
        return best

    def cast(self, mirrors: Sequence[Mirror]) -> None:
        """
        Trace the ray through the mirrors, rebuilding its reflection chain.

        The ray stops at the nearest hit. It reflects only when it reaches
        the reflective side of the surface (dot(normal, direction) < 0) and
        its level is below max_ray_level; the reflected child is then cast
        against the same mirrors.
        """
        self.next = None
        self.end = self._escape_point()
        self.dirty = False

        if not mirrors:
            return

        hit = self.nearest_hit(mirrors)
        if hit is None:
            return

        self.end = self.origin + self.direction * hit.t

        if self.level >= self.config.max_ray_level:
            logger.debug(f"Ray level limit reached: {self.config.max_ray_level}")
            return

        if dot(hit.normal, self.direction) < 0:
            self.next = Ray(
                self.end,
                reflect(self.direction, hit.normal),
                level=self.level + 1,
                config=self.config,
            )
            self.next.cast(mirrors)

    # -------------------------------------------------------------------------
    # Mutators (the owning scene re-casts afterwards)
    # -------------------------------------------------------------------------

    def update_direction(self, target: PointLike) -> None:
        """Point the ray from its origin towards target."""
        target_vec = validate_point("target", target)
        self.direction = validate_direction("direction", target_vec - self.origin)
        self._invalidate()

    def set_direction(self, direction: PointLike) -> None:
        self.direction = validate_direction("direction", direction)
        self._invalidate()

    def update_origin(self, point: PointLike) -> None:
        self.origin = validate_point("origin", point)
        self._invalidate()

    def translate(self, dx: float, dy: float) -> None:
        self.origin = validate_point("origin", self.origin + validate_offset(dx, dy))
        self._invalidate()

    def rotate(self, angle: float) -> None:
        """Rotate the direction about the origin."""
        angle = validate_angle(angle)
        self.direction = validate_direction("direction", rotate(self.direction, angle))
        self._invalidate()

    # -------------------------------------------------------------------------
    # Read access
    # -------------------------------------------------------------------------

    def chain(self) -> Iterator["Ray"]:
        """Iterate over this ray and every reflection that follows it."""
        ray: Optional[Ray] = self
        while ray is not None:
            yield ray
            ray = ray.next

    def segments(self) -> List[RaySegment]:
        return [
            RaySegment(origin=r.origin.copy(), end=r.end.copy(), level=r.level)
            for r in self.chain()
        ]

    @property
    def length(self) -> float:
        return magnitude(self.end - self.origin)

    @property
    def opacity(self) -> float:
        return self.config.opacity(self.level)

    @property
    def arrow_position(self) -> Vector2:
        length = self.length
        distance = ARROW_DISTANCE if length > 2 * ARROW_DISTANCE else length / 2.0
        return self.origin + self.direction * distance

    def is_point_inside(self, x: float, y: float, tolerance: float = ORIGIN_PICK_RADIUS) -> bool:
        """Check whether (x, y) grabs the ray's origin handle."""
        return magnitude(vector(x, y) - self.origin) <= tolerance
