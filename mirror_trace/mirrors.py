"""
Mirror primitives: finite plane segments and circular arcs.

Every mirror exposes one capability, intersect_ray(), returning a Hit with
the distance along the ray and the reflective (outward) normal, or None.
Geometric degeneracies never raise; they simply report no hit.
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

import numpy as np
from numpy.typing import NDArray

from mirror_trace.config import (
    EPSILON,
    ValidationError,
    validate_angle,
    validate_offset,
    validate_point,
)
from mirror_trace.geometry import (
    PointLike,
    Vector2,
    angle_between,
    find_circle,
    heading,
    intersect_ray_circle,
    intersect_ray_segment,
    is_point_near_segment,
    is_point_on_right,
    magnitude,
    normalize,
    rotate,
    rotate_about,
    vector,
    wrap_angle_positive,
)

if TYPE_CHECKING:
    from mirror_trace.ray import Ray

# Half-width of the selection band around a mirror, in scene units
PICK_TOLERANCE = 5.0

# Back-side shade ticks, as drawn by the interactive front end
SHADE_STEP = 7.0
SHADE_LENGTH = 10.0


@dataclass(frozen=True)
class Hit:
    """
    Intersection of a ray with a mirror.

    Attributes:
        t: Distance from the ray origin to the hit point
        normal: Unit normal on the reflective side of the surface
    """
    t: float
    normal: Vector2


class Mirror:
    """
    Base class for reflective surfaces.

    Subclasses recompute their derived geometry whenever they are moved and
    bump ``version``. Scenes remember the version they last traced against,
    so one mirror may be shared by several scenes.
    """

    def __init__(self) -> None:
        self.version = 0

    def intersect_ray(self, ray: "Ray", epsilon: float = EPSILON) -> Optional[Hit]:
        raise NotImplementedError("Mirror subclasses must override this method")

    @property
    def pivot(self) -> Vector2:
        """Point the mirror rotates about by default."""
        raise NotImplementedError("Mirror subclasses must override this method")

    def translate(self, dx: float, dy: float) -> None:
        raise NotImplementedError("Mirror subclasses must override this method")

    def rotate(self, angle: float, pivot: Optional[PointLike] = None) -> None:
        raise NotImplementedError("Mirror subclasses must override this method")

    def is_point_inside(self, x: float, y: float, tolerance: float = PICK_TOLERANCE) -> bool:
        raise NotImplementedError("Mirror subclasses must override this method")

    def shade_segments(
        self,
        step: float = SHADE_STEP,
        length: float = SHADE_LENGTH
    ) -> NDArray[np.float64]:
        raise NotImplementedError("Mirror subclasses must override this method")


def _shade_direction(normal: Vector2) -> Vector2:
    # Ticks lean 45 degrees off the back-facing normal
    return rotate(-normal, math.pi / 4)


def _stack_segments(segments: list) -> NDArray[np.float64]:
    if not segments:
        return np.empty((0, 2, 2), dtype=np.float64)
    return np.array(segments, dtype=np.float64)


class PlaneMirror(Mirror):
    """
    A one-sided mirror along the segment start -> end.

    The reflective side is the one the normal points to: the segment
    direction rotated by -90 degrees. Rays arriving from the back are
    stopped at the hit point without reflecting.

    Raises:
        ValidationError: If start and end are malformed or coincide
    """

    def __init__(self, start: PointLike, end: PointLike) -> None:
        super().__init__()
        self._set_endpoints(validate_point("start", start), validate_point("end", end))

    def _set_endpoints(self, start: Vector2, end: Vector2) -> None:
        length = magnitude(end - start)
        if not math.isfinite(length):
            raise ValidationError(f"PlaneMirror length must be finite, got {length}")
        if length == 0.0:
            raise ValidationError(
                f"PlaneMirror start and end must differ, got {start.tolist()} twice"
            )
        self.start = start
        self.end = end
        self.length = length
        self.direction = (end - start) / length
        # direction rotated by -90 degrees
        self.normal = vector(self.direction[1], -self.direction[0])
        self.version += 1

    def __repr__(self) -> str:
        return f"PlaneMirror(start={self.start.tolist()}, end={self.end.tolist()})"

    @property
    def pivot(self) -> Vector2:
        return (self.start + self.end) / 2.0

    def intersect_ray(self, ray: "Ray", epsilon: float = EPSILON) -> Optional[Hit]:
        t = intersect_ray_segment(ray.origin, ray.direction, self.start, self.end, epsilon)
        if t is None:
            return None
        return Hit(t=t, normal=self.normal.copy())

    def translate(self, dx: float, dy: float) -> None:
        offset = validate_offset(dx, dy)
        self._set_endpoints(self.start + offset, self.end + offset)

    def rotate(self, angle: float, pivot: Optional[PointLike] = None) -> None:
        """Rotate the segment about pivot, defaulting to its midpoint."""
        angle = validate_angle(angle)
        center = self.pivot if pivot is None else validate_point("pivot", pivot)
        self._set_endpoints(
            rotate_about(self.start, center, angle),
            rotate_about(self.end, center, angle),
        )

    def is_point_inside(self, x: float, y: float, tolerance: float = PICK_TOLERANCE) -> bool:
        return is_point_near_segment(vector(x, y), self.start, self.end, tolerance)

    def shade_segments(
        self,
        step: float = SHADE_STEP,
        length: float = SHADE_LENGTH
    ) -> NDArray[np.float64]:
        """
        Short ticks along the back side of the mirror.

        Returns:
            Array (M, 2, 2) of [[x0, y0], [x1, y1]] tick segments
        """
        shade = _shade_direction(self.normal)
        segments = []
        d = step
        while d < self.length:
            p = self.start + self.direction * d
            segments.append([p, p + shade * length])
            d += step
        return _stack_segments(segments)


class SphericalMirror(Mirror):
    """
    A circular-arc mirror through three points.

    The mirror is the arc from p1 to p3 that passes through p2. At
    construction p1 and p3 are swapped if needed so that p2 is on the
    right of the chord (see is_point_on_right); a hit point then lies on
    the arc exactly when it is on the same side of the chord as p2.

    A convex mirror reflects on the outside of the circle, a concave one on
    the inside. Three collinear points define no circle: the mirror is then
    flagged invalid, keeps its points, and never reports a hit.

    Attributes:
        p1, p2, p3: Defining points (p1/p3 in canonical order)
        center: Circle center (NaN when invalid)
        radius: Circle radius (NaN when invalid)
        arc_start: Heading of p1 from the center
        arc_end: Heading of p3 from the center
        arc_angle: Counter-clockwise angle from p1 to p3 about the center, in [0, 2π)
        is_valid: False if the three points are collinear
    """

    def __init__(
        self,
        p1: PointLike,
        p2: PointLike,
        p3: PointLike,
        is_convex: bool = True
    ) -> None:
        super().__init__()
        self._is_convex = bool(is_convex)
        self._set_points(
            validate_point("p1", p1),
            validate_point("p2", p2),
            validate_point("p3", p3),
        )

    def _set_points(self, p1: Vector2, p2: Vector2, p3: Vector2) -> None:
        if not np.all(np.isfinite([p1, p2, p3])):
            raise ValidationError("SphericalMirror points must be finite")
        if not is_point_on_right(p1, p3, p2):
            p1, p3 = p3, p1
        self.p1 = p1
        self.p2 = p2
        self.p3 = p3
        self.version += 1

        circle = find_circle(p1, p2, p3)
        if circle is None:
            self.is_valid = False
            self.center = vector(math.nan, math.nan)
            self.radius = math.nan
            self.arc_start = math.nan
            self.arc_end = math.nan
            self.arc_angle = math.nan
            return

        self.is_valid = True
        self.center, self.radius = circle
        self.arc_start = heading(p1 - self.center)
        self.arc_end = heading(p3 - self.center)
        self.arc_angle = wrap_angle_positive(
            angle_between(p1 - self.center, p3 - self.center)
        )

    def __repr__(self) -> str:
        kind = "convex" if self._is_convex else "concave"
        return (
            f"SphericalMirror(p1={self.p1.tolist()}, p2={self.p2.tolist()}, "
            f"p3={self.p3.tolist()}, {kind})"
        )

    @property
    def is_convex(self) -> bool:
        return self._is_convex

    @is_convex.setter
    def is_convex(self, value: bool) -> None:
        self._is_convex = bool(value)
        self.version += 1

    @property
    def pivot(self) -> Vector2:
        return self.p2.copy()

    @property
    def sweep(self) -> float:
        """Signed angle swept from p1 to p3 through p2 (negative = clockwise)."""
        if not self.is_valid:
            return 0.0
        to_p2 = wrap_angle_positive(angle_between(self.p1 - self.center, self.p2 - self.center))
        if to_p2 <= self.arc_angle:
            return self.arc_angle
        return self.arc_angle - 2 * math.pi

    def normal_at(self, point: Vector2) -> Vector2:
        """Unit normal on the reflective side at a point of the circle."""
        outward = normalize(point - self.center)
        return outward if self._is_convex else -outward

    def intersect_ray(self, ray: "Ray", epsilon: float = EPSILON) -> Optional[Hit]:
        if not self.is_valid:
            return None

        roots = intersect_ray_circle(ray.origin, ray.direction, self.center, self.radius)
        if roots is None:
            return None

        # t1 <= t2: the first root on the arc is the visible one
        for t in roots:
            if t <= epsilon:
                continue
            point = ray.origin + ray.direction * t
            if is_point_on_right(self.p1, self.p3, point):
                return Hit(t=t, normal=self.normal_at(point))
        return None

    def translate(self, dx: float, dy: float) -> None:
        offset = validate_offset(dx, dy)
        self._set_points(self.p1 + offset, self.p2 + offset, self.p3 + offset)

    def rotate(self, angle: float, pivot: Optional[PointLike] = None) -> None:
        """Rotate the three defining points about pivot, defaulting to p2."""
        angle = validate_angle(angle)
        center = self.pivot if pivot is None else validate_point("pivot", pivot)
        self._set_points(
            rotate_about(self.p1, center, angle),
            rotate_about(self.p2, center, angle),
            rotate_about(self.p3, center, angle),
        )

    def arc_points(self, num_points: int = 64) -> NDArray[np.float64]:
        """
        Sample the drawn arc from p1 to p3.

        Returns:
            Array (num_points, 2), or (2, 2) holding p1 and p3 when the
            mirror is invalid
        """
        if not self.is_valid:
            return np.array([self.p1, self.p3], dtype=np.float64)
        angles = self.arc_start + np.linspace(0.0, self.sweep, max(2, num_points))
        return np.column_stack([
            self.center[0] + self.radius * np.cos(angles),
            self.center[1] + self.radius * np.sin(angles),
        ])

    def is_point_inside(self, x: float, y: float, tolerance: float = PICK_TOLERANCE) -> bool:
        point = vector(x, y)
        if not self.is_valid:
            return is_point_near_segment(point, self.p1, self.p3, tolerance)
        if abs(magnitude(point - self.center) - self.radius) > tolerance:
            return False
        return is_point_on_right(self.p1, self.p3, point)

    def shade_segments(
        self,
        step: float = SHADE_STEP,
        length: float = SHADE_LENGTH
    ) -> NDArray[np.float64]:
        if not self.is_valid:
            return _stack_segments([])
        sweep = self.sweep
        arc_length = self.radius * abs(sweep)
        sign = 1.0 if sweep >= 0 else -1.0
        segments = []
        d = step
        while d < arc_length:
            angle = self.arc_start + sign * d / self.radius
            p = self.center + self.radius * vector(math.cos(angle), math.sin(angle))
            shade = _shade_direction(self.normal_at(p))
            segments.append([p, p + shade * length])
            d += step
        return _stack_segments(segments)
