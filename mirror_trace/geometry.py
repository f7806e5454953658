"""
Geometry utilities for 2D vector algebra, circle fitting, and ray intersection.

Points and vectors are numpy float64 arrays of shape (2,). All functions
are pure and never mutate their inputs.
"""

import math
from typing import Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

Vector2 = NDArray[np.float64]
PointLike = Union[Sequence[float], NDArray[np.floating]]

# Denominators smaller than this are treated as zero by the circle fit
COLLINEAR_EPSILON = 1e-12


def vector(x: float, y: float) -> Vector2:
    """Build a Vector2 from two coordinates."""
    return np.array([x, y], dtype=np.float64)


def as_vector(point: PointLike) -> Vector2:
    """
    Convert a point-like value to a finite float64 array of shape (2,).

    Parameters:
        point: Tuple, list or array holding (x, y)

    Returns:
        New array; the input is never aliased

    Raises:
        ValueError: If the input does not have exactly two finite components
    """
    arr = np.array(point, dtype=np.float64)
    if arr.shape != (2,):
        raise ValueError(f"point must have shape (2,), got {arr.shape}")
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"point must be finite, got {arr.tolist()}")
    return arr


def dot(a: Vector2, b: Vector2) -> float:
    return float(a[0] * b[0] + a[1] * b[1])


def cross_z(a: Vector2, b: Vector2) -> float:
    """Z component of the 3D cross product of two vectors in the XY plane."""
    return float(a[0] * b[1] - a[1] * b[0])


def magnitude(v: Vector2) -> float:
    return math.hypot(float(v[0]), float(v[1]))


def normalize(v: Vector2) -> Vector2:
    """
    Scale a vector to unit length.

    Raises:
        ValueError: If the vector has zero or non-finite length
    """
    length = magnitude(v)
    if length == 0.0 or not math.isfinite(length):
        raise ValueError(f"cannot normalize vector of length {length}")
    return (np.asarray(v, dtype=np.float64) / length).astype(np.float64)


def perp(v: Vector2) -> Vector2:
    """Rotate a vector by +90 degrees: (x, y) -> (-y, x)."""
    return vector(-float(v[1]), float(v[0]))


def rotate(v: Vector2, angle: float) -> Vector2:
    """Rotate a vector by angle radians (positive = counter-clockwise in math axes)."""
    c = math.cos(angle)
    s = math.sin(angle)
    x, y = float(v[0]), float(v[1])
    return vector(x * c - y * s, x * s + y * c)


def rotate_about(point: Vector2, pivot: Vector2, angle: float) -> Vector2:
    """Rotate a point about a pivot."""
    return pivot + rotate(point - pivot, angle)


def heading(v: Vector2) -> float:
    """Angle of the vector measured from the +x axis, in [-π, π]."""
    return math.atan2(float(v[1]), float(v[0]))


def angle_between(a: Vector2, b: Vector2) -> float:
    """Signed angle that rotates a onto b, in [-π, π]."""
    return math.atan2(cross_z(a, b), dot(a, b))


def normalize_angle(angle: float) -> float:
    """
    Wrap angle to [-π, π) range.

    Parameters:
        angle: Angle in radians

    Returns:
        Normalized angle in [-π, π)
    """
    wrapped = (angle + math.pi) % (2 * math.pi) - math.pi
    # Floating modulo can land exactly on +π for inputs just below -π
    if wrapped >= math.pi:
        wrapped -= 2 * math.pi
    return wrapped


def wrap_angle_positive(angle: float) -> float:
    """Wrap angle to [0, 2π)."""
    wrapped = angle % (2 * math.pi)
    if wrapped >= 2 * math.pi:
        wrapped = 0.0
    return wrapped


def reflect(direction: Vector2, normal: Vector2) -> Vector2:
    """
    Mirror a direction about a surface normal: r = d - 2 (d·n) n.

    The normal must be unit length; the result then has the same length as
    the incoming direction.
    """
    return direction - 2.0 * dot(direction, normal) * normal


def is_point_on_right(a: Vector2, b: Vector2, p: Vector2) -> bool:
    """
    Orientation test of p against the line through a and b.

    Returns True when cross_z(a - b, p - b) is strictly positive. Points
    on the line report False.
    """
    return cross_z(a - b, p - b) > 0.0


def find_circle(
    p1: Vector2,
    p2: Vector2,
    p3: Vector2
) -> Optional[Tuple[Vector2, float]]:
    """
    Compute the unique circle through three points.

    Uses the closed form of x² + y² + 2gx + 2fy + c = 0, with center
    (-g, -f) and radius sqrt(g² + f² - c).

    Parameters:
        p1, p2, p3: Points on the circle

    Returns:
        Tuple of (center, radius), or None if the points are collinear
        (or coincident) and no real positive radius exists
    """
    x1, y1 = float(p1[0]), float(p1[1])
    x2, y2 = float(p2[0]), float(p2[1])
    x3, y3 = float(p3[0]), float(p3[1])

    x12 = x1 - x2
    x13 = x1 - x3
    y12 = y1 - y2
    y13 = y1 - y3
    y31 = y3 - y1
    y21 = y2 - y1
    x31 = x3 - x1
    x21 = x2 - x1

    sx13 = x1 * x1 - x3 * x3
    sy13 = y1 * y1 - y3 * y3
    sx21 = x2 * x2 - x1 * x1
    sy21 = y2 * y2 - y1 * y1

    f_denom = 2.0 * (y31 * x12 - y21 * x13)
    g_denom = 2.0 * (x31 * y12 - x21 * y13)
    if abs(f_denom) < COLLINEAR_EPSILON or abs(g_denom) < COLLINEAR_EPSILON:
        return None

    f = ((sx13 * x12) + (sy13 * x12) + (sx21 * x13) + (sy21 * x13)) / f_denom
    g = ((sx13 * y12) + (sy13 * y12) + (sx21 * y13) + (sy21 * y13)) / g_denom
    c = -x1 * x1 - y1 * y1 - 2.0 * g * x1 - 2.0 * f * y1

    radius_sq = g * g + f * f - c
    if not math.isfinite(radius_sq) or radius_sq <= 0.0:
        return None
    radius = math.sqrt(radius_sq)

    return vector(-g, -f), radius


def intersect_ray_segment(
    origin: Vector2,
    direction: Vector2,
    segment_start: Vector2,
    segment_end: Vector2,
    epsilon: float
) -> Optional[float]:
    """
    Compute the intersection of a ray with a line segment.

    Solves origin + t * direction = start + u * (end - start) with 2D cross
    products.

    Parameters:
        origin: Ray origin (2,)
        direction: Unit ray direction (2,)
        segment_start: Start point of the segment (2,)
        segment_end: End point of the segment (2,)
        epsilon: Hits with |t| below this are rejected, so a ray leaving a
                 surface does not immediately re-hit it

    Returns:
        Distance t along the ray (may be negative, i.e. behind the origin),
        or None if parallel, too close, or outside the segment
    """
    v1 = origin - segment_start
    v2 = segment_end - segment_start
    v3 = perp(direction)

    denom = dot(v2, v3)
    if denom == 0.0:
        return None

    t = cross_z(v2, v1) / denom
    if abs(t) < epsilon:
        return None

    u = dot(v1, v3) / denom
    if u < 0.0 or u > 1.0:
        return None

    return t


def intersect_ray_circle(
    origin: Vector2,
    direction: Vector2,
    center: Vector2,
    radius: float
) -> Optional[Tuple[float, float]]:
    """
    Compute both intersections of a ray's line with a circle.

    With A = origin - center and a unit direction d, |A + t d|² = r² gives
    t = -(d·A) ± sqrt((d·A)² - |A|² + r²).

    Returns:
        (t1, t2) with t1 <= t2, or None if the line misses the circle or
        the circle lies entirely behind the origin
    """
    a = origin - center
    d_a = dot(direction, a)
    det = d_a * d_a - dot(a, a) + radius * radius
    if det < 0.0:
        return None

    sqrt_det = math.sqrt(det)
    t1 = -d_a - sqrt_det
    t2 = -d_a + sqrt_det
    if t1 < 0.0 and t2 < 0.0:
        return None
    return t1, t2


def is_point_near_segment(
    point: Vector2,
    segment_start: Vector2,
    segment_end: Vector2,
    tolerance: float
) -> bool:
    """
    Check whether a point lies in the quad that pads a segment by tolerance.

    The quad extends tolerance past both endpoints along the segment and
    tolerance to either side of it.
    """
    seg = segment_end - segment_start
    length = magnitude(seg)
    rel = point - segment_start
    if length == 0.0:
        return magnitude(rel) <= tolerance
    along = dot(rel, seg) / length
    across = cross_z(seg, rel) / length
    return -tolerance <= along <= length + tolerance and abs(across) <= tolerance
