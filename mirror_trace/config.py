"""
Tracing Configuration
=====================

Tunable constants shared by rays, beams and scenes:
- TraceConfig: Immutable, validated set of tracing limits
- ValidationError: Raised for caller contract violations
- validate_point / validate_direction: Coerce caller input to float64 vectors
- validate_offset / validate_angle: Check mutator arguments before any state changes
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real

from mirror_trace.geometry import PointLike, Vector2, as_vector, normalize

# Length assigned to a ray segment that escapes the scene without a hit
MAX_LENGTH = 2000.0
# Deepest bounce level that may still be traced; the source ray is level 0
MAX_RAY_LEVEL = 50
EPSILON = 1e-5

# Ray.cast recurses once per bounce
MAX_RAY_LEVEL_LIMIT = 500


class ValidationError(ValueError):
    """Raised when input validation fails."""

    pass


@dataclass(frozen=True)
class TraceConfig:
    """Immutable limits applied while tracing rays through a scene.

    Attributes:
        max_length: Length of a ray segment that hits no mirror. Hits at
            or beyond this distance are ignored.
        max_ray_level: Bounce depth cap. A ray at this level never spawns
            a reflected child, which bounds recursion between facing mirrors.
        epsilon: Intersections closer than this to the ray origin are
            rejected so a reflected ray does not re-hit its own mirror.
        min_opacity: Lower bound of the display opacity of deep rays.
        opacity_falloff: How fast opacity decays with level; opacity is
            max(min_opacity, 1 - opacity_falloff * level / max_ray_level).

    Raises:
        ValidationError: If any field is out of range
    """

    max_length: float = MAX_LENGTH
    max_ray_level: int = MAX_RAY_LEVEL
    epsilon: float = EPSILON
    min_opacity: float = 0.1
    opacity_falloff: float = 2.0

    def __post_init__(self) -> None:
        """Validate every field."""
        _validate_trace_config(self)

    def opacity(self, level: int) -> float:
        """Display opacity for a ray at the given bounce level."""
        value = 1.0 - self.opacity_falloff * level / self.max_ray_level
        return max(self.min_opacity, min(1.0, value))


def _require_real(name: str, value: object) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"{name} must be a number, got {type(value).__name__}")
    value = float(value)
    if not math.isfinite(value):
        raise ValidationError(f"{name} must be finite, got {value}")
    return value


def _validate_trace_config(config: TraceConfig) -> None:
    """Validate a TraceConfig instance.

    Args:
        config: The TraceConfig to validate

    Raises:
        ValidationError: If any field is invalid
    """
    max_length = _require_real("max_length", config.max_length)
    if max_length <= 0:
        raise ValidationError(f"max_length must be positive, got {max_length}")

    level = config.max_ray_level
    if isinstance(level, bool) or not isinstance(level, int):
        raise ValidationError(
            f"max_ray_level must be an integer, got {type(level).__name__}"
        )
    if level < 1 or level > MAX_RAY_LEVEL_LIMIT:
        raise ValidationError(
            f"max_ray_level must be in [1, {MAX_RAY_LEVEL_LIMIT}], got {level}"
        )

    epsilon = _require_real("epsilon", config.epsilon)
    if epsilon <= 0:
        raise ValidationError(f"epsilon must be positive, got {epsilon}")

    min_opacity = _require_real("min_opacity", config.min_opacity)
    if not 0.0 <= min_opacity <= 1.0:
        raise ValidationError(f"min_opacity must be in [0, 1], got {min_opacity}")

    falloff = _require_real("opacity_falloff", config.opacity_falloff)
    if falloff < 0:
        raise ValidationError(f"opacity_falloff must be non-negative, got {falloff}")


def validate_point(name: str, point: PointLike) -> Vector2:
    """Convert a caller-supplied point, raising ValidationError if malformed."""
    try:
        return as_vector(point)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"{name}: {e}") from e


def validate_direction(name: str, direction: PointLike) -> Vector2:
    """Convert and normalize a caller-supplied direction.

    Raises:
        ValidationError: If the direction is malformed or has zero length
    """
    vec = validate_point(name, direction)
    try:
        return normalize(vec)
    except ValueError as e:
        raise ValidationError(f"{name}: {e}") from e


def validate_offset(dx: float, dy: float) -> Vector2:
    """Convert a translation offset, raising ValidationError if non-finite."""
    return validate_point("offset", (dx, dy))


def validate_angle(angle: float) -> float:
    """Check a rotation angle in radians is a finite number."""
    return _require_real("angle", angle)


DEFAULT_CONFIG = TraceConfig()
