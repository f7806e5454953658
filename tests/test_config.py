"""
Tests for TraceConfig validation and input coercion helpers.
"""

import math
from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from mirror_trace.config import (
    DEFAULT_CONFIG,
    EPSILON,
    MAX_LENGTH,
    MAX_RAY_LEVEL,
    MAX_RAY_LEVEL_LIMIT,
    TraceConfig,
    ValidationError,
    validate_direction,
    validate_point,
)


class TestTraceConfigDefaults:
    """Default limits."""

    def test_defaults(self):
        config = TraceConfig()
        assert config.max_length == MAX_LENGTH == 2000.0
        assert config.max_ray_level == MAX_RAY_LEVEL == 50
        assert config.epsilon == EPSILON == 1e-5

    def test_default_instance(self):
        assert DEFAULT_CONFIG == TraceConfig()

    def test_frozen(self):
        with pytest.raises(FrozenInstanceError):
            DEFAULT_CONFIG.max_length = 10.0  # type: ignore[misc]


class TestTraceConfigValidation:
    """Out-of-range fields raise ValidationError."""

    @pytest.mark.parametrize("value", [0, -1.0, math.inf, math.nan, "far"])
    def test_invalid_max_length(self, value):
        with pytest.raises(ValidationError, match="max_length"):
            TraceConfig(max_length=value)

    @pytest.mark.parametrize("value", [0, -3, MAX_RAY_LEVEL_LIMIT + 1, 2.0, True])
    def test_invalid_max_ray_level(self, value):
        with pytest.raises(ValidationError, match="max_ray_level"):
            TraceConfig(max_ray_level=value)

    def test_max_ray_level_bounds_accepted(self):
        assert TraceConfig(max_ray_level=1).max_ray_level == 1
        assert TraceConfig(max_ray_level=MAX_RAY_LEVEL_LIMIT).max_ray_level == MAX_RAY_LEVEL_LIMIT

    @pytest.mark.parametrize("value", [0.0, -1e-5])
    def test_invalid_epsilon(self, value):
        with pytest.raises(ValidationError, match="epsilon"):
            TraceConfig(epsilon=value)

    @pytest.mark.parametrize("value", [-0.1, 1.5])
    def test_invalid_min_opacity(self, value):
        with pytest.raises(ValidationError, match="min_opacity"):
            TraceConfig(min_opacity=value)

    def test_invalid_opacity_falloff(self):
        with pytest.raises(ValidationError, match="opacity_falloff"):
            TraceConfig(opacity_falloff=-1.0)

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            TraceConfig(max_length=-5.0)


class TestOpacity:
    """Tests for TraceConfig.opacity()."""

    def test_level_zero_fully_opaque(self):
        assert DEFAULT_CONFIG.opacity(0) == 1.0

    def test_linear_decay(self):
        assert DEFAULT_CONFIG.opacity(5) == pytest.approx(0.8)
        assert DEFAULT_CONFIG.opacity(20) == pytest.approx(0.2)

    def test_clamped_at_minimum(self):
        assert DEFAULT_CONFIG.opacity(25) == pytest.approx(0.1)
        assert DEFAULT_CONFIG.opacity(50) == pytest.approx(0.1)

    def test_custom_falloff(self):
        config = TraceConfig(max_ray_level=10, opacity_falloff=1.0, min_opacity=0.0)
        assert config.opacity(5) == pytest.approx(0.5)
        assert config.opacity(10) == pytest.approx(0.0)


class TestInputHelpers:
    """Tests for validate_point() and validate_direction()."""

    def test_point_from_list(self):
        p = validate_point("origin", [1, 2])
        assert p.dtype == np.float64
        assert p.tolist() == [1.0, 2.0]

    def test_malformed_point(self):
        with pytest.raises(ValidationError, match="origin"):
            validate_point("origin", (1, 2, 3))

    def test_direction_normalized(self):
        d = validate_direction("direction", (0, -5))
        assert d.tolist() == [0.0, -1.0]

    def test_zero_direction(self):
        with pytest.raises(ValidationError, match="direction"):
            validate_direction("direction", (0.0, 0.0))
