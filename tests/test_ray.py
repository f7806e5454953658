"""
Tests for Ray casting and the reflection chain.

Tests cover:
- Construction and the unit-direction invariant
- Plane-mirror bounce and back-face termination
- Nearest-hit selection and the max_length cap
- Depth cap between facing mirrors
- Reflection law along a multi-bounce chain
- Determinism and invalidation on mutation
- Display helpers (opacity, arrow position)
"""

import logging
import math

import numpy as np
import pytest
from numpy.testing import assert_allclose, assert_array_equal

from mirror_trace.config import TraceConfig, ValidationError
from mirror_trace.geometry import dot, magnitude, normalize
from mirror_trace.mirrors import PlaneMirror, SphericalMirror
from mirror_trace.ray import Ray, RaySegment


# =============================================================================
# Helper functions
# =============================================================================

def facing_mirrors() -> list:
    """Two vertical mirrors at x=0 and x=20 whose reflective sides face each other."""
    return [
        PlaneMirror((0, -10), (0, 10)),   # normal (+1, 0)
        PlaneMirror((20, 10), (20, -10)),  # normal (-1, 0)
    ]


def box_of_mirrors() -> list:
    """Closed square room, wound clockwise so every normal points inward."""
    return [
        PlaneMirror((0, 0), (0, 100)),
        PlaneMirror((0, 100), (100, 100)),
        PlaneMirror((100, 100), (100, 0)),
        PlaneMirror((100, 0), (0, 0)),
    ]


def assert_unit(v) -> None:
    assert abs(magnitude(v) - 1.0) <= 1e-9


# =============================================================================
# Construction
# =============================================================================

class TestRayConstruction:
    """Tests for Ray.__init__."""

    def test_direction_normalized(self):
        ray = Ray((0, 0), (3, 4))
        assert_allclose(ray.direction, [0.6, 0.8])
        assert_unit(ray.direction)

    def test_default_end_at_max_length(self):
        ray = Ray((1, 2), (1, 0))
        assert_allclose(ray.end, [2001.0, 2.0])
        assert ray.next is None
        assert ray.level == 0

    def test_custom_max_length(self):
        ray = Ray((0, 0), (0, 1), config=TraceConfig(max_length=50.0))
        assert_allclose(ray.end, [0.0, 50.0])

    def test_zero_direction_rejected(self):
        with pytest.raises(ValidationError, match="direction"):
            Ray((0, 0), (0, 0))

    def test_nan_origin_rejected(self):
        with pytest.raises(ValidationError, match="origin"):
            Ray((float("nan"), 0), (1, 0))

    def test_negative_level_rejected(self):
        with pytest.raises(ValidationError, match="level"):
            Ray((0, 0), (1, 0), level=-1)


# =============================================================================
# Single bounces
# =============================================================================

class TestPlaneBounce:
    """A ray hitting a plane mirror head-on."""

    def test_reflects_straight_back(self):
        ray = Ray((0, 0), (1, 0))
        ray.cast([PlaneMirror((10, 5), (10, -5))])

        assert_allclose(ray.end, [10.0, 0.0])
        assert ray.next is not None
        assert_allclose(ray.next.origin, [10.0, 0.0])
        assert_allclose(ray.next.direction, [-1.0, 0.0])
        assert ray.next.level == 1
        # nothing else to hit: the child escapes
        assert ray.next.next is None
        assert_allclose(ray.next.end, [-1990.0, 0.0])

    def test_back_face_terminates_at_hit(self):
        """Arriving from behind the reflective side stops the ray without a child."""
        ray = Ray((0, 0), (1, 0))
        ray.cast([PlaneMirror((10, -5), (10, 5))])

        assert_allclose(ray.end, [10.0, 0.0])
        assert ray.next is None

    def test_oblique_reflection(self):
        mirror = PlaneMirror((5, 5), (15, -5))
        ray = Ray((0, 0), (1, 0))
        ray.cast([mirror])

        assert_allclose(ray.end, [10.0, 0.0], atol=1e-12)
        assert_allclose(ray.next.direction, [0.0, -1.0], atol=1e-12)
        assert dot(ray.direction, mirror.normal) == pytest.approx(
            -dot(ray.next.direction, mirror.normal)
        )


class TestNearestHit:
    """Tests for hit selection."""

    def test_no_mirrors_leaves_ray_at_cap(self):
        ray = Ray((0, 0), (1, 0))
        ray.cast([])
        assert_allclose(ray.end, [2000.0, 0.0])
        assert ray.next is None
        assert ray.dirty is False

    def test_miss_leaves_ray_at_cap(self):
        ray = Ray((0, 0), (1, 0))
        ray.cast([PlaneMirror((10, 50), (10, 40))])
        assert_allclose(ray.end, [2000.0, 0.0])
        assert ray.next is None

    def test_nearest_mirror_wins(self):
        far = PlaneMirror((20, 5), (20, -5))
        near = PlaneMirror((10, 5), (10, -5))
        ray = Ray((0, 0), (1, 0))
        ray.cast([far, near])
        assert_allclose(ray.end, [10.0, 0.0])

    def test_mirror_behind_ignored(self):
        ray = Ray((0, 0), (1, 0))
        ray.cast([PlaneMirror((-10, -5), (-10, 5))])
        assert_allclose(ray.end, [2000.0, 0.0])

    def test_hits_beyond_max_length_ignored(self):
        config = TraceConfig(max_length=100.0)
        ray = Ray((0, 0), (1, 0), config=config)
        ray.cast([PlaneMirror((150, 5), (150, -5))])
        assert_allclose(ray.end, [100.0, 0.0])
        assert ray.next is None


# =============================================================================
# Termination
# =============================================================================

class TestDepthCap:
    """A ray trapped between two facing mirrors."""

    def test_stops_at_max_ray_level(self):
        config = TraceConfig(max_ray_level=5)
        ray = Ray((10, 0), (1, 0), config=config)
        ray.cast(facing_mirrors())

        chain = list(ray.chain())
        assert len(chain) == 6
        assert [r.level for r in chain] == [0, 1, 2, 3, 4, 5]
        last = chain[-1]
        assert last.next is None
        # the last segment still ends on a mirror, it just does not reflect
        assert min(abs(last.end[0]), abs(last.end[0] - 20.0)) < 1e-9

    def test_default_cap(self):
        ray = Ray((10, 0), (1, 0))
        ray.cast(facing_mirrors())
        assert len(ray.segments()) == 51
        assert ray.segments()[-1].level == 50

    def test_chain_length_bounded_in_closed_room(self):
        config = TraceConfig(max_ray_level=20)
        for angle in np.linspace(0.1, 2 * math.pi, 17):
            ray = Ray((50, 50), (math.cos(angle), math.sin(angle)), config=config)
            ray.cast(box_of_mirrors())
            assert len(ray.segments()) <= config.max_ray_level + 1

    def test_cap_reached_is_logged(self, caplog):
        config = TraceConfig(max_ray_level=3)
        ray = Ray((10, 0), (1, 0), config=config)
        with caplog.at_level(logging.DEBUG, logger="mirror_trace.ray"):
            ray.cast(facing_mirrors())
        assert "Ray level limit reached: 3" in caplog.text


# =============================================================================
# Chain invariants
# =============================================================================

class TestChainInvariants:
    """Unit directions, reflection law and determinism on a busy scene."""

    @pytest.fixture
    def traced(self) -> Ray:
        mirrors = box_of_mirrors() + [
            PlaneMirror((30, 60), (60, 30)),
            SphericalMirror((70, 80), (80, 70), (90, 80), is_convex=True),
        ]
        ray = Ray((20, 10), (1, 0.37), config=TraceConfig(max_ray_level=30))
        ray.cast(mirrors)
        return ray

    def test_every_direction_is_unit(self, traced):
        for ray in traced.chain():
            assert_unit(ray.direction)

    def test_child_starts_where_parent_ends(self, traced):
        for ray in traced.chain():
            if ray.next is not None:
                assert_array_equal(ray.next.origin, ray.end)
                assert ray.next.level == ray.level + 1

    def test_reflection_law(self, traced):
        """The normal bisects incoming and outgoing directions with equal angles."""
        bounces = 0
        for ray in traced.chain():
            if ray.next is None:
                continue
            d_in, d_out = ray.direction, ray.next.direction
            n = normalize(d_in - d_out)
            assert dot(d_in, n) == pytest.approx(-dot(d_out, n), abs=1e-9)
            bounces += 1
        assert bounces > 3

    def test_cast_is_deterministic(self, traced):
        first = traced.segments()
        mirrors = box_of_mirrors() + [
            PlaneMirror((30, 60), (60, 30)),
            SphericalMirror((70, 80), (80, 70), (90, 80), is_convex=True),
        ]
        traced.cast(mirrors)
        traced.cast(mirrors)
        second = traced.segments()
        assert len(first) == len(second)
        for a, b in zip(first, second):
            assert_array_equal(a.origin, b.origin)
            assert_array_equal(a.end, b.end)
            assert a.level == b.level


# =============================================================================
# Mutation
# =============================================================================

class TestRayMutation:
    """Mutators keep the direction unit and drop the chain."""

    @pytest.fixture
    def bounced(self) -> Ray:
        ray = Ray((0, 0), (1, 0))
        ray.cast([PlaneMirror((10, 5), (10, -5))])
        return ray

    def test_cast_rebuilds_chain(self, bounced):
        bounced.cast([])
        assert bounced.next is None
        assert_allclose(bounced.end, [2000.0, 0.0])

    def test_update_direction(self, bounced):
        bounced.update_direction((0, 7))
        assert_allclose(bounced.direction, [0.0, 1.0])
        assert bounced.next is None
        assert bounced.dirty is True
        assert_allclose(bounced.end, [0.0, 2000.0])

    def test_update_direction_towards_origin_rejected(self, bounced):
        with pytest.raises(ValidationError):
            bounced.update_direction((0, 0))

    def test_update_origin(self, bounced):
        bounced.update_origin((3, 4))
        assert_allclose(bounced.origin, [3.0, 4.0])
        assert bounced.next is None

    def test_translate(self, bounced):
        bounced.translate(1, -1)
        assert_allclose(bounced.origin, [1.0, -1.0])
        assert bounced.next is None
        assert bounced.dirty is True

    def test_rotate_keeps_unit_direction(self, bounced):
        for _ in range(100):
            bounced.rotate(0.123)
        assert_unit(bounced.direction)
        assert bounced.next is None

    def test_set_direction(self, bounced):
        bounced.set_direction((5, 0.001))
        assert_unit(bounced.direction)

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_translate_rejected(self, bad, bounced):
        with pytest.raises(ValidationError, match="offset"):
            bounced.translate(bad, 0)
        with pytest.raises(ValidationError, match="offset"):
            bounced.translate(0, bad)
        assert_allclose(bounced.origin, [0.0, 0.0])
        assert bounced.next is not None
        assert bounced.dirty is False

    @pytest.mark.parametrize("bad", [math.nan, math.inf])
    def test_non_finite_rotate_rejected(self, bad, bounced):
        with pytest.raises(ValidationError, match="angle"):
            bounced.rotate(bad)
        assert_allclose(bounced.direction, [1.0, 0.0])
        assert bounced.next is not None


# =============================================================================
# Read access and display helpers
# =============================================================================

class TestRayReadAccess:
    """Tests for segments(), opacity and arrow_position."""

    def test_segments(self):
        ray = Ray((0, 0), (1, 0))
        ray.cast([PlaneMirror((10, 5), (10, -5))])
        segments = ray.segments()
        assert len(segments) == 2
        assert all(isinstance(s, RaySegment) for s in segments)
        assert_allclose(segments[0].end, [10.0, 0.0])
        assert segments[1].level == 1

    def test_segments_are_copies(self):
        ray = Ray((0, 0), (1, 0))
        segment = ray.segments()[0]
        segment.origin[0] = 99.0
        assert ray.origin[0] == 0.0

    def test_opacity_decays_with_level(self):
        assert Ray((0, 0), (1, 0)).opacity == 1.0
        assert Ray((0, 0), (1, 0), level=10).opacity == pytest.approx(0.6)
        assert Ray((0, 0), (1, 0), level=50).opacity == pytest.approx(0.1)

    def test_arrow_on_long_segment(self):
        ray = Ray((0, 0), (1, 0))
        assert_allclose(ray.arrow_position, [100.0, 0.0])

    def test_arrow_on_short_segment(self):
        ray = Ray((0, 0), (1, 0))
        ray.cast([PlaneMirror((10, 5), (10, -5))])
        assert_allclose(ray.arrow_position, [5.0, 0.0])

    def test_is_point_inside_origin_handle(self):
        ray = Ray((10, 10), (1, 0))
        assert ray.is_point_inside(12, 13)
        assert not ray.is_point_inside(30, 10)
