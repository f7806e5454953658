"""
Mirror Trace
============

Public API for tracing specular reflections of 2D light rays through
scenes of plane and circular-arc mirrors.
"""

from mirror_trace.config import (
    DEFAULT_CONFIG,
    EPSILON,
    MAX_LENGTH,
    MAX_RAY_LEVEL,
    TraceConfig,
    ValidationError,
)
from mirror_trace.geometry import (
    Vector2,
    vector,
    as_vector,
    find_circle,
    is_point_on_right,
    reflect,
)
from mirror_trace.mirrors import Hit, Mirror, PlaneMirror, SphericalMirror
from mirror_trace.ray import Ray, RaySegment
from mirror_trace.beam import Beam
from mirror_trace.scene import Scene
from mirror_trace.debug import (
    format_angle,
    format_point,
    format_segment,
    log_ray_chain,
    log_scene_summary,
    setup_debug_logging,
    disable_debug_logging,
)

__all__ = [
    # Configuration
    'TraceConfig',
    'DEFAULT_CONFIG',
    'MAX_LENGTH',
    'MAX_RAY_LEVEL',
    'EPSILON',
    'ValidationError',
    # Geometry
    'Vector2',
    'vector',
    'as_vector',
    'find_circle',
    'is_point_on_right',
    'reflect',
    # Scene objects
    'Hit',
    'Mirror',
    'PlaneMirror',
    'SphericalMirror',
    'Ray',
    'RaySegment',
    'Beam',
    'Scene',
    # Debug utilities
    'format_angle',
    'format_point',
    'format_segment',
    'log_ray_chain',
    'log_scene_summary',
    'setup_debug_logging',
    'disable_debug_logging',
]
__version__ = '0.1.0'
