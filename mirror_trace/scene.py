"""
Scene
=====

Owner of the mirrors and light sources of a 2D optical setup.

The scene is the single place through which geometry is edited and through
which traced paths are read. Rays and beams carry a ``dirty`` flag that their
mutators set. Mirrors bump a ``version`` counter instead, and each scene
remembers the versions it last traced against, so a mirror may be shared by
several scenes. A source owns its reflection chain and belongs to one scene.
update() re-casts exactly the sources that are stale:
- any mirror changed (or mirrors added/removed): every source is re-cast
- otherwise: only the sources that changed themselves
Read methods call update() first, so stale chains are never returned.
"""

from __future__ import annotations

import logging
from typing import Iterable, Union

from mirror_trace.beam import Beam
from mirror_trace.config import DEFAULT_CONFIG, TraceConfig
from mirror_trace.geometry import PointLike
from mirror_trace.mirrors import Mirror, SphericalMirror
from mirror_trace.ray import Ray, RaySegment

logger = logging.getLogger(__name__)

Source = Union[Ray, Beam]
Entity = Union[Ray, Beam, Mirror]


class Scene:
    """A set of mirrors and the rays and beams traced through them.

    Mirrors and sources have independent lifetimes: mirrors never own rays.
    All sources are cast on construction.

    Args:
        sources: Initial rays and beams
        mirrors: Initial mirrors
        config: Tracing limits for sources created through add_ray/add_beam
    """

    def __init__(
        self,
        sources: Iterable[Source] = (),
        mirrors: Iterable[Mirror] = (),
        config: TraceConfig | None = None,
    ) -> None:
        self.config = DEFAULT_CONFIG if config is None else config
        self._sources: list[Source] = list(sources)
        self._mirrors: list[Mirror] = list(mirrors)
        self._traced_mirrors: tuple[tuple[Mirror, int], ...] = ()
        self.cast_all()

    def __repr__(self) -> str:
        return f"Scene(sources={len(self._sources)}, mirrors={len(self._mirrors)})"

    @property
    def mirrors(self) -> tuple[Mirror, ...]:
        return tuple(self._mirrors)

    @property
    def sources(self) -> tuple[Source, ...]:
        return tuple(self._sources)

    # =========================================================================
    # Casting
    # =========================================================================

    def cast_all(self) -> int:
        """Re-cast every source against the current mirrors.

        Returns:
            Number of sources cast
        """
        for source in self._sources:
            source.cast(self._mirrors)
        self._traced_mirrors = self._mirror_state()
        return len(self._sources)

    def update(self) -> int:
        """Re-cast the sources invalidated since the last update.

        Returns:
            Number of sources re-cast (0 when the scene is consistent)
        """
        mirror_state = self._mirror_state()
        if mirror_state != self._traced_mirrors:
            stale = list(self._sources)
        else:
            stale = [s for s in self._sources if s.dirty]

        for source in stale:
            source.cast(self._mirrors)
        self._traced_mirrors = mirror_state

        if stale:
            logger.debug(f"Re-cast {len(stale)} of {len(self._sources)} sources")
        return len(stale)

    @property
    def is_dirty(self) -> bool:
        """True if some mutation has not been followed by update() yet."""
        return (
            self._mirror_state() != self._traced_mirrors
            or any(s.dirty for s in self._sources)
        )

    def _mirror_state(self) -> tuple[tuple[Mirror, int], ...]:
        return tuple((mirror, mirror.version) for mirror in self._mirrors)

    # =========================================================================
    # Membership
    # =========================================================================

    def add_mirror(self, mirror: Mirror) -> int:
        self._mirrors.append(mirror)
        return self.update()

    def remove_mirror(self, mirror: Mirror) -> int:
        self._require_owned(mirror)
        self._mirrors.remove(mirror)
        return self.update()

    def add_source(self, source: Source) -> int:
        self._sources.append(source)
        source.dirty = True
        return self.update()

    def remove_source(self, source: Source) -> None:
        self._require_owned(source)
        self._sources.remove(source)

    def add_ray(self, origin: PointLike, direction: PointLike) -> Ray:
        """Create a source ray using the scene's config, add and cast it."""
        ray = Ray(origin, direction, config=self.config)
        self.add_source(ray)
        return ray

    def add_beam(
        self,
        origin: PointLike,
        direction: PointLike,
        count: int = 5,
        width: float = 40.0,
    ) -> Beam:
        """Create a beam using the scene's config, add and cast it."""
        beam = Beam(origin, direction, count=count, width=width, config=self.config)
        self.add_source(beam)
        return beam

    def _require_owned(self, entity: Entity) -> None:
        if not any(entity is e for e in self._mirrors) and not any(
            entity is s for s in self._sources
        ):
            raise ValueError(f"{entity!r} is not part of this scene")

    # =========================================================================
    # Mutation funnel: apply the edit, then restore consistency
    # =========================================================================

    def translate(self, entity: Entity, dx: float, dy: float) -> int:
        self._require_owned(entity)
        entity.translate(dx, dy)
        return self.update()

    def rotate(self, entity: Entity, angle: float) -> int:
        """Rotate a mirror about its pivot, or a ray/beam about its origin."""
        self._require_owned(entity)
        entity.rotate(angle)
        return self.update()

    def update_direction(self, source: Source, target: PointLike) -> int:
        """Aim a ray or beam at target, as when following the pointer."""
        self._require_owned(source)
        source.update_direction(target)
        return self.update()

    def update_origin(self, source: Source, point: PointLike) -> int:
        self._require_owned(source)
        source.update_origin(point)
        return self.update()

    def set_beam_count(self, beam: Beam, count: int) -> int:
        self._require_owned(beam)
        beam.set_count(count)
        return self.update()

    def increment_beam_count(self, beam: Beam, step: int = 1) -> int:
        self._require_owned(beam)
        beam.increment_count(step)
        return self.update()

    def decrement_beam_count(self, beam: Beam, step: int = 1) -> int:
        self._require_owned(beam)
        beam.decrement_count(step)
        return self.update()

    def set_beam_width(self, beam: Beam, width: float) -> int:
        self._require_owned(beam)
        beam.set_width(width)
        return self.update()

    def set_convex(self, mirror: SphericalMirror, is_convex: bool) -> int:
        self._require_owned(mirror)
        mirror.is_convex = is_convex
        return self.update()

    # =========================================================================
    # Read access
    # =========================================================================

    def rays(self) -> list[Ray]:
        """Top-level rays, with beams expanded into their member rays."""
        self.update()
        result: list[Ray] = []
        for source in self._sources:
            if isinstance(source, Beam):
                result.extend(source.rays)
            else:
                result.append(source)
        return result

    def paths(self) -> list[list[RaySegment]]:
        """Reflection chain of every top-level ray as (origin, end, level) segments."""
        return [ray.segments() for ray in self.rays()]

    def entity_at(self, x: float, y: float) -> Entity | None:
        """Pick the first source, then the first mirror, containing (x, y)."""
        for source in self._sources:
            if source.is_point_inside(x, y):
                return source
        for mirror in self._mirrors:
            if mirror.is_point_inside(x, y):
                return mirror
        return None
