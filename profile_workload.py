#!/usr/bin/env python3
"""
Profile script for mirror_trace to identify performance bottlenecks.
"""

import cProfile
import pstats
import io
import numpy as np
import time
from typing import List, Tuple

from mirror_trace import Beam, Mirror, PlaneMirror, Ray, Scene, SphericalMirror


def generate_random_mirrors(
    n_plane: int,
    n_spherical: int,
    extent: float = 800.0
) -> List[Mirror]:
    """Generate random plane and arc mirrors inside a square of side extent."""
    mirrors: List[Mirror] = []
    for _ in range(n_plane):
        start = np.random.uniform(0, extent, 2)
        angle = np.random.uniform(0, 2 * np.pi)
        length = np.random.uniform(40, 200)
        end = start + length * np.array([np.cos(angle), np.sin(angle)])
        mirrors.append(PlaneMirror(start, end))

    for _ in range(n_spherical):
        center = np.random.uniform(100, extent - 100, 2)
        radius = np.random.uniform(30, 120)
        angles = np.sort(np.random.uniform(0, np.pi, 3)) + np.random.uniform(0, 2 * np.pi)
        p1, p2, p3 = (center + radius * np.array([np.cos(a), np.sin(a)]) for a in angles)
        mirrors.append(SphericalMirror(p1, p2, p3, is_convex=bool(np.random.randint(2))))
    return mirrors


def generate_typical_workload(
    n_plane: int = 8,
    n_spherical: int = 2
) -> Tuple[Scene, Ray, List[Mirror]]:
    """
    Generate a typical workload for profiling.
    Simulates the demo page: a few mirrors, a ray and a beam in the middle.
    """
    mirrors = generate_random_mirrors(n_plane, n_spherical)
    ray = Ray((400.0, 400.0), (1.0, 0.3))
    beam = Beam((350.0, 450.0), (-0.2, -1.0), count=7, width=60.0)
    scene = Scene(sources=[ray, beam], mirrors=mirrors)
    return scene, ray, mirrors


def run_pointer_workload(n_iterations: int = 500) -> None:
    """Aim the ray at a moving pointer, re-casting after every move."""
    np.random.seed(42)  # For reproducibility
    scene, ray, _ = generate_typical_workload()

    for i in range(n_iterations):
        angle = 2 * np.pi * i / n_iterations
        target = (400.0 + 100.0 * np.cos(angle), 400.0 + 100.0 * np.sin(angle))
        scene.update_direction(ray, target)
        scene.paths()


def run_mirror_drag_workload(n_iterations: int = 200) -> None:
    """Drag mirrors around, which re-casts every source each step."""
    np.random.seed(42)
    scene, _, mirrors = generate_typical_workload(n_plane=40, n_spherical=10)

    for i in range(n_iterations):
        mirror = mirrors[i % len(mirrors)]
        scene.translate(mirror, np.random.uniform(-5, 5), np.random.uniform(-5, 5))
        scene.rotate(mirror, np.random.uniform(-0.1, 0.1))


def profile_function(func, description: str) -> None:
    """Profile a function and print statistics."""
    print(f"\n{'=' * 60}")
    print(f"Profiling: {description}")
    print('=' * 60)

    # Time the execution
    start = time.perf_counter()

    profiler = cProfile.Profile()
    profiler.enable()
    func()
    profiler.disable()

    elapsed = time.perf_counter() - start

    # Get stats
    s = io.StringIO()
    ps = pstats.Stats(profiler, stream=s).sort_stats('cumulative')
    ps.print_stats(30)
    print(s.getvalue())

    print(f"\nTotal time: {elapsed:.3f}s")


if __name__ == "__main__":
    print("Mirror Trace Performance Profiling")
    print("=" * 60)

    # Profile pointer tracking (10 mirrors, only the aimed ray is re-cast)
    profile_function(
        lambda: run_pointer_workload(500),
        "Pointer tracking (10 mirrors, 500 moves)"
    )

    # Profile mirror dragging (50 mirrors, every source re-cast)
    profile_function(
        lambda: run_mirror_drag_workload(200),
        "Mirror dragging (50 mirrors, 200 moves)"
    )
