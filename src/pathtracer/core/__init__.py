"""Core rendering module.

This module contains the fundamental building blocks of the path tracer:

Components:
    ray: Ray data structure and vector utilities (reflect, refract, Schlick)
    sampler: Explicit per-pixel random streams and sampling helpers
    parameters: Render parameters and debug modes
    statistics: Render counters with an associative merge
    integrator: Path-sampling kernel and render target
    renderer: Facade from a scene to an RGBA image

All compute-intensive operations use Taichi kernels.
"""

from .parameters import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, DebugMode, RenderParameters
from .ray import Ray, is_unit, make_ray, near_zero, ray_at, reflect, refract, schlick_reflectance
from .statistics import Statistics

# Note: sampler, integrator and renderer declare Taichi fields and are NOT
# imported here. Import them directly after ti.init(), e.g.:
#   from pathtracer.core.renderer import Renderer

__all__ = [
    "MAX_IMAGE_WIDTH",
    "MAX_IMAGE_HEIGHT",
    "DebugMode",
    "RenderParameters",
    "Ray",
    "ray_at",
    "make_ray",
    "is_unit",
    "near_zero",
    "reflect",
    "refract",
    "schlick_reflectance",
    "Statistics",
]
