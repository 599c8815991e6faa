"""Geometry module for shape primitives.

This module provides the geometric primitives and their intersection
algorithms:

Components:
    sphere: Sphere primitive with closed-form ray-sphere intersection

Intersection routines are Taichi functions (@ti.func) that follow the pattern:
    record = hit_shape(ray, shape, min_length, max_length)

The scene layer scans every primitive linearly; there is no acceleration
structure.
"""

from .sphere import HitRecord, Sphere, hit_sphere, validate_sphere

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "validate_sphere",
]
