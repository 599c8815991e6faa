"""Ray data structure and vector utilities for the path tracer.

This module provides the Ray dataclass (origin, unit direction and the
shutter time the ray was sampled at) and the vector helpers the materials
build on: reflection, Snell refraction and the Schlick reflectance
approximation. All functions are Taichi functions usable inside kernels.

World axes follow a right-handed, z-up convention:
    forward = +Y, right = +X, up = +Z

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 1.0, 0.0)
    >>> ray = Ray(origin=origin, direction=direction, time=0.0)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# World basis
WORLD_FORWARD = (0.0, 1.0, 0.0)
WORLD_RIGHT = (1.0, 0.0, 0.0)
WORLD_UP = (0.0, 0.0, 1.0)

# Tolerance on |direction|^2 - 1 for a direction to count as unit length
UNIT_TOLERANCE = 1e-4


@ti.dataclass
class Ray:
    """A ray with an origin, a unit direction and a sample time.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3, unit length).
        time: The shutter time at which the ray samples the scene. Moving
            objects are evaluated at this instant.
    """

    origin: vec3
    direction: vec3
    time: ti.f32


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at distance t.

    Args:
        ray: The ray to evaluate.
        t: The distance along the ray.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3, time: ti.f32) -> Ray:
    """Create a ray from origin, direction and time.

    The direction must be unit length; checked only with ti.init(debug=True).
    """
    assert is_unit(direction), "Ray direction must be unit length"
    return Ray(origin=origin, direction=direction, time=time)


@ti.func
def is_unit(v: vec3) -> ti.i32:
    """Check whether a vector is unit length within UNIT_TOLERANCE."""
    return ti.abs(tm.dot(v, v) - 1.0) < UNIT_TOLERANCE


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Useful for detecting degenerate scatter directions.

    Args:
        v: The vector to check.

    Returns:
        1 if all components are near zero, 0 otherwise.
    """
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    The result does not depend on which way the normal faces.

    Args:
        incident: The incoming direction (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The reflected direction, I - 2(I . N)N.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32):
    """Refract an incident vector through a surface using Snell's law.

    The normal must face against the incident direction. Refraction fails
    (total internal reflection) when 1 - eta^2 * (1 - cos^2) <= 0.

    Args:
        incident: The incoming direction (unit length).
        normal: The surface normal facing the incident side (unit length).
        eta: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        A tuple (refracted, refracted_ok). refracted is the zero vector when
        refracted_ok is 0.
    """
    cos_i = tm.dot(incident, normal)
    discriminant = 1.0 - eta * eta * (1.0 - cos_i * cos_i)
    refracted = vec3(0.0, 0.0, 0.0)
    refracted_ok = 0
    if discriminant > 0.0:
        refracted = (incident - normal * cos_i) * eta - normal * ti.sqrt(discriminant)
        refracted_ok = 1
    return refracted, refracted_ok


@ti.func
def schlick_reflectance(cosine: ti.f32, refractive_index: ti.f32) -> ti.f32:
    """Compute the reflection probability with Schlick's approximation.

    Args:
        cosine: Cosine of the angle between the incident ray and the normal.
        refractive_index: Refractive index of the material.

    Returns:
        r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - n) / (1 + n))^2.
    """
    r0 = (1.0 - refractive_index) / (1.0 + refractive_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)
