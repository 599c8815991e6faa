"""Sphere primitive with closed-form ray-sphere intersection.

The intersection solves the ray-sphere quadratic and returns the nearest root
that lies strictly inside the admissible distance interval. The surface
normal is (hit_point - center) / radius: dividing by the signed radius
instead of normalizing flips the normal of spheres with a negative radius,
which is how hollow (inverted) dielectric shells are built.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 10, 0), radius=1.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import math

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, ray_at

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and signed radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere. Negative values keep the same
            surface but turn the normal inward. Zero is invalid.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The distance along the ray to the intersection (> 0).
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The surface normal at the intersection point, following the
            primitive's orientation convention (outward for positive radii).
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def hit_sphere(
    ray: Ray,
    sphere: Sphere,
    min_length: ti.f32,
    max_length: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Solves |origin + t * direction - center|^2 = radius^2 written as
    a*t^2 + b*t + c = 0 with:
        oc = origin - center
        a = dot(direction, direction)
        b = 2 * dot(oc, direction)
        c = dot(oc, oc) - radius^2

    The nearer root (-b - sqrt(disc)) / 2a is tried first, then the farther
    one; the first that lies strictly inside (min_length, max_length) wins.

    Args:
        ray: The ray to test (unit direction).
        sphere: The sphere to test intersection against.
        min_length: Exclusive lower bound on the hit distance.
        max_length: Exclusive upper bound on the hit distance.

    Returns:
        A HitRecord. Check the hit field to determine if intersection occurred.
    """
    oc = ray.origin - sphere.center
    a = tm.dot(ray.direction, ray.direction)
    b = 2.0 * tm.dot(oc, ray.direction)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - 4.0 * a * c

    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)

    if discriminant >= 0.0:
        discriminant_sqrt = ti.sqrt(discriminant)

        r1 = (-b - discriminant_sqrt) / (2.0 * a)
        r2 = (-b + discriminant_sqrt) / (2.0 * a)

        if min_length < r1 and r1 < max_length:
            did_hit = 1
            hit_t = r1
        elif min_length < r2 and r2 < max_length:
            did_hit = 1
            hit_t = r2

        if did_hit == 1:
            hit_point = ray_at(ray, hit_t)
            hit_normal = (hit_point - sphere.center) / sphere.radius

    return HitRecord(hit=did_hit, t=hit_t, point=hit_point, normal=hit_normal)


def validate_sphere(center: tuple[float, float, float], radius: float) -> None:
    """Validate sphere data at scene-construction time.

    Args:
        center: The center point as (x, y, z).
        radius: The signed radius.

    Raises:
        ValueError: If the radius is zero or any value is not finite.
    """
    if len(center) != 3 or not all(math.isfinite(c) for c in center):
        raise ValueError(f"Sphere center {center} must be three finite numbers")
    if not math.isfinite(radius):
        raise ValueError(f"Sphere radius {radius} must be finite")
    if radius == 0.0:
        raise ValueError("Sphere radius must be non-zero")
