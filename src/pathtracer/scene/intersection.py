"""Scene-level sphere intersection testing.

This module stores the scene's spheres in Taichi fields and answers
nearest-hit queries against all of them. Each sphere carries a material id
and a velocity; a sphere is intersected at the position it occupies at the
ray's sample time:

    center(t) = center + velocity * ray.time

Spheres are scanned linearly in insertion order. The admissible upper bound
shrinks to the best distance found so far, so the nearest hit wins and, for
exactly equal distances, the earlier sphere is kept.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.intersection import add_sphere, clear_scene, query_intersection
    >>> clear_scene()
    >>> add_sphere((0.0, 5.0, 0.0), 1.0, material_id=0)
    0
    >>> query_intersection((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)).t
    4.0
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray
from pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere, validate_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any sphere (1 if hit, 0 if miss).
        t: The distance along the ray to the intersection.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The surface normal of the hit sphere (outward for positive
            radii, inward for negative radii). Only valid if hit == 1.
        material_id: The material id of the hit sphere.
            Only valid if hit == 1. -1 indicates a miss.
        object_index: Index of the hit sphere in insertion order, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32
    object_index: ti.i32


# Maximum number of spheres supported in the scene
MAX_SPHERES = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_velocities = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all spheres from the scene.

    Resets the sphere count to zero. The actual field data is not
    cleared but will be overwritten when new spheres are added.
    """
    num_spheres[None] = 0


def add_sphere(
    center: tuple[float, float, float],
    radius: float,
    material_id: int = 0,
    velocity: tuple[float, float, float] = (0.0, 0.0, 0.0),
) -> int:
    """Add a sphere to the scene.

    Args:
        center: The center of the sphere at time 0.
        radius: The signed radius. Negative radii turn the normal inward.
        material_id: The material id to associate with this sphere.
        velocity: Displacement of the center per unit of shutter time.

    Returns:
        The index of the added sphere.

    Raises:
        ValueError: If the radius is zero or a value is not finite.
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    validate_sphere(tuple(center), radius)
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_velocities[idx] = vec3(velocity[0], velocity[1], velocity[2])
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def _make_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
        object_index=-1,
    )


@ti.func
def _to_scene_hit_record(rec: HitRecord, material_id: ti.i32, index: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        material_id=material_id,
        object_index=index,
    )


@ti.func
def sphere_at_time(index: ti.i32, time: ti.f32) -> Sphere:
    """Get a sphere as positioned at the given shutter time."""
    center = sphere_centers[index] + sphere_velocities[index] * time
    return Sphere(center=center, radius=sphere_radii[index])


@ti.func
def intersect_scene(ray: Ray, min_length: ti.f32, max_length: ti.f32) -> SceneHitRecord:
    """Find the nearest intersection of a ray with the scene.

    Args:
        ray: The ray to test. Its time selects the sphere positions.
        min_length: Exclusive lower bound on the hit distance.
        max_length: Exclusive upper bound on the hit distance.

    Returns:
        A SceneHitRecord containing the closest intersection, or a miss
        record if no sphere was hit.
    """
    closest = max_length
    result = _make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, sphere_at_time(i, ray.time), min_length, closest)
        if rec.hit == 1:
            closest = rec.t
            result = _to_scene_hit_record(rec, sphere_material_ids[i], i)

    return result


@dataclass
class SceneHit:
    """Python-side result of a scene query.

    Attributes:
        t: Distance along the ray to the hit.
        point: The hit point.
        normal: The surface normal at the hit.
        material_id: Material id of the hit sphere.
        object_index: Index of the hit sphere in insertion order.
    """

    t: float
    point: tuple[float, float, float]
    normal: tuple[float, float, float]
    material_id: int
    object_index: int


_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())
_query_object_index = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _query_kernel(
    origin: vec3, direction: vec3, time: ti.f32, min_length: ti.f32, max_length: ti.f32
):
    ray = Ray(origin=origin, direction=direction, time=time)
    rec = intersect_scene(ray, min_length, max_length)
    _query_hit[None] = rec.hit
    _query_t[None] = rec.t
    _query_point[None] = rec.point
    _query_normal[None] = rec.normal
    _query_material_id[None] = rec.material_id
    _query_object_index[None] = rec.object_index


def query_intersection(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    time: float = 0.0,
    min_length: float = 1e-4,
    max_length: float = float("inf"),
) -> SceneHit | None:
    """Run a nearest-hit query from Python.

    Intended for tooling and tests; rendering calls intersect_scene inside
    its kernel.

    Args:
        origin: Ray origin.
        direction: Ray direction (unit length).
        time: Shutter time at which moving spheres are evaluated.
        min_length: Exclusive lower bound on the hit distance.
        max_length: Exclusive upper bound on the hit distance.

    Returns:
        A SceneHit, or None when nothing is hit.
    """
    _query_kernel(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        time,
        min_length,
        max_length,
    )
    if _query_hit[None] == 0:
        return None
    point = _query_point[None]
    normal = _query_normal[None]
    return SceneHit(
        t=float(_query_t[None]),
        point=(float(point[0]), float(point[1]), float(point[2])),
        normal=(float(normal[0]), float(normal[1]), float(normal[2])),
        material_id=int(_query_material_id[None]),
        object_index=int(_query_object_index[None]),
    )
