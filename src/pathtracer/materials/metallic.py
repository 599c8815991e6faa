"""Metallic (specular reflective) material scattering.

Reflects the incident ray about the surface normal and perturbs the mirror
direction by a random point in the unit sphere scaled by the roughness:

    direction = normalize(reflect(incident, normal) + roughness * random_in_unit_sphere())

The attenuation is the albedo. The material always produces a ray, even when
a rough perturbation dips the reflection below the surface; such rays simply
continue into the scene.
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import near_zero, reflect
from pathtracer.core.sampler import random_in_unit_sphere

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metallic(
    albedo: vec3,
    roughness: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Compute the scattered direction for a metallic surface.

    Args:
        albedo: The reflective tint (RGB, each component in [0, 1]).
        roughness: The surface roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (unit length).
        normal: The surface normal (unit length).
        stream: Random stream of the calling pixel task.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The perturbed reflection (unit length).
        - attenuation: The albedo.
        - did_scatter: Always 1.
    """
    reflected = reflect(incident_direction, normal)
    fuzzed = reflected + roughness * random_in_unit_sphere(stream)

    scattered_direction = reflected
    if not near_zero(fuzzed):
        scattered_direction = tm.normalize(fuzzed)

    return scattered_direction, albedo, 1
