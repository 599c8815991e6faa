"""Refractive (dielectric) material scattering.

Models glass-like materials that either refract or reflect an incoming ray.

Key physics:
    - The side of the surface is decided from dot(incident, normal): a ray
      with dot <= 0 is entering the medium, otherwise it is exiting.
    - Snell's law refraction, failing (total internal reflection) when
      1 - eta^2 * (1 - cos^2) <= 0.
    - Schlick's approximation gives the probability of reflecting instead
      of refracting; one uniform draw picks between the two.

Because spheres with a negative radius carry inward normals, the same test
makes an inverted sphere behave as a hollow shell (an air bubble).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.refractive import scatter_refractive
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_refractive(
    >>> #     albedo, refractive_index, incident_dir, normal, stream
    >>> # )
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import reflect, refract, schlick_reflectance
from pathtracer.core.sampler import random_f32

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def refraction_setup(refractive_index: ti.f32, incident_direction: vec3, normal: vec3):
    """Compute the outward normal, eta ratio and Schlick cosine for a hit.

    Args:
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (unit length).
        normal: The surface normal as reported by the primitive.

    Returns:
        A tuple (outward_normal, eta, cosine).
    """
    d_dot_n = tm.dot(incident_direction, normal)
    outward_normal = normal
    eta = 1.0 / refractive_index
    cosine = -d_dot_n
    if d_dot_n > 0.0:
        # Exiting the medium
        outward_normal = -normal
        eta = refractive_index
        cosine = refractive_index * d_dot_n
    return outward_normal, eta, cosine


@ti.func
def scatter_refractive(
    albedo: vec3,
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Compute the scattered direction for a refractive material.

    Args:
        albedo: The transmission tint (RGB). White for clear glass.
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (unit length).
        normal: The surface normal as reported by the primitive.
        stream: Random stream of the calling pixel task.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The refracted or reflected direction (unit length).
        - attenuation: The albedo.
        - did_scatter: Always 1.
    """
    outward_normal, eta, cosine = refraction_setup(
        refractive_index, incident_direction, normal
    )
    refracted, refracted_ok = refract(incident_direction, outward_normal, eta)

    scattered_direction = reflect(incident_direction, normal)
    if refracted_ok == 1:
        reflection_probability = schlick_reflectance(cosine, refractive_index)
        if random_f32(stream) >= reflection_probability:
            scattered_direction = refracted

    return tm.normalize(scattered_direction), albedo, 1
