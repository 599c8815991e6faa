"""Diffuse material scattering.

The scattered direction is the surface normal offset by a random point in
the unit sphere, normalized. This gives a cosine-weighted-like Lambertian
distribution without building a tangent frame:

    direction = normalize(normal + random_in_unit_sphere())

The attenuation is the albedo and the material always scatters.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.diffuse import scatter_diffuse
    >>> # Use within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_diffuse(albedo, normal, stream)
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import near_zero
from pathtracer.core.sampler import random_in_unit_sphere

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_diffuse(albedo: vec3, normal: vec3, stream: ti.i32):
    """Sample a scattered direction for a diffuse surface.

    Args:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
        normal: The surface normal at the hit point (unit length).
        stream: Random stream of the calling pixel task.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The sampled direction (unit length).
        - attenuation: The albedo.
        - did_scatter: Always 1.
    """
    offset = normal + random_in_unit_sphere(stream)

    # The random point can cancel the normal almost exactly
    scattered_direction = normal
    if not near_zero(offset):
        scattered_direction = tm.normalize(offset)

    return scattered_direction, albedo, 1
