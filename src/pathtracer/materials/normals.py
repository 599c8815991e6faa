"""Normal-visualization debug material.

Maps the surface normal from [-1, 1] to [0, 1] per channel and terminates
the path. It is only meaningful on primary rays: reaching it after a bounce
is a programming error, checked with a kernel assertion when Taichi runs in
debug mode.
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def normal_to_color(normal: vec3) -> vec3:
    """Map a unit normal to an RGB color, 0.5 * (normal + 1)."""
    return 0.5 * (normal + 1.0)


@ti.func
def scatter_normals(normal: vec3, scatter_depth: ti.i32):
    """Terminate the path with the normal mapped to a color.

    Args:
        normal: The surface normal at the hit point (unit length).
        scatter_depth: Depth of the path at this hit; must be 0.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) with a zero
        direction, the normal color and did_scatter = 0.
    """
    assert scatter_depth == 0, "Did not expect debug material for normals to scatter"
    return vec3(0.0, 0.0, 0.0), normal_to_color(normal), 0
