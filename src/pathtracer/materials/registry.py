"""GPU-side material table and scatter dispatch.

Materials registered here are stored in a unified structure-of-arrays table
indexed by material id. Every variant uses the same columns; parameters a
variant does not have are left at zero:

    material_types[i]              MaterialType tag
    material_albedos[i]            albedo (diffuse, metallic, refractive)
    material_roughness[i]          roughness (metallic)
    material_refractive_indices[i] index of refraction (refractive)

The table is filled before rendering and is read-only inside kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.materials.material import MetallicMaterial
    >>> from pathtracer.materials.registry import add_material, clear_materials
    >>> clear_materials()
    >>> mat_id = add_material(MetallicMaterial(albedo=(0.9, 0.9, 0.9), roughness=0.1))
"""

import taichi as ti
import taichi.math as tm

from pathtracer.materials.diffuse import scatter_diffuse
from pathtracer.materials.material import (
    DiffuseMaterial,
    Material,
    MaterialType,
    MetallicMaterial,
    NormalsMaterial,
    RefractiveMaterial,
)
from pathtracer.materials.metallic import scatter_metallic
from pathtracer.materials.normals import scatter_normals
from pathtracer.materials.refractive import scatter_refractive

# Type alias for 3D vectors
vec3 = tm.vec3

# Maximum number of distinct materials in a scene
MAX_MATERIALS = 1024

material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_roughness = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_refractive_indices = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_materials() -> None:
    """Clear all registered materials.

    Resets the material count to zero; stale entries are overwritten by the
    next registrations.
    """
    num_materials[None] = 0


def add_material(material: Material) -> int:
    """Register a material in the GPU table.

    Args:
        material: A validated material variant.

    Returns:
        The material id to assign to scene objects.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        TypeError: If the object is not a material variant.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    albedo = (0.0, 0.0, 0.0)
    roughness = 0.0
    refractive_index = 0.0
    if isinstance(material, DiffuseMaterial):
        albedo = material.albedo
    elif isinstance(material, MetallicMaterial):
        albedo = material.albedo
        roughness = material.roughness
    elif isinstance(material, RefractiveMaterial):
        albedo = material.albedo
        refractive_index = material.refractive_index
    elif not isinstance(material, NormalsMaterial):
        raise TypeError(f"Not a material: {material!r}")

    material_types[idx] = int(material.material_type)
    material_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    material_roughness[idx] = roughness
    material_refractive_indices[idx] = refractive_index
    num_materials[None] = idx + 1
    return idx


def get_material_count() -> int:
    """Get the number of registered materials."""
    return int(num_materials[None])


def get_material_type_python(material_id: int) -> MaterialType:
    """Get the material type of a registered material (Python side).

    Raises:
        IndexError: If the id is not registered.
    """
    if not 0 <= material_id < num_materials[None]:
        raise IndexError(f"Invalid material_id: {material_id}")
    return MaterialType(int(material_types[material_id]))


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a material id inside a kernel.

    Returns:
        The material type as an integer (see MaterialType), or -1 for
        an unregistered id.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def scatter_material(
    mat_type: ti.i32,
    albedo: vec3,
    roughness: ti.f32,
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
    scatter_depth: ti.i32,
    stream: ti.i32,
):
    """Dispatch to the scattering function of a material type.

    The caller passes the material columns explicitly so that debug
    overrides can substitute their own material without touching the table.

    Args:
        mat_type: The MaterialType tag.
        albedo: Albedo column of the material.
        roughness: Roughness column of the material.
        refractive_index: Refractive index column of the material.
        incident_direction: The incoming ray direction (unit length).
        normal: The surface normal as reported by the primitive.
        scatter_depth: Depth of the path at this hit.
        stream: Random stream of the calling pixel task.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where:
        - scattered_direction: The new ray direction (unit length).
        - attenuation: The color attenuation for this event.
        - did_scatter: 1 if a ray continues, 0 if the path terminates.
    """
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.DIFFUSE):
        scattered_direction, attenuation, did_scatter = scatter_diffuse(albedo, normal, stream)

    elif mat_type == int(MaterialType.METALLIC):
        scattered_direction, attenuation, did_scatter = scatter_metallic(
            albedo, roughness, incident_direction, normal, stream
        )

    elif mat_type == int(MaterialType.REFRACTIVE):
        scattered_direction, attenuation, did_scatter = scatter_refractive(
            albedo, refractive_index, incident_direction, normal, stream
        )

    elif mat_type == int(MaterialType.NORMALS):
        scattered_direction, attenuation, did_scatter = scatter_normals(normal, scatter_depth)

    return scattered_direction, attenuation, did_scatter
