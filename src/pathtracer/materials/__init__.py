"""Material scattering models for the path tracer.

This module provides the closed set of materials and their scattering
functions:

Components:
    material: Frozen dataclass variants and the MaterialType tag
    diffuse: Diffuse scattering around the surface normal
    metallic: Mirror reflection perturbed by roughness
    refractive: Dielectric refraction with Schlick reflectance
    normals: Debug material mapping normals to colors
    registry: GPU material table and scatter dispatch

All scatter functions are Taichi functions (@ti.func) that follow the pattern:
    scattered_direction, attenuation, did_scatter = scatter_*(...)

The Taichi-side modules declare fields and must be imported after ti.init();
only the plain-Python variants are re-exported here.
"""

from .material import (
    DiffuseMaterial,
    Material,
    MaterialType,
    MetallicMaterial,
    NormalsMaterial,
    RefractiveMaterial,
    material_from_dict,
    validate_albedo,
)

__all__ = [
    "Material",
    "MaterialType",
    "DiffuseMaterial",
    "MetallicMaterial",
    "RefractiveMaterial",
    "NormalsMaterial",
    "material_from_dict",
    "validate_albedo",
]
