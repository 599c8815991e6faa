"""Closed set of material variants.

A material is one of four immutable variants, tagged by MaterialType:

    DiffuseMaterial(albedo)
    MetallicMaterial(albedo, roughness)
    RefractiveMaterial(albedo, refractive_index)
    NormalsMaterial()

The variants are plain frozen dataclasses that validate their parameters on
construction, hash by value (so identical materials share one GPU table
entry) and convert to and from plain dictionaries for setup files. The
scattering behavior of each variant lives in its own module and is dispatched
on the MaterialType tag by the material registry.

Example:
    >>> from pathtracer.materials.material import DiffuseMaterial, material_from_dict
    >>> red = DiffuseMaterial(albedo=(0.8, 0.3, 0.3))
    >>> material_from_dict(red.to_dict()) == red
    True
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Union


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the path tracer to determine which
    scattering function to call.
    """

    DIFFUSE = 0
    METALLIC = 1
    REFRACTIVE = 2
    NORMALS = 3


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Check that an albedo is an RGB triple with components in [0, 1].

    Raises:
        ValueError: If the albedo does not have three components or any
            component is outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo {albedo} must have exactly three components")
    for i, component in enumerate(albedo):
        if not 0.0 <= component <= 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )


@dataclass(frozen=True)
class DiffuseMaterial:
    """Lambertian-style diffuse material.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: tuple[float, float, float] = (0.5, 0.5, 0.5)

    material_type = MaterialType.DIFFUSE

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))
        validate_albedo(self.albedo)

    def to_dict(self) -> dict[str, Any]:
        return {"type": "diffuse", "albedo": list(self.albedo)}


@dataclass(frozen=True)
class MetallicMaterial:
    """Reflective metal with optional roughness (fuzz).

    Attributes:
        albedo: The reflective tint (RGB, each component in [0, 1]).
        roughness: Perturbation of the mirror direction in [0, 1].
            0 = perfect mirror, 1 = maximum fuzz.
    """

    albedo: tuple[float, float, float] = (1.0, 1.0, 1.0)
    roughness: float = 0.0

    material_type = MaterialType.METALLIC

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))
        validate_albedo(self.albedo)
        if not 0.0 <= self.roughness <= 1.0:
            raise ValueError(
                f"Roughness = {self.roughness} is outside [0, 1]. "
                "Roughness must be between 0 (perfect mirror) and 1 (maximum fuzz)."
            )

    def to_dict(self) -> dict[str, Any]:
        return {"type": "metallic", "albedo": list(self.albedo), "roughness": self.roughness}


@dataclass(frozen=True)
class RefractiveMaterial:
    """Dielectric (glass/water) material that refracts or reflects.

    Attributes:
        albedo: The transmission tint (RGB). White gives clear glass.
        refractive_index: Index of refraction, must be > 0. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    albedo: tuple[float, float, float] = (1.0, 1.0, 1.0)
    refractive_index: float = 1.5

    material_type = MaterialType.REFRACTIVE

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))
        validate_albedo(self.albedo)
        if not (math.isfinite(self.refractive_index) and self.refractive_index > 0.0):
            raise ValueError(
                f"Refractive index = {self.refractive_index} must be a positive number"
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "refractive",
            "albedo": list(self.albedo),
            "refractive_index": self.refractive_index,
        }


@dataclass(frozen=True)
class NormalsMaterial:
    """Debug material that shows the surface normal of the first hit.

    It never scatters and is only valid on primary rays.
    """

    material_type = MaterialType.NORMALS

    def to_dict(self) -> dict[str, Any]:
        return {"type": "normals"}


Material = Union[DiffuseMaterial, MetallicMaterial, RefractiveMaterial, NormalsMaterial]


def material_from_dict(data: dict[str, Any]) -> Material:
    """Create a material from its dictionary form.

    Args:
        data: A dictionary with a "type" key and the variant's parameters.

    Returns:
        The material variant.

    Raises:
        ValueError: If the type is unknown or a parameter is invalid.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Material must be a mapping, got {type(data).__name__}")
    mat_type = str(data.get("type", "")).lower()
    if mat_type == "diffuse":
        return DiffuseMaterial(albedo=tuple(data.get("albedo", (0.5, 0.5, 0.5))))
    if mat_type == "metallic":
        return MetallicMaterial(
            albedo=tuple(data.get("albedo", (1.0, 1.0, 1.0))),
            roughness=float(data.get("roughness", 0.0)),
        )
    if mat_type == "refractive":
        return RefractiveMaterial(
            albedo=tuple(data.get("albedo", (1.0, 1.0, 1.0))),
            refractive_index=float(data.get("refractive_index", 1.5)),
        )
    if mat_type == "normals":
        return NormalsMaterial()
    raise ValueError(f"Unknown material type: {data.get('type')!r}")
