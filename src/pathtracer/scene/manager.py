"""Scene builder coordinating camera parameters, spheres and materials.

A Scene is the Python-side description of what to render: camera parameters
and an ordered list of SceneObjects, each a sphere with one material and an
optional linear velocity. Objects are validated when they are added, so an
invalid radius or material never reaches the renderer.

upload() writes the scene into the Taichi tables used by the render kernel.
Identical materials share one table entry; the material ids are assigned in
order of first use.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.thin_lens import CameraParameters
    >>> from pathtracer.materials import DiffuseMaterial
    >>> from pathtracer.scene.manager import Scene
    >>> scene = Scene(camera=CameraParameters(origin=(0.0, -1.0, 0.0)))
    >>> scene.add_sphere((0.0, 1.0, 0.0), 0.5, DiffuseMaterial(albedo=(0.8, 0.3, 0.3)))
    0
    >>> scene.upload()
    1
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Optional

from pathtracer.camera.thin_lens import CameraParameters
from pathtracer.geometry.sphere import validate_sphere
from pathtracer.materials.material import (
    DiffuseMaterial,
    Material,
    MetallicMaterial,
    NormalsMaterial,
    RefractiveMaterial,
    material_from_dict,
)
from pathtracer.materials.registry import add_material, clear_materials
from pathtracer.scene.intersection import add_sphere, clear_scene

logger = logging.getLogger(__name__)

Vector3 = tuple[float, float, float]

_MATERIAL_TYPES = (DiffuseMaterial, MetallicMaterial, RefractiveMaterial, NormalsMaterial)


@dataclass
class SceneObject:
    """A sphere with a material and an optional velocity.

    Attributes:
        center: Center of the sphere at time 0.
        radius: Signed radius. Negative radii flip the normal inward, which
            turns a refractive sphere into a hollow shell.
        material: The material variant shading the sphere.
        velocity: Displacement of the center per unit of shutter time.
    """

    center: Vector3
    radius: float
    material: Material
    velocity: Vector3 = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        self.center = tuple(float(c) for c in self.center)
        self.radius = float(self.radius)
        self.velocity = tuple(float(c) for c in self.velocity)
        validate_sphere(self.center, self.radius)
        if len(self.velocity) != 3 or not all(math.isfinite(c) for c in self.velocity):
            raise ValueError(f"Velocity {self.velocity} must be three finite numbers")
        if not isinstance(self.material, _MATERIAL_TYPES):
            raise ValueError(f"Not a material: {self.material!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "center": list(self.center),
            "radius": self.radius,
            "velocity": list(self.velocity),
            "material": self.material.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SceneObject":
        """Create an object from its dictionary form.

        Raises:
            KeyError: If center, radius or material is missing.
            ValueError: If a value is invalid.
        """
        return cls(
            center=tuple(data["center"]),
            radius=data["radius"],
            material=material_from_dict(data["material"]),
            velocity=tuple(data.get("velocity", (0.0, 0.0, 0.0))),
        )


@dataclass
class Scene:
    """Camera parameters plus an ordered collection of objects.

    Attributes:
        camera: Parameters compiled into a camera at render time.
        objects: The objects in insertion order.
    """

    camera: CameraParameters = field(default_factory=CameraParameters)
    objects: list[SceneObject] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.objects)

    def add_object(self, obj: SceneObject) -> int:
        """Append an object and return its index."""
        if not isinstance(obj, SceneObject):
            raise ValueError(f"Not a scene object: {obj!r}")
        self.objects.append(obj)
        return len(self.objects) - 1

    def add_sphere(
        self,
        center: Vector3,
        radius: float,
        material: Material,
        velocity: Vector3 = (0.0, 0.0, 0.0),
    ) -> int:
        """Add a sphere with a material in one call.

        Returns:
            The index of the added object.

        Raises:
            ValueError: If the radius is zero or a value is invalid.
        """
        return self.add_object(SceneObject(center, radius, material, velocity))

    def clear(self) -> None:
        """Remove every object. The camera parameters are kept."""
        self.objects.clear()

    def materials(self) -> list[Material]:
        """Distinct materials in order of first use."""
        return list(dict.fromkeys(obj.material for obj in self.objects))

    def upload(self) -> int:
        """Write the scene into the Taichi tables used for rendering.

        Replaces whatever scene was uploaded before.

        Returns:
            The number of distinct materials uploaded.

        Raises:
            RuntimeError: If the scene exceeds the sphere or material capacity.
        """
        clear_scene()
        clear_materials()

        material_ids: dict[Material, int] = {}
        for material in self.materials():
            material_ids[material] = add_material(material)

        for obj in self.objects:
            add_sphere(obj.center, obj.radius, material_ids[obj.material], obj.velocity)

        logger.debug(
            "Uploaded scene: %d spheres, %d materials", len(self.objects), len(material_ids)
        )
        return len(material_ids)

    def to_dict(self) -> dict[str, Any]:
        return {
            "camera": self.camera.to_dict(),
            "objects": [obj.to_dict() for obj in self.objects],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scene":
        """Create a scene from its dictionary form.

        Raises:
            KeyError: If a required object key is missing.
            TypeError: If the camera contains unknown keys.
            ValueError: If a value is invalid.
        """
        camera: Optional[CameraParameters] = None
        if data.get("camera") is not None:
            camera = CameraParameters.from_dict(data["camera"])
        scene = cls(camera=camera or CameraParameters())
        for obj in data.get("objects", []):
            scene.add_object(SceneObject.from_dict(obj))
        return scene
