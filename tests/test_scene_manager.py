"""Tests for the Scene builder.

Tests cover:
- Object validation
- Upload into the Taichi tables with material deduplication
- Dictionary round trips
"""

import pytest


class TestSceneObject:
    """Tests for SceneObject validation."""

    def test_values_normalized(self):
        from pathtracer.materials import DiffuseMaterial
        from pathtracer.scene.manager import SceneObject

        obj = SceneObject([0, 1, 2], 1, DiffuseMaterial())
        assert obj.center == (0.0, 1.0, 2.0)
        assert obj.radius == 1.0
        assert obj.velocity == (0.0, 0.0, 0.0)

    def test_zero_radius(self):
        from pathtracer.materials import DiffuseMaterial
        from pathtracer.scene.manager import SceneObject

        with pytest.raises(ValueError):
            SceneObject((0.0, 0.0, 0.0), 0.0, DiffuseMaterial())

    def test_not_a_material(self):
        from pathtracer.scene.manager import SceneObject

        with pytest.raises(ValueError, match="Not a material"):
            SceneObject((0.0, 0.0, 0.0), 1.0, "red")

    def test_invalid_velocity(self):
        from pathtracer.materials import DiffuseMaterial
        from pathtracer.scene.manager import SceneObject

        with pytest.raises(ValueError, match="Velocity"):
            SceneObject((0.0, 0.0, 0.0), 1.0, DiffuseMaterial(), velocity=(0.0, float("nan"), 0.0))


class TestScene:
    """Tests for building and uploading scenes."""

    def test_add_sphere_returns_index(self):
        from pathtracer.materials import DiffuseMaterial
        from pathtracer.scene.manager import Scene

        scene = Scene()
        assert scene.add_sphere((0.0, 1.0, 0.0), 0.5, DiffuseMaterial()) == 0
        assert scene.add_sphere((0.0, 2.0, 0.0), 0.5, DiffuseMaterial()) == 1
        assert len(scene) == 2

    def test_invalid_sphere_not_added(self):
        from pathtracer.materials import DiffuseMaterial
        from pathtracer.scene.manager import Scene

        scene = Scene()
        with pytest.raises(ValueError):
            scene.add_sphere((0.0, 1.0, 0.0), 0.0, DiffuseMaterial())
        assert len(scene) == 0

    def test_add_object_type_check(self):
        from pathtracer.scene.manager import Scene

        with pytest.raises(ValueError):
            Scene().add_object((0.0, 0.0, 0.0))

    def test_materials_deduplicated_in_first_use_order(self):
        from pathtracer.materials import DiffuseMaterial, MetallicMaterial
        from pathtracer.scene.manager import Scene

        scene = Scene()
        scene.add_sphere((0.0, 1.0, 0.0), 0.5, MetallicMaterial(roughness=0.1))
        scene.add_sphere((0.0, 2.0, 0.0), 0.5, DiffuseMaterial((0.8, 0.3, 0.3)))
        scene.add_sphere((0.0, 3.0, 0.0), 0.5, MetallicMaterial(roughness=0.1))
        assert scene.materials() == [
            MetallicMaterial(roughness=0.1),
            DiffuseMaterial((0.8, 0.3, 0.3)),
        ]

    def test_upload(self):
        from pathtracer.materials import DiffuseMaterial, MaterialType, MetallicMaterial
        from pathtracer.materials.registry import get_material_count, get_material_type_python
        from pathtracer.scene.intersection import (
            get_sphere_count,
            sphere_material_ids,
            sphere_velocities,
        )
        from pathtracer.scene.manager import Scene

        scene = Scene()
        scene.add_sphere((0.0, 1.0, 0.0), 0.5, DiffuseMaterial())
        scene.add_sphere((0.0, 2.0, 0.0), 0.5, MetallicMaterial())
        scene.add_sphere((0.0, 3.0, 0.0), 0.5, DiffuseMaterial(), velocity=(0.0, 0.0, 2.0))

        assert scene.upload() == 2
        assert get_sphere_count() == 3
        assert get_material_count() == 2
        assert [sphere_material_ids[i] for i in range(3)] == [0, 1, 0]
        assert get_material_type_python(1) == MaterialType.METALLIC
        assert abs(sphere_velocities[2][2] - 2.0) < 1e-6

    def test_upload_replaces_previous_scene(self):
        from pathtracer.materials import DiffuseMaterial
        from pathtracer.scene.intersection import get_sphere_count, query_intersection
        from pathtracer.scene.manager import Scene

        first = Scene()
        for i in range(3):
            first.add_sphere((0.0, 5.0 + i, 0.0), 0.5, DiffuseMaterial())
        first.upload()

        second = Scene()
        second.add_sphere((0.0, 10.0, 0.0), 1.0, DiffuseMaterial())
        second.upload()

        assert get_sphere_count() == 1
        hit = query_intersection((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))
        assert abs(hit.t - 9.0) < 1e-5

    def test_clear_keeps_camera(self):
        from pathtracer.camera.thin_lens import CameraParameters
        from pathtracer.materials import DiffuseMaterial
        from pathtracer.scene.manager import Scene

        camera = CameraParameters(field_of_view=30.0)
        scene = Scene(camera=camera)
        scene.add_sphere((0.0, 1.0, 0.0), 0.5, DiffuseMaterial())
        scene.clear()
        assert len(scene) == 0
        assert scene.camera is camera


class TestSerialization:
    """Tests for Scene dictionary round trips."""

    def test_round_trip(self):
        from pathtracer.camera.thin_lens import CameraParameters
        from pathtracer.materials import NormalsMaterial, RefractiveMaterial
        from pathtracer.scene.manager import Scene

        scene = Scene(camera=CameraParameters(origin=(0.0, -1.0, 0.0), aperture_radius=0.1))
        scene.add_sphere((0.0, 1.0, 0.0), -0.5, RefractiveMaterial(refractive_index=1.3))
        scene.add_sphere((1.0, 1.0, 0.0), 0.5, NormalsMaterial(), velocity=(0.1, 0.0, 0.0))
        assert Scene.from_dict(scene.to_dict()) == scene

    def test_missing_camera_uses_default(self):
        from pathtracer.camera.thin_lens import CameraParameters
        from pathtracer.scene.manager import Scene

        assert Scene.from_dict({"objects": []}).camera == CameraParameters()
