"""Tests for the Renderer facade.

Tests cover:
- Rendering a scene to an RGBA image with statistics
- Progress reporting per band
- Cancellation between bands
- Camera validation before any rendering
- Seed reproducibility
"""

import numpy as np
import pytest


def _small_scene():
    from pathtracer.camera.thin_lens import CameraParameters
    from pathtracer.materials import DiffuseMaterial, MetallicMaterial
    from pathtracer.scene.manager import Scene

    scene = Scene(camera=CameraParameters(origin=(0.0, -1.0, 0.0), look_at=(0.0, 3.0, 0.0)))
    scene.add_sphere((0.0, 3.0, 0.0), 1.0, DiffuseMaterial(albedo=(0.8, 0.3, 0.3)))
    scene.add_sphere((1.5, 3.0, 0.0), 0.5, MetallicMaterial(roughness=0.2))
    scene.add_sphere((0.0, 3.0, -101.0), 100.0, DiffuseMaterial(albedo=(0.8, 0.8, 0.0)))
    return scene


def _params(**overrides):
    from pathtracer.core.parameters import RenderParameters

    values = dict(image_width=16, image_height=8, antialias_samples=2, scatter_limit=4)
    values.update(overrides)
    return RenderParameters(**values)


class TestRender:
    """Tests for Renderer.render."""

    def test_result_image_and_statistics(self):
        from pathtracer.core.renderer import Renderer

        result = Renderer(_params()).render(_small_scene())
        assert result.image.shape == (8, 16, 4)
        assert result.image.dtype == np.float32
        assert (result.image[:, :, 3] == 1.0).all()
        assert result.image[:, :, :3].min() >= 0.0
        assert result.image[:, :, :3].max() <= 1.0

        stats = result.statistics
        assert stats.pixels == 16 * 8
        assert stats.subpixel_samples == 16 * 8 * 4
        assert stats.path_samples >= stats.subpixel_samples
        assert stats.max_depth_reached <= 4
        assert result.elapsed_seconds >= 0.0

    def test_progress_callback_per_band(self):
        from pathtracer.core.renderer import Renderer

        calls = []
        Renderer(_params(), band_rows=3).render(
            _small_scene(), callback=lambda done, total: calls.append((done, total))
        )
        assert calls == [(3, 8), (6, 8), (8, 8)]

    def test_progressive_generator(self):
        from pathtracer.core.renderer import Renderer

        renderer = Renderer(_params(), band_rows=5)
        progress = list(renderer.render_progressive(_small_scene()))
        assert progress == [(5, 8), (8, 8)]
        assert renderer.result().image.shape == (8, 16, 4)

    def test_cancel_between_bands(self):
        from pathtracer.core.renderer import RenderCancelled, Renderer

        checks = []

        def should_cancel():
            checks.append(True)
            return len(checks) > 1

        with pytest.raises(RenderCancelled) as excinfo:
            Renderer(_params(), band_rows=2).render(_small_scene(), should_cancel=should_cancel)
        assert excinfo.value.rows_completed == 2
        assert excinfo.value.total_rows == 8

    def test_cancel_check_not_called_after_last_band(self):
        from pathtracer.core.renderer import Renderer

        checks = []
        Renderer(_params(), band_rows=4).render(
            _small_scene(), should_cancel=lambda: checks.append(True) or False
        )
        assert len(checks) == 2

    def test_invalid_camera_fails_before_rendering(self):
        from pathtracer.camera.thin_lens import InvalidFieldOfViewError, is_camera_ready
        from pathtracer.core.renderer import Renderer
        from pathtracer.scene.intersection import get_sphere_count

        scene = _small_scene()
        scene.camera.field_of_view = 180.0
        with pytest.raises(InvalidFieldOfViewError):
            Renderer(_params()).render(scene)
        assert not is_camera_ready()
        assert get_sphere_count() == 0

    def test_invalid_band_rows(self):
        from pathtracer.core.renderer import Renderer

        with pytest.raises(ValueError):
            Renderer(_params(), band_rows=0)

    def test_repr(self):
        from pathtracer.core.renderer import Renderer

        assert repr(Renderer(_params())) == (
            "Renderer(width=16, height=8, antialias=2, scatter_limit=4)"
        )


class TestSingleDiffuseSphere:
    """End-to-end render of one diffuse unit sphere at the origin.

    With one sample per pixel, a pinhole camera and scatter limit 0, a
    primary ray that misses shows the gamma-corrected sky and a primary
    ray that hits the sphere scatters past the limit and stays black.
    """

    SIZE = 16

    def test_misses_show_sky_and_hits_are_black(self):
        from pathtracer.camera.thin_lens import CameraParameters
        from pathtracer.core.renderer import Renderer
        from pathtracer.materials import DiffuseMaterial
        from pathtracer.scene.manager import Scene

        camera = CameraParameters(origin=(0.0, -3.0, 0.0), field_of_view=60.0)
        scene = Scene(camera=camera)
        scene.add_sphere((0.0, 0.0, 0.0), 1.0, DiffuseMaterial(albedo=(0.8, 0.3, 0.3)))
        params = _params(
            image_width=self.SIZE, image_height=self.SIZE, antialias_samples=1, scatter_limit=0
        )
        result = Renderer(params).render(scene)
        image = result.image
        assert (image[:, :, 3] == 1.0).all()

        compiled = camera.build(1.0)
        origin = np.array(compiled.origin)
        corner = np.array(compiled.corner)
        width = np.array(compiled.width)
        height = np.array(compiled.height)
        top = np.array([0.5, 0.7, 1.0])

        hits = misses = 0
        for y in range(self.SIZE):
            for x in range(self.SIZE):
                direction = corner + width * (x / self.SIZE) + height * (y / self.SIZE) - origin
                direction /= np.linalg.norm(direction)
                # Distance from the sphere center to the ray's line
                miss_distance = np.linalg.norm(origin - np.dot(origin, direction) * direction)
                pixel = image[self.SIZE - 1 - y, x]
                if miss_distance < 0.98:
                    hits += 1
                    assert (pixel[:3] == 0.0).all()
                elif miss_distance > 1.02:
                    misses += 1
                    a = (direction[2] + 1.0) * 0.5
                    sky = (1.0 - a) * np.ones(3) + a * top
                    assert np.allclose(pixel[:3], sky ** (1.0 / 2.2), atol=1e-4)

        assert hits > 0
        assert misses > 0
        assert result.statistics.max_depth_reached == 0


class TestReproducibility:
    """Tests for seeded rendering."""

    def test_same_seed_same_image(self):
        from pathtracer.core.renderer import Renderer
        from pathtracer.preview.export import compute_rmse

        first = Renderer(_params(seed=5)).render(_small_scene()).image
        second = Renderer(_params(seed=5)).render(_small_scene()).image
        assert np.array_equal(first, second)
        assert compute_rmse(first, second) == 0.0

    def test_band_size_does_not_change_image(self):
        from pathtracer.core.renderer import Renderer

        first = Renderer(_params(seed=5), band_rows=1).render(_small_scene()).image
        second = Renderer(_params(seed=5), band_rows=8).render(_small_scene()).image
        assert np.array_equal(first, second)

    def test_different_seed_changes_noise(self):
        from pathtracer.core.renderer import Renderer

        first = Renderer(_params(seed=1)).render(_small_scene()).image
        second = Renderer(_params(seed=2)).render(_small_scene()).image
        assert not np.array_equal(first, second)


class TestDebugModes:
    """Tests for whole-image debug renders."""

    def test_normals_render_sky_is_black(self):
        from pathtracer.camera.thin_lens import CameraParameters
        from pathtracer.core.parameters import DebugMode
        from pathtracer.core.renderer import Renderer
        from pathtracer.scene.manager import Scene

        result = Renderer(_params(debug_mode=DebugMode.NORMALS)).render(
            Scene(camera=CameraParameters())
        )
        assert (result.image[:, :, :3] == 0.0).all()
        assert result.statistics.scatter_events == 0

    def test_diffuse_render_sky_is_white(self):
        from pathtracer.camera.thin_lens import CameraParameters
        from pathtracer.core.parameters import DebugMode
        from pathtracer.core.renderer import Renderer
        from pathtracer.scene.manager import Scene

        result = Renderer(_params(debug_mode=DebugMode.DIFFUSE)).render(
            Scene(camera=CameraParameters())
        )
        assert np.allclose(result.image[:, :, :3], 1.0)
