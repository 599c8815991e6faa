"""Tests for render parameters and debug modes."""

import pytest

from pathtracer.core.parameters import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, DebugMode, RenderParameters


class TestRenderParameters:
    """Tests for RenderParameters validation and helpers."""

    def test_defaults(self):
        params = RenderParameters()
        assert (params.image_width, params.image_height) == (1024, 576)
        assert params.antialias_samples == 4
        assert params.scatter_limit == 8
        assert params.debug_mode == DebugMode.NONE
        assert params.seed == 0

    def test_aspect_ratio_and_pixel_count(self):
        params = RenderParameters(image_width=256, image_height=128)
        assert params.aspect_ratio == 2.0
        assert params.pixel_count == 256 * 128

    @pytest.mark.parametrize(
        "overrides",
        [
            {"image_width": 0},
            {"image_height": 0},
            {"image_width": MAX_IMAGE_WIDTH + 1},
            {"image_height": MAX_IMAGE_HEIGHT + 1},
            {"antialias_samples": 0},
            {"scatter_limit": -1},
            {"seed": -5},
        ],
    )
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            RenderParameters(**overrides)

    def test_zero_scatter_limit_allowed(self):
        assert RenderParameters(scatter_limit=0).scatter_limit == 0

    def test_debug_mode_coerced(self):
        assert RenderParameters(debug_mode=2).debug_mode is DebugMode.NORMALS
        with pytest.raises(ValueError):
            RenderParameters(debug_mode=7)


class TestParameterDicts:
    """Tests for to_dict and from_dict."""

    def test_round_trip(self):
        params = RenderParameters(
            image_width=64, image_height=32, antialias_samples=2, debug_mode=DebugMode.DIFFUSE
        )
        data = params.to_dict()
        assert data["debug_mode"] == "diffuse"
        assert RenderParameters.from_dict(data) == params

    def test_debug_mode_names_case_insensitive(self):
        assert RenderParameters.from_dict({"debug_mode": "Normals"}).debug_mode == DebugMode.NORMALS

    def test_unknown_debug_mode(self):
        with pytest.raises(ValueError, match="Unknown debug mode"):
            RenderParameters.from_dict({"debug_mode": "wireframe"})

    def test_unknown_key(self):
        with pytest.raises(TypeError):
            RenderParameters.from_dict({"samples": 4})
