"""Render parameters and debug visualization modes.

The parameters record is the renderer's configuration: output dimensions,
the antialiasing grid size, the scatter (bounce) limit and an optional debug
mode that overrides every material in the scene.

Example:
    >>> from pathtracer.core.parameters import DebugMode, RenderParameters
    >>> params = RenderParameters(image_width=256, image_height=144)
    >>> params.aspect_ratio
    1.7777777777777777
    >>> RenderParameters(debug_mode=DebugMode.NORMALS).scatter_limit
    8
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import IntEnum
from typing import Any

# Maximum supported image dimensions (render buffers are preallocated)
MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 1024


class DebugMode(IntEnum):
    """Material override applied to every hit during rendering.

    NONE renders the scene as authored. DIFFUSE shades every object with a
    neutral grey diffuse material under a flat white sky. NORMALS maps the
    surface normal of the first hit to a color under a flat black sky.
    """

    NONE = 0
    DIFFUSE = 1
    NORMALS = 2


@dataclass
class RenderParameters:
    """Configuration for a single render.

    Attributes:
        image_width: Output width in pixels (1..MAX_IMAGE_WIDTH).
        image_height: Output height in pixels (1..MAX_IMAGE_HEIGHT).
        antialias_samples: Subpixel grid size N; each pixel takes N*N samples.
        scatter_limit: Maximum path depth. Paths still scattering past this
            depth contribute black.
        debug_mode: Optional material override for visualizing geometry.
        seed: Seed for the per-pixel random streams.
    """

    image_width: int = 1024
    image_height: int = 576
    antialias_samples: int = 4
    scatter_limit: int = 8
    debug_mode: DebugMode = DebugMode.NONE
    seed: int = 0

    def __post_init__(self) -> None:
        self.debug_mode = DebugMode(self.debug_mode)
        self.validate()

    def validate(self) -> None:
        """Check every field, raising ValueError on the first violation."""
        if not 1 <= self.image_width <= MAX_IMAGE_WIDTH:
            raise ValueError(
                f"Image width {self.image_width} is outside [1, {MAX_IMAGE_WIDTH}]"
            )
        if not 1 <= self.image_height <= MAX_IMAGE_HEIGHT:
            raise ValueError(
                f"Image height {self.image_height} is outside [1, {MAX_IMAGE_HEIGHT}]"
            )
        if self.antialias_samples < 1:
            raise ValueError(
                f"Antialias samples = {self.antialias_samples}, must be at least 1"
            )
        if self.scatter_limit < 0:
            raise ValueError(f"Scatter limit = {self.scatter_limit}, must be non-negative")
        if self.seed < 0:
            raise ValueError(f"Seed = {self.seed}, must be non-negative")

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height of the output image."""
        return self.image_width / self.image_height

    @property
    def pixel_count(self) -> int:
        return self.image_width * self.image_height

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["debug_mode"] = self.debug_mode.name.lower()
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RenderParameters:
        """Build parameters from a plain dictionary, using defaults for missing keys.

        Raises:
            ValueError: If the debug mode name is unknown or a value is invalid.
        """
        values = dict(data)
        mode = values.pop("debug_mode", None)
        if mode is None:
            debug_mode = DebugMode.NONE
        elif isinstance(mode, str):
            try:
                debug_mode = DebugMode[mode.upper()]
            except KeyError:
                raise ValueError(f"Unknown debug mode: {mode!r}") from None
        else:
            debug_mode = DebugMode(mode)
        return cls(debug_mode=debug_mode, **values)
