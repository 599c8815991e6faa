"""Renderer facade: one call from a scene to an RGBA image.

The Renderer compiles the camera, uploads the scene, seeds the per-pixel
random streams and renders the image in bands of rows. Between bands it
reports progress and checks for cancellation, so long renders can be
observed and stopped without touching the kernel.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.renderer import Renderer
    >>> from pathtracer.scene.presets import create_preset, preview_parameters
    >>> setup = create_preset("spheres")
    >>> renderer = Renderer(preview_parameters(setup.parameters))
    >>> result = renderer.render(setup.scene)
    >>> result.image.shape
    (36, 64, 4)
"""

import logging
import time
from collections.abc import Callable, Generator
from dataclasses import dataclass
from typing import Optional

import numpy as np
import numpy.typing as npt

from pathtracer.camera.thin_lens import setup_camera
from pathtracer.core.integrator import (
    collect_statistics,
    get_image_numpy,
    render_rows,
    setup_render_target,
)
from pathtracer.core.parameters import RenderParameters
from pathtracer.core.sampler import seed_streams
from pathtracer.core.statistics import Statistics
from pathtracer.scene.manager import Scene

logger = logging.getLogger(__name__)

# Callback receives (rows_completed, total_rows)
ProgressCallback = Callable[[int, int], None]

# Returns True to stop the render
CancelCheck = Callable[[], bool]

DEFAULT_BAND_ROWS = 16


class RenderCancelled(Exception):
    """The render was stopped by its cancellation check.

    Attributes:
        rows_completed: Rows rendered before the render stopped.
    """

    def __init__(self, rows_completed: int, total_rows: int) -> None:
        super().__init__(f"Render cancelled after {rows_completed}/{total_rows} rows")
        self.rows_completed = rows_completed
        self.total_rows = total_rows


@dataclass
class RenderResult:
    """Output of a finished render.

    Attributes:
        image: Float32 RGBA array of shape (height, width, 4), row 0 at the
            top, gamma-corrected RGB in [0, 1] and alpha 1.
        statistics: Totals merged over every pixel.
        elapsed_seconds: Wall-clock render time.
    """

    image: npt.NDArray[np.float32]
    statistics: Statistics
    elapsed_seconds: float


class Renderer:
    """Renders scenes with fixed render parameters.

    Attributes:
        parameters: The render parameters.
        band_rows: Rows rendered per kernel launch.
    """

    def __init__(self, parameters: RenderParameters, band_rows: int = DEFAULT_BAND_ROWS) -> None:
        """Initialize the renderer.

        Raises:
            ValueError: If the parameters are invalid or band_rows < 1.
        """
        parameters.validate()
        if band_rows < 1:
            raise ValueError(f"Band rows = {band_rows}, must be at least 1")
        self.parameters = parameters
        self.band_rows = band_rows
        self._start_time = 0.0

    def prepare(self, scene: Scene) -> None:
        """Compile the camera and upload everything the kernel reads.

        The camera is compiled first so an invalid camera fails before any
        state is touched.

        Raises:
            CameraError: If the camera parameters are invalid.
            RuntimeError: If the scene exceeds the table capacities.
        """
        params = self.parameters
        compiled = scene.camera.build(params.aspect_ratio)

        scene.upload()
        setup_camera(compiled)
        setup_render_target(params.image_width, params.image_height)
        seed_streams(params.seed, params.pixel_count)

    def render_progressive(self, scene: Scene) -> Generator[tuple[int, int], None, None]:
        """Render band by band, yielding progress after each band.

        Call result() once the generator is exhausted.

        Yields:
            Tuple of (rows_completed, total_rows).
        """
        params = self.parameters
        self.prepare(scene)
        logger.info(
            "Rendering %dx%d, %d samples per pixel, scatter limit %d, debug mode %s",
            params.image_width,
            params.image_height,
            params.antialias_samples**2,
            params.scatter_limit,
            params.debug_mode.name,
        )
        self._start_time = time.perf_counter()

        total = params.image_height
        for y_begin in range(0, total, self.band_rows):
            y_end = min(y_begin + self.band_rows, total)
            render_rows(
                y_begin,
                y_end,
                params.antialias_samples,
                params.scatter_limit,
                params.debug_mode,
            )
            yield (y_end, total)

    def render(
        self,
        scene: Scene,
        callback: Optional[ProgressCallback] = None,
        should_cancel: Optional[CancelCheck] = None,
    ) -> RenderResult:
        """Render a scene to completion.

        Args:
            scene: The scene to render.
            callback: Optional progress callback called after each band.
            should_cancel: Optional check called before each band; returning
                True stops the render.

        Returns:
            The rendered image with its statistics.

        Raises:
            CameraError: If the camera parameters are invalid.
            RenderCancelled: If should_cancel asked to stop.
        """
        completed = 0
        total = self.parameters.image_height
        progress = self.render_progressive(scene)
        while True:
            if should_cancel is not None and completed < total and should_cancel():
                progress.close()
                logger.warning("Render cancelled after %d/%d rows", completed, total)
                raise RenderCancelled(completed, total)
            try:
                completed, total = next(progress)
            except StopIteration:
                break
            if callback is not None:
                callback(completed, total)
        return self.result()

    def result(self) -> RenderResult:
        """Collect the image and statistics of the last render."""
        elapsed = time.perf_counter() - self._start_time
        statistics = collect_statistics()
        logger.info("Rendered image in %.3f seconds", elapsed)
        logger.info("%s", statistics.summary())
        return RenderResult(
            image=get_image_numpy(), statistics=statistics, elapsed_seconds=elapsed
        )

    def __repr__(self) -> str:
        params = self.parameters
        return (
            f"Renderer(width={params.image_width}, height={params.image_height}, "
            f"antialias={params.antialias_samples}, scatter_limit={params.scatter_limit})"
        )
