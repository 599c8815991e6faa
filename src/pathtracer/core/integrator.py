"""Path-sampling integrator for Monte Carlo light transport.

This module implements the render kernel. Each camera sample is traced
through the scene by an iterative state machine bounded by the scatter
limit:

    depth > scatter_limit    -> black, the path contributes nothing more
    miss                     -> throughput * sky
    hit, material scatters   -> throughput *= attenuation, continue at depth + 1
    hit, material terminates -> throughput * attenuation

Debug modes replace every material: DIFFUSE shades all hits with a grey
diffuse material under a flat white sky, NORMALS shows the first-hit normal
under a flat black sky.

Each pixel takes an N x N stratified grid of subpixel samples, averages
them, applies gamma 1/2.2 to RGB and stores alpha = 1. The outermost loop
over pixels is parallelized by Taichi; every pixel owns its color slot, its
statistics slots and its random stream, so pixels never share mutable
state. Rows are rendered in bands so the caller can report progress or stop
between bands.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.integrator import render_rows, setup_render_target
    >>> # Upload a scene and camera first, then:
    >>> setup_render_target(256, 144)
    >>> render_rows(0, 144, antialias_samples=2, scatter_limit=8)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.camera.thin_lens import check_camera_ready, get_ray
from pathtracer.core.parameters import MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, DebugMode
from pathtracer.core.ray import Ray, make_ray
from pathtracer.core.statistics import Statistics
from pathtracer.materials.material import MaterialType
from pathtracer.materials.registry import (
    get_material_type,
    material_albedos,
    material_refractive_indices,
    material_roughness,
    scatter_material,
)
from pathtracer.scene.intersection import intersect_scene

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Admissible hit distances; the lower bound suppresses self-intersection
T_MIN = 1e-4
T_MAX = float("inf")

GAMMA = 2.2

# Sky gradient from horizon-down (white) to zenith (light blue)
SKY_BOTTOM = (1.0, 1.0, 1.0)
SKY_TOP = (0.5, 0.7, 1.0)

# Albedo of the override material in DebugMode.DIFFUSE
DEBUG_DIFFUSE_ALBEDO = 0.5

# =============================================================================
# Render Target (Image Buffer and Statistics)
# =============================================================================

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# RGBA output buffer (preallocated to max size)
_pixel_buffer = ti.Vector.field(4, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Per-pixel statistics counters
_stat_subpixels = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_stat_samples = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_stat_intersections = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_stat_scatters = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))
_stat_max_depth = ti.field(dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Initialize the render target buffers.

    Sets the active image dimensions and clears the buffers. The buffers are
    preallocated to MAX_IMAGE_WIDTH x MAX_IMAGE_HEIGHT to avoid Taichi kernel
    recompilation.

    Args:
        width: Image width in pixels (1..MAX_IMAGE_WIDTH).
        height: Image height in pixels (1..MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If dimensions are not positive or exceed the maximum.
    """
    if width < 1 or height < 1:
        raise ValueError(f"Image dimensions ({width}x{height}) must be positive")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1

    clear_render_target()


def clear_render_target() -> None:
    """Clear the pixel and statistics buffers to zero."""
    _pixel_buffer.fill(0.0)
    _stat_subpixels.fill(0)
    _stat_samples.fill(0)
    _stat_intersections.fill(0)
    _stat_scatters.fill(0)
    _stat_max_depth.fill(0)


def reset_render_target() -> None:
    """Mark the render target as not set up."""
    _render_target_initialized[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions.

    Returns:
        Tuple of (width, height).
    """
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def sky_color(direction: vec3, debug_mode: ti.i32) -> vec3:
    """Background radiance for a ray that leaves the scene.

    Linear blend between SKY_BOTTOM and SKY_TOP keyed by the up (z)
    component of the direction mapped from [-1, 1] to [0, 1]. Debug modes
    return a flat white (DIFFUSE) or black (NORMALS) sky.
    """
    color = vec3(0.0, 0.0, 0.0)
    if debug_mode == int(DebugMode.DIFFUSE):
        color = vec3(1.0, 1.0, 1.0)
    elif debug_mode == int(DebugMode.NONE):
        alpha = (direction.z + 1.0) * 0.5
        bottom = vec3(SKY_BOTTOM[0], SKY_BOTTOM[1], SKY_BOTTOM[2])
        top = vec3(SKY_TOP[0], SKY_TOP[1], SKY_TOP[2])
        color = (1.0 - alpha) * bottom + alpha * top
    return color


@ti.func
def trace_path(ray: Ray, scatter_limit: ti.i32, debug_mode: ti.i32, stream: ti.i32):
    """Trace one camera sample through the scene.

    Args:
        ray: The primary ray.
        scatter_limit: Maximum path depth; deeper paths contribute black.
        debug_mode: DebugMode value overriding every material.
        stream: Random stream of the calling pixel task.

    Returns:
        A tuple (color, samples, intersections, scatters, max_depth) where
        samples counts the path vertices evaluated within the limit and
        max_depth is the deepest such vertex.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    current = ray

    samples = 0
    intersections = 0
    scatters = 0
    max_depth = 0

    depth = 0
    active = 1

    # At most scatter_limit + 1 scatters followed by the terminal check
    for _ in range(scatter_limit + 2):
        if active == 1:
            if depth > scatter_limit:
                color = vec3(0.0, 0.0, 0.0)
                active = 0
            else:
                samples += 1
                max_depth = depth
                intersections += 1
                rec = intersect_scene(current, T_MIN, T_MAX)

                if rec.hit == 0:
                    color = throughput * sky_color(current.direction, debug_mode)
                    active = 0
                else:
                    mat_id = rec.material_id
                    mat_type = get_material_type(mat_id)
                    albedo = material_albedos[mat_id]
                    roughness = material_roughness[mat_id]
                    refractive_index = material_refractive_indices[mat_id]

                    if debug_mode == int(DebugMode.DIFFUSE):
                        mat_type = int(MaterialType.DIFFUSE)
                        albedo = vec3(DEBUG_DIFFUSE_ALBEDO)
                    elif debug_mode == int(DebugMode.NORMALS):
                        mat_type = int(MaterialType.NORMALS)

                    direction, attenuation, did_scatter = scatter_material(
                        mat_type,
                        albedo,
                        roughness,
                        refractive_index,
                        current.direction,
                        rec.normal,
                        depth,
                        stream,
                    )

                    if did_scatter == 1:
                        scatters += 1
                        throughput *= attenuation
                        current = make_ray(rec.point, direction, current.time)
                        depth += 1
                    else:
                        color = throughput * attenuation
                        active = 0

    return color, samples, intersections, scatters, max_depth


@ti.func
def _sanitize(color: vec3) -> vec3:
    """Clamp to [0, 1] and replace NaN/Inf with zero."""
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    return tm.clamp(result, 0.0, 1.0)


@ti.func
def render_pixel(
    x: ti.i32,
    y: ti.i32,
    width: ti.i32,
    height: ti.i32,
    antialias_samples: ti.i32,
    scatter_limit: ti.i32,
    debug_mode: ti.i32,
):
    """Render one pixel and write its color and statistics.

    Args:
        x: Pixel x-coordinate (0 = left).
        y: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.
        antialias_samples: Subpixel grid size N.
        scatter_limit: Maximum path depth.
        debug_mode: DebugMode value.
    """
    stream = y * width + x
    step = 1.0 / ti.cast(antialias_samples, ti.f32)

    color = vec3(0.0, 0.0, 0.0)
    subpixels = 0
    samples = 0
    intersections = 0
    scatters = 0
    max_depth = 0

    for sx, sy in ti.ndrange(antialias_samples, antialias_samples):
        u = (ti.cast(x, ti.f32) + ti.cast(sx, ti.f32) * step) / ti.cast(width, ti.f32)
        v = (ti.cast(y, ti.f32) + ti.cast(sy, ti.f32) * step) / ti.cast(height, ti.f32)
        ray = get_ray(u, v, stream)

        sample, path_samples, path_intersections, path_scatters, path_depth = trace_path(
            ray, scatter_limit, debug_mode, stream
        )
        color += sample
        subpixels += 1
        samples += path_samples
        intersections += path_intersections
        scatters += path_scatters
        max_depth = ti.max(max_depth, path_depth)

    color /= ti.cast(antialias_samples * antialias_samples, ti.f32)
    color = tm.pow(_sanitize(color), 1.0 / GAMMA)

    _pixel_buffer[x, y] = tm.vec4(color.x, color.y, color.z, 1.0)
    _stat_subpixels[x, y] = subpixels
    _stat_samples[x, y] = samples
    _stat_intersections[x, y] = intersections
    _stat_scatters[x, y] = scatters
    _stat_max_depth[x, y] = max_depth


@ti.kernel
def _render_band(
    width: ti.i32,
    height: ti.i32,
    y_begin: ti.i32,
    y_end: ti.i32,
    antialias_samples: ti.i32,
    scatter_limit: ti.i32,
    debug_mode: ti.i32,
):
    for x, y in ti.ndrange(width, (y_begin, y_end)):
        render_pixel(x, y, width, height, antialias_samples, scatter_limit, debug_mode)


# =============================================================================
# Public Rendering API
# =============================================================================


def render_rows(
    y_begin: int,
    y_end: int,
    antialias_samples: int,
    scatter_limit: int,
    debug_mode: DebugMode = DebugMode.NONE,
) -> None:
    """Render the rows [y_begin, y_end) of the render target.

    Rows are counted from the bottom of the image. The camera, scene and
    random streams must already be set up.

    Raises:
        RuntimeError: If the render target or camera has not been set up.
        ValueError: If the row range is outside the image.
    """
    _check_render_target_initialized()
    check_camera_ready()

    width, height = get_image_dimensions()
    if not 0 <= y_begin <= y_end <= height:
        raise ValueError(f"Row range [{y_begin}, {y_end}) is outside [0, {height})")
    if y_begin == y_end:
        return
    _render_band(
        width, height, y_begin, y_end, antialias_samples, scatter_limit, int(debug_mode)
    )


def get_image_numpy() -> np.ndarray:
    """Get the rendered image as a NumPy array.

    The array shape is (height, width, 4) with dtype float32. Row 0 is the
    top of the image.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    image = _pixel_buffer.to_numpy()[:width, :height, :]

    # Transpose from (width, height, 4) to (height, width, 4) for standard image format
    image = np.transpose(image, (1, 0, 2))

    # Flip vertically (Taichi uses bottom-left origin, images use top-left)
    image = np.flipud(image)

    return np.ascontiguousarray(image, dtype=np.float32)


def collect_statistics() -> Statistics:
    """Reduce the per-pixel counters of the active image into one record.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    return Statistics.from_arrays(
        _stat_subpixels.to_numpy()[:width, :height],
        _stat_samples.to_numpy()[:width, :height],
        _stat_intersections.to_numpy()[:width, :height],
        _stat_scatters.to_numpy()[:width, :height],
        _stat_max_depth.to_numpy()[:width, :height],
    )


def pixel_statistics(x: int, y: int) -> Statistics:
    """Get the statistics of one rendered pixel.

    Args:
        x: Pixel x-coordinate (0 = left).
        y: Pixel y-coordinate (0 = bottom).

    Raises:
        RuntimeError: If render target has not been set up.
        IndexError: If the pixel is outside the image.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    if not (0 <= x < width and 0 <= y < height):
        raise IndexError(f"Pixel ({x}, {y}) is outside the {width}x{height} image")
    return Statistics(
        pixels=1,
        subpixel_samples=int(_stat_subpixels[x, y]),
        path_samples=int(_stat_samples[x, y]),
        intersections=int(_stat_intersections[x, y]),
        scatter_events=int(_stat_scatters[x, y]),
        max_depth_reached=int(_stat_max_depth[x, y]),
    )


_trace_color = ti.Vector.field(3, dtype=ti.f32, shape=())
_trace_counts = ti.field(dtype=ti.i32, shape=4)


@ti.kernel
def _trace_single(
    origin: vec3,
    direction: vec3,
    time: ti.f32,
    scatter_limit: ti.i32,
    debug_mode: ti.i32,
    stream: ti.i32,
):
    ray = make_ray(origin, direction, time)
    color, samples, intersections, scatters, max_depth = trace_path(
        ray, scatter_limit, debug_mode, stream
    )
    _trace_color[None] = color
    _trace_counts[0] = samples
    _trace_counts[1] = intersections
    _trace_counts[2] = scatters
    _trace_counts[3] = max_depth


def trace_single_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    scatter_limit: int = 8,
    debug_mode: DebugMode = DebugMode.NONE,
    stream: int = 0,
    time: float = 0.0,
) -> tuple[tuple[float, float, float], Statistics]:
    """Trace one path from Python, without gamma correction.

    Intended for testing and debugging individual paths.

    Args:
        origin: Ray origin.
        direction: Ray direction (unit length).
        scatter_limit: Maximum path depth.
        debug_mode: Material override.
        stream: Random stream to draw from.
        time: Shutter time of the ray.

    Returns:
        Tuple of (linear RGB color, statistics of the path).
    """
    _trace_single(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        time,
        scatter_limit,
        int(debug_mode),
        stream,
    )
    color = _trace_color[None]
    stats = Statistics(
        path_samples=int(_trace_counts[0]),
        intersections=int(_trace_counts[1]),
        scatter_events=int(_trace_counts[2]),
        max_depth_reached=int(_trace_counts[3]),
    )
    return (float(color[0]), float(color[1]), float(color[2])), stats
