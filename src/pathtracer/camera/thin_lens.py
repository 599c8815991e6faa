"""Thin-lens camera with depth of field and shutter-time sampling.

User-facing CameraParameters are compiled once per render into an immutable
CompiledCamera for a given aspect ratio, then uploaded to Taichi fields.
Compilation validates every parameter and raises a distinct CameraError
subclass per violated constraint, so a render never starts with a broken
camera.

Basis construction (world axes: forward = +Y, right = +X, up = +Z):
    forward = normalize(look_at - origin)
    right   = normalize(forward x up)
    up'     = right x forward

The view plane sits at the focus distance in front of the eye:
    half_height = tan(fov / 2), half_width = half_height * aspect
    corner = origin + forward*fd - right*half_width*fd - up'*half_height*fd
    width  = right * 2 * half_width * fd
    height = up' * 2 * half_height * fd

Each ray starts at a random point of the lens disc (radius = aperture) and
passes through the view-plane point for (u, v), so only geometry at the
focus distance is sharp. Each ray also carries a uniformly drawn time inside
the shutter interval for motion blur.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.thin_lens import CameraParameters, setup_camera
    >>> params = CameraParameters(origin=(0.0, -0.6, 0.0), look_at=(0.0, 1.0, -0.2),
    ...                           field_of_view=55.0)
    >>> setup_camera(params.build(16.0 / 9.0))
"""

import logging
import math
from dataclasses import asdict, dataclass
from typing import Any, Optional

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import WORLD_FORWARD, WORLD_UP, Ray, make_ray
from pathtracer.core.sampler import random_f32, random_in_unit_disc

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

Vector3 = tuple[float, float, float]


# =============================================================================
# Errors
# =============================================================================


class CameraError(ValueError):
    """Base class for invalid camera configurations."""


class InvalidFieldOfViewError(CameraError):
    """Field of view is not strictly between 0 and 180 degrees."""


class InvalidApertureError(CameraError):
    """Aperture radius is negative."""


class InvalidShutterError(CameraError):
    """Shutter closes before it opens."""


class InvalidFocusDistanceError(CameraError):
    """Focus distance is not positive."""


class InvalidAspectRatioError(CameraError):
    """Aspect ratio is not positive."""


class InvalidOrientationError(CameraError):
    """The viewing direction is undefined or parallel to the up direction."""


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass
class CameraParameters:
    """User-facing camera configuration.

    Attributes:
        origin: Eye position in world space.
        look_at: Target point. None looks straight ahead along +Y.
        up: Approximate up direction used to orient the image.
        field_of_view: Vertical field of view in degrees, in (0, 180).
        focus_distance: Distance from the eye to the plane in focus, > 0.
        aperture_radius: Lens radius, >= 0. Zero gives a pinhole camera.
        shutter_open: Time at which the shutter opens.
        shutter_close: Time at which the shutter closes, >= shutter_open.
    """

    origin: Vector3 = (0.0, 0.0, 0.0)
    look_at: Optional[Vector3] = None
    up: Vector3 = WORLD_UP
    field_of_view: float = 90.0
    focus_distance: float = 1.0
    aperture_radius: float = 0.0
    shutter_open: float = 0.0
    shutter_close: float = 0.0

    def target(self) -> Vector3:
        """The point the camera looks at, resolving the default direction."""
        if self.look_at is not None:
            return tuple(float(c) for c in self.look_at)
        return tuple(o + f for o, f in zip(self.origin, WORLD_FORWARD))

    def focus_on_look_at(self, offset: float = 0.0) -> None:
        """Set the focus distance to the look-at distance plus an offset.

        Raises:
            InvalidFocusDistanceError: If no look-at target is set.
        """
        if self.look_at is None:
            raise InvalidFocusDistanceError("Cannot focus on look-at without a look-at target")
        distance = math.dist(self.origin, self.look_at)
        self.focus_distance = distance + offset

    def build(self, aspect_ratio: float) -> "CompiledCamera":
        """Validate the parameters and compile them for an aspect ratio.

        Args:
            aspect_ratio: Image width divided by height.

        Returns:
            The compiled camera.

        Raises:
            InvalidFieldOfViewError: If fov is not in (0, 180).
            InvalidApertureError: If the aperture is negative.
            InvalidShutterError: If the shutter closes before it opens.
            InvalidFocusDistanceError: If the focus distance is not positive.
            InvalidAspectRatioError: If the aspect ratio is not positive.
            InvalidOrientationError: If look_at equals origin or the view
                direction is parallel to up.
        """
        if not (math.isfinite(self.field_of_view) and 0.0 < self.field_of_view < 180.0):
            raise InvalidFieldOfViewError(
                f"Field of view {self.field_of_view} must be in (0, 180) degrees"
            )
        if not (math.isfinite(self.aperture_radius) and self.aperture_radius >= 0.0):
            raise InvalidApertureError(f"Aperture radius {self.aperture_radius} must be >= 0")
        if not self.shutter_close >= self.shutter_open:
            raise InvalidShutterError(
                f"Shutter close {self.shutter_close} is before shutter open {self.shutter_open}"
            )
        if not (math.isfinite(self.focus_distance) and self.focus_distance > 0.0):
            raise InvalidFocusDistanceError(f"Focus distance {self.focus_distance} must be > 0")
        if not (math.isfinite(aspect_ratio) and aspect_ratio > 0.0):
            raise InvalidAspectRatioError(f"Aspect ratio {aspect_ratio} must be > 0")

        origin = np.array(self.origin, dtype=np.float64)
        look_at = np.array(self.target(), dtype=np.float64)
        up = np.array(self.up, dtype=np.float64)

        forward = look_at - origin
        forward_length = np.linalg.norm(forward)
        if not forward_length > 0.0:
            raise InvalidOrientationError("Look-at target coincides with the camera origin")
        forward = forward / forward_length

        right = np.cross(forward, up)
        right_length = np.linalg.norm(right)
        if not right_length > 1e-8:
            raise InvalidOrientationError(
                f"View direction {tuple(forward)} is parallel to up {self.up}"
            )
        right = right / right_length
        true_up = np.cross(right, forward)

        half_height = math.tan(math.radians(self.field_of_view) / 2.0)
        half_width = half_height * aspect_ratio
        fd = self.focus_distance

        corner = origin + forward * fd - right * half_width * fd - true_up * half_height * fd
        width = right * 2.0 * half_width * fd
        height = true_up * 2.0 * half_height * fd

        def _t(v: np.ndarray) -> Vector3:
            return (float(v[0]), float(v[1]), float(v[2]))

        return CompiledCamera(
            origin=_t(origin),
            forward=_t(forward),
            right=_t(right),
            up=_t(true_up),
            corner=_t(corner),
            width=_t(width),
            height=_t(height),
            aperture_radius=float(self.aperture_radius),
            shutter_open=float(self.shutter_open),
            shutter_close=float(self.shutter_close),
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for key in ("origin", "look_at", "up"):
            if data[key] is not None:
                data[key] = list(data[key])
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CameraParameters":
        """Build camera parameters from a plain dictionary.

        Raises:
            TypeError: If the dictionary contains unknown keys.
        """
        values = dict(data)
        for key in ("origin", "look_at", "up"):
            if values.get(key) is not None:
                values[key] = tuple(float(c) for c in values[key])
        return cls(**values)


@dataclass(frozen=True)
class CompiledCamera:
    """Immutable, ready-to-sample camera for one aspect ratio.

    Attributes:
        origin: Eye position.
        forward: Unit viewing direction.
        right: Unit right vector of the image plane.
        up: Unit up vector of the image plane (orthogonal to forward).
        corner: Lower-left corner of the view plane at the focus distance.
        width: Vector spanning the view plane horizontally.
        height: Vector spanning the view plane vertically.
        aperture_radius: Lens radius.
        shutter_open: Shutter open time.
        shutter_close: Shutter close time.
    """

    origin: Vector3
    forward: Vector3
    right: Vector3
    up: Vector3
    corner: Vector3
    width: Vector3
    height: Vector3
    aperture_radius: float
    shutter_open: float
    shutter_close: float


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_forward = ti.Vector.field(3, dtype=ti.f32, shape=())
_view_corner = ti.Vector.field(3, dtype=ti.f32, shape=())
_view_width = ti.Vector.field(3, dtype=ti.f32, shape=())
_view_height = ti.Vector.field(3, dtype=ti.f32, shape=())
_aperture_radius = ti.field(dtype=ti.f32, shape=())
_shutter_open = ti.field(dtype=ti.f32, shape=())
_shutter_close = ti.field(dtype=ti.f32, shape=())
_camera_ready = ti.field(dtype=ti.i32, shape=())


def setup_camera(camera: CompiledCamera) -> None:
    """Upload a compiled camera to the Taichi fields used by get_ray().

    Must be called from Python before rendering.
    """
    _camera_origin[None] = list(camera.origin)
    _camera_right[None] = list(camera.right)
    _camera_up[None] = list(camera.up)
    _camera_forward[None] = list(camera.forward)
    _view_corner[None] = list(camera.corner)
    _view_width[None] = list(camera.width)
    _view_height[None] = list(camera.height)
    _aperture_radius[None] = camera.aperture_radius
    _shutter_open[None] = camera.shutter_open
    _shutter_close[None] = camera.shutter_close
    _camera_ready[None] = 1
    logger.debug("Camera uploaded: origin=%s forward=%s", camera.origin, camera.forward)


def reset_camera() -> None:
    """Mark the camera as not set up."""
    _camera_ready[None] = 0


def is_camera_ready() -> bool:
    return bool(_camera_ready[None])


def check_camera_ready() -> None:
    """Raise if no camera has been uploaded."""
    if _camera_ready[None] == 0:
        raise RuntimeError("Camera not set up. Call setup_camera() first.")


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32, stream: ti.i32) -> Ray:
    """Generate a camera ray through normalized image coordinates (u, v).

    The coordinates are normalized:
    - u = 0: left edge of image, u = 1: right edge
    - v = 0: bottom edge of image, v = 1: top edge

    Args:
        u: Horizontal coordinate in [0, 1].
        v: Vertical coordinate in [0, 1].
        stream: Random stream of the calling pixel task.

    Returns:
        A Ray from a random lens point toward the view-plane point, with a
        random time inside the shutter interval.
    """
    lens = random_in_unit_disc(stream) * _aperture_radius[None]
    offset = _camera_right[None] * lens.x + _camera_up[None] * lens.y
    origin = _camera_origin[None] + offset

    target = _view_corner[None] + u * _view_width[None] + v * _view_height[None]
    direction = tm.normalize(target - origin)

    time = _shutter_open[None] + random_f32(stream) * (_shutter_close[None] - _shutter_open[None])

    return make_ray(origin, direction, time)


_sampled_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_sampled_direction = ti.Vector.field(3, dtype=ti.f32, shape=())
_sampled_time = ti.field(dtype=ti.f32, shape=())


@ti.kernel
def _sample_ray_kernel(u: ti.f32, v: ti.f32, stream: ti.i32):
    ray = get_ray(u, v, stream)
    _sampled_origin[None] = ray.origin
    _sampled_direction[None] = ray.direction
    _sampled_time[None] = ray.time


def sample_camera_ray(u: float, v: float, stream: int = 0) -> tuple[Vector3, Vector3, float]:
    """Generate one camera ray from Python.

    Returns:
        Tuple of (origin, direction, time).

    Raises:
        RuntimeError: If no camera has been set up.
    """
    check_camera_ready()
    _sample_ray_kernel(u, v, stream)
    o = _sampled_origin[None]
    d = _sampled_direction[None]
    return (
        (float(o[0]), float(o[1]), float(o[2])),
        (float(d[0]), float(d[1]), float(d[2])),
        float(_sampled_time[None]),
    )


def get_camera_info() -> dict[str, Any]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, basis vectors, view-plane vectors, aperture
        and shutter interval.
    """

    def _tuple(field) -> Vector3:
        vec = field[None]
        return (float(vec[0]), float(vec[1]), float(vec[2]))

    return {
        "origin": _tuple(_camera_origin),
        "forward": _tuple(_camera_forward),
        "right": _tuple(_camera_right),
        "up": _tuple(_camera_up),
        "corner": _tuple(_view_corner),
        "width": _tuple(_view_width),
        "height": _tuple(_view_height),
        "aperture_radius": float(_aperture_radius[None]),
        "shutter": (float(_shutter_open[None]), float(_shutter_close[None])),
    }
