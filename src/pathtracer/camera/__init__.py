"""Camera module for view and ray generation.

This module provides the thin-lens camera model for generating primary rays:

Components:
    thin_lens: Camera with depth of field and shutter-time sampling

Camera responsibilities:
    - Validate user parameters and compile them for an aspect ratio
    - Transform (u, v) image coordinates to world-space rays
    - Sample the lens disc for depth of field
    - Sample the shutter interval for motion blur

Ray generation uses normalized device coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    CameraError,
    CameraParameters,
    CompiledCamera,
    InvalidApertureError,
    InvalidAspectRatioError,
    InvalidFieldOfViewError,
    InvalidFocusDistanceError,
    InvalidOrientationError,
    InvalidShutterError,
    get_camera_info,
    get_ray,
    sample_camera_ray,
    setup_camera,
)

__all__ = [
    "CameraParameters",
    "CompiledCamera",
    "CameraError",
    "InvalidFieldOfViewError",
    "InvalidApertureError",
    "InvalidShutterError",
    "InvalidFocusDistanceError",
    "InvalidAspectRatioError",
    "InvalidOrientationError",
    "setup_camera",
    "get_ray",
    "sample_camera_ray",
    "get_camera_info",
]
