"""Image output for rendered results.

Components:
    export: 8-bit quantization and PNG/PPM export via Pillow
"""

from .export import compute_rmse, image_to_uint8, save_image, save_png

__all__ = [
    "image_to_uint8",
    "save_png",
    "save_image",
    "compute_rmse",
]
