"""Image export utilities for rendered images.

Rendered images are float32 RGBA arrays of shape (height, width, 4) with
gamma already applied, so export only quantizes to 8 bits and hands the
pixels to Pillow.

Supported formats:
    - PNG (8-bit RGBA)
    - PPM (8-bit RGB, alpha dropped)

Example:
    >>> from pathtracer.preview.export import save_image
    >>> save_image(result.image, "output.png")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Pillow format name and channel count per file extension
_FORMATS = {
    ".png": ("PNG", 4),
    ".ppm": ("PPM", 3),
}


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Quantize a [0, 1] float image to 8 bits per channel.

    Values are clamped to [0, 1] and rounded to the nearest level.

    Args:
        image: Float image array of shape (H, W, C).

    Returns:
        Image array of the same shape with dtype uint8.
    """
    clipped = np.clip(np.nan_to_num(image, nan=0.0), 0.0, 1.0)
    return np.rint(clipped * 255.0).astype(np.uint8)


def _check_image(image: npt.NDArray[np.floating]) -> None:
    if image.ndim != 3 or image.shape[2] not in (3, 4):
        raise ValueError(f"Expected an (H, W, 3) or (H, W, 4) image, got shape {image.shape}")


def save_png(image: npt.NDArray[np.floating], filepath: PathLike) -> None:
    """Save an RGB or RGBA float image as an 8-bit PNG file.

    Raises:
        ValueError: If the array is not an RGB or RGBA image.
    """
    _check_image(image)
    pixels = image_to_uint8(image)
    PILImage.fromarray(pixels).save(filepath, format="PNG")


def save_image(image: npt.NDArray[np.floating], filepath: PathLike) -> None:
    """Save a float image, choosing the format from the file extension.

    Raises:
        ValueError: If the extension is not supported or the array is not
            an RGB or RGBA image.
    """
    _check_image(image)
    suffix = Path(filepath).suffix.lower()
    if suffix not in _FORMATS:
        raise ValueError(f"Unsupported image format {suffix!r}, use one of {sorted(_FORMATS)}")
    format_name, channels = _FORMATS[suffix]

    pixels = image_to_uint8(image)
    if channels == 3:
        pixels = np.ascontiguousarray(pixels[:, :, :3])
    elif pixels.shape[2] == 3:
        alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
        pixels = np.concatenate([pixels, alpha], axis=2)

    # Pillow infers RGB or RGBA from the channel count
    PILImage.fromarray(pixels).save(filepath, format=format_name)
    logger.info("Saved %dx%d image to %s", pixels.shape[1], pixels.shape[0], filepath)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Compute root mean squared error between two images.

    Args:
        image_a: First image array.
        image_b: Second image array (must have same shape as image_a).

    Returns:
        RMSE value (lower is more similar).

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
