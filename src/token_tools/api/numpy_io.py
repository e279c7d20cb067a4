"""
NumPy IO module.

Conversion between PIL images and the float32 ``(height, width, channels)``
arrays used by the compositing engine. Color is kept straight (not
premultiplied) in [0, 1]; alpha is a separate single-channel array.
"""
import logging

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


def get_array(image: Image.Image) -> tuple[np.ndarray, np.ndarray]:
    """Return (color, alpha) arrays of an image."""
    if image.mode != "RGBA":
        image = image.convert("RGBA")
    data = np.asarray(image, dtype=np.float32) / 255.0
    return data[:, :, :3], data[:, :, 3:4]


def get_mask(image: Image.Image) -> np.ndarray:
    """Return a single channel image as a (height, width, 1) coverage array."""
    if image.mode != "L":
        image = image.convert("L")
    return np.expand_dims(np.asarray(image, dtype=np.float32) / 255.0, 2)


def to_uint8(values: np.ndarray) -> np.ndarray:
    return np.clip(np.round(255.0 * values), 0, 255).astype(np.uint8)


def to_pil(color: np.ndarray, alpha: np.ndarray) -> Image.Image:
    """Build an RGBA image from (color, alpha) arrays."""
    if color.shape[2] == 1:
        color = np.repeat(color, 3, axis=2)
    data = np.concatenate((color, alpha), axis=2)
    return Image.fromarray(to_uint8(data), "RGBA")
