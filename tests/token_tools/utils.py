import io
import logging
from typing import Any, Tuple

import numpy as np
from PIL import Image

from token_tools.api.document import Document
from token_tools.api.resources import BitmapLoader, FontLoader
from token_tools.composite import composite_pil

from ..conftest import TEST_FONT_FAMILY

logging.basicConfig(level=logging.DEBUG)


def solid_image(
    size: Tuple[int, int] = (32, 32), color: Tuple[int, ...] = (255, 0, 0, 255)
) -> Image.Image:
    return Image.new("RGBA", size, color)


def pattern_image(size: Tuple[int, int] = (32, 32), alpha: int = 255) -> Image.Image:
    """Opaque image with every pixel different."""
    width, height = size
    Y, X = np.mgrid[0:height, 0:width]
    data = np.stack(
        [
            (X * 7 + Y * 3) % 256,
            (X * 5 + 64) % 256,
            (Y * 11 + 32) % 256,
            np.full_like(X, alpha),
        ],
        axis=2,
    ).astype(np.uint8)
    return Image.fromarray(data, "RGBA")


def png_bytes(image: Image.Image) -> bytes:
    with io.BytesIO() as f:
        image.save(f, format="PNG")
        return f.getvalue()


def square_document(size: int = 32, **kwargs: Any) -> Document:
    kwargs.setdefault("background_color", "transparent")
    return Document(canvas_size=size, canvas_shape="square", **kwargs)


def render(document: Document) -> Image.Image:
    return composite_pil(
        document, BitmapLoader(), FontLoader(default_family=TEST_FONT_FAMILY)
    )


def pixels(image: Image.Image) -> np.ndarray:
    return np.asarray(image.convert("RGBA"), dtype=np.float32) / 255.0
