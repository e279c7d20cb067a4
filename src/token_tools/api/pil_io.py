"""
PIL IO module.

Decoding of layer bitmap sources and encoding of the flattened surface.
"""
import base64
import binascii
import io
import logging
import os
from typing import Optional, Union

from PIL import Image, UnidentifiedImageError

from token_tools.constants import MAX_EXPORT_BYTES, ExportFormat

logger = logging.getLogger(__name__)

Source = Union[str, bytes, os.PathLike]


class DecodeError(ValueError):
    """Raised when an image source is missing, unreadable or corrupt."""


def read_source(source: Source) -> bytes:
    """Return the encoded bytes behind a bitmap source.

    A source is raw bytes, a ``data:`` URL, or a file path.
    """
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    if isinstance(source, str) and source.startswith("data:"):
        header, _, payload = source.partition(",")
        if not header.endswith(";base64"):
            raise DecodeError("Only base64 data URLs are supported")
        try:
            return base64.b64decode(payload, validate=True)
        except (binascii.Error, ValueError) as e:
            raise DecodeError("Broken data URL: %s" % e) from e
    try:
        with open(source, "rb") as f:
            return f.read()
    except (OSError, TypeError) as e:
        raise DecodeError("Cannot read %r: %s" % (source, e)) from e


def decode(data: bytes) -> Image.Image:
    """Decode encoded image bytes into a fully loaded RGBA image."""
    try:
        with Image.open(io.BytesIO(data)) as image:
            image.load()
            return _post_process(image)
    except (
        UnidentifiedImageError,
        Image.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ) as e:
        raise DecodeError("Cannot decode image: %s" % e) from e


def _post_process(image: Image.Image) -> Image.Image:
    if image.mode == "RGBA":
        return image.copy()
    if image.mode not in ("1", "L", "LA", "P", "RGB"):
        logger.debug("%s converted to RGBA" % image.mode)
    return image.convert("RGBA")


def get_format(value: Union[str, ExportFormat]) -> ExportFormat:
    """Convert a format name such as ``"png"`` or ``"jpg"`` to ExportFormat."""
    if isinstance(value, ExportFormat):
        return value
    name = value.upper()
    return ExportFormat({"JPG": "JPEG"}.get(name, name))


def crop_square(image: Image.Image) -> Image.Image:
    """Center-crop an image to a 1:1 aspect ratio."""
    size = min(image.width, image.height)
    left = (image.width - size) // 2
    top = (image.height - size) // 2
    return image.crop((left, top, left + size, top + size))


def to_data_url(image: Image.Image) -> str:
    """Encode an image as a PNG ``data:`` URL."""
    return "data:image/png;base64," + base64.b64encode(
        encode(image, ExportFormat.PNG, max_bytes=None)
    ).decode("ascii")


def encode(
    image: Image.Image,
    format: Union[str, ExportFormat] = ExportFormat.PNG,
    size: Optional[int] = None,
    quality: int = 95,
    max_bytes: Optional[int] = MAX_EXPORT_BYTES,
) -> bytes:
    """
    Encode an image for download.

    :param format: ``PNG`` (lossless), ``WEBP`` or ``JPEG``.
    :param size: Optional square output size in pixels.
    :param quality: Initial quality for lossy formats.
    :param max_bytes: Byte budget. Lossy formats are re-encoded at lower
        quality until they fit; PNG is only reported when it does not fit.
    """
    format = get_format(format)
    if size is not None and image.size != (size, size):
        image = image.resize((size, size), Image.Resampling.LANCZOS)
    if format == ExportFormat.JPEG:
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.getchannel("A") if image.mode == "RGBA" else None)
        image = background

    data = _save(image, format, quality)
    while (
        max_bytes is not None
        and len(data) > max_bytes
        and format != ExportFormat.PNG
        and quality > 10
    ):
        quality -= 10
        logger.debug("Re-encoding %s at quality %d" % (format.value, quality))
        data = _save(image, format, quality)

    if max_bytes is not None and len(data) > max_bytes:
        logger.warning(
            "Exported image is %.2fMB, over the %.2fMB budget"
            % (len(data) / 1048576.0, max_bytes / 1048576.0)
        )
    return data


def _save(image: Image.Image, format: ExportFormat, quality: int) -> bytes:
    with io.BytesIO() as f:
        if format == ExportFormat.PNG:
            image.save(f, format="PNG", optimize=True)
        else:
            image.save(f, format=format.value, quality=quality)
        return f.getvalue()
