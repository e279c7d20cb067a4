"""Composite implementation for document rendering and blending."""

import logging
import math
from typing import Optional, Union, cast

import numpy as np
from PIL import Image

from token_tools.api import numpy_io, pil_io
from token_tools.api.adjustments import RenderRecipe, get_recipe
from token_tools.api.document import Document
from token_tools.api.layers import ImageLayer, Layer, ShapeLayer, TextLayer
from token_tools.api.resources import BitmapLoader, DecodeError, Font, FontLoader
from token_tools.composite import paint, rim, text, utils, vector
from token_tools.composite.blend import get_blend_func
from token_tools.composite.filters import apply_filters
from token_tools.constants import (
    MAX_EXPORT_BYTES,
    TRANSPARENT,
    BlendMode,
    ExportFormat,
)

logger = logging.getLogger(__name__)


def composite_pil(
    document: Document,
    bitmap_loader: Optional[BitmapLoader] = None,
    font_loader: Optional[FontLoader] = None,
) -> Image.Image:
    """
    Composite a document and return an RGBA PIL Image.

    Args:
        document: Document snapshot to render
        bitmap_loader: Loader used to decode image layer sources. A fresh
            loader is used when omitted.
        font_loader: Loader used to resolve text layer fonts.

    Returns:
        PIL Image of ``canvas_size`` square pixels

    Note:
        - Requires optional composite dependencies (aggdraw, scipy,
          scikit-image) for blur filters, text effects, rim patterns and
          shape layers
    """
    color, _, alpha = composite(document, bitmap_loader, font_loader)
    return numpy_io.to_pil(color, alpha)


def composite(
    document: Document,
    bitmap_loader: Optional[BitmapLoader] = None,
    font_loader: Optional[FontLoader] = None,
) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Composite a document and return NumPy arrays.

    Layers are resolved synchronously; see
    :py:class:`~token_tools.composite.renderer.Renderer` for the awaitable
    version.

    Returns:
        Tuple of (color, shape, alpha) as float32 ndarrays with shape
        (height, width, channels), values in [0.0, 1.0]

    Examples:
        >>> from token_tools.api.document import Document
        >>> color, shape, alpha = composite(Document.load('token.json'))
    """
    bitmap_loader = bitmap_loader or BitmapLoader()
    font_loader = font_loader or FontLoader()

    compositor = Compositor.for_document(document)
    for layer in document.ordered_layers():
        if not layer.is_visible():
            logger.debug("Ignore %s" % layer)
            continue
        bitmap, font = None, None
        if isinstance(layer, ImageLayer):
            bitmap = load_bitmap(bitmap_loader, layer)
        elif isinstance(layer, TextLayer):
            font = font_loader.resolve(layer.font_family, layer.font_size)
        compositor.apply(layer, bitmap=bitmap, font=font)
    return compositor.finish()


def load_bitmap(loader: BitmapLoader, layer: ImageLayer) -> Optional[Image.Image]:
    """Decode the bitmap of a layer, or None when it cannot be decoded."""
    if layer.source is None:
        logger.debug("No source for %s" % layer)
        return None
    try:
        return loader.get(layer.source)
    except DecodeError as e:
        logger.debug("Blank region for %s: %s" % (layer, e))
        return None


def export_image(
    image: Image.Image,
    format: Union[str, ExportFormat] = ExportFormat.PNG,
    size: Optional[int] = None,
    max_bytes: Optional[int] = MAX_EXPORT_BYTES,
) -> bytes:
    """Encode a flattened surface for download."""
    return pil_io.encode(image, format, size=size, max_bytes=max_bytes)


def paste(
    viewport: tuple[int, int, int, int],
    bbox: tuple[int, int, int, int],
    values: np.ndarray,
) -> np.ndarray:
    """Change to the specified viewport."""
    shape = (viewport[3] - viewport[1], viewport[2] - viewport[0], values.shape[2])
    view = np.zeros(shape, dtype=np.float32)
    inter = utils.intersect(viewport, bbox)
    if inter == (0, 0, 0, 0):
        return view

    v = (
        inter[0] - viewport[0],
        inter[1] - viewport[1],
        inter[2] - viewport[0],
        inter[3] - viewport[1],
    )
    b = (inter[0] - bbox[0], inter[1] - bbox[1], inter[2] - bbox[0], inter[3] - bbox[1])
    view[v[1] : v[3], v[0] : v[2], :] = values[b[1] : b[3], b[0] : b[2], :]
    return view


def place_image(
    image: Image.Image, layer: Layer, size: int
) -> tuple[np.ndarray, np.ndarray]:
    """
    Draw a bitmap into the layer box of a ``size`` square canvas, rotated
    about the layer center. Returns (color, alpha).
    """
    box = (max(1, int(round(layer.width))), max(1, int(round(layer.height))))
    if image.size != box:
        image = image.resize(box, Image.Resampling.LANCZOS)

    if not layer.rotation % 360 and layer.x == int(layer.x) and layer.y == int(layer.y):
        color, alpha = numpy_io.get_array(image)
        bbox = (int(layer.x), int(layer.y), int(layer.x) + box[0], int(layer.y) + box[1])
        viewport = (0, 0, size, size)
        return paste(viewport, bbox, color), paste(viewport, bbox, alpha)

    # Inverse mapping from canvas pixels to layer pixels.
    theta = math.radians(layer.rotation)
    c, s = math.cos(theta), math.sin(theta)
    cx, cy = layer.center
    data = (
        c,
        s,
        -c * cx - s * cy + box[0] / 2.0,
        -s,
        c,
        s * cx - c * cy + box[1] / 2.0,
    )
    premultiplied = image.convert("RGBa").transform(
        (size, size), Image.Transform.AFFINE, data, resample=Image.Resampling.BICUBIC
    )
    return numpy_io.get_array(premultiplied.convert("RGBA"))


class Compositor(object):
    """Composite context.

    The surface starts fully transparent. Sources are clipped by the clip
    mask set with :py:meth:`clip`.

    Example::

        compositor = Compositor(500)
        compositor.clip(utils.disc(500, 230))
        for layer in document.ordered_layers():
            compositor.apply(layer, bitmap=..., font=...)
        color, shape, alpha = compositor.finish()
    """

    def __init__(self, size: int):
        self._size = int(size)
        self._clip_mask: Union[float, np.ndarray] = 1.0
        self._shape_g = np.zeros((self._size, self._size, 1), dtype=np.float32)
        self._alpha_g = np.zeros((self._size, self._size, 1), dtype=np.float32)
        self._color = np.zeros((self._size, self._size, 3), dtype=np.float32)

    @classmethod
    def for_document(cls, document: Document) -> "Compositor":
        """Create a compositor with the frame of a document drawn and clipped."""
        compositor = cls(document.canvas_size)
        if document.is_circle:
            color, alpha = rim.draw_document_rim(document)
            compositor.apply_source(color, alpha, alpha)
            compositor.clip(utils.disc(compositor.size, document.inner_radius))
        compositor.fill(document.background_color)
        return compositor

    @property
    def size(self) -> int:
        return self._size

    @property
    def color(self) -> np.ndarray:
        return utils.clip(self._color)

    @property
    def shape(self) -> np.ndarray:
        return self._shape_g

    @property
    def alpha(self) -> np.ndarray:
        return self._alpha_g

    def clip(self, mask: Union[float, np.ndarray]) -> None:
        """Restrict subsequent drawing to ``mask``; 1.0 removes the clip."""
        self._clip_mask = mask

    def fill(self, value: str) -> None:
        """Paint a solid color over the whole canvas."""
        if value is None or value.strip().lower() == TRANSPARENT:
            return
        color, alpha = paint.draw_solid_color_fill((self._size, self._size), value)
        self.apply_source(color, np.ones_like(alpha), alpha)

    def apply(
        self,
        layer: Layer,
        bitmap: Optional[Image.Image] = None,
        font: Optional[Font] = None,
    ) -> None:
        logger.debug("Compositing %s" % layer)
        if not layer.is_visible():
            logger.debug("Ignore %s" % layer)
            return

        recipe = get_recipe(layer)
        if isinstance(layer, ImageLayer):
            if bitmap is None:
                logger.debug("Blank region for %s" % layer)
                return
            color, shape = self._get_image(layer, bitmap, recipe)
            alpha = shape * recipe.fill
        elif isinstance(layer, TextLayer):
            if font is None:
                raise ValueError("Text layer needs a font: %s" % layer)
            color, shape = text.draw_text_layer(layer, font, self._size, recipe.fill)
            alpha = shape
        elif isinstance(layer, ShapeLayer):
            color, shape, alpha = self._get_shape(layer, recipe)
        else:
            raise TypeError("Unknown layer type: %s" % type(layer).__name__)

        self.apply_source(color, shape, alpha * recipe.opacity, recipe.blend_mode)

    def apply_source(
        self,
        color: np.ndarray,
        shape: np.ndarray,
        alpha: np.ndarray,
        blend_mode: BlendMode = BlendMode.NORMAL,
    ) -> None:
        shape = shape * self._clip_mask
        alpha = alpha * self._clip_mask

        self._shape_g = cast(np.ndarray, utils.union(self._shape_g, shape))
        alpha_b = self._alpha_g
        color_b = self._color
        self._alpha_g = cast(np.ndarray, utils.union(self._alpha_g, alpha))

        blend_fn = get_blend_func(blend_mode)
        color_t = (shape - alpha) * alpha_b * color_b + alpha * (
            (1.0 - alpha_b) * color + alpha_b * blend_fn(color_b, color)
        )
        self._color = utils.clip(
            utils.divide((1.0 - shape) * alpha_b * color_b + color_t, self._alpha_g)
        ).astype(np.float32)

    def finish(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        return self.color, self.shape, self.alpha

    def _get_image(
        self, layer: ImageLayer, bitmap: Image.Image, recipe: RenderRecipe
    ) -> tuple[np.ndarray, np.ndarray]:
        color, alpha = place_image(bitmap, layer, self._size)
        if recipe.filters:
            logger.debug("Filters for %s: %d steps" % (layer, len(recipe.filters)))
            color, alpha = apply_filters(color, alpha, recipe.filters)
        return color, alpha

    def _get_shape(
        self, layer: ShapeLayer, recipe: RenderRecipe
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        outline = vector.OUTLINES[layer.shape](layer.width, layer.height)
        polygon = vector.transform(
            outline, math.radians(layer.rotation), *layer.center
        )
        size = (self._size, self._size)
        mask = vector.draw_polygon_mask(size, [polygon])

        rgb, opacity = paint.get_color(layer.color)
        color = np.zeros(mask.shape[:2] + (3,), dtype=np.float32)
        color, shape = utils.over(color, np.zeros_like(mask), rgb, mask * opacity)
        alpha = shape * recipe.fill
        if layer.stroke_color and layer.stroke_width > 0:
            stroke = vector.draw_polygon_mask(
                size, [polygon], fill=False, stroke_width=layer.stroke_width
            )
            rgb, opacity = paint.get_color(layer.stroke_color)
            color, alpha = utils.over(color, alpha, rgb, stroke * opacity)
            shape = utils.union(shape, stroke * opacity)
        return color, shape, alpha
