"""
Rim and frame generation.

The rim of a circular token is an annulus between the canvas edge and the
interior disc, optionally with a drop shadow and a repeating pattern. It is a
pure function of the frame settings, so the live compositor and the starter
template baking produce identical pixels.

Example::

    from token_tools.composite.rim import draw_rim_pil

    image = draw_rim_pil(500, 20, "#ffd700")
"""

import logging
from typing import NamedTuple, Optional, Tuple

import numpy as np
from PIL import Image

from token_tools.api import numpy_io
from token_tools.api.document import Document, RimDesign, RimShadow
from token_tools.composite import effects, paint, utils, vector
from token_tools.constants import ShadowType

logger = logging.getLogger(__name__)

#: Width of the band blurred into the inner rim shadow.
INNER_SHADOW_WIDTH = 2.0


class RimElement(NamedTuple):
    """Placement of one pattern element; ``angle`` is clockwise from up."""

    angle: float
    x: float
    y: float


def pattern_positions(
    canvas_size: int, border_width: float, density: int
) -> list:
    """
    Place ``density`` elements evenly around the radial midpoint of the rim.

    Element ``i`` sits at angle ``i * 2 * pi / density``.
    """
    center = canvas_size / 2.0
    radius = center - border_width / 2.0
    step = 2.0 * np.pi / density
    return [
        RimElement(
            i * step,
            center + radius * np.sin(i * step),
            center - radius * np.cos(i * step),
        )
        for i in range(density)
    ]


def draw_rim(
    canvas_size: int,
    border_width: float,
    border_color: str,
    rim_shadow: Optional[RimShadow] = None,
    rim_design: Optional[RimDesign] = None,
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Draw the rim of a circular canvas.

    :return: (color, alpha) arrays of shape (size, size, 3) and (size, size, 1).
    """
    rim_shadow = rim_shadow or RimShadow()
    rim_design = rim_design or RimDesign()
    size = int(canvas_size)
    radius = size / 2.0
    color = np.zeros((size, size, 3), dtype=np.float32)
    alpha = np.zeros((size, size, 1), dtype=np.float32)
    if border_width <= 0:
        return color, alpha

    outer = utils.disc(size, radius)
    if rim_shadow.enabled and rim_shadow.type == ShadowType.OUTER:
        shadow = _outer_shadow(outer, rim_shadow)
        color, alpha = _paint(color, alpha, rim_shadow.color, shadow)

    color, alpha = _paint(color, alpha, border_color, outer)

    if rim_shadow.enabled and rim_shadow.type == ShadowType.INNER:
        shadow = _inner_shadow(outer, rim_shadow)
        color, alpha = _paint(color, alpha, rim_shadow.color, shadow)

    interior = utils.disc(size, max(0.0, radius - border_width))
    alpha = alpha * (1.0 - interior)

    if rim_design.enabled and border_width > 0:
        logger.debug(
            "Rim pattern %s x%d" % (rim_design.pattern.value, rim_design.density)
        )
        element = vector.rim_element(rim_design.pattern, rim_design.size)
        polygons = [
            vector.transform(element, p.angle, p.x, p.y)
            for p in pattern_positions(size, border_width, rim_design.density)
        ]
        mask = vector.draw_polygon_mask((size, size), polygons)
        color, alpha = _paint(color, alpha, rim_design.color, mask)

    return color, alpha


def _outer_shadow(outer: np.ndarray, rim_shadow: RimShadow) -> np.ndarray:
    return effects.draw_shadow(
        outer, rim_shadow.blur, rim_shadow.offset_x, rim_shadow.offset_y
    )


def _inner_shadow(outer: np.ndarray, rim_shadow: RimShadow) -> np.ndarray:
    size = outer.shape[0]
    band = outer * (1.0 - utils.disc(size, size / 2.0 - INNER_SHADOW_WIDTH))
    shadow = effects.draw_shadow(
        band, rim_shadow.blur, rim_shadow.offset_x, rim_shadow.offset_y
    )
    return shadow * outer


def _paint(color, alpha, value: str, mask: np.ndarray):
    rgb, opacity = paint.get_color(value)
    return utils.over(color, alpha, rgb, mask * opacity)


def draw_rim_pil(
    canvas_size: int,
    border_width: float,
    border_color: str,
    rim_shadow: Optional[RimShadow] = None,
    rim_design: Optional[RimDesign] = None,
) -> Image.Image:
    """Draw the rim as an RGBA image."""
    return numpy_io.to_pil(
        *draw_rim(canvas_size, border_width, border_color, rim_shadow, rim_design)
    )


def draw_document_rim(document: Document) -> Tuple[np.ndarray, np.ndarray]:
    """Draw the rim configured on a document."""
    return draw_rim(
        document.canvas_size,
        document.border_width,
        document.border_color,
        document.rim_shadow,
        document.rim_design,
    )
