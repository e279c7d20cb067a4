"""
Vector outlines and their rasterization.

Outlines are polygons centered on the origin, in pixel units, with "up" being
negative y. They are placed with :py:func:`transform` and rasterized with
aggdraw into anti-aliased coverage masks. The same outlines serve the rim
pattern elements and the shape layers.
"""

import logging
from typing import Iterable, Optional, Sequence, Tuple

import numpy as np
from PIL import Image

from token_tools.composite._compat import require_aggdraw
from token_tools.constants import RimPattern, ShapeKind
from token_tools.registry import new_registry

logger = logging.getLogger(__name__)

Point = Tuple[float, float]

OUTLINES, register = new_registry(attribute="kind")

#: Vertex count used to approximate ellipses.
ELLIPSE_VERTICES = 72


@register(ShapeKind.RECTANGLE)
def rectangle(width: float, height: float) -> list:
    w, h = width / 2.0, height / 2.0
    return [(-w, -h), (w, -h), (w, h), (-w, h)]


@register(ShapeKind.ELLIPSE)
def ellipse(width: float, height: float) -> list:
    theta = np.linspace(0.0, 2.0 * np.pi, ELLIPSE_VERTICES, endpoint=False)
    return list(zip(width / 2.0 * np.sin(theta), -height / 2.0 * np.cos(theta)))


@register(ShapeKind.STAR)
def star(width: float, height: float, points: int = 5) -> list:
    """Star with the first tip pointing up and an inner radius of half."""
    result = []
    for i in range(2 * points):
        theta = np.pi * i / points
        scale = 1.0 if i % 2 == 0 else 0.5
        result.append(
            (
                scale * width / 2.0 * np.sin(theta),
                -scale * height / 2.0 * np.cos(theta),
            )
        )
    return result


@register(ShapeKind.DIAMOND)
def diamond(width: float, height: float) -> list:
    w, h = width / 2.0, height / 2.0
    return [(0.0, -h), (w, 0.0), (0.0, h), (-w, 0.0)]


def rim_element(pattern: RimPattern, size: float) -> list:
    """Outline of one rim pattern element, its long axis radial."""
    pattern = RimPattern(pattern)
    if pattern == RimPattern.STRIPES:
        return rectangle(size * 0.3, size)
    if pattern == RimPattern.STARS:
        return star(size, size)
    if pattern == RimPattern.DOTS:
        return ellipse(size, size)
    return diamond(size * 2.0 / 3.0, size)


def transform(points: Iterable[Point], angle: float, x: float, y: float) -> list:
    """Rotate points clockwise by ``angle`` radians, then move to (x, y)."""
    c, s = np.cos(angle), np.sin(angle)
    return [(x + px * c - py * s, y + px * s + py * c) for px, py in points]


@require_aggdraw
def draw_polygon_mask(
    size: Tuple[int, int],
    polygons: Sequence[Sequence[Point]],
    fill: bool = True,
    stroke_width: Optional[float] = None,
) -> np.ndarray:
    """
    Rasterize polygons into a (height, width, 1) coverage mask.

    Requires aggdraw for anti-aliased rasterization.

    :param fill: Fill the polygon interiors.
    :param stroke_width: Draw the outlines with a pen of this width.
    """
    import aggdraw  # type: ignore[import-not-found]

    width, height = size
    mask = Image.new("L", (width, height), 0)
    draw = aggdraw.Draw(mask)
    pen = aggdraw.Pen(255, stroke_width) if stroke_width else None
    brush = aggdraw.Brush(255) if fill else None
    for polygon in polygons:
        if len(polygon) < 3:
            logger.warning("not enough vertices: %d" % len(polygon))
            continue
        coords = [float(v) for point in polygon for v in point]
        draw.polygon(coords, *[x for x in (pen, brush) if x is not None])
    draw.flush()
    del draw
    return np.expand_dims(np.array(mask).astype(np.float32) / 255.0, 2)
