"""
Text layout and rasterization.

Straight text is a single run anchored at the layer center. Circular text
places one glyph at a time on an arc around the canvas center: angle 0 points
up, angles grow clockwise, and each glyph advances the running angle by
``(advance + kerning) / radius`` radians.

Layouts are plain :py:class:`GlyphPlacement` records, so they can be
inspected without drawing anything::

    from PIL import ImageFont
    from token_tools.composite.text import layout_circular

    font = ImageFont.load_default(24)
    for glyph in layout_circular("HELLO", font, radius=150, center=(250, 250)):
        print(glyph.character, glyph.angle)

Rasterization turns a text layer into an isolated group: shadow, stroke and
glow passes at full alpha, then the fill pass at the fill alpha.
"""

import logging
import math
from typing import Sequence, Tuple, Union

import numpy as np
from attrs import define
from PIL import Image, ImageChops, ImageDraw, ImageFont

from token_tools.api import numpy_io
from token_tools.api.layers import TextLayer
from token_tools.composite import effects, paint, utils

logger = logging.getLogger(__name__)

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


@define(frozen=True)
class GlyphPlacement:
    """
    Position of a glyph, or of a whole straight run.

    .. py:attribute:: angle

        Rotation in radians, clockwise from up.

    .. py:attribute:: x

        Anchor x in canvas pixels.

    .. py:attribute:: advance

        Measured advance width in pixels, without kerning.
    """

    character: str
    angle: float
    x: float
    y: float
    advance: float


def measure(font: Font, text: str) -> float:
    """Advance width of ``text`` in pixels."""
    return float(font.getlength(text))


def layout_straight(
    text: str, font: Font, center: Tuple[float, float]
) -> list:
    return [GlyphPlacement(text, 0.0, center[0], center[1], measure(font, text))]


def layout_circular(
    text: str,
    font: Font,
    radius: float,
    kerning: float = 0.0,
    start_angle: float = 0.0,
    center: Tuple[float, float] = (0.0, 0.0),
) -> list:
    """
    Lay out ``text`` along a circle of ``radius`` around ``center``.

    :param start_angle: Angle of the first glyph in degrees.
    :return: one :py:class:`GlyphPlacement` per character.
    """
    angle = math.radians(start_angle)
    placements = []
    for character in text:
        advance = measure(font, character)
        placements.append(
            GlyphPlacement(
                character,
                angle,
                center[0] + radius * math.sin(angle),
                center[1] - radius * math.cos(angle),
                advance,
            )
        )
        angle += (advance + kerning) / radius
    return placements


def layout_text(layer: TextLayer, font: Font, canvas_size: int) -> list:
    """Lay out a text layer, circular around the canvas center or straight."""
    if layer.is_circular_text:
        center = (canvas_size / 2.0, canvas_size / 2.0)
        return layout_circular(
            layer.content,
            font,
            layer.text_radius,
            layer.text_kerning,
            layer.text_start_angle,
            center,
        )
    return layout_straight(layer.content, font, layer.center)


def draw_glyph_mask(
    placements: Sequence[GlyphPlacement],
    font: Font,
    size: Tuple[int, int],
    circular: bool = False,
) -> Image.Image:
    """Rasterize placements into an "L" coverage image of ``size``."""
    mask = Image.new("L", size, 0)
    if not circular:
        draw = ImageDraw.Draw(mask)
        for p in placements:
            draw.text((p.x, p.y), p.character, fill=255, font=font, anchor="mm")
        return mask

    font_size = float(getattr(font, "size", 10))
    for p in placements:
        if not p.character.strip():
            continue
        side = 2 * int(math.ceil(2.0 * font_size + p.advance)) + 2
        tile = Image.new("L", (side, side), 0)
        ImageDraw.Draw(tile).text(
            (side / 2.0, side / 2.0), p.character, fill=255, font=font, anchor="ms"
        )
        if p.angle:
            tile = tile.rotate(
                -math.degrees(p.angle), resample=Image.Resampling.BICUBIC
            )
        left = int(round(p.x - side / 2.0))
        top = int(round(p.y - side / 2.0))
        box = (left, top, left + side, top + side)
        mask.paste(ImageChops.lighter(mask.crop(box), tile), box)
    return mask


def rotate_mask(
    mask: Image.Image, rotation: float, center: Tuple[float, float]
) -> Image.Image:
    """Rotate clockwise by ``rotation`` degrees about ``center``."""
    if not rotation % 360:
        return mask
    return mask.rotate(-rotation, resample=Image.Resampling.BICUBIC, center=center)


def draw_text_layer(
    layer: TextLayer, font: Font, canvas_size: int, fill: float = 1.0
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Draw a text layer as an isolated (color, alpha) group.

    The group is meant to be composited at the layer opacity.
    """
    size = (int(canvas_size), int(canvas_size))
    placements = layout_text(layer, font, canvas_size)
    logger.debug("Text %r: %d placements" % (layer.content[:10], len(placements)))
    glyphs = draw_glyph_mask(placements, font, size, layer.is_circular_text)
    glyphs = rotate_mask(glyphs, layer.rotation, layer.center)
    mask = numpy_io.get_mask(glyphs)

    color = np.zeros(mask.shape[:2] + (3,), dtype=np.float32)
    alpha = np.zeros_like(mask)
    for value, coverage, factor in _get_passes(layer, mask, fill):
        rgb, opacity = paint.get_color(value)
        color, alpha = utils.over(color, alpha, rgb, coverage * (opacity * factor))
    return color, alpha


def _get_passes(layer: TextLayer, mask: np.ndarray, fill: float) -> list:
    passes = []
    if layer.shadow_color and (
        layer.shadow_blur > 0 or layer.shadow_offset_x or layer.shadow_offset_y
    ):
        shadow = effects.draw_shadow(
            mask, layer.shadow_blur, layer.shadow_offset_x, layer.shadow_offset_y
        )
        passes.append((layer.shadow_color, shadow, 1.0))
    if layer.stroke_color and layer.stroke_width > 0:
        passes.append(
            (layer.stroke_color, effects.draw_stroke(mask, layer.stroke_width), 1.0)
        )
    if layer.glow_color and layer.glow_blur > 0:
        passes.append((layer.glow_color, effects.draw_glow(mask, layer.glow_blur), 1.0))
    passes.append((layer.font_color, mask, fill))
    return passes
