"""
Various constants for token_tools
"""

from enum import Enum

DEFAULT_CANVAS_SIZE = 500

#: Square output sizes offered for export.
EXPORT_SIZES = (300, 500, 800, 1000)

#: Decoded bitmaps kept by a bitmap loader.
MAX_CACHED_BITMAPS = 64

#: Encoded export budget in bytes.
MAX_EXPORT_BYTES = int(1.5 * 1024 * 1024)

#: Number of emphasized fill passes used to approximate glow strength.
GLOW_PASSES = 3

DEFAULT_FONT_FAMILY = "DejaVuSans"

TRANSPARENT = "transparent"


class BlendMode(str, Enum):
    """
    Blend modes, named after the CSS ``mix-blend-mode`` keywords.
    """

    NORMAL = "normal"
    MULTIPLY = "multiply"
    SCREEN = "screen"
    OVERLAY = "overlay"
    DARKEN = "darken"
    LIGHTEN = "lighten"
    COLOR_DODGE = "color-dodge"
    COLOR_BURN = "color-burn"
    HARD_LIGHT = "hard-light"
    SOFT_LIGHT = "soft-light"
    DIFFERENCE = "difference"
    EXCLUSION = "exclusion"
    HUE = "hue"
    SATURATION = "saturation"
    COLOR = "color"
    LUMINOSITY = "luminosity"

    @classmethod
    def parse(cls, value) -> "BlendMode":
        """Return the matching mode, or :py:attr:`NORMAL` for unknown values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace("_", "-"))
        except ValueError:
            return cls.NORMAL


class CanvasShape(str, Enum):
    CIRCLE = "circle"
    SQUARE = "square"


class LayerKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"
    SHAPE = "shape"


class ShadowType(str, Enum):
    OUTER = "outer"
    INNER = "inner"


class RimPattern(str, Enum):
    STRIPES = "stripes"
    STARS = "stars"
    DOTS = "dots"
    DIAMONDS = "diamonds"


class ShapeKind(str, Enum):
    RECTANGLE = "rectangle"
    ELLIPSE = "ellipse"
    STAR = "star"
    DIAMOND = "diamond"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


class FilterOp(str, Enum):
    """
    Filter operations emitted by the adjustment pipeline, in chain order.
    """

    BRIGHTNESS = "brightness"
    CONTRAST = "contrast"
    SATURATE = "saturate"
    BLUR = "blur"
    HUE_ROTATE = "hue-rotate"
    SEPIA = "sepia"
    INVERT = "invert"
    GRAYSCALE = "grayscale"


class ExportFormat(str, Enum):
    PNG = "PNG"
    WEBP = "WEBP"
    JPEG = "JPEG"
