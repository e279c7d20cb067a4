"""
Layer module.

Layers are immutable attrs records. A document holds them in a tuple and
every property update produces a new record through :py:func:`attrs.evolve`,
so a snapshot handed to the compositor can never change underneath it.

There are three concrete layer kinds:

- :py:class:`ImageLayer`: a bitmap with :py:class:`ImageAdjustments`
- :py:class:`TextLayer`: straight or circular text with decorative effects
- :py:class:`ShapeLayer`: a simple filled outline

Example::

    from token_tools.api.layers import ImageAdjustments, ImageLayer

    layer = ImageLayer(
        source="logo.png",
        x=50, y=50, width=400, height=400,
        adjustments=ImageAdjustments(brightness=120, fill=80),
    )
    layer.adjustments.opacity  # 100.0
"""

import base64
import logging
import uuid
from enum import Enum
from typing import Any, ClassVar, Optional, Union

import attrs
from attrs import define, field
from attrs.converters import to_bool

from token_tools.constants import (
    DEFAULT_FONT_FAMILY,
    BlendMode,
    LayerKind,
    ShapeKind,
)
from token_tools.registry import new_registry
from token_tools.validators import clamp_

logger = logging.getLogger(__name__)

LAYER_TYPES, register = new_registry(attribute="kind")


def _new_id() -> str:
    return uuid.uuid4().hex


@define(frozen=True)
class ImageAdjustments:
    """
    Semantic adjustment parameters of a layer.

    Numeric values are clamped into their valid range on construction.

    .. py:attribute:: brightness

        Brightness percentage in [0, 200], 100 is neutral.

    .. py:attribute:: contrast

        Contrast percentage in [0, 200], 100 is neutral.

    .. py:attribute:: saturation

        Saturation percentage in [0, 200], 100 is neutral.

    .. py:attribute:: hue

        Hue rotation in degrees, [0, 360].

    .. py:attribute:: blur

        Gaussian blur radius in pixels.

    .. py:attribute:: sepia

        Sepia amount in percent, [0, 100].

    .. py:attribute:: opacity

        Layer opacity in percent. Scales the whole layer including effects.

    .. py:attribute:: fill

        Fill opacity in percent. Scales only the layer's own content.
    """

    brightness: float = field(default=100.0, converter=clamp_(0.0, 200.0))
    contrast: float = field(default=100.0, converter=clamp_(0.0, 200.0))
    saturation: float = field(default=100.0, converter=clamp_(0.0, 200.0))
    hue: float = field(default=0.0, converter=clamp_(0.0, 360.0))
    blur: float = field(default=0.0, converter=clamp_(0.0, 100.0))
    sepia: float = field(default=0.0, converter=clamp_(0.0, 100.0))
    invert: bool = field(default=False, converter=to_bool)
    grayscale: bool = field(default=False, converter=to_bool)
    blend_mode: BlendMode = field(default=BlendMode.NORMAL, converter=BlendMode.parse)
    opacity: float = field(default=100.0, converter=clamp_(0.0, 100.0))
    fill: float = field(default=100.0, converter=clamp_(0.0, 100.0))


def _to_adjustments(value: Any) -> ImageAdjustments:
    if value is None:
        return ImageAdjustments()
    if isinstance(value, dict):
        return ImageAdjustments(**value)
    return value


@define(frozen=True, kw_only=True)
class Layer:
    """
    Base layer record.

    .. py:attribute:: id

        Stable unique identifier.

    .. py:attribute:: z_index

        Paint order. Layers are drawn in ascending ``z_index``.

    .. py:attribute:: opacity

        Layer opacity in [0, 1].

    .. py:attribute:: locked

        Locked layers refuse interactive manipulation but still render.
    """

    kind: ClassVar[LayerKind]

    id: str = field(factory=_new_id, converter=str)
    z_index: int = field(default=0, converter=int)
    x: float = field(default=0.0, converter=float)
    y: float = field(default=0.0, converter=float)
    width: float = field(default=100.0, converter=float)
    height: float = field(default=100.0, converter=float)
    rotation: float = field(default=0.0, converter=float)
    opacity: float = field(default=1.0, converter=clamp_(0.0, 1.0))
    visible: bool = field(default=True, converter=to_bool)
    locked: bool = field(default=False, converter=to_bool)

    @property
    def center(self) -> tuple[float, float]:
        """Center of the layer box in content coordinates."""
        return (self.x + self.width / 2.0, self.y + self.height / 2.0)

    @property
    def bbox(self) -> tuple[float, float, float, float]:
        """(left, top, right, bottom) of the unrotated layer box."""
        return (self.x, self.y, self.x + self.width, self.y + self.height)

    def is_visible(self) -> bool:
        return self.visible

    def to_dict(self) -> dict:
        """Serialize to a JSON-compatible dict with a ``type`` tag."""
        data = attrs.asdict(self, value_serializer=_serialize)
        data["type"] = self.kind.value
        return data

    def __repr__(self) -> str:
        return "%s(id=%r z=%d size=(%g, %g))" % (
            self.__class__.__name__,
            self.id,
            self.z_index,
            self.width,
            self.height,
        )


@register(LayerKind.IMAGE)
@define(frozen=True, kw_only=True, repr=False)
class ImageLayer(Layer):
    """
    Bitmap layer.

    .. py:attribute:: source

        Encoded image reference: a file path, a ``data:`` URL, or raw bytes.
    """

    source: Union[str, bytes, None] = field(default=None)
    adjustments: ImageAdjustments = field(
        factory=ImageAdjustments, converter=_to_adjustments
    )


@register(LayerKind.TEXT)
@define(frozen=True, kw_only=True, repr=False)
class TextLayer(Layer):
    """
    Text layer.

    Circular text is laid out around the canvas center at ``text_radius``,
    starting at ``text_start_angle`` degrees clockwise from "up".
    ``adjustments.fill`` controls the alpha of the glyph fill only.
    """

    content: str = field(default="", converter=str)
    font_size: float = field(default=24.0, converter=clamp_(1.0, 1000.0))
    font_color: str = field(default="#000000")
    font_family: str = field(default=DEFAULT_FONT_FAMILY)
    stroke_color: Optional[str] = field(default=None)
    stroke_width: float = field(default=0.0, converter=clamp_(0.0, 100.0))
    shadow_color: Optional[str] = field(default=None)
    shadow_blur: float = field(default=0.0, converter=clamp_(0.0, 100.0))
    shadow_offset_x: float = field(default=0.0, converter=float)
    shadow_offset_y: float = field(default=0.0, converter=float)
    glow_color: Optional[str] = field(default=None)
    glow_blur: float = field(default=0.0, converter=clamp_(0.0, 100.0))
    is_circular_text: bool = field(default=False, converter=to_bool)
    text_radius: float = field(default=150.0, converter=clamp_(1.0, 10000.0))
    text_kerning: float = field(default=0.0, converter=float)
    text_start_angle: float = field(default=0.0, converter=float)
    adjustments: ImageAdjustments = field(
        factory=ImageAdjustments, converter=_to_adjustments
    )

    def __repr__(self) -> str:
        return "%s(id=%r z=%d %r)" % (
            self.__class__.__name__,
            self.id,
            self.z_index,
            self.content[:10],
        )


@register(LayerKind.SHAPE)
@define(frozen=True, kw_only=True, repr=False)
class ShapeLayer(Layer):
    """Filled outline layer, optionally stroked."""

    shape: ShapeKind = field(default=ShapeKind.RECTANGLE, converter=ShapeKind)
    color: str = field(default="#ffffff")
    stroke_color: Optional[str] = field(default=None)
    stroke_width: float = field(default=0.0, converter=clamp_(0.0, 100.0))
    adjustments: ImageAdjustments = field(
        factory=ImageAdjustments, converter=_to_adjustments
    )


def layer_from_dict(data: dict) -> Layer:
    """Build a layer from the output of :py:meth:`Layer.to_dict`."""
    data = dict(data)
    kind = LayerKind(data.pop("type", LayerKind.IMAGE.value))
    kls = LAYER_TYPES.get(kind)
    if kls is None:
        raise ValueError("Unknown layer type: %r" % kind)
    return kls(**data)


def _serialize(instance: Any, attribute: Any, value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bytes):
        return "data:application/octet-stream;base64," + base64.b64encode(
            value
        ).decode("ascii")
    return value
