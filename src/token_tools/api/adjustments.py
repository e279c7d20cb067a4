"""
Adjustment pipeline.

Turns the semantic :py:class:`~token_tools.api.layers.ImageAdjustments` of a
layer into a :py:class:`RenderRecipe`: an ordered chain of
:py:class:`FilterStep` records plus the fill, opacity and blend mode used by
the compositor's two-stage draw.

Only values that deviate from neutral emit a step, so a neutral layer has an
empty chain and renders as an exact passthrough of its bitmap.

Example::

    from token_tools.api.adjustments import build_filter_chain, to_css
    from token_tools.api.layers import ImageAdjustments

    chain = build_filter_chain(ImageAdjustments(brightness=150, invert=True))
    to_css(chain)  # 'brightness(150%) invert(100%)'
"""

import logging
from typing import Sequence

from attrs import define, field

from token_tools.api.layers import ImageAdjustments, ImageLayer, Layer, TextLayer
from token_tools.constants import BlendMode, FilterOp

logger = logging.getLogger(__name__)


@define(frozen=True)
class FilterStep:
    """
    One filter operation with its single numeric argument.

    Ratios are plain multipliers (``1.0`` is 100%), ``blur`` is in pixels and
    ``hue-rotate`` in degrees.
    """

    operation: FilterOp = field(converter=FilterOp)
    parameter: float = field(converter=float)

    def to_css(self) -> str:
        if self.operation == FilterOp.BLUR:
            return "%s(%gpx)" % (self.operation.value, self.parameter)
        if self.operation == FilterOp.HUE_ROTATE:
            return "%s(%gdeg)" % (self.operation.value, self.parameter)
        return "%s(%g%%)" % (self.operation.value, self.parameter * 100.0)


@define(frozen=True)
class RenderRecipe:
    """
    How to draw one layer.

    .. py:attribute:: filters

        Filter chain applied to the layer content.

    .. py:attribute:: fill

        Alpha factor of the layer's own content, in [0, 1].

    .. py:attribute:: opacity

        Alpha factor of the whole layer including effects, in [0, 1].
    """

    filters: tuple = field(converter=tuple)
    fill: float
    opacity: float
    blend_mode: BlendMode

    @property
    def is_passthrough(self) -> bool:
        return (
            not self.filters
            and self.fill == 1.0
            and self.opacity == 1.0
            and self.blend_mode == BlendMode.NORMAL
        )


def build_filter_chain(adjustments: ImageAdjustments) -> list:
    """Return the filter steps for all non-neutral adjustment values."""
    chain = []
    if adjustments.brightness != 100.0:
        chain.append(FilterStep(FilterOp.BRIGHTNESS, adjustments.brightness / 100.0))
    if adjustments.contrast != 100.0:
        chain.append(FilterStep(FilterOp.CONTRAST, adjustments.contrast / 100.0))
    if adjustments.saturation != 100.0:
        chain.append(FilterStep(FilterOp.SATURATE, adjustments.saturation / 100.0))
    if adjustments.blur > 0.0:
        chain.append(FilterStep(FilterOp.BLUR, adjustments.blur))
    if adjustments.hue % 360.0 != 0.0:
        chain.append(FilterStep(FilterOp.HUE_ROTATE, adjustments.hue))
    if adjustments.sepia > 0.0:
        chain.append(FilterStep(FilterOp.SEPIA, adjustments.sepia / 100.0))
    if adjustments.invert:
        chain.append(FilterStep(FilterOp.INVERT, 1.0))
    if adjustments.grayscale:
        chain.append(FilterStep(FilterOp.GRAYSCALE, 1.0))
    return chain


def to_css(chain: Sequence[FilterStep]) -> str:
    """Render a filter chain in CSS ``filter`` syntax."""
    if not chain:
        return "none"
    return " ".join(step.to_css() for step in chain)


def get_recipe(layer: Layer) -> RenderRecipe:
    """
    Build the render recipe of a layer.

    Text layers ignore the color filters and the adjustment opacity: their
    adjustments only carry the fill of the glyphs.
    """
    adjustments = getattr(layer, "adjustments", None) or ImageAdjustments()
    if isinstance(layer, TextLayer):
        return RenderRecipe(
            filters=(),
            fill=adjustments.fill / 100.0,
            opacity=layer.opacity,
            blend_mode=BlendMode.NORMAL,
        )
    filters = build_filter_chain(adjustments) if isinstance(layer, ImageLayer) else []
    return RenderRecipe(
        filters=filters,
        fill=adjustments.fill / 100.0,
        opacity=layer.opacity * adjustments.opacity / 100.0,
        blend_mode=adjustments.blend_mode,
    )
