"""
Filter operations.

Pixel implementations of the :py:class:`~token_tools.api.adjustments.FilterStep`
chain. The arithmetic follows the CSS Filter Effects definitions (the
shorthand filters are color matrices in linear form on straight color), so a
chain renders the way the same ``filter`` string renders in a browser canvas.
Results are clamped to [0, 1] after every step.
"""

import logging
from typing import Sequence

import numpy as np

from token_tools.api.adjustments import FilterStep
from token_tools.composite import utils
from token_tools.composite._compat import require_skimage
from token_tools.constants import FilterOp
from token_tools.registry import new_registry

logger = logging.getLogger(__name__)

FILTERS, register = new_registry(attribute="operation")


def apply_filters(
    color: np.ndarray, alpha: np.ndarray, chain: Sequence[FilterStep]
) -> tuple[np.ndarray, np.ndarray]:
    """
    Apply a filter chain to (color, alpha) arrays.

    An empty chain returns the inputs untouched.
    """
    for step in chain:
        filter_fn = FILTERS.get(step.operation)
        if filter_fn is None:
            logger.warning("Unknown filter: %s" % step.operation)
            continue
        color, alpha = filter_fn(color, alpha, step.parameter)
        color = utils.clip(color).astype(np.float32)
    return color, alpha


def _apply_matrix(color: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    return np.dot(color, matrix.T.astype(np.float32))


@register(FilterOp.BRIGHTNESS)
def brightness(color, alpha, amount):
    return color * np.float32(amount), alpha


@register(FilterOp.CONTRAST)
def contrast(color, alpha, amount):
    return (color - 0.5) * np.float32(amount) + 0.5, alpha


@register(FilterOp.SATURATE)
def saturate(color, alpha, amount):
    s = amount
    matrix = np.array(
        [
            [0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s],
            [0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s],
        ]
    )
    return _apply_matrix(color, matrix), alpha


@register(FilterOp.HUE_ROTATE)
def hue_rotate(color, alpha, degrees):
    c, s = np.cos(np.radians(degrees)), np.sin(np.radians(degrees))
    matrix = np.array(
        [
            [
                0.213 + c * 0.787 - s * 0.213,
                0.715 - c * 0.715 - s * 0.715,
                0.072 - c * 0.072 + s * 0.928,
            ],
            [
                0.213 - c * 0.213 + s * 0.143,
                0.715 + c * 0.285 + s * 0.140,
                0.072 - c * 0.072 - s * 0.283,
            ],
            [
                0.213 - c * 0.213 - s * 0.787,
                0.715 - c * 0.715 + s * 0.715,
                0.072 + c * 0.928 + s * 0.072,
            ],
        ]
    )
    return _apply_matrix(color, matrix), alpha


@register(FilterOp.SEPIA)
def sepia(color, alpha, amount):
    r = 1.0 - min(1.0, amount)
    matrix = np.array(
        [
            [0.393 + 0.607 * r, 0.769 - 0.769 * r, 0.189 - 0.189 * r],
            [0.349 - 0.349 * r, 0.686 + 0.314 * r, 0.168 - 0.168 * r],
            [0.272 - 0.272 * r, 0.534 - 0.534 * r, 0.131 + 0.869 * r],
        ]
    )
    return _apply_matrix(color, matrix), alpha


@register(FilterOp.GRAYSCALE)
def grayscale(color, alpha, amount):
    r = 1.0 - min(1.0, amount)
    matrix = np.array(
        [
            [0.2126 + 0.7874 * r, 0.7152 - 0.7152 * r, 0.0722 - 0.0722 * r],
            [0.2126 - 0.2126 * r, 0.7152 + 0.2848 * r, 0.0722 - 0.0722 * r],
            [0.2126 - 0.2126 * r, 0.7152 - 0.7152 * r, 0.0722 + 0.9278 * r],
        ]
    )
    return _apply_matrix(color, matrix), alpha


@register(FilterOp.INVERT)
def invert(color, alpha, amount):
    amount = np.float32(min(1.0, amount))
    return amount * (1.0 - color) + (1.0 - amount) * color, alpha


@register(FilterOp.BLUR)
def blur(color, alpha, radius):
    """Gaussian blur with standard deviation ``radius``, transparent outside."""
    color_p, alpha = gaussian(color * alpha, radius), gaussian(alpha, radius)
    return utils.divide(color_p, alpha), alpha


@require_skimage
def gaussian(values: np.ndarray, sigma: float) -> np.ndarray:
    """Blur a (height, width, channels) array, treating the outside as zero."""
    from skimage import filters

    if sigma <= 0:
        return values
    return filters.gaussian(
        values,
        sigma=sigma,
        mode="constant",
        cval=0.0,
        channel_axis=-1,
        preserve_range=True,
    ).astype(np.float32)
