import logging

import numpy as np
import pytest

from token_tools.composite import blend
from token_tools.constants import BlendMode

logger = logging.getLogger(__name__)


def _full(value):
    return np.full((2, 2, 3), value, dtype=np.float32)


def test_blend_table_is_complete():
    assert set(blend.BLEND_FUNC) == set(BlendMode)


@pytest.mark.parametrize(
    "mode, backdrop, source, expected",
    [
        (BlendMode.NORMAL, 0.2, 0.6, 0.6),
        (BlendMode.MULTIPLY, 0.5, 0.5, 0.25),
        (BlendMode.SCREEN, 0.5, 0.5, 0.75),
        (BlendMode.DARKEN, 0.2, 0.6, 0.2),
        (BlendMode.LIGHTEN, 0.2, 0.6, 0.6),
        (BlendMode.DIFFERENCE, 0.2, 0.6, 0.4),
        (BlendMode.EXCLUSION, 0.5, 0.5, 0.5),
        (BlendMode.OVERLAY, 0.25, 0.5, 0.25),
        (BlendMode.HARD_LIGHT, 0.5, 0.25, 0.25),
        (BlendMode.SOFT_LIGHT, 0.3, 0.5, 0.3),
        (BlendMode.COLOR_DODGE, 0.25, 0.5, 0.5),
        (BlendMode.COLOR_BURN, 0.75, 0.5, 0.5),
    ],
)
def test_separable(mode, backdrop, source, expected):
    result = blend.get_blend_func(mode)(_full(backdrop), _full(source))
    np.testing.assert_allclose(result, _full(expected), atol=1e-6)


@pytest.mark.parametrize(
    "mode",
    [BlendMode.HUE, BlendMode.SATURATION, BlendMode.COLOR, BlendMode.LUMINOSITY],
)
def test_non_separable_gray(mode):
    # Grays have no hue or saturation; only luminosity moves.
    backdrop, source = _full(0.4), _full(0.7)
    result = blend.get_blend_func(mode)(backdrop, source)
    expected = source if mode == BlendMode.LUMINOSITY else backdrop
    np.testing.assert_allclose(result, expected, atol=1e-5)


def test_color_keeps_backdrop_luminosity():
    backdrop = _full(0.5)
    source = np.zeros((2, 2, 3), dtype=np.float32)
    source[:, :, 0] = 1.0
    result = blend.color(backdrop, source)
    np.testing.assert_allclose(blend._lum(result), blend._lum(backdrop), atol=1e-5)
    assert np.all(result[:, :, 0] > result[:, :, 1])


@pytest.mark.parametrize("mode", ["unknown", None, "pass-through"])
def test_unknown_mode_is_normal(mode):
    assert blend.get_blend_func(mode) is blend.normal
