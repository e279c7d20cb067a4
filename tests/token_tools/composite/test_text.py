import logging
import math

import attrs
import numpy as np
import pytest

from token_tools.api.layers import TextLayer
from token_tools.composite import text
from token_tools.composite.composite import Compositor

logger = logging.getLogger(__name__)

CANVAS = 64
SHADOW = dict(shadow_color="#000000", shadow_offset_x=4, shadow_offset_y=4)


def _layer(**kwargs):
    kwargs.setdefault("content", "HI")
    kwargs.setdefault("x", 0)
    kwargs.setdefault("y", 16)
    kwargs.setdefault("width", CANVAS)
    kwargs.setdefault("height", 32)
    return TextLayer(**kwargs)


def test_layout_circular_first_glyphs(font):
    placements = text.layout_circular("AB", font, 150, center=(250, 250))
    assert [p.character for p in placements] == ["A", "B"]
    first, second = placements
    assert first.angle == 0
    assert first.x == pytest.approx(250)
    assert first.y == pytest.approx(100)
    assert second.angle == pytest.approx(font.getlength("A") / 150)
    assert first.advance == pytest.approx(font.getlength("A"))


@pytest.mark.parametrize("kerning", [-2.0, 0.0, 3.5])
def test_layout_circular_swept_angle(font, kerning):
    content, radius = "TOKEN", 120.0
    placements = text.layout_circular(content, font, radius, kerning=kerning)
    expected = sum(font.getlength(ch) + kerning for ch in content[:-1]) / radius
    assert placements[-1].angle == pytest.approx(expected)


def test_layout_circular_start_angle(font):
    (placement,) = text.layout_circular("A", font, 100, start_angle=90, center=(0, 0))
    assert placement.angle == pytest.approx(math.pi / 2)
    assert placement.x == pytest.approx(100)
    assert placement.y == pytest.approx(0, abs=1e-9)


def test_layout_straight(font):
    layer = _layer(content="HELLO", x=10, y=20, width=40, height=20)
    (placement,) = text.layout_text(layer, font, CANVAS)
    assert placement.character == "HELLO"
    assert (placement.x, placement.y) == (30, 30)
    assert placement.advance == pytest.approx(font.getlength("HELLO"))


def test_layout_text_circular_uses_canvas_center(font):
    layer = _layer(content="AB", is_circular_text=True, text_radius=20, x=5, y=5)
    placements = text.layout_text(layer, font, CANVAS)
    assert placements[0].x == pytest.approx(CANVAS / 2)
    assert placements[0].y == pytest.approx(CANVAS / 2 - 20)


@pytest.mark.parametrize("circular", [False, True])
def test_draw_glyph_mask(font, circular):
    layer = _layer(content="WAX", is_circular_text=circular, text_radius=20)
    placements = text.layout_text(layer, font, CANVAS)
    mask = text.draw_glyph_mask(placements, font, (CANVAS, CANVAS), circular)
    assert mask.mode == "L"
    assert mask.size == (CANVAS, CANVAS)
    assert mask.getbbox() is not None


def test_whitespace_only_circular_text_is_empty(font):
    placements = text.layout_circular("   ", font, 20, center=(32, 32))
    mask = text.draw_glyph_mask(placements, font, (CANVAS, CANVAS), True)
    assert mask.getbbox() is None


def test_fill_scales_fill_pass(font):
    layer = _layer(font_color="#ff0000")
    _, full = text.draw_text_layer(layer, font, CANVAS, fill=1.0)
    color, half = text.draw_text_layer(layer, font, CANVAS, fill=0.5)
    assert full.max() > 0
    np.testing.assert_allclose(half, 0.5 * full, atol=1e-6)
    covered = half[:, :, 0] > 0
    np.testing.assert_allclose(color[covered], [[1.0, 0.0, 0.0]] * covered.sum())


def test_rotation_moves_glyphs(font):
    a = text.draw_text_layer(_layer(content="L"), font, CANVAS)[1]
    b = text.draw_text_layer(_layer(content="L", rotation=90), font, CANVAS)[1]
    assert not np.allclose(a, b)
    placements = text.layout_text(_layer(), font, CANVAS)
    mask = text.draw_glyph_mask(placements, font, (CANVAS, CANVAS))
    assert text.rotate_mask(mask, 360, (32, 32)).tobytes() == mask.tobytes()


@pytest.mark.composite
def test_shadow_pass(font):
    plain = _layer(font_color="#ffffff")
    shadowed = _layer(
        font_color="#ffffff",
        shadow_color="#000000",
        shadow_blur=4,
        shadow_offset_x=6,
        shadow_offset_y=6,
    )
    _, alpha_plain = text.draw_text_layer(plain, font, CANVAS)
    color, alpha = text.draw_text_layer(shadowed, font, CANVAS)
    assert alpha.sum() > alpha_plain.sum()
    # Somewhere only the shadow shows: dark and partly opaque.
    shadow_only = (alpha_plain[:, :, 0] == 0) & (alpha[:, :, 0] > 0.1)
    assert shadow_only.any()
    assert np.all(color[shadow_only] < 0.5)


@pytest.mark.composite
@pytest.mark.parametrize(
    "kwargs",
    [
        dict(stroke_color="#0000ff", stroke_width=2),
        dict(glow_color="#00ff00", glow_blur=6),
    ],
)
def test_outline_passes_grow_coverage(font, kwargs):
    _, alpha_plain = text.draw_text_layer(_layer(), font, CANVAS)
    _, alpha = text.draw_text_layer(_layer(**kwargs), font, CANVAS)
    assert (alpha > 0).sum() > (alpha_plain > 0).sum()


@pytest.mark.parametrize(
    "effects",
    [
        SHADOW,
        pytest.param(
            dict(stroke_color="#0000ff", stroke_width=2), marks=pytest.mark.composite
        ),
        pytest.param(
            dict(glow_color="#00ff00", glow_blur=6), marks=pytest.mark.composite
        ),
    ],
)
def test_fill_leaves_effects_untouched(font, effects):
    layer = _layer(font_color="#ff0000", **effects)
    color, alpha = text.draw_text_layer(layer, font, CANVAS, fill=0.0)
    expected_color, expected_alpha = text.draw_text_layer(
        attrs.evolve(layer, font_color="transparent"), font, CANVAS
    )
    assert alpha.max() > 0
    np.testing.assert_allclose(alpha, expected_alpha, atol=1e-6)
    np.testing.assert_allclose(color, expected_color, atol=1e-5)

    _, glyphs = text.draw_text_layer(_layer(font_color="#ff0000"), font, CANVAS)
    outside = glyphs[:, :, 0] == 0
    _, half = text.draw_text_layer(layer, font, CANVAS, fill=0.5)
    _, full = text.draw_text_layer(layer, font, CANVAS, fill=1.0)
    np.testing.assert_allclose(half[outside], full[outside], atol=1e-6)


def test_opacity_scales_whole_group(font):
    def alpha_for(opacity):
        compositor = Compositor(CANVAS)
        compositor.apply(_layer(opacity=opacity, **SHADOW), font=font)
        return compositor.alpha

    full, half = alpha_for(1.0), alpha_for(0.5)
    _, glyphs = text.draw_text_layer(_layer(), font, CANVAS)
    shadow_only = (glyphs[:, :, 0] == 0) & (full[:, :, 0] > 0)
    assert shadow_only.any()
    np.testing.assert_allclose(half, 0.5 * full, atol=1e-6)
