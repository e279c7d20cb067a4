import logging

import pytest

from token_tools.api import pil_io
from token_tools.api.document import Document
from token_tools.api.layers import ImageLayer
from token_tools.api.templates import (
    TEMPLATES,
    bake_template,
    get_template,
    template_document,
)
from token_tools.composite.rim import draw_rim_pil

logger = logging.getLogger(__name__)


def test_templates():
    assert len(TEMPLATES) == 10
    assert len({template.slug for template in TEMPLATES}) == 10
    assert all(len(template.stops) >= 3 for template in TEMPLATES)


@pytest.mark.parametrize("name", ["3", "silver-coin", "Silver Coin", " SILVER COIN "])
def test_get_template(name):
    assert get_template(name).name == "Silver Coin"


def test_get_template_unknown():
    with pytest.raises(KeyError):
        get_template("platinum")


@pytest.mark.composite
@pytest.mark.parametrize("name", ["classic-gold-coin", "gold-ring-token"])
def test_bake_template(name):
    document = Document(canvas_size=64, border_width=6, rim_design={"enabled": True})
    face, frame = bake_template(get_template(name), document)
    assert isinstance(face, ImageLayer)
    assert (face.z_index, frame.z_index) == (0, 1)
    image = pil_io.decode(face.source)
    assert image.size == (64, 64)
    assert image.getpixel((0, 0))[3] == 0
    assert image.getpixel((32, 32))[3] == 255


@pytest.mark.composite
def test_baked_rim_matches_live_rim():
    document = Document(
        canvas_size=64,
        border_width=8,
        border_color="#c0c0c0",
        rim_shadow={"enabled": True},
        rim_design={"enabled": True, "pattern": "stars", "density": 8},
    )
    _, frame = bake_template(get_template("silver-coin"), document)
    expected = draw_rim_pil(
        64,
        document.border_width,
        document.border_color,
        document.rim_shadow,
        document.rim_design,
    )
    assert pil_io.decode(frame.source).tobytes() == expected.tobytes()


@pytest.mark.composite
def test_template_document():
    document = template_document("bitcoin-style", canvas_size=48, canvas_shape="square")
    assert document.canvas_size == 48
    assert not document.is_circle
    assert len(document) == 2
    face = pil_io.decode(document.ordered_layers()[0].source)
    assert face.getpixel((0, 0))[3] == 255
