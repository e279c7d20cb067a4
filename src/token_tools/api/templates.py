"""
Starter templates.

A template seeds a document with a coin face (a gradient disc) and the rim
drawn by :py:func:`~token_tools.composite.rim.draw_rim`, both baked into
static image layers. Baking uses the same rim function as the live
compositor, so the baked rim matches the rendered one pixel for pixel.

Example::

    from token_tools.api.templates import template_document

    document = template_document("silver-coin")
    document.save("silver.json")
"""

import logging
import re
from typing import Optional

import attrs
import numpy as np
from attrs import define, field

from token_tools.api import numpy_io, pil_io
from token_tools.api.document import Document
from token_tools.api.layers import ImageLayer
from token_tools.composite import paint, rim, utils
from token_tools.constants import DEFAULT_CANVAS_SIZE
from token_tools.validators import in_

logger = logging.getLogger(__name__)

CATEGORIES = ("gold", "silver", "crypto", "colored")


@define(frozen=True)
class Template:
    """
    Starter template.

    .. py:attribute:: stops

        Gradient colors, spread evenly from the center outwards.

    .. py:attribute:: kind

        ``"radial"`` (centered at 30%/30%) or ``"conic"`` (around the center).
    """

    id: str
    name: str
    stops: tuple = field(converter=tuple)
    category: str = field(validator=in_(CATEGORIES))
    style: str = field(validator=in_(("2d", "3d")))
    kind: str = field(default="radial", validator=in_(("radial", "conic")))

    @property
    def slug(self) -> str:
        return re.sub(r"[^a-z0-9]+", "-", self.name.lower()).strip("-")


TEMPLATES = (
    Template("1", "Classic Gold Coin", ("#ffd700", "#ffed4e", "#b8860b"), "gold", "3d"),
    Template(
        "2",
        "Gold Ring Token",
        ("#ffd700", "#ffed4e", "#daa520", "#ffd700"),
        "gold",
        "3d",
        kind="conic",
    ),
    Template("3", "Silver Coin", ("#c0c0c0", "#e5e5e5", "#a8a8a8"), "silver", "3d"),
    Template("4", "Bronze Token", ("#cd7f32", "#d4af37", "#8b4513"), "gold", "3d"),
    Template("5", "Bitcoin Style", ("#f7931a", "#ffb347", "#cc7a00"), "crypto", "2d"),
    Template("6", "Ethereum Blue", ("#627eea", "#8bb8ff", "#4169e1"), "crypto", "2d"),
    Template("7", "Neon Pink", ("#ff4d8d", "#ff8fa3", "#c71585"), "colored", "2d"),
    Template("8", "Cyber Teal", ("#2dd4bf", "#20b2aa", "#008b8b"), "colored", "2d"),
    Template(
        "9", "Lightning Yellow", ("#ffd700", "#ffff00", "#daa520"), "colored", "2d"
    ),
    Template("10", "White Token", ("#ffffff", "#f5f5f5", "#e0e0e0"), "silver", "2d"),
)


def get_template(name: str) -> Template:
    """Find a template by id, slug or name. Raises :py:exc:`KeyError`."""
    key = name.strip().lower()
    for template in TEMPLATES:
        if key in (template.id, template.slug, template.name.lower()):
            return template
    raise KeyError(name)


def bake_template(template: Template, document: Document) -> list:
    """
    Bake a template into two image layers for the frame of ``document``:
    the gradient face, then the rim.
    """
    size = document.canvas_size
    logger.debug("Baking %s at %dpx" % (template.slug, size))
    if template.kind == "conic":
        color = paint.draw_conic_gradient_fill((size, size), template.stops)
    else:
        color = paint.draw_radial_gradient_fill((size, size), template.stops)
    if document.is_circle:
        alpha = utils.disc(size, size / 2.0)
    else:
        alpha = np.ones((size, size, 1), dtype=np.float32)
    face = numpy_io.to_pil(color, alpha)
    frame = rim.draw_rim_pil(
        size,
        document.border_width,
        document.border_color,
        document.rim_shadow,
        document.rim_design,
    )
    return [
        ImageLayer(
            source=pil_io.encode(image, max_bytes=None),
            x=0,
            y=0,
            width=size,
            height=size,
            z_index=z_index,
            locked=True,
        )
        for z_index, image in enumerate((face, frame))
    ]


def template_document(
    name: str, canvas_size: int = DEFAULT_CANVAS_SIZE, **frame: Optional[object]
) -> Document:
    """Create a fresh document seeded with a template."""
    document = Document(canvas_size=canvas_size, **frame)
    layers = bake_template(get_template(name), document)
    return attrs.evolve(document, layers=layers)
