"""
Composite module for document rendering and blending.

This subpackage provides the rendering engine that flattens a
:py:class:`~token_tools.api.document.Document` into a raster surface. It
implements the CSS blend modes, the image filter chain, text layout and
effects, shape rasterization and the rim generator.

**Note**: This module requires optional dependencies. Install with::

    pip install 'token-tools[composite]'

The composite extra includes:

- ``aggdraw``: For anti-aliased polygon rasterization (rim patterns, shapes)
- ``scipy``: For gradient color interpolation
- ``scikit-image``: For blur and morphological operations in effects

Key modules:

- :py:mod:`token_tools.composite.composite`: Main compositing functions
- :py:mod:`token_tools.composite.renderer`: Asynchronous, generation-tagged renderer
- :py:mod:`token_tools.composite.blend`: Blend mode implementations
- :py:mod:`token_tools.composite.filters`: Filter chain pixel operations
- :py:mod:`token_tools.composite.effects`: Text effects (shadow, stroke, glow)
- :py:mod:`token_tools.composite.text`: Straight and circular text layout
- :py:mod:`token_tools.composite.rim`: Rim and frame generator
- :py:mod:`token_tools.composite.vector`: Outline rasterization
- :py:mod:`token_tools.composite.paint`: Colors and gradient fills

Example usage::

    from token_tools.api.document import Document
    from token_tools.composite import composite_pil

    document = Document.load('token.json')
    composite_pil(document).save('token.png')
"""

from token_tools.composite.composite import composite, composite_pil, export_image
from token_tools.composite.renderer import Renderer, StaleRender

__all__ = [
    "Renderer",
    "StaleRender",
    "composite",
    "composite_pil",
    "export_image",
]
