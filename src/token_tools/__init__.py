"""
token-tools: Python package for composing circular logo tokens.

A token is a square or circular canvas with a decorative rim, a background
and a stack of image, text and shape layers. This package models the layer
stack as immutable documents and renders them to raster images.

Basic usage::

    from token_tools import Document, LayerStore, composite_pil

    store = LayerStore()
    store.new_image_layer('logo.png')
    store.new_text_layer('HELLO WORLD', is_circular_text=True)
    composite_pil(store.snapshot).save('token.png')

Architecture:

- :py:mod:`token_tools.api`: Document model, loaders and templates
- :py:mod:`token_tools.composite`: Rendering and blending engine
"""

from token_tools.api.document import Document, LayerStore
from token_tools.composite import Renderer, composite, composite_pil
from token_tools.version import __version__

__all__ = [
    "Document",
    "LayerStore",
    "Renderer",
    "composite",
    "composite_pil",
    "__version__",
]
