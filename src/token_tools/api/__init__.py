"""
High-level API for building token documents.

This subpackage holds the document model and the resources the compositor
consumes. Documents are immutable snapshots; the
:py:class:`~token_tools.api.document.LayerStore` is the single owner that
publishes new ones.

Key modules:

- :py:mod:`token_tools.api.document`: Document snapshot and LayerStore
- :py:mod:`token_tools.api.layers`: Layer records (image, text, shape)
- :py:mod:`token_tools.api.adjustments`: Filter chains and render recipes
- :py:mod:`token_tools.api.resources`: Bitmap and font loaders
- :py:mod:`token_tools.api.templates`: Starter templates
- :py:mod:`token_tools.api.pil_io`: PIL/Pillow image I/O utilities
- :py:mod:`token_tools.api.numpy_io`: NumPy array I/O utilities

Example usage::

    from token_tools.api.document import LayerStore

    store = LayerStore()
    layer = store.new_image_layer('logo.png')
    store.update_layer(layer.id, adjustments={'sepia': 40})
    store.snapshot.save('token.json')
"""
