"""
Asynchronous renderer.

A render pass suspends once per layer while its bitmap is decoded or its font
is confirmed. Passes may overlap when the document changes during a pass, so
each pass is tagged with a generation number and only the latest generation
may commit its surface. Older passes are dropped silently.

Example::

    import asyncio
    from token_tools.api.document import LayerStore
    from token_tools.composite.renderer import Renderer

    async def main():
        store = LayerStore()
        renderer = Renderer()
        renderer.attach(store)
        store.new_text_layer("HELLO", is_circular_text=True)
        await renderer.drain()
        return renderer.export("png")

    data = asyncio.run(main())
"""

import asyncio
import logging
from typing import Callable, Optional, Union

from PIL import Image

from token_tools.api import numpy_io
from token_tools.api.document import Document, LayerStore
from token_tools.api.layers import ImageLayer, TextLayer
from token_tools.api.resources import BitmapLoader, DecodeError, FontLoader
from token_tools.composite.composite import Compositor, export_image
from token_tools.constants import MAX_EXPORT_BYTES, ExportFormat

logger = logging.getLogger(__name__)


class StaleRender(Exception):
    """Raised inside a render pass that has been superseded."""


class Renderer(object):
    """
    Render documents to a committed surface.

    .. py:attribute:: surface

        RGBA image of the last committed pass, or None.
    """

    def __init__(
        self,
        bitmap_loader: Optional[BitmapLoader] = None,
        font_loader: Optional[FontLoader] = None,
    ):
        self.bitmap_loader = bitmap_loader or BitmapLoader()
        self.font_loader = font_loader or FontLoader()
        self._generation = 0
        self._committed = 0
        self._surface: Optional[Image.Image] = None
        self._tasks: set = set()

    @property
    def generation(self) -> int:
        """Generation of the most recently started pass."""
        return self._generation

    @property
    def committed_generation(self) -> int:
        return self._committed

    @property
    def surface(self) -> Optional[Image.Image]:
        return self._surface

    async def render(self, document: Document) -> Optional[Image.Image]:
        """
        Render a document snapshot.

        :return: the committed surface, or None when a newer pass started
            before this one finished.
        """
        self._generation += 1
        generation = self._generation
        logger.debug("Render pass %d started" % generation)
        try:
            image = await self._render(document, generation)
        except StaleRender:
            logger.debug("Render pass %d is stale, dropped" % generation)
            return None
        self._surface = image
        self._committed = generation
        logger.debug("Render pass %d committed" % generation)
        return image

    async def _render(self, document: Document, generation: int) -> Image.Image:
        compositor = Compositor.for_document(document)
        for layer in document.ordered_layers():
            if not layer.is_visible():
                continue
            bitmap, font = None, None
            if isinstance(layer, ImageLayer) and layer.source is not None:
                try:
                    bitmap = await self.bitmap_loader.load(layer.source)
                except DecodeError as e:
                    logger.debug("Blank region for %s: %s" % (layer, e))
            elif isinstance(layer, TextLayer):
                family = await self.font_loader.ensure(layer.font_family)
                font = self.font_loader.resolve(family, layer.font_size)
            self._check(generation)
            compositor.apply(layer, bitmap=bitmap, font=font)
        self._check(generation)
        color, _, alpha = compositor.finish()
        return numpy_io.to_pil(color, alpha)

    def _check(self, generation: int) -> None:
        if generation != self._generation:
            raise StaleRender(
                "Pass %d superseded by %d" % (generation, self._generation)
            )

    def attach(self, store: LayerStore) -> Callable[[], None]:
        """
        Start a pass on every snapshot the store publishes.

        Must be called with a running event loop. Returns an unsubscriber.
        """

        def on_change(document: Document) -> None:
            task = asyncio.get_running_loop().create_task(self.render(document))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        return store.subscribe(on_change)

    async def drain(self) -> None:
        """Wait for all passes started by :py:meth:`attach`."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    def export(
        self,
        format: Union[str, ExportFormat] = ExportFormat.PNG,
        size: Optional[int] = None,
        max_bytes: Optional[int] = MAX_EXPORT_BYTES,
    ) -> bytes:
        """Encode the last committed surface."""
        if self._surface is None:
            raise RuntimeError("Nothing has been rendered yet")
        return export_image(self._surface, format, size=size, max_bytes=max_bytes)
