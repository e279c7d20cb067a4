"""
Resource loaders.

The compositor needs two external resources: decoded bitmaps for image
layers and fonts for text layers. Both loaders offer an awaitable entry point
used by :py:class:`~token_tools.composite.renderer.Renderer` and a
synchronous one used by :py:func:`~token_tools.composite.composite`.

Decoded bitmaps are cached by source identity, so re-rendering the same
document does not decode its images again. Failures never propagate into the
render: a bitmap that cannot be decoded is drawn as a blank region and an
unknown font family falls back to the default family.
"""

import asyncio
import hashlib
import logging
import os
from collections import OrderedDict
from typing import Optional, Union

from PIL import Image, ImageFont

from token_tools.api import pil_io
from token_tools.api.pil_io import DecodeError
from token_tools.constants import DEFAULT_FONT_FAMILY, MAX_CACHED_BITMAPS

logger = logging.getLogger(__name__)

__all__ = ["BitmapLoader", "DecodeError", "FontLoadError", "FontLoader"]

Font = Union[ImageFont.FreeTypeFont, ImageFont.ImageFont]


class FontLoadError(OSError):
    """Raised when a font family cannot be located or opened."""


class BitmapLoader(object):
    """
    Decode bitmap sources, caching the results by source identity.

    The cache keeps the ``max_entries`` most recently used sources. Failed
    decodes are cached too, so a corrupt source is only decoded and reported
    once.

    Example::

        loader = BitmapLoader()
        image = await loader.load("logo.png")
        image = loader.get("logo.png")  # cached
    """

    def __init__(self, max_entries: int = MAX_CACHED_BITMAPS) -> None:
        self.max_entries = max(1, int(max_entries))
        self._cache: OrderedDict[str, Union[Image.Image, DecodeError]] = (
            OrderedDict()
        )

    @staticmethod
    def key(source: pil_io.Source) -> str:
        """Cache key of a source: its path, or a digest of its content."""
        if isinstance(source, (bytes, bytearray)):
            return "sha1:" + hashlib.sha1(bytes(source)).hexdigest()
        if isinstance(source, str) and source.startswith("data:"):
            return "sha1:" + hashlib.sha1(source.encode("utf-8")).hexdigest()
        return "path:" + os.fspath(source)

    def __contains__(self, source: pil_io.Source) -> bool:
        return self.key(source) in self._cache

    def __len__(self) -> int:
        return len(self._cache)

    def get(self, source: pil_io.Source) -> Image.Image:
        """Decode synchronously. Raises :py:exc:`DecodeError`."""
        key = self.key(source)
        entry = self._lookup(key)
        if entry is None:
            entry = self._decode(key, source)
            self._store(key, entry)
        return self._result(entry)

    async def load(self, source: pil_io.Source) -> Image.Image:
        """Decode in a worker thread. Raises :py:exc:`DecodeError`."""
        key = self.key(source)
        entry = self._lookup(key)
        if entry is None:
            entry = await asyncio.to_thread(self._decode, key, source)
            self._store(key, entry)
        return self._result(entry)

    def clear(self) -> None:
        self._cache.clear()

    def _lookup(self, key: str) -> Optional[Union[Image.Image, DecodeError]]:
        entry = self._cache.get(key)
        if entry is not None:
            self._cache.move_to_end(key)
        return entry

    def _store(self, key: str, entry: Union[Image.Image, DecodeError]) -> None:
        self._cache[key] = entry
        self._cache.move_to_end(key)
        while len(self._cache) > self.max_entries:
            evicted, _ = self._cache.popitem(last=False)
            logger.debug("Evicted %s" % evicted)

    @staticmethod
    def _result(entry: Union[Image.Image, DecodeError]) -> Image.Image:
        if isinstance(entry, DecodeError):
            raise DecodeError(*entry.args)
        return entry

    def _decode(
        self, key: str, source: pil_io.Source
    ) -> Union[Image.Image, DecodeError]:
        logger.debug("Decoding %s" % key)
        try:
            return pil_io.decode(pil_io.read_source(source))
        except DecodeError as e:
            logger.warning("Failed to decode %s: %s" % (key, e))
            return e


class FontLoader(object):
    """
    Locate fonts by family name.

    A family resolves to an explicitly registered file first, then to any
    TrueType file of that name Pillow can find in the system font folders.
    When neither works, the default family is used, and as a last resort the
    font bundled with Pillow.
    """

    def __init__(
        self,
        default_family: str = DEFAULT_FONT_FAMILY,
        paths: Optional[dict[str, str]] = None,
    ) -> None:
        self.default_family = default_family
        self._paths: dict[str, str] = dict(paths or {})
        self._fonts: dict[tuple[str, float], Font] = {}
        self._missing: set[str] = set()

    def register(self, family: str, path: str) -> None:
        """Map a family name to a font file."""
        self._paths[family] = path
        self._missing.discard(family)
        self._fonts = {k: v for k, v in self._fonts.items() if k[0] != family}

    def check(self, family: str) -> bool:
        """Whether the family renders with its own glyphs."""
        try:
            self._open(family, 12)
        except FontLoadError:
            return False
        return True

    async def ensure(self, family: str) -> str:
        """
        Confirm that a family is renderable, returning the family that will
        actually be used for measuring and drawing.
        """
        available = await asyncio.to_thread(self.check, family)
        if available:
            return family
        self._warn_missing(family)
        return self.default_family

    def resolve(self, family: str, size: float) -> Font:
        """Return a font of the family, falling back to the default family."""
        key = (family, float(size))
        font = self._fonts.get(key)
        if font is not None:
            return font
        try:
            font = self._open(family, size)
        except FontLoadError:
            self._warn_missing(family)
            font = self._open_default(size)
        self._fonts[key] = font
        return font

    def _warn_missing(self, family: str) -> None:
        if family not in self._missing:
            self._missing.add(family)
            logger.warning(
                "Font %r is not available, using %r" % (family, self.default_family)
            )

    def _open(self, family: str, size: float) -> Font:
        candidates = []
        if family in self._paths:
            candidates.append(self._paths[family])
        candidates.append(family)
        if not os.path.splitext(family)[1]:
            candidates.append(family + ".ttf")
        for candidate in candidates:
            try:
                return ImageFont.truetype(candidate, size)
            except OSError:
                continue
        raise FontLoadError("Font not found: %s" % family)

    def _open_default(self, size: float) -> Font:
        try:
            return self._open(self.default_family, size)
        except FontLoadError:
            logger.debug("Default family missing, using the bundled font")
            return ImageFont.load_default(size)
