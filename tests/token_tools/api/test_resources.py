import asyncio
import logging

import pytest

from token_tools.api.resources import (
    BitmapLoader,
    DecodeError,
    FontLoader,
    FontLoadError,
)

from ..utils import png_bytes, solid_image

logger = logging.getLogger(__name__)

MISSING = "token-tools-no-such-family"


def test_bitmap_key():
    data = png_bytes(solid_image())
    assert BitmapLoader.key(data).startswith("sha1:")
    assert BitmapLoader.key(data) == BitmapLoader.key(bytearray(data))
    assert BitmapLoader.key("logo.png") == "path:logo.png"


def test_bitmap_get_is_cached():
    loader = BitmapLoader()
    data = png_bytes(solid_image((5, 7)))
    image = loader.get(data)
    assert image.size == (5, 7)
    assert image.mode == "RGBA"
    assert loader.get(data) is image
    assert data in loader
    assert len(loader) == 1
    loader.clear()
    assert len(loader) == 0


def test_bitmap_load():
    loader = BitmapLoader()
    data = png_bytes(solid_image((3, 3)))
    image = asyncio.run(loader.load(data))
    assert image.size == (3, 3)
    assert loader.get(data) is image


def test_bitmap_load_path(tmp_path):
    path = tmp_path / "logo.png"
    path.write_bytes(png_bytes(solid_image((4, 2))))
    image = asyncio.run(BitmapLoader().load(str(path)))
    assert image.size == (4, 2)


@pytest.mark.parametrize("source", [b"garbage", "/no/such/file.png"])
def test_bitmap_decode_error(source, caplog):
    loader = BitmapLoader()
    with caplog.at_level(logging.WARNING):
        with pytest.raises(DecodeError):
            loader.get(source)
        with pytest.raises(DecodeError):
            asyncio.run(loader.load(source))
        with pytest.raises(DecodeError):
            loader.get(source)
    assert source in loader
    assert caplog.text.count("Failed to decode") == 1


def test_bitmap_cache_is_bounded():
    loader = BitmapLoader(max_entries=2)
    first, second, third = [png_bytes(solid_image((n, n))) for n in (1, 2, 3)]
    image = loader.get(first)
    loader.get(second)
    assert loader.get(first) is image
    loader.get(third)
    assert len(loader) == 2
    assert first in loader
    assert second not in loader
    assert third in loader


def test_font_load_error_is_os_error():
    assert issubclass(FontLoadError, OSError)


def test_font_check():
    assert not FontLoader().check(MISSING)


def test_font_resolve_fallback(caplog):
    loader = FontLoader(default_family=MISSING + "-default")
    with caplog.at_level(logging.WARNING):
        font = loader.resolve(MISSING, 24)
        loader.resolve(MISSING, 24)
        loader.resolve(MISSING, 30)
    assert font.getlength("AB") > 0
    assert loader.resolve(MISSING, 24) is font
    assert caplog.text.count(MISSING + "'") == 1


def test_font_ensure():
    loader = FontLoader(default_family="fallback")
    assert asyncio.run(loader.ensure(MISSING)) == "fallback"


def test_font_register_bad_path():
    loader = FontLoader()
    loader.register("Broken", "/no/such/font.ttf")
    assert not loader.check("Broken")
