"""Pytest configuration for token-tools tests."""

from typing import Any

import pytest

from token_tools.api.resources import FontLoader

#: Family that never resolves, so text renders with Pillow's bundled font.
TEST_FONT_FAMILY = "token-tools-missing-test-font"


def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "composite: mark test as requiring composite dependencies (aggdraw, scipy, scikit-image)",
    )


# Check if composite dependencies are available
try:
    import aggdraw  # noqa: F401 # type: ignore
    import scipy  # noqa: F401 # type: ignore
    import skimage  # noqa: F401

    HAS_COMPOSITE = True
except ImportError:
    HAS_COMPOSITE = False


# Marker to skip tests that require composite dependencies
skip_without_composite = pytest.mark.skipif(
    not HAS_COMPOSITE,
    reason="Requires composite dependencies: pip install 'token-tools[composite]'",
)


def pytest_collection_modifyitems(config: Any, items: list) -> None:
    for item in items:
        if item.get_closest_marker("composite") is not None:
            item.add_marker(skip_without_composite)


@pytest.fixture(scope="session")
def font_loader() -> FontLoader:
    return FontLoader(default_family=TEST_FONT_FAMILY)


@pytest.fixture(scope="session")
def font(font_loader: FontLoader) -> Any:
    return font_loader.resolve(TEST_FONT_FAMILY, 24)
