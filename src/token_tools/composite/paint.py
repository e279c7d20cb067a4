"""Paint and fill operations for compositing."""

import logging
from typing import Sequence, Tuple

import numpy as np
from PIL import ImageColor

from token_tools.composite._compat import require_scipy
from token_tools.constants import TRANSPARENT

logger = logging.getLogger(__name__)


def get_color(value: str) -> Tuple[Tuple[float, float, float], float]:
    """
    Parse a CSS color string into ((r, g, b), alpha) floats in [0, 1].

    Hex forms (``#rgb``, ``#rrggbb``, ``#rrggbbaa``), ``rgb()``/``rgba()``,
    ``hsl()`` and named colors are accepted, plus ``"transparent"``.
    Unparsable values are drawn as opaque black.
    """
    if value is None or value.strip().lower() == TRANSPARENT:
        return (0.0, 0.0, 0.0), 0.0
    try:
        rgba = ImageColor.getrgb(value.strip())
    except ValueError:
        logger.warning("Unknown color %r, using black" % (value,))
        return (0.0, 0.0, 0.0), 1.0
    rgb = tuple(float(x) / 255.0 for x in rgba[:3])
    alpha = float(rgba[3]) / 255.0 if len(rgba) == 4 else 1.0
    return rgb, alpha  # type: ignore[return-value]


def draw_solid_color_fill(
    size: Tuple[int, int], value: str
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Create a solid color fill of (width, height). Returns (color, alpha).
    """
    rgb, alpha = get_color(value)
    width, height = size
    color = np.full((height, width, 3), rgb, dtype=np.float32)
    return color, np.full((height, width, 1), alpha, dtype=np.float32)


@require_scipy
def draw_radial_gradient_fill(
    size: Tuple[int, int],
    stops: Sequence[str],
    center: Tuple[float, float] = (0.3, 0.3),
) -> np.ndarray:
    """
    Create a radial gradient fill.

    Colors are spread evenly from ``center`` (relative to the box) out to the
    farthest corner, like a CSS ``radial-gradient(circle at ...)``.
    """
    width, height = size
    cx, cy = center[0] * width, center[1] * height
    X, Y = _make_grid(width, height)
    radius = max(
        np.hypot(cx - x, cy - y) for x in (0, width) for y in (0, height)
    )
    Z = _make_radial_gradient(X - cx, Y - cy) / max(radius, 1e-6)
    return _make_gradient_color(stops)(np.clip(Z, 0.0, 1.0)).astype(np.float32)


@require_scipy
def draw_conic_gradient_fill(
    size: Tuple[int, int], stops: Sequence[str], angle: float = 0.0
) -> np.ndarray:
    """
    Create a conic gradient fill around the box center.

    The sweep starts at ``angle`` degrees clockwise from "up", like a CSS
    ``conic-gradient(from ...)``.
    """
    width, height = size
    X, Y = _make_grid(width, height)
    Z = _make_angle_gradient(X - width / 2.0, Y - height / 2.0, angle)
    return _make_gradient_color(stops)(Z).astype(np.float32)


def _make_grid(width: int, height: int) -> Tuple[np.ndarray, np.ndarray]:
    return np.meshgrid(
        np.arange(width, dtype=np.float32) + 0.5,
        np.arange(height, dtype=np.float32) + 0.5,
    )


def _make_radial_gradient(X, Y):
    """Generates index map for radial gradients."""
    return np.sqrt(np.power(X, 2) + np.power(Y, 2))


def _make_angle_gradient(X, Y, angle):
    """Generates index map for angle gradients, clockwise from up."""
    return ((np.degrees(np.arctan2(X, -Y)) - angle) % 360) / 360


def _make_gradient_color(stops: Sequence[str]):
    from scipy import interpolate  # type: ignore[import-untyped]

    assert len(stops) > 0
    Y = [np.array(get_color(stop)[0], dtype=np.float32) for stop in stops]
    if len(Y) == 1:
        Y = [Y[0], Y[0]]
    X = np.linspace(0.0, 1.0, len(Y))
    return interpolate.interp1d(
        X, Y, axis=0, bounds_error=False, fill_value=(Y[0], Y[-1])
    )
