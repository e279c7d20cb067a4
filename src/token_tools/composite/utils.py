"""Utility functions for composite operations."""

from typing import Union, overload

import numpy as np
from numpy.typing import NDArray


def intersect(
    a: tuple[int, int, int, int], b: tuple[int, int, int, int]
) -> tuple[int, int, int, int]:
    """Calculate intersection of two bounding boxes."""
    inter = (max(a[0], b[0]), max(a[1], b[1]), min(a[2], b[2]), min(a[3], b[3]))
    if inter[0] >= inter[2] or inter[1] >= inter[3]:
        return (0, 0, 0, 0)
    return inter


def divide(a: NDArray[np.floating], b: NDArray[np.floating]) -> NDArray[np.floating]:
    """Safe division for color ops."""
    with np.errstate(divide="ignore", invalid="ignore"):
        c = np.true_divide(a, b)
        c[~np.isfinite(c)] = 1.0
    return c


@overload
def union(backdrop: float, source: float) -> float: ...


@overload
def union(
    backdrop: NDArray[np.floating], source: NDArray[np.floating]
) -> NDArray[np.floating]: ...


@overload
def union(backdrop: float, source: NDArray[np.floating]) -> NDArray[np.floating]: ...


@overload
def union(backdrop: NDArray[np.floating], source: float) -> NDArray[np.floating]: ...


def union(
    backdrop: Union[float, NDArray[np.floating]],
    source: Union[float, NDArray[np.floating]],
) -> Union[float, NDArray[np.floating]]:
    """Generalized union of shape."""
    return backdrop + source - (backdrop * source)


def clip(x: NDArray[np.floating]) -> NDArray[np.floating]:
    """Clip between [0, 1]."""
    return np.clip(x, 0.0, 1.0)


def shift(mask: NDArray[np.floating], dx: float, dy: float) -> NDArray[np.floating]:
    """Translate a (height, width, channels) array by whole pixels, filling with 0."""
    dx, dy = int(round(dx)), int(round(dy))
    height, width = mask.shape[:2]
    result = np.zeros_like(mask)
    if abs(dx) >= width or abs(dy) >= height:
        return result
    src_y = slice(max(0, -dy), height - max(0, dy))
    dst_y = slice(max(0, dy), height - max(0, -dy))
    src_x = slice(max(0, -dx), width - max(0, dx))
    dst_x = slice(max(0, dx), width - max(0, -dx))
    result[dst_y, dst_x] = mask[src_y, src_x]
    return result


def disc(size: int, radius: float, center: Union[tuple, None] = None) -> NDArray[np.floating]:
    """Anti-aliased disc coverage of a square (size, size, 1) canvas."""
    if center is None:
        center = (size / 2.0, size / 2.0)
    Y, X = np.mgrid[0:size, 0:size].astype(np.float32) + 0.5
    distance = np.sqrt((X - center[0]) ** 2 + (Y - center[1]) ** 2)
    return np.expand_dims(clip(radius - distance + 0.5), 2).astype(np.float32)


def over(
    color_b: NDArray[np.floating],
    alpha_b: NDArray[np.floating],
    color_s: Union[NDArray[np.floating], tuple],
    alpha_s: NDArray[np.floating],
) -> tuple:
    """Source-over of straight (color, alpha) pairs. Returns (color, alpha)."""
    color_s = np.asarray(color_s, dtype=np.float32)
    alpha = union(alpha_b, alpha_s)
    color = divide(color_s * alpha_s + color_b * alpha_b * (1.0 - alpha_s), alpha)
    color[np.broadcast_to(alpha, color.shape) == 0] = 0.0
    return clip(color).astype(np.float32), alpha.astype(np.float32)
