"""
Layer effects rendering.

Effects work on coverage masks of shape (height, width, 1) and return new
coverage masks; the caller pairs each mask with its effect color. They back
the text layer decorations and the rim shadow.

**Note**: Effects rendering requires scikit-image. Install with::

    pip install 'token-tools[composite]'

Supported effects:

- **Shadow**: the mask offset and Gaussian-blurred
- **Stroke**: a band of the given width centered on the mask outline
- **Glow**: a blurred halo, emphasized by repeated passes

Blur amounts follow the canvas ``shadowBlur`` convention: the Gaussian
standard deviation is half the blur value.
"""

import logging

import numpy as np

from token_tools.composite import utils
from token_tools.composite._compat import require_skimage
from token_tools.composite.filters import gaussian
from token_tools.constants import GLOW_PASSES

logger = logging.getLogger(__name__)


def blur_mask(mask: np.ndarray, blur: float) -> np.ndarray:
    """Blur a coverage mask by a canvas ``shadowBlur`` amount."""
    if blur <= 0:
        return mask
    return utils.clip(gaussian(mask, blur / 2.0))


def draw_shadow(
    mask: np.ndarray, blur: float, offset_x: float = 0.0, offset_y: float = 0.0
) -> np.ndarray:
    """Return the coverage of a drop shadow cast by ``mask``."""
    return blur_mask(utils.shift(mask, offset_x, offset_y), blur)


@require_skimage
def draw_stroke(mask: np.ndarray, width: float) -> np.ndarray:
    """
    Return the coverage of a stroke of ``width`` pixels centered on the
    outline of ``mask``: half of it outside and half inside.
    """
    from skimage.morphology import dilation, disk, erosion

    if width <= 0:
        return np.zeros_like(mask)
    pen = disk(max(1, int(round(width / 2.0))))
    plane = mask[:, :, 0]
    outer = dilation(plane, pen)
    inner = erosion(plane, pen)
    return np.expand_dims(utils.clip(outer - inner), 2).astype(np.float32)


def draw_glow(mask: np.ndarray, blur: float, passes: int = GLOW_PASSES) -> np.ndarray:
    """
    Return the coverage of a glow around ``mask``.

    The glow is the blurred mask composited over itself ``passes`` times.
    """
    halo = blur_mask(mask, blur)
    glow = np.zeros_like(halo)
    for _ in range(passes):
        glow = utils.union(glow, halo)
    return glow
