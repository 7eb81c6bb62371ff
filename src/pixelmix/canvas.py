"""
Premultiplied drawing surface.

The compositing result is loaded into a :py:class:`Canvas`, post-passes draw
onto it, and :py:meth:`Canvas.to_array` rasterizes it back to straight-alpha
RGBA8.
"""

import logging

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)


class Canvas(object):
    """
    RGBA8 surface with premultiplied alpha.

    Example::

        canvas = Canvas.from_array(rgba)
        canvas.composite_mask(mask, (0, 0, 0))
        rgba = canvas.to_array()
    """

    def __init__(self, pixmap: np.ndarray):
        if pixmap.ndim != 3 or pixmap.shape[2] != 4 or pixmap.dtype != np.uint8:
            raise ValueError(
                "Expected (h, w, 4) uint8 pixmap, got %s %s"
                % (pixmap.shape, pixmap.dtype)
            )
        self.pixmap = pixmap

    @classmethod
    def from_array(cls, rgba: np.ndarray) -> "Canvas":
        """Premultiply a straight-alpha RGBA8 array."""
        alpha = rgba[..., 3:4].astype(np.uint32)
        pixmap = np.empty(rgba.shape, dtype=np.uint8)
        pixmap[..., :3] = (rgba[..., :3].astype(np.uint32) * alpha + 127) // 255
        pixmap[..., 3:4] = rgba[..., 3:4]
        return cls(pixmap)

    @property
    def width(self) -> int:
        return self.pixmap.shape[1]

    @property
    def height(self) -> int:
        return self.pixmap.shape[0]

    def composite_mask(self, mask: np.ndarray, color) -> None:
        """
        Paint a solid color through a coverage mask, source-over.

        :param mask: float array of shape ``(h, w)`` in [0, 1].
        :param color: ``(r, g, b)`` tuple in 0-255.
        """
        coverage = np.clip(mask, 0.0, 1.0)[..., np.newaxis]
        source = np.empty((1, 1, 4), dtype=np.float64)
        source[..., :3] = color
        source[..., 3] = 255.0
        result = source * coverage + self.pixmap * (1.0 - coverage)
        self.pixmap = np.round(result).astype(np.uint8)

    def add_luminance(self, delta: np.ndarray) -> None:
        """
        Shift the color channels by ``delta`` (straight-alpha units).

        Channels stay premultiplied, so they are clipped to their alpha.
        """
        alpha = self.pixmap[..., 3:4].astype(np.float64)
        color = self.pixmap[..., :3] + delta[..., np.newaxis] * alpha / 255.0
        self.pixmap[..., :3] = np.round(np.clip(color, 0.0, alpha))

    def to_array(self) -> np.ndarray:
        """Un-premultiply into a straight-alpha RGBA8 array."""
        alpha = self.pixmap[..., 3:4].astype(np.uint32)
        color = self.pixmap[..., :3].astype(np.uint32) * 255
        straight = np.where(alpha > 0, color // np.maximum(alpha, 1), 0)
        result = np.empty(self.pixmap.shape, dtype=np.uint8)
        result[..., :3] = np.minimum(straight, 255)
        result[..., 3:4] = self.pixmap[..., 3:4]
        return result

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.to_array())
