"""
PIL IO module.
"""

import logging
import os
from typing import Tuple, Union

import numpy as np
from PIL import Image

logger = logging.getLogger(__name__)

PREVIEW_LIMIT = 1200


def load_image(path: Union[str, os.PathLike]) -> Image.Image:
    """
    Decode an image file into RGBA.

    Decode failures propagate as raised by Pillow.
    """
    with Image.open(path) as image:
        logger.debug("Loaded %s: %s %dx%d" % (path, image.mode, *image.size))
        return image.convert("RGBA")


def save_image(image: Union[Image.Image, np.ndarray], path: Union[str, os.PathLike]) -> None:
    """Encode ``image``; the format follows the file extension."""
    if isinstance(image, np.ndarray):
        image = Image.fromarray(image)
    image.save(path)
    logger.debug("Saved %s" % (path,))


def to_array(image: Union[Image.Image, np.ndarray]) -> np.ndarray:
    """Convert a PIL image or an RGBA array into an RGBA ``uint8`` array."""
    if isinstance(image, Image.Image):
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return np.asarray(image, dtype=np.uint8).copy()
    if isinstance(image, np.ndarray):
        if image.ndim != 3 or image.shape[2] != 4:
            raise ValueError("Expected (h, w, 4) RGBA array, got %s" % (image.shape,))
        return image.astype(np.uint8, copy=True)
    raise TypeError("Expected PIL.Image.Image or numpy.ndarray, got %s" % type(image))


def preview_size(width: float, height: float, limit: float = PREVIEW_LIMIT) -> Tuple[float, float]:
    """Shrink ``(width, height)`` so the longer side fits ``limit``."""
    if max(width, height) <= limit:
        return width, height
    aspect = height / width
    if width >= height:
        return limit, limit * aspect
    return limit / aspect, limit
