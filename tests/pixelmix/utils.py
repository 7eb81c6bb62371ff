import logging

import numpy as np
from attrs import evolve

from pixelmix.config import GrainSettings, ImageSettings, OverlaySettings, RenderConfig

logging.basicConfig(level=logging.DEBUG)


def solid(width, height, rgba):
    """Uniform RGBA ``uint8`` image."""
    image = np.empty((height, width, 4), dtype=np.uint8)
    image[...] = rgba
    return image


def random_image(width, height, seed=0, opaque=True):
    rng = np.random.default_rng(seed)
    image = rng.integers(0, 256, size=(height, width, 4), dtype=np.uint8)
    if opaque:
        image[..., 3] = 255
    return image


def plain_config(**kwargs):
    """Config with every pre- and post-pass disabled."""
    config = RenderConfig(
        image1=ImageSettings(),
        image2=ImageSettings(),
        width=kwargs.pop("width", 16),
        height=kwargs.pop("height", 12),
        overlay=OverlaySettings(enabled=False),
        grain=GrainSettings(factor=0.0),
    )
    return evolve(config, **kwargs)
