"""
pixelmix: generative compositing of two images.

Two source images are combined by one of several strategies (blend modes,
noise-thresholded divide and mix, polar noise warp, or a pixel sort
permutation) and finished with a faded line grid and film grain.

Basic usage::

    from pixelmix import RenderConfig, render
    from pixelmix.constants import BlendMode, Combine
    from pixelmix.pil_io import load_image

    config = RenderConfig(
        width=1200, height=900, combine=Combine.MIX, mode=BlendMode.SOFT_LIGHT
    )
    render(load_image("a.jpg"), load_image("b.jpg"), config).save("out.png")

Architecture:

- :py:mod:`pixelmix.compositor`: the render pipeline
- :py:mod:`pixelmix.config`: render parameters and settings files
- :py:mod:`pixelmix.blend`, :py:mod:`pixelmix.pixelsort`,
  :py:mod:`pixelmix.warp`: the combine engines
- :py:mod:`pixelmix.noise`: seeded fractal noise
- :py:mod:`pixelmix.effects`: overlay lines and grain
"""

from pixelmix.compositor import render
from pixelmix.config import RenderConfig
from pixelmix.version import __version__

__all__ = ["RenderConfig", "render", "__version__"]
