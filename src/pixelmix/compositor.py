"""
Two-image compositor.

:py:func:`render` runs the whole pipeline: both images are resized to the
output size, hue rotated, blurred and faded, merged by the configured
:py:class:`~pixelmix.constants.Combine` strategy, and finished with the
overlay grid and film grain::

    from pixelmix import RenderConfig, render
    from pixelmix.pil_io import load_image

    config = RenderConfig(width=1200, height=900)
    image = render(load_image("a.jpg"), load_image("b.jpg"), config)
    image.save("out.png")
"""

import logging
from typing import Callable, Dict, Optional, Tuple, Union

import numpy as np
from PIL import Image
from scipy.ndimage import gaussian_filter

from pixelmix.blend import blend
from pixelmix.canvas import Canvas
from pixelmix.config import ImageSettings, RenderConfig
from pixelmix.constants import Combine
from pixelmix.effects import apply_grain, draw_overlay
from pixelmix.noise import NoiseField
from pixelmix.parallel import map_bands
from pixelmix.pil_io import to_array
from pixelmix.pixelsort import position_grid, sort_image, unsort_image
from pixelmix.warp import warp

logger = logging.getLogger(__name__)

ImageLike = Union[Image.Image, np.ndarray]
Progress = Callable[[str], None]
CombineFn = Callable[
    [np.ndarray, Optional[np.ndarray], RenderConfig, Optional[int]], np.ndarray
]

NOISE_SCALE = 5.0
SECONDARY_SEED_OFFSET = 1

# Luminance-preserving hue rotation: _HUE_BASE + cos * _HUE_COS + sin * _HUE_SIN.
_HUE_BASE = np.tile([0.213, 0.715, 0.072], (3, 1))
_HUE_COS = np.eye(3) - _HUE_BASE
_HUE_SIN = np.array(
    [
        [-0.213, -0.715, 0.928],
        [0.143, 0.140, -0.283],
        [-0.787, 0.715, 0.072],
    ]
)


def resize_exact(image: Image.Image, size: Tuple[int, int]) -> Image.Image:
    """Resize to exactly ``size`` with Lanczos filtering, ignoring aspect."""
    if image.size == tuple(size):
        return image
    return image.resize(size, Image.Resampling.LANCZOS)


def hue_matrix(degrees: float) -> np.ndarray:
    """Luminance-preserving RGB rotation about the gray axis."""
    theta = np.deg2rad(degrees)
    return _HUE_BASE + np.cos(theta) * _HUE_COS + np.sin(theta) * _HUE_SIN


def hue_rotate(rgba: np.ndarray, degrees: float) -> np.ndarray:
    """Rotate the hue of an RGBA ``uint8`` array; alpha is kept."""
    if degrees % 360 == 0:
        return rgba
    color = rgba[..., :3].astype(np.float64) @ hue_matrix(degrees).T
    result = rgba.copy()
    result[..., :3] = np.round(np.clip(color, 0.0, 255.0))
    return result


def gaussian_blur(rgba: np.ndarray, sigma: float) -> np.ndarray:
    """Blur every channel with standard deviation ``sigma``; 0 is a no-op."""
    if sigma <= 0:
        return rgba
    blurred = gaussian_filter(rgba.astype(np.float64), sigma=(sigma, sigma, 0))
    return np.round(np.clip(blurred, 0.0, 255.0)).astype(np.uint8)


def apply_opacity(rgba: np.ndarray, opacity: int) -> np.ndarray:
    """Scale alpha by ``opacity / 255``."""
    if opacity >= 255:
        return rgba
    result = rgba.copy()
    result[..., 3] = (rgba[..., 3].astype(np.uint32) * opacity + 127) // 255
    return result


def prepare(image: ImageLike, settings: ImageSettings, size: Tuple[int, int]) -> np.ndarray:
    """
    Pre-process one source image.

    :param image: PIL image or RGBA ``uint8`` array.
    :param settings: :py:class:`~pixelmix.config.ImageSettings`.
    :param size: output ``(width, height)``.
    :return: RGBA ``uint8`` array of shape ``(height, width, 4)``.
    """
    if isinstance(image, np.ndarray):
        image = Image.fromarray(to_array(image))
    elif not isinstance(image, Image.Image):
        raise TypeError(
            "Expected PIL.Image.Image or numpy.ndarray, got %s" % type(image)
        )
    if image.width == 0 or image.height == 0:
        raise ValueError("Empty image: %dx%d" % image.size)
    rgba = to_array(resize_exact(image.convert("RGBA"), size))
    rgba = hue_rotate(rgba, settings.hue_rotation)
    rgba = gaussian_blur(rgba, settings.blur)
    return apply_opacity(rgba, settings.opacity)


def noise_signal(
    config: RenderConfig, height: int, width: int, contraction: float, workers=None
) -> np.ndarray:
    """
    Per-pixel threshold signal of the divide and mix modes.

    ``(n1 + c * n2 * d) / contraction`` where ``n1`` and ``n2`` are the
    primary and secondary noise fields and ``d`` is seeded dither in
    [-0.5, 0.5].
    """
    octaves = config.noise.octaves
    c = config.noise.contamination
    primary = NoiseField(
        config.seed, octaves, scale=NOISE_SCALE, width=width, height=height
    )
    secondary = NoiseField(
        config.seed + SECONDARY_SEED_OFFSET,
        octaves,
        scale=NOISE_SCALE,
        width=width,
        height=height,
    )
    # Drawn before fan-out so the signal is independent of the worker count.
    dither = 0.5 - np.random.default_rng(config.seed).random((height, width))
    signal = np.empty((height, width), dtype=np.float64)

    def _signal_band(start: int, stop: int) -> None:
        n1 = primary.sample_rows(start, stop, width)
        n2 = secondary.sample_rows(start, stop, width)
        signal[start:stop] = (n1 + c * n2 * dither[start:stop]) / contraction

    map_bands(_signal_band, height, workers)
    return signal


def combine_blend(image1, image2, config, workers=None):
    result = np.empty_like(image1)

    def _blend_band(start: int, stop: int) -> None:
        result[start:stop] = blend(image1[start:stop], image2[start:stop], config.mode)

    map_bands(_blend_band, image1.shape[0], workers)
    return result


def combine_divide(image1, image2, config, workers=None):
    height, width = image1.shape[:2]
    contamination = config.noise.contamination
    signal = noise_signal(config, height, width, 1.0 + contamination, workers)
    mask = signal > config.noise.cutoff
    logger.debug("Divide: %d of %d pixels from image 1" % (mask.sum(), mask.size))
    return np.where(mask[..., np.newaxis], image1, image2)


def combine_mix(image1, image2, config, workers=None):
    height, width = image1.shape[:2]
    contamination = config.noise.contamination
    signal = noise_signal(config, height, width, 1.0 + 0.5 * contamination, workers)
    mask = signal > config.noise.cutoff
    result = np.empty_like(image1)

    def _mix_band(start: int, stop: int) -> None:
        one, two = image1[start:stop], image2[start:stop]
        above = blend(two, one, config.mode)
        below = blend(one, two, config.mode)
        result[start:stop] = np.where(mask[start:stop, :, np.newaxis], above, below)

    map_bands(_mix_band, height, workers)
    return result


def combine_warp(image1, image2, config, workers=None):
    return warp(
        image1,
        image2,
        config.warp,
        config.seed,
        octaves=config.noise.octaves,
        workers=workers,
    )


def _grid(image, config, workers):
    sort = config.sort
    return position_grid(
        image, sort.key, sort.by, sort.row_order, sort.col_order, workers=workers
    )


def combine_unsort(image1, image2, config, workers=None):
    return unsort_image(_grid(image1, config, workers), image2)


def combine_sort(image1, image2, config, workers=None):
    return sort_image(_grid(image1, config, workers), image1)


"""Combine function table."""
COMBINE_FUNC: Dict[Combine, CombineFn] = {
    Combine.BLEND: combine_blend,
    Combine.DIVIDE: combine_divide,
    Combine.MIX: combine_mix,
    Combine.WARP: combine_warp,
    Combine.UNSORT: combine_unsort,
    Combine.SORT: combine_sort,
}


def render(
    image1: ImageLike,
    image2: Optional[ImageLike],
    config: RenderConfig,
    workers: Optional[int] = None,
    progress: Optional[Progress] = None,
) -> Image.Image:
    """
    Render the composite of two images.

    :param image1: first source, PIL image or RGBA ``uint8`` array.
    :param image2: second source; may be None only for
        :py:attr:`~pixelmix.constants.Combine.SORT`.
    :param config: :py:class:`~pixelmix.config.RenderConfig`.
    :param workers: thread count, default CPU count.
    :param progress: optional callable receiving stage messages.
    :return: RGBA :py:class:`PIL.Image.Image` of ``config.size``.
    :raises ValueError: when the second image is missing or an image is
        empty.
    :raises TypeError: for unsupported image objects.
    """

    def report(message: str) -> None:
        logger.debug(message)
        if progress is not None:
            progress(message)

    if image2 is None and Combine.needs_second_image(config.combine):
        raise ValueError("%s needs a second image" % config.combine.name.title())

    report("Preparing images")
    one = prepare(image1, config.image1, config.size)
    two = prepare(image2, config.image2, config.size) if image2 is not None else None

    report("Combining: %s" % config.combine.name.title())
    combined = COMBINE_FUNC[config.combine](one, two, config, workers)

    canvas = Canvas.from_array(combined)
    if config.overlay.enabled:
        report("Drawing overlay")
        draw_overlay(canvas, config.overlay)
    report("Adding grain")
    apply_grain(canvas, config.grain, config.seed)
    report("Done")
    return canvas.to_image()
