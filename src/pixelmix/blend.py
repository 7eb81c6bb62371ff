"""
Blend mode implementations.

Separable blend functions take the backdrop ``Cb`` and the source ``Cs`` as
linear-light float arrays in [0, 1] and return the mixed color. :py:func:`blend`
applies one of them to whole RGBA8 images with straight alpha.
"""

import logging
from typing import Callable, Dict

import numpy as np

from pixelmix.constants import BlendMode

logger = logging.getLogger(__name__)

BlendFn = Callable[[np.ndarray, np.ndarray], np.ndarray]


# Separable blend functions
def normal(Cb, Cs):
    return Cs


def multiply(Cb, Cs):
    return Cb * Cs


def screen(Cb, Cs):
    return Cb + Cs - (Cb * Cs)


def overlay(Cb, Cs):
    return hard_light(Cs, Cb)


def darken(Cb, Cs):
    return np.minimum(Cb, Cs)


def lighten(Cb, Cs):
    return np.maximum(Cb, Cs)


def color_dodge(Cb, Cs):
    with np.errstate(divide="ignore", invalid="ignore"):
        B = np.minimum(1.0, Cb / (1.0 - Cs))
    B = np.where(Cs >= 1.0, 1.0, B)
    return np.where(Cb <= 0.0, 0.0, B)


def color_burn(Cb, Cs):
    with np.errstate(divide="ignore", invalid="ignore"):
        B = 1.0 - np.minimum(1.0, (1.0 - Cb) / Cs)
    B = np.where(Cs <= 0.0, 0.0, B)
    return np.where(Cb >= 1.0, 1.0, B)


def hard_light(Cb, Cs):
    return np.where(Cs <= 0.5, multiply(Cb, 2.0 * Cs), screen(Cb, 2.0 * Cs - 1.0))


def soft_light(Cb, Cs):
    D = np.where(Cb <= 0.25, ((16.0 * Cb - 12.0) * Cb + 4.0) * Cb, np.sqrt(Cb))
    return np.where(
        Cs <= 0.5,
        Cb - (1.0 - 2.0 * Cs) * Cb * (1.0 - Cb),
        Cb + (2.0 * Cs - 1.0) * (D - Cb),
    )


def difference(Cb, Cs):
    return np.abs(Cb - Cs)


def exclusion(Cb, Cs):
    return Cb + Cs - 2.0 * Cb * Cs


"""Blend function table."""
BLEND_FUNC: Dict[BlendMode, BlendFn] = {
    BlendMode.NORMAL: normal,
    BlendMode.MULTIPLY: multiply,
    BlendMode.SCREEN: screen,
    BlendMode.OVERLAY: overlay,
    BlendMode.DARKEN: darken,
    BlendMode.LIGHTEN: lighten,
    BlendMode.DODGE: color_dodge,
    BlendMode.BURN: color_burn,
    BlendMode.HARD_LIGHT: hard_light,
    BlendMode.SOFT_LIGHT: soft_light,
    BlendMode.DIFFERENCE: difference,
    BlendMode.EXCLUSION: exclusion,
}


def srgb_to_linear(c: np.ndarray) -> np.ndarray:
    """Decode sRGB values in [0, 1] to linear light."""
    c = np.asarray(c, dtype=np.float64)
    return np.where(c <= 0.04045, c / 12.92, ((c + 0.055) / 1.055) ** 2.4)


def linear_to_srgb(c: np.ndarray) -> np.ndarray:
    """Encode linear light in [0, 1] to sRGB."""
    c = np.clip(np.asarray(c, dtype=np.float64), 0.0, 1.0)
    return np.where(c <= 0.0031308, c * 12.92, 1.055 * c ** (1.0 / 2.4) - 0.055)


def blend(backdrop: np.ndarray, source: np.ndarray, mode: BlendMode) -> np.ndarray:
    """
    Blend ``source`` over ``backdrop``.

    Both inputs are RGBA ``uint8`` arrays of the same shape. Color channels
    are blended in linear light; alpha follows straight-alpha source-over.

    :param backdrop: RGBA array below.
    :param source: RGBA array on top.
    :param mode: :py:class:`~pixelmix.constants.BlendMode`.
    :return: RGBA ``uint8`` array.
    """
    if backdrop.shape != source.shape:
        raise ValueError(
            "Shape mismatch: backdrop %s, source %s" % (backdrop.shape, source.shape)
        )
    blend_fn = BLEND_FUNC[mode]

    Cb = srgb_to_linear(backdrop[..., :3] / 255.0)
    Cs = srgb_to_linear(source[..., :3] / 255.0)
    alpha_b = backdrop[..., 3:4] / 255.0
    alpha_s = source[..., 3:4] / 255.0

    mixed = (1.0 - alpha_b) * Cs + alpha_b * np.clip(blend_fn(Cb, Cs), 0.0, 1.0)
    alpha = alpha_s + alpha_b * (1.0 - alpha_s)
    color = alpha_s * mixed + (1.0 - alpha_s) * alpha_b * Cb
    with np.errstate(divide="ignore", invalid="ignore"):
        color = np.where(alpha > 0.0, color / alpha, 0.0)

    result = np.empty(backdrop.shape, dtype=np.uint8)
    result[..., :3] = np.round(linear_to_srgb(color) * 255.0)
    result[..., 3:4] = np.round(alpha * 255.0)
    return result
