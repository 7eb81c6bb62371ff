"""
Sort key functions.

Each function projects RGBA pixels to a signed integer ranking key. The
input is a ``uint8`` array of shape ``(..., 4)``, either a single pixel or a
whole image, and the output is an ``int16`` array of shape ``(...)``.
"""

import logging
from typing import Callable, Dict, Tuple

import numpy as np

from pixelmix.constants import SortKey

logger = logging.getLogger(__name__)

SortFn = Callable[[np.ndarray], np.ndarray]

_F = np.float32


def _channels(c) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    c = np.asarray(c)
    if c.shape[-1] < 3:
        raise ValueError("Expected RGB(A) pixels, got shape %s" % (c.shape,))
    return (
        c[..., 0].astype(np.int32),
        c[..., 1].astype(np.int32),
        c[..., 2].astype(np.int32),
    )


def _round_half_away(x):
    whole = np.trunc(x)
    return np.where(x - whole >= _F(0.5), whole + _F(1.0), whole)


def hsl(c) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Convert RGB(A) pixels to hue in degrees [0, 360), saturation and
    lightness in [0, 1]. Gray pixels have zero hue and saturation.

    Everything is computed in single precision, so truncating the results
    to integer keys gives the same ranks on every platform.
    """
    r8, g8, b8 = _channels(c)
    c_max = np.maximum(np.maximum(r8, g8), b8)
    c_min = np.minimum(np.minimum(r8, g8), b8)
    scale = _F(255.0)
    r, g, b = r8.astype(_F) / scale, g8.astype(_F) / scale, b8.astype(_F) / scale
    mx, mn = c_max.astype(_F) / scale, c_min.astype(_F) / scale

    lightness = (mx + mn) / _F(2.0)
    delta = mx - mn
    gray = c_max == c_min
    safe = np.where(gray, _F(1.0), delta)

    with np.errstate(divide="ignore", invalid="ignore"):
        saturation = np.where(
            lightness < _F(0.5), delta / (mx + mn), delta / (_F(2.0) - mx - mn)
        )
    saturation = np.where(gray, _F(0.0), saturation)

    half = delta / _F(2.0)
    r2 = ((mx - r) / _F(6.0) + half) / safe
    g2 = ((mx - g) / _F(6.0) + half) / safe
    b2 = ((mx - b) / _F(6.0) + half) / safe
    hue = np.where(
        c_max == r8,
        b2 - g2,
        np.where(
            c_max == g8,
            _F(1.0) / _F(3.0) + r2 - b2,
            _F(2.0) / _F(3.0) + g2 - r2,
        ),
    )
    hue = np.where(
        hue < _F(0.0),
        hue + _F(1.0),
        np.where(hue > _F(1.0), hue - _F(1.0), hue),
    )
    hue = _round_half_away(hue * _F(360.0) * _F(100.0)) / _F(100.0)
    hue = np.where(hue >= _F(360.0), hue - _F(360.0), hue)
    hue = np.where(gray, _F(0.0), hue)
    return hue, saturation, lightness


def luma(c) -> np.ndarray:
    """Rec. 709 luma."""
    r, g, b = _channels(c)
    return ((2126 * r + 7152 * g + 722 * b) // 10000).astype(np.int16)


def hue(c) -> np.ndarray:
    h, _, _ = hsl(c)
    return np.trunc(h / _F(360.0) * _F(255.0)).astype(np.int16)


def saturation(c) -> np.ndarray:
    _, s, _ = hsl(c)
    return np.trunc(s * _F(255.0)).astype(np.int16)


def max_rgb(c) -> np.ndarray:
    r, g, b = _channels(c)
    return np.maximum(np.maximum(r, g), b).astype(np.int16)


def min_rgb(c) -> np.ndarray:
    r, g, b = _channels(c)
    return np.minimum(np.minimum(r, g), b).astype(np.int16)


def red_green(c) -> np.ndarray:
    r, g, _ = _channels(c)
    return (r - g).astype(np.int16)


def green_blue(c) -> np.ndarray:
    _, g, b = _channels(c)
    return (g - b).astype(np.int16)


def blue_red(c) -> np.ndarray:
    r, _, b = _channels(c)
    return (b - r).astype(np.int16)


def wrapped_hue(c) -> np.ndarray:
    """Angular distance of the hue from red, so magenta and orange rank close."""
    h, _, _ = hsl(c)
    distance = np.minimum(h, _F(360.0) - h)
    return np.trunc(distance / _F(180.0) * _F(255.0)).astype(np.int16)


def hue_sat(c) -> np.ndarray:
    return (hue(c).astype(np.int32) * saturation(c) // 255).astype(np.int16)


def luma_sat(c) -> np.ndarray:
    return (luma(c).astype(np.int32) * saturation(c) // 255).astype(np.int16)


def chroma(c) -> np.ndarray:
    return max_rgb(c) - min_rgb(c)


"""Sort function table."""
SORT_FUNC: Dict[SortKey, SortFn] = {
    SortKey.LIGHTNESS: luma,
    SortKey.HUE: hue,
    SortKey.SATURATION: saturation,
    SortKey.MAX_RGB: max_rgb,
    SortKey.MIN_RGB: min_rgb,
    SortKey.RG: red_green,
    SortKey.GB: green_blue,
    SortKey.BR: blue_red,
    SortKey.WRAPPED_HUE: wrapped_hue,
    SortKey.HUE_SAT: hue_sat,
    SortKey.LUMA_SAT: luma_sat,
    SortKey.CHROMA: chroma,
}
