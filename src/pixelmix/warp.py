"""
Polar noise warp.

Every destination pixel looks up a sampling angle and a radius from two
independently seeded noise fields. The noise coordinates are offset by color
features of a reference image, so the displacement follows the reference's
structure. The displaced position is mirrored back into the image before the
target image is sampled there.
"""

import logging
from typing import TYPE_CHECKING, Optional, Tuple, Union

import numpy as np
from skimage.color import rgb2lab

from pixelmix.constants import WarpProjection
from pixelmix.noise import NoiseField
from pixelmix.parallel import map_bands

if TYPE_CHECKING:
    from pixelmix.config import WarpSettings

logger = logging.getLogger(__name__)

ANGLE_SEED_OFFSET = 3
RADIUS_SEED_OFFSET = 4


def reflect(value, size: int) -> Union[int, np.ndarray]:
    """
    Mirror coordinates into ``[0, size)``.

    The pattern repeats every ``2 * size`` with the edge pixel doubled, e.g.
    for ``size == 4``: ``-2 -> 1``, ``-1 -> 0``, ``4 -> 3``, ``5 -> 2``.
    Non-integer values are rounded first.
    """
    if size <= 0:
        raise ValueError("size must be positive, got %r" % size)
    index = np.rint(np.asarray(value, dtype=np.float64)).astype(np.int64)
    period = 2 * size
    folded = np.mod(index, period)
    result = np.where(folded >= size, period - 1 - folded, folded)
    if np.ndim(result) == 0:
        return int(result)
    return result


def features(
    reference: np.ndarray, projection: WarpProjection
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Project the reference image to the angle and radius noise offsets.

    :param reference: RGBA ``uint8`` array.
    :param projection: :py:class:`~pixelmix.constants.WarpProjection`.
    :return: ``(angle_offset, radius_offset)`` float arrays in about [0, 1].
    """
    lab = rgb2lab(reference[..., :3] / 255.0)
    if projection == WarpProjection.LIGHTNESS:
        lightness = lab[..., 0] / 100.0
        return lightness, lightness
    elif projection == WarpProjection.OPPONENT:
        return (lab[..., 1] + 128.0) / 255.0, (lab[..., 2] + 128.0) / 255.0
    raise AssertionError("Unhandled projection: %r" % projection)


def warp(
    reference: np.ndarray,
    target: np.ndarray,
    settings: "WarpSettings",
    seed: int,
    octaves: int = 2,
    workers: Optional[int] = None,
) -> np.ndarray:
    """
    Warp ``target`` by noise driven from ``reference``.

    :param reference: RGBA ``uint8`` array providing the color features.
    :param target: RGBA ``uint8`` array to sample, same shape.
    :param settings: :py:class:`~pixelmix.config.WarpSettings`.
    :param seed: render seed; the angle and radius fields derive from it.
    :param octaves: roughness of both noise fields.
    :return: RGBA ``uint8`` array of the same shape.
    """
    if reference.shape != target.shape:
        raise ValueError(
            "Shape mismatch: reference %s, target %s" % (reference.shape, target.shape)
        )
    height, width = target.shape[:2]
    angle_offset, radius_offset = features(reference, settings.projection)
    angle_field = NoiseField(seed + ANGLE_SEED_OFFSET, octaves)
    radius_field = NoiseField(seed + RADIUS_SEED_OFFSET, octaves)
    result = np.empty_like(target)

    def _warp_band(start: int, stop: int) -> None:
        ys, xs = np.mgrid[start:stop, 0:width].astype(np.float64)
        u = xs / width
        v = ys / height
        fa = angle_offset[start:stop]
        fr = radius_offset[start:stop]
        theta = (
            2.0
            * np.pi
            * settings.angle_factor
            * angle_field.sample(settings.angle_scale * u + fa, settings.angle_scale * v + fa)
        )
        radius = settings.radius_factor * radius_field.sample(
            settings.radius_scale * u + fr, settings.radius_scale * v + fr
        )
        sx = reflect(xs + radius * np.cos(theta), width)
        sy = reflect(ys + radius * np.sin(theta), height)
        result[start:stop] = target[sy, sx]

    logger.debug(
        "Warping %dx%d with %s projection" % (width, height, settings.projection)
    )
    map_bands(_warp_band, height, workers)
    return result
