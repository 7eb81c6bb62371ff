"""
Seeded fractal noise.

:py:class:`NoiseField` evaluates fractal Brownian motion over classic 2D
Perlin gradient noise. A field is a pure function of its parameters and the
sampling coordinates, so the same field may be sampled from many threads::

    field = NoiseField(seed=13, octaves=2, scale=5.0, width=640, height=480)
    value = field.sample(10, 20)               # float
    plane = field.sample_rows(0, 480, 640)      # (480, 640) ndarray
"""

import functools
import logging
from typing import Union

import numpy as np
from attrs import define, field

from pixelmix.validators import positive, range_

logger = logging.getLogger(__name__)

MAX_OCTAVES = 8

LACUNARITY = 2.0
PERSISTENCE = 0.5

_ANGLES = np.arange(8) * (np.pi / 4.0)
_GRADIENTS = np.stack((np.cos(_ANGLES), np.sin(_ANGLES)), axis=1)


@functools.lru_cache(maxsize=64)
def _permutation(seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    table = rng.permutation(256).astype(np.int64)
    table = np.concatenate((table, table))
    table.setflags(write=False)
    return table


def _fade(t):
    return t * t * t * (t * (t * 6.0 - 15.0) + 10.0)


def _lerp(a, b, t):
    return a + t * (b - a)


def _grad(hashed, x, y):
    g = _GRADIENTS[hashed & 7]
    return g[..., 0] * x + g[..., 1] * y


def perlin(x, y, seed: int) -> np.ndarray:
    """
    Classic 2D Perlin noise.

    The value is zero on integer lattice points and lies in [-1, 1].
    """
    x, y = np.broadcast_arrays(
        np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)
    )
    perm = _permutation(seed)

    x0 = np.floor(x)
    y0 = np.floor(y)
    xf = x - x0
    yf = y - y0
    xi = x0.astype(np.int64) & 255
    yi = y0.astype(np.int64) & 255

    aa = perm[perm[xi] + yi]
    ab = perm[perm[xi] + yi + 1]
    ba = perm[perm[xi + 1] + yi]
    bb = perm[perm[xi + 1] + yi + 1]

    u = _fade(xf)
    v = _fade(yf)
    x1 = _lerp(_grad(aa, xf, yf), _grad(ba, xf - 1.0, yf), u)
    x2 = _lerp(_grad(ab, xf, yf - 1.0), _grad(bb, xf - 1.0, yf - 1.0), u)
    # Unit gradients peak at sqrt(1/2).
    return np.clip(_lerp(x1, x2, v) * np.sqrt(2.0), -1.0, 1.0)


@define(frozen=True)
class NoiseField:
    """
    Fractal noise sampler.

    .. py:attribute:: seed

        Seed of the first octave; octave ``i`` uses ``seed + i``.

    .. py:attribute:: octaves

        Number of summed octaves (roughness), 0 to 8. Zero octaves give a
        flat zero field.

    .. py:attribute:: scale

        Spatial frequency over the ``width`` x ``height`` extent.

    .. py:attribute:: factor

        Output magnitude. Values lie in ``[-factor, factor]``.
    """

    seed: int = field(converter=int)
    octaves: int = field(default=1, converter=int, validator=range_(0, MAX_OCTAVES))
    scale: float = field(default=1.0, converter=float)
    factor: float = field(default=1.0, converter=float)
    width: float = field(default=1.0, converter=float, validator=positive)
    height: float = field(default=1.0, converter=float, validator=positive)

    def fbm(self, x, y) -> np.ndarray:
        """Unscaled fractal sum in [-1, 1]."""
        x, y = np.broadcast_arrays(
            np.asarray(x, dtype=np.float64), np.asarray(y, dtype=np.float64)
        )
        total = np.zeros(x.shape, dtype=np.float64)
        amplitude, frequency, norm = 1.0, 1.0, 0.0
        for octave in range(self.octaves):
            total += amplitude * perlin(x * frequency, y * frequency, self.seed + octave)
            norm += amplitude
            amplitude *= PERSISTENCE
            frequency *= LACUNARITY
        if norm == 0.0:
            return total
        return total / norm

    def sample(self, x, y) -> Union[float, np.ndarray]:
        """
        Evaluate the field at ``(x, y)``.

        :param x: scalar or array of x coordinates.
        :param y: scalar or array of y coordinates.
        :return: float for scalar input, otherwise an ndarray.
        """
        value = self.factor * self.fbm(
            self.scale * np.asarray(x, dtype=np.float64) / self.width,
            self.scale * np.asarray(y, dtype=np.float64) / self.height,
        )
        if np.ndim(value) == 0:
            return float(value)
        return value

    def sample_rows(
        self, start: int, stop: int, width: int, offset: float = 0.0
    ) -> np.ndarray:
        """Sample the pixel grid rows ``[start, stop)`` as a 2D array."""
        ys, xs = np.mgrid[start:stop, 0:width].astype(np.float64)
        return self.sample(xs + offset, ys + offset)
