import numpy as np
import pytest

from pixelmix.config import WarpSettings
from pixelmix.constants import WarpProjection
from pixelmix.warp import features, reflect, warp

from .utils import random_image, solid


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 0),
        (3, 3),
        (4, 3),
        (5, 2),
        (7, 0),
        (8, 0),
        (-1, 0),
        (-2, 1),
        (-5, 3),
        (2.6, 3),
    ],
)
def test_reflect(value, expected):
    assert reflect(value, 4) == expected


def test_reflect_array():
    values = np.arange(-10, 20)
    result = reflect(values, 5)
    assert result.min() >= 0
    assert result.max() <= 4


def test_reflect_invalid_size():
    with pytest.raises(ValueError):
        reflect(1, 0)


def test_features_lightness():
    image = np.concatenate(
        [solid(1, 1, (0, 0, 0, 255)), solid(1, 1, (255, 255, 255, 255))], axis=1
    )
    angle, radius = features(image, WarpProjection.LIGHTNESS)
    assert angle[0, 0] == pytest.approx(0.0, abs=1e-6)
    assert angle[0, 1] == pytest.approx(1.0, abs=1e-3)
    assert np.array_equal(angle, radius)


def test_features_opponent_gray():
    angle, radius = features(solid(2, 2, (128, 128, 128, 255)), WarpProjection.OPPONENT)
    assert np.allclose(angle, 128.0 / 255.0, atol=1e-3)
    assert np.allclose(radius, 128.0 / 255.0, atol=1e-3)


def test_zero_radius_is_identity():
    reference = random_image(12, 10, seed=1)
    target = random_image(12, 10, seed=2)
    result = warp(reference, target, WarpSettings(radius_factor=0.0), seed=13)
    assert np.array_equal(result, target)


def test_samples_target_pixels():
    reference = random_image(12, 10, seed=1)
    target = solid(12, 10, (1, 2, 3, 4))
    result = warp(reference, target, WarpSettings(radius_factor=50.0), seed=13)
    assert np.all(result == (1, 2, 3, 4))


@pytest.mark.parametrize("projection", list(WarpProjection))
def test_deterministic(projection):
    reference = random_image(24, 20, seed=3)
    target = random_image(24, 20, seed=4)
    settings = WarpSettings(radius_factor=8.0, projection=projection)
    single = warp(reference, target, settings, seed=13, workers=1)
    pooled = warp(reference, target, settings, seed=13, workers=3)
    assert np.array_equal(single, pooled)
    assert not np.array_equal(single, target)


def test_shape_mismatch():
    with pytest.raises(ValueError):
        warp(solid(2, 2, 0), solid(3, 2, 0), WarpSettings(), seed=1)
