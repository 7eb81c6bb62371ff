import numpy as np
import pytest

from pixelmix.blend import BLEND_FUNC, blend, linear_to_srgb, srgb_to_linear
from pixelmix.constants import BlendMode

from .utils import random_image, solid


def test_screen_red_blue():
    red = solid(2, 2, (255, 0, 0, 255))
    blue = solid(2, 2, (0, 0, 255, 255))
    result = blend(red, blue, BlendMode.SCREEN)
    assert np.all(result == (255, 0, 255, 255))


def test_normal_opaque_source_wins():
    backdrop = random_image(8, 8, seed=1)
    source = random_image(8, 8, seed=2)
    assert np.array_equal(blend(backdrop, source, BlendMode.NORMAL), source)


def test_transparent_source_keeps_backdrop():
    backdrop = random_image(8, 8, seed=1)
    source = random_image(8, 8, seed=2)
    source[..., 3] = 0
    result = blend(backdrop, source, BlendMode.MULTIPLY)
    assert np.array_equal(result, backdrop)


def test_multiply_white_identity():
    backdrop = random_image(8, 8, seed=3)
    white = solid(8, 8, (255, 255, 255, 255))
    assert np.array_equal(blend(backdrop, white, BlendMode.MULTIPLY), backdrop)


@pytest.mark.parametrize("mode", list(BlendMode))
def test_blend_modes(mode):
    backdrop = random_image(16, 16, seed=4)
    source = random_image(16, 16, seed=5, opaque=False)
    result = blend(backdrop, source, mode)
    assert result.shape == backdrop.shape
    assert result.dtype == np.uint8
    assert np.all(result[..., 3] == 255)


def test_blend_table_complete():
    assert set(BLEND_FUNC) == set(BlendMode)


def test_shape_mismatch():
    with pytest.raises(ValueError):
        blend(solid(2, 2, 0), solid(3, 2, 0), BlendMode.NORMAL)


def test_srgb_round_trip():
    values = np.arange(256) / 255.0
    assert np.allclose(linear_to_srgb(srgb_to_linear(values)), values)


def test_normal_self_blend_identity():
    image = random_image(8, 8, seed=6)
    assert np.array_equal(blend(image, image, BlendMode.NORMAL), image)


def test_normal_self_blend_translucent():
    image = random_image(8, 8, seed=6, opaque=False)
    image[..., 3] = np.maximum(image[..., 3], 1)
    result = blend(image, image, BlendMode.NORMAL)
    assert np.array_equal(result[..., :3], image[..., :3])

    alpha = image[..., 3] / 255.0
    expected = np.round((alpha + alpha * (1.0 - alpha)) * 255.0)
    assert np.array_equal(result[..., 3], expected)

    opaque = image.copy()
    opaque[..., 3] = 255
    assert np.array_equal(blend(opaque, opaque, BlendMode.NORMAL), opaque)
