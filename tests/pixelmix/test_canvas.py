import numpy as np
import pytest
from PIL import Image

from pixelmix.canvas import Canvas

from .utils import random_image, solid


def test_opaque_round_trip():
    image = random_image(10, 7, seed=1)
    assert np.array_equal(Canvas.from_array(image).to_array(), image)


def test_premultiply():
    canvas = Canvas.from_array(solid(1, 1, (200, 100, 0, 128)))
    assert tuple(canvas.pixmap[0, 0]) == (100, 50, 0, 128)
    restored = canvas.to_array()[0, 0]
    assert abs(int(restored[0]) - 200) <= 2
    assert abs(int(restored[1]) - 100) <= 2
    assert restored[3] == 128


def test_transparent_unpremultiplies_to_zero():
    canvas = Canvas.from_array(solid(3, 3, (50, 60, 70, 0)))
    assert np.all(canvas.to_array() == 0)


def test_composite_mask():
    canvas = Canvas.from_array(solid(2, 1, (255, 255, 255, 255)))
    canvas.composite_mask(np.array([[1.0, 0.0]]), (0, 0, 0))
    result = canvas.to_array()
    assert tuple(result[0, 0]) == (0, 0, 0, 255)
    assert tuple(result[0, 1]) == (255, 255, 255, 255)


def test_add_luminance_clips_to_alpha():
    canvas = Canvas.from_array(solid(2, 1, (250, 10, 10, 255)))
    canvas.add_luminance(np.array([[20.0, -20.0]]))
    result = canvas.to_array()
    assert tuple(result[0, 0]) == (255, 30, 30, 255)
    assert tuple(result[0, 1]) == (230, 0, 0, 255)


def test_to_image():
    image = Canvas.from_array(random_image(4, 3)).to_image()
    assert image.mode == "RGBA"
    assert image.size == (4, 3)
    assert isinstance(image, Image.Image)


@pytest.mark.parametrize(
    "pixmap",
    [
        np.zeros((2, 2, 3), dtype=np.uint8),
        np.zeros((2, 2, 4), dtype=np.float32),
        np.zeros((2, 4), dtype=np.uint8),
    ],
)
def test_invalid_pixmap(pixmap):
    with pytest.raises(ValueError):
        Canvas(pixmap)
