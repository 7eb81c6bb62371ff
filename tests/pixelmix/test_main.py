import json
import logging
import sys

import pytest
from PIL import Image

from pixelmix.__main__ import main

logger = logging.getLogger(__name__)


@pytest.fixture
def images(tmp_path):
    paths = []
    for index, color in enumerate([(255, 0, 0), (0, 0, 255)]):
        path = str(tmp_path / ("input%d.png" % index))
        Image.new("RGB", (20, 10), color).save(path)
        paths.append(path)
    return paths


@pytest.mark.parametrize("argv", [["-h"], ["--version"], ["render", "-h"]])
def test_main_exit(argv):
    with pytest.raises(SystemExit):
        main(argv)
        sys.exit()


def test_render(images, tmp_path):
    output = str(tmp_path / "output.png")
    argv = ["render"] + images + [output, "--width", "16", "--height", "8"]
    assert main(argv + ["--workers", "2", "--verbose"]) == 0
    with Image.open(output) as image:
        assert image.size == (16, 8)


def test_render_with_config(images, tmp_path):
    settings = str(tmp_path / "settings.json")
    with open(settings, "w") as f:
        json.dump(
            {
                "width": 12,
                "height": 6,
                "combine": "Divide",
                "img_path_1": images[0],
                "img_path_2": images[1],
            },
            f,
        )
    output = str(tmp_path / "output.png")
    assert main(["render", output, "--config", settings, "--seed", "3"]) == 0
    with Image.open(output) as image:
        assert image.size == (12, 6)


def test_render_sort_single_image(images, tmp_path):
    output = str(tmp_path / "output.png")
    argv = ["render", images[0], output, "--combine", "Sort", "--width", "8", "--height", "4"]
    assert main(argv) == 0


@pytest.mark.parametrize(
    "extra",
    [
        ["--combine", "Blend"],
        ["--combine", "Mix", "--mode", "Screen"],
    ],
)
def test_render_errors(images, tmp_path, extra):
    output = str(tmp_path / "output.png")
    argv = ["render", images[0], output, "--width", "8", "--height", "4"] + extra
    assert main(argv) == 1


def test_render_mix_default_mode(images, tmp_path):
    output = str(tmp_path / "output.png")
    argv = ["render"] + images + [output, "--combine", "Mix"]
    assert main(argv + ["--width", "8", "--height", "4"]) == 0
    with Image.open(output) as image:
        assert image.size == (8, 4)


def test_render_without_images(tmp_path):
    assert main(["render", str(tmp_path / "output.png")]) == 1


def test_config(tmp_path):
    output = str(tmp_path / "settings.json")
    assert main(["config", "--output", output]) == 0
    with open(output) as f:
        record = json.load(f)
    assert record["combine"] == "Blend"
    assert record["width"] == 4032


def test_config_stdout(capsys):
    assert main(["config"]) == 0
    assert json.loads(capsys.readouterr().out)["seed"] == 13
