"""
Post-pass effects: faded overlay lines and film grain.

Both effects are reproducible. Every overlay line seeds its own generator from
its coordinate, and the grain is a fixed noise field of the render seed.
"""

import logging
from typing import TYPE_CHECKING, Iterator, Tuple

import aggdraw
import numpy as np
from attrs import define, field
from PIL import Image

from pixelmix.canvas import Canvas
from pixelmix.noise import NoiseField

if TYPE_CHECKING:
    from pixelmix.config import GrainSettings, OverlaySettings

logger = logging.getLogger(__name__)

LINE_SEED = 98731
GRAIN_SEED_OFFSET = 2
GRAIN_OCTAVES = 2

Point = Tuple[float, float]


@define
class FadeLine:
    """
    A straight line split into segments of random opacity.

    .. py:attribute:: seed

        Seed of the segment opacities; lines with equal seeds fade alike.
    """

    start: Point
    end: Point
    seed: int
    subdivisions: int = field(default=75)
    thickness: float = field(default=0.5)
    min_opacity: float = field(default=0.1)
    max_opacity: float = field(default=0.9)

    def segments(self) -> Iterator[Tuple[Point, Point, float]]:
        """Yield ``(start, end, opacity)`` for every segment."""
        count = max(1, self.subdivisions)
        rng = np.random.default_rng(self.seed)
        opacities = rng.uniform(self.min_opacity, self.max_opacity, count)
        xs = np.linspace(self.start[0], self.end[0], count + 1)
        ys = np.linspace(self.start[1], self.end[1], count + 1)
        for index in range(count):
            yield (
                (float(xs[index]), float(ys[index])),
                (float(xs[index + 1]), float(ys[index + 1])),
                float(opacities[index]),
            )

    def draw(self, draw: "aggdraw.Draw") -> None:
        for (x0, y0), (x1, y1), opacity in self.segments():
            pen = aggdraw.Pen(255, self.thickness, int(round(255 * opacity)))
            draw.line((x0, y0, x1, y1), pen)


def grid_lines(width: int, height: int, settings: "OverlaySettings") -> Iterator[FadeLine]:
    """Horizontal then vertical lines every ``settings.spacing`` pixels."""
    low, high = settings.min_opacity, settings.max_opacity
    if low > high:
        logger.warning("Overlay min opacity %g exceeds max %g; swapping" % (low, high))
        low, high = high, low

    def make(start: Point, end: Point, coordinate: float) -> FadeLine:
        return FadeLine(
            start,
            end,
            LINE_SEED + int(coordinate),
            subdivisions=settings.subdivisions,
            thickness=settings.thickness,
            min_opacity=low,
            max_opacity=high,
        )

    position = settings.spacing
    while position < height:
        yield make((0.0, position), (float(width), position), position)
        position += settings.spacing
    position = settings.spacing
    while position < width:
        yield make((position, 0.0), (position, float(height)), position)
        position += settings.spacing


def draw_overlay(canvas: Canvas, settings: "OverlaySettings") -> None:
    """Stroke the overlay grid onto ``canvas`` in the configured line color."""
    mask = Image.new("L", (canvas.width, canvas.height), 0)
    draw = aggdraw.Draw(mask)
    count = 0
    for line in grid_lines(canvas.width, canvas.height, settings):
        line.draw(draw)
        count += 1
    draw.flush()
    del draw
    logger.debug("Drew %d overlay lines" % count)
    coverage = np.asarray(mask, dtype=np.float64) / 255.0
    canvas.composite_mask(coverage, settings.line_color.rgb)


def apply_grain(canvas: Canvas, settings: "GrainSettings", seed: int) -> None:
    """Add film grain; a zero scale or factor leaves the canvas untouched."""
    if settings.scale == 0 or settings.factor == 0:
        logger.debug("Grain disabled")
        return
    grain = NoiseField(
        seed + GRAIN_SEED_OFFSET,
        GRAIN_OCTAVES,
        scale=settings.scale,
        factor=settings.factor,
    )
    # Sample pixel centres; lattice points would be flat zero.
    delta = grain.sample_rows(0, canvas.height, canvas.width, offset=0.5)
    canvas.add_luminance(delta)
