"""
Various constants for pixelmix
"""

from enum import Enum, IntEnum


class Combine(IntEnum):
    """
    Strategy used to merge the two source images.
    """

    BLEND = 0
    DIVIDE = 1
    MIX = 2
    WARP = 3
    UNSORT = 4
    SORT = 5

    @staticmethod
    def needs_second_image(value):
        return value != Combine.SORT


class BlendMode(Enum):
    """
    Blend modes.
    """

    NORMAL = "Normal"
    MULTIPLY = "Multiply"
    SCREEN = "Screen"
    OVERLAY = "Overlay"
    DARKEN = "Darken"
    LIGHTEN = "Lighten"
    DODGE = "Dodge"
    BURN = "Burn"
    HARD_LIGHT = "HardLight"
    SOFT_LIGHT = "SoftLight"
    DIFFERENCE = "Difference"
    EXCLUSION = "Exclusion"


# Modes that stay meaningful when the blend direction flips per pixel.
MIX_BLEND_MODES = frozenset(
    (
        BlendMode.NORMAL,
        BlendMode.OVERLAY,
        BlendMode.DODGE,
        BlendMode.BURN,
        BlendMode.HARD_LIGHT,
        BlendMode.SOFT_LIGHT,
    )
)


class LineColor(Enum):
    """
    Overlay line color.
    """

    BLACK = "Black"
    WHITE = "White"

    @property
    def rgb(self):
        return (0, 0, 0) if self == LineColor.BLACK else (255, 255, 255)


class SortKey(Enum):
    """
    Pixel projections used to order pixels.
    """

    LIGHTNESS = "Lightness"
    HUE = "Hue"
    SATURATION = "Saturation"
    MAX_RGB = "MaxRgb"
    MIN_RGB = "MinRgb"
    RG = "Rg"
    GB = "Gb"
    BR = "Br"
    WRAPPED_HUE = "WrappedHue"
    HUE_SAT = "HueSat"
    LUMA_SAT = "LumaSat"
    CHROMA = "Chroma"


class SortBy(Enum):
    """
    Sort axis. Combined axes run two passes, the second consuming the first.
    """

    ROW = "Row"
    COLUMN = "Column"
    ROW_THEN_COL = "RowCol"
    COL_THEN_ROW = "ColRow"


class SortOrder(IntEnum):
    """
    Sort direction, valued as the multiplier applied to the key.
    """

    ASCENDING = 1
    DESCENDING = -1


class WarpProjection(Enum):
    """
    Color projection of the reference image feeding the warp noise.
    """

    LIGHTNESS = "Lightness"
    OPPONENT = "Opponent"
