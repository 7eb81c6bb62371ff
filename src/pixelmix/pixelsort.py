"""
Pixel sort and unsort.

Sorting never moves pixels directly. Instead a :py:class:`PositionGrid`
records, for every output cell, the source cell whose pixel lands there.
The grid discovered on one image can then rearrange another one::

    grid = position_grid(image1, SortKey.LIGHTNESS, SortBy.ROW_THEN_COL)
    sorted1 = sort_image(grid, image1)
    scrambled2 = unsort_image(grid, image2)

Each pass builds a fresh grid from the previous one; rows (or columns) are
sorted independently and fan out over a thread pool.
"""

import logging
from typing import Any, List, Optional, Tuple

import numpy as np

from pixelmix.constants import SortBy, SortKey, SortOrder
from pixelmix.matrix import Matrix
from pixelmix.parallel import map_bands
from pixelmix.sortfns import SORT_FUNC

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


class PositionGrid(object):
    """
    Permutation grid of ``(x, y)`` source positions.

    ``xs[y, x]`` and ``ys[y, x]`` name the source cell for output ``(x, y)``.
    """

    __slots__ = ("xs", "ys")

    def __init__(self, xs: np.ndarray, ys: np.ndarray):
        if xs.shape != ys.shape or xs.ndim != 2:
            raise ValueError(
                "Expected two 2D arrays of equal shape, got %s and %s"
                % (xs.shape, ys.shape)
            )
        self.xs = xs
        self.ys = ys

    @classmethod
    def identity(cls, width: int, height: int) -> "PositionGrid":
        ys, xs = np.indices((height, width), dtype=np.intp)
        return cls(xs, ys)

    @classmethod
    def from_matrix(cls, matrix: Matrix[Position]) -> "PositionGrid":
        cells = np.array(matrix.data, dtype=np.intp).reshape(
            (matrix.height, matrix.width, 2)
        )
        return cls(cells[:, :, 0].copy(), cells[:, :, 1].copy())

    @property
    def width(self) -> int:
        return self.xs.shape[1]

    @property
    def height(self) -> int:
        return self.xs.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.xs.shape

    def get(self, x: int, y: int) -> Optional[Position]:
        if not (0 <= x < self.width and 0 <= y < self.height):
            return None
        return int(self.xs[y, x]), int(self.ys[y, x])

    def get_row(self, y: int) -> List[Position]:
        return list(zip(self.xs[y].tolist(), self.ys[y].tolist()))

    def get_column(self, x: int) -> List[Position]:
        return list(zip(self.xs[:, x].tolist(), self.ys[:, x].tolist()))

    def to_matrix(self) -> Matrix[Position]:
        data = list(zip(self.xs.ravel().tolist(), self.ys.ravel().tolist()))
        return Matrix(self.width, self.height, data)

    def is_permutation(self) -> bool:
        """Check that every source cell appears exactly once."""
        flat = self.ys.ravel() * self.width + self.xs.ravel()
        return bool(
            np.array_equal(np.sort(flat), np.arange(self.width * self.height))
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, PositionGrid):
            return NotImplemented
        return np.array_equal(self.xs, other.xs) and np.array_equal(
            self.ys, other.ys
        )

    def __repr__(self) -> str:
        return "PositionGrid(width=%d, height=%d)" % (self.width, self.height)


def sort_rows(
    grid: PositionGrid,
    keys: np.ndarray,
    order: SortOrder = SortOrder.ASCENDING,
    workers: Optional[int] = None,
) -> PositionGrid:
    """
    Sort every row of ``grid`` by the key of the pixel each cell points to.

    :param grid: input grid, left untouched.
    :param keys: per-pixel keys of the source image, shape ``(h, w)``.
    :param order: :py:class:`~pixelmix.constants.SortOrder`.
    :return: a new :py:class:`PositionGrid`.
    """
    keyed = keys[grid.ys, grid.xs].astype(np.int32) * int(order)
    xs = np.empty_like(grid.xs)
    ys = np.empty_like(grid.ys)

    def _sort_band(start: int, stop: int) -> None:
        perm = np.argsort(keyed[start:stop], axis=1, kind="stable")
        xs[start:stop] = np.take_along_axis(grid.xs[start:stop], perm, axis=1)
        ys[start:stop] = np.take_along_axis(grid.ys[start:stop], perm, axis=1)

    map_bands(_sort_band, grid.height, workers)
    return PositionGrid(xs, ys)


def sort_columns(
    grid: PositionGrid,
    keys: np.ndarray,
    order: SortOrder = SortOrder.ASCENDING,
    workers: Optional[int] = None,
) -> PositionGrid:
    """Column counterpart of :py:func:`sort_rows`."""
    keyed = keys[grid.ys, grid.xs].astype(np.int32) * int(order)
    xs = np.empty_like(grid.xs)
    ys = np.empty_like(grid.ys)

    def _sort_band(start: int, stop: int) -> None:
        perm = np.argsort(keyed[:, start:stop], axis=0, kind="stable")
        xs[:, start:stop] = np.take_along_axis(grid.xs[:, start:stop], perm, axis=0)
        ys[:, start:stop] = np.take_along_axis(grid.ys[:, start:stop], perm, axis=0)

    map_bands(_sort_band, grid.width, workers)
    return PositionGrid(xs, ys)


def position_grid(
    image: np.ndarray,
    sort_key: SortKey,
    sort_by: SortBy,
    row_order: SortOrder = SortOrder.ASCENDING,
    col_order: SortOrder = SortOrder.ASCENDING,
    workers: Optional[int] = None,
) -> PositionGrid:
    """
    Build the permutation grid that sorts ``image``.

    :param image: RGBA ``uint8`` array of shape ``(h, w, 4)``.
    :param sort_key: :py:class:`~pixelmix.constants.SortKey`.
    :param sort_by: :py:class:`~pixelmix.constants.SortBy`; combined axes
        feed the first pass's grid into the second.
    :return: :py:class:`PositionGrid`
    """
    keys = SORT_FUNC[sort_key](image)
    height, width = keys.shape
    grid = PositionGrid.identity(width, height)

    def by_row(g: PositionGrid) -> PositionGrid:
        return sort_rows(g, keys, row_order, workers)

    def by_column(g: PositionGrid) -> PositionGrid:
        return sort_columns(g, keys, col_order, workers)

    passes = {
        SortBy.ROW: (by_row,),
        SortBy.COLUMN: (by_column,),
        SortBy.ROW_THEN_COL: (by_row, by_column),
        SortBy.COL_THEN_ROW: (by_column, by_row),
    }[sort_by]
    logger.debug("Sorting %dx%d by %s (%s)" % (width, height, sort_by, sort_key))
    for sort_pass in passes:
        grid = sort_pass(grid)
    return grid


def _check_shape(grid: PositionGrid, image: np.ndarray) -> None:
    if image.shape[:2] != grid.shape:
        raise ValueError(
            "Grid %s does not match image %s" % (grid.shape, image.shape[:2])
        )


def sort_image(grid: PositionGrid, image: np.ndarray) -> np.ndarray:
    """Apply the grid: ``out[y, x] = image[ys[y, x], xs[y, x]]``."""
    _check_shape(grid, image)
    return image[grid.ys, grid.xs]


def unsort_image(grid: PositionGrid, image: np.ndarray) -> np.ndarray:
    """
    Apply the inverse of the grid: ``out[ys[y, x], xs[y, x]] = image[y, x]``.

    ``image`` is read as if it were already sorted; its pixels go back to
    where the sorted pixels of the grid's source image came from.
    """
    _check_shape(grid, image)
    result = np.empty_like(image)
    result[grid.ys, grid.xs] = image
    return result
