"""
A row-major matrix with arbitrary data in each cell.
"""

from typing import Any, Callable, Generic, Iterator, List, Optional, TypeVar

T = TypeVar("T")


class Matrix(Generic[T]):
    """
    Dense 2D storage indexed by ``(x, y)`` and stored row by row.

    Example::

        m = Matrix.generate(2, 3, lambda x, y: (x, y))
        m.get(1, 1)    # (1, 1)
        m.get(2, 1)    # None
        m[2][1]        # (1, 2)
        m[2][1] = None
    """

    __slots__ = ("width", "height", "data")

    def __init__(self, width: int, height: int, data: List[T]):
        assert width * height == len(data), "%d x %d matrix with %d cells" % (
            width,
            height,
            len(data),
        )
        self.width = width
        self.height = height
        self.data = data

    @classmethod
    def generate(
        cls, width: int, height: int, generator: Callable[[int, int], T]
    ) -> "Matrix[T]":
        """Create a new matrix using a function of ``(x, y)``."""
        data = [generator(x, y) for y in range(height) for x in range(width)]
        return cls(width, height, data)

    @classmethod
    def fill(cls, width: int, height: int, datum: T) -> "Matrix[T]":
        """Create a new matrix filled with a given value."""
        return cls(width, height, [datum] * (width * height))

    @classmethod
    def zeros(cls, width: int, height: int) -> "Matrix[int]":
        return Matrix(width, height, [0] * (width * height))

    @classmethod
    def ones(cls, width: int, height: int) -> "Matrix[int]":
        return Matrix(width, height, [1] * (width * height))

    def _index(self, x: int, y: int) -> int:
        return y * self.width + x

    def valid(self, x: int, y: int) -> bool:
        """Is this a valid column and row?"""
        return 0 <= x < self.width and 0 <= y < self.height

    def get(self, x: int, y: int) -> Optional[T]:
        """Return the element at the given column and row, or None."""
        if not self.valid(x, y):
            return None
        return self.data[self._index(x, y)]

    def put(self, x: int, y: int, item: T) -> bool:
        """Insert a value at the given column and row."""
        if not self.valid(x, y):
            return False
        self.data[self._index(x, y)] = item
        return True

    def get_row(self, y: int) -> List[T]:
        start = y * self.width
        return self.data[start : start + self.width]

    def get_column(self, x: int) -> List[T]:
        return self.data[x :: self.width]

    def __getitem__(self, y: int) -> "MatrixRow[T]":
        """Writable view of row ``y``; ``m[y][x] = v`` updates the matrix."""
        if not 0 <= y < self.height:
            raise IndexError("row %d out of range" % y)
        return MatrixRow(self, y)

    def __setitem__(self, y: int, row: List[T]) -> None:
        if not 0 <= y < self.height:
            raise IndexError("row %d out of range" % y)
        if len(row) != self.width:
            raise ValueError("Expected %d cells, got %d" % (self.width, len(row)))
        start = y * self.width
        self.data[start : start + self.width] = list(row)

    def __len__(self) -> int:
        return len(self.data)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.data == other.data
        )

    def __repr__(self) -> str:
        return "%s(width=%d, height=%d)" % (
            self.__class__.__name__,
            self.width,
            self.height,
        )


class MatrixRow(Generic[T]):
    """One row of a :py:class:`Matrix`, sharing its storage."""

    __slots__ = ("matrix", "y")

    def __init__(self, matrix: Matrix[T], y: int):
        self.matrix = matrix
        self.y = y

    def _index(self, x: int) -> int:
        if not 0 <= x < self.matrix.width:
            raise IndexError("column %d out of range" % x)
        return self.y * self.matrix.width + x

    def __getitem__(self, x: int) -> T:
        return self.matrix.data[self._index(x)]

    def __setitem__(self, x: int, item: T) -> None:
        self.matrix.data[self._index(x)] = item

    def __len__(self) -> int:
        return self.matrix.width

    def __iter__(self) -> Iterator[T]:
        return iter(self.matrix.get_row(self.y))

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, MatrixRow):
            other = list(other)
        if not isinstance(other, list):
            return NotImplemented
        return self.matrix.get_row(self.y) == other

    def __repr__(self) -> str:
        return "MatrixRow(%r)" % (self.matrix.get_row(self.y),)
