"""
attrs validators for render settings.
"""

import math

from attrs import define
from attrs.validators import in_

__all__ = ["in_", "range_", "positive"]


@define(repr=False, frozen=True)
class _BoundsValidator:
    minimum: float
    maximum: float
    open_minimum: bool = False

    def __call__(self, inst, attr, value):
        try:
            if self.open_minimum:
                valid = self.minimum < value <= self.maximum
            else:
                valid = self.minimum <= value <= self.maximum
        except TypeError:
            valid = False

        if not valid:
            raise ValueError(
                "'%s' must be in %s, got %r" % (attr.name, self.interval, value)
            )

    @property
    def interval(self) -> str:
        return "%s%r, %r]" % (
            "(" if self.open_minimum else "[",
            self.minimum,
            self.maximum,
        )

    def __repr__(self):
        return "<range_ validator with %s>" % self.interval


def range_(minimum, maximum):
    """
    A validator that raises a :exc:`ValueError` unless
    ``minimum <= value <= maximum``. NaN is always rejected.
    """
    return _BoundsValidator(minimum, maximum)


#: A validator that raises a :exc:`ValueError` unless ``value > 0``.
positive = _BoundsValidator(0, math.inf, open_minimum=True)
