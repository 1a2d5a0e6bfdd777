import math
from typing import NamedTuple


class Interval(NamedTuple):
    """
    Closed interval [a, b] with a < b strictly.

    Use :meth:`of` to validate; degenerate or reversed intervals and
    non-finite bounds raise ``ValueError``.
    """
    a: float
    b: float

    @classmethod
    def of(cls, bounds):
        if isinstance(bounds, Interval):
            return bounds
        a, b = bounds
        a = float(a)
        b = float(b)
        if not (math.isfinite(a) and math.isfinite(b)):
            raise ValueError(f"interval bounds must be finite, got [{a}, {b}]")
        if not a < b:
            raise ValueError(f"interval requires a < b, got [{a}, {b}]")
        return cls(a, b)

    @property
    def length(self):
        return self.b - self.a

    @property
    def midpoint(self):
        return (self.a + self.b) / 2.0

    def __contains__(self, x):
        return self.a <= x <= self.b
