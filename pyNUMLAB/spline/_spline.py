import numpy as np

from .._errors import OutOfRange, TooFewPoints, UnsortedPoints
from ..solvers import TridiagonalSolver


class Spline:
    """
    Natural cubic spline, piecewise ``S_i(x) = a + b*t + c*t^2 + d*t^3``
    with ``t = x - x_i`` on ``[x_i, x_{i+1}]``.

    Built by :func:`build_spline`; not meant to be constructed directly.

    Parameters
    ----------
    knots : ndarray
        Strictly increasing x-coordinates, shape (n,)
    coefficients : ndarray
        Per-segment ``(a, b, c, d)``, shape (n-1, 4)

    Methods
    -------
    evaluate(x)
        Spline value at scalar or array ``x``
    derivative(x, order=1)
        First or second derivative
    sample(resolution=200)
        Equally spaced ``(xs, ys)`` over the knot span for display

    Raises
    ------
    OutOfRange
        When a query lies outside ``[x_0, x_{n-1}]``.
    """
    def __init__(self, knots, coefficients):
        knots = np.array(knots, dtype=np.float64)
        coefficients = np.array(coefficients, dtype=np.float64)
        knots.flags.writeable = False
        coefficients.flags.writeable = False
        self.knots = knots
        self._coefficients = coefficients

    @property
    def coefficients(self):
        return self._coefficients

    @property
    def n_segments(self):
        return self._coefficients.shape[0]

    def _locate(self, x):
        x = np.asarray(x, dtype=np.float64)
        lower, upper = self.knots[0], self.knots[-1]
        outside = (x < lower) | (x > upper) | ~np.isfinite(x)
        if np.any(outside):
            bad = x[outside] if x.ndim else x
            raise OutOfRange(float(np.ravel(bad)[0]), lower, upper)
        idx = np.searchsorted(self.knots, x, side="right") - 1
        idx = np.clip(idx, 0, self.n_segments - 1)
        return x, idx, x - self.knots[idx]

    def _finish(self, x, out):
        return float(out) if np.ndim(x) == 0 else out

    def evaluate(self, x):
        q, idx, t = self._locate(x)
        a, b, c, d = self._coefficients[idx].T
        return self._finish(q, a + t*(b + t*(c + t*d)))

    __call__ = evaluate

    def derivative(self, x, order=1):
        q, idx, t = self._locate(x)
        _, b, c, d = self._coefficients[idx].T
        if order == 1:
            out = b + t*(2*c + 3*d*t)
        elif order == 2:
            out = 2*c + 6*d*t
        else:
            raise ValueError(f"order must be 1 or 2, got {order}")
        return self._finish(q, out)

    def sample(self, resolution=200):
        xs = np.linspace(self.knots[0], self.knots[-1], resolution + 1)
        return xs, self.evaluate(xs)

    def __repr__(self):
        return f"Spline(n_segments={self.n_segments}, range=[{self.knots[0]}, {self.knots[-1]}])"


def build_spline(points):
    """
    Natural cubic spline through ``points``.

    Parameters
    ----------
    points : sequence of (x, y)
        At least 3 points with strictly increasing x.

    Returns
    -------
    Spline

    Notes
    -----
    The interior second derivatives ``M_1..M_{n-2}`` solve

    ``h_{i-1} M_{i-1} + 2(h_{i-1} + h_i) M_i + h_i M_{i+1}
    = 6((y_{i+1} - y_i)/h_i - (y_i - y_{i-1})/h_{i-1})``

    with ``M_0 = M_{n-1} = 0``. The system is strictly diagonally dominant,
    so the Thomas sweep needs no pivoting.
    """
    pts = np.array(points, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[1] != 2:
        raise ValueError("points must be a sequence of (x, y) pairs")
    if pts.shape[0] < 3:
        raise TooFewPoints(f"a cubic spline needs at least 3 points, got {pts.shape[0]}")
    if not np.all(np.isfinite(pts)):
        raise ValueError("points must be finite")

    x, y = pts[:, 0], pts[:, 1]
    h = np.diff(x)
    if np.any(h <= 0):
        k = int(np.flatnonzero(h <= 0)[0])
        raise UnsortedPoints(f"x must be strictly increasing; x[{k}]={x[k]} >= x[{k + 1}]={x[k + 1]}")

    slopes = np.diff(y) / h
    M = np.zeros(x.shape[0], dtype=np.float64)
    M[1:-1], _ = TridiagonalSolver().solve(
        h[1:-1],
        2.0 * (h[:-1] + h[1:]),
        h[1:-1],
        6.0 * np.diff(slopes),
    )

    coefficients = np.empty((h.shape[0], 4), dtype=np.float64)
    coefficients[:, 0] = y[:-1]
    coefficients[:, 1] = slopes - h * (2.0*M[:-1] + M[1:]) / 6.0
    coefficients[:, 2] = M[:-1] / 2.0
    coefficients[:, 3] = (M[1:] - M[:-1]) / (6.0 * h)
    return Spline(x, coefficients)
