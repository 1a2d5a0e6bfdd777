import numpy as np

from ._errors import DomainError
from .mathparse import as_function


def sample_function(f, a, b, resolution=200):
    """
    Sample ``f`` on ``resolution + 1`` equally spaced points of [a, b] for display.

    Returns
    -------
    xs, ys : ndarray
        ``ys`` holds ``nan`` wherever ``f`` raises :class:`DomainError`, so
        plotting libraries break the curve there.
    """
    if resolution < 1:
        raise ValueError(f"resolution must be at least 1, got {resolution}")
    f = as_function(f)
    xs = np.linspace(a, b, resolution + 1)
    ys = np.empty_like(xs)
    for i, x in enumerate(xs):
        try:
            ys[i] = f(float(x))
        except DomainError:
            ys[i] = np.nan
    return xs, ys
