import math

from .._errors import Diverged

INV_PHI = (math.sqrt(5.0) - 1.0) / 2.0


def golden_section_min(f, a, b, min_width=1e-8, max_iter=1000):
    """
    Minimum of a unimodal function on [a, b] by golden-section search.

    Returns
    -------
    x, value : float
        Best abscissa found and ``f(x)``.

    Raises
    ------
    Diverged
        When the bracket is still wider than ``min_width`` after
        ``max_iter`` reductions; ``result`` holds the best ``(x, value)``.
    """
    a, b = min(a, b), max(a, b)
    c = b - INV_PHI * (b - a)
    d = a + INV_PHI * (b - a)
    fc = f(c)
    fd = f(d)

    for _ in range(max_iter):
        if b - a < min_width:
            break
        if fc <= fd:
            b, d, fd = d, c, fc
            c = b - INV_PHI * (b - a)
            fc = f(c)
        else:
            a, c, fc = c, d, fd
            d = a + INV_PHI * (b - a)
            fd = f(d)
    else:
        if b - a >= min_width:
            best = (c, fc) if fc <= fd else (d, fd)
            raise Diverged(f"golden-section search left a bracket of width {b - a}", result=best)

    return (c, fc) if fc <= fd else (d, fd)
