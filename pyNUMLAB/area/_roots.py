import numpy as np

from .._errors import Diverged, DomainError, check_cancel
from ..Optimizers._golden import golden_section_min


def central_derivative(f, h=1e-6):
    """Central-difference derivative of a 1D function."""
    def derivative(x):
        step = h * max(1.0, abs(x))
        return (f(x + step) - f(x - step)) / (2.0 * step)
    return derivative


def _safe(f, x):
    try:
        return f(x)
    except DomainError:
        return None


def refine_root(d, deriv, lo, hi, f_lo, xtol=1e-12, max_iter=200, cancel=None):
    """
    Newton/bisection hybrid on a bracket [lo, hi] where ``d`` changes sign.

    A Newton step is taken when the derivative is available and the step lands
    strictly inside the current bracket; otherwise the bracket is bisected.
    Returns None when ``d`` is undefined inside the bracket.
    """
    if f_lo > 0:
        # orient so that d(lo) < 0 < d(hi)
        def signed(x):
            return -d(x)

        def signed_deriv(x):
            return -deriv(x)
    else:
        signed, signed_deriv = d, deriv

    x = 0.5 * (lo + hi)
    for _ in range(max_iter):
        check_cancel(cancel)
        fx = _safe(signed, x)
        if fx is None:
            # undefined inside the bracket: a pole, not a crossing
            return None
        if fx == 0.0:
            return x
        if fx < 0:
            lo = x
        else:
            hi = x

        slope = _safe(signed_deriv, x)
        if slope is not None and abs(slope) > 1e-14:
            candidate = x - fx / slope
            if lo < candidate < hi:
                step = abs(candidate - x)
                x = candidate
                if step < xtol:
                    return x
                continue

        x = 0.5 * (lo + hi)
        if hi - lo < xtol:
            return x
    return x


def domain_edge(d, inside, outside, max_iter=200, cancel=None):
    """
    Last point where ``d`` is defined between ``inside`` (defined) and
    ``outside`` (undefined), found by bisection.
    """
    for _ in range(max_iter):
        check_cancel(cancel)
        mid = 0.5 * (inside + outside)
        if mid == inside or mid == outside:
            break
        if _safe(d, mid) is None:
            outside = mid
        else:
            inside = mid
    return inside


def touching_point(d, lo, hi, xtol=1e-12):
    """
    Minimum of ``|d|`` on [lo, hi], or None when ``d`` is undefined there.
    """
    try:
        x, value = golden_section_min(lambda t: abs(d(t)), lo, hi, min_width=xtol)
    except Diverged as e:
        x, value = e.result
    except DomainError:
        return None
    return x, value


def find_roots(d, deriv, a, b, scan_points=256, xtol=1e-12, cancel=None):
    """
    All zeros of ``d`` on [a, b] found by scanning and refining.

    Three kinds of zeros are found: sign changes between scan points,
    zeros at the edge of the region where ``d`` is defined, and touching
    points where ``|d|`` dips to zero without a sign change.

    Returns
    -------
    roots : list of float
        Sorted roots. Empty when ``d`` vanishes at every scan point
        (coincident curves have no isolated intersections).
    identical : bool
        True when ``d`` vanished at every defined scan point.
    """
    xs = np.linspace(a, b, scan_points + 1)
    values = [_safe(d, float(x)) for x in xs]
    defined = [v for v in values if v is not None]
    if defined and all(v == 0.0 for v in defined):
        return [], True

    roots = []
    for i in range(scan_points):
        check_cancel(cancel)
        x0, x1 = float(xs[i]), float(xs[i + 1])
        v0, v1 = values[i], values[i + 1]
        if v0 is None and v1 is None:
            continue
        if v0 == 0.0:
            roots.append(x0)
            continue
        if v1 == 0.0:
            continue
        if v0 is None or v1 is None:
            inside, outside, v = (x1, x0, v1) if v0 is None else (x0, x1, v0)
            edge = domain_edge(d, inside, outside, cancel=cancel)
            residual = _safe(d, edge)
            if residual is not None and abs(residual) <= 1e-6 * (1.0 + abs(v)):
                roots.append(edge)
            continue
        if (v0 < 0) != (v1 < 0):
            root = refine_root(d, deriv, x0, x1, v0, xtol=xtol, cancel=cancel)
            if root is None:
                continue
            residual = _safe(d, root)
            # a sign change across a pole converges to the pole, not a root
            if residual is not None and abs(residual) <= 1e-6 * (1.0 + abs(v0) + abs(v1)):
                roots.append(root)

    for i in range(1, scan_points):
        check_cancel(cancel)
        left, v, right = values[i - 1], values[i], values[i + 1]
        if left is None or v is None or right is None or v == 0.0:
            continue
        if (left < 0) != (v < 0) or (right < 0) != (v < 0):
            continue
        if not (abs(v) <= abs(left) and abs(v) <= abs(right) and abs(v) < max(abs(left), abs(right))):
            continue
        found = touching_point(d, float(xs[i - 1]), float(xs[i + 1]), xtol=xtol)
        if found is not None and found[1] <= 100.0 * xtol * (1.0 + abs(left) + abs(right)):
            roots.append(found[0])

    if values[-1] == 0.0:
        roots.append(float(xs[-1]))
    return sorted(roots), False


def merge_close(points, tol):
    merged = []
    for p in sorted(points):
        if merged and p - merged[-1] <= tol:
            continue
        merged.append(p)
    return merged
