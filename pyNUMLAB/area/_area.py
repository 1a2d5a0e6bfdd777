from dataclasses import dataclass, field
from itertools import combinations
from typing import Callable, FrozenSet, Optional, Tuple
import logging

from .._errors import Diagnostic, DomainError, Diverged, NoIntersection, check_cancel
from .._sampling import sample_function
from ..core import Interval
from ..mathparse import Expression, as_function
from ..quadrature import AdaptiveSimpson
from ._roots import central_derivative, find_roots, merge_close

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AreaSegment:
    """One enclosed cell: the strip between curves ``lower`` and ``upper`` on [a, b]."""
    lower: int
    upper: int
    a: float
    b: float
    area: float
    error: float


@dataclass(frozen=True)
class AreaResult:
    area: float
    error: float
    intersections: Tuple[float, ...]
    segments: Tuple[AreaSegment, ...]
    diagnostics: FrozenSet[Diagnostic] = field(default_factory=frozenset)
    functions: tuple = field(default=(), repr=False, compare=False)

    def curves(self, resolution=200):
        """Samples ``(xs, ys)`` of the three curves over the span of the intersections."""
        a, b = self.intersections[0], self.intersections[-1]
        return [sample_function(f, a, b, resolution) for f in self.functions]


class _Chain:
    def __init__(self, bounded):
        self.bounded = bounded
        self.cells = []


class AreaSolver:
    """
    Area enclosed between three curves.

    Parameters
    ----------
    target_error : float, optional
        Requested absolute error of the total area (default: 1e-8)
    root_tol : float, optional
        Absolute tolerance of the intersection abscissae (default: 1e-12)
    scan_points : int, optional
        Number of sub-intervals scanned for sign changes of f_i - f_j
        (default: 256)
    max_depth : int, optional
        Recursion cap of the adaptive quadrature (default: 50)

    Methods
    -------
    solve(f1, f2, f3, domain, cancel=None)
        Returns an :class:`AreaResult`

    Notes
    -----
    - Every crossing of every pair inside ``domain`` is used, so regions with
      alternating bounds are handled
    - Between consecutive intersections the midpoint ordering splits the
      plane into a lower cell (bottom..middle) and an upper cell
      (middle..top). Cells that pinch shut at a crossing of their own two
      curves start or end a region; open cells continue into the neighbouring
      interval. Only chains shut at both ends are enclosed.
    - A divergent cell integral keeps its partial value and flags DIVERGED

    Raises
    ------
    NoIntersection
        When fewer than two intersection points exist inside ``domain`` or
        the curves enclose no bounded region.

    Examples
    --------
    >>> result = AreaSolver(target_error=1e-8).solve("x^2", "x", "5", (-1, 2))
    >>> round(result.area, 6)
    0.166667
    """
    def __init__(self, target_error=1e-8, root_tol=1e-12, scan_points=256, max_depth=50):
        if not target_error > 0:
            raise ValueError(f"target_error must be positive, got {target_error}")
        if not root_tol > 0:
            raise ValueError(f"root_tol must be positive, got {root_tol}")
        if scan_points < 2:
            raise ValueError(f"scan_points must be at least 2, got {scan_points}")
        self.target_error = target_error
        self.root_tol = root_tol
        self.scan_points = scan_points
        self.max_depth = max_depth

    def _difference(self, fi, fj):
        def d(x):
            return fi(x) - fj(x)

        if isinstance(fi, Expression) and isinstance(fj, Expression):
            di = fi.derivative("x")
            dj = fj.derivative("x")

            def deriv(x):
                return di(x) - dj(x)
        else:
            deriv = central_derivative(d)
        return d, deriv

    def intersections(self, functions, domain, cancel=None):
        """
        Pairwise intersections inside ``domain``.

        Returns
        -------
        roots : dict
            ``(i, j) -> sorted list of crossings`` for each pair i < j
        identical : set
            Pairs whose curves coincide on the whole scan grid
        """
        roots = {}
        identical = set()
        for i, j in combinations(range(3), 2):
            d, deriv = self._difference(functions[i], functions[j])
            pair_roots, same = find_roots(d, deriv, domain.a, domain.b, self.scan_points, self.root_tol, cancel)
            if same:
                identical.add((i, j))
            roots[(i, j)] = pair_roots
            logger.debug(f"curves {i + 1} and {j + 1}: {len(pair_roots)} intersection(s)")
        return roots, identical

    def solve(self, f1, f2, f3, domain, cancel: Optional[Callable[[], bool]] = None) -> AreaResult:
        functions = tuple(as_function(f) for f in (f1, f2, f3))
        domain = Interval.of(domain)

        roots, identical = self.intersections(functions, domain, cancel)
        merge_tol = max(10.0 * self.root_tol, 1e-9 * domain.length)
        points = merge_close([r for rs in roots.values() for r in rs], merge_tol)
        if len(points) < 2:
            raise NoIntersection(f"found {len(points)} intersection point(s) in [{domain.a}, {domain.b}], need at least 2")

        def meets(i, j, p):
            if i == j:
                return True
            pair = (min(i, j), max(i, j))
            if pair in identical:
                return True
            return any(abs(r - p) <= merge_tol for r in roots[pair])

        regions = []
        active = []
        for p, q in zip(points[:-1], points[1:]):
            check_cancel(cancel)
            mid = 0.5 * (p + q)
            try:
                values = [f(mid) for f in functions]
            except DomainError:
                # a gap in the definition breaks every open chain
                active = []
                continue
            bottom, middle, top = sorted(range(3), key=lambda k: values[k])

            next_active = []
            for lo, hi in ((bottom, middle), (middle, top)):
                if meets(lo, hi, p):
                    chain = _Chain(bounded=True)
                else:
                    chain = _Chain(bounded=False)
                    for idx, (prev, (plo, phi)) in enumerate(active):
                        if meets(lo, plo, p) and meets(hi, phi, p):
                            chain = prev
                            del active[idx]
                            break
                chain.cells.append((lo, hi, p, q))
                if meets(lo, hi, q):
                    if chain.bounded:
                        regions.append(chain)
                else:
                    next_active.append((chain, (lo, hi)))
            active = next_active

        cells = [
            cell for chain in regions for cell in chain.cells
            if (min(cell[0], cell[1]), max(cell[0], cell[1])) not in identical
        ]
        if not cells:
            raise NoIntersection("the curves do not enclose a bounded region")

        quadrature = AdaptiveSimpson(target_error=self.target_error / len(cells), max_depth=self.max_depth)
        diagnostics = set()
        segments = []
        total = 0.0
        total_error = 0.0
        for lo, hi, p, q in cells:
            f_lo, f_hi = functions[lo], functions[hi]

            def strip(x, f_lo=f_lo, f_hi=f_hi):
                return abs(f_hi(x) - f_lo(x))

            try:
                result = quadrature.integrate(strip, p, q, cancel=cancel)
            except Diverged as e:
                logger.warning(f"Area integral on [{p}, {q}] did not converge: {e}")
                result = e.result
            diagnostics.update(result.diagnostics)
            segments.append(AreaSegment(lo, hi, p, q, result.value, result.error))
            total += result.value
            total_error += result.error

        return AreaResult(
            area=total,
            error=total_error,
            intersections=tuple(points),
            segments=tuple(segments),
            diagnostics=frozenset(diagnostics),
            functions=functions,
        )


def area_between(f1, f2, f3, domain, target_error=1e-8, **kwargs):
    """Functional shortcut for ``AreaSolver(...).solve(f1, f2, f3, domain)``."""
    return AreaSolver(target_error=target_error, **kwargs).solve(f1, f2, f3, domain)
