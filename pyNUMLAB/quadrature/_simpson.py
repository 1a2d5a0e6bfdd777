from dataclasses import dataclass, field
from typing import Callable, FrozenSet, Optional
import logging

from .._errors import Diagnostic, DomainError, Diverged, check_cancel
from ..mathparse import as_function

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QuadratureResult:
    value: float
    error: float
    evaluations: int
    diagnostics: FrozenSet[Diagnostic] = field(default_factory=frozenset)

    @property
    def diverged(self):
        return Diagnostic.DIVERGED in self.diagnostics


class _Run:
    """Working data of one integration; discarded when it returns."""
    def __init__(self, f, max_depth, max_evaluations, cancel):
        self.f = f
        self.max_depth = max_depth
        self.max_evaluations = max_evaluations
        self.cancel = cancel
        self.evaluations = 0
        self.domain_errors = 0
        self.diverged = False

    def sample(self, x):
        self.evaluations += 1
        try:
            return self.f(x)
        except DomainError:
            self.domain_errors += 1
            return 0.0


def _simpson(a, fa, m, fm, b, fb):
    return (b - a) / 6.0 * (fa + 4.0 * fm + fb)


class AdaptiveSimpson:
    """
    Adaptive Simpson quadrature with absolute error control.

    Parameters
    ----------
    target_error : float, optional
        Requested absolute error of the integral (default: 1e-8)
    max_depth : int, optional
        Recursion depth cap (default: 50)
    max_evaluations : int, optional
        Cap on integrand evaluations (default: 200000)

    Methods
    -------
    integrate(f, a, b, cancel=None)
        Returns a :class:`QuadratureResult`

    Notes
    -----
    - A panel is accepted when |S(left)+S(right) - S(whole)| <= 15*tol;
      the accepted value carries the Richardson correction (S2-S1)/15
    - Otherwise both halves are refined with tol/2
    - Hitting max_depth or max_evaluations raises :class:`Diverged`; the
      partial result is attached to the exception
    - Points where f raises DomainError contribute zero and the result is
      flagged REDUCED_CONFIDENCE

    Examples
    --------
    >>> round(AdaptiveSimpson(target_error=1e-10).integrate("x^2", 0, 1).value, 10)
    0.3333333333
    """
    def __init__(self, target_error=1e-8, max_depth=50, max_evaluations=200000):
        if not target_error > 0:
            raise ValueError(f"target_error must be positive, got {target_error}")
        if max_depth < 1:
            raise ValueError(f"max_depth must be at least 1, got {max_depth}")
        if max_evaluations < 5:
            raise ValueError(f"max_evaluations must be at least 5, got {max_evaluations}")
        self.target_error = target_error
        self.max_depth = max_depth
        self.max_evaluations = max_evaluations

    def _refine(self, run, a, fa, m, fm, b, fb, whole, tol, depth):
        check_cancel(run.cancel)
        lm = (a + m) / 2.0
        rm = (m + b) / 2.0
        flm = run.sample(lm)
        frm = run.sample(rm)
        left = _simpson(a, fa, lm, flm, m, fm)
        right = _simpson(m, fm, rm, frm, b, fb)
        delta = left + right - whole

        if abs(delta) <= 15.0 * tol:
            return left + right + delta / 15.0, abs(delta) / 15.0

        if depth >= run.max_depth or run.evaluations >= run.max_evaluations or m in (a, b):
            run.diverged = True
            return left + right + delta / 15.0, abs(delta) / 15.0

        lv, le = self._refine(run, a, fa, lm, flm, m, fm, left, tol / 2.0, depth + 1)
        rv, re = self._refine(run, m, fm, rm, frm, b, fb, right, tol / 2.0, depth + 1)
        return lv + rv, le + re

    def integrate(self, f: Callable, a: float, b: float, cancel: Optional[Callable[[], bool]] = None) -> QuadratureResult:
        f = as_function(f)
        if a == b:
            return QuadratureResult(0.0, 0.0, 0)
        sign = 1.0
        if a > b:
            a, b = b, a
            sign = -1.0

        run = _Run(f, self.max_depth, self.max_evaluations, cancel)
        m = (a + b) / 2.0
        fa = run.sample(a)
        fm = run.sample(m)
        fb = run.sample(b)
        whole = _simpson(a, fa, m, fm, b, fb)
        value, error = self._refine(run, a, fa, m, fm, b, fb, whole, self.target_error, 1)

        diagnostics = set()
        if run.domain_errors:
            diagnostics.add(Diagnostic.REDUCED_CONFIDENCE)
        if run.diverged:
            diagnostics.add(Diagnostic.DIVERGED)
        result = QuadratureResult(sign * value, error, run.evaluations, frozenset(diagnostics))

        if run.diverged:
            raise Diverged(
                f"adaptive Simpson exceeded its bounds on [{a}, {b}] "
                f"(depth {self.max_depth}, {run.evaluations} evaluations)",
                result=result,
            )
        return result


def integrate(f, a, b, target_error=1e-8, max_depth=50, cancel=None):
    """Functional shortcut for ``AdaptiveSimpson(...).integrate(f, a, b)``."""
    return AdaptiveSimpson(target_error=target_error, max_depth=max_depth).integrate(f, a, b, cancel=cancel)
