from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional
import logging

import numpy as np

from .._errors import Diagnostic
from ..core import Interval, trapezoid_weights
from ..mathparse import as_function
from ..solvers import ConjugateGradient, GaussianElimination
from ._grid import Grid

logger = logging.getLogger(__name__)


class LinearMethod(Enum):
    DIRECT = "direct"
    CG = "cg"


@dataclass(frozen=True)
class IntegralEquationResult:
    """
    Tabulated solution of an integral equation.

    ``condition`` is the pivot magnitude ratio of the direct solve and
    ``residual`` the relative residual of the discrete system; both are
    ``None`` where they do not apply (iterative solve, marching).
    """
    grid: Grid
    residual: Optional[float] = None
    condition: Optional[float] = None
    diagnostics: FrozenSet[Diagnostic] = field(default_factory=frozenset)

    @property
    def nodes(self):
        return self.grid.nodes

    @property
    def values(self):
        return self.grid.values

    def sample(self, resolution=200):
        return self.grid.sample(resolution)


def _discretize(kernel, rhs, a, b, node_count):
    """Nyström matrix ``A[i, j] = w_j K(x_i, s_j)`` and ``f(x_i)`` on trapezoidal nodes."""
    nodes, weights = trapezoid_weights(a, b, node_count)
    A = np.empty((node_count, node_count), dtype=np.float64)
    f = np.empty(node_count, dtype=np.float64)
    for i in range(node_count):
        x = float(nodes[i])
        f[i] = rhs(x)
        for j in range(node_count):
            A[i, j] = weights[j] * kernel(x, float(nodes[j]))
    return nodes, A, f


class FredholmFirstKind:
    """
    Fredholm integral equation of the first kind
    ``∫_a^b K(x, s) φ(s) ds = f(x)`` with Tikhonov regularization.

    Parameters
    ----------
    node_count : int, optional
        Number of trapezoidal nodes on [a, b] (default: 50)
    regularization : float, optional
        Tikhonov weight λ > 0 (default: 1e-10)
    ill_conditioned_threshold : float, optional
        Pivot ratio below which the result is flagged ILL_CONDITIONED.
        When None, ``100 λ / max|AᵀA + λI|``, the ratio reached once λ is
        what keeps the smallest pivot away from zero (default: None)
    method : LinearMethod, optional
        DIRECT (Gaussian elimination) or CG (conjugate gradients on the
        normal equations) (default: DIRECT)
    rtol, maxiter : optional
        Conjugate gradient controls (only used with method=CG)

    Methods
    -------
    solve(kernel, rhs, a, b)
        Returns an :class:`IntegralEquationResult`

    Notes
    -----
    - Discretization: composite trapezoidal rule, second order in the node
      spacing for smooth (or node-kinked) kernels
    - Solves ``(AᵀA + λI) φ = Aᵀ f``; λ biases the solution towards small
      norm, so the recovered φ is consistent, not exact
    - Kernel expressions use ``x`` for x and ``y`` for s
    - An ill-conditioned system is reported, not rejected; increase λ or
      node_count and retry

    Examples
    --------
    >>> solver = FredholmFirstKind(node_count=41, regularization=1e-12)
    >>> result = solver.solve("exp(-abs(x-y))", "2 - exp(-x) - exp(x-1)", 0, 1)
    """
    def __init__(self, node_count=50, regularization=1e-10, ill_conditioned_threshold=None,
                 method=LinearMethod.DIRECT, rtol=1e-12, maxiter=10000):
        if node_count < 2:
            raise ValueError(f"node_count must be at least 2, got {node_count}")
        if not regularization > 0:
            raise ValueError(f"regularization must be positive, got {regularization}")
        self.node_count = node_count
        self.regularization = regularization
        self.ill_conditioned_threshold = ill_conditioned_threshold
        self.method = LinearMethod(method)
        self.rtol = rtol
        self.maxiter = maxiter

    def solve(self, kernel, rhs, a, b) -> IntegralEquationResult:
        kernel = as_function(kernel)
        rhs = as_function(rhs)
        interval = Interval.of((a, b))

        nodes, A, f = _discretize(kernel, rhs, interval.a, interval.b, self.node_count)
        M = A.T @ A + self.regularization * np.eye(self.node_count)
        g = A.T @ f

        diagnostics = set()
        condition = None
        if self.method is LinearMethod.DIRECT:
            phi, condition = GaussianElimination().eliminate(M, g)
            threshold = self.ill_conditioned_threshold
            if threshold is None:
                threshold = 100.0 * self.regularization / np.abs(M).max()
            if condition < threshold:
                logger.warning(
                    f"Fredholm system is ill-conditioned (pivot ratio {condition:.2e}). "
                    f"Consider a larger regularization than {self.regularization:.1e} or a different node count."
                )
                diagnostics.add(Diagnostic.ILL_CONDITIONED)
        else:
            phi, cg_residual = ConjugateGradient(rtol=self.rtol, maxiter=self.maxiter).solve(M, g)
            if cg_residual > self.rtol:
                diagnostics.add(Diagnostic.MAX_ITER_EXCEEDED)

        r = A @ phi - f
        normf = (f*f).sum()**0.5
        residual = (r*r).sum()**0.5/normf if normf > 0 else (r*r).sum()**0.5

        return IntegralEquationResult(Grid(nodes, phi), residual, condition, frozenset(diagnostics))


class FredholmSecondKind:
    """
    Fredholm integral equation of the second kind
    ``φ(x) - λ ∫_a^b K(x, s) φ(s) ds = f(x)`` by the Nyström method.

    Parameters
    ----------
    node_count : int, optional
        Number of trapezoidal nodes (default: 50)
    lam : float, optional
        Multiplier λ of the integral term (default: 1.0)
    ill_conditioned_threshold : float, optional
        Pivot ratio below which the result is flagged (default: 1e-12)

    Notes
    -----
    - ``(I - λ A) φ = f`` is solved directly; near an eigenvalue 1/λ of the
      integral operator the system becomes singular
    """
    def __init__(self, node_count=50, lam=1.0, ill_conditioned_threshold=1e-12):
        if node_count < 2:
            raise ValueError(f"node_count must be at least 2, got {node_count}")
        self.node_count = node_count
        self.lam = lam
        self.ill_conditioned_threshold = ill_conditioned_threshold

    def solve(self, kernel, rhs, a, b) -> IntegralEquationResult:
        kernel = as_function(kernel)
        rhs = as_function(rhs)
        interval = Interval.of((a, b))

        nodes, A, f = _discretize(kernel, rhs, interval.a, interval.b, self.node_count)
        M = np.eye(self.node_count) - self.lam * A
        phi, condition = GaussianElimination().eliminate(M, f)

        diagnostics = set()
        if condition < self.ill_conditioned_threshold:
            logger.warning(f"Fredholm system is ill-conditioned (pivot ratio {condition:.2e}).")
            diagnostics.add(Diagnostic.ILL_CONDITIONED)

        r = M @ phi - f
        normf = (f*f).sum()**0.5
        residual = (r*r).sum()**0.5/normf if normf > 0 else (r*r).sum()**0.5
        return IntegralEquationResult(Grid(nodes, phi), residual, condition, frozenset(diagnostics))
