from typing import Callable, Optional
import logging

import numpy as np

from .._errors import Diverged, check_cancel
from ..core import Interval
from ..mathparse import as_function
from ._fredholm import IntegralEquationResult
from ._grid import Grid

logger = logging.getLogger(__name__)


class VolterraSecondKind:
    """
    Volterra integral equation of the second kind
    ``φ(x) = f(x) + λ ∫_a^x K(x, s) φ(s) ds``, solved by marching.

    Parameters
    ----------
    node_count : int, optional
        Number of steps n; the solution is tabulated on n+1 nodes
        (default: 100)
    lam : float, optional
        Multiplier λ of the integral term (default: 1.0)

    Methods
    -------
    solve(kernel, rhs, a, b, cancel=None)
        Returns an :class:`IntegralEquationResult`

    Notes
    -----
    - Step h = (b-a)/n; the integral up to x_i is the trapezoidal sum over
      φ_0..φ_i, and the diagonal term ½hλK(x_i, x_i)φ_i is moved to the left
      side, giving φ_i in closed form
    - Second order in h
    - Step i depends on every previous step; the march is sequential
    - Kernel expressions use ``x`` for x and ``y`` for s

    Raises
    ------
    Diverged
        When 1 - ½hλK(x_i, x_i) vanishes at some step.

    Examples
    --------
    >>> result = VolterraSecondKind(node_count=100).solve("1", "1", 0, 1)
    >>> result.grid(1.0)   # close to e
    """
    def __init__(self, node_count=100, lam=1.0):
        if node_count < 1:
            raise ValueError(f"node_count must be at least 1, got {node_count}")
        self.node_count = node_count
        self.lam = lam

    def solve(self, kernel, rhs, a, b, cancel: Optional[Callable[[], bool]] = None) -> IntegralEquationResult:
        kernel = as_function(kernel)
        rhs = as_function(rhs)
        interval = Interval.of((a, b))

        n = self.node_count
        h = interval.length / n
        nodes = np.linspace(interval.a, interval.b, n + 1)
        phi = np.empty(n + 1, dtype=np.float64)
        phi[0] = rhs(float(nodes[0]))
        row = np.empty(n + 1, dtype=np.float64)

        for i in range(1, n + 1):
            check_cancel(cancel)
            x = float(nodes[i])
            for j in range(i + 1):
                row[j] = kernel(x, float(nodes[j]))
            history = 0.5 * row[0] * phi[0] + (row[1:i] * phi[1:i]).sum()
            denominator = 1.0 - 0.5 * h * self.lam * row[i]
            if abs(denominator) < 1e-14:
                raise Diverged(f"step {i} at x={x}: 1 - h*lam*K(x, x)/2 vanishes")
            phi[i] = (rhs(x) + self.lam * h * history) / denominator

        if not np.all(np.isfinite(phi)):
            raise Diverged("Volterra march overflowed")
        logger.debug(f"Volterra march finished: {n} steps, h={h:.3e}")
        return IntegralEquationResult(Grid(nodes, phi))
