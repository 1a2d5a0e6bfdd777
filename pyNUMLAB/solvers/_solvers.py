import numpy as np
from scipy.sparse.linalg import aslinearoperator
from .commons import Solver
from ..core._ops import gauss_eliminate, thomas
from .._errors import SingularMatrix
import logging
logger = logging.getLogger(__name__)


def _residual(A, z, b):
    r = b - A @ z
    normb = (b*b).sum()**0.5
    normr = (r*r).sum()**0.5
    return normr/normb if normb > 0 else normr


class GaussianElimination(Solver):
    """
    Dense direct solver: Gaussian elimination with partial pivoting.

    The elimination runs in a compiled numba kernel on a copy of the inputs.
    Besides the solution it reports the pivot magnitude ratio
    min|pivot| / max|pivot|, a cheap condition indicator used by the
    Fredholm solver to flag ill-conditioned systems.

    Methods
    -------
    solve(A, b)
        Solve A @ z = b, returns (z, residual)
    eliminate(A, b)
        Solve A @ z = b, returns (z, pivot_ratio)

    Raises
    ------
    SingularMatrix
        When a zero pivot is met.

    Examples
    --------
    >>> solver = GaussianElimination()
    >>> z, residual = solver.solve(A, b)
    """
    def __init__(self):
        super().__init__()

    def eliminate(self, A, b):
        A = np.array(A, dtype=np.float64, order="C")
        b = np.array(b, dtype=np.float64)
        n = A.shape[0]
        if A.ndim != 2 or A.shape[1] != n:
            raise ValueError(f"A must be square, got shape {A.shape}")
        if b.shape != (n,):
            raise ValueError(f"b must have shape ({n},), got {b.shape}")
        if n == 0:
            raise ValueError("empty system")

        out = np.zeros(n, dtype=np.float64)
        pivots = np.zeros(n, dtype=np.float64)
        gauss_eliminate(A, b, out, pivots)

        zero = np.flatnonzero(pivots == 0.0)
        if zero.size > 0:
            raise SingularMatrix(f"zero pivot in column {zero[0]}")

        return out, pivots.min()/pivots.max()

    def solve(self, A, b):
        z, _ = self.eliminate(A, b)
        return z, _residual(np.asarray(A, dtype=np.float64), z, np.asarray(b, dtype=np.float64))


def cg(A, b, x0=None, rtol=1e-5, maxiter=1000, inv_diag=None):
    """
    Jacobi-preconditioned conjugate gradients on a LinearOperator.

    Returns ``(x, iterations)``; ``iterations == maxiter`` signals that the
    relative residual never dropped below ``rtol`` or that ``A`` stopped
    being positive definite along a search direction.
    """
    normb = (b*b).sum()**0.5
    if normb == 0:
        return np.zeros_like(b), 0

    x = np.zeros_like(b) if x0 is None else np.array(x0, dtype=b.dtype)
    r = b - A.matvec(x)
    z = r if inv_diag is None else inv_diag*r
    p = z.copy()
    rz = (r*z).sum()

    for iteration in range(maxiter):
        if (r*r).sum()**0.5/normb < rtol:
            return x, iteration

        q = A.matvec(p)
        curvature = (p*q).sum()
        if curvature <= 0:
            return x, maxiter
        alpha = rz / curvature
        x += alpha*p
        r -= alpha*q

        z = r if inv_diag is None else inv_diag*r
        rz_next = (r*z).sum()
        p *= rz_next / rz
        p += z
        rz = rz_next

    if (r*r).sum()**0.5/normb < rtol:
        return x, maxiter - 1
    return x, maxiter


class ConjugateGradient(Solver):
    """
    Conjugate gradient solver for symmetric positive definite systems.

    Parameters
    ----------
    rtol : float, optional
        Relative residual tolerance (default: 1e-10)
    maxiter : int, optional
        Maximum iterations (default: 10000)
    precondition : bool, optional
        Scale by the inverse diagonal of dense A (Jacobi) (default: True)

    Attributes
    ----------
    iterations : int
        Iterations used by the last solve (``maxiter`` when not converged).

    Notes
    -----
    - Operates on a scipy LinearOperator so dense and sparse A are accepted
    - Used on the Tikhonov normal equations of first-kind Fredholm problems,
      whose diagonal varies with the kernel weights; Jacobi scaling evens it out
    """
    def __init__(self, rtol=1e-10, maxiter=10000, precondition=True):
        super().__init__()
        if rtol <= 0:
            raise ValueError(f"rtol must be positive, got {rtol}")
        if maxiter < 1:
            raise ValueError(f"maxiter must be at least 1, got {maxiter}")
        self.rtol = rtol
        self.maxiter = maxiter
        self.precondition = precondition
        self.iterations = 0

    def solve(self, A, b, x0=None):
        b = np.asarray(b, dtype=np.float64)
        op = aslinearoperator(A)

        inv_diag = None
        if self.precondition and isinstance(A, np.ndarray):
            diag = np.diagonal(A).astype(np.float64)
            if np.all(diag > 0):
                inv_diag = 1.0/diag

        out, self.iterations = cg(op, b, x0=x0, rtol=self.rtol, maxiter=self.maxiter, inv_diag=inv_diag)
        if self.iterations >= self.maxiter:
            logger.warning(f"Conjugate gradients did not converge in {self.maxiter} iterations.")
        return out, _residual(op, out, b)


class TridiagonalSolver(Solver):
    """
    O(n) Thomas-algorithm solver for tridiagonal systems.

    Methods
    -------
    solve(lower, diag, upper, rhs)
        ``lower``/``upper`` are the n-1 sub/super-diagonal entries.
        Returns (z, residual).

    Notes
    -----
    - No pivoting: intended for diagonally dominant systems such as the
      natural cubic spline equations
    """
    def __init__(self):
        super().__init__()

    def solve(self, lower, diag, upper, rhs):
        diag = np.ascontiguousarray(diag, dtype=np.float64)
        lower = np.ascontiguousarray(lower, dtype=np.float64)
        upper = np.ascontiguousarray(upper, dtype=np.float64)
        rhs = np.ascontiguousarray(rhs, dtype=np.float64)
        n = diag.shape[0]
        if n == 0:
            raise ValueError("empty system")
        if lower.shape[0] != n - 1 or upper.shape[0] != n - 1 or rhs.shape[0] != n:
            raise ValueError("lower and upper need n-1 entries, rhs needs n entries")

        out = np.zeros(n, dtype=np.float64)
        smallest = thomas(lower, diag, upper, rhs, out)
        if smallest == 0.0:
            raise SingularMatrix("zero pivot in tridiagonal sweep")

        Az = diag * out
        Az[1:] += lower * out[:-1]
        Az[:-1] += upper * out[1:]
        r = rhs - Az
        normb = (rhs*rhs).sum()**0.5
        residual = (r*r).sum()**0.5/normb if normb > 0 else (r*r).sum()**0.5
        return out, residual
