from numba import njit
import numpy as np

@njit(["void(f8[:, :], f8[:], f8[:], f8[:])"], cache=True)
def gauss_eliminate(A, b, out, pivots):
    """
    Gaussian elimination with partial pivoting, in place on ``A`` and ``b``.

    Writes the solution into ``out`` and the absolute value of each pivot into
    ``pivots``. A zero pivot stops the elimination early; the caller detects
    it from ``pivots``.
    """
    n = A.shape[0]
    for i in range(n):
        pivots[i] = 0.0

    for k in range(n):
        p = k
        best = abs(A[k, k])
        for i in range(k + 1, n):
            if abs(A[i, k]) > best:
                best = abs(A[i, k])
                p = i
        pivots[k] = best
        if best == 0.0:
            return

        if p != k:
            for j in range(k, n):
                tmp = A[k, j]
                A[k, j] = A[p, j]
                A[p, j] = tmp
            tmp = b[k]
            b[k] = b[p]
            b[p] = tmp

        for i in range(k + 1, n):
            factor = A[i, k] / A[k, k]
            if factor != 0.0:
                for j in range(k, n):
                    A[i, j] -= factor * A[k, j]
                b[i] -= factor * b[k]

    for i in range(n - 1, -1, -1):
        s = b[i]
        for j in range(i + 1, n):
            s -= A[i, j] * out[j]
        out[i] = s / A[i, i]

@njit(["f8(f8[:], f8[:], f8[:], f8[:], f8[:])"], cache=True)
def thomas(lower, diag, upper, rhs, out):
    """
    Thomas algorithm for a tridiagonal system.

    ``lower`` and ``upper`` hold n-1 entries (sub- and super-diagonal).
    Returns the smallest absolute pivot met during the forward sweep; a zero
    return means the sweep stopped at a zero pivot and ``out`` is undefined.
    """
    n = diag.shape[0]
    c = np.empty(n, dtype=diag.dtype)
    d = np.empty(n, dtype=diag.dtype)

    pivot = diag[0]
    smallest = abs(pivot)
    if pivot == 0.0:
        return 0.0
    c[0] = upper[0] / pivot if n > 1 else 0.0
    d[0] = rhs[0] / pivot

    for i in range(1, n):
        pivot = diag[i] - lower[i - 1] * c[i - 1]
        if abs(pivot) < smallest:
            smallest = abs(pivot)
        if pivot == 0.0:
            return 0.0
        c[i] = upper[i] / pivot if i < n - 1 else 0.0
        d[i] = (rhs[i] - lower[i - 1] * d[i - 1]) / pivot

    out[n - 1] = d[n - 1]
    for i in range(n - 2, -1, -1):
        out[i] = d[i] - c[i] * out[i + 1]

    return smallest

def trapezoid_weights(a, b, n_nodes):
    """Nodes and composite trapezoidal weights for ``n_nodes`` equally spaced points."""
    nodes = np.linspace(a, b, n_nodes)
    h = (b - a) / (n_nodes - 1)
    weights = np.full(n_nodes, h, dtype=np.float64)
    weights[0] = weights[-1] = h / 2
    return nodes, weights
