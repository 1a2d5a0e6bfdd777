class Solver:
    """
    Linear system solver shared by the integral-equation and spline code.

    Methods
    -------
    solve(...)
        Returns ``(z, residual)``; residual is ``||A@z - b|| / ||b||``, or
        ``||A@z - b||`` when ``b`` is zero
    __call__(...)
        Same as ``solve``

    Notes
    -----
    Solvers are stateless between calls; configuration is fixed at
    construction.
    """
    def __init__(self):
        pass

    def __call__(self, *args, **kwargs):
        return self.solve(*args, **kwargs)

    def solve(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} does not implement solve().")
