import numpy as np

from ._problem import FunctionProblem, Problem, central_gradient


class PenaltyProblem(Problem):
    """
    Exterior quadratic penalty of a constrained problem.

    ``F(p) = f(p) + mu * sum(max(0, g_k(p))^2)``

    Parameters
    ----------
    problem : FunctionProblem
        Constrained problem providing ``f`` and ``g``.
    mu : float
        Penalty weight.
    start : array_like, optional
        Starting point (default: the problem's current design variables).
    """
    def __init__(self, problem: FunctionProblem, mu, start=None):
        super().__init__()
        if not mu > 0:
            raise ValueError(f"penalty weight must be positive, got {mu}")
        self.problem = problem
        self.mu = mu
        self.start = np.array(problem.get_desvars() if start is None else start, dtype=np.float64)
        self.gradient_step_h = problem.gradient_step_h
        self.desvars = self.init_desvars()

    def init_desvars(self):
        return self.start.copy()

    def set_desvars(self, desvars):
        self.desvars = np.array(desvars, dtype=np.float64)

    def get_desvars(self):
        return self.desvars

    def violation(self, desvars=None):
        point = self.desvars if desvars is None else desvars
        if self.problem.m() == 0:
            return 0.0
        return float((np.maximum(self.problem.g(point), 0.0)**2).sum())

    def f(self, desvars=None):
        point = self.desvars if desvars is None else desvars
        return self.problem.f(point) + self.mu * self.violation(point)

    def nabla_f(self, desvars=None):
        point = self.desvars if desvars is None else desvars
        return central_gradient(self.f, point, self.gradient_step_h)

    def g(self, desvars=None):
        return self.problem.g(desvars)

    def m(self):
        return self.problem.m()
