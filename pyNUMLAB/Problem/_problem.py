import numpy as np

from .._errors import DomainError
from ..mathparse import as_function


class Problem:
    """
    Interface between an objective of two variables and an optimizer.

    A problem owns its current point (the design variables) and answers
    objective, gradient and constraint queries at that point or at an explicit
    one. Optimizers never touch the objective directly.

    Methods
    -------
    init_desvars()
        Starting point
    set_desvars(p) / get_desvars()
        Move to / read the current point
    f(p=None), nabla_f(p=None)
        Objective and its gradient
    g(p=None), m()
        Constraint values ``g_k(p) <= 0`` and their count
    """
    def __init__(self, *args, **kwargs):
        pass

    def init_desvars(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} does not define a starting point.")

    def set_desvars(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} cannot move to a new point.")

    def get_desvars(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} does not expose its current point.")

    def f(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} has no objective.")

    def nabla_f(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} has no objective gradient.")

    def g(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} has no constraints.")

    def m(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} does not count its constraints.")


def central_gradient(fun, point, h):
    """
    Central-difference gradient of ``fun`` at ``point``.

    Falls back to a one-sided difference along an axis where one of the
    probes is undefined; raises DomainError when both are.
    """
    point = np.asarray(point, dtype=np.float64)
    grad = np.empty_like(point)
    f0 = None
    for k in range(point.shape[0]):
        step = h * max(1.0, abs(point[k]))
        forward = point.copy()
        backward = point.copy()
        forward[k] += step
        backward[k] -= step
        try:
            f_plus = fun(forward)
        except DomainError:
            f_plus = None
        try:
            f_minus = fun(backward)
        except DomainError:
            f_minus = None

        if f_plus is not None and f_minus is not None:
            grad[k] = (f_plus - f_minus) / (2.0 * step)
            continue
        if f0 is None:
            f0 = fun(point)
        if f_plus is not None:
            grad[k] = (f_plus - f0) / step
        elif f_minus is not None:
            grad[k] = (f0 - f_minus) / step
        else:
            raise DomainError(f"gradient undefined at {point.tolist()}")
    return grad


class FunctionProblem(Problem):
    """
    Minimize a scalar function of two variables ``f(x, y)``.

    Parameters
    ----------
    objective : str, Expression or callable
        Objective ``f(x, y)``.
    start : sequence of 2 floats
        Starting point.
    constraints : sequence, optional
        Constraint functions ``g_k(x, y) <= 0`` (used by the penalty method).
    gradient_step_h : float, optional
        Central-difference step of the numerical gradient (default: 1e-6).

    Notes
    -----
    - Gradients are numerical; the objective need not be differentiable
      symbolically
    """
    def __init__(self, objective, start, constraints=(), gradient_step_h=1e-6):
        super().__init__()
        start = np.array(start, dtype=np.float64)
        if start.shape != (2,) or not np.all(np.isfinite(start)):
            raise ValueError(f"start must be a finite point (x, y), got {start}")
        if not gradient_step_h > 0:
            raise ValueError(f"gradient_step_h must be positive, got {gradient_step_h}")
        self.objective = as_function(objective)
        self.constraints = tuple(as_function(c) for c in constraints)
        self.start = start
        self.gradient_step_h = gradient_step_h
        self.desvars = self.init_desvars()

    def init_desvars(self):
        return self.start.copy()

    def set_desvars(self, desvars):
        self.desvars = np.array(desvars, dtype=np.float64)

    def get_desvars(self):
        return self.desvars

    def f(self, desvars=None):
        x, y = self.desvars if desvars is None else desvars
        return self.objective(float(x), float(y))

    def nabla_f(self, desvars=None):
        point = self.desvars if desvars is None else desvars
        return central_gradient(self.f, point, self.gradient_step_h)

    def g(self, desvars=None):
        x, y = self.desvars if desvars is None else desvars
        return np.array([c(float(x), float(y)) for c in self.constraints], dtype=np.float64)

    def m(self):
        return len(self.constraints)
