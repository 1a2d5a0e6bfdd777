from enum import Enum

from ..Problem import FunctionProblem
from ._golden import golden_section_min
from ._optimizer import OptimizationResult, OptimizationState, Optimizer
from .GradientDescent import GradientDescent, LineSearch
from .Penalty import PenaltyMethod


class Mode(Enum):
    GRADIENT = "gradient"
    PENALTY = "penalty"


def minimize(f, start, mode=Mode.GRADIENT, tolerance=1e-6, max_iter=10000,
             constraints=(), gradient_step_h=1e-6, **options):
    """
    Minimize ``f(x, y)`` starting from ``start``.

    Parameters
    ----------
    f : str, Expression or callable
        Objective of two variables.
    start : sequence of 2 floats
        Starting point.
    mode : Mode, optional
        ``Mode.GRADIENT`` for unconstrained descent, ``Mode.PENALTY`` for the
        penalty method over ``constraints`` (default: GRADIENT).
    tolerance, max_iter : optional
        Stop criteria forwarded to the optimizer.
    constraints : sequence, optional
        Constraint functions ``g_k(x, y) <= 0``; ignored in GRADIENT mode.
    gradient_step_h : float, optional
        Central-difference step of the numerical gradient (default: 1e-6).
    **options
        Remaining keyword arguments of :class:`GradientDescent` or
        :class:`PenaltyMethod`.

    Returns
    -------
    OptimizationResult
    """
    mode = Mode(mode)
    problem = FunctionProblem(f, start, constraints=constraints, gradient_step_h=gradient_step_h)
    if mode is Mode.PENALTY:
        optimizer = PenaltyMethod(problem, tolerance=tolerance, max_iter=max_iter, **options)
    else:
        optimizer = GradientDescent(problem, tolerance=tolerance, max_iter=max_iter, **options)
    return optimizer.run()
