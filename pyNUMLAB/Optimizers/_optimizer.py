from dataclasses import dataclass, field
from typing import FrozenSet, Tuple

import numpy as np

from .._errors import Diagnostic
from ..Problem._problem import Problem


@dataclass
class OptimizationState:
    """Working state of one optimization run; mutated every iteration."""
    point: np.ndarray
    value: float
    iteration: int
    gradient_norm: float
    step_size: float


@dataclass(frozen=True)
class OptimizationResult:
    point: Tuple[float, float]
    value: float
    iterations: int
    diagnostics: FrozenSet[Diagnostic] = field(default_factory=frozenset)
    trajectory: Tuple[Tuple[float, float], ...] = field(default=(), repr=False)

    @property
    def max_iter_exceeded(self):
        return Diagnostic.MAX_ITER_EXCEEDED in self.diagnostics


class Optimizer:
    """
    Iterative minimizer bound to a :class:`pyNUMLAB.Problem.Problem`.

    The loop is ``while not converged(): iter()``; ``run`` wraps it with the
    iteration budget and returns an :class:`OptimizationResult`. ``logs``
    reports the metrics of the latest iteration.
    """
    def __init__(self, problem: Problem, *args, **kwargs):
        self.problem = problem
        self.desvars = problem.init_desvars()

    def iter(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} does not define an iteration.")

    def converged(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} does not define a stopping test.")

    def logs(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} does not report metrics.")

    def run(self, *args, **kwargs):
        raise NotImplementedError(f"{type(self).__name__} does not define a run loop.")
