from enum import Enum
import logging

import numpy as np

from .._errors import Diagnostic, DomainError, Diverged, check_cancel
from ..Problem._problem import Problem
from ._golden import golden_section_min
from ._optimizer import OptimizationResult, OptimizationState, Optimizer

logger = logging.getLogger(__name__)


class LineSearch(Enum):
    BACKTRACKING = "backtracking"
    GOLDEN_SECTION = "golden_section"


class GradientDescent(Optimizer):
    """
    Steepest descent with numerical gradients.

    Parameters
    ----------
    problem : Problem
        Problem providing ``f`` and ``nabla_f``
    tolerance : float, optional
        Stop when the gradient norm drops below this value (default: 1e-6)
    max_iter : int, optional
        Iteration budget (default: 10000)
    step_size : float, optional
        Initial step length (default: 1.0)
    line_search_min_step : float, optional
        Smallest step the backtracking search may try (default: 1e-12)
    line_search : LineSearch, optional
        BACKTRACKING or GOLDEN_SECTION (default: BACKTRACKING)
    golden_tol : float, optional
        Bracket width of the golden-section line search (default: 1e-8)
    cancel : callable, optional
        Polled once per iteration; returning True aborts with Cancelled

    Attributes
    ----------
    state : OptimizationState
        Current point, value, iteration, gradient norm and step size
    trajectory : list
        Accepted points, starting point first

    Methods
    -------
    iter()
        Perform one descent step
    converged()
        True once the gradient norm is below tolerance
    logs()
        Return dict of optimization metrics
    run()
        Iterate to convergence, returns OptimizationResult

    Notes
    -----
    - **Backtracking**: the step is halved until f decreases and kept for the
      following iterations; going below line_search_min_step raises Diverged
      with the best point attached
    - **Golden section**: minimizes f(p - a*grad) over a in [0, step_size];
      falls back to backtracking when that does not decrease f
    - Exhausting max_iter returns the best point flagged MAX_ITER_EXCEEDED

    Examples
    --------
    >>> from pyNUMLAB.Problem import FunctionProblem
    >>> problem = FunctionProblem("(x-1)^2 + (y-2)^2", start=(0, 0))
    >>> GradientDescent(problem, tolerance=1e-8).run().point
    """
    def __init__(self,
                 problem: Problem,
                 tolerance=1e-6,
                 max_iter=10000,
                 step_size=1.0,
                 line_search_min_step=1e-12,
                 line_search=LineSearch.BACKTRACKING,
                 golden_tol=1e-8,
                 cancel=None):
        super().__init__(problem)
        if not tolerance > 0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")
        if max_iter < 1:
            raise ValueError(f"max_iter must be at least 1, got {max_iter}")
        if not 0 < line_search_min_step < step_size:
            raise ValueError("line_search_min_step must be positive and smaller than step_size")

        self.tolerance = tolerance
        self.max_iter = max_iter
        self.line_search_min_step = line_search_min_step
        self.line_search = LineSearch(line_search)
        self.golden_tol = golden_tol
        self.cancel = cancel

        point = np.array(self.desvars, dtype=np.float64)
        problem.set_desvars(point)
        self.gradient = problem.nabla_f(point)
        self.state = OptimizationState(
            point=point,
            value=problem.f(point),
            iteration=0,
            gradient_norm=float(np.linalg.norm(self.gradient)),
            step_size=step_size,
        )
        self.trajectory = [tuple(point.tolist())]
        self.diagnostics = set()

    def _value(self, point):
        try:
            return self.problem.f(point)
        except DomainError:
            return np.inf

    def _backtrack(self):
        state = self.state
        step = state.step_size
        while True:
            candidate = state.point - step * self.gradient
            value = self._value(candidate)
            if value < state.value:
                return candidate, value, step
            step /= 2.0
            if step < self.line_search_min_step:
                raise Diverged(
                    f"line search step fell below {self.line_search_min_step} "
                    f"at iteration {state.iteration} (gradient norm {state.gradient_norm:.3e})",
                    result=self.result(),
                )

    def _golden(self):
        state = self.state
        alpha, value = golden_section_min(
            lambda a: self._value(state.point - a * self.gradient),
            0.0, state.step_size, min_width=self.golden_tol,
        )
        if value < state.value:
            return state.point - alpha * self.gradient, value, state.step_size
        return self._backtrack()

    def iter(self):
        """
        Perform one descent step.

        Updates the problem's design variables, the state and the gradient.
        """
        if self.line_search is LineSearch.GOLDEN_SECTION:
            point, value, step = self._golden()
        else:
            point, value, step = self._backtrack()

        self.problem.set_desvars(point)
        self.desvars = point
        self.gradient = self.problem.nabla_f(point)
        state = self.state
        state.point = point
        state.value = value
        state.step_size = step
        state.iteration += 1
        state.gradient_norm = float(np.linalg.norm(self.gradient))
        self.trajectory.append(tuple(point.tolist()))

    def converged(self):
        return self.state.gradient_norm < self.tolerance

    def logs(self):
        return {
            "iteration": self.state.iteration,
            "objective": self.state.value,
            "gradient_norm": self.state.gradient_norm,
            "step_size": self.state.step_size,
        }

    def result(self):
        return OptimizationResult(
            point=tuple(self.state.point.tolist()),
            value=self.state.value,
            iterations=self.state.iteration,
            diagnostics=frozenset(self.diagnostics),
            trajectory=tuple(self.trajectory),
        )

    def run(self):
        while not self.converged():
            if self.state.iteration >= self.max_iter:
                logger.warning(
                    f"Gradient descent stopped after {self.max_iter} iterations "
                    f"(gradient norm {self.state.gradient_norm:.3e})."
                )
                self.diagnostics.add(Diagnostic.MAX_ITER_EXCEEDED)
                break
            check_cancel(self.cancel)
            self.iter()
            logger.debug(f"Iter {self.state.iteration}: f={self.state.value:.6e}, |grad|={self.state.gradient_norm:.3e}")
        return self.result()
