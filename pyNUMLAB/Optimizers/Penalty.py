import logging

import numpy as np

from .._errors import Diagnostic, Diverged, check_cancel
from ..Problem._problem import FunctionProblem
from ..Problem.Penalty import PenaltyProblem
from ._optimizer import OptimizationResult, Optimizer
from .GradientDescent import GradientDescent, LineSearch

logger = logging.getLogger(__name__)


class PenaltyMethod(Optimizer):
    """
    Constrained minimization by the exterior quadratic penalty method.

    Each outer stage minimizes ``f + mu * sum(max(0, g_k)^2)`` with
    :class:`GradientDescent`, warm-started from the previous stage, then
    grows ``mu``. Constraints are read as ``g_k(x, y) <= 0``.

    Parameters
    ----------
    problem : FunctionProblem
        Objective and constraints
    tolerance : float, optional
        Outer stop: successive stage solutions closer than this (default: 1e-6)
    max_iter : int, optional
        Iteration budget of each inner descent (default: 10000)
    penalty_start : float, optional
        Initial penalty weight (default: 1.0)
    penalty_growth_factor : float, optional
        Factor applied to mu after every stage (default: 10.0)
    max_outer : int, optional
        Maximum number of stages (default: 30)
    step_size, line_search_min_step, line_search : optional
        Forwarded to the inner :class:`GradientDescent`
    cancel : callable, optional
        Polled every inner iteration

    Notes
    -----
    - The inner gradient tolerance is scaled by ``sqrt(mu)`` since the
      penalized objective gets steeper as mu grows
    - A stage whose line search gives up keeps its best point and tags the
      result with DIVERGED instead of aborting the run
    - The reported value is the unpenalized objective at the final point
    """
    def __init__(self,
                 problem: FunctionProblem,
                 tolerance=1e-6,
                 max_iter=10000,
                 penalty_start=1.0,
                 penalty_growth_factor=10.0,
                 max_outer=30,
                 step_size=1.0,
                 line_search_min_step=1e-12,
                 line_search=LineSearch.BACKTRACKING,
                 cancel=None):
        super().__init__(problem)
        if not tolerance > 0:
            raise ValueError(f"tolerance must be positive, got {tolerance}")
        if not penalty_start > 0:
            raise ValueError(f"penalty_start must be positive, got {penalty_start}")
        if not penalty_growth_factor > 1:
            raise ValueError(f"penalty_growth_factor must exceed 1, got {penalty_growth_factor}")
        if max_outer < 1:
            raise ValueError(f"max_outer must be at least 1, got {max_outer}")

        self.tolerance = tolerance
        self.max_iter = max_iter
        self.penalty_growth_factor = penalty_growth_factor
        self.max_outer = max_outer
        self.inner_options = dict(
            step_size=step_size,
            line_search_min_step=line_search_min_step,
            line_search=line_search,
            cancel=cancel,
        )
        self.cancel = cancel

        self.mu = penalty_start
        self.stage = 0
        self.iterations = 0
        self.change = np.inf
        self.desvars = np.array(self.desvars, dtype=np.float64)
        self.trajectory = [tuple(self.desvars.tolist())]
        self.diagnostics = set()

    def iter(self):
        """Run one penalty stage at the current mu, then grow mu."""
        penalized = PenaltyProblem(self.problem, self.mu, start=self.desvars)
        inner = GradientDescent(
            penalized,
            tolerance=self.tolerance * np.sqrt(max(1.0, self.mu)),
            max_iter=self.max_iter,
            **self.inner_options,
        )
        try:
            stage_result = inner.run()
        except Diverged as e:
            logger.warning(f"Penalty stage {self.stage} (mu={self.mu:g}) stopped early: {e}")
            stage_result = e.result
            self.diagnostics.add(Diagnostic.DIVERGED)

        self.diagnostics.update(stage_result.diagnostics)
        self.trajectory.extend(stage_result.trajectory[1:])
        self.iterations += stage_result.iterations

        point = np.array(stage_result.point, dtype=np.float64)
        self.change = float(np.linalg.norm(point - self.desvars)) if self.stage > 0 else np.inf
        self.desvars = point
        self.problem.set_desvars(point)
        self.stage += 1
        self.mu *= self.penalty_growth_factor

    def converged(self):
        return self.change < self.tolerance

    def logs(self):
        return {
            "stage": self.stage,
            "mu": self.mu,
            "change": self.change,
            "objective": self.problem.f(self.desvars),
            "violation": PenaltyProblem(self.problem, 1.0, start=self.desvars).violation(),
        }

    def run(self):
        while not self.converged():
            if self.stage >= self.max_outer:
                logger.warning(
                    f"Penalty method stopped after {self.max_outer} stages "
                    f"(last change {self.change:.3e})."
                )
                self.diagnostics.add(Diagnostic.MAX_ITER_EXCEEDED)
                break
            check_cancel(self.cancel)
            self.iter()
            logger.debug(f"Stage {self.stage}: change={self.change:.3e}")

        return OptimizationResult(
            point=tuple(self.desvars.tolist()),
            value=self.problem.f(self.desvars),
            iterations=self.iterations,
            diagnostics=frozenset(self.diagnostics),
            trajectory=tuple(self.trajectory),
        )
