"""
Tests for gradient descent, the penalty method and golden-section search
"""

import numpy as np
import pytest

from pyNUMLAB import Cancelled, Diagnostic, Diverged
from pyNUMLAB.mathparse import parse
from pyNUMLAB.Optimizers import (
    GradientDescent,
    LineSearch,
    Mode,
    PenaltyMethod,
    golden_section_min,
    minimize,
)
from pyNUMLAB.Problem import FunctionProblem, PenaltyProblem, central_gradient

BOWL = "(x-1)^2 + (y-2)^2"
ROSENBROCK = "(1-x)^2 + 100(y-x^2)^2"


class TestGradientDescent:
    """Unconstrained minimization"""

    @pytest.mark.parametrize("start", [(5.0, -3.0), (0.0, 0.0), (-10.0, 10.0)])
    def test_quadratic_bowl(self, start) -> None:
        result = minimize(BOWL, start)
        assert result.point == pytest.approx((1.0, 2.0), abs=1e-5)
        assert result.value == pytest.approx(0.0, abs=1e-10)
        assert result.diagnostics == frozenset()

    def test_trajectory(self) -> None:
        result = minimize(BOWL, (5.0, -3.0))
        assert result.trajectory[0] == (5.0, -3.0)
        assert result.trajectory[-1] == result.point
        assert len(result.trajectory) == result.iterations + 1

    def test_values_decrease(self) -> None:
        f = parse(ROSENBROCK)
        result = minimize(ROSENBROCK, (-1.2, 1.0), max_iter=50)
        values = [f(x, y) for x, y in result.trajectory]
        assert all(b < a for a, b in zip(values, values[1:]))

    def test_budget_exhausted(self, caplog) -> None:
        with caplog.at_level("WARNING"):
            result = minimize(ROSENBROCK, (-1.2, 1.0), max_iter=5)
        assert result.max_iter_exceeded
        assert Diagnostic.MAX_ITER_EXCEEDED in result.diagnostics
        assert result.iterations == 5
        assert result.value < parse(ROSENBROCK)(-1.2, 1.0)
        assert "stopped after 5 iterations" in caplog.text

    def test_golden_section_line_search(self) -> None:
        result = minimize("(x-1)^2 + 4(y+1)^2", (3.0, 2.0), line_search=LineSearch.GOLDEN_SECTION)
        assert result.point == pytest.approx((1.0, -1.0), abs=1e-5)

    def test_line_search_failure(self) -> None:
        """An ascent direction never decreases f"""
        class Uphill(FunctionProblem):
            def nabla_f(self, desvars=None):
                return -super().nabla_f(desvars)

        optimizer = GradientDescent(Uphill(BOWL, (3.0, 3.0)))
        with pytest.raises(Diverged) as info:
            optimizer.run()
        assert info.value.result.point == (3.0, 3.0)

    def test_logs(self) -> None:
        optimizer = GradientDescent(FunctionProblem(BOWL, (0.0, 0.0)))
        optimizer.iter()
        logs = optimizer.logs()
        assert logs["iteration"] == 1
        assert set(logs) == {"iteration", "objective", "gradient_norm", "step_size"}

    def test_cancel(self) -> None:
        with pytest.raises(Cancelled):
            minimize(BOWL, (5.0, -3.0), cancel=lambda: True)

    @pytest.mark.parametrize(
        "kwargs",
        [{"tolerance": 0.0}, {"max_iter": 0}, {"line_search_min_step": 0.0}, {"step_size": 1e-14}],
    )
    def test_invalid_configuration(self, kwargs) -> None:
        with pytest.raises(ValueError):
            GradientDescent(FunctionProblem(BOWL, (0.0, 0.0)), **kwargs)


class TestPenaltyMethod:
    """Constrained minimization, constraints read as g(x, y) <= 0"""

    def test_active_constraint(self) -> None:
        result = minimize(BOWL, (3.0, 3.0), mode=Mode.PENALTY, constraints=["x"])
        x, y = result.point
        assert x == pytest.approx(0.0, abs=1e-3)
        assert y == pytest.approx(2.0, abs=1e-3)
        assert result.value == pytest.approx(1.0, abs=1e-2)
        assert Diagnostic.MAX_ITER_EXCEEDED not in result.diagnostics

    def test_inactive_constraint(self) -> None:
        result = minimize(BOWL, (3.0, 3.0), mode=Mode.PENALTY, constraints=["x - 10"])
        assert result.point == pytest.approx((1.0, 2.0), abs=1e-5)

    def test_mode_by_name(self) -> None:
        result = minimize(BOWL, (3.0, 3.0), mode="penalty", constraints=["x - 10"])
        assert result.point == pytest.approx((1.0, 2.0), abs=1e-5)

    def test_outer_budget(self) -> None:
        result = minimize(BOWL, (3.0, 3.0), mode=Mode.PENALTY, constraints=["x"], max_outer=1)
        assert Diagnostic.MAX_ITER_EXCEEDED in result.diagnostics

    def test_stages_grow_penalty(self) -> None:
        problem = FunctionProblem(BOWL, (3.0, 3.0), constraints=["x"])
        optimizer = PenaltyMethod(problem, penalty_start=1.0, penalty_growth_factor=10.0)
        optimizer.iter()
        # first stage minimizes (x-1)^2 + x^2 in x
        assert optimizer.desvars[0] == pytest.approx(0.5, abs=1e-5)
        assert optimizer.mu == 10.0
        assert optimizer.logs()["stage"] == 1

    @pytest.mark.parametrize(
        "kwargs",
        [{"penalty_start": 0.0}, {"penalty_growth_factor": 1.0}, {"max_outer": 0}],
    )
    def test_invalid_configuration(self, kwargs) -> None:
        with pytest.raises(ValueError):
            PenaltyMethod(FunctionProblem(BOWL, (0.0, 0.0)), **kwargs)


class TestProblems:
    """Objective wrappers and numerical gradients"""

    def test_central_gradient(self) -> None:
        grad = central_gradient(lambda p: p[0] ** 2 + 3 * p[1], np.array([2.0, 0.0]), 1e-6)
        np.testing.assert_allclose(grad, [4.0, 3.0], rtol=1e-6)

    def test_one_sided_gradient(self) -> None:
        """sqrt(x) is undefined left of 0; the forward difference is used"""
        problem = FunctionProblem("sqrt(x) + y", (0.0, 0.0))
        grad = problem.nabla_f()
        assert grad[1] == pytest.approx(1.0)
        assert grad[0] > 0

    def test_penalty_violation(self) -> None:
        problem = FunctionProblem(BOWL, (0.0, 0.0), constraints=["x", "-y"])
        penalized = PenaltyProblem(problem, mu=10.0, start=(2.0, 3.0))
        assert penalized.violation() == pytest.approx(4.0)
        assert penalized.f() == pytest.approx(problem.f((2.0, 3.0)) + 40.0)

    def test_invalid_start(self) -> None:
        with pytest.raises(ValueError):
            FunctionProblem(BOWL, (1.0, 2.0, 3.0))


class TestGoldenSection:
    """One-dimensional golden-section minimum"""

    def test_rational_function(self) -> None:
        x, value = golden_section_min(parse("(x^2-6x+12)/(x^2+6x+20)"), 0.0, 20.0)
        assert x == pytest.approx((-4 + 592 ** 0.5) / 6, abs=1e-6)
        assert value < 0.07

    def test_reversed_bracket(self) -> None:
        x, _ = golden_section_min(lambda t: (t - 2.0) ** 2, 5.0, 0.0)
        assert x == pytest.approx(2.0, abs=1e-6)

    def test_iteration_cap(self) -> None:
        with pytest.raises(Diverged) as info:
            golden_section_min(lambda t: (t - 2.0) ** 2, 0.0, 5.0, max_iter=3)
        x, value = info.value.result
        assert 0.0 <= x <= 5.0
