"""
Tests for adaptive Simpson quadrature
"""

import math

import pytest

from pyNUMLAB import Cancelled, Diagnostic, Diverged
from pyNUMLAB.quadrature import AdaptiveSimpson, QuadratureResult, integrate


class TestAccuracy:
    """Integrals with known values"""

    def test_polynomial(self) -> None:
        result = integrate("x^2", 0, 1, target_error=1e-10)
        assert result.value == pytest.approx(1 / 3, abs=1e-12)
        assert result.diagnostics == frozenset()

    def test_sine(self) -> None:
        result = AdaptiveSimpson(target_error=1e-10).integrate("sin(x)", 0, math.pi)
        assert abs(result.value - 2.0) < 1e-9

    def test_error_bound_meets_target(self) -> None:
        target = 1e-8
        result = AdaptiveSimpson(target_error=target).integrate("exp(x)", 0, 2)
        assert abs(result.value - (math.e**2 - 1)) <= 10 * target
        assert result.error <= target

    def test_python_callable(self) -> None:
        result = integrate(math.cos, 0, math.pi / 2)
        assert result.value == pytest.approx(1.0, abs=1e-9)

    def test_counts_evaluations(self) -> None:
        result = integrate("x", 0, 1)
        assert result.evaluations >= 5


class TestOrientation:
    """Degenerate and reversed limits"""

    def test_equal_limits(self) -> None:
        result = integrate("x^2", 1.5, 1.5)
        assert result == QuadratureResult(0.0, 0.0, 0)

    def test_reversed_limits(self) -> None:
        forward = integrate("x^2", 0, 1).value
        backward = integrate("x^2", 1, 0).value
        assert backward == pytest.approx(-forward)


class TestDomainErrors:
    """Undefined samples contribute zero and lower the confidence"""

    def test_half_undefined(self) -> None:
        result = AdaptiveSimpson(target_error=1e-7).integrate("sqrt(x)", -1, 1)
        assert result.value == pytest.approx(2 / 3, abs=1e-6)
        assert Diagnostic.REDUCED_CONFIDENCE in result.diagnostics

    def test_partial_result_keeps_flag(self) -> None:
        """A log singularity never meets the tolerance; the flag survives on the partial result"""
        with pytest.raises(Diverged) as info:
            integrate("ln(x)", 0, 1, target_error=1e-10, max_depth=20)
        assert Diagnostic.REDUCED_CONFIDENCE in info.value.result.diagnostics


class TestSafetyBounds:
    """Depth and evaluation caps raise Diverged with the partial result"""

    def test_depth_cap(self) -> None:
        quad = AdaptiveSimpson(target_error=1e-14, max_depth=3)
        with pytest.raises(Diverged) as info:
            quad.integrate("sin(10x)", 0, 10)
        partial = info.value.result
        assert isinstance(partial, QuadratureResult)
        assert partial.diverged

    def test_evaluation_cap(self) -> None:
        quad = AdaptiveSimpson(target_error=1e-12, max_evaluations=5)
        with pytest.raises(Diverged) as info:
            quad.integrate("sin(10x)", 0, 10)
        assert info.value.result.evaluations == 5

    def test_cancel(self) -> None:
        with pytest.raises(Cancelled):
            AdaptiveSimpson().integrate("x", 0, 1, cancel=lambda: True)

    @pytest.mark.parametrize(
        "kwargs",
        [{"target_error": 0.0}, {"target_error": -1.0}, {"max_depth": 0}, {"max_evaluations": 1}],
    )
    def test_invalid_configuration(self, kwargs) -> None:
        with pytest.raises(ValueError):
            AdaptiveSimpson(**kwargs)
