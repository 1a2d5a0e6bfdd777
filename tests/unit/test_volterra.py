"""
Tests for the Volterra second-kind marching solver
"""

import math

import numpy as np
import pytest

from pyNUMLAB import Cancelled, Diverged
from pyNUMLAB.integral_eq import VolterraSecondKind


class TestAccuracy:
    """Equations with closed-form solutions"""

    def test_exponential(self) -> None:
        """phi = 1 + int_0^x phi ds has phi = e^x"""
        result = VolterraSecondKind(node_count=100).solve("1", "1", 0, 1)
        assert result.values[-1] == pytest.approx(math.e, abs=1e-4)
        assert result.grid(0.5) == pytest.approx(math.exp(0.5), abs=1e-3)

    def test_second_order(self) -> None:
        coarse = VolterraSecondKind(node_count=10).solve("1", "1", 0, 1).values[-1]
        fine = VolterraSecondKind(node_count=100).solve("1", "1", 0, 1).values[-1]
        coarse_error = abs(coarse - math.e)
        fine_error = abs(fine - math.e)
        # ten times finer grid, about a hundred times smaller error
        assert fine_error < coarse_error / 50

    def test_exponential_kernel(self) -> None:
        """K = exp(x - s), f = 1 gives phi = (exp(2x) + 1) / 2"""
        result = VolterraSecondKind(node_count=200).solve("exp(x - y)", "1", 0, 1)
        expected = (np.exp(2 * result.nodes) + 1) / 2
        assert np.abs(result.values - expected).max() < 1e-3

    def test_lambda_multiplier(self) -> None:
        result = VolterraSecondKind(node_count=200, lam=2.0).solve("1", "1", 0, 1)
        assert result.values[-1] == pytest.approx(math.exp(2.0), rel=1e-4)

    def test_initial_value(self) -> None:
        """phi(a) = f(a)"""
        result = VolterraSecondKind(node_count=10).solve("x*y", "cos(x)", 1, 2)
        assert result.values[0] == pytest.approx(math.cos(1.0))


class TestEdgeCases:
    """Shape of the result and failure modes"""

    def test_node_count(self) -> None:
        result = VolterraSecondKind(node_count=7).solve("1", "1", 0, 1)
        assert len(result.nodes) == 8
        assert result.residual is None

    def test_vanishing_denominator(self) -> None:
        """1 - h*lam*K/2 = 0 with h = 0.1, lam = 20"""
        with pytest.raises(Diverged):
            VolterraSecondKind(node_count=10, lam=20.0).solve("1", "1", 0, 1)

    def test_cancel(self) -> None:
        with pytest.raises(Cancelled):
            VolterraSecondKind().solve("1", "1", 0, 1, cancel=lambda: True)

    def test_invalid_node_count(self) -> None:
        with pytest.raises(ValueError):
            VolterraSecondKind(node_count=0)
