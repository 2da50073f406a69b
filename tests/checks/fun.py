"""
Module containing an abstract test class for Fun implementations.

This class defines a "contract" of tests that any concrete function
variant should pass, whatever map it uses onto [-1, 1].
"""

from __future__ import annotations
import pytest
import numpy as np
from typing import TYPE_CHECKING, Callable

# This block only runs for type checkers, not at runtime
if TYPE_CHECKING:
    from pyspecfun.interval.functions import Fun


class FunChecks:
    """
    An abstract base class for testing Fun implementations.

    To use this, create a concrete test class that inherits from this one
    and provide pytest fixtures named `fun` (the function under test),
    `exact` (the vectorised callable it represents), `exact_derivative`,
    `exact_integral` and `sample_points` (interior points of the domain).
    """

    atol = 1e-10

    # =========================================================================
    # Pytest Fixtures
    # =========================================================================

    @pytest.fixture
    def a(self) -> float:
        """A random scalar."""
        return np.random.randn()

    # =========================================================================
    # Construction and evaluation
    # =========================================================================

    def test_is_happy(self, fun: "Fun"):
        """Tests that the adaptive construction resolved the function."""
        assert fun.ishappy

    def test_evaluate(self, fun: "Fun", exact: Callable, sample_points):
        """Tests that the function agrees with the exact values."""
        np.testing.assert_allclose(fun(sample_points), exact(sample_points),
                                   atol=self.atol)

    def test_scalar_in_scalar_out(self, fun: "Fun", sample_points):
        """Tests that a scalar argument gives a scalar value."""
        value = fun(float(sample_points[0]))
        assert np.ndim(value) == 0

    def test_outside_domain_is_nan(self, fun: "Fun"):
        """Tests that points outside the domain evaluate to NaN."""
        a, b = fun.domain.a, fun.domain.b
        outside = []
        if np.isfinite(a):
            outside.append(a - 1.0)
        if np.isfinite(b):
            outside.append(b + 1.0)
        if outside:
            assert np.all(np.isnan(fun(np.array(outside))))

    def test_endpoint_values(self, fun: "Fun", exact: Callable):
        """Tests evaluation at the endpoints, including infinite ones."""
        for end in (fun.domain.a, fun.domain.b):
            if np.isinf(end):
                expected = exact(np.sign(end) * 1e8)
            else:
                expected = exact(end)
            assert fun(end) == pytest.approx(expected, abs=1e-9)

    # =========================================================================
    # Calculus
    # =========================================================================

    def test_diff(self, fun: "Fun", exact_derivative: Callable,
                  sample_points):
        """Tests the chain-rule derivative."""
        np.testing.assert_allclose(fun.diff()(sample_points),
                                   exact_derivative(sample_points),
                                   atol=1e-8)

    def test_diff_zero_is_copy(self, fun: "Fun", sample_points):
        """Tests that the zeroth derivative reproduces the function."""
        np.testing.assert_allclose(fun.diff(0)(sample_points),
                                   fun(sample_points))

    def test_sum(self, fun: "Fun", exact_integral: float):
        """Tests the definite integral over the domain."""
        assert fun.sum() == pytest.approx(exact_integral, rel=1e-9,
                                          abs=1e-10)

    def test_cumsum_derivative(self, fun: "Fun", sample_points):
        """Tests that differentiating the antiderivative recovers f."""
        np.testing.assert_allclose(fun.cumsum().diff()(sample_points),
                                   fun(sample_points), atol=1e-7)

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def test_linearity(self, fun: "Fun", exact: Callable, sample_points,
                       a: float):
        """Tests scalar multiplication and addition."""
        combined = a * fun + fun - 1.0
        np.testing.assert_allclose(combined(sample_points),
                                   (a + 1) * exact(sample_points) - 1.0,
                                   atol=1e-9 * max(1.0, abs(a)))

    def test_product(self, fun: "Fun", exact: Callable, sample_points):
        """Tests the pointwise product of two functions."""
        np.testing.assert_allclose((fun * fun)(sample_points),
                                   exact(sample_points) ** 2, atol=1e-9)

    def test_copy_is_independent(self, fun: "Fun", sample_points):
        """Tests that a copy does not share its coefficients."""
        before = fun(sample_points)
        other = fun.copy()
        other.onefun.coeffs[0] += 1.0
        np.testing.assert_array_equal(fun(sample_points), before)

    def test_mldivide_recovers_scale(self, fun: "Fun"):
        """Tests least-squares division against a scaled copy."""
        assert fun.mldivide(3.0 * fun) == pytest.approx(3.0, rel=1e-9)
