"""Tests for the adaptive linear boundary-value solver."""

import pytest
import numpy as np

from pyspecfun.interval.boundary_conditions import BoundaryConditions
from pyspecfun.interval.configs import LinopConfig
from pyspecfun.interval.errors import ConvergenceWarning
from pyspecfun.interval.functions import BoundedFun
from pyspecfun.interval.operators import (
    ChebColloc2,
    DifferentialOperator,
    Linop,
    linsolve,
)


@pytest.fixture
def poisson() -> Linop:
    return Linop(DifferentialOperator.diff(2), [-1, 1],
                 boundary_conditions=BoundaryConditions.dirichlet())


def rhs(x):
    return -np.pi ** 2 * np.sin(np.pi * x)


def test_poisson(poisson):
    """u'' = -π² sin(πx), u(±1) = 0 has solution sin(πx)."""
    u = linsolve(poisson, rhs)[0, 0]
    x = np.linspace(-1, 1, 21)
    np.testing.assert_allclose(u(x), np.sin(np.pi * x), atol=1e-9)


def test_rhs_as_function(poisson):
    f = BoundedFun(rhs, [-1, 1])
    u = poisson.solve(f)[0, 0]
    assert u(0.5) == pytest.approx(1.0, abs=1e-9)


def test_inhomogeneous_dirichlet():
    L = Linop(DifferentialOperator.diff(2), [0, 2],
              boundary_conditions=BoundaryConditions.dirichlet(1.0, 3.0))
    u = linsolve(L, np.zeros_like)[0, 0]
    x = np.linspace(0, 2, 9)
    np.testing.assert_allclose(u(x), 1 + x, atol=1e-10)


def test_mixed_conditions():
    """u'' = 0, u(0) = 1, u'(1) = 2 gives u = 1 + 2x."""
    bc = BoundaryConditions('mixed_dirichlet_neumann', left=1.0, right=2.0)
    L = Linop(DifferentialOperator.diff(2), [0, 1], boundary_conditions=bc)
    u = linsolve(L, np.zeros_like)[0, 0]
    x = np.linspace(0, 1, 9)
    np.testing.assert_allclose(u(x), 1 + 2 * x, atol=1e-10)


def test_variable_coefficients():
    """u'' - x u' = f with exact solution cos(πx / 2)."""
    exact = lambda x: np.cos(np.pi * x / 2)
    second = lambda x: -(np.pi / 2) ** 2 * np.cos(np.pi * x / 2)
    first = lambda x: -(np.pi / 2) * np.sin(np.pi * x / 2)
    L = Linop(DifferentialOperator([0.0, lambda x: -x, 1.0]), [-1, 1],
              boundary_conditions=BoundaryConditions.dirichlet())
    u = linsolve(L, lambda x: second(x) - x * first(x))[0, 0]
    x = np.linspace(-1, 1, 17)
    np.testing.assert_allclose(u(x), exact(x), atol=1e-9)


def test_multi_interval(poisson):
    """A partitioned domain gives matching pieces across the breakpoint."""
    L = poisson.with_domain([-1, 0.3, 1])
    u = linsolve(L, rhs)[0, 0]
    np.testing.assert_allclose(u.breakpoints, [-1, 0.3, 1])
    x = np.linspace(-1, 1, 21)
    np.testing.assert_allclose(u(x), np.sin(np.pi * x), atol=1e-9)


def test_discretization_instance(poisson):
    config = LinopConfig(discretization=ChebColloc2(poisson, [40]))
    u = linsolve(poisson, rhs, config)[0, 0]
    assert u.length == 40


def test_unresolved_warns():
    """Dimensions below the happiness threshold never resolve."""
    L = Linop(DifferentialOperator.diff(2), [0, 1],
              boundary_conditions=BoundaryConditions.dirichlet(1.0, 3.0))
    config = LinopConfig(dimension_values=[9, 13])
    with pytest.warns(ConvergenceWarning):
        u = linsolve(L, np.zeros_like, config)[0, 0]
    assert u(0.5) == pytest.approx(2.0, abs=1e-8)


def test_half_line():
    """u'' - u = -2 exp(-x) on [0, inf), u(0) = u(inf) = 0: u = x exp(-x)."""
    L = Linop(DifferentialOperator([-1.0, 0.0, 1.0]), [0, np.inf],
              boundary_conditions=BoundaryConditions.dirichlet())
    u = linsolve(L, lambda x: -2 * np.exp(-x))[0, 0]
    x = np.linspace(0, 20, 41)
    np.testing.assert_allclose(u(x), x * np.exp(-x), atol=1e-10)
    assert u(np.inf) == pytest.approx(0.0, abs=1e-10)
