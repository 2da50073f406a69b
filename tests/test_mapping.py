"""Tests for the maps between [-1, 1] and physical domains."""

import pytest
import numpy as np

from pyspecfun.interval.configs import MappingConfig
from pyspecfun.interval.errors import InvalidDomainKind
from pyspecfun.interval.mapping import create_map, linear_map, unbounded_map

DOMAINS = [
    (-np.inf, np.inf),
    (0.0, np.inf),
    (2.5, np.inf),
    (-np.inf, 0.0),
    (-np.inf, -3.0),
    (-1.0, 2.0),
]

INTERIOR = np.linspace(-0.95, 0.95, 39)


@pytest.fixture(params=DOMAINS, ids=lambda d: f"[{d[0]}, {d[1]}]")
def mapping(request):
    return create_map(request.param)


def test_round_trip(mapping):
    """Tests inverse(forward(t)) = t on interior points."""
    np.testing.assert_allclose(mapping.inverse(mapping.forward(INTERIOR)),
                               INTERIOR, atol=1e-13)


def test_strictly_increasing(mapping):
    x = mapping.forward(INTERIOR)
    assert np.all(np.diff(x) > 0)


def test_endpoints_reach_domain_ends(mapping):
    a, b = mapping.domain.a, mapping.domain.b
    x = mapping.forward(np.array([-1.0, 1.0]))
    assert x[0] == a and x[1] == b


def test_inverse_of_endpoints(mapping):
    """Tests that the domain ends (infinite or not) map back to ±1."""
    ends = np.array([mapping.domain.a, mapping.domain.b])
    np.testing.assert_allclose(mapping.inverse(ends), [-1.0, 1.0])


def test_derivative_matches_finite_differences(mapping):
    h = 1e-6
    numeric = (mapping.forward(INTERIOR + h)
               - mapping.forward(INTERIOR - h)) / (2 * h)
    np.testing.assert_allclose(mapping.derivative(INTERIOR), numeric,
                               rtol=1e-6)


def test_inverse_derivative_is_reciprocal(mapping):
    np.testing.assert_allclose(
        mapping.derivative(INTERIOR) * mapping.inverse_derivative(INTERIOR),
        1.0, rtol=1e-12,
    )


def test_inverse_derivative_finite_at_endpoints(mapping):
    assert np.all(np.isfinite(mapping.inverse_derivative(
        np.array([-1.0, 1.0]))))


def test_map_kinds():
    assert create_map([-1, 2]).is_linear
    assert create_map([-1, 2]).kind == "bounded"
    assert create_map([0, np.inf]).kind == "right_infinite"
    assert create_map([-np.inf, 0]).kind == "left_infinite"
    assert create_map([-np.inf, np.inf]).kind == "infinite"
    assert not create_map([-np.inf, np.inf]).is_linear


def test_unbounded_map_rejects_bounded_domain():
    with pytest.raises(InvalidDomainKind):
        unbounded_map([0, 1])


def test_linear_map_rejects_unbounded_domain():
    with pytest.raises(InvalidDomainKind):
        linear_map([0, np.inf])


def test_scales_from_config():
    """Tests the algebraic maps with non-default scales."""
    config = MappingConfig(infinite_scale=2.0, semi_infinite_scale=4.0)
    infinite = unbounded_map([-np.inf, np.inf], config)
    assert infinite.forward(0.5) == pytest.approx(2.0 * 0.5 / 0.75)
    right = unbounded_map([1.0, np.inf], config)
    assert right.forward(0.0) == pytest.approx(1.0 + 4.0)
    left = unbounded_map([-np.inf, 1.0], config)
    assert left.forward(0.0) == pytest.approx(1.0 - 4.0)


def test_default_scales():
    assert unbounded_map([-np.inf, np.inf]).forward(0.5) == pytest.approx(
        5.0 * 0.5 / 0.75)
    assert unbounded_map([0.0, np.inf]).forward(0.0) == pytest.approx(15.0)
