"""
Maps between the canonical interval [-1, 1] and physical domains.

Bounded domains use the affine map. Unbounded and semi-infinite domains use
algebraic maps that send the endpoints ±1 to the infinite ends of the
domain, so that the same Chebyshev technology can be reused on every
domain. Each map carries its derivative (for Jacobian corrections) and the
reciprocal of that derivative, which stays finite at ±1.
"""

from typing import Callable, Optional

import numpy as np

from .configs import MappingConfig
from .errors import InvalidDomainKind
from .interval_domain import IntervalDomain, as_domain


class Mapping:
    """
    A smooth, strictly increasing bijection from [-1, 1] onto a domain.

    Attributes:
        forward: t -> x
        inverse: x -> t
        derivative: dx/dt as a function of t
        inverse_derivative: dt/dx as a function of t
        kind: Domain kind the map was built for
        is_linear: Whether the map is affine
    """

    def __init__(
        self,
        forward: Callable,
        inverse: Callable,
        derivative: Callable,
        inverse_derivative: Callable,
        *,
        domain: IntervalDomain,
        is_linear: bool = False,
    ):
        self.forward = forward
        self.inverse = inverse
        self.derivative = derivative
        self.inverse_derivative = inverse_derivative
        self.domain = domain
        self.kind = domain.kind
        self.is_linear = is_linear

    def __call__(self, t):
        return self.forward(t)

    def __repr__(self) -> str:
        return f"Mapping([-1, 1] -> {self.domain}, kind='{self.kind}')"


def linear_map(domain) -> Mapping:
    """Affine map from [-1, 1] onto a bounded domain [a, b]."""
    domain = as_domain(domain)
    if domain.is_unbounded:
        raise InvalidDomainKind(
            f"a linear map needs a bounded domain, got {domain}"
        )
    a, b = domain.a, domain.b
    half = 0.5 * (b - a)

    def forward(t):
        t = np.asarray(t, dtype=float)
        return b * (t + 1) / 2 + a * (1 - t) / 2

    def inverse(x):
        x = np.asarray(x, dtype=float)
        return (2 * x - a - b) / (b - a)

    def derivative(t):
        return half + 0 * np.asarray(t, dtype=float)

    def inverse_derivative(t):
        return 1.0 / half + 0 * np.asarray(t, dtype=float)

    return Mapping(forward, inverse, derivative, inverse_derivative,
                   domain=domain, is_linear=True)


def unbounded_map(domain, config: Optional[MappingConfig] = None) -> Mapping:
    """
    Algebraic map from [-1, 1] onto an unbounded domain.

    - (-inf, inf): x = s t / (1 - t²)
    - [a, inf):    x = a + s (1 + t) / (1 - t)
    - (-inf, b]:   x = b + s (t - 1) / (1 + t)

    Args:
        domain: Domain with at least one infinite endpoint
        config: Scale parameters s of the maps

    Raises:
        InvalidDomainKind: if the domain is bounded
    """
    domain = as_domain(domain)
    config = config if config is not None else MappingConfig()
    kind = domain.kind
    if kind == "bounded":
        raise InvalidDomainKind(
            f"an unbounded map needs an infinite endpoint, got {domain}"
        )

    if kind == "infinite":
        s = config.infinite_scale

        def forward(t):
            t = np.asarray(t, dtype=float)
            with np.errstate(divide="ignore", invalid="ignore"):
                return s * t / (1 - np.minimum(t ** 2, 1))

        def inverse(x):
            x = np.asarray(x, dtype=float)
            with np.errstate(invalid="ignore"):
                t = 2 * x / (s + np.sqrt(s ** 2 + 4 * x ** 2))
            return np.where(np.isinf(x), np.sign(x), t)

        def derivative(t):
            t = np.asarray(t, dtype=float)
            with np.errstate(divide="ignore"):
                return s * (1 + t ** 2) / (1 - np.minimum(t ** 2, 1)) ** 2

        def inverse_derivative(t):
            t = np.asarray(t, dtype=float)
            return (1 - t ** 2) ** 2 / (s * (1 + t ** 2))

    elif kind == "right_infinite":
        s = config.semi_infinite_scale
        a = domain.a

        def forward(t):
            t = np.asarray(t, dtype=float)
            with np.errstate(divide="ignore", invalid="ignore"):
                return a + s * (t + 1) / np.maximum(1 - t, 0)

        def inverse(x):
            x = np.asarray(x, dtype=float)
            with np.errstate(divide="ignore", invalid="ignore"):
                t = (x - a - s) / (x - a + s)
            return np.where(np.isinf(x), np.sign(x), t)

        def derivative(t):
            t = np.asarray(t, dtype=float)
            with np.errstate(divide="ignore"):
                return 2 * s / np.maximum(1 - t, 0) ** 2

        def inverse_derivative(t):
            t = np.asarray(t, dtype=float)
            return (1 - t) ** 2 / (2 * s)

    else:
        s = config.semi_infinite_scale
        b = domain.b

        def forward(t):
            t = np.asarray(t, dtype=float)
            with np.errstate(divide="ignore", invalid="ignore"):
                return b + s * (t - 1) / np.maximum(1 + t, 0)

        def inverse(x):
            x = np.asarray(x, dtype=float)
            with np.errstate(divide="ignore", invalid="ignore"):
                t = (x - b + s) / (b - x + s)
            return np.where(np.isinf(x), np.sign(x), t)

        def derivative(t):
            t = np.asarray(t, dtype=float)
            with np.errstate(divide="ignore"):
                return 2 * s / np.maximum(1 + t, 0) ** 2

        def inverse_derivative(t):
            t = np.asarray(t, dtype=float)
            return (1 + t) ** 2 / (2 * s)

    return Mapping(forward, inverse, derivative, inverse_derivative,
                   domain=domain)


def create_map(domain, config: Optional[MappingConfig] = None) -> Mapping:
    """Linear map for bounded domains, algebraic map otherwise."""
    domain = as_domain(domain)
    if domain.is_bounded:
        return linear_map(domain)
    return unbounded_map(domain, config)
