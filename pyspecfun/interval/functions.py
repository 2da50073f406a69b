"""
Functions on interval domains.

This module provides domain-aware function objects. Every function couples
a Chebtech on [-1, 1] with a Mapping onto its physical domain; calculus is
carried out on the canonical interval and corrected through the map.

Two variants share one interface and are selected by the domain shape:

- BoundedFun: affine map onto [a, b]
- UnboundedFun: algebraic map onto [a, inf), (-inf, b] or (-inf, inf)

Note that all binary operations between two functions (arithmetic, inner
products, least-squares division) assume that the domains agree. The
methods do not check this; if the assumption is violated the result is not
meaningful.
"""

from __future__ import annotations

import logging
import numbers
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Union

import numpy as np
from scipy import integrate

from .chebtech import Chebtech, fejer_rule
from .configs import FunConfig
from .errors import (
    BoundedDomainNotAllowed,
    InvalidDomainKind,
    InvalidDomainShape,
)
from .interval_domain import IntervalDomain, as_breakpoints, as_domain
from .mapping import Mapping, linear_map, unbounded_map

logger = logging.getLogger(__name__)


class Fun(ABC):
    """
    A function on an interval represented through a map onto [-1, 1].

    Construction accepts either a vectorised callable on the physical
    domain (composed with the forward map before it reaches the Chebtech
    constructor) or an array of values at Chebyshev points of the second
    kind.
    """

    def __init__(
        self,
        op: Union[Callable, Sequence[float], np.ndarray],
        domain,
        vscale: Optional[float] = None,
        hscale: Optional[float] = None,
        config: Optional[FunConfig] = None,
    ):
        """
        Args:
            op: Vectorised callable or array of sample values
            domain: Two-endpoint domain
            vscale: Vertical scale hint (default 0, inferred from samples)
            hscale: Horizontal scale (default depends on the variant)
            config: Construction, mapping and quadrature settings
        """
        config = config if config is not None else FunConfig()
        domain = self._check_domain(as_domain(domain))
        self.config = config
        self.domain = domain
        self.mapping = self._create_map(domain, config)
        vscale = 0.0 if vscale is None else float(vscale)
        self.vscale_hint = vscale
        self.hscale = (self._default_hscale(domain, config)
                       if hscale is None else float(hscale))

        if callable(op):
            forward = self.mapping.forward

            def canonical_op(t):
                return op(forward(t))

            self.onefun = Chebtech.from_function(
                canonical_op, vscale, self.hscale, config.tech
            )
        else:
            self.onefun = Chebtech.from_values(
                np.asarray(op), vscale, self.hscale, config.tech
            )

    # --- variant hooks -------------------------------------------------

    @staticmethod
    @abstractmethod
    def _check_domain(domain: IntervalDomain) -> IntervalDomain:
        """Validate the domain kind for this variant."""

    @staticmethod
    @abstractmethod
    def _create_map(domain: IntervalDomain, config: FunConfig) -> Mapping:
        """Build the map from [-1, 1] onto the domain."""

    @staticmethod
    @abstractmethod
    def _default_hscale(domain: IntervalDomain, config: FunConfig) -> float:
        """Horizontal scale used when none is given."""

    @classmethod
    def _from_onefun(cls, onefun: Chebtech, domain: IntervalDomain,
                     hscale: float, config: FunConfig,
                     vscale_hint: float = 0.0) -> "Fun":
        """Wrap an existing Chebtech without resampling."""
        out = cls.__new__(cls)
        out.config = config
        out.domain = cls._check_domain(domain)
        out.mapping = cls._create_map(out.domain, config)
        out.hscale = hscale
        out.vscale_hint = vscale_hint
        out.onefun = onefun
        return out

    def _new(self, onefun: Chebtech) -> "Fun":
        return self._from_onefun(onefun, self.domain, self.hscale,
                                 self.config, self.vscale_hint)

    # --- properties ----------------------------------------------------

    @property
    def length(self) -> int:
        return self.onefun.length

    @property
    def vscale(self) -> float:
        """Largest absolute sampled value (the hint is kept in vscale_hint)."""
        return self.onefun.vscale

    @property
    def ishappy(self) -> bool:
        return self.onefun.ishappy

    @property
    def epslevel(self) -> float:
        return self.onefun.epslevel

    @property
    def breakpoints(self) -> np.ndarray:
        return self.domain.breakpoints

    @property
    def is_unbounded(self) -> bool:
        return self.domain.is_unbounded

    # --- evaluation ----------------------------------------------------

    def evaluate(self, x):
        """
        Evaluate the function at physical points.

        Points equal to an infinite endpoint of the domain give the
        limiting value of the function there; points outside the domain
        give NaN.
        """
        x_array = np.asarray(x, dtype=float)
        is_scalar = x_array.ndim == 0
        x_array = np.atleast_1d(x_array)

        dtype = complex if self.onefun.is_complex else float
        result = np.full(x_array.shape, np.nan, dtype=dtype)
        inside = self.domain.contains(x_array)
        if np.any(inside):
            t = np.clip(self.mapping.inverse(x_array[inside]), -1.0, 1.0)
            result[inside] = self.onefun.evaluate(t)
        return result[0] if is_scalar else result

    def __call__(self, x):
        """Allow f(x) syntax."""
        return self.evaluate(x)

    # --- calculus ------------------------------------------------------

    def diff(self, k: int = 1) -> "Fun":
        """
        k-th derivative on the physical domain.

        Each order applies the chain rule once: the canonical derivative is
        multiplied by dt/dx. For a nonlinear map dt/dx is not constant, so
        every order needs a fresh canonical differentiation of the previous
        result.
        """
        if k < 0:
            raise ValueError("derivative order must be non-negative")
        result = self
        for _ in range(k):
            dg = result.onefun.diff()
            scale = result.mapping.inverse_derivative
            if result.mapping.is_linear:
                onefun = dg * float(scale(0.0))
            else:
                def canonical(t, dg=dg, scale=scale):
                    return dg.evaluate(t) * scale(t)

                onefun = Chebtech.from_function(
                    canonical, 0.0, result.hscale, result.config.tech
                )
            result = result._new(onefun)
        return result if k > 0 else self.copy()

    def _noise_floor(self) -> float:
        """Absolute accuracy of the canonical values."""
        eps = max(self.onefun.epslevel, self.config.tech.eps)
        return eps * self.onefun.vscale

    def _jacobian_integrand(self) -> Chebtech:
        """
        Canonical representation of f(forward(t)) * forward'(t).

        Near an infinite end forward'(t) blows up, and with it the rounding
        error of the stored series. The integrand is therefore resolved only
        to the accuracy that error allows, not to machine precision.
        """
        if self.mapping.is_linear:
            return self.onefun * float(self.mapping.derivative(0.0))
        g = self.onefun
        derivative = self.mapping.derivative
        tech_config = self.config.tech.copy(extrapolate=True)
        level = self._noise_floor()

        def integrand(t):
            return g.evaluate(t) * derivative(t)

        def noise(t):
            return level * np.abs(derivative(t))

        return Chebtech.from_function(integrand, 0.0, self.hscale,
                                      tech_config, noise=noise)

    def cumsum(self) -> "Fun":
        """
        Indefinite integral from the left endpoint of the domain.

        On an unbounded domain the integrand must decay fast enough for the
        integral from the infinite end to exist.
        """
        return self._new(self._jacobian_integrand().cumsum())

    def sum(self):
        """Definite integral over the whole domain."""
        if self.mapping.is_linear:
            return self._jacobian_integrand().sum()
        method = self.config.quadrature.method
        if method == "extrapolate":
            return self._jacobian_integrand().sum()
        if method == "fejer":
            return self._fejer_sum()
        if method == "quad":
            return self._quad_sum()
        raise ValueError(f"unknown quadrature method '{method}'")

    def _fejer_sum(self):
        quad_config = self.config.quadrature
        level = self._noise_floor()
        n = max(self.length, 16)
        previous = None
        while True:
            nodes, weights = fejer_rule(n)
            weighted = weights * self.mapping.derivative(nodes)
            estimate = weighted @ self.onefun.evaluate(nodes)
            # rounding error of the samples, amplified by the Jacobian
            floor = level * float(np.sum(np.abs(weighted)))
            if previous is not None:
                scale = max(abs(estimate), self.vscale, 1e-300)
                if abs(estimate - previous) <= max(quad_config.tol * scale,
                                                   floor):
                    return estimate
            if 2 * n > quad_config.max_points:
                logger.debug("Fejer rule stopped at %d points", n)
                return estimate
            previous = estimate
            n *= 2

    def _quad_sum(self):
        a, b = self.domain.a, self.domain.b

        def part(fn):
            return integrate.quad(lambda x: fn(self.evaluate(x)), a, b,
                                  limit=200)[0]

        if self.onefun.is_complex:
            return part(np.real) + 1j * part(np.imag)
        return part(np.real)

    # --- domain operations ---------------------------------------------

    def restrict(self, subdomain) -> Union["Fun", List["Fun"]]:
        """
        Restrict to a sub-domain or to consecutive pieces of one.

        Args:
            subdomain: Pair (c, d) inside the domain, or a longer ascending
                breakpoint sequence

        Returns:
            A function (or list of functions, one per piece). The variant of
            each result follows the shape of its piece: a bounded piece of
            an unbounded function becomes a BoundedFun.
        """
        points = as_breakpoints(subdomain)
        if points[0] < self.domain.a or points[-1] > self.domain.b:
            raise InvalidDomainShape(
                f"cannot restrict {self.domain} to [{points[0]}, {points[-1]}]"
            )
        pieces = []
        for c, d in zip(points[:-1], points[1:]):
            piece = IntervalDomain(c, d)
            if piece == self.domain:
                pieces.append(self.copy())
            else:
                pieces.append(make_fun(self.evaluate, piece,
                                       vscale=self.vscale,
                                       config=self.config))
        return pieces[0] if len(pieces) == 1 else pieces

    def change_map(self, new_domain) -> "Fun":
        """
        Attach the canonical representation to a new domain of the same kind.

        The coefficients are reused unchanged; only the domain and the map
        are re-derived.
        """
        new_domain = as_domain(new_domain)
        if new_domain.kind != self.domain.kind:
            raise InvalidDomainKind(
                f"cannot change a '{self.domain.kind}' map to a "
                f"'{new_domain.kind}' domain"
            )
        hscale = (self.hscale if new_domain.is_unbounded
                  else self._default_hscale(new_domain, self.config))
        return self._from_onefun(self.onefun.copy(), new_domain, hscale,
                                 self.config, self.vscale_hint)

    # --- products and norms --------------------------------------------

    def inner_product(self, other: "Fun"):
        """L² inner product ∫ conj(f) g over the (shared) domain."""
        return (self.conj() * other).sum()

    def mldivide(self, other: "Fun"):
        """Least-squares coefficient c minimising ||f c - g||."""
        if not isinstance(other, Fun):
            raise TypeError("mldivide expects a function right-hand side")
        return self.inner_product(other) / self.inner_product(self)

    def mrdivide(self, other):
        """
        Right division: scaling by 1/other for a scalar, otherwise the
        least-squares coefficient c minimising ||c g - f||.
        """
        if isinstance(other, numbers.Number):
            return self * (1.0 / other)
        if isinstance(other, Fun):
            return other.inner_product(self) / other.inner_product(other)
        raise TypeError(f"cannot divide a function by {type(other)}")

    def normest(self) -> float:
        """Estimate of the infinity norm from the canonical samples."""
        return self.onefun.vscale

    def logical(self) -> "Fun":
        """Constant one where the function is nonzero (no roots allowed)."""
        return self._new(self.onefun.logical())

    def conj(self) -> "Fun":
        return self._new(self.onefun.conj())

    def flipud(self) -> "Fun":
        """
        Reflect the function: x -> a + b - x on a bounded domain.

        On an unbounded domain the reflection is x -> -x, so [a, inf)
        becomes (-inf, -a] and the real line is mapped onto itself. The
        canonical coefficients only change sign pattern.
        """
        onefun = self.onefun.flipud()
        if self.domain.is_bounded:
            return self._new(onefun)
        domain = IntervalDomain(-self.domain.b, -self.domain.a)
        return self._from_onefun(onefun, domain, self.hscale, self.config,
                                 self.vscale_hint)

    # --- arithmetic ----------------------------------------------------

    def __add__(self, other):
        if isinstance(other, Fun):
            return self._new(self.onefun + other.onefun)
        if isinstance(other, numbers.Number):
            return self._new(self.onefun + other)
        return NotImplemented

    def __radd__(self, other):
        return self.__add__(other)

    def __neg__(self):
        return self._new(-self.onefun)

    def __sub__(self, other):
        if isinstance(other, (Fun, numbers.Number)):
            return self + (-other)
        return NotImplemented

    def __rsub__(self, other):
        return (-self) + other

    def __mul__(self, other):
        if isinstance(other, Fun):
            product = (self.onefun * other.onefun).simplify()
            return self._new(product)
        if isinstance(other, numbers.Number):
            return self._new(self.onefun * other)
        return NotImplemented

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        if isinstance(other, numbers.Number):
            return self._new(self.onefun * (1.0 / other))
        if isinstance(other, Fun):
            num, den = self.onefun, other.onefun
            onefun = Chebtech.from_function(
                lambda t: num.evaluate(t) / den.evaluate(t),
                0.0, self.hscale, self.config.tech,
            )
            return self._new(onefun)
        return NotImplemented

    def copy(self) -> "Fun":
        """Independent copy; the canonical coefficients are not shared."""
        return self._new(self.onefun.copy())

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(domain={self.domain}, "
                f"length={self.length})")


class BoundedFun(Fun):
    """A function on a bounded interval [a, b] via the affine map."""

    @staticmethod
    def _check_domain(domain: IntervalDomain) -> IntervalDomain:
        if domain.is_unbounded:
            raise InvalidDomainKind(
                f"BoundedFun needs finite endpoints, got {domain}"
            )
        return domain

    @staticmethod
    def _create_map(domain: IntervalDomain, config: FunConfig) -> Mapping:
        return linear_map(domain)

    @staticmethod
    def _default_hscale(domain: IntervalDomain, config: FunConfig) -> float:
        return max(abs(domain.a), abs(domain.b), 1.0)


class UnboundedFun(Fun):
    """
    A function on [a, inf), (-inf, b] or (-inf, inf).

    The domain is mapped onto [-1, 1] by an algebraic map; points near ±1
    correspond to the asymptotic region of the function.
    """

    @staticmethod
    def _check_domain(domain: IntervalDomain) -> IntervalDomain:
        if domain.is_bounded:
            raise BoundedDomainNotAllowed(
                "Should not encounter bounded domain in UnboundedFun, "
                f"got {domain}"
            )
        return domain

    @staticmethod
    def _create_map(domain: IntervalDomain, config: FunConfig) -> Mapping:
        return unbounded_map(domain, config.mapping)

    @staticmethod
    def _default_hscale(domain: IntervalDomain, config: FunConfig) -> float:
        return config.unbounded_hscale


def make_fun(op, domain, vscale: Optional[float] = None,
             hscale: Optional[float] = None,
             config: Optional[FunConfig] = None) -> Fun:
    """Construct the function variant that matches the domain shape."""
    domain = as_domain(domain)
    cls = UnboundedFun if domain.is_unbounded else BoundedFun
    return cls(op, domain, vscale, hscale, config)


class PiecewiseFunction:
    """
    A function defined by contiguous pieces on a breakpoint partition.

    Pieces are closed on the left; the last piece is also closed on the
    right.
    """

    def __init__(self, funs: Sequence[Fun]):
        funs = list(funs)
        if not funs:
            raise ValueError("PiecewiseFunction needs at least one piece")
        for left, right in zip(funs[:-1], funs[1:]):
            if left.domain.b != right.domain.a:
                raise InvalidDomainShape(
                    f"pieces {left.domain} and {right.domain} "
                    "are not contiguous"
                )
        self.funs = funs

    @classmethod
    def from_function(cls, op: Callable, breakpoints,
                      config: Optional[FunConfig] = None
                      ) -> "PiecewiseFunction":
        points = as_breakpoints(breakpoints)
        return cls([make_fun(op, (c, d), config=config)
                    for c, d in zip(points[:-1], points[1:])])

    @property
    def breakpoints(self) -> np.ndarray:
        return np.array([f.domain.a for f in self.funs]
                        + [self.funs[-1].domain.b])

    @property
    def domain(self) -> IntervalDomain:
        return IntervalDomain(self.funs[0].domain.a, self.funs[-1].domain.b)

    @property
    def length(self) -> int:
        return max(f.length for f in self.funs)

    @property
    def vscale(self) -> float:
        return max(f.vscale for f in self.funs)

    def piece_for(self, lo: float, hi: float) -> Fun:
        """The piece whose domain contains [lo, hi]."""
        for fun in self.funs:
            if fun.domain.a <= lo and hi <= fun.domain.b:
                return fun
        raise InvalidDomainShape(
            f"[{lo}, {hi}] is not inside a single piece of {self}"
        )

    def evaluate(self, x):
        x_array = np.asarray(x, dtype=float)
        is_scalar = x_array.ndim == 0
        x_array = np.atleast_1d(x_array)
        dtype = (complex if any(f.onefun.is_complex for f in self.funs)
                 else float)
        result = np.full(x_array.shape, np.nan, dtype=dtype)
        last = len(self.funs) - 1
        for j, fun in enumerate(self.funs):
            a, b = fun.domain.a, fun.domain.b
            mask = (x_array >= a) & ((x_array < b) | ((x_array == b)
                                                      & (j == last)))
            if np.any(mask):
                result[mask] = fun.evaluate(x_array[mask])
        return result[0] if is_scalar else result

    def __call__(self, x):
        return self.evaluate(x)

    def sum(self):
        return sum(f.sum() for f in self.funs)

    def __repr__(self) -> str:
        return (f"PiecewiseFunction(breakpoints={self.breakpoints.tolist()}, "
                f"lengths={[f.length for f in self.funs]})")
