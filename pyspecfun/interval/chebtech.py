"""
Chebyshev technology on the canonical interval [-1, 1].

A Chebtech stores the coefficients of a truncated Chebyshev series. It is
built adaptively from a vectorised callable (sampling on Chebyshev points of
the second kind until the coefficients have decayed to a noise plateau) or
directly from sample values.

The module also contains the grid, transform and barycentric helpers shared
with the collocation discretization.
"""

import logging
import warnings
from typing import Callable, Optional, Tuple

import numpy as np
import numpy.polynomial.chebyshev as cheb
from scipy.fft import dct
from scipy.interpolate import BarycentricInterpolator

from .configs import ChebtechConfig
from .errors import ConvergenceWarning

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Grids and transforms
# ---------------------------------------------------------------------------

def chebpts(n: int) -> np.ndarray:
    """Chebyshev points of the second kind on [-1, 1] in ascending order."""
    if n == 1:
        return np.zeros(1)
    x = -np.cos(np.pi * np.arange(n) / (n - 1))
    # enforce exact symmetry
    return 0.5 * (x - x[::-1])


def chebpts1(n: int) -> np.ndarray:
    """Chebyshev points of the first kind on (-1, 1) in ascending order."""
    return cheb.chebpts1(n)


def vals2coeffs(values: np.ndarray) -> np.ndarray:
    """
    Convert values at second-kind points to Chebyshev coefficients.

    Works along the first axis, so columns of a 2-D array are transformed
    independently.
    """
    values = np.asarray(values)
    n = values.shape[0]
    if n <= 1:
        return values.copy()
    if np.iscomplexobj(values):
        return vals2coeffs(values.real) + 1j * vals2coeffs(values.imag)
    # DCT-I works on the descending ordering of the points
    coeffs = dct(values[::-1], type=1, axis=0) / (n - 1)
    coeffs[0] /= 2
    coeffs[-1] /= 2
    return coeffs


def coeffs2vals(coeffs: np.ndarray) -> np.ndarray:
    """Evaluate a Chebyshev series at the second-kind points of its length."""
    coeffs = np.asarray(coeffs)
    n = coeffs.shape[0]
    if n <= 1:
        return coeffs.copy()
    if np.iscomplexobj(coeffs):
        return coeffs2vals(coeffs.real) + 1j * coeffs2vals(coeffs.imag)
    tmp = coeffs.astype(float)
    tmp[1:-1] /= 2
    return dct(tmp, type=1, axis=0)[::-1]


def barycentric_weights(n: int) -> np.ndarray:
    """Barycentric weights for n second-kind points (ascending order)."""
    if n == 1:
        return np.ones(1)
    w = np.ones(n)
    w[1::2] = -1.0
    w[0] *= 0.5
    w[-1] *= 0.5
    return w


def barycentric_matrix(target: np.ndarray, n: int) -> np.ndarray:
    """
    Interpolation matrix from n second-kind points to target points.

    Row i maps values at the second-kind points to the value of the
    interpolant at target[i]. Targets that coincide with a node give a unit
    row.
    """
    target = np.atleast_1d(np.asarray(target, dtype=float))
    nodes = chebpts(n)
    if n == 1:
        return np.ones((target.size, 1))
    weights = barycentric_weights(n)
    diff = target[:, None] - nodes[None, :]
    exact = np.isclose(diff, 0.0, rtol=0.0, atol=1e-15)
    with np.errstate(divide="ignore", invalid="ignore"):
        matrix = weights[None, :] / diff
        matrix /= matrix.sum(axis=1, keepdims=True)
    rows = np.any(exact, axis=1)
    if np.any(rows):
        matrix[rows] = exact[rows].astype(float)
    return matrix


def diff_matrix(n: int) -> np.ndarray:
    """
    Spectral differentiation matrix on n second-kind points.

    Based on Berrut & Trefethen (2004), Section 9.3, with the diagonal set by
    the negative-sum trick.
    """
    if n == 1:
        return np.zeros((1, 1))
    x = chebpts(n)
    w = barycentric_weights(n)
    c = x[:, None] - x[None, :]
    np.fill_diagonal(c, 1.0)
    d = w[None, :] / (c * w[:, None])
    np.fill_diagonal(d, 0.0)
    np.fill_diagonal(d, -d.sum(axis=1))
    return d


def _moments(n: int) -> np.ndarray:
    """Integrals of T_0, ..., T_{n-1} over [-1, 1]."""
    k = np.arange(n)
    moments = np.zeros(n)
    even = k % 2 == 0
    moments[even] = 2.0 / (1.0 - k[even] ** 2)
    return moments


def quadrature_weights(n: int) -> np.ndarray:
    """Clenshaw-Curtis weights for n second-kind points."""
    if n == 1:
        return np.array([2.0])
    return _moments(n) @ vals2coeffs(np.eye(n))


def fejer_rule(n: int) -> Tuple[np.ndarray, np.ndarray]:
    """
    Nodes and weights of Fejér's first rule.

    The nodes are the n first-kind Chebyshev points, which never include the
    endpoints ±1.
    """
    theta = (2 * np.arange(n) + 1) * np.pi / (2 * n)
    k = np.arange(1, n // 2 + 1)
    series = np.cos(2 * np.outer(theta, k)) / (4 * k ** 2 - 1)
    weights = (2.0 / n) * (1.0 - 2.0 * series.sum(axis=1))
    return np.cos(theta), weights


def standard_chop(coeffs: np.ndarray, tol: float) -> int:
    """
    Number of coefficients worth keeping from a Chebyshev series.

    Looks for a plateau in the monotone envelope of |coeffs| at or below
    `tol` (Aurentz & Trefethen, "Chopping a Chebyshev series", 2017).
    Returns len(coeffs) when no plateau is found, i.e. when the series is not
    resolved. Series shorter than 17 are never chopped.
    """
    if tol >= 1:
        return 1
    n = len(coeffs)
    cutoff = n
    if n < 17:
        return cutoff

    b = np.abs(coeffs)
    envelope = np.maximum.accumulate(b[::-1])[::-1]
    if envelope[0] == 0:
        return 1
    envelope = envelope / envelope[0]

    plateau_point = None
    j2 = n
    for j in range(2, n + 1):
        j2 = int(np.floor(1.25 * j + 5.5))
        if j2 > n:
            return cutoff
        e1 = envelope[j - 1]
        e2 = envelope[j2 - 1]
        r = 3 * (1 - np.log(e1) / np.log(tol)) if e1 > 0 else 0.0
        if e1 == 0 or e2 / e1 > r:
            plateau_point = j - 1
            break
    if plateau_point is None:
        return cutoff

    if envelope[plateau_point - 1] == 0:
        return plateau_point

    floor = tol ** (7.0 / 6.0)
    j3 = int(np.sum(envelope >= floor))
    if j3 < j2:
        j2 = j3 + 1
        envelope[j2 - 1] = floor
    with np.errstate(divide="ignore"):
        cc = np.log10(envelope[:j2])
    cc = cc + np.linspace(0, (-1.0 / 3.0) * np.log10(tol), j2)
    d = int(np.argmin(cc)) + 1
    return max(d - 1, 1)


# ---------------------------------------------------------------------------
# Chebtech
# ---------------------------------------------------------------------------

class Chebtech:
    """
    A function on [-1, 1] represented by its Chebyshev coefficients.

    Attributes:
        coeffs: Chebyshev coefficients (real or complex)
        vscale: Vertical scale (largest absolute sampled value)
        hscale: Horizontal scale of the physical domain, used to relax the
            happiness tolerance
        ishappy: Whether the happiness test passed
        epslevel: Estimated relative accuracy
    """

    def __init__(self, coeffs, *, hscale: float = 1.0,
                 ishappy: bool = True, epslevel: Optional[float] = None,
                 config: Optional[ChebtechConfig] = None):
        coeffs = np.atleast_1d(np.asarray(coeffs))
        if coeffs.ndim != 1 or coeffs.size == 0:
            raise ValueError("Chebtech coefficients must be a non-empty vector")
        if not np.iscomplexobj(coeffs):
            coeffs = coeffs.astype(float)
        self.coeffs = coeffs
        self.hscale = float(hscale)
        self.ishappy = bool(ishappy)
        self.config = config if config is not None else ChebtechConfig()
        self.epslevel = (float(epslevel) if epslevel is not None
                         else self.config.eps)

    # --- construction --------------------------------------------------

    @classmethod
    def from_function(cls, op: Callable, vscale: float = 0.0,
                      hscale: float = 1.0,
                      config: Optional[ChebtechConfig] = None,
                      noise: Optional[Callable] = None) -> "Chebtech":
        """
        Adaptively construct a Chebtech from a vectorised callable.

        Args:
            op: Callable accepting an array of points in [-1, 1]
            vscale: Vertical scale hint; 0 means infer from the samples
            hscale: Horizontal scale of the physical domain
            config: Construction settings
            noise: Optional callable giving the absolute error of `op` at
                interior points of [-1, 1]. The happiness tolerance is then
                relaxed to the coefficient error these sample errors can
                cause, so an op that is only known to a noise floor still
                terminates.

        Returns:
            The chopped Chebtech of the first happy attempt, or the last
            (unhappy) attempt with a ConvergenceWarning.
        """
        config = config if config is not None else ChebtechConfig()
        n = max(int(config.min_samples), 2)
        while True:
            values = cls._sample(op, n, config)
            tech = cls._from_samples(values, hscale, config)
            tol = None
            if noise is not None:
                scale = max(float(vscale), tech.vscale)
                floor = cls._noise_level(noise, n)
                tol = config.eps * max(1.0, hscale)
                if scale > 0:
                    tol = max(tol, floor / scale)
            ishappy, cutoff, _ = tech.happiness_check(tol, vscale=vscale)
            if ishappy:
                tech.coeffs = tech.coeffs[:cutoff]
                logger.debug("Chebtech resolved with %d coefficients", cutoff)
                return tech
            if n >= config.max_length:
                warnings.warn(
                    f"Function not resolved using {n} points. "
                    "Have you tried a non-adaptive construction?",
                    ConvergenceWarning,
                    stacklevel=3,
                )
                return tech
            n = min(2 * n - 1, config.max_length)

    @classmethod
    def from_values(cls, values, vscale: float = 0.0, hscale: float = 1.0,
                    config: Optional[ChebtechConfig] = None) -> "Chebtech":
        """Build a Chebtech from values at second-kind points (no chopping)."""
        config = config if config is not None else ChebtechConfig()
        values = np.atleast_1d(np.asarray(values))
        if values.ndim != 1:
            raise ValueError("values must be a vector")
        if not np.all(np.isfinite(values)):
            raise ValueError("values must be finite")
        tech = cls._from_samples(values, hscale, config)
        tech.happiness_check(vscale=vscale)
        return tech

    @classmethod
    def constant(cls, value, config: Optional[ChebtechConfig] = None):
        return cls(np.array([value]), config=config)

    @staticmethod
    def _sample(op: Callable, n: int, config: ChebtechConfig) -> np.ndarray:
        x = chebpts(n)
        if config.extrapolate:
            values = np.empty(n, dtype=complex)
            interior = np.asarray(op(x[1:-1]))
            values[1:-1] = interior
            values[[0, -1]] = np.nan
        else:
            with np.errstate(all="ignore"):
                values = np.asarray(op(x))
            if values.shape == ():
                values = np.full(n, values)
            values = values.astype(complex)
        if values.shape != (n,):
            raise ValueError(
                "op must be vectorised: expected output of shape "
                f"{(n,)}, got {values.shape}"
            )

        bad = ~np.isfinite(values)
        if np.any(bad[1:-1]):
            raise ValueError("function returned non-finite interior values")
        if bad[0] or bad[-1]:
            interp = BarycentricInterpolator(x[1:-1], values[1:-1])
            ends = np.asarray(interp(np.array([-1.0, 1.0])))
            values[0] = ends[0] if bad[0] else values[0]
            values[-1] = ends[1] if bad[-1] else values[-1]

        if np.all(values.imag == 0):
            values = values.real
        return values

    @staticmethod
    def _noise_level(noise: Callable, n: int) -> float:
        """Bound on the coefficient error caused by sample errors noise(t)."""
        if n < 3:
            return 0.0
        t = chebpts(n)[1:-1]
        return 2.0 / (n - 1) * float(np.sum(np.abs(noise(t))))

    @classmethod
    def _from_samples(cls, values, hscale, config) -> "Chebtech":
        return cls(vals2coeffs(values), hscale=hscale, ishappy=False,
                   config=config)

    # --- happiness -----------------------------------------------------

    def happiness_check(self, tol: Optional[float] = None,
                        vscale: float = 0.0) -> Tuple[bool, int, float]:
        """
        Test whether the coefficients resolve the function.

        Args:
            tol: Relative tolerance (default: config.eps relaxed by hscale)
            vscale: External vertical scale; the larger of this and the
                Chebtech's own vscale normalises the coefficients

        Returns:
            (ishappy, cutoff, epslevel)
        """
        if tol is None:
            tol = self.config.eps * max(1.0, self.hscale)
        scale = max(float(vscale), self.vscale)
        n = len(self.coeffs)
        if scale == 0:
            self.ishappy, self.epslevel = True, tol
            return True, 1, tol
        cutoff = standard_chop(self.coeffs / scale, tol)
        ishappy = cutoff < n
        if ishappy:
            epslevel = tol
        else:
            tail = max(1, min(n, int(round((n - 1) / 8))))
            epslevel = float(np.max(np.abs(self.coeffs[-tail:])) / scale)
        self.ishappy, self.epslevel = ishappy, max(epslevel, tol)
        return ishappy, cutoff, self.epslevel

    # --- properties ----------------------------------------------------

    @property
    def length(self) -> int:
        return len(self.coeffs)

    def __len__(self) -> int:
        return self.length

    @property
    def values(self) -> np.ndarray:
        return coeffs2vals(self.coeffs)

    @property
    def vscale(self) -> float:
        return float(np.max(np.abs(self.values)))

    @property
    def is_complex(self) -> bool:
        return np.iscomplexobj(self.coeffs)

    # --- evaluation and calculus ---------------------------------------

    def evaluate(self, t):
        """Evaluate the series at points of [-1, 1] by Clenshaw recurrence."""
        return cheb.chebval(t, self.coeffs)

    def __call__(self, t):
        return self.evaluate(t)

    def diff(self, k: int = 1) -> "Chebtech":
        """k-th derivative with respect to the canonical variable."""
        if k < 0:
            raise ValueError("derivative order must be non-negative")
        if k == 0:
            return self.copy()
        if self.length <= k:
            return self._like(np.zeros(1, dtype=self.coeffs.dtype))
        return self._like(cheb.chebder(self.coeffs, k))

    def cumsum(self) -> "Chebtech":
        """Indefinite integral vanishing at -1."""
        return self._like(cheb.chebint(self.coeffs, lbnd=-1))

    def sum(self):
        """Definite integral over [-1, 1]."""
        return _moments(self.length) @ self.coeffs

    def logical(self) -> "Chebtech":
        """
        Constant one if any sampled value is nonzero, zero otherwise.

        The Chebtech must not have roots in [-1, 1]; otherwise the result is
        meaningless and no warning is given.
        """
        flag = float(np.any(self.values != 0))
        return self._like(np.array([flag]))

    # --- arithmetic ----------------------------------------------------

    def _like(self, coeffs) -> "Chebtech":
        return Chebtech(coeffs, hscale=self.hscale, ishappy=self.ishappy,
                        epslevel=self.epslevel, config=self.config)

    def _combine(self, other: "Chebtech", coeffs) -> "Chebtech":
        out = self._like(coeffs)
        out.ishappy = self.ishappy and other.ishappy
        out.epslevel = max(self.epslevel, other.epslevel)
        return out

    def __add__(self, other):
        if isinstance(other, Chebtech):
            return self._combine(other, cheb.chebadd(self.coeffs,
                                                     other.coeffs))
        if np.isscalar(other):
            coeffs = self.coeffs.astype(np.result_type(self.coeffs, other))
            coeffs[0] += other
            return self._like(coeffs)
        return NotImplemented

    def __radd__(self, other):
        return self.__add__(other)

    def __neg__(self):
        return self._like(-self.coeffs)

    def __sub__(self, other):
        if isinstance(other, Chebtech) or np.isscalar(other):
            return self + (-other)
        return NotImplemented

    def __rsub__(self, other):
        return (-self) + other

    def __mul__(self, other):
        if isinstance(other, Chebtech):
            return self._combine(other, cheb.chebmul(self.coeffs,
                                                     other.coeffs))
        if np.isscalar(other):
            return self._like(self.coeffs * other)
        return NotImplemented

    def __rmul__(self, other):
        return self.__mul__(other)

    def conj(self) -> "Chebtech":
        return self._like(np.conj(self.coeffs))

    def flipud(self) -> "Chebtech":
        """The reflected function t -> g(-t)."""
        signs = (-1.0) ** np.arange(self.length)
        return self._like(self.coeffs * signs)

    # --- resizing ------------------------------------------------------

    def prolong(self, n: int) -> "Chebtech":
        """Pad with zeros or truncate to n coefficients."""
        if n < 1:
            raise ValueError("length must be positive")
        coeffs = np.zeros(n, dtype=self.coeffs.dtype)
        m = min(n, self.length)
        coeffs[:m] = self.coeffs[:m]
        return self._like(coeffs)

    def simplify(self, tol: Optional[float] = None) -> "Chebtech":
        """Chop trailing coefficients below the noise plateau."""
        if tol is None:
            tol = self.epslevel
        scale = self.vscale
        if scale == 0:
            return self._like(self.coeffs[:1] * 0)
        cutoff = standard_chop(self.coeffs / scale, tol)
        return self._like(self.coeffs[:cutoff])

    def copy(self) -> "Chebtech":
        return self._like(self.coeffs.copy())

    def __repr__(self) -> str:
        return (f"Chebtech(length={self.length}, vscale={self.vscale:.3g}, "
                f"ishappy={self.ishappy})")
