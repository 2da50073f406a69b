"""
Configuration objects for function construction, quadrature and operator
discretization.

This module provides a clean way to thread numerical parameters through
constructors without relying on module-level defaults.
"""

import copy as _copy
from dataclasses import dataclass, field
from typing import Any, List, Literal, Optional

import numpy as np


class _CopyMixin:

    def copy(self, **overrides):
        """
        Create a copy with optional parameter overrides.

        Example:
            >>> base = ChebtechConfig()
            >>> coarse = base.copy(max_length=257)
        """
        new_config = _copy.deepcopy(self)
        for key, value in overrides.items():
            if hasattr(new_config, key):
                setattr(new_config, key, value)
            else:
                raise ValueError(f"Unknown parameter: {key}")
        return new_config


@dataclass
class ChebtechConfig(_CopyMixin):
    """
    Configuration for the canonical Chebyshev representation on [-1, 1].

    Attributes:
        eps: Relative accuracy targeted by the happiness test
        min_samples: Number of samples of the first adaptive attempt
        max_length: Largest number of samples tried before giving up
        extrapolate: Never sample the endpoints ±1; their values are
            extrapolated from the interior samples instead

    Example:
        >>> config = ChebtechConfig()
        >>> config = ChebtechConfig(eps=1e-10)
    """

    eps: float = float(np.finfo(float).eps)
    min_samples: int = 17
    max_length: int = 65537
    extrapolate: bool = False

    @classmethod
    def fast(cls) -> 'ChebtechConfig':
        """Preset for cheaper, lower-accuracy construction."""
        return cls(eps=1e-10, max_length=4097)

    @classmethod
    def strict(cls) -> 'ChebtechConfig':
        """Preset that refuses to sample the endpoints."""
        return cls(extrapolate=True)


@dataclass
class MappingConfig(_CopyMixin):
    """
    Scale parameters of the algebraic maps used for unbounded domains.

    Attributes:
        infinite_scale: s in x = s t / (1 - t²) for (-inf, inf)
        semi_infinite_scale: s in x = a + s (1 + t) / (1 - t) for [a, inf)
            and its mirror image for (-inf, b]
    """

    infinite_scale: float = 5.0
    semi_infinite_scale: float = 15.0


@dataclass
class QuadratureConfig(_CopyMixin):
    """
    Policy for definite integrals over mapped domains.

    The change-of-variables Jacobian of an unbounded map is infinite at the
    mapped endpoints, so the canonical integrand cannot be sampled there.

    Attributes:
        method:
            - 'extrapolate': build the Jacobian-weighted integrand from
              interior samples and extrapolate its endpoint limits
            - 'fejer': Fejér's first rule on interior Chebyshev points,
              doubled until two successive estimates agree to `tol`
            - 'quad': scipy.integrate.quad on the physical domain
        max_points: Largest Fejér rule tried
        tol: Relative agreement required between successive Fejér rules
    """

    method: Literal['extrapolate', 'fejer', 'quad'] = 'extrapolate'
    max_points: int = 2**14
    tol: float = 1e-13


@dataclass
class FunConfig(_CopyMixin):
    """
    Hierarchical configuration for mapped functions.

    Attributes:
        tech: Settings for the canonical representation
        mapping: Scales for unbounded maps
        quadrature: Policy for definite integrals
        unbounded_hscale: Horizontal scale used for unbounded domains, whose
            true extent is infinite and therefore unusable as a scale
    """

    tech: ChebtechConfig = field(default_factory=ChebtechConfig)
    mapping: MappingConfig = field(default_factory=MappingConfig)
    quadrature: QuadratureConfig = field(default_factory=QuadratureConfig)
    unbounded_hscale: float = 2.0


@dataclass
class LinopConfig(_CopyMixin):
    """
    Configuration for discretizing and refining linear operators.

    Attributes:
        discretization: Discretization class (instantiated with the
            operator) or a ready-made discretization instance. None selects
            rectangular Chebyshev collocation.
        dimension_values: Ascending candidate dimensions per sub-interval
        tolerance: Accuracy used by the per-interval happiness test
        fun: Configuration for the functions built from the solution

    Example:
        >>> config = LinopConfig(dimension_values=[33, 65, 129])
        >>> config = LinopConfig.fast()
    """

    discretization: Optional[Any] = None
    dimension_values: List[int] = field(
        default_factory=lambda: [33, 65, 129, 257, 513]
    )
    tolerance: float = 1e-10
    fun: FunConfig = field(default_factory=FunConfig)

    def __post_init__(self):
        dims = list(self.dimension_values)
        if not dims or any(d2 <= d1 for d1, d2 in zip(dims, dims[1:])):
            raise ValueError(
                "dimension_values must be a non-empty ascending sequence"
            )

    @classmethod
    def fast(cls) -> 'LinopConfig':
        """Preset with small dimensions and a loose tolerance."""
        return cls(dimension_values=[17, 33, 65, 129], tolerance=1e-8)
