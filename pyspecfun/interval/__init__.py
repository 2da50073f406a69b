"""
Spectral functions and linear operators on intervals.

This module represents functions on bounded, semi-infinite and infinite
intervals by mapping every interval onto [-1, 1] and storing a truncated
Chebyshev expansion there, and propagates or solves linear differential
operators by adaptive Chebyshev collocation.

Modules:
    interval_domain: Domain objects and breakpoint helpers
    chebtech: Chebyshev representation on [-1, 1]
    mapping: Linear and algebraic maps onto [-1, 1]
    functions: Mapped functions (bounded and unbounded variants)
    chebmatrix: Container of functions and scalars
    boundary_conditions: Two-point boundary conditions
    operators: Operators, discretization and refinement loops

Classes:
    Fun: Common interface of BoundedFun and UnboundedFun
    Linop: Linear operator with constraints
"""

from .errors import (
    DomainError,
    InvalidDomainShape,
    InvalidDomainKind,
    BoundedDomainNotAllowed,
    IncompatibleDomain,
    ConvergenceWarning,
)
from .configs import (
    ChebtechConfig,
    MappingConfig,
    QuadratureConfig,
    FunConfig,
    LinopConfig,
)
from .interval_domain import (
    IntervalDomain,
    as_domain,
    as_breakpoints,
    merge_domains,
)
from .chebtech import Chebtech, chebpts, standard_chop
from .mapping import Mapping, create_map, linear_map, unbounded_map
from .functions import (
    Fun,
    BoundedFun,
    UnboundedFun,
    PiecewiseFunction,
    make_fun,
)
from .chebmatrix import Chebmatrix, as_chebmatrix
from .boundary_conditions import BoundaryConditions
from .operators import (
    Functional,
    Evaluation,
    Integral,
    DifferentialOperator,
    Constraint,
    Linop,
    Discretization,
    ChebColloc2,
    derive_continuity,
    RefinementState,
    SemigroupPropagator,
    expm,
    linsolve,
)

__all__ = [
    'DomainError',
    'InvalidDomainShape',
    'InvalidDomainKind',
    'BoundedDomainNotAllowed',
    'IncompatibleDomain',
    'ConvergenceWarning',
    'ChebtechConfig',
    'MappingConfig',
    'QuadratureConfig',
    'FunConfig',
    'LinopConfig',
    'IntervalDomain',
    'as_domain',
    'as_breakpoints',
    'merge_domains',
    'Chebtech',
    'chebpts',
    'standard_chop',
    'Mapping',
    'create_map',
    'linear_map',
    'unbounded_map',
    'Fun',
    'BoundedFun',
    'UnboundedFun',
    'PiecewiseFunction',
    'make_fun',
    'Chebmatrix',
    'as_chebmatrix',
    'BoundaryConditions',
    'Functional',
    'Evaluation',
    'Integral',
    'DifferentialOperator',
    'Constraint',
    'Linop',
    'Discretization',
    'ChebColloc2',
    'derive_continuity',
    'RefinementState',
    'SemigroupPropagator',
    'expm',
    'linsolve',
]
