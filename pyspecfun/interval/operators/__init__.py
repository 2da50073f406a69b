"""Linear operators on interval domains and their discretization.

- Functional, Evaluation, Integral: linear functionals for constraints
- DifferentialOperator: L u = sum_k c_k(x) u^(k)
- Linop: block operator with boundary and continuity constraints
- ChebColloc2: rectangular Chebyshev collocation
- expm, SemigroupPropagator: adaptive exponential semigroup
- linsolve: adaptive linear boundary-value solve
"""

from .base import (
    Functional,
    Evaluation,
    Integral,
    LinearCombination,
    DifferentialOperator,
    Constraint,
)
from .linop import Linop
from .colloc import (
    Discretization,
    ChebColloc2,
    derive_continuity,
    prepare_discretization,
)
from .expm import RefinementState, SemigroupPropagator, expm
from .linsolve import linsolve

__all__ = [
    'Functional',
    'Evaluation',
    'Integral',
    'LinearCombination',
    'DifferentialOperator',
    'Constraint',
    'Linop',
    'Discretization',
    'ChebColloc2',
    'derive_continuity',
    'prepare_discretization',
    'RefinementState',
    'SemigroupPropagator',
    'expm',
    'linsolve',
]
