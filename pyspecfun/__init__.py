from pyspecfun.interval import (
    IntervalDomain,
    Chebtech,
    Fun,
    BoundedFun,
    UnboundedFun,
    PiecewiseFunction,
    make_fun,
    Chebmatrix,
    BoundaryConditions,
    DifferentialOperator,
    Evaluation,
    Integral,
    Constraint,
    Linop,
    ChebColloc2,
    expm,
    linsolve,
)

from pyspecfun.interval.configs import (
    ChebtechConfig,
    MappingConfig,
    QuadratureConfig,
    FunConfig,
    LinopConfig,
)

from pyspecfun.interval.errors import (
    DomainError,
    InvalidDomainShape,
    InvalidDomainKind,
    BoundedDomainNotAllowed,
    IncompatibleDomain,
    ConvergenceWarning,
)

__all__ = [
    "IntervalDomain",
    "Chebtech",
    "Fun",
    "BoundedFun",
    "UnboundedFun",
    "PiecewiseFunction",
    "make_fun",
    "Chebmatrix",
    "BoundaryConditions",
    "DifferentialOperator",
    "Evaluation",
    "Integral",
    "Constraint",
    "Linop",
    "ChebColloc2",
    "expm",
    "linsolve",
    "ChebtechConfig",
    "MappingConfig",
    "QuadratureConfig",
    "FunConfig",
    "LinopConfig",
    "DomainError",
    "InvalidDomainShape",
    "InvalidDomainKind",
    "BoundedDomainNotAllowed",
    "IncompatibleDomain",
    "ConvergenceWarning",
]
