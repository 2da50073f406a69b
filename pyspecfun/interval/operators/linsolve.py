"""Adaptive solution of linear boundary-value problems L u = f."""

import logging
import warnings
from typing import Optional

import numpy as np

from ..chebmatrix import Chebmatrix, as_chebmatrix
from ..configs import LinopConfig
from ..errors import ConvergenceWarning
from ..functions import Fun, PiecewiseFunction
from .colloc import prepare_discretization
from .expm import RefinementState

logger = logging.getLogger(__name__)


def _as_rhs(operator, rhs, config: LinopConfig) -> Chebmatrix:
    if callable(rhs) and not isinstance(rhs, (Fun, PiecewiseFunction)):
        rhs = PiecewiseFunction.from_function(rhs, operator.domain, config.fun)
    return as_chebmatrix(rhs)


def linsolve(operator, rhs, config: Optional[LinopConfig] = None
             ) -> Chebmatrix:
    """
    Solve L u = f subject to the operator's constraints.

    The constraint values may be nonzero. The discretization is refined
    per sub-interval through the candidate dimensions until the solution
    is resolved everywhere.

    Args:
        operator: Linop
        rhs: Right-hand side; a function, a vectorised callable on the
            operator's domain, a scalar, a sequence of these, or a
            Chebmatrix
        config: LinopConfig

    Returns:
        One-column Chebmatrix with the solution

    Example:
        >>> L = Linop(DifferentialOperator.diff(2), [-1, 1],
        ...           boundary_conditions=BoundaryConditions.dirichlet())
        >>> u = linsolve(L, lambda x: -np.pi**2 * np.sin(np.pi * x))
    """
    config = config if config is not None else LinopConfig()
    rhs = _as_rhs(operator, rhs, config)
    if rhs.shape[0] != operator.num_variables:
        raise ValueError(
            f"right-hand side has {rhs.shape[0]} rows for "
            f"{operator.num_variables} variables"
        )

    disc, dims = prepare_discretization(operator, rhs, config)
    is_fun = operator.is_fun_variable()
    state = RefinementState.start(disc.num_intervals, int(dims[0]))

    for dim in dims:
        state.advance(int(dim))
        disc.dimension = state.dimension.copy()
        f = rhs.discretize(disc.dimension, disc.domain, config.fun.mapping)
        pieces = disc.partition(disc.solve(f))
        state.is_done, state.eps_level = disc.test_convergence(
            [p for p, fun in zip(pieces, is_fun) if fun],
            config.tolerance,
            config.fun.tech,
        )
        logger.debug("linsolve dimension=%s resolved=%s",
                     state.dimension.tolist(), state.is_done.tolist())
        if state.all_done:
            break

    if not state.all_done:
        warnings.warn(
            f"Linear solve may not have converged (dimensions "
            f"{state.dimension.tolist()}).",
            ConvergenceWarning,
            stacklevel=2,
        )
    return Chebmatrix(disc.to_functions(pieces, config.fun))
