"""
Exponential semigroup of a linear operator.

Propagates an initial condition through u' = L u, so that
u(t) = exp(t L) u0, by discretizing L at increasing resolution per
sub-interval until every sub-interval of the propagated solution passes the
happiness test.
"""

import logging
import warnings
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np

from ..chebmatrix import Chebmatrix, as_chebmatrix
from ..configs import LinopConfig
from ..errors import ConvergenceWarning
from .colloc import prepare_discretization

logger = logging.getLogger(__name__)


@dataclass
class RefinementState:
    """
    Resolution state of one refinement attempt.

    Attributes:
        dimension: Number of points per sub-interval
        is_done: Whether each sub-interval is resolved
        eps_level: Accuracy estimate per sub-interval
    """

    dimension: np.ndarray
    is_done: np.ndarray
    eps_level: np.ndarray

    @classmethod
    def start(cls, num_intervals: int, dimension: int) -> 'RefinementState':
        return cls(
            dimension=np.full(num_intervals, dimension, dtype=int),
            is_done=np.zeros(num_intervals, dtype=bool),
            eps_level=np.full(num_intervals, np.inf),
        )

    @property
    def all_done(self) -> bool:
        return bool(np.all(self.is_done))

    def advance(self, dimension: int):
        """Move every unresolved sub-interval to a new dimension."""
        self.dimension[~self.is_done] = dimension


class SemigroupPropagator:
    """
    Propagator for u' = L u with homogeneous constraints.

    The discretization is set up once; each requested time then runs its
    own refinement loop, seeded with the largest dimension used for the
    previous time.

    Args:
        operator: Linop with homogeneous constraints
        u0: Initial condition (function, scalar, sequence or Chebmatrix)
        config: LinopConfig

    Attributes:
        history: One entry (t, dimensions tried) per propagated time

    Example:
        >>> propagator = SemigroupPropagator(L, u0)
        >>> u = propagator([0.0, 0.1, 1.0])
    """

    def __init__(self, operator, u0, config: Optional[LinopConfig] = None):
        self.config = config if config is not None else LinopConfig()
        self.operator = operator
        self.u0 = as_chebmatrix(u0)

        for constraint in operator.constraints:
            if np.any(np.asarray(constraint.value) != 0):
                raise ValueError(
                    "expm requires homogeneous constraints, got value "
                    f"{constraint.value}"
                )
        if self.u0.shape[0] != operator.num_variables:
            raise ValueError(
                f"initial condition has {self.u0.shape[0]} rows for "
                f"{operator.num_variables} variables"
            )
        if np.any(self.u0.is_fun_variable() != operator.is_fun_variable()):
            raise ValueError(
                "initial condition rows do not match the operator's "
                "function and scalar variables"
            )

        self.disc, self.dimension_values = prepare_discretization(
            operator, self.u0, self.config
        )
        self._warm_start = int(self.dimension_values[0])
        self.history: List[Tuple[float, List[np.ndarray]]] = []

    @property
    def warm_start(self) -> int:
        """Smallest dimension the next time value will try."""
        return self._warm_start

    def propagate(self, t: float) -> Chebmatrix:
        """
        Solution at a single time, as a one-column Chebmatrix.

        Issues a ConvergenceWarning and returns the finest attempt if the
        candidate dimensions are exhausted before every sub-interval is
        resolved.
        """
        disc = self.disc
        is_fun = self.operator.is_fun_variable()
        candidates = self.dimension_values[
            self.dimension_values >= self._warm_start
        ]
        if candidates.size == 0:
            candidates = self.dimension_values[-1:]

        state = RefinementState.start(disc.num_intervals, int(candidates[0]))
        tried = []
        for dim in candidates:
            state.advance(int(dim))
            disc.dimension = state.dimension.copy()

            E = disc.expm(t)
            v0 = self.u0.discretize(disc.dimension, disc.domain,
                                    self.config.fun.mapping)
            pieces = disc.partition(E @ v0)
            state.is_done, state.eps_level = disc.test_convergence(
                [p for p, f in zip(pieces, is_fun) if f],
                self.config.tolerance,
                self.config.fun.tech,
            )
            tried.append(state.dimension.copy())
            logger.debug(
                "t=%g dimension=%s resolved=%s", t,
                state.dimension.tolist(), state.is_done.tolist(),
            )
            if state.all_done:
                break

        if not state.all_done:
            warnings.warn(
                f"Matrix exponential at t={t} may not have converged "
                f"(dimensions {state.dimension.tolist()}, "
                f"accuracy {state.eps_level.tolist()}).",
                ConvergenceWarning,
                stacklevel=3,
            )

        self._warm_start = max(self._warm_start, int(np.max(state.dimension)))
        self.history.append((t, tried))
        return Chebmatrix(disc.to_functions(pieces, self.config.fun))

    def __call__(self, times) -> Chebmatrix:
        """Solutions at each time, one Chebmatrix column per time."""
        out = Chebmatrix()
        for t in np.atleast_1d(np.asarray(times, dtype=float)):
            out = out.hstack(self.propagate(float(t)))
        return out


def expm(operator, t, u0, config: Optional[LinopConfig] = None) -> Chebmatrix:
    """
    Propagate u0 through u' = L u: u(t) = exp(t L) u0.

    Args:
        operator: Linop whose constraints all have zero values
        t: A time or a sequence of times
        u0: Initial condition
        config: LinopConfig; `discretization` selects the discretization,
            `dimension_values` bounds the refinement

    Returns:
        Chebmatrix with one column per time

    Raises:
        ValueError: For inhomogeneous constraints or mismatched variables
        IncompatibleDomain: If the domains of operator and u0 disagree
    """
    return SemigroupPropagator(operator, u0, config)(t)
