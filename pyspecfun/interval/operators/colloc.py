"""
Discretization of linear operators by rectangular Chebyshev collocation.

Each function-valued variable is represented by its values at Chebyshev
points of the second kind on every sub-interval of the partition (mapped
onto the sub-interval, so semi-infinite and infinite pieces are handled by
the same machinery). An equation of differential order d is resampled
(projected) from n to n - d points per sub-interval; the freed rows are
taken by the boundary and continuity constraints, which gives a square
system.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence, Tuple

import numpy as np
import scipy.linalg

from ..chebtech import (
    Chebtech,
    barycentric_matrix,
    chebpts,
    chebpts1,
    diff_matrix,
    quadrature_weights,
)
from ..configs import ChebtechConfig, FunConfig, MappingConfig
from ..functions import PiecewiseFunction, make_fun
from ..interval_domain import as_breakpoints, merge_domains
from ..mapping import Mapping, create_map
from .base import Constraint, DifferentialOperator, Evaluation, Functional

logger = logging.getLogger(__name__)


class Discretization(ABC):
    """
    Abstract base class for operator discretizations.

    A discretization holds the operator (`source`), the breakpoint
    partition (`domain`) and the number of points per sub-interval
    (`dimension`). It is a mutable object: the refinement loop changes
    `dimension` between attempts.
    """

    def __init__(self, source, dimension: Optional[Sequence[int]] = None,
                 domain=None, mapping_config: Optional[MappingConfig] = None):
        self.source = source
        self.domain = as_breakpoints(source.domain if domain is None
                                     else domain)
        self.mapping_config = (mapping_config if mapping_config is not None
                               else MappingConfig())
        if dimension is None:
            dimension = [33] * self.num_intervals
        self.dimension = np.asarray(dimension, dtype=int)

    @property
    def num_intervals(self) -> int:
        return len(self.domain) - 1

    def _check_dimension(self):
        self.dimension = np.atleast_1d(np.asarray(self.dimension, dtype=int))
        if self.dimension.size != self.num_intervals:
            raise ValueError(
                f"dimension has {self.dimension.size} entries for "
                f"{self.num_intervals} sub-intervals"
            )

    @abstractmethod
    def matrix(self):
        """Square discrete system including constraints."""

    @abstractmethod
    def expm(self, t: float) -> np.ndarray:
        """Matrix exponential of the constrained discrete operator."""

    @abstractmethod
    def partition(self, v: np.ndarray) -> list:
        """Split a discrete vector into per-variable, per-interval pieces."""

    @abstractmethod
    def test_convergence(self, pieces: list, tolerance: float,
                         config: Optional[ChebtechConfig] = None
                         ) -> Tuple[np.ndarray, np.ndarray]:
        """Per-interval happiness of function-valued pieces."""

    @abstractmethod
    def to_functions(self, pieces: list,
                     config: Optional[FunConfig] = None) -> list:
        """Convert discrete pieces back into functions and scalars."""


class ChebColloc2(Discretization):
    """
    Rectangular collocation on Chebyshev points of the second kind.

    Example:
        >>> D2 = DifferentialOperator.diff(2)
        >>> L = Linop(D2, [-1, 1],
        ...           boundary_conditions=BoundaryConditions.dirichlet())
        >>> disc = ChebColloc2(derive_continuity(L, L.domain), [33])
        >>> E = disc.expm(0.1)
    """

    # --- grids and local operators -------------------------------------

    def interval_map(self, j: int) -> Mapping:
        return create_map((self.domain[j], self.domain[j + 1]),
                          self.mapping_config)

    def points(self, j: int) -> np.ndarray:
        """Physical collocation points of sub-interval j."""
        return self.interval_map(j).forward(chebpts(int(self.dimension[j])))

    def derivative_matrix(self, j: int, k: int) -> np.ndarray:
        """k-th physical derivative on sub-interval j: (diag(dt/dx) D)^k."""
        n = int(self.dimension[j])
        t = chebpts(n)
        scaled = self.interval_map(j).inverse_derivative(t)[:, None] \
            * diff_matrix(n)
        result = np.eye(n)
        for _ in range(k):
            result = scaled @ result
        return result

    def _variable_sizes(self) -> np.ndarray:
        total = int(np.sum(self.dimension))
        return np.array([total if is_fun else 1
                         for is_fun in self.source.is_fun_variable()])

    def _locate(self, x: float, side: Optional[str]) -> int:
        bp = self.domain
        if x < bp[0] or x > bp[-1]:
            raise ValueError(f"point {x} lies outside the domain "
                             f"[{bp[0]}, {bp[-1]}]")
        if side == "left":
            j = int(np.searchsorted(bp, x, side="left")) - 1
            return max(j, 0)
        j = int(np.searchsorted(bp, x, side="right")) - 1
        return min(j, self.num_intervals - 1)

    def evaluation_row(self, x: float, derivative: int = 0,
                       side: Optional[str] = None) -> np.ndarray:
        """Row evaluating the k-th derivative at x from the discrete values."""
        j = self._locate(x, side)
        n = int(self.dimension[j])
        t = np.clip(self.interval_map(j).inverse(x), -1.0, 1.0)
        local = barycentric_matrix(np.atleast_1d(t), n)
        if derivative:
            local = local @ self.derivative_matrix(j, derivative)
        row = np.zeros(int(np.sum(self.dimension)))
        start = int(np.sum(self.dimension[:j]))
        row[start:start + n] = local[0]
        return row

    def integral_row(self) -> np.ndarray:
        """Row integrating the discrete function over the whole domain."""
        rows = []
        for j in range(self.num_intervals):
            n = int(self.dimension[j])
            t = chebpts(n)
            jacobian = self.interval_map(j).derivative(t)
            # infinite Jacobian at a mapped endpoint: decaying integrand
            jacobian = np.where(np.isfinite(jacobian), jacobian, 0.0)
            rows.append(quadrature_weights(n) * jacobian)
        return np.concatenate(rows)

    def function_column(self, f) -> np.ndarray:
        """Values of a function at all collocation points, as a column."""
        x = np.concatenate([self.points(j)
                            for j in range(self.num_intervals)])
        return np.asarray(f(x)).reshape(-1, 1)

    def operator_block(self, op: DifferentialOperator) -> np.ndarray:
        """Block-diagonal matrix of sum_k diag(c_k(x)) D^k."""
        local = []
        for j in range(self.num_intervals):
            x = self.points(j)
            n = int(self.dimension[j])
            block = np.zeros((n, n))
            for k in range(len(op.coefficients)):
                c = op.coefficient_values(k, x)
                if np.all(c == 0):
                    continue
                block = block + c[:, None] * self.derivative_matrix(j, k)
            local.append(block)
        return scipy.linalg.block_diag(*local)

    # --- global assembly -----------------------------------------------

    def _operator_matrix(self) -> np.ndarray:
        sizes = self._variable_sizes()
        is_fun = self.source.is_fun_variable()
        rows = []
        for i, block_row in enumerate(self.source.blocks):
            cols = []
            for j, block in enumerate(block_row):
                shape = (sizes[i], sizes[j])
                if block is None:
                    cols.append(np.zeros(shape))
                elif is_fun[i] and is_fun[j]:
                    cols.append(self.operator_block(block))
                elif is_fun[j]:
                    cols.append(block.discretize(self).reshape(shape))
                elif is_fun[i]:
                    cols.append(self.function_column(block))
                else:
                    cols.append(np.full(shape, block))
            rows.append(np.hstack(cols))
        return np.vstack(rows)

    def _constraint_rows(self, constraints: Sequence[Constraint]
                         ) -> Tuple[np.ndarray, np.ndarray]:
        sizes = self._variable_sizes()
        rows, values = [], []
        for constraint in constraints:
            entries = list(constraint.functionals)
            entries += [None] * (len(sizes) - len(entries))
            parts = []
            for size, entry in zip(sizes, entries):
                if entry is None:
                    parts.append(np.zeros(size))
                elif isinstance(entry, Functional):
                    parts.append(entry.discretize(self))
                else:
                    parts.append(np.full(size, entry))
            rows.append(np.concatenate(parts))
            values.append(constraint.value)
        if not rows:
            return np.zeros((0, int(np.sum(sizes)))), np.zeros(0)
        return np.vstack(rows), np.asarray(values)

    def constraint_matrix(self) -> Tuple[np.ndarray, np.ndarray]:
        """Rows and values of all boundary and continuity constraints."""
        constraints = list(self.source.constraints)
        constraints += list(self.source.continuity or [])
        return self._constraint_rows(constraints)

    def projection_matrix(self) -> np.ndarray:
        """Resampling of each equation from n to n - d points per interval."""
        orders = self.source.diff_orders()
        blocks = []
        for i, is_fun in enumerate(self.source.is_fun_variable()):
            if not is_fun:
                blocks.append(np.eye(1))
                continue
            for j in range(self.num_intervals):
                n = int(self.dimension[j])
                m = n - int(orders[i])
                if m < 1:
                    raise ValueError(
                        f"dimension {n} is too small for an equation of "
                        f"order {orders[i]}"
                    )
                if m == n:
                    blocks.append(np.eye(n))
                else:
                    blocks.append(barycentric_matrix(chebpts1(m), n))
        return scipy.linalg.block_diag(*blocks)

    def matrix(self):
        """
        Assemble the square collocation system.

        Returns:
            (M, P, A, B, values) where M = [B; P A] is square, A the
            operator on the full grids, P the projection, B the constraint
            rows and values their right-hand sides.
        """
        self._check_dimension()
        A = self._operator_matrix()
        B, values = self.constraint_matrix()
        P = self.projection_matrix()
        if B.shape[0] + P.shape[0] != A.shape[1]:
            raise ValueError(
                f"{B.shape[0]} constraints were given but the discretization "
                f"needs {A.shape[1] - P.shape[0]}"
            )
        M = np.vstack([B, P @ A])
        return M, P, A, B, values

    def expm(self, t: float) -> np.ndarray:
        """
        exp(t L) restricted to discrete functions satisfying the constraints.

        Solutions are written as u = Z w with Z an orthonormal basis of the
        null space of the constraint rows; the projected equations
        P Z w' = P A Z w then define the reduced generator.
        """
        _, P, A, B, _ = self.matrix()
        if B.shape[0]:
            Z = scipy.linalg.null_space(B)
        else:
            Z = np.eye(A.shape[1])
        generator = np.linalg.solve(P @ Z, P @ A @ Z)
        logger.debug("expm at t=%g with dimension %s", t,
                     self.dimension.tolist())
        return Z @ scipy.linalg.expm(t * generator) @ Z.conj().T

    def solve(self, f: np.ndarray) -> np.ndarray:
        """Solve L u = f with the constraint values on the boundary rows."""
        M, P, _, _, values = self.matrix()
        rhs = np.concatenate([values, P @ f])
        return np.linalg.solve(M, rhs)

    # --- conversion back to functions ----------------------------------

    def partition(self, v: np.ndarray) -> list:
        out = []
        start = 0
        for is_fun in self.source.is_fun_variable():
            if is_fun:
                pieces = []
                for n in self.dimension:
                    pieces.append(v[start:start + int(n)])
                    start += int(n)
                out.append(pieces)
            else:
                out.append(v[start].item())
                start += 1
        return out

    def test_convergence(self, pieces: list, tolerance: float,
                         config: Optional[ChebtechConfig] = None
                         ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Happiness test of every sub-interval.

        Args:
            pieces: Per function-valued variable, the list of per-interval
                value vectors
            tolerance: Relative accuracy required
            config: Settings for the Chebtechs built from the pieces

        Returns:
            (is_done, eps_level) arrays, one entry per sub-interval; an
            interval is done only if every variable is happy on it.
        """
        is_done = np.ones(self.num_intervals, dtype=bool)
        eps_level = np.zeros(self.num_intervals)
        for variable in pieces:
            vscale = max(float(np.max(np.abs(p))) for p in variable)
            for j, values in enumerate(variable):
                tech = Chebtech.from_values(values, vscale, 1.0, config)
                happy, _, eps = tech.happiness_check(tolerance, vscale)
                is_done[j] &= happy
                eps_level[j] = max(eps_level[j], eps)
        return is_done, eps_level

    def to_functions(self, pieces: list,
                     config: Optional[FunConfig] = None) -> list:
        out = []
        for variable in pieces:
            if not isinstance(variable, list):
                out.append(variable)
                continue
            funs = [make_fun(values, (self.domain[j], self.domain[j + 1]),
                             config=config)
                    for j, values in enumerate(variable)]
            out.append(PiecewiseFunction(funs))
        return out


def derive_continuity(linop, breakpoints=None):
    """
    Default continuity constraints across interior breakpoints.

    A function-valued variable differentiated up to order d is required to
    match its value and first d - 1 derivatives at every interior
    breakpoint.

    Args:
        linop: Operator to extend
        breakpoints: Partition to use (default: the operator's domain)

    Returns:
        A copy of the operator on the partition, carrying the continuity
        constraints
    """
    points = as_breakpoints(linop.domain if breakpoints is None
                            else breakpoints)
    n_vars = linop.num_variables
    orders = linop.variable_orders()
    continuity: List[Constraint] = []
    for x in points[1:-1]:
        for j, is_fun in enumerate(linop.is_fun_variable()):
            if not is_fun:
                continue
            for k in range(int(orders[j])):
                functionals = [None] * n_vars
                functionals[j] = (Evaluation(x, k, side="left")
                                  - Evaluation(x, k, side="right"))
                continuity.append(Constraint(functionals, 0.0))
    logger.debug("derived %d continuity constraints", len(continuity))
    return linop.with_domain(points).with_continuity(continuity)


def prepare_discretization(operator, data, config):
    """
    Set up the discretization and candidate dimensions for a refinement loop.

    A discretization class from `config.discretization` is instantiated on
    the union of the operator's and the data's breakpoints, with candidate
    dimensions no smaller than the data's representation length. A
    discretization instance is used as-is with its current largest
    dimension as the only candidate. Default continuity constraints are
    derived when the operator carries none.

    Args:
        operator: Linop to discretize
        data: Chebmatrix holding the initial condition or right-hand side
        config: LinopConfig

    Returns:
        (disc, dimension_values)

    Raises:
        IncompatibleDomain: If the domains have different endpoints
    """
    discretization = config.discretization
    if discretization is None:
        discretization = ChebColloc2

    if isinstance(discretization, type):
        domain = merge_domains(operator.domain, data.domain)
        disc = discretization(operator, domain=domain,
                              mapping_config=config.fun.mapping)
        length = data.length
        dims = [d for d in config.dimension_values if d >= length]
        if not dims:
            dims = [max(int(config.dimension_values[-1]), int(length))]
            logger.info(
                "Data of length %d exceeds all candidate dimensions; "
                "using %d", length, dims[0],
            )
        disc.dimension = np.full(disc.num_intervals, dims[0], dtype=int)
    else:
        disc = discretization
        dims = [int(np.max(disc.dimension))]

    if disc.source.continuity is None:
        disc.source = derive_continuity(disc.source, disc.domain)

    logger.info(
        "%s on breakpoints %s with candidate dimensions %s",
        type(disc).__name__, disc.domain.tolist(), dims,
    )
    return disc, np.asarray(dims, dtype=int)
