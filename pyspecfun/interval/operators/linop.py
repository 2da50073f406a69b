"""Linear operators with constraints on a partitioned interval.

A Linop is a square block operator acting on a vector of variables. Each
variable is either function-valued or a scalar unknown. Blocks are

- DifferentialOperator: function -> function
- Functional: function -> scalar
- Fun or vectorised callable: scalar -> function (multiplication)
- number: scalar -> scalar
- None: zero block

Constraints (boundary conditions and, optionally, continuity conditions at
interior breakpoints) are kept alongside the blocks.
"""

from __future__ import annotations

import copy
import logging
import numbers
from typing import List, Optional, Sequence

import numpy as np

from ..interval_domain import as_breakpoints
from .base import Constraint, DifferentialOperator, Functional

logger = logging.getLogger(__name__)


class Linop:
    """
    A linear (block) operator with constraints.

    Args:
        blocks: A single DifferentialOperator, or a square list of rows of
            blocks
        domain: Domain or breakpoint partition the operator lives on
        constraints: Boundary (or other) constraints
        continuity: Explicit continuity constraints across interior
            breakpoints. None lets the discretization derive them.
        boundary_conditions: Optional BoundaryConditions for a
            single-variable operator; converted to constraints
    """

    def __init__(self, blocks, domain, *,
                 constraints: Sequence[Constraint] = (),
                 continuity: Optional[Sequence[Constraint]] = None,
                 boundary_conditions=None):
        if isinstance(blocks, DifferentialOperator):
            blocks = [[blocks]]
        blocks = [list(row) for row in blocks]
        n = len(blocks)
        if n == 0 or any(len(row) != n for row in blocks):
            raise ValueError("Linop blocks must form a non-empty square array")
        self.blocks = blocks
        self.domain = as_breakpoints(domain)
        self._fun_variables = self._classify_variables(blocks)

        self.constraints: List[Constraint] = list(constraints)
        if boundary_conditions is not None:
            self.constraints.extend(
                boundary_conditions.to_constraints(self.domain)
            )
        self.continuity = (list(continuity) if continuity is not None
                           else None)

    @staticmethod
    def _classify_variables(blocks) -> np.ndarray:
        n = len(blocks)
        is_fun = np.zeros(n, dtype=bool)
        for j in range(n):
            column = [blocks[i][j] for i in range(n)]
            diagonal = blocks[j][j]
            if isinstance(diagonal, DifferentialOperator):
                is_fun[j] = True
            elif isinstance(diagonal, numbers.Number):
                is_fun[j] = False
            else:
                is_fun[j] = any(isinstance(b, (DifferentialOperator,
                                               Functional))
                                for b in column)
        for i in range(n):
            for j in range(n):
                block = blocks[i][j]
                if block is None:
                    continue
                if is_fun[i] and is_fun[j]:
                    ok = isinstance(block, DifferentialOperator)
                elif not is_fun[i] and is_fun[j]:
                    ok = isinstance(block, Functional)
                elif is_fun[i] and not is_fun[j]:
                    ok = callable(block)
                else:
                    ok = isinstance(block, numbers.Number)
                if not ok:
                    raise TypeError(
                        f"block ({i}, {j}) of type {type(block).__name__} "
                        "does not match the kinds of its variables"
                    )
        return is_fun

    @property
    def num_variables(self) -> int:
        return len(self.blocks)

    def is_fun_variable(self) -> np.ndarray:
        """Boolean per variable: True for function-valued variables."""
        return self._fun_variables.copy()

    def diff_orders(self) -> np.ndarray:
        """Highest derivative order appearing in each equation (row)."""
        orders = np.zeros(self.num_variables, dtype=int)
        for i, row in enumerate(self.blocks):
            for block in row:
                if isinstance(block, DifferentialOperator):
                    orders[i] = max(orders[i], block.order)
        return orders

    def variable_orders(self) -> np.ndarray:
        """Highest derivative order applied to each variable (column)."""
        orders = np.zeros(self.num_variables, dtype=int)
        for row in self.blocks:
            for j, block in enumerate(row):
                if isinstance(block, DifferentialOperator):
                    orders[j] = max(orders[j], block.order)
        return orders

    def add_constraint(self, functional, value: float = 0.0) -> "Linop":
        """Return a copy with one more constraint."""
        out = copy.copy(self)
        out.constraints = self.constraints + [Constraint(functional, value)]
        return out

    def with_continuity(self, continuity: Sequence[Constraint]) -> "Linop":
        """Return a copy carrying explicit continuity constraints."""
        out = copy.copy(self)
        out.continuity = list(continuity)
        return out

    def with_domain(self, breakpoints) -> "Linop":
        """Return a copy on a refined breakpoint partition."""
        out = copy.copy(self)
        out.domain = as_breakpoints(breakpoints)
        return out

    def expm(self, t, u0, config=None):
        """
        Propagate u0 through u' = L u: u(t) = exp(t L) u0.

        See pyspecfun.interval.operators.expm.expm.
        """
        from .expm import expm
        return expm(self, t, u0, config)

    def solve(self, rhs, config=None):
        """
        Solve L u = rhs subject to the constraints.

        See pyspecfun.interval.operators.linsolve.linsolve.
        """
        from .linsolve import linsolve
        return linsolve(self, rhs, config)

    def __repr__(self) -> str:
        return (f"Linop(variables={self.num_variables}, "
                f"domain={self.domain.tolist()}, "
                f"constraints={len(self.constraints)})")
