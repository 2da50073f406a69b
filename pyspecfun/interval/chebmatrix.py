"""
Block container for functions and scalars.

A Chebmatrix holds one row per variable of a linear system and one column
per instance (for example per time value of a semigroup propagation).
Function-valued variables hold Fun or PiecewiseFunction blocks; scalar
variables hold numbers.
"""

from __future__ import annotations

import numbers
from typing import List, Optional, Sequence

import numpy as np

from .chebtech import chebpts
from .configs import MappingConfig
from .functions import Fun, PiecewiseFunction
from .interval_domain import merge_domains
from .mapping import create_map


def _is_function_block(block) -> bool:
    return isinstance(block, (Fun, PiecewiseFunction))


class Chebmatrix:
    """
    A rows-by-columns collection of function and scalar blocks.

    Args:
        blocks: A single function or scalar, a sequence of them (one
            column), or a list of rows
    """

    def __init__(self, blocks=None):
        if blocks is None:
            rows: List[list] = []
        elif _is_function_block(blocks) or isinstance(blocks, numbers.Number):
            rows = [[blocks]]
        else:
            blocks = list(blocks)
            if blocks and all(isinstance(b, (list, tuple)) for b in blocks):
                rows = [list(row) for row in blocks]
            else:
                rows = [[b] for b in blocks]
        for row in rows:
            for block in row:
                if not (_is_function_block(block)
                        or isinstance(block, numbers.Number)):
                    raise TypeError(
                        f"Chebmatrix blocks must be functions or scalars, "
                        f"got {type(block)}"
                    )
        if rows and len({len(row) for row in rows}) != 1:
            raise ValueError("all Chebmatrix rows must have the same length")
        self.blocks = rows

    @property
    def shape(self):
        if not self.blocks:
            return (0, 0)
        return (len(self.blocks), len(self.blocks[0]))

    def __getitem__(self, index):
        if isinstance(index, tuple):
            i, j = index
            return self.blocks[i][j]
        return self.blocks[index]

    def column(self, j: int) -> "Chebmatrix":
        return Chebmatrix([[row[j]] for row in self.blocks])

    def columns(self) -> List["Chebmatrix"]:
        return [self.column(j) for j in range(self.shape[1])]

    def hstack(self, other: "Chebmatrix") -> "Chebmatrix":
        """Append the columns of another Chebmatrix."""
        if not self.blocks:
            return Chebmatrix([list(row) for row in other.blocks])
        if self.shape[0] != other.shape[0]:
            raise ValueError(
                f"cannot stack {self.shape} and {other.shape} Chebmatrices"
            )
        return Chebmatrix([mine + theirs for mine, theirs
                           in zip(self.blocks, other.blocks)])

    def is_fun_variable(self) -> np.ndarray:
        """Boolean per row: True for function-valued variables."""
        return np.array([_is_function_block(row[0]) for row in self.blocks],
                        dtype=bool)

    @property
    def domain(self) -> np.ndarray:
        """Merged breakpoints of all function blocks."""
        parts = [block.breakpoints for row in self.blocks for block in row
                 if _is_function_block(block)]
        if not parts:
            raise ValueError("Chebmatrix has no function blocks")
        return merge_domains(*parts)

    @property
    def length(self) -> int:
        """Largest representation length over all function blocks."""
        lengths = [block.length for row in self.blocks for block in row
                   if _is_function_block(block)]
        return max(lengths) if lengths else 1

    def discretize(self, dimension: Sequence[int], breakpoints,
                   config: Optional[MappingConfig] = None) -> np.ndarray:
        """
        Sample the first column at the collocation points of a partition.

        Function blocks are sampled at `dimension[j]` second-kind points of
        each sub-interval j (mapped onto the sub-interval); scalar blocks
        contribute a single entry.

        Args:
            dimension: Number of points per sub-interval
            breakpoints: Partition of the domain
            config: Scales used for unbounded sub-intervals

        Returns:
            Concatenated vector, variables in row order
        """
        breakpoints = np.asarray(breakpoints, dtype=float)
        pieces = []
        for row in self.blocks:
            block = row[0]
            if not _is_function_block(block):
                pieces.append(np.atleast_1d(block))
                continue
            for j, n in enumerate(dimension):
                lo, hi = breakpoints[j], breakpoints[j + 1]
                x = create_map((lo, hi), config).forward(chebpts(int(n)))
                fun = (block.piece_for(lo, hi)
                       if isinstance(block, PiecewiseFunction) else block)
                pieces.append(np.atleast_1d(fun.evaluate(x)))
        return np.concatenate(pieces)

    def __repr__(self) -> str:
        return f"Chebmatrix(shape={self.shape})"


def as_chebmatrix(data) -> Chebmatrix:
    """Normalise a function, scalar, sequence or Chebmatrix to a Chebmatrix."""
    if isinstance(data, Chebmatrix):
        return data
    return Chebmatrix(data)
