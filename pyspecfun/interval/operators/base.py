"""Building blocks for linear operators on interval domains.

- Functional: linear map from functions to scalars (point evaluation,
  integral, and linear combinations of these)
- DifferentialOperator: L u = sum_k c_k(x) u^(k)
- Constraint: a functional (per variable) equated to a value

The blocks only describe the continuous objects. Turning them into
matrices is the job of a discretization, which the blocks call back into.
"""

import numbers
from abc import ABC, abstractmethod
from typing import Callable, List, Optional, Sequence, Union

import numpy as np


class Functional(ABC):
    """A linear functional acting on one function-valued variable."""

    @abstractmethod
    def discretize(self, disc) -> np.ndarray:
        """Row vector acting on the discrete values of one variable."""

    def __add__(self, other: "Functional") -> "Functional":
        if not isinstance(other, Functional):
            return NotImplemented
        return LinearCombination([(1.0, self), (1.0, other)])

    def __sub__(self, other: "Functional") -> "Functional":
        if not isinstance(other, Functional):
            return NotImplemented
        return LinearCombination([(1.0, self), (-1.0, other)])

    def __mul__(self, scalar) -> "Functional":
        if not isinstance(scalar, numbers.Number):
            return NotImplemented
        return LinearCombination([(scalar, self)])

    def __rmul__(self, scalar) -> "Functional":
        return self.__mul__(scalar)

    def __neg__(self) -> "Functional":
        return LinearCombination([(-1.0, self)])


class Evaluation(Functional):
    """
    Point evaluation u^(k)(x).

    Args:
        x: Evaluation point (may be an infinite endpoint)
        derivative: Derivative order k
        side: At a breakpoint, 'left' takes the limit from the sub-interval
            ending at x and 'right' from the one starting at x. None picks
            the sub-interval containing x, preferring the right one.
    """

    def __init__(self, x: float, derivative: int = 0,
                 side: Optional[str] = None):
        if side not in (None, "left", "right"):
            raise ValueError("side must be None, 'left' or 'right'")
        if derivative < 0:
            raise ValueError("derivative order must be non-negative")
        self.x = float(x)
        self.derivative = int(derivative)
        self.side = side

    def discretize(self, disc) -> np.ndarray:
        return disc.evaluation_row(self.x, self.derivative, self.side)

    def __repr__(self) -> str:
        return (f"Evaluation(x={self.x}, derivative={self.derivative}, "
                f"side={self.side})")


class Integral(Functional):
    """Definite integral of the variable over the whole domain."""

    def discretize(self, disc) -> np.ndarray:
        return disc.integral_row()

    def __repr__(self) -> str:
        return "Integral()"


class LinearCombination(Functional):
    """Weighted sum of functionals."""

    def __init__(self, terms):
        flat = []
        for weight, functional in terms:
            if isinstance(functional, LinearCombination):
                flat.extend((weight * w, f) for w, f in functional.terms)
            else:
                flat.append((weight, functional))
        self.terms = flat

    def discretize(self, disc) -> np.ndarray:
        return sum(w * f.discretize(disc) for w, f in self.terms)

    def __repr__(self) -> str:
        return f"LinearCombination({self.terms})"


Coefficient = Union[float, complex, Callable]


class DifferentialOperator:
    """
    Linear differential operator L u = sum_k c_k(x) u^(k).

    Args:
        coefficients: [c_0, c_1, ..., c_m]; each a scalar or a vectorised
            callable of x
    """

    def __init__(self, coefficients: Sequence[Coefficient]):
        coefficients = list(coefficients)
        if not coefficients:
            coefficients = [0.0]
        while len(coefficients) > 1 and self._is_zero(coefficients[-1]):
            coefficients.pop()
        self.coefficients: List[Coefficient] = coefficients

    @staticmethod
    def _is_zero(c) -> bool:
        return isinstance(c, numbers.Number) and c == 0

    @property
    def order(self) -> int:
        if len(self.coefficients) == 1 and self._is_zero(self.coefficients[0]):
            return 0
        return len(self.coefficients) - 1

    @classmethod
    def diff(cls, k: int = 1) -> "DifferentialOperator":
        return cls([0.0] * k + [1.0])

    @classmethod
    def identity(cls) -> "DifferentialOperator":
        return cls([1.0])

    @classmethod
    def multiplication(cls, f: Coefficient) -> "DifferentialOperator":
        return cls([f])

    def coefficient_values(self, k: int, x: np.ndarray) -> np.ndarray:
        """Values of c_k at the points x."""
        c = self.coefficients[k]
        if callable(c):
            with np.errstate(all="ignore"):
                values = np.asarray(c(x))
            return np.broadcast_to(values, x.shape)
        return np.full(x.shape, c)

    def discretize(self, disc) -> np.ndarray:
        return disc.operator_block(self)

    def _combine(self, other, sign):
        n = max(len(self.coefficients), len(other.coefficients))
        mine = self.coefficients + [0.0] * (n - len(self.coefficients))
        theirs = other.coefficients + [0.0] * (n - len(other.coefficients))
        return DifferentialOperator([_add(a, b, sign)
                                     for a, b in zip(mine, theirs)])

    def __add__(self, other):
        if isinstance(other, DifferentialOperator):
            return self._combine(other, 1.0)
        if isinstance(other, numbers.Number):
            return self._combine(DifferentialOperator([other]), 1.0)
        return NotImplemented

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        if isinstance(other, DifferentialOperator):
            return self._combine(other, -1.0)
        if isinstance(other, numbers.Number):
            return self._combine(DifferentialOperator([other]), -1.0)
        return NotImplemented

    def __mul__(self, scalar):
        if not isinstance(scalar, numbers.Number):
            return NotImplemented
        return DifferentialOperator([_scale(c, scalar)
                                     for c in self.coefficients])

    def __rmul__(self, scalar):
        return self.__mul__(scalar)

    def __neg__(self):
        return self * -1.0

    def __repr__(self) -> str:
        return f"DifferentialOperator(order={self.order})"


def _add(a, b, sign):
    if callable(a) or callable(b):
        fa = a if callable(a) else (lambda x, a=a: a)
        fb = b if callable(b) else (lambda x, b=b: b)
        return lambda x: fa(x) + sign * fb(x)
    return a + sign * b


def _scale(c, scalar):
    if callable(c):
        return lambda x: scalar * c(x)
    return scalar * c


class Constraint:
    """
    A linear constraint sum_j F_j(u_j) = value.

    Args:
        functional: A Functional acting on variable 0, or a sequence with
            one entry (Functional, scalar weight for scalar variables, or
            None) per variable
        value: Right-hand side
    """

    def __init__(self, functional, value: float = 0.0):
        if isinstance(functional, Functional):
            functional = [functional]
        self.functionals = list(functional)
        self.value = value

    def __repr__(self) -> str:
        return f"Constraint({self.functionals}, value={self.value})"
