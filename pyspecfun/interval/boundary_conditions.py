"""
Boundary condition specifications for operators on intervals.

BoundaryConditions names the common two-point conditions and converts them
into Constraint objects that a discretization turns into matrix rows.
"""

from typing import List

from .interval_domain import as_breakpoints
from .operators.base import Constraint, Evaluation


class BoundaryConditions:
    """
    Two-point boundary conditions for a single function-valued variable.

    This class provides a compact interface for the usual condition types
    and produces the equivalent constraint functionals on a given domain.
    """

    _value_keys = {
        'dirichlet': ('left', 'right'),
        'neumann': ('left', 'right'),
        'mixed_dirichlet_neumann': ('left', 'right'),
        'mixed_neumann_dirichlet': ('left', 'right'),
        'robin': ('left_value', 'right_value'),
        'periodic': (),
    }

    def __init__(self, bc_type: str, **kwargs):
        """
        Initialize boundary conditions.

        Args:
            bc_type: Type of boundary condition. One of:
                - 'dirichlet': u(a) = left, u(b) = right
                - 'neumann': u'(a) = left, u'(b) = right
                - 'robin': alpha u + beta u' = value at each end, with
                    left_alpha, left_beta, left_value, right_alpha,
                    right_beta, right_value
                - 'periodic': u(a) = u(b), u'(a) = u'(b)
                - 'mixed_dirichlet_neumann': u(a) = left, u'(b) = right
                - 'mixed_neumann_dirichlet': u'(a) = left, u(b) = right
            **kwargs: Values and coefficients, see above. Missing values
                default to 0.
        """
        self.type = bc_type
        self._params = kwargs
        self._validate()

    def _validate(self):
        """Validate boundary condition parameters."""
        if self.type not in self._value_keys:
            raise ValueError(
                f"Invalid boundary condition type '{self.type}'. "
                f"Valid types: {set(self._value_keys)}"
            )
        if self.type == 'robin':
            for param in ('left_alpha', 'left_beta',
                          'right_alpha', 'right_beta'):
                if param not in self._params:
                    raise ValueError(
                        f"Robin boundary conditions require '{param}'"
                    )
        for key in self._value_keys[self.type]:
            self._params.setdefault(key, 0.0)

    @property
    def is_homogeneous(self) -> bool:
        """Check if boundary conditions are homogeneous."""
        return all(self._params[key] == 0
                   for key in self._value_keys[self.type])

    def get_parameter(self, name: str, default=None):
        """Get a boundary condition parameter."""
        return self._params.get(name, default)

    def to_constraints(self, domain) -> List[Constraint]:
        """
        Constraint functionals for the outer endpoints of a domain.

        Args:
            domain: Domain or breakpoint partition; only the outer endpoints
                are used

        Returns:
            Two constraints on variable 0
        """
        points = as_breakpoints(domain)
        a, b = float(points[0]), float(points[-1])
        p = self._params

        if self.type == 'dirichlet':
            return [Constraint(Evaluation(a), p['left']),
                    Constraint(Evaluation(b), p['right'])]
        if self.type == 'neumann':
            return [Constraint(Evaluation(a, 1), p['left']),
                    Constraint(Evaluation(b, 1), p['right'])]
        if self.type == 'mixed_dirichlet_neumann':
            return [Constraint(Evaluation(a), p['left']),
                    Constraint(Evaluation(b, 1), p['right'])]
        if self.type == 'mixed_neumann_dirichlet':
            return [Constraint(Evaluation(a, 1), p['left']),
                    Constraint(Evaluation(b), p['right'])]
        if self.type == 'robin':
            left = (p['left_alpha'] * Evaluation(a)
                    + p['left_beta'] * Evaluation(a, 1))
            right = (p['right_alpha'] * Evaluation(b)
                     + p['right_beta'] * Evaluation(b, 1))
            return [Constraint(left, p['left_value']),
                    Constraint(right, p['right_value'])]
        # periodic
        return [Constraint(Evaluation(a) - Evaluation(b), 0.0),
                Constraint(Evaluation(a, 1) - Evaluation(b, 1), 0.0)]

    @classmethod
    def dirichlet(cls, left_value: float = 0,
                  right_value: float = 0) -> 'BoundaryConditions':
        """Dirichlet conditions: u(a) = left_value, u(b) = right_value."""
        return cls('dirichlet', left=left_value, right=right_value)

    @classmethod
    def neumann(cls, left_derivative: float = 0,
                right_derivative: float = 0) -> 'BoundaryConditions':
        """Neumann conditions: u'(a) = left_derivative, u'(b) = right_derivative."""
        return cls('neumann', left=left_derivative, right=right_derivative)

    @classmethod
    def robin(cls, left_alpha: float, left_beta: float, left_value: float,
              right_alpha: float, right_beta: float,
              right_value: float) -> 'BoundaryConditions':
        """Robin conditions: αu + βu' = value at both boundaries."""
        return cls('robin',
                   left_alpha=left_alpha, left_beta=left_beta,
                   left_value=left_value, right_alpha=right_alpha,
                   right_beta=right_beta, right_value=right_value)

    @classmethod
    def periodic(cls) -> 'BoundaryConditions':
        """Periodic conditions: u(a) = u(b), u'(a) = u'(b)."""
        return cls('periodic')

    def __str__(self) -> str:
        if self.type == 'periodic':
            return f"{self.type}"
        params_str = ', '.join(f"{k}={v}" for k, v in self._params.items())
        return f"{self.type}({params_str})"

    def __repr__(self) -> str:
        return f"BoundaryConditions('{self.type}', {self._params})"

    def __eq__(self, other) -> bool:
        if isinstance(other, BoundaryConditions):
            return (self.type == other.type and
                    self._params == other._params)
        return False
