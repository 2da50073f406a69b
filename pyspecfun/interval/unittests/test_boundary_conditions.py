"""
Unit tests for boundary_conditions.py

This module tests the BoundaryConditions class: condition types, parameter
handling, and conversion into constraint functionals.
"""

import unittest

import numpy as np

from pyspecfun.interval.boundary_conditions import BoundaryConditions
from pyspecfun.interval.operators.base import Evaluation, LinearCombination


class TestBoundaryConditions(unittest.TestCase):
    """Test cases for BoundaryConditions class."""

    # === INITIALIZATION TESTS ===
    def test_init_dirichlet_defaults(self):
        bc = BoundaryConditions('dirichlet')
        self.assertEqual(bc.type, 'dirichlet')
        self.assertEqual(bc.get_parameter('left'), 0.0)
        self.assertEqual(bc.get_parameter('right'), 0.0)
        self.assertTrue(bc.is_homogeneous)

    def test_init_dirichlet_custom(self):
        bc = BoundaryConditions('dirichlet', left=1.5, right=-2.0)
        self.assertEqual(bc.get_parameter('left'), 1.5)
        self.assertEqual(bc.get_parameter('right'), -2.0)
        self.assertFalse(bc.is_homogeneous)

    def test_init_robin_missing_coefficient(self):
        with self.assertRaises(ValueError):
            BoundaryConditions('robin', left_alpha=1, left_beta=2,
                               right_alpha=4)  # missing right_beta

    def test_robin_values_default_to_zero(self):
        bc = BoundaryConditions('robin', left_alpha=1, left_beta=2,
                               right_alpha=4, right_beta=5)
        self.assertEqual(bc.get_parameter('left_value'), 0.0)
        self.assertTrue(bc.is_homogeneous)

    def test_invalid_type(self):
        with self.assertRaises(ValueError):
            BoundaryConditions('invalid_type')

    # === CLASSMETHOD FACTORY TESTS ===
    def test_factories(self):
        self.assertEqual(BoundaryConditions.dirichlet(1.0, -1.0).type,
                         'dirichlet')
        self.assertEqual(BoundaryConditions.neumann(2.0, -2.0)
                         .get_parameter('right'), -2.0)
        bc = BoundaryConditions.robin(1, 2, 3, 4, 5, 6)
        self.assertEqual(bc.get_parameter('right_value'), 6)
        self.assertTrue(BoundaryConditions.periodic().is_homogeneous)

    # === CONSTRAINT TESTS ===
    def test_dirichlet_constraints(self):
        constraints = BoundaryConditions.dirichlet(1.0, 2.0).to_constraints(
            [0.0, 0.5, 3.0])
        self.assertEqual(len(constraints), 2)
        left, right = (c.functionals[0] for c in constraints)
        self.assertIsInstance(left, Evaluation)
        self.assertEqual((left.x, left.derivative), (0.0, 0))
        self.assertEqual((right.x, right.derivative), (3.0, 0))
        self.assertEqual([c.value for c in constraints], [1.0, 2.0])

    def test_neumann_constraints_at_infinity(self):
        constraints = BoundaryConditions.neumann().to_constraints(
            [0.0, np.inf])
        self.assertEqual(constraints[1].functionals[0].x, np.inf)
        self.assertEqual(constraints[1].functionals[0].derivative, 1)

    def test_mixed_constraints(self):
        bc = BoundaryConditions('mixed_neumann_dirichlet', left=1, right=2)
        left, right = (c.functionals[0]
                       for c in bc.to_constraints([-1, 1]))
        self.assertEqual(left.derivative, 1)
        self.assertEqual(right.derivative, 0)

    def test_robin_constraints(self):
        bc = BoundaryConditions.robin(1, 2, 3, 4, 5, 6)
        left = bc.to_constraints([0, 1])[0]
        self.assertIsInstance(left.functionals[0], LinearCombination)
        weights = [w for w, _ in left.functionals[0].terms]
        self.assertEqual(weights, [1, 2])
        self.assertEqual(left.value, 3)

    def test_periodic_constraints(self):
        constraints = BoundaryConditions.periodic().to_constraints([0, 1])
        self.assertEqual([c.value for c in constraints], [0.0, 0.0])
        terms = constraints[1].functionals[0].terms
        self.assertEqual([(w, f.x, f.derivative) for w, f in terms],
                         [(1.0, 0.0, 1), (-1.0, 1.0, 1)])

    # === STRING REPRESENTATION TESTS ===
    def test_str_repr(self):
        bc = BoundaryConditions('dirichlet', left=1, right=2)
        self.assertIn('left=1', str(bc))
        self.assertIn('right=2', str(bc))
        self.assertIn('dirichlet', repr(bc))
        self.assertEqual(str(BoundaryConditions('periodic')), 'periodic')

    # === EQUALITY TESTS ===
    def test_equality(self):
        bc1 = BoundaryConditions('dirichlet', left=1, right=2)
        bc2 = BoundaryConditions('dirichlet', left=1, right=2)
        bc3 = BoundaryConditions('dirichlet', left=0, right=0)
        self.assertEqual(bc1, bc2)
        self.assertNotEqual(bc1, bc3)
        self.assertNotEqual(bc1, 'not a bc')


if __name__ == '__main__':
    unittest.main()
