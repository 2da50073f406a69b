"""
Unit tests for interval_domain.py

This module tests the IntervalDomain class and the helpers for normalising
domains and merging breakpoint partitions, including infinite endpoints.
"""

import unittest
import numpy as np

from pyspecfun.interval.errors import IncompatibleDomain, InvalidDomainShape
from pyspecfun.interval.interval_domain import (
    IntervalDomain,
    as_breakpoints,
    as_domain,
    merge_domains,
)


class TestIntervalDomain(unittest.TestCase):
    """Test cases for IntervalDomain class."""

    def setUp(self):
        """Set up test fixtures."""
        self.bounded = IntervalDomain(0.0, 1.0)
        self.right_infinite = IntervalDomain(2.0, np.inf)
        self.left_infinite = IntervalDomain(-np.inf, -1.0)
        self.infinite = IntervalDomain(-np.inf, np.inf)

    # === INITIALIZATION TESTS ===

    def test_init_with_floats_and_ints(self):
        """Test initialization with different numeric types."""
        domain = IntervalDomain(0, 5)
        self.assertIsInstance(domain.a, float)
        self.assertIsInstance(domain.b, float)

    def test_init_invalid_interval_equal_endpoints(self):
        with self.assertRaises(InvalidDomainShape):
            IntervalDomain(1.0, 1.0)

    def test_init_invalid_interval_reversed_endpoints(self):
        with self.assertRaises(InvalidDomainShape):
            IntervalDomain(2.0, 1.0)

    def test_init_nan(self):
        with self.assertRaises(InvalidDomainShape):
            IntervalDomain(np.nan, 1.0)

    def test_errors_are_value_errors(self):
        """Domain errors can be caught as ValueError."""
        with self.assertRaises(ValueError):
            IntervalDomain(np.inf, np.inf)

    # === PROPERTY TESTS ===

    def test_length_property(self):
        self.assertAlmostEqual(self.bounded.length, 1.0)
        self.assertEqual(self.right_infinite.length, np.inf)
        self.assertEqual(self.infinite.length, np.inf)

    def test_kind(self):
        self.assertEqual(self.bounded.kind, 'bounded')
        self.assertEqual(self.right_infinite.kind, 'right_infinite')
        self.assertEqual(self.left_infinite.kind, 'left_infinite')
        self.assertEqual(self.infinite.kind, 'infinite')

    def test_bounded_flags(self):
        self.assertTrue(self.bounded.is_bounded)
        self.assertFalse(self.bounded.is_unbounded)
        for domain in (self.right_infinite, self.left_infinite,
                       self.infinite):
            self.assertTrue(domain.is_unbounded)

    def test_immutable(self):
        with self.assertRaises(AttributeError):
            self.bounded.a = 3.0

    # === METHOD TESTS ===

    def test_contains(self):
        self.assertTrue(self.bounded.contains(0.0))
        self.assertTrue(self.bounded.contains(1.0))
        self.assertFalse(self.bounded.contains(1.5))
        self.assertTrue(self.right_infinite.contains(np.inf))
        np.testing.assert_array_equal(
            self.left_infinite.contains(np.array([-1e10, -1.0, 0.0])),
            [True, True, False],
        )

    def test_boundary_points_method(self):
        self.assertEqual(self.right_infinite.boundary_points(),
                         (2.0, np.inf))

    def test_restriction_to_subinterval(self):
        sub = self.infinite.restriction_to_subinterval(-1.0, 1.0)
        self.assertEqual(sub, IntervalDomain(-1.0, 1.0))
        with self.assertRaises(InvalidDomainShape):
            self.bounded.restriction_to_subinterval(0.5, 2.0)

    def test_with_endpoints(self):
        moved = self.bounded.with_endpoints(3.0, np.inf)
        self.assertEqual(moved.kind, 'right_infinite')
        self.assertEqual(self.bounded.b, 1.0)

    def test_repr(self):
        self.assertEqual(repr(self.bounded), '[0.0, 1.0]')
        self.assertEqual(repr(self.infinite), '[-inf, inf]')

    def test_equality_and_hash(self):
        self.assertEqual(self.bounded, IntervalDomain(0, 1))
        self.assertNotEqual(self.bounded, self.infinite)
        self.assertNotEqual(self.bounded, (0.0, 1.0))
        self.assertEqual(len({self.bounded, IntervalDomain(0, 1)}), 1)


class TestDomainHelpers(unittest.TestCase):
    """Test cases for as_domain, as_breakpoints and merge_domains."""

    def test_as_domain_from_pair(self):
        self.assertEqual(as_domain([0, np.inf]), IntervalDomain(0, np.inf))

    def test_as_domain_rejects_wrong_shape(self):
        for bad in ([0, 1, 2], [1], 'ab', [[0, 1]]):
            with self.assertRaises(InvalidDomainShape):
                as_domain(bad)

    def test_as_breakpoints(self):
        np.testing.assert_array_equal(as_breakpoints([-np.inf, 0, np.inf]),
                                      [-np.inf, 0, np.inf])
        np.testing.assert_array_equal(as_breakpoints(IntervalDomain(0, 1)),
                                      [0, 1])
        with self.assertRaises(InvalidDomainShape):
            as_breakpoints([0, 2, 1])

    def test_merge_domains(self):
        merged = merge_domains([-1, 0, 1], [-1, 0.5, 1], [-1, 1])
        np.testing.assert_array_equal(merged, [-1, 0, 0.5, 1])

    def test_merge_domains_with_infinite_ends(self):
        merged = merge_domains([-np.inf, np.inf], [-np.inf, 0, np.inf])
        np.testing.assert_array_equal(merged, [-np.inf, 0, np.inf])

    def test_merge_domains_drops_near_duplicates(self):
        merged = merge_domains([0, 0.5, 1], [0, 0.5 + 1e-16, 1])
        self.assertEqual(len(merged), 3)

    def test_merge_incompatible_domains(self):
        with self.assertRaises(IncompatibleDomain):
            merge_domains([-1, 1], [0, 1])
        with self.assertRaises(IncompatibleDomain):
            merge_domains([0, np.inf], [0, 10])


if __name__ == '__main__':
    unittest.main()
