"""Interval domains with finite or infinite endpoints.

This module provides the immutable IntervalDomain class and helpers for
normalising user input and merging breakpoint partitions.
"""

from typing import Sequence, Tuple, Union

import numpy as np

from .errors import IncompatibleDomain, InvalidDomainShape


class IntervalDomain:
    """
    An interval [a, b] with a < b, where either endpoint may be infinite.

    Instances are immutable; operations that change the endpoints return a
    new IntervalDomain.
    """

    __slots__ = ("_a", "_b")

    def __init__(self, a: float, b: float):
        a = float(a)
        b = float(b)
        if np.isnan(a) or np.isnan(b):
            raise InvalidDomainShape("domain endpoints must not be NaN")
        if a >= b:
            raise InvalidDomainShape(
                f"domain endpoints must be strictly increasing, got [{a}, {b}]"
            )
        self._a = a
        self._b = b

    @property
    def a(self) -> float:
        return self._a

    @property
    def b(self) -> float:
        return self._b

    @property
    def length(self) -> float:
        return self._b - self._a

    @property
    def is_bounded(self) -> bool:
        return bool(np.isfinite(self._a) and np.isfinite(self._b))

    @property
    def is_unbounded(self) -> bool:
        return not self.is_bounded

    @property
    def kind(self) -> str:
        """One of 'bounded', 'left_infinite', 'right_infinite', 'infinite'."""
        left = np.isinf(self._a)
        right = np.isinf(self._b)
        if left and right:
            return "infinite"
        if left:
            return "left_infinite"
        if right:
            return "right_infinite"
        return "bounded"

    @property
    def breakpoints(self) -> np.ndarray:
        return np.array([self._a, self._b])

    def contains(self, x: Union[float, np.ndarray]) -> Union[bool, np.ndarray]:
        return (x >= self._a) & (x <= self._b)

    def boundary_points(self) -> Tuple[float, float]:
        return (self._a, self._b)

    def with_endpoints(self, a: float, b: float) -> "IntervalDomain":
        return IntervalDomain(a, b)

    def restriction_to_subinterval(
        self,
        a: float,
        b: float,
    ) -> "IntervalDomain":
        if a >= b:
            raise InvalidDomainShape("invalid subinterval")
        if not (self._a <= a and b <= self._b):
            raise InvalidDomainShape("subinterval outside domain")
        return IntervalDomain(a, b)

    def __repr__(self) -> str:
        return f"[{self._a}, {self._b}]"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, IntervalDomain):
            return False
        return (self._a == other._a) and (self._b == other._b)

    def __hash__(self) -> int:
        return hash((self._a, self._b))


def as_domain(domain) -> IntervalDomain:
    """
    Normalise a domain specification to an IntervalDomain.

    Args:
        domain: IntervalDomain or a sequence of exactly two endpoints

    Raises:
        InvalidDomainShape: if the input is not a strictly increasing pair
    """
    if isinstance(domain, IntervalDomain):
        return domain
    try:
        ends = np.asarray(domain, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InvalidDomainShape(
            f"domain must be a pair of numbers, got {domain!r}"
        ) from exc
    if ends.shape != (2,):
        raise InvalidDomainShape(
            "domain argument should be a sequence with two entries, "
            f"got shape {ends.shape}"
        )
    return IntervalDomain(ends[0], ends[1])


def as_breakpoints(domain) -> np.ndarray:
    """Return the breakpoints of a domain-like object as a float array."""
    if isinstance(domain, IntervalDomain):
        return domain.breakpoints
    if hasattr(domain, "breakpoints"):
        return np.asarray(domain.breakpoints, dtype=float)
    points = np.asarray(domain, dtype=float).ravel()
    if points.size < 2 or np.any(np.isnan(points)):
        raise InvalidDomainShape(
            f"a partition needs at least two breakpoints, got {domain!r}"
        )
    if np.any(np.diff(points) <= 0):
        raise InvalidDomainShape("breakpoints must be strictly increasing")
    return points


def merge_domains(*domains: Sequence, rtol: float = 1e-14) -> np.ndarray:
    """
    Merge breakpoint partitions of the same interval.

    Args:
        domains: Breakpoint sequences, IntervalDomains or objects exposing a
            `breakpoints` attribute
        rtol: Relative tolerance below which interior breakpoints coincide

    Returns:
        Sorted union of all breakpoints

    Raises:
        IncompatibleDomain: if the partitions do not share both endpoints
    """
    partitions = [as_breakpoints(d) for d in domains]
    if not partitions:
        raise ValueError("merge_domains needs at least one domain")

    first = partitions[0]
    a, b = first[0], first[-1]
    scale = max([1.0] + [abs(v) for v in (a, b) if np.isfinite(v)])
    for other in partitions[1:]:
        for mine, theirs in ((a, other[0]), (b, other[-1])):
            if np.isinf(mine) or np.isinf(theirs):
                same = mine == theirs
            else:
                same = abs(mine - theirs) <= rtol * scale
            if not same:
                raise IncompatibleDomain(
                    f"domains [{a}, {b}] and [{other[0]}, {other[-1]}] "
                    "do not have the same endpoints"
                )

    merged = np.unique(np.concatenate(partitions))
    keep = [merged[0]]
    for point in merged[1:]:
        if np.isfinite(point) and np.isfinite(keep[-1]) and \
           abs(point - keep[-1]) <= rtol * scale:
            continue
        keep.append(point)
    keep[0], keep[-1] = a, b
    return np.asarray(keep, dtype=float)
