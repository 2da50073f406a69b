"""
Error and warning types for interval functions and operators.

Construction-time contract violations and domain reconciliation failures are
raised as exceptions. Non-convergence of an adaptive construction or of the
operator refinement loop is recoverable and is reported as a warning.
"""


class DomainError(ValueError):
    """Base class for invalid or incompatible interval domains."""


class InvalidDomainShape(DomainError):
    """Domain is not a strictly increasing pair of endpoints."""


class InvalidDomainKind(DomainError):
    """Domain has the wrong kind (bounded vs. unbounded) for the request."""


class BoundedDomainNotAllowed(InvalidDomainKind):
    """An unbounded representation was requested on a bounded domain."""


class IncompatibleDomain(DomainError):
    """Two domains cannot be merged into one breakpoint partition."""


class ConvergenceWarning(UserWarning):
    """An adaptive construction or refinement did not resolve its result."""
