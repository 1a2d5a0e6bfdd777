from enum import Enum


class Diagnostic(Enum):
    """
    Non-fatal conditions attached to a result.

    A result carrying one of these flags still holds the best numeric answer
    available; the caller decides whether to retry with adjusted parameters
    (finer grid, smaller step, larger regularization).
    """
    MAX_ITER_EXCEEDED = "max_iter_exceeded"
    ILL_CONDITIONED = "ill_conditioned"
    DIVERGED = "diverged"
    REDUCED_CONFIDENCE = "reduced_confidence"


class NumlabError(Exception):
    """Base class for all errors raised by pyNUMLAB."""
    pass


class ParseError(NumlabError, ValueError):
    """
    Malformed expression text.

    Parameters
    ----------
    message : str
        Human readable description.
    position : int
        0-based character offset of the offending token.
    """
    def __init__(self, message, position=0):
        super().__init__(f"{message} (at position {position})")
        self.message = message
        self.position = position


class DomainError(NumlabError, ArithmeticError):
    """Function is undefined at the requested point."""
    pass


class NoIntersection(NumlabError):
    """Fewer than two intersection points were found between the curves."""
    pass


class Diverged(NumlabError):
    """
    An iterative or recursive method exceeded its safety bounds.

    The best partial result (if any) is available as ``result``.
    """
    def __init__(self, message, result=None):
        super().__init__(message)
        self.result = result


class SingularMatrix(NumlabError, ArithmeticError):
    """Linear system has a zero pivot."""
    pass


class TooFewPoints(NumlabError, ValueError):
    pass


class UnsortedPoints(NumlabError, ValueError):
    pass


class OutOfRange(NumlabError, ValueError):
    """
    Query point lies outside the tabulated range.

    Attributes ``x``, ``lower`` and ``upper`` describe the request.
    """
    def __init__(self, x, lower, upper):
        super().__init__(f"x={x} is outside of [{lower}, {upper}]")
        self.x = x
        self.lower = lower
        self.upper = upper


class Cancelled(NumlabError):
    """Computation aborted by the caller's cancellation check."""
    pass


def check_cancel(cancel):
    if cancel is not None and cancel():
        raise Cancelled("computation cancelled")
