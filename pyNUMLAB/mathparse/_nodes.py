import math
from typing import NamedTuple, Tuple

from .._errors import DomainError

VARIABLES = ("x", "y")

CONSTANTS = {
    "pi": math.pi,
    "e": math.e,
}


class Constant(NamedTuple):
    value: float


class Variable(NamedTuple):
    name: str


class UnaryOp(NamedTuple):
    op: str
    operand: tuple


class BinaryOp(NamedTuple):
    op: str
    left: tuple
    right: tuple


class Call(NamedTuple):
    name: str
    args: Tuple[tuple, ...]


def _finite(value, what):
    if not math.isfinite(value):
        raise DomainError(f"{what} is not finite")
    return value


def _ln(v):
    if v <= 0.0:
        raise DomainError(f"ln undefined for {v}")
    return math.log(v)


def _sqrt(v):
    if v < 0.0:
        raise DomainError(f"sqrt undefined for {v}")
    return math.sqrt(v)


def _exp(v):
    try:
        return math.exp(v)
    except OverflowError:
        raise DomainError(f"exp overflows for {v}") from None


def _tan(v):
    if math.cos(v) == 0.0:
        raise DomainError(f"tan undefined for {v}")
    return _finite(math.tan(v), "tan")


def power(base, exponent):
    if base == 0.0 and exponent < 0.0:
        raise DomainError("zero raised to a negative power")
    if base < 0.0 and not float(exponent).is_integer():
        raise DomainError(f"{base}^{exponent} is not real")
    try:
        result = math.pow(base, exponent)
    except OverflowError:
        raise DomainError(f"{base}^{exponent} overflows") from None
    return _finite(result, "power")


def divide(a, b):
    if b == 0.0:
        raise DomainError("division by zero")
    return _finite(a / b, "quotient")


# name -> (arity, implementation)
FUNCTIONS = {
    "sin": (1, math.sin),
    "cos": (1, math.cos),
    "tan": (1, _tan),
    "exp": (1, _exp),
    "ln": (1, _ln),
    "sqrt": (1, _sqrt),
    "abs": (1, abs),
    "pow": (2, power),
}
