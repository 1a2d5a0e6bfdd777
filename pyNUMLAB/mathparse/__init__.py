"""Expression parsing and evaluation.

Text such as ``"2sin(x) - 3cos(4x)"`` is parsed into an immutable
:class:`Expression` that evaluates to a float or raises
:class:`pyNUMLAB.DomainError` where it is undefined.
"""

from ._expression import Expression, as_function, evaluate, parse
from ._nodes import CONSTANTS, FUNCTIONS, VARIABLES, BinaryOp, Call, Constant, UnaryOp, Variable
from ._tokens import Token, tokenize
