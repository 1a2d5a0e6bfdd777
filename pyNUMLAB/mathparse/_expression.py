import math

import sympy

from .._errors import DomainError
from ._nodes import (
    FUNCTIONS,
    BinaryOp,
    Call,
    Constant,
    UnaryOp,
    Variable,
    divide,
    power,
)
from ._parser import parse_tree

_SYMBOLS = {name: sympy.Symbol(name, real=True) for name in ("x", "y")}

_SYMPY_FUNCTIONS = {
    "sin": sympy.sin,
    "cos": sympy.cos,
    "tan": sympy.tan,
    "exp": sympy.exp,
    "ln": sympy.log,
    "sqrt": sympy.sqrt,
    "abs": sympy.Abs,
    "pow": sympy.Pow,
}


def _checked(value, what):
    if not math.isfinite(value):
        raise DomainError(f"{what} is not finite")
    return value


def _compile(node):
    """Turn a node tree into a closure ``f(env) -> float``."""
    if isinstance(node, Constant):
        value = node.value
        return lambda env: value

    if isinstance(node, Variable):
        name = node.name
        return lambda env: env[name]

    if isinstance(node, UnaryOp):
        operand = _compile(node.operand)
        return lambda env: -operand(env)

    if isinstance(node, BinaryOp):
        left = _compile(node.left)
        right = _compile(node.right)
        op = node.op
        if op == "+":
            return lambda env: _checked(left(env) + right(env), "sum")
        if op == "-":
            return lambda env: _checked(left(env) - right(env), "difference")
        if op == "*":
            return lambda env: _checked(left(env) * right(env), "product")
        if op == "/":
            return lambda env: divide(left(env), right(env))
        if op == "^":
            return lambda env: power(left(env), right(env))
        raise ValueError(f"unknown operator {op!r}")

    if isinstance(node, Call):
        impl = FUNCTIONS[node.name][1]
        args = [_compile(arg) for arg in node.args]
        if len(args) == 1:
            arg = args[0]
            return lambda env: impl(arg(env))
        return lambda env: impl(*[a(env) for a in args])

    raise TypeError(f"unknown node {node!r}")


def _to_sympy(node):
    if isinstance(node, Constant):
        value = node.value
        if value.is_integer():
            return sympy.Integer(int(value))
        if value == math.pi:
            return sympy.pi
        if value == math.e:
            return sympy.E
        return sympy.Float(value)
    if isinstance(node, Variable):
        return _SYMBOLS[node.name]
    if isinstance(node, UnaryOp):
        return -_to_sympy(node.operand)
    if isinstance(node, BinaryOp):
        left = _to_sympy(node.left)
        right = _to_sympy(node.right)
        if node.op == "+":
            return sympy.Add(left, right)
        if node.op == "-":
            return sympy.Add(left, -right)
        if node.op == "*":
            return sympy.Mul(left, right)
        if node.op == "/":
            return sympy.Mul(left, sympy.Pow(right, -1))
        return sympy.Pow(left, right)
    if isinstance(node, Call):
        return _SYMPY_FUNCTIONS[node.name](*[_to_sympy(arg) for arg in node.args])
    raise TypeError(f"unknown node {node!r}")


def _variables(node, found):
    if isinstance(node, Variable):
        found.add(node.name)
    elif isinstance(node, UnaryOp):
        _variables(node.operand, found)
    elif isinstance(node, BinaryOp):
        _variables(node.left, found)
        _variables(node.right, found)
    elif isinstance(node, Call):
        for arg in node.args:
            _variables(arg, found)
    return found


class Expression:
    """
    Parsed, immutable mathematical expression of ``x`` (and optionally ``y``).

    Parameters
    ----------
    text : str
        Expression source, e.g. ``"2sin(x) - 3cos(4x)"``.

    Attributes
    ----------
    text : str
        Original text.
    tree : tuple
        Node tree (Constant, Variable, UnaryOp, BinaryOp, Call).
    variables : frozenset
        Variables referenced by the expression.
    arity : int
        2 when ``y`` appears, 1 otherwise.

    Notes
    -----
    - Evaluation raises :class:`DomainError` instead of returning NaN or Inf.
    - Expressions of arity 1 may still be called with two arguments; ``y`` is
      ignored.

    Examples
    --------
    >>> f = Expression("x^2 + 1")
    >>> f(2.0)
    5.0
    >>> Expression("x*y")(2.0, 3.0)
    6.0
    """
    __slots__ = ("_text", "_tree", "_fn", "_variables")

    def __init__(self, text: str):
        tree = parse_tree(text)
        object.__setattr__(self, "_text", text)
        object.__setattr__(self, "_tree", tree)
        object.__setattr__(self, "_fn", _compile(tree))
        object.__setattr__(self, "_variables", frozenset(_variables(tree, set())))

    def __setattr__(self, name, value):
        raise AttributeError("Expression is immutable")

    @property
    def text(self):
        return self._text

    @property
    def tree(self):
        return self._tree

    @property
    def variables(self):
        return self._variables

    @property
    def arity(self):
        return 2 if "y" in self._variables else 1

    def evaluate(self, x: float, y: float = None) -> float:
        if y is None and self.arity == 2:
            raise TypeError(f"expression {self._text!r} depends on y")
        env = {"x": float(x), "y": 0.0 if y is None else float(y)}
        try:
            value = self._fn(env)
        except (OverflowError, ZeroDivisionError) as e:
            raise DomainError(str(e)) from None
        except ValueError as e:
            raise DomainError(str(e)) from None
        if not math.isfinite(value):
            raise DomainError(f"{self._text!r} is not finite at x={x}, y={y}")
        return value

    __call__ = evaluate

    def to_sympy(self):
        """Return the expression as a sympy object over real symbols ``x``, ``y``."""
        return _to_sympy(self._tree)

    def latex(self) -> str:
        return sympy.latex(self.to_sympy())

    def derivative(self, var: str = "x"):
        """
        Symbolic partial derivative compiled to a callable.

        The returned callable takes the same arguments as the expression and
        raises :class:`DomainError` where the derivative is undefined.
        """
        if var not in _SYMBOLS:
            raise ValueError(f"unknown variable {var!r}")
        x, y = _SYMBOLS["x"], _SYMBOLS["y"]
        d = sympy.diff(self.to_sympy(), _SYMBOLS[var])
        fn = sympy.lambdify((x, y), d, modules="math")

        def derivative(x_value, y_value=0.0):
            try:
                value = float(fn(x_value, y_value))
            except (ValueError, ZeroDivisionError, OverflowError, TypeError) as e:
                raise DomainError(str(e)) from None
            if not math.isfinite(value):
                raise DomainError(f"derivative is not finite at x={x_value}")
            return value

        return derivative

    def __eq__(self, other):
        return isinstance(other, Expression) and self._tree == other._tree

    def __hash__(self):
        return hash(self._tree)

    def __repr__(self):
        return f"Expression({self._text!r})"


def parse(text: str) -> Expression:
    """Parse ``text`` into an :class:`Expression`. Raises :class:`ParseError`."""
    return Expression(text)


def evaluate(expr: Expression, x: float, y: float = None) -> float:
    return expr.evaluate(x, y)


def as_function(f):
    """
    Accept expression text, an :class:`Expression` or a Python callable.

    Returns a callable; plain callables are wrapped so that NaN/Inf results
    and arithmetic faults surface as :class:`DomainError`.
    """
    if isinstance(f, Expression):
        return f
    if isinstance(f, str):
        return Expression(f)
    if not callable(f):
        raise TypeError(f"expected expression text or a callable, got {type(f).__name__}")

    def wrapped(*args):
        try:
            value = float(f(*args))
        except (OverflowError, ZeroDivisionError, ValueError) as e:
            raise DomainError(str(e)) from None
        if not math.isfinite(value):
            raise DomainError(f"function is not finite at {args}")
        return value

    return wrapped
