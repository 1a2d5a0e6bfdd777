"""pyNUMLAB public package.

This package exposes a numerical-methods engine working on user supplied
functions given as expression text or Python callables: area enclosed
between three curves, Fredholm and Volterra integral equations, gradient and
penalty minimization of functions of two variables, and natural cubic
splines. Each method lives in its own subpackage; the most common entry
points and the error types are re-exported here.

Examples
--------
>>> from pyNUMLAB import parse, AreaSolver, minimize, build_spline
>>> AreaSolver(target_error=1e-8).solve("x", "-x", "1", (-2, 2)).area
>>> minimize("(x-1)^2 + (y-2)^2", start=(0, 0)).point
"""

from ._errors import (
    Cancelled,
    Diagnostic,
    Diverged,
    DomainError,
    NoIntersection,
    NumlabError,
    OutOfRange,
    ParseError,
    SingularMatrix,
    TooFewPoints,
    UnsortedPoints,
)
from ._sampling import sample_function
from .area import AreaResult, AreaSolver, area_between
from .core import Interval
from .integral_eq import (
    FredholmFirstKind,
    FredholmSecondKind,
    Grid,
    IntegralEquationResult,
    LinearMethod,
    VolterraSecondKind,
)
from .mathparse import Expression, evaluate, parse
from .Optimizers import GradientDescent, LineSearch, Mode, PenaltyMethod, minimize
from .quadrature import AdaptiveSimpson, QuadratureResult, integrate
from .spline import Spline, build_spline
