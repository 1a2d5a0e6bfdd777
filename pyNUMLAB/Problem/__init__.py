from ._problem import FunctionProblem, Problem, central_gradient
from .Penalty import PenaltyProblem
