from .commons import Solver
from ._solvers import GaussianElimination, ConjugateGradient, TridiagonalSolver, cg
