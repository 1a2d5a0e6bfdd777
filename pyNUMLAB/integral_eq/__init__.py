from ._grid import Grid
from ._fredholm import FredholmFirstKind, FredholmSecondKind, IntegralEquationResult, LinearMethod
from ._volterra import VolterraSecondKind
