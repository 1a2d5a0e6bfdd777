from ._interval import Interval
from ._ops import gauss_eliminate, thomas, trapezoid_weights
