from ._spline import Spline, build_spline
