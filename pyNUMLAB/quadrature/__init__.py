from ._simpson import AdaptiveSimpson, QuadratureResult, integrate
