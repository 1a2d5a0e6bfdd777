import numpy as np

from .._errors import OutOfRange


class Grid:
    """
    Tabulated function on strictly increasing nodes.

    Parameters
    ----------
    nodes : array_like
        Node abscissae, shape (n,), strictly increasing
    values : array_like
        Function values at the nodes, shape (n,)

    Notes
    -----
    - Calling the grid interpolates linearly between nodes
    - Points within a relative 1e-9 of the node span outside the
      range snap to the end values; anything further raises OutOfRange
    """
    def __init__(self, nodes, values):
        nodes = np.array(nodes, dtype=np.float64)
        values = np.array(values, dtype=np.float64)
        if nodes.ndim != 1 or nodes.shape != values.shape:
            raise ValueError("nodes and values must be 1D arrays of equal length")
        if nodes.shape[0] < 2:
            raise ValueError("a grid needs at least 2 nodes")
        if np.any(np.diff(nodes) <= 0):
            raise ValueError("grid nodes must be strictly increasing")
        nodes.flags.writeable = False
        values.flags.writeable = False
        self.nodes = nodes
        self.values = values
        self.eps = 1e-9 * (nodes[-1] - nodes[0])

    def __len__(self):
        return self.nodes.shape[0]

    def __call__(self, x):
        lower, upper = self.nodes[0], self.nodes[-1]
        if x < lower - self.eps or x > upper + self.eps:
            raise OutOfRange(x, lower, upper)
        return float(np.interp(x, self.nodes, self.values))

    def sample(self, resolution=200):
        xs = np.linspace(self.nodes[0], self.nodes[-1], resolution + 1)
        return xs, np.interp(xs, self.nodes, self.values)

    def to_table(self):
        return list(zip(self.nodes.tolist(), self.values.tolist()))

    def __repr__(self):
        return f"Grid(n={len(self)}, range=[{self.nodes[0]}, {self.nodes[-1]}])"
