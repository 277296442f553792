"""Finite-difference operators on a non-uniform altitude grid.

All operators act on a single stream's altitude profile [n_z] and are
returned as Triplets in local indices. The first-difference operators
already carry the Crank-Nicolson factor 1/2, so the implicit side uses
+mu*D and the explicit side -mu*D.
"""

import numpy as np

from estream.config.enums import StreamDirection
from estream.core.grid import AltitudeGrid
from estream.operators.triplets import Triplets


def upwind_derivative(grid: AltitudeGrid, direction: StreamDirection) -> Triplets:
    """Upwind first difference (halved) for one propagation direction.

    DOWN (mu < 0): forward-biased, row i uses points (i, i+1) with the
        spacing to the point above.
    UP (mu > 0): backward-biased, row i uses points (i-1, i) with the
        spacing to the point below.

    The last row of the forward operator and the first row of the
    backward operator have no neighbour inside the grid; their diagonal
    entry uses the replicated ghost spacing.
    """
    if direction is StreamDirection.DOWN:
        h = grid.forward_spacing()
        diag = Triplets.diagonal(-1.0 / (2.0 * h))
        upper = Triplets.diagonal(1.0 / (2.0 * h[:-1]), offset=1)
        return diag + upper

    h = grid.backward_spacing()
    lower = Triplets.diagonal(-1.0 / (2.0 * h[1:]), offset=-1)
    diag = Triplets.diagonal(1.0 / (2.0 * h))
    return lower + diag


def second_difference(grid: AltitudeGrid) -> Triplets:
    """Three-point second difference on a non-uniform grid.

    Interior row i:
        2 / (h_m (h_m + h_p)) f[i-1] - 2 / (h_m h_p) f[i] + 2 / (h_p (h_m + h_p)) f[i+1]
    with h_m = z[i] - z[i-1], h_p = z[i+1] - z[i]. The end rows use the
    ghost spacings and drop the neighbour outside the grid.

    The diagonal entry of the lowest row is suppressed so the operator
    never competes with the fixed value held there.
    """
    h_m = grid.backward_spacing()
    h_p = grid.forward_spacing()

    lower = 2.0 / (h_m * (h_m + h_p))
    centre = -2.0 / (h_m * h_p)
    upper = 2.0 / (h_p * (h_m + h_p))

    operator = (
        Triplets.diagonal(lower[1:], offset=-1)
        + Triplets.diagonal(centre)
        + Triplets.diagonal(upper[:-1], offset=1)
    )
    # TODO: the top row keeps its diagonal; confirm whether it should be
    # suppressed like the bottom one.
    return operator.without_entries(0, 0)


def time_derivative(n_z: int, velocity: float, dt: float) -> Triplets:
    """Diagonal 1 / (v dt) term of (1/v) dI/dt."""
    return Triplets.diagonal(np.full(n_z, 1.0 / (velocity * dt)))
