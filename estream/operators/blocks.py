"""Crank-Nicolson blocks of the multi-stream transport system.

The time-dependent transport equation for stream i,

    1/v dI_i/dt = -mu_i dI_i/dz - A I_i + sum_j B_ij I_j + D_i d2I_i/dz2 + Q_i,

is discretised as

    Mlhs I(t + dt) = Mrhs I(t) + q.

Each stream contributes one row of blocks: its self block on the
diagonal and one coupling block per other stream. Both are pure
functions of their inputs and return (lhs, rhs) Triplets in local
altitude indices.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from estream.config.enums import StreamDirection
from estream.core.grid import AltitudeGrid
from estream.operators.differencing import (
    second_difference,
    time_derivative,
    upwind_derivative,
)
from estream.operators.triplets import Triplets


def boundary_rows(n_z: int) -> np.ndarray:
    """Local rows overwritten by boundary conditions (bottom and top)."""
    return np.array([0, n_z - 1])


def self_block(
    grid: AltitudeGrid,
    mu: float,
    velocity: float,
    dt: float,
    loss: np.ndarray,
    self_scatter: np.ndarray,
    diffusion: float = 0.0,
) -> Tuple[Triplets, Triplets]:
    """Diagonal block of stream i with its boundary rows.

    Args:
        grid: Altitude grid
        mu: Directional cosine of the stream (nonzero)
        velocity: Electron speed [m/s]
        dt: Internal time step [s]
        loss: Total removal rate A [n_z] [1/m]
        self_scatter: Elastic scattering from the stream into itself B_ii [n_z] [1/m]
        diffusion: Velocity-diffusion coefficient of the stream

    Returns:
        (lhs, rhs) Triplets of shape [n_z, n_z]

    Interior rows:
        lhs =  mu*Dz + 1/(v dt) + A/2 - D/2 d2 - B_ii/2
        rhs = -mu*Dz + 1/(v dt) - A/2 + D/2 d2 + B_ii/2

    Boundary rows:
        bottom, all streams: lhs = [1, 0, ...], rhs = 0 (fixed value)
        top, downward:       lhs = [..., 0, 1], rhs = 0 (fixed value)
        top, upward:         lhs = [..., -1, 1], rhs = 0 (zero gradient)
    """
    n_z = grid.n_z
    direction = StreamDirection.DOWN if mu < 0 else StreamDirection.UP

    advection = upwind_derivative(grid, direction).scaled(mu)
    temporal = time_derivative(n_z, velocity, dt)
    half_net_loss = Triplets.diagonal((np.asarray(loss) - np.asarray(self_scatter)) / 2.0)

    lhs = advection + temporal + half_net_loss
    rhs = -advection + temporal - half_net_loss

    if diffusion != 0.0:
        half_diffusion = second_difference(grid).scaled(diffusion / 2.0)
        lhs = lhs - half_diffusion
        rhs = rhs + half_diffusion

    edges = boundary_rows(n_z)
    lhs = lhs.without_rows(edges)
    rhs = rhs.without_rows(edges)

    top = n_z - 1
    if direction is StreamDirection.DOWN:
        fixed = Triplets(edges, edges, [1.0, 1.0])
    else:
        fixed = Triplets([0, top, top], [0, top - 1, top], [1.0, -1.0, 1.0])

    return lhs + fixed, rhs


def coupling_block(scatter: np.ndarray) -> Tuple[Triplets, Triplets]:
    """Off-diagonal block: elastic scattering from stream j into stream i.

    Args:
        scatter: B_ij along altitude [n_z] [1/m]

    Returns:
        (lhs, rhs) Triplets with -B/2 and +B/2 on the diagonal; the
        boundary rows carry no coupling.
    """
    scatter = np.asarray(scatter, dtype=float)
    half = Triplets.diagonal(scatter / 2.0)
    edges = boundary_rows(scatter.size)
    half = half.without_rows(edges)
    return -half, half
