"""Assembly of the stacked Crank-Nicolson system.

Block (i, j) covers rows i*n_z .. (i+1)*n_z - 1 and the same range of
columns for j, matching the stream-major state vector.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from scipy import sparse

from estream.core.grid import AltitudeGrid
from estream.core.streams import StreamSet
from estream.operators.blocks import coupling_block, self_block
from estream.operators.triplets import Triplets

logger = logging.getLogger(__name__)


@dataclass
class CrankNicolsonSystem:
    """Implicit and explicit matrices for one energy and time step.

    Attributes:
        lhs: Implicit matrix Mlhs [(n_mu*n_z), (n_mu*n_z)], CSC
        rhs: Explicit matrix Mrhs [(n_mu*n_z), (n_mu*n_z)], CSR
        dt: Internal time step the matrices were built for [s]
        velocity: Electron speed [m/s]
    """

    lhs: sparse.csc_matrix
    rhs: sparse.csr_matrix
    dt: float
    velocity: float

    @property
    def size(self) -> int:
        return self.lhs.shape[0]


def assemble_system(
    grid: AltitudeGrid,
    streams: StreamSet,
    velocity: float,
    dt: float,
    loss: np.ndarray,
    scatter: np.ndarray,
    diffusion: np.ndarray,
) -> CrankNicolsonSystem:
    """Build Mlhs and Mrhs for all streams.

    Args:
        grid: Altitude grid
        streams: Stream set
        velocity: Electron speed [m/s]
        dt: Internal time step [s]
        loss: Total removal rate [n_z]
        scatter: Stream-to-stream elastic scattering [n_z, n_mu(dest), n_mu(src)]
        diffusion: Per-stream diffusion coefficient [n_mu]

    Returns:
        CrankNicolsonSystem with sparse matrices
    """
    n_z = grid.n_z
    n_mu = streams.n_mu
    lhs_parts = []
    rhs_parts = []

    for i in range(n_mu):
        for j in range(n_mu):
            if i == j:
                lhs, rhs = self_block(
                    grid,
                    mu=float(streams.mu[i]),
                    velocity=velocity,
                    dt=dt,
                    loss=loss,
                    self_scatter=scatter[:, i, i],
                    diffusion=float(diffusion[i]),
                )
            else:
                lhs, rhs = coupling_block(scatter[:, i, j])
            lhs_parts.append(lhs.shifted(i * n_z, j * n_z))
            rhs_parts.append(rhs.shifted(i * n_z, j * n_z))

    shape = (n_mu * n_z, n_mu * n_z)
    lhs_matrix = Triplets.concatenate(lhs_parts).to_sparse(shape, format="csc")
    rhs_matrix = Triplets.concatenate(rhs_parts).to_sparse(shape, format="csr")
    lhs_matrix.eliminate_zeros()
    rhs_matrix.eliminate_zeros()

    logger.debug(
        f"Assembled {shape[0]}x{shape[1]} system: "
        f"nnz(lhs)={lhs_matrix.nnz}, nnz(rhs)={rhs_matrix.nnz}, dt={dt:.3e} s"
    )

    return CrankNicolsonSystem(lhs=lhs_matrix, rhs=rhs_matrix, dt=dt, velocity=velocity)
