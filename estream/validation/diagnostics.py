"""Diagnostics for transport results.

Checks used to verify a solve: total flux bookkeeping, the steady-state
residual of the Crank-Nicolson system, enforcement of the boundary
conditions and relative norms between two flux histories.
"""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass
from typing import Optional

from scipy.integrate import trapezoid

from estream.operators.assembly import CrankNicolsonSystem


@dataclass
class BoundaryReport:
    """Worst boundary-condition violations over a flux history.

    Attributes:
        bottom_max: Largest |flux| at the lowest altitude (all streams, t > t0)
        top_down_max: Largest |flux - prescribed| at the top of downward streams
        top_up_gradient_max: Largest |I[top] - I[top-1]| of upward streams
    """

    bottom_max: float
    top_down_max: float
    top_up_gradient_max: float

    def is_valid(self, atol: float = 1e-9) -> bool:
        return bool(
            self.bottom_max <= atol
            and self.top_down_max <= atol
            and self.top_up_gradient_max <= atol
        )


def total_flux(result, weights: Optional[np.ndarray] = None) -> np.ndarray:
    """Sum of flux over altitude and streams at every output time [n_t].

    Args:
        result: TransportResult
        weights: Optional per-stream weights [n_mu] (e.g. solid angles)
    """
    cube = result.as_cube()
    if weights is not None:
        cube = cube * np.asarray(weights, dtype=float)[np.newaxis, :, np.newaxis]
    return cube.sum(axis=(1, 2))


def column_content(result) -> np.ndarray:
    """Electron content of the column per stream, integral of I/v dz [n_mu, n_t].

    Uses the trapezoidal rule on the (possibly non-uniform) grid.
    """
    cube = result.as_cube()
    content = trapezoid(cube, result.grid.z, axis=2) / result.velocity
    return content.T


def steady_state_residual(
    system: CrankNicolsonSystem,
    state: np.ndarray,
    inhomogeneity: np.ndarray,
) -> float:
    """Relative residual of Mlhs x = Mrhs x + q for a candidate fixed point."""
    state = np.asarray(state, dtype=float)
    lhs = system.lhs @ state
    rhs = system.rhs @ state + inhomogeneity
    scale = max(np.linalg.norm(lhs), np.linalg.norm(rhs), 1e-300)
    return float(np.linalg.norm(lhs - rhs) / scale)


def check_boundaries(result, boundary_flux: np.ndarray) -> BoundaryReport:
    """Measure boundary enforcement for every output time after the first.

    Args:
        result: TransportResult
        boundary_flux: Prescribed top flux [n_mu, n_t]; for column k the
            value in force is the one at sample k - 1
    """
    cube = result.as_cube()[1:]
    down = result.streams.is_down
    up = result.streams.is_up
    prescribed = np.asarray(boundary_flux, dtype=float)[:, :-1].T

    bottom = np.abs(cube[:, :, 0]).max()
    top_down = 0.0
    if down.any():
        top_down = np.abs(cube[:, down, -1] - prescribed[:, down]).max()
    top_up = 0.0
    if up.any():
        top_up = np.abs(cube[:, up, -1] - cube[:, up, -2]).max()

    return BoundaryReport(float(bottom), float(top_down), float(top_up))


def relative_l2(flux_eval: np.ndarray, flux_ref: np.ndarray) -> float:
    """||F - F_ref||_2 / ||F_ref||_2 (0 when the reference vanishes)."""
    diff = np.asarray(flux_eval) - np.asarray(flux_ref)
    denom = np.sqrt(np.sum(np.asarray(flux_ref) ** 2))
    if denom < 1e-300:
        return 0.0
    return float(np.sqrt(np.sum(diff ** 2)) / denom)


def relative_linf(flux_eval: np.ndarray, flux_ref: np.ndarray) -> float:
    """max|F - F_ref| / max|F_ref| (0 when the reference vanishes)."""
    diff = np.asarray(flux_eval) - np.asarray(flux_ref)
    denom = np.max(np.abs(flux_ref))
    if denom < 1e-300:
        return 0.0
    return float(np.max(np.abs(diff)) / denom)
