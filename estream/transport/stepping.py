"""Step-size selection for the implicit time integration.

The caller's time axis is refined by a power-of-two factor until the
Courant number v*dt/dz_min is within the stability bound. Outputs are
taken every ``factor`` internal steps so they land back on the caller's
samples.
"""

from __future__ import annotations

import logging

import numpy as np

from estream.config.defaults import DEFAULT_CFL_MAX, DEFAULT_MAX_REFINEMENTS
from estream.exceptions import ConfigurationError, StabilityError

logger = logging.getLogger(__name__)


def courant_number(velocity: float, dt: float, dz: float) -> float:
    """C = v * dt / dz."""
    return velocity * dt / dz


def select_refinement(
    velocity: float,
    dz: float,
    dt: float,
    cfl_max: float = DEFAULT_CFL_MAX,
    max_refinements: int = DEFAULT_MAX_REFINEMENTS,
) -> int:
    """Choose the smallest power-of-two refinement meeting the Courant bound.

    Args:
        velocity: Electron speed [m/s]
        dz: Smallest grid spacing [m]
        dt: Caller's time step [s]
        cfl_max: Largest accepted Courant number
        max_refinements: Largest allowed number of doublings

    Returns:
        Refinement factor 2**k with 0 <= k <= max_refinements

    Raises:
        StabilityError: If even 2**max_refinements sub-steps are not enough

    Example:
        >>> select_refinement(1e7, 1000.0, 1e-4)
        1
        >>> select_refinement(1e8, 10.0, 1e-4)
        16
    """
    cfl = courant_number(velocity, dt, dz)
    for k in range(max_refinements + 1):
        factor = 2 ** k
        if cfl / factor <= cfl_max:
            return factor

    raise StabilityError(
        cfl=cfl / 2 ** max_refinements,
        cfl_max=cfl_max,
        max_refinements=max_refinements,
    )


def check_time_axis(time_axis) -> np.ndarray:
    """Validate an output time axis: at least two samples, uniform, increasing."""
    t = np.asarray(time_axis, dtype=float).ravel()
    if t.size < 2:
        raise ConfigurationError(f"Time axis needs at least 2 samples, got {t.size}")
    if not np.all(np.isfinite(t)):
        raise ConfigurationError("Time axis contains non-finite values")

    steps = np.diff(t)
    if np.any(steps <= 0):
        raise ConfigurationError("Time axis must be strictly increasing")
    if not np.allclose(steps, steps[0], rtol=1e-6, atol=0.0):
        raise ConfigurationError(
            f"Time axis must have a uniform step; steps range "
            f"{steps.min():.6g} - {steps.max():.6g} s"
        )
    return t


def refine_time_axis(time_axis: np.ndarray, factor: int) -> np.ndarray:
    """Internal time axis with ``factor`` sub-steps per caller step.

    The result has (n_t - 1) * factor + 1 samples and contains every
    caller sample at index k * factor.
    """
    t = np.asarray(time_axis, dtype=float)
    if factor == 1:
        return t.copy()
    return np.linspace(t[0], t[-1], (t.size - 1) * factor + 1)
