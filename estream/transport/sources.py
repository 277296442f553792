"""Right-hand-side inhomogeneity: boundary values and source term.

For the step inside caller interval k the inhomogeneous part of the
right-hand side is the mean of the source term at samples k and k + 1,
with the boundary rows of every stream replaced by the boundary values:
zero at the bottom, the prescribed flux at the top of downward streams
and zero (the gradient target) at the top of upward streams.
"""

from __future__ import annotations

import numpy as np

from estream.core.grid import AltitudeGrid
from estream.core.streams import StreamSet
from estream.exceptions import ConfigurationError


def normalize_boundary_flux(boundary_flux, streams: StreamSet, n_t: int) -> np.ndarray:
    """Coerce the top boundary series to an array [n_mu, n_t].

    Accepts an array [n_mu, n_t] or a sequence of n_mu series of length
    n_t. Values given for upward streams are replaced by zero.
    """
    if isinstance(boundary_flux, (list, tuple)):
        if len(boundary_flux) != streams.n_mu:
            raise ConfigurationError(
                f"Boundary flux has {len(boundary_flux)} series for "
                f"{streams.n_mu} streams"
            )
        series = [np.asarray(s, dtype=float).ravel() for s in boundary_flux]
        lengths = {s.size for s in series}
        if len(lengths) != 1:
            raise ConfigurationError(
                f"Boundary flux series differ in length: {sorted(lengths)}"
            )
        values = np.vstack(series)
    else:
        values = np.array(boundary_flux, dtype=float)
        if values.ndim == 1 and streams.n_mu == 1:
            values = values[np.newaxis, :]

    if values.ndim != 2 or values.shape[0] != streams.n_mu:
        raise ConfigurationError(
            f"Boundary flux shape {values.shape} does not match "
            f"{streams.n_mu} streams"
        )
    if values.shape[1] != n_t:
        raise ConfigurationError(
            f"Boundary flux has {values.shape[1]} time samples, time axis has {n_t}"
        )
    if not np.all(np.isfinite(values)):
        raise ConfigurationError("Boundary flux contains non-finite values")

    values[streams.is_up, :] = 0.0
    return values


def normalize_source_term(source_term, n_mu: int, n_z: int, n_t: int) -> np.ndarray:
    """Coerce the source term to an array [n_mu*n_z, n_t]; None means zero."""
    if source_term is None:
        return np.zeros((n_mu * n_z, n_t))

    values = np.asarray(source_term, dtype=float)
    if values.shape != (n_mu * n_z, n_t):
        raise ConfigurationError(
            f"Source term shape {values.shape} does not match "
            f"(n_mu * n_z, n_t) = ({n_mu * n_z}, {n_t})"
        )
    if not np.all(np.isfinite(values)):
        raise ConfigurationError("Source term contains non-finite values")
    return values


def boundary_row_indices(n_mu: int, n_z: int):
    """Stacked rows of the bottom and top altitude of every stream."""
    offsets = np.arange(n_mu) * n_z
    return offsets, offsets + n_z - 1


def interval_inhomogeneity(
    source: np.ndarray,
    boundary: np.ndarray,
    grid: AltitudeGrid,
    streams: StreamSet,
) -> np.ndarray:
    """Inhomogeneous right-hand side for every caller interval.

    Args:
        source: Source term [n_mu*n_z, n_t]
        boundary: Top boundary flux [n_mu, n_t], zero for upward streams

    Returns:
        Array [n_t - 1, n_mu*n_z]; row k applies to every internal step
        inside caller interval k.
    """
    q = 0.5 * (source[:, :-1] + source[:, 1:])
    q = q.T.copy()

    bottom, top = boundary_row_indices(streams.n_mu, grid.n_z)
    q[:, bottom] = 0.0
    q[:, top] = boundary[:, :-1].T
    return q
