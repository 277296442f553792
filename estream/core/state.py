"""Flux state container keyed by (stream, altitude).

The solver works on a stacked state vector, stream-major and
altitude-minor: [stream_0 at all z; stream_1 at all z; ...]. FluxState
owns that layout so the ordering is explicit and validated in one place
rather than implied by array shapes scattered around the code.
"""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass
from typing import Sequence, Tuple

from estream.exceptions import ConfigurationError


@dataclass
class FluxState:
    """Electron number flux for every (stream, altitude) pair at one instant.

    Attributes:
        flux: Flux array [n_mu, n_z] in #/m^2/s per stream (not yet
            divided by solid angle or energy-bin width)
    """

    flux: np.ndarray

    def __post_init__(self):
        flux = np.asarray(self.flux, dtype=float)
        if flux.ndim != 2:
            raise ConfigurationError(
                f"FluxState expects a [n_mu, n_z] array, got shape {flux.shape}"
            )
        self.flux = flux

    @property
    def n_mu(self) -> int:
        return self.flux.shape[0]

    @property
    def n_z(self) -> int:
        return self.flux.shape[1]

    def __getitem__(self, key: Tuple[int, int]) -> float:
        i_mu, i_z = key
        return float(self.flux[i_mu, i_z])

    def __setitem__(self, key: Tuple[int, int], value: float) -> None:
        i_mu, i_z = key
        self.flux[i_mu, i_z] = value

    def stream(self, i_mu: int) -> np.ndarray:
        """Altitude profile of one stream [n_z] (a view)."""
        return self.flux[i_mu]

    def as_vector(self) -> np.ndarray:
        """Stacked state vector [n_mu * n_z], stream-major."""
        return self.flux.reshape(-1).copy()

    def total(self) -> float:
        """Sum over all streams and altitudes."""
        return float(self.flux.sum())

    def copy(self) -> "FluxState":
        return FluxState(self.flux.copy())

    def permuted(self, order: Sequence[int]) -> "FluxState":
        """Return the state with its streams reordered by ``order``."""
        return FluxState(self.flux[np.asarray(order, dtype=int)])

    @classmethod
    def zeros(cls, n_mu: int, n_z: int) -> "FluxState":
        return cls(np.zeros((n_mu, n_z)))

    @classmethod
    def from_vector(cls, vector: np.ndarray, n_mu: int, n_z: int) -> "FluxState":
        """Unstack a stream-major state vector."""
        vector = np.asarray(vector, dtype=float).ravel()
        if vector.size != n_mu * n_z:
            raise ConfigurationError(
                f"State vector has {vector.size} entries, expected "
                f"n_mu * n_z = {n_mu} * {n_z} = {n_mu * n_z}"
            )
        return cls(vector.reshape(n_mu, n_z).copy())

    @classmethod
    def from_any(cls, value, n_mu: int, n_z: int) -> "FluxState":
        """Coerce the accepted initial-state forms into a FluxState.

        Accepted: FluxState, stacked vector [n_mu*n_z], array [n_mu, n_z],
        or a sequence of n_mu per-stream profiles of length n_z.
        """
        if isinstance(value, FluxState):
            state = value.copy()
        elif isinstance(value, (list, tuple)):
            if len(value) != n_mu:
                raise ConfigurationError(
                    f"Initial state has {len(value)} stream profiles for {n_mu} streams"
                )
            profiles = [np.asarray(p, dtype=float).ravel() for p in value]
            if any(p.size != n_z for p in profiles):
                raise ConfigurationError(
                    f"Every initial stream profile must have {n_z} altitudes"
                )
            state = cls(np.vstack(profiles))
        else:
            array = np.asarray(value, dtype=float)
            if array.ndim == 2 and array.shape == (n_mu, n_z):
                state = cls(array.copy())
            elif array.ndim == 1 or (array.ndim == 2 and 1 in array.shape):
                state = cls.from_vector(array, n_mu, n_z)
            else:
                raise ConfigurationError(
                    f"Initial state of shape {array.shape} does not match "
                    f"{n_mu} streams x {n_z} altitudes"
                )

        if state.flux.shape != (n_mu, n_z):
            raise ConfigurationError(
                f"Initial state shape {state.flux.shape} does not match "
                f"({n_mu}, {n_z})"
            )
        if not np.all(np.isfinite(state.flux)):
            raise ConfigurationError("Initial state contains non-finite values")
        return state


def stacked_index(i_mu: int, i_z: int, n_z: int) -> int:
    """Row of (stream, altitude) in the stacked state vector."""
    return i_mu * n_z + i_z
