"""Discrete pitch-angle streams.

Each stream carries the mean cosine of pitch angle mu of its band. The
sign of mu fixes the propagation direction and therefore the upwind
stencil and the kind of condition imposed at the top of the column:
mu < 0 streams move down, mu > 0 streams move up.
"""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass
from typing import Optional, Sequence

from estream.config.enums import StreamDirection
from estream.exceptions import ConfigurationError


@dataclass(frozen=True)
class StreamSet:
    """Ordered set of pitch-angle streams.

    Attributes:
        mu: Mean cosine of pitch angle per stream [n_mu], nonzero
        solid_angle: Solid angle of each stream's band [sr] [n_mu], optional
        pitch_angle_limits: Band edges in degrees [n_mu + 1], optional
    """

    mu: np.ndarray
    solid_angle: Optional[np.ndarray] = None
    pitch_angle_limits: Optional[np.ndarray] = None

    def __post_init__(self):
        mu = np.atleast_1d(np.asarray(self.mu, dtype=float)).ravel()

        if mu.size < 1:
            raise ConfigurationError("At least one stream is required")
        if not np.all(np.isfinite(mu)):
            raise ConfigurationError(f"Directional cosines must be finite, got {mu}")
        if np.any(mu == 0):
            raise ConfigurationError(
                f"Directional cosine of exactly zero is not supported "
                f"(streams {np.flatnonzero(mu == 0).tolist()})"
            )
        if np.any(np.abs(mu) > 1):
            raise ConfigurationError(f"Directional cosines must lie in [-1, 1], got {mu}")
        mu.setflags(write=False)
        object.__setattr__(self, "mu", mu)

        if self.solid_angle is not None:
            solid_angle = np.asarray(self.solid_angle, dtype=float).ravel()
            if solid_angle.shape != mu.shape:
                raise ConfigurationError(
                    f"solid_angle has {solid_angle.size} entries for {mu.size} streams"
                )
            if np.any(solid_angle <= 0):
                raise ConfigurationError("Stream solid angles must be positive")
            solid_angle.setflags(write=False)
            object.__setattr__(self, "solid_angle", solid_angle)

        if self.pitch_angle_limits is not None:
            limits = np.asarray(self.pitch_angle_limits, dtype=float).ravel()
            if limits.size != mu.size + 1:
                raise ConfigurationError(
                    f"pitch_angle_limits needs {mu.size + 1} edges, got {limits.size}"
                )
            limits.setflags(write=False)
            object.__setattr__(self, "pitch_angle_limits", limits)

    @property
    def n_mu(self) -> int:
        """Number of streams."""
        return self.mu.size

    @property
    def is_down(self) -> np.ndarray:
        """Boolean mask of downward-going streams (mu < 0)."""
        return self.mu < 0

    @property
    def is_up(self) -> np.ndarray:
        """Boolean mask of upward-going streams (mu > 0)."""
        return self.mu > 0

    def direction(self, i_mu: int) -> StreamDirection:
        return StreamDirection.DOWN if self.mu[i_mu] < 0 else StreamDirection.UP

    def permuted(self, order: Sequence[int]) -> "StreamSet":
        """Return the streams reordered by ``order``."""
        order = np.asarray(order, dtype=int)
        if sorted(order.tolist()) != list(range(self.n_mu)):
            raise ConfigurationError(f"{order.tolist()} is not a permutation of the streams")
        solid_angle = None if self.solid_angle is None else self.solid_angle[order]
        # Band edges lose their meaning once the bands are reordered
        return StreamSet(mu=self.mu[order], solid_angle=solid_angle)

    @classmethod
    def from_pitch_angle_limits(cls, limits_deg: Sequence[float]) -> "StreamSet":
        """Build streams from pitch-angle band edges in degrees.

        Each stream gets the solid-angle weighted mean cosine over its band
        [a, b] and the band's solid angle 2*pi*(cos a - cos b).

        Example:
            >>> streams = StreamSet.from_pitch_angle_limits([180, 90, 0])
            >>> streams.mu
            array([-0.5,  0.5])
        """
        limits = np.asarray(limits_deg, dtype=float).ravel()
        if limits.size < 2:
            raise ConfigurationError("Need at least two pitch-angle limits")
        if np.any(limits < 0) or np.any(limits > 180):
            raise ConfigurationError("Pitch-angle limits must lie within [0, 180] degrees")

        a = np.deg2rad(limits[:-1])
        b = np.deg2rad(limits[1:])
        d_cos = np.cos(a) - np.cos(b)
        if np.any(d_cos == 0):
            raise ConfigurationError("Pitch-angle bands must have nonzero width")

        mu = 0.5 * (np.sin(b) ** 2 - np.sin(a) ** 2) / d_cos
        solid_angle = 2 * np.pi * np.abs(d_cos)
        return cls(mu=mu, solid_angle=solid_angle, pitch_angle_limits=limits)


def as_streams(streams) -> StreamSet:
    """Accept a StreamSet or a sequence of directional cosines."""
    if isinstance(streams, StreamSet):
        return streams
    return StreamSet(np.asarray(streams, dtype=float))
