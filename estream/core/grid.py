"""Altitude grid along the field-aligned column.

The grid is an ordered, strictly increasing sequence of altitudes (or
distance along the magnetic field line for tilted columns). Spacing does
not have to be uniform; the difference operators are built from the
local spacing.
"""

from __future__ import annotations

import numpy as np
from dataclasses import dataclass, field

from estream.config.defaults import MIN_ALTITUDE_POINTS
from estream.exceptions import ConfigurationError


@dataclass(frozen=True)
class AltitudeGrid:
    """Strictly increasing altitude coordinates [m].

    Attributes:
        z: Altitudes [n_z], strictly increasing
        dz: Interval lengths z[i+1] - z[i] [n_z - 1]
    """

    z: np.ndarray
    dz: np.ndarray = field(init=False, repr=False)

    def __post_init__(self):
        """Validate grid and derive spacings."""
        z = np.asarray(self.z, dtype=float).ravel()

        if z.size < MIN_ALTITUDE_POINTS:
            raise ConfigurationError(
                f"Altitude grid needs at least {MIN_ALTITUDE_POINTS} points, "
                f"got {z.size}"
            )
        if not np.all(np.isfinite(z)):
            raise ConfigurationError("Altitude grid contains non-finite values")

        dz = np.diff(z)
        if np.any(dz <= 0):
            i_bad = int(np.argmax(dz <= 0))
            raise ConfigurationError(
                f"Altitude grid must be strictly increasing; "
                f"z[{i_bad}]={z[i_bad]:g} >= z[{i_bad + 1}]={z[i_bad + 1]:g}"
            )

        z.setflags(write=False)
        dz.setflags(write=False)
        object.__setattr__(self, "z", z)
        object.__setattr__(self, "dz", dz)

    @property
    def n_z(self) -> int:
        """Number of altitude points."""
        return self.z.size

    @property
    def dz_min(self) -> float:
        """Smallest interval, used for the Courant number."""
        return float(self.dz.min())

    @property
    def is_uniform(self) -> bool:
        return bool(np.allclose(self.dz, self.dz[0]))

    @property
    def bottom(self) -> float:
        return float(self.z[0])

    @property
    def top(self) -> float:
        return float(self.z[-1])

    def forward_spacing(self) -> np.ndarray:
        """Spacing to the next point above, [n_z].

        A ghost point one interval above the top replicates the topmost
        interval so the last row has a spacing too.
        """
        return np.append(self.dz, self.dz[-1])

    def backward_spacing(self) -> np.ndarray:
        """Spacing to the next point below, [n_z].

        A ghost point one interval below the bottom replicates the lowest
        interval so the first row has a spacing too.
        """
        return np.insert(self.dz, 0, self.dz[0])


def as_grid(grid) -> AltitudeGrid:
    """Accept an AltitudeGrid or any 1D sequence of altitudes."""
    if isinstance(grid, AltitudeGrid):
        return grid
    return AltitudeGrid(np.asarray(grid, dtype=float))
