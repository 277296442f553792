"""HDF5 persistence of transport results.

Layout:
    /flux_history   [(n_mu * n_z), n_t]
    /times          [n_t]
    /altitude       [n_z]
    /mu             [n_mu]
    /solid_angle    [n_mu]   (only when the streams carry it)
    attrs: velocity, refinement_factor, internal_dt, cfl, energy_eV (optional)
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import h5py
import numpy as np

from estream.core.grid import AltitudeGrid
from estream.core.streams import StreamSet
from estream.transport.solver import TransportResult

logger = logging.getLogger(__name__)


def save_result_hdf5(result: TransportResult, path, energy_eV: Optional[float] = None) -> Path:
    """Write a TransportResult to an HDF5 file.

    Args:
        result: Result to store
        path: Output file, overwritten if present
        energy_eV: Energy of the solve, stored as an attribute when given

    Returns:
        Path to output file
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with h5py.File(path, "w") as f:
        f.create_dataset("flux_history", data=result.flux_history, compression="gzip")
        f.create_dataset("times", data=result.times)
        f.create_dataset("altitude", data=result.grid.z)
        f.create_dataset("mu", data=result.streams.mu)
        if result.streams.solid_angle is not None:
            f.create_dataset("solid_angle", data=result.streams.solid_angle)

        f.attrs["velocity"] = result.velocity
        f.attrs["refinement_factor"] = result.refinement_factor
        f.attrs["internal_dt"] = result.internal_dt
        f.attrs["cfl"] = result.cfl
        if energy_eV is not None:
            f.attrs["energy_eV"] = float(energy_eV)

    logger.info(f"Saved flux history {result.flux_history.shape} to {path}")
    return path


def load_result_hdf5(path) -> Tuple[TransportResult, Optional[float]]:
    """Read a TransportResult written by save_result_hdf5.

    Returns:
        (result, energy_eV); energy_eV is None when it was not stored
    """
    with h5py.File(path, "r") as f:
        solid_angle = f["solid_angle"][()] if "solid_angle" in f else None
        result = TransportResult(
            flux_history=np.asarray(f["flux_history"][()]),
            times=np.asarray(f["times"][()]),
            grid=AltitudeGrid(f["altitude"][()]),
            streams=StreamSet(f["mu"][()], solid_angle=solid_angle),
            velocity=float(f.attrs["velocity"]),
            refinement_factor=int(f.attrs["refinement_factor"]),
            internal_dt=float(f.attrs["internal_dt"]),
            cfl=float(f.attrs["cfl"]),
        )
        energy_eV = float(f.attrs["energy_eV"]) if "energy_eV" in f.attrs else None

    return result, energy_eV
