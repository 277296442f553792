"""Driver for independent per-energy solves.

Energies share the grid, the streams and the time axis but nothing
mutable, so they can be solved serially or spread over a process pool.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from multiprocessing import Pool
from typing import List, Optional, Sequence

import numpy as np

from estream.config.defaults import DEFAULT_N_WORKERS
from estream.config.solver_config import SolverConfig
from estream.core.constants import electron_speed
from estream.exceptions import TransportError
from estream.transport.solver import TransportResult, solve

logger = logging.getLogger(__name__)


@dataclass
class EnergyProblem:
    """Energy-dependent inputs for one solve.

    Attributes:
        energy_eV: Electron energy [eV]
        loss_coeff: Total removal rate [n_z] [1/m]
        scatter_coeff: Elastic stream-to-stream scattering [n_z, n_mu, n_mu]
        initial_state: Stacked initial flux [n_mu * n_z]
        boundary_flux: Top flux per stream [n_mu, n_t]
        source_term: Production [(n_mu * n_z), n_t] or None
        diffusion_coeff: Velocity-diffusion coefficient
        velocity: Electron speed [m/s]; derived from energy_eV when None
    """

    energy_eV: float
    loss_coeff: np.ndarray
    scatter_coeff: Optional[np.ndarray]
    initial_state: np.ndarray
    boundary_flux: np.ndarray
    source_term: Optional[np.ndarray] = None
    diffusion_coeff: float = 0.0
    velocity: Optional[float] = None

    def speed(self) -> float:
        if self.velocity is not None:
            return float(self.velocity)
        return electron_speed(self.energy_eV)


def _solve_one(args):
    """Pool worker: solve one energy, returning (index, result, error)."""
    index, grid, streams, time_axis, problem, config, skip_failed = args
    try:
        result = solve(
            grid,
            streams,
            problem.speed(),
            problem.loss_coeff,
            problem.scatter_coeff,
            problem.diffusion_coeff,
            problem.initial_state,
            problem.boundary_flux,
            problem.source_term,
            time_axis,
            config=config,
        )
    except TransportError as exc:
        if not skip_failed:
            raise
        return index, None, f"{type(exc).__name__}: {exc}"
    return index, result, None


def solve_energies(
    grid,
    streams,
    time_axis,
    problems: Sequence[EnergyProblem],
    config: Optional[SolverConfig] = None,
    n_workers: int = DEFAULT_N_WORKERS,
    skip_failed: bool = False,
) -> List[Optional[TransportResult]]:
    """Solve every energy in ``problems``.

    Args:
        grid: Altitude grid shared by all energies
        streams: Stream set shared by all energies
        time_axis: Output times shared by all energies [n_t] [s]
        problems: Per-energy inputs
        config: Solver settings
        n_workers: Worker processes; 1 runs serially in this process
        skip_failed: Log and return None for energies that fail instead
            of raising

    Returns:
        Results in the order of ``problems`` (None where skipped)
    """
    tasks = [
        (i, grid, streams, time_axis, problem, config, skip_failed)
        for i, problem in enumerate(problems)
    ]
    logger.info(f"Solving {len(tasks)} energies with {n_workers} worker(s)")

    if n_workers == 1 or len(tasks) <= 1:
        outcomes = [_solve_one(task) for task in tasks]
    else:
        with Pool(processes=n_workers) as pool:
            outcomes = pool.map(_solve_one, tasks)

    results: List[Optional[TransportResult]] = [None] * len(tasks)
    for index, result, error in outcomes:
        if error is not None:
            logger.warning(f"E={problems[index].energy_eV:.1f} eV skipped: {error}")
        results[index] = result
    return results


def top_flux_spectrum(results: Sequence[Optional[TransportResult]]) -> np.ndarray:
    """Stack the top-of-column flux of every energy.

    Returns:
        Array [n_mu, n_t, n_E]; energies without a result are NaN.
    """
    reference = next((r for r in results if r is not None), None)
    if reference is None:
        raise ValueError("No successful results to extract from")

    n_mu, n_t = reference.top_flux().shape
    spectrum = np.full((n_mu, n_t, len(results)), np.nan)
    for i_e, result in enumerate(results):
        if result is not None:
            spectrum[:, :, i_e] = result.top_flux()
    return spectrum
