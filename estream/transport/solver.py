"""Multi-stream Crank-Nicolson electron transport solver.

Integrates the time-dependent transport equation for electrons at one
energy in an arbitrary number of pitch-angle streams,

    1/v dI_i/dt = -mu_i dI_i/dz - A I_i + sum_j B_ij I_j + D_i d2I_i/dz2 + Q_i,

with upwind spatial differences and Crank-Nicolson time stepping. The
implicit matrix is factorised once per energy and reused for every
internal sub-step.

Usage:
    from estream.transport.solver import solve

    result = solve(h, [-1.0, 1.0], v, A, B, 0.0, I0, I_top, None, t)
    result.flux_history  # [(n_mu * n_z), n_t]
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Callable, Optional

import numpy as np
from scipy import sparse
from scipy.sparse import linalg as spla

from estream.config.enums import LinearSolverType
from estream.config.solver_config import SolverConfig
from estream.config.validation import validate_config
from estream.core.grid import AltitudeGrid, as_grid
from estream.core.state import FluxState
from estream.core.streams import StreamSet, as_streams
from estream.exceptions import ConfigurationError, LinearSolveError
from estream.operators.assembly import CrankNicolsonSystem, assemble_system
from estream.transport.sources import (
    interval_inhomogeneity,
    normalize_boundary_flux,
    normalize_source_term,
)
from estream.transport.stepping import (
    check_time_axis,
    courant_number,
    refine_time_axis,
    select_refinement,
)

logger = logging.getLogger(__name__)

# Value of the deprecated lower-boundary switch that callers used to pass
DEFAULT_LOWER_BOUNDARY_MODE = 1


@dataclass
class TransportResult:
    """Flux history of one solve.

    Attributes:
        flux_history: Flux [(n_mu * n_z), n_t], rows stream-major and
            altitude-minor, one column per output time, in #/m^2/s per
            stream (not divided by solid angle or energy-bin width)
        times: Output times [n_t] [s]
        grid: Altitude grid
        streams: Stream set
        velocity: Electron speed [m/s]
        refinement_factor: Internal sub-steps per caller step
        internal_dt: Internal time step [s]
        cfl: Courant number of the internal step
    """

    flux_history: np.ndarray
    times: np.ndarray
    grid: AltitudeGrid
    streams: StreamSet
    velocity: float
    refinement_factor: int
    internal_dt: float
    cfl: float

    @property
    def n_t(self) -> int:
        return self.times.size

    def as_cube(self) -> np.ndarray:
        """Flux as [n_t, n_mu, n_z]."""
        return self.flux_history.T.reshape(self.n_t, self.streams.n_mu, self.grid.n_z)

    def stream_history(self, i_mu: int) -> np.ndarray:
        """Flux of one stream [n_z, n_t]."""
        n_z = self.grid.n_z
        return self.flux_history[i_mu * n_z:(i_mu + 1) * n_z, :]

    def top_flux(self) -> np.ndarray:
        """Flux at the highest altitude for every stream [n_mu, n_t]."""
        n_z = self.grid.n_z
        return self.flux_history[n_z - 1::n_z, :]

    def state_at(self, k: int) -> FluxState:
        """State at output sample k."""
        return FluxState.from_vector(self.flux_history[:, k], self.streams.n_mu, self.grid.n_z)


def _normalize_loss(loss_coeff, n_z: int) -> np.ndarray:
    loss = np.asarray(loss_coeff, dtype=float)
    if loss.ndim == 0:
        loss = np.full(n_z, float(loss))
    loss = loss.ravel()
    if loss.size != n_z:
        raise ConfigurationError(f"Loss coefficient has {loss.size} values for {n_z} altitudes")
    if not np.all(np.isfinite(loss)):
        raise ConfigurationError("Loss coefficient contains non-finite values")
    if np.any(loss < 0):
        raise ConfigurationError("Loss coefficient must be nonnegative")
    return loss


def _normalize_scatter(scatter_coeff, n_z: int, n_mu: int) -> np.ndarray:
    if scatter_coeff is None:
        return np.zeros((n_z, n_mu, n_mu))
    scatter = np.asarray(scatter_coeff, dtype=float)
    if scatter.shape != (n_z, n_mu, n_mu):
        raise ConfigurationError(
            f"Scattering coefficient shape {scatter.shape} does not match "
            f"(n_z, n_mu, n_mu) = ({n_z}, {n_mu}, {n_mu})"
        )
    if not np.all(np.isfinite(scatter)):
        raise ConfigurationError("Scattering coefficient contains non-finite values")
    return scatter


def _normalize_diffusion(diffusion_coeff, n_mu: int) -> np.ndarray:
    """Per-stream diffusion; a short sequence reuses its last value."""
    if diffusion_coeff is None:
        return np.zeros(n_mu)
    diffusion = np.atleast_1d(np.asarray(diffusion_coeff, dtype=float)).ravel()
    if diffusion.size == 0:
        return np.zeros(n_mu)
    if diffusion.size > n_mu:
        raise ConfigurationError(
            f"Diffusion coefficient has {diffusion.size} values for {n_mu} streams"
        )
    if not np.all(np.isfinite(diffusion)):
        raise ConfigurationError("Diffusion coefficient contains non-finite values")
    return diffusion[np.minimum(np.arange(n_mu), diffusion.size - 1)]


class CrankNicolsonSolver:
    """Transport solver for one energy.

    Holds the energy-dependent inputs, builds the Crank-Nicolson system
    for the internal time step chosen from the Courant bound, factorises
    the implicit matrix once and steps the state through the time axis.

    Example:
        >>> solver = CrankNicolsonSolver(h, streams, v, A, B)
        >>> result = solver.run(I0, I_top, t)
    """

    def __init__(
        self,
        grid,
        streams,
        velocity: float,
        loss_coeff,
        scatter_coeff=None,
        diffusion_coeff=0.0,
        config: Optional[SolverConfig] = None,
    ):
        """Validate inputs. No matrices are built until a time step is known.

        Raises:
            ConfigurationError: On malformed grid, streams or coefficients
        """
        if config is None:
            config = SolverConfig()
        validate_config(config, raise_on_error=True)
        self.config = config

        self.grid = as_grid(grid)
        self.streams = as_streams(streams)

        velocity = float(velocity)
        if not np.isfinite(velocity) or velocity <= 0:
            raise ConfigurationError(f"Velocity must be positive, got {velocity}")
        self.velocity = velocity

        n_z, n_mu = self.grid.n_z, self.streams.n_mu
        self.loss = _normalize_loss(loss_coeff, n_z)
        self.scatter = _normalize_scatter(scatter_coeff, n_z, n_mu)
        self.diffusion = _normalize_diffusion(diffusion_coeff, n_mu)

        self.system: Optional[CrankNicolsonSystem] = None
        self._apply_inverse: Optional[Callable[[np.ndarray], np.ndarray]] = None

    @property
    def n_state(self) -> int:
        return self.grid.n_z * self.streams.n_mu

    def prepare(self, dt: float) -> CrankNicolsonSystem:
        """Assemble the system for internal step ``dt`` and factorise Mlhs.

        Reuses the existing factorisation when ``dt`` is unchanged.

        Raises:
            LinearSolveError: If the implicit matrix is singular
        """
        if self.system is not None and self.system.dt == dt:
            return self.system

        system = assemble_system(
            self.grid,
            self.streams,
            self.velocity,
            dt,
            self.loss,
            self.scatter,
            self.diffusion,
        )
        self._apply_inverse = self._factorize(system.lhs)
        self.system = system
        return system

    def _factorize(self, lhs: sparse.csc_matrix) -> Callable[[np.ndarray], np.ndarray]:
        if self.config.linear_solver is LinearSolverType.DENSE_INVERSE:
            try:
                inverse = np.linalg.inv(lhs.toarray())
            except np.linalg.LinAlgError as exc:
                raise LinearSolveError(f"Implicit matrix is singular: {exc}") from exc
            return inverse.dot

        try:
            lu = spla.splu(lhs)
        except RuntimeError as exc:
            raise LinearSolveError(f"Implicit matrix is singular: {exc}") from exc
        return lu.solve

    def run(
        self,
        initial_state,
        boundary_flux,
        time_axis,
        source_term=None,
    ) -> TransportResult:
        """Integrate from the first to the last sample of ``time_axis``.

        Args:
            initial_state: Flux at time_axis[0]; FluxState, stacked vector,
                [n_mu, n_z] array or per-stream sequence
            boundary_flux: Top-of-column flux per stream [n_mu, n_t] or a
                sequence of n_mu series; ignored for upward streams
            time_axis: Uniform output times [n_t] [s]
            source_term: Production [(n_mu * n_z), n_t] or None

        Returns:
            TransportResult with one column per output time

        Raises:
            ConfigurationError: On malformed inputs
            StabilityError: If the Courant bound cannot be met
            LinearSolveError: On singular or non-finite solves
        """
        n_z, n_mu = self.grid.n_z, self.streams.n_mu

        t = check_time_axis(time_axis)
        state = FluxState.from_any(initial_state, n_mu, n_z)
        boundary = normalize_boundary_flux(boundary_flux, self.streams, t.size)
        source = normalize_source_term(source_term, n_mu, n_z, t.size)

        dt_caller = t[1] - t[0]
        factor = select_refinement(
            self.velocity,
            self.grid.dz_min,
            dt_caller,
            cfl_max=self.config.cfl_max,
            max_refinements=self.config.max_refinements,
        )
        t_internal = refine_time_axis(t, factor)
        dt = t_internal[1] - t_internal[0]
        cfl = courant_number(self.velocity, dt, self.grid.dz_min)

        logger.info(
            f"v={self.velocity:.4e} m/s: refinement x{factor}, "
            f"dt={dt:.4e} s, CFL={cfl:.3g}, {n_mu} streams x {n_z} altitudes"
        )

        system = self.prepare(dt)
        q = interval_inhomogeneity(source, boundary, self.grid, self.streams)

        keep_all = self.config.keep_internal_steps
        n_steps = (t.size - 1) * factor
        n_out = n_steps + 1 if keep_all else t.size
        history = np.empty((self.n_state, n_out))
        history[:, 0] = state.as_vector()

        x = history[:, 0].copy()
        i_out = 1
        for step in range(n_steps):
            k = step // factor
            b = system.rhs @ x + q[k]
            x = self._apply_inverse(b)

            if self.config.check_finite and not np.all(np.isfinite(x)):
                raise LinearSolveError(
                    f"Non-finite flux after internal step {step + 1} of {n_steps}"
                )

            if keep_all or (step + 1) % factor == 0:
                history[:, i_out] = x
                i_out += 1

        return TransportResult(
            flux_history=history,
            times=t_internal if keep_all else t,
            grid=self.grid,
            streams=self.streams,
            velocity=self.velocity,
            refinement_factor=factor,
            internal_dt=dt,
            cfl=cfl,
        )


def solve(
    grid,
    streams,
    velocity: float,
    loss_coeff,
    scatter_coeff,
    diffusion_coeff,
    initial_state,
    boundary_flux,
    source_term,
    time_axis,
    lower_boundary_mode=DEFAULT_LOWER_BOUNDARY_MODE,
    config: Optional[SolverConfig] = None,
) -> TransportResult:
    """Solve the multi-stream transport problem for one energy.

    Args:
        grid: Altitude grid or strictly increasing altitudes [n_z] [m]
        streams: StreamSet or directional cosines [n_mu]
        velocity: Electron speed [m/s]
        loss_coeff: Total removal rate (cross section * density) [n_z] [1/m]
        scatter_coeff: Elastic scattering from stream j into stream i
            [n_z, n_mu, n_mu] [1/m], or None
        diffusion_coeff: Velocity-diffusion coefficient, scalar or per
            stream; None or 0 disables it
        initial_state: Flux at time_axis[0], stacked [n_mu * n_z]
        boundary_flux: Top-of-column flux per stream [n_mu, n_t]
        source_term: Production [(n_mu * n_z), n_t], or None
        time_axis: Uniform output times [n_t] [s]
        lower_boundary_mode: Deprecated, has no effect
        config: Solver settings, defaults to SolverConfig()

    Returns:
        TransportResult; ``flux_history`` is [(n_mu * n_z), n_t]
    """
    if lower_boundary_mode is not None and lower_boundary_mode != DEFAULT_LOWER_BOUNDARY_MODE:
        warnings.warn(
            "lower_boundary_mode is deprecated and ignored; the lowest "
            "altitude always holds a fixed value",
            DeprecationWarning,
            stacklevel=2,
        )

    solver = CrankNicolsonSolver(
        grid,
        streams,
        velocity,
        loss_coeff,
        scatter_coeff,
        diffusion_coeff,
        config=config,
    )
    return solver.run(initial_state, boundary_flux, time_axis, source_term)
