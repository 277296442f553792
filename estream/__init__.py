"""Time-dependent multi-stream electron transport

A Crank-Nicolson solver for energetic electrons moving along a
field-aligned column of atmosphere, discretised into pitch-angle
streams and solved one energy at a time.

Key Principles:
- Upwind differences selected by the sign of each stream's cosine
- Crank-Nicolson time stepping with one factorisation per energy
- Power-of-two sub-stepping to keep v*dt/dz within a Courant bound
- Stream-major stacking of (stream, altitude) in every array
"""

__version__ = "1.0"

from estream.config import SolverConfig
from estream.core import AltitudeGrid, FluxState, StreamSet
from estream.core.constants import electron_speed
from estream.exceptions import (
    ConfigurationError,
    LinearSolveError,
    StabilityError,
    TransportError,
)
from estream.transport import (
    CrankNicolsonSolver,
    EnergyProblem,
    TransportResult,
    select_refinement,
    solve,
    solve_energies,
    top_flux_spectrum,
)

__all__ = [
    "__version__",
    # Core
    "AltitudeGrid",
    "StreamSet",
    "FluxState",
    "electron_speed",
    "SolverConfig",
    # Solver
    "solve",
    "CrankNicolsonSolver",
    "TransportResult",
    "select_refinement",
    "EnergyProblem",
    "solve_energies",
    "top_flux_spectrum",
    # Errors
    "TransportError",
    "ConfigurationError",
    "StabilityError",
    "LinearSolveError",
]
