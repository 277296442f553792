"""Time stepping, the Crank-Nicolson solver and the multi-energy driver."""

from estream.transport.energy_sweep import EnergyProblem, solve_energies, top_flux_spectrum
from estream.transport.solver import CrankNicolsonSolver, TransportResult, solve
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

__all__ = [
    "solve",
    "CrankNicolsonSolver",
    "TransportResult",
    "EnergyProblem",
    "solve_energies",
    "top_flux_spectrum",
    "select_refinement",
    "refine_time_axis",
    "check_time_axis",
    "courant_number",
    "interval_inhomogeneity",
    "normalize_boundary_flux",
    "normalize_source_term",
]
