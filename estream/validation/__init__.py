"""Validation diagnostics for transport results."""

from estream.validation.diagnostics import (
    BoundaryReport,
    check_boundaries,
    column_content,
    relative_l2,
    relative_linf,
    steady_state_residual,
    total_flux,
)

__all__ = [
    "BoundaryReport",
    "check_boundaries",
    "column_content",
    "relative_l2",
    "relative_linf",
    "steady_state_residual",
    "total_flux",
]
