"""Difference operators and Crank-Nicolson block assembly."""

from estream.operators.assembly import CrankNicolsonSystem, assemble_system
from estream.operators.blocks import boundary_rows, coupling_block, self_block
from estream.operators.differencing import (
    second_difference,
    time_derivative,
    upwind_derivative,
)
from estream.operators.triplets import Triplets

__all__ = [
    "Triplets",
    "upwind_derivative",
    "second_difference",
    "time_derivative",
    "self_block",
    "coupling_block",
    "boundary_rows",
    "CrankNicolsonSystem",
    "assemble_system",
]
