"""Solver Configuration

Numerical settings for the Crank-Nicolson transport solver. Physical
inputs (grid, streams, coefficients) are passed to the solver directly;
only the knobs that control how it integrates live here.

Import Policy:
    from estream.config.solver_config import SolverConfig, load_solver_config

DO NOT use: from estream.config.solver_config import *
"""

from __future__ import annotations

import math
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from estream.config.defaults import (
    DEFAULT_CFL_MAX,
    DEFAULT_CHECK_FINITE,
    DEFAULT_KEEP_INTERNAL_STEPS,
    DEFAULT_LINEAR_SOLVER,
    DEFAULT_MAX_REFINEMENTS,
)
from estream.config.enums import LinearSolverType
from estream.config.yaml_loader import get_section, load_yaml
from estream.exceptions import ConfigurationError


def _is_number(value) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


@dataclass
class SolverConfig:
    """Time stepping and linear algebra settings.

    Attributes:
        cfl_max: Largest accepted Courant number v*dt/dz_min per internal step
        max_refinements: Maximum number of step doublings (factor up to 2**max_refinements)
        linear_solver: Preparation of the implicit matrix
        check_finite: Raise LinearSolveError on NaN/inf states
        keep_internal_steps: Return every internal sub-step instead of
            only the states aligned with the caller's time axis
    """

    cfl_max: float = DEFAULT_CFL_MAX
    max_refinements: int = DEFAULT_MAX_REFINEMENTS
    linear_solver: LinearSolverType = LinearSolverType(DEFAULT_LINEAR_SOLVER)
    check_finite: bool = DEFAULT_CHECK_FINITE
    keep_internal_steps: bool = DEFAULT_KEEP_INTERNAL_STEPS

    def __post_init__(self):
        if isinstance(self.linear_solver, str):
            try:
                self.linear_solver = LinearSolverType(self.linear_solver)
            except ValueError as exc:
                raise ConfigurationError(
                    f"Unknown linear_solver {self.linear_solver!r}, expected one of "
                    f"{[member.value for member in LinearSolverType]}"
                ) from exc

    def validate(self) -> list[str]:
        """Validate solver configuration.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if not _is_number(self.cfl_max) or not math.isfinite(self.cfl_max):
            errors.append(f"cfl_max must be a finite number, got {self.cfl_max!r}")
        elif self.cfl_max <= 0:
            errors.append(f"cfl_max must be > 0, got {self.cfl_max}")

        if isinstance(self.max_refinements, bool) or not isinstance(
            self.max_refinements, numbers.Integral
        ):
            errors.append(f"max_refinements must be an integer, got {self.max_refinements!r}")
        elif self.max_refinements < 0:
            errors.append(f"max_refinements must be >= 0, got {self.max_refinements}")

        if not isinstance(self.linear_solver, LinearSolverType):
            errors.append(f"Unknown linear_solver {self.linear_solver!r}")

        return errors

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary (YAML friendly)."""
        return {
            "cfl_max": float(self.cfl_max),
            "max_refinements": int(self.max_refinements),
            "linear_solver": self.linear_solver.value,
            "check_finite": bool(self.check_finite),
            "keep_internal_steps": bool(self.keep_internal_steps),
        }

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "SolverConfig":
        """Create SolverConfig from a dictionary.

        Accepts either the bare solver mapping or a full document with a
        ``solver`` section. Unknown keys are rejected.
        """
        section = config.get("solver", config)
        known = set(cls.__dataclass_fields__)
        unknown = set(section) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown solver configuration keys: {sorted(unknown)}"
            )
        return cls(**section)


def load_solver_config(path: str | Path) -> SolverConfig:
    """Load a SolverConfig from a YAML file."""
    return SolverConfig.from_dict(load_yaml(path))


def create_default_config() -> SolverConfig:
    """Create a SolverConfig from the ``solver`` section of defaults.yaml.

    Keys missing from the section keep the values in defaults.py.
    """
    return SolverConfig.from_dict(get_section("solver"))
