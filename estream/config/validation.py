"""
Checks on SolverConfig beyond what the dataclass enforces itself.

validate_config turns the messages from SolverConfig.validate into a
single ConfigurationError. warn_if_unsafe flags settings that are legal
but tend to end in smeared transients, StabilityError or large histories.

Import Policy:
    from estream.config.validation import validate_config, warn_if_unsafe

DO NOT use: from estream.config.validation import *
"""

import warnings
from typing import List, Tuple

from estream.config.defaults import DEFAULT_CFL_MAX
from estream.config.solver_config import SolverConfig
from estream.exceptions import ConfigurationError

# Fewer doublings than this cannot absorb a Courant number of ~1000
MIN_SAFE_REFINEMENTS = 4


class ConfigurationWarning(Warning):
    """Issued for legal but risky solver settings."""

    pass


def validate_config(config: SolverConfig, raise_on_error: bool = True) -> Tuple[bool, List[str]]:
    """Check a SolverConfig before any matrix is built.

    Args:
        config: Settings to check
        raise_on_error: Raise instead of returning the problems

    Returns:
        (True, []) when valid, otherwise (False, messages)

    Raises:
        ConfigurationError: On any problem when raise_on_error is set
    """
    problems = config.validate()
    if not problems:
        return True, []

    if raise_on_error:
        listing = "\n".join(f"  - {problem}" for problem in problems)
        raise ConfigurationError(
            f"Invalid solver configuration, {len(problems)} error(s):\n{listing}"
        )
    return False, problems


def warn_if_unsafe(config: SolverConfig) -> List[str]:
    """Emit a ConfigurationWarning for each risky setting.

    Returns:
        The warning messages, empty when nothing was flagged
    """
    messages = []

    if config.cfl_max > DEFAULT_CFL_MAX:
        messages.append(
            f"cfl_max ({config.cfl_max:g}) is above {DEFAULT_CFL_MAX:g}. "
            "Sharp boundary transients may be smeared or oscillate."
        )

    if config.max_refinements < MIN_SAFE_REFINEMENTS:
        messages.append(
            f"max_refinements ({config.max_refinements}) allows at most "
            f"{2 ** config.max_refinements} sub-steps. Fast electrons on fine "
            "grids will raise StabilityError."
        )

    if config.keep_internal_steps:
        messages.append(
            "keep_internal_steps is enabled. History size grows with the "
            "refinement factor."
        )

    for message in messages:
        warnings.warn(message, ConfigurationWarning, stacklevel=2)

    return messages
