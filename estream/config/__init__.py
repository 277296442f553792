"""Configuration Module - numerical settings for the transport solver.

Default Configuration (loaded from defaults.yaml):
    from estream.config import get_default

    cfl_max = get_default('solver.cfl_max')

Recommended Usage:
    from estream.config import SolverConfig, validate_config

    config = SolverConfig(cfl_max=32.0)
    validate_config(config)

Import Policy:
    DO NOT use: from estream.config import *
"""

from estream.config.enums import LinearSolverType, StreamDirection
from estream.config.yaml_loader import get_default, get_defaults, get_section, reload_defaults
from estream.config.solver_config import (
    SolverConfig,
    create_default_config,
    load_solver_config,
)
from estream.config.validation import (
    ConfigurationWarning,
    validate_config,
    warn_if_unsafe,
)

__all__ = [
    # Enums
    "LinearSolverType",
    "StreamDirection",
    # Config classes
    "SolverConfig",
    "create_default_config",
    "load_solver_config",
    # Validation
    "ConfigurationWarning",
    "validate_config",
    "warn_if_unsafe",
    # YAML defaults access
    "get_default",
    "get_defaults",
    "get_section",
    "reload_defaults",
]
