"""
Default Configuration Constants for estream

These constants are the field defaults of SolverConfig, so solve() and
CrankNicolsonSolver use them when no config is passed. The solver
section of defaults.yaml mirrors them; create_default_config() and the
CLI read that file instead, so ESTREAM_DEFAULTS_PATH can override it.

Import Policy:
    from estream.config.defaults import DEFAULT_CFL_MAX, DEFAULT_MAX_REFINEMENTS

DO NOT use: from estream.config.defaults import *
"""

# =============================================================================
# Time Stepping Defaults
# =============================================================================

# Largest Courant number v*dt/dz_min accepted for an internal step.
# The implicit scheme tolerates far more than the explicit limit of 1;
# for smooth boundary inputs 64 leaves the results unchanged.
DEFAULT_CFL_MAX = 64.0

# Maximum number of step doublings when refining the caller's time axis.
# A refinement factor of 2**22 is the most the solver will try.
DEFAULT_MAX_REFINEMENTS = 22

# =============================================================================
# Linear Solver Defaults
# =============================================================================

# Factorisation of the implicit matrix: "splu" or "dense_inverse"
DEFAULT_LINEAR_SOLVER = "splu"

# Raise if a step produces NaN/inf
DEFAULT_CHECK_FINITE = True

# Keep every internal sub-step instead of only the caller's samples
DEFAULT_KEEP_INTERNAL_STEPS = False

# =============================================================================
# Grid Limits
# =============================================================================

# Two altitude rows are consumed by boundary conditions
MIN_ALTITUDE_POINTS = 3

# =============================================================================
# Driver Defaults
# =============================================================================

# Worker processes for independent per-energy solves (1 = serial)
DEFAULT_N_WORKERS = 1
