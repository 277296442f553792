"""Exception hierarchy for the transport solver.

All failures surface to the caller of the solve entry point. Nothing is
retried and no partial flux history is returned.
"""


class TransportError(Exception):
    """Base class for every error raised by estream."""

    pass


class ConfigurationError(TransportError, ValueError):
    """Raised when inputs or solver configuration are malformed.

    Detected before any matrix assembly: non-monotonic grids, zero
    directional cosines, shape mismatches between coefficients, streams
    and boundary data.
    """

    pass


class StabilityError(TransportError):
    """Raised when the Courant bound cannot be met within the refinement budget."""

    def __init__(self, cfl: float, cfl_max: float, max_refinements: int):
        self.cfl = cfl
        self.cfl_max = cfl_max
        self.max_refinements = max_refinements
        super().__init__(
            f"Courant number {cfl:.4g} still exceeds {cfl_max:.4g} after "
            f"{max_refinements} step doublings"
        )

    def __reduce__(self):
        # Keeps the error picklable across worker processes
        return (type(self), (self.cfl, self.cfl_max, self.max_refinements))


class LinearSolveError(TransportError):
    """Raised when the implicit system is singular or produces non-finite fluxes."""

    pass
