"""
Configuration Enums for estream

Import Policy:
    from estream.config.enums import LinearSolverType, StreamDirection

DO NOT use: from estream.config.enums import *
"""

from enum import Enum


class LinearSolverType(Enum):
    """How the implicit (left-hand) matrix is prepared for reuse.

    Options:
        SPLU: Sparse LU factorisation, reused for every sub-step (default)
        DENSE_INVERSE: Explicit dense inverse, only sensible for small systems

    Note:
        Either way the preparation happens once per energy. Refactoring
        per step gives the same answer at a much higher cost.
    """
    SPLU = "splu"
    DENSE_INVERSE = "dense_inverse"


class StreamDirection(Enum):
    """Propagation direction of a stream, fixed by the sign of its cosine.

    Options:
        DOWN: mu < 0, forward-biased difference, Dirichlet value at the top
        UP: mu > 0, backward-biased difference, zero gradient at the top
    """
    DOWN = "down"
    UP = "up"
