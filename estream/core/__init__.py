"""Core data structures: altitude grid, pitch-angle streams and flux state."""

from estream.core.grid import AltitudeGrid, as_grid
from estream.core.state import FluxState, stacked_index
from estream.core.streams import StreamSet, as_streams

__all__ = [
    "AltitudeGrid",
    "as_grid",
    "StreamSet",
    "as_streams",
    "FluxState",
    "stacked_index",
]
